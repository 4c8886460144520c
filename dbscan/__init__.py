"""
DBSCAN密度聚类
邻域查询由调用方提供，支持任意可哈希的点和按索引访问的点集
"""

from .clustering import (
    DbscanOptions,
    DbscanTrainer,
    ClusterModel,
    Label,
    InvalidArgumentError,
    create_full_scan_neighbors_searcher,
    create_full_scan_cached_neighbors_searcher,
    create_distance_cached_neighbors_searcher,
    create_distance_matrix_searcher,
    create_spatial_index_searcher,
    bind_epsilon,
    ensure_self_inclusion
)

__version__ = '0.1.0'

__all__ = [
    'DbscanOptions',
    'DbscanTrainer',
    'ClusterModel',
    'Label',
    'InvalidArgumentError',
    'create_full_scan_neighbors_searcher',
    'create_full_scan_cached_neighbors_searcher',
    'create_distance_cached_neighbors_searcher',
    'create_distance_matrix_searcher',
    'create_spatial_index_searcher',
    'bind_epsilon',
    'ensure_self_inclusion'
]
