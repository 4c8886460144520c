"""
聚类算法模块
DBSCAN训练器、标签存储以及邻域查询工具
"""

from .options import DbscanOptions, InvalidArgumentError
from .labels import Label, KeyedLabelStore, IndexedLabelStore
from .model import ClusterModel
from .trainer import DbscanTrainer
from .utils import (
    create_full_scan_neighbors_searcher,
    create_full_scan_cached_neighbors_searcher,
    create_distance_cached_neighbors_searcher,
    create_distance_matrix_searcher,
    create_spatial_index_searcher,
    build_spatial_index,
    compute_distance_matrix,
    bind_epsilon,
    ensure_self_inclusion
)

__all__ = [
    'DbscanOptions',
    'InvalidArgumentError',
    'Label',
    'KeyedLabelStore',
    'IndexedLabelStore',
    'ClusterModel',
    'DbscanTrainer',
    'create_full_scan_neighbors_searcher',
    'create_full_scan_cached_neighbors_searcher',
    'create_distance_cached_neighbors_searcher',
    'create_distance_matrix_searcher',
    'create_spatial_index_searcher',
    'build_spatial_index',
    'compute_distance_matrix',
    'bind_epsilon',
    'ensure_self_inclusion'
]
