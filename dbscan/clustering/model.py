"""
DBSCAN聚类结果
"""

from dataclasses import dataclass
from typing import Any, Dict, Tuple

import numpy as np


@dataclass(frozen=True)
class ClusterModel:
    """
    DBSCAN聚类结果

    clusters按发现顺序排列，每个簇内的点按加入顺序排列；
    每个输入点恰好出现在某个簇或noise中。
    """

    clusters: Tuple[Tuple[Any, ...], ...]
    noise: Tuple[Any, ...]

    @property
    def n_clusters(self) -> int:
        return len(self.clusters)

    @property
    def n_noise(self) -> int:
        return len(self.noise)

    @property
    def n_points(self) -> int:
        return sum(len(cluster) for cluster in self.clusters) + len(self.noise)

    def get_cluster_stats(self) -> Dict[str, Any]:
        """
        获取聚类统计信息

        Returns:
            包含聚类统计信息的字典
        """
        return {
            'n_clusters': self.n_clusters,
            'n_noise': self.n_noise,
            'n_points': self.n_points,
            'cluster_sizes': {i: len(cluster) for i, cluster in enumerate(self.clusters)}
        }

    def to_labels(self, n_samples: int) -> np.ndarray:
        """
        将索引模式的结果转换为标签数组

        Args:
            n_samples: 点的总数

        Returns:
            形状为(n_samples,)的数组，簇编号从0开始，噪声点为-1
        """
        labels = np.full(n_samples, -1, dtype=np.int32)
        for cluster_id, cluster in enumerate(self.clusters):
            labels[np.asarray(cluster, dtype=np.intp)] = cluster_id
        return labels
