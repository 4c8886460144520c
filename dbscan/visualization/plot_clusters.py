"""
聚类结果可视化
索引模式聚类结果的二维散点图
"""

from typing import Optional, Tuple

import numpy as np
import matplotlib.pyplot as plt
from scipy.spatial import ConvexHull, QhullError

from ..clustering.model import ClusterModel


class ClusterVisualizer:
    """聚类可视化器"""

    def __init__(self, figsize: Tuple[int, int] = (12, 10),
                 colormap: str = 'tab20'):
        """
        初始化可视化器

        Args:
            figsize: 图形大小
            colormap: 颜色映射
        """
        self.figsize = figsize
        self.colormap = colormap
        self.cmap = plt.get_cmap(colormap)

    def plot_clusters_2d(self, points: np.ndarray, model: ClusterModel,
                         title: str = "DBSCAN聚类结果",
                         save_path: Optional[str] = None,
                         show_noise: bool = True,
                         alpha: float = 0.6,
                         s: float = 10.0) -> plt.Figure:
        """
        绘制2D聚类结果

        Args:
            points: 点数据，形状为(n, 2)
            model: fit_indexed返回的聚类结果
            title: 图表标题
            save_path: 保存路径
            show_noise: 是否显示噪声点
            alpha: 透明度
            s: 点的大小

        Returns:
            matplotlib图形对象
        """
        points = np.asarray(points, dtype=np.float64)
        fig, ax = plt.subplots(figsize=self.figsize)

        colors = self.cmap(np.linspace(0, 1, max(model.n_clusters, 1)))

        for cluster_id, cluster in enumerate(model.clusters):
            cluster_points = points[np.asarray(cluster, dtype=np.intp)]
            color = colors[cluster_id]

            ax.scatter(cluster_points[:, 0], cluster_points[:, 1],
                       c=[color], label=f'聚类 {cluster_id}',
                       marker='o', s=s, alpha=alpha, edgecolors='w', linewidths=0.5)

            # 较大的簇绘制凸包
            if len(cluster_points) > 3:
                try:
                    hull = ConvexHull(cluster_points)
                except QhullError:
                    # 共线的点没有凸包
                    continue
                hull_points = cluster_points[hull.vertices]
                hull_points = np.vstack([hull_points, hull_points[0]])
                ax.plot(hull_points[:, 0], hull_points[:, 1],
                        color=color, alpha=0.3, linewidth=1, linestyle='--')

        if show_noise and model.n_noise:
            noise_points = points[np.asarray(model.noise, dtype=np.intp)]
            ax.scatter(noise_points[:, 0], noise_points[:, 1],
                       c='gray', label='噪声点', marker='x',
                       s=s * 0.5, alpha=alpha * 0.5)

        ax.set_title(title, fontsize=14, fontweight='bold')
        ax.set_xlabel('X坐标')
        ax.set_ylabel('Y坐标')
        ax.grid(True, alpha=0.3)

        # 只显示前15个图例项
        handles, labels_legend = ax.get_legend_handles_labels()
        if handles:
            ax.legend(handles[:15], labels_legend[:15], loc='upper right', fontsize=8)

        stats_text = f'聚类数: {model.n_clusters}\n噪声点: {model.n_noise}\n总点数: {len(points)}'
        ax.text(0.02, 0.98, stats_text, transform=ax.transAxes,
                fontsize=10, verticalalignment='top',
                bbox=dict(boxstyle='round', facecolor='wheat', alpha=0.8))

        plt.tight_layout()

        if save_path:
            fig.savefig(save_path, dpi=150, bbox_inches='tight')

        return fig


def plot_cluster_model(points: np.ndarray, model: ClusterModel,
                       save_path: Optional[str] = None, **kwargs) -> plt.Figure:
    """
    快速绘制聚类结果

    Args:
        points: 点数据，形状为(n, 2)
        model: fit_indexed返回的聚类结果
        save_path: 保存路径
        **kwargs: 传递给plot_clusters_2d的其他参数

    Returns:
        matplotlib图形对象
    """
    visualizer = ClusterVisualizer()
    return visualizer.plot_clusters_2d(points, model, save_path=save_path, **kwargs)
