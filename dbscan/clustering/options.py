"""
DBSCAN参数配置
核心点密度阈值及参数校验
"""

from dataclasses import dataclass


class InvalidArgumentError(ValueError):
    """必需参数缺失或取值非法"""


@dataclass(frozen=True)
class DbscanOptions:
    """DBSCAN训练参数"""

    # 核心点所需的最少邻居数（包含点本身）
    minimum_points_per_cluster: int

    def __post_init__(self):
        value = self.minimum_points_per_cluster
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidArgumentError(
                f"minimum_points_per_cluster 必须是整数: {value!r}"
            )
        if value < 1:
            raise InvalidArgumentError(
                f"minimum_points_per_cluster 必须 >= 1: {value}"
            )
