"""
性能分析模块
DBSCAN训练耗时和邻域查询次数统计
"""

from .time_profiler import TimeProfiler, TimeMeasurement, CountingOracle

__all__ = [
    'TimeProfiler',
    'TimeMeasurement',
    'CountingOracle'
]
