"""
时间性能分析器
统计DBSCAN训练耗时以及邻域查询次数
"""

import time
from collections import Counter, defaultdict
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Collection, Dict, Hashable, List, Optional
import warnings


@dataclass
class TimeMeasurement:
    """时间测量结果"""
    name: str
    start_time: float
    end_time: Optional[float] = None
    duration: Optional[float] = None
    children: List['TimeMeasurement'] = field(default_factory=list)

    def stop(self) -> float:
        """停止计时并返回持续时间"""
        self.end_time = time.time()
        self.duration = self.end_time - self.start_time
        return self.duration


class TimeProfiler:
    """时间性能分析器"""

    def __init__(self):
        self.measurements: List[TimeMeasurement] = []
        self.current_stack: List[TimeMeasurement] = []
        self.function_timings: Dict[str, List[float]] = defaultdict(list)

        self.total_execution_time = 0.0
        self.n_calls = 0

    def start(self, name: str) -> TimeMeasurement:
        """
        开始计时

        Args:
            name: 测量名称

        Returns:
            时间测量对象
        """
        measurement = TimeMeasurement(name=name, start_time=time.time())

        # 嵌套测量挂在当前测量下面
        if self.current_stack:
            self.current_stack[-1].children.append(measurement)
        else:
            self.measurements.append(measurement)

        self.current_stack.append(measurement)
        return measurement

    def stop(self, name: str = None) -> Optional[float]:
        """
        停止计时

        Args:
            name: 要停止的测量名称（如果为None则停止当前）

        Returns:
            持续时间（秒）
        """
        if not self.current_stack:
            return None

        if name is None:
            measurement = self.current_stack.pop()
        else:
            for i, meas in enumerate(reversed(self.current_stack)):
                if meas.name == name:
                    measurement = self.current_stack.pop(-i - 1)

                    # 弹出中间的所有测量
                    for _ in range(i):
                        self.current_stack.pop().stop()
                    break
            else:
                warnings.warn(f"未找到测量 '{name}'")
                return None

        duration = measurement.stop()

        self.function_timings[measurement.name].append(duration)
        if any(m is measurement for m in self.measurements):
            self.total_execution_time += duration
        self.n_calls += 1

        return duration

    @contextmanager
    def measure(self, name: str):
        """上下文管理器形式的计时"""
        measurement = self.start(name)
        try:
            yield measurement
        finally:
            self.stop(name)

    def get_summary(self) -> Dict[str, Any]:
        """
        获取计时汇总

        Returns:
            每个测量名称的调用次数、总耗时和平均耗时
        """
        timings = {}
        for name, durations in self.function_timings.items():
            total = sum(durations)
            timings[name] = {
                'n_calls': len(durations),
                'total_time': total,
                'mean_time': total / len(durations),
                'max_time': max(durations)
            }

        return {
            'total_execution_time': self.total_execution_time,
            'n_calls': self.n_calls,
            'timings': timings
        }

    def reset(self) -> None:
        """重置分析器"""
        self.measurements.clear()
        self.current_stack.clear()
        self.function_timings.clear()
        self.total_execution_time = 0.0
        self.n_calls = 0


class CountingOracle:
    """统计邻域查询函数调用次数的包装器"""

    def __init__(self, get_directly_reachable_points: Callable[[Any], Collection[Any]],
                 key: Optional[Callable[[Any], Hashable]] = None):
        """
        Args:
            get_directly_reachable_points: 被包装的邻域查询函数
            key: 统计时使用的点的相等性策略
        """
        self._oracle = get_directly_reachable_points
        self._key = key
        self.calls: Counter = Counter()

    def __call__(self, point: Any) -> Collection[Any]:
        self.calls[point if self._key is None else self._key(point)] += 1
        return self._oracle(point)

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    def max_calls_per_point(self) -> int:
        return max(self.calls.values(), default=0)

    def reset(self) -> None:
        self.calls.clear()
