"""
DBSCAN训练器
经典的密度聚类算法，邻域查询由调用方提供
"""

import time
from collections import deque
from contextlib import nullcontext
from typing import Any, Callable, Collection, Hashable, Iterable, List, Optional, Sequence, Union

from .labels import IndexedLabelStore, KeyedLabelStore, Label
from .model import ClusterModel
from .options import DbscanOptions, InvalidArgumentError
from ..profiling.time_profiler import TimeProfiler

LabelStore = Union[KeyedLabelStore, IndexedLabelStore]


class DbscanTrainer:
    """DBSCAN聚类算法"""

    def __init__(self, options: DbscanOptions,
                 key: Optional[Callable[[Any], Hashable]] = None,
                 verbose: bool = False,
                 profiler: Optional[TimeProfiler] = None):
        """
        初始化DBSCAN参数

        Args:
            options: 训练参数，包含核心点的最少邻居数
            key: 点的相等性策略，将点映射为可哈希键（仅用于fit），None表示使用点本身
            verbose: 是否打印聚类进度
            profiler: 时间分析器，记录fit、顶层扫描和每次簇扩展的耗时
        """
        if options is None:
            raise InvalidArgumentError("options 不能为空")
        if not isinstance(options, DbscanOptions):
            raise InvalidArgumentError(f"options 必须是 DbscanOptions: {type(options).__name__}")

        self.options = options
        self.minimum_points_per_cluster = options.minimum_points_per_cluster
        self.key = key
        self.verbose = verbose
        self.profiler = profiler
        self.execution_time = 0.0

    def fit(self, points: Iterable[Any],
            get_directly_reachable_points: Callable[[Any], Collection[Any]]) -> ClusterModel:
        """
        对任意可哈希的点执行DBSCAN聚类

        Args:
            points: 待聚类的点
            get_directly_reachable_points: 返回eps半径内邻居（包含点本身）的函数

        Returns:
            聚类结果，noise的顺序不保证
        """
        self._validate(points, get_directly_reachable_points)
        start_time = time.time()

        with self._measure('fit'):
            store = KeyedLabelStore(self.key)
            with self._measure('scan'):
                clusters = self._scan(points, store, get_directly_reachable_points)
            model = ClusterModel(clusters=tuple(clusters), noise=tuple(store.noise()))

        self._finish(model, start_time)
        return model

    def fit_indexed(self, points: Sequence[Any],
                    get_directly_reachable_points: Callable[[int], Collection[int]]) -> ClusterModel:
        """
        对按索引访问的点集执行DBSCAN聚类

        Args:
            points: 可按位置索引的点集，例如形状为(n_samples, d)的numpy数组
            get_directly_reachable_points: 根据点索引返回邻居索引（包含自身）的函数

        Returns:
            以点索引表示的聚类结果，noise按索引升序排列
        """
        self._validate(points, get_directly_reachable_points)
        start_time = time.time()

        with self._measure('fit'):
            n_samples = len(points)
            store = IndexedLabelStore(n_samples)
            with self._measure('scan'):
                clusters = self._scan(range(n_samples), store, get_directly_reachable_points)
            model = ClusterModel(clusters=tuple(clusters), noise=tuple(store.noise()))

        self._finish(model, start_time)
        return model

    def _measure(self, name: str):
        if self.profiler is None:
            return nullcontext()
        return self.profiler.measure(name)

    def _validate(self, points, get_directly_reachable_points) -> None:
        if points is None:
            raise InvalidArgumentError("points 不能为空")
        if get_directly_reachable_points is None:
            raise InvalidArgumentError("get_directly_reachable_points 不能为空")
        if not callable(get_directly_reachable_points):
            raise InvalidArgumentError("get_directly_reachable_points 必须可调用")

    def _scan(self, points: Iterable[Any], store: LabelStore,
              get_directly_reachable_points: Callable) -> List[tuple]:
        """
        顶层扫描：每个未访问的核心点开启一个新簇

        Args:
            points: 按输入顺序遍历的点（或索引）
            store: 标签存储
            get_directly_reachable_points: 邻域查询函数

        Returns:
            按发现顺序排列的簇列表
        """
        clusters = []

        for point in points:
            if store.get(point) != Label.UNVISITED:
                continue

            directly_reachable_points = get_directly_reachable_points(point)

            if len(directly_reachable_points) < self.minimum_points_per_cluster:
                # 暂时标记为噪声，之后可能作为边界点被某个簇吸收
                store.set(point, Label.NOISE)
                continue

            store.set(point, Label.CLUSTERED)
            with self._measure('build_cluster'):
                cluster = self._build_cluster(store, get_directly_reachable_points,
                                              point, directly_reachable_points)
            clusters.append(tuple(cluster))

        return clusters

    def _build_cluster(self, store: LabelStore,
                       get_directly_reachable_points: Callable,
                       point: Any,
                       directly_reachable_points: Collection[Any]) -> List[Any]:
        """
        从核心种子点广度优先扩展出完整的簇

        Args:
            store: 标签存储，种子点已标记为已聚类
            get_directly_reachable_points: 邻域查询函数
            point: 种子点
            directly_reachable_points: 种子点的邻域

        Returns:
            簇内的点，按加入顺序排列
        """
        cluster_points = [point]
        queue = deque(directly_reachable_points)

        # 入队即标记，保证每个点在一次扩展中最多入队一次
        seen = store.new_seen_set()
        seen.add(point)
        for p in directly_reachable_points:
            seen.add(p)

        while queue:
            new_point = queue.popleft()
            label = store.get(new_point)

            if label == Label.UNVISITED:
                new_directly_reachable_points = get_directly_reachable_points(new_point)
                if len(new_directly_reachable_points) >= self.minimum_points_per_cluster:
                    for p in new_directly_reachable_points:
                        if seen.add(p):
                            queue.append(p)

            # 核心点和边界点都加入簇，噪声点在此处被重新标记
            if label != Label.CLUSTERED:
                store.set(new_point, Label.CLUSTERED)
                cluster_points.append(new_point)

        return cluster_points

    def _finish(self, model: ClusterModel, start_time: float) -> None:
        self.execution_time = time.time() - start_time
        if self.verbose:
            print(f"DBSCAN完成: {model.n_clusters} 个簇, {model.n_noise} 个噪声点, "
                  f"耗时 {self.execution_time:.3f} 秒")
