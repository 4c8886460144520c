"""
聚类工具函数
构造邻域查询函数（range query）以及距离计算
"""

import math
import warnings
from typing import Any, Callable, Collection, Dict, Hashable, List, Optional

import numpy as np
from numba import jit, prange
from scipy.spatial import KDTree
from sklearn.neighbors import BallTree

from .options import InvalidArgumentError

EARTH_RADIUS_M = 6371000.0  # 地球平均半径（米）


def _check_searcher_args(points, distance_calculator=None, epsilon=None,
                         need_distance: bool = True, need_epsilon: bool = True) -> None:
    if points is None:
        raise InvalidArgumentError("points 不能为空")
    if need_distance and distance_calculator is None:
        raise InvalidArgumentError("distance_calculator 不能为空")
    if need_epsilon and epsilon is None:
        raise InvalidArgumentError("epsilon 不能为空")
    if epsilon is not None and epsilon < 0:
        raise InvalidArgumentError(f"epsilon 不能为负数: {epsilon}")


def _identity(point: Any) -> Any:
    return point


def create_full_scan_neighbors_searcher(points: Collection[Any],
                                        distance_calculator: Callable[[Any, Any], float],
                                        epsilon: float,
                                        key: Optional[Callable[[Any], Hashable]] = None
                                        ) -> Callable[[Any], List[Any]]:
    """
    创建每次调用都全量扫描的邻域查询函数

    Args:
        points: 所有点
        distance_calculator: 两点间距离函数
        epsilon: 邻域半径（严格小于）
        key: 点的相等性策略，用于邻居去重

    Returns:
        返回点邻居（包含自身）的函数
    """
    _check_searcher_args(points, distance_calculator, epsilon)
    key = key or _identity
    points = list(points)

    def search(point: Any) -> List[Any]:
        neighbors = []
        seen = set()
        for other in points:
            k = key(other)
            if k in seen:
                continue
            if distance_calculator(point, other) < epsilon:
                seen.add(k)
                neighbors.append(other)
        return neighbors

    return search


def create_full_scan_cached_neighbors_searcher(points: Collection[Any],
                                               distance_calculator: Callable[[Any, Any], float],
                                               epsilon: float,
                                               key: Optional[Callable[[Any], Hashable]] = None
                                               ) -> Callable[[Any], List[Any]]:
    """
    创建预先计算所有点邻域的查询函数

    构造时计算O(n^2)次距离，之后每次查询只是一次字典查找。

    Args:
        points: 所有点
        distance_calculator: 两点间距离函数
        epsilon: 邻域半径（严格小于）
        key: 点的相等性策略

    Returns:
        返回点邻居（包含自身）的函数
    """
    _check_searcher_args(points, distance_calculator, epsilon)
    key = key or _identity
    points = list(points)
    scan = create_full_scan_neighbors_searcher(points, distance_calculator, epsilon, key)

    neighbors_set: Dict[Hashable, List[Any]] = {}
    for point in points:
        k = key(point)
        if k not in neighbors_set:
            neighbors_set[k] = scan(point)

    return lambda p: neighbors_set[key(p)]


def create_distance_cached_neighbors_searcher(points: Collection[Any],
                                              distance_calculator: Callable[[Any, Any], float],
                                              key: Optional[Callable[[Any], Hashable]] = None
                                              ) -> Callable[[Any, float], List[Any]]:
    """
    创建预先计算两两距离的查询函数，半径在查询时指定

    Args:
        points: 所有点
        distance_calculator: 两点间距离函数
        key: 点的相等性策略

    Returns:
        签名为 f(point, epsilon) 的函数，返回距离严格小于epsilon的点
    """
    _check_searcher_args(points, distance_calculator, need_epsilon=False)
    key = key or _identity
    points = list(points)

    distances_set: Dict[Hashable, Dict[Hashable, tuple]] = {}
    for point in points:
        k = key(point)
        if k in distances_set:
            continue
        row = {}
        for other in points:
            other_key = key(other)
            if other_key not in row:
                row[other_key] = (other, distance_calculator(point, other))
        distances_set[k] = row

    def search(point: Any, epsilon: float) -> List[Any]:
        return [other for other, distance in distances_set[key(point)].values()
                if distance < epsilon]

    return search


def bind_epsilon(searcher: Callable[[Any, float], Collection[Any]],
                 epsilon: float) -> Callable[[Any], Collection[Any]]:
    """将 f(point, epsilon) 形式的查询函数固定半径，适配训练器的邻域查询接口"""
    if epsilon < 0:
        raise InvalidArgumentError(f"epsilon 不能为负数: {epsilon}")
    return lambda point: searcher(point, epsilon)


def ensure_self_inclusion(get_directly_reachable_points: Callable[[Any], Collection[Any]],
                          warn: bool = False,
                          key: Optional[Callable[[Any], Hashable]] = None) -> Callable[[Any], List[Any]]:
    """
    包装邻域查询函数，保证结果中包含被查询的点本身

    Args:
        get_directly_reachable_points: 原始邻域查询函数
        warn: 发现结果缺少查询点时是否发出警告
        key: 点的相等性策略，应与训练器的key一致

    Returns:
        包装后的邻域查询函数
    """
    if get_directly_reachable_points is None:
        raise InvalidArgumentError("get_directly_reachable_points 不能为空")
    key = key or _identity

    def search(point: Any) -> List[Any]:
        neighbors = list(get_directly_reachable_points(point))
        if key(point) not in {key(n) for n in neighbors}:
            if warn:
                warnings.warn(f"邻域查询结果不包含点本身: {point!r}")
            neighbors.append(point)
        return neighbors

    return search


def compute_distance_matrix(points: np.ndarray, metric: str = 'euclidean') -> np.ndarray:
    """
    计算距离矩阵

    Args:
        points: 形状为(n_samples, d)的numpy数组；haversine要求[latitude, longitude]
        metric: 距离度量方式，'euclidean'或'haversine'

    Returns:
        距离矩阵，形状为(n_samples, n_samples)
    """
    points = np.asarray(points, dtype=np.float64)

    if metric == 'euclidean':
        # 使用向量化计算欧氏距离
        diff = points[:, np.newaxis, :] - points[np.newaxis, :, :]
        return np.sqrt(np.sum(diff ** 2, axis=2))

    elif metric == 'haversine':
        return _haversine_distance_matrix(points)

    else:
        raise InvalidArgumentError(f"不支持的度量方式: {metric}")


@jit(nopython=True, parallel=True)
def _haversine_distance_matrix(points: np.ndarray) -> np.ndarray:
    """
    使用Numba加速的Haversine距离矩阵计算

    Args:
        points: 形状为(n_samples, 2)的numpy数组，[latitude, longitude]

    Returns:
        Haversine距离矩阵（米）
    """
    n_samples = points.shape[0]
    distance_matrix = np.zeros((n_samples, n_samples))
    R = 6371000.0

    lat_rad = np.radians(points[:, 0])
    lon_rad = np.radians(points[:, 1])

    for i in prange(n_samples):
        for j in range(i + 1, n_samples):
            dlon = lon_rad[j] - lon_rad[i]
            dlat = lat_rad[j] - lat_rad[i]

            a = math.sin(dlat / 2) ** 2 + math.cos(lat_rad[i]) * math.cos(lat_rad[j]) * math.sin(dlon / 2) ** 2
            c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
            distance = R * c

            distance_matrix[i, j] = distance
            distance_matrix[j, i] = distance

    return distance_matrix


def create_distance_matrix_searcher(points: np.ndarray, epsilon: float,
                                    metric: str = 'euclidean') -> Callable[[int], List[int]]:
    """
    创建基于预计算距离矩阵的索引邻域查询函数

    Args:
        points: 形状为(n_samples, d)的numpy数组
        epsilon: 邻域半径（包含边界）
        metric: 距离度量方式

    Returns:
        根据点索引返回邻居索引（包含自身）的函数
    """
    _check_searcher_args(points, epsilon=epsilon, need_distance=False)
    distance_matrix = compute_distance_matrix(points, metric)

    def search(point_idx: int) -> List[int]:
        return np.flatnonzero(distance_matrix[point_idx] <= epsilon).tolist()

    return search


def build_spatial_index(points: np.ndarray, method: str = 'kdtree'):
    """
    构建空间索引以加速邻域查询

    Args:
        points: 点数据数组；balltree要求[latitude, longitude]（度）
        method: 索引方法，支持'kdtree'或'balltree'

    Returns:
        空间索引对象
    """
    points = np.asarray(points, dtype=np.float64)

    if method == 'kdtree':
        return KDTree(points)

    elif method == 'balltree':
        return BallTree(np.radians(points), metric='haversine')

    else:
        raise InvalidArgumentError(f"不支持的空间索引方法: {method}")


def create_spatial_index_searcher(points: np.ndarray, epsilon: float,
                                  method: str = 'kdtree') -> Callable[[int], List[int]]:
    """
    创建基于空间索引的索引邻域查询函数

    Args:
        points: 点数据数组
        epsilon: 邻域半径（包含边界）；balltree时单位为米
        method: 索引方法，支持'kdtree'或'balltree'

    Returns:
        根据点索引返回邻居索引（包含自身）的函数
    """
    _check_searcher_args(points, epsilon=epsilon, need_distance=False)
    points = np.asarray(points, dtype=np.float64)
    tree = build_spatial_index(points, method)

    if method == 'kdtree':
        def search(point_idx: int) -> List[int]:
            return sorted(tree.query_ball_point(points[point_idx], epsilon))

    else:
        radius = epsilon / EARTH_RADIUS_M
        radians = np.radians(points)

        def search(point_idx: int) -> List[int]:
            neighbors = tree.query_radius(radians[point_idx:point_idx + 1], r=radius)[0]
            return sorted(neighbors.tolist())

    return search
