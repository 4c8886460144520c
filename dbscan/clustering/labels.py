"""
聚类标签存储
记录每个点的状态：未访问、噪声或已聚类
"""

from enum import IntEnum
from typing import Any, Callable, Dict, Hashable, List, Optional

import numpy as np


class Label(IntEnum):
    """点的状态标签"""

    UNVISITED = 0
    NOISE = 1
    CLUSTERED = 2


class KeyedLabelStore:
    """
    基于字典的标签存储，适用于任意可哈希的点

    未出现在字典中的点视为未访问。key函数决定两个点是否相同，
    默认使用点本身。
    """

    def __init__(self, key: Optional[Callable[[Any], Hashable]] = None):
        """
        Args:
            key: 将点映射为可哈希键的函数，None表示使用点本身
        """
        self._key = key
        self._labels: Dict[Hashable, Label] = {}
        self._items: Dict[Hashable, Any] = {}

    def key(self, point: Any) -> Hashable:
        return point if self._key is None else self._key(point)

    def get(self, point: Any) -> Label:
        return self._labels.get(self.key(point), Label.UNVISITED)

    def set(self, point: Any, label: Label) -> None:
        k = self.key(point)
        if k not in self._labels:
            self._items[k] = point
        self._labels[k] = label

    def new_seen_set(self) -> 'KeyedSeenSet':
        return KeyedSeenSet(self.key)

    def noise(self) -> List[Any]:
        """
        返回所有噪声点

        Returns:
            按首次标记顺序排列的噪声点列表
        """
        return [self._items[k] for k, label in self._labels.items()
                if label == Label.NOISE]

    def __len__(self) -> int:
        return len(self._labels)


class KeyedSeenSet:
    """单次簇扩展中已入队点的集合"""

    def __init__(self, key: Callable[[Any], Hashable]):
        self._key = key
        self._seen = set()

    def add(self, point: Any) -> bool:
        """加入点，若此前未出现则返回True"""
        k = self._key(point)
        if k in self._seen:
            return False
        self._seen.add(k)
        return True


class IndexedLabelStore:
    """
    基于numpy数组的标签存储，适用于按位置索引的点集

    所有索引初始为未访问，读写均为O(1)且不需要哈希。
    """

    def __init__(self, n_samples: int):
        self.n_samples = n_samples
        self.labels = np.full(n_samples, Label.UNVISITED, dtype=np.int8)

    def key(self, index: int) -> int:
        return index

    def get(self, index: int) -> int:
        return int(self.labels[index])

    def set(self, index: int, label: Label) -> None:
        self.labels[index] = label

    def new_seen_set(self) -> 'IndexedSeenSet':
        return IndexedSeenSet(self.n_samples)

    def noise(self) -> List[int]:
        """
        返回所有噪声点索引

        Returns:
            升序排列的噪声点索引列表
        """
        return np.flatnonzero(self.labels == Label.NOISE).tolist()

    def __len__(self) -> int:
        return int(np.count_nonzero(self.labels != Label.UNVISITED))


class IndexedSeenSet:
    """基于布尔数组的已入队索引集合"""

    def __init__(self, n_samples: int):
        self._seen = np.zeros(n_samples, dtype=bool)

    def add(self, index: int) -> bool:
        if self._seen[index]:
            return False
        self._seen[index] = True
        return True
