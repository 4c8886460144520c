"""测试数据集"""

import math
from dataclasses import dataclass

import numpy as np
import pytest


@dataclass(frozen=True)
class Point2D:
    x: float
    y: float


def euclidean_distance(p1: Point2D, p2: Point2D) -> float:
    dx = p2.x - p1.x
    dy = p2.y - p1.y
    return math.sqrt(dx * dx + dy * dy)


BORDERS = [
    Point2D(0, 0),
    Point2D(-1.8, 0),
    Point2D(-2.3, 0),
    Point2D(-2.3, 0.5),
    Point2D(-2.3, -0.5),
    Point2D(1.8, 0),
    Point2D(2.3, 0),
    Point2D(2.3, 0.5),
    Point2D(2.3, -0.5),
]


def build_ring_dataset():
    """6x5网格，每格一个中心点加上半径递减的一圈点，圈上点数等于行号"""
    points = []
    rows, cols = 6, 5
    for row in range(rows):
        for col in range(cols):
            min_points = row
            eps = 1.25 - col * 0.25

            x0 = -15 + (30 // (rows + 1)) * (row + 1)
            y0 = -12 + (24 // (cols + 1)) * (col + 1)

            points.append(Point2D(x0, y0))
            for i in range(min_points):
                x = x0 + eps * math.sin(2 * math.pi * i / min_points)
                y = y0 + eps * math.cos(2 * math.pi * i / min_points)
                points.append(Point2D(x, y))
    return points


@pytest.fixture
def borders():
    return list(BORDERS)


@pytest.fixture
def ring_dataset():
    return build_ring_dataset()


@pytest.fixture
def borders_array():
    return np.array([[p.x, p.y] for p in BORDERS])
