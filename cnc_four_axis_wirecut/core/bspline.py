"""
bspline - 导轨 B样条插值

由导轨采样点构造经过全部采样点的 B样条，作为 DriveCurve 的连续表示:
向心参数化 -> 均值法节点 -> 求解配置矩阵得到控制点。
"""

import numpy as np
from scipy.interpolate import BSpline


def centripetal_parameterization(points: np.ndarray) -> np.ndarray:
    """
    向心参数化: 参数增量正比于相邻点距离的平方根。

    Args:
        points: (N, D) 采样点

    Returns:
        params: (N,) 单调参数值，首 0 末 1；所有点重合时退化为均匀参数
    """
    n = len(points)
    if n == 0:
        return np.array([])
    if n == 1:
        return np.zeros(1)

    steps = np.sqrt(np.linalg.norm(np.diff(points, axis=0), axis=1))
    total = steps.sum()
    if total < 1e-12:
        return np.linspace(0.0, 1.0, n)

    params = np.concatenate([[0.0], np.cumsum(steps) / total])
    params[-1] = 1.0
    return params


def compute_knot_vector(params: np.ndarray, degree: int) -> np.ndarray:
    """
    均值法节点向量，两端各重复 degree + 1 次。

    内部节点 t[j + degree] 取 params[j : j + degree] 的均值 (j = 1 .. N - degree - 1)。

    Returns:
        knots: (N + degree + 1,) 节点向量
    """
    n = len(params)
    interior = [np.mean(params[j:j + degree]) for j in range(1, n - degree)]
    return np.concatenate([np.zeros(degree + 1), interior, np.ones(degree + 1)])


def collocation_matrix(params: np.ndarray, knots: np.ndarray, degree: int) -> np.ndarray:
    """各基函数在参数点处的取值，(N, N)。"""
    identity = np.eye(len(params))
    return BSpline(knots, identity, degree)(params)


def fit_rail_bspline(points: np.ndarray, degree: int = 3) -> tuple[BSpline, np.ndarray]:
    """
    拟合经过全部采样点的导轨 B样条。

    采样点不足时降阶为 N - 1 次。

    Args:
        points: (N, 3) 导轨采样点, N >= 2
        degree: 期望阶数

    Returns:
        spline: 定义域 [0, 1] 的 BSpline
        params: 各采样点的参数值

    Raises:
        ValueError: 采样点少于 2 个
    """
    points = np.asarray(points, dtype=float)
    if len(points) < 2:
        raise ValueError(f"At least 2 points are required to fit a rail, got {len(points)}")

    degree = min(degree, len(points) - 1)
    params = centripetal_parameterization(points)
    knots = compute_knot_vector(params, degree)
    control_points = np.linalg.solve(collocation_matrix(params, knots, degree), points)
    return BSpline(knots, control_points, degree), params
