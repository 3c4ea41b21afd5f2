"""
drive_curve - 驱动曲线（导轨）

提供两种导轨表示，均满足刀路同步所需的两个协作接口:

- flatten(tolerance, angle_tolerance, min_edge_length, max_segments): 离散为折线点列
- intersect_plane(plane, tolerance): 与截面平面求交

PolylineCurve: 显式折线导轨
DriveCurve: scipy BSpline 导轨，自适应离散 + brentq 精确求交
"""

import logging
from dataclasses import dataclass

import numpy as np
from scipy.interpolate import BSpline
from scipy.optimize import brentq

from ..utils.geometry import Plane, transform_points, vector_angle
from .bspline import fit_rail_bspline

logger = logging.getLogger(__name__)

# 求交时每个节点区间的最少采样数
SAMPLES_PER_SPAN = 32


@dataclass(frozen=True)
class PlaneIntersection:
    """
    曲线与平面的一个交点事件。

    Attributes:
        point: (3,) 交点；重叠事件时为重叠段起点
        is_point: True 为单点相交，False 为曲线段落在平面内（重叠）
    """

    point: np.ndarray
    is_point: bool = True


def _chord_deviation(p: np.ndarray, q: np.ndarray, m: np.ndarray) -> float:
    """点 m 到弦 pq 的距离。"""
    chord = q - p
    length = np.linalg.norm(chord)
    if length < 1e-12:
        return float(np.linalg.norm(m - p))
    return float(np.linalg.norm(np.cross(m - p, chord)) / length)


def _dedupe_hits(hits: list[PlaneIntersection], tolerance: float) -> list[PlaneIntersection]:
    """合并相距小于容差的交点（折线共享顶点处会重复命中）。"""
    unique: list[PlaneIntersection] = []
    for hit in hits:
        if any(
            h.is_point == hit.is_point and np.linalg.norm(h.point - hit.point) <= tolerance
            for h in unique
        ):
            continue
        unique.append(hit)
    return unique


class PolylineCurve:
    """
    折线导轨。

    Attributes:
        points: (N, 3) 顶点
    """

    def __init__(self, points: np.ndarray):
        self.points = np.asarray(points, dtype=float)
        if self.points.ndim != 2 or self.points.shape[1] != 3:
            raise ValueError(f"Polyline points must have shape (N, 3), got {self.points.shape}")
        if len(self.points) < 1:
            raise ValueError("Polyline needs at least one point")

    @property
    def segment_count(self) -> int:
        return len(self.points) - 1

    @property
    def start(self) -> np.ndarray:
        return self.points[0]

    @property
    def end(self) -> np.ndarray:
        return self.points[-1]

    def transformed(self, M: np.ndarray) -> "PolylineCurve":
        return PolylineCurve(transform_points(M, self.points))

    def flatten(
        self,
        tolerance: float,
        angle_tolerance: float,
        min_edge_length: float,
        max_segments: int,
    ) -> np.ndarray:
        """折线本身即为离散结果。"""
        return self.points.copy()

    def intersect_plane(self, plane: Plane, tolerance: float) -> list[PlaneIntersection] | None:
        """
        逐段与平面求交。

        Args:
            plane: 截面平面
            tolerance: 距离容差

        Returns:
            交点事件列表，无交点时返回 None
        """
        if len(self.points) == 1:
            if abs(plane.distance_to(self.points[0])) <= tolerance:
                return [PlaneIntersection(self.points[0].copy())]
            return None

        d = (self.points - plane.origin) @ plane.normal
        hits: list[PlaneIntersection] = []
        for i in range(self.segment_count):
            p0, p1 = self.points[i], self.points[i + 1]
            d0, d1 = d[i], d[i + 1]
            on0, on1 = abs(d0) <= tolerance, abs(d1) <= tolerance

            if on0 and on1 and np.linalg.norm(p1 - p0) > tolerance:
                hits.append(PlaneIntersection(p0.copy(), is_point=False))
            elif d0 * d1 < 0 and not (on0 or on1):
                t = d0 / (d0 - d1)
                hits.append(PlaneIntersection(p0 + t * (p1 - p0)))
            else:
                if on0:
                    hits.append(PlaneIntersection(p0.copy()))
                if on1:
                    hits.append(PlaneIntersection(p1.copy()))

        hits = _dedupe_hits(hits, tolerance)
        return hits or None

    def __repr__(self) -> str:
        return f"PolylineCurve(N={len(self.points)})"


class DriveCurve:
    """
    B样条导轨。

    Attributes:
        spline: scipy BSpline 对象
        domain: (t0, t1) 参数定义域
    """

    def __init__(self, spline: BSpline):
        self.spline = spline
        k = spline.k
        self.domain = (float(spline.t[k]), float(spline.t[-k - 1]))
        self._d1 = spline.derivative(1) if k > 0 else None

    @classmethod
    def from_points(cls, points: np.ndarray, degree: int = 3) -> "DriveCurve":
        """通过采样点拟合插值B样条导轨。"""
        spline, _ = fit_rail_bspline(points, degree)
        return cls(spline)

    @property
    def start(self) -> np.ndarray:
        return np.asarray(self.spline(self.domain[0]))

    @property
    def end(self) -> np.ndarray:
        return np.asarray(self.spline(self.domain[1]))

    def evaluate(self, u: float | np.ndarray) -> np.ndarray:
        return np.asarray(self.spline(u))

    def transformed(self, M: np.ndarray) -> "DriveCurve":
        """B样条对仿射变换不变，直接变换控制点。"""
        c = transform_points(M, np.asarray(self.spline.c, dtype=float))
        return DriveCurve(BSpline(self.spline.t, c, self.spline.k))

    def _breakpoints(self) -> np.ndarray:
        t0, t1 = self.domain
        knots = np.unique(self.spline.t)
        return knots[(knots >= t0) & (knots <= t1)]

    def _needs_split(
        self,
        a: float,
        b: float,
        tolerance: float,
        angle_tolerance: float,
        min_edge_length: float,
    ) -> bool:
        if b - a < 1e-12:
            return False
        p, q, m = self.evaluate(np.array([a, b, (a + b) / 2]))
        if np.linalg.norm(q - p) <= min_edge_length:
            return False
        if _chord_deviation(p, q, m) > tolerance:
            return True
        if self._d1 is None:
            return False
        ta, tb = self._d1(a), self._d1(b)
        if np.linalg.norm(ta) < 1e-12 or np.linalg.norm(tb) < 1e-12:
            return False
        return np.radians(vector_angle(ta, tb)) > angle_tolerance

    def flatten(
        self,
        tolerance: float,
        angle_tolerance: float,
        min_edge_length: float,
        max_segments: int,
    ) -> np.ndarray:
        """
        自适应离散为折线。

        从节点区间开始逐轮二分，弦高超过 tolerance 或切向转角超过
        angle_tolerance (rad) 的区间继续细分；弦长不大于 min_edge_length
        的区间不再细分；总段数不超过 max_segments。结果对相同输入确定。

        Returns:
            points: (N, 3) 折线顶点
        """
        params = self._breakpoints().tolist()

        while True:
            segments = len(params) - 1
            refined = [params[0]]
            for a, b in zip(params[:-1], params[1:]):
                if segments < max_segments and self._needs_split(
                    a, b, tolerance, angle_tolerance, min_edge_length
                ):
                    refined.append((a + b) / 2)
                    segments += 1
                refined.append(b)
            if len(refined) == len(params):
                break
            params = refined

        logger.debug("Flattened %r into %d segments", self, len(params) - 1)
        return self.evaluate(np.asarray(params))

    def intersect_plane(self, plane: Plane, tolerance: float) -> list[PlaneIntersection] | None:
        """
        与平面求交。

        密集采样有符号距离，变号区间用 brentq 精确求根；
        连续落在平面内且长度超过容差的采样段视为重叠。

        Returns:
            按参数排序的交点事件列表，无交点时返回 None
        """
        t0, t1 = self.domain
        n_spans = max(1, len(self._breakpoints()) - 1)
        u = np.linspace(t0, t1, SAMPLES_PER_SPAN * n_spans + 1)
        pts = self.evaluate(u)
        d = (pts - plane.origin) @ plane.normal
        normal = plane.normal

        def signed_distance(s: float) -> float:
            return float(np.dot(self.evaluate(s) - plane.origin, normal))

        events: list[tuple[float, PlaneIntersection]] = []
        on_plane = np.abs(d) <= tolerance

        i = 0
        while i < len(u):
            if not on_plane[i]:
                i += 1
                continue
            j = i
            while j + 1 < len(u) and on_plane[j + 1]:
                j += 1
            if np.linalg.norm(pts[j] - pts[i]) > tolerance:
                events.append((u[i], PlaneIntersection(pts[i].copy(), is_point=False)))
            else:
                # 近似相切或穿越点，取距离最小的采样
                k = i + int(np.argmin(np.abs(d[i:j + 1])))
                events.append((u[k], PlaneIntersection(pts[k].copy())))
            i = j + 1

        for i in range(len(u) - 1):
            if on_plane[i] or on_plane[i + 1]:
                continue
            if d[i] * d[i + 1] < 0:
                root = brentq(signed_distance, u[i], u[i + 1], xtol=1e-12)
                events.append((root, PlaneIntersection(self.evaluate(root))))

        events.sort(key=lambda e: e[0])
        hits = _dedupe_hits([e[1] for e in events], tolerance)
        return hits or None

    def __repr__(self) -> str:
        return f"DriveCurve(degree={self.spline.k}, domain={self.domain})"


def flatten_curve(
    curve,
    tolerance: float,
    angle_tolerance: float,
    min_edge_length: float,
    max_segments: int,
) -> np.ndarray:
    """默认曲线离散接口。"""
    return curve.flatten(tolerance, angle_tolerance, min_edge_length, max_segments)


def intersect_with_plane(curve, plane: Plane, tolerance: float) -> list[PlaneIntersection] | None:
    """默认曲线-平面求交接口。"""
    return curve.intersect_plane(plane, tolerance)
