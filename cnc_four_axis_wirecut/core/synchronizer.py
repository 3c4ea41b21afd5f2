"""
synchronizer - 双导轨同步遍历

直纹面的两条导轨很少按相同弧长参数化，直接按索引配对会使钢丝错位。
本模块按两点到切割平面的距离判断是否处于同一截面:

1. 距离差在容差内: 两点同步，两个游标同时前进；
2. 否则距离较小的导轨为驱动导轨，过驱动点作与切割平面平行的截面，
   用求交接口求远端导轨在该截面上的真实位置，仅驱动游标前进。

交点缺失时退化为远端点在截面上的最近点投影（记录警告，不致命）；
远端导轨与截面重叠时无法求解，抛出 UnsupportedIntersectionError。
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator

import numpy as np

from ..errors import UnsupportedIntersectionError
from ..utils.geometry import Plane
from .drive_curve import PlaneIntersection, PolylineCurve, intersect_with_plane

logger = logging.getLogger(__name__)

IntersectionOracle = Callable[[object, Plane, float], "list[PlaneIntersection] | None"]


class Role(str, Enum):
    """重新同步时担任驱动的导轨。"""

    A = "A"
    B = "B"

    @property
    def other(self) -> "Role":
        return Role.B if self is Role.A else Role.A


@dataclass
class DriveCurveSample:
    """
    导轨离散采样。

    Attributes:
        points: (N, 3) 折线点列
        source: 交给求交接口的原始曲线；缺省为点列本身构成的折线
    """

    points: np.ndarray
    source: object = None

    def __post_init__(self):
        self.points = np.asarray(self.points, dtype=float)
        if self.points.ndim != 2 or self.points.shape[1] != 3 or len(self.points) == 0:
            raise ValueError(f"Drive curve sample must have shape (N, 3), got {self.points.shape}")
        if self.source is None:
            self.source = PolylineCurve(self.points)

    @property
    def segment_count(self) -> int:
        return len(self.points) - 1


@dataclass(frozen=True)
class SyncStep:
    """
    一步同步结果。

    Attributes:
        point_a: (3,) 导轨 A 上的点
        point_b: (3,) 导轨 B 上的点
        drive: 重新同步时的驱动导轨；两点本已同步时为 None
    """

    point_a: np.ndarray
    point_b: np.ndarray
    drive: Role | None = None

    @property
    def pair(self) -> tuple[np.ndarray, np.ndarray]:
        return self.point_a, self.point_b


@dataclass
class SyncStats:
    """同步过程统计。"""

    in_sync: int = 0
    resynchronized: int = 0
    fallbacks: int = 0
    intersect_calls: int = 0

    @property
    def steps(self) -> int:
        return self.in_sync + self.resynchronized


def _pick_intersection(
    hits: list[PlaneIntersection], far_point: np.ndarray
) -> PlaneIntersection:
    """多个交点时取离远端当前点最近者。"""
    return min(hits, key=lambda h: float(np.linalg.norm(np.asarray(h.point) - far_point)))


def synchronize(
    sample_a: DriveCurveSample,
    sample_b: DriveCurveSample,
    intersect: IntersectionOracle = intersect_with_plane,
    plane: Plane | None = None,
    tolerance: float = 0.01,
    stats: SyncStats | None = None,
) -> Iterator[SyncStep]:
    """
    同步遍历两条导轨，逐步产出点对。

    生成器有状态、不可重启；任一游标超过其导轨段数即结束。

    Args:
        sample_a: 导轨 A 采样
        sample_b: 导轨 B 采样
        intersect: 求交接口 intersect(curve, plane, tolerance)
        plane: 参考切割平面，缺省为世界 YZ 平面
        tolerance: 距离容差
        stats: 可选，累计同步统计

    Yields:
        SyncStep: 点对 (A, B) 及驱动导轨标记

    Raises:
        UnsupportedIntersectionError: 远端导轨与截面重叠
    """
    plane = plane or Plane.world_yz()
    stats = stats if stats is not None else SyncStats()
    samples = {Role.A: sample_a, Role.B: sample_b}
    cursors = {Role.A: 0, Role.B: 0}

    while cursors[Role.A] <= sample_a.segment_count and cursors[Role.B] <= sample_b.segment_count:
        points = {role: samples[role].points[cursors[role]] for role in Role}
        distances = {role: plane.distance_to(points[role]) for role in Role}

        if abs(distances[Role.A] - distances[Role.B]) < tolerance:
            cursors[Role.A] += 1
            cursors[Role.B] += 1
            stats.in_sync += 1
            yield SyncStep(points[Role.A].copy(), points[Role.B].copy())
            continue

        drive = Role.A if distances[Role.A] < distances[Role.B] else Role.B
        far = drive.other
        section = Plane(points[drive], plane.x_axis, plane.y_axis)

        stats.intersect_calls += 1
        hits = intersect(samples[far].source, section, tolerance)
        if not hits:
            far_point = section.closest_point(points[far])
            stats.fallbacks += 1
            logger.warning(
                "No intersection of rail %s with section at distance %.6f; "
                "projecting point %d onto the section plane",
                far.value,
                distances[drive],
                cursors[far],
            )
        else:
            hit = _pick_intersection(hits, points[far])
            if not hit.is_point:
                raise UnsupportedIntersectionError(
                    f"Rail {far.value} overlaps the section plane at distance "
                    f"{distances[drive]:.6f}; no method exists for overlapping curves"
                )
            far_point = np.asarray(hit.point, dtype=float)

        cursors[drive] += 1
        stats.resynchronized += 1
        resolved = {drive: points[drive].copy(), far: far_point}
        logger.debug(
            "Resynchronized on rail %s (cursors A=%d, B=%d)",
            drive.value,
            cursors[Role.A],
            cursors[Role.B],
        )
        yield SyncStep(resolved[Role.A], resolved[Role.B], drive)
