"""
pose - 钢丝位姿计算

将一对同步点转换为机床位姿（中点 + 钢丝倾角），并维护旋转轴连续性。

旋转轴没有硬限位、也没有优选的过零方向，因此每一步在
{-360, -180, 0, 180, 360} 的调整量中选取转动幅度最小者。
钢丝是无向直线，倾角 θ 与 θ ± 180 描述同一根钢丝。
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum

import numpy as np

from ..config import WirecutConfig, tolerance_decimals
from ..utils.geometry import Plane
from .angle_solver import resolve_angle

logger = logging.getLogger(__name__)

ROTATION_ADJUSTMENTS = (-360.0, -180.0, 0.0, 180.0, 360.0)


class MoveType(str, Enum):
    """位姿分类。"""

    CUT = "Cut"
    RAPID = "Rapid"
    DRIVE = "Drive"
    RETRACT = "Retract"

    @property
    def is_rapid(self) -> bool:
        """非切削的快速移动。"""
        return self in (MoveType.RAPID, MoveType.RETRACT)


@dataclass(frozen=True)
class Pose:
    """
    运动表中的一条位姿。

    Attributes:
        x, y, z: 钢丝中点坐标（已圆整）
        angle: 旋转轴角度 (deg)，连续无界
        move_type: 位姿分类
    """

    x: float
    y: float
    z: float
    angle: float
    move_type: MoveType = MoveType.CUT

    @property
    def coordinates(self) -> tuple[float, float, float, float]:
        return (self.x, self.y, self.z, self.angle)

    def is_close_to(self, other: "Pose", tolerance: float, decimals: int | None = None) -> bool:
        """
        四个坐标之差是否都小于容差。

        坐标已按 decimals 位圆整，差值同样先圆整再比较，
        恰好一个圆整步长的移动不会因浮点噪声被误判为重复。
        """
        if decimals is None:
            decimals = tolerance_decimals(tolerance)
        return all(
            round(abs(a - b), decimals) < tolerance
            for a, b in zip(self.coordinates, other.coordinates)
        )


@dataclass(frozen=True)
class ContinuityState:
    """上一条位姿的 (x, y, z, angle)，仅用于计算下一步的最小转角。"""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    angle: float = 0.0

    @classmethod
    def initial(cls, retract_offset: float = 0.0) -> "ContinuityState":
        return cls(x=-retract_offset)

    @classmethod
    def from_pose(cls, pose: Pose) -> "ContinuityState":
        return cls(pose.x, pose.y, pose.z, pose.angle)


def minimal_rotation(raw_angle: float, current_angle: float) -> float:
    """
    计算从当前角度到原始角度的最小转动量。

    Args:
        raw_angle: [0, 360) 内的目标角度
        current_angle: 当前旋转轴角度（无界）

    Returns:
        move: 转动量 (deg)，|move| <= 180
    """
    # 当前角度无界时先折回 (-360, 360)
    move = math.fmod(raw_angle - current_angle, 360.0)
    best = move
    for adj in ROTATION_ADJUSTMENTS:
        if abs(move + adj) < abs(best):
            best = move + adj
    return best


def calculate_pose(
    p0: np.ndarray,
    p1: np.ndarray,
    continuity: ContinuityState,
    config: WirecutConfig,
    plane: Plane,
    move_type: MoveType = MoveType.CUT,
) -> tuple[Pose, ContinuityState]:
    """
    由钢丝两端点计算位姿。

    Args:
        p0: (3,) 钢丝起点（曲线 A 上）
        p1: (3,) 钢丝终点（曲线 B 上）
        continuity: 上一条位姿的连续性状态
        config: 机床配置
        plane: 切割平面
        move_type: 位姿分类

    Returns:
        pose: 新位姿
        continuity: 更新后的连续性状态

    Raises:
        DegenerateVectorError, AngleResolutionError: 由倾角求解传出
    """
    p0 = np.asarray(p0, dtype=float)
    p1 = np.asarray(p1, dtype=float)
    decimals = config.decimals

    mid = (p0 + p1) / 2
    raw_angle = resolve_angle(p1 - p0, plane, config.angle_tolerance)
    move = minimal_rotation(raw_angle, continuity.angle)
    angle = round(continuity.angle + move, decimals)

    pose = Pose(
        x=round(float(mid[0]), decimals),
        y=round(float(mid[1]), decimals),
        z=round(float(mid[2]), decimals),
        angle=angle,
        move_type=MoveType(move_type),
    )
    logger.debug(
        "pose (%g, %g, %g) raw=%.4f° -> %g°", pose.x, pose.y, pose.z, raw_angle, angle
    )
    return pose, ContinuityState.from_pose(pose)
