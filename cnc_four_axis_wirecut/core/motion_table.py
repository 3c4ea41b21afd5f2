"""
motion_table - 运动表与位姿流构建

运动表按切割顺序追加位姿，不重排；与上一条位姿四个坐标均在容差内的
新位姿直接丢弃，避免零长度/抖动指令。
差值先按坐标的圆整位数圆整再与容差比较，恰好一个圆整步长的移动始终保留。
"""

import logging
from typing import Iterable, Iterator

import numpy as np

from ..config import WirecutConfig
from ..utils.geometry import Plane
from .pose import ContinuityState, MoveType, Pose, calculate_pose
from .synchronizer import SyncStep

logger = logging.getLogger(__name__)


class MotionTable:
    """
    只追加的有序位姿序列。

    Attributes:
        poses: 位姿列表（只读视图请用迭代或索引）
        dropped: 因去重被丢弃的位姿数
    """

    def __init__(self, poses: Iterable[Pose] = ()):
        self._poses: list[Pose] = list(poses)
        self.dropped = 0

    def append(self, pose: Pose, tolerance: float, decimals: int | None = None) -> bool:
        """
        追加位姿。

        Args:
            pose: 新位姿
            tolerance: 去重容差
            decimals: 坐标圆整位数，缺省由容差推导

        Returns:
            True 表示已追加，False 表示与上一条过近而被丢弃
        """
        if self._poses and pose.is_close_to(self._poses[-1], tolerance, decimals):
            self.dropped += 1
            logger.debug("Dropped near-duplicate pose %s", pose.coordinates)
            return False
        self._poses.append(pose)
        return True

    @property
    def last(self) -> Pose | None:
        return self._poses[-1] if self._poses else None

    def to_array(self) -> np.ndarray:
        """(N, 4) 数组 [x, y, z, angle]。"""
        if not self._poses:
            return np.zeros((0, 4))
        return np.array([p.coordinates for p in self._poses], dtype=float)

    def __len__(self) -> int:
        return len(self._poses)

    def __iter__(self) -> Iterator[Pose]:
        return iter(self._poses)

    def __getitem__(self, index):
        return self._poses[index]

    def __repr__(self) -> str:
        return f"MotionTable(N={len(self._poses)}, dropped={self.dropped})"


def build_motion_table(
    steps: Iterable[SyncStep],
    move_type: MoveType,
    config: WirecutConfig,
    plane: Plane,
    continuity: ContinuityState,
    table: MotionTable | None = None,
) -> tuple[MotionTable, ContinuityState]:
    """
    将同步点对转换为位姿并追加到运动表。

    Args:
        steps: 同步点对序列
        move_type: 本段位姿分类
        config: 机床配置
        plane: 切割平面
        continuity: 起始连续性状态
        table: 追加到的运动表，缺省新建

    Returns:
        table: 运动表
        continuity: 最后一条位姿后的连续性状态
    """
    table = table if table is not None else MotionTable()
    for step in steps:
        pose, continuity = calculate_pose(
            step.point_a, step.point_b, continuity, config, plane, move_type
        )
        table.append(pose, config.tolerance, config.decimals)
    return table, continuity


def append_single(
    start: np.ndarray,
    end: np.ndarray,
    config: WirecutConfig,
    plane: Plane,
    continuity: ContinuityState,
    table: MotionTable,
    move_type: MoveType = MoveType.CUT,
) -> ContinuityState:
    """
    单曲线特例: 不经同步，直接由曲线首末点生成一条位姿。

    Returns:
        continuity: 更新后的连续性状态
    """
    pose, continuity = calculate_pose(start, end, continuity, config, plane, move_type)
    table.append(pose, config.tolerance, config.decimals)
    return continuity
