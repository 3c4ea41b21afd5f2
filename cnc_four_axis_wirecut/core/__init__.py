"""
core - 核心算法模块

包含:
- angle_solver: 钢丝倾角象限求解
- pose: 位姿计算与旋转轴连续性
- synchronizer: 双导轨同步遍历
- motion_table: 运动表构建与去重
- serializer: 指令文本渲染与解析
- drive_curve: 折线 / B样条导轨
- bspline: B样条拟合工具
"""

from .angle_solver import resolve_angle
from .drive_curve import DriveCurve, PlaneIntersection, PolylineCurve
from .motion_table import MotionTable, build_motion_table
from .pose import ContinuityState, MoveType, Pose, calculate_pose
from .serializer import parse_instructions, render_instructions
from .synchronizer import DriveCurveSample, Role, SyncStep, synchronize

__all__ = [
    "resolve_angle",
    "DriveCurve",
    "PlaneIntersection",
    "PolylineCurve",
    "MotionTable",
    "build_motion_table",
    "ContinuityState",
    "MoveType",
    "Pose",
    "calculate_pose",
    "parse_instructions",
    "render_instructions",
    "DriveCurveSample",
    "Role",
    "SyncStep",
    "synchronize",
]
