"""
ruled_surfaces - 直纹面导轨测试数据

数据说明:
所有导轨均已位于标准切割坐标系: 切割平面为世界 YZ，钢丝沿 +X 方向扫过泡沫块。
- parallel_rails: 两条平行直线折线，沿 Z 方向延伸、沿 Y 方向偏置（倾角恒为 0）
- skewed_rails: 两条折线按不同间距采样，需要截面求交重新同步
- dual_bspline_rails: 双三次 B 样条导轨（扭曲的直纹面）
"""

import numpy as np
from scipy.interpolate import BSpline

from ..core.drive_curve import DriveCurve


def parallel_rails(
    num_points: int = 3,
    spacing: float = 5.0,
    pitch: float = 1.0,
) -> tuple[np.ndarray, np.ndarray]:
    """
    两条平行直线导轨。

    两条导轨上对应点到切割平面的距离始终相同，全部同步，无需求交。

    Args:
        num_points: 每条导轨点数
        spacing: 两导轨在 Y 方向的间距
        pitch: 相邻点在 Z 方向的间距

    Returns:
        rail_a: (N, 3) 导轨 A
        rail_b: (N, 3) 导轨 B
    """
    z = np.arange(num_points, dtype=float) * pitch
    rail_a = np.column_stack([np.zeros(num_points), np.zeros(num_points), z])
    rail_b = np.column_stack([np.zeros(num_points), np.full(num_points, spacing), z])
    return rail_a, rail_b


def skewed_rails(
    num_a: int = 9,
    num_b: int = 5,
    length: float = 8.0,
) -> tuple[np.ndarray, np.ndarray]:
    """
    按不同间距采样的两条导轨。

    导轨 A 为 Z=0 平面内的弧形，导轨 B 为 Z=4 高度的直线，两者沿 +X 延伸但
    采样点 X 坐标不一致，需要重新同步。

    Args:
        num_a: 导轨 A 点数
        num_b: 导轨 B 点数
        length: 沿 X 方向长度

    Returns:
        rail_a: (num_a, 3)
        rail_b: (num_b, 3)
    """
    xa = np.linspace(0.0, length, num_a)
    rail_a = np.column_stack([xa, 0.5 * np.sin(np.pi * xa / length), np.zeros(num_a)])

    xb = np.linspace(0.0, length, num_b)
    rail_b = np.column_stack([xb, np.full(num_b, 2.0), np.full(num_b, 4.0)])
    return rail_a, rail_b


# 节点向量 (Knot vector)
_KNOT_VECTOR = np.array([0, 0, 0, 0, 0.25, 0.5, 0.75, 1, 1, 1, 1], dtype=np.float64)
_DEGREE = 3

# 底部导轨控制点 (N, 3)
_CTRL_PTS_A = np.array(
    [
        [0.0, 0.0, 0.0],
        [3.0, 0.5, 0.0],
        [6.0, 1.5, 0.2],
        [9.0, 1.0, 0.5],
        [12.0, 0.5, 0.5],
        [15.0, 0.0, 0.2],
        [18.0, 0.0, 0.0],
    ],
    dtype=np.float64,
)

# 顶部导轨控制点 (N, 3)，相对底部导轨绕 X 轴扭转
_CTRL_PTS_B = np.array(
    [
        [0.0, 1.0, 6.0],
        [4.0, 2.0, 6.0],
        [7.0, 3.5, 5.8],
        [10.0, 4.5, 5.5],
        [13.0, 5.5, 5.0],
        [16.0, 6.5, 4.5],
        [18.0, 7.0, 4.0],
    ],
    dtype=np.float64,
)


def dual_bspline_rails() -> tuple[DriveCurve, DriveCurve]:
    """
    获取双三次 B 样条导轨。

    Returns:
        rail_a: 底部导轨
        rail_b: 顶部导轨
    """
    rail_a = DriveCurve(BSpline(_KNOT_VECTOR, _CTRL_PTS_A, _DEGREE))
    rail_b = DriveCurve(BSpline(_KNOT_VECTOR, _CTRL_PTS_B, _DEGREE))
    return rail_a, rail_b


if __name__ == "__main__":
    rail_a, rail_b = dual_bspline_rails()
    pts_a = rail_a.flatten(0.01, 0.01, 0.01, 1000)
    pts_b = rail_b.flatten(0.01, 0.01, 0.01, 1000)
    print("=== 双B样条导轨 ===")
    print(f"导轨 A 离散点数: {len(pts_a)}")
    print(f"导轨 B 离散点数: {len(pts_b)}")
    print(f"X 范围: [{pts_a[:, 0].min():.1f}, {pts_a[:, 0].max():.1f}]")
