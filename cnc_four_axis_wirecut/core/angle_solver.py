"""
angle_solver - 钢丝倾角求解

由方向向量和参考平面求钢丝在平面内的倾角，范围 [0, 360)。

余弦定律 A · B = ||A|| ||B|| cos(θ) 只能给出 [0, 180] 的夹角，
因此分别与平面 X 轴 (水平参考) 和 Y 轴 (竖直参考) 求夹角，
再由两者的和差关系判定象限:

    I   - h + v = 90
    II  - h - v = 90
    III - h + v = 270
    IV  - v - h = 90

           II  |  I
        -------+-------> X (0°)
          III  |  IV
"""

import logging

import numpy as np

from ..errors import AngleResolutionError, DegenerateVectorError
from ..utils.geometry import (
    PARALLEL_TOLERANCE,
    Plane,
    is_perpendicular,
    normalize,
    vector_angle,
)

logger = logging.getLogger(__name__)

# 默认象限判别容差 (deg)
DEFAULT_ANGLE_TOLERANCE = 1e-3


def resolve_angle(
    vector: np.ndarray,
    plane: Plane,
    angle_tolerance: float = DEFAULT_ANGLE_TOLERANCE,
) -> float:
    """
    求方向向量在参考平面内相对 X 轴的角度。

    Args:
        vector: (3,) 钢丝方向向量
        plane: 参考平面（切割平面）
        angle_tolerance: 象限判别的绝对容差 (deg)

    Returns:
        angle: [0, 360) 范围内的角度 (deg)

    Raises:
        DegenerateVectorError: 向量为零或与平面法向平行
        AngleResolutionError: 四个象限关系均不满足
    """
    vector = np.asarray(vector, dtype=float)
    if np.linalg.norm(vector) < PARALLEL_TOLERANCE:
        raise DegenerateVectorError("Cannot resolve the angle of a zero-length vector")

    # 上游浮点误差造成的轻微离面偏移，直接投影回平面
    if not is_perpendicular(vector, plane.normal):
        vector = plane.project_vector(vector)
        if np.linalg.norm(vector) < PARALLEL_TOLERANCE:
            raise DegenerateVectorError(
                f"Vector is parallel to the cut plane normal {plane.normal.tolist()}"
            )

    vector = normalize(vector)

    # 轴向对齐时避免三角函数舍入误差
    if np.allclose(vector, plane.x_axis, atol=PARALLEL_TOLERANCE):
        return 0.0
    if np.allclose(vector, plane.y_axis, atol=PARALLEL_TOLERANCE):
        return 90.0

    h_angle = vector_angle(vector, plane.x_axis)
    v_angle = vector_angle(vector, plane.y_axis)

    if abs(h_angle + v_angle - 90) <= angle_tolerance:
        # 第一象限
        angle = h_angle
    elif abs(h_angle - v_angle - 90) <= angle_tolerance:
        # 第二象限
        angle = 90 + v_angle
    elif abs(h_angle + v_angle - 270) <= angle_tolerance:
        # 第三象限
        angle = 90 + v_angle
    elif abs(v_angle - h_angle - 90) <= angle_tolerance:
        # 第四象限
        angle = 360 - h_angle
    else:
        raise AngleResolutionError(
            f"Unable to resolve wire angle: h={h_angle:.6f}°, v={v_angle:.6f}° "
            f"(tolerance {angle_tolerance}°)"
        )

    # 360 - 0 的边界情况
    return float(angle % 360.0)


if __name__ == "__main__":
    print("=== 倾角求解测试 ===")

    yz = Plane.world_yz()
    for deg in [0, 37, 90, 143, 200, 315]:
        rad = np.radians(deg)
        v = np.cos(rad) * yz.x_axis + np.sin(rad) * yz.y_axis
        print(f"输入 {deg:>3d}° -> 求解 {resolve_angle(v, yz):.6f}°")
