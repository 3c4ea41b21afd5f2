"""
angle_solver 模块单元测试
"""

import numpy as np
import pytest

from cnc_four_axis_wirecut.core.angle_solver import resolve_angle
from cnc_four_axis_wirecut.errors import AngleResolutionError, DegenerateVectorError
from cnc_four_axis_wirecut.utils.geometry import Plane


def in_plane(plane: Plane, deg: float) -> np.ndarray:
    rad = np.radians(deg)
    return np.cos(rad) * plane.x_axis + np.sin(rad) * plane.y_axis


class TestResolveAngle:
    """倾角求解测试"""

    @pytest.mark.parametrize("deg", [0, 37, 90, 143, 200, 315])
    def test_known_angles(self, deg):
        """测试已知角度往返"""
        yz = Plane.world_yz()
        angle = resolve_angle(in_plane(yz, deg), yz)
        assert 0 <= angle < 360
        assert np.isclose(angle, deg, atol=1e-6)

    def test_all_quadrants_dense(self):
        """测试各象限连续取值"""
        yz = Plane.world_yz()
        for deg in np.arange(0.5, 360, 7.25):
            assert np.isclose(resolve_angle(in_plane(yz, deg), yz), deg, atol=1e-6)

    def test_quadrant_boundaries(self):
        """测试象限边界 180°, 270°"""
        yz = Plane.world_yz()
        assert np.isclose(resolve_angle(-yz.x_axis, yz), 180.0)
        assert np.isclose(resolve_angle(-yz.y_axis, yz), 270.0)

    def test_axis_aligned_exact(self):
        """测试轴向对齐直接返回 0 / 90"""
        yz = Plane.world_yz()
        assert resolve_angle(yz.x_axis * 5, yz) == 0.0
        assert resolve_angle(yz.y_axis * 0.1, yz) == 90.0

    def test_out_of_plane_drift_is_projected(self):
        """测试离面分量被投影消除"""
        yz = Plane.world_yz()
        v = in_plane(yz, 143) + 0.3 * yz.normal
        assert np.isclose(resolve_angle(v, yz), 143.0, atol=1e-6)

    def test_arbitrary_plane(self):
        """测试任意平面"""
        plane = Plane.from_normal([1.0, 2.0, 3.0], [1.0, 1.0, 1.0])
        assert np.isclose(resolve_angle(in_plane(plane, 222), plane), 222.0, atol=1e-6)

    def test_parallel_to_normal_raises(self):
        """测试与法向平行时抛出 DegenerateVectorError"""
        yz = Plane.world_yz()
        with pytest.raises(DegenerateVectorError):
            resolve_angle(yz.normal * 2, yz)
        with pytest.raises(DegenerateVectorError):
            resolve_angle(-yz.normal, yz)

    def test_zero_vector_raises(self):
        """测试零向量"""
        with pytest.raises(DegenerateVectorError):
            resolve_angle(np.zeros(3), Plane.world_yz())

    def test_negative_tolerance_fails_resolution(self):
        """测试容差过紧时抛出 AngleResolutionError"""
        yz = Plane.world_yz()
        with pytest.raises(AngleResolutionError):
            resolve_angle(in_plane(yz, 37), yz, angle_tolerance=-1.0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
