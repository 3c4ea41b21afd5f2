"""
utils 模块单元测试
"""

import numpy as np
import pytest

from cnc_four_axis_wirecut.utils.geometry import (
    Plane,
    invert_transform,
    is_parallel,
    is_perpendicular,
    normalize,
    plane_to_plane,
    rotate_about_axis,
    transform_points,
    vector_angle,
)


class TestVectors:
    """向量工具函数测试"""

    def test_normalize_single_vector(self):
        """测试单向量归一化"""
        v = np.array([3.0, 4.0, 0.0])
        result = normalize(v)
        assert np.isclose(np.linalg.norm(result), 1.0)
        np.testing.assert_allclose(result, [0.6, 0.8, 0.0])

    def test_normalize_batch(self):
        """测试批量向量归一化"""
        vectors = np.array([[3.0, 4.0, 0.0], [0.0, 0.0, 5.0]])
        result = normalize(vectors)
        norms = np.linalg.norm(result, axis=1)
        np.testing.assert_allclose(norms, [1.0, 1.0])

    def test_vector_angle(self):
        """测试向量夹角 [0, 180]"""
        x = np.array([1.0, 0.0, 0.0])
        assert np.isclose(vector_angle(x, x), 0.0)
        assert np.isclose(vector_angle(x, [0.0, 2.0, 0.0]), 90.0)
        assert np.isclose(vector_angle(x, [-1.0, 0.0, 0.0]), 180.0)
        assert np.isclose(vector_angle(x, [1.0, 1.0, 0.0]), 45.0)

    def test_parallel_and_perpendicular(self):
        """测试平行/垂直判定"""
        assert is_parallel([1, 0, 0], [-3, 0, 0])
        assert not is_parallel([1, 0, 0], [1, 1, 0])
        assert is_perpendicular([1, 0, 0], [0, 0, 2])
        assert not is_perpendicular([1, 0, 0], [1, 1, 0])

    def test_rotate_about_axis(self):
        """测试绕轴旋转"""
        result = rotate_about_axis([0.0, 1.0, 0.0], [1.0, 0.0, 0.0], 90.0)
        np.testing.assert_allclose(result, [0.0, 0.0, 1.0], atol=1e-12)


class TestPlane:
    """平面测试"""

    def test_world_yz_frame(self):
        """测试世界 YZ 平面标架"""
        yz = Plane.world_yz()
        np.testing.assert_allclose(yz.x_axis, [0, 1, 0])
        np.testing.assert_allclose(yz.y_axis, [0, 0, 1])
        np.testing.assert_allclose(yz.normal, [1, 0, 0])

    def test_distance_and_closest_point(self):
        """测试有符号距离与最近点"""
        yz = Plane.world_yz()
        p = np.array([3.0, 1.0, 2.0])
        assert np.isclose(yz.distance_to(p), 3.0)
        assert np.isclose(yz.distance_to(-p), -3.0)
        np.testing.assert_allclose(yz.closest_point(p), [0.0, 1.0, 2.0])

    def test_project_vector(self):
        """测试向量投影到平面内"""
        yz = Plane.world_yz()
        np.testing.assert_allclose(yz.project_vector([5.0, 1.0, -1.0]), [0.0, 1.0, -1.0])

    def test_from_normal_is_orthonormal(self):
        """测试由法向构造的平面标架正交"""
        plane = Plane.from_normal([1.0, 2.0, 3.0], [1.0, 1.0, 0.0])
        assert np.isclose(np.dot(plane.x_axis, plane.y_axis), 0.0)
        np.testing.assert_allclose(plane.normal, normalize([1.0, 1.0, 0.0]), atol=1e-12)

    def test_y_axis_orthogonalized(self):
        """测试 y 轴被正交化"""
        plane = Plane(np.zeros(3), [1.0, 0.0, 0.0], [1.0, 1.0, 0.0])
        np.testing.assert_allclose(plane.y_axis, [0.0, 1.0, 0.0], atol=1e-12)


class TestTransforms:
    """刚体变换测试"""

    def test_plane_to_plane_maps_origin_and_axes(self):
        """测试平面到平面变换映射原点与坐标轴"""
        source = Plane([10.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0])
        target = Plane.world_yz()
        M = plane_to_plane(source, target)

        np.testing.assert_allclose(transform_points(M, source.origin), target.origin, atol=1e-12)
        p = source.origin + 2 * source.x_axis + 3 * source.y_axis
        np.testing.assert_allclose(
            transform_points(M, p), 2 * target.x_axis + 3 * target.y_axis, atol=1e-12
        )

    def test_identity_for_same_plane(self):
        """测试同一平面变换为单位阵"""
        yz = Plane.world_yz()
        np.testing.assert_allclose(plane_to_plane(yz, yz), np.eye(4), atol=1e-12)

    def test_inverse_roundtrip(self):
        """测试逆变换"""
        M = plane_to_plane(Plane.from_normal([1.0, 2.0, 3.0], [0.0, 1.0, 1.0]), Plane.world_yz())
        points = np.random.rand(10, 3)
        back = transform_points(invert_transform(M), transform_points(M, points))
        np.testing.assert_allclose(back, points, atol=1e-10)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
