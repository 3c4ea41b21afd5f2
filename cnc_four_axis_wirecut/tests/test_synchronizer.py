"""
synchronizer 模块单元测试
"""

import numpy as np
import pytest

from cnc_four_axis_wirecut.core.drive_curve import PlaneIntersection, intersect_with_plane
from cnc_four_axis_wirecut.core.synchronizer import (
    DriveCurveSample,
    Role,
    SyncStats,
    synchronize,
)
from cnc_four_axis_wirecut.datasets import parallel_rails, skewed_rails
from cnc_four_axis_wirecut.errors import UnsupportedIntersectionError
from cnc_four_axis_wirecut.utils.geometry import Plane


class CountingOracle:
    """记录调用次数的求交接口"""

    def __init__(self, result=None, delegate=None):
        self.calls = 0
        self.result = result
        self.delegate = delegate

    def __call__(self, curve, plane, tolerance):
        self.calls += 1
        if self.delegate is not None:
            return self.delegate(curve, plane, tolerance)
        return self.result


class TestInSync:
    """同步直通测试"""

    def test_identical_curves_pass_through(self):
        """测试相同导轨原样产出，不调用求交"""
        points = np.array([[0.0, 0.0, 0.0], [1.0, 0.5, 0.2], [2.5, 1.0, 0.1], [4.0, 0.0, 0.0]])
        oracle = CountingOracle()
        steps = list(
            synchronize(DriveCurveSample(points), DriveCurveSample(points.copy()), oracle, Plane.world_yz(), 0.01)
        )

        assert len(steps) == len(points)
        assert oracle.calls == 0
        for step, p in zip(steps, points):
            np.testing.assert_array_equal(step.point_a, p)
            np.testing.assert_array_equal(step.point_b, p)
            assert step.drive is None

    def test_parallel_rails_three_pairs(self):
        """测试平行导轨产生 3 个同步点对"""
        rail_a, rail_b = parallel_rails()
        oracle = CountingOracle()
        stats = SyncStats()
        steps = list(
            synchronize(DriveCurveSample(rail_a), DriveCurveSample(rail_b), oracle, Plane.world_yz(), 0.01, stats)
        )

        assert len(steps) == 3
        assert oracle.calls == 0
        assert stats.in_sync == 3
        assert stats.resynchronized == 0

    def test_single_point_samples(self):
        """测试单点导轨"""
        a = DriveCurveSample(np.array([[0.0, 0.0, 0.0]]))
        b = DriveCurveSample(np.array([[0.0, 1.0, 1.0]]))
        steps = list(synchronize(a, b, CountingOracle(), Plane.world_yz(), 0.01))
        assert len(steps) == 1


class TestResynchronization:
    """截面求交重新同步测试"""

    def test_skewed_rails_resync(self):
        """测试不等距采样导轨通过求交重新同步"""
        rail_a, rail_b = skewed_rails(num_a=9, num_b=5, length=8.0)
        oracle = CountingOracle(delegate=intersect_with_plane)
        stats = SyncStats()
        steps = list(
            synchronize(DriveCurveSample(rail_a), DriveCurveSample(rail_b), oracle, Plane.world_yz(), 0.01, stats)
        )

        assert len(steps) == 9
        assert oracle.calls == 4
        assert stats.resynchronized == 4
        assert stats.fallbacks == 0

        for step in steps:
            # 同一截面
            assert np.isclose(step.point_a[0], step.point_b[0], atol=1e-9)
            # 远端点落在导轨 B 上
            np.testing.assert_allclose(step.point_b[1:], [2.0, 4.0])

        drives = [s.drive for s in steps if s.drive is not None]
        assert drives == [Role.A] * 4

    def test_drive_is_smaller_distance(self):
        """测试距离较小的导轨为驱动导轨"""
        a = DriveCurveSample(np.array([[0.0, 0.0, 0.0], [2.0, 0.0, 0.0]]))
        b = DriveCurveSample(np.array([[1.0, 1.0, 1.0], [3.0, 1.0, 1.0]]))
        hit = PlaneIntersection(np.array([0.0, 1.0, 1.0]))
        oracle = CountingOracle(result=[hit])
        first = next(iter(synchronize(a, b, oracle, Plane.world_yz(), 0.01)))

        assert first.drive is Role.A
        np.testing.assert_array_equal(first.point_a, [0.0, 0.0, 0.0])
        np.testing.assert_array_equal(first.point_b, [0.0, 1.0, 1.0])

    def test_far_cursor_not_advanced(self):
        """测试远端游标不前进"""
        a = DriveCurveSample(np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [2.0, 0.0, 0.0]]))
        b = DriveCurveSample(np.array([[0.0, 1.0, 1.0], [2.0, 1.0, 1.0]]))
        steps = list(synchronize(a, b, intersect_with_plane, Plane.world_yz(), 0.01))

        assert [s.drive for s in steps] == [None, Role.A, None]
        np.testing.assert_allclose(steps[1].point_b, [1.0, 1.0, 1.0])
        np.testing.assert_allclose(steps[2].point_b, [2.0, 1.0, 1.0])

    def test_missing_intersection_falls_back(self):
        """测试无交点时退化为最近点投影"""
        a = DriveCurveSample(np.array([[0.0, 0.0, 0.0], [2.0, 0.0, 0.0]]))
        b = DriveCurveSample(np.array([[1.0, 1.0, 1.0], [3.0, 1.0, 1.0]]))
        stats = SyncStats()
        first = next(iter(synchronize(a, b, CountingOracle(result=None), Plane.world_yz(), 0.01, stats)))

        np.testing.assert_allclose(first.point_b, [0.0, 1.0, 1.0])
        assert stats.fallbacks == 1

    def test_nearest_of_multiple_hits(self):
        """测试多个交点时取最近者"""
        a = DriveCurveSample(np.array([[0.0, 0.0, 0.0], [2.0, 0.0, 0.0]]))
        b = DriveCurveSample(np.array([[1.0, 1.0, 1.0], [3.0, 1.0, 1.0]]))
        hits = [PlaneIntersection(np.array([0.0, 9.0, 9.0])), PlaneIntersection(np.array([0.0, 1.0, 1.2]))]
        first = next(iter(synchronize(a, b, CountingOracle(result=hits), Plane.world_yz(), 0.01)))
        np.testing.assert_allclose(first.point_b, [0.0, 1.0, 1.2])

    def test_overlap_raises(self):
        """测试重叠时抛出 UnsupportedIntersectionError"""
        a = DriveCurveSample(np.array([[0.0, 0.0, 0.0], [2.0, 0.0, 0.0]]))
        b = DriveCurveSample(np.array([[1.0, 1.0, 1.0], [3.0, 1.0, 1.0]]))
        overlap = [PlaneIntersection(np.array([0.0, 1.0, 1.0]), is_point=False)]
        with pytest.raises(UnsupportedIntersectionError):
            list(synchronize(a, b, CountingOracle(result=overlap), Plane.world_yz(), 0.01))


class TestDriveCurveSample:
    """导轨采样测试"""

    def test_default_source_is_polyline(self):
        """测试缺省求交对象为折线"""
        sample = DriveCurveSample([[0, 0, 0], [1, 0, 0]])
        assert sample.segment_count == 1
        assert sample.source.intersect_plane(Plane.world_yz(), 0.01) is not None

    def test_bad_shape_rejected(self):
        """测试非法形状"""
        with pytest.raises(ValueError):
            DriveCurveSample(np.zeros((3, 2)))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
