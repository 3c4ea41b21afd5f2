"""
algorithm - 四轴线切割刀路生成主流程

将描述直纹面的两条导轨（或一组显式钢丝引导线）转换为四轴线切割机的运动程序:
三个直线轴 (X, Y, Z) 加一个钢丝倾角旋转轴。

流程:
1. 校验任务表，解析曲线
2. 将曲线从基准平面变换到标准切割平面 (世界 YZ)
3. 离散导轨并同步遍历
4. 计算位姿、去重，写入运动表
5. 渲染为指令文本
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Sequence

import numpy as np

from .config import WirecutConfig
from .core.drive_curve import flatten_curve, intersect_with_plane
from .core.motion_table import MotionTable, append_single, build_motion_table
from .core.pose import ContinuityState, MoveType, calculate_pose
from .core.serializer import load_instructions, render_instructions, write_instructions
from .core.synchronizer import DriveCurveSample, IntersectionOracle, SyncStats, synchronize
from .errors import InvalidCurveError, MissingInputFieldError, UnsupportedOperationError
from .utils.geometry import (
    Plane,
    invert_transform,
    plane_to_plane,
    rotate_about_axis,
    transform_points,
)

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("Type", "Curve0", "Curve1", "Extend")

# 单曲线特例: 不经同步，由曲线首末点直接生成一条位姿
SINGLE = "Single"


@dataclass(frozen=True)
class JobRow:
    """
    任务表中的一行。

    Attributes:
        type: 刀路类型 (Cut / Rapid / Drive / Retract / Single)
        curve0: 导轨 A 的曲线 ID 或曲线对象
        curve1: 导轨 B 的曲线 ID 或曲线对象
        extend: 是否将曲线延伸到边界（未实现）
    """

    type: str
    curve0: Any
    curve1: Any
    extend: bool = False


def validate_job_table(rows: Iterable[Mapping[str, Any] | JobRow]) -> list[JobRow]:
    """
    校验任务表的列结构。

    Raises:
        MissingInputFieldError: 任一行缺少 Type / Curve0 / Curve1 / Extend
    """
    jobs = []
    for index, row in enumerate(rows):
        if isinstance(row, JobRow):
            jobs.append(row)
            continue
        for column in REQUIRED_COLUMNS:
            if column not in row:
                raise MissingInputFieldError(
                    f"Input job table is missing column: {column} (row {index})"
                )
        jobs.append(
            JobRow(
                type=str(row["Type"]),
                curve0=row["Curve0"],
                curve1=row["Curve1"],
                extend=bool(row["Extend"]),
            )
        )
    return jobs


def _job_move_type(job_type: str) -> MoveType:
    try:
        return MoveType(job_type)
    except ValueError:
        raise UnsupportedOperationError(f"Unknown toolpath type: {job_type!r}") from None


class Wirecutter:
    """
    四轴线切割刀路生成器。

    Attributes:
        config: 机床配置
        cut_plane: 标准切割平面（世界 YZ）
        base_plane: 输入几何所在的基准平面
        xform: 基准平面到切割平面的 4x4 变换
        motion_table: 最近一次成功生成或加载的运动表
        sync_stats: 最近一次生成的同步统计
        file_path: 最近一次写入或加载的指令文件
    """

    def __init__(
        self,
        config: WirecutConfig | None = None,
        base_plane: Plane | None = None,
        curve_lookup: Mapping[Any, Any] | None = None,
        intersect: IntersectionOracle = intersect_with_plane,
        flatten: Callable[..., np.ndarray] = flatten_curve,
    ):
        """
        Args:
            config: 机床配置，缺省使用默认值
            base_plane: 输入几何的基准平面，缺省为世界 YZ（不变换）
            curve_lookup: 曲线 ID -> 曲线对象（宿主文档）
            intersect: 曲线-平面求交接口
            flatten: 曲线离散接口
        """
        self.config = config or WirecutConfig()
        self.cut_plane = Plane.world_yz()
        self.base_plane = base_plane or Plane.world_yz()
        self.xform = plane_to_plane(self.base_plane, self.cut_plane)
        self.curve_lookup = curve_lookup if curve_lookup is not None else {}
        self.intersect = intersect
        self.flatten = flatten

        self.motion_table = MotionTable()
        self.sync_stats = SyncStats()
        self.file_path: Path | None = None

    def _resolve_curve(self, curve_id: Any):
        """解析曲线 ID 并变换到切割平面坐标系。"""
        if hasattr(curve_id, "flatten"):
            curve = curve_id
        else:
            try:
                curve = self.curve_lookup[curve_id]
            except (KeyError, TypeError):
                raise InvalidCurveError(f"Object Id: {curve_id} is not a valid Curve.") from None

        if not (hasattr(curve, "flatten") and hasattr(curve, "transformed")):
            raise InvalidCurveError(f"Object Id: {curve_id} is not a valid Curve.")
        return curve.transformed(self.xform)

    def _sample(self, curve) -> DriveCurveSample:
        tol = self.config.tolerance
        points = self.flatten(curve, tol, tol, tol, self.config.max_segments)
        return DriveCurveSample(points, source=curve)

    def generate(self, rows: Iterable[Mapping[str, Any] | JobRow]) -> MotionTable:
        """
        按任务表生成运动表。

        任何异常都会中止本次生成，已有的 motion_table 保持不变。

        Args:
            rows: 任务表，每行含 Type / Curve0 / Curve1 / Extend

        Returns:
            新生成的运动表

        Raises:
            MissingInputFieldError, UnsupportedOperationError, InvalidCurveError,
            UnsupportedIntersectionError, DegenerateVectorError, AngleResolutionError
        """
        jobs = validate_job_table(rows)
        config = self.config
        table = MotionTable()
        stats = SyncStats()
        continuity = ContinuityState.initial(config.retract_offset)

        for index, job in enumerate(jobs):
            if job.extend:
                raise UnsupportedOperationError(
                    "Method for extending curves has not yet been implemented."
                )

            if job.type == SINGLE:
                points = self._sample(self._resolve_curve(job.curve0)).points
                continuity = append_single(
                    points[0], points[-1], config, self.cut_plane, continuity, table
                )
                logger.debug("Job %d: single-curve pose", index)
                continue

            move_type = _job_move_type(job.type)
            sample_a = self._sample(self._resolve_curve(job.curve0))
            sample_b = self._sample(self._resolve_curve(job.curve1))
            steps = synchronize(
                sample_a, sample_b, self.intersect, self.cut_plane, config.tolerance, stats
            )
            before = len(table)
            table, continuity = build_motion_table(
                steps, move_type, config, self.cut_plane, continuity, table
            )
            logger.info(
                "Job %d (%s): %d + %d rail points -> %d poses",
                index,
                move_type.value,
                len(sample_a.points),
                len(sample_b.points),
                len(table) - before,
            )

        if stats.fallbacks:
            logger.warning(
                "%d synchronization steps fell back to closest-point projection", stats.fallbacks
            )

        self.motion_table = table
        self.sync_stats = stats
        return table

    def drive_curves_to_toolpath(
        self, rows: Iterable[Mapping[str, Any] | JobRow], path: str | Path
    ) -> Path:
        """
        生成刀路并写入指令文件。生成失败时不写文件。

        Returns:
            写入的文件路径
        """
        table = self.generate(rows)
        self.file_path = write_instructions(table, self.config, path)
        return self.file_path

    def lines_to_toolpath(
        self,
        lines: Sequence[tuple[np.ndarray, np.ndarray]],
        types: Sequence[str] | None = None,
    ) -> MotionTable:
        """
        按一组钢丝引导线生成运动表。

        每条线的中点为位置，端点方向决定倾角。

        Args:
            lines: [(start, end), ...] 基准平面坐标系下的引导线
            types: 与 lines 等长时，"Retract" 的线生成快速移动，其余为 Drive；
                   长度不等时全部为 Drive

        Returns:
            新生成的运动表
        """
        config = self.config
        types = list(types or [])
        table = MotionTable()
        continuity = ContinuityState.initial(config.retract_offset)

        for i, (start, end) in enumerate(lines):
            p0 = transform_points(self.xform, np.asarray(start, dtype=float))
            p1 = transform_points(self.xform, np.asarray(end, dtype=float))
            if len(types) == len(lines) and types[i] == MoveType.RETRACT.value:
                move_type = MoveType.RETRACT
            else:
                move_type = MoveType.DRIVE
            pose, continuity = calculate_pose(
                p0, p1, continuity, config, self.cut_plane, move_type
            )
            table.append(pose, config.tolerance, config.decimals)

        self.motion_table = table
        self.sync_stats = SyncStats()
        return table

    def render(self) -> list[str]:
        """将当前运动表渲染为指令行。"""
        return render_instructions(self.motion_table, self.config)

    def load_nc_file(self, path: str | Path) -> MotionTable:
        """加载指令文件为当前运动表。"""
        self.motion_table = load_instructions(path, self.config)
        self.file_path = Path(path)
        return self.motion_table

    def toolpath_to_lines(self, on_origin: bool = True, line_length: float = 6.0) -> np.ndarray:
        """
        生成表示各位姿钢丝的线段，用于预览。

        Args:
            on_origin: True 时位于切割平面坐标系，否则变换回基准平面
            line_length: 钢丝半长

        Returns:
            segments: (N, 2, 3) 每个位姿的钢丝线段端点
        """
        inverse = invert_transform(self.xform)
        segments = np.zeros((len(self.motion_table), 2, 3))
        for i, pose in enumerate(self.motion_table):
            center = np.array([pose.x, pose.y, pose.z])
            direction = rotate_about_axis(self.cut_plane.x_axis, self.cut_plane.normal, pose.angle)
            ends = np.array([center + direction * line_length, center - direction * line_length])
            if not on_origin:
                ends = transform_points(inverse, ends)
            segments[i] = ends
        return segments

    def __repr__(self) -> str:
        return (
            f"Wirecutter(poses={len(self.motion_table)}, "
            f"tolerance={self.config.tolerance}, fallbacks={self.sync_stats.fallbacks})"
        )


if __name__ == "__main__":
    from cnc_four_axis_wirecut.datasets import dual_bspline_rails

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    rail_a, rail_b = dual_bspline_rails()

    print("=== 四轴线切割刀路生成测试 ===")
    cutter = Wirecutter(curve_lookup={"root": rail_a, "tip": rail_b})
    table = cutter.generate([{"Type": "Cut", "Curve0": "root", "Curve1": "tip", "Extend": False}])

    print(f"位姿数: {len(table)}")
    print(f"同步: {cutter.sync_stats}")
    angles = table.to_array()[:, 3]
    print(f"倾角范围: [{angles.min():.3f}, {angles.max():.3f}]°")
    print(f"最大单步转角: {np.max(np.abs(np.diff(angles))):.3f}°")

    for line in cutter.render()[:6]:
        print(line)
