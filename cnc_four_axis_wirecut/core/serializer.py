"""
serializer - 运动表与指令文本互转

指令文本每行一条:

    <前缀><轴标签><值> ...[<进给标签><速度>]

首行为程序头（如 G54），末行为程序尾（如 M30）。
与上一行相同的轴省略不写；进给速度只在进入一段切削时给出一次。
"""

import logging
import re
from pathlib import Path
from typing import Iterable

from ..config import WirecutConfig
from .motion_table import MotionTable
from .pose import MoveType, Pose

logger = logging.getLogger(__name__)

_NUMBER = r"([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)"


def format_value(value: float, decimals: int) -> str:
    """按固定小数位格式化，消除 -0。"""
    text = f"{value:.{decimals}f}"
    if text.startswith("-") and float(text) == 0:
        text = text[1:]
    return text


def render_instructions(table: Iterable[Pose], config: WirecutConfig) -> list[str]:
    """
    将运动表渲染为指令行。

    Args:
        table: 位姿序列
        config: 机床配置

    Returns:
        lines: 程序头 + 各位姿指令 + 程序尾
    """
    decimals = config.decimals
    lines = [config.header]
    previous: Pose | None = None
    previous_values: list[str] | None = None

    for pose in table:
        if pose.move_type.is_rapid or previous is None:
            line = config.rapid_prefix
        else:
            line = config.cut_prefix

        values = [format_value(v, decimals) for v in pose.coordinates]
        for i, (label, value) in enumerate(zip(config.axis_labels, values)):
            if previous_values is None or value != previous_values[i]:
                line += f"{label}{value} "

        # 进给只在一段切削的首行给出，连续切削行沿用模态进给
        if not pose.move_type.is_rapid and (previous is None or previous.move_type.is_rapid):
            line += f"{config.feed_prefix}{config.cutting_speed}"

        lines.append(line.rstrip())
        previous = pose
        previous_values = values

    lines.append(config.footer)
    return lines


def write_instructions(table: Iterable[Pose], config: WirecutConfig, path: str | Path) -> Path:
    """渲染并写入指令文件。"""
    path = Path(path)
    lines = render_instructions(table, config)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    logger.info("Wrote %d instruction lines to %s", len(lines), path)
    return path


def parse_instructions(lines: Iterable[str], config: WirecutConfig) -> MotionTable:
    """
    将指令行解析回运动表。

    程序头与程序尾跳过；以快速移动前缀开头的行记为 Retract，其余记为 Cut；
    某轴未出现时沿用上一行的值。

    Args:
        lines: 指令行
        config: 机床配置

    Returns:
        MotionTable
    """
    patterns = [re.compile(re.escape(label) + r"\s*" + _NUMBER) for label in config.axis_labels]
    rapid = config.rapid_prefix.strip()
    current = [0.0, 0.0, 0.0, 0.0]
    poses = []

    for raw in lines:
        line = raw.rstrip("\r\n")
        stripped = line.strip()
        if not stripped or stripped in (config.header.strip(), config.footer.strip()):
            continue

        move_type = MoveType.RETRACT if rapid and stripped.startswith(rapid) else MoveType.CUT
        for i, pattern in enumerate(patterns):
            match = pattern.search(line)
            if match:
                current[i] = float(match.group(1))

        poses.append(Pose(*current, move_type=move_type))

    logger.debug("Parsed %d poses from instruction text", len(poses))
    return MotionTable(poses)


def load_instructions(path: str | Path, config: WirecutConfig) -> MotionTable:
    """
    读取指令文件。

    Raises:
        FileNotFoundError: 文件不存在
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Cannot find toolpath file at: '{path}'")
    with path.open("r", encoding="utf-8") as f:
        return parse_instructions(f, config)
