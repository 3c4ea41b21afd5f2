"""
config - 线切割刀路配置

WirecutConfig 为不可变数据类，在一次刀路生成过程中保持不变。
YAML 读写通过 _FIELD_TAGS 显式声明字段名与 YAML 标签的对应关系，不依赖反射枚举属性。

用法::

    from cnc_four_axis_wirecut.config import load_config, save_config
    cfg = load_config("machine.yaml")
    save_config(cfg, "backup.yaml")
"""

import logging
import math
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)


def tolerance_decimals(tolerance: float) -> int:
    """容差对应的小数位数: max(0, -floor(log10(tolerance)))。"""
    return max(0, -math.floor(math.log10(tolerance)))


@dataclass(frozen=True)
class WirecutConfig:
    """
    四轴线切割机床参数。

    Attributes:
        tolerance: 最小有效尺寸，决定圆整位数与去重阈值
        cutting_speed: 切削进给速度 (inch/min)
        rapid_prefix: 快速移动指令前缀
        cut_prefix: 切削移动指令前缀
        feed_prefix: 进给速度标签
        header: 程序头（坐标系偏置指令）
        footer: 程序尾（程序结束指令）
        axis_labels: X, Y, Z, 旋转轴 四个轴标签
        angle_tolerance: 象限判别的绝对角度容差 (deg)
        max_segments: 曲线离散化的最大段数
        retract_offset: 初始位置在 X 方向的退刀偏置
    """

    tolerance: float = 0.01
    cutting_speed: int = 200
    rapid_prefix: str = "G00   "
    cut_prefix: str = "G01   "
    feed_prefix: str = "F"
    header: str = "G54"
    footer: str = "M30"
    axis_labels: tuple = ("X ", "Y ", "Z ", "Q1=")
    angle_tolerance: float = 1e-3
    max_segments: int = 1000
    retract_offset: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "axis_labels", tuple(self.axis_labels))
        validate_config(self)

    @property
    def decimals(self) -> int:
        """由容差推导的小数位数: max(0, -floor(log10(tolerance)))。"""
        return tolerance_decimals(self.tolerance)

    def with_overrides(self, **kwargs) -> "WirecutConfig":
        return replace(self, **kwargs)


# 字段名 <-> YAML 标签
_FIELD_TAGS: dict[str, str] = {
    "tolerance": "tolerance",
    "cutting_speed": "cutting_speed",
    "rapid_prefix": "rapid_prefix",
    "cut_prefix": "cut_prefix",
    "feed_prefix": "feed_prefix",
    "header": "nc_header",
    "footer": "nc_footer",
    "axis_labels": "axis_labels",
    "angle_tolerance": "angle_tolerance_deg",
    "max_segments": "max_segments",
    "retract_offset": "retract_offset",
}
_TAG_FIELDS: dict[str, str] = {tag: name for name, tag in _FIELD_TAGS.items()}


def validate_config(config: WirecutConfig) -> None:
    """
    校验配置取值。

    Raises:
        ConfigError: 任一字段取值非法
    """
    if not isinstance(config.tolerance, (int, float)) or not config.tolerance > 0:
        raise ConfigError(f"tolerance must be positive, got {config.tolerance!r}")
    if isinstance(config.cutting_speed, bool) or not isinstance(config.cutting_speed, int):
        raise ConfigError(f"cutting_speed must be an integer, got {config.cutting_speed!r}")
    if config.cutting_speed <= 0:
        raise ConfigError(f"cutting_speed must be positive, got {config.cutting_speed}")
    if len(config.axis_labels) != 4:
        raise ConfigError(
            f"axis_labels must name exactly 4 axes (X, Y, Z, rotary), got {len(config.axis_labels)}"
        )
    if not all(isinstance(label, str) and label for label in config.axis_labels):
        raise ConfigError("axis_labels must be non-empty strings")
    if not config.angle_tolerance > 0:
        raise ConfigError(f"angle_tolerance must be positive, got {config.angle_tolerance!r}")
    if isinstance(config.max_segments, bool) or not isinstance(config.max_segments, int):
        raise ConfigError(f"max_segments must be an integer, got {config.max_segments!r}")
    if config.max_segments < 1:
        raise ConfigError(f"max_segments must be at least 1, got {config.max_segments}")


def config_to_dict(config: WirecutConfig) -> dict[str, Any]:
    """按 YAML 标签导出配置字典。"""
    data = {}
    for name, tag in _FIELD_TAGS.items():
        value = getattr(config, name)
        data[tag] = list(value) if isinstance(value, tuple) else value
    return data


def config_from_dict(data: dict[str, Any] | None) -> WirecutConfig:
    """
    由 YAML 标签字典构造配置，缺省标签取默认值。

    Raises:
        ConfigError: 存在未知标签或取值非法
    """
    data = data or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config root must be a mapping, got {type(data).__name__}")

    unknown = sorted(set(data) - set(_TAG_FIELDS))
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")

    kwargs = {_TAG_FIELDS[tag]: value for tag, value in data.items()}
    if "axis_labels" in kwargs:
        if not isinstance(kwargs["axis_labels"], (list, tuple)):
            raise ConfigError("axis_labels must be a list of strings")
        kwargs["axis_labels"] = tuple(kwargs["axis_labels"])
    return WirecutConfig(**kwargs)


def load_config(path: str | Path) -> WirecutConfig:
    """
    从 YAML 文件加载配置。

    Raises:
        FileNotFoundError: 文件不存在
        ConfigError: 解析或校验失败
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse {path}: {exc}") from exc

    config = config_from_dict(data)
    logger.info("Loaded wirecut config from %s (tolerance=%g)", path, config.tolerance)
    return config


def save_config(config: WirecutConfig, path: str | Path) -> Path:
    """将配置写入 YAML 文件。"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(config_to_dict(config), f, sort_keys=False, allow_unicode=True)
    logger.debug("Saved wirecut config to %s", path)
    return path
