"""
datasets - 测试数据集

包含:
- ruled_surfaces: 平行导轨、不等距采样导轨、双B样条导轨
"""

from .ruled_surfaces import (
    dual_bspline_rails,
    parallel_rails,
    skewed_rails,
)

__all__ = [
    "dual_bspline_rails",
    "parallel_rails",
    "skewed_rails",
]
