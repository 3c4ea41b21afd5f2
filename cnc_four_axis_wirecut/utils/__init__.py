"""
utils - 工具函数模块

包含:
- geometry: 向量、平面与刚体变换
"""

from .geometry import Plane, normalize, plane_to_plane, transform_points, vector_angle

__all__ = [
    "Plane",
    "normalize",
    "plane_to_plane",
    "transform_points",
    "vector_angle",
]
