"""
geometry - 几何计算工具函数

提供向量归一化、向量夹角、平面 (Plane) 以及平面到平面的刚体变换等基础几何操作。
"""

from dataclasses import dataclass

import numpy as np

EPSILON = 1e-16

# 判定平行/垂直时使用的数值容差
PARALLEL_TOLERANCE = 1e-12


def normalize(vectors: np.ndarray) -> np.ndarray:
    """
    将向量归一化为单位向量。

    Args:
        vectors: 单个向量 (n,) 或向量数组 (m, n)

    Returns:
        归一化后的单位向量，与输入形状相同
    """
    vectors = np.asarray(vectors, dtype=float)
    if vectors.ndim == 1:
        norm = np.linalg.norm(vectors)
        return vectors / (norm + EPSILON)
    norm = np.linalg.norm(vectors, axis=-1, keepdims=True)
    return vectors / (norm + EPSILON)


def vector_angle(a: np.ndarray, b: np.ndarray) -> float:
    """
    计算两向量夹角（角度制）。

    使用余弦定律:
        A · B = ||A|| * ||B|| * cos(θ)
    结果范围 [0, 180]。

    Args:
        a: (3,) 向量
        b: (3,) 向量

    Returns:
        夹角 (deg)
    """
    cos_theta = np.dot(normalize(a), normalize(b))
    return float(np.degrees(np.arccos(np.clip(cos_theta, -1.0, 1.0))))


def is_parallel(a: np.ndarray, b: np.ndarray, tol: float = PARALLEL_TOLERANCE) -> bool:
    """判断两向量是否平行（同向或反向）。"""
    return bool(np.linalg.norm(np.cross(normalize(a), normalize(b))) <= tol)


def is_perpendicular(a: np.ndarray, b: np.ndarray, tol: float = PARALLEL_TOLERANCE) -> bool:
    """判断两向量是否垂直。"""
    return bool(abs(np.dot(normalize(a), normalize(b))) <= tol)


@dataclass(frozen=True)
class Plane:
    """
    由原点和正交标架定义的平面。

    法向量 normal = x_axis × y_axis（右手系）。

    Attributes:
        origin: (3,) 平面原点
        x_axis: (3,) 平面内 X 方向单位向量
        y_axis: (3,) 平面内 Y 方向单位向量
    """

    origin: np.ndarray
    x_axis: np.ndarray
    y_axis: np.ndarray

    def __post_init__(self):
        x_axis = normalize(self.x_axis)
        # Gram-Schmidt 保证 y 轴与 x 轴正交
        y_axis = np.asarray(self.y_axis, dtype=float)
        y_axis = normalize(y_axis - np.dot(y_axis, x_axis) * x_axis)
        object.__setattr__(self, "origin", np.asarray(self.origin, dtype=float))
        object.__setattr__(self, "x_axis", x_axis)
        object.__setattr__(self, "y_axis", y_axis)

    @property
    def normal(self) -> np.ndarray:
        return np.cross(self.x_axis, self.y_axis)

    @classmethod
    def world_xy(cls) -> "Plane":
        return cls(np.zeros(3), np.array([1.0, 0.0, 0.0]), np.array([0.0, 1.0, 0.0]))

    @classmethod
    def world_yz(cls) -> "Plane":
        """世界 YZ 平面: x_axis = +Y, y_axis = +Z, normal = +X。"""
        return cls(np.zeros(3), np.array([0.0, 1.0, 0.0]), np.array([0.0, 0.0, 1.0]))

    @classmethod
    def from_normal(cls, origin: np.ndarray, normal: np.ndarray) -> "Plane":
        """
        由原点和法向量构造平面，平面内标架任意选取。

        Args:
            origin: (3,) 平面原点
            normal: (3,) 法向量

        Returns:
            Plane 对象
        """
        n = normalize(normal)
        helper = np.array([1.0, 0.0, 0.0]) if abs(n[0]) < 0.9 else np.array([0.0, 1.0, 0.0])
        x_axis = normalize(np.cross(helper, n))
        y_axis = np.cross(n, x_axis)
        return cls(origin, x_axis, y_axis)

    def distance_to(self, point: np.ndarray) -> float:
        """点到平面的有符号距离（沿法向为正）。"""
        return float(np.dot(np.asarray(point, dtype=float) - self.origin, self.normal))

    def closest_point(self, point: np.ndarray) -> np.ndarray:
        """点在平面上的最近点（正交投影）。"""
        point = np.asarray(point, dtype=float)
        return point - self.distance_to(point) * self.normal

    def project_vector(self, vector: np.ndarray) -> np.ndarray:
        """将向量投影到平面内（去除法向分量）。"""
        vector = np.asarray(vector, dtype=float)
        n = self.normal
        return vector - np.dot(vector, n) * n


def plane_frame_matrix(plane: Plane) -> np.ndarray:
    """
    平面局部坐标系到世界坐标系的 4x4 齐次变换矩阵。

    Args:
        plane: 平面

    Returns:
        M: (4, 4) 变换矩阵，列为 [x_axis, y_axis, normal, origin]
    """
    M = np.eye(4)
    M[:3, 0] = plane.x_axis
    M[:3, 1] = plane.y_axis
    M[:3, 2] = plane.normal
    M[:3, 3] = plane.origin
    return M


def invert_transform(M: np.ndarray) -> np.ndarray:
    """
    刚体变换求逆。

    对于 M = [R | t]，M⁻¹ = [Rᵀ | -Rᵀt]。
    """
    R = M[:3, :3]
    t = M[:3, 3]
    inv = np.eye(4)
    inv[:3, :3] = R.T
    inv[:3, 3] = -R.T @ t
    return inv


def plane_to_plane(source: Plane, target: Plane) -> np.ndarray:
    """
    计算将 source 平面映射到 target 平面的刚体变换。

    source 上的局部坐标 (u, v, w) 映射为 target 上相同的局部坐标。

    Args:
        source: 源平面
        target: 目标平面

    Returns:
        M: (4, 4) 齐次变换矩阵
    """
    return plane_frame_matrix(target) @ invert_transform(plane_frame_matrix(source))


def transform_points(M: np.ndarray, points: np.ndarray) -> np.ndarray:
    """
    对点或点集应用 4x4 齐次变换。

    Args:
        M: (4, 4) 变换矩阵
        points: (3,) 单点或 (N, 3) 点集

    Returns:
        变换后的点，与输入形状相同
    """
    points = np.asarray(points, dtype=float)
    if points.ndim == 1:
        return M[:3, :3] @ points + M[:3, 3]
    return points @ M[:3, :3].T + M[:3, 3]


def rotate_about_axis(vector: np.ndarray, axis: np.ndarray, angle_deg: float) -> np.ndarray:
    """
    Rodrigues 公式: 将向量绕单位轴旋转 angle_deg 度。

        v' = v cosθ + (k × v) sinθ + k (k · v)(1 - cosθ)
    """
    k = normalize(axis)
    v = np.asarray(vector, dtype=float)
    theta = np.radians(angle_deg)
    cos_t, sin_t = np.cos(theta), np.sin(theta)
    return v * cos_t + np.cross(k, v) * sin_t + k * np.dot(k, v) * (1 - cos_t)


if __name__ == "__main__":
    print("=== 平面几何测试 ===")

    yz = Plane.world_yz()
    print(f"WorldYZ 法向: {yz.normal}")
    print(f"点 (3, 1, 2) 到平面距离: {yz.distance_to(np.array([3.0, 1.0, 2.0]))}")

    xy = Plane.world_xy()
    M = plane_to_plane(xy, yz)
    p = transform_points(M, np.array([1.0, 2.0, 3.0]))
    print(f"XY -> YZ 变换 (1, 2, 3): {p}")
    print(f"逆变换: {transform_points(invert_transform(M), p)}")
