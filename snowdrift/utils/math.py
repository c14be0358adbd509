# snowdrift/utils/math.py

import numpy as np


def quaternion_from_axis_angle(axis: np.ndarray, angle: float) -> np.ndarray:
    """
    Rotation of `angle` radians about `axis`.
    Returns [x, y, z, w]
    """
    axis = normalize(np.asarray(axis, dtype=np.float64))
    half = angle * 0.5
    s = np.sin(half)
    return np.array([axis[0] * s, axis[1] * s, axis[2] * s, np.cos(half)], dtype=np.float32)


def quaternion_multiply(q1: np.ndarray, q2: np.ndarray) -> np.ndarray:
    """Multiply two quaternions."""
    x1, y1, z1, w1 = q1[0], q1[1], q1[2], q1[3]
    x2, y2, z2, w2 = q2[0], q2[1], q2[2], q2[3]

    w = w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2
    x = w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2
    y = w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2
    z = w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2

    return np.array([x, y, z, w], dtype=np.float32)


def quaternion_to_matrix(quat: np.ndarray) -> np.ndarray:
    """Convert quaternion to 4x4 rotation matrix."""
    x, y, z, w = quat[0], quat[1], quat[2], quat[3]

    mat = np.eye(4, dtype=np.float32)

    mat[0, 0] = 1.0 - 2.0 * (y * y + z * z)
    mat[0, 1] = 2.0 * (x * y - w * z)
    mat[0, 2] = 2.0 * (x * z + w * y)

    mat[1, 0] = 2.0 * (x * y + w * z)
    mat[1, 1] = 1.0 - 2.0 * (x * x + z * z)
    mat[1, 2] = 2.0 * (y * z - w * x)

    mat[2, 0] = 2.0 * (x * z - w * y)
    mat[2, 1] = 2.0 * (y * z + w * x)
    mat[2, 2] = 1.0 - 2.0 * (x * x + y * y)

    return mat


def lerp(a, b, t):
    """Linear interpolation. Works element-wise on arrays."""
    return a + t * (b - a)


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp value between min and max."""
    return max(min_val, min(max_val, value))


def normalize(v: np.ndarray) -> np.ndarray:
    """Normalize vectors along the last axis. Zero vectors are returned unchanged."""
    v = np.asarray(v)
    length = np.linalg.norm(v, axis=-1, keepdims=True)
    length = np.where(length > 0, length, 1.0)
    return v / length
