"""Rotation helpers for orientation constraints.

Quaternions are [w, x, y, z] in this package; scipy uses [x, y, z, w],
so all conversions go through these helpers.

Provides:
- Quaternion <-> rotation matrix conversion
- Rotation vectors (exponential coordinates) of rotation matrices
- Skew-symmetric matrices
- The map from angular velocity to rotation vector rate
"""

import numpy as np
from scipy.spatial.transform import Rotation


def normalize_quaternion(*, quat: np.ndarray, min_norm: float = 1e-10) -> np.ndarray:
    """Scale a [w, x, y, z] quaternion to unit length.

    Raises:
        ValueError: If the quaternion is (numerically) zero and has no direction
    """
    quat = np.asarray(quat, dtype=np.float64)
    norm = float(np.linalg.norm(quat))
    if norm < min_norm:
        raise ValueError(f"Quaternion has zero length (norm {norm:.3e})")
    return quat / norm


def quaternion_to_rotation_matrix(*, quat: np.ndarray) -> np.ndarray:
    """Convert [w, x, y, z] quaternion to a (3, 3) rotation matrix."""
    quat_scipy = np.array([quat[1], quat[2], quat[3], quat[0]])
    return Rotation.from_quat(quat_scipy).as_matrix()


def rotation_matrix_to_quaternion(*, rotation: np.ndarray) -> np.ndarray:
    """Convert a (3, 3) rotation matrix to a [w, x, y, z] quaternion with w >= 0."""
    x, y, z, w = Rotation.from_matrix(rotation).as_quat()
    quat = np.array([w, x, y, z])
    if quat[0] < 0.0:
        quat = -quat
    return quat


def rotation_vector(*, rotation: np.ndarray) -> np.ndarray:
    """Rotation vector theta * axis of a rotation matrix.

    The angle is in [0, pi]; the identity maps to the zero vector.

    Args:
        rotation: (3, 3) rotation matrix

    Returns:
        (3,) rotation vector
    """
    return Rotation.from_matrix(rotation).as_rotvec()


def skew_symmetric(*, vector: np.ndarray) -> np.ndarray:
    """Cross product matrix [v]x such that [v]x @ u == v x u."""
    return np.array([
        [0.0, -vector[2], vector[1]],
        [vector[2], 0.0, -vector[0]],
        [-vector[1], vector[0], 0.0],
    ])


def angular_velocity_to_rotation_vector_rate(
    *,
    rotation_vec: np.ndarray,
    small_angle_threshold: float = 1e-4
) -> np.ndarray:
    """Map a (left) angular velocity to the rate of change of a rotation vector.

    For r = theta * a:

        E = I - 1/2 [r]x + [r]x^2 / theta^2 * (1 - theta sin(theta) / (2 (1 - cos(theta))))

    Both 1 / theta^2 and 1 / (1 - cos(theta)) blow up as theta -> 0, so
    below `small_angle_threshold` the second order Taylor expansion

        E = I - 1/2 [r]x + [r]x^2 / 12

    is used instead.

    Args:
        rotation_vec: (3,) rotation vector r
        small_angle_threshold: Angle below which the Taylor form is used

    Returns:
        (3, 3) matrix E with dr/dt = E @ omega
    """
    theta = float(np.linalg.norm(rotation_vec))
    r_skew = skew_symmetric(vector=rotation_vec)

    if theta < small_angle_threshold:
        return np.eye(3) - 0.5 * r_skew + (r_skew @ r_skew) / 12.0

    # 1 - cos(theta) written as 2 sin^2(theta / 2) avoids cancellation
    half_theta = 0.5 * theta
    one_minus_cos = 2.0 * np.sin(half_theta) ** 2
    coefficient = (1.0 - 0.5 * theta * np.sin(theta) / one_minus_cos) / (theta * theta)
    return np.eye(3) - 0.5 * r_skew + coefficient * (r_skew @ r_skew)
