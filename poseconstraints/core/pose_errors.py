"""Pose error models for link pose constraints.

A pose error model turns a link pose into a raw error vector and an
error Jacobian, then shapes them into the constraint output F(q) and
its Jacobian:

- BoxPositionError: position error in the target frame, bounded per axis
- EqualityPositionError: raw position error on narrow axes, zero elsewhere
- LinearSystemPositionError: two residuals that vanish on a 3D line
- OrientationError: rotation vector of the orientation deviation, bounded per axis

Every variant must implement all four capabilities (calc_error,
calc_error_jacobian, constraint_values, constraint_jacobian); there is
no default body to fall back on.

Model (position variants):
    error = R_t^T @ (p(q) - p_t)
    error_jacobian = R_t^T @ J_lin(q)

Model (orientation):
    error = log(R(q)^T @ R_t)                       (rotation vector)
    error_jacobian = -E(error) @ R(q)^T @ J_ang(q)
"""

from abc import ABC, abstractmethod
from typing import ClassVar, Literal

import numpy as np
from pydantic import PrivateAttr, field_validator, model_validator
from typing_extensions import Self

from poseconstraints.core.kinematics import LinkPose
from poseconstraints.core.rotation_math import (
    angular_velocity_to_rotation_vector_rate,
    normalize_quaternion,
    quaternion_to_rotation_matrix,
    rotation_vector,
)
from poseconstraints.data.arbitrary_types_model import FrozenArbitraryTypesModel
from poseconstraints.data.bounds import Bounds, derivatives, penalties

ErrorModelType = Literal["box", "equality", "linear_system", "orientation"]


def _read_only(value: object, *, size: int, name: str) -> np.ndarray:
    array = np.array(value, dtype=np.float64).reshape(-1)
    if array.shape != (size,):
        raise ValueError(f"{name} must have {size} elements, got shape {np.shape(value)}")
    array.setflags(write=False)
    return array


class PoseErrorModel(FrozenArbitraryTypesModel, ABC):
    """Base class for all pose error variants.

    Attributes:
        link_name: Constrained link
        target_position: (3,) target position
        target_orientation: (4,) target quaternion [w, x, y, z]
    """

    error_type: ClassVar[ErrorModelType]

    link_name: str
    target_position: np.ndarray
    target_orientation: np.ndarray

    _target_rotation: np.ndarray = PrivateAttr()

    @field_validator("target_position", mode="before")
    @classmethod
    def _validate_position(cls, value: object) -> np.ndarray:
        return _read_only(value, size=3, name="Target position")

    @field_validator("target_orientation", mode="before")
    @classmethod
    def _validate_orientation(cls, value: object) -> np.ndarray:
        quat = _read_only(value, size=4, name="Target orientation")
        return _read_only(normalize_quaternion(quat=quat), size=4, name="Target orientation")

    def model_post_init(self, __context: object) -> None:
        rotation = quaternion_to_rotation_matrix(quat=self.target_orientation)
        rotation.setflags(write=False)
        self._target_rotation = rotation

    @property
    def target_rotation(self) -> np.ndarray:
        """(3, 3) rotation matrix of the target orientation."""
        return self._target_rotation

    @property
    @abstractmethod
    def co_dimension(self) -> int:
        """Number of rows of F(q)."""
        pass

    @abstractmethod
    def calc_error(self, *, pose: LinkPose) -> np.ndarray:
        """Raw error vector for a link pose."""
        pass

    @abstractmethod
    def calc_error_jacobian(self, *, pose: LinkPose, geometric_jacobian: np.ndarray) -> np.ndarray:
        """Jacobian of the raw error with respect to the joint values."""
        pass

    @abstractmethod
    def constraint_values(self, *, error: np.ndarray) -> np.ndarray:
        """Shape a raw error into the (co_dimension,) constraint output."""
        pass

    @abstractmethod
    def constraint_jacobian(self, *, error: np.ndarray, error_jacobian: np.ndarray) -> np.ndarray:
        """Shape an error Jacobian into the (co_dimension, N) constraint Jacobian."""
        pass

    def _position_error(self, *, pose: LinkPose) -> np.ndarray:
        return self.target_rotation.T @ (pose.position - self.target_position)

    def _position_error_jacobian(self, *, geometric_jacobian: np.ndarray) -> np.ndarray:
        return self.target_rotation.T @ geometric_jacobian[:3, :]


class BoundedPoseErrorModel(PoseErrorModel, ABC):
    """Pose error shaped by per-dimension bound penalties.

    Model:
        F_i = penalty_i(error_i)
        dF_i/dq = derivative_i(error_i) * d error_i / dq

    Only the outer penalty is differentiated; this is exact away from
    the bounds and a sub-gradient on them.
    """

    bounds: tuple[Bounds, Bounds, Bounds]

    @property
    def co_dimension(self) -> int:
        return len(self.bounds)

    def constraint_values(self, *, error: np.ndarray) -> np.ndarray:
        return penalties(bounds=self.bounds, values=error)

    def constraint_jacobian(self, *, error: np.ndarray, error_jacobian: np.ndarray) -> np.ndarray:
        scale = derivatives(bounds=self.bounds, values=error)
        return scale[:, np.newaxis] * error_jacobian


class BoxPositionError(BoundedPoseErrorModel):
    """Link position inside a box centered on the target pose.

    Bounds are half the box extents along the target frame axes.
    """

    error_type: ClassVar[ErrorModelType] = "box"

    def calc_error(self, *, pose: LinkPose) -> np.ndarray:
        return self._position_error(pose=pose)

    def calc_error_jacobian(self, *, pose: LinkPose, geometric_jacobian: np.ndarray) -> np.ndarray:
        return self._position_error_jacobian(geometric_jacobian=geometric_jacobian)


class EqualityPositionError(PoseErrorModel):
    """Link position equal to the target along selected axes.

    Axes flagged in `is_dim_constrained` output the raw signed error;
    the other axes always output zero. No penalty shaping is applied.

    Attributes:
        is_dim_constrained: Equality flag per target frame axis
    """

    error_type: ClassVar[ErrorModelType] = "equality"

    is_dim_constrained: tuple[bool, bool, bool]

    @property
    def co_dimension(self) -> int:
        return 3

    @property
    def constrained_mask(self) -> np.ndarray:
        return np.array(self.is_dim_constrained, dtype=bool)

    def calc_error(self, *, pose: LinkPose) -> np.ndarray:
        return self._position_error(pose=pose)

    def calc_error_jacobian(self, *, pose: LinkPose, geometric_jacobian: np.ndarray) -> np.ndarray:
        return self._position_error_jacobian(geometric_jacobian=geometric_jacobian)

    def constraint_values(self, *, error: np.ndarray) -> np.ndarray:
        return np.where(self.constrained_mask, error, 0.0)

    def constraint_jacobian(self, *, error: np.ndarray, error_jacobian: np.ndarray) -> np.ndarray:
        return np.where(self.constrained_mask[:, np.newaxis], error_jacobian, 0.0)


class LinearSystemPositionError(PoseErrorModel):
    """Link position on the line through start_position and end_position.

    With d = end - start and x = R_t^T @ p(q):

        r0 = d_x (x_y - s_y) - d_y (x_x - s_x)
        r1 = d_y (x_z - s_z) - d_z (x_y - s_y)

    Both residuals vanish on the line, motion along it is free.
    The constraint has co-dimension 2 and outputs the residuals as is.

    Attributes:
        start_position: (3,) line start
        end_position: (3,) line end
        is_dim_constrained: Equality flags derived from the region extents
            (informational, the residuals do not use them)
    """

    error_type: ClassVar[ErrorModelType] = "linear_system"

    start_position: np.ndarray
    end_position: np.ndarray
    is_dim_constrained: tuple[bool, bool, bool] = (False, False, False)

    @field_validator("start_position", "end_position", mode="before")
    @classmethod
    def _validate_line_point(cls, value: object) -> np.ndarray:
        return _read_only(value, size=3, name="Line point")

    @model_validator(mode="after")
    def validate(self) -> Self:
        if np.linalg.norm(self.end_position - self.start_position) < 1e-9:
            raise ValueError("Line start and end positions coincide")
        return self

    @property
    def co_dimension(self) -> int:
        return 2

    @property
    def direction(self) -> np.ndarray:
        return self.end_position - self.start_position

    @property
    def residual_matrix(self) -> np.ndarray:
        """(2, 3) derivative of [r0, r1] with respect to the rotated position."""
        d = self.direction
        return np.array([
            [-d[1], d[0], 0.0],
            [0.0, -d[2], d[1]],
        ])

    def calc_error(self, *, pose: LinkPose) -> np.ndarray:
        position = self.target_rotation.T @ pose.position
        return self.residual_matrix @ (position - self.start_position)

    def calc_error_jacobian(self, *, pose: LinkPose, geometric_jacobian: np.ndarray) -> np.ndarray:
        return self.residual_matrix @ (self.target_rotation.T @ geometric_jacobian[:3, :])

    def constraint_values(self, *, error: np.ndarray) -> np.ndarray:
        return error

    def constraint_jacobian(self, *, error: np.ndarray, error_jacobian: np.ndarray) -> np.ndarray:
        return error_jacobian


class OrientationError(BoundedPoseErrorModel):
    """Link orientation within per-axis tolerances of the target.

    The error is the rotation vector theta * a of R(q)^T @ R_t, and
    the bounds are the per-axis tolerances centered at zero.

    Attributes:
        small_angle_threshold: Angle below which the Jacobian uses its
            Taylor expansion
    """

    error_type: ClassVar[ErrorModelType] = "orientation"

    small_angle_threshold: float = 1e-4

    def calc_error(self, *, pose: LinkPose) -> np.ndarray:
        return rotation_vector(rotation=pose.rotation.T @ self.target_rotation)

    def calc_error_jacobian(self, *, pose: LinkPose, geometric_jacobian: np.ndarray) -> np.ndarray:
        error = self.calc_error(pose=pose)
        rate_map = angular_velocity_to_rotation_vector_rate(
            rotation_vec=error,
            small_angle_threshold=self.small_angle_threshold
        )
        # Geometric Jacobian angular rows are in the planning frame
        angular_jacobian_link = pose.rotation.T @ geometric_jacobian[3:, :]
        return -rate_map @ angular_jacobian_link
