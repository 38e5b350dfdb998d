"""Declarative constraint descriptions.

These models hold the already-decoded primitive fields of a planning
request's path constraints:
- PositionConstraintMessage: link must stay in a region (box or line)
- OrientationConstraintMessage: link orientation within per-axis tolerances
- ConstraintsMessage: named set of position and orientation constraints

They describe WHAT should hold. The factory in
poseconstraints.core.factory turns them into evaluators.

Quaternions are [w, x, y, z] throughout.
"""

import math

import numpy as np
from pydantic import Field, field_validator, model_validator
from typing_extensions import Self

from poseconstraints.core.rotation_math import normalize_quaternion
from poseconstraints.data.arbitrary_types_model import ArbitraryTypesModel

IDENTITY_QUATERNION = (1.0, 0.0, 0.0, 0.0)


def _as_vector(value: object, *, size: int, name: str) -> np.ndarray:
    array = np.asarray(value, dtype=np.float64).reshape(-1)
    if array.shape != (size,):
        raise ValueError(f"{name} must have {size} elements, got shape {np.shape(value)}")
    if not np.all(np.isfinite(array)):
        raise ValueError(f"{name} must be finite, got {array}")
    return array


def _as_unit_quaternion(value: object) -> np.ndarray:
    return normalize_quaternion(quat=_as_vector(value, size=4, name="Quaternion"))


class RegionPose(ArbitraryTypesModel):
    """Pose of a constraint region primitive.

    Attributes:
        position: (3,) position in the planning frame
        orientation: (4,) unit quaternion [w, x, y, z]
    """

    position: np.ndarray
    orientation: np.ndarray = Field(default_factory=lambda: np.array(IDENTITY_QUATERNION))

    @field_validator("position", mode="before")
    @classmethod
    def _validate_position(cls, value: object) -> np.ndarray:
        return _as_vector(value, size=3, name="Position")

    @field_validator("orientation", mode="before")
    @classmethod
    def _validate_orientation(cls, value: object) -> np.ndarray:
        return _as_unit_quaternion(value)


class PositionConstraintMessage(ArbitraryTypesModel):
    """Position constraint on a link.

    For box regions, `dimensions` are the full box extents along the
    x, y and z axes of the first primitive pose. An extent equal to the
    configured unconstrained marker (-1 by default) marks the axis as
    unconstrained; other negative extents are rejected when the
    constraint is built.

    For on-a-line constraints the first primitive pose is the line start
    and the second is the line end.

    Attributes:
        link_name: Constrained link
        dimensions: Box extents (full widths)
        primitive_poses: Region poses (target, or line start / end)
    """

    link_name: str
    dimensions: list[float] = Field(default_factory=list)
    primitive_poses: list[RegionPose] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate(self) -> Self:
        if any(math.isnan(dim) for dim in self.dimensions):
            raise ValueError(f"Region dimensions cannot be NaN, got {self.dimensions}")
        return self

    def get_dimensions(self) -> list[float]:
        """Get the three box extents.

        Raises:
            ValueError: If fewer than three extents are present
        """
        if len(self.dimensions) < 3:
            raise ValueError(
                f"Position constraint on '{self.link_name}' needs 3 region dimensions, "
                f"got {len(self.dimensions)}"
            )
        return list(self.dimensions[:3])

    def get_primitive_pose(self, *, index: int) -> RegionPose:
        """Get a region pose by index.

        Raises:
            ValueError: If the pose is missing
        """
        if index >= len(self.primitive_poses):
            raise ValueError(
                f"Position constraint on '{self.link_name}' has no primitive pose {index} "
                f"({len(self.primitive_poses)} available)"
            )
        return self.primitive_poses[index]


class OrientationConstraintMessage(ArbitraryTypesModel):
    """Orientation constraint on a link.

    Tolerances bound the rotation vector of the deviation from the
    target orientation, per axis. A tolerance equal to the configured
    unconstrained marker (-1 by default) marks the axis as unconstrained.

    Attributes:
        link_name: Constrained link
        orientation: (4,) target unit quaternion [w, x, y, z]
        absolute_x_axis_tolerance: Allowed deviation about x (rad)
        absolute_y_axis_tolerance: Allowed deviation about y (rad)
        absolute_z_axis_tolerance: Allowed deviation about z (rad)
    """

    link_name: str
    orientation: np.ndarray = Field(default_factory=lambda: np.array(IDENTITY_QUATERNION))
    absolute_x_axis_tolerance: float
    absolute_y_axis_tolerance: float
    absolute_z_axis_tolerance: float

    @field_validator("orientation", mode="before")
    @classmethod
    def _validate_orientation(cls, value: object) -> np.ndarray:
        return _as_unit_quaternion(value)

    @model_validator(mode="after")
    def validate(self) -> Self:
        if any(math.isnan(tol) for tol in self.tolerances):
            raise ValueError(f"Axis tolerances cannot be NaN, got {self.tolerances}")
        return self

    @property
    def tolerances(self) -> list[float]:
        return [
            self.absolute_x_axis_tolerance,
            self.absolute_y_axis_tolerance,
            self.absolute_z_axis_tolerance,
        ]


class ConstraintsMessage(ArbitraryTypesModel):
    """Named set of path constraints from a planning request.

    The name is free-form; it is only used to pick the position
    constraint variant ("use_equality_constraints",
    "linear_system_constraints" or anything else for box bounds).
    """

    name: str = ""
    position_constraints: list[PositionConstraintMessage] = Field(default_factory=list)
    orientation_constraints: list[OrientationConstraintMessage] = Field(default_factory=list)

    @property
    def n_position_constraints(self) -> int:
        return len(self.position_constraints)

    @property
    def n_orientation_constraints(self) -> int:
        return len(self.orientation_constraints)
