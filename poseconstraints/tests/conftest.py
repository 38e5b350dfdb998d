"""Pytest configuration and fixtures for poseconstraints tests.

Provides reusable fixtures for:
- Kinematic chains (planar and spatial)
- Static kinematics that place the link at a chosen pose
- Constraint messages
- Finite difference jacobians
"""

from typing import Callable

import numpy as np
import pytest

from poseconstraints.core.kinematics import KinematicsProvider, LinkPose, SerialChainKinematics
from poseconstraints.data.constraint_messages import (
    ConstraintsMessage,
    OrientationConstraintMessage,
    PositionConstraintMessage,
    RegionPose,
)


class StaticKinematics(KinematicsProvider):
    """Kinematics that ignore the joint values and report a fixed pose."""

    def __init__(
        self,
        *,
        position: np.ndarray,
        rotation: np.ndarray | None = None,
        jacobian: np.ndarray | None = None,
        num_joints: int = 3,
        link_name: str = "tool0"
    ) -> None:
        self._link_name = link_name
        self._num_joints = num_joints
        self.position = np.asarray(position, dtype=np.float64)
        self.rotation = np.eye(3) if rotation is None else np.asarray(rotation, dtype=np.float64)
        if jacobian is None:
            jacobian = np.zeros((6, num_joints))
            jacobian[:3, :3] = np.eye(3)[:, :num_joints]
        self.jacobian = np.asarray(jacobian, dtype=np.float64)

    @property
    def link_name(self) -> str:
        return self._link_name

    @property
    def num_joints(self) -> int:
        return self._num_joints

    def pose(self, *, joint_values: np.ndarray) -> LinkPose:
        return LinkPose(position=self.position.copy(), rotation=self.rotation.copy())

    def geometric_jacobian(self, *, joint_values: np.ndarray) -> np.ndarray:
        return self.jacobian.copy()


@pytest.fixture
def static_kinematics() -> Callable[..., StaticKinematics]:
    """Factory for kinematics that report a fixed pose.

    Returns:
        Callable creating StaticKinematics
    """
    return StaticKinematics


@pytest.fixture
def spatial_arm() -> SerialChainKinematics:
    """Six joint spatial arm ending at link 'tool0'."""
    return SerialChainKinematics.from_offsets(
        link_name="tool0",
        offsets=[
            [0.0, 0.0, 0.3],
            [0.0, 0.0, 0.2],
            [0.0, 0.0, 0.4],
            [0.0, 0.0, 0.4],
            [0.0, 0.0, 0.1],
            [0.0, 0.0, 0.1],
        ],
        axes=[
            [0.0, 0.0, 1.0],
            [0.0, 1.0, 0.0],
            [0.0, 1.0, 0.0],
            [0.0, 0.0, 1.0],
            [0.0, 1.0, 0.0],
            [0.0, 0.0, 1.0],
        ],
        tool_offset=(0.0, 0.0, 0.1)
    )


@pytest.fixture
def spatial_joint_values() -> np.ndarray:
    """Generic configuration of the spatial arm (away from singularities)."""
    return np.array([0.3, 0.4, -0.6, 0.2, 0.7, -0.4])


@pytest.fixture
def planar_arm() -> SerialChainKinematics:
    """Three link planar arm ending at link 'tool0'."""
    return SerialChainKinematics.planar_arm(link_name="tool0", link_lengths=[0.5, 0.4, 0.3])


@pytest.fixture
def make_position_message() -> Callable[..., PositionConstraintMessage]:
    """Factory for position constraint messages.

    Returns:
        Callable(dimensions, position, orientation, end_position) -> message
    """
    def _make(
        *,
        dimensions: list[float],
        position: tuple[float, float, float] = (0.5, 0.0, 0.5),
        orientation: tuple[float, float, float, float] = (1.0, 0.0, 0.0, 0.0),
        end_position: tuple[float, float, float] | None = None,
        link_name: str = "tool0"
    ) -> PositionConstraintMessage:
        poses = [RegionPose(position=position, orientation=orientation)]
        if end_position is not None:
            poses.append(RegionPose(position=end_position, orientation=orientation))
        return PositionConstraintMessage(
            link_name=link_name,
            dimensions=dimensions,
            primitive_poses=poses
        )

    return _make


@pytest.fixture
def orientation_message() -> OrientationConstraintMessage:
    """Orientation constraint around identity with 0.1 rad tolerances."""
    return OrientationConstraintMessage(
        link_name="tool0",
        orientation=(1.0, 0.0, 0.0, 0.0),
        absolute_x_axis_tolerance=0.1,
        absolute_y_axis_tolerance=0.1,
        absolute_z_axis_tolerance=0.1
    )


@pytest.fixture
def box_constraints(make_position_message: Callable[..., PositionConstraintMessage]) -> ConstraintsMessage:
    """Constraint set with a single box position constraint."""
    return ConstraintsMessage(
        name="box_constraints",
        position_constraints=[make_position_message(dimensions=[0.1, 0.2, 0.3])]
    )


def numeric_jacobian(
    *,
    func: Callable[[np.ndarray], np.ndarray],
    x: np.ndarray,
    eps: float = 1e-6
) -> np.ndarray:
    """Central finite difference jacobian of func at x."""
    f0 = np.asarray(func(x))
    jac = np.zeros((f0.size, x.size))
    for i in range(x.size):
        step = np.zeros_like(x)
        step[i] = eps
        jac[:, i] = (np.asarray(func(x + step)) - np.asarray(func(x - step))) / (2.0 * eps)
    return jac


@pytest.fixture
def finite_difference() -> Callable[..., np.ndarray]:
    """Central finite difference jacobian helper."""
    return numeric_jacobian
