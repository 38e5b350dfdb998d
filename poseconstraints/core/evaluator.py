"""Planner-facing constraint evaluator.

ConstraintEvaluator wraps one PoseErrorModel and exposes the contract
a manifold-constrained planner needs:

- function(q): (k,) constraint values, zero on the manifold
- jacobian(q): (k, N) derivative of function(q)
- co_dimension, tolerance
- distance(q), is_satisfied(q)

The evaluator is immutable after construction and holds no kinematics
state of its own. Every call receives the kinematics to use, either a
KinematicsProvider owned by the caller or a KinematicsPool that hands
out one provider per thread. One evaluator can therefore be shared by
any number of planner threads.
"""

import logging

import numpy as np

from poseconstraints.core.config import ConstraintConfig
from poseconstraints.core.kinematics import (
    KinematicsPool,
    KinematicsProvider,
    LinkPose,
    resolve_provider,
)
from poseconstraints.core.pose_errors import PoseErrorModel

logger = logging.getLogger(__name__)

Kinematics = KinematicsProvider | KinematicsPool


class ConstraintEvaluator:
    """Evaluate F(q) and dF/dq for a link pose constraint.

    Usage:
        evaluator = ConstraintEvaluator(error_model=model, num_joints=7)
        values = evaluator.function(joint_values=q, kinematics=provider)
        jac = evaluator.jacobian(joint_values=q, kinematics=provider)
    """

    def __init__(
        self,
        *,
        error_model: PoseErrorModel,
        num_joints: int,
        config: ConstraintConfig | None = None
    ) -> None:
        """Initialize evaluator.

        Args:
            error_model: Pose error variant to evaluate
            num_joints: Number of joint variables (ambient dimension)
            config: Tolerances (defaults to ConstraintConfig())
        """
        if num_joints < 1:
            raise ValueError(f"num_joints must be positive, got {num_joints}")
        self._error_model = error_model
        self._num_joints = num_joints
        self._config = config if config is not None else ConstraintConfig()
        self._co_dimension = error_model.co_dimension
        if self._co_dimension > num_joints:
            logger.warning(
                f"Constraint co-dimension {self._co_dimension} exceeds the {num_joints} "
                f"joint variables; the constraint manifold may be empty"
            )

    def __repr__(self) -> str:
        return (
            f"ConstraintEvaluator(type={self.error_type}, link='{self.link_name}', "
            f"co_dimension={self.co_dimension}, num_joints={self.num_joints})"
        )

    @property
    def error_model(self) -> PoseErrorModel:
        return self._error_model

    @property
    def error_type(self) -> str:
        return self._error_model.error_type

    @property
    def co_dimension(self) -> int:
        """Number of constraint equations k."""
        return self._co_dimension

    @property
    def num_joints(self) -> int:
        """Number of joint variables N (ambient dimension)."""
        return self._num_joints

    @property
    def manifold_dimension(self) -> int:
        return self._num_joints - self._co_dimension

    @property
    def tolerance(self) -> float:
        """Acceptance tolerance on ||function(q)||."""
        return self._config.tolerance

    @property
    def config(self) -> ConstraintConfig:
        return self._config

    @property
    def link_name(self) -> str:
        return self._error_model.link_name

    @property
    def target_position(self) -> np.ndarray:
        return self._error_model.target_position

    @property
    def target_orientation(self) -> np.ndarray:
        """Target quaternion [w, x, y, z]."""
        return self._error_model.target_orientation

    def function(self, *, joint_values: np.ndarray, kinematics: Kinematics) -> np.ndarray:
        """Constraint values F(q).

        Args:
            joint_values: (N,) joint values
            kinematics: Provider, or pool to take this thread's provider from

        Returns:
            (co_dimension,) constraint values
        """
        joint_values = self._check_joint_values(joint_values=joint_values)
        provider = self._get_provider(kinematics=kinematics)
        pose = provider.pose(joint_values=joint_values)
        error = self._error_model.calc_error(pose=pose)
        return self._error_model.constraint_values(error=error)

    def jacobian(self, *, joint_values: np.ndarray, kinematics: Kinematics) -> np.ndarray:
        """Constraint Jacobian dF/dq.

        Args:
            joint_values: (N,) joint values
            kinematics: Provider, or pool to take this thread's provider from

        Returns:
            (co_dimension, N) Jacobian
        """
        _, jac = self.function_and_jacobian(joint_values=joint_values, kinematics=kinematics)
        return jac

    def function_and_jacobian(
        self,
        *,
        joint_values: np.ndarray,
        kinematics: Kinematics
    ) -> tuple[np.ndarray, np.ndarray]:
        """Compute F(q) and dF/dq from a single kinematics query.

        Returns:
            Tuple of (values, jacobian)
        """
        joint_values = self._check_joint_values(joint_values=joint_values)
        provider = self._get_provider(kinematics=kinematics)
        pose = provider.pose(joint_values=joint_values)
        geometric_jacobian = provider.geometric_jacobian(joint_values=joint_values)
        return self._evaluate(pose=pose, geometric_jacobian=geometric_jacobian)

    def distance(self, *, joint_values: np.ndarray, kinematics: Kinematics) -> float:
        """Norm of the constraint values, ||F(q)||."""
        return float(np.linalg.norm(self.function(joint_values=joint_values, kinematics=kinematics)))

    def is_satisfied(self, *, joint_values: np.ndarray, kinematics: Kinematics) -> bool:
        """Check ||F(q)|| <= tolerance."""
        return self.distance(joint_values=joint_values, kinematics=kinematics) <= self.tolerance

    def _evaluate(
        self,
        *,
        pose: LinkPose,
        geometric_jacobian: np.ndarray
    ) -> tuple[np.ndarray, np.ndarray]:
        if geometric_jacobian.shape != (6, self._num_joints):
            raise ValueError(
                f"Geometric Jacobian must have shape (6, {self._num_joints}), "
                f"got {geometric_jacobian.shape}"
            )
        error = self._error_model.calc_error(pose=pose)
        error_jacobian = self._error_model.calc_error_jacobian(
            pose=pose,
            geometric_jacobian=geometric_jacobian
        )
        values = self._error_model.constraint_values(error=error)
        jac = self._error_model.constraint_jacobian(error=error, error_jacobian=error_jacobian)
        return values, jac

    def _check_joint_values(self, *, joint_values: np.ndarray) -> np.ndarray:
        joint_values = np.asarray(joint_values, dtype=np.float64)
        if joint_values.shape != (self._num_joints,):
            raise ValueError(
                f"Expected {self._num_joints} joint values, got shape {joint_values.shape}"
            )
        return joint_values

    def _get_provider(self, *, kinematics: Kinematics) -> KinematicsProvider:
        provider = resolve_provider(kinematics=kinematics)
        if provider.link_name != self.link_name:
            raise ValueError(
                f"Kinematics computes link '{provider.link_name}' but the constraint "
                f"is on link '{self.link_name}'"
            )
        if provider.num_joints != self._num_joints:
            raise ValueError(
                f"Kinematics has {provider.num_joints} joints, evaluator expects {self._num_joints}"
            )
        return provider
