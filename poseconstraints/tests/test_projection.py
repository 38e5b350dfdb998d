"""Tests for projecting joint values onto a constraint manifold."""

import numpy as np
import pyceres
import pytest

from poseconstraints.core.config import ProjectionConfig
from poseconstraints.core.evaluator import ConstraintEvaluator
from poseconstraints.core.kinematics import KinematicsPool, SerialChainKinematics
from poseconstraints.core.pose_errors import BoxPositionError, LinearSystemPositionError
from poseconstraints.core.projection import ConstraintProjector
from poseconstraints.data.bounds import bounds_from_extents


@pytest.fixture
def box_evaluator() -> ConstraintEvaluator:
    model = BoxPositionError(
        link_name="tool0",
        target_position=(0.6, 0.4, 0.0),
        target_orientation=(1.0, 0.0, 0.0, 0.0),
        bounds=tuple(bounds_from_extents(extents=[0.01, 0.01, -1.0]))
    )
    return ConstraintEvaluator(error_model=model, num_joints=3)


@pytest.fixture
def line_evaluator() -> ConstraintEvaluator:
    model = LinearSystemPositionError(
        link_name="tool0",
        target_position=(0.0, 0.5, 0.0),
        target_orientation=(1.0, 0.0, 0.0, 0.0),
        start_position=(0.0, 0.5, 0.0),
        end_position=(1.0, 0.5, 0.0)
    )
    return ConstraintEvaluator(error_model=model, num_joints=3)


class TestConstraintProjector:
    """Test projection onto box and line constraints."""

    def test_projects_onto_box(
        self,
        box_evaluator: ConstraintEvaluator,
        planar_arm: SerialChainKinematics
    ) -> None:
        seed = np.array([0.3, 0.4, 0.2])
        assert not box_evaluator.is_satisfied(joint_values=seed, kinematics=planar_arm)

        result = ConstraintProjector(evaluator=box_evaluator).project(joint_values=seed, kinematics=planar_arm)

        assert result.success
        assert result.distance <= box_evaluator.tolerance
        assert box_evaluator.is_satisfied(joint_values=result.joint_values, kinematics=planar_arm)
        assert result.final_cost <= result.initial_cost

    def test_seed_not_modified(
        self,
        box_evaluator: ConstraintEvaluator,
        planar_arm: SerialChainKinematics
    ) -> None:
        seed = np.array([0.3, 0.4, 0.2])

        ConstraintProjector(evaluator=box_evaluator).project(joint_values=seed, kinematics=planar_arm)

        assert np.array_equal(seed, [0.3, 0.4, 0.2])

    def test_projects_onto_line(
        self,
        line_evaluator: ConstraintEvaluator,
        planar_arm: SerialChainKinematics
    ) -> None:
        """End effector ends up on the line y = 0.5."""
        result = ConstraintProjector(evaluator=line_evaluator).project(
            joint_values=np.array([0.2, 0.3, 0.1]),
            kinematics=planar_arm
        )

        assert result.success
        position = planar_arm.pose(joint_values=result.joint_values).position
        assert position[1] == pytest.approx(0.5, abs=1e-4)

    def test_satisfied_seed_returned_without_solving(
        self,
        box_evaluator: ConstraintEvaluator,
        planar_arm: SerialChainKinematics
    ) -> None:
        first = ConstraintProjector(evaluator=box_evaluator).project(
            joint_values=np.array([0.3, 0.4, 0.2]),
            kinematics=planar_arm
        )

        second = ConstraintProjector(evaluator=box_evaluator).project(
            joint_values=first.joint_values,
            kinematics=planar_arm
        )

        assert second.success
        assert second.num_iterations == 0
        assert np.array_equal(second.joint_values, first.joint_values)

    def test_joint_limits_respected(
        self,
        box_evaluator: ConstraintEvaluator,
        planar_arm: SerialChainKinematics
    ) -> None:
        limits = np.array([[-1.0, 1.0], [-2.0, 2.0], [-0.2, 0.2]])

        result = ConstraintProjector(evaluator=box_evaluator).project(
            joint_values=np.array([0.3, 0.4, 0.1]),
            kinematics=planar_arm,
            joint_limits=limits
        )

        assert np.all(result.joint_values >= limits[:, 0] - 1e-12)
        assert np.all(result.joint_values <= limits[:, 1] + 1e-12)

    def test_accepts_kinematics_pool(self, box_evaluator: ConstraintEvaluator) -> None:
        pool = KinematicsPool(
            factory=lambda: SerialChainKinematics.planar_arm(link_name="tool0", link_lengths=[0.5, 0.4, 0.3])
        )

        result = ConstraintProjector(evaluator=box_evaluator).project(
            joint_values=np.array([0.3, 0.4, 0.2]),
            kinematics=pool
        )

        assert result.success

    def test_invalid_inputs_rejected(
        self,
        box_evaluator: ConstraintEvaluator,
        planar_arm: SerialChainKinematics
    ) -> None:
        projector = ConstraintProjector(evaluator=box_evaluator)

        with pytest.raises(ValueError):
            projector.project(joint_values=np.zeros(4), kinematics=planar_arm)
        with pytest.raises(ValueError):
            projector.project(
                joint_values=np.array([0.3, 0.4, 0.2]),
                kinematics=planar_arm,
                joint_limits=np.zeros((2, 2))
            )


class TestProjectionConfig:
    def test_solver_options(self) -> None:
        config = ProjectionConfig(max_iterations=7, linear_solver="dense_normal_cholesky", num_threads=None)

        options = config.to_solver_options()

        assert isinstance(options, pyceres.SolverOptions)
        assert options.max_num_iterations == 7
        assert options.num_threads == 1
        assert options.linear_solver_type == pyceres.LinearSolverType.DENSE_NORMAL_CHOLESKY
