"""Project joint values onto a constraint manifold with pyceres.

Projection solves

    min_q  1/2 ||F(q)||^2

starting from a seed configuration, using the evaluator's analytic
Jacobian. It is how a manifold-constrained planner turns an arbitrary
sample into a configuration that satisfies the constraint.

Usage:
    projector = ConstraintProjector(evaluator=evaluator)
    result = projector.project(joint_values=q_seed, kinematics=provider)
    if result.success:
        q = result.joint_values
"""

import logging
import time

import numpy as np
import pyceres

from poseconstraints.core.base_cost import BaseCostFunction
from poseconstraints.core.config import ProjectionConfig
from poseconstraints.core.evaluator import ConstraintEvaluator, Kinematics
from poseconstraints.core.kinematics import KinematicsProvider, resolve_provider
from poseconstraints.core.result import ProjectionResult

logger = logging.getLogger(__name__)


class ConstraintResidualCost(BaseCostFunction):
    """Constraint values F(q) as a pyceres residual block.

    Model:
        residual = F(q)
        jacobian = dF/dq

    One parameter block: the (N,) joint values.
    """

    def __init__(
        self,
        *,
        evaluator: ConstraintEvaluator,
        kinematics: KinematicsProvider,
        weight: float = 1.0
    ) -> None:
        """Initialize constraint residual.

        Args:
            evaluator: Constraint to evaluate
            kinematics: Provider used for every evaluation during the solve
            weight: Weight for the residual
        """
        super().__init__(weight=weight)
        self.evaluator = evaluator
        self.kinematics = kinematics
        self.set_num_residuals(evaluator.co_dimension)
        self.set_parameter_block_sizes([evaluator.num_joints])

    def _compute_residual(self, parameters: list[np.ndarray]) -> np.ndarray:
        return self.evaluator.function(joint_values=parameters[0], kinematics=self.kinematics)

    def _compute_jacobians(
        self,
        *,
        parameters: list[np.ndarray],
        jacobians: list[np.ndarray | None]
    ) -> None:
        if jacobians[0] is None:
            return
        jac = self.evaluator.jacobian(joint_values=parameters[0], kinematics=self.kinematics)
        jacobians[0][:] = jac.ravel()


class ConstraintProjector:
    """Project joint values onto the manifold of one constraint evaluator."""

    def __init__(
        self,
        *,
        evaluator: ConstraintEvaluator,
        config: ProjectionConfig | None = None
    ) -> None:
        """Initialize projector.

        Args:
            evaluator: Constraint to project onto
            config: Solver configuration (defaults to ProjectionConfig())
        """
        self.evaluator = evaluator
        self.config = config if config is not None else ProjectionConfig()

    def project(
        self,
        *,
        joint_values: np.ndarray,
        kinematics: Kinematics,
        joint_limits: np.ndarray | None = None
    ) -> ProjectionResult:
        """Project joint values onto F(q) = 0.

        Args:
            joint_values: (N,) seed joint values (not modified)
            kinematics: Provider, or pool to take this thread's provider from
            joint_limits: Optional (N, 2) [min, max] per joint

        Returns:
            ProjectionResult with the projected joint values
        """
        provider = resolve_provider(kinematics=kinematics)
        q = np.array(joint_values, dtype=np.float64)
        if q.shape != (self.evaluator.num_joints,):
            raise ValueError(
                f"Expected {self.evaluator.num_joints} joint values, got shape {q.shape}"
            )

        distance = self.evaluator.distance(joint_values=q, kinematics=provider)
        if distance <= self.evaluator.tolerance:
            logger.debug(f"Seed already satisfies constraint (distance {distance:.3e})")
            return ProjectionResult(joint_values=q, success=True, distance=distance)

        cost = ConstraintResidualCost(evaluator=self.evaluator, kinematics=provider)
        problem = pyceres.Problem()
        problem.add_residual_block(cost, None, [q])

        if joint_limits is not None:
            joint_limits = np.asarray(joint_limits, dtype=np.float64)
            if joint_limits.shape != (self.evaluator.num_joints, 2):
                raise ValueError(
                    f"Joint limits must have shape ({self.evaluator.num_joints}, 2), "
                    f"got {joint_limits.shape}"
                )
            for index, (lower, upper) in enumerate(joint_limits):
                problem.set_parameter_lower_bound(q, index, lower)
                problem.set_parameter_upper_bound(q, index, upper)

        options = self.config.to_solver_options()
        summary = pyceres.SolverSummary()

        start_time = time.time()
        pyceres.solve(options, problem, summary)
        solve_time = time.time() - start_time

        distance = self.evaluator.distance(joint_values=q, kinematics=provider)
        result = ProjectionResult.from_pyceres_summary(
            summary=summary,
            joint_values=q,
            distance=distance,
            tolerance=self.evaluator.tolerance,
            solve_time_seconds=solve_time
        )

        logger.debug(f"Projection onto {self.evaluator.error_type} constraint: {result.summary()}")
        return result
