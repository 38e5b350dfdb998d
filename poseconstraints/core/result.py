"""Result structures for constraint construction and projection.

- ConstraintBuilt / ConstraintNotBuilt: tagged outcome of the factory
- ProjectionResult: outcome of projecting joint values onto F(q) = 0
"""

from typing import Any, Literal

import numpy as np
import pyceres
from pydantic import Field

from poseconstraints.core.evaluator import ConstraintEvaluator
from poseconstraints.data.arbitrary_types_model import ArbitraryTypesModel


NotBuiltReason = Literal[
    "combined_position_orientation",
    "no_constraints",
]


class ConstraintBuilt(ArbitraryTypesModel):
    """Factory outcome carrying a ready-to-use evaluator."""

    status: Literal["built"] = "built"
    evaluator: ConstraintEvaluator

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> ConstraintEvaluator:
        return self.evaluator


class ConstraintNotBuilt(ArbitraryTypesModel):
    """Factory outcome when no evaluator could be built.

    Attributes:
        reason: Why nothing was built
        message: Human-readable explanation
    """

    status: Literal["not_built"] = "not_built"
    reason: NotBuiltReason
    message: str

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> ConstraintEvaluator:
        raise RuntimeError(f"No constraint evaluator was built ({self.reason}): {self.message}")


ConstraintBuildResult = ConstraintBuilt | ConstraintNotBuilt


class ProjectionResult(ArbitraryTypesModel):
    """Result of projecting joint values onto the constraint manifold.

    Attributes:
        joint_values: (N,) projected joint values
        success: Whether the projected values satisfy the constraint tolerance
        distance: ||F(q)|| at the projected values
        solver_converged: Whether the solver reported convergence
        num_iterations: Number of solver iterations
        initial_cost: Initial least squares cost 0.5 ||F(q0)||^2
        final_cost: Final least squares cost
        solve_time_seconds: Time spent in solver
        metadata: Additional data
    """

    joint_values: np.ndarray
    success: bool
    distance: float
    solver_converged: bool = True
    num_iterations: int = 0
    initial_cost: float = 0.0
    final_cost: float = 0.0
    solve_time_seconds: float = 0.0
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_pyceres_summary(
        cls,
        *,
        summary: pyceres.SolverSummary,
        joint_values: np.ndarray,
        distance: float,
        tolerance: float,
        solve_time_seconds: float
    ) -> "ProjectionResult":
        """Create result from pyceres SolverSummary.

        Args:
            summary: pyceres solver summary
            joint_values: Projected joint values
            distance: ||F(q)|| at the projected values
            tolerance: Constraint acceptance tolerance
            solve_time_seconds: Measured solve time

        Returns:
            ProjectionResult
        """
        converged = (
            summary.termination_type == pyceres.TerminationType.CONVERGENCE or
            summary.termination_type == pyceres.TerminationType.USER_SUCCESS
        )
        return cls(
            joint_values=joint_values,
            success=distance <= tolerance,
            distance=distance,
            solver_converged=converged,
            num_iterations=summary.num_successful_steps + summary.num_unsuccessful_steps,
            initial_cost=summary.initial_cost,
            final_cost=summary.final_cost,
            solve_time_seconds=solve_time_seconds
        )

    def summary(self) -> str:
        """Get one-line summary."""
        status = "✓ Satisfied" if self.success else "✗ Not satisfied"
        return (
            f"{status} | distance={self.distance:.3e} | "
            f"iterations={self.num_iterations} | {self.solve_time_seconds * 1000:.1f} ms"
        )
