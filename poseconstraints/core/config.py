"""Configuration for constraint evaluation and projection.

This module provides:
- ConstraintConfig: Tolerances and thresholds used when building evaluators
- ProjectionConfig: pyceres solver parameters for projecting onto F(q) = 0
"""

import os
from dataclasses import dataclass
from typing import Literal

import pyceres

from poseconstraints.data.bounds import UNCONSTRAINED_MARKER
from poseconstraints.data.validators import validate_thresholds


@dataclass(frozen=True)
class ConstraintConfig:
    """Tolerances used when building and evaluating constraints.

    The thresholds must satisfy:
        tolerance < equality_threshold

    Position half widths under `equality_threshold` are modelled as
    equality constraints; the state validity checker downstream should
    in turn accept deviations up to `equality_threshold`.

    Attributes:
        tolerance: Acceptance tolerance on ||F(q)|| used by the planner
        equality_threshold: Half width below which an axis is an equality
        small_angle_threshold: Rotation angle (rad) below which the
            orientation Jacobian uses its Taylor expansion
        unconstrained_marker: Region extent or axis tolerance that marks
            the dimension as unconstrained (must be negative)
    """

    tolerance: float = 1e-4
    equality_threshold: float = 1e-3
    small_angle_threshold: float = 1e-4
    unconstrained_marker: float = UNCONSTRAINED_MARKER

    def __post_init__(self) -> None:
        validate_thresholds(tolerance=self.tolerance, equality_threshold=self.equality_threshold)
        if self.small_angle_threshold <= 0.0:
            raise ValueError(f"small_angle_threshold must be positive, got {self.small_angle_threshold}")
        if not self.unconstrained_marker < 0.0:
            raise ValueError(f"unconstrained_marker must be negative, got {self.unconstrained_marker}")


@dataclass
class ProjectionConfig:
    """Configuration for projecting joint values onto the constraint manifold.

    Attributes:
        max_iterations: Maximum number of solver iterations
        function_tolerance: Convergence tolerance for cost function
        gradient_tolerance: Convergence tolerance for gradient
        parameter_tolerance: Convergence tolerance for parameters
        linear_solver: Linear solver type
        trust_region_strategy: Trust region strategy
        num_threads: Number of threads (None = single threaded)
        minimizer_progress_to_stdout: Print solver progress
    """

    max_iterations: int = 50
    function_tolerance: float = 1e-12
    gradient_tolerance: float = 1e-12
    parameter_tolerance: float = 1e-12

    linear_solver: Literal["dense_qr", "dense_normal_cholesky"] = "dense_qr"
    trust_region_strategy: Literal["levenberg_marquardt", "dogleg"] = "levenberg_marquardt"

    num_threads: int | None = None

    minimizer_progress_to_stdout: bool = False

    def to_solver_options(self) -> pyceres.SolverOptions:
        """Convert to pyceres SolverOptions.

        Returns:
            pyceres.SolverOptions configured with these settings
        """
        options = pyceres.SolverOptions()

        options.max_num_iterations = self.max_iterations
        options.function_tolerance = self.function_tolerance
        options.gradient_tolerance = self.gradient_tolerance
        options.parameter_tolerance = self.parameter_tolerance

        if self.linear_solver == "dense_qr":
            options.linear_solver_type = pyceres.LinearSolverType.DENSE_QR
        elif self.linear_solver == "dense_normal_cholesky":
            options.linear_solver_type = pyceres.LinearSolverType.DENSE_NORMAL_CHOLESKY

        if self.trust_region_strategy == "levenberg_marquardt":
            options.trust_region_strategy_type = pyceres.TrustRegionStrategyType.LEVENBERG_MARQUARDT
        elif self.trust_region_strategy == "dogleg":
            options.trust_region_strategy_type = pyceres.TrustRegionStrategyType.DOGLEG

        if self.num_threads is None:
            options.num_threads = 1
        else:
            options.num_threads = max(min(self.num_threads, os.cpu_count() or 1), 1)

        options.minimizer_progress_to_stdout = self.minimizer_progress_to_stdout

        return options
