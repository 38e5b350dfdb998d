"""Configuration hazard checks for constraint construction.

These catch constraint descriptions that would build fine but make
planning impossible:
- Equality threshold not above the planner tolerance
- Equality axes narrower than the planner tolerance
- Degenerate lines for on-a-line constraints

Each check raises ValueError instead of logging, so the problem
surfaces when the constraint is built rather than as every sampled
state being rejected later.
"""

import logging
from typing import Sequence

import numpy as np

from poseconstraints.data.bounds import Bounds

logger = logging.getLogger(__name__)


def validate_thresholds(*, tolerance: float, equality_threshold: float) -> None:
    """Check that tolerance < equality_threshold.

    Args:
        tolerance: Planner acceptance tolerance on ||F(q)||
        equality_threshold: Half widths below this are equality constraints
    """
    if tolerance <= 0.0:
        raise ValueError(f"Constraint tolerance must be positive, got {tolerance}")
    if equality_threshold <= tolerance:
        raise ValueError(
            f"Equality threshold {equality_threshold} must be larger than the "
            f"constraint tolerance {tolerance}"
        )


def find_equality_dimensions(
    *,
    bounds: Sequence[Bounds],
    equality_threshold: float
) -> tuple[bool, ...]:
    """Flag dimensions narrow enough to be modelled as equalities.

    Args:
        bounds: Bounds per dimension
        equality_threshold: Half width below which a dimension is an equality

    Returns:
        Tuple of flags, True where the dimension is constrained
    """
    return tuple(bound.half_width < equality_threshold for bound in bounds)


def validate_equality_dimensions(
    *,
    bounds: Sequence[Bounds],
    is_dim_constrained: Sequence[bool],
    tolerance: float,
    equality_threshold: float
) -> None:
    """Reject equality dimensions narrower than the planner tolerance.

    Args:
        bounds: Bounds per dimension
        is_dim_constrained: Equality flags per dimension
        tolerance: Planner acceptance tolerance
        equality_threshold: Threshold used to compute the flags

    Raises:
        ValueError: If any constrained dimension is narrower than tolerance
    """
    narrow = [
        dim for dim, (bound, constrained) in enumerate(zip(bounds, is_dim_constrained))
        if constrained and bound.half_width < tolerance
    ]
    if narrow:
        raise ValueError(
            f"Dimension(s) {narrow} of the position constraint are smaller than the tolerance "
            f"used to evaluate constraints ({tolerance}). Every state would be invalid. "
            f"Use a half width between {tolerance} and {equality_threshold}."
        )


def validate_line(*, start: np.ndarray, end: np.ndarray, min_length: float = 1e-9) -> None:
    """Check that a line's start and end points are distinct.

    Args:
        start: (3,) line start
        end: (3,) line end
        min_length: Minimum allowed distance between start and end
    """
    length = float(np.linalg.norm(end - start))
    if length < min_length:
        raise ValueError(f"Line start and end coincide (length {length:.3e}); direction is undefined")
    direction = end - start
    if abs(direction[1]) < min_length:
        # With no y component both residuals depend on the y coordinate alone
        logger.warning(
            "Line direction has no y component; on-a-line residuals only pin the "
            "y coordinate of the link"
        )
