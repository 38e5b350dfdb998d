"""Data models for pose constraints.

- bounds: Per-dimension intervals with penalty and derivative
- constraint_messages: Declarative constraint descriptions
- validators: Configuration hazard checks
"""

from .bounds import (
    UNCONSTRAINED_MARKER,
    Bounds,
    bounds_from_extents,
    bounds_from_tolerances,
    derivatives,
    extent_to_half_width,
    penalties,
    tolerance_to_half_width,
)
from .constraint_messages import (
    ConstraintsMessage,
    OrientationConstraintMessage,
    PositionConstraintMessage,
    RegionPose,
)
from .validators import (
    find_equality_dimensions,
    validate_equality_dimensions,
    validate_line,
    validate_thresholds,
)

__all__ = [
    # Bounds
    "UNCONSTRAINED_MARKER",
    "Bounds",
    "bounds_from_extents",
    "bounds_from_tolerances",
    "derivatives",
    "extent_to_half_width",
    "penalties",
    "tolerance_to_half_width",
    # Messages
    "ConstraintsMessage",
    "OrientationConstraintMessage",
    "PositionConstraintMessage",
    "RegionPose",
    # Validators
    "find_equality_dimensions",
    "validate_equality_dimensions",
    "validate_line",
    "validate_thresholds",
]
