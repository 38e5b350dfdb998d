"""Per-dimension bounds with a piecewise-linear penalty.

A Bounds turns an inequality ``lower <= value <= upper`` into an
equality residual: the penalty is zero inside the interval and grows
linearly with the violation outside it.

This is the building block every bounded constraint variant uses:
- Box position constraints (half box extents per axis)
- Orientation constraints (per-axis rotation vector tolerance)
"""

import math
from typing import Sequence

import numpy as np
from pydantic import model_validator
from typing_extensions import Self

from poseconstraints.data.arbitrary_types_model import FrozenArbitraryTypesModel

UNCONSTRAINED_MARKER = -1.0


class Bounds(FrozenArbitraryTypesModel):
    """Closed interval [lower, upper] for one scalar constraint dimension.

    Either side may be infinite to mark that side as unconstrained.

    Attributes:
        lower: Lower bound
        upper: Upper bound
    """

    lower: float
    upper: float

    @model_validator(mode="after")
    def validate(self) -> Self:
        if math.isnan(self.lower) or math.isnan(self.upper):
            raise ValueError(f"Bounds cannot be NaN, got ({self.lower}, {self.upper})")
        if self.lower > self.upper:
            raise ValueError(f"Lower bound {self.lower} is larger than upper bound {self.upper}")
        return self

    @classmethod
    def symmetric(cls, *, half_width: float) -> "Bounds":
        """Create bounds centered at zero.

        Args:
            half_width: Allowed deviation on each side (inf = unconstrained)

        Returns:
            Bounds(-half_width, half_width)
        """
        return cls(lower=-half_width, upper=half_width)

    @classmethod
    def unbounded(cls) -> "Bounds":
        return cls(lower=-math.inf, upper=math.inf)

    @property
    def half_width(self) -> float:
        return 0.5 * (self.upper - self.lower)

    @property
    def is_unbounded(self) -> bool:
        return math.isinf(self.lower) and math.isinf(self.upper)

    def penalty(self, value: float) -> float:
        """Distance from value to the interval (0 inside)."""
        if value < self.lower:
            return self.lower - value
        elif value > self.upper:
            return value - self.upper
        else:
            return 0.0

    def derivative(self, value: float) -> float:
        """Sub-gradient of the penalty: -1 below, +1 above, 0 inside."""
        if value < self.lower:
            return -1.0
        elif value > self.upper:
            return 1.0
        else:
            return 0.0

    def __str__(self) -> str:
        return f"Bounds: ({self.lower}, {self.upper})"


def extent_to_half_width(*, extent: float, unconstrained_marker: float = UNCONSTRAINED_MARKER) -> float:
    """Convert a full region extent to a half width.

    An extent equal to the unconstrained marker or an infinite extent
    maps to an infinite half width.

    Args:
        extent: Full width of the region along one axis
        unconstrained_marker: Extent value that marks the axis as free

    Returns:
        Half width (inf if unconstrained)
    """
    if extent == unconstrained_marker or math.isinf(extent):
        return math.inf
    if extent < 0.0:
        raise ValueError(f"Region extent must be non-negative or {unconstrained_marker}, got {extent}")
    return 0.5 * extent


def tolerance_to_half_width(*, tolerance: float, unconstrained_marker: float = UNCONSTRAINED_MARKER) -> float:
    """Convert an absolute tolerance to a half width (identity unless unconstrained)."""
    if tolerance == unconstrained_marker or math.isinf(tolerance):
        return math.inf
    if tolerance < 0.0:
        raise ValueError(f"Tolerance must be non-negative or {unconstrained_marker}, got {tolerance}")
    return tolerance


def bounds_from_extents(
    *,
    extents: Sequence[float],
    unconstrained_marker: float = UNCONSTRAINED_MARKER
) -> list[Bounds]:
    """Build symmetric bounds from full box extents (one per axis)."""
    return [
        Bounds.symmetric(
            half_width=extent_to_half_width(extent=extent, unconstrained_marker=unconstrained_marker)
        )
        for extent in extents
    ]


def bounds_from_tolerances(
    *,
    tolerances: Sequence[float],
    unconstrained_marker: float = UNCONSTRAINED_MARKER
) -> list[Bounds]:
    """Build symmetric bounds from absolute per-axis tolerances."""
    return [
        Bounds.symmetric(
            half_width=tolerance_to_half_width(tolerance=tolerance, unconstrained_marker=unconstrained_marker)
        )
        for tolerance in tolerances
    ]


def penalties(*, bounds: Sequence[Bounds], values: np.ndarray) -> np.ndarray:
    """Apply each bound's penalty to the matching value.

    Args:
        bounds: One Bounds per dimension
        values: (n,) values

    Returns:
        (n,) penalties
    """
    return np.array([bound.penalty(float(value)) for bound, value in zip(bounds, values)])


def derivatives(*, bounds: Sequence[Bounds], values: np.ndarray) -> np.ndarray:
    """Apply each bound's penalty derivative to the matching value."""
    return np.array([bound.derivative(float(value)) for bound, value in zip(bounds, values)])
