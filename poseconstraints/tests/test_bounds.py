"""Tests for per-dimension bounds and penalties."""

import math

import numpy as np
import pytest
from pydantic import ValidationError

from poseconstraints.data.bounds import (
    Bounds,
    bounds_from_extents,
    bounds_from_tolerances,
    derivatives,
    extent_to_half_width,
    penalties,
)


class TestBounds:
    """Test Bounds penalty and derivative."""

    @pytest.mark.parametrize("value", [-0.5, -0.1, 0.0, 0.3, 1.0])
    def test_inside_interval_is_zero(self, value: float) -> None:
        """Values in [lower, upper] have zero penalty and derivative."""
        bound = Bounds(lower=-0.5, upper=1.0)

        assert bound.penalty(value) == 0.0
        assert bound.derivative(value) == 0.0

    def test_below_lower(self) -> None:
        """Below lower: penalty = lower - value, derivative = -1."""
        bound = Bounds(lower=-0.5, upper=1.0)

        assert bound.penalty(-0.75) == pytest.approx(0.25)
        assert bound.penalty(-0.75) > 0.0
        assert bound.derivative(-0.75) == -1.0

    def test_above_upper(self) -> None:
        """Above upper: penalty = value - upper, derivative = +1."""
        bound = Bounds(lower=-0.5, upper=1.0)

        assert bound.penalty(1.5) == pytest.approx(0.5)
        assert bound.derivative(1.5) == 1.0

    def test_unbounded_never_penalizes(self) -> None:
        """Infinite bounds give zero penalty for any finite value."""
        bound = Bounds.unbounded()

        assert bound.is_unbounded
        assert bound.penalty(1e12) == 0.0
        assert bound.penalty(-1e12) == 0.0
        assert bound.derivative(1e12) == 0.0

    def test_lower_above_upper_rejected(self) -> None:
        """lower > upper is invalid."""
        with pytest.raises(ValidationError):
            Bounds(lower=1.0, upper=0.0)

    def test_nan_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Bounds(lower=math.nan, upper=1.0)

    def test_immutable(self) -> None:
        """Bounds cannot be modified after construction."""
        bound = Bounds(lower=0.0, upper=1.0)

        with pytest.raises(ValidationError):
            bound.lower = -1.0

    def test_half_width(self) -> None:
        assert Bounds.symmetric(half_width=0.25).half_width == pytest.approx(0.25)
        assert Bounds.unbounded().half_width == math.inf


class TestBoundConversions:
    """Test conversion of extents and tolerances to bounds."""

    def test_extents_are_halved(self) -> None:
        """Box extents become +/- half extent."""
        bounds = bounds_from_extents(extents=[0.2, 0.4, 1.0])

        assert bounds[0] == Bounds(lower=-0.1, upper=0.1)
        assert bounds[1] == Bounds(lower=-0.2, upper=0.2)
        assert bounds[2] == Bounds(lower=-0.5, upper=0.5)

    def test_unconstrained_extent(self) -> None:
        """An extent of -1 becomes (-inf, inf) and never penalizes."""
        bounds = bounds_from_extents(extents=[0.2, -1.0, 0.2])

        assert bounds[1].lower == -math.inf
        assert bounds[1].upper == math.inf
        assert bounds[1].penalty(123.4) == 0.0

    def test_negative_extent_rejected(self) -> None:
        with pytest.raises(ValueError):
            extent_to_half_width(extent=-0.5)

    def test_custom_unconstrained_marker(self) -> None:
        extents = bounds_from_extents(extents=[0.2, -2.0, 0.2], unconstrained_marker=-2.0)
        tolerances = bounds_from_tolerances(tolerances=[-2.0, 0.1, 0.1], unconstrained_marker=-2.0)

        assert extents[1].is_unbounded
        assert tolerances[0].is_unbounded
        with pytest.raises(ValueError):
            bounds_from_extents(extents=[0.2, -1.0, 0.2], unconstrained_marker=-2.0)

    def test_tolerances_are_not_halved(self) -> None:
        """Orientation tolerances are used as half widths directly."""
        bounds = bounds_from_tolerances(tolerances=[0.1, -1.0, 0.3])

        assert bounds[0] == Bounds(lower=-0.1, upper=0.1)
        assert bounds[1].is_unbounded
        assert bounds[2] == Bounds(lower=-0.3, upper=0.3)

    def test_vectorized_helpers(self) -> None:
        """penalties / derivatives apply each bound to its own value."""
        bounds = bounds_from_extents(extents=[0.2, 0.2, 0.2])
        values = np.array([-0.3, 0.05, 0.4])

        assert np.allclose(penalties(bounds=bounds, values=values), [0.2, 0.0, 0.3])
        assert np.allclose(derivatives(bounds=bounds, values=values), [-1.0, 0.0, 1.0])
