"""
Core validators for NAV series.
Pure functions - no IO, network, or side effects.
"""

import math
from datetime import date, datetime
from typing import Sequence

from analysis.models import NavPoint


class ValidationError(ValueError):
    """Raised when data validation fails."""
    pass


def validate_nav_point(point: NavPoint) -> None:
    """
    Validate a single NAV observation.

    Args:
        point: NavPoint to check

    Raises:
        ValidationError: If validation fails
    """
    # datetime is a date subclass; sub-day precision must be normalized away
    if isinstance(point.date, datetime) or not isinstance(point.date, date):
        raise ValidationError(f"date must be date, got {type(point.date)}")

    value = point.value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"value must be numeric, got {type(value)}")

    if not math.isfinite(value):
        raise ValidationError(f"value must be finite, got {value}")

    if value <= 0:
        raise ValidationError(f"value must be positive, got {value}")


def check_nav_date_monotonicity(points: Sequence[NavPoint]) -> None:
    """
    Check that dates are strictly increasing.

    Args:
        points: NAV observations in series order

    Raises:
        ValidationError: If dates repeat or go backwards
    """
    for i in range(1, len(points)):
        if points[i].date <= points[i - 1].date:
            raise ValidationError(
                f"NAV dates not monotonic: {points[i - 1].date} >= {points[i].date}"
            )


def validate_nav_series(points: Sequence[NavPoint]) -> None:
    """
    Validate a series against the engine's input contract.

    Raises:
        ValidationError: If the series is empty, has invalid points or
            out-of-order dates
    """
    if not points:
        raise ValidationError("NAV series must contain at least one observation")

    for point in points:
        validate_nav_point(point)

    check_nav_date_monotonicity(points)
