"""
Returns calculation utilities.
Pure functions for cumulative, annualized and interval-adjusted weekly returns.
"""

import numpy as np
from datetime import date
from typing import List, Optional, Sequence


DAYS_PER_YEAR = 365
DAYS_PER_WEEK = 7

# Shorter spans are not annualized
MIN_ANNUALIZATION_DAYS = 7


class ReturnsError(Exception):
    """Raised when returns calculation fails."""
    pass


def days_between(start: date, end: date) -> int:
    """Whole calendar days from start to end."""
    return (end - start).days


def cumulative_return(first_value: float, last_value: float) -> float:
    """
    Calculate cumulative return between two NAV observations.

    Formula: R = (V_last / V_first - 1) x 100

    Args:
        first_value: NAV at the start of the period
        last_value: NAV at the end of the period

    Returns:
        Cumulative return in percent (20.0 = 20%)

    Raises:
        ReturnsError: If the starting value is not positive
    """
    if first_value <= 0:
        raise ReturnsError("Zero or negative starting value not allowed")

    return (last_value / first_value - 1) * 100


def annualized_return(cumulative_pct: float, elapsed_days: int) -> Optional[float]:
    """
    Annualize a cumulative return over a calendar span.

    Formula: ((1 + R/100)^(365/days) - 1) x 100

    Spans under a week and total losses (R <= -100%) have no meaningful
    annualized rate and return None.

    Args:
        cumulative_pct: Cumulative return in percent
        elapsed_days: Calendar days covered by the return

    Returns:
        Annualized return in percent, or None when undefined
    """
    if elapsed_days < MIN_ANNUALIZATION_DAYS or cumulative_pct <= -100:
        return None

    elapsed_years = elapsed_days / DAYS_PER_YEAR

    try:
        return ((1 + cumulative_pct / 100) ** (1 / elapsed_years) - 1) * 100
    except OverflowError:
        return None


def weekly_returns(values: Sequence[float], dates: Sequence[date]) -> np.ndarray:
    """
    Convert consecutive NAV observations to implied weekly returns.

    Each gap is rescaled geometrically to a one-week compounding rate:
        days  = max(1, d_i - d_{i-1})
        weeks = max(days / 7, 1)
        r_i   = (V_i / V_{i-1})^(1 / weeks) - 1

    Gaps of a week or less are taken as-is. This is not calendar-week
    bucketing; volatility, Sharpe and correlation all depend on it.

    Args:
        values: NAV values in chronological order
        dates: Corresponding observation dates

    Returns:
        Numpy array of weekly returns (length = len(values) - 1)

    Raises:
        ReturnsError: If inputs are mismatched or contain invalid values
    """
    if len(values) != len(dates):
        raise ReturnsError("Values and dates must have same length")

    if any(v <= 0 for v in values):
        raise ReturnsError("Zero or negative values not allowed")

    returns: List[float] = []
    for i in range(1, len(values)):
        days = max(1, days_between(dates[i - 1], dates[i]))
        weeks = max(days / DAYS_PER_WEEK, 1)
        returns.append((values[i] / values[i - 1]) ** (1 / weeks) - 1)

    return np.array(returns, dtype=float)
