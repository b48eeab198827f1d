"""
Drawdown and recovery calculation utilities.
Pure functions for maximum drawdown analysis.
"""

import numpy as np
from datetime import date
from typing import List, Optional, Sequence, Tuple

from analysis.calculations.returns import days_between


class DrawdownError(Exception):
    """Raised when drawdown calculation fails."""
    pass


def _as_value_array(values: Sequence[float]) -> np.ndarray:
    if len(values) < 1:
        raise DrawdownError("Insufficient data: need at least 1 value")

    if any(v <= 0 for v in values):
        raise DrawdownError("Zero or negative values not allowed")

    return np.asarray(values, dtype=float)


def drawdowns(values: Sequence[float]) -> np.ndarray:
    """
    Drawdown from the running peak at each observation.

    Formula: DD_i = (V_i - max(V_0..V_i)) / max(V_0..V_i)

    Args:
        values: NAV values in chronological order

    Returns:
        Array of drawdowns as decimals (0 at a peak, negative below it)

    Raises:
        DrawdownError: If values are empty or not positive
    """
    arr = _as_value_array(values)
    running_max = np.maximum.accumulate(arr)
    return (arr - running_max) / running_max


def max_drawdown(values: Sequence[float]) -> float:
    """
    Largest peak-to-trough decline in percent.

    Returns 0.0 for a non-decreasing series, otherwise a negative number
    (-10.0 = -10%).
    """
    return min(float(np.min(drawdowns(values))), 0.0) * 100


def max_recovery_days(values: Sequence[float], dates: Sequence[date]) -> Optional[int]:
    """
    Worst-case drawdown recovery duration in calendar days.

    Every index where a new running peak is set opens an episode. The
    episode's trough is the deepest drawdown at or after the peak; if that
    trough is an actual decline, recovery is the first later observation
    whose value is back at or above the peak. The longest trough-to-recovery
    span across all episodes is reported.

    Args:
        values: NAV values in chronological order
        dates: Corresponding observation dates

    Returns:
        Longest recovery in days, or None if no episode ever recovers

    Raises:
        DrawdownError: If inputs are mismatched or invalid
    """
    if len(values) != len(dates):
        raise DrawdownError("Values and dates must have same length")

    arr = _as_value_array(values)
    running_max = np.maximum.accumulate(arr)
    dd = (arr - running_max) / running_max

    peak_indices = [0] + [i for i in range(1, len(arr)) if running_max[i] > running_max[i - 1]]

    longest = None
    for peak_idx in peak_indices:
        # argmin picks the first occurrence of the deepest point
        trough_idx = peak_idx + int(np.argmin(dd[peak_idx:]))
        if dd[trough_idx] >= 0:
            continue

        peak_value = running_max[peak_idx]
        recovery_idx = None
        for i in range(trough_idx + 1, len(arr)):
            if arr[i] >= peak_value:
                recovery_idx = i
                break

        if recovery_idx is None:
            continue

        recovery = max(0, days_between(dates[trough_idx], dates[recovery_idx]))
        if longest is None or recovery > longest:
            longest = recovery

    return longest


def drawdown_series(
    values: Sequence[float],
    dates: Sequence[date]
) -> List[Tuple[date, float]]:
    """
    Drawdown curve as (date, drawdown percent) pairs.

    Args:
        values: NAV values in chronological order
        dates: Corresponding observation dates

    Returns:
        One (date, drawdown %) pair per observation

    Raises:
        DrawdownError: If inputs are mismatched or invalid
    """
    if len(values) != len(dates):
        raise DrawdownError("Values and dates must have same length")

    return [(d, float(dd) * 100) for d, dd in zip(dates, drawdowns(values))]
