"""
Volatility calculation utilities.
Pure functions for sample deviation, annualized volatility and Sharpe ratio.
"""

import math
import numpy as np
from typing import Optional, Sequence


WEEKLY_ANNUALIZATION = 52
RISK_FREE_RATE = 0.02


class VolatilityError(Exception):
    """Raised when volatility calculation fails."""
    pass


def _as_checked_array(returns: Sequence[float]) -> np.ndarray:
    arr = np.asarray(returns, dtype=float)

    if np.any(np.isnan(arr)):
        raise VolatilityError("NaN values not allowed in returns")

    if np.any(np.isinf(arr)):
        raise VolatilityError("Infinite values not allowed in returns")

    return arr


def sample_std(returns: Sequence[float]) -> Optional[float]:
    """
    Sample standard deviation (ddof=1).

    Args:
        returns: Periodic returns as decimals

    Returns:
        Standard deviation, or None with fewer than 2 observations

    Raises:
        VolatilityError: If returns contain NaN or infinite values
    """
    arr = _as_checked_array(returns)

    if len(arr) < 2:
        return None

    return float(np.std(arr, ddof=1))


def annualized_volatility(
    weekly_ret: Sequence[float],
    annualize: int = WEEKLY_ANNUALIZATION
) -> Optional[float]:
    """
    Annualized volatility of weekly returns.

    Formula: sigma = std(weekly_returns, ddof=1) x sqrt(52) x 100

    Args:
        weekly_ret: Weekly returns as decimals
        annualize: Periods per year

    Returns:
        Annualized volatility in percent (25.0 = 25%), or None when undefined
    """
    std_dev = sample_std(weekly_ret)
    if std_dev is None:
        return None

    return std_dev * math.sqrt(annualize) * 100


def sharpe_ratio(
    weekly_ret: Sequence[float],
    risk_free_rate: float = RISK_FREE_RATE,
    annualize: int = WEEKLY_ANNUALIZATION
) -> Optional[float]:
    """
    Annualized Sharpe ratio of weekly returns.

    Formula: (mean(r) - rf / 52) / std(r) x sqrt(52)

    Args:
        weekly_ret: Weekly returns as decimals
        risk_free_rate: Annual risk-free rate as decimal
        annualize: Periods per year

    Returns:
        Sharpe ratio, or None when deviation is zero or undefined
    """
    std_dev = sample_std(weekly_ret)
    if std_dev is None or math.isclose(std_dev, 0.0, abs_tol=1e-15):
        return None

    excess = float(np.mean(weekly_ret)) - risk_free_rate / annualize
    return excess / std_dev * math.sqrt(annualize)
