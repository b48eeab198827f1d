"""
Shared data types for NAV analysis.
Plain frozen records - computed on demand, never mutated after creation.
"""

from dataclasses import dataclass, fields
from datetime import date
from typing import Any, Dict, List, Optional, Sequence


@dataclass(frozen=True)
class NavPoint:
    """One observation of a product's net asset value."""
    date: date
    value: float


# Ascending by date, values positive. Owned by the caller.
TimeSeries = Sequence[NavPoint]


@dataclass(frozen=True)
class Metrics:
    """
    Point-in-time performance statistics for one product.

    Numeric fields are None when the statistic is undefined for the input
    (too few points, zero variance, span under a week, no recovery).
    """
    inception_date: date
    elapsed_years: float
    cumulative_return_pct: float
    annualized_return_pct: Optional[float]
    volatility_pct: Optional[float]
    sharpe_ratio: Optional[float]
    max_drawdown_pct: float
    max_drawdown_recovery_days: Optional[int]
    trailing_1y_return_pct: Optional[float]
    trailing_1y_volatility_pct: Optional[float]
    trailing_1y_window: str

    def to_dict(self) -> Dict[str, Any]:
        """Export-friendly mapping keyed by METRIC_FIELDS."""
        result = {}
        for name in METRIC_FIELDS:
            value = getattr(self, name)
            result[name] = value.isoformat() if isinstance(value, date) else value
        return result


METRIC_FIELDS: List[str] = [f.name for f in fields(Metrics)]

# Subset shown for bounded time-window comparisons
TIME_WINDOW_FIELDS: List[str] = [
    'cumulative_return_pct',
    'annualized_return_pct',
    'volatility_pct',
    'sharpe_ratio',
    'max_drawdown_pct',
]
