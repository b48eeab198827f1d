"""
Metrics aggregator - composes all NAV calculations into a Metrics record.
Pure function that combines returns, volatility, drawdown and trailing-year stats.
"""

from datetime import date, timedelta
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from analysis.models import Metrics, NavPoint
from analysis.calculations.returns import (
    DAYS_PER_YEAR,
    annualized_return,
    cumulative_return,
    days_between,
    weekly_returns,
)
from analysis.calculations.volatility import annualized_volatility, sharpe_ratio
from analysis.calculations.drawdown import max_drawdown, max_recovery_days
from analysis.calculations.benchmark import nearest_date


def compute_metrics(
    series: Sequence[NavPoint],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> Optional[Metrics]:
    """
    Compute the full metrics record for one product.

    Trailing-year fields always use the complete series, whatever window
    start_date/end_date select.

    Args:
        series: NAV series, ascending by date
        start_date: Inclusive lower bound (optional)
        end_date: Inclusive upper bound (optional)

    Returns:
        Metrics record, or None when fewer than 2 points fall in the window
    """
    if len(series) < 2:
        return None

    window = filter_window(series, start_date, end_date)
    if len(window) < 2:
        return None

    dates = [p.date for p in window]
    values = [p.value for p in window]

    elapsed_days = max(0, days_between(dates[0], dates[-1]))
    total_return = cumulative_return(values[0], values[-1])

    weekly_ret = weekly_returns(values, dates)
    trailing_return, trailing_vol, trailing_label = _trailing_year_stats(series)

    return Metrics(
        inception_date=dates[0],
        elapsed_years=round(elapsed_days / DAYS_PER_YEAR, 2),
        cumulative_return_pct=round(total_return, 2),
        annualized_return_pct=_round2(annualized_return(total_return, elapsed_days)),
        volatility_pct=_round2(annualized_volatility(weekly_ret)),
        sharpe_ratio=_round2(sharpe_ratio(weekly_ret)),
        max_drawdown_pct=round(max_drawdown(values), 2),
        max_drawdown_recovery_days=max_recovery_days(values, dates),
        trailing_1y_return_pct=_round2(trailing_return),
        trailing_1y_volatility_pct=_round2(trailing_vol),
        trailing_1y_window=trailing_label,
    )


def compute_all_metrics(
    series_by_id: Mapping[str, Sequence[NavPoint]],
    ids: Optional[Sequence[str]] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> Dict[str, Optional[Metrics]]:
    """Metrics per product id; absent products map to None."""
    if ids is None:
        ids = list(series_by_id)

    return {
        product_id: compute_metrics(series_by_id.get(product_id, []), start_date, end_date)
        for product_id in ids
    }


def filter_window(
    series: Sequence[NavPoint],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> List[NavPoint]:
    """Observations within [start_date, end_date], bounds inclusive."""
    return [
        p for p in series
        if (start_date is None or p.date >= start_date)
        and (end_date is None or p.date <= end_date)
    ]


def _trailing_year_stats(
    series: Sequence[NavPoint]
) -> Tuple[Optional[float], Optional[float], str]:
    """Annualized return, volatility and label for the last ~365 days."""
    window_end = series[-1].date
    window_start = nearest_date(
        [p.date for p in series],
        window_end - timedelta(days=DAYS_PER_YEAR)
    )
    label = f"{window_start.isoformat()} – {window_end.isoformat()}"

    trailing = filter_window(series, window_start, window_end)
    if len(trailing) < 2:
        return None, None, label

    dates = [p.date for p in trailing]
    values = [p.value for p in trailing]

    trailing_return = annualized_return(
        cumulative_return(values[0], values[-1]),
        max(0, days_between(dates[0], dates[-1]))
    )
    trailing_vol = annualized_volatility(weekly_returns(values, dates))

    return trailing_return, trailing_vol, label


def _round2(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    return round(value, 2)
