"""
Benchmark comparison utilities.
Pure functions for excess return, peer consistency and monthly win rate.
"""

import numpy as np
from datetime import date
from typing import Dict, Mapping, Optional, Sequence, Tuple

from analysis.models import NavPoint
from analysis.calculations.returns import (
    annualized_return,
    cumulative_return,
    days_between,
)
from analysis.calculations.correlation import pairwise_correlation


class BenchmarkError(Exception):
    """Raised when benchmark comparison inputs are invalid."""
    pass


def nearest_value(series: Sequence[NavPoint], target: date) -> float:
    """
    Value of the observation closest in time to target.

    Linear scan; the earliest observation wins ties.

    Raises:
        BenchmarkError: If the series is empty
    """
    if not series:
        raise BenchmarkError("Cannot look up a value in an empty series")

    best = series[0]
    best_distance = abs(days_between(best.date, target))
    for point in series[1:]:
        distance = abs(days_between(point.date, target))
        if distance < best_distance:
            best, best_distance = point, distance

    return best.value


def nearest_date(dates: Sequence[date], target: date) -> date:
    """Observation date closest to target (earliest wins ties)."""
    if not dates:
        raise BenchmarkError("Cannot look up a date in an empty series")

    return min(dates, key=lambda d: abs(days_between(d, target)))


def span_annualized_return(
    first_value: float,
    last_value: float,
    start: date,
    end: date
) -> Optional[float]:
    """Annualized return between two values over a calendar span."""
    return annualized_return(
        cumulative_return(first_value, last_value),
        days_between(start, end)
    )


def excess_return(
    product: Sequence[NavPoint],
    benchmark: Sequence[NavPoint]
) -> Optional[float]:
    """
    Product annualized return minus benchmark annualized return.

    Both are measured over the product's own start and end dates; the
    benchmark contributes its observations nearest to those dates.

    Args:
        product: Product NAV series
        benchmark: Benchmark NAV series

    Returns:
        Excess annualized return in percentage points, or None when either
        side is undefined
    """
    if len(product) < 2 or not benchmark:
        return None

    start, end = product[0].date, product[-1].date

    product_return = span_annualized_return(product[0].value, product[-1].value, start, end)
    benchmark_return = span_annualized_return(
        nearest_value(benchmark, start),
        nearest_value(benchmark, end),
        start,
        end
    )

    if product_return is None or benchmark_return is None:
        return None

    return product_return - benchmark_return


def consistency(
    target_id: str,
    peer_ids: Sequence[str],
    series_by_id: Mapping[str, Sequence[NavPoint]]
) -> Optional[float]:
    """
    Mean weekly-return correlation of a product with its strategy peers.

    The target itself and peers without a series are skipped, as are peers
    whose correlation cannot be computed.

    Returns:
        Average correlation, or None if no peer yields one
    """
    if not series_by_id.get(target_id):
        return None

    correlations = []
    for peer_id in dict.fromkeys(peer_ids):
        if peer_id == target_id or not series_by_id.get(peer_id):
            continue

        coefficient = pairwise_correlation(target_id, peer_id, series_by_id)
        if coefficient is not None:
            correlations.append(coefficient)

    if not correlations:
        return None

    return float(np.mean(correlations))


def month_end_values(series: Sequence[NavPoint]) -> Dict[Tuple[int, int], float]:
    """Value at the latest observation of each (year, month)."""
    latest: Dict[Tuple[int, int], NavPoint] = {}
    for point in series:
        key = (point.date.year, point.date.month)
        current = latest.get(key)
        if current is None or point.date > current.date:
            latest[key] = point

    return {key: point.value for key, point in latest.items()}


def monthly_win_rate(
    product: Sequence[NavPoint],
    benchmark: Sequence[NavPoint]
) -> Optional[float]:
    """
    Share of month-over-month periods where the product beats the benchmark.

    Months are keyed by (year, month) and valued at their last observation.
    Only months present in both series count; consecutive common months form
    one comparison each.

    Args:
        product: Product NAV series
        benchmark: Benchmark NAV series

    Returns:
        Win rate in percent (50.0 = 50%), or None with fewer than 2 common months
    """
    product_months = month_end_values(product)
    benchmark_months = month_end_values(benchmark)

    common = sorted(set(product_months) & set(benchmark_months))
    if len(common) < 2:
        return None

    wins = 0
    for prev, curr in zip(common, common[1:]):
        product_ret = product_months[curr] / product_months[prev] - 1
        benchmark_ret = benchmark_months[curr] / benchmark_months[prev] - 1
        if product_ret > benchmark_ret:
            wins += 1

    return wins / (len(common) - 1) * 100
