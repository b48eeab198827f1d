"""
Return correlation utilities.
Pure functions aligning NAV series on common calendar dates and
computing pairwise Pearson correlation of their weekly returns.
"""

import numpy as np
from datetime import date, datetime
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from analysis.models import NavPoint
from analysis.calculations.returns import weekly_returns


CorrelationMatrix = Dict[str, Dict[str, float]]


def calendar_date(value: date) -> date:
    """Drop any time-of-day component."""
    if isinstance(value, datetime):
        return value.date()
    return value


def align_on_common_dates(
    ids: Sequence[str],
    series_by_id: Mapping[str, Sequence[NavPoint]]
) -> Optional[Tuple[List[date], Dict[str, List[float]]]]:
    """
    Align several series on the calendar dates they all share.

    Args:
        ids: Product ids to align
        series_by_id: NAV series per product id

    Returns:
        (common dates ascending, aligned values per id), or None when an id
        has no series or fewer than 2 dates are shared
    """
    lookups: Dict[str, Dict[date, float]] = {}
    for product_id in ids:
        series = series_by_id.get(product_id)
        if not series:
            return None
        lookups[product_id] = {calendar_date(p.date): p.value for p in series}

    common = set.intersection(*(set(lookup) for lookup in lookups.values()))
    if len(common) < 2:
        return None

    common_dates = sorted(common)
    aligned = {
        product_id: [lookups[product_id][d] for d in common_dates]
        for product_id in ids
    }
    return common_dates, aligned


def pearson(x: Sequence[float], y: Sequence[float]) -> float:
    """
    Pearson correlation coefficient.

    Returns 0.0 when either input has zero variance, so callers always get a
    displayable number.
    """
    x_arr = np.asarray(x, dtype=float)
    y_arr = np.asarray(y, dtype=float)

    dx = x_arr - x_arr.mean()
    dy = y_arr - y_arr.mean()
    sxx = float(np.sum(dx * dx))
    syy = float(np.sum(dy * dy))

    if sxx == 0 or syy == 0:
        return 0.0

    r = float(np.sum(dx * dy)) / np.sqrt(sxx * syy)
    return float(max(-1.0, min(1.0, r)))


def correlation_matrix(
    ids: Sequence[str],
    series_by_id: Mapping[str, Sequence[NavPoint]]
) -> Optional[CorrelationMatrix]:
    """
    Pairwise weekly-return correlation matrix.

    Steps:
    1. Intersect calendar dates across all ids (need at least 2)
    2. Align values on the common dates
    3. Weekly returns per aligned series
    4. Truncate all return vectors to the shortest length
    5. Pearson per pair, diagonal fixed at 1.0

    Args:
        ids: Product ids (at least 2)
        series_by_id: NAV series per product id

    Returns:
        Symmetric nested mapping id -> id -> coefficient, or None
    """
    ids = list(dict.fromkeys(ids))
    if len(ids) < 2:
        return None

    alignment = align_on_common_dates(ids, series_by_id)
    if alignment is None:
        return None

    common_dates, aligned = alignment
    returns = {
        product_id: weekly_returns(aligned[product_id], common_dates)
        for product_id in ids
    }

    length = min(len(r) for r in returns.values())
    if length < 1:
        return None
    returns = {product_id: r[:length] for product_id, r in returns.items()}

    matrix: CorrelationMatrix = {product_id: {} for product_id in ids}
    for i, a in enumerate(ids):
        matrix[a][a] = 1.0
        for b in ids[i + 1:]:
            coefficient = pearson(returns[a], returns[b])
            matrix[a][b] = coefficient
            matrix[b][a] = coefficient

    return matrix


def pairwise_correlation(
    id_a: str,
    id_b: str,
    series_by_id: Mapping[str, Sequence[NavPoint]]
) -> Optional[float]:
    """Correlation of two products, or None when no matrix can be built."""
    matrix = correlation_matrix([id_a, id_b], series_by_id)
    if matrix is None:
        return None
    return matrix[id_a][id_b]


def group_correlations(
    groups: Mapping[str, Sequence[str]],
    series_by_id: Mapping[str, Sequence[NavPoint]]
) -> Dict[str, CorrelationMatrix]:
    """
    One correlation matrix per named product group.

    Groups with fewer than 2 members, or whose members share too few dates,
    are left out of the result.
    """
    result = {}
    for name, members in groups.items():
        matrix = correlation_matrix(members, series_by_id)
        if matrix is not None:
            result[name] = matrix
    return result
