"""
Time-window presets for bounded metrics comparisons.
"""

from datetime import date
from typing import Dict, Mapping, Optional, Sequence, Tuple

from dateutil.relativedelta import relativedelta

from analysis.models import Metrics, NavPoint
from analysis.metrics_aggregator import compute_metrics


# Preset -> offset back from the last observation (None = special case)
WINDOW_PRESETS: Dict[str, Optional[relativedelta]] = {
    'all': None,
    '5y': relativedelta(years=5),
    '3y': relativedelta(years=3),
    '1y': relativedelta(years=1),
    'ytd': None,
    '1m': relativedelta(months=1),
}


def window_bounds(series: Sequence[NavPoint], preset: str) -> Tuple[date, date]:
    """
    Resolve a preset to inclusive (start, end) dates for a series.

    The end is always the series' last date. The start never precedes the
    series' first date.

    Raises:
        ValueError: If the series is empty or the preset is unknown
    """
    if preset not in WINDOW_PRESETS:
        raise ValueError(f"Unknown time window: {preset}. Expected one of {list(WINDOW_PRESETS)}")

    if not series:
        raise ValueError("Cannot resolve a time window for an empty series")

    first, end = series[0].date, series[-1].date

    if preset == 'all':
        start = first
    elif preset == 'ytd':
        start = date(end.year, 1, 1)
    else:
        start = end - WINDOW_PRESETS[preset]

    return max(start, first), end


def window_metrics(
    series_by_id: Mapping[str, Sequence[NavPoint]],
    preset: str,
    ids: Optional[Sequence[str]] = None
) -> Dict[str, Optional[Metrics]]:
    """Metrics per product over its own preset window."""
    if ids is None:
        ids = list(series_by_id)

    result = {}
    for product_id in ids:
        series = series_by_id.get(product_id, [])
        if not series:
            result[product_id] = None
            continue
        start, end = window_bounds(series, preset)
        result[product_id] = compute_metrics(series, start, end)

    return result
