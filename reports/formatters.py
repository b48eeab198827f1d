"""
Display formatters for NAV metrics and scores.
Deterministic string formatting for percentages, ratios, days and dates.
"""

from datetime import datetime, date
from typing import Dict, Optional, Union

from analysis.models import Metrics, METRIC_FIELDS


NOT_AVAILABLE = "Not available"

METRIC_LABELS: Dict[str, str] = {
    'inception_date': 'Inception date',
    'elapsed_years': 'Elapsed years',
    'cumulative_return_pct': 'Cumulative return',
    'annualized_return_pct': 'Annualized return',
    'volatility_pct': 'Volatility',
    'sharpe_ratio': 'Sharpe ratio',
    'max_drawdown_pct': 'Max drawdown',
    'max_drawdown_recovery_days': 'Max drawdown recovery',
    'trailing_1y_return_pct': 'Trailing 1Y return',
    'trailing_1y_volatility_pct': 'Trailing 1Y volatility',
    'trailing_1y_window': 'Trailing 1Y window',
}


class FormatterError(Exception):
    """Raised when formatter input validation fails."""
    pass


def format_percentage(value: Optional[float], decimal_places: int = 2) -> str:
    """
    Format a value that is already in percent.

    Args:
        value: Percentage value (12.345 = 12.345%)
        decimal_places: Number of decimal places (default: 2)

    Returns:
        Formatted percentage string (e.g., "12.35%")
    """
    if value is None:
        return NOT_AVAILABLE

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise FormatterError(f"Percentage value must be numeric, got {type(value)}")

    return f"{value:.{decimal_places}f}%"


def format_ratio(value: Optional[float], decimal_places: int = 2) -> str:
    """Format a unitless ratio such as Sharpe or a correlation."""
    if value is None:
        return NOT_AVAILABLE

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise FormatterError(f"Ratio value must be numeric, got {type(value)}")

    return f"{value:.{decimal_places}f}"


def format_days(value: Optional[int]) -> str:
    """Format a day count (e.g., "45 days")."""
    if value is None:
        return NOT_AVAILABLE

    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise FormatterError(f"Day count must be non-negative integer, got {value}")

    return f"{value} day" if value == 1 else f"{value} days"


def format_date_display(date_input: Union[str, date, datetime, None]) -> str:
    """
    Format date as ISO "YYYY-MM-DD".

    Args:
        date_input: Date as ISO string, date object, or datetime object

    Returns:
        Formatted date string (e.g., "2025-07-15")
    """
    if date_input is None:
        return NOT_AVAILABLE

    if isinstance(date_input, str):
        try:
            return date.fromisoformat(date_input[:10]).isoformat()
        except ValueError:
            raise FormatterError(f"Invalid date string: {date_input}")
    if isinstance(date_input, datetime):
        return date_input.date().isoformat()
    if isinstance(date_input, date):
        return date_input.isoformat()

    raise FormatterError(f"Date must be string, date, or datetime, got {type(date_input)}")


def format_metric(name: str, value) -> str:
    """Format one Metrics field by name."""
    if name not in METRIC_LABELS:
        raise FormatterError(f"Unknown metric field: {name}")

    if name == 'inception_date':
        return format_date_display(value)
    if name == 'trailing_1y_window':
        return value if value else NOT_AVAILABLE
    if name == 'elapsed_years':
        return format_ratio(value)
    if name == 'sharpe_ratio':
        return format_ratio(value)
    if name == 'max_drawdown_recovery_days':
        return format_days(value)
    return format_percentage(value)


def format_metrics(metrics: Optional[Metrics]) -> Dict[str, str]:
    """Display strings for every Metrics field, keyed by label."""
    if metrics is None:
        return {METRIC_LABELS[name]: NOT_AVAILABLE for name in METRIC_FIELDS}

    return {
        METRIC_LABELS[name]: format_metric(name, getattr(metrics, name))
        for name in METRIC_FIELDS
    }
