"""
Shared pytest fixtures for NAV series.
"""

from datetime import date, timedelta

import pytest

from analysis.models import NavPoint


def build_series(values, start=date(2023, 1, 2), step_days=1, dates=None):
    """NavPoint list from values on evenly spaced (or explicit) dates."""
    if dates is None:
        dates = [start + timedelta(days=i * step_days) for i in range(len(values))]
    return [NavPoint(date=d, value=float(v)) for d, v in zip(dates, values)]


@pytest.fixture
def make_series():
    """Factory fixture wrapping build_series."""
    return build_series


@pytest.fixture
def doubling_year():
    """Daily series rising geometrically from 100 to 200 over exactly 365 days."""
    values = [100.0 * 2 ** (i / 365) for i in range(366)]
    return build_series(values, start=date(2023, 1, 1))


@pytest.fixture
def weekly_pair():
    """Two weekly series with different, non-constant return paths."""
    a = [100, 102, 101, 105, 107, 104, 110, 112]
    b = [50, 50.5, 51.5, 51, 52.5, 53, 52, 54]
    return (
        build_series(a, start=date(2024, 1, 5), step_days=7),
        build_series(b, start=date(2024, 1, 5), step_days=7),
    )


@pytest.fixture
def write_nav_csv(tmp_path):
    """Write a (date, nav) CSV with a header row and return its path."""
    def _write(name, series, header=('date', 'nav')):
        path = tmp_path / f"{name}.csv"
        lines = [','.join(header)]
        lines.extend(f"{p.date.isoformat()},{p.value}" for p in series)
        path.write_text('\n'.join(lines) + '\n', encoding='utf-8')
        return path
    return _write
