"""
Tests for time-window presets.
"""

from datetime import date

import pytest

from analysis.time_windows import WINDOW_PRESETS, window_bounds, window_metrics


@pytest.fixture
def monthly_series(make_series):
    # 2019-01-15 .. 2024-06-15, one point per month
    dates = [date(2019 + (m // 12), m % 12 + 1, 15) for m in range(66)]
    return make_series([100.0 + m for m in range(66)], dates=dates)


class TestWindowBounds:

    def test_all_spans_full_series(self, monthly_series):
        assert window_bounds(monthly_series, 'all') == (date(2019, 1, 15), date(2024, 6, 15))

    def test_year_presets(self, monthly_series):
        assert window_bounds(monthly_series, '1y') == (date(2023, 6, 15), date(2024, 6, 15))
        assert window_bounds(monthly_series, '3y') == (date(2021, 6, 15), date(2024, 6, 15))

    def test_start_clamped_to_first_date(self, monthly_series):
        start, _ = window_bounds(monthly_series, '5y')
        assert start == date(2019, 6, 15)

        short = monthly_series[-6:]
        assert window_bounds(short, '5y')[0] == short[0].date

    def test_ytd_starts_january_first(self, monthly_series):
        assert window_bounds(monthly_series, 'ytd') == (date(2024, 1, 1), date(2024, 6, 15))

    def test_one_month(self, monthly_series):
        assert window_bounds(monthly_series, '1m') == (date(2024, 5, 15), date(2024, 6, 15))

    def test_leap_day_clamps(self, make_series):
        series = make_series([1.0, 1.1], dates=[date(2023, 1, 1), date(2024, 2, 29)])
        assert window_bounds(series, '1y')[0] == date(2023, 2, 28)

    def test_unknown_preset_raises(self, monthly_series):
        with pytest.raises(ValueError, match="Unknown time window"):
            window_bounds(monthly_series, '10y')

    def test_empty_series_raises(self):
        with pytest.raises(ValueError):
            window_bounds([], 'all')


class TestWindowMetrics:

    def test_each_product_uses_own_window(self, monthly_series, make_series):
        other = make_series([10.0, 10.5, 11.0], dates=[date(2024, 4, 1), date(2024, 5, 1), date(2024, 6, 1)])
        result = window_metrics({'long': monthly_series, 'short': other}, '1y')

        assert result['long'].inception_date == date(2023, 6, 15)
        assert result['short'].inception_date == date(2024, 4, 1)

    def test_absent_when_window_too_narrow(self, monthly_series):
        result = window_metrics({'p': monthly_series}, '1m')
        # 2024-05-15 and 2024-06-15 are both in range
        assert result['p'] is not None

        sparse = [monthly_series[0], monthly_series[-1]]
        assert window_metrics({'p': sparse}, '1m')['p'] is None

    def test_missing_product(self, monthly_series):
        assert window_metrics({'p': monthly_series}, 'all', ['p', 'q'])['q'] is None

    def test_presets_listed(self):
        assert set(WINDOW_PRESETS) == {'all', '5y', '3y', '1y', 'ytd', '1m'}
