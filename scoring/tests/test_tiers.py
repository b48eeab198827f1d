"""
Tests for tiered threshold tables.
"""

import pytest

from scoring.tiers import (
    ALTERNATIVE_DRAWDOWN,
    ALTERNATIVE_SHARPE,
    EQUITY_CONSISTENCY,
    EQUITY_DRAWDOWN,
    EQUITY_RETURN,
    EQUITY_VOLATILITY,
    FIXED_INCOME_CONSISTENCY,
    FIXED_INCOME_DRAWDOWN,
    FIXED_INCOME_EXCESS_RETURN,
    FIXED_INCOME_RETURN,
    FIXED_INCOME_VOLATILITY,
    MONTHLY_WIN_RATE,
    NEUTRAL_ARBITRAGE_RETURN,
    Direction,
    evaluate_tiers,
)


class TestEvaluateTiers:

    def test_first_matching_band_wins(self):
        bands = ((10, 100), (5, 50))
        assert evaluate_tiers(12, bands, Direction.AT_LEAST) == 100
        assert evaluate_tiers(7, bands, Direction.AT_LEAST) == 50
        assert evaluate_tiers(1, bands, Direction.AT_LEAST) == 0

    def test_at_most(self):
        bands = ((5, 100), (10, 50))
        assert evaluate_tiers(3, bands, Direction.AT_MOST) == 100
        assert evaluate_tiers(10, bands, Direction.AT_MOST) == 50
        assert evaluate_tiers(11, bands, Direction.AT_MOST) == 0

    def test_abs_value(self):
        assert evaluate_tiers(-3, ((5, 100),), Direction.AT_MOST, use_abs=True) == 100
        assert evaluate_tiers(-3, ((5, 100),), Direction.AT_MOST) == 100
        assert evaluate_tiers(-6, ((5, 100),), Direction.AT_MOST, use_abs=True) == 0

    def test_unavailable_value(self):
        assert evaluate_tiers(None, ((1, 100),), Direction.AT_LEAST) is None


@pytest.mark.parametrize('table, value, expected', [
    (EQUITY_RETURN, 12, 100),
    (EQUITY_RETURN, 11.99, 66),
    (EQUITY_RETURN, 4, 33),
    (EQUITY_RETURN, -5, 0),
    (EQUITY_CONSISTENCY, 0.95, 100),
    (EQUITY_CONSISTENCY, 0.92, 50),
    (EQUITY_CONSISTENCY, 0.5, 0),
    (EQUITY_VOLATILITY, 20, 100),
    (EQUITY_VOLATILITY, 27, 33),
    (EQUITY_VOLATILITY, 31, 0),
    (EQUITY_DRAWDOWN, -20, 100),
    (EQUITY_DRAWDOWN, -30, 75),
    (EQUITY_DRAWDOWN, -35, 50),
    (EQUITY_DRAWDOWN, -50, 25),
    (EQUITY_DRAWDOWN, -50.01, 0),
    (FIXED_INCOME_RETURN, 2.5, 66),
    (FIXED_INCOME_RETURN, 1.49, 0),
    (FIXED_INCOME_EXCESS_RETURN, 0, 33),
    (FIXED_INCOME_EXCESS_RETURN, -0.01, 0),
    (FIXED_INCOME_CONSISTENCY, 0.96, 50),
    (FIXED_INCOME_VOLATILITY, 1, 100),
    (FIXED_INCOME_VOLATILITY, 3.5, 33),
    (FIXED_INCOME_DRAWDOWN, -4, 66),
    (FIXED_INCOME_DRAWDOWN, -9, 0),
    (NEUTRAL_ARBITRAGE_RETURN, 6, 100),
    (NEUTRAL_ARBITRAGE_RETURN, 2, 33),
    (ALTERNATIVE_SHARPE, 1.0, 66),
    (ALTERNATIVE_SHARPE, 0.69, 0),
    (ALTERNATIVE_DRAWDOWN, -5, 100),
    (ALTERNATIVE_DRAWDOWN, -15.5, 33),
    (MONTHLY_WIN_RATE, 60, 100),
    (MONTHLY_WIN_RATE, 50, 50),
    (MONTHLY_WIN_RATE, 49.9, 0),
])
def test_standard_tables(table, value, expected):
    assert table.evaluate(value) == expected


def test_bands_listed_best_first():
    tables = [
        EQUITY_RETURN, EQUITY_CONSISTENCY, EQUITY_VOLATILITY, EQUITY_DRAWDOWN,
        FIXED_INCOME_RETURN, FIXED_INCOME_EXCESS_RETURN, FIXED_INCOME_CONSISTENCY,
        FIXED_INCOME_VOLATILITY, FIXED_INCOME_DRAWDOWN, NEUTRAL_ARBITRAGE_RETURN,
        ALTERNATIVE_SHARPE, ALTERNATIVE_DRAWDOWN, MONTHLY_WIN_RATE,
    ]
    for table in tables:
        thresholds = [threshold for threshold, _ in table.bands]
        scores = [score for _, score in table.bands]
        expected_order = sorted(thresholds, reverse=table.direction is Direction.AT_LEAST)
        assert thresholds == expected_order, table.name
        assert scores == sorted(scores, reverse=True), table.name
