"""
Tests for volatility and Sharpe ratio utilities.
"""

import math

import numpy as np
import pytest

from analysis.calculations.volatility import (
    annualized_volatility,
    sample_std,
    sharpe_ratio,
    RISK_FREE_RATE,
    WEEKLY_ANNUALIZATION,
    VolatilityError,
)


class TestSampleStd:

    def test_matches_numpy_ddof1(self):
        returns = [0.01, -0.02, 0.015, 0.005]
        assert sample_std(returns) == pytest.approx(np.std(returns, ddof=1))

    def test_needs_two_observations(self):
        assert sample_std([]) is None
        assert sample_std([0.01]) is None

    def test_nan_raises(self):
        with pytest.raises(VolatilityError, match="NaN"):
            sample_std([0.01, float('nan')])

    def test_inf_raises(self):
        with pytest.raises(VolatilityError, match="Infinite"):
            sample_std([0.01, float('inf')])


class TestAnnualizedVolatility:

    def test_known_value(self):
        returns = [0.01, -0.01, 0.01, -0.01]
        expected = np.std(returns, ddof=1) * math.sqrt(52) * 100
        assert annualized_volatility(returns) == pytest.approx(expected)

    def test_constant_returns_zero(self):
        assert annualized_volatility([0.0, 0.0, 0.0]) == 0.0

    def test_single_return_unavailable(self):
        assert annualized_volatility([0.02]) is None

    def test_custom_annualization(self):
        returns = [0.01, 0.03]
        assert annualized_volatility(returns, annualize=12) == pytest.approx(
            np.std(returns, ddof=1) * math.sqrt(12) * 100
        )


class TestSharpeRatio:

    def test_known_value(self):
        returns = [0.01, 0.02, -0.005, 0.015]
        std = np.std(returns, ddof=1)
        expected = (np.mean(returns) - RISK_FREE_RATE / WEEKLY_ANNUALIZATION) / std * math.sqrt(52)
        assert sharpe_ratio(returns) == pytest.approx(expected)

    def test_zero_deviation_unavailable(self):
        assert sharpe_ratio([0.01, 0.01, 0.01]) is None

    def test_too_few_returns_unavailable(self):
        assert sharpe_ratio([0.01]) is None

    def test_negative_when_below_risk_free(self):
        assert sharpe_ratio([-0.01, 0.0, -0.02]) < 0
