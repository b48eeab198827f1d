"""
Tests for the scoring engine - profile dispatch, renormalized totals and
per-criterion scores.
"""

from datetime import date

import pytest

from analysis.models import Metrics
from scoring.engine import (
    ALTERNATIVE_PROFILE,
    EQUITY_PROFILE,
    FIXED_INCOME_PROFILE,
    INDEX_ENHANCED_EQUITY_PROFILE,
    NEUTRAL_ARBITRAGE_PROFILE,
    Criterion,
    ProductCategory,
    ScoringError,
    ScoringProfile,
    score_product,
    scoring_profile,
    weighted_total,
)


def make_metrics(**overrides):
    fields = dict(
        inception_date=date(2020, 1, 3),
        elapsed_years=4.0,
        cumulative_return_pct=60.0,
        annualized_return_pct=12.5,
        volatility_pct=18.0,
        sharpe_ratio=1.2,
        max_drawdown_pct=-22.0,
        max_drawdown_recovery_days=120,
        trailing_1y_return_pct=9.0,
        trailing_1y_volatility_pct=21.0,
        trailing_1y_window="2023-01-06 – 2024-01-05",
    )
    fields.update(overrides)
    return Metrics(**fields)


class TestWeightedTotal:

    def test_renormalizes_over_available(self):
        total = weighted_total({'a': 80, 'b': None}, {'a': 0.5, 'b': 0.5})
        assert total == pytest.approx(80.0)

    def test_full_weighted_mean(self):
        total = weighted_total({'a': 100, 'b': 0}, {'a': 0.25, 'b': 0.75})
        assert total == pytest.approx(25.0)

    def test_nothing_available_is_zero(self):
        assert weighted_total({'a': None}, {'a': 1.0}) == 0.0
        assert weighted_total({}, {}) == 0.0

    def test_zero_score_still_counts(self):
        assert weighted_total({'a': 0, 'b': 100}, {'a': 0.5, 'b': 0.5}) == pytest.approx(50.0)


class TestProfiles:

    @pytest.mark.parametrize('profile', [
        EQUITY_PROFILE, INDEX_ENHANCED_EQUITY_PROFILE, FIXED_INCOME_PROFILE,
        ALTERNATIVE_PROFILE, NEUTRAL_ARBITRAGE_PROFILE,
    ])
    def test_weights_sum_to_one(self, profile):
        assert sum(profile.weights.values()) == pytest.approx(1.0)
        assert set(profile.weights) == set(profile.tables)

    def test_dispatch(self):
        assert scoring_profile(ProductCategory.EQUITY) is EQUITY_PROFILE
        assert scoring_profile(ProductCategory.EQUITY, index_enhanced=True) is INDEX_ENHANCED_EQUITY_PROFILE
        assert scoring_profile(ProductCategory.FIXED_INCOME, index_enhanced=True) is FIXED_INCOME_PROFILE
        assert scoring_profile(ProductCategory.ALTERNATIVE) is ALTERNATIVE_PROFILE
        assert scoring_profile(ProductCategory.ALTERNATIVE, neutral_arbitrage=True) is NEUTRAL_ARBITRAGE_PROFILE

    def test_flags_only_apply_to_their_category(self):
        assert scoring_profile(ProductCategory.EQUITY, neutral_arbitrage=True) is EQUITY_PROFILE
        assert scoring_profile(ProductCategory.ALTERNATIVE, index_enhanced=True) is ALTERNATIVE_PROFILE

    def test_index_enhanced_adds_win_rate(self):
        assert Criterion.MONTHLY_WIN_RATE not in EQUITY_PROFILE.weights
        assert INDEX_ENHANCED_EQUITY_PROFILE.weights[Criterion.MONTHLY_WIN_RATE] == 0.10
        assert INDEX_ENHANCED_EQUITY_PROFILE.weights[Criterion.MAX_DRAWDOWN] == 0.12


class TestProductCategory:

    @pytest.mark.parametrize('raw', ['fixed_income', 'FIXED_INCOME', 'Fixed Income', 'fixed-income'])
    def test_parse_variants(self, raw):
        assert ProductCategory.parse(raw) is ProductCategory.FIXED_INCOME

    def test_parse_unknown(self):
        with pytest.raises(ScoringError):
            ProductCategory.parse('commodity')


class TestScoreProduct:

    def test_equity_scores(self):
        result = score_product(
            'equity', make_metrics(), excess_return=5.0, consistency=0.93, monthly_win_rate=None,
            product_id='fund_a'
        )

        assert result.scores == {
            'historical_return': 100,
            'excess_return': 33,
            'consistency': 50,
            'volatility': 66,
            'max_drawdown': 75,
        }
        expected = (100 * .22 + 33 * .22 + 50 * .22 + 66 * .12 + 75 * .22) / 1.0
        assert result.total == pytest.approx(expected)
        assert result.product_id == 'fund_a'
        assert result.inputs['volatility'] == 21.0

    def test_unavailable_inputs_excluded_from_total(self):
        result = score_product(
            ProductCategory.EQUITY, make_metrics(trailing_1y_volatility_pct=None),
            excess_return=None, consistency=None, monthly_win_rate=None
        )

        assert result.scores['excess_return'] is None
        assert result.scores['consistency'] is None
        assert result.scores['volatility'] is None
        # historical 100 (w .22) and drawdown 75 (w .22) only
        assert result.total == pytest.approx(87.5)

    def test_index_enhanced_uses_win_rate(self):
        result = score_product(
            'equity', make_metrics(), excess_return=12.0, consistency=0.99,
            monthly_win_rate=55.0, index_enhanced=True
        )

        assert result.scores['monthly_win_rate'] == 50
        assert result.weights['monthly_win_rate'] == 0.10
        assert result.index_enhanced is True

    def test_fixed_income_tables(self):
        metrics = make_metrics(annualized_return_pct=3.0, trailing_1y_volatility_pct=0.8,
                               max_drawdown_pct=-1.5)
        result = score_product('fixed_income', metrics, excess_return=-0.5,
                               consistency=0.97, monthly_win_rate=80.0)

        assert result.scores == {
            'historical_return': 66,
            'excess_return': 0,
            'consistency': 100,
            'volatility': 100,
            'max_drawdown': 100,
        }

    def test_alternative_scores(self):
        metrics = make_metrics(annualized_return_pct=5.0, sharpe_ratio=1.6, max_drawdown_pct=-12.0)
        result = score_product('alternative', metrics, excess_return=None,
                               consistency=0.91, monthly_win_rate=62.0)

        assert result.scores == {
            'historical_return': 33,
            'sharpe': 100,
            'monthly_win_rate': 100,
            'consistency': 50,
            'max_drawdown': 66,
        }
        assert 'excess_return' not in result.inputs

    def test_neutral_arbitrage_return_table(self):
        metrics = make_metrics(annualized_return_pct=5.0)
        result = score_product('alternative', metrics, None, None, None, neutral_arbitrage=True)

        assert result.scores['historical_return'] == 66

    def test_absent_metrics_never_fail(self):
        result = score_product('alternative', None, None, None, None)

        assert all(score is None for score in result.scores.values())
        assert result.total == 0.0

    def test_to_dict(self):
        result = score_product('equity', make_metrics(), 5.0, 0.93, None, product_id='fund_a')
        exported = result.to_dict()

        assert exported['category'] == 'equity'
        assert exported['total'] == result.total
        assert set(exported['scores']) == set(exported['weights'])

    def test_result_records_only_applied_flags(self):
        fixed = score_product('fixed_income', make_metrics(), None, None, None,
                              index_enhanced=True, neutral_arbitrage=True)
        equity = score_product('equity', make_metrics(), None, None, None,
                               index_enhanced=True, neutral_arbitrage=True)
        alternative = score_product('alternative', make_metrics(), None, None, None,
                                    index_enhanced=True, neutral_arbitrage=True)

        assert (fixed.index_enhanced, fixed.neutral_arbitrage) == (False, False)
        assert (equity.index_enhanced, equity.neutral_arbitrage) == (True, False)
        assert (alternative.index_enhanced, alternative.neutral_arbitrage) == (False, True)
        assert fixed.to_dict()['index_enhanced'] is False


class TestProfileImmutability:

    def test_shared_profiles_reject_mutation(self):
        with pytest.raises(TypeError):
            EQUITY_PROFILE.weights[Criterion.VOLATILITY] = 0.5
        with pytest.raises(TypeError):
            scoring_profile(ProductCategory.EQUITY).tables[Criterion.SHARPE] = None

        assert EQUITY_PROFILE.weights[Criterion.VOLATILITY] == 0.12
        assert Criterion.SHARPE not in EQUITY_PROFILE.tables

    def test_source_dict_changes_do_not_leak(self):
        tables = {Criterion.HISTORICAL_RETURN: EQUITY_PROFILE.tables[Criterion.HISTORICAL_RETURN]}
        weights = {Criterion.HISTORICAL_RETURN: 1.0}
        profile = ScoringProfile(tables=tables, weights=weights)
        weights[Criterion.HISTORICAL_RETURN] = 0.0

        assert profile.weights[Criterion.HISTORICAL_RETURN] == 1.0
