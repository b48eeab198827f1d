"""
Scoring engine - rates a product against its category's tiered standards.

The total is a weighted mean over the criteria whose score is available.
Unavailable criteria are dropped from both the numerator and the
denominator, so the remaining weights are renormalized; they are never
scored as 0.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from analysis.models import Metrics
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
    TierTable,
)


class ScoringError(Exception):
    """Raised when scoring inputs are malformed."""
    pass


class ProductCategory(str, Enum):
    """Closed set of product categories with their own scoring standards."""
    EQUITY = 'equity'
    FIXED_INCOME = 'fixed_income'
    ALTERNATIVE = 'alternative'

    @classmethod
    def parse(cls, value: Any) -> 'ProductCategory':
        """Accept an enum member, its value or its name (case-insensitive)."""
        if isinstance(value, cls):
            return value

        key = str(value).strip().lower().replace('-', '_').replace(' ', '_')
        for member in cls:
            if key in (member.value, member.name.lower()):
                return member

        raise ScoringError(
            f"Unknown product category: {value}. Expected one of {[m.value for m in cls]}"
        )


class Criterion(str, Enum):
    """Scoring criteria shared across categories."""
    HISTORICAL_RETURN = 'historical_return'
    EXCESS_RETURN = 'excess_return'
    CONSISTENCY = 'consistency'
    VOLATILITY = 'volatility'
    MAX_DRAWDOWN = 'max_drawdown'
    SHARPE = 'sharpe'
    MONTHLY_WIN_RATE = 'monthly_win_rate'


@dataclass(frozen=True)
class ScoringProfile:
    """Criteria tables and weights for one category variant (read-only)."""
    tables: Mapping[Criterion, TierTable]
    weights: Mapping[Criterion, float]

    def __post_init__(self):
        object.__setattr__(self, 'tables', MappingProxyType(dict(self.tables)))
        object.__setattr__(self, 'weights', MappingProxyType(dict(self.weights)))


_EQUITY_TABLES = {
    Criterion.HISTORICAL_RETURN: EQUITY_RETURN,
    Criterion.EXCESS_RETURN: EQUITY_RETURN,
    Criterion.CONSISTENCY: EQUITY_CONSISTENCY,
    Criterion.VOLATILITY: EQUITY_VOLATILITY,
    Criterion.MAX_DRAWDOWN: EQUITY_DRAWDOWN,
}

EQUITY_PROFILE = ScoringProfile(
    tables=dict(_EQUITY_TABLES),
    weights={
        Criterion.HISTORICAL_RETURN: 0.22,
        Criterion.EXCESS_RETURN: 0.22,
        Criterion.CONSISTENCY: 0.22,
        Criterion.VOLATILITY: 0.12,
        Criterion.MAX_DRAWDOWN: 0.22,
    },
)

INDEX_ENHANCED_EQUITY_PROFILE = ScoringProfile(
    tables={**_EQUITY_TABLES, Criterion.MONTHLY_WIN_RATE: MONTHLY_WIN_RATE},
    weights={
        Criterion.HISTORICAL_RETURN: 0.22,
        Criterion.EXCESS_RETURN: 0.22,
        Criterion.MONTHLY_WIN_RATE: 0.10,
        Criterion.CONSISTENCY: 0.22,
        Criterion.VOLATILITY: 0.12,
        Criterion.MAX_DRAWDOWN: 0.12,
    },
)

FIXED_INCOME_PROFILE = ScoringProfile(
    tables={
        Criterion.HISTORICAL_RETURN: FIXED_INCOME_RETURN,
        Criterion.EXCESS_RETURN: FIXED_INCOME_EXCESS_RETURN,
        Criterion.CONSISTENCY: FIXED_INCOME_CONSISTENCY,
        Criterion.VOLATILITY: FIXED_INCOME_VOLATILITY,
        Criterion.MAX_DRAWDOWN: FIXED_INCOME_DRAWDOWN,
    },
    weights={
        Criterion.HISTORICAL_RETURN: 0.22,
        Criterion.EXCESS_RETURN: 0.22,
        Criterion.CONSISTENCY: 0.22,
        Criterion.VOLATILITY: 0.12,
        Criterion.MAX_DRAWDOWN: 0.22,
    },
)

_ALTERNATIVE_WEIGHTS = {
    Criterion.HISTORICAL_RETURN: 0.22,
    Criterion.SHARPE: 0.22,
    Criterion.MONTHLY_WIN_RATE: 0.22,
    Criterion.CONSISTENCY: 0.22,
    Criterion.MAX_DRAWDOWN: 0.12,
}


def _alternative_profile(return_table: TierTable) -> ScoringProfile:
    return ScoringProfile(
        tables={
            Criterion.HISTORICAL_RETURN: return_table,
            Criterion.SHARPE: ALTERNATIVE_SHARPE,
            Criterion.MONTHLY_WIN_RATE: MONTHLY_WIN_RATE,
            Criterion.CONSISTENCY: EQUITY_CONSISTENCY,
            Criterion.MAX_DRAWDOWN: ALTERNATIVE_DRAWDOWN,
        },
        weights=dict(_ALTERNATIVE_WEIGHTS),
    )


ALTERNATIVE_PROFILE = _alternative_profile(EQUITY_RETURN)
NEUTRAL_ARBITRAGE_PROFILE = _alternative_profile(NEUTRAL_ARBITRAGE_RETURN)


def scoring_profile(
    category: ProductCategory,
    index_enhanced: bool = False,
    neutral_arbitrage: bool = False
) -> ScoringProfile:
    """
    Select the criteria tables and weights for a category variant.

    index_enhanced only affects equity products, neutral_arbitrage only
    alternative ones.
    """
    if category is ProductCategory.EQUITY:
        return INDEX_ENHANCED_EQUITY_PROFILE if index_enhanced else EQUITY_PROFILE
    if category is ProductCategory.FIXED_INCOME:
        return FIXED_INCOME_PROFILE
    if category is ProductCategory.ALTERNATIVE:
        return NEUTRAL_ARBITRAGE_PROFILE if neutral_arbitrage else ALTERNATIVE_PROFILE

    raise ScoringError(f"No scoring profile for category: {category}")


def weighted_total(
    scores: Mapping[Any, Optional[float]],
    weights: Mapping[Any, float]
) -> float:
    """
    Weighted mean over available scores with renormalized weights.

    total = sum(score_i * w_i) / sum(w_i), both sums over criteria whose
    score is not None and that carry a weight. Returns 0.0 when nothing is
    available.
    """
    weighted_sum = 0.0
    weight_sum = 0.0
    for key, score in scores.items():
        weight = weights.get(key)
        if score is None or not weight:
            continue
        weighted_sum += score * weight
        weight_sum += weight

    if weight_sum <= 0:
        return 0.0

    return weighted_sum / weight_sum


@dataclass(frozen=True)
class ScoringResult:
    """Score breakdown and total for one product."""
    product_id: Optional[str]
    category: ProductCategory
    index_enhanced: bool
    neutral_arbitrage: bool
    scores: Dict[str, Optional[int]]
    weights: Dict[str, float]
    total: float
    inputs: Dict[str, Optional[float]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'product_id': self.product_id,
            'category': self.category.value,
            'index_enhanced': self.index_enhanced,
            'neutral_arbitrage': self.neutral_arbitrage,
            'inputs': dict(self.inputs),
            'scores': dict(self.scores),
            'weights': dict(self.weights),
            'total': self.total,
        }


def score_product(
    category: Any,
    metrics: Optional[Metrics],
    excess_return: Optional[float],
    consistency: Optional[float],
    monthly_win_rate: Optional[float],
    index_enhanced: bool = False,
    neutral_arbitrage: bool = False,
    product_id: Optional[str] = None
) -> ScoringResult:
    """
    Score a product against its category's standards.

    Metric-derived inputs: historical return is the annualized return,
    volatility the trailing-year volatility, drawdown the max drawdown.
    Missing metrics make those criteria unavailable rather than failing.

    Args:
        category: ProductCategory (or its value/name)
        metrics: Full-period metrics for the product (None if absent)
        excess_return: Annualized excess return over the benchmark, in points
        consistency: Mean correlation with strategy peers
        monthly_win_rate: Monthly win rate versus the benchmark, in percent
        index_enhanced: Equity index-enhanced variant
        neutral_arbitrage: Alternative market-neutral / arbitrage variant
        product_id: Identifier carried into the result

    Returns:
        ScoringResult with per-criterion scores (None = unavailable),
        weights and the renormalized weighted total
    """
    category = ProductCategory.parse(category)
    profile = scoring_profile(category, index_enhanced, neutral_arbitrage)

    inputs = {
        Criterion.HISTORICAL_RETURN: metrics.annualized_return_pct if metrics else None,
        Criterion.EXCESS_RETURN: excess_return,
        Criterion.CONSISTENCY: consistency,
        Criterion.VOLATILITY: metrics.trailing_1y_volatility_pct if metrics else None,
        Criterion.MAX_DRAWDOWN: metrics.max_drawdown_pct if metrics else None,
        Criterion.SHARPE: metrics.sharpe_ratio if metrics else None,
        Criterion.MONTHLY_WIN_RATE: monthly_win_rate,
    }

    scores = {
        criterion.value: table.evaluate(inputs[criterion])
        for criterion, table in profile.tables.items()
    }
    weights = {criterion.value: weight for criterion, weight in profile.weights.items()}

    return ScoringResult(
        product_id=product_id,
        category=category,
        index_enhanced=bool(index_enhanced) and category is ProductCategory.EQUITY,
        neutral_arbitrage=bool(neutral_arbitrage) and category is ProductCategory.ALTERNATIVE,
        scores=scores,
        weights=weights,
        total=weighted_total(scores, weights),
        inputs={criterion.value: inputs[criterion] for criterion in profile.tables},
    )
