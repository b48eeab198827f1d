"""
Tiered threshold tables for product scoring.
Each criterion is an ordered list of (threshold, score) bands evaluated by a
single rule: the first band whose predicate matches wins, otherwise 0.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class Direction(str, Enum):
    """How a metric value is compared to band thresholds."""
    AT_LEAST = 'at_least'   # higher is better: value >= threshold
    AT_MOST = 'at_most'     # lower is better: value <= threshold


@dataclass(frozen=True)
class TierTable:
    """
    Ordered step function from a metric value to a score.

    Bands must be listed best first: descending thresholds for AT_LEAST,
    ascending for AT_MOST.
    """
    name: str
    direction: Direction
    bands: Tuple[Tuple[float, int], ...]
    use_abs: bool = False

    def evaluate(self, value: Optional[float]) -> Optional[int]:
        """Score for value, or None when the value is unavailable."""
        return evaluate_tiers(value, self.bands, self.direction, self.use_abs)


def evaluate_tiers(
    value: Optional[float],
    bands: Tuple[Tuple[float, int], ...],
    direction: Direction,
    use_abs: bool = False
) -> Optional[int]:
    """
    Highest band whose predicate matches, else 0.

    Args:
        value: Metric value (None = unavailable)
        bands: (threshold, score) pairs, best first
        direction: Comparison used against each threshold
        use_abs: Compare the absolute value (drawdowns are negative)

    Returns:
        Band score, 0 below every band, or None for an unavailable value
    """
    if value is None:
        return None

    if use_abs:
        value = abs(value)

    for threshold, score in bands:
        if direction is Direction.AT_LEAST and value >= threshold:
            return score
        if direction is Direction.AT_MOST and value <= threshold:
            return score

    return 0


EQUITY_RETURN = TierTable(
    'equity_return', Direction.AT_LEAST, ((12, 100), (8, 66), (4, 33))
)
EQUITY_CONSISTENCY = TierTable(
    'equity_consistency', Direction.AT_LEAST, ((0.95, 100), (0.90, 50))
)
EQUITY_VOLATILITY = TierTable(
    'equity_volatility', Direction.AT_MOST, ((20, 100), (25, 66), (30, 33))
)
EQUITY_DRAWDOWN = TierTable(
    'equity_drawdown', Direction.AT_MOST,
    ((20, 100), (30, 75), (40, 50), (50, 25)), use_abs=True
)

FIXED_INCOME_RETURN = TierTable(
    'fixed_income_return', Direction.AT_LEAST, ((4, 100), (2.5, 66), (1.5, 33))
)
FIXED_INCOME_EXCESS_RETURN = TierTable(
    'fixed_income_excess_return', Direction.AT_LEAST, ((4, 100), (2, 66), (0, 33))
)
FIXED_INCOME_CONSISTENCY = TierTable(
    'fixed_income_consistency', Direction.AT_LEAST, ((0.97, 100), (0.92, 50))
)
FIXED_INCOME_VOLATILITY = TierTable(
    'fixed_income_volatility', Direction.AT_MOST, ((1, 100), (2, 66), (3.5, 33))
)
FIXED_INCOME_DRAWDOWN = TierTable(
    'fixed_income_drawdown', Direction.AT_MOST,
    ((2, 100), (4, 66), (8, 33)), use_abs=True
)

NEUTRAL_ARBITRAGE_RETURN = TierTable(
    'neutral_arbitrage_return', Direction.AT_LEAST, ((6, 100), (4, 66), (2, 33))
)
ALTERNATIVE_SHARPE = TierTable(
    'alternative_sharpe', Direction.AT_LEAST, ((1.5, 100), (1.0, 66), (0.7, 33))
)
ALTERNATIVE_DRAWDOWN = TierTable(
    'alternative_drawdown', Direction.AT_MOST,
    ((5, 100), (15, 66), (30, 33)), use_abs=True
)

MONTHLY_WIN_RATE = TierTable(
    'monthly_win_rate', Direction.AT_LEAST, ((60, 100), (50, 50))
)
