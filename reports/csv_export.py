"""
CSV export of metrics and scoring results.
Builds tables field-by-field from the core records; unavailable values are blank.
"""

from typing import Mapping, Optional, Sequence

import pandas as pd

from analysis.models import Metrics, METRIC_FIELDS
from analysis.calculations.correlation import CorrelationMatrix
from scoring.engine import ScoringResult


def metrics_table_csv(
    metrics_by_id: Mapping[str, Optional[Metrics]],
    ids: Optional[Sequence[str]] = None,
    fields: Sequence[str] = METRIC_FIELDS
) -> str:
    """
    One row per product, one column per metric field.

    Products without metrics get a row with only their id filled in.

    Args:
        metrics_by_id: Metrics per product id (None = absent)
        ids: Row order (defaults to mapping order)
        fields: Metric fields to include, in column order

    Returns:
        CSV text with a header row
    """
    if ids is None:
        ids = list(metrics_by_id)

    rows = []
    for product_id in ids:
        metrics = metrics_by_id.get(product_id)
        row = {'product': product_id}
        values = metrics.to_dict() if metrics is not None else {}
        for name in fields:
            row[name] = values.get(name)
        rows.append(row)

    frame = pd.DataFrame(rows, columns=['product', *fields], dtype=object)
    return frame.to_csv(index=False)


def correlation_csv(matrix: CorrelationMatrix) -> str:
    """Correlation matrix as CSV with product ids on both axes."""
    ids = list(matrix)
    frame = pd.DataFrame(
        [[matrix[a][b] for b in ids] for a in ids],
        index=pd.Index(ids, name='product'),
        columns=ids
    )
    return frame.to_csv()


def scoring_csv(result: ScoringResult) -> str:
    """One row per criterion: input value, score, weight; plus a total row."""
    rows = [
        {
            'criterion': criterion,
            'input': result.inputs.get(criterion),
            'score': score,
            'weight': result.weights.get(criterion),
        }
        for criterion, score in result.scores.items()
    ]
    rows.append({'criterion': 'total', 'input': None, 'score': round(result.total, 2), 'weight': None})

    frame = pd.DataFrame(rows, columns=['criterion', 'input', 'score', 'weight'], dtype=object)
    return frame.to_csv(index=False)
