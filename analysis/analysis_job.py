"""
Orchestrated analysis job - NAV files to metrics, correlation and scores.
Loads series, calls pure functions, writes JSON and CSV outputs.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from analysis.config import AnalysisConfig, ScoringConfig
from analysis.models import NavPoint, TIME_WINDOW_FIELDS
from analysis.metrics_aggregator import compute_all_metrics, compute_metrics
from analysis.time_windows import window_metrics
from analysis.calculations.correlation import correlation_matrix, group_correlations
from analysis.calculations.benchmark import consistency, excess_return, monthly_win_rate
from analysis.calculations.drawdown import drawdown_series
from ingestion.nav_loader import IngestionError, load_nav_file, load_nav_files
from reports.atomic_writer import AtomicWriteError, write_json_atomic, write_text_atomic
from reports.csv_export import correlation_csv, metrics_table_csv, scoring_csv
from scoring.engine import ScoringResult, score_product


logger = logging.getLogger(__name__)


class AnalysisJobError(Exception):
    """Raised when analysis job fails."""
    pass


def analyze_products(
    series_by_id: Mapping[str, Sequence[NavPoint]],
    selected: Sequence[str],
    groups: Optional[Mapping[str, Sequence[str]]] = None,
    time_window: str = 'all'
) -> Dict[str, Any]:
    """
    Metrics, correlation and time-window metrics for a product selection.

    Args:
        series_by_id: NAV series per product id
        selected: Product ids to analyze
        groups: Named product groups for per-group correlation
        time_window: Preset for the bounded comparison

    Returns:
        Dictionary with 'metrics', 'correlation', 'group_correlations',
        'window_metrics' and 'drawdown_curves' entries
    """
    metrics = compute_all_metrics(series_by_id, selected)
    for product_id, result in metrics.items():
        if result is None:
            logger.warning(f"Not enough data to compute metrics for {product_id}")

    correlation = correlation_matrix(selected, series_by_id) if len(selected) >= 2 else None
    if len(selected) >= 2 and correlation is None:
        logger.warning("Selected products share fewer than 2 dates; no correlation matrix")

    return {
        'metrics': metrics,
        'correlation': correlation,
        'group_correlations': group_correlations(groups or {}, series_by_id),
        'time_window': time_window,
        'window_metrics': window_metrics(series_by_id, time_window, selected),
        'drawdown_curves': {
            product_id: drawdown_curve(series_by_id[product_id])
            for product_id in selected
            if series_by_id.get(product_id)
        },
    }


def drawdown_curve(series: Sequence[NavPoint]) -> List[Dict[str, Any]]:
    """Per-date drawdown from the running peak, in percent (2 decimals)."""
    curve = drawdown_series([p.value for p in series], [p.date for p in series])
    return [
        {'date': d.isoformat(), 'drawdown_pct': round(dd, 2)}
        for d, dd in curve
    ]


def score_against_benchmark(
    product_id: str,
    series_by_id: Mapping[str, Sequence[NavPoint]],
    benchmark: Sequence[NavPoint],
    scoring_config: ScoringConfig
) -> ScoringResult:
    """
    Derive benchmark-relative inputs for one product and score it.

    A series too short for metrics still scores: the history-based
    criteria are unavailable and drop out of the total.

    Raises:
        AnalysisJobError: If the product has no series
    """
    product = series_by_id.get(product_id)
    if not product:
        raise AnalysisJobError(f"No NAV series loaded for {product_id}")

    metrics = compute_metrics(product)
    if metrics is None:
        logger.warning(f"Not enough data for metrics of {product_id}; scoring without them")

    result = score_product(
        scoring_config.category,
        metrics,
        excess_return(product, benchmark),
        consistency(product_id, scoring_config.peers, series_by_id),
        monthly_win_rate(product, benchmark),
        index_enhanced=scoring_config.index_enhanced,
        neutral_arbitrage=scoring_config.neutral_arbitrage,
        product_id=product_id,
    )

    logger.info(f"Scored {product_id} ({result.category.value}): total {result.total:.2f}")
    return result


def run_analysis_job(config: AnalysisConfig) -> Dict[str, Any]:
    """
    Run a complete analysis job and write its outputs.

    Outputs in config.output_dir:
    - results.json: metrics, correlations, window metrics, drawdown curves, scoring
    - metrics.csv / window_metrics_<window>.csv: metrics tables
    - correlation.csv: global correlation matrix (when available)
    - scoring.csv: score breakdown (when scoring is configured)

    Returns:
        Dictionary with job status and summary
    """
    start_time = datetime.now()

    try:
        series_by_id, load_errors = load_nav_files(config.products)
        selected = [p for p in config.selected if p in series_by_id]

        if not selected:
            return _failed(start_time, 'No selected product could be loaded', load_errors)

        analysis = analyze_products(series_by_id, selected, config.groups, config.time_window)

        scoring = None
        if config.scoring is not None:
            _, benchmark = load_nav_file(config.scoring.benchmark_path, 'benchmark')
            scoring = score_against_benchmark(
                config.scoring.product, series_by_id, benchmark, config.scoring
            )

        output_paths = write_outputs(config.output_dir, selected, analysis, scoring)

    except (IngestionError, AnalysisJobError, AtomicWriteError) as e:
        logger.error(f"Analysis job failed: {e}")
        return _failed(start_time, str(e), {})

    metrics_calculated = sum(1 for m in analysis['metrics'].values() if m is not None)
    logger.info(f"Analysis completed: {metrics_calculated}/{len(selected)} products with metrics")

    return {
        'status': 'completed',
        'products_analyzed': len(selected),
        'metrics_calculated': metrics_calculated,
        'load_errors': load_errors,
        'scoring_total': scoring.total if scoring is not None else None,
        'output_paths': output_paths,
        'duration_seconds': (datetime.now() - start_time).total_seconds()
    }


def build_results_document(
    selected: Sequence[str],
    analysis: Mapping[str, Any],
    scoring: Optional[ScoringResult] = None
) -> Dict[str, Any]:
    """JSON-ready document for a finished analysis."""
    def metrics_dicts(metrics_map):
        return {
            product_id: (m.to_dict() if m is not None else None)
            for product_id, m in metrics_map.items()
        }

    return {
        'generated_at': datetime.now().isoformat(),
        'products': list(selected),
        'metrics': metrics_dicts(analysis['metrics']),
        'correlation': analysis['correlation'],
        'group_correlations': analysis['group_correlations'],
        'time_window': analysis['time_window'],
        'window_metrics': metrics_dicts(analysis['window_metrics']),
        'drawdown_curves': analysis['drawdown_curves'],
        'scoring': scoring.to_dict() if scoring is not None else None,
    }


def write_outputs(
    output_dir: Path,
    selected: Sequence[str],
    analysis: Mapping[str, Any],
    scoring: Optional[ScoringResult] = None
) -> List[str]:
    """Write JSON and CSV outputs atomically; returns written paths."""
    output_dir = Path(output_dir)
    written = []

    result = write_json_atomic(
        build_results_document(selected, analysis, scoring),
        output_dir / 'results.json'
    )
    written.append(result['output_path'])

    result = write_text_atomic(
        metrics_table_csv(analysis['metrics'], selected),
        output_dir / 'metrics.csv'
    )
    written.append(result['output_path'])

    result = write_text_atomic(
        metrics_table_csv(analysis['window_metrics'], selected, fields=TIME_WINDOW_FIELDS),
        output_dir / f"window_metrics_{analysis['time_window']}.csv"
    )
    written.append(result['output_path'])

    if analysis['correlation'] is not None:
        result = write_text_atomic(correlation_csv(analysis['correlation']), output_dir / 'correlation.csv')
        written.append(result['output_path'])

    if scoring is not None:
        result = write_text_atomic(scoring_csv(scoring), output_dir / 'scoring.csv')
        written.append(result['output_path'])

    logger.info(f"Wrote {len(written)} output files to {output_dir}")
    return written


def _failed(start_time: datetime, message: str, load_errors: Dict[str, str]) -> Dict[str, Any]:
    return {
        'status': 'failed',
        'error_message': message,
        'load_errors': load_errors,
        'output_paths': [],
        'metrics_calculated': 0,
        'duration_seconds': (datetime.now() - start_time).total_seconds()
    }
