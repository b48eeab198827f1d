#!/usr/bin/env python3
"""
Main CLI for the NAV analysis workbench.
Usage: python cli.py analyze|score [options]
"""

import os
import sys
import logging
import argparse
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

# Add project root to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from analysis.analysis_job import run_analysis_job, score_against_benchmark
from analysis.config import (
    AnalysisConfig,
    AnalysisConfigError,
    ScoringConfig,
    load_analysis_config,
)
from analysis.metrics_aggregator import compute_metrics
from analysis.time_windows import WINDOW_PRESETS
from ingestion.nav_loader import IngestionError, load_nav_file, load_nav_files
from reports.formatters import format_metrics, format_percentage, format_ratio
from scoring.engine import ProductCategory


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Analyze and score fund NAV series',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python cli.py analyze --config config/analysis.yml
  python cli.py analyze fund_a.xlsx fund_b.csv --window 3y --group core=fund_a,fund_b
  python cli.py score fund_a.xlsx --benchmark csi300.xlsx --category equity --peer fund_b.csv
        """
    )
    parser.add_argument('--log-level',
                        default=os.getenv('NAV_LOG_LEVEL', 'INFO'),
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level (default: $NAV_LOG_LEVEL or INFO)')

    subparsers = parser.add_subparsers(dest='command', required=True)

    analyze = subparsers.add_parser('analyze', help='Metrics and correlation for several products')
    analyze.add_argument('files', nargs='*', help='NAV files (.csv/.xlsx); ids are file stems')
    analyze.add_argument('--config', help='YAML job file (overrides positional files)')
    analyze.add_argument('--window', default='all', choices=list(WINDOW_PRESETS),
                         help='Time window for the bounded comparison (default: all)')
    analyze.add_argument('--group', action='append', default=[],
                         help='Named group for correlation, NAME=id1,id2 (repeatable)')
    analyze.add_argument('--output-dir', help='Directory for JSON/CSV outputs')

    score = subparsers.add_parser('score', help='Score one product against a benchmark')
    score.add_argument('file', help='NAV file of the product to score')
    score.add_argument('--benchmark', required=True, help='Benchmark NAV file')
    score.add_argument('--category', required=True, choices=[c.value for c in ProductCategory],
                       help='Product category')
    score.add_argument('--peer', action='append', default=[],
                       help='NAV file of a same-strategy peer (repeatable)')
    score.add_argument('--index-enhanced', action='store_true',
                       help='Equity index-enhanced product')
    score.add_argument('--neutral-arbitrage', action='store_true',
                       help='Market-neutral or arbitrage alternative strategy')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    load_dotenv()
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        if args.command == 'analyze':
            return run_analyze(args)
        return run_score(args)
    except (AnalysisConfigError, IngestionError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


def run_analyze(args: argparse.Namespace) -> int:
    if args.config:
        config = load_analysis_config(args.config)
    elif args.files:
        products = {Path(f).stem: Path(f) for f in args.files}
        config_kwargs = {}
        if args.output_dir:
            config_kwargs['output_dir'] = Path(args.output_dir)
        config = AnalysisConfig(
            products=products,
            groups=_parse_groups(args.group),
            time_window=args.window,
            **config_kwargs
        )
    else:
        config = load_analysis_config()

    if args.output_dir:
        config.output_dir = Path(args.output_dir)

    print(f"Analyzing {len(config.selected)} products (window: {config.time_window})")
    result = run_analysis_job(config)

    if result['status'] != 'completed':
        print(f"ERROR: Analysis failed: {result['error_message']}", file=sys.stderr)
        return 1

    for product_id, error in result['load_errors'].items():
        print(f"WARNING: Skipped {product_id}: {error}")

    print(f"Metrics calculated: {result['metrics_calculated']}/{result['products_analyzed']}")
    if result['scoring_total'] is not None:
        print(f"Score total: {result['scoring_total']:.2f}")
    for path in result['output_paths']:
        print(f"Wrote {path}")

    return 0


def run_score(args: argparse.Namespace) -> int:
    product_id, product = load_nav_file(args.file)
    _, benchmark = load_nav_file(args.benchmark, 'benchmark')
    peers, errors = load_nav_files(_peer_paths(args.peer, product_id))
    for peer_id, error in errors.items():
        print(f"WARNING: Skipped peer {peer_id}: {error}")

    series_by_id = {**peers, product_id: product}
    scoring_config = ScoringConfig(
        product=product_id,
        category=args.category,
        benchmark_path=Path(args.benchmark),
        peers=list(peers),
        index_enhanced=args.index_enhanced,
        neutral_arbitrage=args.neutral_arbitrage,
    )

    metrics = compute_metrics(product)
    if metrics is None:
        print(f"WARNING: Not enough data for metrics of {product_id}")

    result = score_against_benchmark(product_id, series_by_id, benchmark, scoring_config)

    print(f"{product_id} ({result.category.value})")
    print("=" * 50)
    for label, display in format_metrics(metrics).items():
        print(f"{label:<26} {display}")
    print()
    for criterion, score in result.scores.items():
        score_display = 'Not available' if score is None else str(score)
        print(f"{criterion:<20} input={_format_input(criterion, result.inputs.get(criterion)):<14} "
              f"score={score_display:<14} weight={result.weights[criterion]:.2f}")
    print(f"{'total':<20} {result.total:.2f}")

    return 0


def _format_input(criterion: str, value: Optional[float]) -> str:
    if criterion in ('consistency', 'sharpe'):
        return format_ratio(value)
    return format_percentage(value)


def _peer_paths(peer_args: List[str], product_id: str) -> Dict[str, Path]:
    """
    Key peer files by stem, falling back to parent/stem (then a counter)
    when the stem is already taken by the scored product or another peer.
    """
    taken = {product_id}
    paths = {}
    for arg in peer_args:
        path = Path(arg)
        peer_id = path.stem
        if peer_id in taken:
            peer_id = f"{path.parent.name}/{path.stem}"
            suffix = 2
            while peer_id in taken:
                peer_id = f"{path.parent.name}/{path.stem}_{suffix}"
                suffix += 1
            print(f"WARNING: Peer id '{path.stem}' already in use; loading {path} as '{peer_id}'")
        taken.add(peer_id)
        paths[peer_id] = path
    return paths


def _parse_groups(group_args: List[str]) -> Dict[str, List[str]]:
    groups = {}
    for group_arg in group_args:
        name, sep, members = group_arg.partition('=')
        if not sep or not name.strip():
            raise AnalysisConfigError(f"Invalid group '{group_arg}', expected NAME=id1,id2")
        groups[name.strip()] = [m.strip() for m in members.split(',') if m.strip()]
    return groups


if __name__ == '__main__':
    sys.exit(main())
