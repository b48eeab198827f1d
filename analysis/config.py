"""
Analysis job configuration.
Loads a YAML job file describing products, groups, time window and scoring.
"""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from analysis.time_windows import WINDOW_PRESETS
from scoring.engine import ProductCategory, ScoringError


# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = './config/analysis.yml'
DEFAULT_OUTPUT_DIR = './data/processed/nav_analysis'


class AnalysisConfigError(Exception):
    """Raised when an analysis job configuration is invalid."""
    pass


@dataclass
class ScoringConfig:
    """Configuration for scoring one product against a benchmark."""
    product: str
    category: ProductCategory
    benchmark_path: Path
    peers: List[str] = field(default_factory=list)
    index_enhanced: bool = False
    neutral_arbitrage: bool = False

    def __post_init__(self):
        """Validate and normalize."""
        if not self.product or not isinstance(self.product, str):
            raise AnalysisConfigError("scoring.product must be non-empty string")

        try:
            self.category = ProductCategory.parse(self.category)
        except ScoringError as e:
            raise AnalysisConfigError(str(e))

        self.benchmark_path = Path(self.benchmark_path)
        self.peers = [str(p) for p in self.peers]

        if self.index_enhanced and self.category is not ProductCategory.EQUITY:
            logger.warning("index_enhanced only applies to equity products; ignoring")
        if self.neutral_arbitrage and self.category is not ProductCategory.ALTERNATIVE:
            logger.warning("neutral_arbitrage only applies to alternative products; ignoring")


@dataclass
class AnalysisConfig:
    """Configuration for one analysis run."""
    products: Dict[str, Path]
    selected: Optional[List[str]] = None
    groups: Dict[str, List[str]] = field(default_factory=dict)
    time_window: str = 'all'
    scoring: Optional[ScoringConfig] = None
    output_dir: Path = Path(DEFAULT_OUTPUT_DIR)

    def __post_init__(self):
        """Validate and set defaults."""
        if not self.products:
            raise AnalysisConfigError("At least one product file is required")

        self.products = {str(k): Path(v) for k, v in self.products.items()}

        if self.selected is None:
            self.selected = list(self.products)
        unknown = [p for p in self.selected if p not in self.products]
        if unknown:
            raise AnalysisConfigError(f"Selected products have no file: {unknown}")

        for name, members in self.groups.items():
            unknown = [p for p in members if p not in self.products]
            if unknown:
                raise AnalysisConfigError(f"Group '{name}' references unknown products: {unknown}")

        if self.time_window not in WINDOW_PRESETS:
            raise AnalysisConfigError(
                f"Unknown time_window: {self.time_window}. Expected one of {list(WINDOW_PRESETS)}"
            )

        if self.scoring is not None and self.scoring.product not in self.products:
            raise AnalysisConfigError(f"Scoring product has no file: {self.scoring.product}")

        self.output_dir = Path(self.output_dir)


def load_analysis_config(config_path: Optional[str] = None) -> AnalysisConfig:
    """
    Load an analysis job configuration from a YAML file.

    Relative file paths in the config are resolved against the config file's
    directory.

    Args:
        config_path: Path to the YAML file (defaults to $NAV_ANALYSIS_CONFIG
            or ./config/analysis.yml)

    Returns:
        Validated AnalysisConfig

    Raises:
        AnalysisConfigError: If the file cannot be loaded or is invalid
    """
    if config_path is None:
        config_path = os.getenv('NAV_ANALYSIS_CONFIG', DEFAULT_CONFIG_PATH)

    config_file = Path(config_path)
    if not config_file.exists():
        raise AnalysisConfigError(f"Analysis config file not found: {config_path}")

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            raw = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise AnalysisConfigError(f"Failed to load analysis config: {e}")

    if not isinstance(raw, dict):
        raise AnalysisConfigError("Analysis config must be a mapping")

    if 'products' not in raw or not isinstance(raw['products'], dict):
        raise AnalysisConfigError("Analysis config missing 'products' section")

    return build_analysis_config(raw, base_dir=config_file.parent)


def build_analysis_config(raw: Dict[str, Any], base_dir: Path = Path('.')) -> AnalysisConfig:
    """Build an AnalysisConfig from an already-parsed mapping."""
    def resolve(path_value: Any) -> Path:
        path = Path(str(path_value))
        return path if path.is_absolute() else base_dir / path

    scoring = None
    raw_scoring = raw.get('scoring')
    if raw_scoring:
        missing = {'product', 'category', 'benchmark'} - set(raw_scoring)
        if missing:
            raise AnalysisConfigError(f"Scoring config missing keys: {sorted(missing)}")
        scoring = ScoringConfig(
            product=str(raw_scoring['product']),
            category=raw_scoring['category'],
            benchmark_path=resolve(raw_scoring['benchmark']),
            peers=list(raw_scoring.get('peers') or []),
            index_enhanced=bool(raw_scoring.get('index_enhanced', False)),
            neutral_arbitrage=bool(raw_scoring.get('neutral_arbitrage', False)),
        )

    output_dir = raw.get('output_dir') or os.getenv('NAV_OUTPUT_DIR', DEFAULT_OUTPUT_DIR)

    return AnalysisConfig(
        products={str(k): resolve(v) for k, v in raw['products'].items()},
        selected=raw.get('selected'),
        groups={str(k): [str(p) for p in v] for k, v in (raw.get('groups') or {}).items()},
        time_window=str(raw.get('time_window', 'all')),
        scoring=scoring,
        output_dir=resolve(output_dir),
    )
