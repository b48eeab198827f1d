"""
NAV loader - composes the ingestion path for one file.
Composes: Provider -> Transform -> Validate.
"""

import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple, Union

from analysis.models import NavPoint
from ingestion.providers.spreadsheet_adapter import read_nav_rows, SpreadsheetError
from ingestion.transforms.normalizers import normalize_nav_rows
from ingestion.transforms.validators import validate_nav_series, ValidationError


logger = logging.getLogger(__name__)


class IngestionError(Exception):
    """Raised when a NAV file cannot be turned into a valid series."""
    pass


def load_nav_file(
    path: Union[str, Path],
    product_id: Optional[str] = None
) -> Tuple[str, List[NavPoint]]:
    """
    Read, normalize and validate one NAV file.

    Args:
        path: Spreadsheet path
        product_id: Identifier for the series (defaults to the file stem)

    Returns:
        (product_id, ascending NAV series)

    Raises:
        IngestionError: If the file cannot be read or yields no valid rows
    """
    path = Path(path)
    if product_id is None:
        product_id = path.stem

    try:
        raw_rows = read_nav_rows(path)
    except SpreadsheetError as e:
        raise IngestionError(f"Failed to load {product_id}: {e}")

    series = normalize_nav_rows(raw_rows)
    if not series:
        raise IngestionError(f"No valid (date, nav) rows found for {product_id}")

    try:
        validate_nav_series(series)
    except ValidationError as e:
        raise IngestionError(f"Invalid NAV series for {product_id}: {e}")

    logger.info(
        f"Loaded {product_id}: {len(series)} points "
        f"({series[0].date.isoformat()} to {series[-1].date.isoformat()})"
    )
    return product_id, series


def load_nav_files(
    paths: Mapping[str, Union[str, Path]]
) -> Tuple[Dict[str, List[NavPoint]], Dict[str, str]]:
    """
    Load several products, collecting failures instead of stopping.

    Args:
        paths: Product id -> file path

    Returns:
        (series by product id, error message by product id)
    """
    series_by_id = {}
    errors = {}

    for product_id, path in paths.items():
        try:
            _, series = load_nav_file(path, product_id)
            series_by_id[product_id] = series
        except IngestionError as e:
            logger.error(str(e))
            errors[product_id] = str(e)

    return series_by_id, errors
