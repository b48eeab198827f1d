"""
Spreadsheet adapter - read NAV exports from CSV and Excel files.
File IO allowed here, but minimal business logic.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Union

import pandas as pd


logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = {'.csv', '.xlsx'}


class SpreadsheetError(Exception):
    """Raised when a spreadsheet cannot be read."""
    pass


def read_nav_rows(path: Union[str, Path]) -> List[Dict[str, Any]]:
    """
    Read raw (date, nav) rows from the first two columns of a spreadsheet.

    The first row is treated as a header and skipped. For workbooks, the
    first sheet with at least two rows is used. Cells are returned as read -
    no normalization.

    Args:
        path: Path to a .csv or .xlsx file

    Returns:
        List of {'date': raw_cell, 'nav': raw_cell} dictionaries

    Raises:
        SpreadsheetError: If the file is missing, unsupported or has no data
    """
    path = Path(path)
    _validate_path(path)

    try:
        frame = _read_first_data_sheet(path)
    except SpreadsheetError:
        raise
    except Exception as e:
        raise SpreadsheetError(f"Failed to read {path.name}: {e}")

    if frame.shape[1] < 2:
        raise SpreadsheetError(f"{path.name} needs at least two columns (date, nav)")

    rows = []
    for date_cell, nav_cell in frame.iloc[1:, :2].itertuples(index=False, name=None):
        if _is_blank(date_cell) and _is_blank(nav_cell):
            continue
        rows.append({'date': date_cell, 'nav': nav_cell})

    logger.info(f"Read {len(rows)} rows from {path.name}")
    return rows


def _read_first_data_sheet(path: Path) -> pd.DataFrame:
    if path.suffix.lower() == '.csv':
        frame = pd.read_csv(path, header=None, dtype=object, skip_blank_lines=True)
        if len(frame) >= 2:
            return frame
        raise SpreadsheetError(f"No data rows found in {path.name}")

    sheets = pd.read_excel(path, sheet_name=None, header=None, dtype=object)
    for sheet_name, frame in sheets.items():
        if len(frame) >= 2:
            logger.debug(f"Using sheet '{sheet_name}' of {path.name}")
            return frame

    raise SpreadsheetError(f"No sheet with data rows found in {path.name}")


def _validate_path(path: Path) -> None:
    if path.suffix.lower() not in SUPPORTED_SUFFIXES:
        raise SpreadsheetError(
            f"Unsupported file type: {path.suffix}. Expected one of {sorted(SUPPORTED_SUFFIXES)}"
        )

    if not path.exists():
        raise SpreadsheetError(f"File not found: {path}")


def _is_blank(cell: Any) -> bool:
    if cell is None:
        return True
    if isinstance(cell, str):
        return not cell.strip()
    try:
        return bool(pd.isna(cell))
    except (TypeError, ValueError):
        return False
