"""
Normalizers for transforming spreadsheet rows to NAV observations.
Pure functions - no IO, network, or side effects.
Minimal normalization - only when necessary.
"""

import logging
import math
import re
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd
from dateutil import parser as date_parser

from analysis.models import NavPoint


logger = logging.getLogger(__name__)

# Day zero of spreadsheet serial dates (includes the 1900 leap-year quirk)
EXCEL_EPOCH = date(1899, 12, 30)

_CJK_DATE_SEPARATORS = re.compile(r'[年月]')
_NON_DATE_CHARS = re.compile(r'[^\d\-/: ]')


def parse_nav_date(raw: Any) -> Optional[date]:
    """
    Parse a spreadsheet date cell to a calendar date.

    Accepts date/datetime/Timestamp objects, spreadsheet serial numbers and
    free-form strings (including '2024年1月5日'). Time of day is dropped.

    Returns:
        Parsed date, or None if the cell cannot be read as a date
    """
    if raw is None or isinstance(raw, (bool, np.bool_)):
        return None

    if isinstance(raw, (pd.Timestamp, datetime)):
        if pd.isna(raw):
            return None
        return raw.date()

    if isinstance(raw, date):
        return raw

    if isinstance(raw, (int, float, np.integer, np.floating)):
        if not math.isfinite(raw):
            return None
        try:
            return EXCEL_EPOCH + timedelta(days=math.floor(raw))
        except OverflowError:
            return None

    if isinstance(raw, str):
        # Normalization justified: exports often use CJK date markers
        cleaned = _CJK_DATE_SEPARATORS.sub('-', raw).replace('日', '')
        cleaned = _NON_DATE_CHARS.sub('', cleaned).strip()
        if not cleaned:
            return None
        try:
            return date_parser.parse(cleaned).date()
        except (ValueError, OverflowError):
            return None

    return None


def parse_nav_value(raw: Any) -> Optional[float]:
    """
    Parse a NAV cell to a float.

    Strings may carry thousands separators ('1,234.5').

    Returns:
        Finite float, or None if the cell is not numeric
    """
    if raw is None or isinstance(raw, (bool, np.bool_)):
        return None

    if isinstance(raw, (int, float, np.integer, np.floating)):
        value = float(raw)
    elif isinstance(raw, str):
        try:
            value = float(raw.replace(',', '').strip())
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(value):
        return None

    return value


def normalize_nav_rows(raw_rows: List[Dict[str, Any]]) -> List[NavPoint]:
    """
    Transform raw (date, nav) rows into an ascending NAV series.

    Minimal normalization:
    - Rows whose date or value cannot be parsed are dropped
    - Non-positive values are dropped (NAVs are strictly positive)
    - Deduplication by date (keep last to handle corrections)
    - Ascending sort by date

    Args:
        raw_rows: Dictionaries with 'date' and 'nav' cells

    Returns:
        List of NavPoint in ascending date order
    """
    if not raw_rows:
        return []

    by_date: Dict[date, float] = {}
    dropped = 0

    for raw in raw_rows:
        row_date = parse_nav_date(raw.get('date'))
        value = parse_nav_value(raw.get('nav'))

        if row_date is None or value is None or value <= 0:
            dropped += 1
            continue

        by_date[row_date] = value

    if dropped:
        logger.info(f"Dropped {dropped} unreadable NAV rows of {len(raw_rows)}")

    return [NavPoint(date=d, value=v) for d, v in sorted(by_date.items())]
