"""
Column analysis service.

Classifies a single column of a record set as numeric, date, categorical or
text, computes the statistics that go with the type and recommends a chart.
"""
import re
import logging
import warnings
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd
from dateutil import parser as dateparser

from csvcharts.core.cells import is_blank, is_number, stringify_cell
from csvcharts.core.schemas import ColumnSummary

logger = logging.getLogger(__name__)

# Categorical columns need few distinct values, both absolutely and per row
CATEGORICAL_MAX_UNIQUE = 20
CATEGORICAL_MAX_RATIO = 0.2

# Words pandas resolves against the wall clock
RELATIVE_DATE_WORDS = frozenset(("now", "today", "tomorrow", "yesterday"))

_YEAR_FIRST = re.compile(r"^\s*\d{4}-\d{1,2}")
_FIRST_DEFAULT = datetime(2000, 1, 1)
_SECOND_DEFAULT = datetime(2001, 2, 2)


def _has_explicit_year(text: str) -> bool:
    """True when the text names its own year instead of borrowing a default one."""
    if _YEAR_FIRST.match(text):
        return True
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            first = dateparser.parse(text, default=_FIRST_DEFAULT)
            second = dateparser.parse(text, default=_SECOND_DEFAULT)
    except (ValueError, OverflowError, TypeError):
        return False
    return first.year == second.year


def _is_absolute_date(text: str) -> bool:
    return text.strip().casefold() not in RELATIVE_DATE_WORDS and _has_explicit_year(text)


def parse_dates(values: Sequence[Any]) -> pd.Series:
    """
    Parse cells as calendar dates/times in one pass.

    Returns a UTC series aligned with ``values``; cells that are not dates
    are NaT. Bare month or time strings ("May", "10:30") and relative words
    ("now") are not dates. Naive timestamps are read as UTC.
    """
    texts = [stringify_cell(value) for value in values]
    codes, uniques = pd.factorize(pd.Series(texts, dtype=object))

    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        parsed = pd.to_datetime(pd.Series(uniques, dtype=object), errors="coerce", format="mixed", utc=True)

    accepted = [pd.notna(ts) and _is_absolute_date(text) for text, ts in zip(uniques, parsed)]
    parsed = parsed.where(pd.Series(accepted, index=parsed.index, dtype=bool))
    return parsed.iloc[codes].reset_index(drop=True)


def parse_date(value: Any) -> Optional[pd.Timestamp]:
    """Parse a single cell as a date, None when it is not one."""
    parsed = parse_dates([value]).iloc[0]
    if pd.isna(parsed):
        return None
    return parsed


def recommend_chart(column_type: str, unique_values: int, record_count: int) -> str:
    """Pick the default chart for a column from its type and cardinality."""
    if column_type == "numeric":
        if unique_values > record_count * 0.7:
            return "line"
        if unique_values > 5:
            return "column"
        return "bar"

    if column_type == "date":
        # Long time series read better as an area
        if record_count > 15:
            return "area"
        return "line"

    if column_type == "categorical":
        if unique_values <= 5:
            return "pie"
        if unique_values <= 10:
            return "bar"
        return "column"

    if unique_values > record_count * 0.5:
        return "scatter"
    return "bar"


def _classify(non_null_values: List[Any], unique_values: int, record_count: int) -> str:
    if all(is_number(v) for v in non_null_values):
        return "numeric"
    # Most columns fail on their first cell, skip the full parse for those
    if parse_date(non_null_values[0]) is not None and parse_dates(non_null_values).notna().all():
        return "date"
    if unique_values <= CATEGORICAL_MAX_UNIQUE and unique_values < record_count * CATEGORICAL_MAX_RATIO:
        return "categorical"
    return "text"


def _distribution(values: List[Any]) -> Dict[str, int]:
    distribution: Dict[str, int] = {}
    for value in values:
        key = stringify_cell(value)
        distribution[key] = distribution.get(key, 0) + 1
    return distribution


def analyze_column(records: Sequence[Mapping[str, Any]], column_name: str) -> ColumnSummary:
    """
    Analyze one column of a record set.

    Args:
        records: Rows mapping column name to a cell (None, number or string)
        column_name: Column to analyze; rows without the key count as blank

    Returns:
        ColumnSummary with type, statistics and recommended chart
    """
    values = [record.get(column_name) for record in records]
    record_count = len(values)

    non_null_values = [v for v in values if not is_blank(v)]
    null_count = record_count - len(non_null_values)
    unique_values = len(set(non_null_values))

    if not non_null_values:
        return ColumnSummary(
            name=column_name,
            type="text",
            unique_values=0,
            has_nulls=null_count > 0,
            is_empty=True,
            recommended_chart="bar",
        )

    column_type = _classify(non_null_values, unique_values, record_count)

    stats: Dict[str, Any] = {}
    if column_type == "numeric":
        stats["min"] = min(non_null_values)
        stats["max"] = max(non_null_values)
        stats["average"] = sum(non_null_values) / len(non_null_values)
    elif column_type == "categorical":
        stats["distribution"] = _distribution(non_null_values)

    return ColumnSummary(
        name=column_name,
        type=column_type,
        unique_values=unique_values,
        has_nulls=null_count > 0,
        is_empty=False,
        recommended_chart=recommend_chart(column_type, unique_values, record_count),
        **stats,
    )
