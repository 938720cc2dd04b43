"""
Cell values at the ingestion boundary.

Every cell handed to the analyzer is one of ``None``, a number (``int`` or
``float``) or a ``str``. Raw values coming from pandas, JSON bodies or
hand-built records are normalized here so that type classification can branch
on the runtime kind of each cell.
"""
import math
import numbers
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from pandas.api.types import is_bool

CellValue = Optional[Union[int, float, str]]
Record = Dict[str, CellValue]

# Integral floats below this magnitude print without an exponent
_PLAIN_INTEGER_LIMIT = 1e21


def is_blank(value: Any) -> bool:
    """A cell is blank when it holds no data: ``None`` or the empty string."""
    return value is None or (isinstance(value, str) and value == "")


def is_number(value: Any) -> bool:
    """True for numeric cells. Booleans and numeric-looking strings are not numbers."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def normalize_cell(value: Any) -> CellValue:
    """
    Coerce a raw value into the cell union.

    - ``None`` and NaN become ``None``
    - booleans become ``"true"`` / ``"false"``
    - numpy scalars become Python numbers; integral floats become ``int``
    - strings pass through unchanged
    - anything else is stringified
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value
    # Covers numpy.bool_, which is not a numbers.Number
    if is_bool(value):
        return "true" if value else "false"
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real):
        number = float(value)
        if math.isnan(number):
            return None
        if number.is_integer() and abs(number) < _PLAIN_INTEGER_LIMIT:
            return int(number)
        return number
    return str(value)


def normalize_record(record: Mapping[str, Any], headers: Sequence[str]) -> Record:
    """Normalize one row, keeping only (and all of) the given headers."""
    return {header: normalize_cell(record.get(header)) for header in headers}


def normalize_records(records: Sequence[Mapping[str, Any]], headers: Sequence[str]) -> List[Record]:
    return [normalize_record(record, headers) for record in records]


def stringify_cell(value: CellValue) -> str:
    """
    Render a cell as text the way the frontend displays it.

    Integral floats drop their trailing ``.0`` so that ``2000.0`` and ``2000``
    produce the same category key.
    """
    if value is None:
        return "null"
    if isinstance(value, float):
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < _PLAIN_INTEGER_LIMIT:
            return str(int(value))
        return repr(value)
    return str(value)
