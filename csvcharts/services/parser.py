import math
import logging
from io import BytesIO
from pathlib import Path
from typing import List, Optional, Tuple

import pandas as pd
from fastapi import UploadFile

from csvcharts.core.cells import CellValue, Record, normalize_cell
from csvcharts.core.config import Settings, get_settings
from csvcharts.core.errors import ErrorCodes, IngestionError
from csvcharts.core.performance import track_performance
from csvcharts.core.sanitization import clean_column_name, sanitize_filename, sanitize_for_logging, validate_column_name

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {'.csv'}
ENCODINGS = ('utf-8-sig', 'latin1')


def validate_file_extension(filename: Optional[str]) -> str:
    """
    Validate the upload's extension.
    Returns the lowercased extension, raises IngestionError otherwise.
    """
    if not filename:
        raise IngestionError(ErrorCodes.INVALID_FILE_TYPE, "Filename is required.")

    file_ext = Path(filename).suffix.lower()
    if file_ext not in ALLOWED_EXTENSIONS:
        shown = file_ext or "no extension"
        raise IngestionError(ErrorCodes.INVALID_FILE_TYPE, f"Got {shown}.")

    return file_ext


def _read_text_frame(contents: bytes) -> pd.DataFrame:
    """Read every cell as text, trying each encoding in turn."""
    last_error: Optional[Exception] = None
    for encoding in ENCODINGS:
        try:
            return pd.read_csv(
                BytesIO(contents),
                dtype=str,
                na_filter=False,
                skip_blank_lines=True,
                encoding=encoding,
            )
        except UnicodeDecodeError as e:
            logger.debug(f"Decoding as {encoding} failed, trying next encoding")
            last_error = e
        except pd.errors.EmptyDataError:
            raise IngestionError(ErrorCodes.FILE_EMPTY)
        except (pd.errors.ParserError, ValueError) as e:
            raise IngestionError(ErrorCodes.PARSE_ERROR, str(e))
    raise IngestionError(ErrorCodes.PARSE_ERROR, f"Unsupported text encoding: {last_error}")


def _type_column(raw: pd.Series) -> List[CellValue]:
    """
    Type each cell of a text column on its own.

    Empty cells become None, cells pandas reads as a finite number become
    numbers, everything else stays a string.
    """
    numeric = pd.to_numeric(raw.str.strip(), errors="coerce")
    cells: List[CellValue] = []
    for text, number in zip(raw.tolist(), numeric.tolist()):
        if not isinstance(text, str) or text == "":
            # Short rows leave NaN in the trailing columns
            cells.append(None)
        elif isinstance(number, (int, float)) and math.isfinite(number):
            cells.append(normalize_cell(number))
        else:
            cells.append(text)
    return cells


def read_csv_records(contents: bytes) -> Tuple[List[str], List[Record]]:
    """
    Parse CSV bytes into a header list and dynamically typed records.

    The first non-blank line is the header row; blank lines are skipped.

    Raises:
        IngestionError: FILE_EMPTY or PARSE_ERROR
    """
    if not contents or not contents.strip():
        raise IngestionError(ErrorCodes.FILE_EMPTY)

    df = _read_text_frame(contents)
    if len(df.columns) == 0:
        raise IngestionError(ErrorCodes.FILE_EMPTY)

    headers = [clean_column_name(str(col)) for col in df.columns]
    columns = [_type_column(df[col]) for col in df.columns]
    records = [dict(zip(headers, row)) for row in zip(*columns)]

    logger.debug(f"Read {len(records)} records with {len(headers)} columns")
    return headers, records


def validate_csv_content(headers: List[str], records: List[Record], settings: Optional[Settings] = None) -> None:
    """
    Check that parsed content is within limits and safe to echo back.

    Raises:
        IngestionError: PARSE_ERROR describing the first violation
    """
    settings = settings or get_settings()

    if len(records) > settings.max_file_rows:
        raise IngestionError(
            ErrorCodes.PARSE_ERROR,
            f"File contains too many rows ({len(records):,}). Maximum allowed: {settings.max_file_rows:,} rows."
        )

    if len(headers) > settings.max_file_columns:
        raise IngestionError(
            ErrorCodes.PARSE_ERROR,
            f"File contains too many columns ({len(headers)}). Maximum allowed: {settings.max_file_columns} columns."
        )

    for header in headers:
        if not validate_column_name(header):
            raise IngestionError(ErrorCodes.PARSE_ERROR, f"Invalid column name: '{sanitize_for_logging(header)}'.")

    for record in records:
        for header, value in record.items():
            if isinstance(value, str) and len(value.encode('utf-8')) > settings.max_cell_size_bytes:
                raise IngestionError(
                    ErrorCodes.PARSE_ERROR,
                    f"Column '{header}' holds a value larger than {settings.max_cell_size_bytes} bytes."
                )


@track_performance("parse_csv")
async def parse_upload(file: UploadFile, settings: Optional[Settings] = None) -> Tuple[str, List[str], List[Record]]:
    """
    Read an uploaded CSV into (filename, headers, records).

    Raises:
        IngestionError: for any file that cannot be analyzed
    """
    settings = settings or get_settings()
    validate_file_extension(file.filename)
    safe_filename = sanitize_filename(file.filename)

    contents = await file.read()
    if len(contents) > settings.max_file_size_bytes:
        raise IngestionError(
            ErrorCodes.FILE_TOO_LARGE,
            f"Maximum size is {settings.max_file_size_mb}MB. Your file is {len(contents) / 1024 / 1024:.2f}MB."
        )
    if len(contents) == 0:
        raise IngestionError(ErrorCodes.FILE_EMPTY)

    headers, records = read_csv_records(contents)
    validate_csv_content(headers, records, settings)

    logger.info(
        f"Parsed file: {sanitize_for_logging(safe_filename)}, {len(records)} rows, {len(headers)} columns"
    )
    return safe_filename, headers, records
