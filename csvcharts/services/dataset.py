"""
Dataset assembly.

Runs the column analyzer over every header, detects related columns and
wraps everything into the CSVDataset record handed to renderers.
"""
import logging
import secrets
import string
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from csvcharts.core.cells import normalize_records
from csvcharts.core.performance import track_performance
from csvcharts.core.schemas import CSVDataset, ColumnSummary, RelatedColumns
from csvcharts.services.analyzer import analyze_column
from csvcharts.services.relations import detect_relations

logger = logging.getLogger(__name__)

ID_ALPHABET = string.ascii_lowercase + string.digits
ID_LENGTH = 13


def generate_dataset_id() -> str:
    return ''.join(secrets.choice(ID_ALPHABET) for _ in range(ID_LENGTH))


@track_performance("analyze_dataset")
def analyze_dataset(
    headers: Sequence[str],
    records: Sequence[Mapping[str, Any]],
) -> Tuple[List[ColumnSummary], List[RelatedColumns]]:
    """
    Summarize every column and detect related pairs.

    Returns:
        (summaries in header order, related columns)
    """
    summaries = [analyze_column(records, header) for header in headers]
    relations = detect_relations(headers, summaries, records)

    type_counts: dict = {}
    for summary in summaries:
        type_counts[summary.type] = type_counts.get(summary.type, 0) + 1
    logger.info(
        f"Analyzed {len(headers)} columns over {len(records)} rows: "
        f"{type_counts}, {len(relations)} related pairs"
    )
    return summaries, relations


def build_dataset(
    filename: str,
    headers: Sequence[str],
    records: Sequence[Mapping[str, Any]],
    dataset_id: Optional[str] = None,
) -> CSVDataset:
    """
    Normalize the records and assemble a fully analyzed dataset.

    Args:
        filename: Display name of the source
        headers: Column names in file order
        records: Raw rows; cells are normalized to None, numbers or strings
        dataset_id: Fixed id, generated when omitted
    """
    headers = list(headers)
    rows = normalize_records(records, headers)
    summaries, relations = analyze_dataset(headers, rows)

    return CSVDataset(
        id=dataset_id or generate_dataset_id(),
        filename=filename,
        headers=headers,
        records=rows,
        summary=summaries,
        related_columns=relations,
    )
