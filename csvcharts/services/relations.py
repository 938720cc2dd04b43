"""
Related column detection.

Finds (axis, value) column pairs such as Year followed by a measurement and
picks a chart type for each pair.
"""
import logging
from typing import Any, List, Mapping, Sequence

from csvcharts.core.schemas import ColumnSummary, RelatedColumns

logger = logging.getLogger(__name__)

TEMPORAL_KEYWORDS = ("year", "month", "date", "time")

# Fallback rotation so that many similar pairs don't all get the same chart
ROTATING_CHARTS = ("column", "line", "area", "bar", "scatter")


def is_axis_candidate(summary: ColumnSummary) -> bool:
    """A column can drive an x-axis when it is a date or named like one."""
    if summary.is_empty:
        return False
    name = summary.name.lower()
    return summary.type == "date" or any(keyword in name for keyword in TEMPORAL_KEYWORDS)


def choose_relation_chart(x_summary: ColumnSummary, record_count: int, accepted: int) -> str:
    """
    Pick the chart for a pair given its x-axis.

    ``accepted`` is the number of relations accepted before this one and
    drives the fallback rotation.
    """
    name = x_summary.name.lower()
    if "year" in name:
        return "line" if record_count > 15 else "column"
    if "month" in name:
        return "line"
    # Many distinct timestamps usually means irregular sampling
    if x_summary.type == "date" and x_summary.unique_values > 20:
        return "scatter"
    return ROTATING_CHARTS[accepted % len(ROTATING_CHARTS)]


def detect_relations(
    headers: Sequence[str],
    summaries: Sequence[ColumnSummary],
    records: Sequence[Mapping[str, Any]],
) -> List[RelatedColumns]:
    """
    Detect adjacent axis/value column pairs.

    Args:
        headers: Column names in file order
        summaries: One summary per header, index-aligned with ``headers``
        records: The analyzed rows (only their count is used)

    Returns:
        RelatedColumns in header order, at most one per x-axis column
    """
    relations: List[RelatedColumns] = []

    for x_summary in summaries:
        if not is_axis_candidate(x_summary):
            continue

        try:
            x_index = list(headers).index(x_summary.name)
        except ValueError:
            logger.debug(f"Summary {x_summary.name!r} has no matching header, skipping")
            continue

        y_index = x_index + 1
        if y_index >= len(headers) or y_index >= len(summaries):
            continue

        y_summary = summaries[y_index]
        if y_summary.type != "numeric" or y_summary.is_empty:
            continue
        if y_summary.name == x_summary.name:
            continue

        chart = choose_relation_chart(x_summary, len(records), len(relations))
        relations.append(RelatedColumns(
            x_axis=x_summary.name,
            y_axis=[y_summary.name],
            title=f"{y_summary.name} by {x_summary.name}",
            recommended=chart,
        ))

    logger.debug(f"Detected {len(relations)} related column pairs across {len(headers)} columns")
    return relations
