"""
Dashboard layout helpers.

Turns an analyzed dataset into the panels a renderer draws: one panel per
related column pair, then one per remaining non-empty column.
"""
import logging
from functools import cmp_to_key
from typing import Any, Dict, List, Mapping, Sequence, Set

import pandas as pd

from csvcharts.core.cells import is_blank, is_number, stringify_cell
from csvcharts.core.schemas import (
    CSVDataset,
    ColumnPanel,
    ColumnSummary,
    DashboardLayout,
    RelatedColumns,
    RelatedPanel,
    SeriesPoint,
)
from csvcharts.services.analyzer import parse_dates

logger = logging.getLogger(__name__)

CHART_COLORS = [
    '#3B82F6',  # blue
    '#8B5CF6',  # purple
    '#EC4899',  # pink
    '#F59E0B',  # yellow
    '#10B981',  # green
    '#6366F1',  # indigo
    '#EF4444',  # red
    '#6B7280',  # gray
]


def chart_color(index: int) -> str:
    return CHART_COLORS[index % len(CHART_COLORS)]


def non_empty_columns(dataset: CSVDataset) -> List[ColumnSummary]:
    return [column for column in dataset.summary if not column.is_empty]


def consumed_columns(relations: Sequence[RelatedColumns]) -> Set[str]:
    """Names used as an axis by any relation."""
    used: Set[str] = set()
    for relation in relations:
        used.add(relation.x_axis)
        used.update(relation.y_axis)
    return used


def independent_columns(dataset: CSVDataset) -> List[ColumnSummary]:
    """Non-empty columns that no relation already charts, in header order."""
    used = consumed_columns(dataset.related_columns)
    return [column for column in non_empty_columns(dataset) if column.name not in used]


def describe_column(summary: ColumnSummary) -> str:
    """One-line caption for a column panel."""
    name = summary.name
    if summary.is_empty:
        return f"No data available for {name}"

    if summary.type == "numeric":
        unit = f" {summary.unit}" if summary.unit else ""
        return f"Shows {name} values ranging from {summary.min:.2f} to {summary.max:.2f}{unit}"
    if summary.type == "categorical":
        categories = len(summary.distribution or {})
        return f"Displays distribution of {categories} different {name} categories"
    if summary.type == "date":
        return f"Timeline of {name} data points over time"
    return f"Visualization of {name} data"


def _compare_points(a: Dict[str, Any], b: Dict[str, Any]) -> int:
    a_name, b_name = a["name"], b["name"]
    if is_number(a_name) and is_number(b_name):
        return (a_name > b_name) - (a_name < b_name)

    a_time, b_time = a["_time"], b["_time"]
    if a_time is not None and b_time is not None:
        return (a_time > b_time) - (a_time < b_time)

    a_key = (stringify_cell(a_name).casefold(), stringify_cell(a_name))
    b_key = (stringify_cell(b_name).casefold(), stringify_cell(b_name))
    return (a_key > b_key) - (a_key < b_key)


def relation_points(records: Sequence[Mapping[str, Any]], x_axis: str, y_axis: str) -> List[SeriesPoint]:
    """
    Rows where both axes hold data, as sorted (name, value) points.

    Numbers sort numerically, dates chronologically, anything else as text.
    """
    points = [
        {"name": record.get(x_axis), "value": record.get(y_axis)}
        for record in records
        if not is_blank(record.get(x_axis)) and not is_blank(record.get(y_axis))
    ]
    times = parse_dates([point["name"] for point in points])
    for point, time in zip(points, times):
        point["_time"] = None if is_number(point["name"]) or pd.isna(time) else time.value

    points.sort(key=cmp_to_key(_compare_points))
    return [SeriesPoint(name=p["name"], value=p["value"]) for p in points]


def describe_relation(points: Sequence[SeriesPoint], x_axis: str, y_axis: str) -> str:
    if not points:
        return f"No related data available between {x_axis} and {y_axis}"
    return f"Visualizes {y_axis} values across different {x_axis} values"


def build_dashboard(dataset: CSVDataset) -> DashboardLayout:
    """
    Lay out panels for a dataset.

    Related pairs come first; columns they consume are not repeated as
    individual panels. Empty columns never get a panel.
    """
    if not non_empty_columns(dataset):
        logger.info(f"Dataset {dataset.id} has no columns with data")
        return DashboardLayout(dataset_id=dataset.id, filename=dataset.filename, has_data=False)

    related = []
    for index, relation in enumerate(dataset.related_columns):
        y_axis = relation.y_axis[0]
        points = relation_points(dataset.records, relation.x_axis, y_axis)
        related.append(RelatedPanel(
            x_axis=relation.x_axis,
            y_axis=y_axis,
            title=relation.title or f"{y_axis} by {relation.x_axis}",
            chart_type=relation.recommended,
            color=chart_color(index),
            description=describe_relation(points, relation.x_axis, y_axis),
            points=points,
        ))

    columns = [
        ColumnPanel(
            title=column.name,
            column=column,
            color=chart_color(index),
            description=describe_column(column),
        )
        for index, column in enumerate(independent_columns(dataset))
    ]

    return DashboardLayout(
        dataset_id=dataset.id,
        filename=dataset.filename,
        has_data=True,
        related=related,
        columns=columns,
    )
