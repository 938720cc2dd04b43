from pydantic import BaseModel, ConfigDict, Field, model_serializer
from typing import List, Optional, Any, Dict, Literal, Union

ColumnType = Literal["numeric", "categorical", "date", "text"]
ChartType = Literal["bar", "line", "pie", "scatter", "column", "area"]

Cell = Optional[Union[int, float, str]]
Number = Union[int, float]

# Left out of the JSON entirely when not computed
OPTIONAL_STATISTICS = ("min", "max", "average", "distribution", "unit")


class ColumnSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    type: ColumnType
    unique_values: int = Field(alias="uniqueValues")
    has_nulls: bool = Field(alias="hasNulls")
    is_empty: bool = Field(default=False, alias="isEmpty")
    min: Optional[Number] = None  # numeric columns only
    max: Optional[Number] = None
    average: Optional[Number] = None
    distribution: Optional[Dict[str, int]] = None  # categorical columns only
    recommended_chart: ChartType = Field(alias="recommendedChart")
    unit: Optional[str] = None

    @model_serializer(mode="wrap")
    def _omit_missing_statistics(self, handler):
        data = handler(self)
        for key in OPTIONAL_STATISTICS:
            if data.get(key) is None:
                data.pop(key, None)
        return data


class RelatedColumns(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    x_axis: str = Field(alias="xAxis")
    y_axis: List[str] = Field(alias="yAxis")
    title: Optional[str] = None
    recommended: ChartType


class CSVDataset(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    filename: str
    headers: List[str]
    records: List[Dict[str, Cell]]
    summary: List[ColumnSummary]
    related_columns: List[RelatedColumns] = Field(default_factory=list, alias="relatedColumns")


class AnalyzeRequest(BaseModel):
    filename: str = "dataset.csv"
    headers: List[str]
    records: List[Dict[str, Any]] = []


class SeriesPoint(BaseModel):
    name: Cell
    value: Cell


class RelatedPanel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    x_axis: str = Field(alias="xAxis")
    y_axis: str = Field(alias="yAxis")
    title: str
    chart_type: ChartType = Field(alias="chartType")
    color: str
    description: str
    points: List[SeriesPoint]


class ColumnPanel(BaseModel):
    title: str
    column: ColumnSummary
    color: str
    description: str


class DashboardLayout(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    dataset_id: str = Field(alias="datasetId")
    filename: str
    has_data: bool = Field(alias="hasData")
    related: List[RelatedPanel] = []
    columns: List[ColumnPanel] = []
