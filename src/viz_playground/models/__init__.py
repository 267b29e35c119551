from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

# A row is a flat mapping of column name to scalar value.
Row = Dict[str, Any]


class ColumnType(str, Enum):
    NUMERIC = "numeric"
    CATEGORICAL = "categorical"
    DATE = "date"


class ColumnInfo(BaseModel):
    """Metadata for a single column, derived at import time."""
    name: str
    type: ColumnType
    distinct_values: List[Any] = Field(default_factory=list)  # capped, display only


class InsightKind(str, Enum):
    CORRELATION = "correlation"
    OUTLIER = "outlier"
    TREND = "trend"
    CATEGORICAL = "categorical"


class Insight(BaseModel):
    """A generated finding about the dataset, ranked by confidence."""
    title: str
    description: str
    confidence: float = Field(ge=0.0, le=1.0)
    kind: InsightKind


class FilterOperator(str, Enum):
    EQUALS = "equals"
    CONTAINS = "contains"
    GREATER = "greater"
    LESS = "less"
    RANGE = "range"


class FilterRule(BaseModel):
    column: str
    operator: FilterOperator
    value: Any = None
    enabled: bool = True

    @model_validator(mode="after")
    def check_range_value(self) -> "FilterRule":
        if self.operator == FilterOperator.RANGE:
            if not isinstance(self.value, (list, tuple)) or len(self.value) != 2:
                raise ValueError("A range filter needs a [min, max] pair as its value.")
        return self


class ComputedField(BaseModel):
    name: str
    expression: str
    type: ColumnType = ColumnType.NUMERIC


class AggregateFunction(str, Enum):
    SUM = "sum"
    AVG = "avg"
    COUNT = "count"
    MIN = "min"
    MAX = "max"


class Aggregation(BaseModel):
    column: str
    function: AggregateFunction

    @property
    def output_name(self) -> str:
        return f"{self.column}_{self.function.value}"


class GroupAggregationSpec(BaseModel):
    group_columns: List[str] = Field(default_factory=list)
    aggregations: List[Aggregation] = Field(default_factory=list)


class ChartType(str, Enum):
    BAR = "bar"
    LINE = "line"
    SCATTER = "scatter"
    PIE = "pie"
    AREA = "area"
    TABLE = "table"
    KPI = "kpi"


class ChartConfig(BaseModel):
    """User-defined chart card configuration."""
    type: ChartType = ChartType.BAR
    title: str = "Untitled chart"
    x_axis: Optional[str] = None
    y_axis: Optional[str] = None
    aggregation: Optional[AggregateFunction] = None
    filter_text: Optional[str] = None


class DatasetContext(BaseModel):
    """
    Represents the active dataset in memory.
    Contains the imported rows and their derived schema.
    """
    dataset_id: str
    filename: str
    rows: List[Row]
    columns: List[ColumnInfo]
