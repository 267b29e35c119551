"""
visualization.py
─────────────────────────────────────────────────────────────────────────────
Builds chart data and Plotly figures from a chart card configuration.

Chart type → figure
  bar     → Bar chart of y per x
  line    → Line chart
  area    → Filled line chart
  scatter → Scatter plot
  pie     → Pie chart, y summed per x
  table   → no figure (rows are bound directly)
  kpi     → no figure (total / average / maximum tiles)
─────────────────────────────────────────────────────────────────────────────
"""

import math
from typing import Dict, List, Optional, Sequence

import plotly.graph_objects as go

from viz_playground.core.coercion import to_number, to_text
from viz_playground.models import AggregateFunction, ChartConfig, ChartType, Row
from viz_playground.utils.exceptions import VisualizationError
from viz_playground.utils.logger import get_logger

logger = get_logger(__name__)

# ── colour palette ────────────────────────────────────────────────────────────
CHART_COLORS = ["#4C9BE8", "#F5A623", "#50E3C2", "#FF4B4B", "#B57EDC", "#7ED321"]
CLR_BG = "rgba(0,0,0,0)"

LAYOUT_BASE = dict(
    paper_bgcolor=CLR_BG,
    plot_bgcolor=CLR_BG,
    margin=dict(l=60, r=40, t=70, b=80),
)


# ── helpers ───────────────────────────────────────────────────────────────────
def _number_or_zero(value) -> float:
    number = to_number(value)
    return 0.0 if math.isnan(number) else number


def _text_filter(rows: Sequence[Row], filter_text: Optional[str]) -> List[Row]:
    """Keeps rows where any value contains the filter text (case-insensitive)."""
    if not filter_text:
        return list(rows)
    needle = filter_text.lower()
    return [row for row in rows if any(needle in to_text(v).lower() for v in row.values())]


def _reduce(values: List[float], aggregation: AggregateFunction) -> float:
    if not values:
        return 0.0
    if aggregation == AggregateFunction.SUM:
        return sum(values)
    if aggregation == AggregateFunction.AVG:
        return sum(values) / len(values)
    if aggregation == AggregateFunction.MIN:
        return min(values)
    if aggregation == AggregateFunction.MAX:
        return max(values)
    return float(len(values))


def _apply_layout(fig: go.Figure, config: ChartConfig) -> go.Figure:
    fig.update_layout(
        **LAYOUT_BASE,
        title=dict(text=config.title, font=dict(size=18)),
        xaxis_title=config.x_axis,
        yaxis_title=config.y_axis,
    )
    return fig


# ── chart data ────────────────────────────────────────────────────────────────
def prepare_chart_data(rows: Sequence[Row], config: ChartConfig) -> List[Row]:
    """
    Projects rows onto the configured axes.

    x values become display strings and y values numbers (non-numeric → 0).
    With an aggregation, rows are grouped by x and y is reduced per group;
    `count` counts rows per x.
    """
    if not config.x_axis or not config.y_axis:
        return []

    x_col, y_col = config.x_axis, config.y_axis
    points = [
        {x_col: to_text(row.get(x_col)), y_col: _number_or_zero(row.get(y_col))}
        for row in _text_filter(rows, config.filter_text)
    ]

    if config.aggregation is None:
        return points

    grouped: Dict[str, List[float]] = {}
    for point in points:
        grouped.setdefault(point[x_col], []).append(point[y_col])

    return [
        {x_col: key, y_col: _reduce(values, config.aggregation)}
        for key, values in grouped.items()
    ]


def kpi_summary(rows: Sequence[Row], column: str) -> Dict[str, float]:
    """Total, average and maximum of a column; non-numeric values count as 0."""
    values = [_number_or_zero(row.get(column)) for row in rows]
    if not values:
        return {"total": 0.0, "average": 0.0, "maximum": 0.0}
    total = sum(values)
    return {"total": total, "average": total / len(values), "maximum": max(values)}


# ── figures ───────────────────────────────────────────────────────────────────
def _build_figure(data: List[Row], config: ChartConfig) -> Optional[go.Figure]:
    x_col, y_col = config.x_axis, config.y_axis
    xs = [point[x_col] for point in data]
    ys = [point[y_col] for point in data]

    if config.type == ChartType.BAR:
        return go.Figure(go.Bar(x=xs, y=ys, name=y_col, marker_color=CHART_COLORS[0]))

    if config.type == ChartType.LINE:
        return go.Figure(go.Scatter(x=xs, y=ys, mode="lines+markers", name=y_col,
                                    line=dict(color=CHART_COLORS[0], width=2)))

    if config.type == ChartType.AREA:
        return go.Figure(go.Scatter(x=xs, y=ys, mode="lines", fill="tozeroy", name=y_col,
                                    line=dict(color=CHART_COLORS[0])))

    if config.type == ChartType.SCATTER:
        return go.Figure(go.Scatter(x=xs, y=ys, mode="markers", name=y_col,
                                    marker=dict(color=CHART_COLORS[0], size=7, opacity=0.7)))

    if config.type == ChartType.PIE:
        totals: Dict[str, float] = {}
        for x, y in zip(xs, ys):
            totals[x] = totals.get(x, 0.0) + y
        return go.Figure(go.Pie(labels=list(totals.keys()), values=list(totals.values()),
                                marker=dict(colors=CHART_COLORS)))

    return None


# ── PUBLIC ENTRY POINT ────────────────────────────────────────────────────────
def generate_chart_json(
    rows: Sequence[Row],
    config: ChartConfig,
    data: Optional[List[Row]] = None,
) -> Optional[str]:
    """
    Builds the Plotly figure for a chart card. Returns JSON string or None.

    None is returned for table/kpi cards and when either axis is unset.
    `data` is the output of `prepare_chart_data` when the caller already has it.
    """
    logger.info(f"Generating {config.type.value} chart '{config.title}'")

    if config.type in (ChartType.TABLE, ChartType.KPI):
        return None
    if not config.x_axis or not config.y_axis:
        logger.info("Chart axes not configured, skipping chart.")
        return None

    try:
        if data is None:
            data = prepare_chart_data(rows, config)
        fig = _build_figure(data, config)
        if fig is None:
            return None
        return _apply_layout(fig, config).to_json()
    except Exception as e:
        logger.error(f"Visualization generation failed: {e}", exc_info=True)
        raise VisualizationError(f"Could not build {config.type.value} chart: {e}")
