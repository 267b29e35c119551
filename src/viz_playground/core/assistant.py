"""
assistant.py
─────────────────────────────────────────────────────────────────────────────
Rule-based data assistant for the chat panel.

Replies are built from the generated insights and the schema only; there is
no model call. Intent is detected with keyword regexes, checked in order:
correlation → outlier → trend → recommend → summary → help → general.
─────────────────────────────────────────────────────────────────────────────
"""

import re
from typing import List, Sequence

from viz_playground.models import ColumnInfo, ColumnType, Insight, InsightKind, Row
from viz_playground.utils.logger import get_logger

logger = get_logger(__name__)


# ── intent detection ──────────────────────────────────────────────────────────
def _intent(message: str) -> str:
    q = message.lower()
    if re.search(r"correlat|relationship", q):           return "correlation"
    if re.search(r"outlier|anomal", q):                   return "outlier"
    if re.search(r"trend|pattern", q):                    return "trend"
    if re.search(r"recommend|suggest|chart", q):          return "recommend"
    if re.search(r"summar|overview", q):                  return "summary"
    if re.search(r"help|what can", q):                    return "help"
    return "general"


def _names(columns: Sequence[ColumnInfo], kind: ColumnType) -> List[str]:
    return [c.name for c in columns if c.type == kind]


def _of_kind(insights: Sequence[Insight], kind: InsightKind) -> List[Insight]:
    return [i for i in insights if i.kind == kind]


# ── PUBLIC ENTRY POINTS ───────────────────────────────────────────────────────
def greeting(insights: Sequence[Insight], rows: Sequence[Row], columns: Sequence[ColumnInfo]) -> str:
    return (
        f"Hello! I've analyzed your dataset with {len(rows)} records across "
        f"{len(columns)} columns. I found {len(insights)} key insights. "
        f"How can I help you explore your data further?"
    )


def respond(
    message: str,
    insights: Sequence[Insight],
    rows: Sequence[Row],
    columns: Sequence[ColumnInfo],
) -> str:
    """Answers a chat message from the current insights and schema."""
    intent = _intent(message)
    logger.info(f"Assistant intent: {intent}")

    numeric = _names(columns, ColumnType.NUMERIC)
    categorical = _names(columns, ColumnType.CATEGORICAL)

    if intent == "correlation":
        found = _of_kind(insights, InsightKind.CORRELATION)
        if found:
            return (
                f"I found {len(found)} correlation(s) in your data: {found[0].description}. "
                f"This suggests these variables may be related and could be useful for predictive analysis."
            )
        return ("I haven't detected any strong correlations in your current dataset. "
                "Try adding more numeric columns to analyze relationships.")

    if intent == "outlier":
        found = _of_kind(insights, InsightKind.OUTLIER)
        if found:
            return (
                f"I detected {len(found)} outlier pattern(s): {found[0].description}. "
                f"These unusual values might indicate data quality issues or interesting edge cases worth investigating."
            )
        return "No significant outliers detected in your dataset. This suggests your data has consistent patterns."

    if intent == "trend":
        pair = " and ".join(numeric[:2]) or "your numeric columns"
        return (
            "Based on your data structure, I recommend creating time-series charts if you have date columns, "
            f"or correlation matrices for numeric variables. The most interesting patterns often emerge "
            f"when comparing {pair}."
        )

    if intent == "recommend":
        if len(numeric) >= 2:
            group = categorical[0] if categorical else "categories"
            return (
                f"I recommend creating a scatter plot with {numeric[0]} vs {numeric[1]} to explore correlations. "
                f"Also consider a bar chart grouped by {group} to see distribution patterns."
            )
        return ("For your dataset, I suggest starting with bar charts to compare categories "
                "and KPI tiles to highlight key metrics.")

    if intent == "summary":
        titles = ", ".join(i.title for i in insights[:2]) or "none yet"
        size = "substantial" if len(rows) > 1000 else "manageable"
        return (
            f"Dataset Summary: {len(rows)} records, {len(numeric)} numeric columns, "
            f"{len(categorical)} categorical columns. Key insights: {titles}. "
            f"The data appears {size} for analysis."
        )

    if intent == "help":
        return ("I can help you: 1) Analyze correlations and patterns, 2) Identify outliers and anomalies, "
                "3) Recommend chart types, 4) Explain insights, 5) Suggest data transformations. "
                "Try asking about 'correlations', 'outliers', 'chart recommendations', or 'data summary'.")

    if len(columns) >= 2:
        return (f"Interesting question! Looking at your {len(columns)} columns, you might want to explore "
                f"the relationship between {columns[0].name} and {columns[1].name}.")
    return ("I can help you understand data patterns better. "
            "Try asking about specific columns, correlations, or chart recommendations.")
