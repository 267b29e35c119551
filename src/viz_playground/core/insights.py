"""
insights.py
─────────────────────────────────────────────────────────────────────────────
Generates ranked, human-readable findings about a dataset.

Passes (outputs concatenated, then sorted by confidence and capped):
 - Correlation: every pair of numeric columns with |r| above the threshold
 - Outlier:     numeric columns with a small share of z-score outliers
 - Categorical: low-cardinality columns dominated by a single value
─────────────────────────────────────────────────────────────────────────────
"""

from collections import Counter
from typing import List, Optional, Sequence

from viz_playground.core.coercion import is_empty, to_text
from viz_playground.core.schema import analyze
from viz_playground.core.statistics import correlate, find_outliers
from viz_playground.models import ColumnInfo, ColumnType, Insight, InsightKind, Row
from viz_playground.utils.logger import get_logger

logger = get_logger(__name__)

MAX_INSIGHTS = 5

CORRELATION_THRESHOLD = 0.5
OUTLIER_Z_THRESHOLD = 3.0
OUTLIER_MAX_SHARE = 0.1
OUTLIER_CONFIDENCE = 0.8
CATEGORY_MIN_DISTINCT = 1    # exclusive
CATEGORY_MAX_DISTINCT = 20   # exclusive
DOMINANT_SHARE = 0.4
CATEGORICAL_CONFIDENCE = 0.7


# ── pass 1: correlations ──────────────────────────────────────────────────────
def _correlation_insights(rows: Sequence[Row], numeric: List[ColumnInfo]) -> List[Insight]:
    insights = []
    for i in range(len(numeric)):
        for j in range(i + 1, len(numeric)):
            col1, col2 = numeric[i].name, numeric[j].name
            r = correlate(rows, col1, col2)
            if abs(r) <= CORRELATION_THRESHOLD:
                continue
            sign = "positive" if r > 0 else "negative"
            insights.append(Insight(
                title=f"Strong {sign} correlation found",
                description=f"{col1} and {col2} show a {sign} correlation (r ≈ {r:.2f})",
                confidence=abs(r),
                kind=InsightKind.CORRELATION,
            ))
    return insights


# ── pass 2: outliers ──────────────────────────────────────────────────────────
def _outlier_insights(rows: Sequence[Row], numeric: List[ColumnInfo]) -> List[Insight]:
    insights = []
    for col in numeric:
        outliers = find_outliers(rows, col.name, OUTLIER_Z_THRESHOLD)
        # Skip columns where "outliers" are really a second cluster.
        if 0 < len(outliers) < len(rows) * OUTLIER_MAX_SHARE:
            insights.append(Insight(
                title=f"Outliers detected in {col.name}",
                description=f"Found {len(outliers)} potential outliers in {col.name} column",
                confidence=OUTLIER_CONFIDENCE,
                kind=InsightKind.OUTLIER,
            ))
    return insights


# ── pass 3: dominant categories ───────────────────────────────────────────────
def _categorical_insights(rows: Sequence[Row], categorical: List[ColumnInfo]) -> List[Insight]:
    insights = []
    total = len(rows)
    for col in categorical:
        if not CATEGORY_MIN_DISTINCT < len(col.distinct_values) < CATEGORY_MAX_DISTINCT:
            continue

        counts = Counter(
            to_text(row.get(col.name)) for row in rows if not is_empty(row.get(col.name))
        )
        if not counts:
            continue

        # most_common keeps first-seen order among ties
        category, count = counts.most_common(1)[0]
        if count > total * DOMINANT_SHARE:
            insights.append(Insight(
                title=f"Dominant category in {col.name}",
                description=(
                    f"{category} represents {count / total * 100:.1f}% "
                    f"of all {col.name} values"
                ),
                confidence=CATEGORICAL_CONFIDENCE,
                kind=InsightKind.CATEGORICAL,
            ))
    return insights


# ── PUBLIC ENTRY POINT ────────────────────────────────────────────────────────
def generate_insights(
    rows: Sequence[Row],
    columns: Optional[List[ColumnInfo]] = None,
) -> List[Insight]:
    """
    Runs all insight passes and returns the top findings.

    Args:
        rows: The dataset snapshot.
        columns: A schema already computed for `rows`; analyzed on demand if omitted.

    Returns:
        At most MAX_INSIGHTS insights, highest confidence first.
    """
    if not rows:
        return []

    if columns is None:
        columns = analyze(rows)

    numeric = [c for c in columns if c.type == ColumnType.NUMERIC]
    categorical = [c for c in columns if c.type == ColumnType.CATEGORICAL]

    insights = (
        _correlation_insights(rows, numeric)
        + _outlier_insights(rows, numeric)
        + _categorical_insights(rows, categorical)
    )
    ranked = sorted(insights, key=lambda i: i.confidence, reverse=True)[:MAX_INSIGHTS]

    logger.info(f"Generated {len(insights)} candidate insights, returning {len(ranked)}.")
    return ranked
