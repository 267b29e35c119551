import pytest

from viz_playground.core.insights import MAX_INSIGHTS, generate_insights
from viz_playground.core.schema import analyze
from viz_playground.models import InsightKind

# --- Tests for Insight Generation ---

def test_empty_dataset_has_no_insights():
    assert generate_insights([]) == []

def test_correlation_insight_wording():
    data = [{"a": i, "b": 2 * i} for i in range(1, 5)]
    insights = generate_insights(data)
    assert len(insights) == 1
    insight = insights[0]
    assert insight.kind == InsightKind.CORRELATION
    assert insight.title == "Strong positive correlation found"
    assert insight.description == "a and b show a positive correlation (r ≈ 1.00)"
    assert insight.confidence == pytest.approx(1.0)

def test_negative_correlation_insight():
    data = [{"a": i, "b": 10 - i} for i in range(1, 6)]
    insight = generate_insights(data)[0]
    assert insight.title == "Strong negative correlation found"
    assert "negative correlation (r ≈ -1.00)" in insight.description

def test_weak_correlation_is_not_reported():
    data = [{"a": 1, "b": 1}, {"a": 2, "b": -1}, {"a": 3, "b": -1}, {"a": 4, "b": 1}]
    assert generate_insights(data) == []

def test_outlier_insight():
    data = [{"v": 10} for _ in range(20)] + [{"v": 1000}]
    insights = generate_insights(data)
    assert len(insights) == 1
    assert insights[0].kind == InsightKind.OUTLIER
    assert insights[0].confidence == 0.8
    assert insights[0].description == "Found 1 potential outliers in v column"

def test_dominant_category():
    """5 of 10 rows share a value: 50% is above the 40% threshold."""
    values = ["X"] * 5 + ["Y"] * 3 + ["Z"] * 2
    insights = generate_insights([{"c": v} for v in values])
    assert len(insights) == 1
    insight = insights[0]
    assert insight.kind == InsightKind.CATEGORICAL
    assert insight.confidence == 0.7
    assert insight.title == "Dominant category in c"
    assert insight.description == "X represents 50.0% of all c values"

def test_share_at_threshold_is_not_dominant():
    values = ["X"] * 4 + ["Y"] * 3 + ["Z"] * 3
    assert generate_insights([{"c": v} for v in values]) == []

def test_single_valued_column_is_skipped():
    assert generate_insights([{"c": "X"} for _ in range(10)]) == []

def test_high_cardinality_column_is_skipped():
    values = ["X"] * 30 + [f"v{i}" for i in range(25)]
    assert generate_insights([{"c": v} for v in values]) == []

def test_passes_rank_by_confidence():
    """Correlation (≈1.0) outranks outliers (0.8), which outrank categories (0.7)."""
    data = []
    for i in range(1, 22):
        data.append({
            "a": i,
            "b": 2 * i,
            "v": 1000 if i == 1 else 10,
            "c": "X" if i <= 12 else "Y",
        })
    insights = generate_insights(data)
    assert [i.kind for i in insights] == [
        InsightKind.CORRELATION, InsightKind.OUTLIER, InsightKind.CATEGORICAL,
    ]

def test_insights_are_capped_and_sorted():
    data = [
        {"a": i, "b": 2 * i, "c": 3 * i + 1, "d": -i, "e": i * i}
        for i in range(1, 8)
    ]
    insights = generate_insights(data)
    assert len(insights) == MAX_INSIGHTS
    confidences = [i.confidence for i in insights]
    assert confidences == sorted(confidences, reverse=True)

def test_precomputed_schema_is_used():
    data = [{"a": i, "b": 2 * i} for i in range(1, 5)]
    columns = analyze(data)
    assert generate_insights(data, columns) == generate_insights(data)
