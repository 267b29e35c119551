import pytest

from viz_playground.core.schema import MAX_DISTINCT_VALUES, analyze, ensure_dataset
from viz_playground.models import ColumnType
from viz_playground.utils.exceptions import InvalidDatasetError

# --- Tests for Schema Analysis ---

def test_empty_dataset_has_no_columns():
    assert analyze([]) == []

def test_columns_follow_first_row(sales_rows):
    """Column names and order come from the first row."""
    columns = analyze(sales_rows)
    assert [c.name for c in columns] == ["region", "units", "price", "date"]
    types = {c.name: c.type for c in columns}
    assert types["region"] == ColumnType.CATEGORICAL
    assert types["units"] == ColumnType.NUMERIC
    assert types["price"] == ColumnType.CATEGORICAL  # "n/a" is not numeric
    assert types["date"] == ColumnType.DATE

def test_distinct_values_exclude_empty_and_keep_first_seen_order(sales_rows):
    columns = {c.name: c for c in analyze(sales_rows)}
    assert columns["region"].distinct_values == ["north", "south", "east"]
    assert columns["units"].distinct_values == [10, 20, 30]

def test_distinct_values_are_capped():
    rows = [{"id": i} for i in range(MAX_DISTINCT_VALUES + 10)]
    column = analyze(rows)[0]
    assert len(column.distinct_values) == MAX_DISTINCT_VALUES
    assert column.type == ColumnType.NUMERIC

def test_extra_keys_after_first_row_are_ignored():
    rows = [{"a": 1}, {"a": 2, "b": "x"}, {"b": "y"}]
    columns = analyze(rows)
    assert [c.name for c in columns] == ["a"]
    assert columns[0].distinct_values == [1, 2]

# --- Tests for Input Shape ---

def test_ensure_dataset_accepts_records():
    rows = [{"a": 1}]
    assert ensure_dataset(rows) == rows

@pytest.mark.parametrize("bad", [{"a": 1}, "a,b", None, [], [1, 2], [{"a": 1}, "x"]])
def test_ensure_dataset_rejects_bad_shapes(bad):
    with pytest.raises(InvalidDatasetError):
        ensure_dataset(bad)
