import pytest

from viz_playground.core.statistics import correlate, find_outliers

# --- Tests for Correlation ---

def test_perfect_positive_correlation():
    data = [{"a": 1, "b": 2}, {"a": 2, "b": 4}, {"a": 3, "b": 6}]
    assert correlate(data, "a", "b") == pytest.approx(1.0)

def test_perfect_negative_correlation():
    data = [{"a": 1, "b": 6}, {"a": 2, "b": 4}, {"a": 3, "b": 2}]
    assert correlate(data, "a", "b") == pytest.approx(-1.0)

def test_self_correlation_is_one():
    data = [{"v": 1}, {"v": 5}, {"v": 2}, {"v": 8}]
    assert correlate(data, "v", "v") == pytest.approx(1.0)

def test_uncorrelated_columns():
    data = [{"a": 1, "b": 1}, {"a": 2, "b": -1}, {"a": 3, "b": -1}, {"a": 4, "b": 1}]
    assert correlate(data, "a", "b") == pytest.approx(0.0)

def test_fewer_than_two_valid_pairs_is_zero():
    """Rows with a non-numeric side are dropped before counting pairs."""
    data = [{"a": 1, "b": "x"}, {"a": 2, "b": 3}, {"a": None, "b": 4}]
    assert correlate(data, "a", "b") == 0.0
    assert correlate([], "a", "b") == 0.0

def test_constant_column_correlation_is_zero():
    data = [{"a": 1, "b": 5}, {"a": 2, "b": 5}, {"a": 3, "b": 5}]
    assert correlate(data, "a", "b") == 0.0

def test_numeric_strings_take_part():
    data = [{"a": "1", "b": 2}, {"a": "2", "b": 4}, {"a": "3", "b": "6"}]
    assert correlate(data, "a", "b") == pytest.approx(1.0)

def test_correlation_stays_in_bounds():
    xs = [3, 1, 4, 1, 5, 9, 2, 6, 5, 3, 5]
    ys = [2, 7, 1, 8, 2, 8, 1, 8, 2, 8, 4]
    data = [{"x": x, "y": y} for x, y in zip(xs, ys)]
    for a, b in [("x", "y"), ("y", "x"), ("x", "x")]:
        assert -1.0 <= correlate(data, a, b) <= 1.0

# --- Tests for Outliers ---

def test_single_extreme_value_is_flagged():
    """The full row object is returned, in original order."""
    data = [{"id": i, "v": 10} for i in range(20)] + [{"id": 20, "v": 1000}]
    outliers = find_outliers(data, "v", threshold=3)
    assert outliers == [{"id": 20, "v": 1000}]

def test_small_samples_cap_the_z_score():
    """With five values the largest possible |z| is 2, so a lower threshold is needed."""
    data = [{"v": v} for v in [10, 10, 10, 10, 1000]]
    assert find_outliers(data, "v", threshold=3) == []
    assert find_outliers(data, "v", threshold=1.9) == [{"v": 1000}]

@pytest.mark.parametrize("threshold", [0.0, 1.0, 3.0])
def test_constant_column_has_no_outliers(threshold):
    data = [{"v": 4} for _ in range(10)]
    assert find_outliers(data, "v", threshold) == []

def test_non_numeric_column_has_no_outliers():
    data = [{"v": "a"}, {"v": "b"}]
    assert find_outliers(data, "v") == []

def test_non_numeric_rows_are_never_flagged():
    data = [{"v": 10} for _ in range(20)] + [{"v": "huge"}, {"v": 1000}]
    outliers = find_outliers(data, "v")
    assert outliers == [{"v": 1000}]
