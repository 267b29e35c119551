import logging

import pytest

from viz_playground.core.computed_fields import add_computed_fields, substitute_columns
from viz_playground.core.expression_engine import evaluate_expression, normalize_operators
from viz_playground.models import ComputedField
from viz_playground.utils.exceptions import ExpressionError

# --- Tests for the Expression Engine ---

@pytest.mark.parametrize("expression, expected", [
    ("1 + 2 * 3", 7),
    ("(1 + 2) * 3", 9),
    ("10 / 4", 2.5),
    ("7 // 2", 3),
    ("7 % 4", 3),
    ("2 ** 3", 8),
    ("-(3 - 5)", 2),
    ("3 > 2", True),
    ("1 < 2 < 3", True),
    ("2 >= 3", False),
    ("'north' + '-east'", "north-east"),
    ("true and false", False),
    ("null == None", True),
    ("1 if 2 > 1 else 0", 1),
])
def test_evaluates_arithmetic_and_comparisons(expression, expected):
    assert evaluate_expression(expression) == expected

@pytest.mark.parametrize("expression", [
    "__import__('os').system('echo hi')",
    "open('/etc/passwd')",
    "().__class__.__bases__",
    "[1, 2][0]",
    "lambda: 1",
    "[x for x in '']",
    "unknown_column * 2",
    "1 / 0",
    "2 ** 1000",
    "'ab' * 3",
    "10 * 'abc'",
    "1 + None",
    "1 < 'a'",
    "1e308 * 10",
    "(-8) ** 0.5",
    "(9 ** 100) ** 100",
    "((9 ** 100) ** 100) ** 100",
    "1" * 400,
    "x = 1",
    "",
    "   ",
])
def test_rejects_unsafe_or_invalid_expressions(expression):
    with pytest.raises(ExpressionError):
        evaluate_expression(expression)

@pytest.mark.parametrize("expression, expected", [
    ("(-8) ** 2", 64),
    ("9 ** 100", 9 ** 100),
    ("0.5 ** 100", 0.5 ** 100),
    ("(-1) ** 100", 1),
])
def test_bounded_powers_are_allowed(expression, expected):
    assert evaluate_expression(expression) == expected

def test_js_style_operators_are_normalized():
    assert evaluate_expression(normalize_operators("1 === 1 && 2 !== 3")) is True
    assert evaluate_expression(normalize_operators("!(1 > 2) || false")) is True
    assert evaluate_expression(normalize_operators("2 >= 1 && 1 <= 2 && 1 != 2")) is True

# --- Tests for Computed Fields ---

def test_substitution_leaves_unknown_tokens():
    row = {"price": 2.5, "qty": 4}
    assert substitute_columns("price * qty + tax", row) == "2.5 * 4 + tax"

def test_string_values_become_literals():
    row = {"region": "north", "count": "12"}
    assert substitute_columns("region", row) == "'north'"
    assert substitute_columns("count * 2", row) == "(12.0) * 2"

def test_negative_values_keep_precedence():
    rows = add_computed_fields([{"a": -2}], [ComputedField(name="sq", expression="a ** 2")])
    assert rows[0]["sq"] == 4

def test_adds_field_per_row():
    rows = [{"price": 2.0, "qty": 3}, {"price": 1.5, "qty": 2}]
    result = add_computed_fields(rows, [ComputedField(name="total", expression="price * qty")])
    assert [r["total"] for r in result] == [6.0, 3.0]
    assert result[0]["price"] == 2.0

def test_string_comparison_field():
    rows = [{"region": "north"}, {"region": "south"}]
    fields = [ComputedField(name="is_north", expression="region === 'north'")]
    result = add_computed_fields(rows, fields)
    assert [r["is_north"] for r in result] == [True, False]

def test_failure_is_local_to_field_and_row():
    """One bad value nulls only that row's field; siblings and other rows survive."""
    rows = [{"price": 10, "qty": 2}, {"price": 10, "qty": "abc"}]
    fields = [
        ComputedField(name="total", expression="price * qty"),
        ComputedField(name="double", expression="price * 2"),
        ComputedField(name="broken", expression="price * missing"),
    ]
    result = add_computed_fields(rows, fields)
    assert result[0] == {"price": 10, "qty": 2, "total": 20, "double": 20, "broken": None}
    assert result[1]["total"] is None
    assert result[1]["double"] == 20
    assert result[1]["broken"] is None

def test_fields_do_not_see_sibling_results():
    fields = [
        ComputedField(name="double", expression="v * 2"),
        ComputedField(name="quad", expression="double * 2"),
    ]
    row = add_computed_fields([{"v": 3}], fields)[0]
    assert row["double"] == 6
    assert row["quad"] is None

def test_code_injection_yields_null():
    fields = [ComputedField(name="x", expression="__import__('os').getcwd()")]
    assert add_computed_fields([{"v": 1}], fields)[0]["x"] is None

def test_original_rows_are_untouched():
    rows = [{"v": 1}]
    add_computed_fields(rows, [ComputedField(name="w", expression="v + 1")])
    assert rows == [{"v": 1}]

def test_complex_result_yields_null():
    rows = add_computed_fields([{"x": -4}], [ComputedField(name="r", expression="x ** 0.5")])
    assert rows[0]["r"] is None

def test_huge_power_yields_null():
    fields = [
        ComputedField(name="big", expression="(x ** 100) ** 100"),
        ComputedField(name="bigger", expression="((x ** 100) ** 100) ** 100"),
        ComputedField(name="ok", expression="x ** 2"),
    ]
    row = add_computed_fields([{"x": 9}], fields)[0]
    assert row["big"] is None
    assert row["bigger"] is None
    assert row["ok"] == 81

def test_only_failures_are_counted_in_warning(caplog):
    rows = [{"v": None}, {"v": 2}]
    fields = [
        ComputedField(name="same", expression="v"),
        ComputedField(name="nothing", expression="null"),
        ComputedField(name="broken", expression="v * 'a'"),
    ]
    with caplog.at_level(logging.WARNING):
        result = add_computed_fields(rows, fields)

    assert result[0] == {"v": None, "same": None, "nothing": None, "broken": None}
    assert result[1] == {"v": 2, "same": 2, "nothing": None, "broken": None}
    warnings = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
    assert warnings == ["2 computed values failed to evaluate across 2 rows."]
