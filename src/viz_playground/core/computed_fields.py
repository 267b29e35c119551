import math
import re
from typing import Any, List, Sequence

from viz_playground.core.coercion import is_number, to_number
from viz_playground.core.expression_engine import evaluate_expression, normalize_operators
from viz_playground.models import ComputedField, Row
from viz_playground.utils.exceptions import ExpressionError
from viz_playground.utils.logger import get_logger

logger = get_logger(__name__)

_IDENTIFIER = re.compile(r"\b(\w+)\b")


def _literal(value: Any) -> str:
    """Source text for a row value inside an expression."""
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return "None"
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, (int, float)):
        return f"({value!r})" if value < 0 else repr(value)
    if isinstance(value, str) and is_number(value):
        return f"({to_number(value)!r})"
    return repr(str(value))


def substitute_columns(expression: str, row: Row) -> str:
    """Replaces every identifier that names a column of `row` with that row's value."""
    return _IDENTIFIER.sub(
        lambda m: _literal(row[m.group(1)]) if m.group(1) in row else m.group(1),
        expression,
    )


def _compute(field: ComputedField, row: Row) -> Any:
    text = substitute_columns(normalize_operators(field.expression), row)
    return evaluate_expression(text)


def add_computed_fields(rows: Sequence[Row], fields: Sequence[ComputedField]) -> List[Row]:
    """
    Returns copies of `rows` extended with one column per computed field.

    Expressions see the original row values only, never sibling computed
    fields. A failing field is None on that row and nothing else is affected.
    """
    result = []
    failures = 0
    for row in rows:
        new_row = dict(row)
        for field in fields:
            try:
                new_row[field.name] = _compute(field, row)
            except ExpressionError as e:
                logger.debug(f"Computed field '{field.name}' failed on row: {e.message}")
                new_row[field.name] = None
                failures += 1
        result.append(new_row)

    if failures:
        logger.warning(f"{failures} computed values failed to evaluate across {len(rows)} rows.")
    logger.info(f"Added {len(fields)} computed fields to {len(rows)} rows.")
    return result
