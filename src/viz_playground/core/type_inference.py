import re
from typing import Any, Iterable

from viz_playground.core.coercion import is_empty, is_number
from viz_playground.models import ColumnType

# Exactly YYYY-MM-DD, nothing before or after.
DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")


def infer_type(values: Iterable[Any]) -> ColumnType:
    """
    Classifies a column from its raw values.

    Empty values are ignored. A column with nothing left is categorical.
    The date check runs before the numeric one so ISO dates are never
    treated as numbers.
    """
    present = [v for v in values if not is_empty(v)]

    if not present:
        return ColumnType.CATEGORICAL

    if all(DATE_PATTERN.fullmatch(str(v)) for v in present):
        return ColumnType.DATE

    if all(is_number(v) for v in present):
        return ColumnType.NUMERIC

    return ColumnType.CATEGORICAL
