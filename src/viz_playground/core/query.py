"""
Row-set transformations that feed chart data binding:
filtering with AND-combined rules and group-by aggregation.
"""

import math
from typing import Any, Callable, Dict, List, Optional, Sequence

from viz_playground.core.coercion import to_number, to_text, value_key
from viz_playground.models import (
    AggregateFunction,
    Aggregation,
    FilterOperator,
    FilterRule,
    GroupAggregationSpec,
    Row,
)
from viz_playground.utils.exceptions import InvalidQueryError
from viz_playground.utils.logger import get_logger

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# FILTERS
# ---------------------------------------------------------------------------

def _strict_equals(left: Any, right: Any) -> bool:
    # No coercion: booleans never equal numbers, strings never equal numbers.
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    left_numeric = isinstance(left, (int, float)) and not isinstance(left, bool)
    right_numeric = isinstance(right, (int, float)) and not isinstance(right, bool)
    if left_numeric and right_numeric:
        return left == right
    return type(left) is type(right) and left == right


def _contains(value: Any, needle: Any) -> bool:
    return to_text(needle).lower() in to_text(value).lower()


def _greater(value: Any, bound: Any) -> bool:
    return to_number(value) > to_number(bound)


def _less(value: Any, bound: Any) -> bool:
    return to_number(value) < to_number(bound)


def _in_range(value: Any, bounds: Sequence[Any]) -> bool:
    low, high = bounds
    return to_number(low) <= to_number(value) <= to_number(high)


_MATCHERS: Dict[FilterOperator, Callable[[Any, Any], bool]] = {
    FilterOperator.EQUALS: _strict_equals,
    FilterOperator.CONTAINS: _contains,
    FilterOperator.GREATER: _greater,
    FilterOperator.LESS: _less,
    FilterOperator.RANGE: _in_range,
}


def matches(row: Row, rule: FilterRule) -> bool:
    """True when the row passes the rule; a disabled rule always passes."""
    if not rule.enabled:
        return True
    return _MATCHERS[rule.operator](row.get(rule.column), rule.value)


def apply_filters(rows: Sequence[Row], rules: Sequence[FilterRule]) -> List[Row]:
    """Keeps the rows that pass every enabled rule. Returns a new list."""
    kept = [row for row in rows if all(matches(row, rule) for rule in rules)]
    active = sum(1 for rule in rules if rule.enabled)
    logger.info(f"Filtered {len(rows)} rows with {active} active rules -> {len(kept)} rows.")
    return kept


# ---------------------------------------------------------------------------
# GROUP + AGGREGATE
# ---------------------------------------------------------------------------

def _aggregate(values: List[float], function: AggregateFunction) -> Optional[float]:
    if function == AggregateFunction.SUM:
        return sum(values)
    if function == AggregateFunction.AVG:
        return sum(values) / len(values) if values else 0
    if function == AggregateFunction.COUNT:
        return len(values)
    if function == AggregateFunction.MIN:
        return min(values) if values else None
    if function == AggregateFunction.MAX:
        return max(values) if values else None
    raise InvalidQueryError(f"Unsupported aggregation: {function}")


def group_and_aggregate(
    rows: Sequence[Row],
    group_columns: Sequence[str],
    aggregations: Sequence[Aggregation],
) -> List[Row]:
    """
    Groups rows by the ordered values of `group_columns` and aggregates.

    One output row per distinct key combination, in first-seen order, holding
    the raw group values plus one `{column}_{function}` field per aggregation.
    Only numeric-coercible values take part in an aggregation, so `count`
    counts numeric values rather than rows. min/max of an empty value set
    are None.
    """
    groups: Dict[tuple, List[Row]] = {}
    for row in rows:
        key = tuple(value_key(row.get(col)) for col in group_columns)
        groups.setdefault(key, []).append(row)

    result = []
    for members in groups.values():
        first = members[0]
        output: Row = {col: first.get(col) for col in group_columns}

        for agg in aggregations:
            values = [to_number(member.get(agg.column)) for member in members]
            values = [v for v in values if not math.isnan(v)]
            output[agg.output_name] = _aggregate(values, agg.function)

        result.append(output)

    logger.info(
        f"Grouped {len(rows)} rows by {list(group_columns)} into {len(result)} groups "
        f"with {len(aggregations)} aggregations."
    )
    return result


def apply_group_spec(rows: Sequence[Row], spec: GroupAggregationSpec) -> List[Row]:
    """
    Runs `group_and_aggregate` after checking the named columns exist.

    Raises:
        InvalidQueryError: if a group or aggregation names a column the first row does not have.
    """
    if rows:
        known = set(rows[0].keys())
        referenced = list(spec.group_columns) + [agg.column for agg in spec.aggregations]
        missing = [col for col in referenced if col not in known]
        if missing:
            raise InvalidQueryError(f"Unknown column(s) in grouping: {', '.join(missing)}")
    return group_and_aggregate(rows, spec.group_columns, spec.aggregations)
