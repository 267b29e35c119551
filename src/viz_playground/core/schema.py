from typing import Any, List, Mapping, Sequence

from viz_playground.core.coercion import is_empty, value_key
from viz_playground.core.type_inference import infer_type
from viz_playground.models import ColumnInfo, Row
from viz_playground.utils.exceptions import InvalidDatasetError
from viz_playground.utils.logger import get_logger

logger = get_logger(__name__)

MAX_DISTINCT_VALUES = 50


def ensure_dataset(rows: Any) -> List[Row]:
    """
    Validates the entry-point shape: a non-empty list of records.

    Raises:
        InvalidDatasetError: if rows is not a list, is empty, or holds a non-mapping.
    """
    if not isinstance(rows, (list, tuple)):
        raise InvalidDatasetError(
            f"Invalid data format. Expected an array of objects, got {type(rows).__name__}."
        )
    if len(rows) == 0:
        raise InvalidDatasetError("Invalid data format. The array of objects is empty.")

    for index, row in enumerate(rows):
        if not isinstance(row, Mapping):
            raise InvalidDatasetError(
                f"Invalid data format. Entry {index} is a {type(row).__name__}, not an object."
            )
    return list(rows)


def distinct_values(values: Sequence[Any], limit: int = MAX_DISTINCT_VALUES) -> List[Any]:
    """Unique non-empty values in first-seen order, truncated to `limit`."""
    seen = set()
    unique = []
    for value in values:
        if is_empty(value):
            continue
        key = value_key(value)
        if key in seen:
            continue
        seen.add(key)
        unique.append(value)
        if len(unique) >= limit:
            break
    return unique


def analyze(rows: Sequence[Row]) -> List[ColumnInfo]:
    """
    Builds per-column metadata for a dataset.

    The column set comes from the first row's keys; rows with extra keys are
    not reconciled and missing keys read as None.
    """
    if not rows:
        return []

    columns = []
    for name in rows[0].keys():
        values = [row.get(name) for row in rows]
        columns.append(ColumnInfo(
            name=name,
            type=infer_type(values),
            distinct_values=distinct_values(values),
        ))

    logger.debug(f"Analyzed {len(columns)} columns over {len(rows)} rows.")
    return columns
