"""
statistics.py
─────────────────────────────────────────────────────────────────────────────
Numeric primitives used by the insight generator and the API.

  correlate      → Pearson r between two columns (sum-based formula)
  find_outliers  → rows whose z-score exceeds a threshold

Degenerate inputs (too few pairs, zero variance, no numeric values) return
neutral results instead of raising.
─────────────────────────────────────────────────────────────────────────────
"""

import math
from typing import List, Sequence

import numpy as np

from viz_playground.core.coercion import to_number
from viz_playground.models import Row
from viz_playground.utils.logger import get_logger

logger = get_logger(__name__)


def numeric_values(rows: Sequence[Row], column: str) -> np.ndarray:
    """Coerced values of a column with non-numeric entries dropped."""
    values = np.array([to_number(row.get(column)) for row in rows], dtype=float)
    return values[~np.isnan(values)]


def correlate(rows: Sequence[Row], col_a: str, col_b: str) -> float:
    """
    Pearson correlation coefficient between two columns.

    Rows where either side fails numeric coercion are dropped. Fewer than two
    valid pairs, or a zero denominator, yield 0.
    """
    pairs = np.array(
        [(to_number(row.get(col_a)), to_number(row.get(col_b))) for row in rows],
        dtype=float,
    ).reshape(-1, 2)
    pairs = pairs[~np.isnan(pairs).any(axis=1)]

    n = len(pairs)
    if n < 2:
        return 0.0

    x, y = pairs[:, 0], pairs[:, 1]
    sum_x, sum_y = x.sum(), y.sum()
    numerator = n * (x * y).sum() - sum_x * sum_y
    denominator = math.sqrt(
        max((n * (x * x).sum() - sum_x ** 2) * (n * (y * y).sum() - sum_y ** 2), 0.0)
    )

    if denominator == 0:
        return 0.0

    r = float(numerator / denominator)
    # Clamp floating-point drift such as 1.0000000000000002.
    return max(-1.0, min(1.0, r))


def find_outliers(rows: Sequence[Row], column: str, threshold: float = 3.0) -> List[Row]:
    """
    Returns rows whose |z-score| in `column` exceeds `threshold`.

    Uses the population standard deviation. Rows with non-numeric values are
    never flagged. Order and full row objects are preserved.
    """
    values = numeric_values(rows, column)
    if values.size == 0:
        return []

    mean = values.mean()
    std_dev = values.std()  # ddof=0
    if std_dev == 0:
        return []

    outliers = []
    for row in rows:
        value = to_number(row.get(column))
        if math.isnan(value):
            continue
        if abs((value - mean) / std_dev) > threshold:
            outliers.append(row)

    logger.debug(f"Column '{column}': {len(outliers)} outliers at z > {threshold}.")
    return outliers
