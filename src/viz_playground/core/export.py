from typing import List, Optional, Sequence

import pandas as pd

from viz_playground.models import Insight, Row
from viz_playground.utils.exceptions import EmptyDatasetError
from viz_playground.utils.logger import get_logger

logger = get_logger(__name__)


def rows_to_csv(rows: Sequence[Row], columns: Optional[List[str]] = None) -> str:
    """
    Serializes rows to CSV text with a header line.

    Columns default to the first row's keys; missing values are written empty.
    """
    if not rows:
        raise EmptyDatasetError("No data to export. Please import data first.")

    if columns is None:
        columns = list(rows[0].keys())

    df = pd.DataFrame(list(rows), columns=columns)
    logger.info(f"Exporting {len(df)} rows x {len(columns)} columns to CSV.")
    return df.to_csv(index=False)


def insights_to_csv(insights: Sequence[Insight]) -> str:
    """One CSV line per insight: kind, title, description, confidence."""
    df = pd.DataFrame(
        [
            {
                "kind": insight.kind.value,
                "title": insight.title,
                "description": insight.description,
                "confidence": round(insight.confidence, 4),
            }
            for insight in insights
        ],
        columns=["kind", "title", "description", "confidence"],
    )
    return df.to_csv(index=False)
