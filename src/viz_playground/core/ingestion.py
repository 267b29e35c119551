import csv
import io
import json
import uuid
from typing import Any, List, Union

import numpy as np
import pandas as pd

from viz_playground.config import settings
from viz_playground.core.schema import analyze, ensure_dataset
from viz_playground.models import DatasetContext, Row
from viz_playground.utils.exceptions import (
    EmptyDatasetError,
    FileProcessingError,
    InvalidDatasetError,
    MalformedContentError,
    UnsupportedFormatError,
)
from viz_playground.utils.logger import get_logger

logger = get_logger(__name__)

SUPPORTED_EXTENSIONS = (".csv", ".json")


def _to_python(value: Any) -> Any:
    """Converts numpy scalars and NaN cells to plain Python values."""
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and np.isnan(value):
        return None
    return value


def parse_csv(text: str) -> List[Row]:
    """
    Parses CSV text with a header row into records.

    Numeric columns are typed by pandas, empty cells become None.
    """
    if not text.strip():
        return []

    # Sniff the delimiter from a small chunk (handles ';' and tab exports)
    try:
        delimiter = csv.Sniffer().sniff(text[:1024], delimiters=",;\t|").delimiter
    except csv.Error:
        delimiter = ","  # Fallback to comma

    logger.info(f"Detected delimiter: '{delimiter}'")

    try:
        df = pd.read_csv(io.StringIO(text), sep=delimiter, skip_blank_lines=True)
    except pd.errors.EmptyDataError:
        return []
    except (pd.errors.ParserError, ValueError) as e:
        raise MalformedContentError(f"CSV parsing error: {e}")

    df.columns = [str(c).strip() for c in df.columns]
    return [
        {col: _to_python(val) for col, val in record.items()}
        for record in df.to_dict(orient="records")
    ]


def parse_json(text: str) -> List[Row]:
    """Parses JSON text that must hold an array of objects."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedContentError(f"Invalid JSON format: {e.msg} (line {e.lineno}).")

    if not isinstance(data, list):
        raise MalformedContentError("Invalid JSON format. Expected an array of objects.")
    if any(not isinstance(item, dict) for item in data):
        raise MalformedContentError("Invalid JSON format. Every array entry must be an object.")
    return data


def _build_context(rows: List[Row], filename: str) -> DatasetContext:
    columns = analyze(rows)
    context = DatasetContext(
        dataset_id=uuid.uuid4().hex,
        filename=filename,
        rows=rows,
        columns=columns,
    )
    logger.info(f"Ingestion successful. {len(rows)} rows x {len(columns)} columns.")
    return context


def ingest_text(content: Union[str, bytes], filename: str) -> DatasetContext:
    """
    Imports CSV or JSON file content, chosen by file extension.

    Raises:
        UnsupportedFormatError: extension is neither .csv nor .json.
        MalformedContentError: content cannot be decoded or parsed.
        EmptyDatasetError: content parses to zero rows.
        FileProcessingError: content exceeds the upload size limit.
    """
    logger.info(f"Starting ingestion for file: {filename}")

    name = (filename or "").lower()
    if not name.endswith(SUPPORTED_EXTENSIONS):
        raise UnsupportedFormatError()

    # 1. Validate size
    size_mb = len(content) / (1024 * 1024)
    if size_mb > settings.MAX_UPLOAD_SIZE_MB:
        raise FileProcessingError(f"File exceeds {settings.MAX_UPLOAD_SIZE_MB}MB limit.")

    # 2. Decode
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8-sig")
        except UnicodeDecodeError:
            raise MalformedContentError("File is not valid UTF-8 text.")

    # 3. Parse
    rows = parse_csv(content) if name.endswith(".csv") else parse_json(content)

    if not rows:
        raise EmptyDatasetError("The uploaded file contains no data.")

    return _build_context(rows, filename)


def ingest_rows(rows: Any, filename: str = "pasted.json") -> DatasetContext:
    """Imports records that were already parsed (pasted JSON, API payloads)."""
    logger.info(f"Starting ingestion for pasted data: {filename}")
    try:
        records = ensure_dataset(rows)
    except InvalidDatasetError as e:
        if isinstance(rows, (list, tuple)) and not rows:
            raise EmptyDatasetError(e.message)
        raise
    return _build_context(records, filename)
