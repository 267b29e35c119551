"""
Session storage for imported datasets.

The API never keeps datasets in module globals; it talks to a
`KeyValueStore` handed to it through dependency injection, so a different
backend can be swapped in without touching the routes.
"""

import threading
from typing import Dict, Optional, Protocol

from viz_playground.models import DatasetContext
from viz_playground.utils.exceptions import DatasetNotFoundError
from viz_playground.utils.logger import get_logger

logger = get_logger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[DatasetContext]: ...
    def set(self, key: str, value: DatasetContext) -> None: ...
    def delete(self, key: str) -> bool: ...


class InMemoryStore:
    """Process-local store; contents vanish when the server stops."""

    def __init__(self):
        self._items: Dict[str, DatasetContext] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[DatasetContext]:
        with self._lock:
            return self._items.get(key)

    def set(self, key: str, value: DatasetContext) -> None:
        with self._lock:
            self._items[key] = value

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._items.pop(key, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class DatasetSessions:
    """Dataset lookups on top of a key-value store."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def save(self, context: DatasetContext) -> DatasetContext:
        self.store.set(context.dataset_id, context)
        logger.info(f"Stored dataset {context.dataset_id} ({context.filename}).")
        return context

    def load(self, dataset_id: str) -> DatasetContext:
        context = self.store.get(dataset_id)
        if context is None:
            raise DatasetNotFoundError(f"Dataset '{dataset_id}' not found. Please import data first.")
        return context

    def discard(self, dataset_id: str) -> None:
        if not self.store.delete(dataset_id):
            raise DatasetNotFoundError(f"Dataset '{dataset_id}' not found.")
        logger.info(f"Discarded dataset {dataset_id}.")
