# base_store.py
# Description: Key-value JSON document store with standardized path handling
#
"""
base_store.py
-------------

A small atomic key-value document store: the whole document is one JSON
object held in memory and rewritten atomically on every ``set``. This mirrors
the get/set contract of a desktop settings store, and is the only place that
touches the persistence medium.

Path handling follows the other store modules:
- Path type handling (str vs Path)
- Memory store special case (':memory:') for tests and throwaway sessions
- Directory creation for file-based stores
"""

import copy
import json
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Union

from loguru import logger

from .store_errors import StorageUnavailableError
from ..Utils.atomic_file_ops import atomic_write_json, read_json_file


class JsonDocumentStore(ABC):
    """
    Base class for document stores persisted as a single JSON file.

    Subclasses declare their top-level keys and defaults through
    ``_initialize_document``.
    """

    def __init__(self, store_path: Union[str, Path]):
        """
        Initialize the store with standardized path handling.

        Args:
            store_path: Path to the JSON document or ':memory:'

        Raises:
            StorageUnavailableError: If the document exists but cannot be read.
        """
        if isinstance(store_path, Path):
            self.is_memory_store = False
            self.store_path = store_path.expanduser().resolve()
        else:
            self.is_memory_store = (store_path == ':memory:')
            if self.is_memory_store:
                self.store_path = Path(":memory:")  # Symbolic Path for consistency
            else:
                self.store_path = Path(store_path).expanduser().resolve()

        self._lock = threading.RLock()
        self._document: Dict[str, Any] = self._initialize_document()

        if not self.is_memory_store:
            self._document.update(self._load_from_disk())

        logger.info(f"{self.__class__.__name__} initialized with path: {self.store_path}")

    @abstractmethod
    def _initialize_document(self) -> Dict[str, Any]:
        """
        Return the default document (top-level keys with empty values).
        Must be implemented by subclasses.
        """

    def _load_from_disk(self) -> Dict[str, Any]:
        try:
            data = read_json_file(self.store_path, default={})
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Could not read store document {self.store_path}: {e}")
            raise StorageUnavailableError(f"Could not read {self.store_path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageUnavailableError(f"Store document {self.store_path} is not a JSON object")
        return data

    def get(self, key: str) -> Any:
        """Return a deep copy of the value stored under a top-level key."""
        with self._lock:
            return copy.deepcopy(self._document.get(key))

    def set(self, key: str, value: Any) -> None:
        """
        Replace a top-level key and persist the whole document atomically.

        The in-memory document only changes once the write succeeded.

        Raises:
            StorageUnavailableError: If the document could not be written.
        """
        with self._lock:
            candidate = dict(self._document)
            candidate[key] = copy.deepcopy(value)
            if not self.is_memory_store:
                try:
                    atomic_write_json(self.store_path, candidate)
                except (OSError, TypeError, ValueError) as e:
                    raise StorageUnavailableError(f"Could not write {self.store_path}: {e}") from e
            self._document = candidate

    def close(self) -> None:
        """Nothing is held open between writes; kept for symmetry with callers' cleanup."""
        logger.debug(f"{self.__class__.__name__} closed ({self.store_path})")
