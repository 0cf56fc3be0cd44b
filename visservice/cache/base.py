"""DatasetCache interface and the in-process backend."""

from __future__ import annotations

from abc import ABC, abstractmethod
from threading import Lock

from visservice.models.schemas import Dataset


class DatasetCache(ABC):
    """Key to dataset store.

    Backends never raise from `store` or `retrieve`: an unavailable or
    corrupt backend degrades to a cache miss.
    """

    @abstractmethod
    def store(self, key: str, dataset: Dataset) -> None:
        """Insert or replace the dataset held under key."""
        pass

    @abstractmethod
    def retrieve(self, key: str) -> Dataset | None:
        """Return the dataset held under key, or None on a miss."""
        pass


class InMemoryDatasetCache(DatasetCache):
    """Process-local cache. Datasets are immutable so they are shared as-is."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._entries: dict[str, Dataset] = {}

    def store(self, key: str, dataset: Dataset) -> None:
        with self._lock:
            self._entries[key] = dataset

    def retrieve(self, key: str) -> Dataset | None:
        with self._lock:
            return self._entries.get(key)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
