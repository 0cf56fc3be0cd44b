from __future__ import annotations

from typing import Any

import redis
import structlog

from visservice.cache.base import DatasetCache
from visservice.data.serialize import DatasetSerializationError, deserialize_dataset, serialize_dataset
from visservice.models.schemas import Dataset
from visservice.observability.metrics import get_metrics

logger = structlog.get_logger(__name__)


class GridDatasetCache(DatasetCache):
    """
    DatasetCache backed by a named map in an external key-value grid.

    The map is a Redis hash: `store` upserts a field, `retrieve` reads it back.
    Grid failures are logged and reported as misses; a value that no longer
    deserializes is evicted so the dataset is reloaded on the next request.
    """

    def __init__(self, client: Any, map_name: str) -> None:
        self.client = client
        self.map_name = map_name

    @classmethod
    def from_url(cls, url: str, map_name: str) -> "GridDatasetCache":
        return cls(redis.Redis.from_url(url), map_name)

    def store(self, key: str, dataset: Dataset) -> None:
        try:
            self.client.hset(self.map_name, key, serialize_dataset(dataset))
        except redis.RedisError as exc:
            get_metrics().observe_cache_error()
            logger.error("cache.store_failed", key=key, map_name=self.map_name, error=str(exc))

    def retrieve(self, key: str) -> Dataset | None:
        try:
            value = self.client.hget(self.map_name, key)
        except redis.RedisError as exc:
            get_metrics().observe_cache_error()
            logger.error("cache.retrieve_failed", key=key, map_name=self.map_name, error=str(exc))
            return None

        if value is None:
            return None

        try:
            return deserialize_dataset(value)
        except DatasetSerializationError as exc:
            logger.warning("cache.corrupt_entry_evicted", key=key, map_name=self.map_name, error=str(exc))
            self._evict(key)
            return None

    def _evict(self, key: str) -> None:
        try:
            self.client.hdel(self.map_name, key)
        except redis.RedisError as exc:
            get_metrics().observe_cache_error()
            logger.error("cache.evict_failed", key=key, map_name=self.map_name, error=str(exc))
