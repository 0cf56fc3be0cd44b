from __future__ import annotations

from pathlib import PurePosixPath
from urllib.parse import urlparse

import structlog

from visservice.cache.base import DatasetCache, InMemoryDatasetCache
from visservice.cache.grid import GridDatasetCache
from visservice.config import get_settings
from visservice.data.csv_reader import DatasetReadError, read_csv
from visservice.models.schemas import Dataset
from visservice.observability.metrics import get_metrics
from visservice.services import content_reader

logger = structlog.get_logger(__name__)

_cache: DatasetCache | None = None


class DataReadError(Exception):
    pass


def set_dataset_cache(cache: DatasetCache | None) -> None:
    global _cache
    _cache = cache


def get_dataset_cache() -> DatasetCache:
    global _cache
    if _cache is None:
        settings = get_settings()
        if settings.cache_backend == "grid":
            _cache = GridDatasetCache.from_url(settings.grid_url, settings.grid_map_name)
        else:
            _cache = InMemoryDatasetCache()
    return _cache


def _dataset_name(url: str) -> str:
    stem = PurePosixPath(urlparse(url).path).stem
    return stem or "data"


def get_dataset(url: str | None) -> Dataset:
    """
    Return the dataset for `url`, reading through the cache.

    On a miss the URL is fetched and parsed as CSV, and the result is stored
    under the URL for later requests.
    """
    if not url:
        raise DataReadError("No data reference given")

    cache = get_dataset_cache()
    dataset = cache.retrieve(url)
    get_metrics().observe_cache_lookup(hit=dataset is not None)
    if dataset is not None:
        return dataset

    try:
        content = content_reader.read_content_from_url(url)
        dataset = read_csv(content, name=_dataset_name(url))
    except (content_reader.ContentReadError, DatasetReadError) as exc:
        raise DataReadError(str(exc)) from exc

    logger.info("cache.loaded", key=url, rows=dataset.row_count)
    cache.store(url, dataset)
    return dataset
