from __future__ import annotations

import re
from collections.abc import AsyncIterator
from typing import Any

import pytest
import redis
from httpx import ASGITransport, AsyncClient

from visservice.cache.base import InMemoryDatasetCache
from visservice.cache.data_cache import set_dataset_cache
from visservice.collaborators.compiler import BuildOutput, VisualizationCompiler, set_compiler
from visservice.collaborators.match import MatchEngine, set_match_engine
from visservice.config import get_settings
from visservice.main import app
from visservice.models.schemas import Dataset
from visservice.observability.metrics import reset_metrics
from visservice.services import content_reader

_TOKEN = re.compile(r"^[a-z]+(\(.*\))?$")


class MockCompiler(VisualizationCompiler):
    """Accepts space separated commands like `bar x(region) y(sales) filter(region)`."""

    def parse(self, spec_text: str) -> list[str]:
        tokens = spec_text.split()
        for token in tokens:
            if not _TOKEN.match(token):
                raise ValueError(f"Illegal command '{token}'")
        return tokens

    def apply(self, action: list[str], dataset: Dataset | None) -> dict[str, Any]:
        if dataset is None and not any(t.startswith("data(") for t in action):
            raise ValueError("No data available for the visualization")
        return {"action": action, "dataset": dataset}

    def build(self, item: dict[str, Any], width: int, height: int, vis_id: str) -> BuildOutput:
        action = item["action"]
        rows = item["dataset"].row_count if item["dataset"] is not None else 0
        js = f"render('{vis_id}', {width}, {height}, '{' '.join(action)}', {rows});"
        css = "\n".join(f".{t[6:-1]} {{}}" for t in action if t.startswith("style("))
        filters = [t[7:-1] for t in action if t.startswith("filter(")]
        controls = {"filters": filters} if filters else None
        return BuildOutput(js=js, css=css, controls=controls)

    def write_controls(self, controls: Any, element_id: str, factory: str) -> str:
        if not controls:
            return ""
        return f"\nnew {factory}('{element_id}', {controls['filters']!r});"


class MockMatchEngine(MatchEngine):
    """Renames fields positionally from the original dataset's columns to the new one's."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def match(self, original: Dataset, new: Dataset, action: list[str]) -> str:
        self.calls.append("match")
        text = " ".join(action)
        for old_col, new_col in zip(original.columns, new.columns):
            text = text.replace(f"({old_col.name})", f"({new_col.name})")
        return text

    def match_source(self, spec_text: str, new: Dataset) -> str:
        self.calls.append("match_source")
        return f"{spec_text} data({new.name})"


class MockGridClient:
    """Just enough of redis.Redis for hash-backed maps."""

    def __init__(self) -> None:
        self.maps: dict[str, dict[str, bytes]] = {}
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            raise redis.ConnectionError("grid unavailable")

    def hset(self, name: str, key: str, value: bytes) -> int:
        self._check()
        self.maps.setdefault(name, {})[key] = value
        return 1

    def hget(self, name: str, key: str) -> bytes | None:
        self._check()
        return self.maps.get(name, {}).get(key)

    def hdel(self, name: str, *keys: str) -> int:
        self._check()
        removed = 0
        for key in keys:
            if self.maps.get(name, {}).pop(key, None) is not None:
                removed += 1
        return removed


class RemoteContent(dict):
    """URL -> body map standing in for the network; records fetches."""

    def __init__(self) -> None:
        super().__init__()
        self.fetches: list[str] = []

    def read(self, url: str | None) -> str:
        if not url:
            raise content_reader.ContentReadError("No URL given")
        self.fetches.append(url)
        if url not in self:
            raise content_reader.ContentReadError(f"Could not read {url}: 404 Not Found")
        return self[url]


@pytest.fixture
def remote_content() -> RemoteContent:
    return RemoteContent()


@pytest.fixture
def match_engine() -> MockMatchEngine:
    return MockMatchEngine()


@pytest.fixture
def grid_client() -> MockGridClient:
    return MockGridClient()


@pytest.fixture(autouse=True)
def test_environment(monkeypatch: pytest.MonkeyPatch, remote_content: RemoteContent, match_engine: MockMatchEngine) -> None:
    monkeypatch.setenv("CACHE_BACKEND", "memory")
    get_settings.cache_clear()

    monkeypatch.setattr(content_reader, "read_content_from_url", remote_content.read)
    set_compiler(MockCompiler())
    set_match_engine(match_engine)
    set_dataset_cache(InMemoryDatasetCache())
    reset_metrics()

    yield

    set_compiler(None)
    set_match_engine(None)
    set_dataset_cache(None)
    get_settings.cache_clear()


@pytest.fixture
async def api_client() -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
