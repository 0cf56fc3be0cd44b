from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from visservice.collaborators.loader import load_factory
from visservice.config import get_settings
from visservice.models.schemas import Dataset


class MatchEngine(ABC):
    """Retargets an existing visualization onto a different dataset."""

    @abstractmethod
    def match(self, original: Dataset, new: Dataset, action: Any) -> str:
        """Source text showing `action` (built for `original`) on `new`."""
        pass

    @abstractmethod
    def match_source(self, spec_text: str, new: Dataset) -> str:
        """Same as `match`, with the original data taken from the source's own data reference."""
        pass


_engine: MatchEngine | None = None


def set_match_engine(engine: MatchEngine | None) -> None:
    global _engine
    _engine = engine


def get_match_engine() -> MatchEngine:
    global _engine
    if _engine is None:
        _engine = load_factory(get_settings().match_engine, "MATCH_ENGINE")
    return _engine
