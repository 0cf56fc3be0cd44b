from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    INVALID_SPEC = "invalid_spec"
    INVALID_DATA = "invalid_data"
    UNREADABLE_URL = "unreadable_url"
    UNREADABLE_DATA = "unreadable_data"


@dataclass(frozen=True)
class ServiceError:
    """A recoverable request failure. Every kind is the caller's fault (HTTP 400)."""

    kind: ErrorKind
    message: str

    @property
    def status_code(self) -> int:
        return 400
