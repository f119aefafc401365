from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Generic, TypeVar

from pydantic import BaseModel

if TYPE_CHECKING:
    from appledocs.models.docs import ReferenceData

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """Memory-tier cache slot. Expired once ``now - timestamp >= ttl``."""

    data: T
    timestamp: float


class IndexState(StrEnum):
    UNINITIALIZED = "uninitialized"
    BUILDING = "building"
    READY = "ready"
    FAILED = "failed"


class LocalSymbolIndexEntry(BaseModel):
    """Single searchable symbol extracted from a cached document."""

    id: str  # path when non-empty, else title
    title: str
    path: str
    kind: str
    abstract: str = ""
    platforms: list[str] = []
    tokens: list[str] = []
    file_path: str = ""  # Cache file the entry came from; empty for fallback results
    score: int = 0  # Set on search results only


@dataclass
class IndexBuildSummary:
    """Outcome of one index build pass."""

    files_seen: int = 0
    processed: int = 0
    errors: int = 0
    collisions: int = 0


@dataclass
class FrameworkIndexEntry:
    """Framework reference plus the tokens the shared scorer ranks against."""

    id: str
    ref: ReferenceData
    tokens: list[str] = field(default_factory=list)


@dataclass
class RankedReference:
    id: str
    ref: ReferenceData
    score: int


class SearchResult(BaseModel):
    """Single hit from the documentation client's linear framework scan."""

    title: str
    framework: str
    path: str
    description: str
    symbol_kind: str | None = None
    platforms: str
