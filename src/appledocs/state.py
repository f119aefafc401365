"""Application and session state.

AppState is created once at server startup (inside the FastMCP lifespan
context manager) and injected into every tool handler via the MCP Context
object. It owns the shared infrastructure plus one SessionState.

SessionState holds what the agent has selected so far, in three slices:
  technology  the active technology
  framework   its framework document, the derived reference index and the
              identifiers whose nested references were already expanded
  search      the last discovery page and the per-technology local index

Switching to a technology with a different identifier clears the framework
slice and the local index in one step. Re-selecting the same identifier
keeps them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

from appledocs.mutex import KeyedMutex

if TYPE_CHECKING:
    import httpx

    from appledocs.client import AppleDocsClient
    from appledocs.config import Settings
    from appledocs.local_index import LocalSymbolIndex
    from appledocs.models.docs import FrameworkData, Technology
    from appledocs.models.index import FrameworkIndexEntry
    from appledocs.protocols import DocumentStoreProtocol, TransportProtocol

log = structlog.get_logger()


@dataclass
class TechnologyState:
    active: Technology | None = None

    def has_changed(self, identifier: str | None) -> bool:
        current = self.active.identifier if self.active is not None else None
        return current != identifier


@dataclass
class FrameworkState:
    data: FrameworkData | None = None
    index: dict[str, FrameworkIndexEntry] | None = None
    expanded_identifiers: set[str] = field(default_factory=set)

    def clear_index(self) -> None:
        self.index = None
        self.expanded_identifiers.clear()

    def reset(self) -> None:
        self.data = None
        self.clear_index()


@dataclass
class Discovery:
    query: str | None
    results: list[Technology]


@dataclass
class SearchState:
    last_discovery: Discovery | None = None
    local_index: LocalSymbolIndex | None = None

    def reset_for_technology_change(self) -> None:
        # The last discovery is technology-independent and survives.
        self.local_index = None


class SessionState:
    def __init__(self) -> None:
        self.technology = TechnologyState()
        self.framework = FrameworkState()
        self.search = SearchState()

    # ------------------------------------------------------------------
    # Technology
    # ------------------------------------------------------------------

    @property
    def active_technology(self) -> Technology | None:
        return self.technology.active

    def set_active_technology(self, technology: Technology | None) -> None:
        identifier = technology.identifier if technology is not None else None
        if self.technology.has_changed(identifier):
            log.info(
                "active_technology_changed",
                previous=self.technology.active.identifier if self.technology.active else None,
                current=identifier,
            )
            self.framework.reset()
            self.search.reset_for_technology_change()
        self.technology.active = technology

    # ------------------------------------------------------------------
    # Framework
    # ------------------------------------------------------------------

    @property
    def active_framework_data(self) -> FrameworkData | None:
        return self.framework.data

    def set_active_framework_data(self, data: FrameworkData) -> None:
        self.framework.data = data

    def clear_active_framework_data(self) -> None:
        self.framework.data = None

    @property
    def framework_index(self) -> dict[str, FrameworkIndexEntry] | None:
        return self.framework.index

    def set_framework_index(self, index: dict[str, FrameworkIndexEntry]) -> None:
        self.framework.index = index

    def clear_framework_index(self) -> None:
        self.framework.clear_index()

    @property
    def expanded_identifiers(self) -> set[str]:
        return self.framework.expanded_identifiers

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    @property
    def last_discovery(self) -> Discovery | None:
        return self.search.last_discovery

    def set_last_discovery(self, query: str | None, results: list[Technology]) -> None:
        self.search.last_discovery = Discovery(query=query, results=list(results))

    @property
    def local_symbol_index(self) -> LocalSymbolIndex | None:
        return self.search.local_index

    def set_local_symbol_index(self, index: LocalSymbolIndex) -> None:
        self.search.local_index = index

    def clear_local_symbol_index(self) -> None:
        self.search.local_index = None

    def reset(self) -> None:
        self.technology = TechnologyState()
        self.framework = FrameworkState()
        self.search = SearchState()


@dataclass
class AppState:
    """Holds all shared runtime state. Passed to every tool handler."""

    settings: Settings
    client: AppleDocsClient
    store: DocumentStoreProtocol
    transport: TransportProtocol | None = None
    http_client: httpx.AsyncClient | None = None
    session: SessionState = field(default_factory=SessionState)
    # Serialises local index creation per technology identifier
    index_mutex: KeyedMutex = field(default_factory=KeyedMutex)
