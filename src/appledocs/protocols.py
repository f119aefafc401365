"""Protocol interfaces for swappable components.

The documentation client and AppState reference these protocols, not the
concrete implementations, so tests can substitute lightweight in-memory
stand-ins for the network and the disk.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from appledocs.models.docs import FrameworkData, SymbolData, Technology


class TransportProtocol(Protocol):
    """Interface for the documentation JSON transport."""

    async def request(self, path: str) -> dict[str, Any]: ...

    async def get_documentation(self, path: str) -> dict[str, Any]: ...

    def clear_cache(self) -> None: ...


class DocumentStoreProtocol(Protocol):
    """Interface for the persistent document cache."""

    directory: Path

    async def load_framework(self, name: str) -> FrameworkData | None: ...

    async def save_framework(self, name: str, data: FrameworkData) -> None: ...

    async def load_symbol(self, path: str) -> SymbolData | None: ...

    async def save_symbol(self, path: str, data: SymbolData) -> None: ...

    async def load_technologies(self) -> dict[str, Technology] | None: ...

    async def save_technologies(self, technologies: Mapping[str, Technology]) -> None: ...
