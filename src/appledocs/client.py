"""Documentation client.

Composes the transport and the persistent document store. Reads go
through the store first; a miss fetches from the API and persists the
validated document before returning it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from appledocs.errors import AppleDocsError, ErrorCode
from appledocs.file_cache import parse_technologies
from appledocs.formatters import extract_text, format_platforms
from appledocs.models.docs import FrameworkData, SymbolData
from appledocs.models.index import SearchResult
from appledocs.paths import remove_leading_slash

if TYPE_CHECKING:
    from appledocs.models.docs import Technology
    from appledocs.protocols import DocumentStoreProtocol, TransportProtocol

log = structlog.get_logger()

M = TypeVar("M", bound=BaseModel)

TECHNOLOGIES_PATH = "documentation/technologies"


def _parse_document(model: type[M], raw: dict[str, Any], path: str) -> M:
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        raise AppleDocsError(
            code=ErrorCode.INVALID_RESPONSE,
            message=f"Unexpected document shape for {path}: {exc.error_count()} validation errors",
            suggestion="The path may point at an article or tutorial rather than a symbol.",
            recoverable=False,
        ) from exc


class AppleDocsClient:
    def __init__(self, transport: TransportProtocol, store: DocumentStoreProtocol) -> None:
        self._transport = transport
        self._store = store

    @property
    def store(self) -> DocumentStoreProtocol:
        return self._store

    # ------------------------------------------------------------------
    # Frameworks
    # ------------------------------------------------------------------

    async def get_framework(self, name: str) -> FrameworkData:
        cached = await self._store.load_framework(name)
        if cached is not None:
            log.debug("framework_cache_hit", framework=name)
            return cached
        return await self.refresh_framework(name)

    async def refresh_framework(self, name: str) -> FrameworkData:
        """Fetch a framework document, bypassing the store."""
        path = f"documentation/{name}"
        raw = await self._transport.get_documentation(path)
        data = _parse_document(FrameworkData, raw, path)
        await self._store.save_framework(name, data)
        return data

    # ------------------------------------------------------------------
    # Symbols
    # ------------------------------------------------------------------

    async def get_symbol(self, path: str) -> SymbolData:
        normalized = remove_leading_slash(path)
        cached = await self._store.load_symbol(normalized)
        if cached is not None:
            log.debug("symbol_cache_hit", path=normalized)
            return cached

        raw = await self._transport.get_documentation(normalized)
        data = _parse_document(SymbolData, raw, normalized)
        await self._store.save_symbol(normalized, data)
        return data

    # ------------------------------------------------------------------
    # Technologies
    # ------------------------------------------------------------------

    async def get_technologies(self) -> dict[str, Technology]:
        cached = await self._store.load_technologies()
        if cached is not None:
            return cached
        return await self.refresh_technologies()

    async def refresh_technologies(self) -> dict[str, Technology]:
        """Fetch the technology list, bypassing the store.

        The API wraps the map in ``{"references": {...}}``; a bare map is
        accepted too. Malformed entries are dropped.
        """
        raw = await self._transport.get_documentation(TECHNOLOGIES_PATH)
        references = raw.get("references")
        technologies = parse_technologies(references if isinstance(references, dict) else raw)
        if technologies:
            await self._store.save_technologies(technologies)
        log.info("technologies_refreshed", count=len(technologies))
        return technologies

    # ------------------------------------------------------------------
    # Linear search
    # ------------------------------------------------------------------

    async def search_framework(
        self,
        name: str,
        query: str,
        *,
        max_results: int = 20,
        platform: str | None = None,
        symbol_type: str | None = None,
    ) -> list[SearchResult]:
        """Scan one framework's references for a case-insensitive substring.

        Matches title or abstract text, then applies the optional kind and
        platform filters. Results keep reference order; there is no ranking.
        """
        try:
            framework = await self.get_framework(name)
        except AppleDocsError as exc:
            raise AppleDocsError(
                code=exc.code,
                message=f"Framework search failed for {name}: {exc.message}",
                suggestion=exc.suggestion,
                recoverable=exc.recoverable,
            ) from exc

        needle = query.lower()
        type_filter = symbol_type.lower() if symbol_type else None
        platform_filter = platform.lower() if platform else None

        results: list[SearchResult] = []
        for ref in framework.references.values():
            if len(results) >= max_results:
                break

            title = ref.title or ""
            description = extract_text(ref.abstract)
            if needle not in title.lower() and needle not in description.lower():
                continue

            if type_filter and (ref.kind or "").lower() != type_filter:
                continue

            if platform_filter and not any(
                platform_filter in info.name.lower() for info in ref.platforms or []
            ):
                continue

            results.append(
                SearchResult(
                    title=ref.title or "Symbol",
                    framework=name,
                    path=ref.url or "",
                    description=description,
                    symbol_kind=ref.kind,
                    platforms=format_platforms(ref.platforms or framework.metadata.platforms),
                )
            )
        return results
