"""Tool handler for search_symbols.

Searches the active technology's local symbol index and degrades to the
framework's own reference table when the index is sparse or unavailable:

  1. local index built from the on-disk cache (created once per technology)
  2. framework references ranked by the shared relevance scorer, expanding
     the framework's top-level topics once if the first pass finds nothing
  3. the documentation client's linear substring scan

No MCP or FastMCP imports; server.py handles the MCP wiring.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Literal

import structlog

from appledocs.errors import AppleDocsError, ErrorCode
from appledocs.formatters import extract_text, platform_names
from appledocs.framework_loader import (
    expand_symbol_references,
    get_framework_index_entries,
    load_active_framework_data,
    require_framework_name,
)
from appledocs.local_index import create_local_symbol_index
from appledocs.markdown import bold, bullet_list, code_block, header, inline_code, trim_with_ellipsis
from appledocs.models.index import LocalSymbolIndexEntry
from appledocs.models.tools import SearchSymbolsInput, SearchSymbolsOutput, SymbolMatch
from appledocs.paths import extract_technology_path, path_in_technology
from appledocs.scoring import collect_matches
from appledocs.tools.no_technology import require_technology

if TYPE_CHECKING:
    from appledocs.local_index import LocalSymbolIndex
    from appledocs.models.docs import Technology
    from appledocs.models.index import RankedReference, SearchResult
    from appledocs.state import AppState

IndexStatus = Literal["comprehensive", "limited", "unavailable"]

ABSTRACT_PREVIEW_LENGTH = 150

KIND_DISPLAY_NAMES = {
    "class": "Class",
    "struct": "Structure",
    "protocol": "Protocol",
    "enum": "Enumeration",
    "func": "Function",
    "method": "Method",
    "property": "Property",
    "var": "Variable",
    "typealias": "Type Alias",
    "init": "Initializer",
    "deinit": "Deinitializer",
    "subscript": "Subscript",
    "operator": "Operator",
    "macro": "Macro",
    "symbol": "Symbol",
}

_SYMBOL_NAME = re.compile(r"^[A-Z][a-zA-Z\d]*(\.[A-Z][a-zA-Z\d]*)?$")


async def handle(
    query: str,
    max_results: int | None,
    platform: str | None,
    symbol_type: str | None,
    state: AppState,
) -> dict:
    """Handle a search_symbols tool call."""
    log = structlog.get_logger().bind(tool="search_symbols", query=query)
    log.info("handler_called")

    try:
        validated = SearchSymbolsInput(
            query=query,
            max_results=(
                max_results if max_results is not None else state.settings.search.default_max_results
            ),
            platform=platform,
            symbol_type=symbol_type,
        )
    except ValueError as exc:
        raise AppleDocsError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Provide a non-empty query (max 500 chars) and max_results between 1 and 100.",
            recoverable=False,
        ) from exc

    technology = await require_technology(state)
    index = await _get_or_create_index(state, technology)

    build_failed = False
    if index.symbol_count() == 0:
        try:
            await index.build_index_from_cache()
        except Exception:
            log.warning("index_build_unavailable", exc_info=True)
            build_failed = True

    limit = validated.max_results
    results = index.search(validated.query, limit * 2)
    fallback_used = False

    threshold = state.settings.indexing.min_symbol_count_threshold
    if not results and index.symbol_count() < threshold:
        log.debug("search_fallback", indexed=index.symbol_count(), threshold=threshold)
        results = await _fallback_search(state, technology, validated, limit * 2)
        fallback_used = True

    results = _apply_filters(results, validated.platform, validated.symbol_type)[:limit]

    if build_failed:
        status: IndexStatus = "unavailable"
    elif index.symbol_count() < threshold:
        status = "limited"
    else:
        status = "comprehensive"

    log.info(
        "search_complete",
        matches=len(results),
        indexed=index.symbol_count(),
        status=status,
        fallback=fallback_used,
    )

    matches = [
        SymbolMatch(
            title=entry.title,
            path=entry.path,
            kind=entry.kind,
            abstract=entry.abstract,
            platforms=entry.platforms,
            score=entry.score,
        )
        for entry in results
    ]
    output = SearchSymbolsOutput(
        technology=technology.title,
        query=validated.query,
        total_indexed=index.symbol_count(),
        index_status=status,
        fallback_used=fallback_used,
        matches=matches,
        content=_render(validated.query, technology, matches, index.symbol_count(), status),
    )
    return output.model_dump(mode="json")


async def _get_or_create_index(state: AppState, technology: Technology) -> LocalSymbolIndex:
    session = state.session
    index = session.local_symbol_index
    if index is not None:
        return index

    async with state.index_mutex.acquire(technology.identifier):
        # Another call may have installed it while this one waited.
        index = session.local_symbol_index
        if index is None:
            index = create_local_symbol_index(state.settings, technology)
            session.set_local_symbol_index(index)
    return index


# ---------------------------------------------------------------------------
# Fallback
# ---------------------------------------------------------------------------


async def _fallback_search(
    state: AppState,
    technology: Technology,
    validated: SearchSymbolsInput,
    limit: int,
) -> list[LocalSymbolIndexEntry]:
    entries = await get_framework_index_entries(state)
    ranked = collect_matches(
        entries,
        validated.query,
        limit,
        symbol_type=validated.symbol_type,
        platform=validated.platform,
    )

    if not ranked:
        framework = await load_active_framework_data(state)
        identifiers = [
            identifier for section in framework.topic_sections for identifier in section.identifiers
        ]
        if identifiers and not state.session.expanded_identifiers.issuperset(identifiers):
            index = await expand_symbol_references(state, identifiers)
            ranked = collect_matches(
                index.values(),
                validated.query,
                limit,
                symbol_type=validated.symbol_type,
                platform=validated.platform,
            )

    if ranked:
        return [_from_ranked(match) for match in ranked]

    name = require_framework_name(technology)
    found = await state.client.search_framework(
        name,
        validated.query,
        max_results=limit,
        platform=validated.platform,
        symbol_type=validated.symbol_type,
    )
    return [_from_search_result(result) for result in found]


def _from_ranked(match: RankedReference) -> LocalSymbolIndexEntry:
    ref = match.ref
    return LocalSymbolIndexEntry(
        id=match.id,
        title=ref.title or "Symbol",
        path=ref.url or "",
        kind=ref.kind or "symbol",
        abstract=extract_text(ref.abstract),
        platforms=platform_names(ref.platforms),
        score=match.score,
    )


def _from_search_result(result: SearchResult) -> LocalSymbolIndexEntry:
    platforms = [] if result.platforms == "All platforms" else result.platforms.split(", ")
    return LocalSymbolIndexEntry(
        id=result.path or result.title,
        title=result.title,
        path=result.path,
        kind=result.symbol_kind or "symbol",
        abstract=result.description,
        platforms=platforms,
    )


def _apply_filters(
    results: list[LocalSymbolIndexEntry],
    platform: str | None,
    symbol_type: str | None,
) -> list[LocalSymbolIndexEntry]:
    if platform:
        wanted = platform.lower()
        results = [
            entry for entry in results if any(wanted in name.lower() for name in entry.platforms)
        ]
    if symbol_type:
        wanted = symbol_type.lower()
        results = [entry for entry in results if wanted in entry.kind.lower()]
    return results


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def format_kind(kind: str) -> str:
    return KIND_DISPLAY_NAMES.get(kind.lower(), kind)


def parent_context(path: str, title: str) -> str | None:
    """Segment before ``title`` in ``path``, if ``title`` is a segment past the second."""
    parts = path.split("/")
    if title in parts:
        position = parts.index(title)
        if position > 1:
            return parts[position - 1]
    return None


def looks_like_symbol_name(query: str) -> bool:
    """``View`` or ``NSView.Layer``: better served by a direct lookup."""
    return _SYMBOL_NAME.match(query) is not None


def _status_lines(status: IndexStatus) -> list[str]:
    if status == "unavailable":
        return [
            "⚠️ **Index Unavailable:** Using fallback search (framework references only).",
            "Results may be limited. Try searching again later.",
        ]
    if status == "limited":
        return [
            "⚠️ **Limited Results:** Only basic symbols are indexed.",
            "Symbols opened with `get_documentation` are cached and join the index "
            "the next time it is built, after switching technologies.",
        ]
    return ["✅ **Comprehensive Index:** Full symbol database is available."]


def _render(
    query: str,
    technology: Technology,
    matches: list[SymbolMatch],
    indexed: int,
    status: IndexStatus,
) -> str:
    lines = [
        header(1, f'🔍 Search Results for "{query}"'),
        "",
        bold("Technology", technology.title),
        bold("Matches", str(len(matches))),
        bold("Total Symbols Indexed", str(indexed)),
        "",
        *_status_lines(status),
        "",
        header(2, "Symbols"),
        "",
    ]

    technology_path = extract_technology_path(technology.identifier)
    if technology_path and any(
        not path_in_technology(match.path, technology_path) for match in matches
    ):
        lines.extend(
            [
                "⚠️ **Note:** Some results may not be from the selected technology.",
                "For specific symbol names, try using `get_documentation` instead.",
                "",
            ]
        )

    for match in matches:
        parent = parent_context(match.path, match.title)
        title = f"{parent}.{match.title}" if parent else match.title
        platforms = ", ".join(match.platforms) if match.platforms else "All platforms"
        lines.extend(
            [
                header(3, title),
                f"{inline_code(format_kind(match.kind))} • {platforms}",
                "",
                trim_with_ellipsis(match.abstract, ABSTRACT_PREVIEW_LENGTH) if match.abstract else "",
                "",
                f"📄 {inline_code(match.path)}",
                "",
            ]
        )

    if not matches:
        lines.extend(
            [
                "No symbols matched those terms within this technology.",
                "",
                "**Search Tips:**",
                bullet_list(
                    [
                        "Try wildcards: `Grid*` or `*Item`",
                        'Use broader keywords: "grid" instead of "griditem"',
                        "Check spelling and try synonyms",
                    ]
                ),
                "",
            ]
        )
        if looks_like_symbol_name(query):
            lines.extend(
                [
                    "**💡 Suggestion:** This looks like a specific symbol name.",
                    "Try using `get_documentation` instead for direct access:",
                    "",
                    code_block(f'get_documentation {{ "path": "{query}" }}', language=""),
                    "",
                ]
            )

    return "\n".join(lines)
