"""Active framework loading and the framework reference index.

The framework index maps reference ids to FrameworkIndexEntry objects
(reference plus search tokens) and is what the shared relevance scorer
ranks. It starts from the framework document's references and can grow as
nested symbol documents are expanded.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from appledocs.errors import AppleDocsError, ErrorCode
from appledocs.formatters import extract_text, platform_names
from appledocs.models.index import FrameworkIndexEntry
from appledocs.paths import extract_framework_name, normalize_symbol_path
from appledocs.tokenizer import create_search_tokens

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from appledocs.models.docs import FrameworkData, ReferenceData, SymbolData, Technology
    from appledocs.state import AppState

log = structlog.get_logger()


def no_technology_error() -> AppleDocsError:
    return AppleDocsError(
        code=ErrorCode.NO_TECHNOLOGY_SELECTED,
        message="No technology selected.",
        suggestion="Use `discover_technologies` then `choose_technology` first.",
        recoverable=True,
    )


def require_active_technology(state: AppState) -> Technology:
    technology = state.session.active_technology
    if technology is None:
        raise no_technology_error()
    return technology


def require_framework_name(technology: Technology) -> str:
    name = extract_framework_name(technology.identifier)
    if not name:
        raise AppleDocsError(
            code=ErrorCode.INVALID_REQUEST,
            message=f"Invalid technology identifier: {technology.identifier}",
            suggestion="Choose the technology again with `choose_technology`.",
            recoverable=False,
        )
    return name


async def load_active_framework_data(state: AppState) -> FrameworkData:
    """Framework document for the active technology, fetched once per selection."""
    technology = require_active_technology(state)
    session = state.session

    cached = session.active_framework_data
    if cached is not None:
        return cached

    name = require_framework_name(technology)
    data = await state.client.get_framework(name)
    session.set_active_framework_data(data)
    session.clear_framework_index()
    return data


def _build_entry(ref_id: str, ref: ReferenceData) -> FrameworkIndexEntry:
    tokens = create_search_tokens(
        ref.title or "",
        extract_text(ref.abstract),
        ref.url or "",
        platform_names(ref.platforms),
    )
    return FrameworkIndexEntry(id=ref_id, ref=ref, tokens=tokens)


def _add_references(
    references: Mapping[str, ReferenceData],
    index: dict[str, FrameworkIndexEntry],
) -> int:
    added = 0
    for ref_id, ref in references.items():
        if ref_id not in index:
            index[ref_id] = _build_entry(ref_id, ref)
            added += 1
    return added


async def ensure_framework_index(state: AppState) -> dict[str, FrameworkIndexEntry]:
    framework = await load_active_framework_data(state)
    existing = state.session.framework_index
    if existing is not None:
        return existing

    index: dict[str, FrameworkIndexEntry] = {}
    _add_references(framework.references, index)
    state.session.set_framework_index(index)
    log.debug("framework_index_built", entries=len(index))
    return index


async def get_framework_index_entries(state: AppState) -> list[FrameworkIndexEntry]:
    index = await ensure_framework_index(state)
    return list(index.values())


async def expand_symbol_references(
    state: AppState,
    identifiers: Iterable[str],
) -> dict[str, FrameworkIndexEntry]:
    """Fetch symbol documents and merge their references into the index.

    Already-expanded identifiers are skipped. Fetches run concurrently,
    bounded by ``http.max_concurrent_requests``; a failed fetch is logged
    and skipped without affecting the others. Existing index entries are
    never overwritten.
    """
    technology = require_active_technology(state)
    require_framework_name(technology)
    index = await ensure_framework_index(state)
    session = state.session

    pending = [
        identifier
        for identifier in dict.fromkeys(identifiers)
        if identifier not in session.expanded_identifiers
    ]
    if not pending:
        return index

    semaphore = asyncio.Semaphore(state.settings.http.max_concurrent_requests)

    async def fetch(identifier: str) -> SymbolData | None:
        async with semaphore:
            try:
                return await state.client.get_symbol(normalize_symbol_path(identifier))
            except AppleDocsError as exc:
                log.warning(
                    "symbol_expansion_failed",
                    identifier=identifier,
                    code=exc.code,
                    message=exc.message,
                )
                return None

    documents = await asyncio.gather(*(fetch(identifier) for identifier in pending))

    added = 0
    for identifier, document in zip(pending, documents, strict=True):
        if document is None:
            continue
        added += _add_references(document.references, index)
        session.expanded_identifiers.add(identifier)

    log.info("symbol_references_expanded", requested=len(pending), added=added)
    return index
