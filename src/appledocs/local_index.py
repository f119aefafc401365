"""Local symbol index built from the on-disk document cache.

Every cached symbol or framework document contributes one entry for
itself plus one per embedded ``kind == "symbol"`` reference. The table is
rebuilt from scratch on each build pass; there are no incremental updates.

State machine::

    uninitialized ──build──▶ building ──▶ ready
                                  └─────▶ failed   (directory listing failed)

``ready`` with zero entries is valid (empty or missing cache directory).
A file that cannot be read, parsed or validated is counted and skipped;
it never aborts the build.
"""

from __future__ import annotations

import asyncio
import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from appledocs.file_cache import TECHNOLOGIES_FILENAME
from appledocs.formatters import extract_text, platform_names
from appledocs.models.docs import FrameworkData, SymbolData
from appledocs.models.index import IndexBuildSummary, IndexState, LocalSymbolIndexEntry
from appledocs.paths import extract_technology_path, path_in_technology
from appledocs.tokenizer import create_search_tokens, tokenize

if TYPE_CHECKING:
    from appledocs.config import Settings
    from appledocs.models.docs import Technology

log = structlog.get_logger()

WILDCARD_SCORE = 100
LITERAL_FALLBACK_SCORE = 50
TITLE_SCORE = 50
TOKEN_SCORE = 30
ABSTRACT_SCORE = 10
EMPTY_QUERY_SCORE = 1


@dataclass
class _Parsed:
    document: SymbolData | FrameworkData


@dataclass
class _Failed:
    reason: str


def _compile_wildcard(query: str) -> re.Pattern[str]:
    """``Grid*`` → ``^grid.*$``; ``Vie?`` → ``^vie.$``. Other characters are literal."""
    translated = "".join(
        ".*" if char == "*" else "." if char == "?" else re.escape(char) for char in query.lower()
    )
    return re.compile(f"^{translated}$")


class LocalSymbolIndex:
    def __init__(
        self,
        cache_dir: Path | str,
        technology_filter: str | None = None,
        *,
        batch_size: int = 10,
        file_read_timeout: float = 5.0,
    ) -> None:
        self._cache_dir = Path(cache_dir)
        self._technology_filter = technology_filter or None
        self._batch_size = batch_size
        self._file_read_timeout = file_read_timeout
        self._entries: dict[str, LocalSymbolIndexEntry] = {}
        self._state = IndexState.UNINITIALIZED
        self.last_build: IndexBuildSummary | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> IndexState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is IndexState.READY

    @property
    def technology_filter(self) -> str | None:
        return self._technology_filter

    def symbol_count(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        """Drop every entry and allow a fresh build."""
        self._entries.clear()
        self._state = IndexState.UNINITIALIZED
        self.last_build = None

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    async def build_index_from_cache(self) -> IndexBuildSummary | None:
        """Scan the cache directory and index every readable document.

        A no-op while building or once ready. Raises only when the
        directory itself cannot be listed; the index is then ``failed``.
        """
        if self._state in (IndexState.READY, IndexState.BUILDING):
            return self.last_build

        self._state = IndexState.BUILDING
        summary = IndexBuildSummary()
        log.info(
            "index_build_started",
            cache_dir=str(self._cache_dir),
            technology=self._technology_filter,
        )

        try:
            if not await asyncio.to_thread(self._cache_dir.is_dir):
                log.warning("index_cache_dir_missing", cache_dir=str(self._cache_dir))
                return self._finish(summary)

            files = await asyncio.to_thread(self._list_documents)
            summary.files_seen = len(files)

            for start in range(0, len(files), self._batch_size):
                batch = files[start : start + self._batch_size]
                outcomes = await asyncio.gather(*(self._load_file(path) for path in batch))
                for path, outcome in zip(batch, outcomes, strict=True):
                    if isinstance(outcome, _Parsed):
                        outcome = self._index_parsed(outcome, path, summary)
                    if isinstance(outcome, _Failed):
                        summary.errors += 1
                        log.warning("index_file_error", file=path.name, reason=outcome.reason)
                        continue
                    summary.processed += 1
        except Exception:
            self._state = IndexState.FAILED
            log.error("index_build_failed", cache_dir=str(self._cache_dir), exc_info=True)
            raise

        return self._finish(summary)

    def _finish(self, summary: IndexBuildSummary) -> IndexBuildSummary:
        self._state = IndexState.READY
        self.last_build = summary
        if summary.collisions:
            log.info("index_id_collisions", collisions=summary.collisions)
        log.info(
            "index_build_complete",
            symbols=len(self._entries),
            files=summary.files_seen,
            processed=summary.processed,
            errors=summary.errors,
        )
        return summary

    def _list_documents(self) -> list[Path]:
        return sorted(
            path
            for path in self._cache_dir.iterdir()
            if path.suffix == ".json" and path.name != TECHNOLOGIES_FILENAME and path.is_file()
        )

    async def _load_file(self, path: Path) -> _Parsed | _Failed:
        try:
            text = await asyncio.wait_for(
                asyncio.to_thread(path.read_text, encoding="utf-8"),
                timeout=self._file_read_timeout,
            )
        except TimeoutError:
            return _Failed(f"read timed out after {self._file_read_timeout}s")
        except (OSError, UnicodeDecodeError) as exc:
            return _Failed(f"read failed: {exc}")

        try:
            raw = json.loads(text)
        except json.JSONDecodeError:
            return _Failed("corrupted json")

        for model in (SymbolData, FrameworkData):
            try:
                return _Parsed(model.model_validate(raw))
            except ValidationError:
                continue
        return _Failed("matches neither symbol nor framework schema")

    def _index_parsed(
        self, parsed: _Parsed, file_path: Path, summary: IndexBuildSummary
    ) -> _Parsed | _Failed:
        try:
            self._index_document(parsed.document, file_path, summary)
        except Exception as exc:
            return _Failed(f"indexing failed: {exc!r}")
        return parsed

    def _index_document(
        self,
        document: SymbolData | FrameworkData,
        file_path: Path,
        summary: IndexBuildSummary,
    ) -> None:
        metadata = document.metadata
        title = metadata.title or "Unknown"
        path = metadata.url if isinstance(metadata.url, str) else ""
        kind = getattr(metadata, "symbol_kind", None) or "framework"

        if path and not self._in_technology(path):
            # A document outside the technology contributes nothing.
            return

        if path or not self._technology_filter:
            self._store(
                entry_id=path or title,
                title=title,
                path=path,
                kind=kind,
                abstract=extract_text(document.abstract),
                platforms=platform_names(metadata.platforms),
                file_path=file_path,
                summary=summary,
            )

        for ref_id, ref in document.references.items():
            if ref.kind != "symbol" or not ref.title:
                continue
            ref_path = ref.url or ""
            if self._technology_filter and not (ref_path and self._in_technology(ref_path)):
                continue
            self._store(
                entry_id=ref_id,
                title=ref.title,
                path=ref_path,
                kind=ref.kind,
                abstract=extract_text(ref.abstract),
                platforms=platform_names(ref.platforms),
                file_path=file_path,
                summary=summary,
            )

    def _in_technology(self, path: str) -> bool:
        if not self._technology_filter:
            return True
        return path_in_technology(path, self._technology_filter)

    def _store(
        self,
        *,
        entry_id: str,
        title: str,
        path: str,
        kind: str,
        abstract: str,
        platforms: list[str],
        file_path: Path,
        summary: IndexBuildSummary,
    ) -> None:
        if entry_id in self._entries:
            summary.collisions += 1
        self._entries[entry_id] = LocalSymbolIndexEntry(
            id=entry_id,
            title=title,
            path=path,
            kind=kind,
            abstract=abstract,
            platforms=platforms,
            tokens=create_search_tokens(title, abstract, path, platforms),
            file_path=str(file_path),
        )

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search(self, query: str, max_results: int = 20) -> list[LocalSymbolIndexEntry]:
        """Return the best entries for ``query``, highest score first.

        ``*`` and ``?`` make the query an anchored wildcard pattern matched
        against title, path and tokens. Otherwise each query token adds
        title-substring, exact-token and abstract-substring weights. An
        empty query lists entries in index order. Ties keep index order.
        """
        if self._state is not IndexState.READY:
            log.debug("index_search_not_ready", state=self._state, query=query)

        query = query.strip()
        if not query:
            scored = [(EMPTY_QUERY_SCORE, entry) for entry in self._entries.values()]
        elif "*" in query or "?" in query:
            scored = self._wildcard_scores(query)
        else:
            scored = self._token_scores(query)

        scored = [(score, entry) for score, entry in scored if score > 0]
        scored.sort(key=lambda item: -item[0])
        return [entry.model_copy(update={"score": score}) for score, entry in scored[:max_results]]

    def _wildcard_scores(self, query: str) -> list[tuple[int, LocalSymbolIndexEntry]]:
        try:
            pattern = _compile_wildcard(query)
        except re.error:
            log.warning("index_wildcard_invalid", query=query)
            needle = query.lower()
            return [
                (LITERAL_FALLBACK_SCORE, entry)
                for entry in self._entries.values()
                if needle in entry.title.lower() or needle in entry.path.lower()
            ]

        return [
            (WILDCARD_SCORE, entry)
            for entry in self._entries.values()
            if pattern.match(entry.title.lower())
            or pattern.match(entry.path.lower())
            or any(pattern.match(token) for token in entry.tokens)
        ]

    def _token_scores(self, query: str) -> list[tuple[int, LocalSymbolIndexEntry]]:
        query_tokens = tokenize(query)
        scored: list[tuple[int, LocalSymbolIndexEntry]] = []
        for entry in self._entries.values():
            title = entry.title.lower()
            abstract = entry.abstract.lower()
            token_set = set(entry.tokens)
            score = 0
            for token in query_tokens:
                lowered = token.lower()
                if lowered in title:
                    score += TITLE_SCORE
                if token in token_set:
                    score += TOKEN_SCORE
                if lowered in abstract:
                    score += ABSTRACT_SCORE
            scored.append((score, entry))
        return scored


def create_local_symbol_index(settings: Settings, technology: Technology) -> LocalSymbolIndex:
    """Index over the configured cache directory, scoped to one technology."""
    return LocalSymbolIndex(
        settings.cache_dir,
        extract_technology_path(technology.identifier),
        batch_size=settings.indexing.batch_size,
        file_read_timeout=settings.indexing.file_read_timeout_seconds,
    )
