"""On-disk JSON cache for documentation payloads.

Layout (one file per document):
  technologies.json              bare map identifier → Technology
  <SanitizedFramework>.json      FrameworkData
  <last-segment>_<hash16>.json   SymbolData, hash = sha256(symbol path)

Every load re-validates the JSON against its model. Missing, unparseable
or schema-invalid files are all a cache miss (``None``), which forces a
refetch. Write failures are logged and ignored: a document that could not
be persisted is still returned to the caller.

This is the durability boundary. The memory tier in the transport client
is only an optimisation over it.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import re
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from appledocs.models.docs import FrameworkData, SymbolData, Technology, dump_document

if TYPE_CHECKING:
    from collections.abc import Mapping

log = structlog.get_logger()

M = TypeVar("M", bound=BaseModel)

TECHNOLOGIES_FILENAME = "technologies.json"
SYMBOL_FILENAME_PATTERN = re.compile(r"^.+_[0-9a-f]{16}\.json$")

_UNSAFE_CHARS = re.compile(r"[^\w-]", re.ASCII)
_MISSING = object()


def sanitize_framework_name(name: str) -> str:
    return _UNSAFE_CHARS.sub("_", name)


def symbol_filename(path: str) -> str:
    """Collision-safe filename for a symbol path, with a readable prefix."""
    digest = hashlib.sha256(path.encode("utf-8")).hexdigest()[:16]
    segments = [segment for segment in path.split("/") if segment]
    last_segment = segments[-1] if segments else "symbol"
    prefix = _UNSAFE_CHARS.sub("_", last_segment)[:32]
    return f"{prefix}_{digest}.json"


class FileCache:
    """Persistent document store implementing DocumentStoreProtocol."""

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory).expanduser()

    @property
    def technologies_path(self) -> Path:
        return self.directory / TECHNOLOGIES_FILENAME

    def framework_path(self, name: str) -> Path:
        return self.directory / f"{sanitize_framework_name(name)}.json"

    def symbol_path(self, path: str) -> Path:
        return self.directory / symbol_filename(path)

    # ------------------------------------------------------------------
    # Frameworks
    # ------------------------------------------------------------------

    async def load_framework(self, name: str) -> FrameworkData | None:
        """Read a framework document. Returns ``None`` on miss or invalid data."""
        return await self._load_model(self.framework_path(name), FrameworkData, key=name)

    async def save_framework(self, name: str, data: FrameworkData) -> None:
        """Write a framework document. Non-fatal on failure."""
        await self._write_json(self.framework_path(name), dump_document(data))

    # ------------------------------------------------------------------
    # Symbols
    # ------------------------------------------------------------------

    async def load_symbol(self, path: str) -> SymbolData | None:
        """Read a symbol document. Returns ``None`` on miss or invalid data."""
        return await self._load_model(self.symbol_path(path), SymbolData, key=path)

    async def save_symbol(self, path: str, data: SymbolData) -> None:
        """Write a symbol document. Non-fatal on failure."""
        await self._write_json(self.symbol_path(path), dump_document(data))

    # ------------------------------------------------------------------
    # Technologies
    # ------------------------------------------------------------------

    async def load_technologies(self) -> dict[str, Technology] | None:
        """Read the technology map.

        Accepts both the ``{"references": {...}}`` wrapper and the bare map.
        Entries that are not valid technologies are dropped; an empty
        result is a miss.
        """
        raw = await self._read_json(self.technologies_path, key="technologies")
        if raw is None:
            return None

        references: Any = None
        if isinstance(raw, dict):
            wrapped = raw.get("references")
            if isinstance(wrapped, dict) and wrapped:
                references = wrapped
            elif _looks_like_technology_map(raw):
                references = raw

        if references is None:
            log.warning("file_cache_invalid", key="technologies", reason="unrecognised shape")
            return None

        technologies = parse_technologies(references)
        if not technologies:
            log.warning("file_cache_invalid", key="technologies", reason="no valid entries")
            return None
        return technologies

    async def save_technologies(self, technologies: Mapping[str, Technology]) -> None:
        """Write the technology map in bare-map form. Non-fatal on failure."""
        payload = {key: dump_document(tech) for key, tech in technologies.items()}
        await self._write_json(self.technologies_path, payload)

    # ------------------------------------------------------------------
    # File I/O
    # ------------------------------------------------------------------

    async def _load_model(self, path: Path, model: type[M], *, key: str) -> M | None:
        raw = await self._read_json(path, key=key)
        if raw is None:
            return None
        try:
            return model.model_validate(raw)
        except ValidationError as exc:
            log.warning(
                "file_cache_invalid",
                key=key,
                file=str(path),
                reason="schema",
                error_count=exc.error_count(),
            )
            return None

    async def _read_json(self, path: Path, *, key: str) -> Any:
        try:
            text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError:
            log.warning("file_cache_read_error", key=key, file=str(path), exc_info=True)
            return None

        try:
            return json.loads(text)
        except json.JSONDecodeError:
            log.warning("file_cache_invalid", key=key, file=str(path), reason="corrupted json")
            return None

    async def _write_json(self, path: Path, payload: Any) -> None:
        try:
            await asyncio.to_thread(_write_pretty_json, path, payload)
        except (OSError, TypeError, ValueError):
            log.warning("file_cache_write_error", file=str(path), exc_info=True)


def _write_pretty_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def _looks_like_technology_map(raw: dict[str, Any]) -> bool:
    first = next(iter(raw.values()), _MISSING)
    return isinstance(first, dict) and ("identifier" in first or "title" in first)


def parse_technologies(references: Mapping[str, Any]) -> dict[str, Technology]:
    """Keep only entries carrying the minimum technology shape."""
    technologies: dict[str, Technology] = {}
    for key, value in references.items():
        if not isinstance(value, dict):
            continue
        if not all(isinstance(value.get(field), str) for field in ("identifier", "title", "url")):
            continue
        try:
            technologies[key] = Technology.model_validate(value)
        except ValidationError:
            log.debug("technology_entry_skipped", key=key)
    return technologies
