"""Tool handler for cache_status.

Reports what the persistent document cache holds. No MCP or FastMCP
imports; server.py handles the MCP wiring.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

from appledocs.file_cache import SYMBOL_FILENAME_PATTERN, TECHNOLOGIES_FILENAME
from appledocs.markdown import bold, bullet_list, format_bytes, header
from appledocs.models.tools import CacheStatusOutput

if TYPE_CHECKING:
    from pathlib import Path

    from appledocs.state import AppState

MAX_LISTED_FRAMEWORKS = 15


@dataclass
class CacheStats:
    total_files: int = 0
    total_size_bytes: int = 0
    frameworks: list[str] = field(default_factory=list)
    symbols: int = 0


def collect_cache_stats(directory: Path) -> CacheStats:
    """Count cached documents. ``technologies.json`` is in neither group."""
    stats = CacheStats()
    for path in sorted(directory.glob("*.json")):
        if not path.is_file():
            continue
        stats.total_files += 1
        stats.total_size_bytes += path.stat().st_size
        if path.name == TECHNOLOGIES_FILENAME:
            continue
        if SYMBOL_FILENAME_PATTERN.match(path.name):
            stats.symbols += 1
        else:
            stats.frameworks.append(path.stem)
    return stats


async def handle(state: AppState) -> dict:
    """Handle a cache_status tool call."""
    log = structlog.get_logger().bind(tool="cache_status")
    log.info("handler_called")

    directory = state.store.directory
    location = str(directory)

    exists = await asyncio.to_thread(directory.is_dir)
    if not exists:
        content = "\n".join(
            [
                header(1, "📦 Cache Status"),
                "",
                bold("Location", location),
                "",
                "⚠️ **Cache directory does not exist yet.**",
                "The cache will be created when you first access a technology.",
            ]
        )
        return CacheStatusOutput(location=location, exists=False, content=content).model_dump(
            mode="json"
        )

    stats = await asyncio.to_thread(collect_cache_stats, directory)
    log.info("cache_status_complete", files=stats.total_files, size=stats.total_size_bytes)

    lines = [
        header(1, "📦 Cache Status"),
        "",
        bold("Location", location),
        "",
        header(2, "Statistics"),
        bold("Total Files", str(stats.total_files)),
        bold("Cache Size", format_bytes(stats.total_size_bytes)),
        bold("Frameworks Cached", str(len(stats.frameworks))),
        bold("Symbols Cached", str(stats.symbols)),
        "",
    ]
    if stats.frameworks:
        lines.extend(
            [
                header(2, "Cached Frameworks"),
                bullet_list(stats.frameworks[:MAX_LISTED_FRAMEWORKS]),
            ]
        )
        if len(stats.frameworks) > MAX_LISTED_FRAMEWORKS:
            lines.append(f"*... and {len(stats.frameworks) - MAX_LISTED_FRAMEWORKS} more*")
        lines.append("")

    lines.extend(
        [
            header(2, "Actions"),
            bullet_list(
                [
                    "Cached documents are reused as-is; delete a file here to fetch it again",
                    "The cache is updated whenever new documentation is fetched",
                ]
            ),
        ]
    )

    output = CacheStatusOutput(
        location=location,
        exists=True,
        total_files=stats.total_files,
        total_size_bytes=stats.total_size_bytes,
        frameworks_cached=len(stats.frameworks),
        symbols_cached=stats.symbols,
        frameworks=stats.frameworks[:MAX_LISTED_FRAMEWORKS],
        content="\n".join(lines),
    )
    return output.model_dump(mode="json")
