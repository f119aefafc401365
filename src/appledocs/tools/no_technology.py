"""Guidance error for tool calls made before a technology is chosen.

Shared by every handler that needs an active technology.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from appledocs.errors import AppleDocsError, ErrorCode

if TYPE_CHECKING:
    from appledocs.models.docs import Technology
    from appledocs.state import AppState

log = structlog.get_logger()

MAX_LISTED_TECHNOLOGIES = 8
MAX_RECENT_DISCOVERIES = 3


async def build_no_technology_error(state: AppState) -> AppleDocsError:
    """NO_TECHNOLOGY_SELECTED with next steps and a few selectable names.

    Listing technologies is best effort; when the list cannot be loaded the
    guidance points at ``discover_technologies`` instead.
    """
    available: list[str] = []
    try:
        technologies = await state.client.get_technologies()
        available = [
            tech.title for tech in technologies.values() if tech.title and tech.is_framework
        ][:MAX_LISTED_TECHNOLOGIES]
    except AppleDocsError as exc:
        log.warning("no_technology_listing_failed", code=exc.code, message=exc.message)

    lines = [
        "Symbol searches and documentation lookups need an active technology.",
        "1. `discover_technologies` (optionally with a query such as \"swift\" or \"ui\")",
        '2. `choose_technology` with a name, e.g. { "name": "SwiftUI" }',
        '3. `search_symbols { "query": "Button" }` or `get_documentation { "path": "View" }`',
    ]

    if available:
        lines.append("Technologies you can choose from: " + ", ".join(available))
        if len(available) == MAX_LISTED_TECHNOLOGIES:
            lines.append("...and many more; `discover_technologies` lists them all.")
    else:
        lines.append("Use `discover_technologies` to see all available Apple technologies.")

    discovery = state.session.last_discovery
    if discovery is not None and discovery.results:
        recent = [tech.title for tech in discovery.results[:MAX_RECENT_DISCOVERIES]]
        lines.append("Recently discovered: " + ", ".join(recent))

    return AppleDocsError(
        code=ErrorCode.NO_TECHNOLOGY_SELECTED,
        message="No technology selected.",
        suggestion="\n".join(lines),
        recoverable=True,
    )


async def require_technology(state: AppState) -> Technology:
    technology = state.session.active_technology
    if technology is None:
        raise await build_no_technology_error(state)
    return technology
