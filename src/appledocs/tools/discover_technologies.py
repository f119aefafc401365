"""Tool handler for discover_technologies.

Lists selectable framework collections, optionally filtered by keyword,
one page at a time. No MCP or FastMCP imports; server.py handles the MCP
wiring.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import structlog

from appledocs.errors import AppleDocsError, ErrorCode
from appledocs.formatters import extract_text
from appledocs.markdown import bold, bullet_list, header, inline_code, trim_with_ellipsis
from appledocs.models.tools import (
    DiscoverTechnologiesInput,
    DiscoverTechnologiesOutput,
    TechnologySummary,
)

if TYPE_CHECKING:
    from appledocs.models.docs import Technology
    from appledocs.state import AppState

DESCRIPTION_PREVIEW_LENGTH = 180


async def handle(
    query: str | None,
    page: int,
    page_size: int,
    state: AppState,
) -> dict:
    """Handle a discover_technologies tool call."""
    log = structlog.get_logger().bind(tool="discover_technologies", query=query)
    log.info("handler_called")

    try:
        validated = DiscoverTechnologiesInput(query=query, page=page, page_size=page_size)
    except ValueError as exc:
        raise AppleDocsError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Provide an optional keyword (max 200 chars) and integer page values.",
            recoverable=False,
        ) from exc

    max_page_size = state.settings.search.max_page_size
    size = min(max(validated.page_size, 1), max_page_size)

    technologies = await state.client.get_technologies()
    frameworks = [tech for tech in technologies.values() if tech.is_framework]
    matches = _filter(frameworks, validated.query)

    total_pages = max(1, math.ceil(len(matches) / size))
    current = min(max(validated.page, 1), total_pages)
    start = (current - 1) * size
    page_items = matches[start : start + size]

    state.session.set_last_discovery(validated.query, page_items)
    log.info("discover_complete", matches=len(matches), page=current, total_pages=total_pages)

    summaries = [
        TechnologySummary(
            title=tech.title,
            identifier=tech.identifier,
            url=tech.url,
            description=extract_text(tech.abstract),
        )
        for tech in page_items
    ]

    output = DiscoverTechnologiesOutput(
        query=validated.query,
        total_frameworks=len(frameworks),
        total_matches=len(matches),
        page=current,
        total_pages=total_pages,
        page_size=size,
        technologies=summaries,
        content=_render(validated.query, summaries, len(frameworks), len(matches), current, total_pages),
    )
    return output.model_dump(mode="json")


def _filter(frameworks: list[Technology], query: str | None) -> list[Technology]:
    if not query:
        return frameworks
    needle = query.lower()
    return [
        tech
        for tech in frameworks
        if needle in tech.title.lower() or needle in extract_text(tech.abstract).lower()
    ]


def _pagination(query: str | None, current: int, total_pages: int) -> list[str]:
    if total_pages <= 1:
        return []

    safe_query = query or ""
    items: list[str] = []
    if current > 1:
        items.append(
            "Previous: "
            + inline_code(f'discover_technologies {{ "query": "{safe_query}", "page": {current - 1} }}')
        )
    if current < total_pages:
        items.append(
            "Next: "
            + inline_code(f'discover_technologies {{ "query": "{safe_query}", "page": {current + 1} }}')
        )
    return ["*Pagination*", bullet_list(items)]


def _render(
    query: str | None,
    summaries: list[TechnologySummary],
    total_frameworks: int,
    total_matches: int,
    current: int,
    total_pages: int,
) -> str:
    title = "Discover Apple Technologies"
    if query:
        title += f' (filtered by "{query}")'

    lines = [
        header(1, title),
        "",
        bold("Total frameworks", str(total_frameworks)),
        bold("Matches", str(total_matches)),
        bold("Page", f"{current} / {total_pages}"),
        "",
        header(2, "Available Frameworks"),
    ]

    for summary in summaries:
        lines.append(header(3, summary.title))
        if summary.description:
            lines.append(f"   {trim_with_ellipsis(summary.description, DESCRIPTION_PREVIEW_LENGTH)}")
        lines.append(
            bullet_list(
                [
                    bold("Identifier", summary.identifier),
                    bold("Select", inline_code(f'choose_technology "{summary.title}"')),
                ],
                bullet="   •",
            )
        )
        lines.append("")

    lines.extend(_pagination(query, current, total_pages))
    lines.extend(
        [
            "",
            header(2, "Next Step"),
            "Call `choose_technology` with the framework title or identifier to make it active.",
        ]
    )
    return "\n".join(lines)
