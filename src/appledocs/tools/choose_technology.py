"""Tool handler for choose_technology.

Matches a name or identifier against the technology list, makes the match
the session's active technology and adds a best-effort framework overview.
No MCP or FastMCP imports; server.py handles the MCP wiring.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from rapidfuzz import fuzz, process

from appledocs.errors import AppleDocsError, ErrorCode
from appledocs.formatters import extract_text
from appledocs.markdown import bold, bullet_list, header
from appledocs.models.tools import (
    ChooseTechnologyInput,
    ChooseTechnologyOutput,
    TechnologySummary,
)
from appledocs.paths import extract_framework_name

if TYPE_CHECKING:
    from appledocs.models.docs import FrameworkData, Technology
    from appledocs.state import AppState

# Title match quality, lower is better: exact, prefix, contains, none.
NO_MATCH = 3

FUZZY_SCORE_CUTOFF = 70


def title_match_score(title: str, term: str) -> int:
    lowered_title = title.lower()
    lowered_term = term.lower()
    if lowered_title == lowered_term:
        return 0
    if lowered_title.startswith(lowered_term) or lowered_term.startswith(lowered_title):
        return 1
    if lowered_term in lowered_title or lowered_title in lowered_term:
        return 2
    return NO_MATCH


def find_technology(
    candidates: list[Technology],
    name: str | None,
    identifier: str | None,
) -> Technology | None:
    """Identifier first, then exact title, then the closest prefix/contains title."""
    if identifier:
        wanted = identifier.lower()
        for tech in candidates:
            if tech.identifier.lower() == wanted:
                return tech

    if not name:
        return None

    wanted = name.lower()
    for tech in candidates:
        if tech.title.lower() == wanted:
            return tech

    best: Technology | None = None
    best_score = NO_MATCH
    for tech in candidates:
        score = title_match_score(tech.title, name)
        if score < best_score:
            best, best_score = tech, score
    return best


def suggest_technologies(candidates: list[Technology], term: str, limit: int) -> list[str]:
    """Titles containing ``term``, topped up with the closest fuzzy matches."""
    needle = term.lower()
    suggestions = [tech.title for tech in candidates if needle and needle in tech.title.lower()]

    if len(suggestions) < limit and needle:
        titles = [tech.title for tech in candidates]
        for title, _score, _index in process.extract(
            term,
            titles,
            scorer=fuzz.ratio,
            processor=str.lower,
            limit=limit,
            score_cutoff=FUZZY_SCORE_CUTOFF,
        ):
            if title not in suggestions:
                suggestions.append(title)

    return suggestions[:limit]


async def handle(name: str | None, identifier: str | None, state: AppState) -> dict:
    """Handle a choose_technology tool call."""
    log = structlog.get_logger().bind(tool="choose_technology", name=name, identifier=identifier)
    log.info("handler_called")

    try:
        validated = ChooseTechnologyInput(name=name, identifier=identifier)
    except ValueError as exc:
        raise AppleDocsError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Provide a technology name (e.g. SwiftUI) or its full identifier.",
            recoverable=False,
        ) from exc

    technologies = await state.client.get_technologies()
    candidates = list(technologies.values())

    chosen = find_technology(candidates, validated.name, validated.identifier)
    if chosen is None:
        term = validated.name or validated.identifier or ""
        suggestions = suggest_technologies(candidates, term, state.settings.ui.max_suggestions)
        log.info("technology_not_found", suggestions=len(suggestions))
        if suggestions:
            hint = "Did you mean: " + ", ".join(suggestions) + "?"
        else:
            hint = 'Use `discover_technologies { "query": "keyword" }` to find candidates.'
        raise AppleDocsError(
            code=ErrorCode.TECHNOLOGY_NOT_FOUND,
            message=f'Could not resolve "{term}".',
            suggestion=hint,
            recoverable=True,
        )

    if not chosen.is_framework:
        raise AppleDocsError(
            code=ErrorCode.INVALID_REQUEST,
            message=(
                f"{chosen.title} is not a framework collection. "
                "Please choose a framework technology instead."
            ),
            suggestion="Use `discover_technologies` to list selectable frameworks.",
            recoverable=False,
        )

    state.session.set_active_technology(chosen)
    state.session.clear_active_framework_data()
    log.info("technology_selected", technology=chosen.identifier)

    summary = TechnologySummary(
        title=chosen.title,
        identifier=chosen.identifier,
        url=chosen.url,
        description=extract_text(chosen.abstract),
    )

    framework = await _load_overview(chosen, state, log)
    if framework is None:
        output = ChooseTechnologyOutput(technology=summary, content=_render(summary, None))
        return output.model_dump(mode="json")

    platforms = ", ".join(
        f"{info.name} {info.introduced_at}+" for info in framework.metadata.platforms or []
    ) or "All platforms"
    symbol_count = sum(1 for ref in framework.references.values() if ref.kind == "symbol")
    categories = [
        section.title
        for section in framework.topic_sections[: state.settings.ui.max_categories]
        if section.title
    ]
    overview = _render_overview(extract_text(framework.abstract), platforms, symbol_count, categories)

    output = ChooseTechnologyOutput(
        technology=summary,
        platforms=platforms,
        symbol_count=symbol_count,
        categories=categories,
        content=_render(summary, overview),
    )
    return output.model_dump(mode="json")


async def _load_overview(
    technology: Technology,
    state: AppState,
    log: structlog.typing.FilteringBoundLogger,
) -> FrameworkData | None:
    framework_name = extract_framework_name(technology.identifier)
    if not framework_name:
        return None
    try:
        return await state.client.get_framework(framework_name)
    except AppleDocsError as exc:
        log.debug("framework_overview_unavailable", code=exc.code, message=exc.message)
        return None


def _render_overview(
    description: str,
    platforms: str,
    symbol_count: int,
    categories: list[str],
) -> list[str]:
    lines = [
        header(2, "Framework Overview"),
        description,
        "",
        bold("Platforms", platforms),
        bold("Symbols", f"{symbol_count} indexed"),
        "",
    ]
    if categories:
        lines.extend([header(3, "Categories"), bullet_list(categories), ""])
    return lines


def _render(summary: TechnologySummary, overview: list[str] | None) -> str:
    lines = [
        header(1, "✅ Technology Selected"),
        "",
        bold("Name", summary.title),
        bold("Identifier", summary.identifier),
        "",
        *(overview or []),
        header(2, "Next Actions"),
        bullet_list(
            [
                '`search_symbols { "query": "keyword" }`: search within this framework',
                '`get_documentation { "path": "SymbolName" }`: open a symbol page',
                "`discover_technologies`: pick another framework",
            ]
        ),
    ]
    return "\n".join(lines)
