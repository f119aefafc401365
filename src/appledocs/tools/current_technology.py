"""Tool handler for current_technology.

No MCP or FastMCP imports; server.py handles the MCP wiring.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from appledocs.formatters import extract_text
from appledocs.markdown import bold, bullet_list, header
from appledocs.models.tools import CurrentTechnologyOutput, TechnologySummary
from appledocs.tools.no_technology import require_technology

if TYPE_CHECKING:
    from appledocs.state import AppState


async def handle(state: AppState) -> dict:
    """Handle a current_technology tool call."""
    log = structlog.get_logger().bind(tool="current_technology")
    log.info("handler_called")

    technology = await require_technology(state)

    summary = TechnologySummary(
        title=technology.title,
        identifier=technology.identifier,
        url=technology.url,
        description=extract_text(technology.abstract),
    )
    content = "\n".join(
        [
            header(1, "📘 Current Technology"),
            "",
            bold("Name", summary.title),
            bold("Identifier", summary.identifier),
            "",
            header(2, "Next actions"),
            bullet_list(
                [
                    '`search_symbols { "query": "keyword" }` to find symbols',
                    '`get_documentation { "path": "SymbolName" }` to open docs',
                    '`choose_technology "Another Framework"` to switch',
                ]
            ),
        ]
    )
    return CurrentTechnologyOutput(technology=summary, content=content).model_dump(mode="json")
