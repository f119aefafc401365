"""Tool handler for get_documentation.

Resolves a symbol path within the active technology and renders the
symbol page. No MCP or FastMCP imports; server.py handles the MCP wiring.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from appledocs.errors import AppleDocsError, ErrorCode
from appledocs.formatters import format_symbol_page
from appledocs.framework_loader import load_active_framework_data, require_framework_name
from appledocs.models.tools import GetDocumentationInput, GetDocumentationOutput
from appledocs.symbol_resolver import resolve_symbol
from appledocs.tools.no_technology import require_technology

if TYPE_CHECKING:
    from appledocs.state import AppState


async def handle(path: str, state: AppState) -> dict:
    """Handle a get_documentation tool call."""
    log = structlog.get_logger().bind(tool="get_documentation", path=path)
    log.info("handler_called")

    try:
        validated = GetDocumentationInput(path=path)
    except ValueError as exc:
        raise AppleDocsError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Provide a symbol name (e.g. View) or a documentation path (max 1000 chars).",
            recoverable=False,
        ) from exc

    technology = await require_technology(state)
    framework = await load_active_framework_data(state)
    framework_name = require_framework_name(technology)

    data = await resolve_symbol(
        state.client,
        validated.path,
        framework_name,
        max_concurrent=state.settings.http.max_concurrent_requests,
    )
    log.info("documentation_resolved", title=data.metadata.title)

    content = format_symbol_page(data, technology.title, framework.metadata.platforms)
    output = GetDocumentationOutput(
        title=data.metadata.title or "Symbol",
        technology=technology.title,
        kind=data.metadata.role_heading or data.metadata.symbol_kind or "Unknown",
        content=content,
    )
    return output.model_dump(mode="json")
