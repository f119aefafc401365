"""Tool handler for get_version."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from appledocs import __version__
from appledocs.markdown import bold, header
from appledocs.models.tools import VersionOutput

if TYPE_CHECKING:
    from appledocs.state import AppState

PACKAGE_NAME = "appledocs"
DESCRIPTION = "MCP server for searching and reading Apple developer documentation"


async def handle(state: AppState) -> dict:
    """Handle a get_version tool call."""
    log = structlog.get_logger().bind(tool="get_version")
    log.info("handler_called")

    content = "\n".join(
        [
            header(1, "Apple Docs MCP Server"),
            "",
            bold("Package Version", __version__),
            bold("Server Name", PACKAGE_NAME),
            bold("Description", DESCRIPTION),
            bold("Cache Directory", str(state.store.directory)),
        ]
    )
    output = VersionOutput(
        name=PACKAGE_NAME,
        version=__version__,
        description=DESCRIPTION,
        content=content,
    )
    return output.model_dump(mode="json")
