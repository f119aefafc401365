"""MCP server entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Create AppState via the FastMCP lifespan context manager
- Register tools
- Start the stdio transport
"""

from __future__ import annotations

import json
import logging
import sys
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from mcp.server.fastmcp import Context, FastMCP
from mcp.types import CallToolResult, TextContent

import appledocs.tools.cache_status as t_cache_status
import appledocs.tools.choose_technology as t_choose
import appledocs.tools.current_technology as t_current
import appledocs.tools.discover_technologies as t_discover
import appledocs.tools.get_documentation as t_get_docs
import appledocs.tools.get_version as t_version
import appledocs.tools.search_symbols as t_search
from appledocs import __version__
from appledocs.client import AppleDocsClient
from appledocs.config import Settings
from appledocs.errors import AppleDocsError
from appledocs.file_cache import FileCache
from appledocs.http_client import HttpClient, build_http_client
from appledocs.state import AppState

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [*shared_processors, structlog.processors.JSONRenderer()]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # stdout carries the MCP JSON-RPC stream
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


def build_app_state(settings: Settings) -> AppState:
    """Wire transport, persistent store and documentation client."""
    http_client = build_http_client(settings.http)
    transport = HttpClient.from_settings(http_client, settings.http, settings.cache)
    store = FileCache(settings.cache_dir)
    return AppState(
        settings=settings,
        client=AppleDocsClient(transport, store),
        store=store,
        transport=transport,
        http_client=http_client,
    )


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncGenerator[AppState, None]:
    """Create and tear down all shared resources for the server's lifetime."""
    settings = Settings()
    _setup_logging(settings)

    log.info("server_starting", version=__version__, cache_dir=str(settings.cache_dir))
    state = build_app_state(settings)
    log.info("server_started", version=__version__)

    try:
        yield state
    finally:
        if state.http_client is not None:
            await state.http_client.aclose()
        log.info("server_stopping")


# ---------------------------------------------------------------------------
# FastMCP instance and tool registration
# ---------------------------------------------------------------------------

mcp = FastMCP("appledocs", lifespan=lifespan)
# FastMCP doesn't expose a version kwarg; set it on the underlying Server
# so the MCP initialize handshake reports our version, not the SDK's.
mcp._mcp_server.version = __version__  # pyright: ignore[reportPrivateUsage]


def _serialise_tool_error(error: AppleDocsError) -> CallToolResult:
    """Convert an AppleDocsError to the MCP tool error result envelope."""
    return CallToolResult(
        content=[TextContent(type="text", text=json.dumps(error.to_dict()))],
        isError=True,
    )


def _log_tool_error(tool: str, exc: AppleDocsError) -> None:
    log.warning(
        "tool_error",
        tool=tool,
        code=exc.code,
        message=exc.message,
        recoverable=exc.recoverable,
    )


@mcp.tool()
async def discover_technologies(
    ctx: Context,
    query: str | None = None,
    page: int = 1,
    page_size: int = 25,
) -> object:
    """List Apple frameworks that can be selected, optionally filtered by keyword.

    Results are paginated; use page and page_size to move through them.
    """
    state: AppState = ctx.request_context.lifespan_context
    try:
        return await t_discover.handle(query, page, page_size, state)
    except AppleDocsError as exc:
        _log_tool_error("discover_technologies", exc)
        return _serialise_tool_error(exc)
    except Exception:
        log.error("tool_unexpected_error", tool="discover_technologies", exc_info=True)
        raise


@mcp.tool()
async def choose_technology(
    ctx: Context,
    name: str | None = None,
    identifier: str | None = None,
) -> object:
    """Select the framework that later searches and lookups operate on."""
    state: AppState = ctx.request_context.lifespan_context
    try:
        return await t_choose.handle(name, identifier, state)
    except AppleDocsError as exc:
        _log_tool_error("choose_technology", exc)
        return _serialise_tool_error(exc)
    except Exception:
        log.error("tool_unexpected_error", tool="choose_technology", exc_info=True)
        raise


@mcp.tool()
async def current_technology(ctx: Context) -> object:
    """Report the currently selected framework."""
    state: AppState = ctx.request_context.lifespan_context
    try:
        return await t_current.handle(state)
    except AppleDocsError as exc:
        _log_tool_error("current_technology", exc)
        return _serialise_tool_error(exc)
    except Exception:
        log.error("tool_unexpected_error", tool="current_technology", exc_info=True)
        raise


@mcp.tool()
async def search_symbols(
    query: str,
    ctx: Context,
    max_results: int | None = None,
    platform: str | None = None,
    symbol_type: str | None = None,
) -> object:
    """Search symbols in the selected framework.

    Supports * and ? wildcards (e.g. Grid*, Vie?). platform filters by
    platform name (e.g. iOS); symbol_type filters by kind (e.g. struct).
    """
    state: AppState = ctx.request_context.lifespan_context
    try:
        return await t_search.handle(query, max_results, platform, symbol_type, state)
    except AppleDocsError as exc:
        _log_tool_error("search_symbols", exc)
        return _serialise_tool_error(exc)
    except Exception:
        log.error("tool_unexpected_error", tool="search_symbols", exc_info=True)
        raise


@mcp.tool()
async def get_documentation(path: str, ctx: Context) -> object:
    """Fetch the full documentation page for a symbol.

    Accepts a bare name (View), a relative path (View/body) or a full
    documentation path (documentation/SwiftUI/View).
    """
    state: AppState = ctx.request_context.lifespan_context
    try:
        return await t_get_docs.handle(path, state)
    except AppleDocsError as exc:
        _log_tool_error("get_documentation", exc)
        return _serialise_tool_error(exc)
    except Exception:
        log.error("tool_unexpected_error", tool="get_documentation", exc_info=True)
        raise


@mcp.tool()
async def cache_status(ctx: Context) -> object:
    """Report what the on-disk documentation cache holds."""
    state: AppState = ctx.request_context.lifespan_context
    try:
        return await t_cache_status.handle(state)
    except AppleDocsError as exc:
        _log_tool_error("cache_status", exc)
        return _serialise_tool_error(exc)
    except Exception:
        log.error("tool_unexpected_error", tool="cache_status", exc_info=True)
        raise


@mcp.tool()
async def get_version(ctx: Context) -> object:
    """Report the server version."""
    state: AppState = ctx.request_context.lifespan_context
    try:
        return await t_version.handle(state)
    except AppleDocsError as exc:
        _log_tool_error("get_version", exc)
        return _serialise_tool_error(exc)
    except Exception:
        log.error("tool_unexpected_error", tool="get_version", exc_info=True)
        raise


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def main() -> None:
    mcp.run()


if __name__ == "__main__":
    main()
