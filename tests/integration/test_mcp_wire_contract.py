"""Wire-level integration tests for MCP transport contract."""

from __future__ import annotations

import json
import subprocess
import sys
from typing import Any

EXPECTED_TOOLS = {
    "discover_technologies",
    "choose_technology",
    "current_technology",
    "search_symbols",
    "get_documentation",
    "cache_status",
    "get_version",
}

INITIALIZE = {
    "jsonrpc": "2.0",
    "id": 1,
    "method": "initialize",
    "params": {
        "protocolVersion": "2025-11-25",
        "capabilities": {},
        "clientInfo": {"name": "pytest", "version": "0"},
    },
}
INITIALIZED = {"jsonrpc": "2.0", "method": "notifications/initialized"}


def _tool_call(request_id: int, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "method": "tools/call",
        "params": {"name": name, "arguments": arguments},
    }


def _run_mcp_exchange(env: dict[str, str], messages: list[dict]) -> list[dict]:
    proc = subprocess.Popen(
        [sys.executable, "-m", "appledocs.server"],
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        env=env,
    )

    assert proc.stdin is not None
    assert proc.stdout is not None
    assert proc.stderr is not None

    responses: list[dict] = []

    # Requests are sent one at a time; tool calls mutate session state and
    # must reach the server in order.
    for message in messages:
        proc.stdin.write(json.dumps(message) + "\n")
        proc.stdin.flush()
        if "id" not in message:
            continue
        while True:
            line = proc.stdout.readline()
            if not line:  # server exited before answering
                break
            stripped = line.strip()
            if not stripped:
                continue
            response = json.loads(stripped)
            responses.append(response)
            if response.get("id") == message["id"]:
                break

    proc.stdin.close()
    proc.stderr.read()  # drain for reliable process shutdown
    proc.wait(timeout=10)
    proc.stdout.close()
    proc.stderr.close()

    return responses


def _response(responses: list[dict], request_id: int) -> dict:
    return next(response for response in responses if response.get("id") == request_id)


def _payload(response: dict) -> dict:
    return json.loads(response["result"]["content"][0]["text"])


def test_initialize_and_tools_list_contract(subprocess_env: dict[str, str]) -> None:
    responses = _run_mcp_exchange(
        subprocess_env,
        [
            INITIALIZE,
            INITIALIZED,
            {"jsonrpc": "2.0", "id": 2, "method": "tools/list", "params": {}},
        ],
    )

    init_result = _response(responses, 1)["result"]
    assert init_result["protocolVersion"] in {"2025-11-25", "2025-06-18", "2025-03-26"}
    assert init_result["serverInfo"]["name"] == "appledocs"
    assert "tools" in init_result["capabilities"]

    tools = _response(responses, 2)["result"]["tools"]
    tools_by_name = {tool["name"]: tool for tool in tools}
    assert set(tools_by_name) == EXPECTED_TOOLS

    search_schema = tools_by_name["search_symbols"]["inputSchema"]
    assert search_schema["type"] == "object"
    assert "query" in search_schema["required"]
    assert "ctx" not in search_schema["properties"]

    docs_schema = tools_by_name["get_documentation"]["inputSchema"]
    assert "path" in docs_schema["required"]

    choose_schema = tools_by_name["choose_technology"]["inputSchema"]
    assert set(choose_schema["properties"]) == {"name", "identifier"}


def test_choose_then_search_over_the_wire(subprocess_env: dict[str, str]) -> None:
    responses = _run_mcp_exchange(
        subprocess_env,
        [
            INITIALIZE,
            INITIALIZED,
            _tool_call(2, "choose_technology", {"name": "SwiftUI"}),
            _tool_call(3, "current_technology", {}),
            _tool_call(4, "search_symbols", {"query": "view"}),
        ],
    )

    chosen = _response(responses, 2)
    assert chosen["result"]["isError"] is False
    assert _payload(chosen)["technology"]["title"] == "SwiftUI"

    current = _response(responses, 3)
    assert current["result"]["isError"] is False
    assert _payload(current)["technology"]["title"] == "SwiftUI"

    search = _response(responses, 4)
    assert search["result"]["isError"] is False
    payload = _payload(search)
    assert payload["technology"] == "SwiftUI"
    assert {match["title"] for match in payload["matches"]} >= {"View", "NavigationView"}


def test_discover_technologies_from_seeded_cache(subprocess_env: dict[str, str]) -> None:
    responses = _run_mcp_exchange(
        subprocess_env,
        [INITIALIZE, INITIALIZED, _tool_call(2, "discover_technologies", {"query": "swift"})],
    )

    response = _response(responses, 2)
    assert response["result"]["isError"] is False
    titles = [tech["title"] for tech in _payload(response)["technologies"]]
    assert titles == ["SwiftUI", "SwiftData"]


def test_get_documentation_error_envelope(subprocess_env: dict[str, str]) -> None:
    responses = _run_mcp_exchange(
        subprocess_env,
        [INITIALIZE, INITIALIZED, _tool_call(2, "get_documentation", {"path": "View"})],
    )

    response = _response(responses, 2)
    assert response["result"]["isError"] is True
    error = _payload(response)["error"]
    assert error["code"] == "NO_TECHNOLOGY_SELECTED"
    assert error["recoverable"] is True
