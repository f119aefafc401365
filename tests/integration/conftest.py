"""Integration test fixtures.

Provides a fully wired AppState over a temporary cache directory. Network
access goes to an unroutable base URL; tests that need responses mock it
with respx. Payload fixtures come from tests/conftest.py.
"""

from __future__ import annotations

import json
import os
from typing import TYPE_CHECKING, Any

import pytest

from appledocs.config import Settings
from appledocs.server import build_app_state

if TYPE_CHECKING:
    from pathlib import Path

    from appledocs.models.docs import FrameworkData, Technology
    from appledocs.state import AppState

BASE_URL = "https://docs.test/data"


@pytest.fixture()
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "cache"


@pytest.fixture()
def subprocess_env(
    cache_dir: Path,
    technologies_payload: dict[str, Any],
    framework_payload: dict[str, Any],
) -> dict[str, str]:
    """Baseline env dict for subprocess-based MCP integration tests.

    Points the cache at an isolated directory seeded with the technology
    list and the SwiftUI framework, and sends any network request to a
    closed local port with a single attempt.
    """
    cache_dir.mkdir(parents=True)
    (cache_dir / "technologies.json").write_text(
        json.dumps(technologies_payload["references"]), encoding="utf-8"
    )
    (cache_dir / "swiftui.json").write_text(json.dumps(framework_payload), encoding="utf-8")

    env = os.environ.copy()
    env.pop("APPLE_DOC_CACHE_DIR", None)
    env["APPLEDOCS__CACHE__DIRECTORY"] = str(cache_dir)
    env["APPLEDOCS__HTTP__BASE_URL"] = "http://127.0.0.1:1/data"
    env["APPLEDOCS__HTTP__MAX_RETRY_ATTEMPTS"] = "1"
    env["APPLEDOCS__LOGGING__LEVEL"] = "WARNING"
    return env


@pytest.fixture()
async def app_state(cache_dir: Path) -> AppState:
    """Full AppState wired the way the server lifespan wires it."""
    settings = Settings(
        cache={"directory": str(cache_dir)},
        http={"base_url": BASE_URL, "base_retry_delay_seconds": 0},
    )
    state = build_app_state(settings)
    try:
        yield state
    finally:
        assert state.http_client is not None
        await state.http_client.aclose()


@pytest.fixture()
async def seeded_state(
    app_state: AppState,
    technologies: dict[str, Technology],
    framework_data: FrameworkData,
) -> AppState:
    """AppState whose cache already holds the technology list and SwiftUI."""
    await app_state.store.save_technologies(technologies)
    await app_state.store.save_framework("swiftui", framework_data)
    return app_state
