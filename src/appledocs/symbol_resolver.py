"""Symbol path resolution.

A bare name such as ``View`` or ``NSString`` does not say which framework
it lives in. Resolution tries the name as given, then under each candidate
framework, starting with the frameworks its naming prefix suggests.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from appledocs.errors import AppleDocsError, ErrorCode
from appledocs.paths import DOCUMENTATION_PREFIX, normalize_symbol_path

if TYPE_CHECKING:
    from collections.abc import Iterable

    from appledocs.client import AppleDocsClient
    from appledocs.models.docs import SymbolData

log = structlog.get_logger()

# Checked in order; the first matching prefix wins.
SYMBOL_PREFIX_FRAMEWORKS: dict[str, tuple[str, ...]] = {
    "MPS": ("MetalPerformanceShaders", "MetalPerformanceShadersGraph"),
    "MTL": ("Metal",),
    "CG": ("CoreGraphics",),
    "CA": ("CoreAnimation",),
    "CI": ("CoreImage",),
    "AV": ("AVFoundation",),
    "NS": ("Foundation", "AppKit"),
    "UI": ("UIKit",),
    "SK": ("SpriteKit", "StoreKit"),
    "SCN": ("SceneKit",),
    "CL": ("CoreLocation",),
    "CM": ("CoreMedia", "CoreMotion"),
    "CN": ("Contacts",),
    "PH": ("Photos",),
    "WK": ("WebKit", "WatchKit"),
}


def frameworks_for_symbol(path: str) -> tuple[str, ...]:
    for prefix, frameworks in SYMBOL_PREFIX_FRAMEWORKS.items():
        if path.startswith(prefix):
            return frameworks
    return ()


def candidate_frameworks(
    path: str,
    framework_name: str,
    additional_frameworks: Iterable[str] = (),
) -> list[str]:
    """Prefix-implied frameworks, then the active one, then extras; no repeats."""
    ordered = [*frameworks_for_symbol(path), framework_name, *additional_frameworks]
    return list(dict.fromkeys(ordered))


async def _try_get_symbol(client: AppleDocsClient, path: str) -> SymbolData | None:
    try:
        return await client.get_symbol(path)
    except AppleDocsError as exc:
        log.debug("symbol_not_at_path", path=path, code=exc.code)
        return None


async def resolve_symbol(
    client: AppleDocsClient,
    path: str,
    framework_name: str,
    additional_frameworks: Iterable[str] = (),
    *,
    max_concurrent: int = 5,
) -> SymbolData:
    """Load the symbol document for ``path``.

    Raises AppleDocsError(SYMBOL_NOT_FOUND) naming every framework tried.
    A ``documentation/...`` path is fetched directly and its errors
    propagate unchanged.
    """
    normalized = normalize_symbol_path(path)
    if normalized.startswith(DOCUMENTATION_PREFIX):
        return await client.get_symbol(normalized)

    direct = await _try_get_symbol(client, normalized)
    if direct is not None:
        return direct

    frameworks = candidate_frameworks(normalized, framework_name, additional_frameworks)
    semaphore = asyncio.Semaphore(max_concurrent)

    async def attempt(framework: str) -> SymbolData | None:
        async with semaphore:
            return await _try_get_symbol(client, f"documentation/{framework}/{normalized}")

    results = await asyncio.gather(*(attempt(framework) for framework in frameworks))
    for framework, result in zip(frameworks, results, strict=True):
        if result is not None:
            log.debug("symbol_resolved", path=normalized, framework=framework)
            return result

    raise AppleDocsError(
        code=ErrorCode.SYMBOL_NOT_FOUND,
        message=(
            f'Failed to load documentation for "{normalized}" in frameworks: '
            f"{', '.join(frameworks)}"
        ),
        suggestion=(
            "Use `search_symbols` to find the exact path, then pass it "
            "as `documentation/<Framework>/<Symbol>`."
        ),
        recoverable=True,
    )
