"""Small markdown building blocks used by the tool handlers."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


def header(level: int, text: str) -> str:
    return f"{'#' * max(1, level)} {text}"


def bold(label: str, value: str) -> str:
    return f"**{label}:** {value}"


def bullet_list(items: Iterable[str], bullet: str = "•") -> str:
    return "\n".join(f"{bullet} {item}" for item in items)


def trim_with_ellipsis(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return f"{text[: max(0, max_length)]}..."


def code_block(code: str, language: str = "swift") -> str:
    return f"```{language}\n{code}\n```"


def inline_code(code: str) -> str:
    return f"`{code}`"


def deprecation_warning(platform: str, message: str | None = None) -> str:
    base = f"> ⚠️ **Deprecated** on {platform}"
    return f"{base}: {message}" if message else base


def availability_badge(
    platform: str,
    version: str | None,
    *,
    deprecated: bool = False,
    beta: bool = False,
    unavailable: bool = False,
) -> str:
    """``iOS 13.0+``, ``β iOS 18.0+``, ``⚠️ macOS 10.15+`` or ``watchOS: ~~unavailable~~``."""
    if unavailable:
        return f"{platform}: ~~unavailable~~"

    badges = ""
    if deprecated:
        badges += "⚠️"
    if beta:
        badges += "β"
    prefix = f"{badges} " if badges else ""
    return f"{prefix}{platform} {version or 'unknown'}+"


def format_bytes(size: int) -> str:
    if size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB"]
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(units) - 1:
        value /= 1024
        unit += 1
    return f"{value:.1f} {units[unit]}"
