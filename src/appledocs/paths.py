"""Helpers for documentation identifiers and paths.

Identifiers look like ``doc://com.apple.documentation/documentation/swiftui``;
paths look like ``/documentation/swiftui/view`` or ``documentation/swiftui/view``.
"""

from __future__ import annotations

DOC_URI_PREFIX = "doc://com.apple.documentation/"
DOCUMENTATION_PREFIX = "documentation/"


def remove_leading_slash(path: str) -> str:
    return path[1:] if path.startswith("/") else path


def normalize_symbol_path(path: str) -> str:
    """Strip the ``doc://`` identifier prefix and any leading slash."""
    return remove_leading_slash(path.removeprefix(DOC_URI_PREFIX))


def extract_framework_name(identifier: str) -> str | None:
    """``doc://.../documentation/SwiftUI`` → ``SwiftUI``."""
    name = identifier.rstrip("/").split("/")[-1]
    return name or None


def extract_technology_path(identifier: str) -> str | None:
    """``doc://com.apple.documentation/documentation/swiftui`` → ``swiftui``."""
    path = normalize_symbol_path(identifier).removeprefix(DOCUMENTATION_PREFIX)
    return path or None


def path_in_technology(path: str, technology_path: str) -> bool:
    """Whether ``path`` lies inside ``technology_path``, compared by segment.

    Case-insensitive. ``/documentation/swiftui/view`` is inside ``swiftui``;
    ``/documentation/uikit/uiview`` is not inside ``ui``.
    """
    needle = "/" + technology_path.strip("/").lower() + "/"
    haystack = "/" + path.strip("/").lower() + "/"
    return needle in haystack
