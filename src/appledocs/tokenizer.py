"""Search tokenisation shared by the local index and the framework index.

Text is split on whitespace and path punctuation, then CamelCase words are
split on capital letters. Both the original and lowercase forms of every
piece are kept, so exact-case and case-insensitive lookups both hit.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

_DELIMITERS = re.compile(r"[\s/._-]+")
_CAMEL_BOUNDARY = re.compile(r"(?=[A-Z])")


def tokenize(text: str) -> list[str]:
    """Return unique tokens for ``text`` in first-seen order.

    ``"SwiftUI"`` → ``["swiftui", "SwiftUI", "swift", "Swift", "u", "U", "i", "I"]``.
    """
    tokens: dict[str, None] = {}
    for word in _DELIMITERS.split(text):
        if not word:
            continue
        tokens[word.lower()] = None
        tokens[word] = None

        parts = [part for part in _CAMEL_BOUNDARY.split(word) if part]
        if len(parts) > 1:
            for part in parts:
                tokens[part.lower()] = None
                tokens[part] = None
            tokens["".join(parts).lower()] = None
    return list(tokens)


def create_search_tokens(
    title: str,
    abstract: str = "",
    path: str = "",
    platforms: Iterable[str] = (),
) -> list[str]:
    tokens: dict[str, None] = {}
    for text in (title, abstract, path, *platforms):
        if text:
            tokens.update(dict.fromkeys(tokenize(text)))
    return list(tokens)
