"""Relevance scoring for framework references.

Pure business logic: receives framework index entries, returns ranked
references. No knowledge of AppState, MCP, or I/O.

Per query term, the first tier that matches wins:
  exact token          5
  case-insensitive     4
  substring of a token 2
  fuzzy character hit  1  (tokens and terms longer than 2 chars)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from appledocs.models.index import RankedReference

if TYPE_CHECKING:
    from collections.abc import Iterable

    from appledocs.models.index import FrameworkIndexEntry

FUZZY_THRESHOLD = 0.7


def _fuzzy_hit(term: str, lowered_tokens: list[str]) -> bool:
    if len(term) <= 2:
        return False
    for token in lowered_tokens:
        if len(token) <= 2:
            continue
        present = sum(1 for char in term if char in token)
        if present / len(term) > FUZZY_THRESHOLD:
            return True
    return False


def score_entry(tokens: list[str], terms: list[str]) -> int:
    """Score one entry's tokens against query terms."""
    lowered_tokens = [token.lower() for token in tokens]
    score = 0
    for term in terms:
        term_lower = term.lower()
        if term in tokens:
            score += 5
        elif term_lower in lowered_tokens:
            score += 4
        elif any(term_lower in token for token in lowered_tokens):
            score += 2
        elif _fuzzy_hit(term_lower, lowered_tokens):
            score += 1
    return score


def collect_matches(
    entries: Iterable[FrameworkIndexEntry],
    query: str,
    max_results: int,
    *,
    symbol_type: str | None = None,
    platform: str | None = None,
) -> list[RankedReference]:
    """Rank entries for ``query``; highest score first, ties by title."""
    terms = query.lower().split()
    if not terms:
        return []

    type_filter = symbol_type.lower() if symbol_type else None
    platform_filter = platform.lower() if platform else None

    ranked: list[RankedReference] = []
    for entry in entries:
        score = score_entry(entry.tokens, terms)
        if score <= 0:
            continue

        if type_filter and (entry.ref.kind or "").lower() != type_filter:
            continue

        if platform_filter and not any(
            platform_filter in info.name.lower() for info in entry.ref.platforms or []
        ):
            continue

        ranked.append(RankedReference(id=entry.id, ref=entry.ref, score=score))

    ranked.sort(key=lambda match: (-match.score, match.ref.title or ""))
    return ranked[:max_results]
