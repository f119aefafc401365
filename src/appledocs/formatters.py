"""Text extraction and symbol-page rendering.

Pure functions over the documentation models. Rich text is a recursive
tree (inline content inside blocks inside blocks), flattened by walking it
depth-first.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from appledocs.markdown import (
    availability_badge,
    bold,
    code_block,
    deprecation_warning,
    header,
    trim_with_ellipsis,
)
from appledocs.models.docs import (
    ContentSection,
    DeclarationsSection,
    ParametersSection,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping

    from appledocs.models.docs import (
        AbstractItem,
        ContentBlock,
        InlineContent,
        PlatformInfo,
        ReferenceData,
        SymbolData,
        TopicSection,
    )

MAX_RELATED_SYMBOLS = 8
MAX_TOPIC_IDENTIFIERS = 5


# ---------------------------------------------------------------------------
# Plain text
# ---------------------------------------------------------------------------


def extract_text(abstract: Iterable[AbstractItem] | None) -> str:
    """Concatenate the text of abstract items."""
    return "".join(item.text or "" for item in abstract or [])


def format_platforms(platforms: Iterable[PlatformInfo] | None) -> str:
    """``iOS 13.0, macOS 10.15 (Beta)``, or ``All platforms`` when empty."""
    formatted = [
        f"{info.name} {info.introduced_at or 'unknown'}{' (Beta)' if info.beta else ''}"
        for info in platforms or []
    ]
    return ", ".join(formatted) if formatted else "All platforms"


def platform_names(platforms: Iterable[PlatformInfo] | None) -> list[str]:
    return [info.name for info in platforms or []]


def walk_inline(items: Iterable[InlineContent]) -> Iterator[str]:
    """Yield the text fragments of an inline tree in reading order."""
    for item in items:
        if item.text:
            yield item.text
        if item.code:
            yield f"`{item.code}`"
        if item.inline_content:
            yield from walk_inline(item.inline_content)


def extract_from_inline(items: Iterable[InlineContent]) -> str:
    return "".join(walk_inline(items))


def extract_inline_text(blocks: Iterable[ContentBlock]) -> str:
    texts: list[str] = []
    for block in blocks:
        if block.inline_content:
            texts.append(extract_from_inline(block.inline_content))
        if block.text:
            texts.append(block.text)
    return " ".join(texts).strip()


# ---------------------------------------------------------------------------
# Primary content sections
# ---------------------------------------------------------------------------


def format_declaration(section: DeclarationsSection) -> list[str]:
    if not section.declarations:
        return []
    declaration = section.declarations[0]
    text = "".join(token.text for token in declaration.tokens)
    language = declaration.languages[0] if declaration.languages else "swift"
    return ["", header(2, "Declaration"), "", code_block(text, language)]


def format_parameters(section: ParametersSection) -> list[str]:
    if not section.parameters:
        return []
    lines = ["", header(2, "Parameters"), ""]
    for parameter in section.parameters:
        lines.append(f"• **{parameter.name}**: {extract_inline_text(parameter.content)}")
    return lines


def format_return_value(section: ContentSection) -> list[str]:
    """Render the paragraph following the ``return-value`` heading, if any."""
    blocks = section.content
    for index, block in enumerate(blocks):
        if block.type == "heading" and block.anchor == "return-value":
            lines = ["", header(2, "Return Value"), ""]
            following = blocks[index + 1] if index + 1 < len(blocks) else None
            if following is not None and following.inline_content:
                lines.append(extract_from_inline(following.inline_content))
            return lines
    return []


def format_primary_content(sections: Iterable[object]) -> list[str]:
    lines: list[str] = []
    for section in sections:
        if isinstance(section, DeclarationsSection):
            lines.extend(format_declaration(section))
        elif isinstance(section, ParametersSection):
            lines.extend(format_parameters(section))
        elif isinstance(section, ContentSection):
            lines.extend(format_return_value(section))
        # mentions and unknown kinds are not rendered
    return lines


# ---------------------------------------------------------------------------
# Platforms
# ---------------------------------------------------------------------------


def format_deprecation_warnings(platforms: Iterable[PlatformInfo] | None) -> list[str]:
    deprecated = [info for info in platforms or [] if info.deprecated]
    if not deprecated:
        return []
    return ["", *(deprecation_warning(info.name) for info in deprecated), ""]


def format_detailed_platforms(platforms: Iterable[PlatformInfo] | None) -> str:
    return " | ".join(
        availability_badge(
            info.name,
            info.introduced_at,
            deprecated=bool(info.deprecated),
            beta=bool(info.beta),
        )
        for info in platforms or []
        if not info.unavailable
    )


# ---------------------------------------------------------------------------
# References
# ---------------------------------------------------------------------------


def format_related_symbols(references: Mapping[str, ReferenceData], current_title: str) -> list[str]:
    related = [
        ref
        for ref in references.values()
        if ref.title != current_title and ref.kind == "symbol"
    ][:MAX_RELATED_SYMBOLS]
    if not related:
        return []

    lines = ["", header(2, "See Also"), ""]
    for ref in related:
        lines.append(f"• **{ref.title}** ({ref.kind})")
    return lines


def format_identifiers(
    identifiers: list[str],
    references: Mapping[str, ReferenceData] | None,
) -> list[str]:
    lines: list[str] = []
    for identifier in identifiers[:MAX_TOPIC_IDENTIFIERS]:
        ref = (references or {}).get(identifier)
        if ref is not None:
            description = trim_with_ellipsis(extract_text(ref.abstract), 100)
            lines.append(f"• **{ref.title}** - {description}")

    if len(identifiers) > MAX_TOPIC_IDENTIFIERS:
        lines.append(f"*... and {len(identifiers) - MAX_TOPIC_IDENTIFIERS} more items*")
    return lines


def format_topic_sections(
    sections: list[TopicSection],
    references: Mapping[str, ReferenceData] | None,
) -> list[str]:
    if not sections:
        return []
    lines = ["", header(2, "API Reference"), ""]
    for section in sections:
        lines.append(header(3, section.title))
        if section.identifiers:
            lines.extend(format_identifiers(section.identifiers, references))
        lines.append("")
    return lines


# ---------------------------------------------------------------------------
# Full page
# ---------------------------------------------------------------------------


def format_symbol_page(
    data: SymbolData,
    technology_title: str,
    fallback_platforms: list[PlatformInfo] | None = None,
) -> str:
    """Render one symbol document as markdown."""
    title = data.metadata.title or "Symbol"
    kind = data.metadata.symbol_kind or "Unknown"
    platforms = data.metadata.platforms or fallback_platforms or []

    lines = [
        header(1, title),
        "",
        bold("Technology", technology_title),
        bold("Type", data.metadata.role_heading or kind),
        bold("Platforms", format_detailed_platforms(platforms)),
        *format_deprecation_warnings(platforms),
        *format_primary_content(data.primary_content_sections),
        "",
        header(2, "Overview"),
        extract_text(data.abstract),
        *format_topic_sections(data.topic_sections, data.references),
        *format_related_symbols(data.references, title),
    ]
    return "\n".join(lines)
