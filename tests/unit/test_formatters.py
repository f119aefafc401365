"""Unit tests for appledocs.formatters."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from appledocs.formatters import (
    MAX_TOPIC_IDENTIFIERS,
    extract_text,
    format_identifiers,
    format_platforms,
    format_related_symbols,
    format_symbol_page,
)
from appledocs.models.docs import (
    AbstractItem,
    PlatformInfo,
    ReferenceData,
    SymbolData,
)

if TYPE_CHECKING:
    from collections.abc import Callable


class TestPlainText:
    def test_extract_text(self) -> None:
        items = [
            AbstractItem(type="text", text="A view "),
            AbstractItem(type="reference"),
            AbstractItem(type="text", text="type."),
        ]
        assert extract_text(items) == "A view type."
        assert extract_text(None) == ""

    def test_format_platforms(self) -> None:
        platforms = [
            PlatformInfo(name="iOS", introduced_at="13.0"),
            PlatformInfo(name="visionOS", introduced_at="2.0", beta=True),
            PlatformInfo(name="watchOS"),
        ]
        assert format_platforms(platforms) == "iOS 13.0, visionOS 2.0 (Beta), watchOS unknown"
        assert format_platforms([]) == "All platforms"


# ---------------------------------------------------------------------------
# Symbol page
# ---------------------------------------------------------------------------


class TestSymbolPage:
    def test_header_and_metadata(self, symbol_data: SymbolData) -> None:
        page = format_symbol_page(symbol_data, "SwiftUI")

        assert page.startswith("# init(_:action:)\n")
        assert "**Technology:** SwiftUI" in page
        assert "**Type:** Initializer" in page

    def test_platform_badges(self, symbol_data: SymbolData) -> None:
        page = format_symbol_page(symbol_data, "SwiftUI")

        assert "**Platforms:** iOS 13.0+ | ⚠️ macOS 10.15+ | β visionOS 1.0+" in page
        assert "tvOS" not in page
        assert "> ⚠️ **Deprecated** on macOS" in page

    def test_primary_content(self, symbol_data: SymbolData) -> None:
        page = format_symbol_page(symbol_data, "SwiftUI")

        assert "## Declaration\n\n```swift\ninit(_ title: String, action: () -> Void)\n```" in page
        assert "• **action**: The action to perform." in page
        assert "## Return Value\n\nA new `Button`." in page

    def test_overview_topics_and_related(self, symbol_data: SymbolData) -> None:
        page = format_symbol_page(symbol_data, "SwiftUI")

        assert "## Overview\nCreates a button that displays a custom label." in page
        assert "### Related" in page
        assert "• **Label** - A standard label for user interface items." in page
        assert "## See Also" in page
        assert "• **Label** (symbol)" in page

    def test_unknown_sections_ignored(self, symbol_data: SymbolData) -> None:
        page = format_symbol_page(symbol_data, "SwiftUI")
        assert "Unknown section" not in page

    def test_fallback_platforms_and_kind(self, make_symbol: Callable[..., dict[str, Any]]) -> None:
        payload = make_symbol("Thing", symbol_kind="class")
        payload["metadata"].pop("platforms")
        data = SymbolData.model_validate(payload)

        page = format_symbol_page(data, "UIKit", [PlatformInfo(name="iOS", introduced_at="2.0")])

        assert "**Type:** class" in page
        assert "**Platforms:** iOS 2.0+" in page
        assert "## Declaration" not in page
        assert "## API Reference" not in page
        assert "## See Also" not in page


class TestReferences:
    def test_related_excludes_current_title_and_non_symbols(self) -> None:
        references = {
            "a": ReferenceData(title="View", kind="symbol"),
            "b": ReferenceData(title="Text", kind="symbol"),
            "c": ReferenceData(title="Getting started", kind="article"),
        }
        lines = format_related_symbols(references, "View")
        assert lines[-1] == "• **Text** (symbol)"
        assert len([line for line in lines if line.startswith("•")]) == 1

    def test_identifier_overflow_is_summarised(self) -> None:
        identifiers = [f"id{index}" for index in range(MAX_TOPIC_IDENTIFIERS + 2)]
        references = {
            identifier: ReferenceData(
                title=identifier.upper(),
                abstract=[AbstractItem(type="text", text="x" * 150)],
            )
            for identifier in identifiers
        }

        lines = format_identifiers(identifiers, references)

        assert len(lines) == MAX_TOPIC_IDENTIFIERS + 1
        assert lines[0] == f"• **ID0** - {'x' * 100}..."
        assert lines[-1] == "*... and 2 more items*"

    def test_unknown_identifiers_skipped(self) -> None:
        assert format_identifiers(["missing"], {}) == []
