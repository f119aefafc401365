"""Unit tests for appledocs.paths."""

from __future__ import annotations

import pytest

from appledocs.paths import (
    extract_framework_name,
    extract_technology_path,
    normalize_symbol_path,
    path_in_technology,
    remove_leading_slash,
)


class TestNormalisation:
    def test_remove_leading_slash(self) -> None:
        assert remove_leading_slash("/documentation/swiftui") == "documentation/swiftui"
        assert remove_leading_slash("documentation/swiftui") == "documentation/swiftui"

    def test_normalize_strips_doc_uri(self) -> None:
        identifier = "doc://com.apple.documentation/documentation/SwiftUI/View"
        assert normalize_symbol_path(identifier) == "documentation/SwiftUI/View"

    def test_normalize_plain_path(self) -> None:
        assert normalize_symbol_path("/documentation/swiftui/view") == "documentation/swiftui/view"


class TestExtraction:
    def test_framework_name(self) -> None:
        prefix = "doc://com.apple.documentation/documentation/"
        assert extract_framework_name(prefix + "SwiftUI") == "SwiftUI"
        assert extract_framework_name(prefix + "uikit/") == "uikit"

    def test_framework_name_empty(self) -> None:
        assert extract_framework_name("") is None

    def test_technology_path(self) -> None:
        identifier = "doc://com.apple.documentation/documentation/swiftui"
        assert extract_technology_path(identifier) == "swiftui"

    def test_technology_path_empty(self) -> None:
        assert extract_technology_path("doc://com.apple.documentation/documentation/") is None


class TestPathInTechnology:
    @pytest.mark.parametrize(
        ("path", "technology", "expected"),
        [
            ("/documentation/swiftui/view", "swiftui", True),
            ("/documentation/SwiftUI/View", "swiftui", True),
            ("documentation/swiftui", "swiftui", True),
            ("/documentation/uikit/uiview", "swiftui", False),
            ("/documentation/uikit/uiview", "ui", False),
            ("/documentation/swiftuicore/view", "swiftui", False),
        ],
    )
    def test_segment_match(self, path: str, technology: str, expected: bool) -> None:
        assert path_in_technology(path, technology) is expected
