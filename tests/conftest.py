"""Shared test fixtures for the appledocs test suite."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from appledocs.models.docs import FrameworkData, SymbolData, Technology

if TYPE_CHECKING:
    from collections.abc import Callable

SWIFTUI_ID = "doc://com.apple.documentation/documentation/swiftui"
UIKIT_ID = "doc://com.apple.documentation/documentation/uikit"


def technology_payload(
    title: str,
    identifier: str,
    *,
    kind: str = "symbol",
    role: str = "collection",
    abstract: str = "",
) -> dict[str, Any]:
    return {
        "type": "topic",
        "identifier": identifier,
        "title": title,
        "url": "/" + identifier.removeprefix("doc://com.apple.documentation/"),
        "kind": kind,
        "role": role,
        "abstract": [{"type": "text", "text": abstract}] if abstract else [],
    }


def reference_payload(
    title: str,
    url: str,
    *,
    kind: str = "symbol",
    abstract: str = "",
    platforms: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "type": "topic",
        "title": title,
        "kind": kind,
        "url": url,
        "abstract": [{"type": "text", "text": abstract}] if abstract else [],
    }
    if platforms is not None:
        payload["platforms"] = platforms
    return payload


def symbol_payload(
    title: str,
    *,
    url: str | None = None,
    symbol_kind: str = "struct",
    abstract: str = "",
    references: dict[str, Any] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    metadata: dict[str, Any] = {
        "title": title,
        "symbolKind": symbol_kind,
        "platforms": [{"name": "iOS", "introducedAt": "13.0"}],
    }
    if url is not None:
        metadata["url"] = url
    return {
        "metadata": metadata,
        "abstract": [{"type": "text", "text": abstract}] if abstract else [],
        "primaryContentSections": [],
        "references": references or {},
        "topicSections": [],
        **extra,
    }


@pytest.fixture()
def technologies_payload() -> dict[str, Any]:
    """Technology list in the upstream ``{"references": {...}}`` envelope."""
    return {
        "references": {
            SWIFTUI_ID: technology_payload(
                "SwiftUI", SWIFTUI_ID, abstract="Declare the user interface for your app."
            ),
            UIKIT_ID: technology_payload(
                "UIKit", UIKIT_ID, abstract="Construct and manage a graphical interface."
            ),
            "doc://com.apple.documentation/documentation/swiftdata": technology_payload(
                "SwiftData",
                "doc://com.apple.documentation/documentation/swiftdata",
                abstract="Persist your app's model data.",
            ),
            "doc://com.apple.documentation/tutorials/swiftui-concepts": technology_payload(
                "SwiftUI Concepts",
                "doc://com.apple.documentation/tutorials/swiftui-concepts",
                kind="overview",
                role="overview",
            ),
        }
    }


@pytest.fixture()
def technologies(technologies_payload: dict[str, Any]) -> dict[str, Technology]:
    return {
        key: Technology.model_validate(value)
        for key, value in technologies_payload["references"].items()
    }


@pytest.fixture()
def framework_payload() -> dict[str, Any]:
    """A trimmed SwiftUI framework document."""
    return {
        "metadata": {
            "title": "SwiftUI",
            "role": "collection",
            "platforms": [
                {"name": "iOS", "introducedAt": "13.0"},
                {"name": "macOS", "introducedAt": "10.15"},
            ],
        },
        "abstract": [{"type": "text", "text": "Declare the user interface for your app."}],
        "references": {
            "doc://com.apple.documentation/documentation/SwiftUI/View": reference_payload(
                "View",
                "/documentation/swiftui/view",
                abstract="A type that represents part of your app's user interface.",
                platforms=[{"name": "iOS", "introducedAt": "13.0"}],
            ),
            "doc://com.apple.documentation/documentation/SwiftUI/NavigationView": reference_payload(
                "NavigationView",
                "/documentation/swiftui/navigationview",
                abstract="A view for presenting a stack of views.",
                platforms=[{"name": "iOS", "introducedAt": "13.0"}],
            ),
            "doc://com.apple.documentation/documentation/SwiftUI/Button": reference_payload(
                "Button",
                "/documentation/swiftui/button",
                abstract="A control that initiates an action.",
                platforms=[{"name": "macOS", "introducedAt": "10.15"}],
            ),
            "doc://com.apple.documentation/documentation/SwiftUI/App-Structure": reference_payload(
                "App structure",
                "/documentation/swiftui/app-structure",
                kind="article",
            ),
            "swiftui-hero.png": {"type": "image", "identifier": "swiftui-hero.png"},
        },
        "topicSections": [
            {
                "title": "Essentials",
                "identifiers": ["doc://com.apple.documentation/documentation/SwiftUI/App-Structure"],
            },
            {
                "title": "Views",
                "identifiers": [
                    "doc://com.apple.documentation/documentation/SwiftUI/View",
                    "doc://com.apple.documentation/documentation/SwiftUI/NavigationView",
                ],
            },
        ],
        "schemaVersion": {"major": 0, "minor": 3, "patch": 0},
    }


@pytest.fixture()
def framework_data(framework_payload: dict[str, Any]) -> FrameworkData:
    return FrameworkData.model_validate(framework_payload)


@pytest.fixture()
def symbol_document() -> dict[str, Any]:
    """A symbol page with declaration, parameters and a return value."""
    return {
        "metadata": {
            "title": "init(_:action:)",
            "symbolKind": "init",
            "roleHeading": "Initializer",
            "url": "/documentation/swiftui/button/init(_:action:)",
            "platforms": [
                {"name": "iOS", "introducedAt": "13.0"},
                {"name": "macOS", "introducedAt": "10.15", "deprecated": True},
                {"name": "visionOS", "introducedAt": "1.0", "beta": True},
                {"name": "tvOS", "unavailable": True},
            ],
        },
        "abstract": [{"type": "text", "text": "Creates a button that displays a custom label."}],
        "primaryContentSections": [
            {
                "kind": "declarations",
                "declarations": [
                    {
                        "languages": ["swift"],
                        "tokens": [
                            {"kind": "identifier", "text": "init"},
                            {"kind": "text", "text": "(_ title: "},
                            {"kind": "typeIdentifier", "text": "String"},
                            {"kind": "text", "text": ", action: () -> Void)"},
                        ],
                    }
                ],
            },
            {
                "kind": "parameters",
                "parameters": [
                    {
                        "name": "action",
                        "content": [
                            {
                                "type": "paragraph",
                                "inlineContent": [
                                    {"type": "text", "text": "The action to perform."}
                                ],
                            }
                        ],
                    }
                ],
            },
            {
                "kind": "content",
                "content": [
                    {"type": "heading", "level": 2, "text": "Return Value", "anchor": "return-value"},
                    {
                        "type": "paragraph",
                        "inlineContent": [
                            {"type": "text", "text": "A new "},
                            {"type": "codeVoice", "code": "Button"},
                            {"type": "text", "text": "."},
                        ],
                    },
                ],
            },
            {"kind": "mentions", "mentions": ["doc://com.apple.documentation/documentation/SwiftUI/Label"]},
            {"kind": "restEndpoint", "title": "Unknown section"},
        ],
        "references": {
            "doc://com.apple.documentation/documentation/SwiftUI/Label": reference_payload(
                "Label",
                "/documentation/swiftui/label",
                abstract="A standard label for user interface items.",
            ),
        },
        "topicSections": [
            {
                "title": "Related",
                "identifiers": ["doc://com.apple.documentation/documentation/SwiftUI/Label"],
            }
        ],
    }


@pytest.fixture()
def symbol_data(symbol_document: dict[str, Any]) -> SymbolData:
    return SymbolData.model_validate(symbol_document)


@pytest.fixture()
def make_symbol() -> Callable[..., dict[str, Any]]:
    """Builder for minimal SymbolData payloads."""
    return symbol_payload


@pytest.fixture()
def make_reference() -> Callable[..., dict[str, Any]]:
    """Builder for ReferenceData payloads."""
    return reference_payload
