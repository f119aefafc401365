"""Unit tests for appledocs.file_cache."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any
from unittest.mock import patch

from appledocs.file_cache import (
    SYMBOL_FILENAME_PATTERN,
    FileCache,
    parse_technologies,
    sanitize_framework_name,
    symbol_filename,
)
from appledocs.models.docs import FrameworkData, SymbolData, Technology, dump_document

if TYPE_CHECKING:
    from pathlib import Path


# ---------------------------------------------------------------------------
# File naming
# ---------------------------------------------------------------------------


class TestFileNaming:
    def test_sanitize_replaces_unsafe_characters(self) -> None:
        assert sanitize_framework_name("Core Data/Model") == "Core_Data_Model"
        assert sanitize_framework_name("swift-ui") == "swift-ui"

    def test_symbol_filename_has_readable_prefix_and_hash(self) -> None:
        name = symbol_filename("documentation/swiftui/view")
        assert name.startswith("view_")
        assert SYMBOL_FILENAME_PATTERN.match(name)

    def test_symbol_filename_is_collision_safe(self) -> None:
        first = symbol_filename("documentation/swift/array/init(_:)")
        second = symbol_filename("documentation/swift/array/init(_:)-3ad2f")
        assert first != second

    def test_symbol_filename_is_deterministic(self) -> None:
        path = "documentation/foundation/nsstring/compare(_:options:range:)"
        assert symbol_filename(path) == symbol_filename(path)

    def test_symbol_filename_truncates_long_prefix(self) -> None:
        name = symbol_filename("documentation/x/" + "a" * 200)
        prefix, _hash = name.removesuffix(".json").rsplit("_", 1)
        assert len(prefix) == 32


# ---------------------------------------------------------------------------
# Frameworks and symbols
# ---------------------------------------------------------------------------


class TestDocumentRoundTrip:
    async def test_framework_round_trip(
        self, tmp_path: Path, framework_payload: dict[str, Any]
    ) -> None:
        store = FileCache(tmp_path)
        data = FrameworkData.model_validate(framework_payload)

        await store.save_framework("SwiftUI", data)
        loaded = await store.load_framework("SwiftUI")

        assert loaded is not None
        assert dump_document(loaded) == framework_payload

    async def test_symbol_round_trip(self, tmp_path: Path, symbol_document: dict[str, Any]) -> None:
        store = FileCache(tmp_path)
        data = SymbolData.model_validate(symbol_document)
        path = "documentation/swiftui/button/init(_:action:)"

        await store.save_symbol(path, data)
        loaded = await store.load_symbol(path)

        assert loaded is not None
        assert dump_document(loaded) == symbol_document

    async def test_written_json_is_pretty_printed(
        self, tmp_path: Path, framework_data: FrameworkData
    ) -> None:
        store = FileCache(tmp_path)
        await store.save_framework("SwiftUI", framework_data)
        text = store.framework_path("SwiftUI").read_text(encoding="utf-8")
        assert text.startswith("{\n  ")

    async def test_save_creates_directory(
        self, tmp_path: Path, framework_data: FrameworkData
    ) -> None:
        store = FileCache(tmp_path / "nested" / "cache")
        await store.save_framework("SwiftUI", framework_data)
        assert store.framework_path("SwiftUI").is_file()

    async def test_missing_file_is_miss(self, tmp_path: Path) -> None:
        store = FileCache(tmp_path)
        assert await store.load_framework("Nope") is None
        assert await store.load_symbol("documentation/nope") is None


class TestCorruption:
    async def test_malformed_json_is_miss(self, tmp_path: Path) -> None:
        store = FileCache(tmp_path)
        store.framework_path("SwiftUI").write_text("{not json", encoding="utf-8")
        assert await store.load_framework("SwiftUI") is None

    async def test_schema_invalid_framework_is_miss(self, tmp_path: Path) -> None:
        store = FileCache(tmp_path)
        store.framework_path("SwiftUI").write_text(
            json.dumps({"metadata": {"role": "collection"}}), encoding="utf-8"
        )
        assert await store.load_framework("SwiftUI") is None

    async def test_schema_invalid_symbol_is_miss(self, tmp_path: Path) -> None:
        store = FileCache(tmp_path)
        path = "documentation/swiftui/view"
        store.symbol_path(path).write_text(json.dumps(["not", "an", "object"]), encoding="utf-8")
        assert await store.load_symbol(path) is None

    async def test_write_failure_is_not_raised(
        self, tmp_path: Path, framework_data: FrameworkData
    ) -> None:
        store = FileCache(tmp_path)
        with patch("appledocs.file_cache._write_pretty_json", side_effect=OSError("disk full")):
            await store.save_framework("SwiftUI", framework_data)
        assert not store.framework_path("SwiftUI").exists()


# ---------------------------------------------------------------------------
# Technologies
# ---------------------------------------------------------------------------


class TestTechnologies:
    async def test_round_trip_writes_bare_map(
        self, tmp_path: Path, technologies: dict[str, Technology]
    ) -> None:
        store = FileCache(tmp_path)
        await store.save_technologies(technologies)

        on_disk = json.loads(store.technologies_path.read_text(encoding="utf-8"))
        assert "references" not in on_disk
        assert set(on_disk) == set(technologies)

        loaded = await store.load_technologies()
        assert loaded == technologies

    async def test_accepts_references_wrapper(
        self, tmp_path: Path, technologies_payload: dict[str, Any]
    ) -> None:
        store = FileCache(tmp_path)
        store.technologies_path.write_text(json.dumps(technologies_payload), encoding="utf-8")

        loaded = await store.load_technologies()
        assert loaded is not None
        assert set(loaded) == set(technologies_payload["references"])

    async def test_empty_wrapper_is_miss(self, tmp_path: Path) -> None:
        store = FileCache(tmp_path)
        store.technologies_path.write_text(json.dumps({"references": {}}), encoding="utf-8")
        assert await store.load_technologies() is None

    async def test_empty_map_is_miss(self, tmp_path: Path) -> None:
        store = FileCache(tmp_path)
        store.technologies_path.write_text("{}", encoding="utf-8")
        assert await store.load_technologies() is None

    async def test_only_malformed_entries_is_miss(self, tmp_path: Path) -> None:
        store = FileCache(tmp_path)
        store.technologies_path.write_text(
            json.dumps({"x": {"identifier": "x"}, "y": {"title": "Y"}}), encoding="utf-8"
        )
        assert await store.load_technologies() is None

    async def test_corrupted_file_is_miss(self, tmp_path: Path) -> None:
        store = FileCache(tmp_path)
        store.technologies_path.write_text("[[[", encoding="utf-8")
        assert await store.load_technologies() is None


class TestParseTechnologies:
    def test_drops_malformed_entries(self, technologies_payload: dict[str, Any]) -> None:
        references = dict(technologies_payload["references"])
        references["broken"] = {"identifier": "broken", "title": 42, "url": "/x"}
        references["not-a-dict"] = "oops"

        parsed = parse_technologies(references)

        assert "broken" not in parsed
        assert "not-a-dict" not in parsed
        assert len(parsed) == len(technologies_payload["references"])

    def test_missing_kind_is_dropped(self) -> None:
        parsed = parse_technologies({"a": {"identifier": "a", "title": "A", "url": "/a"}})
        assert parsed == {}
