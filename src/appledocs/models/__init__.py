from __future__ import annotations

from appledocs.models.docs import (
    AbstractItem,
    ContentBlock,
    FrameworkData,
    InlineContent,
    PlatformInfo,
    ReferenceData,
    SymbolData,
    Technology,
    TopicSection,
)
from appledocs.models.index import (
    CacheEntry,
    FrameworkIndexEntry,
    IndexBuildSummary,
    IndexState,
    LocalSymbolIndexEntry,
    RankedReference,
    SearchResult,
)
from appledocs.models.tools import (
    CacheStatusOutput,
    ChooseTechnologyInput,
    ChooseTechnologyOutput,
    CurrentTechnologyOutput,
    DiscoverTechnologiesInput,
    DiscoverTechnologiesOutput,
    GetDocumentationInput,
    GetDocumentationOutput,
    SearchSymbolsInput,
    SearchSymbolsOutput,
    SymbolMatch,
    TechnologySummary,
    VersionOutput,
)

__all__ = [
    # documents
    "AbstractItem",
    "PlatformInfo",
    "InlineContent",
    "ContentBlock",
    "TopicSection",
    "ReferenceData",
    "Technology",
    "FrameworkData",
    "SymbolData",
    # index
    "CacheEntry",
    "IndexState",
    "IndexBuildSummary",
    "LocalSymbolIndexEntry",
    "FrameworkIndexEntry",
    "RankedReference",
    "SearchResult",
    # tools
    "TechnologySummary",
    "DiscoverTechnologiesInput",
    "DiscoverTechnologiesOutput",
    "ChooseTechnologyInput",
    "ChooseTechnologyOutput",
    "CurrentTechnologyOutput",
    "SearchSymbolsInput",
    "SearchSymbolsOutput",
    "SymbolMatch",
    "GetDocumentationInput",
    "GetDocumentationOutput",
    "CacheStatusOutput",
    "VersionOutput",
]
