from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator


def _strip_optional(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


class TechnologySummary(BaseModel):
    title: str
    identifier: str
    url: str
    description: str = ""


# ---------------------------------------------------------------------------
# discover_technologies
# ---------------------------------------------------------------------------


class DiscoverTechnologiesInput(BaseModel):
    query: str | None = Field(default=None, max_length=200)
    page: int = 1
    page_size: int = 25

    @field_validator("query")
    @classmethod
    def normalise_query(cls, v: str | None) -> str | None:
        return _strip_optional(v)


class DiscoverTechnologiesOutput(BaseModel):
    query: str | None
    total_frameworks: int
    total_matches: int
    page: int
    total_pages: int
    page_size: int
    technologies: list[TechnologySummary]
    content: str


# ---------------------------------------------------------------------------
# choose_technology / current_technology
# ---------------------------------------------------------------------------


class ChooseTechnologyInput(BaseModel):
    name: str | None = Field(default=None, max_length=200)
    identifier: str | None = Field(default=None, max_length=500)

    @field_validator("name", "identifier")
    @classmethod
    def normalise_terms(cls, v: str | None) -> str | None:
        return _strip_optional(v)

    @model_validator(mode="after")
    def require_name_or_identifier(self) -> ChooseTechnologyInput:
        if self.name is None and self.identifier is None:
            raise ValueError("Provide a technology name or identifier")
        return self


class ChooseTechnologyOutput(BaseModel):
    technology: TechnologySummary
    platforms: str | None = None
    symbol_count: int | None = None
    categories: list[str] = []
    content: str


class CurrentTechnologyOutput(BaseModel):
    technology: TechnologySummary
    content: str


# ---------------------------------------------------------------------------
# search_symbols
# ---------------------------------------------------------------------------


class SearchSymbolsInput(BaseModel):
    query: str = Field(min_length=1, max_length=500)
    max_results: int = Field(default=20, ge=1, le=100)
    platform: str | None = Field(default=None, max_length=100)
    symbol_type: str | None = Field(default=None, max_length=100)

    @field_validator("query")
    @classmethod
    def strip_query(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("query must not be blank")
        return v

    @field_validator("platform", "symbol_type")
    @classmethod
    def normalise_filters(cls, v: str | None) -> str | None:
        return _strip_optional(v)


class SymbolMatch(BaseModel):
    title: str
    path: str
    kind: str
    abstract: str
    platforms: list[str]
    score: int


class SearchSymbolsOutput(BaseModel):
    technology: str
    query: str
    total_indexed: int
    index_status: Literal["comprehensive", "limited", "unavailable"]
    fallback_used: bool
    matches: list[SymbolMatch]
    content: str


# ---------------------------------------------------------------------------
# get_documentation
# ---------------------------------------------------------------------------


class GetDocumentationInput(BaseModel):
    path: str = Field(min_length=1, max_length=1000)

    @field_validator("path")
    @classmethod
    def strip_path(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("path must not be blank")
        return v


class GetDocumentationOutput(BaseModel):
    title: str
    technology: str
    kind: str
    content: str


# ---------------------------------------------------------------------------
# cache_status / get_version
# ---------------------------------------------------------------------------


class CacheStatusOutput(BaseModel):
    location: str
    exists: bool
    total_files: int = 0
    total_size_bytes: int = 0
    frameworks_cached: int = 0
    symbols_cached: int = 0
    frameworks: list[str] = []
    content: str


class VersionOutput(BaseModel):
    name: str
    version: str
    description: str
    content: str
