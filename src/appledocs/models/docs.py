"""Documentation payload models.

Upstream JSON is camelCase; fields are snake_case with camelCase aliases.
Every model keeps unknown fields (``extra="allow"``) so newer upstream
payloads still validate. ``dump_document`` writes back exactly the fields
that were present on input.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Tag
from pydantic.alias_generators import to_camel


class DocModel(BaseModel):
    model_config = ConfigDict(
        extra="allow",
        alias_generator=to_camel,
        populate_by_name=True,
    )


def dump_document(model: BaseModel) -> dict[str, Any]:
    """Serialise a payload model back to its upstream JSON shape."""
    return model.model_dump(mode="json", by_alias=True, exclude_unset=True)


# ---------------------------------------------------------------------------
# Shared leaves
# ---------------------------------------------------------------------------


class PlatformInfo(DocModel):
    name: str
    introduced_at: str | None = None
    beta: bool | None = None
    deprecated: bool | None = None
    unavailable: bool | None = None


class AbstractItem(DocModel):
    type: str
    text: str | None = None


class Fragment(DocModel):
    kind: str
    text: str
    precise_identifier: str | None = None


class DeclarationToken(DocModel):
    kind: str
    text: str
    identifier: str | None = None
    precise_identifier: str | None = None


class TopicSection(DocModel):
    title: str
    identifiers: list[str] = []
    anchor: str | None = None


# ---------------------------------------------------------------------------
# Rich text
# ---------------------------------------------------------------------------


class InlineContent(DocModel):
    type: str
    text: str | None = None
    code: str | None = None
    identifier: str | None = None
    inline_content: list[InlineContent] | None = None


class ContentBlock(DocModel):
    """A block of rich text; ``content`` and ``items`` nest further blocks."""

    type: str
    inline_content: list[InlineContent] | None = None
    text: str | None = None
    level: int | None = None
    anchor: str | None = None
    syntax: str | None = None
    code: list[str] | None = None
    items: list[Any] | None = None
    style: str | None = None
    content: list[ContentBlock] | None = None


# ---------------------------------------------------------------------------
# Primary content sections
# ---------------------------------------------------------------------------


class Declaration(DocModel):
    languages: list[str] = []
    platforms: list[str] | None = None
    tokens: list[DeclarationToken] = []


class ParameterContent(DocModel):
    name: str
    content: list[ContentBlock] = []


class DeclarationsSection(DocModel):
    kind: Literal["declarations"]
    declarations: list[Declaration] = []


class ParametersSection(DocModel):
    kind: Literal["parameters"]
    parameters: list[ParameterContent] = []


class ContentSection(DocModel):
    kind: Literal["content"]
    content: list[ContentBlock] = []


class MentionsSection(DocModel):
    kind: Literal["mentions"]
    mentions: list[str] = []


class OtherSection(DocModel):
    """Any section kind not modelled above."""

    kind: str


_SECTION_KINDS = frozenset({"declarations", "parameters", "content", "mentions"})


def _section_tag(value: Any) -> str:
    kind = value.get("kind") if isinstance(value, dict) else getattr(value, "kind", None)
    return kind if kind in _SECTION_KINDS else "other"


PrimaryContentSection = Annotated[
    Union[
        Annotated[DeclarationsSection, Tag("declarations")],
        Annotated[ParametersSection, Tag("parameters")],
        Annotated[ContentSection, Tag("content")],
        Annotated[MentionsSection, Tag("mentions")],
        Annotated[OtherSection, Tag("other")],
    ],
    Discriminator(_section_tag),
]


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


class ReferenceData(DocModel):
    type: str | None = None
    identifier: str | None = None
    title: str | None = None
    kind: str | None = None
    role: str | None = None
    abstract: list[AbstractItem] | None = None
    platforms: list[PlatformInfo] | None = None
    url: str | None = None


class Technology(DocModel):
    identifier: str
    title: str
    url: str
    kind: str
    role: str
    abstract: list[AbstractItem] = []

    @property
    def is_framework(self) -> bool:
        return self.kind == "symbol" and self.role == "collection"


class FrameworkMetadata(DocModel):
    title: str
    role: str | None = None
    url: str | None = None
    platforms: list[PlatformInfo] | None = None


class FrameworkData(DocModel):
    metadata: FrameworkMetadata
    abstract: list[AbstractItem] = []
    references: dict[str, ReferenceData] = {}
    topic_sections: list[TopicSection] = []


class SymbolMetadata(DocModel):
    title: str
    symbol_kind: str | None = None
    role_heading: str | None = None
    role: str | None = None
    url: str | None = None
    fragments: list[Fragment] | None = None
    platforms: list[PlatformInfo] | None = None


class SymbolData(DocModel):
    metadata: SymbolMetadata
    abstract: list[AbstractItem] = []
    primary_content_sections: list[PrimaryContentSection] = []
    references: dict[str, ReferenceData] = {}
    topic_sections: list[TopicSection] = []
