"""Pydantic models for the link-resolution engine."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Heading(BaseModel):
    """A section heading inside a document."""

    model_config = ConfigDict(frozen=True)

    text: str
    level: int = Field(ge=1, le=6)


class SourceDocument(BaseModel):
    """One document as seen by the index builder.

    `aliases` mirrors raw frontmatter: a single scalar is wrapped in a list,
    and non-string values are kept so consumers can skip them.
    """

    model_config = ConfigDict(frozen=True)

    document_id: str  # Stable identity, e.g. vault-relative path
    basename: str  # File name without extension
    aliases: list[Any] = Field(default_factory=list)
    headings: list[Heading] = Field(default_factory=list)
    ignore_linking: bool = False

    @field_validator("aliases", mode="before")
    @classmethod
    def _normalize_aliases(cls, value: Any) -> list[Any]:
        if value is None:
            return []
        if isinstance(value, (list, tuple)):
            return list(value)
        return [value]

    @property
    def string_aliases(self) -> list[str]:
        return [alias for alias in self.aliases if isinstance(alias, str)]


class LinkTarget(BaseModel):
    """An addressable destination: a whole document or one of its sections."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    basename: str  # Link path of the owning document
    is_alias: bool = False
    actual_name: str  # Canonical spelling of the indexed name
    subpath: str | None = None  # e.g. "#Staff"


class MatchResult(BaseModel):
    """Outcome of resolving one word against the index."""

    model_config = ConfigDict(frozen=True)

    target: LinkTarget | None = None
    is_partial: bool = False
    matched_string: str = ""

    @classmethod
    def none(cls) -> "MatchResult":
        return _NO_MATCH

    def __bool__(self) -> bool:
        return self.target is not None


_NO_MATCH = MatchResult()


class LinkSpan(BaseModel):
    """A decorated range on a text surface."""

    start: int
    end: int
    word: str
    css_class: str
    link_target: str  # Basename of the target document
    matched_string: str
    is_partial: bool = False

    @property
    def attributes(self) -> dict[str, str]:
        return {"data-link-target": self.link_target}


class LinkSuggestion(BaseModel):
    """A context-menu offer to convert the word under the cursor."""

    word: str
    start: int
    end: int
    target: LinkTarget
    label: str


class Materialization(BaseModel):
    """Replacement to apply to the editable text."""

    start: int
    end: int
    replacement: str

    def apply(self, text: str) -> str:
        return text[: self.start] + self.replacement + text[self.end :]
