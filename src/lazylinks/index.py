"""Name index for resolving plain-text mentions to documents.

The index maps lowercased names (document basenames, aliases and,
optionally, heading texts) to a single `LinkTarget`. It is built wholesale
from a snapshot of the documents and never mutated afterwards; a rebuild
produces a new `LinkIndex` that replaces the old one.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import NamedTuple

from .config import LinkerConfig
from .models import LinkTarget, SourceDocument

log = logging.getLogger(__name__)


class IndexStats(NamedTuple):
    """Counters collected while building an index."""

    documents: int = 0
    ignored: int = 0
    aliases: int = 0
    headers: int = 0


class LinkIndex(Mapping[str, LinkTarget]):
    """Read-only mapping from lowercased name to link target."""

    __slots__ = ("_entries", "stats")

    def __init__(
        self,
        entries: Mapping[str, LinkTarget] | None = None,
        stats: IndexStats | None = None,
    ) -> None:
        self._entries = MappingProxyType(dict(entries or {}))
        self.stats = stats or IndexStats()

    def __getitem__(self, key: str) -> LinkTarget:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __repr__(self) -> str:
        return f"LinkIndex({len(self)} entries)"


EMPTY_INDEX = LinkIndex()


def self_names(document: SourceDocument | None) -> frozenset[str]:
    """Names a document must never be matched against in its own text.

    Covers the basename, every string alias and every heading, regardless
    of which heading levels are indexed.
    """
    if document is None:
        return frozenset()

    names = {document.basename.lower()}
    names.update(alias.lower() for alias in document.string_aliases)
    names.update(heading.text.lower() for heading in document.headings)
    return frozenset(names)


def build_index(documents: Iterable[SourceDocument], config: LinkerConfig) -> LinkIndex:
    """Build a name index from a snapshot of documents.

    Per document, headings are inserted first, then aliases, then the
    basename, so the basename wins over its own headings and aliases. A later
    document overwrites an earlier one sharing the same key.

    Args:
        documents: All known documents, in store iteration order.
        config: Matching configuration (header indexing, minimum length).

    Returns:
        A new LinkIndex.
    """
    entries: dict[str, LinkTarget] = {}
    documents_seen = 0
    ignored = 0
    alias_count = 0
    header_count = 0

    for document in documents:
        documents_seen += 1
        if document.ignore_linking:
            ignored += 1
            continue

        if config.include_headers:
            for heading in document.headings:
                if not config.header_levels.is_enabled(heading.level):
                    continue
                if len(heading.text) < config.min_match_length:
                    continue
                entries[heading.text.lower()] = LinkTarget(
                    document_id=document.document_id,
                    basename=document.basename,
                    is_alias=False,
                    actual_name=heading.text,
                    subpath=f"#{heading.text}",
                )
                header_count += 1

        for alias in document.string_aliases:
            entries[alias.lower()] = LinkTarget(
                document_id=document.document_id,
                basename=document.basename,
                is_alias=True,
                actual_name=alias,
            )
            alias_count += 1

        entries[document.basename.lower()] = LinkTarget(
            document_id=document.document_id,
            basename=document.basename,
            is_alias=False,
            actual_name=document.basename,
        )

    stats = IndexStats(
        documents=documents_seen - ignored,
        ignored=ignored,
        aliases=alias_count,
        headers=header_count,
    )
    log.debug(
        "Index rebuilt. Files: %d, Ignored: %d, Aliases: %d, Headers: %d",
        stats.documents,
        stats.ignored,
        stats.aliases,
        stats.headers,
    )
    return LinkIndex(entries, stats)
