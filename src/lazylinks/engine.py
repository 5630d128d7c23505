"""Link engine: holds the active index and serves scan requests.

The engine owns exactly one piece of changing state, the current
`LinkIndex`. `rebuild()` computes a new index and swaps it in with a single
assignment, so any reader sees either the old or the new index in full.
Every other operation takes the reference once and works on that snapshot.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Literal

from .config import LINK_CLASS, MUTED_LINK_CLASS, LinkerConfig
from .index import EMPTY_INDEX, LinkIndex, build_index, self_names
from .matcher import resolve
from .materialize import materialize
from .models import LinkSpan, LinkSuggestion, Materialization, MatchResult, SourceDocument
from .parser.document import non_prose_ranges
from .parser.tokenizer import is_inside_reference, tokenize, word_at

log = logging.getLogger(__name__)

ScanMode = Literal["edit", "reading"]


class LinkEngine:
    """Resolve plain-text mentions against the current document index."""

    def __init__(self, config: LinkerConfig | None = None) -> None:
        self.config = config or LinkerConfig()
        self._index: LinkIndex = EMPTY_INDEX

    @property
    def index(self) -> LinkIndex:
        """The active index snapshot."""
        return self._index

    def rebuild(self, documents: Iterable[SourceDocument]) -> LinkIndex:
        """Rebuild the index from a full document snapshot and activate it."""
        log.debug("Rebuilding index...")
        index = build_index(documents, self.config)
        self._index = index
        return index

    def resolve(self, word: str, source: SourceDocument | None = None) -> MatchResult:
        """Resolve one word in the context of `source`."""
        return resolve(word, self_names(source), self._index, self.config)

    def scan(
        self,
        text: str,
        source: SourceDocument | None = None,
        ranges: Sequence[tuple[int, int]] | None = None,
        mode: ScanMode = "edit",
    ) -> list[LinkSpan]:
        """Find every linkable mention in `text`.

        Args:
            text: Full text of the document being viewed.
            source: Document the text belongs to, for self-name exclusion.
            ranges: Visible (start, end) slices of `text`. Defaults to all of it.
            mode: "edit" mutes repeats of an already-seen match. "reading"
                mutes only partial matches, skips code and markdown link
                text the way a rendered view would, and requires reading
                mode to be enabled in the config.

        Returns:
            Spans in text order.
        """
        if mode == "reading" and not self.config.enable_reading_mode:
            return []

        index = self._index
        if not index:
            return []

        config = self.config
        names = self_names(source)
        if ranges is None:
            ranges = [(0, len(text))]

        skipped = non_prose_ranges(text) if mode == "reading" else []
        spans: list[LinkSpan] = []
        seen: set[str] = set()

        for range_start, range_end in ranges:
            chunk = text[range_start:range_end]
            for token in tokenize(chunk, offset=range_start, source=text):
                if any(start <= token.start < end for start, end in skipped):
                    continue
                result = resolve(token.word, names, index, config)
                if result.target is None:
                    continue

                css_class = LINK_CLASS
                if result.is_partial:
                    css_class = MUTED_LINK_CLASS
                elif mode == "edit":
                    if result.matched_string in seen:
                        css_class = MUTED_LINK_CLASS
                    seen.add(result.matched_string)

                spans.append(
                    LinkSpan(
                        start=token.start,
                        end=token.end,
                        word=token.word,
                        css_class=css_class,
                        link_target=result.target.basename,
                        matched_string=result.matched_string,
                        is_partial=result.is_partial,
                    )
                )

        return spans

    def suggest(
        self,
        line: str,
        column: int,
        source: SourceDocument | None = None,
    ) -> LinkSuggestion | None:
        """Offer to link the word under the cursor.

        Returns None when the cursor is not on a plain word (words already
        inside `[[...]]` count as linked) or nothing matches. A match that
        points back at the open document is not offered either.
        """
        token = word_at(line, column)
        if token is None or is_inside_reference(line, token.start, token.end):
            return None

        result = self.resolve(token.word, source)
        target = result.target
        if target is None:
            return None
        if source is not None and target.document_id == source.document_id:
            return None

        if target.subpath:
            label = f'Create link to "{target.basename} > {target.subpath}"'
        else:
            label = f'Create link to "{target.basename}"'

        return LinkSuggestion(
            word=token.word,
            start=token.start,
            end=token.end,
            target=target,
            label=label,
        )

    def convert(self, suggestion: LinkSuggestion, line_offset: int = 0) -> Materialization:
        """Materialize a confirmed suggestion.

        Args:
            suggestion: Offer returned by `suggest()`.
            line_offset: Offset of the suggestion's line within the full text.
        """
        return Materialization(
            start=line_offset + suggestion.start,
            end=line_offset + suggestion.end,
            replacement=materialize(suggestion.word, suggestion.target),
        )

    def link_at(
        self,
        text: str,
        line: int,
        column: int,
        source: SourceDocument | None = None,
    ) -> tuple[str, Materialization] | None:
        """Convert the word at (line, column) of `text` into a wikilink.

        Lines and columns are zero-based.

        Returns:
            (new_text, materialization), or None when nothing can be linked.
        """
        # Lines end at "\n" only, matching the line numbers `scan` reports
        lines = text.split("\n")
        if line < 0 or line >= len(lines):
            return None

        line_offset = sum(len(previous) + 1 for previous in lines[:line])
        line_text = lines[line].removesuffix("\r")

        suggestion = self.suggest(line_text, column, source)
        if suggestion is None:
            return None

        change = self.convert(suggestion, line_offset=line_offset)
        log.debug("Linked %r as %s", suggestion.word, change.replacement)
        return change.apply(text), change
