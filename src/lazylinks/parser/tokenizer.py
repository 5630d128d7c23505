"""Word tokenization for link scanning.

Tokens are maximal runs of word characters. A token is skipped when it
already sits inside explicit reference syntax, judged by a fixed two
character window on each side:

    [[Apple]]      -> no eligible tokens
    see Apple here -> "see", "Apple", "here"
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from typing import NamedTuple

WORD_PATTERN = re.compile(r"\w+")

OPEN_REFERENCE = "[["
CLOSE_REFERENCE = "]]"

# Width of the window checked on each side of a token
GUARD_WIDTH = 2


class Token(NamedTuple):
    """A word and its absolute offsets in the source text."""

    word: str
    start: int
    end: int


def iter_words(text: str, offset: int = 0) -> Iterator[Token]:
    """Yield every word in `text`, with offsets shifted by `offset`."""
    for match in WORD_PATTERN.finditer(text):
        yield Token(match.group(0), offset + match.start(), offset + match.end())


def is_inside_reference(source: str, start: int, end: int) -> bool:
    """Check whether the span [start, end) touches reference markers.

    Only the two characters before and after the span are inspected, so a
    marker further away (e.g. `[[Some Apple]]`) is not detected.
    """
    before = source[max(0, start - GUARD_WIDTH) : start]
    after = source[end : end + GUARD_WIDTH]
    return OPEN_REFERENCE in before or CLOSE_REFERENCE in after


def tokenize(text: str, offset: int = 0, source: str | None = None) -> Iterator[Token]:
    """Yield the tokens of `text` that are eligible for matching.

    Args:
        text: Span to tokenize (a whole document or a slice of one).
        offset: Position of `text` within `source`.
        source: Full text used for the reference guard. Defaults to `text`,
            which is only correct when `offset` is 0.

    Returns:
        A fresh iterator; call again to restart.
    """
    if source is None:
        source = text
    for token in iter_words(text, offset):
        if is_inside_reference(source, token.start, token.end):
            continue
        yield token


def word_at(line: str, column: int) -> Token | None:
    """Find the word under a cursor.

    A cursor touching either edge of a word counts as inside it, so
    `column` may equal the token's end offset.
    """
    for token in iter_words(line):
        if token.start <= column <= token.end:
            return token
    return None
