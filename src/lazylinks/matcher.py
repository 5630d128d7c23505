"""Resolve a single word to its best link target.

Exact matches win outright. Otherwise the word's substrings are searched,
longest first and leftmost first among equal lengths, and the first one
found in the index whose position (start, end or middle of the word) is
enabled in the config is returned. A document's own names are never
matched, at any substring length.
"""

from __future__ import annotations

from collections.abc import Container, Mapping

from .config import LinkerConfig
from .models import LinkTarget, MatchResult


def resolve(
    word: str,
    self_names: Container[str],
    index: Mapping[str, LinkTarget],
    config: LinkerConfig,
) -> MatchResult:
    """Find the best match for `word`.

    Args:
        word: Token as it appears in the text.
        self_names: Lowercased names of the document being scanned.
        index: Lowercased name to target mapping.
        config: Partial matching options.

    Returns:
        The match, or MatchResult.none().
    """
    lower = word.lower()

    # A self-name falls through to the partial search instead of failing
    if lower in index and lower not in self_names:
        return MatchResult(target=index[lower], is_partial=False, matched_string=lower)

    if not config.partial_matching:
        return MatchResult.none()

    min_len = config.min_match_length
    if len(word) < min_len:
        return MatchResult.none()

    size = len(lower)
    for length in range(size - 1, min_len - 1, -1):
        for start in range(size - length + 1):
            sub = lower[start : start + length]

            if sub in self_names:
                continue
            if sub not in index:
                continue

            is_start = start == 0
            is_end = start + length == size
            is_middle = not is_start and not is_end

            if (
                (is_start and config.match_start)
                or (is_end and config.match_end)
                or (is_middle and config.match_middle)
            ):
                return MatchResult(target=index[sub], is_partial=True, matched_string=sub)

    return MatchResult.none()
