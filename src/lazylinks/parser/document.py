"""Markdown document parsing with YAML frontmatter support.

Turns a markdown note into the `SourceDocument` the index builder reads:
basename from the file name, `aliases` and `ignore_linking` from the
frontmatter, and ATX headings from the body.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import frontmatter

from ..models import Heading, SourceDocument

# ATX heading: 1-6 hashes, whitespace, text, optional closing hashes
HEADING_PATTERN = re.compile(r"^ {0,3}(#{1,6})[ \t]+(.+?)(?:[ \t]+#+)?[ \t]*$")

# Opening/closing line of a fenced code block
FENCE_PATTERN = re.compile(r"^ {0,3}(`{3,}|~{3,})")

# Inline code span: matching runs of backticks
CODE_SPAN_PATTERN = re.compile(r"(`+)(?!`).+?(?<!`)\1(?!`)", re.DOTALL)

# Inline link or image: [text](url)
INLINE_LINK_PATTERN = re.compile(r"!?\[[^\]\n]*\]\([^)\n]*\)")


class ParseError(Exception):
    """Raised when a document cannot be parsed."""

    def __init__(self, path: Path | str, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


def extract_headings(content: str) -> list[Heading]:
    """Extract ATX headings, ignoring anything inside fenced code blocks.

    Args:
        content: Markdown body (without frontmatter).

    Returns:
        Headings in document order.
    """
    headings: list[Heading] = []
    fence: str | None = None

    for line in content.splitlines():
        fence_match = FENCE_PATTERN.match(line)
        if fence_match:
            marker = fence_match.group(1)
            if fence is None:
                fence = marker
            elif marker[0] == fence[0] and len(marker) >= len(fence):
                fence = None
            continue

        if fence is not None:
            continue

        match = HEADING_PATTERN.match(line)
        if match:
            text = match.group(2).strip()
            if text:
                headings.append(Heading(text=text, level=len(match.group(1))))

    return headings


def document_from_metadata(
    metadata: dict[str, Any],
    content: str,
    document_id: str,
    basename: str,
) -> SourceDocument:
    """Build a SourceDocument from parsed frontmatter and body."""
    return SourceDocument(
        document_id=document_id,
        basename=basename,
        aliases=metadata.get("aliases"),
        headings=extract_headings(content),
        # Only a literal boolean true opts out
        ignore_linking=metadata.get("ignore_linking") is True,
    )


def parse_text(text: str, document_id: str, basename: str) -> SourceDocument:
    """Parse markdown text into a SourceDocument.

    Raises:
        ParseError: If the frontmatter is not valid YAML.
    """
    try:
        post = frontmatter.loads(text)
    except Exception as e:
        raise ParseError(document_id, f"Failed to parse frontmatter: {e}") from e

    metadata = post.metadata if isinstance(post.metadata, dict) else {}
    return document_from_metadata(metadata, post.content, document_id, basename)


def parse_document(path: Path, root: Path | None = None) -> SourceDocument:
    """Parse a markdown file into a SourceDocument.

    Args:
        path: Markdown file.
        root: Vault root; the document id is the POSIX path relative to it.

    Returns:
        The parsed document.

    Raises:
        ParseError: If the file cannot be read or has invalid frontmatter.
    """
    if not path.is_file():
        raise ParseError(path, "File does not exist")

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(path, f"Failed to read file: {e}") from e

    if root is not None:
        document_id = path.relative_to(root).as_posix()
    else:
        document_id = path.as_posix()

    return parse_text(text, document_id, path.stem)


def split_frontmatter(text: str) -> tuple[str, int]:
    """Return the body of a note and its offset within the full text.

    Frontmatter is not prose and must not be scanned for mentions, but
    offsets reported to callers have to refer to the original text.
    """
    if not text.startswith("---"):
        return text, 0

    lines = text.splitlines(keepends=True)
    if not lines or lines[0].strip() != "---":
        return text, 0

    offset = len(lines[0])
    for line in lines[1:]:
        offset += len(line)
        if line.strip() in ("---", "..."):
            return text[offset:], offset

    return text, 0


def non_prose_ranges(text: str) -> list[tuple[int, int]]:
    """Find the (start, end) spans a rendered view does not show as prose.

    Covers fenced code blocks (an unclosed fence runs to the end), inline
    code spans and inline links, whose text renders as a link already.
    """
    ranges: list[tuple[int, int]] = []

    fence: str | None = None
    fence_start = 0
    offset = 0
    for line in text.split("\n"):
        fence_match = FENCE_PATTERN.match(line)
        if fence_match:
            marker = fence_match.group(1)
            if fence is None:
                fence = marker
                fence_start = offset
            elif marker[0] == fence[0] and len(marker) >= len(fence):
                ranges.append((fence_start, offset + len(line)))
                fence = None
        offset += len(line) + 1
    if fence is not None:
        ranges.append((fence_start, len(text)))

    for pattern in (CODE_SPAN_PATTERN, INLINE_LINK_PATTERN):
        ranges.extend(match.span() for match in pattern.finditer(text))

    return sorted(ranges)
