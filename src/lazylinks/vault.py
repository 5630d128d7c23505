"""Document store backed by a directory of markdown notes."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from fnmatch import fnmatch
from pathlib import Path

from .config import IGNORED_DIRS
from .models import SourceDocument
from .parser.document import ParseError, parse_document

log = logging.getLogger(__name__)


def _is_hidden(rel_path: Path) -> bool:
    return any(part in IGNORED_DIRS or part.startswith(".") for part in rel_path.parts[:-1])


def iter_markdown_files(root: Path, exclude: Sequence[str] = ()) -> Iterator[Path]:
    """Yield markdown files under `root`, sorted by path.

    Args:
        root: Vault directory.
        exclude: Glob patterns (matched against the relative POSIX path).
    """
    if not root.exists() or not root.is_dir():
        return

    for md_file in sorted(root.rglob("*.md")):
        rel_path = md_file.relative_to(root)
        if _is_hidden(rel_path):
            continue
        rel_str = rel_path.as_posix()
        if any(fnmatch(rel_str, pattern) for pattern in exclude):
            continue
        yield md_file


def load_documents(root: Path, exclude: Sequence[str] = ()) -> list[SourceDocument]:
    """Load every parseable note in the vault.

    Notes that cannot be read or parsed are skipped for this pass; the next
    rebuild picks them up once they are fixed.

    Args:
        root: Vault directory.
        exclude: Glob patterns of notes to leave out.

    Returns:
        Documents in path order.
    """
    root = Path(root)
    documents: list[SourceDocument] = []
    skipped = 0

    for md_file in iter_markdown_files(root, exclude):
        try:
            documents.append(parse_document(md_file, root=root))
        except ParseError as e:
            skipped += 1
            log.debug("Skipping %s during index build: %s", md_file, e.message)

    if skipped:
        log.info("Skipped %d unparseable notes in %s", skipped, root)
    return documents


def resolve_note_path(root: Path, note: str) -> Path:
    """Resolve a note argument (relative or absolute, `.md` optional).

    Raises:
        FileNotFoundError: If no such note exists.
    """
    candidate = Path(note)
    if not candidate.is_absolute():
        candidate = Path(root) / candidate
    if candidate.suffix.lower() != ".md" and not candidate.exists():
        candidate = candidate.with_name(candidate.name + ".md")
    if not candidate.is_file():
        raise FileNotFoundError(f"Note not found: {note}")
    return candidate


def find_document(documents: Sequence[SourceDocument], document_id: str) -> SourceDocument | None:
    """Look up a loaded document by id."""
    for document in documents:
        if document.document_id == document_id:
            return document
    return None
