"""Shared test fixtures for the lazylinks test suite.

Design:
- vault: isolated vault directory in a temp path
- runner / cli_invoke: CliRunner pointed at the vault
- doc(): quick in-memory SourceDocument builder
"""

import logging
from pathlib import Path

import pytest
from click.testing import CliRunner

from lazylinks._logging import PACKAGE_LOGGER
from lazylinks.cli import cli
from lazylinks.models import Heading, SourceDocument


# ─────────────────────────────────────────────────────────────────────────────
# Core Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep the caller's environment out of config discovery and logging.

    The CLI installs a stderr handler bound to whatever stream CliRunner
    provided; drop it after each test so the next run binds its own.
    """
    monkeypatch.delenv("LAZYLINKS_CONFIG", raising=False)
    monkeypatch.delenv("LAZYLINKS_VAULT", raising=False)
    monkeypatch.delenv("LAZYLINKS_LOG_LEVEL", raising=False)

    yield

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def runner() -> CliRunner:
    """CLI runner with isolated environment."""
    return CliRunner()


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    """Create an empty vault directory."""
    root = tmp_path / "vault"
    root.mkdir()
    return root


@pytest.fixture
def cli_invoke(runner: CliRunner, vault: Path):
    """Helper for invoking the CLI against the test vault.

    Usage:
        def test_scan(cli_invoke):
            result = cli_invoke(["scan", "note.md"])
            assert result.exit_code == 0
    """

    def _invoke(args: list[str], input: str | None = None):
        return runner.invoke(cli, ["--vault", str(vault), *args], input=input, obj={})

    return _invoke


# ─────────────────────────────────────────────────────────────────────────────
# Helper Functions (for test code, not fixtures)
# ─────────────────────────────────────────────────────────────────────────────


def create_note(
    vault_root: Path,
    path: str,
    content: str = "",
    aliases: list[str] | str | None = None,
    ignore_linking: bool | None = None,
) -> Path:
    """Write a markdown note with optional frontmatter.

    Usage in tests:
        from conftest import create_note
        create_note(vault, "fruit/Apple.md", "# Apple", aliases=["Pomme"])
    """
    note_path = vault_root / path
    note_path.parent.mkdir(parents=True, exist_ok=True)

    meta_lines = []
    if aliases is not None:
        if isinstance(aliases, str):
            meta_lines.append(f"aliases: {aliases}")
        else:
            meta_lines.append("aliases:")
            meta_lines.extend(f"  - {alias}" for alias in aliases)
    if ignore_linking is not None:
        meta_lines.append(f"ignore_linking: {'true' if ignore_linking else 'false'}")

    if meta_lines:
        text = "---\n" + "\n".join(meta_lines) + "\n---\n\n" + content
    else:
        text = content

    note_path.write_text(text, encoding="utf-8")
    return note_path


def doc(
    basename: str,
    aliases=None,
    headings: list[tuple[str, int]] | None = None,
    ignore_linking: bool = False,
    document_id: str | None = None,
) -> SourceDocument:
    """Build an in-memory document."""
    return SourceDocument(
        document_id=document_id or f"{basename}.md",
        basename=basename,
        aliases=aliases,
        headings=[Heading(text=text, level=level) for text, level in headings or []],
        ignore_linking=ignore_linking,
    )
