#!/usr/bin/env python3
"""
lazylinks: find unlinked mentions of notes and turn them into wikilinks

Usage:
    lazylinks index                     # Show indexed names
    lazylinks resolve Pineapple         # Resolve one word
    lazylinks scan notes/today.md       # List linkable mentions in a note
    lazylinks link notes/today.md -l 3 -c 10   # Link the word at a cursor
    lazylinks watch                     # Keep the index fresh while notes change
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any, NoReturn

import click
from click.exceptions import ClickException, UsageError

from . import __version__ as LAZYLINKS_VERSION
from ._logging import configure_logging, set_debug
from .config import (
    CONFIG_ENV_VAR,
    CONFIG_FILENAME,
    DEFAULT_DEBOUNCE_SECONDS,
    ConfigurationError,
    LinkerConfig,
    load_config,
    save_config,
)
from .engine import LinkEngine
from .models import SourceDocument
from .parser.document import ParseError, parse_document, split_frontmatter
from .vault import load_documents, resolve_note_path

log = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Errors
# ─────────────────────────────────────────────────────────────────────────────


class CliError(ClickException):
    """A command failure carrying a machine-readable code."""

    def __init__(self, message: str, code: str = "CLI_ERROR") -> None:
        super().__init__(message)
        self.code = code


def format_json_error(code: str, message: str) -> str:
    """Format an error as JSON for --json-errors output."""
    return json.dumps({"error": {"code": code, "message": message}})


def get_error_code_for_exception(exc: Exception) -> str:
    """Map Click exceptions to error codes."""
    if isinstance(exc, CliError):
        return exc.code
    elif isinstance(exc, click.BadParameter):
        return "INVALID_ARGUMENT"
    elif isinstance(exc, click.MissingParameter):
        return "MISSING_ARGUMENT"
    elif isinstance(exc, click.NoSuchOption):
        return "UNKNOWN_OPTION"
    elif isinstance(exc, UsageError):
        return "USAGE_ERROR"
    return "CLI_ERROR"


class JsonErrorGroup(click.Group):
    """Click group that prints errors as JSON when --json-errors is set."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except ClickException as e:
            if ctx.params.get("json_errors"):
                code = get_error_code_for_exception(e)
                click.echo(format_json_error(code, e.format_message()), err=True)
                raise SystemExit(1)
            raise

    def main(
        self,
        args: Sequence[str] | None = None,
        prog_name: str | None = None,
        complete_var: str | None = None,
        standalone_mode: bool = True,
        **extra: Any,
    ) -> Any:
        """Catch argument parsing errors too when --json-errors is given."""
        argv = list(args) if args is not None else list(sys.argv[1:])

        if "--json-errors" not in argv:
            return super().main(args, prog_name, complete_var, standalone_mode, **extra)

        # Accept the flag anywhere on the command line
        argv = ["--json-errors"] + [a for a in argv if a != "--json-errors"]

        try:
            return super().main(argv, prog_name, complete_var, standalone_mode=False, **extra)
        except ClickException as e:
            code = get_error_code_for_exception(e)
            click.echo(format_json_error(code, e.format_message()), err=True)
            raise SystemExit(1)


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────


def output(data, as_json: bool = False):
    """Output data as JSON or formatted text."""
    if as_json:
        click.echo(json.dumps(data, indent=2, default=str))
    else:
        click.echo(data)


def format_table(rows: list[dict], columns: list[str], max_widths: dict | None = None) -> str:
    """Format rows as a simple table."""
    if not rows:
        return ""

    max_widths = max_widths or {}
    widths = {col: len(col) for col in columns}

    def cell(row: dict, col: str) -> str:
        val = str(row.get(col, ""))
        limit = max_widths.get(col, 50)
        if len(val) > limit:
            val = val[: limit - 3] + "..."
        return val

    for row in rows:
        for col in columns:
            widths[col] = max(widths[col], len(cell(row, col)))

    lines = [
        "  ".join(col.upper().ljust(widths[col]) for col in columns),
        "  ".join("-" * widths[col] for col in columns),
    ]
    for row in rows:
        lines.append("  ".join(cell(row, col).ljust(widths[col]) for col in columns).rstrip())

    return "\n".join(lines)


def _fail(message: str, code: str) -> NoReturn:
    raise CliError(message, code=code)


def _vault_root(ctx: click.Context) -> Path:
    return ctx.obj["vault"]


def _get_config(ctx: click.Context) -> LinkerConfig:
    if "config" not in ctx.obj:
        try:
            config = load_config(ctx.obj.get("config_path"), vault_root=_vault_root(ctx))
        except ConfigurationError as e:
            _fail(str(e), "CONFIG_ERROR")
        set_debug(config.debug_mode)
        ctx.obj["config"] = config
    return ctx.obj["config"]


def _load_engine(ctx: click.Context) -> tuple[LinkEngine, list[SourceDocument]]:
    root = _vault_root(ctx)
    if not root.is_dir():
        _fail(f"Vault not found: {root}", "NOT_FOUND")

    engine = LinkEngine(_get_config(ctx))
    documents = load_documents(root)
    engine.rebuild(documents)
    return engine, documents


def _load_note(ctx: click.Context, note: str) -> tuple[Path, str, SourceDocument]:
    root = _vault_root(ctx)
    try:
        path = resolve_note_path(root, note)
    except FileNotFoundError as e:
        _fail(str(e), "NOT_FOUND")

    try:
        path.relative_to(root)
        note_root: Path | None = root
    except ValueError:
        note_root = None

    try:
        document = parse_document(path, root=note_root)
    except ParseError as e:
        _fail(str(e), "PARSE_ERROR")

    # newline="" keeps CRLF intact so a rewrite only touches the linked span
    with path.open(encoding="utf-8", newline="") as f:
        text = f.read()

    return path, text, document


def _line_col(text: str, offset: int) -> tuple[int, int]:
    """1-based line and column of an offset."""
    line = text.count("\n", 0, offset) + 1
    column = offset - (text.rfind("\n", 0, offset) + 1) + 1
    return line, column


# ─────────────────────────────────────────────────────────────────────────────
# Main CLI Group
# ─────────────────────────────────────────────────────────────────────────────


@click.group(cls=JsonErrorGroup)
@click.version_option(version=LAZYLINKS_VERSION, prog_name="lazylinks")
@click.option(
    "--vault",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="LAZYLINKS_VAULT",
    default=".",
    show_default=True,
    help="Vault directory containing markdown notes",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar=CONFIG_ENV_VAR,
    help=f"Config file (default: <vault>/{CONFIG_FILENAME})",
)
@click.option(
    "--json-errors",
    "json_errors",
    is_flag=True,
    help="Output errors as JSON (for programmatic use)",
)
@click.pass_context
def cli(ctx: click.Context, vault: Path, config_path: Path | None, json_errors: bool):
    """lazylinks: spot unlinked mentions of your notes.

    \b
    Quick start:
      lazylinks index                      # What names are known
      lazylinks scan daily/today.md        # Mentions in a note
      lazylinks link daily/today.md -l 3 -c 10
    """
    configure_logging()

    ctx.ensure_object(dict)
    ctx.obj["vault"] = vault.resolve()
    ctx.obj["config_path"] = config_path
    ctx.obj["json_errors"] = json_errors


@cli.command()
@click.option("--limit", "-n", default=None, type=click.IntRange(min=0), help="Max entries to list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def index(ctx: click.Context, limit: int | None, as_json: bool):
    """Build the name index and list its entries."""
    engine, _ = _load_engine(ctx)
    link_index = engine.index
    stats = link_index.stats

    keys = sorted(link_index)
    if limit is not None:
        keys = keys[:limit]

    entries = [
        {
            "name": key,
            "target": link_index[key].basename,
            "subpath": link_index[key].subpath,
            "alias": link_index[key].is_alias,
            "document": link_index[key].document_id,
        }
        for key in keys
    ]

    if as_json:
        output({"stats": stats._asdict(), "size": len(link_index), "entries": entries}, as_json=True)
        return

    click.echo(
        f"{len(link_index)} names from {stats.documents} notes "
        f"({stats.aliases} aliases, {stats.headers} headings, {stats.ignored} ignored)"
    )
    if entries:
        click.echo()
        rows = [{**e, "subpath": e["subpath"] or "", "alias": "yes" if e["alias"] else ""} for e in entries]
        click.echo(format_table(rows, ["name", "target", "subpath", "alias"]))


@cli.command()
@click.argument("word")
@click.option("--source", "-s", help="Note the word appears in (excludes its own names)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def resolve(ctx: click.Context, word: str, source: str | None, as_json: bool):
    """Resolve a single WORD against the index."""
    engine, _ = _load_engine(ctx)
    document = _load_note(ctx, source)[2] if source else None

    result = engine.resolve(word, document)

    if as_json:
        output(result.model_dump(), as_json=True)
        return

    if result.target is None:
        _fail(f"No match for '{word}'", "NO_MATCH")

    kind = "partial" if result.is_partial else "exact"
    target = result.target.basename + (result.target.subpath or "")
    click.echo(f"{word} -> {target} ({kind} match on '{result.matched_string}')")


@cli.command()
@click.argument("note")
@click.option(
    "--mode",
    type=click.Choice(["edit", "reading"]),
    default="edit",
    show_default=True,
    help="edit mutes repeated mentions; reading mutes only partial matches",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def scan(ctx: click.Context, note: str, mode: str, as_json: bool):
    """List linkable mentions in NOTE."""
    engine, _ = _load_engine(ctx)
    _, text, document = _load_note(ctx, note)

    _, body_offset = split_frontmatter(text)
    spans = engine.scan(text, document, ranges=[(body_offset, len(text))], mode=mode)

    rows = []
    for span in spans:
        line, column = _line_col(text, span.start)
        rows.append(
            {
                "line": line,
                "column": column,
                "start": span.start,
                "end": span.end,
                "word": span.word,
                "target": span.link_target,
                "match": span.matched_string,
                "class": span.css_class,
                "partial": span.is_partial,
            }
        )

    if as_json:
        output({"note": document.document_id, "mentions": rows}, as_json=True)
        return

    if not rows:
        click.echo("No linkable mentions found.")
        return

    click.echo(format_table(rows, ["line", "column", "word", "target", "match", "class"]))


@cli.command()
@click.argument("note")
@click.option("--line", "-l", "line", required=True, type=click.IntRange(min=1), help="Line (1-based)")
@click.option("--column", "-c", "column", required=True, type=click.IntRange(min=1), help="Column (1-based)")
@click.option("--dry-run", is_flag=True, help="Show the change without writing the note")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def link(ctx: click.Context, note: str, line: int, column: int, dry_run: bool, as_json: bool):
    """Convert the word at a cursor position in NOTE into a wikilink."""
    engine, _ = _load_engine(ctx)
    path, text, document = _load_note(ctx, note)

    linked = engine.link_at(text, line - 1, column - 1, source=document)
    if linked is None:
        _fail(f"Nothing to link at {note}:{line}:{column}", "NO_MATCH")

    new_text, change = linked
    original = text[change.start : change.end]

    if not dry_run:
        with path.open("w", encoding="utf-8", newline="") as f:
            f.write(new_text)

    if as_json:
        output(
            {
                "note": document.document_id,
                "start": change.start,
                "end": change.end,
                "original": original,
                "replacement": change.replacement,
                "written": not dry_run,
            },
            as_json=True,
        )
        return

    prefix = "Would replace" if dry_run else "Replaced"
    click.echo(f"{prefix} '{original}' with {change.replacement}")


@cli.group()
def config():
    """Inspect or create the matching configuration."""


@config.command("show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def config_show(ctx: click.Context, as_json: bool):
    """Show the effective configuration."""
    effective = _get_config(ctx)
    if as_json:
        output(effective.model_dump(), as_json=True)
        return

    data = effective.model_dump()
    levels = data.pop("header_levels")
    for key, value in data.items():
        click.echo(f"{key}: {value}")
    enabled = [name for name, on in levels.items() if on]
    click.echo(f"header_levels: {', '.join(enabled) or 'none'}")


@config.command("init")
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing config file")
@click.pass_context
def config_init(ctx: click.Context, force: bool):
    """Write a config file with default values into the vault."""
    target = ctx.obj.get("config_path") or _vault_root(ctx) / CONFIG_FILENAME
    if target.exists() and not force:
        _fail(f"Config already exists: {target} (use --force to overwrite)", "ALREADY_EXISTS")

    save_config(LinkerConfig(), target)
    click.echo(f"Wrote {target}")


@cli.command()
@click.option(
    "--debounce",
    default=DEFAULT_DEBOUNCE_SECONDS,
    show_default=True,
    type=click.FloatRange(min=0),
    help="Seconds of quiet before rebuilding",
)
@click.pass_context
def watch(ctx: click.Context, debounce: float):
    """Rebuild the index whenever notes change (Ctrl-C to stop)."""
    import time

    from .watcher import VaultWatcher

    root = _vault_root(ctx)
    if not root.is_dir():
        _fail(f"Vault not found: {root}", "NOT_FOUND")

    engine = LinkEngine(_get_config(ctx))
    watcher = VaultWatcher(engine, root, debounce_seconds=debounce)

    click.echo(f"Watching {root} (Ctrl-C to stop)")
    with watcher:
        try:
            while watcher.is_running:
                time.sleep(1.0)
        except KeyboardInterrupt:
            pass


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
