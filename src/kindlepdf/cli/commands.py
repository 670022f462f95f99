"""CLI command implementations"""

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import typer

from kindlepdf.config import Settings, load_config
from kindlepdf.core.models import Document, ExportProgress, StageStatus
from kindlepdf.core.pipeline import Exporter, ProgressReporter, note_to_html, resolve_note
from kindlepdf.logger import setup_logging
from kindlepdf.services.mail import SmtpMailer
from kindlepdf.services.pdf import WebEnginePdfRenderer
from kindlepdf.vault.files import FileVault


STATUS_ICONS = {
    StageStatus.pending: "·",
    StageStatus.active:  "…",
    StageStatus.done:    "✓",
    StageStatus.failed:  "✗",
}

VaultOpt = Annotated[Optional[str], typer.Option("--vault", help="Vault root directory")]
VerboseOpt = Annotated[int, typer.Option("--verbose", "-v", count=True, help="-v for INFO, -vv for DEBUG logs")]
OutOpt = Annotated[Optional[str], typer.Option("--out", "-o", help="Write to this file instead of stdout")]
FontOpt = Annotated[Optional[int], typer.Option("--font-size", help="Base font size: 12, 14 or 16")]
BreakOpt = Annotated[Optional[bool], typer.Option("--page-break/--no-page-break", help="Page break on '---' lines")]


class EchoReporter(ProgressReporter):
    """Print one line per stage whose status changed."""

    def __init__(self):
        self._last: Optional[ExportProgress] = None

    def on_progress(self, progress: ExportProgress) -> None:
        previous = dict(self._last.items()) if self._last else {}
        for stage, status in progress.items():
            if previous.get(stage) != status and (previous or status != StageStatus.pending):
                typer.echo(f"  {STATUS_ICONS[status]} {stage.value}")
        self._last = progress

    def on_message(self, message: str) -> None:
        typer.echo(message)


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None, verbose: int = 0) -> Settings:
    """Load config and set up logging with standard CLI error handling."""
    try:
        settings = load_config(overrides=overrides)
        setup_logging(verbose, settings.log_level)
    except ValueError as e:
        _fail(str(e))
    return settings


def _note_path(vault: FileVault, note: str) -> str:
    """note as given when it names a vault file, else its resolved filesystem path."""
    if vault.get_document(note) is None and Path(note).exists():
        return str(Path(note).resolve())
    return note


def _vault_and_note(settings: Settings, note: str) -> tuple[FileVault, Document]:
    """Open the vault and look up note, given relative to the vault or as a filesystem path."""
    root = Path(settings.vault_dir)
    if not root.is_dir():
        _fail(f"Vault directory not found: {root}")
    vault = FileVault(root)
    doc = vault.get_document(_note_path(vault, note))
    if doc is None or not doc.is_markdown:
        _fail(f"No markdown note '{note}' in vault {root}")
    return vault, doc


def _write(text: str, out: Optional[str]) -> None:
    if out is None:
        typer.echo(text)
        return
    Path(out).write_text(text, encoding="utf-8")
    typer.echo(f"Wrote {out}")


def send_cmd(
    note: Annotated[str, typer.Argument(help="Markdown note to send")],
    vault: VaultOpt = None,
    font_size: FontOpt = None,
    page_break: BreakOpt = None,
    verbose: VerboseOpt = 0,
    ):
    """Send to Kindle: resolve embeds, convert to HTML, render a PDF and email it."""
    settings = _settings(
        overrides={"vault_dir": vault, "font_size": font_size, "page_break_on_hr": page_break},
        verbose=verbose,
    )
    root = Path(settings.vault_dir)
    if not root.is_dir():
        _fail(f"Vault directory not found: {root}")
    fv = FileVault(root)
    exporter = Exporter(
        settings,
        fv,
        WebEnginePdfRenderer(settings.render_timeout, settings.settle_delay),
        SmtpMailer(settings),
        EchoReporter(),
    )
    result = asyncio.run(exporter.export(_note_path(fv, note)))
    if not result.ok:
        raise typer.Exit(1)


def resolve_cmd(
    note: Annotated[str, typer.Argument(help="Markdown note to flatten")],
    vault: VaultOpt = None,
    out: OutOpt = None,
    verbose: VerboseOpt = 0,
    ):
    """Print the note with frontmatter removed and every embed inlined."""
    settings = _settings(overrides={"vault_dir": vault}, verbose=verbose)
    fv, doc = _vault_and_note(settings, note)
    _write(resolve_note(doc, fv), out)


def html_cmd(
    note: Annotated[str, typer.Argument(help="Markdown note to convert")],
    vault: VaultOpt = None,
    out: OutOpt = None,
    font_size: FontOpt = None,
    page_break: BreakOpt = None,
    verbose: VerboseOpt = 0,
    ):
    """Write the standalone HTML document that would be printed to PDF."""
    settings = _settings(
        overrides={"vault_dir": vault, "font_size": font_size, "page_break_on_hr": page_break},
        verbose=verbose,
    )
    fv, doc = _vault_and_note(settings, note)
    _write(note_to_html(doc, fv, settings), out)


def config_cmd():
    """Show the effective settings (password masked)."""
    settings = _settings()
    for name, value in settings.model_dump().items():
        if name == "smtp_pass" and value:
            value = "********"
        typer.echo(f"{name}: {value}")
