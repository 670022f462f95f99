"""Export pipeline: resolve embeds -> convert to HTML -> render PDF -> send to Kindle"""

import asyncio
import logging
from typing import Optional

from kindlepdf.config import Settings
from kindlepdf.core.embeds import resolve_embeds
from kindlepdf.core.models import Document, ExportOutcome, ExportProgress, ExportResult, ExportStage
from kindlepdf.core.parse import read_frontmatter, strip_frontmatter
from kindlepdf.core.stages import StageEvent, active_stage, advance, initial_progress
from kindlepdf.core.transform import markdown_to_html
from kindlepdf.services.mail import Mailer
from kindlepdf.services.pdf import PdfRenderer
from kindlepdf.vault.base import Vault


logger = logging.getLogger(__name__)

OPEN_DELAY = 0.05

NOTICE_BUSY = "Export already in progress."
NOTICE_SETTINGS = "Please configure all email and SMTP settings before exporting."
NOTICE_NO_NOTE = "No active .md file. Please open a markdown file first."
FAILURE_PREFIX = "Export failed: "


class ProgressReporter:
    """Receives progress snapshots and user-facing messages. The default ignores both."""

    def on_progress(self, progress: ExportProgress) -> None:
        pass

    def on_message(self, message: str) -> None:
        pass


def note_title(doc: Document, raw: str) -> str:
    """Frontmatter 'title' if present and readable, else the file's basename."""
    try:
        title = read_frontmatter(raw).get("title")
    except ValueError as e:
        logger.warning("Ignoring frontmatter of %s: %s", doc.path, e)
        return doc.basename
    return str(title) if title else doc.basename


def resolve_note(doc: Document, vault: Vault) -> str:
    """The note's body with frontmatter removed and all embeds inlined."""
    return resolve_embeds(strip_frontmatter(vault.read_text(doc)), doc, vault)


def note_to_html(doc: Document, vault: Vault, settings: Settings) -> str:
    return markdown_to_html(
        resolve_note(doc, vault), note_title(doc, vault.read_text(doc)),
        settings.font_size, settings.page_break_on_hr,
    )


class Exporter:
    """Runs one note through the four export stages.

    Only one export may run per process; a second request while one is in
    flight is rejected, not queued. Any exception inside a stage fails that
    stage and ends the run with a single message.
    """

    _exporting = False

    def __init__(
        self,
        settings: Settings,
        vault: Vault,
        renderer: PdfRenderer,
        mailer: Mailer,
        reporter: Optional[ProgressReporter] = None,
        open_delay: float = OPEN_DELAY,
        ):
        self.settings = settings
        self.vault = vault
        self.renderer = renderer
        self.mailer = mailer
        self.reporter = reporter or ProgressReporter()
        self.open_delay = open_delay
        self.progress: Optional[ExportProgress] = None

    @classmethod
    def is_exporting(cls) -> bool:
        return Exporter._exporting

    def _notice(self, outcome: ExportOutcome, message: str) -> ExportResult:
        logger.info(message)
        self.reporter.on_message(message)
        return ExportResult(outcome, message, self.progress)

    async def _enter(self, stage: ExportStage) -> None:
        self._apply(StageEvent.start(stage))
        await asyncio.sleep(0)

    def _apply(self, event: StageEvent) -> None:
        self.progress = advance(self.progress, event)
        self.reporter.on_progress(self.progress)

    def _check(self, note_path: str) -> tuple[Optional[Document], Optional[str]]:
        """Return (document, None) when the export may start, else (None, notice)."""
        missing = self.settings.missing_email_settings()
        if missing:
            logger.debug("Missing settings: %s", ", ".join(missing))
            return None, NOTICE_SETTINGS
        doc = self.vault.get_document(note_path) if note_path else None
        if doc is None or not doc.is_markdown:
            return None, NOTICE_NO_NOTE
        return doc, None

    async def export(self, note_path: str) -> ExportResult:
        if Exporter._exporting:
            logger.info(NOTICE_BUSY)
            self.reporter.on_message(NOTICE_BUSY)
            return ExportResult(ExportOutcome.rejected, NOTICE_BUSY)

        self.progress = None
        doc, notice = self._check(note_path)
        if notice:
            return self._notice(ExportOutcome.invalid, notice)

        Exporter._exporting = True
        self.progress = initial_progress()
        self.reporter.on_progress(self.progress)
        try:
            await asyncio.sleep(self.open_delay)
            return await self._run(doc)
        except Exception as e:
            logger.exception("Export of %s failed", doc.path)
            if active_stage(self.progress) is not None:
                self._apply(StageEvent.fail())
            return self._notice(ExportOutcome.failed, f"{FAILURE_PREFIX}{e}")
        finally:
            Exporter._exporting = False

    async def _run(self, doc: Document) -> ExportResult:
        await self._enter(ExportStage.resolving_embeds)
        raw = self.vault.read_text(doc)
        markdown = resolve_note(doc, self.vault)

        await self._enter(ExportStage.converting_to_html)
        html = markdown_to_html(
            markdown, note_title(doc, raw), self.settings.font_size, self.settings.page_break_on_hr,
        )

        await self._enter(ExportStage.generating_pdf)
        pdf = await self.renderer.render(html)

        await self._enter(ExportStage.sending_to_kindle)
        await asyncio.to_thread(self.mailer.send, pdf, f"{doc.basename}.pdf")

        self._apply(StageEvent.finish())
        return self._notice(ExportOutcome.sent, f'"{doc.basename}" sent to Kindle!')
