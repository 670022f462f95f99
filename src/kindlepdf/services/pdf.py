"""HTML -> PDF rendering through an offscreen Qt WebEngine page"""

import logging
import os
import tempfile
import time
from abc import ABC, abstractmethod
from pathlib import Path


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_SETTLE_DELAY = 0.3


class RenderError(RuntimeError):
    """Raised when the HTML cannot be loaded or printed."""


class PdfRenderer(ABC):
    @abstractmethod
    async def render(self, html: str) -> bytes:
        """Return the PDF bytes for a complete HTML document."""
        raise NotImplementedError


def write_scratch_html(html: str) -> Path:
    """Write html to a fresh temp file; the caller owns and deletes it."""
    fd, name = tempfile.mkstemp(prefix=f"kindle-pdf-{int(time.time() * 1000)}-", suffix=".html")
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(html)
    return Path(name)


def remove_quietly(path: Path) -> None:
    try:
        path.unlink()
    except OSError:
        logger.debug("Could not delete scratch file %s", path)


class WebEnginePdfRenderer(PdfRenderer):
    """Print HTML to a Letter-size PDF with zero margins.

    The HTML goes through a scratch file rather than a data URL so large
    documents with inlined images load reliably. Requires the 'render' extra.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, settle_delay: float = DEFAULT_SETTLE_DELAY):
        self.timeout = timeout
        self.settle_delay = settle_delay

    async def render(self, html: str) -> bytes:
        """Blocks the calling event loop until printing ends; Qt objects live on the main thread."""
        scratch = write_scratch_html(html)
        try:
            return self._print_file(scratch)
        finally:
            remove_quietly(scratch)

    def _print_file(self, path: Path) -> bytes:
        from PySide6.QtCore import QEventLoop, QMarginsF, QTimer, QUrl
        from PySide6.QtGui import QPageLayout, QPageSize
        from PySide6.QtWebEngineCore import QWebEnginePage
        from PySide6.QtWidgets import QApplication

        if not os.environ.get("DISPLAY") and not os.environ.get("WAYLAND_DISPLAY"):
            os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
        app = QApplication.instance() or QApplication(["kindlepdf"])  # noqa: F841

        page = QWebEnginePage()
        loop = QEventLoop()
        layout = QPageLayout(
            QPageSize(QPageSize.PageSizeId.Letter),
            QPageLayout.Orientation.Portrait,
            QMarginsF(0, 0, 0, 0),
        )
        outcome: dict = {}

        def finish(pdf: bytes = None, error: Exception = None) -> None:
            if outcome:
                return
            outcome.update(pdf=pdf, error=error)
            loop.quit()

        def on_pdf(data) -> None:
            pdf = bytes(data)
            if pdf:
                finish(pdf=pdf)
            else:
                finish(error=RenderError("Qt WebEngine returned an empty PDF payload"))

        def on_loaded(ok: bool) -> None:
            if not ok:
                finish(error=RenderError("Failed to load HTML for PDF generation"))
                return
            # let images and fonts finish painting before the snapshot
            QTimer.singleShot(int(self.settle_delay * 1000), lambda: page.printToPdf(on_pdf, layout))

        timer = QTimer()
        timer.setSingleShot(True)
        timer.timeout.connect(
            lambda: finish(error=RenderError(f"PDF generation timed out after {self.timeout:g}s"))
        )

        page.loadFinished.connect(on_loaded)
        timer.start(int(self.timeout * 1000))
        logger.debug("Loading %s for PDF rendering", path)
        page.load(QUrl.fromLocalFile(str(path)))
        if not outcome:
            loop.exec()

        timer.stop()
        page.deleteLater()
        if outcome["error"] is not None:
            raise outcome["error"]
        logger.info("Rendered PDF (%d bytes)", len(outcome["pdf"]))
        return outcome["pdf"]
