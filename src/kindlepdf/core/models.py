"""Data models shared by the resolver, the transformer and the export pipeline"""

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath
from typing import Optional


IMAGE_EXTENSIONS = frozenset({"png", "jpg", "jpeg", "gif", "svg", "bmp"})
MARKDOWN_EXTENSION = "md"
BLOCK_PREFIX = "^"


@dataclass(frozen=True)
class Document:
    """A vault file identified by its vault-relative POSIX path."""
    path: str

    @property
    def basename(self) -> str:
        """File name without extension ('notes/Idea.md' -> 'Idea')."""
        return PurePosixPath(self.path).stem

    @property
    def extension(self) -> str:
        """Lower-case extension without the dot; '' when there is none."""
        return PurePosixPath(self.path).suffix[1:].lower()

    @property
    def is_image(self) -> bool:
        return self.extension in IMAGE_EXTENSIONS

    @property
    def is_markdown(self) -> bool:
        return self.extension == MARKDOWN_EXTENSION


class AnchorKind(str, Enum):
    heading = "heading"
    block   = "block"


@dataclass(frozen=True)
class EmbedReference:
    """Target and optional anchor parsed from one ![[target#anchor]] marker."""
    target: str
    anchor: Optional[str] = None

    @property
    def anchor_kind(self) -> Optional[AnchorKind]:
        if not self.anchor:
            return None
        return AnchorKind.block if self.anchor.startswith(BLOCK_PREFIX) else AnchorKind.heading


class ExportStage(str, Enum):
    """Pipeline stages, in execution order."""
    resolving_embeds   = "Resolving embeds"
    converting_to_html = "Converting to HTML"
    generating_pdf     = "Generating PDF"
    sending_to_kindle  = "Sending to Kindle"


class StageStatus(str, Enum):
    pending = "pending"
    active  = "active"
    done    = "done"
    failed  = "failed"


@dataclass(frozen=True)
class ExportProgress:
    """Immutable snapshot of every stage's status, indexed in ExportStage order."""
    statuses: tuple[StageStatus, ...]

    def status(self, stage: ExportStage) -> StageStatus:
        return self.statuses[list(ExportStage).index(stage)]

    def items(self) -> list[tuple[ExportStage, StageStatus]]:
        return list(zip(ExportStage, self.statuses))


class ExportOutcome(str, Enum):
    sent     = "sent"       # all four stages done
    failed   = "failed"     # one stage failed
    invalid  = "invalid"    # a precondition failed; no stage started
    rejected = "rejected"   # another export was already running


@dataclass(frozen=True)
class ExportResult:
    outcome: ExportOutcome
    message: str
    progress: Optional[ExportProgress] = None   # None when no stage ran

    @property
    def ok(self) -> bool:
        return self.outcome == ExportOutcome.sent
