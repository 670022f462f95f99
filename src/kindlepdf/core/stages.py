"""Export stage state machine: pure (progress, event) -> progress transitions"""

from dataclasses import dataclass
from typing import Optional

from kindlepdf.core.models import ExportProgress, ExportStage, StageStatus


STAGES: tuple[ExportStage, ...] = tuple(ExportStage)


@dataclass(frozen=True)
class StageEvent:
    """A transition request. Build with start(stage), fail() or finish()."""
    kind: str
    stage: Optional[ExportStage] = None

    @classmethod
    def start(cls, stage: ExportStage) -> "StageEvent":
        return cls("start", stage)

    @classmethod
    def fail(cls) -> "StageEvent":
        return cls("fail")

    @classmethod
    def finish(cls) -> "StageEvent":
        return cls("finish")


def initial_progress() -> ExportProgress:
    """All stages pending."""
    return ExportProgress(tuple(StageStatus.pending for _ in STAGES))


def active_stage(progress: ExportProgress) -> Optional[ExportStage]:
    for stage, status in progress.items():
        if status == StageStatus.active:
            return stage
    return None


def is_failed(progress: ExportProgress) -> bool:
    return StageStatus.failed in progress.statuses


def is_finished(progress: ExportProgress) -> bool:
    return all(s == StageStatus.done for s in progress.statuses)


def _with(statuses: list[StageStatus], index: int, status: StageStatus) -> list[StageStatus]:
    statuses[index] = status
    return statuses


def advance(progress: ExportProgress, event: StageEvent) -> ExportProgress:
    """Apply event to progress and return the new snapshot.

    start(stage) activates stage and marks the previously active stage done;
    stages must start strictly in order. fail() marks the active stage failed,
    leaving later stages pending. finish() marks the active stage done.
    Raises ValueError for any transition not allowed from the current state.
    """
    if is_failed(progress) or is_finished(progress):
        raise ValueError("Export already ended; no further transitions allowed")

    statuses = list(progress.statuses)
    current = active_stage(progress)
    current_idx = STAGES.index(current) if current is not None else -1

    if event.kind == "start":
        if event.stage is None:
            raise ValueError("start event needs a stage")
        target_idx = STAGES.index(event.stage)
        if target_idx != current_idx + 1:
            raise ValueError(f"Cannot start '{event.stage.value}' out of order")
        if current is not None:
            _with(statuses, current_idx, StageStatus.done)
        return ExportProgress(tuple(_with(statuses, target_idx, StageStatus.active)))

    if current is None:
        raise ValueError(f"No active stage to {event.kind}")

    if event.kind == "fail":
        return ExportProgress(tuple(_with(statuses, current_idx, StageStatus.failed)))

    if event.kind == "finish":
        if current_idx != len(STAGES) - 1:
            raise ValueError(f"Cannot finish while '{current.value}' is not the last stage")
        return ExportProgress(tuple(_with(statuses, current_idx, StageStatus.done)))

    raise ValueError(f"Unknown stage event: {event.kind}")
