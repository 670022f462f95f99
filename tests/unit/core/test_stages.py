"""Unit tests for core/stages.py"""

import pytest

from kindlepdf.core.models import ExportStage, StageStatus
from kindlepdf.core.stages import (
    STAGES,
    StageEvent,
    active_stage,
    advance,
    initial_progress,
    is_failed,
    is_finished,
)


P, A, D, F = StageStatus.pending, StageStatus.active, StageStatus.done, StageStatus.failed


def _run_to(stage: ExportStage):
    """Progress with every stage up to and including stage started."""
    progress = initial_progress()
    for s in STAGES[:STAGES.index(stage) + 1]:
        progress = advance(progress, StageEvent.start(s))
    return progress


def test_initial_progress_all_pending():
    progress = initial_progress()
    assert progress.statuses == (P, P, P, P)
    assert active_stage(progress) is None


def test_stage_order():
    assert [s.value for s in STAGES] == [
        "Resolving embeds", "Converting to HTML", "Generating PDF", "Sending to Kindle",
    ]


def test_start_first_stage():
    progress = advance(initial_progress(), StageEvent.start(ExportStage.resolving_embeds))
    assert progress.statuses == (A, P, P, P)
    assert active_stage(progress) == ExportStage.resolving_embeds


def test_start_marks_previous_done():
    progress = _run_to(ExportStage.generating_pdf)
    assert progress.statuses == (D, D, A, P)
    assert progress.status(ExportStage.converting_to_html) == D


def test_exactly_one_active_stage_throughout():
    progress = initial_progress()
    for stage in STAGES:
        progress = advance(progress, StageEvent.start(stage))
        assert progress.statuses.count(A) == 1


def test_finish_marks_last_done():
    progress = advance(_run_to(ExportStage.sending_to_kindle), StageEvent.finish())
    assert progress.statuses == (D, D, D, D)
    assert is_finished(progress)
    assert not is_failed(progress)


@pytest.mark.parametrize("stage", list(ExportStage))
def test_fail_marks_only_active_stage(stage):
    progress = advance(_run_to(stage), StageEvent.fail())
    idx = STAGES.index(stage)
    assert progress.statuses.count(F) == 1
    assert progress.statuses[idx] == F
    assert all(s == D for s in progress.statuses[:idx])
    assert all(s == P for s in progress.statuses[idx + 1:])
    assert is_failed(progress)


def test_advance_does_not_mutate_input():
    before = _run_to(ExportStage.converting_to_html)
    advance(before, StageEvent.fail())
    assert before.statuses == (D, A, P, P)


def test_out_of_order_start_rejected():
    with pytest.raises(ValueError, match="out of order"):
        advance(initial_progress(), StageEvent.start(ExportStage.generating_pdf))


def test_restart_same_stage_rejected():
    progress = _run_to(ExportStage.resolving_embeds)
    with pytest.raises(ValueError, match="out of order"):
        advance(progress, StageEvent.start(ExportStage.resolving_embeds))


def test_finish_before_last_stage_rejected():
    with pytest.raises(ValueError, match="not the last stage"):
        advance(_run_to(ExportStage.generating_pdf), StageEvent.finish())


def test_fail_without_active_stage_rejected():
    with pytest.raises(ValueError, match="No active stage"):
        advance(initial_progress(), StageEvent.fail())


@pytest.mark.parametrize("event", [
    StageEvent.fail(),
    StageEvent.finish(),
    StageEvent.start(ExportStage.sending_to_kindle),
])
def test_no_transition_after_failure(event):
    failed = advance(_run_to(ExportStage.generating_pdf), StageEvent.fail())
    with pytest.raises(ValueError, match="already ended"):
        advance(failed, event)


def test_no_transition_after_finish():
    done = advance(_run_to(ExportStage.sending_to_kindle), StageEvent.finish())
    with pytest.raises(ValueError, match="already ended"):
        advance(done, StageEvent.fail())
