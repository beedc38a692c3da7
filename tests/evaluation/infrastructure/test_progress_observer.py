"""Tests for ProgressEvaluationObserver."""

from anode_eval.evaluation.infrastructure.progress_observer import (
    ProgressEvaluationObserver,
)


def _start(observer: ProgressEvaluationObserver, dry_run: bool = False) -> None:
    observer.evaluation_started(
        run_id="r",
        total_work_items=4,
        agent_totals={"codex-m": 2, "opencode-x": 2},
        max_parallel=2,
        dry_run=dry_run,
    )


class TestProgressEvaluationObserverCounts:
    """Counts track running and finished work items per agent and overall."""

    def test_started_initialises_counts(self) -> None:
        observer = ProgressEvaluationObserver(disabled=True)

        _start(observer)

        assert observer.done == {"codex-m": 0, "opencode-x": 0, "Overall": 0}
        assert observer.running == {"codex-m": 0, "opencode-x": 0, "Overall": 0}

    def test_work_item_started_increments_running(self) -> None:
        observer = ProgressEvaluationObserver(disabled=True)
        _start(observer)

        observer.work_item_started(run_id="r", work_id="w1", agent_id="codex-m")

        assert observer.running["codex-m"] == 1
        assert observer.running["Overall"] == 1
        assert observer.running["opencode-x"] == 0

    def test_progress_moves_running_to_done(self) -> None:
        observer = ProgressEvaluationObserver(disabled=True)
        _start(observer)
        observer.work_item_started(run_id="r", work_id="w1", agent_id="codex-m")

        observer.evaluation_progress(
            run_id="r", agent_id="codex-m", completed=1, total=2
        )

        assert observer.done["codex-m"] == 1
        assert observer.done["Overall"] == 1
        assert observer.running["codex-m"] == 0

    def test_cancelled_queued_item_never_goes_negative(self) -> None:
        observer = ProgressEvaluationObserver(disabled=True)
        _start(observer)

        observer.evaluation_progress(
            run_id="r", agent_id="codex-m", completed=1, total=2
        )

        assert observer.running["codex-m"] == 0
        assert observer.done["codex-m"] == 1

    def test_unknown_agent_only_moves_overall(self) -> None:
        observer = ProgressEvaluationObserver(disabled=True)
        _start(observer)

        observer.work_item_started(run_id="r", work_id="w", agent_id="ghost")

        assert "ghost" not in observer.running
        assert observer.running["Overall"] == 1


class TestProgressEvaluationObserverRendering:
    def test_dry_run_draws_nothing(self) -> None:
        observer = ProgressEvaluationObserver()

        _start(observer, dry_run=True)
        observer.evaluation_completed(
            run_id="r", status="pending", total_work_items=4, elapsed_seconds=0.0
        )

        assert observer.done["Overall"] == 0

    def test_live_display_starts_and_stops(self) -> None:
        observer = ProgressEvaluationObserver()

        _start(observer)
        observer.work_item_started(run_id="r", work_id="w1", agent_id="codex-m")
        observer.evaluation_progress(
            run_id="r", agent_id="codex-m", completed=1, total=2
        )
        observer.evaluation_completed(
            run_id="r", status="completed", total_work_items=4, elapsed_seconds=1.0
        )

        assert observer.done["codex-m"] == 1
