"""FakeEvaluationObserver — records evaluation domain events for assertion in tests."""

from dataclasses import dataclass


@dataclass(frozen=True)
class EvaluationStartedEvent:
    run_id: str
    total_work_items: int
    agent_totals: dict[str, int]
    max_parallel: int
    dry_run: bool


@dataclass(frozen=True)
class EvaluationCompletedEvent:
    run_id: str
    status: str
    total_work_items: int
    elapsed_seconds: float


@dataclass(frozen=True)
class EvaluationProgressEvent:
    run_id: str
    agent_id: str
    completed: int
    total: int


@dataclass(frozen=True)
class WorkItemStartedEvent:
    run_id: str
    work_id: str
    agent_id: str


@dataclass(frozen=True)
class WorkItemCompletedEvent:
    run_id: str
    work_id: str
    agent_id: str
    status: str
    tests_passed: int
    tests_total: int


@dataclass(frozen=True)
class WorkItemFailedEvent:
    run_id: str
    work_id: str
    agent_id: str
    reason: str


@dataclass(frozen=True)
class TeardownWarningEvent:
    run_id: str
    handle: str
    reason: str


class FakeEvaluationObserver:
    """Records all emitted evaluation events as typed frozen dataclasses.

    Use in tests to assert which events were emitted and with what data,
    without mocking or patching.

    Event lists use a leading underscore + public property pattern to avoid
    name collision between the list attributes and the Protocol method names.
    """

    def __init__(self) -> None:
        self._started: list[EvaluationStartedEvent] = []
        self._completed: list[EvaluationCompletedEvent] = []
        self._progress: list[EvaluationProgressEvent] = []
        self._item_started: list[WorkItemStartedEvent] = []
        self._item_completed: list[WorkItemCompletedEvent] = []
        self._item_failed: list[WorkItemFailedEvent] = []
        self._cancel_requested: list[str] = []
        self._teardown_warnings: list[TeardownWarningEvent] = []
        self._persist_failures: list[str] = []

    @property
    def started(self) -> list[EvaluationStartedEvent]:
        return self._started

    @property
    def completed(self) -> list[EvaluationCompletedEvent]:
        return self._completed

    @property
    def progress(self) -> list[EvaluationProgressEvent]:
        return self._progress

    @property
    def item_started(self) -> list[WorkItemStartedEvent]:
        return self._item_started

    @property
    def item_completed(self) -> list[WorkItemCompletedEvent]:
        return self._item_completed

    @property
    def item_failed(self) -> list[WorkItemFailedEvent]:
        return self._item_failed

    @property
    def cancel_requested(self) -> list[str]:
        return self._cancel_requested

    @property
    def teardown_warnings(self) -> list[TeardownWarningEvent]:
        return self._teardown_warnings

    @property
    def persist_failures(self) -> list[str]:
        return self._persist_failures

    def evaluation_started(
        self,
        run_id: str,
        total_work_items: int,
        agent_totals: dict[str, int],
        max_parallel: int,
        dry_run: bool,
    ) -> None:
        self._started.append(
            EvaluationStartedEvent(
                run_id=run_id,
                total_work_items=total_work_items,
                agent_totals=agent_totals,
                max_parallel=max_parallel,
                dry_run=dry_run,
            )
        )

    def evaluation_completed(
        self,
        run_id: str,
        status: str,
        total_work_items: int,
        elapsed_seconds: float,
    ) -> None:
        self._completed.append(
            EvaluationCompletedEvent(
                run_id=run_id,
                status=status,
                total_work_items=total_work_items,
                elapsed_seconds=elapsed_seconds,
            )
        )

    def evaluation_progress(
        self,
        run_id: str,
        agent_id: str,
        completed: int,
        total: int,
    ) -> None:
        self._progress.append(
            EvaluationProgressEvent(
                run_id=run_id, agent_id=agent_id, completed=completed, total=total
            )
        )

    def work_item_started(self, run_id: str, work_id: str, agent_id: str) -> None:
        self._item_started.append(
            WorkItemStartedEvent(run_id=run_id, work_id=work_id, agent_id=agent_id)
        )

    def work_item_completed(
        self,
        run_id: str,
        work_id: str,
        agent_id: str,
        status: str,
        tests_passed: int,
        tests_total: int,
    ) -> None:
        self._item_completed.append(
            WorkItemCompletedEvent(
                run_id=run_id,
                work_id=work_id,
                agent_id=agent_id,
                status=status,
                tests_passed=tests_passed,
                tests_total=tests_total,
            )
        )

    def work_item_failed(
        self,
        run_id: str,
        work_id: str,
        agent_id: str,
        reason: str,
    ) -> None:
        self._item_failed.append(
            WorkItemFailedEvent(
                run_id=run_id, work_id=work_id, agent_id=agent_id, reason=reason
            )
        )

    def evaluation_cancel_requested(self, run_id: str) -> None:
        self._cancel_requested.append(run_id)

    def evaluation_teardown_warning(
        self,
        run_id: str,
        handle: str,
        reason: str,
    ) -> None:
        self._teardown_warnings.append(
            TeardownWarningEvent(run_id=run_id, handle=handle, reason=reason)
        )

    def evaluation_state_persist_failed(self, run_id: str, reason: str) -> None:
        self._persist_failures.append(reason)
