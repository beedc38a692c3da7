"""ResultCollector — turns terminal sandbox outcomes into work item results."""

from collections.abc import Callable

from anode_eval.config.domain.harness import TestHarness
from anode_eval.evaluation.application.state import RunState
from anode_eval.evaluation.domain.archive import OutputArchive
from anode_eval.evaluation.infrastructure.errors import OutputArchiveError
from anode_eval.harness.domain.adapter import HarnessAdapter
from anode_eval.harness.domain.result import ExitClassification, RunResult
from anode_eval.matrix.domain.work_item import WorkId, WorkItem, WorkItemStatus
from anode_eval.sandbox.domain.spec import PodPhase, SandboxOutput

_STATUS_BY_CLASSIFICATION: dict[ExitClassification, WorkItemStatus] = {
    ExitClassification.OK: WorkItemStatus.SUCCEEDED,
    ExitClassification.TIMEOUT: WorkItemStatus.TIMED_OUT,
    ExitClassification.ERROR: WorkItemStatus.FAILED,
    ExitClassification.CRASH: WorkItemStatus.FAILED,
}


def status_for(classification: ExitClassification) -> WorkItemStatus:
    """`ok` succeeds whatever the pass rate; `error` and `crash` fail."""
    return _STATUS_BY_CLASSIFICATION[classification]


class ResultCollector:
    """Interprets sandbox output with the work item's harness adapter.

    The run result and the terminal status are attached in one transition.
    With an archive, the raw logs are stored first and `output_ref` points at
    them; an archive failure becomes a run warning, not a failed item.
    """

    def __init__(
        self,
        state: RunState,
        adapter_for: Callable[[TestHarness], HarnessAdapter],
        archive: OutputArchive | None = None,
    ) -> None:
        self._state = state
        self._adapter_for = adapter_for
        self._archive = archive

    def collect(
        self, work_id: WorkId, output: SandboxOutput, duration_seconds: float
    ) -> WorkItem:
        item = self._state.get(work_id)
        adapter = self._adapter_for(item.prompt.test_harness)
        result = adapter.interpret(
            logs=output.logs,
            duration_seconds=duration_seconds,
            crashed=output.phase is PodPhase.FAILED,
        )
        if result.classification is ExitClassification.CRASH and output.reason:
            result = result.model_copy(update={"detail": output.reason})
        return self._state.transition(
            work_id,
            status_for(result.classification),
            run_result=result,
            output_ref=self._archive_logs(work_id, output.logs),
            error=None if result.classification is ExitClassification.OK else result.detail,
        )

    def _archive_logs(self, work_id: WorkId, logs: str) -> str | None:
        if self._archive is None:
            return None
        try:
            return self._archive.save(self._state.run_id, work_id, logs)
        except OutputArchiveError as exc:
            self._state.add_warning(str(exc))
            return None

    def record_timeout(
        self, work_id: WorkId, duration_seconds: float, reason: str
    ) -> WorkItem:
        return self._state.transition(
            work_id,
            WorkItemStatus.TIMED_OUT,
            run_result=RunResult.empty(
                ExitClassification.TIMEOUT, duration_seconds=duration_seconds
            ),
            error=reason,
        )

    def record_failure(
        self, work_id: WorkId, reason: str, duration_seconds: float = 0.0
    ) -> WorkItem:
        """Fail an item whose output never reached an adapter (empty result)."""
        return self._state.transition(
            work_id,
            WorkItemStatus.FAILED,
            run_result=RunResult.empty(
                ExitClassification.ERROR,
                duration_seconds=duration_seconds,
                detail=reason,
            ),
            error=reason,
        )

    def record_cancelled(self, work_id: WorkId) -> WorkItem:
        return self._state.transition(
            work_id, WorkItemStatus.CANCELLED, error="cancelled"
        )
