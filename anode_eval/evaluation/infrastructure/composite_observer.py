"""CompositeEvaluationObserver — fans out all events to a list of observers."""

from anode_eval.evaluation.domain.observer import EvaluationObserver


class CompositeEvaluationObserver:
    """Delegates every observer event to each observer in order.

    Does NOT inherit from EvaluationObserver (structural typing via Protocol).
    """

    def __init__(self, observers: list[EvaluationObserver]) -> None:
        self._observers = observers

    def evaluation_started(
        self,
        run_id: str,
        total_work_items: int,
        agent_totals: dict[str, int],
        max_parallel: int,
        dry_run: bool,
    ) -> None:
        for obs in self._observers:
            obs.evaluation_started(
                run_id=run_id,
                total_work_items=total_work_items,
                agent_totals=agent_totals,
                max_parallel=max_parallel,
                dry_run=dry_run,
            )

    def evaluation_completed(
        self,
        run_id: str,
        status: str,
        total_work_items: int,
        elapsed_seconds: float,
    ) -> None:
        for obs in self._observers:
            obs.evaluation_completed(
                run_id=run_id,
                status=status,
                total_work_items=total_work_items,
                elapsed_seconds=elapsed_seconds,
            )

    def evaluation_progress(
        self,
        run_id: str,
        agent_id: str,
        completed: int,
        total: int,
    ) -> None:
        for obs in self._observers:
            obs.evaluation_progress(
                run_id=run_id,
                agent_id=agent_id,
                completed=completed,
                total=total,
            )

    def work_item_started(
        self,
        run_id: str,
        work_id: str,
        agent_id: str,
    ) -> None:
        for obs in self._observers:
            obs.work_item_started(run_id=run_id, work_id=work_id, agent_id=agent_id)

    def work_item_completed(
        self,
        run_id: str,
        work_id: str,
        agent_id: str,
        status: str,
        tests_passed: int,
        tests_total: int,
    ) -> None:
        for obs in self._observers:
            obs.work_item_completed(
                run_id=run_id,
                work_id=work_id,
                agent_id=agent_id,
                status=status,
                tests_passed=tests_passed,
                tests_total=tests_total,
            )

    def work_item_failed(
        self,
        run_id: str,
        work_id: str,
        agent_id: str,
        reason: str,
    ) -> None:
        for obs in self._observers:
            obs.work_item_failed(
                run_id=run_id, work_id=work_id, agent_id=agent_id, reason=reason
            )

    def evaluation_cancel_requested(self, run_id: str) -> None:
        for obs in self._observers:
            obs.evaluation_cancel_requested(run_id=run_id)

    def evaluation_teardown_warning(
        self,
        run_id: str,
        handle: str,
        reason: str,
    ) -> None:
        for obs in self._observers:
            obs.evaluation_teardown_warning(run_id=run_id, handle=handle, reason=reason)

    def evaluation_state_persist_failed(self, run_id: str, reason: str) -> None:
        for obs in self._observers:
            obs.evaluation_state_persist_failed(run_id=run_id, reason=reason)
