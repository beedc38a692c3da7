"""StructlogEvaluationObserver — production observer that delegates to structlog."""

import structlog


class StructlogEvaluationObserver:
    """Logs evaluation domain events to structlog.

    Does NOT inherit from EvaluationObserver (structural typing via Protocol).
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def evaluation_started(
        self,
        run_id: str,
        total_work_items: int,
        agent_totals: dict[str, int],
        max_parallel: int,
        dry_run: bool,
    ) -> None:
        self._log.info(
            "evaluation.started",
            run_id=run_id,
            total_work_items=total_work_items,
            agents=sorted(agent_totals),
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
        self._log.info(
            "evaluation.completed",
            run_id=run_id,
            status=status,
            total_work_items=total_work_items,
            elapsed_seconds=round(elapsed_seconds, 2),
        )

    def evaluation_progress(
        self,
        run_id: str,
        agent_id: str,
        completed: int,
        total: int,
    ) -> None:
        self._log.info(
            "evaluation.progress",
            run_id=run_id,
            agent_id=agent_id,
            completed=completed,
            total=total,
            percent=round(100.0 * completed / total, 1) if total else 0.0,
        )

    def work_item_started(
        self,
        run_id: str,
        work_id: str,
        agent_id: str,
    ) -> None:
        self._log.info(
            "evaluation.work_item.started",
            run_id=run_id,
            work_id=work_id,
            agent_id=agent_id,
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
        self._log.info(
            "evaluation.work_item.completed",
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
        self._log.warning(
            "evaluation.work_item.failed",
            run_id=run_id,
            work_id=work_id,
            agent_id=agent_id,
            reason=reason,
        )

    def evaluation_cancel_requested(self, run_id: str) -> None:
        self._log.warning("evaluation.cancel_requested", run_id=run_id)

    def evaluation_teardown_warning(
        self,
        run_id: str,
        handle: str,
        reason: str,
    ) -> None:
        self._log.warning(
            "evaluation.teardown_warning",
            run_id=run_id,
            handle=handle,
            reason=reason,
        )

    def evaluation_state_persist_failed(self, run_id: str, reason: str) -> None:
        self._log.error(
            "evaluation.state_persist_failed", run_id=run_id, reason=reason
        )
