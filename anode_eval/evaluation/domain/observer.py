"""Observer port for the evaluation domain — defines events in domain language."""

from typing import Protocol


class EvaluationObserver(Protocol):
    def evaluation_started(
        self,
        run_id: str,
        total_work_items: int,
        agent_totals: dict[str, int],
        max_parallel: int,
        dry_run: bool,
    ) -> None: ...

    def evaluation_completed(
        self,
        run_id: str,
        status: str,
        total_work_items: int,
        elapsed_seconds: float,
    ) -> None: ...

    def evaluation_progress(
        self,
        run_id: str,
        agent_id: str,
        completed: int,
        total: int,
    ) -> None: ...

    def work_item_started(
        self,
        run_id: str,
        work_id: str,
        agent_id: str,
    ) -> None: ...

    def work_item_completed(
        self,
        run_id: str,
        work_id: str,
        agent_id: str,
        status: str,
        tests_passed: int,
        tests_total: int,
    ) -> None: ...

    def work_item_failed(
        self,
        run_id: str,
        work_id: str,
        agent_id: str,
        reason: str,
    ) -> None: ...

    def evaluation_cancel_requested(self, run_id: str) -> None: ...

    def evaluation_teardown_warning(
        self,
        run_id: str,
        handle: str,
        reason: str,
    ) -> None: ...

    def evaluation_state_persist_failed(self, run_id: str, reason: str) -> None: ...
