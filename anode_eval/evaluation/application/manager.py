"""RunManager — answers status, cancel and cleanup requests by run id."""

import asyncio
import time
from collections.abc import Callable
from datetime import UTC, datetime

from pydantic import BaseModel, Field

from anode_eval.evaluation.application.state import RunState
from anode_eval.evaluation.domain.observer import EvaluationObserver
from anode_eval.evaluation.domain.run import RunId, RunStatus
from anode_eval.evaluation.domain.snapshot import StatusSnapshot
from anode_eval.evaluation.domain.store import RunStateStore
from anode_eval.evaluation.infrastructure.errors import RunNotFoundError
from anode_eval.sandbox.application.teardown import delete_with_retries
from anode_eval.sandbox.domain.observer import SandboxObserver
from anode_eval.sandbox.domain.provider import PodProvider


class CleanupResult(BaseModel, frozen=True):
    run_id: RunId
    sandboxes_deleted: int = 0
    state_removed: bool = False
    warnings: list[str] = Field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.sandboxes_deleted > 0 or self.state_removed


class RunManager:
    """Registry of in-process run states, backed by the persisted store.

    Runs started by this process are answered from their live `RunState`;
    anything else falls back to the store, which is how a second CLI process
    sees and controls a run.
    """

    def __init__(
        self,
        store: RunStateStore,
        provider: PodProvider,
        sandbox_observer: SandboxObserver,
        observer: EvaluationObserver | None = None,
        teardown_attempts: int = 3,
        teardown_backoff_seconds: float = 1.0,
        settle_timeout_seconds: float = 60.0,
        settle_poll_seconds: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._provider = provider
        self._sandbox_observer = sandbox_observer
        self._observer = observer
        self._teardown_attempts = teardown_attempts
        self._teardown_backoff_seconds = teardown_backoff_seconds
        self._settle_timeout_seconds = settle_timeout_seconds
        self._settle_poll_seconds = settle_poll_seconds
        self._clock = clock
        self._states: dict[RunId, RunState] = {}

    def register(self, state: RunState) -> None:
        self._states[state.run_id] = state

    def _live_state(self, run_id: RunId) -> RunState | None:
        state = self._states.get(run_id)
        if state is None or state.released:
            return None
        return state

    def status(self, run_id: RunId) -> StatusSnapshot:
        """Read-only snapshot of a run.

        Raises:
            RunNotFoundError: if the run is neither live nor persisted.
        """
        state = self._live_state(run_id)
        if state is not None:
            return state.snapshot()
        snapshot = self._store.load(run_id)
        if snapshot is None:
            raise RunNotFoundError(run_id=run_id)
        return snapshot

    def request_cancel(self, run_id: RunId) -> None:
        """Set the cancellation flag without waiting for it to take effect.

        Raises:
            RunNotFoundError: if the run is neither live nor persisted.
        """
        state = self._live_state(run_id)
        if state is not None:
            if state.request_cancel() and self._observer is not None:
                self._observer.evaluation_cancel_requested(run_id=run_id)
            return
        if self._store.load(run_id) is None:
            raise RunNotFoundError(run_id=run_id)
        self._store.request_cancel(run_id)
        if self._observer is not None:
            self._observer.evaluation_cancel_requested(run_id=run_id)

    async def cancel(self, run_id: RunId) -> list[str]:
        """Cancel a run and return only once no sandbox of it is left running.

        Returns teardown warnings for sandboxes that could not be deleted.

        Raises:
            RunNotFoundError: if the run is neither live nor persisted.
        """
        self.request_cancel(run_id)
        state = self._live_state(run_id)
        if state is not None:
            if state.run.status is RunStatus.RUNNING:
                await state.wait_finished()
        else:
            await self._settle_persisted(run_id)
        return await self._sweep(run_id)

    async def cleanup(self, run_id: RunId) -> CleanupResult:
        """Delete leftover sandboxes and persisted state. Idempotent."""
        handles = await self._provider.list_for_run(run_id)
        warnings = await self._sweep(run_id, handles=handles)
        state = self._states.pop(run_id, None)
        if state is not None:
            state.release()
        state_removed = self._store.delete(run_id)
        return CleanupResult(
            run_id=run_id,
            sandboxes_deleted=len(handles) - len(warnings),
            state_removed=state_removed,
            warnings=warnings,
        )

    async def sweep(self, run_id: RunId) -> list[str]:
        """Delete every sandbox still labelled with the run."""
        return await self._sweep(run_id)

    async def _sweep(
        self, run_id: RunId, handles: list[str] | None = None
    ) -> list[str]:
        if handles is None:
            handles = await self._provider.list_for_run(run_id)
        warnings = []
        for handle in handles:
            warning = await delete_with_retries(
                provider=self._provider,
                observer=self._sandbox_observer,
                handle=handle,
                work_id=f"{run_id}:*",
                attempts=self._teardown_attempts,
                backoff_seconds=self._teardown_backoff_seconds,
            )
            if warning is not None:
                warnings.append(str(warning))
        return warnings

    async def _settle_persisted(self, run_id: RunId) -> None:
        """Wait for the owning process to record the cancellation.

        If it never does (the process is gone), the persisted snapshot is
        rewritten with every unfinished item cancelled.
        """
        deadline = self._clock() + self._settle_timeout_seconds
        while True:
            snapshot = self._store.load(run_id)
            if snapshot is None or snapshot.status.is_terminal:
                return
            if self._clock() >= deadline:
                self._store.save(snapshot.cancelled(updated_at=datetime.now(UTC)))
                return
            await asyncio.sleep(self._settle_poll_seconds)
