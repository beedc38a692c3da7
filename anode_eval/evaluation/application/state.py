"""RunState — the single source of truth for one evaluation run's progress."""

import asyncio
import threading
from collections import Counter
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from anode_eval.evaluation.domain.observer import EvaluationObserver
from anode_eval.evaluation.domain.run import EvaluationRun, RunId, RunStatus
from anode_eval.evaluation.domain.snapshot import StatusSnapshot
from anode_eval.evaluation.domain.store import RunStateStore
from anode_eval.evaluation.infrastructure.errors import (
    InvalidTransitionError,
    RunStateStoreError,
)
from anode_eval.matrix.domain.work_item import WorkId, WorkItem, WorkItemStatus

_TIMESTAMP_FIELDS: dict[WorkItemStatus, str] = {
    WorkItemStatus.SCHEDULED: "scheduled_at",
    WorkItemStatus.RUNNING: "started_at",
}


def _utcnow() -> datetime:
    return datetime.now(UTC)


class RunState:
    """Owns the work item table of one run.

    Work items are immutable snapshots; a transition builds the next snapshot
    and swaps it in under the lock, so readers see either the old item or the
    new one and never a partial update. Every mutation is persisted to the
    optional store so other processes can answer `status`. A store failure
    never undoes or blocks a transition: it is reported to the observer and
    the first one is kept as a run warning.
    """

    def __init__(
        self,
        run: EvaluationRun,
        items: list[WorkItem],
        store: RunStateStore | None = None,
        observer: EvaluationObserver | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._lock = threading.RLock()
        self._run = run
        self._order: list[WorkId] = [item.work_id for item in items]
        self._items: dict[WorkId, WorkItem] = {item.work_id: item for item in items}
        self._store = store
        self._observer = observer
        self._persist_failed = False
        self._clock = clock
        self._warnings: list[str] = []
        self._cancel_event = asyncio.Event()
        self._finished = asyncio.Event()
        self._released = False

    @property
    def run_id(self) -> RunId:
        return self._run.run_id

    @property
    def run(self) -> EvaluationRun:
        with self._lock:
            return self._run

    @property
    def cancel_event(self) -> asyncio.Event:
        return self._cancel_event

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_event.is_set()

    @property
    def released(self) -> bool:
        return self._released

    @property
    def warnings(self) -> list[str]:
        with self._lock:
            return list(self._warnings)

    def items(self) -> list[WorkItem]:
        """All work items in expansion order."""
        with self._lock:
            return [self._items[work_id] for work_id in self._order]

    def get(self, work_id: WorkId) -> WorkItem:
        with self._lock:
            return self._items[work_id]

    def start(self) -> None:
        self._set_run(status=RunStatus.RUNNING)

    def complete(self, status: RunStatus) -> None:
        self._set_run(status=status, completed_at=self._clock())
        self._finished.set()

    async def wait_finished(self) -> None:
        """Block until `complete` has been called."""
        await self._finished.wait()

    def transition(
        self, work_id: WorkId, target: WorkItemStatus, **changes: Any
    ) -> WorkItem:
        """Move one work item forward, applying `changes` in the same swap.

        Raises:
            InvalidTransitionError: if `target` is not strictly later than the
                current status or the item is already terminal.
        """
        with self._lock:
            current = self._items[work_id]
            if not current.status.can_transition_to(target):
                raise InvalidTransitionError(
                    work_id=work_id, current=current.status, target=target
                )
            now = self._clock()
            update: dict[str, Any] = {"status": target, **changes}
            timestamp_field = _TIMESTAMP_FIELDS.get(target)
            if timestamp_field is not None:
                update.setdefault(timestamp_field, now)
            if target.is_terminal:
                update.setdefault("completed_at", now)
            updated = current.model_copy(update=update)
            self._items[work_id] = updated
            self._persist()
            return updated

    def request_cancel(self) -> bool:
        """Set the cancellation flag. Returns False if it was already set."""
        if self._cancel_event.is_set():
            return False
        self._cancel_event.set()
        with self._lock:
            self._persist()
        return True

    def add_warning(self, message: str) -> None:
        with self._lock:
            self._warnings.append(message)

    def snapshot(self) -> StatusSnapshot:
        with self._lock:
            return self._snapshot()

    def release(self) -> bool:
        """Drop the work item table. Returns False if already released."""
        with self._lock:
            if self._released:
                return False
            self._items.clear()
            self._order.clear()
            self._released = True
            return True

    def _set_run(self, **update: Any) -> None:
        with self._lock:
            self._run = self._run.model_copy(update=update)
            self._persist()

    def _snapshot(self) -> StatusSnapshot:
        items = {work_id: self._items[work_id].status for work_id in self._order}
        counts = Counter(items.values())
        return StatusSnapshot(
            run_id=self._run.run_id,
            name=self._run.name,
            status=self._run.status,
            updated_at=self._clock(),
            counts={status: counts.get(status, 0) for status in WorkItemStatus},
            items=items,
            cancel_requested=self._cancel_event.is_set(),
        )

    def _persist(self) -> None:
        if self._store is None or self._released:
            return
        try:
            self._store.save(self._snapshot())
        except RunStateStoreError as exc:
            if self._observer is not None:
                self._observer.evaluation_state_persist_failed(
                    run_id=self._run.run_id, reason=str(exc)
                )
            if not self._persist_failed:
                self._persist_failed = True
                self._warnings.append(str(exc))
