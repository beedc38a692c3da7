"""StatusSnapshot — read-only view of a run served to status queries."""

from datetime import datetime

from pydantic import BaseModel, Field

from anode_eval.evaluation.domain.run import RunId, RunStatus
from anode_eval.matrix.domain.work_item import WorkId, WorkItemStatus


class StatusSnapshot(BaseModel, frozen=True):
    run_id: RunId
    name: str
    status: RunStatus
    updated_at: datetime
    counts: dict[WorkItemStatus, int] = Field(default_factory=dict)
    items: dict[WorkId, WorkItemStatus] = Field(default_factory=dict)
    cancel_requested: bool = False

    @property
    def total(self) -> int:
        return len(self.items)

    @property
    def active_count(self) -> int:
        """Items not yet terminal (queued, scheduled or running)."""
        return sum(
            count for status, count in self.counts.items() if status.is_active
        )

    def count(self, status: WorkItemStatus) -> int:
        return self.counts.get(status, 0)

    def cancelled(self, updated_at: datetime) -> "StatusSnapshot":
        """Copy with every non-terminal item and the run marked cancelled."""
        items = {
            work_id: WorkItemStatus.CANCELLED if status.is_active else status
            for work_id, status in self.items.items()
        }
        counts = {status: 0 for status in WorkItemStatus}
        for status in items.values():
            counts[status] += 1
        return self.model_copy(
            update={
                "status": RunStatus.CANCELLED,
                "updated_at": updated_at,
                "items": items,
                "counts": counts,
                "cancel_requested": True,
            }
        )
