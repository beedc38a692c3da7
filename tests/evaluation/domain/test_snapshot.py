"""Tests for StatusSnapshot."""

from datetime import UTC, datetime

from anode_eval.evaluation.domain.run import RunStatus
from anode_eval.evaluation.domain.snapshot import StatusSnapshot
from anode_eval.matrix.domain.work_item import WorkItemStatus

_T0 = datetime(2026, 1, 1, tzinfo=UTC)


def _make_snapshot() -> StatusSnapshot:
    items = {
        "r:a:codex:m:0": WorkItemStatus.SUCCEEDED,
        "r:a:codex:m:1": WorkItemStatus.RUNNING,
        "r:a:codex:m:2": WorkItemStatus.QUEUED,
        "r:a:codex:m:3": WorkItemStatus.TIMED_OUT,
    }
    counts = {status: 0 for status in WorkItemStatus}
    for status in items.values():
        counts[status] += 1
    return StatusSnapshot(
        run_id="r",
        name="n",
        status=RunStatus.RUNNING,
        updated_at=_T0,
        counts=counts,
        items=items,
    )


class TestStatusSnapshot:
    def test_totals(self) -> None:
        snapshot = _make_snapshot()

        assert snapshot.total == 4
        assert snapshot.active_count == 2
        assert snapshot.count(WorkItemStatus.SUCCEEDED) == 1
        assert snapshot.count(WorkItemStatus.CANCELLED) == 0

    def test_cancelled_only_touches_active_items(self) -> None:
        later = datetime(2026, 1, 2, tzinfo=UTC)

        cancelled = _make_snapshot().cancelled(updated_at=later)

        assert cancelled.status == RunStatus.CANCELLED
        assert cancelled.cancel_requested is True
        assert cancelled.updated_at == later
        assert cancelled.active_count == 0
        assert cancelled.count(WorkItemStatus.CANCELLED) == 2
        assert cancelled.items["r:a:codex:m:0"] == WorkItemStatus.SUCCEEDED
        assert cancelled.items["r:a:codex:m:3"] == WorkItemStatus.TIMED_OUT

    def test_json_round_trip_keeps_enum_keys(self) -> None:
        snapshot = _make_snapshot()

        restored = StatusSnapshot.model_validate_json(snapshot.model_dump_json())

        assert restored == snapshot
        assert restored.count(WorkItemStatus.RUNNING) == 1
