"""RunStateStore Protocol — persistence shared with other CLI processes."""

from typing import Protocol

from anode_eval.evaluation.domain.run import RunId
from anode_eval.evaluation.domain.snapshot import StatusSnapshot


class RunStateStore(Protocol):
    def save(self, snapshot: StatusSnapshot) -> None: ...

    def load(self, run_id: RunId) -> StatusSnapshot | None: ...

    def request_cancel(self, run_id: RunId) -> None: ...

    def cancel_requested(self, run_id: RunId) -> bool: ...

    def delete(self, run_id: RunId) -> bool:
        """Remove all persisted artifacts; False when there was nothing to remove."""
        ...
