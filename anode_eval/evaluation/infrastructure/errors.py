"""Error types raised by run state management."""

from anode_eval.core.errors import AnodeEvalError


class RunNotFoundError(AnodeEvalError):
    """Raised when no in-process or persisted state exists for a run id."""

    def __init__(self, run_id: str) -> None:
        self.run_id = run_id
        super().__init__(f"Failed to find run {run_id!r}")


class InvalidTransitionError(AnodeEvalError):
    """Raised when a work item would move backwards or out of a terminal status."""

    def __init__(self, work_id: str, current: str, target: str) -> None:
        self.work_id = work_id
        self.current = current
        self.target = target
        super().__init__(
            f"Failed to move work item {work_id} from {current} to {target}"
        )


class RunStateStoreError(AnodeEvalError):
    """Raised when persisted run state cannot be read or written."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to access run state {path}: {reason}")


class OutputArchiveError(AnodeEvalError):
    """Raised when raw sandbox logs cannot be written."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to archive sandbox logs to {path}: {reason}")
