"""EvaluationRun — identity and lifecycle of one invocation of the matrix."""

import uuid
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field

type RunId = str


class RunStatus(StrEnum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RunStatus.COMPLETED, RunStatus.CANCELLED, RunStatus.FAILED)


def new_run_id() -> RunId:
    return str(uuid.uuid4())


class EvaluationRun(BaseModel, frozen=True):
    """Run metadata. Work items are owned by the run state, not stored here."""

    run_id: RunId = Field(min_length=1)
    name: str
    description: str = ""
    status: RunStatus = RunStatus.PENDING
    created_at: datetime
    completed_at: datetime | None = None
    max_parallel: int = Field(default=1, ge=1)
    dry_run: bool = False
