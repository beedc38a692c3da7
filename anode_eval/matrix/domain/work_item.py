"""WorkItem — one (prompt, agent, iteration) execution unit and its status machine."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field

from anode_eval.config.domain.agent import AgentConfig
from anode_eval.config.domain.prompt import PromptConfig
from anode_eval.harness.domain.result import RunResult

type WorkId = str


class WorkItemStatus(StrEnum):
    QUEUED = "queued"
    SCHEDULED = "scheduled"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    @property
    def is_terminal(self) -> bool:
        return self.rank == _TERMINAL_RANK

    @property
    def is_active(self) -> bool:
        return not self.is_terminal

    def can_transition_to(self, target: "WorkItemStatus") -> bool:
        """Statuses only move forward; terminal statuses never change."""
        return not self.is_terminal and target.rank > self.rank


_TERMINAL_RANK = 3
_RANKS: dict[WorkItemStatus, int] = {
    WorkItemStatus.QUEUED: 0,
    WorkItemStatus.SCHEDULED: 1,
    WorkItemStatus.RUNNING: 2,
    WorkItemStatus.SUCCEEDED: _TERMINAL_RANK,
    WorkItemStatus.FAILED: _TERMINAL_RANK,
    WorkItemStatus.TIMED_OUT: _TERMINAL_RANK,
    WorkItemStatus.CANCELLED: _TERMINAL_RANK,
}


def make_work_id(
    run_id: str, prompt_id: str, tool: str, model: str, iteration: int
) -> WorkId:
    return f"{run_id}:{prompt_id}:{tool}:{model}:{iteration}"


class WorkItem(BaseModel, frozen=True):
    """Immutable snapshot of a work item.

    Transitions produce a new snapshot (`model_copy`) that the run state swaps
    in atomically, so a reader never sees a half-applied transition.
    """

    work_id: WorkId = Field(min_length=1)
    run_id: str = Field(min_length=1)
    prompt: PromptConfig
    agent: AgentConfig
    iteration: int = Field(ge=0)
    status: WorkItemStatus = WorkItemStatus.QUEUED
    scheduled_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    sandbox_handle: str | None = None
    output_ref: str | None = None
    run_result: RunResult | None = None
    error: str | None = None

    @property
    def prompt_id(self) -> str:
        return self.prompt.id

    @property
    def tool(self) -> str:
        return self.agent.tool

    @property
    def model(self) -> str:
        return self.agent.model
