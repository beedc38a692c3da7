"""Sandbox value objects exchanged with a pod provider."""

from enum import StrEnum

from pydantic import BaseModel, Field

type SandboxHandle = str


class PodPhase(StrEnum):
    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"

    @property
    def is_terminal(self) -> bool:
        return self in (PodPhase.SUCCEEDED, PodPhase.FAILED)


class SandboxSpec(BaseModel, frozen=True):
    """Everything a provider needs to launch one agent + harness execution."""

    run_id: str = Field(min_length=1)
    work_id: str = Field(min_length=1)
    prompt_id: str = Field(min_length=1)
    tool: str = Field(min_length=1)
    model: str = Field(min_length=1)
    iteration: int = Field(ge=0)
    prompt: str = Field(min_length=1)
    eval_path: str = Field(min_length=1)
    test_command: list[str] = Field(min_length=1)
    setup_commands: list[str] = Field(default_factory=list)
    env: dict[str, str] = Field(default_factory=dict)
    timeout_seconds: float = Field(gt=0)


class SandboxOutput(BaseModel, frozen=True):
    """Terminal phase plus the combined stdout/stderr log of a sandbox."""

    handle: SandboxHandle
    phase: PodPhase
    logs: str
    reason: str | None = None
