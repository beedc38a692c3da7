"""Agent configuration model."""

from typing import Literal

from pydantic import BaseModel, Field

type AgentTool = Literal["claude_code", "codex", "opencode"]


class AgentConfig(BaseModel, frozen=True):
    tool: AgentTool
    model: str = Field(min_length=1)
    iterations: int = Field(default=10, ge=1)

    @property
    def agent_id(self) -> str:
        return f"{self.tool}-{self.model}"
