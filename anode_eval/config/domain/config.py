"""Top-level EvalConfig aggregate — the root configuration object."""

from pydantic import BaseModel, Field

from anode_eval.config.domain.agent import AgentConfig
from anode_eval.config.domain.prompt import PromptConfig
from anode_eval.config.domain.settings import EvalSettings


class EvalConfig(BaseModel, frozen=True):
    """Root configuration aggregate: the matrix of prompts × agents plus settings."""

    name: str = Field(min_length=1)
    description: str = ""
    prompts: list[PromptConfig] = Field(min_length=1)
    agents: list[AgentConfig] = Field(min_length=1)
    settings: EvalSettings = Field(default_factory=EvalSettings)
