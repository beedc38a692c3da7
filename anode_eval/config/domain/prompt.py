"""Prompt configuration model."""

from pathlib import Path

from pydantic import BaseModel, Field

from anode_eval.config.domain.harness import TestHarness


class PromptConfig(BaseModel, frozen=True):
    """One task handed to every agent, plus the harness that grades the result.

    `id` is restricted to characters that cannot collide with the `:` separator
    used in work ids.
    """

    id: str = Field(min_length=1, pattern=r"^[A-Za-z0-9_.\-]+$")
    prompt: str = Field(min_length=1)
    eval_path: Path
    test_harness: TestHarness
    setup_commands: list[str] = Field(default_factory=list)
    timeout_hours: float | None = Field(default=None, gt=0)
