"""Sample configuration emitted by `anode-eval init`."""

from pathlib import Path

import yaml

from anode_eval.config.domain.agent import AgentConfig
from anode_eval.config.domain.config import EvalConfig
from anode_eval.config.domain.harness import CargoHarness
from anode_eval.config.domain.prompt import PromptConfig
from anode_eval.config.domain.settings import ApiKeysConfig, EvalSettings
from anode_eval.config.infrastructure.errors import ConfigWriteError


def sample_config() -> EvalConfig:
    return EvalConfig(
        name="Sample Evaluation",
        description="A sample evaluation configuration",
        prompts=[
            PromptConfig(
                id="hello-world",
                prompt=(
                    "Create a function that returns 'Hello, World!' "
                    "and write tests for it."
                ),
                eval_path=Path("./evals/hello-world"),
                test_harness=CargoHarness(),
            )
        ],
        agents=[
            AgentConfig(
                tool="claude_code", model="claude-opus-4-5-20251101", iterations=10
            ),
            AgentConfig(tool="codex", model="gpt-5.2-xhigh", iterations=10),
        ],
        settings=EvalSettings(
            api_keys=ApiKeysConfig(env_vars=["ANTHROPIC_API_KEY", "OPENAI_API_KEY"]),
        ),
    )


def write_sample_config(path: Path) -> EvalConfig:
    """Serialize the sample config as YAML to path and return it.

    Raises:
        ConfigWriteError: if path (or its parent directory) is not writable.
    """
    config = sample_config()
    data = config.model_dump(mode="json")
    try:
        path.write_text(
            yaml.safe_dump(data, sort_keys=False, allow_unicode=True),
            encoding="utf-8",
        )
    except OSError as exc:
        raise ConfigWriteError(path=path, reason=exc.strerror or str(exc)) from exc
    return config
