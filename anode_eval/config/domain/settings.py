"""Global evaluation settings models."""

from pathlib import Path

from pydantic import BaseModel, Field


class ApiKeysConfig(BaseModel, frozen=True):
    """Credentials injected into every sandbox.

    `env_vars` names are resolved from the environment at run start. `direct`
    holds inline values and is discouraged.
    """

    env_vars: list[str] = Field(default_factory=list)
    direct: dict[str, str] = Field(default_factory=dict)


class EvalSettings(BaseModel, frozen=True):
    default_timeout_hours: float = Field(default=6, gt=0)
    output_dir: Path = Path("./eval-results")
    default_iterations: int = Field(default=10, ge=1)
    cleanup_on_complete: bool = True
    max_parallel: int = Field(default=1, ge=1)
    poll_interval_seconds: float = Field(default=30.0, gt=0)
    teardown_attempts: int = Field(default=3, ge=1)
    namespace: str = Field(default="anode-eval", min_length=1)
    api_keys: ApiKeysConfig = Field(default_factory=ApiKeysConfig)
