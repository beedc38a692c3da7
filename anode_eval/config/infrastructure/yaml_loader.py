"""YAML config loader — parses, interpolates env vars, validates, and emits observer events."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from anode_eval.config.domain.config import EvalConfig
from anode_eval.config.domain.observer import ConfigObserver
from anode_eval.config.infrastructure.env_interpolation import (
    collect_missing_vars,
    interpolate,
)
from anode_eval.config.infrastructure.errors import (
    ConfigLoadError,
    ConfigValidationError,
    MissingEnvVarsError,
)

_HARNESS_TYPES = frozenset({"cargo", "npm", "pytest", "go", "custom"})


class YamlConfigLoader:
    """Loads, interpolates, validates, and returns an EvalConfig from a YAML file."""

    def __init__(self, observer: ConfigObserver) -> None:
        self._observer = observer

    def load(self, path: Path) -> EvalConfig:
        """
        Load, interpolate, validate, and return an EvalConfig from a YAML file.

        Raises:
            ConfigLoadError: if the file cannot be read or is not valid YAML.
            MissingEnvVarsError: if any ${ENV_VAR} references are unset (all collected first).
            ConfigValidationError: if the schema is violated.
        """
        raw = _parse_yaml(path=path)
        missing = collect_missing_vars(raw)
        if missing:
            raise MissingEnvVarsError(missing)
        normalized = _normalize(raw=interpolate(raw))
        cfg = _build_config(normalized=normalized)
        if cfg.settings.api_keys.direct:
            self._observer.config_direct_api_keys_warning(
                key_names=sorted(cfg.settings.api_keys.direct)
            )
        self._observer.config_loaded(
            name=cfg.name,
            total_prompts=len(cfg.prompts),
            total_agents=len(cfg.agents),
        )
        return cfg


def _parse_yaml(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
    except OSError as exc:
        raise ConfigLoadError(path=path, reason=exc.strerror or str(exc)) from exc
    except yaml.YAMLError as exc:
        raise ConfigLoadError(path=path, reason=f"invalid YAML: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigLoadError(path=path, reason="top level must be a mapping")
    return raw


def _normalize(raw: dict[str, Any]) -> dict[str, Any]:
    """Rewrite harness tags into the `type` form and fill default agent iterations."""
    prompts = [
        {**prompt, "test_harness": _normalize_harness(prompt.get("test_harness"))}
        if isinstance(prompt, dict)
        else prompt
        for prompt in raw.get("prompts") or []
    ]

    settings = raw.get("settings")
    default_iterations = (
        settings.get("default_iterations") if isinstance(settings, dict) else None
    )
    agents = raw.get("agents") or []
    if default_iterations is not None:
        agents = [
            {"iterations": default_iterations, **agent}
            if isinstance(agent, dict)
            else agent
            for agent in agents
        ]

    return {**raw, "prompts": prompts, "agents": agents}


def _normalize_harness(harness: Any) -> Any:
    """
    Accept both `{type: cargo, release: true}` and the externally tagged
    `{cargo: {release: true}}` / bare `cargo` spellings.
    """
    if isinstance(harness, str) and harness in _HARNESS_TYPES:
        return {"type": harness}
    if isinstance(harness, dict) and "type" not in harness and len(harness) == 1:
        tag, fields = next(iter(harness.items()))
        if tag in _HARNESS_TYPES:
            return {"type": tag, **(fields or {})}
    return harness


def _build_config(normalized: dict[str, Any]) -> EvalConfig:
    try:
        return EvalConfig.model_validate(normalized)
    except ValidationError as exc:
        raise ConfigValidationError(str(exc)) from exc

