"""Error types raised by config infrastructure."""

from pathlib import Path

from anode_eval.core.errors import AnodeEvalError


class ConfigError(AnodeEvalError):
    """Raised when the evaluation matrix is malformed; fatal before scheduling."""


class ConfigLoadError(ConfigError):
    """Raised when the config file cannot be opened or parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to load config {path}: {reason}")


class ConfigValidationError(ConfigError):
    """Raised when the loaded config fails schema or semantic validation."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to validate config: {reason}")


class MissingEnvVarsError(ConfigError):
    """Raised when `${VAR}` references in the config are not set."""

    def __init__(self, missing_vars: list[str]) -> None:
        self.missing_vars = missing_vars
        var_list = ", ".join(sorted(missing_vars))
        super().__init__(
            f"Failed to load config: missing environment variables: {var_list}"
        )


class MissingCredentialsError(ConfigError):
    """Raised when a credential named in `api_keys.env_vars` is not set."""

    def __init__(self, missing_vars: list[str]) -> None:
        self.missing_vars = missing_vars
        var_list = ", ".join(sorted(missing_vars))
        super().__init__(f"Failed to resolve credentials: not set: {var_list}")


class ConfigWriteError(ConfigError):
    """Raised when the sample config cannot be written."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to write config {path}: {reason}")
