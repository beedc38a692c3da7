"""Structlog implementation of the ConfigObserver port."""

import structlog


class StructlogConfigObserver:
    """Delegates config domain events to structlog.

    Satisfies the ConfigObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def config_loaded(self, name: str, total_prompts: int, total_agents: int) -> None:
        self._log.info(
            "config.loaded",
            name=name,
            total_prompts=total_prompts,
            total_agents=total_agents,
        )

    def config_direct_api_keys_warning(self, key_names: list[str]) -> None:
        self._log.warning(
            "config.direct_api_keys_warning",
            key_names=key_names,
            message="Inline api_keys.direct values are stored in plain text; prefer env_vars",
        )
