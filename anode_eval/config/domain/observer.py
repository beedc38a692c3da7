"""Observer port for the config domain — defines events in domain language."""

from typing import Protocol


class ConfigObserver(Protocol):
    def config_loaded(self, name: str, total_prompts: int, total_agents: int) -> None: ...

    def config_direct_api_keys_warning(self, key_names: list[str]) -> None: ...
