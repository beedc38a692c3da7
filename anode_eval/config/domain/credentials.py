"""CredentialProvider Protocol — resolves credentials injected into sandboxes."""

from typing import Protocol

from anode_eval.config.domain.settings import ApiKeysConfig


class CredentialProvider(Protocol):
    def resolve(self, api_keys: ApiKeysConfig) -> dict[str, str]: ...
