"""Credential provider — resolves named environment variables for sandbox injection."""

import os
from collections.abc import Mapping

from anode_eval.config.domain.settings import ApiKeysConfig
from anode_eval.config.infrastructure.errors import MissingCredentialsError


class EnvCredentialProvider:
    """Resolves `api_keys` into the environment injected into every sandbox."""

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = os.environ if environ is None else environ

    def resolve(self, api_keys: ApiKeysConfig) -> dict[str, str]:
        """Merge `direct` values with every named environment variable.

        Raises:
            MissingCredentialsError: listing every named variable that is not set.
        """
        missing = [name for name in api_keys.env_vars if name not in self._environ]
        if missing:
            raise MissingCredentialsError(missing_vars=missing)

        resolved = dict(api_keys.direct)
        for name in api_keys.env_vars:
            resolved[name] = self._environ[name]
        return resolved
