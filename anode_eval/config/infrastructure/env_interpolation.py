"""${ENV_VAR} substitution over raw (pre-validation) config trees."""

import os
import re
from collections.abc import Iterator, Mapping

_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")

type RawValue = (
    str | int | float | bool | None | list["RawValue"] | dict[str, "RawValue"]
)


def _strings(data: RawValue) -> Iterator[str]:
    if isinstance(data, str):
        yield data
    elif isinstance(data, list):
        for item in data:
            yield from _strings(item)
    elif isinstance(data, dict):
        for value in data.values():
            yield from _strings(value)


def collect_missing_vars(
    data: RawValue, environ: Mapping[str, str] | None = None
) -> list[str]:
    """Return every referenced variable absent from the environment, first-seen order."""
    env = os.environ if environ is None else environ
    missing: dict[str, None] = {}
    for text in _strings(data):
        for match in _ENV_VAR_PATTERN.finditer(text):
            if match.group(1) not in env:
                missing.setdefault(match.group(1))
    return list(missing)


def interpolate(data: RawValue, environ: Mapping[str, str] | None = None) -> RawValue:
    """Return a copy of data with every ${VAR} replaced.

    Call `collect_missing_vars` first; an unset variable raises KeyError here.
    """
    env = os.environ if environ is None else environ
    if isinstance(data, str):
        return _ENV_VAR_PATTERN.sub(lambda m: env[m.group(1)], data)
    if isinstance(data, list):
        return [interpolate(item, env) for item in data]
    if isinstance(data, dict):
        return {key: interpolate(value, env) for key, value in data.items()}
    return data
