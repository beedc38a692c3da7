"""Error types raised by harness infrastructure."""

from anode_eval.core.errors import AnodeEvalError


class HarnessNotSupportedError(AnodeEvalError):
    """Raised when no adapter is registered for a harness variant."""

    def __init__(self, harness_type: str) -> None:
        self.harness_type = harness_type
        super().__init__(f"Failed to find a harness adapter for type {harness_type!r}")
