"""Error types raised by sandbox infrastructure and the pod lifecycle controller."""

from anode_eval.core.errors import AnodeEvalError


class SchedulingError(AnodeEvalError):
    """Raised when the provider rejects a sandbox request (capacity, malformed spec)."""

    def __init__(self, work_id: str, reason: str) -> None:
        self.work_id = work_id
        super().__init__(f"Failed to schedule sandbox for {work_id}: {reason}")


class CollectionError(AnodeEvalError):
    """Raised when a terminal sandbox's output cannot be read (e.g. evicted)."""

    def __init__(self, handle: str, reason: str) -> None:
        self.handle = handle
        super().__init__(f"Failed to collect output from sandbox {handle}: {reason}")


class SandboxTimeoutError(AnodeEvalError):
    """Raised when a sandbox exceeds its per-work-item timeout. Never retried."""

    def __init__(self, work_id: str, timeout_seconds: float) -> None:
        self.work_id = work_id
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Failed to finish {work_id} within {timeout_seconds:.0f}s timeout"
        )


class TeardownWarning(AnodeEvalError):
    """Raised when a sandbox could not be deleted after bounded retries.

    Non-fatal: it is recorded as a run warning and never stops the run.
    """

    def __init__(self, handle: str, attempts: int, reason: str) -> None:
        self.handle = handle
        self.attempts = attempts
        super().__init__(
            f"Failed to delete sandbox {handle} after {attempts} attempt(s): {reason}"
        )


class SandboxDeleteError(AnodeEvalError):
    """Raised by a provider when a single delete attempt fails."""

    def __init__(self, handle: str, reason: str) -> None:
        self.handle = handle
        super().__init__(f"Failed to delete sandbox {handle}: {reason}")


class ProviderUnavailableError(AnodeEvalError):
    """Raised when the sandbox backend cannot be reached or configured."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to reach sandbox provider: {reason}")
