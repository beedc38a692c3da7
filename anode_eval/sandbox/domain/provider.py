"""PodProvider Protocol — structural interface for sandbox backends."""

from typing import Protocol

from anode_eval.sandbox.domain.spec import PodPhase, SandboxHandle, SandboxSpec


class PodProvider(Protocol):
    """Creates, inspects and deletes isolated sandboxes.

    Implementations raise SchedulingError from `create` when the request is
    rejected and CollectionError from `logs` when output is unavailable.
    `delete` of an already-deleted sandbox must succeed.
    """

    async def create(self, spec: SandboxSpec) -> SandboxHandle: ...

    async def phase(self, handle: SandboxHandle) -> PodPhase: ...

    async def failure_reason(self, handle: SandboxHandle) -> str | None: ...

    async def logs(self, handle: SandboxHandle) -> bytes: ...

    async def delete(self, handle: SandboxHandle) -> None: ...

    async def list_for_run(self, run_id: str) -> list[SandboxHandle]: ...
