"""LocalProcessProvider — runs only the harness command as a local subprocess.

Used by `run --local` to exercise a matrix without a cluster. No agent is
invoked; the harness grades `eval_path` as it is on disk.
"""

import asyncio
import contextlib
import hashlib
import os
import signal
from dataclasses import dataclass, field

from anode_eval.sandbox.domain.spec import PodPhase, SandboxHandle, SandboxSpec
from anode_eval.sandbox.infrastructure.entrypoint import harness_script
from anode_eval.sandbox.infrastructure.errors import CollectionError, SchedulingError


@dataclass
class _LocalSandbox:
    run_id: str
    process: asyncio.subprocess.Process
    reader: asyncio.Task[None]
    output: bytearray = field(default_factory=bytearray)


class LocalProcessProvider:
    """PodProvider running `bash -c <harness script>` in the prompt's eval path.

    Each sandbox gets its own session so delete kills the whole process group.

    Does NOT inherit from PodProvider (structural typing via Protocol).
    """

    def __init__(self, shell: str = "bash") -> None:
        self._shell = shell
        self._sandboxes: dict[SandboxHandle, _LocalSandbox] = {}

    async def create(self, spec: SandboxSpec) -> SandboxHandle:
        handle = f"local-{hashlib.sha1(spec.work_id.encode('utf-8')).hexdigest()[:12]}"
        try:
            process = await asyncio.create_subprocess_exec(
                self._shell,
                "-c",
                harness_script(spec),
                cwd=spec.eval_path,
                env={**os.environ, **spec.env},
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                start_new_session=True,
            )
        except OSError as exc:
            raise SchedulingError(work_id=spec.work_id, reason=str(exc)) from exc

        output = bytearray()
        reader = asyncio.create_task(_drain(process, output))
        self._sandboxes[handle] = _LocalSandbox(
            run_id=spec.run_id, process=process, reader=reader, output=output
        )
        return handle

    async def phase(self, handle: SandboxHandle) -> PodPhase:
        sandbox = self._sandboxes.get(handle)
        if sandbox is None:
            return PodPhase.UNKNOWN
        if sandbox.process.returncode is None or not sandbox.reader.done():
            return PodPhase.RUNNING
        return PodPhase.SUCCEEDED if sandbox.process.returncode == 0 else PodPhase.FAILED

    async def failure_reason(self, handle: SandboxHandle) -> str | None:
        sandbox = self._sandboxes.get(handle)
        if sandbox is None:
            return "process not found"
        if sandbox.process.returncode:
            return f"process exited with code {sandbox.process.returncode}"
        return None

    async def logs(self, handle: SandboxHandle) -> bytes:
        sandbox = self._sandboxes.get(handle)
        if sandbox is None:
            raise CollectionError(handle=handle, reason="process not found")
        return bytes(sandbox.output)

    async def delete(self, handle: SandboxHandle) -> None:
        sandbox = self._sandboxes.pop(handle, None)
        if sandbox is None:
            return
        if sandbox.process.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                os.killpg(sandbox.process.pid, signal.SIGKILL)
        await sandbox.process.wait()
        sandbox.reader.cancel()
        await asyncio.gather(sandbox.reader, return_exceptions=True)

    async def list_for_run(self, run_id: str) -> list[SandboxHandle]:
        return [
            handle
            for handle, sandbox in self._sandboxes.items()
            if sandbox.run_id == run_id
        ]


async def _drain(process: asyncio.subprocess.Process, output: bytearray) -> None:
    assert process.stdout is not None
    while chunk := await process.stdout.read(65536):
        output.extend(chunk)
    await process.wait()
