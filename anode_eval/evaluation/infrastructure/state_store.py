"""JsonRunStateStore — run snapshots and cancel markers as files on disk.

Layout under `{root}/.anode-eval/`:
    {run_id}.state.json   latest StatusSnapshot, replaced atomically
    {run_id}.cancel       present once cancellation was requested
"""

import contextlib
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from anode_eval.evaluation.domain.run import RunId
from anode_eval.evaluation.domain.snapshot import StatusSnapshot
from anode_eval.evaluation.infrastructure.errors import RunStateStoreError

STATE_DIR_NAME = ".anode-eval"


class JsonRunStateStore:
    """Does NOT inherit from RunStateStore (structural typing via Protocol)."""

    def __init__(self, root: Path) -> None:
        self._dir = root / STATE_DIR_NAME

    @property
    def directory(self) -> Path:
        return self._dir

    def state_path(self, run_id: RunId) -> Path:
        return self._dir / f"{run_id}.state.json"

    def cancel_path(self, run_id: RunId) -> Path:
        return self._dir / f"{run_id}.cancel"

    def save(self, snapshot: StatusSnapshot) -> None:
        path = self.state_path(snapshot.run_id)
        tmp_name: str | None = None
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._dir, prefix=f".{snapshot.run_id}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(snapshot.model_dump_json(indent=2))
            os.replace(tmp_name, path)
        except OSError as exc:
            if tmp_name is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
            raise RunStateStoreError(path=str(path), reason=str(exc)) from exc

    def load(self, run_id: RunId) -> StatusSnapshot | None:
        path = self.state_path(run_id)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise RunStateStoreError(path=str(path), reason=str(exc)) from exc
        try:
            return StatusSnapshot.model_validate_json(raw)
        except ValidationError as exc:
            raise RunStateStoreError(path=str(path), reason=str(exc)) from exc

    def request_cancel(self, run_id: RunId) -> None:
        path = self.cancel_path(run_id)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            path.touch()
        except OSError as exc:
            raise RunStateStoreError(path=str(path), reason=str(exc)) from exc

    def cancel_requested(self, run_id: RunId) -> bool:
        return self.cancel_path(run_id).exists()

    def delete(self, run_id: RunId) -> bool:
        removed = False
        for path in (self.state_path(run_id), self.cancel_path(run_id)):
            if not path.exists():
                continue
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as exc:
                raise RunStateStoreError(path=str(path), reason=str(exc)) from exc
            removed = True
        return removed
