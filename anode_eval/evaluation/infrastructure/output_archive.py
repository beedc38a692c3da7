"""FileOutputArchive — raw sandbox logs as `{root}/{run_id}/{work_id}.log`."""

import re
from pathlib import Path

from anode_eval.evaluation.domain.run import RunId
from anode_eval.evaluation.infrastructure.errors import OutputArchiveError

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_.:-]")


def log_filename(work_id: str) -> str:
    """Model names may contain `/`; everything outside a safe set becomes `_`."""
    return f"{_UNSAFE_FILENAME_CHARS.sub('_', work_id)}.log"


class FileOutputArchive:
    """Does NOT inherit from OutputArchive (structural typing via Protocol)."""

    def __init__(self, root: Path) -> None:
        self._root = root

    def path_for(self, run_id: RunId, work_id: str) -> Path:
        return self._root / run_id / log_filename(work_id)

    def save(self, run_id: RunId, work_id: str, logs: str) -> str:
        path = self.path_for(run_id, work_id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(logs, encoding="utf-8")
        except OSError as exc:
            raise OutputArchiveError(path=str(path), reason=str(exc)) from exc
        return str(path)
