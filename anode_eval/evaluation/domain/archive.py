"""OutputArchive Protocol — keeps raw sandbox logs after the sandbox is gone."""

from typing import Protocol

from anode_eval.evaluation.domain.run import RunId


class OutputArchive(Protocol):
    def save(self, run_id: RunId, work_id: str, logs: str) -> str:
        """Store `logs` and return a reference (a path) to them."""
        ...
