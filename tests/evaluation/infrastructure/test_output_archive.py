"""Tests for FileOutputArchive."""

from pathlib import Path

import pytest

from anode_eval.evaluation.infrastructure.errors import OutputArchiveError
from anode_eval.evaluation.infrastructure.output_archive import (
    FileOutputArchive,
    log_filename,
)


class TestLogFilename:
    def test_slashes_in_model_names_are_replaced(self) -> None:
        assert log_filename("run-1:hello:opencode:openai/gpt-5:0") == (
            "run-1:hello:opencode:openai_gpt-5:0.log"
        )


class TestFileOutputArchive:
    def test_save_writes_under_run_directory(self, tmp_path: Path) -> None:
        archive = FileOutputArchive(root=tmp_path / "results")

        ref = archive.save("run-1", "run-1:hello:codex:m:0", "agent output\n")

        path = Path(ref)
        assert path == tmp_path / "results" / "run-1" / "run-1:hello:codex:m:0.log"
        assert path.read_text(encoding="utf-8") == "agent output\n"

    def test_unwritable_root_raises(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("", encoding="utf-8")
        archive = FileOutputArchive(root=blocker)

        with pytest.raises(OutputArchiveError):
            archive.save("run-1", "w", "logs")
