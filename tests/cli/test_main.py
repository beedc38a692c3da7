"""Tests for the anode-eval CLI commands, driven through typer's CliRunner."""

import json
import re
from pathlib import Path

import pytest
from typer.testing import CliRunner

from anode_eval.cli import main
from anode_eval.evaluation.infrastructure.state_store import JsonRunStateStore
from anode_eval.sandbox.domain.provider import PodProvider
from tests.sandbox.fake_provider import FakePodProvider, cargo_logs

FIXTURES = Path(__file__).parent.parent / "fixtures"

runner = CliRunner()

_RUN_CONFIG = """\
name: "cli-run"
prompts:
  - id: "hello"
    prompt: "Say hello"
    eval_path: "./evals/hello"
    test_harness:
      type: cargo
agents:
  - tool: codex
    model: m
    iterations: 2
settings:
  max_parallel: 2
  poll_interval_seconds: 0.001
  output_dir: "{output_dir}"
"""


def _write_run_config(tmp_path: Path) -> Path:
    path = tmp_path / "anode-eval.yaml"
    path.write_text(
        _RUN_CONFIG.format(output_dir=tmp_path / "results"), encoding="utf-8"
    )
    return path


def _use_provider(monkeypatch: pytest.MonkeyPatch, provider: PodProvider) -> None:
    monkeypatch.setattr(main, "_make_provider", lambda local, namespace: provider)


def _run_id(output: str) -> str:
    match = re.search(r"Run ID: (\S+)", output)
    assert match is not None, output
    return match.group(1)


def _complete_run(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    _use_provider(monkeypatch, FakePodProvider(logs=cargo_logs(passed=3, failed=1)))
    result = runner.invoke(
        main.app,
        [
            "run",
            "--config",
            str(_write_run_config(tmp_path)),
            "--state-dir",
            str(tmp_path),
            "--log-format",
            "json",
        ],
    )
    assert result.exit_code == 0, result.output
    return _run_id(result.output)


class TestInit:
    def test_writes_sample_config(self, tmp_path: Path) -> None:
        path = tmp_path / "anode-eval.yaml"

        result = runner.invoke(main.app, ["init", "--output", str(path)])

        assert result.exit_code == 0
        assert path.exists()
        assert "Sample Evaluation" in path.read_text(encoding="utf-8")

    def test_unwritable_destination_fails(self, tmp_path: Path) -> None:
        path = tmp_path / "missing" / "anode-eval.yaml"

        result = runner.invoke(main.app, ["init", "-o", str(path)])

        assert result.exit_code == 1
        assert "ConfigWriteError" in result.output


class TestRun:
    def test_dry_run_lists_plan_and_writes_nothing(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant")
        provider = FakePodProvider()
        _use_provider(monkeypatch, provider)

        result = runner.invoke(
            main.app,
            [
                "run",
                "-c",
                str(FIXTURES / "valid_config.yaml"),
                "--dry-run",
                "--state-dir",
                str(tmp_path),
                "-o",
                str(tmp_path / "results"),
            ],
        )

        assert result.exit_code == 0, result.output
        assert "Dry run: 10 work item(s) planned" in result.output
        assert ":hello-world:claude_code:claude-opus-4-5-20251101:2" in result.output
        assert provider.created == []
        assert not (tmp_path / "results").exists()

    def test_full_run_writes_reports(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        run_id = _complete_run(tmp_path, monkeypatch)

        report = json.loads(
            (tmp_path / "results" / f"{run_id}.json").read_text(encoding="utf-8")
        )
        markdown = (tmp_path / "results" / f"{run_id}_report.md").read_text(
            encoding="utf-8"
        )
        assert report["summary"]["counts"]["succeeded"] == 2
        assert report["scores"][0]["score"] == pytest.approx(75.0)
        assert "| 1 | codex | m | 75.00% | 6/8 | 2/2 |" in markdown
        log_path = Path(report["work_items"][0]["output_ref"])
        assert log_path.parent == tmp_path / "results" / run_id
        assert "test f0 ... FAILED" in log_path.read_text(encoding="utf-8")
        assert report["work_items"][0]["run_result"]["failed_tests"] == ["f0"]

    def test_parallelism_override(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        provider = FakePodProvider(logs=cargo_logs(passed=1))
        _use_provider(monkeypatch, provider)

        result = runner.invoke(
            main.app,
            [
                "run",
                "-c",
                str(_write_run_config(tmp_path)),
                "-p",
                "1",
                "--state-dir",
                str(tmp_path),
                "--log-format",
                "json",
            ],
        )

        assert result.exit_code == 0, result.output
        assert provider.max_live == 1

    def test_missing_credentials_fail_before_scheduling(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        provider = FakePodProvider()
        _use_provider(monkeypatch, provider)

        result = runner.invoke(
            main.app,
            ["run", "-c", str(FIXTURES / "valid_config.yaml"), "--dry-run"],
        )

        assert result.exit_code == 1
        assert "MissingCredentialsError" in result.output
        assert provider.created == []

    def test_missing_config_file(self, tmp_path: Path) -> None:
        result = runner.invoke(main.app, ["run", "-c", str(tmp_path / "nope.yaml")])

        assert result.exit_code == 1
        assert "ConfigLoadError" in result.output

    def test_invalid_matrix(self, tmp_path: Path) -> None:
        result = runner.invoke(
            main.app,
            [
                "run",
                "-c",
                str(FIXTURES / "duplicate_prompts_config.yaml"),
                "--dry-run",
                "--state-dir",
                str(tmp_path),
            ],
        )

        assert result.exit_code == 1
        assert "duplicate prompt id 'same'" in result.output


class TestStatus:
    def test_reports_counts(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        run_id = _complete_run(tmp_path, monkeypatch)

        result = runner.invoke(
            main.app, ["status", "--run-id", run_id, "--state-dir", str(tmp_path)]
        )

        assert result.exit_code == 0, result.output
        assert "Status: completed" in result.output
        assert re.search(r"succeeded\s+2", result.output)

    def test_unknown_run(self, tmp_path: Path) -> None:
        result = runner.invoke(
            main.app, ["status", "--run-id", "nope", "--state-dir", str(tmp_path)]
        )

        assert result.exit_code == 1
        assert "RunNotFoundError" in result.output


class TestCancel:
    def test_forced_cancel_sweeps_sandboxes(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        run_id = _complete_run(tmp_path, monkeypatch)
        provider = FakePodProvider()
        provider.adopt("straggler", run_id=run_id)
        _use_provider(monkeypatch, provider)

        result = runner.invoke(
            main.app,
            [
                "cancel",
                run_id,
                "--force",
                "--wait-seconds",
                "0",
                "--state-dir",
                str(tmp_path),
            ],
        )

        assert result.exit_code == 0, result.output
        assert f"Cancelled run {run_id}" in result.output
        assert provider.live == set()
        assert JsonRunStateStore(root=tmp_path).cancel_requested(run_id)

    def test_declined_confirmation_aborts(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        run_id = _complete_run(tmp_path, monkeypatch)

        result = runner.invoke(
            main.app, ["cancel", run_id, "--state-dir", str(tmp_path)], input="n\n"
        )

        assert result.exit_code == 1
        assert not JsonRunStateStore(root=tmp_path).cancel_requested(run_id)

    def test_unknown_run(self, tmp_path: Path) -> None:
        result = runner.invoke(
            main.app,
            ["cancel", "nope", "--force", "--local", "--state-dir", str(tmp_path)],
        )

        assert result.exit_code == 1
        assert "RunNotFoundError" in result.output


class TestCleanup:
    def test_second_cleanup_is_a_no_op(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        run_id = _complete_run(tmp_path, monkeypatch)
        provider = FakePodProvider()
        provider.adopt("leftover", run_id=run_id)
        _use_provider(monkeypatch, provider)
        args = ["cleanup", run_id, "--force", "--state-dir", str(tmp_path)]

        first = runner.invoke(main.app, args)
        second = runner.invoke(main.app, args)

        assert first.exit_code == 0, first.output
        assert (
            f"Cleaned up run {run_id}: 1 sandbox(es) deleted, state removed"
            in first.output
        )
        assert second.exit_code == 0, second.output
        assert f"Nothing to clean up for run {run_id}" in second.output
        assert JsonRunStateStore(root=tmp_path).load(run_id) is None
