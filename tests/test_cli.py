"""CLI behaviour tests."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from onbored import cli
from onbored.cli import _build_parser, clone_repository, watch
from onbored.orchestrator import Orchestrator
from tests._fixtures.git_runner import FakeGitRunner


def test_cli_accepts_verbose_before_command() -> None:
    args = _build_parser().parse_args(["--verbose", "analyze"])
    assert args.verbose is True
    assert args.command == "analyze"


def test_cli_accepts_verbose_after_command() -> None:
    args = _build_parser().parse_args(["analyze", "--verbose"])
    assert args.verbose is True
    assert args.command == "analyze"


def test_analyze_defaults() -> None:
    args = _build_parser().parse_args(["analyze"])

    assert args.path == "."
    assert args.output is None
    assert args.ai is None
    assert args.clone is None
    assert args.watch is False
    assert args.interval == pytest.approx(2.0)


def test_analyze_accepts_all_options() -> None:
    args = _build_parser().parse_args(
        ["analyze", "repo", "-o", "out", "--ai", "openai", "--watch", "--interval", "0.5"]
    )

    assert (args.path, args.output, args.ai, args.watch) == ("repo", "out", "openai", True)
    assert args.interval == pytest.approx(0.5)


def test_analyze_rejects_unknown_ai_provider() -> None:
    with pytest.raises(SystemExit) as excinfo:
        _build_parser().parse_args(["analyze", "--ai", "gemini"])
    assert excinfo.value.code == 2


def test_serve_defaults() -> None:
    args = _build_parser().parse_args(["serve"])

    assert (args.host, args.port) == ("127.0.0.1", 8000)


def _use_fake_git(monkeypatch, runner: FakeGitRunner) -> None:
    monkeypatch.setattr(cli, "Orchestrator", lambda: Orchestrator(git_runner=runner))


def test_main_analyze_writes_report(repo_builder, monkeypatch, capsys) -> None:
    repo_builder.write({"README.md": "# Demo\n"})
    _use_fake_git(monkeypatch, FakeGitRunner())

    cli.main(["analyze", str(repo_builder.path())])

    assert (repo_builder.path() / ".onbored" / "data.json").exists()
    assert "Report written to" in capsys.readouterr().out


def test_main_analyze_not_a_repository_exits_1(repo_builder, monkeypatch, capsys) -> None:
    _use_fake_git(monkeypatch, FakeGitRunner(repository=False))

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["analyze", str(repo_builder.path())])

    assert excinfo.value.code == 1
    assert "not a git repository" in capsys.readouterr().err


def test_main_analyze_missing_path_exits_1(tmp_path: Path, monkeypatch) -> None:
    _use_fake_git(monkeypatch, FakeGitRunner())

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["analyze", str(tmp_path / "missing")])

    assert excinfo.value.code == 1


def test_main_analyze_rejects_non_positive_interval(repo_builder) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["analyze", str(repo_builder.path()), "--interval", "0"])

    assert excinfo.value.code == 1


def test_main_clone_failure_exits_1(monkeypatch, capsys) -> None:
    def failing_clone(url):
        raise subprocess.CalledProcessError(128, ["git", "clone", url])

    monkeypatch.setattr(cli, "clone_repository", failing_clone)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["analyze", "--clone", "git@example.com:acme/private.git"])

    assert excinfo.value.code == 1
    assert "Clone failed" in capsys.readouterr().err


def test_main_analyzes_cloned_repository(repo_builder, monkeypatch) -> None:
    monkeypatch.setattr(cli, "clone_repository", lambda url: repo_builder.path())
    _use_fake_git(monkeypatch, FakeGitRunner())

    cli.main(["analyze", "--clone", "https://example.com/acme/app.git"])

    assert (repo_builder.path() / ".onbored" / "data.json").exists()


def test_main_watch_reruns_analysis(repo_builder, monkeypatch) -> None:
    _use_fake_git(monkeypatch, FakeGitRunner())
    calls = []

    def fake_watch(run_once, interval_hours):
        calls.append(interval_hours)
        run_once()

    monkeypatch.setattr(cli, "watch", fake_watch)

    cli.main(["analyze", str(repo_builder.path()), "--watch", "--interval", "1.5"])

    assert calls == [1.5]


def test_clone_repository_targets_fresh_temp_dir(tmp_path: Path) -> None:
    runner = FakeGitRunner({("git", "clone"): ""})

    destination = clone_repository(
        "https://example.com/acme/app.git", parent=tmp_path, runner=runner
    )

    assert destination.parent == tmp_path
    assert destination.name.startswith("onbored-app-")
    assert runner.calls[0][:3] == ["git", "clone", "--depth=100"]


def test_watch_sleeps_between_runs_and_survives_failures() -> None:
    sleeps = []
    runs = []

    def run_once():
        runs.append(len(runs))
        if len(runs) == 1:
            raise RuntimeError("transient")

    completed = watch(run_once, 0.5, sleeper=sleeps.append, max_runs=3)

    assert completed == 3
    assert sleeps == [1800.0, 1800.0, 1800.0]
    assert len(runs) == 3
