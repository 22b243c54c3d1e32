"""Tests for onbored.repo_scanner."""

from __future__ import annotations

from pathlib import Path

import pytest

from onbored.repo_scanner import ExcludeRule, RepoScanner


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_scan_builds_manifest_with_sizes(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()

    _write(repo_root / "src" / "app.py", "print('hi')\n")
    _write(repo_root / "docs" / "overview.md", "# Overview\n")
    _write(repo_root / "infra" / "Dockerfile", "FROM python:3.11-slim\n")

    manifest = RepoScanner().scan(str(repo_root))

    assert manifest.root == str(repo_root.resolve())
    sizes = {file.path: file.size for file in manifest.files}
    assert sizes == {
        "docs/overview.md": 11,
        "infra/Dockerfile": 22,
        "src/app.py": 12,
    }


def test_scan_skips_dependency_and_output_directories(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    for excluded in (".git", "node_modules", "dist", "build", "target", "vendor", ".venv", ".onbored"):
        _write(repo_root / excluded / "inner.js", "export const x = 1\n")
    _write(repo_root / "src" / "main.ts", "console.log('ok')\n")

    manifest = RepoScanner().scan(str(repo_root))

    assert [file.path for file in manifest.files] == ["src/main.ts"]


def test_scan_returns_sorted_walk_order(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    for name in ("b.py", "a.py", "lib/z.py", "lib/c.py"):
        _write(repo_root / name, "\n")

    manifest = RepoScanner().scan(str(repo_root))

    assert [file.path for file in manifest.files] == ["a.py", "b.py", "lib/c.py", "lib/z.py"]


def test_scan_rejects_missing_directory(tmp_path: Path) -> None:
    missing = tmp_path / "missing"
    with pytest.raises(FileNotFoundError) as excinfo:
        RepoScanner().scan(str(missing))
    assert str(missing) in str(excinfo.value)


def test_scan_respects_exclude_paths(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()

    _write(repo_root / "src" / "main.py", "print('ok')\n")
    _write(repo_root / "data" / "ignored.txt", "secret\n")
    _write(repo_root / "report.generated", "generated output\n")
    _write(repo_root / "docs" / "api" / "openapi.md", "# API\n")
    _write(repo_root / "src" / "api" / "users.ts", "export {}\n")

    scanner = RepoScanner(["data/", "*.generated", "/docs/api"])
    paths = {file.path for file in scanner.scan(str(repo_root)).files}

    assert "src/main.py" in paths
    assert "src/api/users.ts" in paths
    assert "data/ignored.txt" not in paths
    assert "report.generated" not in paths
    assert "docs/api/openapi.md" not in paths


def test_exclude_rule_parse_ignores_blank_patterns() -> None:
    assert ExcludeRule.parse("   ") is None
    assert ExcludeRule.parse("/") is None

    rule = ExcludeRule.parse("fixtures/")
    assert rule is not None
    assert rule.directory_only is True
    assert rule.anchored is False
    assert rule.matches("tests/fixtures", True)
    assert not rule.matches("tests/fixtures", False)
