"""Tests for tech stack detection and README parsing."""

from __future__ import annotations

import json

from onbored.analyzers.stack import (
    StackAnalyzer,
    detect_primary_language,
    detect_tech_stack,
    node_dependencies,
    parse_readme,
    read_readme,
)
from tests._fixtures.context import make_context
from tests._fixtures.git_runner import FakeGitRunner


def _package_json(dependencies=None, dev_dependencies=None) -> str:
    return json.dumps(
        {"dependencies": dependencies or {}, "devDependencies": dev_dependencies or {}}
    )


def test_detect_tech_stack_in_detection_order(repo_builder) -> None:
    repo_builder.write(
        {
            "package.json": _package_json(
                {"tailwindcss": "^3", "react": "^18"}, {"typescript": "^5"}
            ),
            "services/api/requirements.txt": "fastapi\n",
            "Dockerfile": "FROM node:20\n",
            ".github/workflows/ci.yml": "on: push\n",
        }
    )
    manifest = repo_builder.scan()

    stack = detect_tech_stack(repo_builder.path(), [meta.path for meta in manifest.files])

    assert [(item.name, item.type) for item in stack] == [
        ("React", "frontend"),
        ("TypeScript", "language"),
        ("Tailwind CSS", "styling"),
        ("Python", "language"),
        ("Docker", "devops"),
        ("GitHub Actions", "ci"),
    ]


def test_detect_tech_stack_reads_nested_package_dirs_once(repo_builder) -> None:
    repo_builder.write(
        {
            "frontend/package.json": _package_json({"vue": "^3", "pinia": "^2"}),
            "backend/package.json": _package_json({"express": "^4", "@supabase/supabase-js": "^2"}),
            "web/package.json": _package_json({"vue": "^3"}),
        }
    )

    stack = detect_tech_stack(repo_builder.path(), [])

    assert [item.name for item in stack] == ["Vue.js", "Pinia", "Express", "Supabase"]


def test_node_dependencies_tolerates_bad_json(tmp_path) -> None:
    target = tmp_path / "package.json"
    target.write_text("{not json", encoding="utf-8")

    assert node_dependencies(target) == {}
    assert node_dependencies(tmp_path / "missing.json") == {}


def test_primary_language_prefers_later_markers(repo_builder) -> None:
    root = repo_builder.path()
    assert detect_primary_language(root) == "unknown"

    repo_builder.write({"package.json": "{}"})
    assert detect_primary_language(root) == "javascript"

    repo_builder.write({"pyproject.toml": "[project]\n"})
    assert detect_primary_language(root) == "python"

    repo_builder.write({"go.mod": "module x\n"})
    assert detect_primary_language(root) == "go"


def test_parse_readme_strips_badges_and_markup() -> None:
    text = (
        "# [![build](https://ci/badge.svg)](https://ci) My **Project**\n"
        "\n"
        "[![ci](https://a)](https://b)\n"
        "\n"
        "A tool for *onboarding* with `git`. See [docs](https://example.com).\n"
    )

    title, description = parse_readme(text, "fallback")

    assert title == "My Project"
    assert description == "A tool for onboarding with git. See docs."


def test_parse_readme_without_heading_uses_default_title() -> None:
    assert parse_readme("just some text\n", "repo") == ("repo", "")


def test_parse_readme_skips_tables_and_code_fences() -> None:
    text = "# Tool\n\n| a | b |\n```sh\n---\nReal description.\n"

    assert parse_readme(text, "x") == ("Tool", "Real description.")


def test_read_readme_falls_back_when_missing(tmp_path) -> None:
    assert read_readme(tmp_path, "fallback") == ("fallback", "")


def test_stack_analyzer_fills_title_and_description(repo_builder) -> None:
    repo_builder.write(
        {
            "README.md": "# Widget Factory\n\nBuilds widgets on demand.\n",
            "Cargo.toml": "[package]\nname = 'widgets'\n",
        }
    )
    context = make_context(repo_builder.path(), FakeGitRunner())

    result = StackAnalyzer().analyze(context)

    assert result["project_title"] == "Widget Factory"
    assert result["project_description"] == "Builds widgets on demand."
    assert result["primary_language"] == "rust"
    assert [item.name for item in result["tech_stack"]] == ["Rust"]
