"""Tests for the heuristic project summary."""

from __future__ import annotations

from onbored.models import (
    ApiEndpoint,
    ComponentEntry,
    FunctionEntry,
    ModuleEntry,
    PageEntry,
    Report,
    TechItem,
)
from onbored.summary import build_summary, project_types


def test_summary_for_empty_report() -> None:
    assert build_summary(Report(repo_name="x")) == "This is a **mixed software project**."


def test_summary_describes_inventories() -> None:
    report = Report(
        repo_name="tool",
        primary_language="python",
        tech_stack=[TechItem(name="Python", type="language"), TechItem(name="Docker", type="devops")],
        modules=[ModuleEntry(name="core", path="core", type="python-package")],
        components=[
            ComponentEntry(name="Parser", count=2, type="class"),
            ComponentEntry(name="Lexer", count=1, type="class"),
        ],
        functions=[FunctionEntry(name="main", runtime="Python", type="function", count=1)],
        pages=[PageEntry(path="cli.py", name="cli.py", type="entry")],
        api_endpoints=[ApiEndpoint(path="app.py", name="/health", type="route", line=3)],
        project_description="A small tool that parses configuration files.",
    )

    summary = build_summary(report)

    assert summary == (
        "This is a **Python command-line tool and web API**. built with Python, Docker. "
        "The codebase is organized into 1 modules including `core`. "
        "It contains 2 classes. Key functions include `main`. "
        "Entry points: `cli.py`. Exposes 1 API endpoints."
        "\n\n**From README:** A small tool that parses configuration files."
    )


def test_short_readme_description_is_not_appended() -> None:
    summary = build_summary(Report(repo_name="x", project_description="Short text"))

    assert "From README" not in summary


def test_project_types_library_only_when_nothing_else_matched() -> None:
    modules = [ModuleEntry(name=f"m{i}", path=f"m{i}", type="go-package") for i in range(4)]

    assert project_types(Report(repo_name="x", modules=modules)) == ["library/framework"]
    web = Report(
        repo_name="x",
        modules=modules,
        pages=[PageEntry(path="src/pages/index.vue", name="/", type="page")],
    )
    assert project_types(web) == ["web application"]
