"""Heuristic project summary used when AI enrichment is off or fails."""

from __future__ import annotations

from typing import List

from .models import Report

_LANGUAGE_NAMES = {
    "python": "Python",
    "rust": "Rust",
    "go": "Go",
    "javascript": "JavaScript/TypeScript",
    "dart": "Flutter/Dart",
}

MIN_README_CONTEXT = 20


def project_types(report: Report) -> List[str]:
    """Guess what kind of project this is from the inventories."""
    types: List[str] = []
    looks_like_cli = any("cli" in page.name or "main" in page.name for page in report.pages)
    if looks_like_cli and any(
        entry.name == "main" or "cli" in entry.name for entry in report.functions
    ):
        types.append("command-line tool")
    if report.api_endpoints:
        types.append("web API")
    if any(page.type == "page" for page in report.pages) or any(
        entry.type == "component" for entry in report.components
    ):
        types.append("web application")
    if len(report.modules) > 3 and not types:
        types.append("library/framework")
    return types


def build_summary(report: Report) -> str:
    language = _LANGUAGE_NAMES.get(report.primary_language, "mixed")
    kinds = project_types(report)
    kind = " and ".join(kinds) if kinds else "software project"

    parts = [f"This is a **{language} {kind}**"]
    if report.tech_stack:
        parts.append("built with " + ", ".join(tech.name for tech in report.tech_stack[:5]))

    if report.modules:
        core = ", ".join(f"`{module.name}`" for module in report.modules[:4])
        parts.append(f"The codebase is organized into {len(report.modules)} modules including {core}")

    counted = []
    for kind_name, label in (("class", "classes"), ("struct", "structs"), ("component", "UI components")):
        count = sum(1 for entry in report.components if entry.type == kind_name)
        if count:
            counted.append(f"{count} {label}")
    if counted:
        parts.append("It contains " + ", ".join(counted))

    if report.functions:
        key = ", ".join(f"`{entry.name}`" for entry in report.functions[:5])
        parts.append(f"Key functions include {key}")

    entries = [page for page in report.pages if page.type == "entry"]
    if entries:
        parts.append("Entry points: " + ", ".join(f"`{page.name}`" for page in entries))

    if report.api_endpoints:
        parts.append(f"Exposes {len(report.api_endpoints)} API endpoints")

    summary = ". ".join(parts) + "."
    if len(report.project_description) > MIN_README_CONTEXT:
        summary += f"\n\n**From README:** {report.project_description}"
    return summary


__all__ = ["build_summary", "project_types"]
