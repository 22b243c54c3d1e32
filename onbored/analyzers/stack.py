"""Tech stack detection and README title/description extraction."""

from __future__ import annotations

import json
import re
from pathlib import Path, PurePosixPath
from typing import Dict, Iterable, List, Sequence, Tuple

from .base import AnalysisContext, Analyzer
from ..logging import get_logger
from ..models import TechItem

# (dependency names, tech name, tech type) in detection order.
NODE_TECHS: Tuple[Tuple[Tuple[str, ...], str, str], ...] = (
    (("react",), "React", "frontend"),
    (("vue",), "Vue.js", "frontend"),
    (("svelte",), "Svelte", "frontend"),
    (("next",), "Next.js", "framework"),
    (("nuxt",), "Nuxt", "framework"),
    (("astro",), "Astro", "framework"),
    (("express",), "Express", "backend"),
    (("fastify",), "Fastify", "backend"),
    (("prisma",), "Prisma", "database"),
    (("mongoose",), "MongoDB", "database"),
    (("typescript",), "TypeScript", "language"),
    (("tailwindcss",), "Tailwind CSS", "styling"),
    (("stripe",), "Stripe", "payments"),
    (("node-appwrite", "appwrite"), "Appwrite", "backend"),
    (("firebase",), "Firebase", "backend"),
    (("supabase", "@supabase/supabase-js"), "Supabase", "backend"),
    (("pinia",), "Pinia", "state"),
    (("zod",), "Zod", "validation"),
    (("@tanstack/vue-query", "@tanstack/react-query"), "TanStack Query", "data"),
)

PACKAGE_DIRS = (
    "",
    "website",
    "app",
    "frontend",
    "backend",
    "web",
    "client",
    "server",
    "packages/web",
    "packages/app",
)

README_NAMES = ("README.md", "readme.md", "README.MD", "Readme.md")
MAX_DESCRIPTION = 500

# Later entries win, so the precedence is dart > go > rust > python > javascript.
_LANGUAGE_MARKERS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("package.json",), "javascript"),
    (("pyproject.toml", "setup.py", "requirements.txt"), "python"),
    (("Cargo.toml",), "rust"),
    (("go.mod",), "go"),
    (("pubspec.yaml",), "dart"),
)

_BADGE_LINK = re.compile(r"\[!\[.*?\]\(.*?\)\]\(.*?\)")
_IMAGE = re.compile(r"!\[.*?\]\(.*?\)")
_LINK = re.compile(r"\[([^\]]+)\]\([^)]+\)")
_TITLE_NOISE = re.compile(r"[^\w\s-]", re.ASCII)
_HEADING = re.compile(r"^#\s+(.+)$", re.MULTILINE)
_LINK_ONLY = re.compile(r"^\[.*\]\(.*\)$")


class _StackBuilder:
    def __init__(self) -> None:
        self.items: List[TechItem] = []
        self._seen: set[str] = set()

    def add(self, name: str, tech_type: str) -> None:
        if name in self._seen:
            return
        self._seen.add(name)
        self.items.append(TechItem(name=name, type=tech_type))


def node_dependencies(package_json: Path) -> Dict[str, object]:
    """Return merged runtime and dev dependencies, or ``{}`` when unreadable."""
    try:
        data = json.loads(package_json.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return {}
    if not isinstance(data, dict):
        return {}
    merged: Dict[str, object] = {}
    for key in ("dependencies", "devDependencies"):
        section = data.get(key)
        if isinstance(section, dict):
            merged.update(section)
    return merged


def detect_tech_stack(root: Path, paths: Sequence[str]) -> List[TechItem]:
    """Return techs in first-detection order, each listed once."""
    stack = _StackBuilder()
    for subdir in PACKAGE_DIRS:
        package_json = root / subdir / "package.json" if subdir else root / "package.json"
        if not package_json.is_file():
            continue
        deps = node_dependencies(package_json)
        for names, tech, tech_type in NODE_TECHS:
            if any(name in deps for name in names):
                stack.add(tech, tech_type)

    basenames = {PurePosixPath(path).name for path in paths}
    if "requirements.txt" in basenames or "pyproject.toml" in basenames:
        stack.add("Python", "language")
    if (root / "Cargo.toml").exists():
        stack.add("Rust", "language")
    if (root / "go.mod").exists():
        stack.add("Go", "language")
    if "Dockerfile" in basenames or (root / "Dockerfile").exists():
        stack.add("Docker", "devops")
    if (root / ".github" / "workflows").exists():
        stack.add("GitHub Actions", "ci")
    if (root / ".gitlab-ci.yml").exists():
        stack.add("GitLab CI", "ci")
    if "pubspec.yaml" in basenames:
        stack.add("Flutter", "mobile")
    return stack.items


def detect_primary_language(root: Path) -> str:
    language = "unknown"
    for markers, name in _LANGUAGE_MARKERS:
        if any((root / marker).exists() for marker in markers):
            language = name
    return language


def parse_readme(text: str, default_title: str) -> Tuple[str, str]:
    """Return ``(title, description)`` from README markdown."""
    title = default_title
    match = _HEADING.search(text)
    if match:
        cleaned = _BADGE_LINK.sub("", match.group(1))
        cleaned = _IMAGE.sub("", cleaned)
        cleaned = _LINK.sub(r"\1", cleaned)
        title = _TITLE_NOISE.sub("", cleaned).strip()
    return title, _first_paragraph(text.split("\n"))


def _first_paragraph(lines: Iterable[str]) -> str:
    seen_heading = False
    for line in lines:
        if line.startswith("#"):
            seen_heading = True
            continue
        if not seen_heading:
            continue
        trimmed = line.strip()
        if not trimmed or _is_decoration(trimmed):
            continue
        cleaned = trimmed.replace("**", "").replace("*", "").replace("`", "")
        return _LINK.sub(r"\1", cleaned)[:MAX_DESCRIPTION]
    return ""


def _is_decoration(line: str) -> bool:
    if line.startswith(("[![", "![", "|", "```")):
        return True
    if _LINK_ONLY.match(line):
        return True
    return line.startswith("-") and len(line) < 5


def read_readme(root: Path, default_title: str) -> Tuple[str, str]:
    for name in README_NAMES:
        candidate = root / name
        if candidate.is_file():
            text = candidate.read_text(encoding="utf-8", errors="ignore")
            return parse_readme(text, default_title)
    return default_title, ""


class StackAnalyzer(Analyzer):
    """Detects frameworks, languages and the README summary."""

    name = "stack"

    def __init__(self) -> None:
        self.logger = get_logger("analyzers.stack")

    def defaults(self) -> Dict[str, object]:
        return {
            "tech_stack": [],
            "primary_language": "unknown",
            "project_title": "",
            "project_description": "",
        }

    def analyze(self, context: AnalysisContext) -> Dict[str, object]:
        root = context.root
        stack = detect_tech_stack(root, context.search.paths)
        title, description = read_readme(root, root.name)
        self.logger.debug("Detected %d technologies", len(stack))
        return {
            "tech_stack": stack,
            "primary_language": detect_primary_language(root),
            "project_title": title,
            "project_description": description,
        }


__all__ = [
    "NODE_TECHS",
    "StackAnalyzer",
    "detect_primary_language",
    "detect_tech_stack",
    "node_dependencies",
    "parse_readme",
    "read_readme",
]
