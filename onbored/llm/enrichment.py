"""Optional AI enrichment of a finished report."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import List, Optional

from .runner import LLMRunner
from ..logging import get_logger
from ..models import AIInsights, Report

MAX_SAMPLE_FILES = 3
MAX_SAMPLE_CHARS_PER_FILE = 1000
MAX_SAMPLE_CHARS = 3000

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")

PROMPT_TEMPLATE = """You are analyzing a codebase for developer onboarding. Based on this information, provide:
1. A clear 2-3 sentence project summary explaining what this project does
2. The top 3 things a new developer should understand first
3. Any potential gotchas or complex areas to be aware of

Project: {repo_name}
Language: {language}
Tech Stack: {tech_stack}
Entry Points: {entry_points}
Modules: {modules}
Top Changed Files: {top_files}

Sample code from main files:
{sample_code}

Respond in this exact JSON format:
{{
  "summary": "...",
  "keyThings": ["...", "...", "..."],
  "gotchas": ["...", "..."]
}}"""

logger = get_logger("llm.enrichment")


def gather_sample_code(root: Path, report: Report) -> str:
    """Return the head of up to three entry-point files."""
    entries = [page for page in report.pages if page.type == "entry"][:MAX_SAMPLE_FILES]
    chunks: List[str] = []
    for entry in entries:
        try:
            content = (root / entry.path).read_text(encoding="utf-8", errors="ignore")
        except OSError:
            continue
        chunks.append(f"\n--- {entry.path} ---\n{content[:MAX_SAMPLE_CHARS_PER_FILE]}\n")
    return "".join(chunks)


def build_prompt(report: Report, sample_code: str) -> str:
    entries = [page.name for page in report.pages if page.type == "entry"][:5]
    return PROMPT_TEMPLATE.format(
        repo_name=report.repo_name,
        language=report.primary_language if report.primary_language != "unknown" else "Mixed",
        tech_stack=", ".join(tech.name for tech in report.tech_stack),
        entry_points=", ".join(entries) or "None detected",
        modules=", ".join(module.name for module in report.modules[:10]) or "None detected",
        top_files=", ".join(record.file for record in report.top_files[:5]),
        sample_code=sample_code[:MAX_SAMPLE_CHARS],
    )


def parse_insights(response: str) -> Optional[AIInsights]:
    """Parse the first ``{...}`` block of a reply; ``None`` when unusable."""
    match = _JSON_BLOCK.search(response or "")
    if not match:
        return None
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    summary = data.get("summary")
    if not isinstance(summary, str) or not summary.strip():
        return None
    return AIInsights(
        summary=summary.strip(),
        key_things=_string_tuple(data.get("keyThings")),
        gotchas=_string_tuple(data.get("gotchas")),
    )


def _string_tuple(value: object) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(str(item) for item in value if isinstance(item, (str, int, float)))


def enrich(report: Report, root: Path, runner: LLMRunner) -> Optional[AIInsights]:
    """Ask the provider for insights; failures are logged and yield ``None``."""
    prompt = build_prompt(report, gather_sample_code(root, report))
    logger.info("Enhancing report with AI (%s)", runner.provider)
    try:
        response = runner.run(prompt)
    except RuntimeError as exc:
        logger.warning("AI enrichment failed: %s", exc)
        return None
    insights = parse_insights(response)
    if insights is None:
        logger.warning("Could not parse AI response")
    return insights


__all__ = ["build_prompt", "enrich", "gather_sample_code", "parse_insights"]
