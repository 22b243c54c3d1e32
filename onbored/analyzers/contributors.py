"""Contributor expertise profiles built from per-author history."""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from .base import AnalysisContext, Analyzer
from .taxonomy import RADAR_TAXONOMY, Taxonomy
from ..logging import get_logger
from ..models import Contributor, Focus, RadarCategory, round_half_up

_COMMIT_LINE = re.compile(r"^([0-9a-f]+)\s+(.*)$")

FRONTEND_EXTENSIONS = (".vue", ".tsx", ".jsx", ".svelte", ".css", ".scss")
BACKEND_EXTENSIONS = (".py", ".go", ".rs", ".java")
SCRIPT_EXTENSIONS = (".ts", ".js")
FRAMEWORK_EXTENSIONS = (".vue", ".tsx", ".jsx", ".svelte")
DOC_EXTENSIONS = (".md", ".mdx", ".txt")
CONFIG_EXTENSIONS = (".yml", ".yaml", ".json")

AREA_STOPLIST = frozenset({"src", "app", "lib", "."})
TOP_AREA_COUNT = 2


@dataclass(frozen=True)
class HistoryTally:
    """Counts folded from one contributor's history."""

    category_counts: Mapping[RadarCategory, int]
    extensions: Tuple[Tuple[str, int], ...]
    areas: Tuple[Tuple[str, int], ...]

    @property
    def total(self) -> int:
        return sum(self.category_counts.values())


def tally_history(lines: Iterable[str], taxonomy: Taxonomy = RADAR_TAXONOMY) -> HistoryTally:
    """Fold ``git log --oneline --name-only`` lines into category and touch counts.

    A commit subject and each of its files are classified independently, so a
    single commit can add to the same category more than once.
    """
    counts: Counter = Counter({category: 0 for category in taxonomy.categories})
    extensions: Counter = Counter()
    areas: Counter = Counter()

    for raw in lines:
        line = raw.strip()
        if not line:
            continue
        commit = _COMMIT_LINE.match(line)
        if commit:
            counts.update(taxonomy.classify(commit.group(2)))
            continue

        counts.update(taxonomy.classify_path(line))
        suffix = PurePosixPath(line.lower()).suffix
        if suffix:
            extensions[suffix] += 1
        area = _area_of(line)
        if area:
            areas[area] += 1

    return HistoryTally(
        category_counts={category: counts[category] for category in taxonomy.categories},
        extensions=tuple(extensions.most_common()),
        areas=tuple(areas.most_common()),
    )


def _area_of(path: str) -> str | None:
    parts = path.split("/")
    if len(parts) < 2:
        return None
    for part in parts:
        if part not in AREA_STOPLIST and len(part) > 1:
            return part
    return None


def radar_profile(counts: Mapping[RadarCategory, int]) -> Dict[RadarCategory, int]:
    """Return per-category percentages; every value is 0 when nothing matched."""
    total = sum(counts.values())
    if total == 0:
        return {category: 0 for category in counts}
    return {category: round_half_up(count / total * 100) for category, count in counts.items()}


def focus_for(extensions: Sequence[Tuple[str, int]]) -> Focus:
    """Map the most-touched extension to a focus label.

    ``extensions`` must already be ordered by descending count with ties in
    first-seen order, as produced by ``tally_history``.
    """
    if not extensions:
        return Focus.GENERAL
    top = extensions[0][0]
    if top in FRONTEND_EXTENSIONS:
        return Focus.FRONTEND
    if top in BACKEND_EXTENSIONS:
        return Focus.BACKEND
    if top in SCRIPT_EXTENSIONS:
        touched = {extension for extension, _ in extensions}
        return Focus.FULLSTACK if touched.intersection(FRAMEWORK_EXTENSIONS) else Focus.BACKEND
    if top in DOC_EXTENSIONS:
        return Focus.DOCS
    if top in CONFIG_EXTENSIONS:
        return Focus.CONFIG_DEVOPS
    return Focus.GENERAL


def build_contributor(name: str, commits: int, history: Iterable[str]) -> Contributor:
    tally = tally_history(history)
    focus = focus_for(tally.extensions)
    top_areas = tuple(area for area, _ in tally.areas[:TOP_AREA_COUNT])
    return Contributor(
        name=name,
        commits=commits,
        category_counts=dict(tally.category_counts),
        radar=radar_profile(tally.category_counts),
        focus=focus,
        top_areas=top_areas,
        expertise=top_areas[0] if top_areas else focus.value,
    )


class ContributorAnalyzer(Analyzer):
    """Builds expertise profiles for the most active authors."""

    name = "contributors"

    def __init__(self) -> None:
        self.logger = get_logger("analyzers.contributors")

    def defaults(self) -> Dict[str, object]:
        return {"contributors": []}

    def analyze(self, context: AnalysisContext) -> Dict[str, object]:
        limits = context.limits
        authors = context.git.shortlog()[: limits.contributor_limit]
        contributors: List[Contributor] = []
        for author, commits in authors:
            history = context.git.author_history(author, depth=limits.history_depth)
            contributors.append(build_contributor(author, commits, history))
        self.logger.debug("Profiled %d contributors", len(contributors))
        return {"contributors": contributors}


__all__ = [
    "ContributorAnalyzer",
    "HistoryTally",
    "build_contributor",
    "focus_for",
    "radar_profile",
    "tally_history",
]
