"""Repository identity and commit activity statistics."""

from __future__ import annotations

import calendar
from collections import Counter
from datetime import datetime
from typing import Dict, Iterable, List, Sequence, Tuple

from .base import AnalysisContext, Analyzer
from .taxonomy import COMMIT_TAXONOMY, Taxonomy
from ..models import CategoryStat, CommitRecord, MonthlyActivity, round_half_up

FIX_MARKER = "fix"


def is_fix(record: CommitRecord) -> bool:
    # matches `git log --grep=fix`: case-sensitive, over subject and body
    return FIX_MARKER in record.message


def fix_ratio(total: int, fixes: int) -> int:
    if total <= 0:
        return 0
    return round_half_up(fixes / total * 100)


def trailing_months(now: datetime, count: int) -> List[Tuple[int, int]]:
    """Return ``(year, month)`` pairs for the last ``count`` months, oldest first."""
    months: List[Tuple[int, int]] = []
    year, month = now.year, now.month
    for _ in range(count):
        months.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(months))


def monthly_activity(
    commits: Iterable[CommitRecord], *, now: datetime, buckets: int = 6
) -> List[MonthlyActivity]:
    """Bucket commits by the calendar month of their commit date."""
    totals: Counter = Counter()
    fixes: Counter = Counter()
    for record in commits:
        key = _month_key(record.date)
        if key is None:
            continue
        totals[key] += 1
        if is_fix(record):
            fixes[key] += 1
    return [
        MonthlyActivity(
            label=calendar.month_abbr[month],
            year=year,
            total=totals[(year, month)],
            fixes=fixes[(year, month)],
        )
        for year, month in trailing_months(now, buckets)
    ]


def _month_key(date: str) -> Tuple[int, int] | None:
    try:
        return int(date[0:4]), int(date[5:7])
    except ValueError:
        return None


def category_stats(
    commits: Sequence[CommitRecord], taxonomy: Taxonomy = COMMIT_TAXONOMY
) -> List[CategoryStat]:
    """Count commits per category, busiest first; empty categories are dropped."""
    counts: Counter = Counter()
    for record in commits:
        counts.update(taxonomy.classify(record.message))
    ordered = sorted(taxonomy.categories, key=lambda category: counts[category], reverse=True)
    return [
        CategoryStat(name=category, count=counts[category])
        for category in ordered
        if counts[category] > 0
    ]


class ActivityAnalyzer(Analyzer):
    """Collects repository identity, commit totals and monthly buckets."""

    name = "activity"

    def defaults(self) -> Dict[str, object]:
        return {
            "remote_url": "No remote",
            "current_branch": "unknown",
            "first_commit_date": "",
            "latest_commit_date": "",
            "total_commits": 0,
            "total_fix_commits": 0,
            "fix_ratio": 0,
            "months": [],
            "category_stats": [],
        }

    def analyze(self, context: AnalysisContext) -> Dict[str, object]:
        git = context.git
        commits = git.commit_log()
        fixes = sum(1 for record in commits if is_fix(record))
        return {
            "remote_url": git.remote_url(),
            "current_branch": git.current_branch(),
            "first_commit_date": git.first_commit_date(),
            "latest_commit_date": git.latest_commit_date(),
            "total_commits": len(commits),
            "total_fix_commits": fixes,
            "fix_ratio": fix_ratio(len(commits), fixes),
            "months": monthly_activity(
                commits, now=context.now, buckets=context.limits.monthly_buckets
            ),
            "category_stats": category_stats(commits),
        }


__all__ = [
    "ActivityAnalyzer",
    "category_stats",
    "fix_ratio",
    "monthly_activity",
    "trailing_months",
]
