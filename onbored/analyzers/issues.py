"""Open issues from the repository's GitHub project."""

from __future__ import annotations

from typing import Dict

from .base import AnalysisContext, Analyzer
from ..logging import get_logger

OPEN_ISSUE_LIMIT = 10


class IssuesAnalyzer(Analyzer):
    """Lists open issues through the GitHub CLI when it is installed and authenticated."""

    name = "issues"

    def __init__(self) -> None:
        self.logger = get_logger("analyzers.issues")

    def defaults(self) -> Dict[str, object]:
        return {"open_issues": []}

    def analyze(self, context: AnalysisContext) -> Dict[str, object]:
        issues = context.git.open_issues(limit=OPEN_ISSUE_LIMIT)
        self.logger.debug("Found %d open issues", len(issues))
        return {"open_issues": issues}


__all__ = ["IssuesAnalyzer", "OPEN_ISSUE_LIMIT"]
