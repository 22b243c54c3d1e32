"""Ranking of the most frequently modified source files."""

from __future__ import annotations

from collections import Counter
from pathlib import PurePosixPath
from typing import Dict, Iterable, List, Sequence

from .base import AnalysisContext, Analyzer
from ..models import FileChurnRecord

CHURN_EXTENSIONS = (".js", ".ts", ".tsx", ".vue", ".py", ".go", ".rs", ".java")


def rank_churn(
    paths: Iterable[str],
    *,
    top_n: int = 15,
    extensions: Sequence[str] = CHURN_EXTENSIONS,
) -> List[FileChurnRecord]:
    """Count modification entries per path and return the ``top_n`` busiest files.

    Ties keep the order in which paths were first seen.
    """
    suffixes = tuple(extensions)
    counts: Counter = Counter(
        path for path in (raw.strip() for raw in paths) if path and path.endswith(suffixes)
    )
    return [
        FileChurnRecord(file=PurePosixPath(path).name, full_path=path, changes=changes)
        for path, changes in counts.most_common(top_n)
    ]


class ChurnAnalyzer(Analyzer):
    name = "churn"

    def defaults(self) -> Dict[str, object]:
        return {"top_files": []}

    def analyze(self, context: AnalysisContext) -> Dict[str, object]:
        ranked = rank_churn(context.git.modified_files(), top_n=context.limits.churn_top_n)
        return {"top_files": ranked}


__all__ = ["CHURN_EXTENSIONS", "ChurnAnalyzer", "rank_churn"]
