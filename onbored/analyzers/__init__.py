"""Analyzer implementations and discovery utilities."""

from __future__ import annotations

from typing import Callable, List, Sequence, Set

from .activity import ActivityAnalyzer
from .base import AnalysisContext, Analyzer
from .churn import ChurnAnalyzer
from .compliance import ComplianceAnalyzer, SecurityAnalyzer
from .contributors import ContributorAnalyzer
from .deadcode import DeadCodeAnalyzer
from .issues import IssuesAnalyzer
from .stack import StackAnalyzer
from .structure import StructureAnalyzer

# Registry order is the merge order of report fields.
_BUILTIN_FACTORIES: dict[str, Callable[[], Analyzer]] = {
    "activity": ActivityAnalyzer,
    "contributors": ContributorAnalyzer,
    "churn": ChurnAnalyzer,
    "stack": StackAnalyzer,
    "issues": IssuesAnalyzer,
    "structure": StructureAnalyzer,
    "deadcode": DeadCodeAnalyzer,
    "security": SecurityAnalyzer,
    "compliance": ComplianceAnalyzer,
}


def analyzer_names() -> List[str]:
    return list(_BUILTIN_FACTORIES)


def discover_analyzers(enabled: Sequence[str] | None = None) -> List[Analyzer]:
    """Return instantiated analyzers, honoring optional enabled names."""

    enabled_set: Set[str] | None = None
    if enabled is not None:
        enabled_set = {name.lower() for name in enabled}
        unknown = enabled_set.difference(_BUILTIN_FACTORIES)
        if unknown:
            missing = ", ".join(sorted(unknown))
            raise ValueError(f"Unknown analyzers requested: {missing}")

    analyzers: List[Analyzer] = []
    for name, factory in _BUILTIN_FACTORIES.items():
        if enabled_set is not None and name not in enabled_set:
            continue
        instance = factory()
        if not isinstance(instance, Analyzer):
            raise TypeError(f"Analyzer factory for '{name}' did not return an Analyzer instance")
        analyzers.append(instance)
    return analyzers


__all__ = [
    "AnalysisContext",
    "Analyzer",
    "analyzer_names",
    "discover_analyzers",
]
