"""Base classes for analyzer plugins."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict

from ..config import OnboredConfig, ScanLimits
from ..git.history import GitRepository
from ..models import RepoManifest
from ..search import TextSearch


@dataclass
class AnalysisContext:
    """Read-only inputs shared by every analyzer of one run."""

    root: Path
    manifest: RepoManifest
    git: GitRepository
    search: TextSearch
    config: OnboredConfig
    now: datetime

    @property
    def limits(self) -> ScanLimits:
        return self.config.limits


class Analyzer(ABC):
    """Contract for analyzers that fill a disjoint set of report fields."""

    name: str = ""

    def supports(self, context: AnalysisContext) -> bool:
        """Return True when this analyzer should run for the repository."""
        return True

    @abstractmethod
    def defaults(self) -> Dict[str, object]:
        """Return the empty values used when the analyzer fails or is skipped."""

    @abstractmethod
    def analyze(self, context: AnalysisContext) -> Dict[str, object]:
        """Return report fields keyed by their ``Report`` attribute name."""
