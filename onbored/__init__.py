"""Developer onboarding reports mined from git history and source heuristics."""

from .models import Report
from .orchestrator import Orchestrator

__version__ = "0.1.0"

__all__ = ["Orchestrator", "Report", "__version__"]
