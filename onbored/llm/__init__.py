"""Optional AI summarization providers."""

from .enrichment import enrich
from .runner import LLMRunner

__all__ = ["LLMRunner", "enrich"]
