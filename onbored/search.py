"""Text search over a scanned repository and the occurrence index built from it."""

from __future__ import annotations

import re
from collections import OrderedDict
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Pattern

from .models import FileMeta, RepoManifest

# Files above this size are treated as generated or binary and never searched.
MAX_SEARCH_BYTES = 1_000_000

# Number of file texts kept in memory between queries.
CACHED_FILES = 256

PathFilter = Callable[[str], bool]


@dataclass(frozen=True)
class SearchMatch:
    """A matching line with file:line provenance."""

    path: str
    line: int
    text: str


class TextSearch:
    """Recursive pattern search across the files of a manifest.

    Dependency and build directories are already excluded by the scanner, so
    every query here only sees project sources. Results follow manifest order,
    which is the sorted walk order.
    """

    def __init__(self, manifest: RepoManifest, *, cache_size: int = CACHED_FILES) -> None:
        self.root = Path(manifest.root)
        self._files: List[FileMeta] = list(manifest.files)
        self._sizes: Dict[str, int] = {meta.path: meta.size for meta in self._files}
        self._cache_size = max(cache_size, 0)
        self._text_cache: "OrderedDict[str, Optional[str]]" = OrderedDict()

    @property
    def paths(self) -> List[str]:
        return [meta.path for meta in self._files]

    def read(self, rel_path: str) -> Optional[str]:
        """Return file contents, or ``None`` when unreadable, oversized or binary."""
        if rel_path in self._text_cache:
            self._text_cache.move_to_end(rel_path)
            return self._text_cache[rel_path]
        text = self._load(rel_path)
        if self._cache_size:
            self._text_cache[rel_path] = text
            if len(self._text_cache) > self._cache_size:
                self._text_cache.popitem(last=False)
        return text

    def _load(self, rel_path: str) -> Optional[str]:
        target = self.root / rel_path
        try:
            size = self._sizes.get(rel_path)
            if size is None:
                size = target.stat().st_size
            if size > MAX_SEARCH_BYTES:
                return None
            text = target.read_text(encoding="utf-8", errors="ignore")
        except OSError:
            return None
        if "\x00" in text:
            return None
        return text

    def find_files(self, predicate: PathFilter, *, limit: Optional[int] = None) -> List[str]:
        """Return relative paths accepted by ``predicate``."""
        found: List[str] = []
        for path in self.paths:
            if predicate(path):
                found.append(path)
                if limit is not None and len(found) >= limit:
                    break
        return found

    def iter_lines(
        self,
        pattern: Pattern[str],
        *,
        path_filter: Optional[PathFilter] = None,
    ) -> Iterator[SearchMatch]:
        for path in self.paths:
            if path_filter is not None and not path_filter(path):
                continue
            text = self.read(path)
            if not text:
                continue
            for index, line in enumerate(text.splitlines(), start=1):
                if pattern.search(line):
                    yield SearchMatch(path=path, line=index, text=line)

    def grep_files(
        self,
        pattern: Pattern[str],
        *,
        path_filter: Optional[PathFilter] = None,
        limit: Optional[int] = None,
    ) -> List[str]:
        """Return paths with at least one line matching ``pattern``."""
        found: List[str] = []
        for path in self.paths:
            if path_filter is not None and not path_filter(path):
                continue
            text = self.read(path)
            if text and any(pattern.search(line) for line in text.splitlines()):
                found.append(path)
                if limit is not None and len(found) >= limit:
                    break
        return found


class OccurrenceIndex:
    """A bounded excerpt of source lines used as a substring-presence oracle.

    ``contains`` is a plain substring test over at most ``max_lines`` lines.
    A name may be missed because it only occurs past the cap (false positive
    downstream) or found in an unrelated context such as a comment (false
    negative downstream). Callers depend only on ``contains`` so a precise
    reference graph can replace this class later.
    """

    def __init__(self, lines: Iterable[str], *, max_lines: Optional[int] = None) -> None:
        kept: List[str] = []
        for line in lines:
            if max_lines is not None and len(kept) >= max_lines:
                break
            kept.append(line)
        self._lines = tuple(kept)
        self._blob = "\n".join(kept)

    @classmethod
    def from_search(
        cls,
        search: TextSearch,
        pattern: Pattern[str] | str,
        *,
        max_lines: Optional[int],
        path_filter: Optional[PathFilter] = None,
    ) -> "OccurrenceIndex":
        compiled = re.compile(pattern) if isinstance(pattern, str) else pattern
        matches = search.iter_lines(compiled, path_filter=path_filter)
        return cls((match.text for match in matches), max_lines=max_lines)

    def __len__(self) -> int:
        return len(self._lines)

    def contains(self, name: str) -> bool:
        if not name:
            return False
        return name in self._blob


__all__ = ["MAX_SEARCH_BYTES", "OccurrenceIndex", "SearchMatch", "TextSearch"]
