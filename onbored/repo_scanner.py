"""Repository walking and manifest building utilities."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Sequence

from .models import FileMeta, RepoManifest

# Dependency and build output directories are never part of the analysed tree.
EXCLUDED_DIRS = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        ".venv",
        "venv",
        "node_modules",
        "dist",
        "build",
        "target",
        "vendor",
        "__pycache__",
        ".pytest_cache",
        ".mypy_cache",
        ".idea",
        ".onbored",
    }
)

_EXCLUDED_FILES = {
    ".DS_Store",
    "Thumbs.db",
}


@dataclass
class ExcludeRule:
    """A gitignore-style pattern taken from ``exclude_paths`` in .onbored.yml."""

    pattern: str
    directory_only: bool
    anchored: bool

    @classmethod
    def parse(cls, raw: str) -> "ExcludeRule | None":
        pattern = raw.strip()
        if not pattern:
            return None
        directory_only = pattern.endswith("/")
        if directory_only:
            pattern = pattern[:-1]
        anchored = pattern.startswith("/") or "/" in pattern
        pattern = pattern.lstrip("/")
        if not pattern:
            return None
        return cls(pattern=pattern, directory_only=directory_only, anchored=anchored)

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if self.directory_only and not is_dir:
            return False
        if self.anchored:
            return fnmatchcase(rel_path, self.pattern)
        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def _iter_files(root: Path, rules: Sequence[ExcludeRule]) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

        kept = []
        for name in sorted(dirnames):
            if name in EXCLUDED_DIRS:
                continue
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            if any(rule.matches(rel_path, True) for rule in rules):
                continue
            kept.append(name)
        dirnames[:] = kept

        for filename in sorted(filenames):
            if filename in _EXCLUDED_FILES:
                continue
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if any(rule.matches(rel_path, False) for rule in rules):
                continue
            yield current_dir / filename


class RepoScanner:
    """Walks the repository to produce a normalized manifest."""

    def __init__(self, exclude_paths: Sequence[str] = ()) -> None:
        self._rules: List[ExcludeRule] = [
            rule for rule in (ExcludeRule.parse(raw) for raw in exclude_paths) if rule is not None
        ]

    def scan(self, root: str) -> RepoManifest:
        """Return a manifest describing project files in sorted walk order."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Repository path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Repository path is not a directory: {root}")

        files: List[FileMeta] = []
        for path in _iter_files(root_path, self._rules):
            rel_path = path.relative_to(root_path).as_posix()
            try:
                size = path.stat().st_size
            except OSError:
                continue
            files.append(FileMeta(path=rel_path, size=size))
        return RepoManifest(root=str(root_path), files=files)


__all__ = ["EXCLUDED_DIRS", "ExcludeRule", "RepoScanner"]
