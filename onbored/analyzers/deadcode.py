"""Heuristic detection of unreferenced components, exports and files.

Every sub-scan tests candidate names against an ``OccurrenceIndex``: a capped
excerpt of import-like lines. It is a substring presence check, not a
reference graph. A name referenced only past the cap is reported anyway, and
a name that happens to appear in an unrelated line is not reported.
"""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from typing import Dict, Iterable, List, Sequence, Tuple

from .base import AnalysisContext, Analyzer
from ..logging import get_logger
from ..models import DeadCodeCandidate, DeadCodeKind, DeadCodeReport
from ..search import OccurrenceIndex, TextSearch

COMPONENT_EXTENSIONS = (".vue", ".svelte", ".tsx", ".jsx")
COMPONENT_USAGE = re.compile(r"(import.*from|<[A-Z])")
EXPORT_USAGE = re.compile(r"^import|from ['\"]")
FILE_USAGE = re.compile(r"(from ['\"]|import |require\()")
EXPORT_DECLARATION = re.compile(r"export\s+(?:const|function|class)\s+(\w+)")

MAX_COMPONENT_CANDIDATES = 100
MAX_EXPORT_CANDIDATES = 30
MAX_FILE_CANDIDATES = 80
MAX_EXPORTS_PER_FILE = 5
MIN_EXPORT_LENGTH = 4

MAX_UNUSED_COMPONENTS = 25
MAX_UNUSED_EXPORTS = 20
MAX_UNUSED_FILES = 20

EXPORT_SKIP_NAMES = frozenset(
    {"index", "main", "app", "server", "cli", "config", "env", "types", "constants"}
)
FILE_SKIP_NAMES = frozenset({"index", "main", "app", "server", "env", "config", "types", "utils"})


def kebab_case(name: str) -> str:
    """``UserCard`` -> ``user-card``."""
    return re.sub(r"^-", "", re.sub(r"([A-Z])", r"-\1", name).lower())


def _anchored(path: str) -> str:
    return "/" + path


def is_component_candidate(path: str) -> bool:
    return "/components/" in _anchored(path) and path.endswith(COMPONENT_EXTENSIONS)


def is_export_candidate(path: str) -> bool:
    return path.endswith(".ts") and _is_plain_source(path) and ".spec." not in path


def is_file_candidate(path: str) -> bool:
    return path.endswith((".ts", ".js")) and _is_plain_source(path)


def _is_plain_source(path: str) -> bool:
    anchored = _anchored(path)
    return (
        "/src/" in anchored
        and ".d.ts" not in path
        and ".test." not in path
        and "/pages/" not in anchored
        and "/api/" not in anchored
    )


def find_unused_components(
    candidates: Iterable[str], index: OccurrenceIndex
) -> List[DeadCodeCandidate]:
    """Flag component files whose name and kebab-case name are both absent."""
    unused: List[DeadCodeCandidate] = []
    for path in candidates:
        pure = PurePosixPath(path)
        name = pure.stem
        anchored = _anchored(path)
        if name.lower() == "index" or "/pages/" in anchored or "/layouts/" in anchored:
            continue
        if index.contains(name) or index.contains(kebab_case(name)):
            continue
        unused.append(
            DeadCodeCandidate(name=name, path=path, file=pure.name, kind=DeadCodeKind.COMPONENT)
        )
        if len(unused) >= MAX_UNUSED_COMPONENTS:
            break
    return unused


def find_unused_exports(
    sources: Iterable[Tuple[str, str]], index: OccurrenceIndex
) -> List[DeadCodeCandidate]:
    """Flag exported symbols when neither the symbol nor its module name is indexed.

    ``sources`` yields ``(path, text)`` pairs.
    """
    unused: List[DeadCodeCandidate] = []
    for path, text in sources:
        pure = PurePosixPath(path)
        module = pure.stem
        if module.lower() in EXPORT_SKIP_NAMES:
            continue
        for name in EXPORT_DECLARATION.findall(text)[:MAX_EXPORTS_PER_FILE]:
            # composable/hook naming convention
            if name.startswith("use") or len(name) < MIN_EXPORT_LENGTH:
                continue
            if index.contains(name) or index.contains(module):
                continue
            unused.append(
                DeadCodeCandidate(name=name, path=path, file=pure.name, kind=DeadCodeKind.EXPORT)
            )
        if len(unused) >= MAX_UNUSED_EXPORTS:
            break
    return unused[:MAX_UNUSED_EXPORTS]


def find_orphaned_files(
    candidates: Iterable[str], index: OccurrenceIndex
) -> List[DeadCodeCandidate]:
    """Flag source files whose basename never appears in the index."""
    orphaned: List[DeadCodeCandidate] = []
    for path in candidates:
        pure = PurePosixPath(path)
        module = pure.stem
        if module.lower() in FILE_SKIP_NAMES or module.startswith("_"):
            continue
        if index.contains(module):
            continue
        orphaned.append(
            DeadCodeCandidate(name=module, path=path, file=pure.name, kind=DeadCodeKind.FILE)
        )
        if len(orphaned) >= MAX_UNUSED_FILES:
            break
    return orphaned


def scan_dead_code(
    search: TextSearch,
    *,
    component_index_lines: int | None,
    export_index_lines: int | None,
    file_index_lines: int | None,
) -> DeadCodeReport:
    """Run the three sub-scans over the searchable tree."""
    components = search.find_files(is_component_candidate, limit=MAX_COMPONENT_CANDIDATES)
    component_index = OccurrenceIndex.from_search(
        search, COMPONENT_USAGE, max_lines=component_index_lines
    )

    export_files = search.find_files(is_export_candidate, limit=MAX_EXPORT_CANDIDATES)
    export_index = OccurrenceIndex.from_search(search, EXPORT_USAGE, max_lines=export_index_lines)

    source_files = search.find_files(is_file_candidate, limit=MAX_FILE_CANDIDATES)
    file_index = OccurrenceIndex.from_search(search, FILE_USAGE, max_lines=file_index_lines)

    return DeadCodeReport(
        unused_components=find_unused_components(components, component_index),
        unused_files=find_orphaned_files(source_files, file_index),
        unused_exports=find_unused_exports(_read_all(search, export_files), export_index),
    )


def _read_all(search: TextSearch, paths: Sequence[str]) -> Iterable[Tuple[str, str]]:
    for path in paths:
        text = search.read(path)
        if text is not None:
            yield path, text


class DeadCodeAnalyzer(Analyzer):
    """Reports components, exports and files that look unreferenced."""

    name = "deadcode"

    def __init__(self) -> None:
        self.logger = get_logger("analyzers.deadcode")

    def defaults(self) -> Dict[str, object]:
        return {"dead_code": DeadCodeReport()}

    def analyze(self, context: AnalysisContext) -> Dict[str, object]:
        limits = context.limits
        report = scan_dead_code(
            context.search,
            component_index_lines=limits.component_index_lines,
            export_index_lines=limits.export_index_lines,
            file_index_lines=limits.file_index_lines,
        )
        self.logger.debug("Dead-code scan flagged %d candidates", report.total)
        return {"dead_code": report}


__all__ = [
    "DeadCodeAnalyzer",
    "find_orphaned_files",
    "find_unused_components",
    "find_unused_exports",
    "kebab_case",
    "scan_dead_code",
]
