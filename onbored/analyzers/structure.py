"""Codebase inventories: endpoints, schemas, pages, modules, components, functions.

Every inventory is a capped, language-agnostic grep over the scanned tree.
The architecture layers built at the end only group these inventories for
presentation.
"""

from __future__ import annotations

import re
from collections import Counter
from itertools import islice
from pathlib import Path, PurePosixPath
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Pattern, Sequence, Tuple

from .base import AnalysisContext, Analyzer
from ..logging import get_logger
from ..models import (
    ApiEndpoint,
    ArchitectureLayer,
    ComponentEntry,
    FunctionEntry,
    LayerItem,
    ModuleEntry,
    PageEntry,
    TechItem,
)
from ..search import SearchMatch, TextSearch

MAX_ENDPOINTS = 25
MAX_SCHEMAS = 20
MAX_PAGES = 20
MAX_ENTRY_POINTS = 15
MAX_MODULES = 20
MAX_COMPONENTS = 20
MAX_FUNCTIONS = 30
MAX_ENV_VARS = 20
MAX_LAYER_ITEMS = 8
PER_LANGUAGE_TOP = 15

ENTRY_POINT_NAMES = frozenset(
    {
        "main.py",
        "main.rs",
        "main.go",
        "cli.py",
        "__main__.py",
        "app.py",
        "index.ts",
        "index.js",
        "mod.rs",
    }
)
PAGE_EXTENSIONS = (".astro", ".vue", ".tsx", ".svelte")
UI_COMPONENT_EXTENSIONS = (".vue", ".tsx", ".svelte")
COMPONENT_FOLDER_SKIP = frozenset({"vue", "react", "svelte", "angular", "src", "lib"})
ENV_FILE_NAMES = frozenset({".env.example", ".env.sample", "env.ts"})
SERVICE_TECH_TYPES = ("backend", "database")

_QUOTED_ROUTE = re.compile(r".+[\"']([^\"']+)[\"']")
_JS_API_FILE = re.compile(r"api/(.+?)\.(ts|js)$")
_ROUTE_SOURCES: Tuple[Tuple[str, Pattern[str], int], ...] = (
    (
        ".py",
        re.compile(r"@(app|router)\.(get|post|put|delete|patch|route)\(|@api_view"),
        30,
    ),
    (".rs", re.compile(r"#\[(get|post|put|delete|patch)\(|web::(get|post|resource)"), 20),
    (".go", re.compile(r"\.(GET|POST|PUT|DELETE|PATCH)\("), 20),
)

_PY_CLASS_LINE = re.compile(r"^class ")
_PY_CLASS = re.compile(r"^class\s+(\w+)")
_RS_TYPE_LINE = re.compile(r"^(pub struct|pub enum|struct|enum)")
_RS_TYPE = re.compile(r"(?:pub\s+)?(?:struct|enum)\s+(\w+)")

_PY_DEF_LINE = re.compile(r"^(def |async def )")
_PY_DEF = re.compile(r"^(?:async )?def\s+(\w+)")
_RS_FN_LINE = re.compile(r"^(pub fn|pub async fn|fn )")
_RS_FN = re.compile(r"(?:pub\s+)?(?:async\s+)?fn\s+(\w+)")
_GO_FUNC_LINE = re.compile(r"^func ")
_GO_FUNC = re.compile(r"^func\s+(?:\([^)]+\)\s+)?(\w+)")
_JS_EXPORT_LINE = re.compile(r"^(export function|export async function|export const .* = )")
_JS_EXPORT = re.compile(r"export\s+(?:async\s+)?(?:function|const)\s+(\w+)")
_ENV_ASSIGNMENT = re.compile(r"^[A-Z][A-Z0-9_]+(?==)", re.MULTILINE)


def _anchored(path: str) -> str:
    return "/" + path


def _take_lines(
    search: TextSearch,
    pattern: Pattern[str],
    limit: int,
    *,
    path_filter: Optional[Callable[[str], bool]] = None,
    exclude: Sequence[str] = (),
) -> List[SearchMatch]:
    """Matching lines whose text avoids every ``exclude`` marker, at most ``limit``."""
    matches: Iterator[SearchMatch] = (
        match
        for match in search.iter_lines(pattern, path_filter=path_filter)
        if not any(marker in match.text for marker in exclude)
    )
    return list(islice(matches, limit))


def _tally_names(lines: Iterable[SearchMatch], pattern: Pattern[str]) -> Counter:
    names: Counter = Counter()
    for match in lines:
        found = pattern.search(match.text)
        if found:
            names[found.group(1)] += 1
    return names


# ----------------------------------------------------------------------
# Inventories


def find_api_endpoints(search: TextSearch) -> List[ApiEndpoint]:
    endpoints: List[ApiEndpoint] = []
    api_files = search.find_files(
        lambda path: path.endswith((".ts", ".js"))
        and "/api/" in _anchored(path)
        and ".d.ts" not in path,
        limit=20,
    )
    for path in api_files:
        match = _JS_API_FILE.search(path)
        if match:
            endpoints.append(ApiEndpoint(path=path, name=match.group(1), type="file"))

    for suffix, pattern, limit in _ROUTE_SOURCES:
        lines = _take_lines(
            search, pattern, limit, path_filter=lambda path, ext=suffix: path.endswith(ext)
        )
        for line in lines:
            route = _QUOTED_ROUTE.match(line.text)
            if route:
                endpoints.append(
                    ApiEndpoint(path=line.path, name=route.group(1), type="route", line=line.line)
                )
    return endpoints[:MAX_ENDPOINTS]


def find_db_schemas(search: TextSearch) -> List[str]:
    def _is_schema(path: str) -> bool:
        name = PurePosixPath(path).name
        return name.endswith(".prisma") or any(
            marker in name for marker in ("schema", "model", "collection")
        )

    return search.find_files(_is_schema, limit=MAX_SCHEMAS)


def find_pages(search: TextSearch) -> List[PageEntry]:
    """Return web pages followed by language entry points."""
    pages: List[PageEntry] = []
    for path in search.find_files(
        lambda item: item.endswith(PAGE_EXTENSIONS) and "/pages/" in _anchored(item),
        limit=MAX_PAGES,
    ):
        stem = PurePosixPath(path).stem
        pages.append(PageEntry(path=path, name="/" if stem == "index" else f"/{stem}", type="page"))

    for path in search.find_files(
        lambda item: PurePosixPath(item).name in ENTRY_POINT_NAMES and "test" not in item,
        limit=MAX_ENTRY_POINTS,
    ):
        pages.append(PageEntry(path=path, name=PurePosixPath(path).name, type="entry"))
    return pages


def find_modules(search: TextSearch, root_name: str) -> List[ModuleEntry]:
    modules: List[ModuleEntry] = []

    for path in search.find_files(
        lambda item: PurePosixPath(item).name == "__init__.py"
        and ".venv" not in item
        and "test" not in item,
        limit=30,
    ):
        parent = PurePosixPath(path).parent
        name = parent.name
        if name and name != "__pycache__" and not name.startswith("."):
            modules.append(ModuleEntry(name=name, path=parent.as_posix(), type="python-package"))

    for path in search.find_files(
        lambda item: PurePosixPath(item).name in ("mod.rs", "lib.rs") and "target" not in item,
        limit=20,
    ):
        parent = PurePosixPath(path).parent
        if parent.name and parent.name != "src":
            modules.append(ModuleEntry(name=parent.name, path=parent.as_posix(), type="rust-module"))

    go_dirs: List[str] = []
    for path in search.find_files(lambda item: item.endswith(".go") and "vendor" not in item):
        parent = PurePosixPath(path).parent.as_posix()
        if parent not in go_dirs:
            go_dirs.append(parent)
    for directory in sorted(go_dirs)[:20]:
        name = PurePosixPath(directory).name if directory != "." else root_name
        if name and not name.startswith("."):
            path = "" if directory == "." else directory
            modules.append(ModuleEntry(name=name, path=path, type="go-package"))

    # last entry wins per name, first position is kept
    deduped: Dict[str, ModuleEntry] = {}
    for module in modules:
        deduped[module.name] = module
    return list(deduped.values())[:MAX_MODULES]


def _component_folder(path: str) -> Optional[str]:
    parts = path.split("/")
    if "components" not in parts:
        return None
    index = parts.index("components")
    for part in parts[index + 1 : -1]:
        if part.lower() not in COMPONENT_FOLDER_SKIP:
            return part
    return PurePosixPath(path).stem


def find_components(search: TextSearch) -> List[ComponentEntry]:
    components: List[ComponentEntry] = []

    folders: Counter = Counter()
    for path in search.find_files(
        lambda item: item.endswith(UI_COMPONENT_EXTENSIONS) and "/components/" in _anchored(item),
        limit=50,
    ):
        folder = _component_folder(path)
        if folder:
            folders[folder] += 1
    components.extend(
        ComponentEntry(name=name, count=count, type="component") for name, count in folders.items()
    )

    classes = _tally_names(_take_lines(search, _PY_CLASS_LINE, 40, exclude=("test",)), _PY_CLASS)
    classes.pop("Meta", None)
    components.extend(
        ComponentEntry(name=name, count=count, type="class")
        for name, count in islice(classes.items(), PER_LANGUAGE_TOP)
    )

    structs = _tally_names(
        _take_lines(search, _RS_TYPE_LINE, 40, path_filter=lambda path: "target" not in path),
        _RS_TYPE,
    )
    components.extend(
        ComponentEntry(name=name, count=count, type="struct")
        for name, count in islice(structs.items(), PER_LANGUAGE_TOP)
    )

    components.sort(key=lambda entry: entry.count, reverse=True)
    return components[:MAX_COMPONENTS]


def _serverless_runtime(directory: Path) -> str:
    for marker, runtime in (
        ("package.json", "Node.js"),
        ("requirements.txt", "Python"),
        ("Cargo.toml", "Rust"),
        ("go.mod", "Go"),
    ):
        if (directory / marker).exists():
            return runtime
    return "unknown"


def _function_dirs(paths: Iterable[str], limit: int = 5) -> List[str]:
    found: List[str] = []
    for path in paths:
        parts = path.split("/")[:-1]
        for depth, part in enumerate(parts):
            if part != "functions":
                continue
            directory = "/".join(parts[: depth + 1])
            if directory not in found:
                found.append(directory)
                if len(found) >= limit:
                    return found
    return found


def find_functions(search: TextSearch, root: Path) -> List[FunctionEntry]:
    functions: List[FunctionEntry] = []

    for directory in _function_dirs(search.paths):
        try:
            children = sorted((root / directory).iterdir())
        except OSError:
            continue
        for child in children:
            if child.is_dir() and not child.name.startswith("."):
                functions.append(
                    FunctionEntry(
                        name=child.name, runtime=_serverless_runtime(child), type="serverless"
                    )
                )

    sources = (
        (
            "Python",
            _take_lines(search, _PY_DEF_LINE, 50, exclude=("test", "def __")),
            _PY_DEF,
            True,
        ),
        (
            "Rust",
            _take_lines(
                search,
                _RS_FN_LINE,
                50,
                path_filter=lambda path: "target" not in path,
                exclude=("test",),
            ),
            _RS_FN,
            True,
        ),
        ("Go", _take_lines(search, _GO_FUNC_LINE, 50, exclude=("test",)), _GO_FUNC, False),
        ("Node.js", _take_lines(search, _JS_EXPORT_LINE, 50), _JS_EXPORT, False),
    )
    for runtime, lines, pattern, skip_private in sources:
        names = _tally_names(lines, pattern)
        ranked = [
            (name, count)
            for name, count in names.most_common()
            if not (skip_private and name.startswith("_"))
        ]
        functions.extend(
            FunctionEntry(name=name, runtime=runtime, type="function", count=count)
            for name, count in ranked[:PER_LANGUAGE_TOP]
        )
    return functions[:MAX_FUNCTIONS]


def find_env_vars(search: TextSearch) -> List[str]:
    names: List[str] = []
    for path in search.find_files(
        lambda item: PurePosixPath(item).name in ENV_FILE_NAMES, limit=3
    ):
        text = search.read(path) or ""
        for name in _ENV_ASSIGNMENT.findall(text):
            if name not in names:
                names.append(name)
    return names[:MAX_ENV_VARS]


# ----------------------------------------------------------------------
# Architecture layers


def build_architecture_layers(
    *,
    pages: Sequence[PageEntry],
    components: Sequence[ComponentEntry],
    endpoints: Sequence[ApiEndpoint],
    functions: Sequence[FunctionEntry],
    tech_stack: Sequence[TechItem],
) -> List[ArchitectureLayer]:
    """Group inventories into ordered presentation layers, skipping empty ones."""
    services = [tech for tech in tech_stack if tech.type in SERVICE_TECH_TYPES]
    candidates = (
        ("Pages", "pages", [LayerItem(name=page.name, path=page.path) for page in pages]),
        (
            "Components",
            "components",
            [LayerItem(name=entry.name, count=entry.count) for entry in components],
        ),
        ("API Routes", "api", [LayerItem(name=endpoint.name) for endpoint in endpoints]),
        (
            "Functions",
            "functions",
            [LayerItem(name=entry.name, runtime=entry.runtime) for entry in functions],
        ),
        ("Services", "services", [LayerItem(name=tech.name) for tech in services]),
    )
    return [
        ArchitectureLayer(name=name, type=layer_type, items=tuple(items[:MAX_LAYER_ITEMS]))
        for name, layer_type, items in candidates
        if items
    ]


class StructureAnalyzer(Analyzer):
    """Inventories the building blocks of the codebase."""

    name = "structure"

    def __init__(self) -> None:
        self.logger = get_logger("analyzers.structure")

    def defaults(self) -> Dict[str, object]:
        return {
            "api_endpoints": [],
            "db_schemas": [],
            "pages": [],
            "modules": [],
            "components": [],
            "functions": [],
            "env_vars": [],
        }

    def analyze(self, context: AnalysisContext) -> Dict[str, object]:
        search = context.search
        endpoints = find_api_endpoints(search)
        modules = find_modules(search, context.root.name)
        components = find_components(search)
        self.logger.debug(
            "Inventory: %d endpoints, %d modules, %d components",
            len(endpoints),
            len(modules),
            len(components),
        )
        return {
            "api_endpoints": endpoints,
            "db_schemas": find_db_schemas(search),
            "pages": find_pages(search),
            "modules": modules,
            "components": components,
            "functions": find_functions(search, context.root),
            "env_vars": find_env_vars(search),
        }


__all__ = [
    "StructureAnalyzer",
    "build_architecture_layers",
    "find_api_endpoints",
    "find_components",
    "find_db_schemas",
    "find_env_vars",
    "find_functions",
    "find_modules",
    "find_pages",
]
