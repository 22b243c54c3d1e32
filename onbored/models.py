"""Core data models shared across onbored components."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class RadarCategory(str, Enum):
    """Contributor radar axes."""

    FRONTEND = "frontend"
    BACKEND = "backend"
    DATABASE = "database"
    AUTH = "auth"
    DEVOPS = "devops"
    TESTING = "testing"
    DOCS = "docs"


class CommitCategory(str, Enum):
    """Commit-category bars shown in the activity section."""

    AUTHENTICATION = "Authentication"
    FRONTEND = "UI / Frontend"
    BACKEND = "API / Backend"
    DATABASE = "Database"
    TESTING = "Testing"
    DEVOPS = "DevOps / CI"
    DOCUMENTATION = "Documentation"
    DEPENDENCIES = "Dependencies"


class ComplianceCategory(str, Enum):
    """Platform-safety practices tracked by the compliance scan."""

    AGE_VERIFICATION = "ageVerification"
    CONTENT_MODERATION = "contentModeration"
    IDENTITY_VERIFICATION = "identityVerification"
    REPORTING_MECHANISM = "reportingMechanism"
    RECORD_KEEPING = "recordKeeping"
    USER_SAFETY = "userSafety"
    PAYMENT_COMPLIANCE = "paymentCompliance"


class Focus(str, Enum):
    """Dominant focus of a contributor, derived from file extensions."""

    FRONTEND = "frontend"
    BACKEND = "backend"
    FULLSTACK = "fullstack"
    DOCS = "docs"
    CONFIG_DEVOPS = "config-devops"
    GENERAL = "general"


class DeadCodeKind(str, Enum):
    COMPONENT = "component"
    FILE = "file"
    EXPORT = "export"


class FindingType(str, Enum):
    SECRET = "secret"
    INJECTION = "injection"
    EXPOSURE = "exposure"


class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"


@dataclass
class FileMeta:
    """Metadata for an individual repository file."""

    path: str
    size: int


@dataclass
class RepoManifest:
    """Normalized view of the repository for analyzers."""

    root: str
    files: List[FileMeta]


@dataclass(frozen=True)
class CommitRecord:
    """One commit of the repository log."""

    sha: str
    date: str
    author: str
    subject: str
    body: str = ""

    @property
    def message(self) -> str:
        """Subject and body, the text ``git log --grep`` searches."""
        return f"{self.subject}\n{self.body}" if self.body else self.subject


@dataclass(frozen=True)
class Contributor:
    """Per-contributor expertise profile derived from commit history."""

    name: str
    commits: int
    category_counts: Dict[RadarCategory, int]
    radar: Dict[RadarCategory, int]
    focus: Focus
    top_areas: Tuple[str, ...] = ()
    expertise: str = Focus.GENERAL.value


@dataclass(frozen=True)
class FileChurnRecord:
    file: str
    full_path: str
    changes: int


@dataclass(frozen=True)
class MonthlyActivity:
    label: str
    year: int
    total: int
    fixes: int


@dataclass(frozen=True)
class CategoryStat:
    name: CommitCategory
    count: int


@dataclass(frozen=True)
class DeadCodeCandidate:
    """A code artifact heuristically judged unreferenced."""

    name: str
    path: str
    file: str
    kind: DeadCodeKind


@dataclass
class DeadCodeReport:
    unused_components: List[DeadCodeCandidate] = field(default_factory=list)
    unused_files: List[DeadCodeCandidate] = field(default_factory=list)
    unused_exports: List[DeadCodeCandidate] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.unused_components) + len(self.unused_files) + len(self.unused_exports)


@dataclass(frozen=True)
class SecurityFinding:
    type: FindingType
    severity: Severity
    name: str
    file: str


@dataclass
class SecurityReport:
    vulnerabilities: List[SecurityFinding] = field(default_factory=list)
    warnings: List[SecurityFinding] = field(default_factory=list)


@dataclass(frozen=True)
class ComplianceIndicator:
    """Found/not-found state of one compliance category."""

    key: ComplianceCategory
    found: bool = False
    files: Tuple[str, ...] = ()
    notes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ComplianceReport:
    """All compliance indicators in their fixed order."""

    indicators: Tuple[ComplianceIndicator, ...]

    @classmethod
    def empty(cls) -> "ComplianceReport":
        return cls(indicators=tuple(ComplianceIndicator(key=key) for key in ComplianceCategory))

    def get(self, key: ComplianceCategory) -> ComplianceIndicator:
        for indicator in self.indicators:
            if indicator.key is key:
                return indicator
        raise KeyError(key)

    @property
    def found_count(self) -> int:
        return sum(1 for indicator in self.indicators if indicator.found)

    @property
    def score(self) -> int:
        if not self.indicators:
            return 0
        return round_half_up(100 * self.found_count / len(self.indicators))

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            indicator.key.value: {
                "found": indicator.found,
                "files": list(indicator.files),
                "notes": list(indicator.notes),
            }
            for indicator in self.indicators
        }
        payload["score"] = self.score
        return payload


@dataclass(frozen=True)
class TechItem:
    name: str
    type: str


@dataclass(frozen=True)
class ApiEndpoint:
    path: str
    name: str
    type: str
    line: Optional[int] = None


@dataclass(frozen=True)
class PageEntry:
    path: str
    name: str
    type: str


@dataclass(frozen=True)
class ModuleEntry:
    name: str
    path: str
    type: str


@dataclass(frozen=True)
class ComponentEntry:
    name: str
    count: int
    type: str


@dataclass(frozen=True)
class FunctionEntry:
    name: str
    runtime: str
    type: str
    count: Optional[int] = None


@dataclass(frozen=True)
class LayerItem:
    name: str
    path: Optional[str] = None
    count: Optional[int] = None
    runtime: Optional[str] = None


@dataclass(frozen=True)
class ArchitectureLayer:
    """Presentation-only grouping of inventory items."""

    name: str
    type: str
    items: Tuple[LayerItem, ...]


@dataclass(frozen=True)
class OpenIssue:
    number: int
    title: str


@dataclass(frozen=True)
class AIInsights:
    summary: str
    key_things: Tuple[str, ...] = ()
    gotchas: Tuple[str, ...] = ()


@dataclass
class Report:
    """Everything a single analysis run produces."""

    repo_name: str
    project_title: str = ""
    project_description: str = ""
    generated_summary: str = ""
    remote_url: str = "No remote"
    current_branch: str = "unknown"
    first_commit_date: str = ""
    latest_commit_date: str = ""
    total_commits: int = 0
    total_fix_commits: int = 0
    fix_ratio: int = 0
    contributors: List[Contributor] = field(default_factory=list)
    months: List[MonthlyActivity] = field(default_factory=list)
    top_files: List[FileChurnRecord] = field(default_factory=list)
    category_stats: List[CategoryStat] = field(default_factory=list)
    tech_stack: List[TechItem] = field(default_factory=list)
    open_issues: List[OpenIssue] = field(default_factory=list)
    primary_language: str = "unknown"
    api_endpoints: List[ApiEndpoint] = field(default_factory=list)
    db_schemas: List[str] = field(default_factory=list)
    pages: List[PageEntry] = field(default_factory=list)
    modules: List[ModuleEntry] = field(default_factory=list)
    components: List[ComponentEntry] = field(default_factory=list)
    functions: List[FunctionEntry] = field(default_factory=list)
    env_vars: List[str] = field(default_factory=list)
    dead_code: DeadCodeReport = field(default_factory=DeadCodeReport)
    security: SecurityReport = field(default_factory=SecurityReport)
    compliance: ComplianceReport = field(default_factory=ComplianceReport.empty)
    architecture: List[ArchitectureLayer] = field(default_factory=list)
    ai: Optional[AIInsights] = None
    generated_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Return the ``data.json`` document; every key is camelCase."""
        payload = asdict(self)
        payload["compliance"] = self.compliance.to_dict()
        payload["dead_code"]["total"] = self.dead_code.total
        return _jsonable(payload)


def _camel(key: Any) -> Any:
    if not isinstance(key, str) or "_" not in key:
        return key
    head, *rest = key.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {_camel(_jsonable(key)): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value


def round_half_up(value: float) -> int:
    """Round like a percentage display does: .5 always goes up."""
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)
