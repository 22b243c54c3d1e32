"""Compliance indicators and security findings."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from functools import reduce
from pathlib import PurePosixPath
from typing import Callable, Dict, Iterable, List, Pattern, Tuple

from .base import AnalysisContext, Analyzer
from .taxonomy import COMPLIANCE_TAXONOMY
from ..logging import get_logger
from ..models import (
    ComplianceCategory,
    ComplianceIndicator,
    ComplianceReport,
    FindingType,
    SecurityFinding,
    SecurityReport,
    Severity,
)
from ..search import TextSearch

# One combined pattern selects candidate files for every category at once.
COMPLIANCE_SIGNAL = re.compile(
    r"(ageverif|verifyage|sumsub|onfido|birthdate|kyc|moderat|nsfw|reportuser|reportcontent"
    r"|blockuser|2257|stripe.*connect|payout|chargeback|2fa|otp|mfa)",
    re.IGNORECASE,
)
MAX_COMPLIANCE_FILES = 100
DEFAULT_EVIDENCE_CAP = 8
SUMSUB_NOTE = "SumSub integration detected (industry-standard KYC)"

MAX_FILES_PER_RULE = 3
SENSITIVE_FILES = (
    ".env",
    ".env.local",
    ".env.production",
    "credentials.json",
    "serviceAccount.json",
    "private.key",
)


@dataclass(frozen=True)
class SecurityRule:
    pattern: Pattern[str]
    name: str
    type: FindingType
    severity: Severity


SECRET_RULES: Tuple[SecurityRule, ...] = tuple(
    SecurityRule(re.compile(pattern), name, FindingType.SECRET, Severity.CRITICAL)
    for pattern, name in (
        (r"api[_-]?key\s*[=:]\s*[\"'][^\"']{20,}", "Hardcoded API Key"),
        (r"secret[_-]?key\s*[=:]\s*[\"'][^\"']{20,}", "Hardcoded Secret"),
        (r"password\s*[=:]\s*[\"'][^\"']{6,}", "Hardcoded Password"),
        (r"private[_-]?key\s*[=:]\s*[\"']", "Hardcoded Private Key"),
        (r"Bearer\s+[A-Za-z0-9\-_]{20,}", "Hardcoded Bearer Token"),
    )
)

INJECTION_RULES: Tuple[SecurityRule, ...] = tuple(
    SecurityRule(re.compile(pattern), name, FindingType.INJECTION, severity)
    for pattern, name, severity in (
        (r"\$\{.*req\.(body|query|params)", "Potential SQL/NoSQL Injection", Severity.HIGH),
        (r"eval\s*\(", "Eval Usage (Code Injection Risk)", Severity.HIGH),
        (r"innerHTML\s*=", "innerHTML Assignment (XSS Risk)", Severity.MEDIUM),
        (r"dangerouslySetInnerHTML", "Dangerous HTML Injection", Severity.MEDIUM),
        (r"v-html\s*=", "Vue v-html (XSS Risk)", Severity.MEDIUM),
    )
)


def add_evidence(
    report: ComplianceReport, path: str, *, cap: int = DEFAULT_EVIDENCE_CAP
) -> ComplianceReport:
    """Return a new report with ``path`` attributed to every category it matches.

    A category is marked found on its first evidence file. Evidence lists are
    deduplicated and hold at most ``cap`` paths.
    """
    categories = COMPLIANCE_TAXONOMY.classify_path(path)
    if not categories:
        return report
    indicators: List[ComplianceIndicator] = []
    for indicator in report.indicators:
        if indicator.key not in categories:
            indicators.append(indicator)
            continue
        files = indicator.files
        if path not in files and len(files) < cap:
            files = files + (path,)
        notes = indicator.notes
        if (
            indicator.key is ComplianceCategory.AGE_VERIFICATION
            and "sumsub" in path.lower()
            and SUMSUB_NOTE not in notes
        ):
            notes = notes + (SUMSUB_NOTE,)
        indicators.append(replace(indicator, found=True, files=files, notes=notes))
    return replace(report, indicators=tuple(indicators))


def score_compliance(
    paths: Iterable[str], *, cap: int = DEFAULT_EVIDENCE_CAP
) -> ComplianceReport:
    """Fold candidate paths into a fresh compliance report."""
    return reduce(
        lambda report, path: add_evidence(report, path, cap=cap),
        paths,
        ComplianceReport.empty(),
    )


def find_compliance_files(search: TextSearch) -> List[str]:
    return search.grep_files(COMPLIANCE_SIGNAL, limit=MAX_COMPLIANCE_FILES)


def scan_security(
    search: TextSearch, is_ignored: Callable[[str], bool]
) -> SecurityReport:
    """Pattern-match secrets and injection sinks, then look for exposed files."""
    vulnerabilities: List[SecurityFinding] = []
    for rule in SECRET_RULES:
        for path in search.grep_files(
            rule.pattern, path_filter=_outside_env_files, limit=MAX_FILES_PER_RULE
        ):
            vulnerabilities.append(_finding(rule, path))
    for rule in INJECTION_RULES:
        for path in search.grep_files(rule.pattern, limit=MAX_FILES_PER_RULE):
            vulnerabilities.append(_finding(rule, path))

    warnings: List[SecurityFinding] = []
    for filename in SENSITIVE_FILES:
        matches = search.find_files(
            lambda path, expected=filename: PurePosixPath(path).name == expected, limit=1
        )
        if matches and not is_ignored(matches[0]):
            warnings.append(
                SecurityFinding(
                    type=FindingType.EXPOSURE,
                    severity=Severity.MEDIUM,
                    name=f"{filename} may be committed to repo",
                    file=matches[0],
                )
            )
    return SecurityReport(vulnerabilities=vulnerabilities, warnings=warnings)


def _outside_env_files(path: str) -> bool:
    return ".env" not in path


def _finding(rule: SecurityRule, path: str) -> SecurityFinding:
    return SecurityFinding(type=rule.type, severity=rule.severity, name=rule.name, file=path)


class ComplianceAnalyzer(Analyzer):
    """Marks platform-safety indicators found in file paths."""

    name = "compliance"

    def __init__(self) -> None:
        self.logger = get_logger("analyzers.compliance")

    def defaults(self) -> Dict[str, object]:
        return {"compliance": ComplianceReport.empty()}

    def analyze(self, context: AnalysisContext) -> Dict[str, object]:
        candidates = find_compliance_files(context.search)
        report = score_compliance(candidates, cap=context.limits.evidence_cap)
        self.logger.debug(
            "Compliance: %d/%d indicators found (score %d)",
            report.found_count,
            len(report.indicators),
            report.score,
        )
        return {"compliance": report}


class SecurityAnalyzer(Analyzer):
    """Reports hardcoded secrets, injection sinks and committed sensitive files."""

    name = "security"

    def defaults(self) -> Dict[str, object]:
        return {"security": SecurityReport()}

    def analyze(self, context: AnalysisContext) -> Dict[str, object]:
        return {"security": scan_security(context.search, context.git.is_ignored)}


__all__ = [
    "COMPLIANCE_SIGNAL",
    "ComplianceAnalyzer",
    "INJECTION_RULES",
    "SECRET_RULES",
    "SENSITIVE_FILES",
    "SecurityAnalyzer",
    "SecurityRule",
    "add_evidence",
    "find_compliance_files",
    "scan_security",
    "score_compliance",
]
