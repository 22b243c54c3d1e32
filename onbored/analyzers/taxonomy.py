"""Keyword taxonomies used to label commit subjects and file paths."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath
from typing import FrozenSet, Iterable, Tuple

from ..models import CommitCategory, ComplianceCategory, RadarCategory


@dataclass(frozen=True)
class CategoryRule:
    """One category tag with its ordered match patterns.

    ``patterns`` are tested against text such as commit subjects.
    ``path_patterns`` and ``extensions`` are tested against file paths.
    """

    category: Enum
    patterns: Tuple[str, ...] = ()
    path_patterns: Tuple[str, ...] = ()
    extensions: Tuple[str, ...] = ()


class Taxonomy:
    """An immutable, ordered set of category rules.

    Categories are not mutually exclusive: a line is labelled with every
    category that has at least one matching pattern.
    """

    def __init__(self, name: str, rules: Iterable[CategoryRule]) -> None:
        self.name = name
        self.rules: Tuple[CategoryRule, ...] = tuple(rules)
        seen = set()
        for rule in self.rules:
            if rule.category in seen:
                raise ValueError(f"Duplicate category '{rule.category.value}' in {name} taxonomy")
            seen.add(rule.category)

    @property
    def categories(self) -> Tuple[Enum, ...]:
        return tuple(rule.category for rule in self.rules)

    def classify(self, line: str | None) -> FrozenSet[Enum]:
        """Return categories whose patterns occur in the lowercased line."""
        if not line:
            return frozenset()
        lowered = line.lower()
        return frozenset(
            rule.category
            for rule in self.rules
            if any(pattern in lowered for pattern in rule.patterns)
        )

    def classify_path(self, path: str | None) -> FrozenSet[Enum]:
        """Return categories matched by path keywords or by file extension."""
        if not path:
            return frozenset()
        lowered = path.strip().lower()
        if not lowered:
            return frozenset()
        suffix = PurePosixPath(lowered).suffix
        return frozenset(
            rule.category
            for rule in self.rules
            if any(pattern in lowered for pattern in rule.path_patterns)
            or (suffix and suffix in rule.extensions)
        )

    def __len__(self) -> int:
        return len(self.rules)

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"Taxonomy({self.name!r}, {len(self.rules)} categories)"


def classify(line: str | None, taxonomy: Taxonomy) -> FrozenSet[Enum]:
    return taxonomy.classify(line)


RADAR_TAXONOMY = Taxonomy(
    "radar",
    (
        CategoryRule(
            RadarCategory.FRONTEND,
            patterns=("component", "ui", "style", "css", "layout", "modal", "button", "form", "page"),
            path_patterns=("component", "/ui/"),
            extensions=(".vue", ".tsx", ".jsx", ".svelte", ".css", ".scss"),
        ),
        CategoryRule(
            RadarCategory.BACKEND,
            patterns=("api", "server", "handler", "controller", "route", "endpoint", "service"),
            path_patterns=("/api/", "server", "handler"),
        ),
        CategoryRule(
            RadarCategory.DATABASE,
            patterns=("database", "db", "schema", "model", "migration", "query", "prisma"),
            path_patterns=("schema", "model", "migration", "prisma"),
        ),
        CategoryRule(
            RadarCategory.AUTH,
            patterns=("auth", "login", "signup", "session", "jwt", "oauth", "password", "security"),
            path_patterns=("auth", "login", "security"),
        ),
        CategoryRule(
            RadarCategory.DEVOPS,
            patterns=("ci", "cd", "docker", "deploy", "build", "workflow", "pipeline", "config"),
            path_patterns=("docker", "ci", "workflow"),
            extensions=(".yml", ".yaml"),
        ),
        CategoryRule(
            RadarCategory.TESTING,
            patterns=("test", "spec", "jest", "vitest", "cypress", "e2e"),
            path_patterns=("test", "spec", ".test.", ".spec."),
        ),
        CategoryRule(
            RadarCategory.DOCS,
            patterns=("doc", "readme", "changelog", "comment", "md"),
            path_patterns=("readme", "doc"),
            extensions=(".md", ".mdx", ".txt"),
        ),
    ),
)

COMMIT_TAXONOMY = Taxonomy(
    "commit",
    (
        CategoryRule(
            CommitCategory.AUTHENTICATION,
            patterns=("auth", "login", "signup", "session", "oauth", "jwt", "password"),
        ),
        CategoryRule(
            CommitCategory.FRONTEND,
            patterns=("ui", "modal", "style", "css", "component", "layout", "button", "form"),
        ),
        CategoryRule(
            CommitCategory.BACKEND,
            patterns=("api", "endpoint", "route", "server", "handler", "controller"),
        ),
        CategoryRule(
            CommitCategory.DATABASE,
            patterns=("database", "db", "migration", "schema", "model", "query", "sql"),
        ),
        CategoryRule(
            CommitCategory.TESTING,
            patterns=("test", "spec", "jest", "vitest", "cypress", "playwright"),
        ),
        CategoryRule(
            CommitCategory.DEVOPS,
            patterns=("ci", "cd", "docker", "deploy", "build", "pipeline", "workflow"),
        ),
        CategoryRule(
            CommitCategory.DOCUMENTATION,
            patterns=("doc", "readme", "comment", "changelog"),
        ),
        CategoryRule(
            CommitCategory.DEPENDENCIES,
            patterns=("dependency", "package", "upgrade", "bump", "npm", "yarn", "pnpm"),
        ),
    ),
)

COMPLIANCE_TAXONOMY = Taxonomy(
    "compliance",
    (
        CategoryRule(
            ComplianceCategory.AGE_VERIFICATION,
            path_patterns=("age", "sumsub", "onfido", "birth"),
        ),
        CategoryRule(
            ComplianceCategory.CONTENT_MODERATION,
            path_patterns=("moderat", "nsfw", "safety"),
        ),
        CategoryRule(
            ComplianceCategory.IDENTITY_VERIFICATION,
            path_patterns=("kyc", "identity", "verif"),
        ),
        CategoryRule(
            ComplianceCategory.REPORTING_MECHANISM,
            path_patterns=("report", "flag", "abuse"),
        ),
        CategoryRule(
            ComplianceCategory.RECORD_KEEPING,
            path_patterns=("2257", "record"),
        ),
        CategoryRule(
            ComplianceCategory.USER_SAFETY,
            path_patterns=("block", "mute", "2fa", "otp", "security"),
        ),
        CategoryRule(
            ComplianceCategory.PAYMENT_COMPLIANCE,
            path_patterns=("stripe", "payout", "payment", "chargeback"),
        ),
    ),
)


__all__ = [
    "COMMIT_TAXONOMY",
    "COMPLIANCE_TAXONOMY",
    "CategoryRule",
    "RADAR_TAXONOMY",
    "Taxonomy",
    "classify",
]
