"""Tests for the keyword taxonomies."""

from __future__ import annotations

import pytest

from onbored.analyzers.taxonomy import (
    COMMIT_TAXONOMY,
    COMPLIANCE_TAXONOMY,
    RADAR_TAXONOMY,
    CategoryRule,
    Taxonomy,
    classify,
)
from onbored.models import CommitCategory, ComplianceCategory, RadarCategory


@pytest.mark.parametrize("taxonomy", [RADAR_TAXONOMY, COMMIT_TAXONOMY, COMPLIANCE_TAXONOMY])
@pytest.mark.parametrize("line", ["", None])
def test_empty_line_has_no_categories(taxonomy: Taxonomy, line) -> None:
    assert classify(line, taxonomy) == frozenset()
    assert taxonomy.classify_path(line) == frozenset()


def test_classify_is_multi_label_and_case_insensitive() -> None:
    labels = classify("Add Login API endpoint", RADAR_TAXONOMY)

    assert labels == {RadarCategory.AUTH, RadarCategory.BACKEND}


def test_classify_uses_substring_matching() -> None:
    # "build" contains "ui", so a build commit also counts as frontend work
    labels = COMMIT_TAXONOMY.classify("fix build script")

    assert CommitCategory.DEVOPS in labels
    assert CommitCategory.FRONTEND in labels


def test_classify_path_matches_extensions() -> None:
    assert RADAR_TAXONOMY.classify_path("web/Button.vue") == {RadarCategory.FRONTEND}
    assert RADAR_TAXONOMY.classify_path("README.md") == {RadarCategory.DOCS}
    assert RADAR_TAXONOMY.classify_path(".github/workflows/ci.yml") == {RadarCategory.DEVOPS}


def test_classify_path_matches_path_keywords() -> None:
    labels = RADAR_TAXONOMY.classify_path("src/api/auth/session.ts")

    assert labels == {RadarCategory.BACKEND, RadarCategory.AUTH}


def test_compliance_taxonomy_classifies_paths() -> None:
    assert COMPLIANCE_TAXONOMY.classify_path("lib/stripe.ts") == {
        ComplianceCategory.PAYMENT_COMPLIANCE
    }
    assert COMPLIANCE_TAXONOMY.classify_path("src/sumsub/client.ts") == {
        ComplianceCategory.AGE_VERIFICATION
    }


def test_taxonomy_rejects_duplicate_categories() -> None:
    with pytest.raises(ValueError):
        Taxonomy(
            "broken",
            (
                CategoryRule(RadarCategory.DOCS, patterns=("doc",)),
                CategoryRule(RadarCategory.DOCS, patterns=("readme",)),
            ),
        )


def test_taxonomy_preserves_category_order() -> None:
    assert RADAR_TAXONOMY.categories == tuple(RadarCategory)
    assert COMMIT_TAXONOMY.categories == tuple(CommitCategory)
    assert COMPLIANCE_TAXONOMY.categories == tuple(ComplianceCategory)
    assert len(COMMIT_TAXONOMY) == 8
