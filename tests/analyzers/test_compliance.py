"""Tests for compliance indicators and security findings."""

from __future__ import annotations

import pytest

from onbored.analyzers.compliance import (
    SUMSUB_NOTE,
    ComplianceAnalyzer,
    SecurityAnalyzer,
    add_evidence,
    find_compliance_files,
    scan_security,
    score_compliance,
)
from onbored.models import ComplianceCategory, ComplianceReport, FindingType, Severity
from tests._fixtures.context import make_context
from tests._fixtures.git_runner import FakeGitRunner


def test_payment_files_mark_only_payment_compliance() -> None:
    report = score_compliance(["lib/stripe.ts", "lib/payout.ts"])

    payment = report.get(ComplianceCategory.PAYMENT_COMPLIANCE)
    assert payment.found is True
    assert payment.files == ("lib/stripe.ts", "lib/payout.ts")
    assert [i.key for i in report.indicators if i.found] == [ComplianceCategory.PAYMENT_COMPLIANCE]
    assert report.score == 14


def test_empty_report_scores_zero() -> None:
    report = score_compliance([])

    assert report == ComplianceReport.empty()
    assert report.score == 0
    assert [i.key for i in report.indicators] == list(ComplianceCategory)


@pytest.mark.parametrize(
    "extra",
    ["src/kyc/check.ts", "lib/stripe.ts", "docs/readme.md", "src/moderation/queue.py"],
)
def test_score_is_monotonic(extra: str) -> None:
    base = ["lib/stripe.ts", "src/auth/otp.ts"]

    before = score_compliance(base)
    after = score_compliance(base + [extra])

    assert after.score >= before.score
    for old, new in zip(before.indicators, after.indicators):
        assert not old.found or new.found


def test_evidence_is_deduplicated_and_capped() -> None:
    paths = ["lib/stripe.ts", "lib/stripe.ts"] + [f"lib/payout{i}.ts" for i in range(10)]

    report = score_compliance(paths, cap=8)

    files = report.get(ComplianceCategory.PAYMENT_COMPLIANCE).files
    assert len(files) == 8
    assert files.count("lib/stripe.ts") == 1


def test_add_evidence_returns_new_report() -> None:
    empty = ComplianceReport.empty()

    updated = add_evidence(empty, "src/report/abuse.ts")

    assert empty.found_count == 0
    assert updated.get(ComplianceCategory.REPORTING_MECHANISM).found is True


def test_sumsub_note_added_once_even_past_cap() -> None:
    report = score_compliance(["src/sumsub/client.ts", "src/sumsub/webhook.ts"], cap=0)

    age = report.get(ComplianceCategory.AGE_VERIFICATION)
    assert age.found is True
    assert age.files == ()
    assert age.notes == (SUMSUB_NOTE,)


def test_compliance_to_dict_includes_score() -> None:
    payload = score_compliance(["lib/stripe.ts"]).to_dict()

    assert payload["paymentCompliance"] == {"found": True, "files": ["lib/stripe.ts"], "notes": []}
    assert payload["ageVerification"]["found"] is False
    assert payload["score"] == 14


def test_find_compliance_files_greps_contents(repo_builder) -> None:
    repo_builder.write(
        {
            "src/payments/payout.ts": "export function schedulePayout() {}\n",
            "src/lib/util.ts": "export const value = 1\n",
        }
    )
    search = repo_builder.search()

    assert find_compliance_files(search) == ["src/payments/payout.ts"]

    context = make_context(repo_builder.path(), FakeGitRunner())
    report = ComplianceAnalyzer().analyze(context)["compliance"]
    assert report.found_count == 1
    assert report.score == 14


def _seed_security(repo_builder) -> None:
    repo_builder.write(
        {
            "src/config.ts": 'const api_key = "abcdefghijklmnopqrstuvwxyz"\n',
            "scripts/run.js": "eval(code)\n",
            "web/render.js": "el.innerHTML = html\n",
            ".env.local": "password = 'hunter2secret'\n",
        }
    )


def test_scan_security_reports_secrets_and_injections(repo_builder) -> None:
    _seed_security(repo_builder)

    report = scan_security(repo_builder.search(), lambda path: False)

    found = [(f.type, f.severity, f.name, f.file) for f in report.vulnerabilities]
    assert found == [
        (FindingType.SECRET, Severity.CRITICAL, "Hardcoded API Key", "src/config.ts"),
        (FindingType.INJECTION, Severity.HIGH, "Eval Usage (Code Injection Risk)", "scripts/run.js"),
        (FindingType.INJECTION, Severity.MEDIUM, "innerHTML Assignment (XSS Risk)", "web/render.js"),
    ]
    assert [(w.type, w.severity, w.file) for w in report.warnings] == [
        (FindingType.EXPOSURE, Severity.MEDIUM, ".env.local")
    ]
    assert report.warnings[0].name == ".env.local may be committed to repo"


def test_ignored_sensitive_files_are_not_reported(repo_builder) -> None:
    _seed_security(repo_builder)
    runner = FakeGitRunner({("git", "check-ignore"): ".env.local\n"})
    context = make_context(repo_builder.path(), runner)

    report = SecurityAnalyzer().analyze(context)["security"]

    assert report.warnings == []
    assert len(report.vulnerabilities) == 3


def test_security_findings_capped_per_rule(repo_builder) -> None:
    repo_builder.write({f"src/f{i}.js": "eval(x)\n" for i in range(5)})

    report = scan_security(repo_builder.search(), lambda path: False)

    assert len(report.vulnerabilities) == 3
