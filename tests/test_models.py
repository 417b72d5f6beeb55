"""
Tests for data models and analyzer output normalization.
"""

import json
from dataclasses import dataclass, field
from typing import List

import pytest

from pwaudit.core.models import (
    AuditResult,
    Category,
    Finding,
    Severity,
    Status,
    error_category,
    is_category_like,
    normalize_category,
    normalize_finding,
    to_severity,
    to_status,
)


@dataclass
class ObjectFinding:
    title: str
    status: str = "pass"
    severity: str = "medium"


@dataclass
class ObjectCategory:
    findings: List[ObjectFinding] = field(default_factory=list)


class TestCoercion:

    @pytest.mark.parametrize("raw, expected", [
        ("critical", Severity.CRITICAL),
        ("HIGH", Severity.HIGH),
        (Severity.INFO, Severity.INFO),
        ("blocker", Severity.LOW),
        (None, Severity.LOW),
        (3, Severity.LOW),
    ])
    def test_severity(self, raw, expected):
        assert to_severity(raw) is expected

    @pytest.mark.parametrize("raw, expected", [
        ("pass", Status.PASS),
        ("PASS", Status.FAIL),
        ("Pass", Status.FAIL),
        (" pass", Status.FAIL),
        (Status.PASS, Status.PASS),
        ("fail", Status.FAIL),
        ("skipped", Status.FAIL),
        (True, Status.FAIL),
        (None, Status.FAIL),
    ])
    def test_status_fails_closed(self, raw, expected):
        assert to_status(raw) is expected


class TestNormalizeFinding:

    def test_minimal_mapping(self):
        finding = normalize_finding({"title": "Has retries"})
        assert finding.id == "Has retries"
        assert finding.message == ""
        assert finding.severity is Severity.LOW
        assert finding.status is Status.FAIL
        assert finding.artifacts is None

    def test_object_finding(self):
        finding = normalize_finding(ObjectFinding(title="Uses getByRole"))
        assert finding.title == "Uses getByRole"
        assert finding.passed
        assert finding.severity is Severity.MEDIUM

    def test_artifacts_are_strings(self):
        finding = normalize_finding({"title": "x", "artifacts": ["a.ts", 1]})
        assert finding.artifacts == ["a.ts", "1"]


class TestNormalizeCategory:

    def test_missing_id_and_title_come_from_registry(self):
        category = normalize_category("locators", "Locator Strategy", {"findings": []})
        assert (category.id, category.title) == ("locators", "Locator Strategy")

    def test_non_list_findings_become_empty(self):
        category = normalize_category("x", "X", {"findings": "oops"})
        assert category.findings == []

    def test_object_category(self):
        category = normalize_category("x", "X", ObjectCategory([ObjectFinding("a"), ObjectFinding("b", "fail")]))
        assert category.passed_count == 1
        assert category.failed_count == 1

    def test_is_category_like(self):
        assert is_category_like({})
        assert is_category_like(ObjectCategory())
        assert not is_category_like(None)
        assert not is_category_like(42)

    def test_error_category(self):
        category = error_category("deps", "Dependencies", "boom")
        [finding] = category.findings
        assert finding.id == "analyzer-error"
        assert finding.title == "Analyzer failed"
        assert finding.message == "boom"
        assert finding.severity is Severity.HIGH
        assert finding.status is Status.FAIL


class TestSerialization:

    def test_finding_omits_empty_optionals(self):
        data = Finding(id="a", title="A", message="m", severity=Severity.INFO, status=Status.PASS).to_dict()
        assert data == {"id": "a", "title": "A", "message": "m", "severity": "info", "status": "pass"}

    def test_audit_result_keys(self):
        result = AuditResult(
            target_dir="/tmp/project",
            categories=[Category(id="a", title="A", score=50, max_points=4, earned_points=2)],
            overall_score=50,
        )
        data = json.loads(json.dumps(result.to_dict()))
        assert set(data) == {"targetDir", "timestamp", "categories", "overallScore"}
        assert data["categories"][0]["_maxPoints"] == 4
        assert data["categories"][0]["earnedPoints"] == 2

    def test_get_failed_by_severity(self):
        high = Finding(id="h", title="H", message="", severity=Severity.HIGH, status=Status.FAIL)
        low = Finding(id="l", title="L", message="", severity=Severity.LOW, status=Status.FAIL)
        ok = Finding(id="o", title="O", message="", severity=Severity.HIGH, status=Status.PASS)
        result = AuditResult("/x", [Category(id="c", title="C", findings=[high, low, ok])], 0)
        assert result.get_failed(Severity.HIGH) == [high]
        assert result.get_failed() == [high, low]
