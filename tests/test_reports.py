"""
Tests for report generation.
"""

import io
import json
import re

from rich.console import Console

from pwaudit.core.models import AuditResult, Category, Finding, Severity, Status
from pwaudit.reports.generator import HTML_REPORT, JSON_REPORT, ReportGenerator, embed_json


def make_result() -> AuditResult:
    findings = [
        Finding(id="x", title="Avoid </script> in titles", message="<b>bold</b>",
                severity=Severity.CRITICAL, status=Status.FAIL),
        Finding(id="y", title="Readable [markup] title", message="", severity=Severity.HIGH,
                status=Status.FAIL, artifacts=["tests/a.spec.ts"]),
        Finding(id="z", title="Fine", message="", severity=Severity.LOW, status=Status.PASS),
    ]
    category = Category(id="demo", title="Demo", findings=findings, score=9, max_points=22, earned_points=2)
    return AuditResult(target_dir="/tmp/project", categories=[category], overall_score=9)


class TestJsonReport:

    def test_written_pretty_printed(self, tmp_path):
        path = ReportGenerator(tmp_path / "out").write_json(make_result())

        assert path.endswith(JSON_REPORT)
        text = open(path, encoding="utf-8").read()
        assert text.startswith("{\n  ")
        data = json.loads(text)
        assert data["overallScore"] == 9
        assert data["categories"][0]["findings"][1]["artifacts"] == ["tests/a.spec.ts"]


class TestHtmlReport:

    def test_embedded_json_escapes_angle_brackets(self):
        embedded = embed_json(make_result())
        assert "<" not in embedded
        assert "\\u003c/script>" in embedded
        assert json.loads(embedded)["categories"][0]["findings"][0]["title"] == "Avoid </script> in titles"

    def test_self_contained_page(self, tmp_path):
        path = ReportGenerator(tmp_path).write_html(make_result())

        assert path.endswith(HTML_REPORT)
        page = open(path, encoding="utf-8").read()
        match = re.search(r'<script id="audit-data" type="application/json">(.*?)</script>', page, re.S)
        assert match
        assert json.loads(match.group(1))["targetDir"] == "/tmp/project"
        assert "$data" not in page and "$title" not in page
        assert "<title>Playwright Audit Report</title>" in page


class TestConsoleSummary:

    def test_summary_lists_worst_findings(self):
        buffer = io.StringIO()
        console = Console(file=buffer, width=120, color_system=None)
        ReportGenerator(console=console).print_summary(make_result())

        output = buffer.getvalue()
        assert "Demo" in output
        assert "Overall score" in output
        assert "[critical] Avoid </script> in titles" in output
        assert "Readable [markup] title" in output
        assert "Fine" not in output
