"""
Tests for the command line interface.
"""

import json

from typer.testing import CliRunner

from pwaudit.main import app
from pwaudit.reports.generator import HTML_REPORT, JSON_REPORT

runner = CliRunner()


class TestCli:

    def test_audit_writes_reports(self, sample_project, tmp_path):
        out = tmp_path / "report"
        result = runner.invoke(app, [str(sample_project), "--out", str(out)])

        assert result.exit_code == 0, result.output
        assert "Overall score" in result.output
        data = json.loads((out / JSON_REPORT).read_text(encoding="utf-8"))
        assert len(data["categories"]) == 14
        assert (out / HTML_REPORT).exists()

    def test_json_only(self, empty_project, tmp_path):
        out = tmp_path / "report"
        result = runner.invoke(app, [str(empty_project), "-o", str(out), "--json-only"])

        assert result.exit_code == 0, result.output
        assert (out / JSON_REPORT).exists()
        assert not (out / HTML_REPORT).exists()

    def test_out_dir_from_environment(self, empty_project, tmp_path, monkeypatch):
        out = tmp_path / "from-env"
        monkeypatch.setenv("PWAUDIT_OUT_DIR", str(out))
        result = runner.invoke(app, [str(empty_project), "--json-only"])

        assert result.exit_code == 0, result.output
        assert (out / JSON_REPORT).exists()

    def test_missing_target_exits_with_error(self, tmp_path):
        out = tmp_path / "report"
        result = runner.invoke(app, [str(tmp_path / "missing"), "-o", str(out)])

        assert result.exit_code == 1
        assert "Target directory not found" in result.output
        assert not out.exists()
