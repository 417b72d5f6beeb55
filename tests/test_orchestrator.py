"""
Integration tests for the audit orchestrator.
"""

import json

import pytest

from conftest import write
from pwaudit.config import AuditConfig
from pwaudit.core.exceptions import TargetDirectoryError
from pwaudit.core.registry import ANALYZERS, AnalyzerEntry
from pwaudit.orchestrator import LOAD_ISSUES_ID, LOAD_ISSUES_TITLE, AuditOrchestrator, run_audit
from pwaudit.reports.generator import HTML_REPORT, JSON_REPORT


@pytest.fixture
def plugins(plugin_dir):
    write(plugin_dir, "pwaudit_good_xyz.py", """
        def analyze(target_dir):
            return {
                "findings": [
                    {"title": "critical fail", "severity": "critical", "status": "fail"},
                    {"title": "info pass", "severity": "info", "status": "pass"},
                ]
            }
    """)
    write(plugin_dir, "pwaudit_crash_xyz.py", """
        async def analyze(target_dir):
            raise RuntimeError("analyzer exploded")
    """)
    write(plugin_dir, "pwaudit_sync_crash_xyz.py", """
        def analyze(target_dir):
            raise ValueError("sync analyzer exploded")
    """)
    return plugin_dir


class TestAuditRun:

    @pytest.mark.asyncio
    async def test_missing_target_raises(self, tmp_path):
        with pytest.raises(TargetDirectoryError) as exc_info:
            await run_audit(str(tmp_path / "nope"))
        assert "Target directory not found" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_file_target_raises(self, tmp_path):
        target = write(tmp_path, "file.txt", "x")
        with pytest.raises(TargetDirectoryError):
            await run_audit(str(target))

    @pytest.mark.asyncio
    async def test_full_registry_on_sample_project(self, sample_project):
        result = await run_audit(str(sample_project))

        assert [c.id for c in result.categories] == [e.id for e in ANALYZERS]
        assert result.target_dir == str(sample_project.resolve())
        for category in result.categories:
            assert category.findings, category.id
            assert 0 <= category.score <= 100
            assert category.earned_points <= category.max_points
            assert all(f.id != "analyzer-error" for f in category.findings), category.id
        assert 0 <= result.overall_score <= 100

    @pytest.mark.asyncio
    async def test_empty_project_still_produces_every_category(self, empty_project):
        result = await run_audit(str(empty_project))
        assert len(result.categories) == len(ANALYZERS)

        structure = result.categories[0]
        missing = {f.title for f in structure.findings if not f.passed}
        assert "Root package.json present" in missing
        assert "Playwright config present" in missing

    @pytest.mark.asyncio
    async def test_failures_are_isolated(self, empty_project, plugins):
        config = AuditConfig(
            analyzer_paths=[str(plugins)],
            registry=[
                AnalyzerEntry("sync-crash", "Sync crashing", "pwaudit_sync_crash_xyz", "analyze"),
                AnalyzerEntry("crash", "Crashing", "pwaudit_crash_xyz", "analyze"),
                AnalyzerEntry("good", "Good", "pwaudit_good_xyz", "analyze"),
                AnalyzerEntry("ghost", "Ghost", "pwaudit_ghost_xyz", "analyze"),
            ],
        )
        result = await AuditOrchestrator(config).run(str(empty_project))

        assert [c.id for c in result.categories] == [LOAD_ISSUES_ID, "sync-crash", "crash", "good"]

        load = result.categories[0]
        assert load.title == LOAD_ISSUES_TITLE
        assert [f.id for f in load.findings] == ["load-ghost"]

        for crashed, message in zip(result.categories[1:3], ["sync analyzer exploded", "analyzer exploded"]):
            assert [f.id for f in crashed.findings] == ["analyzer-error"]
            assert crashed.findings[0].message == message
            assert crashed.score == 0

        good = result.categories[3]
        assert (good.score, good.max_points, good.earned_points) == (8, 13, 1)

    @pytest.mark.asyncio
    async def test_no_load_category_when_everything_loads(self, empty_project, plugins):
        config = AuditConfig(
            analyzer_paths=[str(plugins)],
            registry=[AnalyzerEntry("good", "Good", "pwaudit_good_xyz", "analyze")],
        )
        result = await run_audit(str(empty_project), config)

        assert [c.id for c in result.categories] == ["good"]
        assert result.overall_score == 8

    @pytest.mark.asyncio
    async def test_empty_registry_scores_100(self, empty_project):
        result = await run_audit(str(empty_project), AuditConfig(registry=[]))
        assert result.categories == []
        assert result.overall_score == 100


class TestReportEmission:

    @pytest.mark.asyncio
    async def test_library_default_writes_nothing(self, empty_project, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        await run_audit(str(empty_project), AuditConfig(registry=[]))
        assert not (tmp_path / "audit-report").exists()

    @pytest.mark.asyncio
    async def test_writes_json_and_html(self, empty_project, plugins, tmp_path):
        out = tmp_path / "reports"
        config = AuditConfig(
            out_dir=out,
            write_json=True,
            write_html=True,
            analyzer_paths=[str(plugins)],
            registry=[AnalyzerEntry("good", "Good", "pwaudit_good_xyz", "analyze")],
        )
        await run_audit(str(empty_project), config)

        data = json.loads((out / JSON_REPORT).read_text(encoding="utf-8"))
        assert data["overallScore"] == 8
        assert data["categories"][0]["_maxPoints"] == 13
        assert (out / HTML_REPORT).exists()

    @pytest.mark.asyncio
    async def test_json_only(self, empty_project, tmp_path):
        out = tmp_path / "reports"
        config = AuditConfig(out_dir=out, write_json=True, registry=[])
        await run_audit(str(empty_project), config)

        assert (out / JSON_REPORT).exists()
        assert not (out / HTML_REPORT).exists()
