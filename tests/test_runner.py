"""
Tests for analyzer resolution and isolation.

Plugin analyzers are written into a temporary directory that is put in
front of the bundled analyzers.
"""

import pytest

from conftest import write
from pwaudit.core.exceptions import AnalyzerLoadError
from pwaudit.core.models import Severity, Status
from pwaudit.core.registry import AnalyzerEntry
from pwaudit.core.runner import NO_RESULT_MESSAGE, AnalyzerRunner


def entry(stem: str, function: str = "analyze", entry_id: str = "custom") -> AnalyzerEntry:
    return AnalyzerEntry(id=entry_id, title="Custom Checks", analyzer_name=stem, function_name=function)


class TestModuleResolution:

    @pytest.mark.asyncio
    async def test_missing_module_becomes_load_issue(self, empty_project, plugin_dir):
        runner = AnalyzerRunner([str(plugin_dir)])
        category, issue = await runner.run(entry("pwaudit_missing_xyz", entry_id="ghost"), str(empty_project))

        assert category is None
        assert issue.id == "load-ghost"
        assert issue.title == "Analyzer not loaded: Custom Checks"
        assert issue.severity is Severity.HIGH
        assert issue.status is Status.FAIL
        assert issue.message.startswith("Tried:")
        assert str(plugin_dir / "pwaudit_missing_xyz.py") in issue.message
        assert "pwaudit.analyzers.pwaudit_missing_xyz" in issue.message

    @pytest.mark.asyncio
    async def test_load_error_lists_every_candidate(self, plugin_dir):
        runner = AnalyzerRunner([str(plugin_dir)])
        with pytest.raises(AnalyzerLoadError) as exc_info:
            await runner.load_module("pwaudit_missing_xyz")

        tried = exc_info.value.tried
        assert tried[:3] == [str(p) for p in runner.candidates("pwaudit_missing_xyz")[:3]]
        assert tried[-2:] == ["pwaudit.analyzers.pwaudit_missing_xyz", "pwaudit_missing_xyz"]

    @pytest.mark.asyncio
    async def test_plugin_directory_takes_precedence(self, empty_project, plugin_dir):
        write(plugin_dir, "locators.py", """
            def analyze_locators(target_dir):
                return {"findings": [{"title": "custom locator rule", "status": "pass"}]}
        """)
        runner = AnalyzerRunner([str(plugin_dir)])
        category, issue = await runner.run(
            AnalyzerEntry("locators", "Locator Strategy", "locators", "analyze_locators"),
            str(empty_project),
        )

        assert issue is None
        assert [f.title for f in category.findings] == ["custom locator rule"]
        assert category.id == "locators"

    @pytest.mark.asyncio
    async def test_broken_candidate_falls_through_to_next(self, empty_project, plugin_dir):
        write(plugin_dir, "locators.py", "raise RuntimeError('broken plugin')\n")
        runner = AnalyzerRunner([str(plugin_dir)])
        category, issue = await runner.run(
            AnalyzerEntry("locators", "Locator Strategy", "locators", "analyze_locators"),
            str(empty_project),
        )

        assert issue is None
        assert category.title == "Locator Strategy"
        assert category.findings

    @pytest.mark.asyncio
    async def test_broken_only_candidate_reports_error(self, empty_project, plugin_dir):
        write(plugin_dir, "pwaudit_broken_xyz.py", "import this_module_does_not_exist_xyz\n")
        runner = AnalyzerRunner([str(plugin_dir)])
        _, issue = await runner.run(entry("pwaudit_broken_xyz"), str(empty_project))

        assert issue.id == "load-custom"
        assert "Errors:" in issue.message
        assert "ModuleNotFoundError" in issue.message

    @pytest.mark.asyncio
    async def test_package_plugin(self, empty_project, plugin_dir):
        write(plugin_dir, "pwaudit_pkg_xyz/__init__.py", """
            from .checks import analyze
        """)
        write(plugin_dir, "pwaudit_pkg_xyz/checks.py", """
            def analyze(target_dir):
                return {"id": "pkg", "findings": [{"title": "from package", "status": "pass"}]}
        """)
        runner = AnalyzerRunner([str(plugin_dir)])
        category, issue = await runner.run(entry("pwaudit_pkg_xyz"), str(empty_project))

        assert issue is None
        assert category.id == "pkg"

    @pytest.mark.asyncio
    async def test_bundled_analyzer_is_the_imported_module(self):
        import pwaudit.analyzers.locators as locators

        runner = AnalyzerRunner()
        assert await runner.load_module("locators") is locators
        assert await runner.load_module("locators") is locators

    @pytest.mark.asyncio
    async def test_plugin_module_executed_once(self, plugin_dir):
        write(plugin_dir, "pwaudit_once_xyz.py", """
            LOADS = []
            LOADS.append(1)

            def analyze(target_dir):
                return {"findings": []}
        """)
        runner = AnalyzerRunner([str(plugin_dir)])
        first = await runner.load_module("pwaudit_once_xyz")
        second = await AnalyzerRunner([str(plugin_dir)]).load_module("pwaudit_once_xyz")

        assert first is second
        assert first.LOADS == [1]


class TestFunctionResolution:

    @pytest.mark.asyncio
    async def test_no_callable_is_reported(self, empty_project, plugin_dir):
        write(plugin_dir, "pwaudit_nofn_xyz.py", "VALUE = 1\n")
        runner = AnalyzerRunner([str(plugin_dir)])
        category, issue = await runner.run(entry("pwaudit_nofn_xyz"), str(empty_project))

        assert category is None
        assert issue.id == "no-fn-custom"
        assert issue.title == "Analyzer function missing: Custom Checks"
        assert issue.severity is Severity.HIGH

    @pytest.mark.asyncio
    async def test_first_public_function_is_used(self, empty_project, plugin_dir):
        write(plugin_dir, "pwaudit_first_xyz.py", """
            from os.path import join

            def _private(target_dir):
                raise AssertionError("private helper must not run")

            def check_everything(target_dir):
                return {"findings": [{"title": "fallback", "status": "pass"}]}
        """)
        runner = AnalyzerRunner([str(plugin_dir)])
        category, issue = await runner.run(entry("pwaudit_first_xyz"), str(empty_project))

        assert issue is None
        assert category.findings[0].title == "fallback"

    @pytest.mark.asyncio
    async def test_dunder_all_is_respected(self, empty_project, plugin_dir):
        write(plugin_dir, "pwaudit_all_xyz.py", """
            __all__ = ["second"]

            def first(target_dir):
                return {"findings": [{"title": "first"}]}

            def second(target_dir):
                return {"findings": [{"title": "second"}]}
        """)
        runner = AnalyzerRunner([str(plugin_dir)])
        category, _ = await runner.run(entry("pwaudit_all_xyz"), str(empty_project))

        assert category.findings[0].title == "second"


class TestExecutionIsolation:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body, message", [
        ("def analyze(target_dir):\n    raise ValueError('sync boom')\n", "sync boom"),
        ("async def analyze(target_dir):\n    raise ValueError('async boom')\n", "async boom"),
        ("def analyze(target_dir):\n    raise KeyError\n", "KeyError"),
        ("def analyze(target_dir):\n    return None\n", NO_RESULT_MESSAGE),
        ("def analyze(target_dir):\n    return 42\n", NO_RESULT_MESSAGE),
    ])
    async def test_failures_become_error_category(self, empty_project, plugin_dir, body, message):
        write(plugin_dir, "pwaudit_fail_xyz.py", body)
        runner = AnalyzerRunner([str(plugin_dir)])
        category, issue = await runner.run(entry("pwaudit_fail_xyz", entry_id="boom"), str(empty_project))

        assert issue is None
        assert category.id == "boom"
        assert category.title == "Custom Checks"
        [finding] = category.findings
        assert finding.id == "analyzer-error"
        assert finding.message == message
        assert finding.severity is Severity.HIGH
        assert finding.status is Status.FAIL

    @pytest.mark.asyncio
    async def test_sync_function_returning_awaitable(self, empty_project, plugin_dir):
        write(plugin_dir, "pwaudit_awaitable_xyz.py", """
            async def _build(target_dir):
                return {"findings": [{"title": "late", "status": "pass", "severity": "high"}]}

            def analyze(target_dir):
                return _build(target_dir)
        """)
        runner = AnalyzerRunner([str(plugin_dir)])
        category, _ = await runner.run(entry("pwaudit_awaitable_xyz"), str(empty_project))

        assert category.findings[0].severity is Severity.HIGH
        assert category.findings[0].passed
