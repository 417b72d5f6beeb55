"""
Tests for analyzer helpers and the per-run file cache.
"""

import pytest

from conftest import write
from pwaudit.analyzers.helpers import (
    add_finding,
    collect_ci_configs,
    create_category,
    dep_map,
    expand_braces,
    find_files,
    looks_floating,
    make_id,
    strip_comments,
    walk_files,
)
from pwaudit.core.fs_cache import FileCache, get_cache, use_cache
from pwaudit.core.models import Severity, Status


class TestPureHelpers:

    def test_expand_braces(self):
        assert expand_braces("**/*.{ts,js}") == ["**/*.ts", "**/*.js"]
        assert expand_braces("{a,b}/{c,d}") == ["a/c", "a/d", "b/c", "b/d"]
        assert expand_braces("plain") == ["plain"]

    def test_make_id(self):
        assert make_id("data", "Env files present") == "data-env-files-present"
        assert make_id("network", "Mocks via route()") == "network-mocks-via-route-"

    @pytest.mark.parametrize("version, floating", [
        ("latest", True), ("*", True), ("1.2", True), ("^1.2.3", False), ("1.2.3", False), ("", False),
    ])
    def test_looks_floating(self, version, floating):
        assert looks_floating(version) is floating

    def test_dep_map_merges_sections(self):
        pkg = {"dependencies": {"a": "1"}, "devDependencies": {"b": "2"}, "peerDependencies": {"c": "3"}}
        assert dep_map(pkg) == {"a": "1", "b": "2"}
        assert dep_map(None) == {}

    def test_strip_comments_keeps_urls(self):
        text = "const a = 1; // note\n/* block */const url = 'https://x.dev';"
        stripped = strip_comments(text)
        assert "note" not in stripped and "block" not in stripped
        assert "https://x.dev" in stripped

    def test_add_finding_defaults(self):
        cat = create_category("demo", "Demo")
        finding = add_finding(cat, "Thing configured", True, "medium", artifacts=[None, "a.ts", ""])

        assert finding.id == "demo-thing-configured"
        assert finding.message == "Configured"
        assert finding.severity is Severity.MEDIUM
        assert finding.status is Status.PASS
        assert finding.artifacts == ["a.ts"]
        assert cat.findings == [finding]


class TestFileWalking:

    @pytest.mark.asyncio
    async def test_walk_skips_ignored_dirs_and_respects_limit(self, tmp_path, file_cache):
        for name in ("a.ts", "b.js", "c.md", "node_modules/x.ts", "dist/y.ts", "nested/z.tsx"):
            write(tmp_path, name, "x")

        files = await walk_files(tmp_path)
        names = sorted(p.rsplit("/", 1)[-1] for p in files)
        assert names == ["a.ts", "b.js", "z.tsx"]
        assert len(await walk_files(tmp_path, limit=2)) == 2
        assert await walk_files(tmp_path / "missing") == []

    @pytest.mark.asyncio
    async def test_find_files_globs_with_braces(self, tmp_path, file_cache):
        write(tmp_path, "tests/a.spec.ts", "x")
        write(tmp_path, "tests/deep/b.spec.js", "x")
        write(tmp_path, "node_modules/lib/c.spec.ts", "x")
        (tmp_path / "tests" / "dir.spec.ts").mkdir()

        files = await find_files(tmp_path, ["**/*.spec.{ts,js}"])
        assert sorted(p.rsplit("/", 1)[-1] for p in files) == ["a.spec.ts", "b.spec.js"]

    @pytest.mark.asyncio
    async def test_collect_ci_configs(self, tmp_path, file_cache):
        write(tmp_path, ".github/workflows/ci.yml", "on: push\n")
        write(tmp_path, ".github/workflows/notes.txt", "ignored")
        write(tmp_path, ".gitlab-ci.yml", "stages: [test]\n")

        scan = await collect_ci_configs(tmp_path)
        assert scan.has_github and scan.has_gitlab
        assert [p.rsplit("/", 1)[-1] for p in scan.files] == ["ci.yml", ".gitlab-ci.yml"]
        assert "stages" in scan.all_text


class TestFileCache:

    @pytest.mark.asyncio
    async def test_reads_are_cached_for_the_run(self, tmp_path):
        path = write(tmp_path, "package.json", '{"name": "a"}')
        cache = FileCache()

        assert await cache.read_json(path) == {"name": "a"}
        path.write_text('{"name": "b"}', encoding="utf-8")
        assert await cache.read_json(path) == {"name": "a"}

        cache.clear()
        assert await cache.read_json(path) == {"name": "b"}

    @pytest.mark.asyncio
    async def test_missing_and_invalid_files(self, tmp_path):
        cache = FileCache()
        broken = write(tmp_path, "broken.json", "{nope")

        assert await cache.read_text(tmp_path / "missing.txt") == ""
        assert await cache.read_json(tmp_path / "missing.json") is None
        assert await cache.read_json(broken) is None
        assert await cache.exists(broken)
        assert not await cache.exists(tmp_path / "missing.txt")

    def test_use_cache_restores_previous(self):
        outer = FileCache()
        with use_cache(outer):
            inner = FileCache()
            with use_cache(inner):
                assert get_cache() is inner
            assert get_cache() is outer
