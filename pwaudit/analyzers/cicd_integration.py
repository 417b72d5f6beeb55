"""
CI/CD hygiene for GitHub Actions and GitLab CI pipelines.
"""

import re
from typing import Optional

from pwaudit.analyzers.helpers import (
    CiScan,
    add_finding,
    collect_ci_configs,
    create_category,
    finalize,
    first_file_matching,
)
from pwaudit.core.models import Category


def _find(scan: CiScan, pattern: str) -> Optional[str]:
    return first_file_matching(scan, re.compile(pattern, re.I))


def _first(*paths: Optional[str]) -> Optional[str]:
    return next((p for p in paths if p), None)


async def analyze_cicd_integration(target_dir: str) -> Category:
    cat = create_category("ci", "CI/CD Hygiene")
    scan = await collect_ci_configs(target_dir)
    default = scan.files[0] if scan.files else None

    install = _find(scan, r"\bnpx\s+playwright\s+install(?:\s+--with-deps|\s+--all)?\b")
    setup_node = _find(scan, r"\buses\s*:\s*actions/setup-node@")
    node_cache = _find(scan, r"\b(cache\s*:\s*['\"](npm|yarn|pnpm)['\"]|actions/cache@)")
    gl_cache = _find(scan, r"\bcache\s*:\s*[\s\S]*?\bkey\s*:")
    upload = _find(scan, r"\b(upload-artifact|store_artifacts|artifacts\s*:)")
    retention = _find(scan, r"\b(retention-days\s*:\s*\d+|artifacts\s*:[\s\S]*?\bexpire_in\s*:)")
    matrix = _find(scan, r"\bstrategy\s*:\s*[\s\S]*?\bmatrix\s*:")
    gl_parallel = _find(scan, r"\bparallel\s*:\s*\d+")
    shard_cmd = _find(scan, r"\bnpx\s+playwright\s+test\b[^\n]*--shard\s*=\s*\S+")
    shard_yaml = _find(scan, r"\bshard\s*:\s*[\"']?\d+/\d+[\"']?")
    retries_cli = _find(scan, r"(--retries[\s=]+\d+)\b")
    retries_gl = _find(scan, r"\bretry\s*:\s*\d+\b")
    gh_pr = _find(scan, r"\bon\s*:\s*[\s\S]*\bpull_request\b")
    gl_mr = _find(scan, r"\bonly\s*:\s*\[?\s*merge_requests\s*\]?|rules\s*:\s*[\s\S]*\$CI_MERGE_REQUEST_IID")
    coverage = _find(scan, r"\b(codecov/codecov-action@|bash\s*<\(\s*curl.*codecov\.io|lcov|coverage/lcov\.info)\b")
    concurrency = _find(scan, r"\bconcurrency\s*:\s*[\s\S]*\bcancel-in-progress\s*:\s*(true|yes)")
    xvfb = _find(scan, r"\bxvfb-run\b|xvfb\s+start|uses\s*:\s*GabrielBB/xvfb-action@")
    html_report = _find(
        scan, r"(playwright-report|html-report)[/'\"]?\b.*\b(upload-artifact|store_artifacts|artifacts\s*:)"
    )
    traces = _find(
        scan, r"(trace|traces|test-results)[/'\"]?\b.*\b(upload-artifact|store_artifacts|artifacts\s*:)"
    )

    cache_ok = bool(node_cache or gl_cache)

    checks = [
        ("pipeline-ready", "Pipeline ready", scan.has_github or scan.has_gitlab, "high",
         "GitHub Actions or GitLab CI detected", "No CI config found",
         "Add GitHub Actions under .github/workflows/ or a .gitlab-ci.yml file", default),
        ("playwright-install", "Playwright install in CI", bool(install), "high",
         "`npx playwright install` present", "Playwright browsers/deps not installed in CI",
         "Add a step: `npx playwright install --with-deps` (Linux) before running tests",
         _first(install, default)),
        ("node-setup", "Node setup (version & cache)", bool(setup_node) and cache_ok, "low",
         "actions/setup-node with dependency cache (or GitLab cache) detected",
         "Node setup and/or dependency cache not configured",
         "Use actions/setup-node with `cache: npm|yarn|pnpm` or GitLab `cache:` with a key to speed up installs",
         _first(setup_node, node_cache, gl_cache, default)),
        ("cache", "Dependency cache enabled", cache_ok, "low",
         "Cache configured", "No cache detected",
         "Enable actions/cache (GH) or the `cache:` key (GL) to cache node_modules or package managers",
         _first(node_cache, gl_cache, default)),
        ("artifacts", "Test report storage/archiving", bool(upload), "low",
         "Artifacts upload configured", "Artifacts upload missing",
         "Upload HTML report, traces, screenshots as CI artifacts for debugging",
         _first(upload, default)),
        ("artifact-retention", "Artifacts retention set", bool(retention), "info",
         "Artifacts retention configured", "No retention/expire policy found for artifacts",
         "Set `retention-days:` (GH) or `expire_in:` (GL) to control artifact lifecycle",
         _first(retention, default)),
        ("parallel", "Parallel/sharding configured", bool(matrix or gl_parallel or shard_cmd or shard_yaml), "info",
         "Parallelism (matrix/parallel) or sharding configured", "No parallelism/sharding found",
         "Use matrix/parallel (GH/GL) or `--shard=N/M` for faster CI runs",
         _first(matrix, gl_parallel, shard_cmd, shard_yaml, default)),
        ("retries", "Retries enabled in CI", bool(retries_cli or retries_gl), "low",
         "Retries configured for CI runs", "No retries found in CI job",
         "Pass `--retries 2` to `npx playwright test` or use `retry:` in GitLab",
         _first(retries_cli, retries_gl, default)),
        ("pr-mr", "PR/MR triggers", bool(gh_pr or gl_mr), "medium",
         "CI is triggered on PRs/MRs", "No PR/MR trigger found",
         "GitHub: add `on: pull_request`. GitLab: use `only: [merge_requests]` or rules.",
         _first(gh_pr, gl_mr, default)),
        ("coverage", "Coverage uploaded/published", bool(coverage), "info",
         "Coverage upload step found (Codecov/LCOV)", "No coverage publish step found",
         "Upload LCOV to Codecov or persist coverage artifacts for trend tracking",
         _first(coverage, default)),
        # На GitLab неприменимо
        ("concurrency", "Cancel in-progress runs (GH)", bool(concurrency) or not scan.has_github, "info",
         "Concurrency cancellation configured", "Consider cancelling in-progress runs on new commits",
         "Add `concurrency: { group: ${{ github.ref }}, cancel-in-progress: true }`",
         _first(concurrency, default)),
        # --with-deps обычно достаточно на Ubuntu
        ("xvfb", "Headless display (xvfb) / system deps", bool(xvfb or install), "low",
         "xvfb or system deps configured for browsers",
         "No xvfb/system deps step found (may be required on Linux runners)",
         "Use `npx playwright install --with-deps` and/or run tests under `xvfb-run` on Linux runners",
         _first(xvfb, install, default)),
        ("html-report", "HTML report persisted", bool(html_report), "low",
         "HTML report folder is uploaded", "HTML report not uploaded as artifact",
         "Upload `playwright-report` (or your HTML report path) as an artifact",
         _first(html_report, default)),
        ("traces", "Traces/screenshots persisted", bool(traces), "low",
         "Traces/screenshots folder is uploaded", "Traces/screenshots not uploaded as artifact",
         "Upload `test-results`, `traces`, or screenshots folder as an artifact",
         _first(traces, default)),
    ]

    for check_id, title, passed, severity, msg_pass, msg_fail, suggestion, file in checks:
        add_finding(
            cat,
            finding_id=f"cicd-{check_id}",
            title=title,
            ok=passed,
            severity=severity,
            message=msg_pass if passed else msg_fail,
            suggestion=suggestion,
            file=file,
        )

    return finalize(cat)
