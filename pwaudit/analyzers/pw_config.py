"""
Playwright config: static inspection of playwright.config.* for trace,
screenshot, retries, reporters and other run defaults.

The config is never executed; every check is a regex over its source.
"""

import re
from pathlib import Path
from typing import List, NamedTuple

from pwaudit.analyzers.helpers import (
    add_finding,
    create_category,
    finalize,
    find_config,
    has_match,
    read_text,
)
from pwaudit.core.models import Category

_ENV_TERNARY = r"process\.env(?:\.[A-Za-z_]\w*|\[['\"]\w+['\"]\])\s*\?\s*\d+\s*:\s*\d+"

RE = {
    "use_block": re.compile(r"\buse\s*:\s*\{", re.I),
    "trace_good": re.compile(r"\btrace\s*:\s*[\"']?(?:retain-on-failure|on-first-retry|on)[\"']?", re.I),
    "trace_any": re.compile(r"\btrace\s*:", re.I),
    "screenshot_good": re.compile(r"\bscreenshot\s*:\s*[\"']?(?:only-on-failure|on)[\"']?", re.I),
    "screenshot_any": re.compile(r"\bscreenshot\s*:", re.I),
    "retries_good": re.compile(rf"\bretries\s*:\s*(?!0\b)(\d+|{_ENV_TERNARY})", re.I),
    "retries_any": re.compile(r"\bretries\s*:", re.I),
    "workers_good": re.compile(rf"\bworkers\s*:\s*(?!0\b)(\d+|{_ENV_TERNARY})", re.I),
    "workers_any": re.compile(r"\bworkers\s*:", re.I),
    "headless_true": re.compile(r"\bheadless\s*:\s*true\b", re.I),
    "projects": re.compile(r"\bprojects\s*:\s*\[", re.I),
    "reporter_html": re.compile(
        r"\breporters?\s*:\s*(?:\[[\s\S]*?(?:\"html\"|'html')|(?:\"html\"|'html'))", re.I
    ),
    "reporter_junit": re.compile(
        r"\breporters?\s*:\s*(?:\[[\s\S]*?\b(?:junit|junit-reporter)|[\"']?(?:junit|junit-reporter))", re.I
    ),
    "base_url": re.compile(r"\bbaseURL\s*:", re.I),
    "video_any": re.compile(r"\bvideo\s*:\s*[\"']?(on|off|on-first-retry|retain-on-failure)[\"']?", re.I),
    "video_off": re.compile(r"\bvideo\s*:\s*[\"']?off[\"']?", re.I),
    "expect_timeout": re.compile(r"\bexpect\s*:\s*\{\s*[^}]*\btimeout\s*:\s*(\d+)[^}]*\}", re.I),
    "top_timeout": re.compile(r"\b[^.\n]*\btimeout\s*:\s*(\d+)\b", re.I),
    "output_dir": re.compile(r"\boutputDir\s*:", re.I),
    "web_server": re.compile(r"\bwebServer\s*:\s*\{", re.I),
    "web_server_reuse": re.compile(r"\breuseExistingServer\s*:\s*true\b", re.I),
}

# Верхняя граница per-test timeout
MAX_TEST_TIMEOUT_MS = 60_000


class Rule(NamedTuple):
    id: str
    title: str
    severity: str
    passed: bool
    msg_pass: str
    msg_fail: str
    suggestion: str


def build_rules(text: str) -> List[Rule]:
    found = {name: has_match(pattern, text) for name, pattern in RE.items()}

    top_timeout_bad = False
    match = RE["top_timeout"].search(text)
    if match:
        top_timeout_bad = int(match.group(1)) > MAX_TEST_TIMEOUT_MS

    video_ok = found["video_any"] and not found["video_off"]
    web_server = found["web_server"]
    reuse = found["web_server_reuse"]

    return [
        Rule("use-block", "use block present", "info", found["use_block"],
             "`use: { ... }` block present", "`use` block is missing",
             "Add a `use: { ... }` section for trace/screenshot/video/baseURL defaults"),
        Rule("trace", "Tracing enabled/configured",
             "low" if found["trace_good"] else "medium", found["trace_good"],
             "Trace set to on/retain-on-failure/on-first-retry",
             "Trace configured, but not set to on/retain-on-failure/on-first-retry"
             if found["trace_any"] else "Tracing disabled/not configured",
             'Set `use: { trace: "retain-on-failure" }` for effective debugging'),
        Rule("screenshot", "Screenshot enabled/configured",
             "low" if found["screenshot_good"] else "high", found["screenshot_good"],
             "Screenshot set to only-on-failure/on",
             "Screenshot configured, but not set to only-on-failure/on"
             if found["screenshot_any"] else "Screenshot disabled/not configured",
             'Set `use: { screenshot: "only-on-failure" }`'),
        Rule("retries", "Retries >= 1", "low", found["retries_good"],
             "Retries configured (>= 1 or CI ternary)",
             "Retries configured but possibly invalid (0 or malformed)"
             if found["retries_any"] else "No retries configured",
             "Set `retries: 1` (or a CI ternary like `process.env.CI ? 2 : 1`)"),
        Rule("workers", "Workers configured", "info", found["workers_good"],
             "Workers set (>= 1 or CI ternary)",
             "Workers configured but value is 0"
             if found["workers_any"] else "Workers not explicitly configured",
             "Set `workers: process.env.CI ? 1 : 4` (adjust for your infra)"),
        Rule("headless", "Headless default true", "low", found["headless_true"],
             "Headless is true by default", "Headless not set to true by default",
             "Use `use: { headless: true }` to avoid GUI overhead in CI"),
        Rule("projects", "Parallel projects configured", "info", found["projects"],
             "`projects: [...]` present", "Projects not configured",
             "Use projects for browser matrix (Chromium/Firefox/WebKit) or device profiles"),
        Rule("reporter-html", "HTML reporter enabled", "low", found["reporter_html"],
             "HTML reporter found", "HTML reporter missing",
             'Add `reporter: [["list"], ["html", { open: "never" }]]` to persist interactive reports'),
        Rule("reporter-junit", "JUnit reporter (optional)", "info", found["reporter_junit"],
             "JUnit reporter found (for CI annotations)", "JUnit reporter not found",
             'Consider adding `["junit", { outputFile: "test-results/junit.xml" }]` for CI insights'),
        Rule("baseurl", "Base URL configured", "info", found["base_url"],
             "`use.baseURL` present", "Base URL not configured",
             'Set `use: { baseURL: process.env.BASE_URL || "http://localhost:3000" }`'),
        Rule("video", "Video capture set", "info" if video_ok else "low", video_ok,
             "Video capture enabled (not off)",
             'Video explicitly disabled (`video: "off"`)'
             if found["video_any"] else "Video capture not configured",
             'Use `use: { video: "on-first-retry" }` to capture flaky tests'),
        Rule("expect-timeout", "expect.timeout configured", "info", found["expect_timeout"],
             "`expect: { timeout: ... }` present", "expect.timeout not configured",
             "Set `expect: { timeout: 10000 }` to control default assertion timeout per expect()"),
        Rule("timeout-sane", "Per-test timeout sane (≤ 60s)",
             "low" if top_timeout_bad else "info", not top_timeout_bad,
             "Per-test timeout ≤ 60s (or unspecified)",
             "Per-test timeout appears > 60s; consider reducing",
             "Prefer explicit waits/assertions and keep per-test timeout ≤ 60s; rely on expect timeouts"),
        Rule("outputdir", "outputDir configured", "info", found["output_dir"],
             "`outputDir` present (screenshots/traces)", "No explicit outputDir configured",
             'Set `outputDir: "test-results/"` to keep results organized for CI artifact upload'),
        Rule("webserver", "webServer with reuseExistingServer",
             "low" if web_server and not reuse else "info", web_server and reuse,
             "`webServer` present with `reuseExistingServer: true`",
             "`webServer` present but `reuseExistingServer` not set to true"
             if web_server else "`webServer` not configured",
             "Configure `webServer` to start your app for E2E and set "
             "`reuseExistingServer: true` to speed up local runs"),
    ]


async def analyze_config(target_dir: str) -> Category:
    cat = create_category("config", "Config")
    cfg_path = await find_config(target_dir)

    add_finding(
        cat,
        finding_id="cfg-present",
        title="Playwright config present",
        ok=cfg_path is not None,
        severity="low" if cfg_path else "critical",
        message=f"Found {Path(cfg_path).name}" if cfg_path else "No playwright.config.* found",
        file=cfg_path,
    )

    text = await read_text(cfg_path) if cfg_path else ""
    for rule in build_rules(text):
        add_finding(
            cat,
            finding_id=f"cfg-{rule.id}",
            title=rule.title,
            ok=rule.passed,
            severity=rule.severity,
            message=rule.msg_pass if rule.passed else rule.msg_fail,
            suggestion=rule.suggestion,
            file=cfg_path,
        )

    return finalize(cat)
