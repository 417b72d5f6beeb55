"""
Flakiness risks: retry/timeout/artifact policy in the Playwright config and
sleep-style anti-patterns in a sample of test files.
"""

import re
from pathlib import Path
from typing import List, NamedTuple, Optional

from pwaudit.analyzers.helpers import (
    add_finding,
    create_category,
    exists,
    finalize,
    find_config,
    find_files,
    read_text,
)
from pwaudit.core.models import Category

TEST_GLOBS = [
    "**/*.spec.{ts,tsx,js,jsx}",
    "**/*.test.{ts,tsx,js,jsx}",
    "tests/**/*.{ts,tsx,js,jsx}",
    "e2e/**/*.{ts,tsx,js,jsx}",
    "specs/**/*.{ts,tsx,js,jsx}",
]
SAMPLE_SIZE = 50

WAIT_FOR_TIMEOUT = re.compile(r"\bwaitForTimeout\s*\(")
NETWORK_IDLE = re.compile(r"waitForLoadState\s*\(\s*['\"`]networkidle['\"`]\s*\)")
SERIAL_MODE = re.compile(r"describe\.configure\(\s*\{[^}]*mode\s*:\s*['\"`]serial['\"`]")


class Rule(NamedTuple):
    id: str
    title: str
    severity: str
    passed: bool
    msg_pass: str
    msg_fail: str
    suggestion: Optional[str]
    file: Optional[str]


def _number(pattern: str, text: str) -> Optional[int]:
    match = re.search(pattern, text, re.I)
    return int(match.group(1)) if match else None


def _string(pattern: str, text: str) -> Optional[str]:
    match = re.search(pattern, text, re.I)
    return match.group(1) if match else None


def _within(value: Optional[int], limit: int) -> bool:
    return value is None or value <= limit


def config_rules(cfg_text: str, cfg: Optional[str]) -> List[Rule]:
    retries_configured = bool(
        re.search(r"(?:^|[,{]\s*)[\"']?\s*retries\s*[\"']?\s*:\s*(\d+)", cfg_text, re.I | re.M)
        or re.search(r"retries\s*:\s*process\.env\.CI\s*\?\s*\d+\s*:\s*\d+", cfg_text, re.I)
    )
    retries = _number(r"retries\s*:\s*(\d{1,3})", cfg_text)
    test_timeout = _number(r"[^A-Za-z]timeout\s*:\s*(\d{2,7})", cfg_text)
    action_timeout = _number(r"actionTimeout\s*:\s*(\d{2,7})", cfg_text)
    navigation_timeout = _number(r"navigationTimeout\s*:\s*(\d{2,7})", cfg_text)
    expect_timeout = _number(r"expect\s*:\s*\{[^}]*timeout\s*:\s*(\d{2,7})", cfg_text)

    trace = _string(r"trace\s*:\s*['\"`]([^'\"`]+)['\"`]", cfg_text)
    screenshot = _string(r"screenshot\s*:\s*['\"`]([^'\"`]+)['\"`]", cfg_text)
    video = _string(r"video\s*:\s*['\"`]([^'\"`]+)['\"`]", cfg_text)

    forbid_only = bool(
        re.search(r"forbidOnly\s*:\s*(!!\s*)?(true|process\.env\.CI)", cfg_text, re.I)
        or re.search(r"process\.env\.CI\s*\?\s*[^:]*forbidOnly\s*:\s*true", cfg_text, re.I)
    )
    fully_parallel = re.search(r"fullyParallel\s*:\s*true", cfg_text, re.I) is not None
    workers = _number(r"workers\s*:\s*(\d{1,3})", cfg_text)

    return [
        Rule("retries", "Retries >= 1", "low",
             retries_configured and (retries is None or retries >= 1),
             "Retries configured", "No retries configured (or set to 0)",
             "Set retries: 1 (CI can be 2-3) to reduce flake impact.", cfg),
        Rule("forbid-only", "forbidOnly enabled (CI safety)", "medium", forbid_only,
             "forbidOnly is enabled", "forbidOnly not enabled",
             "Add `forbidOnly: !!process.env.CI` in Playwright config.", cfg),
        Rule("timeout-per-test", "Reasonable per-test timeout (≤60s)", "low",
             _within(test_timeout, 60_000),
             "Per-test timeout ≤ 60s (or default)", f"Per-test timeout too high ({test_timeout}ms)",
             "Keep per-test timeout ≤ 60s; use targeted waits for slow parts.", cfg),
        Rule("timeout-action", "Reasonable actionTimeout (≤30s)", "low",
             _within(action_timeout, 30_000),
             "actionTimeout ≤ 30s (or default)", f"actionTimeout too high ({action_timeout}ms)",
             "Keep actionTimeout ≤ 30s to fail fast on stuck UI actions.", cfg),
        Rule("timeout-navigation", "Reasonable navigationTimeout (≤30s)", "low",
             _within(navigation_timeout, 30_000),
             "navigationTimeout ≤ 30s (or default)", f"navigationTimeout too high ({navigation_timeout}ms)",
             "Keep navigationTimeout ≤ 30s; prefer route mocking for slow externals.", cfg),
        Rule("timeout-expect", "expect timeout (≤10s)", "low",
             _within(expect_timeout, 10_000),
             "expect timeout ≤ 10s (or default)", f"expect timeout too high ({expect_timeout}ms)",
             "Use `expect: { timeout: 5_000-10_000 }` and soft expects sparingly.", cfg),
        Rule("trace-policy", "Trace on retain-on-failure", "low",
             trace is None or re.search(r"retain-on-failure|on-first-retry|on", trace, re.I) is not None,
             f'trace: "{trace}"' if trace else "Trace not explicitly set",
             f'trace policy suboptimal: "{trace}"',
             'Use `trace: "retain-on-failure"` (or "on-first-retry") to speed up flake debug.', cfg),
        Rule("screenshot-policy", "Screenshot only on failure", "info",
             screenshot is None or "only-on-failure" in screenshot.lower(),
             f'screenshot: "{screenshot}"' if screenshot else "Screenshot not explicitly set",
             f'screenshot policy suboptimal: "{screenshot}"',
             'Use `screenshot: "only-on-failure"` to keep CI lean but helpful.', cfg),
        Rule("video-policy", "Video retain on failure (or off)", "info",
             video is None or re.search(r"retain-on-failure|off", video, re.I) is not None,
             f'video: "{video}"' if video else "Video not explicitly set",
             f'video policy suboptimal: "{video}"',
             'Prefer `video: "retain-on-failure"` (or `off` if traces are enough).', cfg),
        Rule("fully-parallel", "Fully-parallel usage awareness",
             "info" if fully_parallel else "low", True,
             "fullyParallel enabled; ensure tests are stateless and isolated."
             if fully_parallel else "fullyParallel not enabled (fine unless needed).",
             "",
             "If you see heisenbugs, try per-file parallelism or mark stateful suites serial."
             if fully_parallel else None, cfg),
        Rule("workers", "Sane workers count", "info", workers is None or workers > 0,
             f"workers: {workers}" if workers else "workers not explicitly set", "workers set to 0",
             "Use a modest workers value in CI (e.g., 2-4) for stability.", cfg),
    ]


async def analyze_flakiness(target_dir: str) -> Category:
    root = Path(target_dir)
    cat = create_category("flakiness", "Flakiness Risks")

    cfg = await find_config(root)
    cfg_text = await read_text(cfg)
    rules = config_rules(cfg_text, cfg)

    sample = (await find_files(root, TEST_GLOBS))[:SAMPLE_SIZE]
    texts = [await read_text(f) for f in sample]

    def offender(pattern) -> Optional[str]:
        for path, text in zip(sample, texts):
            if pattern.search(text):
                return path
        return sample[0] if sample else None

    def clean(pattern) -> bool:
        return not any(pattern.search(t) for t in texts)

    rules += [
        Rule("no-waitForTimeout", "Avoid waitForTimeout sleeps", "high", clean(WAIT_FOR_TIMEOUT),
             "No waitForTimeout() found in sampled tests", "waitForTimeout() used in tests (flaky sleeps)",
             "Replace sleeps with explicit waits, e.g., `await expect(locator).toBeVisible()`.",
             offender(WAIT_FOR_TIMEOUT)),
        Rule("networkidle", "Avoid networkidle waits on dynamic apps", "medium", clean(NETWORK_IDLE),
             "No networkidle waits detected in sampled tests", 'waitForLoadState("networkidle") detected',
             "Prefer specific UI/route signals over networkidle on long-polling apps.",
             offender(NETWORK_IDLE)),
        Rule("serial-mode", "Avoid broad serial mode", "medium", clean(SERIAL_MODE),
             "No broad serial mode detected in sampled tests",
             'test.describe.configure({ mode: "serial" }) detected',
             "Limit serial mode to truly stateful suites; prefer setup/teardown.",
             offender(SERIAL_MODE)),
    ]

    # HTML отчёт: папка есть и CI загружает её как артефакт
    report_dir = root / "playwright-report"
    report_index = report_dir / "index.html"
    report_exists = await exists(report_dir) or await exists(report_index)
    workflows = await find_files(root, [".github/workflows/**/*.{yml,yaml}"])
    uploads = False
    for wf in workflows:
        text = await read_text(wf)
        if re.search(r"actions/upload-artifact", text, re.I) and re.search(r"playwright-report", text, re.I):
            uploads = True
            break
    rules.append(Rule(
        "html-report", "HTML report persisted", "low", report_exists and uploads,
        "HTML report folder is uploaded", "HTML report not uploaded as artifact",
        "Upload `playwright-report` (or your HTML report path) as an artifact via actions/upload-artifact.",
        str(report_index) if report_exists else (workflows[0] if workflows else cfg),
    ))

    for rule in rules:
        add_finding(
            cat,
            finding_id=f"flk-{rule.id}",
            title=rule.title,
            ok=rule.passed,
            severity=rule.severity,
            message=rule.msg_pass if rule.passed else rule.msg_fail,
            suggestion=rule.suggestion,
            file=rule.file,
        )

    return finalize(cat)
