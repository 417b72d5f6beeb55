"""
Reporting & observability: configured reporters, persisted artifacts and
in-test attachments/steps.
"""

import re
from pathlib import Path
from typing import List, Optional

from pwaudit.analyzers.helpers import (
    add_finding,
    create_category,
    dep_map,
    exists,
    finalize,
    find_config,
    find_files,
    pick,
    read_package_json,
    read_text,
    strip_comments,
)
from pwaudit.core.models import Category

CODE_SCAN_LIMIT = 2000

REPORTER_BLOCK = re.compile(r"\breporter\s*:\s*(?:['\"][^'\"]+['\"]|\[[\s\S]*?\]\s*\])", re.M)
REPORTER_SINGLE = re.compile(r"\breporter\s*:\s*(?:['\"][^'\"]+['\"]|\[[\s\S]*?\])", re.M)

ATTACH = re.compile(r"\btest\.info\(\)\.attach\s*\(")
STEP = re.compile(r"\btest\.step\s*\(")


def extract_reporter_block(source: str) -> str:
    """Текст значения reporter: строка или массив (включая вложенные кортежи)."""
    match = REPORTER_BLOCK.search(source) or REPORTER_SINGLE.search(source)
    return match.group(0) if match else ""


def has_reporter(block: str, name: str) -> bool:
    if not block:
        return False
    quoted = re.escape(name)
    if re.search(rf"\breporter\s*:\s*['\"]{quoted}['\"]", block, re.I):
        return True
    if re.search(rf"\[[\s\S]*?(['\"]){quoted}\1[\s\S]*?\]", block, re.I):
        return True
    if name == "allure" and re.search(r"\b(allure-playwright|@shelex/allure-playwright)\b", block, re.I):
        return True
    if name == "monocart" and re.search(r"\bmonocart-reporter\b", block, re.I):
        return True
    return False


def _any(pattern: str, texts: List[str]) -> bool:
    return any(re.search(pattern, t, re.I) for t in texts)


async def analyze_reporting_obs(target_dir: str) -> Category:
    root = Path(target_dir)
    cat = create_category("reporting", "Reporting & Observability")

    cfg = await find_config(root)
    cfg_text = strip_comments(await read_text(cfg))
    block = extract_reporter_block(cfg_text)
    cfg_artifacts: List[Optional[str]] = [cfg]

    trace_configured = re.search(r"\btrace\s*:\s*(['\"`]?)\w+", cfg_text, re.I) is not None
    screenshot_configured = re.search(r"\bscreenshot\s*:\s*(['\"`]?)\w+", cfg_text, re.I) is not None
    video_configured = re.search(r"\bvideo\s*:\s*(['\"`]?)\w+", cfg_text, re.I) is not None
    output_dir_configured = re.search(r"\boutputDir\s*:", cfg_text, re.I) is not None

    dirs = {
        name: root / name
        for name in ("playwright-report", "test-results", "screenshots", "trace", "allure-results")
    }
    present = {name: await exists(path) for name, path in dirs.items()}

    workflows = await find_files(root, [".github/workflows/**/*.{yml,yaml}"])
    wf_texts = [await read_text(wf) for wf in workflows]
    uploads_html = _any(r"upload-artifact[\s\S]*playwright-report", wf_texts)
    uploads_traces = _any(r"upload-artifact[\s\S]*trace", wf_texts)
    uploads_screens = _any(r"upload-artifact[\s\S]*screenshots", wf_texts)
    uploads_allure = _any(r"upload-artifact[\s\S]*allure-(results|report)", wf_texts)

    pkg_path = str(root / "package.json")
    deps = dep_map(await read_package_json(root))
    allure_pkg = any(n in deps for n in ("allure-playwright", "@shelex/allure-playwright", "allure-js-commons"))
    monocart_pkg = "monocart-reporter" in deps

    attach_files: List[str] = []
    step_files: List[str] = []
    for path in (await find_files(root, ["**/*.{ts,tsx,js,jsx}"]))[:CODE_SCAN_LIMIT]:
        text = strip_comments(await read_text(path))
        if ATTACH.search(text):
            attach_files.append(path)
        if STEP.search(text):
            step_files.append(path)

    # Репортеры (только внутри блока reporter)
    for name, title, severity, suggestion in (
        ("html", "HTML reporter configured", "low", "Enable the built-in HTML reporter for local triage."),
        ("junit", "JUnit reporter for CI", "info", "Add JUnit reporter so CI systems can parse results."),
        ("json", "JSON reporter available", "info",
         "JSON reporter is useful for custom dashboards or post-processing in CI."),
    ):
        configured = has_reporter(block, name)
        add_finding(
            cat,
            title=title,
            ok=configured,
            severity=severity,
            message="Configured in Playwright reporter" if configured else "Not configured",
            suggestion=suggestion,
            artifacts=cfg_artifacts,
        )

    allure = has_reporter(block, "allure") or allure_pkg
    add_finding(
        cat,
        title="Allure reporting configured",
        ok=allure,
        severity="low",
        message="Allure reporter dependency/config detected" if allure else "Not configured",
        suggestion=(
            "If you use Allure, install allure-playwright and wire the reporter; "
            "upload allure-results in CI."
        ),
        artifacts=[
            cfg,
            pkg_path if allure_pkg else None,
            str(dirs["allure-results"]) if present["allure-results"] else None,
        ],
    )

    monocart = has_reporter(block, "monocart") or monocart_pkg
    add_finding(
        cat,
        title="Monocart reporter configured",
        ok=monocart,
        severity="info",
        message="Monocart reporter detected" if monocart else "Not configured",
        suggestion="Monocart provides a rich single-file report that is easy to archive in CI.",
        artifacts=[cfg, pkg_path if monocart_pkg else None],
    )

    # Артефакты и загрузка в CI
    for title, key, uploaded, severity, msg_ok, msg_fail, suggestion in (
        ("HTML report persisted", "playwright-report", uploads_html, "low",
         "HTML report folder is uploaded", "HTML report not uploaded as artifact",
         "Upload `playwright-report` as an artifact in CI."),
        ("Traces persisted", "trace", uploads_traces, "info",
         "Trace artifacts are persisted", "No trace artifacts detected in repo/CI",
         'Enable `trace: "retain-on-failure"` and upload trace/*.zip in CI.'),
        ("Screenshots persisted", "screenshots", uploads_screens, "info",
         "Screenshots folder is persisted", "No screenshots artifact detected",
         'Use `screenshot: "only-on-failure"` and upload the folder in CI.'),
        ("Allure results persisted", "allure-results", uploads_allure, "info",
         "Allure results are persisted", "No Allure results artifact detected",
         "Upload `allure-results/` in CI and publish the report (`allure generate` or action)."),
    ):
        ok = present[key] or uploaded
        add_finding(
            cat,
            title=title,
            ok=ok,
            severity=severity,
            message=msg_ok if ok else msg_fail,
            suggestion=suggestion,
            artifacts=[str(dirs[key]), *pick(workflows, 3)],
        )

    # Настройки артефактов в конфиге
    for title, configured, severity, suggestion in (
        ("Trace enabled on failures", trace_configured, "low",
         'Set `use: { trace: "retain-on-failure" }` or "on-first-retry".'),
        ("Screenshots on failure", screenshot_configured, "info",
         'Set `use: { screenshot: "only-on-failure" }`.'),
        ("Video capture policy", video_configured, "info",
         'If helpful, set `video: "retain-on-failure"` and upload in CI.'),
        ("Output directory set", output_dir_configured, "info",
         "Set top-level `outputDir` to a stable path to collect artifacts."),
    ):
        add_finding(
            cat,
            title=title,
            ok=configured,
            severity=severity,
            suggestion=suggestion,
            artifacts=cfg_artifacts,
        )

    add_finding(
        cat,
        title="Attachments in tests",
        ok=bool(attach_files),
        severity="info",
        message=(
            f"Found attachments in {len(attach_files)} file(s)" if attach_files
            else "No test.info().attach usage detected"
        ),
        suggestion=(
            "Use `test.info().attach(name, { body, contentType })` to include logs, "
            "HARs, or snapshots in reports."
        ),
        artifacts=pick(attach_files),
    )

    add_finding(
        cat,
        title="Structured steps in tests",
        ok=bool(step_files),
        severity="info",
        message=f"Found test.step in {len(step_files)} file(s)" if step_files else "No test.step usage detected",
        suggestion='Wrap logical actions in `await test.step("description", async () => { ... })` for clearer reports.',
        artifacts=pick(step_files),
    )

    return finalize(cat)
