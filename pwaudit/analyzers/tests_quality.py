"""
Test quality: structure, assertions and anti-patterns inside *.spec / *.test files.
"""

import math
import re
from pathlib import Path
from typing import Dict, List

from pwaudit.analyzers.helpers import (
    TEST_FILE,
    add_finding,
    create_category,
    finalize,
    pick,
    read_text,
    walk_files,
)
from pwaudit.core.models import Category

TEST_ROOTS = ("tests", "e2e", "test", "__tests__", "src/tests", "src")

# Сколько файлов читать максимум
SCAN_LIMIT = 500

EVIDENCE = {
    "describe": re.compile(r"\btest\.describe\s*\("),
    "step": re.compile(r"\btest\.step\s*\("),
    "soft": re.compile(r"\bexpect\.soft\s*\("),
    "fixtures": re.compile(r"\btest\.(?:use|extend)\s*\(|\bbase\.extend\s*\("),
    "wait_for_timeout": re.compile(r"\bwaitForTimeout\s*\("),
    "wait_for_selector": re.compile(r"\b(?:page|frame|frameLocator)\.waitForSelector\s*\("),
    "test_only": re.compile(r"\btest\.only\s*\("),
    "describe_only": re.compile(r"\b(?:test\.)?describe\.only\s*\("),
    "skip": re.compile(r"\btest\.skip\s*\("),
    "fixme": re.compile(r"\btest\.fixme\s*\("),
    "snapshot": re.compile(r"\btoHaveScreenshot\s*\(|\btoMatchSnapshot\s*\("),
    "parallel": re.compile(r"\btest\.describe\.configure\s*\(\s*\{[^}]*\bmode\s*:\s*['\"]parallel['\"]"),
    "route": re.compile(r"\b(?:page|context|browserContext)\.route\s*\(", re.I),
    "explicit_timeouts": re.compile(r"\btest\.(?:setTimeout|slow)\s*\("),
}


async def discover_test_files(target_dir: str) -> List[str]:
    files: List[str] = []
    for root in TEST_ROOTS:
        for path in await walk_files(Path(target_dir) / root, exts=TEST_FILE, limit=2000):
            if path not in files:
                files.append(path)
    return files


def _union(*groups: List[str]) -> List[str]:
    return list(dict.fromkeys(f for g in groups for f in g))


async def analyze_tests_quality(target_dir: str) -> Category:
    cat = create_category("tests", "Test Quality")
    test_files = await discover_test_files(target_dir)

    add_finding(
        cat,
        title="Tests exist",
        ok=bool(test_files),
        severity="low" if test_files else "critical",
        message=f"Found {len(test_files)} test file(s)" if test_files else "No test files found",
        artifacts=test_files[:10],
    )
    if not test_files:
        return finalize(cat)

    hits: Dict[str, List[str]] = {name: [] for name in EVIDENCE}
    for path in test_files[:SCAN_LIMIT]:
        text = await read_text(path)
        if not text:
            continue
        for name, pattern in EVIDENCE.items():
            if pattern.search(text):
                hits[name].append(path)

    # Порог "разумного" количества skip/timeout
    tolerance = max(3, math.ceil(len(test_files) * 0.05))

    structure = _union(hits["describe"], hits["step"])
    add_finding(
        cat,
        title="Readable structure (describe/step)",
        ok=bool(structure),
        severity="medium",
        message=(
            f"Found structure helpers in {len(hits['describe']) + len(hits['step'])} file(s)"
            if structure else "No test.describe/test.step usage detected"
        ),
        suggestion="Use test.describe/test.step to group and narrate test flows.",
        artifacts=pick(structure),
    )

    soft = hits["soft"]
    add_finding(
        cat,
        title="Soft assertions when appropriate",
        ok=bool(soft),
        severity="info",
        message=f"expect.soft used in {len(soft)} file(s)" if soft else "No expect.soft usage detected",
        suggestion="Use expect.soft for non-critical checks so the test collects multiple failures.",
        artifacts=pick(soft),
    )

    fixtures = hits["fixtures"]
    add_finding(
        cat,
        title="Custom fixtures or test.use present",
        ok=bool(fixtures),
        severity="medium",
        message=f"Found fixtures/test.use in {len(fixtures)} file(s)" if fixtures else "No fixtures/test.use detected",
        suggestion="Use test.extend/test.use to share setup, context, and per-test options.",
        artifacts=pick(fixtures),
    )

    waits = hits["wait_for_timeout"]
    add_finding(
        cat,
        title="Avoid waitForTimeout anti-pattern",
        ok=not waits,
        severity="high",
        message=f"waitForTimeout detected in {len(waits)} file(s)" if waits else "No waitForTimeout usage found",
        suggestion="Replace waitForTimeout with locator assertions (e.g., await expect(locator).toBeVisible()).",
        artifacts=pick(waits),
    )

    selectors = hits["wait_for_selector"]
    add_finding(
        cat,
        title="Prefer locator assertions over waitForSelector",
        ok=not selectors,
        severity="low",
        message=(
            f"page.waitForSelector used in {len(selectors)} file(s)" if selectors
            else "No page.waitForSelector usage found"
        ),
        suggestion=(
            "Prefer await expect(locator).toBeVisible()/toHaveText() etc. "
            "Locator assertions auto-wait and are more resilient."
        ),
        artifacts=pick(selectors),
    )

    focused = _union(hits["test_only"], hits["describe_only"])
    add_finding(
        cat,
        title="No focused tests committed",
        ok=not focused,
        severity="critical",
        message=(
            f".only found in {len(focused)} file(s); remove before committing" if focused
            else "No .only usage detected"
        ),
        suggestion="Delete .only before pushing; enforce via a pre-commit/CI grep to block focused tests.",
        artifacts=pick(focused),
    )

    skips = len(hits["skip"]) + len(hits["fixme"])
    add_finding(
        cat,
        title="Reasonable use of skip/fixme",
        ok=skips < tolerance,
        severity="info",
        message=f"Found {skips} occurrence(s) of skip/fixme" if skips else "No test.skip/fixme usage detected",
        suggestion="Keep skip/fixme temporary; track issues and remove regularly to avoid masking failures.",
        artifacts=pick(_union(hits["skip"], hits["fixme"])),
    )

    snapshots = hits["snapshot"]
    add_finding(
        cat,
        title="Snapshot/visual assertions",
        ok=bool(snapshots),
        severity="info",
        message=(
            f"Found snapshot/visual assertions in {len(snapshots)} file(s)" if snapshots
            else "No snapshot/visual assertions detected"
        ),
        suggestion="Use toHaveScreenshot()/toMatchSnapshot() for regressions where DOM/text checks are insufficient.",
        artifacts=pick(snapshots),
    )

    parallel = hits["parallel"]
    add_finding(
        cat,
        title="Suite-level parallelization used",
        ok=bool(parallel),
        severity="info",
        message=(
            f'test.describe.configure({{ mode: "parallel" }}) found in {len(parallel)} file(s)' if parallel
            else "No explicit suite-level parallelization detected"
        ),
        suggestion="Consider parallel mode for independent suites to reduce runtime; ensure test isolation first.",
        artifacts=pick(parallel),
    )

    routes = hits["route"]
    add_finding(
        cat,
        title="Network mocking used where appropriate",
        ok=bool(routes),
        severity="info",
        message=f"Found route() usage in {len(routes)} file(s)" if routes else "No route() usage detected in tests",
        suggestion=(
            "Mock network for flaky/slow dependencies to make tests deterministic; "
            "prefer page.route for per-test scope."
        ),
        artifacts=pick(routes),
    )

    timeouts = hits["explicit_timeouts"]
    add_finding(
        cat,
        title="Explicit test timeouts kept minimal",
        ok=len(timeouts) < tolerance,
        severity="low",
        message=(
            f"Explicit timeouts/slow in {len(timeouts)} file(s)" if timeouts
            else "No test.setTimeout/test.slow detected"
        ),
        suggestion=(
            "Use explicit timeouts sparingly; fix root causes instead. "
            "If needed, annotate justification in code review."
        ),
        artifacts=pick(timeouts),
    )

    return finalize(cat)
