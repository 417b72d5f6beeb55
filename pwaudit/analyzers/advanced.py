"""
Advanced capabilities: session reuse, custom fixtures, custom reporters
and network interception.
"""

import re
from pathlib import Path

from pwaudit.analyzers.helpers import (
    add_finding,
    create_category,
    finalize,
    find_config,
    find_first_file,
    has_match,
    read_text,
)
from pwaudit.core.models import Category

REPORTER_KEY = re.compile(r"\breporters?\s*:", re.I)
LOCAL_IN_ARRAY = re.compile(r"\breporters?\s*:\s*\[(?:[^\]]*['\"]\.{1,2}/[^'\"]+['\"][^\]]*)\]", re.S)
LOCAL_IN_OBJECT = re.compile(
    r"\breporters?\s*:\s*\[[^\]]*\{\s*[^}]*\breporter\s*:\s*['\"]\.{1,2}/[^'\"]+['\"][^}]*\}[^\]]*\]", re.S
)
IMPORT_REPORTER = re.compile(r"import\s+[\s\S]+?\s+from\s+['\"](\.{1,2}/[^'\"\n]*reporter[^'\"\n]*)['\"]", re.I)
REQUIRE_REPORTER = re.compile(r"require\(\s*['\"](\.{1,2}/[^'\"\n]*reporter[^'\"\n]*)['\"]\s*\)", re.I)

REPORTER_HOOKS = re.compile(r"\bon(Begin|TestBegin|TestEnd|End|StepBegin|StepEnd|StdOut|StdErr)\s*\(")
FIXTURE_EXTEND = re.compile(r"\b(test|base|baseTest)\s*\.\s*extend\s*(?:<[^>]*>)?\s*\(")
ALIASED_EXTEND = re.compile(r"\b(?!expect\b)[A-Za-z_]\w*\s*\.\s*extend\s*(?:<[^>]*>)?\s*\(")
PLAYWRIGHT_IMPORT = re.compile(r"from\s*['\"]@playwright/test['\"]")


def reporter_local_path_in_config(cfg_text: str) -> bool:
    """reporter: ['./x'], reporter: [{ reporter: './x' }] или импорт локального репортера."""
    if not cfg_text:
        return False
    imported = bool(IMPORT_REPORTER.search(cfg_text) or REQUIRE_REPORTER.search(cfg_text))
    return bool(
        LOCAL_IN_ARRAY.search(cfg_text)
        or LOCAL_IN_OBJECT.search(cfg_text)
        or (REPORTER_KEY.search(cfg_text) and imported)
    )


def has_reporter_implementation(text: str) -> bool:
    """Класс репортера: типы Playwright (или implements Reporter) плюс хуки onBegin/onTestEnd/..."""
    if not text or not REPORTER_HOOKS.search(text):
        return False
    typed = "@playwright/test/reporter" in text or bool(re.search(r"@playwright/test['\"]", text))
    return typed or bool(re.search(r"\bimplements\s+Reporter\b", text))


def has_fixture_extend(text: str) -> bool:
    """test.extend / base.extend, либо <alias>.extend при импорте @playwright/test (кроме expect.extend)."""
    if not text:
        return False
    if FIXTURE_EXTEND.search(text):
        return True
    return bool(PLAYWRIGHT_IMPORT.search(text) and ALIASED_EXTEND.search(text))


async def analyze_advanced(target_dir: str) -> Category:
    root = Path(target_dir)
    cat = create_category("advanced", "Advanced Capabilities")

    cfg = await find_config(root)
    cfg_text = await read_text(cfg)

    # storageState
    storage_in_config = has_match(r"\bstorageState\s*:", cfg_text)
    storage_file = await find_first_file(root, lambda text, _: bool(re.search(r"\bstorageState\b\s*[:(]", text)))
    add_finding(
        cat,
        finding_id="adv-storage-state",
        title="User impersonation / session reuse (storageState)",
        ok=storage_in_config or bool(storage_file),
        severity="medium",
        suggestion="Use storageState to persist logged-in session and speed up tests.",
        file=cfg if storage_in_config else storage_file or cfg,
        artifacts=[storage_file or cfg],
    )

    # test.extend
    extend_in_config = has_fixture_extend(cfg_text)
    extend_file = await find_first_file(root, lambda text, _: has_fixture_extend(text))
    add_finding(
        cat,
        finding_id="adv-custom-fixtures",
        title="Custom fixtures (test.extend)",
        ok=extend_in_config or bool(extend_file),
        severity="low",
        suggestion="Create domain fixtures via test.extend for reusable setup and test data.",
        file=cfg if extend_in_config else extend_file or cfg,
        artifacts=[extend_file or cfg],
    )

    # Нужна реализация Reporter и хоть какое-то упоминание репортера в конфиге
    local_reporter = reporter_local_path_in_config(cfg_text)
    reporter_file = await find_first_file(root, lambda text, _: has_reporter_implementation(text))
    config_evidence = local_reporter or bool(
        REPORTER_KEY.search(cfg_text) or IMPORT_REPORTER.search(cfg_text) or REQUIRE_REPORTER.search(cfg_text)
    )
    add_finding(
        cat,
        finding_id="adv-custom-reporter",
        title="Custom reporter (local path + hooks)",
        ok=bool(reporter_file) and config_evidence,
        severity="info",
        suggestion=(
            'Configure reporter in playwright.config with a local path (e.g., ["./myReporter"]) '
            "and implement Reporter hooks (onBegin, onTestEnd, onEnd)."
        ),
        file=cfg if local_reporter else reporter_file or cfg,
        artifacts=[reporter_file or cfg],
    )

    mock_file = await find_first_file(
        root, lambda text, _: bool(re.search(r"\b(?:page|context)\.route\s*\(", text, re.I))
    )
    add_finding(
        cat,
        finding_id="adv-network-mocks",
        title="Network mocks/intercepts",
        ok=bool(mock_file),
        severity="low",
        suggestion="Use page.route/context.route to stub network and isolate tests.",
        file=mock_file,
        artifacts=[mock_file],
    )

    return finalize(cat)
