"""
Core functionalities: retries, parallel execution, reusable page objects,
environment switching and tag-based filtering.
"""

import re
from pathlib import Path
from typing import List

from pwaudit.analyzers.helpers import (
    TEST_FILE,
    add_finding,
    create_category,
    exists,
    finalize,
    find_config,
    first_existing,
    has_match,
    read_package_json,
    read_text,
    scripts_of,
    walk_files,
)
from pwaudit.core.models import Category

TEST_ROOTS = ("tests", "test", "e2e", "__tests__", "src")

PAGE_DIRS = ("src/pages", "tests/pages", "test/pages", "e2e/pages")
UTIL_DIRS = ("src/utils", "tests/utils", "test/utils", "e2e/utils", "scripts")
DOTENV_FILES = (".env", ".env.local", ".env.dev", ".env.test", ".env.ci")

PAGE_OBJECT = re.compile(r"\bclass\s+\w+Page\b")
PROCESS_ENV = re.compile(r"\bprocess\.env\.[A-Za-z_]\w*")
GREP_SCRIPT = re.compile(r"(--grep|(?<![\w-])-g)\b")

_TAG = r"(?:smoke|regression|sanity|e2e|api|p0|p1|p2|p3|critical|high|medium|low)"
TAG_IN_TITLE = re.compile(rf"(?:test|it|describe)\s*\(\s*(['\"`])[\s\S]*?@{_TAG}[\s\S]*?\1", re.I)

_ENV_TERNARY = r"process\.env\.[A-Za-z_]\w*\s*\?\s*\d+\s*:\s*\d+"
RETRIES_OK = re.compile(rf"\bretries\s*:\s*(?!0\b)(\d+|{_ENV_TERNARY})", re.I)
PARALLEL_OK = re.compile(
    rf"\bheadless\s*:\s*true\b|\bworkers\s*:\s*(\d+|{_ENV_TERNARY})|\bprojects\s*:\s*\[", re.I
)

# Доля спек с тегами, начиная с 10 файлов
TAGGED_SHARE = 0.3


async def _matching(files: List[str], pattern, stop: int) -> List[str]:
    out: List[str] = []
    for path in files:
        if pattern.search(await read_text(path)):
            out.append(path)
            if len(out) >= stop:
                break
    return out


async def analyze_core(target_dir: str) -> Category:
    root = Path(target_dir)
    cat = create_category("core", "Core Functionalities")

    cfg = await find_config(root)
    cfg_text = await read_text(cfg)
    pkg_path = str(root / "package.json")
    scripts = scripts_of(await read_package_json(root))

    test_files: List[str] = []
    for test_root in TEST_ROOTS:
        test_files.extend(await walk_files(root / test_root, exts=TEST_FILE, limit=6000))

    page_objects = await _matching(test_files[:1200], PAGE_OBJECT, stop=5)
    helpers_ok = (
        await first_existing(root, PAGE_DIRS) is not None
        or await first_existing(root, UTIL_DIRS) is not None
        or bool(page_objects)
    )

    dotenv = any([await exists(root / name) for name in DOTENV_FILES])
    env_in_config = has_match(r"\bprocess\.env\b|\bbaseURL\s*:", cfg_text)
    env_in_tests = bool(await _matching(test_files[:400], PROCESS_ENV, stop=1))

    grep_scripts = [f"{name}: {value}" for name, value in scripts.items() if GREP_SCRIPT.search(value)]

    tagged = await _matching(test_files[:3000], TAG_IN_TITLE, stop=12)
    tags_ok = bool(tagged) and (
        len(test_files) < 10 or len(tagged) / max(1, len(test_files)) >= TAGGED_SHARE
    )

    checks = [
        ("retries", "Readable assertions & retries configured", bool(RETRIES_OK.search(cfg_text)), "medium",
         "Retries configured (≥ 1 or CI ternary)", "No retries or set to 0",
         "Set `retries: 1` (or `process.env.CI ? 2 : 1`) to absorb flakiness.", cfg, None),
        ("parallel", "Parallel/headless execution configured", bool(PARALLEL_OK.search(cfg_text)), "low",
         "Headless and/or workers/projects are configured", "No headless/workers/projects configuration found",
         "Set `use: { headless: true }` and tune `workers` or `projects` for scale.", cfg, None),
        ("helpers", "Reusable helpers/pages present", helpers_ok, "info",
         "Helpers/pages (PO) or utils detected", "No helpers/pages structure detected",
         "Factor common flows into Page Object classes (`src/pages/`) and utilities (`src/utils/`).",
         None, page_objects),
        ("env-switch", "Environment switch available", dotenv or env_in_config or env_in_tests, "low",
         "Environment switching detected (.env/process.env/baseURL)", "No environment switching detected",
         "Provide env switching via dotenv/.env and `use.baseURL` or process.env variables in config.",
         cfg, None),
        ("grep-config", "Tags/Filtering in config (grep/grepInvert)",
         has_match(r"\bgrep(Invert)?\s*:", cfg_text), "info",
         "`grep`/`grepInvert` configured in Playwright config", "No `grep`/`grepInvert` found in config",
         "Use `grep`/`grepInvert` in config to enable tag-based filtering globally.", cfg, None),
        ("grep-scripts", "Tags/Filtering via npm scripts (--grep/-g)", bool(grep_scripts), "low",
         "Scripts using `--grep`/`-g` found", "No scripts found using `--grep`/`-g`",
         'Add scripts like `"test:smoke": "playwright test --grep @smoke"` in package.json.',
         pkg_path, grep_scripts[:6]),
        ("spec-tags", "Spec files tagged (@smoke/@regression/...)", tags_ok, "info" if tags_ok else "low",
         "A healthy portion of spec files include @tags", "Few or no spec files include @tags",
         'Append tags in titles, e.g., `test("login @smoke", ...)` or `describe("checkout @regression", ...)`.',
         None, tagged),
    ]

    for check_id, title, passed, severity, msg_pass, msg_fail, suggestion, file, artifacts in checks:
        add_finding(
            cat,
            finding_id=f"core-{check_id}",
            title=title,
            ok=passed,
            severity=severity,
            message=msg_pass if passed else msg_fail,
            suggestion=suggestion,
            file=file,
            artifacts=artifacts,
        )

    return finalize(cat)
