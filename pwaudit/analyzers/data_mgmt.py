"""
Data management: environment files, secrets hygiene, artifacts, global
setup/teardown, session storage and test data layout.
"""

import re
from pathlib import Path
from typing import List

from pwaudit.analyzers.helpers import (
    add_finding,
    create_category,
    dep_map,
    exists,
    finalize,
    find_config,
    find_files,
    has_match,
    read_package_json,
    read_text,
    scripts_of,
)
from pwaudit.core.models import Category

ENV_VARIANTS = (".env.qa", ".env.stage", ".env.uat", ".env.local")
# Сколько вариантов из ENV_VARIANTS достаточно для прохождения
REQUIRED_VARIANTS = 1

ARTIFACT_DIRS = ("test-results", "downloads", "screenshots", "trace")
SCHEMA_LIBS = ("zod", "envalid", "joi", "@hapi/joi", "yup")

SECRET_PATTERNS = [
    re.compile(r"AKIA[0-9A-Z]{16}"),
    re.compile(r"aws_secret_access_key\s*=\s*[A-Za-z0-9/+=]{40}", re.I),
    re.compile(r"(?<!test_)(api|secret|token|password|passwd|pwd)\s*[:=]\s*['\"][^'\"]+['\"]", re.I),
    re.compile(r"xox[baprs]-[A-Za-z0-9-]{10,}"),
    re.compile(r"ghp_[A-Za-z0-9]{36,}"),
]

STORAGE_STATE = re.compile(r"storageState\s*:\s*['\"`][^'\"`]+['\"`]|use\s*:\s*\{[^}]*storageState", re.I)
OUTPUT_DIR = re.compile(r"outputDir\s*:\s*['\"`][^'\"`]+['\"`]")
SCREENSHOT = re.compile(r"screenshot\s*:\s*['\"`](on|only-on-failure)['\"`]|screenshot\s*:\s*(true|false)", re.I)
TRACE = re.compile(r"trace\s*:\s*['\"`](on|off|retain-on-failure|on-first-retry)['\"`]", re.I)
VIDEO = re.compile(r"video\s*:\s*['\"`](on|off|retain-on-failure)['\"`]", re.I)
CLEAN_SCRIPT = re.compile(r"(rimraf|rm\s+-rf|del-cli).*(test-results|trace|screenshots|downloads)", re.I)


def has_suspected_secrets(texts: List[str]) -> bool:
    return any(pattern.search(text) for text in texts for pattern in SECRET_PATTERNS)


async def analyze_data_mgmt(target_dir: str) -> Category:
    root = Path(target_dir)
    cat = create_category("data", "Data Management")

    env_files = await find_files(root, ["**/.env*"])
    env_example = str(root / ".env.example")
    gitignore = str(root / ".gitignore")
    pkg_path = str(root / "package.json")
    auth_dir = str(root / ".auth")
    artifact_dirs = [str(root / name) for name in ARTIFACT_DIRS]

    cfg = await find_config(root)
    cfg_text = await read_text(cfg)
    pkg = await read_package_json(root)
    deps = dep_map(pkg)

    # Переменные окружения
    basenames = {Path(f).name for f in env_files}
    present = [v for v in ENV_VARIANTS if v in basenames]
    missing = [v for v in ENV_VARIANTS if v not in basenames]
    variants_ok = len(present) >= REQUIRED_VARIANTS
    if not variants_ok:
        severity, suggestion = "medium", f"No expected env variants found. Add at least one of: {', '.join(ENV_VARIANTS)}."
    elif missing:
        severity, suggestion = "info", f"Found {', '.join(present)}. Consider adding: {', '.join(missing)}."
    else:
        severity, suggestion = "low", "All expected env variants present across the project."
    add_finding(cat, "Parameterized environment data", variants_ok, severity,
                suggestion=suggestion, artifacts=env_files)

    add_finding(cat, "Sample env file committed (.env.example)", await exists(env_example), "low",
                suggestion="Commit a sanitized .env.example to document required variables.",
                artifacts=[env_example])
    add_finding(cat, "Secrets management (env/CI vars)", bool(env_files), "low",
                suggestion="Use CI secrets & .env files; never commit secrets to VCS.",
                artifacts=env_files)
    add_finding(cat, "Env variables wired in config",
                has_match(r"dotenv|config\(\)", cfg_text) or "process.env." in cfg_text, "low",
                suggestion=(
                    "Load env via \"import 'dotenv/config'\" or dotenv.config() "
                    "and reference process.env in playwright.config.*."
                ),
                artifacts=[cfg])

    # Быстрый поиск утечек в нескольких вероятных файлах
    leak_files = [p for p in (pkg_path, cfg, env_example) if p]
    leaked = has_suspected_secrets([await read_text(p) for p in leak_files])
    add_finding(cat, "No hardcoded secrets in repo (quick scan)", not leaked, "high" if leaked else "low",
                suggestion=(
                    "Remove hardcoded secrets. Use CI secrets or .env. Consider adding a pre-commit "
                    "secret scanner (e.g., gitleaks, trufflehog)."
                ),
                artifacts=leak_files)

    # Артефакты
    artifacts_present = any([await exists(d) for d in artifact_dirs])
    add_finding(cat, "Artifacts directories present", artifacts_present, "info",
                suggestion="Ensure CI preserves artifacts for debugging (test-results, trace, screenshots, downloads).",
                artifacts=artifact_dirs)
    configured = any(p.search(cfg_text) for p in (OUTPUT_DIR, SCREENSHOT, TRACE, VIDEO))
    add_finding(cat, "Artifacts configured in Playwright config", configured, "low",
                suggestion=(
                    "Configure outputDir, screenshot, trace, and video in playwright.config.* "
                    "to standardize artifact locations."
                ),
                artifacts=[cfg])

    workflows = await find_files(root, [".github/workflows/**/*.yml", ".github/workflows/**/*.yaml"])
    uploads = [has_match(r"actions/upload-artifact", await read_text(w)) for w in workflows]
    add_finding(cat, "Artifacts uploaded in CI", any(uploads), "low",
                suggestion=(
                    "In GitHub Actions, use actions/upload-artifact to persist "
                    "test-results/trace/screenshots on failures."
                ),
                artifacts=workflows)

    # .gitignore
    ignore_text = await read_text(gitignore) if await exists(gitignore) else ""
    add_finding(cat, ".env files are gitignored", has_match(r"\.env(\..+)?", ignore_text), "medium",
                suggestion="Add .env* to .gitignore to avoid leaking secrets.",
                artifacts=[gitignore])
    add_finding(cat, "Artifacts are gitignored",
                has_match(r"(test-results|trace|screenshots|downloads)", ignore_text), "low",
                suggestion="Add test-results/, trace/, screenshots/, downloads/ to .gitignore to keep repo clean.",
                artifacts=[gitignore])

    # Global setup/teardown
    setup_files = await find_files(root, ["**/*global-setup*.{ts,js}", "**/global-setup/**/*.{ts,js}"])
    teardown_files = await find_files(root, ["**/*global-teardown*.{ts,js}", "**/global-teardown/**/*.{ts,js}"])
    add_finding(cat, "Global setup/teardown present", bool(setup_files or teardown_files), "low",
                suggestion="Add global-setup.ts / global-teardown.ts for seeding/cleanup/session bootstrapping if needed.",
                artifacts=["global-setup.ts", "global-teardown.ts", *setup_files, *teardown_files])
    wired = (
        has_match(r"global-setup|globalSetup", cfg_text)
        and has_match(r"global-teardown|globalTeardown", cfg_text)
    )
    add_finding(cat, "Global setup/teardown configured in Playwright", wired, "low",
                suggestion="Wire globalSetup/globalTeardown in playwright.config.* if using those scripts.",
                artifacts=[cfg])

    # Сессии
    storage_files = await find_files(root, ["**/storageState*.json", ".auth/**/*"])
    add_finding(cat, "Storage state configured", bool(STORAGE_STATE.search(cfg_text)), "low",
                suggestion=(
                    "Use storageState to reuse auth sessions and avoid re-login. "
                    "Store files under ./.auth and reference in use.storageState."
                ),
                artifacts=storage_files)
    add_finding(cat, "Auth directory present (.auth)", await exists(auth_dir), "info",
                suggestion="Prefer a dedicated .auth folder for session artifacts with proper .gitignore rules.",
                artifacts=[auth_dir])

    # Тестовые данные
    data_files = await find_files(root, ["**/*.json", "**/*.csv", "**/*.xlsx"])
    data_folders = await find_files(
        root, ["**/test-data/**/*", "**/data/**/*", "**/__fixtures__/**/*", "**/resources/**/*"]
    )
    add_finding(cat, "Structured test data present (JSON/CSV/XLSX)", bool(data_files), "low",
                suggestion="Maintain test data as JSON/CSV/XLSX in a dedicated folder (e.g., test-data/ or __fixtures__/).",
                artifacts=data_files[:20])
    add_finding(cat, "Dedicated test data folders", bool(data_folders), "info",
                suggestion="Use test-data/, __fixtures__/, or resources/ to separate data from tests and code.",
                artifacts=data_folders[:20])

    add_finding(cat, "Environment schema validation library installed",
                any(lib in deps for lib in SCHEMA_LIBS), "low",
                suggestion="Validate required env vars on startup with zod/envalid/joi/yup to fail fast on misconfigurations.",
                artifacts=[pkg_path])

    clean = scripts_of(pkg).get("clean", "")
    add_finding(cat, "Cleanup script for artifacts", bool(clean and CLEAN_SCRIPT.search(clean)), "info",
                suggestion=(
                    'Add "clean" script (rimraf test-results trace screenshots downloads) '
                    "and run before/after CI jobs as needed."
                ),
                artifacts=[pkg_path])

    return finalize(cat)
