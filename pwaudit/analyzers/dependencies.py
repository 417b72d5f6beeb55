"""
Dependencies: required packages, tooling coherence and version hygiene
in package.json.
"""

import re
from pathlib import Path
from typing import List, Tuple

from pwaudit.analyzers.helpers import (
    add_finding,
    any_script_includes,
    create_category,
    dep_map,
    exists,
    finalize,
    find_files,
    has_dep,
    looks_floating,
    read_package_json,
    scripts_of,
)
from pwaudit.core.models import Category

BASELINE: List[Tuple[str, str]] = [
    ("@playwright/test", "critical"),
    ("playwright", "high"),
    ("typescript", "medium"),
    ("eslint", "high"),
    ("prettier", "high"),
    ("husky", "medium"),
    ("lint-staged", "medium"),
    ("@eslint/js", "high"),
    ("globals", "high"),
    ("eslint-config-prettier", "high"),
    ("eslint-plugin-playwright", "critical"),
    # Генераторы данных
    ("@faker-js/faker", "medium"),
    ("chance", "medium"),
    # Утилиты
    ("cross-env", "medium"),
    ("lodash", "medium"),
    ("rimraf", "low"),
    ("ts-node", "low"),
    ("tsx", "low"),
    # Allure
    ("allure-commandline", "high"),
    ("allure-js-commons", "low"),
    ("allure-playwright", "high"),
]

LINT_STAGED_CONFIGS = [
    ".lintstagedrc", ".lintstagedrc.json", ".lintstagedrc.yaml", ".lintstagedrc.yml",
    "lint-staged.config.{js,cjs,mjs,ts}",
]

LOCKFILES = ("package-lock.json", "yarn.lock", "pnpm-lock.yaml", "bun.lockb")

CLEAN_SCRIPT = re.compile(
    r"(rimraf|rm\s+-rf|del-cli).*(test-results|trace|screenshots|downloads|coverage)", re.IGNORECASE
)


async def analyze_dependencies(target_dir: str) -> Category:
    root = Path(target_dir)
    cat = create_category("deps", "Dependencies")
    pkg_path = str(root / "package.json")
    pkg = await read_package_json(root)
    deps = dep_map(pkg)
    scripts = scripts_of(pkg)

    for name, severity in BASELINE:
        ok = has_dep(deps, name)
        add_finding(
            cat,
            finding_id=f"dep-{name}",
            title=f"{name} dependency",
            ok=ok,
            severity=severity,
            message=f"Found {name}@{deps[name]}" if ok else f"{name} not found",
            file="package.json",
        )

    # TypeScript + ESLint
    tsconfigs = await find_files(root, ["tsconfig.json", "tsconfig.*.json"])
    uses_ts = has_dep(deps, "typescript") or bool(tsconfigs)
    ts_plugin = has_dep(deps, "@typescript-eslint/eslint-plugin")
    ts_parser = has_dep(deps, "@typescript-eslint/parser")
    legacy_meta = has_dep(deps, "typescript-eslint")

    if not uses_ts:
        message = "TypeScript not detected; skipping."
    elif not (ts_plugin and ts_parser):
        message = "Missing @typescript-eslint/eslint-plugin and/or @typescript-eslint/parser."
    elif legacy_meta:
        message = 'Has @typescript-eslint/* but also legacy "typescript-eslint" (remove).'
    else:
        message = "ESLint wired for TypeScript."
    add_finding(
        cat,
        title="TypeScript ESLint integration",
        ok=not uses_ts or (ts_plugin and ts_parser and not legacy_meta),
        severity="high" if uses_ts else "info",
        message=message,
        suggestion=(
            'Install @typescript-eslint/eslint-plugin & @typescript-eslint/parser '
            'and remove legacy "typescript-eslint".'
            if uses_ts else None
        ),
        artifacts=[pkg_path, *tsconfigs],
    )

    typecheck = scripts.get("typecheck")
    add_finding(
        cat,
        title="TypeScript typecheck script",
        ok=not uses_ts or bool(typecheck),
        severity="low" if uses_ts else "info",
        message=(
            (f'Script "typecheck": {typecheck}' if typecheck else 'Script "typecheck" missing')
            if uses_ts else "TypeScript not detected; skipping."
        ),
        suggestion='Add "typecheck": "tsc -p tsconfig.json --noEmit".' if uses_ts else None,
        file="package.json",
    )

    # Playwright и Allure
    test_script = scripts.get("test", "")
    has_pw_script = any_script_includes(scripts, r"\bplaywright\s+test\b")
    add_finding(
        cat,
        title="Playwright test script",
        ok=has_pw_script,
        severity="medium",
        message=f'Script "test": {test_script}' if has_pw_script else 'No "playwright test" in scripts.',
        suggestion='Add "test": "playwright test" (and consider CI variants like "--reporter=line").',
        file="package.json",
    )

    allure_pw = has_dep(deps, "allure-playwright")
    allure_cmd = has_dep(deps, "allure-commandline")
    if not allure_pw:
        message = "Allure not used; skipping."
    elif allure_cmd:
        message = "allure-playwright & allure-commandline present."
    else:
        message = "allure-playwright present but allure-commandline missing."
    add_finding(
        cat,
        title="Allure dependencies consistent",
        ok=not allure_pw or allure_cmd,
        severity="high" if allure_pw else "info",
        message=message,
        suggestion='Install "allure-commandline" for local/CI report generation.' if allure_pw else None,
        file="package.json",
    )

    # ESLint + Prettier
    has_eslint = has_dep(deps, "eslint")
    prettier_ok = has_dep(deps, "prettier") and has_dep(deps, "eslint-config-prettier")
    add_finding(
        cat,
        title="ESLint + Prettier integration",
        ok=not has_eslint or prettier_ok,
        severity="high" if has_eslint else "info",
        message=(
            ("ESLint and Prettier correctly integrated." if prettier_ok
             else "Missing Prettier and/or eslint-config-prettier.")
            if has_eslint else "ESLint not detected; skipping."
        ),
        suggestion=(
            'Install "prettier" and "eslint-config-prettier"; extend it last in ESLint config.'
            if has_eslint else None
        ),
        file="package.json",
    )

    # Husky + lint-staged
    husky = has_dep(deps, "husky")
    husky_dir = root / ".husky"
    husky_ready = bool(scripts.get("prepare")) and await exists(husky_dir)
    add_finding(
        cat,
        title="Husky installed & prepared",
        ok=not husky or husky_ready,
        severity="medium" if husky else "info",
        message=(
            ('Husky installed, "prepare" script set, and .husky/ present.' if husky_ready
             else 'Husky installed but missing "prepare" script and/or .husky directory.')
            if husky else "Husky not used; skipping."
        ),
        suggestion='Add "prepare": "husky install" and run it once to create .husky/.' if husky else None,
        artifacts=[pkg_path, str(husky_dir)],
    )

    lint_staged = has_dep(deps, "lint-staged")
    lint_staged_files = await find_files(root, LINT_STAGED_CONFIGS)
    lint_staged_config = bool(pkg.get("lint-staged")) or bool(lint_staged_files)
    add_finding(
        cat,
        title="lint-staged configured",
        ok=not lint_staged or lint_staged_config,
        severity="medium" if lint_staged else "info",
        message=(
            ("lint-staged configuration found." if lint_staged_config
             else "lint-staged installed but no configuration found.")
            if lint_staged else "lint-staged not used; skipping."
        ),
        suggestion=(
            "Add a lint-staged config (e.g., format TS/JS/JSON/MD on pre-commit)."
            if lint_staged else None
        ),
        artifacts=lint_staged_files,
    )

    # Плавающие версии
    floaters = [f"{n}@{v}" for n, v in deps.items() if looks_floating(v)]
    add_finding(
        cat,
        title="No floating dependency versions",
        ok=not floaters,
        severity="medium" if floaters else "low",
        message=(
            f"Floating versions detected: {', '.join(floaters)}" if floaters
            else "All versions pinned with a range (^ or ~) or exact."
        ),
        suggestion='Replace "*" or "latest" with a caret (^) range or a pinned version.' if floaters else None,
        file="package.json",
    )

    locks = [lf for lf in LOCKFILES if await exists(root / lf)]
    if not locks:
        message, suggestion = "No lockfile found.", "Commit your lockfile to ensure reproducible installs."
    elif len(locks) == 1:
        message, suggestion = f"Using {locks[0]}", None
    else:
        message = f"Multiple lockfiles present: {', '.join(locks)}"
        suggestion = "Keep only one lockfile to avoid resolver conflicts."
    add_finding(
        cat,
        title="Single lockfile present",
        ok=len(locks) <= 1,
        severity="medium" if len(locks) > 1 else "low",
        message=message,
        suggestion=suggestion,
        artifacts=[str(root / lf) for lf in locks],
    )

    has_moment = has_dep(deps, "moment")
    add_finding(
        cat,
        title="Modern date/time library",
        ok=not has_moment,
        severity="info" if has_moment else "low",
        message=(
            'Using "moment". Consider "dayjs" or "date-fns" for smaller footprint.' if has_moment
            else "No legacy date library detected."
        ),
        suggestion='Migrate to "dayjs" or "date-fns" where possible.' if has_moment else None,
        file="package.json",
    )

    both_generators = has_dep(deps, "@faker-js/faker") and has_dep(deps, "chance")
    add_finding(
        cat,
        title="Avoid duplicate data-gen libraries",
        ok=not both_generators,
        severity="info" if both_generators else "low",
        message="Both @faker-js/faker and chance detected." if both_generators else "No duplication detected.",
        suggestion=(
            "Standardize on one data generator to reduce bundle size and surface area."
            if both_generators else None
        ),
        file="package.json",
    )

    engines = pkg.get("engines") if isinstance(pkg.get("engines"), dict) else {}
    engine = engines.get("node")
    add_finding(
        cat,
        title="Node engine specified",
        ok=bool(engine),
        severity="info",
        message=f"engines.node: {engine}" if engine else "No engines.node field.",
        suggestion=None if engine else 'Add "engines": { "node": ">=18 <23" } (or whichever LTS you target).',
        file="package.json",
    )

    is_esm = pkg.get("type") == "module"
    has_tsx = has_dep(deps, "tsx")
    has_ts_node = has_dep(deps, "ts-node")
    if not is_esm:
        message = "CJS project; no special loader needs assumed."
    elif has_tsx:
        message = "ESM project with tsx available."
    elif has_ts_node:
        message = "ESM project using ts-node; ensure loader flags are correct."
    else:
        message = "ESM project; tsx/loader not detected."
    add_finding(
        cat,
        title="ESM tooling coherence",
        ok=not is_esm or has_tsx or not has_ts_node,
        severity="info" if is_esm else "low",
        message=message,
        suggestion='Prefer "tsx" for running TS in ESM projects.' if is_esm else None,
        file="package.json",
    )

    for script, title, hint in (
        ("lint", "ESLint lint script exists", 'Add "lint": "eslint . --max-warnings=0".'),
        ("format", "Prettier format script exists",
         'Add "format": "prettier --write \\"**/*.{ts,js,tsx,jsx,json,md,yml,yaml}\\""'),
    ):
        value = scripts.get(script)
        add_finding(
            cat,
            title=title,
            ok=bool(value),
            severity="low",
            message=f'Script "{script}": {value}' if value else f'Script "{script}" missing',
            suggestion=None if value else hint,
            file="package.json",
        )

    clean = scripts.get("clean", "")
    has_clean = bool(CLEAN_SCRIPT.search(clean))
    add_finding(
        cat,
        title="Clean script exists for artifacts",
        ok=has_clean,
        severity="info",
        message=f'Script "clean": {clean}' if has_clean else "Artifact clean script not found.",
        suggestion='Add "clean": "rimraf test-results trace screenshots downloads coverage" to keep repo tidy.',
        file="package.json",
    )

    other_runner = (
        has_dep(deps, "jest") or any_script_includes(scripts, r"\bjest\b")
        or has_dep(deps, "vitest") or any_script_includes(scripts, r"\bvitest\b")
    )
    mixed = other_runner and has_dep(deps, "@playwright/test")
    add_finding(
        cat,
        title="Test runner overlap awareness",
        ok=True,
        severity="info" if mixed else "low",
        message=(
            "Playwright present alongside Jest/Vitest; ensure runner responsibilities are clearly separated."
            if mixed else "Single-runner setup or clear separation assumed."
        ),
        suggestion=(
            "Document which runner handles what (e2e vs unit/component) and avoid redundant configs."
            if mixed else None
        ),
        file="package.json",
    )

    cross_env_used = any_script_includes(scripts, r"\bcross-env\b")
    add_finding(
        cat,
        title="cross-env usage",
        ok=not cross_env_used or has_dep(deps, "cross-env"),
        severity="low" if cross_env_used else "info",
        message="cross-env referenced in scripts." if cross_env_used else "cross-env not referenced; skipping.",
        file="package.json",
    )

    return finalize(cat)
