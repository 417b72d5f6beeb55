"""
Project structure: expected files and directories of a Playwright repo.
"""

from pathlib import Path
from typing import List, NamedTuple, Optional, Tuple

from pwaudit.analyzers.helpers import (
    TEST_FILE,
    add_finding,
    create_category,
    exists,
    finalize,
    walk_files,
)
from pwaudit.core.models import Category


class Expected(NamedTuple):
    label: str
    path: str
    severity: str
    suggestion: Optional[str] = None
    alt: Tuple[str, ...] = ()


EXPECTED: List[Expected] = [
    Expected("Root package.json present", "package.json", "critical",
             "A package.json is required to manage dependencies and scripts."),
    Expected("Playwright config present", "playwright.config.ts", "critical",
             "Setting up a Playwright config is essential for test execution.",
             ("playwright.config.js", "playwright.config.mjs", "playwright.config.cjs")),
    Expected("Tests directory exists", "tests", "medium",
             "Organizing tests in a dedicated directory improves maintainability.",
             ("e2e", "e2e/tests", "test", "__tests__", "src/tests")),
    Expected("Src directory exists", "src", "medium",
             "Source directory contains the main application code.",
             ("e2e/src", "tests/src", "test/src")),
    Expected("Config directory exists", "src/configs", "medium",
             "Having a dedicated config directory helps manage environment-specific settings.",
             ("src/config", "e2e/src/configs", "e2e/src/config")),
    Expected("Data directory exists", "src/data", "medium", None, ("e2e/src/data",)),
    Expected("Envs directory exists", "src/environments", "medium",
             "Organizing environment-specific files in a dedicated directory improves clarity.",
             ("e2e/src/environments", "e2e/src/environment", "e2e/src/env", "e2e/src/envs",
              "src/environment", "src/.env", "src/env", "src/envs")),
    Expected("Fixtures directory exists", "src/fixtures", "medium",
             "Fixtures help manage test data and states effectively.",
             ("e2e/src/fixtures", "e2e/src/fixture", "src/fixture")),
    Expected("Helpers directory exists", "src/helpers", "medium",
             "Helpers provide reusable functions and utilities.",
             ("e2e/src/helpers", "e2e/src/helper", "src/helper")),
    Expected("Pages directory exists", "src/pages", "medium",
             "Pages represent the UI components or screens.",
             ("e2e/src/pages", "e2e/src/page", "src/page")),
    Expected("Services directory exists", "src/services", "medium",
             "Services provide business logic and data handling.",
             ("e2e/src/services", "e2e/src/service", "src/service")),
    Expected("Utils directory exists", "src/utils", "high",
             "Utils provide utility functions and helpers.",
             ("e2e/src/utils", "e2e/src/util", "src/util")),
    Expected(".husky directory exists", ".husky", "high",
             "Husky helps manage Git hooks for better workflow automation.",
             ("e2e/.husky", "src/.husky", "tests/.husky")),
    Expected("TypeScript config present", "tsconfig.json", "high",
             "TypeScript configuration helps manage project compilation.",
             ("tsconfig.base.json", "tsconfig.app.json", "tsconfig.build.json", "tsconfig.test.json")),
    Expected("Git ignore present", ".gitignore", "high",
             "Git ignore helps exclude files from version control.", ("gitignore",)),
    Expected("Editor config present", ".editorconfig", "high",
             "EditorConfig helps maintain consistent coding styles between editors and IDEs.",
             ("editorconfig",)),
    Expected("ESLint config present", "eslint.config.js", "high",
             "ESLint configuration helps maintain code quality and consistency.",
             ("eslint.config.mjs", ".eslintrc.js", ".eslintrc.cjs", ".eslintrc.json", ".eslintrc")),
    Expected("README present", "README.md", "high",
             "README provides essential project information.",
             ("ReadMe.md", "Readme.md", "USAGE.md")),
    Expected("Lockfile present (npm/pnpm/yarn)", "package-lock.json", "high",
             "Lockfiles ensure consistent dependency versions across environments.",
             ("pnpm-lock.yaml", "yarn.lock")),
]

LOCKFILES = ("package-lock.json", "pnpm-lock.yaml", "yarn.lock")

PRETTIER_CONFIGS = (
    ".prettierrc", ".prettierrc.json", ".prettierrc.js", "prettier.config.js",
    "prettier.config.cjs", ".prettierrc.cjs", ".prettierrc.yml", ".prettierrc.yaml",
)

MONOREPO_HINTS = ("packages", "apps", "turbo.json", "pnpm-workspace.yaml")


async def _first_present(root: Path, paths) -> Optional[str]:
    for p in paths:
        if await exists(root / p):
            return p
    return None


async def analyze_project_structure(target_dir: str) -> Category:
    root = Path(target_dir)
    cat = create_category("structure", "Project Structure")

    for item in EXPECTED:
        used = await _first_present(root, (item.path, *item.alt))
        add_finding(
            cat,
            title=item.label,
            ok=used is not None,
            severity=item.severity,
            message=f"Status: {'Found' if used else 'Missing'}",
            suggestion=item.suggestion,
            file=used or item.path,
            artifacts=[str(root / (used or item.path))],
        )

    # Ровно один lockfile
    locks = [lf for lf in LOCKFILES if await exists(root / lf)]
    if len(locks) == 1:
        severity, message = "info", f"Exactly one lockfile present ({locks[0]})."
    elif not locks:
        severity, message = "medium", "No lockfile found."
    else:
        severity, message = "high", f"Multiple lockfiles found: {', '.join(locks)}."
    add_finding(
        cat,
        title="Single lockfile sanity",
        ok=len(locks) == 1,
        severity=severity,
        message=message,
        suggestion=(
            "Good. Keep a single package manager lock."
            if len(locks) == 1
            else "Keep only one of package-lock.json, pnpm-lock.yaml, or yarn.lock to avoid conflicts."
        ),
        artifacts=[str(root / lf) for lf in locks],
    )

    test_files = 0
    for test_root in ("tests", "e2e", "test", "__tests__", "src"):
        test_files += len(await walk_files(root / test_root, exts=TEST_FILE, limit=2000))
    add_finding(
        cat,
        title="Test files present",
        ok=test_files > 0,
        severity="info" if test_files else "medium",
        message=f"Found {test_files} test file(s)." if test_files else "No test files detected.",
        suggestion=(
            "Ensure test files live under a consistent directory (e.g., tests/ or e2e/)."
            if test_files
            else "Add at least one *.spec.ts or *.test.ts file to start your test suite."
        ),
    )

    prettier = await _first_present(root, PRETTIER_CONFIGS)
    add_finding(
        cat,
        title="Prettier config present",
        ok=prettier is not None,
        severity="info",
        message="Found" if prettier else "Missing",
        suggestion=(
            "Ensure your CI runs formatting checks."
            if prettier
            else "Add a Prettier config to enforce consistent formatting."
        ),
        file=prettier or PRETTIER_CONFIGS[0],
        artifacts=[str(root / prettier)] if prettier else [],
    )

    for label, rel_path, ok_hint, missing_hint in (
        (".vscode folder present", ".vscode",
         "Consider sharing recommended extensions and settings for the repo.",
         "Add a .vscode/ with recommended extensions, format-on-save, etc."),
        ("GitHub Actions workflows folder", ".github/workflows",
         "Ensure CI covers lint, typecheck, tests, and artifacts upload.",
         "Create .github/workflows to enable CI/CD pipelines."),
    ):
        present = await exists(root / rel_path)
        add_finding(
            cat,
            title=label,
            ok=present,
            severity="info",
            message="Found" if present else "Missing",
            suggestion=ok_hint if present else missing_hint,
            artifacts=[str(root / rel_path)] if present else [],
        )

    node_version = await _first_present(root, (".nvmrc", ".node-version"))
    add_finding(
        cat,
        title="Node version file present",
        ok=node_version is not None,
        severity="info",
        message=f"Found {node_version}" if node_version else "Missing",
        suggestion=(
            "Use a consistent Node version locally and in CI."
            if node_version
            else "Add .nvmrc or .node-version to pin Node across environments."
        ),
        file=node_version,
        artifacts=[str(root / node_version)] if node_version else [],
    )

    mono = [h for h in MONOREPO_HINTS if await exists(root / h)]
    add_finding(
        cat,
        title="Monorepo workspace detected",
        ok=bool(mono),
        severity="info",
        message=(
            f"Indicators found: {', '.join(mono)}"
            if mono
            else "No monorepo indicators detected (single-package repo)."
        ),
        suggestion=(
            "Ensure shared configs (eslint/prettier/tsconfig) are hoisted and referenced by each package."
            if mono
            else "If repo grows, consider workspaces for multi-package management."
        ),
        artifacts=[str(root / h) for h in mono],
    )

    return finalize(cat)
