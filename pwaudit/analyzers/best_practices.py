"""
Best practices enforcement: linting, formatting, pre-commit hooks,
TypeScript strictness and repository hygiene.
"""

from pathlib import Path

from pwaudit.analyzers.helpers import (
    add_finding,
    create_category,
    exists,
    finalize,
    find_anti_pattern_files,
    first_existing,
    has_match,
    in_deps,
    read_package_json,
    read_tsconfig,
    scripts_of,
)
from pwaudit.core.models import Category

ESLINT_CONFIGS = (".eslintrc.json", ".eslintrc.js", ".eslintrc.cjs", "eslint.config.js", "eslint.config.mjs")
PRETTIER_CONFIGS = (
    ".prettierrc",
    ".prettierrc.json",
    ".prettierrc.js",
    "prettier.config.js",
    "prettier.config.cjs",
    "prettier.config.mjs",
)
LINT_STAGED_CONFIGS = (
    ".lintstagedrc",
    ".lintstagedrc.json",
    ".lintstagedrc.js",
    "lint-staged.config.js",
    "lint-staged.config.cjs",
    "lint-staged.config.mjs",
)
PR_TEMPLATES = (".github/pull_request_template.md", ".gitlab/merge_request_templates/Default.md")
READMES = ("README.md", "README.MD", "readme.md")


async def analyze_best_practices(target_dir: str) -> Category:
    root = Path(target_dir)
    cat = create_category("best", "Best Practices Enforcement")

    pkg_path = str(root / "package.json")
    pkg = await read_package_json(root)
    scripts = scripts_of(pkg)

    eslint_path = await first_existing(root, ESLINT_CONFIGS)
    eslint_deps = in_deps(pkg, ["eslint", "@typescript-eslint/parser", "@typescript-eslint/eslint-plugin"])
    if not eslint_path:
        eslint_hint = 'Add .eslintrc.json (or eslint.config.js) and a "lint" script in package.json'
    elif not eslint_deps:
        eslint_hint = "Install eslint and @typescript-eslint packages to enable linting"
    else:
        eslint_hint = None

    prettier_path = await first_existing(root, PRETTIER_CONFIGS)
    husky_dir = root / ".husky"
    has_husky = await exists(husky_dir)
    lint_staged = bool(pkg.get("lint-staged")) or await first_existing(root, LINT_STAGED_CONFIGS) is not None

    tsconfig = await read_tsconfig(root)
    ts_json = tsconfig.get("json")
    compiler = ts_json.get("compilerOptions") if isinstance(ts_json, dict) else None
    ts_strict = isinstance(compiler, dict) and compiler.get("strict") is True

    pr_template = await first_existing(root, PR_TEMPLATES)
    readme = await first_existing(root, READMES)
    editorconfig = await first_existing(root, [".editorconfig"])
    sleeps = await find_anti_pattern_files(root, r"\bwaitForTimeout\s*\(")

    fmt, fmt_fix = scripts.get("format", ""), scripts.get("format:fix", "")
    any_format = bool(fmt or fmt_fix)
    runs_prettier = has_match(r"\bprettier\b", fmt) or has_match(r"\bprettier\b", fmt_fix)

    checks = [
        ("eslint", "ESLint configured", bool(eslint_path), "medium",
         "ESLint config present", "ESLint config missing", eslint_hint, eslint_path, None),
        ("prettier", "Prettier configured", bool(prettier_path) and in_deps(pkg, ["prettier"]), "low",
         "Prettier config present", "Prettier config missing",
         "Add .prettierrc or prettier.config.js and format scripts", prettier_path, None),
        ("precommit", "Pre-commit hooks (husky + lint-staged)", has_husky and lint_staged, "medium",
         "Pre-commit hooks present", "Husky/lint-staged missing",
         "Add Husky and lint-staged to enforce formatting & linting before commits",
         str(husky_dir) if has_husky else pkg_path, None),
        ("syntax", "TypeScript strict mode", ts_strict, "low",
         "tsconfig compilerOptions.strict = true", "TypeScript strict mode disabled",
         'Set "compilerOptions.strict": true in tsconfig', tsconfig.get("path") or "tsconfig.json", None),
        ("pw-best", "Avoid anti-patterns (e.g., waitForTimeout)", not sleeps, "info",
         "No waitForTimeout usage found", "Found waitForTimeout usage in project files",
         "Prefer expect-based waiting or proper events over waitForTimeout", None, sleeps),
        ("pr-template", "PR/MR review template", bool(pr_template), "info",
         "Template present", "Template missing",
         "Add .github/pull_request_template.md (or GitLab MR template)", pr_template, None),
        ("readme", "README present", bool(readme), "low",
         "README.md found", "README.md missing",
         "Add a README with setup instructions & common scripts", readme, None),
        ("editorconfig", ".editorconfig present", bool(editorconfig), "info",
         ".editorconfig found", ".editorconfig missing",
         "Add an .editorconfig to standardize editor settings across contributors", editorconfig, None),
        ("format-script", "Format script exists", any_format, "low",
         "npm run format exists" if fmt else "npm run format:fix exists",
         'No "format" or "format:fix" script in package.json',
         'Add "format": "prettier --check ." and/or "format:fix": "prettier --write ."', pkg_path, None),
        ("format-prettier", "Format script runs Prettier", any_format and runs_prettier, "low",
         "Format script uses Prettier",
         "Format script does not appear to run Prettier" if any_format else "No format script to validate",
         'Ensure your format scripts call Prettier, e.g., "prettier --check ." and "prettier --write ."',
         pkg_path, None),
        ("lint-script", "Lint script exists", bool(scripts.get("lint")), "low",
         "npm run lint exists", 'No "lint" script in package.json',
         'Add "lint": "eslint . --ext .ts,.tsx,.js" in package.json scripts', pkg_path, None),
    ]

    for check_id, title, passed, severity, msg_pass, msg_fail, suggestion, file, artifacts in checks:
        add_finding(
            cat,
            finding_id=f"bp-{check_id}",
            title=title,
            ok=passed,
            severity=severity,
            message=msg_pass if passed else msg_fail,
            suggestion=suggestion,
            file=file,
            artifacts=artifacts,
        )

    return finalize(cat)
