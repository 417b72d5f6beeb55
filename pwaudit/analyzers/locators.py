"""
Locator strategy: resilient (role, test id, user-facing) vs brittle
(XPath, positional, regex text) selectors across test sources.
"""

import re
from typing import List, NamedTuple

from pwaudit.analyzers.helpers import (
    add_finding,
    create_category,
    finalize,
    pick,
    scan_sources,
)
from pwaudit.core.models import Category

ROOTS = ("tests", "e2e", "test", "__tests__", "src")
SCAN_LIMIT = 2000

EVIDENCE = {
    "xpath": re.compile(
        r"(locator\(\s*[\"'`](?://|\.//)|page\.(?:locator|getByRole|getByTestId|getByText)?\(\s*[\"'`](?://|\.//))"
    ),
    "role": re.compile(r"getByRole\("),
    "role_with_name": re.compile(r"getByRole\(\s*['\"`][^'\"`]+['\"`]\s*,\s*\{[^}]*\bname\s*:"),
    "test_id": re.compile(r"getByTestId\(|\[data-testid\s*=", re.I),
    "data_testid_attr": re.compile(r"data-testid\s*=", re.I),
    "user_facing": re.compile(r"getBy(?:Text|Label|Placeholder|AltText|Title)\("),
    "nth": re.compile(r"\.nth\(\s*\d+\s*\)"),
    "regex_text": re.compile(r"getByText\(\s*/.*/[a-z]*\s*\)", re.I),
    "has_text_pseudo": re.compile(r":has-text\(", re.I),
    "css_nth_child": re.compile(r":nth-child\(", re.I),
}


class Check(NamedTuple):
    title: str
    bucket: str
    wanted: bool  # True: хорошо, когда паттерн встречается
    severity: str
    msg_pass: str
    msg_fail: str
    suggestion: str


CHECKS: List[Check] = [
    Check("Avoid XPath selectors", "xpath", False, "high",
          "No XPath detected", "Found XPath in {n} file(s)",
          "Prefer role/test id/user-facing locators instead of //xpath."),
    Check("Use getByRole for semantics", "role", True, "medium",
          "getByRole used in {n} file(s)", "No getByRole usage detected",
          "Prefer getByRole with a meaningful accessible name for resilient locators."),
    Check("Use test IDs for stability", "test_id", True, "medium",
          "Stable test ID locators found in {n} file(s)", "No getByTestId or [data-testid=] usage detected",
          "Introduce data-testid attributes for key elements and use getByTestId or [data-testid=...] selectors."),
    Check("App instrumented with data-testid", "data_testid_attr", True, "info",
          "Found 'data-testid' attributes in {n} file(s)", "No 'data-testid' attributes found in scanned files",
          "Consider adding data-testid attributes to critical elements for robust selectors."),
    Check("Use user-facing locators", "user_facing", True, "info",
          "User-facing getBy* APIs used in {n} file(s)",
          "No getByText/Label/Placeholder/AltText/Title usage detected",
          "Prefer getByText/Label/Placeholder/AltText/Title where appropriate to align with how users interact."),
    Check("Avoid brittle nth() chaining", "nth", False, "low",
          "No nth() chaining found", "nth() used in {n} file(s)",
          "Target unique roles/test IDs or tighter scopes instead of relying on indexes."),
    Check("Avoid regex getByText", "regex_text", False, "low",
          "No regex getByText() detected", "Regex getByText() found in {n} file(s)",
          "Prefer exact strings or accessible role+name. Regex text selectors can be brittle and slow."),
    Check("Avoid :has-text() pseudo", "has_text_pseudo", False, "low",
          "No :has-text() usage", ":has-text() used in {n} file(s)",
          "Use getByText / getByRole({ name }) / hasText option on locator() instead of :has-text()."),
    Check("Avoid :nth-child() in selectors", "css_nth_child", False, "low",
          "No :nth-child() usage in CSS selectors", ":nth-child() found in {n} file(s)",
          "Prefer semantic locators (role/name or test IDs) rather than positional CSS like :nth-child()."),
]


async def analyze_locators(target_dir: str) -> Category:
    cat = create_category("locators", "Locator Strategy")
    hits = await scan_sources(target_dir, EVIDENCE, roots=ROOTS, limit=SCAN_LIMIT)

    for check in CHECKS:
        files = hits[check.bucket]
        ok = bool(files) == check.wanted
        template = check.msg_pass if ok else check.msg_fail
        add_finding(
            cat,
            title=check.title,
            ok=ok,
            severity=check.severity,
            message=template.format(n=len(files)),
            suggestion=check.suggestion,
            artifacts=pick(files),
        )

        # Имя роли проверяется сразу после самой getByRole
        if check.bucket == "role":
            role, named = hits["role"], hits["role_with_name"]
            if not role:
                message = "No getByRole usage (N/A)"
            elif named:
                message = f"getByRole with {{ name: ... }} in {len(named)} file(s)"
            else:
                message = "getByRole used without { name }"
            add_finding(
                cat,
                title="Accessible name with getByRole",
                ok=not role or bool(named),
                severity="low",
                message=message,
                suggestion=(
                    "When using getByRole, pass an explicit { name: /text/ } "
                    "to target the intended element."
                ),
                artifacts=pick(named or role),
            )

    return finalize(cat)
