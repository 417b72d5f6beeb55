"""
Network/route mocks: interception with route() and what each interception does.
"""

import re

from pwaudit.analyzers.helpers import (
    add_finding,
    create_category,
    finalize,
    pick,
    scan_sources,
)
from pwaudit.core.models import Category

ROOTS = ("tests", "e2e", "test", "__tests__", "src")
SCAN_LIMIT = 1500

EVIDENCE = {
    "page_route": re.compile(r"\bpage\.route\s*\("),
    "context_route": re.compile(r"\b(?:browser)?context\.route\s*\(", re.I),
    "fulfill": re.compile(r"\bawait\s+route\.fulfill\s*\("),
    "abort": re.compile(r"\bawait\s+route\.abort\s*\("),
    "continue": re.compile(r"\bawait\s+route\.continue\s*\("),
    "chained": re.compile(r"\bawait\s+route\.route\s*\("),
    "har": re.compile(r"\brouteFromHAR\s*\(", re.I),
    "on_request": re.compile(r"\.on\s*\(\s*['\"]request['\"]", re.I),
}


async def analyze_network(target_dir: str) -> Category:
    cat = create_category("network", "Network/Route Mocks")
    hits = await scan_sources(target_dir, EVIDENCE, roots=ROOTS, limit=SCAN_LIMIT)

    page_route, context_route = hits["page_route"], hits["context_route"]
    routed = list(dict.fromkeys(page_route + context_route))
    acted = hits["fulfill"] or hits["abort"] or hits["continue"]

    add_finding(
        cat,
        title="Mocks via route()",
        ok=bool(routed),
        severity="medium",
        message=(
            f"Detected route() in {len(page_route) + len(context_route)} file(s)" if routed
            else "No route() mocking detected"
        ),
        suggestion=(
            "Ensure each route has a clear action (fulfill/abort/continue) and proper cleanup."
            if routed else
            "Use page.route() or browserContext.route() to intercept and mock network calls."
        ),
        artifacts=pick(routed),
    )

    for bucket, title, severity, found, missing, suggestion in (
        ("fulfill", "Use route.fulfill for mocked responses", "low",
         "Found route.fulfill in {n} file(s)", "No route.fulfill detected",
         "Prefer await route.fulfill({ status, contentType, body }) for deterministic mocks. "
         "Consider storing payloads as fixtures."),
        ("abort", "Use route.abort to simulate failures", "info",
         "Found route.abort in {n} file(s)", "No route.abort detected",
         "Use await route.abort() to simulate network errors/timeouts and test resilience paths."),
        ("continue", "Use route.continue for passthrough", "info",
         "Found route.continue in {n} file(s)", "No route.continue detected",
         "Use await route.continue() when only modifying headers/method/url before allowing the request."),
    ):
        files = hits[bucket]
        add_finding(
            cat,
            title=title,
            ok=bool(files),
            severity=severity,
            message=found.format(n=len(files)) if files else missing,
            suggestion=suggestion,
            artifacts=pick(files),
        )

    chained = hits["chained"]
    add_finding(
        cat,
        title="Avoid chained route.route",
        ok=not chained,
        severity="low",
        message=f"Nested route.route found in {len(chained)} file(s)" if chained else "No nested route.route detected",
        suggestion=(
            "Chaining route.route() can lead to complex, hard-to-debug flows. "
            "Prefer a single interception per request."
        ),
        artifacts=pick(chained),
    )

    har = hits["har"]
    add_finding(
        cat,
        title="HAR-based network mocking",
        ok=bool(har),
        severity="info",
        message=f"routeFromHAR used in {len(har)} file(s)" if har else "No HAR-based mocking detected",
        suggestion=(
            "Use routeFromHAR for realistic recordings of network traffic and faster, "
            "stable tests when the backend is volatile."
        ),
        artifacts=pick(har),
    )

    add_finding(
        cat,
        title="Prefer page.route over context.route",
        ok=not context_route or len(page_route) >= len(context_route),
        severity="low",
        message=(
            f"browserContext.route used in {len(context_route)} file(s)" if context_route
            else "No browserContext.route usage detected (good for isolation)"
        ),
        suggestion=(
            "Use page.route where possible to scope mocks to a single test. "
            "If using context.route, ensure proper setup/teardown."
        ),
        artifacts=pick(context_route),
    )

    on_request = hits["on_request"]
    add_finding(
        cat,
        title="Request event handling",
        ok=bool(on_request),
        severity="low",
        message=(
            f"request event used in {len(on_request)} file(s)" if on_request
            else "No request event handling detected"
        ),
        suggestion=(
            "Use request events for diagnostics (logging, assertions). "
            "Prefer route() for deterministic mocking."
        ),
        artifacts=pick(on_request),
    )

    dangling = bool(routed) and not acted
    add_finding(
        cat,
        title="Route defined without action",
        ok=not dangling,
        severity="medium",
        message=(
            "Found route() without fulfill/abort/continue in scanned files" if dangling
            else "All route() usages appear to take an action"
        ),
        suggestion=(
            "Every interception should either fulfill, abort, or continue the request; "
            "otherwise it can hang or behave unexpectedly."
        ),
        artifacts=pick(routed),
    )

    return finalize(cat)
