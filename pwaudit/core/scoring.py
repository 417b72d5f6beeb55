"""
Scoring engine.

Two independent models:
- pass-ratio with severity weights (authoritative: Category.score and
  AuditResult.overall_score)
- deduction from 100 per failed finding (provisional per-analyzer score)

All functions are pure and only look at the given findings/categories.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Sequence

from .models import Severity, Status, enum_value, get_field, to_severity, to_status


# Относительный вес проверки по серьёзности
SEVERITY_WEIGHT: Dict[Severity, int] = {
    Severity.INFO: 1,
    Severity.LOW: 2,
    Severity.MEDIUM: 4,
    Severity.HIGH: 8,
    Severity.CRITICAL: 12,
}

# Штраф за проваленную проверку
DEDUCTION: Dict[Severity, int] = {
    Severity.INFO: 0,
    Severity.LOW: 2,
    Severity.MEDIUM: 6,
    Severity.HIGH: 12,
    Severity.CRITICAL: 20,
}


@dataclass(frozen=True)
class CategoryScore:
    score: int
    max_points: int
    earned_points: int


def round_half_up(value: float) -> int:
    """Round like JavaScript's Math.round (x.5 goes up)."""
    return int(math.floor(value + 0.5))


def compute_category_score(findings: Optional[Sequence[Any]]) -> CategoryScore:
    """
    Score a category as a severity-weighted pass ratio.

    - Each finding adds weight(severity) to max_points, and to earned_points
      when it passed.
    - score = round(earned / max * 100); no findings -> 100.
    - Unknown severity weighs as LOW, unknown status counts as FAIL.
    """
    if not findings:
        return CategoryScore(score=100, max_points=0, earned_points=0)

    max_points = 0
    earned_points = 0
    for finding in findings:
        weight = SEVERITY_WEIGHT[to_severity(get_field(finding, "severity"))]
        max_points += weight
        if to_status(get_field(finding, "status")) is Status.PASS:
            earned_points += weight

    score = round_half_up(earned_points / max_points * 100) if max_points > 0 else 100
    return CategoryScore(score=score, max_points=max_points, earned_points=earned_points)


def _category_weight(category: Any) -> int:
    if isinstance(category, Mapping):
        raw = category.get("max_points", category.get("_maxPoints"))
    else:
        raw = getattr(category, "max_points", None)
    try:
        return max(0, int(raw or 0))
    except (TypeError, ValueError):
        return 0


def _category_value(category: Any) -> float:
    try:
        return float(get_field(category, "score") or 0)
    except (TypeError, ValueError):
        return 0.0


def compute_overall_score(categories: Optional[Iterable[Any]]) -> int:
    """
    Weighted mean of category scores, weighted by each category's max_points.

    If no category has weight, falls back to the plain mean of scores
    (100 when there are no categories).
    """
    categories = list(categories or [])
    if not categories:
        return 100

    weighted = 0.0
    total_weight = 0
    for category in categories:
        weight = _category_weight(category)
        if weight > 0:
            weighted += _category_value(category) * weight
            total_weight += weight

    if total_weight > 0:
        return round_half_up(weighted / total_weight)

    mean = sum(_category_value(c) for c in categories) / len(categories)
    return round_half_up(mean)


def compute_deduction_score(findings: Optional[Sequence[Any]]) -> int:
    """
    Start at 100 and subtract DEDUCTION[severity] for every failed finding.

    Only an explicit "fail" status deducts; a missing or unknown severity
    deducts nothing. Clamped to [0, 100].
    """
    score = 100
    for finding in findings or []:
        if enum_value(get_field(finding, "status")) != Status.FAIL.value:
            continue
        raw = enum_value(get_field(finding, "severity")) or Severity.INFO.value
        try:
            score -= DEDUCTION[Severity(raw)]
        except (TypeError, ValueError):
            continue
    return max(0, min(100, score))
