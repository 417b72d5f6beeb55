"""
Core data models for audit system.

Every analyzer output is parsed into these models exactly once, at the
analyzer boundary (see ``normalize_category``). Coercion is lenient and
fail-closed: an unknown status becomes FAIL, an unknown severity becomes LOW.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class Severity(Enum):
    """Уровень серьёзности проверки."""
    INFO = "info"            # Информационная проверка
    LOW = "low"              # Незначительное улучшение
    MEDIUM = "medium"        # Проблема средней важности
    HIGH = "high"            # Серьёзная проблема, требует исправления
    CRITICAL = "critical"    # Проект не следует базовым практикам


class Status(Enum):
    """Результат проверки. Частичного прохождения нет."""
    PASS = "pass"
    FAIL = "fail"


@dataclass
class Finding:
    """Одна выполненная проверка."""

    id: str
    title: str
    message: str
    severity: Severity
    status: Status
    suggestion: Optional[str] = None
    file: Optional[str] = None
    artifacts: Optional[List[str]] = None

    @property
    def passed(self) -> bool:
        return self.status is Status.PASS

    def to_dict(self) -> Dict[str, Any]:
        """Преобразовать в словарь для JSON (пустые поля опускаются)."""
        data: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "message": self.message,
            "severity": self.severity.value,
            "status": self.status.value,
        }
        if self.suggestion is not None:
            data["suggestion"] = self.suggestion
        if self.file is not None:
            data["file"] = self.file
        if self.artifacts is not None:
            data["artifacts"] = list(self.artifacts)
        return data


@dataclass
class Category:
    """Результат одного анализатора."""

    id: str
    title: str
    findings: List[Finding] = field(default_factory=list)
    score: int = 0
    max_points: int = 0
    earned_points: int = 0

    @property
    def passed_count(self) -> int:
        return sum(1 for f in self.findings if f.passed)

    @property
    def failed_count(self) -> int:
        return len(self.findings) - self.passed_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "findings": [f.to_dict() for f in self.findings],
            "score": self.score,
            "_maxPoints": self.max_points,
            "earnedPoints": self.earned_points,
        }


@dataclass
class AuditResult:
    """Итоговый результат аудита."""

    target_dir: str
    categories: List[Category]
    overall_score: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Преобразовать в словарь для JSON."""
        return {
            "targetDir": self.target_dir,
            "timestamp": self.timestamp.isoformat(),
            "categories": [c.to_dict() for c in self.categories],
            "overallScore": self.overall_score,
        }

    def all_findings(self) -> List[Finding]:
        return [f for c in self.categories for f in c.findings]

    def get_failed(self, *severities: Severity) -> List[Finding]:
        """Получить проваленные проверки (опционально только указанной серьёзности)."""
        return [
            f for f in self.all_findings()
            if not f.passed and (not severities or f.severity in severities)
        ]


# === Normalization ===

def get_field(obj: Any, name: str) -> Any:
    """Read a field from a mapping or an attribute-bearing object."""
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def to_severity(value: Any) -> Severity:
    """Привести значение к Severity; неизвестное значение -> LOW."""
    raw = enum_value(value)
    try:
        return Severity(str(raw or "").strip().lower())
    except ValueError:
        return Severity.LOW


def to_status(value: Any) -> Status:
    """Привести значение к Status; только точное "pass" -> PASS, остальное -> FAIL."""
    raw = enum_value(value)
    if raw == Status.PASS.value:
        return Status.PASS
    return Status.FAIL


def normalize_finding(raw: Any) -> Finding:
    """Разобрать FindingLike (dict или объект) в строгий Finding."""
    finding_id = get_field(raw, "id")
    title = get_field(raw, "title")
    message = get_field(raw, "message")
    suggestion = get_field(raw, "suggestion")
    file = get_field(raw, "file")
    artifacts = get_field(raw, "artifacts")

    if finding_id is None:
        finding_id = title if title is not None else "check"

    return Finding(
        id=str(finding_id),
        title=str(title if title is not None else "Check"),
        message=str(message) if message else "",
        severity=to_severity(get_field(raw, "severity")),
        status=to_status(get_field(raw, "status")),
        suggestion=str(suggestion) if suggestion else None,
        file=str(file) if file else None,
        artifacts=[str(a) for a in artifacts] if isinstance(artifacts, (list, tuple)) else None,
    )


def is_category_like(out: Any) -> bool:
    if out is None:
        return False
    if isinstance(out, Mapping):
        return True
    return hasattr(out, "findings")


def normalize_category(entry_id: str, entry_title: str, out: Any) -> Category:
    """
    Разобрать CategoryLike в Category.

    Отсутствующие id/title берутся из записи реестра, не-список findings
    превращается в пустой список.
    """
    findings = get_field(out, "findings")
    if not isinstance(findings, (list, tuple)):
        findings = []

    return Category(
        id=str(get_field(out, "id") or entry_id),
        title=str(get_field(out, "title") or entry_title),
        findings=[normalize_finding(f) for f in findings],
    )


def error_category(entry_id: str, entry_title: str, message: str) -> Category:
    """Категория-заглушка для упавшего анализатора."""
    return Category(
        id=entry_id,
        title=entry_title,
        findings=[
            Finding(
                id="analyzer-error",
                title="Analyzer failed",
                message=message,
                severity=Severity.HIGH,
                status=Status.FAIL,
            )
        ],
    )
