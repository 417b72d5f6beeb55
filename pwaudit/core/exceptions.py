"""
Exceptions raised by the audit core.
"""

from typing import List, Optional


class AuditError(Exception):
    """Базовая ошибка аудита."""


class TargetDirectoryError(AuditError):
    """Целевая директория не существует или не является директорией."""

    def __init__(self, target_dir: str):
        super().__init__(f"Target directory not found: {target_dir}")
        self.target_dir = target_dir


class AnalyzerLoadError(AuditError):
    """
    Модуль анализатора не удалось найти или импортировать.

    Хранит все проверенные пути и все ошибки загрузки, чтобы
    сообщение в отчёте можно было использовать для отладки.
    """

    def __init__(self, stem: str, tried: List[str], errors: Optional[List[str]] = None):
        super().__init__(f"Analyzer module not found: {stem}")
        self.stem = stem
        self.tried = tried
        self.errors = errors or []
