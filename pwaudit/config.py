"""
Configuration for audit system.
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Annotated, List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from pwaudit.core.registry import ANALYZERS, AnalyzerEntry


class Settings(BaseSettings):
    """Настройки из окружения (PWAUDIT_*) и .env."""

    model_config = SettingsConfigDict(env_prefix="PWAUDIT_", env_file=".env", extra="allow")

    out_dir: str = "audit-report"
    debug: bool = False
    json_only: bool = False

    # Директории с пользовательскими анализаторами (через ":" или ",")
    analyzer_paths: Annotated[List[str], NoDecode] = []

    @field_validator("analyzer_paths", mode="before")
    @classmethod
    def split_paths(cls, value):
        if isinstance(value, str):
            parts = value.replace(",", os.pathsep).split(os.pathsep)
            return [p.strip() for p in parts if p.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()


@dataclass
class AuditConfig:
    """Конфигурация одного запуска аудита."""

    # === Output ===
    out_dir: Path = field(default_factory=lambda: Path("audit-report"))
    write_json: bool = False
    write_html: bool = False

    # === Analyzers ===
    analyzer_paths: List[str] = field(default_factory=list)
    registry: List[AnalyzerEntry] = field(default_factory=lambda: list(ANALYZERS))

    def __post_init__(self):
        self.out_dir = Path(self.out_dir)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **overrides) -> "AuditConfig":
        """
        Собрать конфиг запуска из Settings.

        По умолчанию CLI пишет JSON всегда и HTML если не json_only.
        """
        settings = settings or get_settings()
        values = {
            "out_dir": Path(settings.out_dir),
            "write_json": True,
            "write_html": not settings.json_only,
            "analyzer_paths": list(settings.analyzer_paths),
        }
        values.update(overrides)
        return cls(**values)
