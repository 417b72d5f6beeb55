"""
Audit orchestrator.

Features:
- Target validation (the only fatal error)
- Sequential execution of analyzers in registry order
- Error isolation: load and execution failures become findings
- Scoring and report emission
"""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

from pwaudit.config import AuditConfig
from pwaudit.core.exceptions import TargetDirectoryError
from pwaudit.core.fs_cache import FileCache, use_cache
from pwaudit.core.models import AuditResult, Category, Finding
from pwaudit.core.runner import AnalyzerRunner
from pwaudit.core.scoring import compute_category_score, compute_overall_score
from pwaudit.reports.generator import ReportGenerator


logger = logging.getLogger(__name__)

LOAD_ISSUES_ID = "analyzer-load"
LOAD_ISSUES_TITLE = "Analyzer Load Issues"


class AuditOrchestrator:
    """Оркестратор для управления выполнением аудита."""

    def __init__(self, config: Optional[AuditConfig] = None):
        """
        Args:
            config: Конфигурация аудита (по умолчанию без записи отчётов)
        """
        self.config = config or AuditConfig()

    async def run(self, target_dir: str, options: Optional[AuditConfig] = None) -> AuditResult:
        """
        Выполнить полный аудит директории.

        Args:
            target_dir: Корень проверяемого проекта
            options: Переопределение конфигурации для этого запуска

        Returns:
            AuditResult с категориями и общим баллом

        Raises:
            TargetDirectoryError: директория не существует или не директория
        """
        config = options or self.config
        root = Path(target_dir).expanduser().resolve()
        if not await asyncio.to_thread(root.is_dir):
            raise TargetDirectoryError(str(target_dir))

        runner = AnalyzerRunner(config.analyzer_paths)
        categories: List[Category] = []
        load_issues: List[Finding] = []

        total = len(config.registry)
        logger.info(f"Auditing {root} with {total} analyzers...")

        with use_cache(FileCache()):
            for i, entry in enumerate(config.registry, 1):
                logger.info(f"[{i}/{total}] Running {entry.title}...")
                category, issue = await runner.run(entry, str(root))
                if issue is not None:
                    load_issues.append(issue)
                    continue
                categories.append(category)
                logger.info(
                    f"  {entry.title}: {category.passed_count} passed, "
                    f"{category.failed_count} failed"
                )

        if load_issues:
            categories.insert(0, Category(
                id=LOAD_ISSUES_ID,
                title=LOAD_ISSUES_TITLE,
                findings=load_issues,
            ))

        for category in categories:
            scored = compute_category_score(category.findings)
            category.score = scored.score
            category.max_points = scored.max_points
            category.earned_points = scored.earned_points

        result = AuditResult(
            target_dir=str(root),
            categories=categories,
            overall_score=compute_overall_score(categories),
        )
        logger.info(f"Audit finished: overall score {result.overall_score}")

        self.emit_reports(result, config)
        return result

    def emit_reports(self, result: AuditResult, config: AuditConfig):
        """Записать JSON/HTML отчёты, если они включены в конфиге."""
        if not (config.write_json or config.write_html):
            return

        generator = ReportGenerator(config.out_dir)
        if config.write_json:
            generator.write_json(result)
        if config.write_html:
            generator.write_html(result)


async def run_audit(target_dir: str, options: Optional[AuditConfig] = None) -> AuditResult:
    """
    Удобная функция для запуска аудита.

    Args:
        target_dir: Корень проверяемого проекта
        options: Конфигурация запуска

    Returns:
        AuditResult
    """
    orchestrator = AuditOrchestrator(options)
    return await orchestrator.run(target_dir)
