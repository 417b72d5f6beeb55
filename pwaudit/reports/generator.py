"""
Report generator for audit results.

Generates:
- JSON report (report.json) for machine processing
- Self-contained HTML dashboard (index.html)
- Console summary (rich)
"""

import json
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..core.models import AuditResult, Severity
from .html_template import PAGE

logger = logging.getLogger(__name__)

JSON_REPORT = "report.json"
HTML_REPORT = "index.html"


def embed_json(result: AuditResult) -> str:
    """JSON для вставки внутрь <script>: '<' экранируется как \\u003c."""
    return json.dumps(result.to_dict(), ensure_ascii=False).replace("<", "\\u003c")


def _score_style(score: int) -> str:
    if score >= 80:
        return "green"
    if score >= 50:
        return "yellow"
    return "red"


class ReportGenerator:
    """Генератор отчётов аудита."""

    def __init__(self, output_dir: Optional[Path] = None, console: Optional[Console] = None):
        """
        Args:
            output_dir: Директория для отчётов (по умолчанию audit-report/)
            console: Rich console для сводки
        """
        self.output_dir = Path(output_dir or "audit-report")
        self.console = console or Console()

    def _prepare_dir(self):
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def write_json(self, result: AuditResult) -> str:
        """
        Записать report.json.

        Returns:
            Путь к файлу отчёта
        """
        self._prepare_dir()
        filepath = self.output_dir / JSON_REPORT
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(result.to_dict(), f, indent=2, ensure_ascii=False)
        logger.info(f"JSON report written to {filepath}")
        return str(filepath)

    def write_html(self, result: AuditResult, title: str = "Playwright Audit Report") -> str:
        """
        Записать index.html с встроенным JSON результатом.

        Returns:
            Путь к файлу отчёта
        """
        self._prepare_dir()
        filepath = self.output_dir / HTML_REPORT
        html = PAGE.substitute(title=title, data=embed_json(result))
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(html)
        logger.info(f"HTML report written to {filepath}")
        return str(filepath)

    def print_summary(self, result: AuditResult, limit: int = 10):
        """Вывести краткую сводку в консоль."""
        table = Table(title="Playwright Audit")
        table.add_column("Category", style="cyan")
        table.add_column("Score", justify="right")
        table.add_column("Passed", justify="right", style="green")
        table.add_column("Failed", justify="right", style="red")

        for category in result.categories:
            style = _score_style(category.score)
            table.add_row(
                escape(category.title),
                f"[{style}]{category.score}[/]",
                str(category.passed_count),
                str(category.failed_count),
            )

        self.console.print(table)

        style = _score_style(result.overall_score)
        self.console.print(Panel(
            f"[bold {style}]{result.overall_score}[/] / 100",
            title="Overall score",
            expand=False,
        ))

        worst = result.get_failed(Severity.CRITICAL, Severity.HIGH)
        if worst:
            self.console.print(f"\n[bold red]Top issues ({min(len(worst), limit)} of {len(worst)}):[/]")
            for finding in worst[:limit]:
                label = escape(f"[{finding.severity.value}]")
                self.console.print(f"  [red]✗[/] {label} {escape(finding.title)}")
