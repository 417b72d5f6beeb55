"""
CLI для Playwright-аудита.

Usage:
    pwaudit                          # Аудит текущей директории
    pwaudit ./my-e2e -o reports      # Другая цель и директория отчётов
    pwaudit --json-only              # Только report.json
    pwaudit --debug                  # Подробные логи
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from pwaudit.config import AuditConfig, get_settings
from pwaudit.core.exceptions import AuditError
from pwaudit.orchestrator import run_audit
from pwaudit.reports.generator import HTML_REPORT, JSON_REPORT, ReportGenerator

app = typer.Typer(
    name="pwaudit",
    help="Аудит Playwright-проекта: эвристики лучших практик и сводный балл",
)
console = Console()

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Настроить логирование."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


@app.command()
def audit(
    target: str = typer.Argument(".", help="Корень Playwright-проекта"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Директория для отчётов"),
    json_only: bool = typer.Option(False, "--json-only", help="Не генерировать index.html"),
    debug: bool = typer.Option(False, "--debug", help="Подробные логи"),
):
    """🔍 Проверить проект и записать отчёты."""
    settings = get_settings()
    setup_logging(debug or settings.debug)

    json_only = json_only or settings.json_only
    config = AuditConfig.from_settings(
        settings,
        out_dir=out or Path(settings.out_dir),
        write_html=not json_only,
    )

    try:
        result = asyncio.run(run_audit(target, config))
    except AuditError as e:
        console.print(f"[red]❌ {escape(str(e))}[/]")
        raise typer.Exit(1)

    ReportGenerator(config.out_dir, console=console).print_summary(result)

    console.print(f"\n📄 JSON report: {config.out_dir / JSON_REPORT}")
    if config.write_html:
        console.print(f"🌐 HTML report: {config.out_dir / HTML_REPORT}")

    # CI gating по порогу балла пока не включён
    # if result.overall_score < threshold:
    #     raise typer.Exit(2)


if __name__ == "__main__":
    app()
