"""
Playwright Project Audit

Аудит репозитория с Playwright-тестами по набору эвристик:
- Структура проекта и зависимости
- Конфигурация playwright.config.*
- Качество тестов, локаторы, риски нестабильности
- Репортинг, CI/CD, моки сети
- Данные, уведомления, best practices

Usage:
    pwaudit ./my-e2e-project -o audit-report
"""

__version__ = "1.0.0"
