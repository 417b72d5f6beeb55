"""
Analyzer registry: fixed ordered list of analyzers run by an audit.
"""

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class AnalyzerEntry:
    """Запись реестра анализаторов."""

    id: str             # id категории в отчёте
    title: str          # Человекочитаемое название
    analyzer_name: str  # Ключ поиска модуля (stem)
    function_name: str  # Ожидаемое имя функции в модуле


ANALYZERS: List[AnalyzerEntry] = [
    AnalyzerEntry("structure", "Project Structure", "project_structure", "analyze_project_structure"),
    AnalyzerEntry("deps", "Dependencies", "dependencies", "analyze_dependencies"),
    AnalyzerEntry("config", "Config", "pw_config", "analyze_config"),
    AnalyzerEntry("tests", "Test Quality", "tests_quality", "analyze_tests_quality"),
    AnalyzerEntry("locators", "Locator Strategy", "locators", "analyze_locators"),
    AnalyzerEntry("flakiness", "Flakiness Risks", "flakiness", "analyze_flakiness"),
    AnalyzerEntry("reporting", "Reporting & Observability", "reporting_obs", "analyze_reporting_obs"),
    AnalyzerEntry("ci", "CI/CD Hygiene", "cicd_integration", "analyze_cicd_integration"),
    AnalyzerEntry("network", "Network/Route Mocks", "network_mocking", "analyze_network"),
    AnalyzerEntry("core", "Core Functionalities", "core_features", "analyze_core"),
    AnalyzerEntry("advanced", "Advanced Capabilities", "advanced", "analyze_advanced"),
    AnalyzerEntry("data", "Data Management", "data_mgmt", "analyze_data_mgmt"),
    AnalyzerEntry("best", "Best Practices Enforcement", "best_practices", "analyze_best_practices"),
    AnalyzerEntry("notify", "Notification", "notifications", "analyze_notifications"),
]
