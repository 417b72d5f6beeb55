"""
Report writers: JSON, self-contained HTML dashboard, console summary.
"""

from .generator import ReportGenerator

__all__ = ["ReportGenerator"]
