"""
Core components for audit system.

Contains:
- Data models (Finding, Category, AuditResult) and output normalization
- Scoring engine
- Analyzer registry and resilient runner
- Per-run file cache
"""
