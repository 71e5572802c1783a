"""Broad Exception Analyzer - Detects exception handlers that catch everything."""

from ...core.analyzer import AnalyzerDescriptor, Category, Severity
from ..base import PatternAnalyzer, rule


class BroadExceptionAnalyzer(PatternAnalyzer):
    """Detects bare and catch-all exception handlers in Python and PHP code."""

    descriptor = AnalyzerDescriptor(
        id="broad-exception-catch",
        name="Broad Exception Catch",
        category=Category.BEST_PRACTICES,
        default_severity=Severity.MEDIUM,
        run_in_ci=True,
        description="Detects bare except clauses and catch-all handlers",
    )

    FILE_SUFFIXES = (".py", ".php")
    SKIP_COMMENT_LINES = True

    RULES = [
        rule(r'^\s*except\s*:', "Bare except clause catches every exception", Severity.HIGH),
        rule(r'^\s*except\s+BaseException\b', "Handler catches BaseException"),
        rule(r'\bcatch\s*\(\s*\\?(Throwable|Exception)\s+\$\w+\s*\)\s*\{\s*\}', "Empty catch-all handler swallows errors"),
    ]
