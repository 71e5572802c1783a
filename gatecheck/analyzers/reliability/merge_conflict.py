"""Merge Conflict Analyzer - Detects unresolved merge conflict markers."""

from ...core.analyzer import AnalyzerDescriptor, Category, Severity
from ..base import PatternAnalyzer, rule


class MergeConflictAnalyzer(PatternAnalyzer):
    """Detects conflict markers left behind by an unfinished merge."""

    descriptor = AnalyzerDescriptor(
        id="merge-conflict-marker",
        name="Merge Conflict Marker",
        category=Category.RELIABILITY,
        default_severity=Severity.HIGH,
        run_in_ci=True,
        description="Detects unresolved merge conflict markers",
    )

    FILE_SUFFIXES = PatternAnalyzer.FILE_SUFFIXES + (
        ".yaml", ".yml", ".json", ".toml", ".ini", ".cfg", ".md", ".txt",
    )

    RULES = [
        rule(r'^<{7}( .*)?$', "Unresolved merge conflict marker"),
        rule(r'^>{7}( .*)?$', "Unresolved merge conflict marker"),
    ]
