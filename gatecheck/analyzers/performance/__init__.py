"""Performance analyzers."""

from .debug_statement import DebugStatementAnalyzer

__all__ = ["DebugStatementAnalyzer"]
