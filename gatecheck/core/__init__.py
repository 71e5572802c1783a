"""Core modules for gatecheck.

Only the issue model and the registry are re-exported here; the selector,
executor, baseline, scorer and engine depend on ``gatecheck.config`` and are
imported from their own modules.
"""

from .analyzer import AnalyzerDescriptor, BaseAnalyzer, Category, Issue, Severity
from .codebase import CodebaseView
from .fingerprint import compute_fingerprint, normalize_path
from .registry import AnalyzerRegistry

__all__ = [
    "AnalyzerDescriptor",
    "AnalyzerRegistry",
    "BaseAnalyzer",
    "Category",
    "CodebaseView",
    "Issue",
    "Severity",
    "compute_fingerprint",
    "normalize_path",
]
