"""Built-in analyzers for gatecheck."""

from ..core.registry import AnalyzerRegistry
from .best_practices import BroadExceptionAnalyzer
from .code_quality import TodoCommentAnalyzer
from .performance import DebugStatementAnalyzer
from .reliability import MergeConflictAnalyzer
from .security import EnvFileAnalyzer, HardcodedSecretAnalyzer

# Registration order is the canonical issue order
BUILTIN_ANALYZERS = [
    HardcodedSecretAnalyzer,
    EnvFileAnalyzer,
    DebugStatementAnalyzer,
    MergeConflictAnalyzer,
    TodoCommentAnalyzer,
    BroadExceptionAnalyzer,
]


def build_default_registry() -> AnalyzerRegistry:
    """Create a registry holding every built-in analyzer."""
    return AnalyzerRegistry(analyzer() for analyzer in BUILTIN_ANALYZERS)


__all__ = [
    "BUILTIN_ANALYZERS",
    "BroadExceptionAnalyzer",
    "DebugStatementAnalyzer",
    "EnvFileAnalyzer",
    "HardcodedSecretAnalyzer",
    "MergeConflictAnalyzer",
    "TodoCommentAnalyzer",
    "build_default_registry",
]
