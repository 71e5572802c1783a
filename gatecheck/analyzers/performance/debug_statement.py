"""Debug Statement Analyzer - Detects leftover debugging calls."""

from ...core.analyzer import AnalyzerDescriptor, Category, Severity
from ..base import PatternAnalyzer, rule


class DebugStatementAnalyzer(PatternAnalyzer):
    """Detects debugger breakpoints and dump calls left in source code."""

    descriptor = AnalyzerDescriptor(
        id="debug-statement",
        name="Debug Statement",
        category=Category.PERFORMANCE,
        default_severity=Severity.MEDIUM,
        run_in_ci=True,
        description="Detects debugger breakpoints and dump calls left in code",
    )

    SKIP_COMMENT_LINES = True

    RULES = [
        rule(r'\b(pdb|ipdb|pudb)\.set_trace\(\)', "Debugger breakpoint left in code", Severity.HIGH),
        rule(r'^\s*breakpoint\(\)', "Debugger breakpoint left in code", Severity.HIGH),
        rule(r'^\s*debugger\s*;?\s*$', "Debugger statement left in code", Severity.HIGH),
        rule(r'(?<![\w.>:$])(var_dump|print_r|dd)\s*\(', "Debug dump call left in code"),
        rule(r'\bconsole\.(log|debug|trace)\s*\(', "Console debug output left in code"),
    ]
