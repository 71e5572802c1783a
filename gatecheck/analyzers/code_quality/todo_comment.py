"""TODO Comment Analyzer - Tracks unfinished work markers in comments."""

import re

from ...core.analyzer import AnalyzerDescriptor, Category, Severity
from ..base import PatternAnalyzer, rule

COMMENT_PREFIX = r'(#|//|/\*|\*|--)\s*'


class TodoCommentAnalyzer(PatternAnalyzer):
    """Reports TODO, FIXME, HACK, XXX and BUG comments.

    TODO is low, FIXME medium, HACK/XXX/BUG high.
    """

    descriptor = AnalyzerDescriptor(
        id="todo-comment",
        name="TODO Comment",
        category=Category.CODE_QUALITY,
        default_severity=Severity.LOW,
        run_in_ci=True,
        description="Tracks TODO, FIXME and HACK markers left in comments",
    )

    RULES = [
        rule(COMMENT_PREFIX + r'(HACK|XXX|BUG)\b.*', "HACK comment indicates a known problem", Severity.HIGH, re.IGNORECASE),
        rule(COMMENT_PREFIX + r'FIXME\b.*', "FIXME comment indicates broken code", Severity.MEDIUM, re.IGNORECASE),
        rule(COMMENT_PREFIX + r'TODO\b.*', "TODO comment indicates unfinished work", None, re.IGNORECASE),
    ]
