"""Inline suppression of single issues through source comments.

Two placements are recognised:

- previous line: ``# @gatecheck-ignore [analyzer-id,...]``
- same line:     ``code  # @gatecheck-ignore [analyzer-id,...]``

Without ids the comment suppresses every analyzer on that line.
"""

import re
from typing import List, Tuple

from .analyzer import Issue
from .codebase import CodebaseView

IGNORE_PATTERN = re.compile(r"@gatecheck-ignore(?:[ \t]+([\w,-]+))?", re.IGNORECASE)


def line_has_suppression(line_content: str, analyzer_id: str) -> bool:
    """Check if a single line carries an ignore comment covering analyzer_id."""
    match = IGNORE_PATTERN.search(line_content)
    if not match:
        return False

    if match.group(1) is None:
        return True

    ids = [part.strip() for part in match.group(1).split(",")]
    return analyzer_id in ids


class InlineSuppressor:
    """Drops issues silenced by an ignore comment in the analyzed file."""

    def __init__(self, view: CodebaseView):
        self.view = view

    def is_suppressed(self, issue: Issue) -> bool:
        """Check the issue line and the line above it for an ignore comment."""
        if issue.line < 1:
            return False

        lines = self.view.read_lines(issue.path)
        for index in (issue.line - 1, issue.line - 2):
            if 0 <= index < len(lines) and line_has_suppression(lines[index], issue.analyzer_id):
                return True
        return False

    def filter(self, issues: List[Issue]) -> Tuple[List[Issue], int]:
        """Split issues into the kept ones and the count of suppressed ones."""
        kept = [issue for issue in issues if not self.is_suppressed(issue)]
        return kept, len(issues) - len(kept)
