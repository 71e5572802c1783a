"""Line-oriented regex analyzer shared by the built-in analyzers."""

import re
from typing import Dict, List, Match, Optional, Pattern, Sequence, Tuple

from ..core.analyzer import BaseAnalyzer, Issue, Severity
from ..core.codebase import CodebaseView
from ..core.fingerprint import normalize_construct

# (compiled pattern, message, severity or None for the analyzer default)
PatternRule = Tuple[Pattern[str], str, Optional[Severity]]

SOURCE_SUFFIXES = (".py", ".php", ".js", ".ts", ".jsx", ".tsx", ".rb", ".go", ".java")


def rule(pattern: str, message: str, severity: Optional[Severity] = None, flags: int = 0) -> PatternRule:
    """Build a pattern rule."""
    return (re.compile(pattern, flags), message, severity)


class PatternAnalyzer(BaseAnalyzer):
    """Reports every line of the selected files that matches one of RULES.

    The fingerprint construct is the whitespace-normalized source line, so
    an offending line keeps its fingerprint when it moves within a file
    while different lines hitting the same rule stay distinct.
    """

    FILE_SUFFIXES: Sequence[str] = SOURCE_SUFFIXES
    FILE_NAMES: Sequence[str] = ()
    RULES: Sequence[PatternRule] = ()
    SKIP_COMMENT_LINES = False

    def target_files(self, view: CodebaseView) -> List[str]:
        """Get the files of the view this analyzer inspects."""
        selected = set(view.files_with_suffix(*self.FILE_SUFFIXES)) if self.FILE_SUFFIXES else set()
        if self.FILE_NAMES:
            selected.update(view.files_named(*self.FILE_NAMES))
        return sorted(selected)

    async def analyze(self, view: CodebaseView) -> List[Issue]:
        issues: List[Issue] = []
        for relative_path in self.target_files(view):
            await self._checkpoint()
            seen: Dict[str, int] = {}
            for line_number, line in enumerate(view.read_lines(relative_path), 1):
                if self.SKIP_COMMENT_LINES and self._is_comment(line):
                    continue
                key = normalize_construct(line)
                occurrence = seen.get(key, 0)
                seen[key] = occurrence + 1
                issues.extend(self.check_line(relative_path, line_number, line, occurrence))
        return issues

    def check_line(self, path: str, line_number: int, line: str, occurrence: int = 0) -> List[Issue]:
        """Apply RULES to one line; the first accepted match wins.

        occurrence counts earlier identical lines in the same file, so
        repeated copies of one line keep distinct fingerprints.
        """
        construct = line.strip()
        if occurrence:
            construct = f"{construct}#{occurrence}"
        for pattern, message, severity in self.RULES:
            for match in pattern.finditer(line):
                if not self.accept(match):
                    continue
                return [
                    self._issue(
                        path=path,
                        line=line_number,
                        message=message,
                        severity=severity,
                        snippet=line.strip(),
                        construct=construct,
                    )
                ]
        return []

    def accept(self, match: Match[str]) -> bool:
        """Hook to reject a match, e.g. a known placeholder value."""
        return True

    @staticmethod
    def _is_comment(line: str) -> bool:
        stripped = line.strip()
        return stripped.startswith(("#", "//", "--", "*", "/*"))
