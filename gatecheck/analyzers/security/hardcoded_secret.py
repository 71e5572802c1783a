"""Hardcoded Secret Analyzer - Detects credentials committed to source and config files."""

import re
from typing import List, Match

from ...core.analyzer import AnalyzerDescriptor, Category, Issue, Severity
from ..base import PatternAnalyzer, rule

CONFIG_SUFFIXES = (
    ".yaml", ".yml", ".json", ".ini", ".toml", ".conf", ".properties", ".env",
)


class HardcodedSecretAnalyzer(PatternAnalyzer):
    """Detects hardcoded passwords, API keys, tokens and private keys."""

    descriptor = AnalyzerDescriptor(
        id="hardcoded-secret",
        name="Hardcoded Secret",
        category=Category.SECURITY,
        default_severity=Severity.CRITICAL,
        run_in_ci=True,
        description="Detects credentials hardcoded in source and configuration files",
    )

    FILE_SUFFIXES = PatternAnalyzer.FILE_SUFFIXES + CONFIG_SUFFIXES
    SKIP_COMMENT_LINES = True

    RULES = [
        rule(r'-----BEGIN\s+(RSA\s+|EC\s+|PGP\s+)?PRIVATE\s+KEY-----', "Private key detected"),
        rule(r'AKIA[0-9A-Z]{16}', "AWS Access Key ID detected"),
        rule(r'gh[pousr]_[a-zA-Z0-9]{36}', "GitHub token detected"),
        rule(r'xox[baprs]-[0-9]{10,13}-[0-9]{10,13}[a-zA-Z0-9-]*', "Slack token detected"),
        rule(
            r'(mysql|postgresql|postgres|mongodb|redis)://[^"\'\s:]+:[^@"\'\s]+@',
            "Database connection string with credentials",
        ),
        rule(
            r'(password|passwd|secret)\s*[=:]\s*["\']([^"\'\s]{4,})["\']',
            "Hardcoded password detected",
            flags=re.IGNORECASE,
        ),
        rule(
            r'(api[_-]?key|access[_-]?token|auth[_-]?token)\s*[=:]\s*["\']([a-zA-Z0-9_\-]{8,})["\']',
            "API key or token detected",
            severity=Severity.HIGH,
            flags=re.IGNORECASE,
        ),
    ]

    # Known placeholder values
    SAFE_VALUES = {
        'password', 'changeme', 'changeit', 'secret', 'mysecret',
        'example', 'your-password', 'your-secret', 'placeholder', 'replace-me',
    }

    def check_line(self, path: str, line_number: int, line: str, occurrence: int = 0) -> List[Issue]:
        return [self._masked(issue) for issue in super().check_line(path, line_number, line, occurrence)]

    def accept(self, match: Match[str]) -> bool:
        """Reject assignments whose matched value is a placeholder."""
        if match.lastindex is None or match.lastindex < 2:
            return True
        return not self._is_placeholder(match.group(2))

    def _is_placeholder(self, value: str) -> bool:
        """Check if the assigned value is a known placeholder or an env reference."""
        value = value.strip().lower()
        return (
            value in self.SAFE_VALUES
            or re.match(r'^(\$\{.*\}|\$\(.*\)|<.*>|\{\{.*\}\}|\*+|x+)$', value) is not None
        )

    @staticmethod
    def _masked(issue: Issue) -> Issue:
        """Replace the snippet with a masked version; the fingerprint is unchanged."""
        snippet = issue.snippet or ""
        if len(snippet) > 12:
            snippet = snippet[:6] + "*" * (len(snippet) - 9) + snippet[-3:]
        else:
            snippet = "*" * len(snippet)
        return Issue(
            analyzer_id=issue.analyzer_id,
            path=issue.path,
            line=issue.line,
            severity=issue.severity,
            message=issue.message,
            fingerprint=issue.fingerprint,
            snippet=snippet,
            metadata=issue.metadata,
        )
