"""Shared test helpers."""

import asyncio
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import pytest

from gatecheck.core.analyzer import AnalyzerDescriptor, BaseAnalyzer, Category, Issue, Severity
from gatecheck.core.codebase import CodebaseView


class StubAnalyzer(BaseAnalyzer):
    """Analyzer returning fixed findings, optionally slow or failing."""

    def __init__(
        self,
        analyzer_id: str,
        category: Category = Category.SECURITY,
        severity: Severity = Severity.CRITICAL,
        run_in_ci: bool = True,
        findings: Sequence[Tuple[str, int, str]] = (),
        error: Optional[Exception] = None,
        delay: float = 0.0,
    ):
        self.descriptor = AnalyzerDescriptor(
            id=analyzer_id,
            name=analyzer_id,
            category=category,
            default_severity=severity,
            run_in_ci=run_in_ci,
        )
        self.findings = list(findings)
        self.error = error
        self.delay = delay
        self.calls = 0

    async def analyze(self, view: CodebaseView) -> List[Issue]:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return [self._issue(path, line, message) for path, line, message in self.findings]


def make_issue(
    analyzer_id: str = "sec-a",
    path: str = "app/Foo.php",
    line: int = 1,
    severity: Severity = Severity.CRITICAL,
    message: str = "problem",
    fingerprint: Optional[str] = None,
) -> Issue:
    """Build an issue, with an explicit fingerprint when given."""
    if fingerprint is None:
        return Issue.create(analyzer_id, path, line, severity, message)
    return Issue(
        analyzer_id=analyzer_id,
        path=path,
        line=line,
        severity=severity,
        message=message,
        fingerprint=fingerprint,
    )


@pytest.fixture
def stub_analyzer():
    """Factory for StubAnalyzer instances."""
    return StubAnalyzer


@pytest.fixture
def issue_factory():
    """Factory for issues."""
    return make_issue


@pytest.fixture
def empty_view(tmp_path: Path) -> CodebaseView:
    """View of an empty project."""
    return CodebaseView(root=tmp_path)
