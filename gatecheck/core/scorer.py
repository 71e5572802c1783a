"""Scorer Module - Classifies issues and renders the pass/fail verdict."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..config import FAIL_NEVER, RunConfig
from .analyzer import Issue, Severity
from .parallel_executor import AnalyzerExecutionFailed, ExecutionResult, Incomplete

MAX_SCORE = 100.0


@dataclass
class RunResult:
    """Outcome of one analysis run, handed to reporting."""
    all_issues: List[Issue] = field(default_factory=list)
    suppressed_count: int = 0
    blocking_issues: List[Issue] = field(default_factory=list)
    informational_issues: List[Issue] = field(default_factory=list)
    score: float = MAX_SCORE
    passed: bool = True
    failures: List[AnalyzerExecutionFailed] = field(default_factory=list)
    incomplete: Optional[Incomplete] = None
    analyzers_run: List[str] = field(default_factory=list)
    inline_suppressed_count: int = 0
    duration_ms: int = 0
    fail_on: str = Severity.CRITICAL.value
    fail_threshold: Optional[float] = None

    @property
    def is_incomplete(self) -> bool:
        """Check whether the run was cut short by a timeout or memory limit."""
        return self.incomplete is not None

    @property
    def exit_code(self) -> int:
        """Get the process exit code: 0 when passed, 1 otherwise."""
        return 0 if self.passed else 1

    @property
    def grade(self) -> str:
        """Get letter grade for the score."""
        if self.score >= 90:
            return "A"
        elif self.score >= 80:
            return "B"
        elif self.score >= 70:
            return "C"
        elif self.score >= 60:
            return "D"
        else:
            return "F"

    @property
    def severity_counts(self) -> Dict[str, int]:
        """Count blocking issues per severity."""
        counts = {s.value: 0 for s in Severity}
        for issue in self.blocking_issues:
            counts[issue.severity.value] += 1
        return counts

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        blocking = {id(i) for i in self.blocking_issues}
        return {
            "passed": self.passed,
            "score": round(self.score, 2),
            "grade": self.grade,
            "fail_on": self.fail_on,
            "fail_threshold": self.fail_threshold,
            "total_issues": len(self.all_issues),
            "blocking_count": len(self.blocking_issues),
            "informational_count": len(self.informational_issues),
            "suppressed_count": self.suppressed_count,
            "inline_suppressed_count": self.inline_suppressed_count,
            "severity_counts": self.severity_counts,
            "analyzers_run": list(self.analyzers_run),
            "failures": [f.to_dict() for f in self.failures],
            "incomplete": self.incomplete.to_dict() if self.incomplete else None,
            "duration_ms": self.duration_ms,
            "issues": [
                dict(i.to_dict(), blocking=id(i) in blocking) for i in self.all_issues
            ],
        }


class Scorer:
    """Computes the score and the pass/fail decision of a run.

    Each blocking issue deducts its severity weight from 100 (critical 25,
    high 15, medium 5, low 1) and the score is clamped to [0, 100].
    """

    def calculate_score(self, blocking_issues: List[Issue]) -> float:
        """Calculate the score of a set of blocking issues.

        Args:
            blocking_issues: Issues that count toward the verdict

        Returns:
            Score in [0, 100]; 100 when there are no issues
        """
        penalty = sum(issue.severity.weight for issue in blocking_issues)
        return max(0.0, min(MAX_SCORE, MAX_SCORE - penalty))

    def decide(
        self,
        issues: List[Issue],
        config: RunConfig,
        suppressed_count: int = 0,
        execution: Optional[ExecutionResult] = None,
    ) -> RunResult:
        """Classify issues and decide whether the run passes.

        Args:
            issues: Issues left after suppression, in canonical order
            config: Run configuration (dont_report, fail_on, fail_threshold)
            suppressed_count: Number of issues removed by the baseline
            execution: Execution diagnostics to attach to the result

        Returns:
            RunResult with the verdict
        """
        blocking: List[Issue] = []
        informational: List[Issue] = []
        for issue in issues:
            if issue.analyzer_id in config.dont_report_ids:
                informational.append(issue)
            else:
                blocking.append(issue)

        score = self.calculate_score(blocking)
        passed = self._is_passing(blocking, score, config, execution)

        result = RunResult(
            all_issues=list(issues),
            suppressed_count=suppressed_count,
            blocking_issues=blocking,
            informational_issues=informational,
            score=score,
            passed=passed,
            fail_on=config.fail_on.value if config.fail_on else FAIL_NEVER,
            fail_threshold=config.fail_threshold,
        )
        if execution is not None:
            result.failures = list(execution.failures)
            result.incomplete = execution.incomplete
            result.analyzers_run = list(execution.analyzer_ids)
            result.duration_ms = execution.total_duration_ms
        return result

    def _is_passing(
        self,
        blocking: List[Issue],
        score: float,
        config: RunConfig,
        execution: Optional[ExecutionResult],
    ) -> bool:
        """Apply the failure gates; any one of them fails the run."""
        if config.fail_on is None:
            return True

        if any(issue.severity.is_at_least(config.fail_on) for issue in blocking):
            return False

        if config.fail_threshold is not None and score < config.fail_threshold:
            return False

        # No analyzer managed to run, so there is nothing to vouch for
        if execution is not None and execution.all_failed:
            return False

        return True
