"""Analysis Engine Module - Runs selection, execution, suppression and scoring."""

import asyncio
from typing import Iterable, List, Optional

from ..config import RunConfig
from ..logging_config import get_logger
from .analyzer import Category
from .baseline import Baseline
from .codebase import CodebaseView
from .parallel_executor import ExecutionResult, ParallelExecutor, ProgressCallback
from .registry import AnalyzerRegistry
from .scorer import RunResult, Scorer
from .selector import AnalyzerSelector
from .suppression import InlineSuppressor

logger = get_logger(__name__)


class AnalysisEngine:
    """Orchestrates one analysis run.

    Config + registry -> selector -> executor -> inline suppression ->
    baseline -> scorer. The configuration and the baseline are read-only
    for the whole run.
    """

    def __init__(
        self,
        registry: AnalyzerRegistry,
        config: RunConfig,
        scorer: Optional[Scorer] = None,
    ):
        self.registry = registry
        self.config = config
        self.selector = AnalyzerSelector(registry)
        self.scorer = scorer or Scorer()

    def select(
        self,
        only_ids: Optional[Iterable[str]] = None,
        only_category: Optional[Category] = None,
    ) -> List[str]:
        """Get the analyzer ids this engine would run."""
        return self.selector.select(self.config, only_ids=only_ids, only_category=only_category)

    async def analyze(
        self,
        view: CodebaseView,
        baseline: Optional[Baseline] = None,
        only_ids: Optional[Iterable[str]] = None,
        only_category: Optional[Category] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> RunResult:
        """Analyze a codebase.

        Args:
            view: Codebase to analyze
            baseline: Accepted issues to suppress (None: suppress nothing)
            only_ids: Restrict the run to these analyzers
            only_category: Restrict the run to one category
            progress_callback: Called as each analyzer finishes

        Returns:
            RunResult with the verdict and diagnostics
        """
        analyzer_ids = self.select(only_ids=only_ids, only_category=only_category)
        logger.info("Running %d analyzers: %s", len(analyzer_ids), ", ".join(analyzer_ids))

        execution = await self.execute(analyzer_ids, view, progress_callback)

        issues, inline_suppressed = InlineSuppressor(view).filter(execution.issues)
        if inline_suppressed:
            logger.info("%d issues suppressed by inline comments", inline_suppressed)

        suppressed_count = 0
        if baseline is not None:
            filtered = baseline.filter(issues)
            issues, suppressed_count = filtered.kept, filtered.suppressed_count
            logger.info("%d issues suppressed by baseline", suppressed_count)

        result = self.scorer.decide(
            issues,
            self.config,
            suppressed_count=suppressed_count,
            execution=execution,
        )
        result.inline_suppressed_count = inline_suppressed

        logger.info(
            "Score %.1f, %s (%d blocking, %d informational)",
            result.score,
            "passed" if result.passed else "failed",
            len(result.blocking_issues),
            len(result.informational_issues),
        )
        return result

    async def execute(
        self,
        analyzer_ids: List[str],
        view: CodebaseView,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> ExecutionResult:
        """Run analyzers with the executor limits of the configuration."""
        executor = ParallelExecutor(
            self.registry,
            max_concurrent=self.config.max_concurrent,
            timeout=self.config.timeout,
            memory_limit=self.config.memory_limit,
        )
        return await executor.execute(analyzer_ids, view, progress_callback=progress_callback)

    def run(
        self,
        view: CodebaseView,
        baseline: Optional[Baseline] = None,
        only_ids: Optional[Iterable[str]] = None,
        only_category: Optional[Category] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> RunResult:
        """Synchronous wrapper around analyze()."""
        return asyncio.run(
            self.analyze(
                view,
                baseline=baseline,
                only_ids=only_ids,
                only_category=only_category,
                progress_callback=progress_callback,
            )
        )
