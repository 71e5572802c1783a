"""Parallel Executor Module - Runs selected analyzers concurrently."""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import psutil

from ..logging_config import get_logger
from .analyzer import Issue
from .codebase import CodebaseView
from .registry import AnalyzerRegistry

logger = get_logger(__name__)

ProgressCallback = Callable[[int, int, str], None]


@dataclass(frozen=True)
class AnalyzerExecutionFailed:
    """An analyzer raised instead of returning issues."""
    analyzer_id: str
    cause: str
    error_type: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "analyzer_id": self.analyzer_id,
            "cause": self.cause,
            "error_type": self.error_type,
        }


@dataclass(frozen=True)
class Incomplete:
    """The run was cut short; issues collected so far were kept."""
    reason: str
    cancelled: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"reason": self.reason, "cancelled": list(self.cancelled)}


@dataclass
class ExecutionResult:
    """Result of parallel execution of the selected analyzers."""
    issues: List[Issue] = field(default_factory=list)
    analyzer_ids: List[str] = field(default_factory=list)
    completed: List[str] = field(default_factory=list)
    failures: List[AnalyzerExecutionFailed] = field(default_factory=list)
    incomplete: Optional[Incomplete] = None
    durations_ms: Dict[str, int] = field(default_factory=dict)
    total_duration_ms: int = 0
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def all_failed(self) -> bool:
        """Check whether analyzers were selected and none of them succeeded."""
        return bool(self.analyzer_ids) and len(self.failures) == len(self.analyzer_ids)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "analyzer_ids": list(self.analyzer_ids),
            "completed": list(self.completed),
            "failures": [f.to_dict() for f in self.failures],
            "incomplete": self.incomplete.to_dict() if self.incomplete else None,
            "durations_ms": dict(self.durations_ms),
            "total_duration_ms": self.total_duration_ms,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


class ParallelExecutor:
    """Executes analyzers in parallel under one shared deadline."""

    MEMORY_POLL_INTERVAL = 0.05

    def __init__(
        self,
        registry: AnalyzerRegistry,
        max_concurrent: int = 4,
        timeout: float = 300,
        memory_limit: Optional[int] = None,
    ):
        """Initialize the parallel executor.

        Args:
            registry: Registry to resolve analyzer ids against
            max_concurrent: Maximum number of concurrent analyzers
            timeout: Wall-clock budget in seconds for the whole run
            memory_limit: Resident memory ceiling in bytes (None: unlimited)
        """
        self.registry = registry
        self.max_concurrent = max_concurrent
        self.timeout = timeout
        self.memory_limit = memory_limit

    async def execute(
        self,
        analyzer_ids: List[str],
        view: CodebaseView,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> ExecutionResult:
        """Execute the given analyzers against a codebase view.

        Args:
            analyzer_ids: Ids to run, usually from AnalyzerSelector
            view: Read-only codebase view shared by all analyzers
            progress_callback: Optional callback called with
                (completed_count, total_count, analyzer_id) as each analyzer ends

        Returns:
            ExecutionResult with issues in canonical order

        Raises:
            UnknownAnalyzerError: If an id is not registered
        """
        started_at = datetime.now()
        result = ExecutionResult(started_at=started_at, analyzer_ids=list(analyzer_ids))
        analyzers = [self.registry.analyzer(analyzer_id) for analyzer_id in analyzer_ids]

        collected: Dict[str, List[Issue]] = {}
        completed_count = 0
        total = len(analyzers)
        semaphore = asyncio.Semaphore(self.max_concurrent)
        loop = asyncio.get_running_loop()

        async def run_analyzer(analyzer) -> None:
            """Run a single analyzer with semaphore."""
            nonlocal completed_count
            async with semaphore:
                analyzer_started = loop.time()
                try:
                    issues = await analyzer.analyze(view)
                    collected[analyzer.id] = list(issues or [])
                    result.completed.append(analyzer.id)
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    logger.warning("Analyzer %s failed: %s", analyzer.id, e)
                    logger.debug("Analyzer %s traceback", analyzer.id, exc_info=True)
                    result.failures.append(
                        AnalyzerExecutionFailed(
                            analyzer_id=analyzer.id,
                            cause=str(e) or type(e).__name__,
                            error_type=type(e).__name__,
                        )
                    )
                finally:
                    result.durations_ms[analyzer.id] = int((loop.time() - analyzer_started) * 1000)

                completed_count += 1
                if progress_callback:
                    try:
                        progress_callback(completed_count, total, analyzer.id)
                    except Exception as e:
                        logger.warning("Progress callback failed after %s: %s", analyzer.id, e)

        tasks = {
            asyncio.ensure_future(run_analyzer(analyzer)): analyzer.id
            for analyzer in analyzers
        }

        if tasks:
            result.incomplete = await self._wait(tasks)

        result.issues = self._merge(collected)

        completed_at = datetime.now()
        result.completed_at = completed_at
        result.total_duration_ms = int(
            (completed_at - started_at).total_seconds() * 1000
        )
        logger.info(
            "Ran %d analyzers in %dms: %d issues, %d failures",
            len(result.completed), result.total_duration_ms,
            len(result.issues), len(result.failures),
        )
        return result

    async def _wait(self, tasks: Dict["asyncio.Future[None]", str]) -> Optional[Incomplete]:
        """Wait for all tasks, the deadline or the memory ceiling, whichever comes first."""
        monitor = None
        if self.memory_limit:
            monitor = asyncio.ensure_future(self._watch_memory(self.memory_limit))

        waiting = set(tasks)
        if monitor is not None:
            waiting.add(monitor)

        reason = None
        deadline = asyncio.get_running_loop().time() + self.timeout
        pending = set(tasks)
        while pending:
            remaining = deadline - asyncio.get_running_loop().time()
            if remaining <= 0:
                reason = f"timeout of {self.timeout:g}s exceeded"
                break
            done, _ = await asyncio.wait(
                waiting, timeout=remaining, return_when=asyncio.FIRST_COMPLETED
            )
            pending -= done
            waiting -= done
            if monitor is not None and monitor in done:
                try:
                    reason = monitor.result()
                except Exception as e:
                    logger.debug("Memory monitor traceback", exc_info=True)
                    reason = f"memory monitor failed: {type(e).__name__}: {e}"
                break

        if monitor is not None and not monitor.done():
            monitor.cancel()
            await asyncio.gather(monitor, return_exceptions=True)

        if not pending:
            return None

        cancelled = sorted(tasks[t] for t in pending)
        logger.warning("Run incomplete (%s); cancelling %s", reason, ", ".join(cancelled))
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        return Incomplete(reason=reason or "cancelled", cancelled=cancelled)

    async def _watch_memory(self, limit: int) -> str:
        """Return once resident memory of this process exceeds limit."""
        process = psutil.Process()
        while True:
            rss = process.memory_info().rss
            if rss > limit:
                return f"memory limit of {limit} bytes exceeded ({rss} bytes in use)"
            await asyncio.sleep(self.MEMORY_POLL_INTERVAL)

    def _merge(self, collected: Dict[str, List[Issue]]) -> List[Issue]:
        """Merge per-analyzer issues into canonical order: registry order, path, line."""
        keyed = [
            ((self.registry.order_of(analyzer_id), issue.path, issue.line), issue)
            for analyzer_id, issues in collected.items()
            for issue in issues
        ]
        keyed.sort(key=lambda pair: pair[0])
        return [issue for _, issue in keyed]
