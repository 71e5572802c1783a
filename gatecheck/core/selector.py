"""Analyzer Selector Module - Resolves configuration into the analyzers to run."""

from typing import Iterable, List, Optional

from ..config import RunConfig
from ..logging_config import get_logger
from .analyzer import Category
from .registry import AnalyzerRegistry

logger = get_logger(__name__)


class AnalyzerSelector:
    """Computes the run-set of analyzer ids for a configuration.

    Rules, in order:

    1. keep analyzers whose category is enabled;
    2. drop ``disabled_analyzers`` unconditionally;
    3. in CI mode, narrow to ``ci_mode_analyzers`` when it is non-empty
       (never re-adding a disabled analyzer), otherwise drop analyzers that
       do not run in CI by default; ``ci_mode_exclude_analyzers`` is
       removed last and wins over the whitelist.

    The result is always in registry order.
    """

    def __init__(self, registry: AnalyzerRegistry):
        self.registry = registry

    def select(
        self,
        config: RunConfig,
        only_ids: Optional[Iterable[str]] = None,
        only_category: Optional[Category] = None,
    ) -> List[str]:
        """Select analyzers for a run.

        Args:
            config: Run configuration
            only_ids: Further restrict the run to these ids
            only_category: Further restrict the run to one category

        Returns:
            Analyzer ids in registry order, possibly empty

        Raises:
            UnknownAnalyzerError: If only_ids names an unregistered analyzer
        """
        descriptors = self.registry.all()

        candidates = {
            d.id for d in descriptors if d.category in config.enabled_categories
        }
        candidates -= config.disabled_analyzer_ids

        if config.ci_mode:
            if config.ci_mode_whitelist:
                candidates &= config.ci_mode_whitelist
            else:
                candidates = {
                    d.id for d in descriptors if d.id in candidates and d.run_in_ci
                }
            candidates -= config.ci_mode_blacklist

        if only_ids is not None:
            wanted = set(only_ids)
            for analyzer_id in wanted:
                self.registry.get(analyzer_id)
            candidates &= wanted

        if only_category is not None:
            candidates = {
                d.id for d in descriptors if d.id in candidates and d.category == only_category
            }

        selected = [d.id for d in descriptors if d.id in candidates]
        logger.debug(
            "Selected %d of %d analyzers (ci_mode=%s)",
            len(selected), len(descriptors), config.ci_mode,
        )
        return selected
