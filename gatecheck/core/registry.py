"""Analyzer Registry Module - Explicit table of the analyzers known to a run."""

from typing import Dict, Iterable, List

from ..exceptions import DuplicateAnalyzerIdError, UnknownAnalyzerError
from .analyzer import AnalyzerDescriptor, BaseAnalyzer, Category


class AnalyzerRegistry:
    """Registry for managing available analyzers.

    Built once at start-up and read-only afterwards. Registration order is
    the canonical run and reporting order.
    """

    def __init__(self, analyzers: Iterable[BaseAnalyzer] = ()):
        """Initialize the registry.

        Args:
            analyzers: Analyzers to register, in order
        """
        self._analyzers: Dict[str, BaseAnalyzer] = {}
        self._order: Dict[str, int] = {}
        for analyzer in analyzers:
            self.register(analyzer)

    def register(self, analyzer: BaseAnalyzer) -> None:
        """Register an analyzer.

        Args:
            analyzer: Analyzer instance with a descriptor

        Raises:
            DuplicateAnalyzerIdError: If the id is already registered
        """
        analyzer_id = analyzer.descriptor.id
        if analyzer_id in self._analyzers:
            raise DuplicateAnalyzerIdError(analyzer_id)

        self._order[analyzer_id] = len(self._analyzers)
        self._analyzers[analyzer_id] = analyzer

    def get(self, analyzer_id: str) -> AnalyzerDescriptor:
        """Get the descriptor of an analyzer.

        Raises:
            UnknownAnalyzerError: If the id is not registered
        """
        return self.analyzer(analyzer_id).descriptor

    def analyzer(self, analyzer_id: str) -> BaseAnalyzer:
        """Get the analyzer instance for an id.

        Raises:
            UnknownAnalyzerError: If the id is not registered
        """
        try:
            return self._analyzers[analyzer_id]
        except KeyError:
            raise UnknownAnalyzerError(analyzer_id) from None

    def all(self) -> List[AnalyzerDescriptor]:
        """Get all descriptors in registration order."""
        return [a.descriptor for a in self._analyzers.values()]

    def by_category(self, category: Category) -> List[AnalyzerDescriptor]:
        """Get descriptors of one category in registration order."""
        return [d for d in self.all() if d.category == category]

    def order_of(self, analyzer_id: str) -> int:
        """Get the registration index of an analyzer.

        Raises:
            UnknownAnalyzerError: If the id is not registered
        """
        try:
            return self._order[analyzer_id]
        except KeyError:
            raise UnknownAnalyzerError(analyzer_id) from None

    def __contains__(self, analyzer_id: object) -> bool:
        return analyzer_id in self._analyzers

    def __len__(self) -> int:
        return len(self._analyzers)
