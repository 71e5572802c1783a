"""Best practices analyzers."""

from .broad_exception import BroadExceptionAnalyzer

__all__ = ["BroadExceptionAnalyzer"]
