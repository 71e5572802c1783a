"""Reliability analyzers."""

from .merge_conflict import MergeConflictAnalyzer

__all__ = ["MergeConflictAnalyzer"]
