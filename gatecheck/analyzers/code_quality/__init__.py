"""Code quality analyzers."""

from .todo_comment import TodoCommentAnalyzer

__all__ = ["TodoCommentAnalyzer"]
