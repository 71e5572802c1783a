"""Analyzer Module - Defines the issue model and the base class for analyzers."""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..exceptions import InvalidConfigError
from .codebase import CodebaseView
from .fingerprint import compute_fingerprint, normalize_path


class Severity(Enum):
    """Severity levels for issues, ordered critical > high > medium > low."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Get ordinal rank, higher is more severe."""
        ranks = {
            Severity.CRITICAL: 4,
            Severity.HIGH: 3,
            Severity.MEDIUM: 2,
            Severity.LOW: 1,
        }
        return ranks[self]

    @property
    def weight(self) -> int:
        """Get score penalty for one blocking issue of this severity."""
        weights = {
            Severity.CRITICAL: 25,
            Severity.HIGH: 15,
            Severity.MEDIUM: 5,
            Severity.LOW: 1,
        }
        return weights[self]

    @property
    def color(self) -> str:
        """Get color code for severity."""
        colors = {
            Severity.CRITICAL: "red",
            Severity.HIGH: "orange1",
            Severity.MEDIUM: "yellow",
            Severity.LOW: "blue",
        }
        return colors[self]

    def is_at_least(self, other: "Severity") -> bool:
        """Check whether this severity is as severe as other or more."""
        return self.rank >= other.rank

    @classmethod
    def parse(cls, value: str, key: str = "severity") -> "Severity":
        """Parse a severity name, case-insensitively.

        Raises:
            InvalidConfigError: If the name is not a known severity
        """
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidConfigError(
                key, value, f"expected one of {', '.join(s.value for s in cls)}"
            ) from None


class Category(Enum):
    """Categories of analyzers."""
    SECURITY = "security"
    PERFORMANCE = "performance"
    RELIABILITY = "reliability"
    CODE_QUALITY = "code_quality"
    BEST_PRACTICES = "best_practices"

    @classmethod
    def parse(cls, value: str, key: str = "category") -> "Category":
        """Parse a category name.

        Raises:
            InvalidConfigError: If the name is not a known category
        """
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidConfigError(
                key, value, f"expected one of {', '.join(c.value for c in cls)}"
            ) from None


@dataclass(frozen=True)
class Issue:
    """A single issue reported by an analyzer."""
    analyzer_id: str
    path: str
    line: int
    severity: Severity
    message: str
    fingerprint: str
    snippet: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self):
        if self.line < 0:
            raise ValueError(f"Issue line must be >= 0, got {self.line}")

    @classmethod
    def create(
        cls,
        analyzer_id: str,
        path: str,
        line: int,
        severity: Severity,
        message: str,
        snippet: Optional[str] = None,
        construct: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "Issue":
        """Create an issue with a normalized path and a derived fingerprint.

        Args:
            analyzer_id: Id of the reporting analyzer
            path: File path relative to the project root
            line: 1-based line number, 0 when the issue has no line
            severity: Severity of the issue
            message: Human readable message
            snippet: Source excerpt shown in reports
            construct: Code construct the fingerprint is derived from;
                the message is used when omitted
            metadata: Extra analyzer-specific data

        Returns:
            New Issue instance
        """
        normalized_path = normalize_path(path)
        return cls(
            analyzer_id=analyzer_id,
            path=normalized_path,
            line=line,
            severity=severity,
            message=message,
            snippet=snippet,
            fingerprint=compute_fingerprint(
                analyzer_id, normalized_path, construct if construct else message
            ),
            metadata=dict(metadata or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert issue to dictionary."""
        return {
            "analyzer_id": self.analyzer_id,
            "path": self.path,
            "line": self.line,
            "severity": self.severity.value,
            "message": self.message,
            "snippet": self.snippet,
            "fingerprint": self.fingerprint,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Issue":
        """Create issue from dictionary."""
        return cls(
            analyzer_id=data["analyzer_id"],
            path=data["path"],
            line=data.get("line", 0),
            severity=Severity(data["severity"]),
            message=data["message"],
            snippet=data.get("snippet"),
            fingerprint=data["fingerprint"],
            metadata=data.get("metadata", {}),
        )


@dataclass(frozen=True)
class AnalyzerDescriptor:
    """Static description of an analyzer."""
    id: str
    name: str
    category: Category
    default_severity: Severity
    run_in_ci: bool = True
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert descriptor to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "default_severity": self.default_severity.value,
            "run_in_ci": self.run_in_ci,
            "description": self.description,
        }


class BaseAnalyzer(ABC):
    """Abstract base class for all analyzers."""

    descriptor: AnalyzerDescriptor

    @property
    def id(self) -> str:
        """Get the analyzer id."""
        return self.descriptor.id

    @abstractmethod
    async def analyze(self, view: CodebaseView) -> List[Issue]:
        """Inspect the codebase.

        Implementations must not mutate the view and should await
        ``_checkpoint()`` between files so a cancelled run stops promptly.

        Args:
            view: Read-only view of the codebase

        Returns:
            Issues found, possibly empty
        """
        pass

    def _issue(
        self,
        path: str,
        line: int,
        message: str,
        severity: Optional[Severity] = None,
        snippet: Optional[str] = None,
        construct: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Issue:
        """Create an issue attributed to this analyzer."""
        return Issue.create(
            analyzer_id=self.descriptor.id,
            path=path,
            line=line,
            severity=severity or self.descriptor.default_severity,
            message=message,
            snippet=snippet,
            construct=construct,
            metadata=metadata,
        )

    async def _checkpoint(self) -> None:
        """Yield to the event loop; raises CancelledError once the run is cancelled."""
        await asyncio.sleep(0)
