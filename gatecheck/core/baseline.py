"""Baseline Module - Suppresses previously accepted issues.

A baseline file is a JSON document of the form::

    {
      "generated_at": "...",
      "generator": "gatecheck baseline",
      "version": "1.0.0",
      "total_issues": 2,
      "errors": {
        "hardcoded-secret": [
          {"path": "app/settings.py", "fingerprint": "3f1c...", "line": 12, "message": "..."},
          {"path": "legacy/*", "fingerprint": "*"}
        ]
      }
    }

``path`` is an exact relative path or a wildcard pattern, ``fingerprint`` is
an issue fingerprint or ``"*"`` for every issue of the analyzer on matching
paths. The file is only written by the explicit baseline command; a run
reads it once and never modifies it.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from ..exceptions import CorruptBaselineError
from ..logging_config import get_logger
from .analyzer import Issue
from .fingerprint import normalize_path

logger = get_logger(__name__)

WILDCARD = "*"
BASELINE_VERSION = "1.0.0"
GENERATOR = "gatecheck baseline"


def match_path(pattern: str, path: str) -> bool:
    """Match a relative path against a baseline path pattern.

    Matching is segment-wise on "/"-separated paths:

    - a segment ``**`` matches any run of segments, including none;
    - a segment ``*`` matches any run of one or more segments;
    - a segment containing ``*`` matches one or more path segments,
      with ``*`` also absorbing the "/" between them, so ``app/*.php``
      covers ``app/sub/Foo.php``;
    - any other segment is matched against exactly one path segment.

    Args:
        pattern: Exact path or wildcard pattern
        path: Relative path of an issue

    Returns:
        True if the pattern covers the path
    """
    pattern = normalize_path(pattern)
    path = normalize_path(path)
    if pattern == path:
        return True

    pattern_parts = pattern.split("/")
    path_parts = path.split("/")
    memo: Dict[tuple, bool] = {}

    def match_from(pi: int, si: int) -> bool:
        key = (pi, si)
        if key in memo:
            return memo[key]

        if pi == len(pattern_parts):
            matched = si == len(path_parts)
        else:
            segment = pattern_parts[pi]
            if segment == "**":
                matched = any(match_from(pi + 1, k) for k in range(si, len(path_parts) + 1))
            elif segment == "*":
                matched = any(match_from(pi + 1, k) for k in range(si + 1, len(path_parts) + 1))
            elif "*" in segment:
                matched = any(
                    fnmatchcase("/".join(path_parts[si:k]), segment) and match_from(pi + 1, k)
                    for k in range(si + 1, len(path_parts) + 1)
                )
            else:
                matched = (
                    si < len(path_parts)
                    and fnmatchcase(path_parts[si], segment)
                    and match_from(pi + 1, si + 1)
                )

        memo[key] = matched
        return matched

    return match_from(0, 0)


@dataclass(frozen=True)
class BaselineEntry:
    """One accepted issue, or a wildcard covering many."""
    analyzer_id: str
    path_pattern: str
    fingerprint: str
    line: Optional[int] = None
    message: Optional[str] = None

    def matches(self, issue: Issue) -> bool:
        """Check whether this entry covers an issue of the same analyzer."""
        if self.fingerprint != WILDCARD and self.fingerprint != issue.fingerprint:
            return False
        return match_path(self.path_pattern, issue.path)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the baseline file form."""
        data: Dict[str, Any] = {"path": self.path_pattern, "fingerprint": self.fingerprint}
        if self.line is not None:
            data["line"] = self.line
        if self.message is not None:
            data["message"] = self.message
        return data


@dataclass
class BaselineFilterResult:
    """Outcome of filtering issues against a baseline."""
    kept: List[Issue]
    suppressed_count: int


@dataclass
class Baseline:
    """Accepted issues keyed by analyzer id."""
    entries: Dict[str, List[BaselineEntry]] = field(default_factory=dict)
    generated_at: Optional[str] = None

    @property
    def total_entries(self) -> int:
        """Get the number of entries across all analyzers."""
        return sum(len(e) for e in self.entries.values())

    def is_empty(self) -> bool:
        """Check whether the baseline has no entries."""
        return self.total_entries == 0

    def entries_for(self, analyzer_id: str) -> List[BaselineEntry]:
        """Get the entries of one analyzer, in file order."""
        return self.entries.get(analyzer_id, [])

    def contains(self, issue: Issue) -> bool:
        """Check whether an issue was accepted in the baseline."""
        return any(entry.matches(issue) for entry in self.entries_for(issue.analyzer_id))

    def filter(self, issues: List[Issue]) -> BaselineFilterResult:
        """Drop baselined issues.

        Does not modify the baseline or the issues, so filtering the same
        issues twice yields the same result.

        Args:
            issues: Issues in canonical order

        Returns:
            BaselineFilterResult with the remaining issues, order preserved
        """
        kept = [issue for issue in issues if not self.contains(issue)]
        return BaselineFilterResult(kept=kept, suppressed_count=len(issues) - len(kept))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the baseline file form."""
        return {
            "generated_at": self.generated_at or datetime.now().isoformat(),
            "generator": GENERATOR,
            "version": BASELINE_VERSION,
            "total_issues": self.total_entries,
            "errors": {
                analyzer_id: [e.to_dict() for e in entries]
                for analyzer_id, entries in self.entries.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Any, source: Union[str, Path] = "<baseline>") -> "Baseline":
        """Create a baseline from its file form.

        Raises:
            CorruptBaselineError: If the document does not have the expected shape
        """
        if not isinstance(data, dict):
            raise CorruptBaselineError(source, "top-level value must be an object")

        errors = data.get("errors", {})
        if not isinstance(errors, dict):
            raise CorruptBaselineError(source, '"errors" must map analyzer ids to lists')

        entries: Dict[str, List[BaselineEntry]] = {}
        for analyzer_id, raw_entries in errors.items():
            if not isinstance(raw_entries, list):
                raise CorruptBaselineError(source, f"entries of {analyzer_id!r} must be a list")
            entries[analyzer_id] = [
                cls._entry_from_dict(analyzer_id, raw, source) for raw in raw_entries
            ]

        generated_at = data.get("generated_at")
        return cls(
            entries=entries,
            generated_at=str(generated_at) if generated_at is not None else None,
        )

    @staticmethod
    def _entry_from_dict(analyzer_id: str, raw: Any, source: Union[str, Path]) -> BaselineEntry:
        if not isinstance(raw, dict):
            raise CorruptBaselineError(source, f"entry of {analyzer_id!r} must be an object")

        path = raw.get("path")
        # "hash" is accepted for files written by older generators
        fingerprint = raw.get("fingerprint", raw.get("hash"))
        if not isinstance(path, str) or not path:
            raise CorruptBaselineError(source, f"entry of {analyzer_id!r} has no path")
        if not isinstance(fingerprint, str) or not fingerprint:
            raise CorruptBaselineError(source, f"entry of {analyzer_id!r} has no fingerprint")

        line = raw.get("line")
        message = raw.get("message")
        return BaselineEntry(
            analyzer_id=analyzer_id,
            path_pattern=path,
            fingerprint=fingerprint,
            line=line if isinstance(line, int) and not isinstance(line, bool) else None,
            message=message if isinstance(message, str) else None,
        )


def load_baseline(path: Union[str, Path]) -> Baseline:
    """Load a baseline file.

    Args:
        path: Path of the JSON baseline file

    Returns:
        The baseline; empty when the file does not exist

    Raises:
        CorruptBaselineError: If the file exists but cannot be parsed
    """
    path = Path(path)
    if not path.exists():
        logger.info("No baseline file at %s", path)
        return Baseline()

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, UnicodeDecodeError) as e:
        raise CorruptBaselineError(path, f"cannot read file: {e}") from e
    except json.JSONDecodeError as e:
        raise CorruptBaselineError(path, f"invalid JSON: {e}") from e

    baseline = Baseline.from_dict(raw, source=path)
    logger.info("Loaded baseline with %d entries from %s", baseline.total_entries, path)
    return baseline


def generate_baseline(issues: Iterable[Issue], existing: Optional[Baseline] = None) -> Baseline:
    """Build a baseline accepting every given issue.

    Args:
        issues: Issues to accept, typically the blocking issues of a run
        existing: Baseline to merge into; its entries are kept first and
            issues it already contains are not added twice

    Returns:
        New Baseline; existing is not modified
    """
    entries: Dict[str, List[BaselineEntry]] = {}
    seen = set()
    if existing is not None:
        for analyzer_id, analyzer_entries in existing.entries.items():
            entries[analyzer_id] = list(analyzer_entries)
            seen.update((analyzer_id, e.path_pattern, e.fingerprint) for e in analyzer_entries)

    for issue in issues:
        key = (issue.analyzer_id, issue.path, issue.fingerprint)
        if key in seen or (existing is not None and existing.contains(issue)):
            continue
        seen.add(key)
        entries.setdefault(issue.analyzer_id, []).append(
            BaselineEntry(
                analyzer_id=issue.analyzer_id,
                path_pattern=issue.path,
                fingerprint=issue.fingerprint,
                line=issue.line,
                message=issue.message,
            )
        )

    return Baseline(
        entries=entries,
        generated_at=datetime.now().isoformat(),
    )


def save_baseline(baseline: Baseline, path: Union[str, Path]) -> Path:
    """Write a baseline file, replacing any previous one."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(baseline.to_dict(), f, indent=2)
        f.write("\n")

    logger.info("Saved baseline with %d entries to %s", baseline.total_entries, path)
    return path
