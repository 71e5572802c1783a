"""Codebase View Module - Read-only view of the files handed to analyzers."""

import fnmatch
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from ..logging_config import get_logger

logger = get_logger(__name__)

# Directories never descended into
EXCLUDED_DIRS = {
    '.git', 'node_modules', 'venv', '.venv', 'env',
    '__pycache__', '.pytest_cache', '.mypy_cache', '.tox',
    'dist', 'build', '.eggs', '*.egg-info',
    'htmlcov', '.hypothesis', '.nox', 'vendor', 'site-packages',
}


@dataclass
class CodebaseView:
    """Files of a project, relative to its root.

    Analyzers only read from the view; the file cache is filled lazily and
    never changes content once a file has been read.
    """
    root: Path
    files: Tuple[str, ...] = ()
    max_file_size: int = 2 * 1024 * 1024
    _cache: Dict[str, str] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def discover(
        cls,
        root: Union[str, Path],
        paths: Optional[Iterable[str]] = None,
        excluded_paths: Optional[Iterable[str]] = None,
    ) -> "CodebaseView":
        """Walk a project and build a view of its files.

        Args:
            root: Project root directory
            paths: Sub-directories to analyze (all of root if empty)
            excluded_paths: fnmatch patterns of relative paths to skip,
                e.g. "storage/*"

        Returns:
            CodebaseView with sorted relative file paths
        """
        root_path = Path(root).resolve()
        excluded = list(excluded_paths or [])
        starts = [root_path / p for p in (paths or [])] or [root_path]

        found = set()
        for start in starts:
            if not start.exists():
                logger.debug("Skipping missing analysis path %s", start)
                continue
            if start.is_file():
                found.add(start.relative_to(root_path).as_posix())
                continue
            for file_path in cls._walk_directory(start):
                relative_path = file_path.relative_to(root_path).as_posix()
                if any(fnmatch.fnmatch(relative_path, pattern) for pattern in excluded):
                    continue
                found.add(relative_path)

        logger.debug("Discovered %d files under %s", len(found), root_path)
        return cls(root=root_path, files=tuple(sorted(found)))

    @staticmethod
    def _walk_directory(root_path: Path):
        """Walk through directory tree, yielding file paths."""
        for dirpath, dirnames, filenames in os.walk(root_path):
            dirnames[:] = sorted(
                d for d in dirnames
                if d not in EXCLUDED_DIRS and not any(
                    fnmatch.fnmatch(d, pattern) for pattern in EXCLUDED_DIRS
                )
            )
            for filename in filenames:
                yield Path(dirpath) / filename

    def files_with_suffix(self, *suffixes: str) -> List[str]:
        """Get relative paths ending with any of the given suffixes."""
        lowered = tuple(s.lower() for s in suffixes)
        return [f for f in self.files if f.lower().endswith(lowered)]

    def files_named(self, *names: str) -> List[str]:
        """Get relative paths whose file name is one of names."""
        wanted = {n.lower() for n in names}
        return [f for f in self.files if f.rsplit("/", 1)[-1].lower() in wanted]

    def absolute(self, relative_path: str) -> Path:
        """Resolve a relative path against the root."""
        return self.root / relative_path

    def read_text(self, relative_path: str) -> str:
        """Read a file of the view; unreadable or oversized files read as empty."""
        if relative_path in self._cache:
            return self._cache[relative_path]

        path = self.absolute(relative_path)
        try:
            if path.stat().st_size > self.max_file_size:
                content = ""
            else:
                content = path.read_text(encoding="utf-8", errors="ignore")
        except OSError as e:
            logger.debug("Cannot read %s: %s", path, e)
            content = ""

        self._cache[relative_path] = content
        return content

    def read_lines(self, relative_path: str) -> List[str]:
        """Read a file as a list of lines."""
        return self.read_text(relative_path).splitlines()
