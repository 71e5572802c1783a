"""Stable issue identities for baseline matching.

A fingerprint is derived from the analyzer id, the normalized file path and
a normalized form of the code construct that triggered the issue. The line
number is deliberately left out so that edits elsewhere in a file do not
invalidate baseline entries.
"""

import hashlib
import re
from typing import Optional

_WHITESPACE = re.compile(r"\s+")
_DUPLICATE_SLASHES = re.compile(r"/{2,}")


def normalize_path(file_path: Optional[str]) -> str:
    """Normalize file path for consistent fingerprinting.

    Converts backslashes, drops leading "./" and "/" and collapses repeated
    separators, so "./app//Foo.php", "/app/Foo.php" and "app\\Foo.php" all
    normalize to "app/Foo.php".

    Args:
        file_path: The file path to normalize

    Returns:
        Normalized file path
    """
    if not file_path:
        return ""

    normalized = file_path.replace("\\", "/")
    normalized = _DUPLICATE_SLASHES.sub("/", normalized)

    while normalized.startswith("./"):
        normalized = normalized[2:]

    return normalized.lstrip("/")


def normalize_construct(text: Optional[str]) -> str:
    """Collapse whitespace runs in a code construct."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip()


def compute_fingerprint(analyzer_id: str, file_path: str, construct: Optional[str]) -> str:
    """Generate the fingerprint of an issue.

    Args:
        analyzer_id: Id of the analyzer reporting the issue
        file_path: Path of the file, relative to the project root
        construct: Source text of the offending construct

    Returns:
        Hex sha256 digest
    """
    components = [
        analyzer_id,
        normalize_path(file_path),
        normalize_construct(construct),
    ]
    combined = "|".join(components)
    return hashlib.sha256(combined.encode("utf-8")).hexdigest()
