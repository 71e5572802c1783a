"""Exception hierarchy for gatecheck."""

from pathlib import Path
from typing import Any, Dict, Optional, Union


class GatecheckError(Exception):
    """Base exception for all gatecheck errors."""

    def __init__(self, message: str, details: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class ConfigurationError(GatecheckError):
    """Base class for configuration-related errors."""

    pass


class InvalidConfigError(ConfigurationError):
    """Raised when a configuration value is invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration for {key}: {value!r}",
            details={"key": key, "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason


class RegistryError(GatecheckError):
    """Base class for analyzer registry errors."""

    pass


class DuplicateAnalyzerIdError(RegistryError):
    """Raised when an analyzer id is registered twice."""

    def __init__(self, analyzer_id: str):
        super().__init__(f"Analyzer already registered: {analyzer_id}")
        self.analyzer_id = analyzer_id


class UnknownAnalyzerError(RegistryError):
    """Raised when an analyzer id is not in the registry."""

    def __init__(self, analyzer_id: str):
        super().__init__(f"Unknown analyzer: {analyzer_id}")
        self.analyzer_id = analyzer_id


class BaselineError(GatecheckError):
    """Base class for baseline errors."""

    pass


class CorruptBaselineError(BaselineError):
    """Raised when a baseline file exists but cannot be parsed."""

    def __init__(self, path: Union[str, Path], reason: str):
        super().__init__(
            f"Corrupt baseline file: {path}",
            details={"reason": reason},
        )
        self.path = Path(path)
        self.reason = reason
