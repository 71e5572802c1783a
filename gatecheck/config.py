"""Configuration Module - Builds and validates the run configuration.

The configuration is read once, before any analyzer runs, from a YAML file
and ``GATECHECK_*`` environment variables. Components receive the resulting
``RunConfig`` explicitly and never look at the environment themselves.
"""

import os
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple, Union

import yaml

from .core.analyzer import Category, Severity
from .exceptions import ConfigurationError, InvalidConfigError
from .logging_config import get_logger

logger = get_logger(__name__)

FAIL_NEVER = "never"

DEFAULT_CONFIG_FILES = ("gatecheck.yml", "gatecheck.yaml", ".gatecheck.yml", ".gatecheck.yaml")
DEFAULT_BASELINE_FILE = ".gatecheck-baseline.json"

_MEMORY_PATTERN = re.compile(r"^\s*(\d+)\s*([kKmMgG]?)[bB]?\s*$")
_MEMORY_UNITS = {"": 1, "k": 1024, "m": 1024 ** 2, "g": 1024 ** 3}

# Environment variable -> configuration key
ENV_OVERRIDES = {
    "GATECHECK_ENABLED": "enabled",
    "GATECHECK_FAIL_ON": "fail_on",
    "GATECHECK_FAIL_THRESHOLD": "fail_threshold",
    "GATECHECK_TIMEOUT": "timeout",
    "GATECHECK_MEMORY_LIMIT": "memory_limit",
    "GATECHECK_CI_MODE": "ci_mode",
    "GATECHECK_BASELINE_FILE": "baseline_file",
    "GATECHECK_MAX_CONCURRENT": "max_concurrent",
}

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def parse_memory_limit(value: Union[str, int, None]) -> Optional[int]:
    """Parse a memory limit such as "512M" into bytes.

    Args:
        value: Limit as bytes or a string with an optional K/M/G suffix;
            None or -1 mean no limit

    Returns:
        Limit in bytes, or None for unlimited

    Raises:
        InvalidConfigError: If the value cannot be parsed
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidConfigError("memory_limit", value, "expected a size such as 512M")
    if isinstance(value, int):
        if value == -1:
            return None
        if value <= 0:
            raise InvalidConfigError("memory_limit", value, "must be positive or -1")
        return value

    text = str(value).strip()
    if text == "-1":
        return None

    match = _MEMORY_PATTERN.match(text)
    if not match or int(match.group(1)) == 0:
        raise InvalidConfigError("memory_limit", value, "expected a size such as 512M")

    return int(match.group(1)) * _MEMORY_UNITS[match.group(2).lower()]


def _parse_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise InvalidConfigError(key, value, "expected a boolean")


def _parse_id_list(key: str, value: Any) -> FrozenSet[str]:
    if value is None:
        return frozenset()
    if isinstance(value, str):
        value = [v for v in value.split(",")]
    if not isinstance(value, (list, tuple, set, frozenset)):
        raise InvalidConfigError(key, value, "expected a list of analyzer ids")
    ids = set()
    for item in value:
        if not isinstance(item, str):
            raise InvalidConfigError(key, item, "analyzer ids must be strings")
        if item.strip():
            ids.add(item.strip())
    return frozenset(ids)


def _parse_categories(value: Any) -> FrozenSet[Category]:
    enabled = set(Category)
    if value is None:
        return frozenset(enabled)
    if not isinstance(value, Mapping):
        raise InvalidConfigError("analyzers", value, "expected a mapping of category to boolean")

    for name, flag in value.items():
        category = Category.parse(name, key="analyzers")
        if _parse_bool(f"analyzers.{name}", flag):
            enabled.add(category)
        else:
            enabled.discard(category)
    return frozenset(enabled)


def _parse_fail_on(value: Any) -> Optional[Severity]:
    if value is None:
        return Severity.CRITICAL
    if str(value).strip().lower() == FAIL_NEVER:
        return None
    return Severity.parse(value, key="fail_on")


def _parse_threshold(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise InvalidConfigError("fail_threshold", value, "expected a number between 0 and 100")
    try:
        threshold = float(value)
    except (TypeError, ValueError):
        raise InvalidConfigError(
            "fail_threshold", value, "expected a number between 0 and 100"
        ) from None
    if not 0 <= threshold <= 100:
        raise InvalidConfigError("fail_threshold", value, "must be between 0 and 100")
    return threshold


def _parse_positive_number(key: str, value: Any, default: float) -> float:
    if value is None:
        return default
    if isinstance(value, bool):
        raise InvalidConfigError(key, value, "expected a positive number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidConfigError(key, value, "expected a positive number") from None
    if number <= 0:
        raise InvalidConfigError(key, value, "must be positive")
    return number


def _parse_paths(key: str, value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise InvalidConfigError(key, value, "expected a list of paths")
    return tuple(value)


@dataclass(frozen=True)
class RunConfig:
    """Read-only configuration of one analysis run."""
    enabled_categories: FrozenSet[Category] = field(default_factory=lambda: frozenset(Category))
    disabled_analyzer_ids: FrozenSet[str] = frozenset()
    ci_mode: bool = False
    ci_mode_whitelist: FrozenSet[str] = frozenset()
    ci_mode_blacklist: FrozenSet[str] = frozenset()
    dont_report_ids: FrozenSet[str] = frozenset()
    fail_on: Optional[Severity] = Severity.CRITICAL  # None means "never"
    fail_threshold: Optional[float] = None
    timeout: float = 300.0
    memory_limit: Optional[int] = None
    max_concurrent: int = 4
    enabled: bool = True
    baseline_file: str = DEFAULT_BASELINE_FILE
    paths: Tuple[str, ...] = ()
    excluded_paths: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.fail_threshold is not None and not 0 <= self.fail_threshold <= 100:
            raise InvalidConfigError(
                "fail_threshold", self.fail_threshold, "must be between 0 and 100"
            )
        if self.timeout <= 0:
            raise InvalidConfigError("timeout", self.timeout, "must be positive")
        if self.max_concurrent < 1:
            raise InvalidConfigError("max_concurrent", self.max_concurrent, "must be at least 1")

    @property
    def fails_never(self) -> bool:
        """Check whether fail_on is "never"."""
        return self.fail_on is None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "RunConfig":
        """Build a configuration from its external key/value form.

        Args:
            data: Mapping with keys such as "analyzers", "disabled_analyzers",
                "ci_mode", "fail_on" or "fail_threshold"

        Returns:
            Validated RunConfig

        Raises:
            ConfigurationError: If any value is invalid
        """
        if data is not None and not isinstance(data, Mapping):
            raise ConfigurationError("Configuration must be a mapping")
        data = dict(data or {})

        max_concurrent = _parse_positive_number("max_concurrent", data.get("max_concurrent"), 4)
        if int(max_concurrent) != max_concurrent:
            raise InvalidConfigError("max_concurrent", max_concurrent, "expected an integer")

        return cls(
            enabled_categories=_parse_categories(data.get("analyzers")),
            disabled_analyzer_ids=_parse_id_list("disabled_analyzers", data.get("disabled_analyzers")),
            ci_mode=_parse_bool("ci_mode", data.get("ci_mode", False)),
            ci_mode_whitelist=_parse_id_list("ci_mode_analyzers", data.get("ci_mode_analyzers")),
            ci_mode_blacklist=_parse_id_list(
                "ci_mode_exclude_analyzers", data.get("ci_mode_exclude_analyzers")
            ),
            dont_report_ids=_parse_id_list("dont_report", data.get("dont_report")),
            fail_on=_parse_fail_on(data.get("fail_on")),
            fail_threshold=_parse_threshold(data.get("fail_threshold")),
            timeout=_parse_positive_number("timeout", data.get("timeout"), 300.0),
            memory_limit=parse_memory_limit(data.get("memory_limit")),
            max_concurrent=int(max_concurrent),
            enabled=_parse_bool("enabled", data.get("enabled", True)),
            baseline_file=str(data.get("baseline_file") or DEFAULT_BASELINE_FILE),
            paths=_parse_paths("paths", data.get("paths")),
            excluded_paths=_parse_paths("excluded_paths", data.get("excluded_paths")),
        )

    def with_ci_mode(self, ci_mode: bool = True) -> "RunConfig":
        """Get a copy with CI mode switched on or off."""
        return replace(self, ci_mode=ci_mode)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the external key/value form."""
        return {
            "enabled": self.enabled,
            "analyzers": {c.value: c in self.enabled_categories for c in Category},
            "disabled_analyzers": sorted(self.disabled_analyzer_ids),
            "ci_mode": self.ci_mode,
            "ci_mode_analyzers": sorted(self.ci_mode_whitelist),
            "ci_mode_exclude_analyzers": sorted(self.ci_mode_blacklist),
            "dont_report": sorted(self.dont_report_ids),
            "fail_on": self.fail_on.value if self.fail_on else FAIL_NEVER,
            "fail_threshold": self.fail_threshold,
            "timeout": self.timeout,
            "memory_limit": self.memory_limit,
            "max_concurrent": self.max_concurrent,
            "baseline_file": self.baseline_file,
            "paths": list(self.paths),
            "excluded_paths": list(self.excluded_paths),
        }


def find_config_file(project_root: Union[str, Path]) -> Optional[Path]:
    """Find the first default configuration file in a project."""
    root = Path(project_root)
    for name in DEFAULT_CONFIG_FILES:
        candidate = root / name
        if candidate.is_file():
            return candidate
    return None


def read_config_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a YAML configuration file.

    A top-level "gatecheck" key is unwrapped when present.

    Raises:
        ConfigurationError: If the file cannot be read or parsed
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a mapping")
    if isinstance(data.get("gatecheck"), dict):
        data = data["gatecheck"]
    return data


def apply_env_overrides(data: Dict[str, Any], env: Mapping[str, str]) -> Dict[str, Any]:
    """Overlay GATECHECK_* environment variables on configuration data."""
    merged = dict(data)
    for env_name, key in ENV_OVERRIDES.items():
        if env_name in env:
            logger.debug("Configuration %s overridden by %s", key, env_name)
            merged[key] = env[env_name]
    return merged


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    project_root: Union[str, Path] = ".",
    env: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> RunConfig:
    """Load the run configuration.

    Args:
        config_path: Explicit configuration file; must exist when given
        project_root: Directory searched for a default configuration file
        env: Environment mapping (default: os.environ)
        overrides: Values applied last, e.g. from command-line options

    Returns:
        Validated RunConfig

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    if config_path is not None:
        path = Path(config_path)
        if not path.is_file():
            raise ConfigurationError(f"Configuration file not found: {path}")
    else:
        path = find_config_file(project_root)

    data: Dict[str, Any] = {}
    if path is not None:
        logger.info("Loading configuration from %s", path)
        data = read_config_file(path)

    data = apply_env_overrides(data, os.environ if env is None else env)
    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})

    return RunConfig.from_dict(data)

