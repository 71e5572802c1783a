"""Security analyzers."""

from .env_file import EnvFileAnalyzer
from .hardcoded_secret import HardcodedSecretAnalyzer

__all__ = [
    "EnvFileAnalyzer",
    "HardcodedSecretAnalyzer",
]
