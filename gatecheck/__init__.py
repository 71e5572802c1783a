"""gatecheck - Static analysis quality gate for CI pipelines."""

__version__ = "1.0.0"
