"""Env File Analyzer - Detects environment files committed with the codebase."""

from typing import List

from ...core.analyzer import AnalyzerDescriptor, BaseAnalyzer, Category, Issue, Severity
from ...core.codebase import CodebaseView

# Template files that are meant to be committed
TEMPLATE_SUFFIXES = (".example", ".sample", ".dist", ".template")


class EnvFileAnalyzer(BaseAnalyzer):
    """Flags .env files that hold real values.

    Not run in CI mode by default: CI checkouts often generate a .env file
    from secrets before the build.
    """

    descriptor = AnalyzerDescriptor(
        id="env-file-committed",
        name="Committed Env File",
        category=Category.SECURITY,
        default_severity=Severity.HIGH,
        run_in_ci=False,
        description="Detects .env files shipped with the codebase",
    )

    async def analyze(self, view: CodebaseView) -> List[Issue]:
        issues = []
        for relative_path in view.files:
            name = relative_path.rsplit("/", 1)[-1].lower()
            if not self._is_env_file(name):
                continue
            await self._checkpoint()

            assignments = [
                line for line in view.read_lines(relative_path)
                if "=" in line and not line.strip().startswith("#")
                and line.split("=", 1)[1].strip()
            ]
            if not assignments:
                continue

            issues.append(
                self._issue(
                    path=relative_path,
                    line=0,
                    message=f"Environment file {name} with {len(assignments)} values is part of the codebase",
                    construct=name,
                    metadata={"values": len(assignments)},
                )
            )
        return issues

    @staticmethod
    def _is_env_file(name: str) -> bool:
        if name != ".env" and not name.startswith(".env."):
            return False
        return not name.endswith(TEMPLATE_SUFFIXES)
