"""
CommandResult — the outcome of one external invocation.

Every shell-out in the bootstrap returns one of these instead of
raising: callers look at ``ok`` and decide whether the failure is
fatal, a warning, or something to report upward.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class CommandResult(BaseModel):
    """Captured result of a subprocess call."""

    argv: list[str] = Field(default_factory=list)
    returncode: int | None = None
    stdout: str = ""
    stderr: str = ""
    elapsed_ms: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        """Whether the command ran and exited 0."""
        return self.error is None and self.returncode == 0

    @property
    def diagnostics(self) -> str:
        """Best available explanation of a failure, for log lines."""
        if self.error and self.stderr:
            return f"{self.error}: {self.stderr.strip()}"
        return self.error or self.stderr.strip()

    @classmethod
    def success(cls, argv: list[str], stdout: str = "", **kwargs: Any) -> CommandResult:
        """Create a successful result."""
        return cls(argv=argv, returncode=0, stdout=stdout, **kwargs)

    @classmethod
    def failure(cls, argv: list[str], error: str, **kwargs: Any) -> CommandResult:
        """Create a failed result."""
        kwargs.setdefault("returncode", None)
        return cls(argv=argv, error=error, **kwargs)
