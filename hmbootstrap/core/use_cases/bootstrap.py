"""
Bootstrap use case — load settings, run the pipeline, report.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from hmbootstrap.core.config.loader import ConfigError, load_settings
from hmbootstrap.core.models.settings import BootstrapSettings
from hmbootstrap.core.services.nix_bootstrap.domain.errors import BootstrapAbort
from hmbootstrap.core.services.nix_bootstrap.orchestration.orchestrator import (
    BootstrapReport,
    run_bootstrap,
)

logger = logging.getLogger(__name__)


@dataclass
class BootstrapResult:
    """Result of a full bootstrap run."""

    report: BootstrapReport = field(default_factory=BootstrapReport)
    settings: BootstrapSettings | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.report.ok

    def to_dict(self) -> dict:
        data = self.report.to_dict()
        data["ok"] = self.ok
        data["error"] = self.error
        return data


def bootstrap(
    *,
    config_path: Path | None = None,
    confirm: Callable[[str], bool],
    prompt: Callable[[str], str],
    notify: Callable[[str], None] | None = None,
    username: str | None = None,
) -> BootstrapResult:
    """Run the whole bootstrap.  Never raises for expected failures.

    Args:
        config_path: Optional explicit settings file.
        confirm: Yes/no question callback.
        prompt: Free-text question callback.
        notify: Receives multi-line operator notices.
        username: Pre-answered username.

    Returns:
        BootstrapResult — ``error`` is set for fatal conditions;
        ``report.remediation`` is set when the switch failed.
    """
    result = BootstrapResult()

    try:
        result.settings = load_settings(config_path)
    except ConfigError as e:
        result.error = str(e)
        return result

    try:
        run_bootstrap(
            result.settings,
            confirm=confirm,
            prompt=prompt,
            notify=notify,
            username=username,
            report=result.report,
        )
    except BootstrapAbort as e:
        logger.debug("Bootstrap aborted: %s", e)
        result.error = str(e)

    return result
