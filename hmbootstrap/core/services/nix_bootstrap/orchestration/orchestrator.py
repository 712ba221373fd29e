"""
L5 Orchestration — The five-stage bootstrap pipeline.

probe → install → enable features → generate config → switch

Stages run strictly in order.  Fatal conditions raise
``BootstrapAbort`` out of the stage that found them; the report
passed in keeps whatever the earlier stages produced.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, MutableMapping
from dataclasses import dataclass
from typing import Any

from hmbootstrap.core.models.settings import BootstrapSettings
from hmbootstrap.core.services.nix_bootstrap.detection.nix_version import NixProbe, probe_nix
from hmbootstrap.core.services.nix_bootstrap.domain.errors import BootstrapAbort
from hmbootstrap.core.services.nix_bootstrap.domain.identity import resolve_username
from hmbootstrap.core.services.nix_bootstrap.domain.remediation import build_remediation
from hmbootstrap.core.services.nix_bootstrap.execution.apply import ApplyOutcome, apply_home_config
from hmbootstrap.core.services.nix_bootstrap.execution.config import (
    GeneratedConfig,
    generate_home_config,
)
from hmbootstrap.core.services.nix_bootstrap.execution.installer import (
    InstallOutcome,
    ensure_nix_installed,
)
from hmbootstrap.core.services.nix_bootstrap.execution.nix_conf import (
    FeatureOutcome,
    ensure_flakes_enabled,
)

logger = logging.getLogger(__name__)


@dataclass
class BootstrapReport:
    """What each stage produced.  Stages that never ran stay None."""

    initial: NixProbe | None = None
    install: InstallOutcome | None = None
    features: FeatureOutcome | None = None
    config: GeneratedConfig | None = None
    apply: ApplyOutcome | None = None
    username: str = ""
    remediation: str = ""

    @property
    def ok(self) -> bool:
        """True only when the switch ran and succeeded."""
        return self.apply is not None and self.apply.ok

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "username": self.username,
            "initial": self.initial.to_dict() if self.initial else None,
            "install": self.install.to_dict() if self.install else None,
            "features": self.features.to_dict() if self.features else None,
            "config": self.config.to_dict() if self.config else None,
            "apply": self.apply.to_dict() if self.apply else None,
            "remediation": self.remediation or None,
        }


def run_bootstrap(
    settings: BootstrapSettings,
    *,
    confirm: Callable[[str], bool],
    prompt: Callable[[str], str],
    notify: Callable[[str], None] | None = None,
    username: str | None = None,
    environ: MutableMapping[str, str] | None = None,
    report: BootstrapReport | None = None,
) -> BootstrapReport:
    """Run every stage and return the filled report.

    Args:
        settings: Bootstrap settings.
        confirm: Yes/no question (store directory consent).
        prompt: Free-text question (username); returns the raw answer.
        notify: Receives multi-line operator notices.
        username: Pre-answered username; skips the prompt when given.
        environ: Process environment to adopt nix into (default: os.environ).
        report: Report to fill in place, so callers keep partial
            progress when a stage aborts.

    Raises:
        BootstrapAbort: On any fatal condition.
    """
    env = os.environ if environ is None else environ
    report = report if report is not None else BootstrapReport()

    # ── 0. Initial probe ──
    report.initial = probe_nix(environ=env, label="at start")

    # ── 1. Nix itself ──
    report.install = ensure_nix_installed(settings, confirm=confirm, notify=notify, environ=env)
    nix_path = report.install.probe.path if report.install.probe else None

    # ── 2. Experimental features ──
    report.features = ensure_flakes_enabled(settings, nix=nix_path or "nix", environ=env)

    # ── 3. Home Manager files ──
    if username is not None:
        report.username = username.strip()
        logger.info("Using username: '%s'", report.username)
    else:
        report.username = resolve_username(prompt)
    if not report.username:
        raise BootstrapAbort("Username was not configured. Cannot proceed.")
    report.config = generate_home_config(settings, report.username)

    # ── 4. Switch ──
    report.apply = apply_home_config(settings, report.username, environ=env)
    if not report.apply.ok:
        logger.warning("Home Manager application reported an issue. See messages above.")
        report.remediation = build_remediation(settings, report.username)

    return report
