"""
L4 Execution — Apply the generated config with ``home-manager switch``.

Home Manager is fetched by nix itself from the pinned release branch,
so nothing beyond a working ``nix`` is needed.  The experimental
features are requested twice (flags and ``NIX_CONFIG``) because a
freshly installed nix may not read the new nix.conf yet.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from hmbootstrap.core.models.result import CommandResult
from hmbootstrap.core.models.settings import BootstrapSettings
from hmbootstrap.core.services.nix_bootstrap.detection.nix_version import (
    NixProbe,
    probe_nix,
    resolve_nix_executable,
)
from hmbootstrap.core.services.nix_bootstrap.domain.errors import BootstrapAbort
from hmbootstrap.core.services.nix_bootstrap.execution.subprocess_runner import (
    format_argv,
    run_command,
)

logger = logging.getLogger(__name__)

Runner = Callable[..., CommandResult]


@dataclass
class ApplyOutcome:
    """Result of the switch stage."""

    ok: bool
    nix: str
    flake_target: str
    argv: list[str]
    result: CommandResult
    probe: NixProbe | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "nix": self.nix,
            "flake_target": self.flake_target,
            "command": format_argv(self.argv),
            "returncode": self.result.returncode,
            "error": self.result.error,
        }


def build_switch_command(nix: str, settings: BootstrapSettings, username: str) -> list[str]:
    """``nix run home-manager -- switch`` against the generated flake."""
    return [
        nix,
        *settings.feature_flags(),
        "run",
        settings.home_manager_flake_ref,
        "--",
        "switch",
        "--flake",
        settings.flake_target(username),
        "-b",
        settings.backup_suffix,
        "--show-trace",
    ]


def apply_home_config(
    settings: BootstrapSettings,
    username: str,
    *,
    environ: Mapping[str, str] | None = None,
    runner: Runner | None = None,
) -> ApplyOutcome:
    """Run ``home-manager switch`` for ``username``.

    A failing switch is returned, not raised: the caller decides
    whether to abort.

    Raises:
        BootstrapAbort: If the username is empty or no nix executable resolves.
    """
    if not username:
        raise BootstrapAbort("Username not set. Cannot apply Home Manager configuration.")

    nix = resolve_nix_executable(settings, environ)
    probe = probe_nix(nix, environ, label=f"via resolved executable ({nix})")

    target = settings.flake_target(username)
    argv = build_switch_command(nix, settings, username)
    logger.info(
        "Attempting to apply Home Manager config for user '%s' using flake target '%s'.",
        username, target,
    )
    logger.info("This might take a while, especially on the first run...")

    result = (runner or run_command)(
        argv,
        capture=False,
        environ=environ,
        env_overrides={"NIX_CONFIG": settings.nix_config_override()},
    )

    if result.ok:
        logger.info(
            "Home Manager configuration applied successfully. Existing conflicting "
            "files were backed up with suffix '.%s'.", settings.backup_suffix,
        )
    else:
        logger.warning("'%s run home-manager ... switch' failed: %s", nix, result.diagnostics)

    return ApplyOutcome(
        ok=result.ok,
        nix=nix,
        flake_target=target,
        argv=argv,
        result=result,
        probe=probe,
    )
