"""
L3 Detection — Nix presence, version and executable resolution.

Read-only probes.  A missing ``nix`` is a normal observation here,
not an error: the installer stage decides what to do about it.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from hmbootstrap.core.models.settings import BootstrapSettings
from hmbootstrap.core.services.nix_bootstrap.data.constants import NIX_VERSION_PATTERN
from hmbootstrap.core.services.nix_bootstrap.domain.errors import BootstrapAbort
from hmbootstrap.core.services.nix_bootstrap.domain.resolution import first_match
from hmbootstrap.core.services.nix_bootstrap.execution.subprocess_runner import run_command

logger = logging.getLogger(__name__)

NIX = "nix"


@dataclass
class NixProbe:
    """What ``nix --version`` told us, if anything."""

    found: bool = False
    path: str | None = None
    version_line: str = ""
    version: str | None = None

    def to_dict(self) -> dict:
        return {
            "found": self.found,
            "path": self.path,
            "version_line": self.version_line,
            "version": self.version,
        }


def which_nix(environ: Mapping[str, str] | None = None) -> str | None:
    """Resolve ``nix`` on the search path of ``environ`` (default: os.environ)."""
    env = os.environ if environ is None else environ
    return shutil.which(NIX, path=env.get("PATH"))


def probe_nix(
    executable: str | None = None,
    environ: Mapping[str, str] | None = None,
    *,
    label: str = "",
) -> NixProbe:
    """Report whether nix is available and its self-reported version.

    Args:
        executable: Explicit path to query.  Resolved on PATH if None.
        environ: Environment to resolve and run in.
        label: Context for the log line (e.g. "at start").
    """
    path = executable or which_nix(environ)
    where = f" {label}" if label else ""
    if path is None:
        logger.info("Nix version%s: not found (this is okay if installing now)", where)
        return NixProbe()

    result = run_command([path, "--version"], timeout=30, environ=environ)
    if not result.ok:
        logger.info("Nix version%s: %s did not report a version (%s)",
                    where, path, result.diagnostics)
        return NixProbe(found=True, path=path)

    output = (result.stdout or result.stderr).strip()
    line = output.splitlines()[0] if output else ""
    match = re.search(NIX_VERSION_PATTERN, output)
    probe = NixProbe(
        found=True,
        path=path,
        version_line=line,
        version=match.group(1) if match else None,
    )
    logger.info("Nix version%s: %s", where, line or "unknown")
    return probe


def _executable(path: Path) -> str | None:
    if path.is_file() and os.access(path, os.X_OK):
        return str(path)
    return None


def resolve_nix_executable(
    settings: BootstrapSettings,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Find a usable nix binary: PATH first, then ``~/.nix-profile/bin/nix``.

    Raises:
        BootstrapAbort: If neither resolves.
    """
    strategies = [
        ("PATH", lambda: which_nix(environ)),
        ("profile", lambda: _executable(settings.fallback_nix_executable)),
    ]
    match = first_match(strategies, lambda strategy: strategy[1]())
    if match is None:
        raise BootstrapAbort(
            "Nix executable not found by any means. "
            "Cannot proceed with Home Manager application."
        )

    (source, _), path = match
    if source == "PATH":
        logger.info("Using Nix executable found in PATH: %s", path)
    else:
        logger.warning("Nix command not found in PATH, using direct path: %s", path)
    return path
