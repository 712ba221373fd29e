"""
L4 Execution — Adopt a shell integration script's environment.

A Python process cannot ``source`` a shell file, so the script is
sourced in a child ``bash`` which then dumps its environment
(``env -0``).  The differences are merged back into the caller's
environment mapping, making a freshly installed ``nix`` resolvable
without restarting the session.
"""

from __future__ import annotations

import logging
import os
from collections.abc import MutableMapping
from pathlib import Path

from hmbootstrap.core.services.nix_bootstrap.execution.subprocess_runner import run_command

logger = logging.getLogger(__name__)

# "$1" is the script path; its own output is discarded so that only
# the NUL-separated environment reaches stdout.
_SOURCE_AND_DUMP = '. "$1" >/dev/null 2>&1; env -0'

# Variables that describe the child shell itself, not the script's effect
_SHELL_INTERNALS = frozenset({"_", "SHLVL", "PWD", "OLDPWD"})


def parse_env_dump(dump: str) -> dict[str, str]:
    """Parse ``env -0`` output into a mapping."""
    env: dict[str, str] = {}
    for entry in dump.split("\0"):
        if not entry or "=" not in entry:
            continue
        key, _, value = entry.partition("=")
        env[key] = value
    return env


def source_profile_script(
    script: Path,
    environ: MutableMapping[str, str] | None = None,
) -> dict[str, str] | None:
    """Source ``script`` and merge its environment changes into ``environ``.

    Args:
        script: Integration script to load.
        environ: Mapping to update (default: ``os.environ``).

    Returns:
        The variables that were added or changed, or None if the
        script could not be sourced.
    """
    env = os.environ if environ is None else environ

    result = run_command(
        ["bash", "-c", _SOURCE_AND_DUMP, "hmbootstrap", str(script)],
        timeout=60,
        environ=dict(env),
        max_output=None,
    )
    if not result.ok:
        logger.warning("Could not source %s: %s", script, result.diagnostics)
        return None

    sourced = parse_env_dump(result.stdout)
    changed = {
        key: value
        for key, value in sourced.items()
        if key not in _SHELL_INTERNALS and env.get(key) != value
    }
    env.update(changed)
    logger.debug("Adopted %d variable(s) from %s: %s", len(changed), script, sorted(changed))
    return changed
