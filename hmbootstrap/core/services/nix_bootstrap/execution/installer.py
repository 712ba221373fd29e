"""
L4 Execution — Single-user Nix installation.

If ``nix`` is already resolvable, only its integration script is
loaded.  Otherwise: optionally prepare the store directory with sudo,
download the vendor installer to a tempfile (never ``curl | sh``),
run it, and load the integration script it produced.
"""

from __future__ import annotations

import getpass
import hashlib
import logging
import os
import tempfile
from collections.abc import Callable, MutableMapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from hmbootstrap.core.models.settings import BootstrapSettings
from hmbootstrap.core.services.nix_bootstrap.detection.nix_version import (
    NixProbe,
    probe_nix,
    which_nix,
)
from hmbootstrap.core.services.nix_bootstrap.detection.profile_scripts import find_profile_script
from hmbootstrap.core.services.nix_bootstrap.domain.errors import BootstrapAbort
from hmbootstrap.core.services.nix_bootstrap.domain.remediation import (
    post_install_notice,
    store_dir_notice,
)
from hmbootstrap.core.services.nix_bootstrap.execution.profile_env import source_profile_script
from hmbootstrap.core.services.nix_bootstrap.execution.subprocess_runner import run_command

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]
Notify = Callable[[str], None]


@dataclass
class InstallOutcome:
    """Result of the installer stage."""

    already_installed: bool = False
    store_dir_prepared: bool | None = None   # None = not attempted
    profile_script: Path | None = None       # None = not found or not sourced
    probe: NixProbe | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "already_installed": self.already_installed,
            "store_dir_prepared": self.store_dir_prepared,
            "profile_script": str(self.profile_script) if self.profile_script else None,
            "nix": self.probe.to_dict() if self.probe else None,
        }


# ── Store directory ─────────────────────────────────────────────


def prepare_store_dir(
    settings: BootstrapSettings,
    confirm: Confirm,
    *,
    notify: Notify | None = None,
    username: str | None = None,
) -> bool | None:
    """Offer to create the Nix store directory owned by the current user.

    Returns:
        True if created, False if the sudo commands failed, None if
        skipped (directory exists or the operator declined).
    """
    store = settings.nix_store_dir
    if store.exists():
        logger.info("%s already exists — skipping store directory setup", store)
        return None

    user = username or getpass.getuser()
    if notify:
        notify(store_dir_notice(settings, user))

    if not confirm(f"Do you want to attempt creating {store} with sudo (recommended, one-time)?"):
        logger.info("Skipping sudo %s creation. Nix installer will choose the path.", store)
        return None

    logger.info("Attempting to create and chown %s for user %s.", store, user)
    for argv in (
        ["sudo", "mkdir", "-m", "0755", str(store)],
        ["sudo", "chown", user, str(store)],
    ):
        result = run_command(argv, capture=False)
        if not result.ok:
            logger.warning(
                "%s directory creation/chown failed (%s). "
                "Nix installer will likely use ~/.nix or ~/.local/state/nix.",
                store, result.diagnostics,
            )
            return False

    logger.info("%s directory created and ownership set.", store)
    return True


# ── Installer download ──────────────────────────────────────────


def download_installer(
    url: str,
    expected_sha256: str | None = None,
    timeout: int = 120,
) -> dict[str, Any]:
    """Download the installer script to a tempfile, optionally checking SHA256.

    Returns::

        {"ok": True, "path": "/tmp/xxx.sh", "sha256": "...", "size_bytes": N}
        or
        {"ok": False, "error": "..."}
    """
    fd, path = tempfile.mkstemp(suffix=".sh", prefix="hmbootstrap_nix_install_")
    os.close(fd)

    result = run_command(
        ["curl", "-fsSL", "--max-time", str(timeout), "-o", path, url],
        timeout=timeout + 5,
    )
    if not result.ok:
        cleanup_script(path)
        return {"ok": False, "error": f"Download failed: {result.diagnostics}"}

    content = Path(path).read_bytes()
    actual_sha256 = hashlib.sha256(content).hexdigest()

    if expected_sha256:
        expected = expected_sha256.removeprefix("sha256:").lower()
        if actual_sha256 != expected:
            cleanup_script(path)
            return {
                "ok": False,
                "error": (
                    f"SHA256 mismatch for {url}\n"
                    f"Expected: {expected}\n"
                    f"Got:      {actual_sha256}"
                ),
            }

    os.chmod(path, 0o700)
    return {"ok": True, "path": path, "sha256": actual_sha256, "size_bytes": len(content)}


def cleanup_script(path: str) -> None:
    """Remove a temporary script file."""
    try:
        os.unlink(path)
    except OSError:
        pass


def run_installer(settings: BootstrapSettings) -> None:
    """Download and execute the Nix installer.

    Raises:
        BootstrapAbort: If the download or the installer fails.
    """
    logger.info("Downloading Nix installer from %s", settings.installer_url)
    download = download_installer(settings.installer_url, settings.installer_sha256)
    if not download["ok"]:
        raise BootstrapAbort(download["error"])

    logger.info(
        "Starting Nix single-user installer (%s)...",
        " ".join(settings.installer_args) or "no arguments",
    )
    try:
        result = run_command(["sh", download["path"], *settings.installer_args], capture=False)
    finally:
        cleanup_script(download["path"])

    if not result.ok:
        raise BootstrapAbort(f"Nix installer failed: {result.diagnostics}")
    logger.info("Nix installation script finished.")


# ── Stage entry point ───────────────────────────────────────────


def ensure_nix_installed(
    settings: BootstrapSettings,
    *,
    confirm: Confirm,
    notify: Notify | None = None,
    environ: MutableMapping[str, str] | None = None,
) -> InstallOutcome:
    """Make ``nix`` usable in this process, installing it if needed.

    Args:
        settings: Bootstrap settings.
        confirm: Yes/no question for the store directory setup.
        notify: Receives multi-line operator notices (default: log only).
        environ: Environment to update (default: ``os.environ``).

    Raises:
        BootstrapAbort: If no integration script exists after install,
            or ``nix`` is still not resolvable.
    """
    env = os.environ if environ is None else environ
    candidates = settings.profile_script_candidates
    outcome = InstallOutcome()

    if which_nix(env):
        outcome.already_installed = True
        logger.info("Nix is already installed. Skipping Nix installation.")
        script = find_profile_script(candidates)
        if script is None:
            logger.warning(
                "Could not find a standard Nix profile script to source for the "
                "current session. Nix commands might not be available if PATH is "
                "not already set."
            )
        else:
            logger.info("Sourcing existing Nix profile script: %s", script)
            if source_profile_script(script, env) is not None:
                outcome.profile_script = script
        outcome.probe = probe_nix(environ=env)
        return outcome

    logger.info("Nix not found. Attempting single-user Nix installation.")
    outcome.store_dir_prepared = prepare_store_dir(settings, confirm, notify=notify)
    run_installer(settings)

    notice = post_install_notice()
    if notify:
        notify(notice)
    else:
        logger.info(notice)

    script = find_profile_script(candidates)
    if script is None:
        raise BootstrapAbort(
            "Nix profile script not found after installation attempt for the "
            "current session. Checked: " + ", ".join(str(c) for c in candidates)
        )
    logger.info("Sourcing Nix environment for the current session: %s", script)
    if source_profile_script(script, env) is not None:
        outcome.profile_script = script

    if not which_nix(env):
        raise BootstrapAbort(
            "Nix command not found for this session. A shell restart is likely required."
        )

    outcome.probe = probe_nix(environ=env, label="after install")
    return outcome
