"""
Shared test fixtures and configuration.

No test touches the network, sudo, or a real nix installation.
"""

from pathlib import Path

import pytest

from hmbootstrap.core.models.settings import BootstrapSettings

# Integration-script candidates limited to the fake home, so a real
# /etc/profile.d/nix.sh on the test machine cannot leak in.
HOME_ONLY_CANDIDATES = (
    "~/.nix-profile/etc/profile.d/nix-daemon.sh",
    "~/.local/state/nix/profile/etc/profile.d/nix-daemon.sh",
    "~/.nix-profile/etc/profile.d/nix.sh",
)


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """A fake home directory."""
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def settings(home: Path, tmp_path: Path, monkeypatch) -> BootstrapSettings:
    """Settings rooted in the fake home, with a store dir that does not exist."""
    monkeypatch.setattr(
        "hmbootstrap.core.models.settings.PROFILE_SCRIPT_CANDIDATES",
        HOME_ONLY_CANDIDATES,
    )
    return BootstrapSettings(home=home, nix_store_dir=tmp_path / "nix")


@pytest.fixture
def fake_nix(tmp_path: Path) -> Path:
    """An executable named ``nix`` in its own bin directory."""
    bindir = tmp_path / "bin"
    bindir.mkdir()
    nix = bindir / "nix"
    nix.write_text("#!/bin/sh\nexit 0\n")
    nix.chmod(0o755)
    return nix
