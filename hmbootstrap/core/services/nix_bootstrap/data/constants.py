"""
L0 Data — Fixed values of the Nix / Home Manager bootstrap.
"""

from __future__ import annotations

DEFAULT_INSTALLER_URL = "https://nixos.org/nix/install"

EXPERIMENTAL_FEATURES: tuple[str, ...] = ("nix-command", "flakes")

# Every (extra-)experimental-features declaration, whatever its value.
FEATURE_LINE_PATTERN = r"^\s*(?:extra-)?experimental-features\s*="

# Different installer versions and modes (with or without /nix, daemon
# or not) drop the profile script in different places.  Checked in
# this order; the first existing file wins.
PROFILE_SCRIPT_CANDIDATES: tuple[str, ...] = (
    "~/.nix-profile/etc/profile.d/nix-daemon.sh",
    "~/.local/state/nix/profile/etc/profile.d/nix-daemon.sh",
    "~/.nix-profile/etc/profile.d/nix.sh",
    "/etc/profile.d/nix.sh",
)

# Nix expressions placed in ``home.packages``.  ``phpEnv`` is bound
# in home.nix to ``pkgs.<php_attribute>``.
DEFAULT_PACKAGES: tuple[str, ...] = (
    "phpEnv",
    "phpEnv.packages.composer",
    "pkgs.nnn",
    "pkgs.nodejs",
)

DEFAULT_VERIFY_COMMANDS: tuple[str, ...] = (
    "composer --version",
    "php --version",
    "nnn -V",
    "node --version",
    "npm --version",
)

NIX_VERSION_PATTERN = r"nix \(Nix\)\s+(\d+\.\d+(?:\.\d+)?)"
