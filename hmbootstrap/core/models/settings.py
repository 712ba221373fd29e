"""
BootstrapSettings — every fixed constant of the bootstrap workflow.

Defaults reproduce a single-user Nix + Home Manager setup on
x86_64 Linux.  A YAML file may override any field (see
``hmbootstrap.core.config.loader``); everything path-like is derived
from ``home`` so tests can point the whole workflow at ``tmp_path``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from hmbootstrap.core.services.nix_bootstrap.data.constants import (
    DEFAULT_INSTALLER_URL,
    DEFAULT_PACKAGES,
    DEFAULT_VERIFY_COMMANDS,
    EXPERIMENTAL_FEATURES,
    PROFILE_SCRIPT_CANDIDATES,
)


class BootstrapSettings(BaseModel):
    """Resolved configuration for one bootstrap run."""

    model_config = ConfigDict(extra="forbid")

    # ── Upstream pins ────────────────────────────────────────────
    nixpkgs_branch: str = "nixos-24.05"
    hm_state_version: str = "24.05"
    system: str = "x86_64-linux"

    # ── Home Manager ─────────────────────────────────────────────
    backup_suffix: str = "hm-script-bak"
    shell: Literal["bash", "zsh", "fish"] = "bash"
    php_attribute: str = "php"
    packages: list[str] = Field(default_factory=lambda: list(DEFAULT_PACKAGES))
    verify_commands: list[str] = Field(
        default_factory=lambda: list(DEFAULT_VERIFY_COMMANDS)
    )

    # ── Nix installer ────────────────────────────────────────────
    installer_url: str = DEFAULT_INSTALLER_URL
    installer_sha256: str | None = None
    installer_args: list[str] = Field(default_factory=lambda: ["--no-daemon"])
    nix_store_dir: Path = Path("/nix")

    # ── Nix features ─────────────────────────────────────────────
    experimental_features: list[str] = Field(
        default_factory=lambda: list(EXPERIMENTAL_FEATURES)
    )
    smoke_test_target: str = "nixpkgs#hello"

    # ── Locations ────────────────────────────────────────────────
    home: Path = Field(default_factory=Path.home)

    @field_validator("backup_suffix", "nixpkgs_branch", "hm_state_version", "system")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value.strip()

    @field_validator("experimental_features")
    @classmethod
    def _two_features(cls, value: list[str]) -> list[str]:
        if len(value) != 2:
            raise ValueError("exactly two experimental features are expected")
        return value

    @field_validator("home", "nix_store_dir", mode="after")
    @classmethod
    def _expand(cls, value: Path) -> Path:
        return value.expanduser()

    # ── Derived values ───────────────────────────────────────────

    @property
    def home_manager_release_tag(self) -> str:
        """Branch of the home-manager repository matching the state version."""
        return f"release-{self.hm_state_version}"

    @property
    def home_manager_flake_ref(self) -> str:
        """Pinned flake reference for ``nix run``."""
        return f"github:nix-community/home-manager/{self.home_manager_release_tag}"

    @property
    def config_dir(self) -> Path:
        return self.home / ".config" / "home-manager"

    @property
    def nix_conf_path(self) -> Path:
        return self.home / ".config" / "nix" / "nix.conf"

    @property
    def fallback_nix_executable(self) -> Path:
        return self.home / ".nix-profile" / "bin" / "nix"

    @property
    def profile_script_candidates(self) -> list[Path]:
        """Integration scripts, highest priority first."""
        candidates = []
        for raw in PROFILE_SCRIPT_CANDIDATES:
            if raw.startswith("~/"):
                candidates.append(self.home / raw[2:])
            else:
                candidates.append(Path(raw))
        return candidates

    def flake_target(self, username: str) -> str:
        """``<config_dir>#<username>`` — the argument of ``switch --flake``."""
        return f"{self.config_dir}#{username}"

    def feature_declarations(self) -> list[str]:
        """The ``nix.conf`` lines that enable the experimental features.

        The second feature uses the ``extra-`` form so that both stay
        active when Nix reads the file top to bottom.
        """
        first, second = self.experimental_features
        return [
            f"experimental-features = {first}",
            f"extra-experimental-features = {second}",
        ]

    def nix_config_override(self) -> str:
        """Value exported as ``NIX_CONFIG`` for the switch invocation."""
        return "experimental-features = " + " ".join(self.experimental_features)

    def feature_flags(self) -> list[str]:
        """``--extra-experimental-features`` flags for direct nix calls."""
        flags: list[str] = []
        for feature in self.experimental_features:
            flags += ["--extra-experimental-features", feature]
        return flags
