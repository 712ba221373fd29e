"""
L4 Execution — Template rendering and Home Manager config generation.

Pure templating: the generated Nix is opaque here and only
meaningful to Home Manager.  Both files are overwritten on every run.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from hmbootstrap.core.models.settings import BootstrapSettings
from hmbootstrap.core.services.nix_bootstrap.data.templates import FLAKE_TEMPLATE, HOME_TEMPLATE
from hmbootstrap.core.services.nix_bootstrap.domain.errors import BootstrapAbort

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"@([A-Za-z_][A-Za-z0-9_]*)@")


class TemplateError(ValueError):
    """Raised when a rendered template still contains placeholders."""


@dataclass
class GeneratedConfig:
    """Files written by the generator stage."""

    username: str
    config_dir: Path
    flake_path: Path
    home_path: Path

    def to_dict(self) -> dict[str, Any]:
        return {
            "username": self.username,
            "config_dir": str(self.config_dir),
            "flake": str(self.flake_path),
            "home": str(self.home_path),
        }


def find_unresolved(text: str) -> list[str]:
    """Names of ``@token@`` placeholders left in ``text``."""
    return _TOKEN_RE.findall(text)


def render_template(template: str, values: dict[str, Any]) -> str:
    """Substitute ``@key@`` placeholders with values.

    One pass over the template: substituted values are never scanned
    again, so a value may itself contain ``@``.

    Raises:
        TemplateError: If any placeholder has no value.
    """
    missing = sorted({name for name in find_unresolved(template) if name not in values})
    if missing:
        raise TemplateError(f"Unresolved template placeholders: {', '.join(missing)}")
    return _TOKEN_RE.sub(lambda m: str(values[m.group(1)]), template)


def _package_lines(packages: list[str]) -> str:
    return "\n".join(f"    {pkg}" for pkg in packages)


def template_values(settings: BootstrapSettings, username: str) -> dict[str, str]:
    """Everything substituted into the two templates."""
    return {
        "username": username,
        "nixpkgs_branch": settings.nixpkgs_branch,
        "home_manager_release_tag": settings.home_manager_release_tag,
        "system": settings.system,
        "hm_state_version": settings.hm_state_version,
        "php_attribute": settings.php_attribute,
        "packages": _package_lines(settings.packages),
        "shell": settings.shell,
    }


def generate_home_config(settings: BootstrapSettings, username: str) -> GeneratedConfig:
    """Write ``flake.nix`` and ``home.nix`` for ``username``.

    Raises:
        BootstrapAbort: If the username is empty or the files cannot be written.
    """
    if not username:
        raise BootstrapAbort("Username not set. Cannot generate Home Manager configuration.")

    values = template_values(settings, username)
    config_dir = settings.config_dir
    flake_path = config_dir / "flake.nix"
    home_path = config_dir / "home.nix"

    try:
        config_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Creating Home Manager flake: '%s' for user '%s'", flake_path, username)
        flake_path.write_text(render_template(FLAKE_TEMPLATE, values), encoding="utf-8")
        logger.info("Creating Home Manager home.nix: '%s' for user '%s'", home_path, username)
        home_path.write_text(render_template(HOME_TEMPLATE, values), encoding="utf-8")
    except (OSError, TemplateError) as e:
        raise BootstrapAbort(f"Failed to write Home Manager configuration in {config_dir}: {e}") from e

    logger.info("Home Manager config files created in '%s'", config_dir)
    return GeneratedConfig(
        username=username,
        config_dir=config_dir,
        flake_path=flake_path,
        home_path=home_path,
    )
