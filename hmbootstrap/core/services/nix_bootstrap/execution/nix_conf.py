"""
L4 Execution — Enable experimental features in the user's nix.conf.

The file only affects future Nix sessions, so the smoke test passes
the features explicitly and never decides the overall outcome.
"""

from __future__ import annotations

import logging
import re
import tempfile
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from hmbootstrap.core.models.result import CommandResult
from hmbootstrap.core.models.settings import BootstrapSettings
from hmbootstrap.core.services.nix_bootstrap.data.constants import FEATURE_LINE_PATTERN
from hmbootstrap.core.services.nix_bootstrap.domain.errors import BootstrapAbort
from hmbootstrap.core.services.nix_bootstrap.execution.subprocess_runner import run_command

logger = logging.getLogger(__name__)

_FEATURE_LINE_RE = re.compile(FEATURE_LINE_PATTERN)

Runner = Callable[..., CommandResult]


@dataclass
class FeatureOutcome:
    """Result of the feature stage."""

    conf_path: Path
    removed_lines: int = 0
    smoke_test_ok: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "conf_path": str(self.conf_path),
            "removed_lines": self.removed_lines,
            "smoke_test_ok": self.smoke_test_ok,
        }


def rewrite_feature_lines(text: str, declarations: list[str]) -> tuple[str, int]:
    """Drop every feature declaration from ``text`` and append ``declarations``.

    Returns:
        ``(new_text, number_of_lines_removed)``.
    """
    kept: list[str] = []
    removed = 0
    for line in text.splitlines():
        if _FEATURE_LINE_RE.match(line):
            removed += 1
        else:
            kept.append(line)
    return "\n".join(kept + declarations) + "\n", removed


def _atomic_write(path: Path, content: str) -> None:
    """Write via a temp file in the same directory, then rename over ``path``."""
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".nix_conf_", suffix=".tmp")
    tmp = Path(tmp_path)
    try:
        with open(fd, "w", encoding="utf-8", errors="surrogateescape") as f:
            f.write(content)
        tmp.replace(path)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise


def write_feature_flags(settings: BootstrapSettings) -> int:
    """Make ``nix.conf`` declare the experimental features exactly once.

    Returns:
        Number of stale declarations removed.

    Raises:
        BootstrapAbort: If the directory or file cannot be created or written.
    """
    path = settings.nix_conf_path
    declarations = settings.feature_declarations()

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch(exist_ok=True)
    except OSError as e:
        raise BootstrapAbort(f"Failed to create {path}: {e}. Please check permissions.") from e

    try:
        # Bytes that are not UTF-8 pass through unchanged
        text = path.read_text(encoding="utf-8", errors="surrogateescape")
        new_text, removed = rewrite_feature_lines(text, declarations)
        _atomic_write(path, new_text)
    except OSError as e:
        raise BootstrapAbort(f"Failed to update {path}: {e}. Please check permissions.") from e

    if removed:
        logger.info("Removed %d existing experimental-features line(s) from %s", removed, path)
    logger.info("Set in %s: %s", path, "; ".join(declarations))
    return removed


def smoke_test_command(nix: str, settings: BootstrapSettings) -> list[str]:
    """``nix eval`` against a known-good flake with the features passed explicitly."""
    return [nix, "eval", "--raw", *settings.feature_flags(), settings.smoke_test_target]


def ensure_flakes_enabled(
    settings: BootstrapSettings,
    *,
    nix: str = "nix",
    environ: Mapping[str, str] | None = None,
    runner: Runner | None = None,
) -> FeatureOutcome:
    """Write the feature declarations, then check flakes work when requested."""
    logger.info(
        "Ensuring Nix experimental features (%s) are enabled in %s for future sessions...",
        " ".join(settings.experimental_features), settings.nix_conf_path,
    )
    outcome = FeatureOutcome(conf_path=settings.nix_conf_path)
    outcome.removed_lines = write_feature_flags(settings)

    argv = smoke_test_command(nix, settings)
    logger.info("Testing flake evaluation with '%s'...", " ".join(argv[1:]))
    result = (runner or run_command)(argv, environ=environ)
    outcome.smoke_test_ok = result.ok
    if result.ok:
        logger.info(
            "Flakes/nix-command seem active for the current Nix client "
            "when flags are passed explicitly."
        )
    else:
        logger.warning(
            "Flake evaluation test failed even with explicit flags (%s). "
            "%s was still written for future sessions.",
            result.diagnostics, settings.nix_conf_path,
        )
    return outcome
