"""
L3 Detection — Locate the Nix shell integration script.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from hmbootstrap.core.services.nix_bootstrap.domain.resolution import first_match


def find_profile_script(candidates: Iterable[Path]) -> Path | None:
    """Return the first candidate that exists as a regular file."""
    match = first_match(candidates, lambda p: p if p.is_file() else None)
    if match is None:
        return None
    return match[1]
