"""
L1 Domain — Ordered candidate resolution.

Integration scripts and the nix executable are both found by trying
a fixed list of candidates in priority order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def first_match(
    candidates: Iterable[T],
    resolve: Callable[[T], R | None],
) -> tuple[T, R] | None:
    """Return the first candidate whose ``resolve`` gives a non-None value.

    Candidates after the first match are never looked at.

    Returns:
        ``(candidate, resolved_value)`` or None when nothing matched.
    """
    for candidate in candidates:
        value = resolve(candidate)
        if value is not None:
            logger.debug("Resolved %s → %s", candidate, value)
            return candidate, value
        logger.debug("No match for %s", candidate)
    return None
