"""
L1 Domain — Resolve the username the Home Manager config is built for.
"""

from __future__ import annotations

import getpass
import logging
import re
from collections.abc import Callable

from hmbootstrap.core.services.nix_bootstrap.domain.errors import BootstrapAbort

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")

Prompt = Callable[[str], str]


def sanitize(value: str) -> str:
    """Remove every whitespace character, including stray CR/LF."""
    return _WHITESPACE.sub("", value)


def detect_username() -> str:
    """Current login name with all whitespace stripped."""
    return sanitize(getpass.getuser())


def resolve_username(prompt: Prompt, detected: str | None = None) -> str:
    """Ask the operator for the username, defaulting to the detected one.

    Args:
        prompt: Called with the prompt text; returns the raw answer.
        detected: Default username.  Detected from the system if None.

    Returns:
        The typed username, or the detected default on empty input.

    Raises:
        BootstrapAbort: If the detected default or the final answer is empty.
    """
    if detected is None:
        detected = detect_username()
    detected = sanitize(detected)
    if not detected:
        raise BootstrapAbort("Detected username is empty after sanitizing.")

    answer = prompt(f"Please enter your username (default: {detected})").strip()
    username = answer or detected
    logger.info("Using username: '%s'", username)

    if not username:
        raise BootstrapAbort("Configured username is empty.")
    return username
