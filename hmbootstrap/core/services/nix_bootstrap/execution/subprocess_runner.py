"""
L4 Execution — Core subprocess runner.

The SINGLE PLACE where ``subprocess.run`` is called by the bootstrap.
Failures never raise: they come back as a failed ``CommandResult``.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import time
from collections.abc import Mapping, Sequence

from hmbootstrap.core.models.result import CommandResult

logger = logging.getLogger(__name__)

# Tail kept from captured streams
_OUTPUT_TAIL = 4000


def format_argv(argv: Sequence[str]) -> str:
    """Render a command list as a copy-pasteable shell line."""
    return " ".join(shlex.quote(a) for a in argv)


def run_command(
    argv: Sequence[str],
    *,
    capture: bool = True,
    timeout: int | None = None,
    env_overrides: Mapping[str, str] | None = None,
    environ: Mapping[str, str] | None = None,
    max_output: int | None = _OUTPUT_TAIL,
) -> CommandResult:
    """Run a command and describe the outcome.

    Args:
        argv: Command list for ``subprocess.run()``.
        capture: Capture stdout/stderr.  When False the child inherits
            the terminal, so long-running installers show progress.
        timeout: Seconds before giving up, or None to wait forever.
        env_overrides: Extra variables layered over the base environment.
        environ: Base environment (default: ``os.environ``).
        max_output: Keep only this many trailing characters of each
            captured stream (None keeps everything).

    Returns:
        CommandResult — ``ok`` is True only for exit status 0.
    """
    argv_list = [str(a) for a in argv]
    logger.debug("CMD %s", format_argv(argv_list))

    env = dict(os.environ if environ is None else environ)
    if env_overrides:
        env.update(env_overrides)

    start = time.monotonic()
    try:
        proc = subprocess.run(
            argv_list,
            capture_output=capture,
            text=True,
            timeout=timeout,
            env=env,
        )
    except FileNotFoundError:
        return CommandResult.failure(argv_list, f"Command not found: {argv_list[0]}")
    except subprocess.TimeoutExpired:
        return CommandResult.failure(argv_list, f"Command timed out ({timeout}s)")
    except OSError as e:
        logger.debug("Subprocess error for %s", argv_list, exc_info=True)
        return CommandResult.failure(argv_list, str(e))

    elapsed_ms = int((time.monotonic() - start) * 1000)
    stdout = proc.stdout or ""
    stderr = proc.stderr or ""
    if max_output is not None:
        stdout, stderr = stdout[-max_output:], stderr[-max_output:]

    if stdout:
        logger.debug("STDOUT %s", stdout.strip())
    if stderr:
        logger.debug("STDERR %s", stderr.strip())

    if proc.returncode == 0:
        return CommandResult.success(
            argv_list, stdout=stdout, stderr=stderr, elapsed_ms=elapsed_ms,
        )

    return CommandResult.failure(
        argv_list,
        f"Command failed (exit {proc.returncode})",
        returncode=proc.returncode,
        stdout=stdout,
        stderr=stderr,
        elapsed_ms=elapsed_ms,
    )
