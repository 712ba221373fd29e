"""
Operator interaction helpers shared by the CLI commands.

Core services never talk to the terminal; they receive these
callables instead.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path
from typing import NoReturn

import click

from hmbootstrap.core.models.settings import BootstrapSettings


def ask_yes_no(text: str) -> bool:
    return click.confirm(text, default=False, err=True)


def ask_text(text: str) -> str:
    return click.prompt(text, default="", show_default=False, err=True)


def notify(text: str) -> None:
    click.echo(text, err=True)


def store_consent(create_store: bool | None) -> Callable[[str], bool]:
    """Pre-answered consent when the flag was given, else ask."""
    if create_store is None:
        return ask_yes_no
    return lambda _text: create_store


def abort(message: str) -> NoReturn:
    click.secho(f"❌ {message}", fg="red", err=True)
    sys.exit(1)


def load_settings_or_exit(ctx: click.Context) -> BootstrapSettings:
    """Load settings for the command, exiting 1 on a bad config file."""
    from hmbootstrap.core.config.loader import ConfigError, load_settings

    config_path: Path | None = ctx.obj.get("config_path")
    try:
        return load_settings(config_path)
    except ConfigError as e:
        abort(str(e))


username_option = click.option(
    "--username", "-u", default=None, help="Username to configure (skips the prompt).",
)

create_store_option = click.option(
    "--create-store/--no-create-store",
    default=None,
    help="Pre-answer whether to create the Nix store directory with sudo.",
)
