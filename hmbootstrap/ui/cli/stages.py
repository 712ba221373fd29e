"""
CLI commands for running single bootstrap stages.

Thin wrappers over ``hmbootstrap.core.services.nix_bootstrap``.
"""

from __future__ import annotations

import json
import sys

import click

from hmbootstrap.core.services.nix_bootstrap.domain.errors import BootstrapAbort
from hmbootstrap.ui.cli.interaction import (
    abort,
    ask_text,
    create_store_option,
    load_settings_or_exit,
    notify,
    store_consent,
    username_option,
)


def _username(value: str | None) -> str:
    from hmbootstrap.core.services.nix_bootstrap.domain.identity import resolve_username

    if value is not None:
        return value.strip()
    return resolve_username(ask_text)


# ── Detect ──────────────────────────────────────────────────────


@click.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def probe(as_json: bool) -> None:
    """Report whether nix is on PATH and its version."""
    from hmbootstrap.core.services.nix_bootstrap.detection.nix_version import probe_nix

    result = probe_nix()

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    if result.found:
        click.secho(f"✅ {result.version_line or 'nix (version unknown)'}", fg="green")
        click.echo(f"   {result.path}")
    else:
        click.secho("⚠️  nix not found on PATH", fg="yellow")


# ── Act ─────────────────────────────────────────────────────────


@click.command()
@create_store_option
@click.pass_context
def install(ctx: click.Context, create_store: bool | None) -> None:
    """Install single-user Nix unless it is already available."""
    from hmbootstrap.core.services.nix_bootstrap.execution.installer import ensure_nix_installed

    settings = load_settings_or_exit(ctx)
    try:
        outcome = ensure_nix_installed(settings, confirm=store_consent(create_store), notify=notify)
    except BootstrapAbort as e:
        abort(str(e))

    version = outcome.probe.version_line if outcome.probe else ""
    click.secho(f"✅ Nix available{': ' + version if version else ''}", fg="green")


@click.command()
@click.pass_context
def features(ctx: click.Context) -> None:
    """Enable nix-command and flakes in ~/.config/nix/nix.conf."""
    from hmbootstrap.core.services.nix_bootstrap.execution.nix_conf import ensure_flakes_enabled

    settings = load_settings_or_exit(ctx)
    try:
        outcome = ensure_flakes_enabled(settings)
    except BootstrapAbort as e:
        abort(str(e))

    click.secho(f"✅ Features written to {outcome.conf_path}", fg="green")
    if not outcome.smoke_test_ok:
        click.secho("⚠️  Flake smoke test failed (see log)", fg="yellow")


@click.command()
@username_option
@click.pass_context
def generate(ctx: click.Context, username: str | None) -> None:
    """Write flake.nix and home.nix for the configured user."""
    from hmbootstrap.core.services.nix_bootstrap.execution.config import generate_home_config

    settings = load_settings_or_exit(ctx)
    try:
        generated = generate_home_config(settings, _username(username))
    except BootstrapAbort as e:
        abort(str(e))

    click.secho(f"✅ Home Manager config for '{generated.username}'", fg="green")
    click.echo(f"   {generated.flake_path}")
    click.echo(f"   {generated.home_path}")


@click.command()
@username_option
@click.pass_context
def apply(ctx: click.Context, username: str | None) -> None:
    """Run home-manager switch against the generated flake."""
    from hmbootstrap.core.services.nix_bootstrap.domain.remediation import build_remediation
    from hmbootstrap.core.services.nix_bootstrap.execution.apply import apply_home_config

    settings = load_settings_or_exit(ctx)
    try:
        user = _username(username)
        outcome = apply_home_config(settings, user)
    except BootstrapAbort as e:
        abort(str(e))

    if not outcome.ok:
        click.echo(build_remediation(settings, user), err=True)
        sys.exit(1)

    click.secho(f"✅ Applied {outcome.flake_target}", fg="green")
