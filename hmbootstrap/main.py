"""
hmbootstrap — CLI entrypoint.

Usage:
    hmbootstrap --help
    hmbootstrap run
    hmbootstrap run --username alice --no-create-store
    hmbootstrap probe --json
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from hmbootstrap import __version__
from hmbootstrap.core.observability.logging_config import (
    FILE_ENV_VAR,
    FILE_LEVEL_ENV_VAR,
    resolve_level,
    setup_logging,
)
from hmbootstrap.ui.cli.interaction import (
    abort,
    ask_text,
    create_store_option,
    notify,
    store_consent,
    username_option,
)


@click.group()
@click.version_option(version=__version__, prog_name="hmbootstrap")
@click.option("--verbose", "-v", is_flag=True, help="Log every step (INFO).")
@click.option("--quiet", "-q", is_flag=True, help="Only log errors.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to a settings YAML file (default: ~/.config/hmbootstrap/config.yml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """hmbootstrap — install Nix and apply a Home Manager configuration."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(FILE_ENV_VAR),
        log_file_level=os.environ.get(FILE_LEVEL_ENV_VAR),
    )


@cli.command()
@username_option
@create_store_option
@click.option("--json-output", "--json", "as_json", is_flag=True,
              help="Print the stage report as JSON on stdout.")
@click.pass_context
def run(
    ctx: click.Context,
    username: str | None,
    create_store: bool | None,
    as_json: bool,
) -> None:
    """Install Nix if needed, enable flakes, generate and apply Home Manager config.

    Examples:

        hmbootstrap run

        hmbootstrap run --username alice --no-create-store

        hmbootstrap run -u alice --json
    """
    from hmbootstrap.core.services.nix_bootstrap.domain.remediation import success_summary
    from hmbootstrap.core.use_cases.bootstrap import bootstrap

    result = bootstrap(
        config_path=ctx.obj.get("config_path"),
        confirm=store_consent(create_store),
        prompt=ask_text,
        notify=notify,
        username=username,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if not result.ok:
            sys.exit(1)
        return

    if result.error:
        abort(result.error)

    report = result.report
    if not report.ok:
        click.echo(report.remediation, err=True)
        sys.exit(1)

    assert result.settings is not None  # guaranteed when no error
    click.echo(err=True)
    click.secho(
        "🎉 Bootstrap finished! Home Manager configuration applied. 🎉",
        fg="green",
        bold=True,
        err=True,
    )
    click.echo(err=True)
    click.echo(success_summary(result.settings), err=True)


# ── Register stage commands ─────────────────────────────────────

from hmbootstrap.ui.cli.stages import apply, features, generate, install, probe  # noqa: E402

cli.add_command(probe)
cli.add_command(install)
cli.add_command(features)
cli.add_command(generate)
cli.add_command(apply)


if __name__ == "__main__":
    cli()
