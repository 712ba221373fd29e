"""
Tests for the CLI surface — global options and single-stage commands.
"""

import json
from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner

from hmbootstrap import __version__
from hmbootstrap.core.models.result import CommandResult
from hmbootstrap.core.services.nix_bootstrap.detection.nix_version import NixProbe
from hmbootstrap.core.services.nix_bootstrap.execution.apply import ApplyOutcome
from hmbootstrap.main import cli

_DETECT = "hmbootstrap.core.services.nix_bootstrap.detection.nix_version"
_NIX_CONF = "hmbootstrap.core.services.nix_bootstrap.execution.nix_conf"
_APPLY = "hmbootstrap.core.services.nix_bootstrap.execution.apply"
_INSTALLER = "hmbootstrap.core.services.nix_bootstrap.execution.installer"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config(tmp_path, home):
    path = tmp_path / "config.yml"
    path.write_text(yaml.safe_dump({"home": str(home), "nix_store_dir": str(tmp_path / "nix")}))
    return path


class TestGlobal:
    def test_help_lists_commands(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for name in ("run", "probe", "install", "features", "generate", "apply"):
            assert name in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_missing_explicit_config(self, runner, tmp_path):
        result = runner.invoke(cli, ["--config", str(tmp_path / "nope.yml"), "features"])
        assert result.exit_code == 1
        assert "Config file not found" in result.output


class TestProbe:
    def test_json_when_found(self, runner):
        probe = NixProbe(found=True, path="/bin/nix", version_line="nix (Nix) 2.24.9",
                         version="2.24.9")
        with patch(f"{_DETECT}.probe_nix", return_value=probe):
            result = runner.invoke(cli, ["probe", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["found"] is True
        assert data["version"] == "2.24.9"

    def test_not_found(self, runner):
        with patch(f"{_DETECT}.probe_nix", return_value=NixProbe()):
            result = runner.invoke(cli, ["probe"])

        assert result.exit_code == 0
        assert "not found" in result.output


class TestStages:
    def test_generate_with_username(self, runner, config, home):
        result = runner.invoke(cli, ["--config", str(config), "generate", "--username", "alice"])

        assert result.exit_code == 0, result.output
        flake = home / ".config" / "home-manager" / "flake.nix"
        assert 'homeConfigurations."alice"' in flake.read_text()

    def test_generate_prompts_for_username(self, runner, config, home):
        with patch(
            "hmbootstrap.core.services.nix_bootstrap.domain.identity.detect_username",
            return_value="alice",
        ):
            result = runner.invoke(cli, ["--config", str(config), "generate"], input="\n")

        assert result.exit_code == 0, result.output
        assert "default: alice" in result.output
        assert (home / ".config" / "home-manager" / "home.nix").is_file()

    def test_features(self, runner, config, home):
        with patch(f"{_NIX_CONF}.run_command", return_value=CommandResult.success([])):
            result = runner.invoke(cli, ["--config", str(config), "features"])

        assert result.exit_code == 0, result.output
        conf = home / ".config" / "nix" / "nix.conf"
        assert "extra-experimental-features = flakes" in conf.read_text()

    def test_install_fatal_exits_1(self, runner, config):
        download = {"ok": False, "error": "Download failed: offline"}
        with patch(f"{_INSTALLER}.which_nix", return_value=None), \
             patch(f"{_INSTALLER}.download_installer", return_value=download):
            result = runner.invoke(
                cli, ["--config", str(config), "install", "--no-create-store"],
            )

        assert result.exit_code == 1
        assert "Download failed: offline" in result.output

    def test_apply_failure_prints_next_steps(self, runner, config, home):
        outcome = ApplyOutcome(
            ok=False, nix="/bin/nix", flake_target="x", argv=[],
            result=CommandResult.failure([], "Command failed (exit 1)", returncode=1),
        )
        with patch(f"{_APPLY}.apply_home_config", return_value=outcome):
            result = runner.invoke(cli, ["--config", str(config), "apply", "-u", "alice"])

        assert result.exit_code == 1
        assert "NEXT STEPS" in result.output
        assert f"{home}/.config/home-manager#alice" in result.output
