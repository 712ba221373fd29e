"""
Tests for the switch stage — exact command shape and failure handling.
"""

from unittest.mock import patch

import pytest

from hmbootstrap.core.models.result import CommandResult
from hmbootstrap.core.services.nix_bootstrap.detection.nix_version import NixProbe
from hmbootstrap.core.services.nix_bootstrap.domain.errors import BootstrapAbort
from hmbootstrap.core.services.nix_bootstrap.execution.apply import (
    apply_home_config,
    build_switch_command,
)

_MOD = "hmbootstrap.core.services.nix_bootstrap.execution.apply"
NIX = "/home/alice/.nix-profile/bin/nix"


class _Recorder:
    """Runner double that records calls and replies with a fixed result."""

    def __init__(self, ok=True):
        self.ok = ok
        self.calls = []

    def __call__(self, argv, **kwargs):
        self.calls.append((list(argv), kwargs))
        if self.ok:
            return CommandResult.success(list(argv))
        return CommandResult.failure(list(argv), "Command failed (exit 1)", returncode=1)


@pytest.fixture
def resolved():
    with patch(f"{_MOD}.resolve_nix_executable", return_value=NIX) as mock_resolve, \
         patch(f"{_MOD}.probe_nix", return_value=NixProbe(found=True, path=NIX)):
        yield mock_resolve


class TestBuildSwitchCommand:
    def test_exact_argv(self, settings):
        target = f"{settings.home}/.config/home-manager#alice"
        assert build_switch_command(NIX, settings, "alice") == [
            NIX,
            "--extra-experimental-features", "nix-command",
            "--extra-experimental-features", "flakes",
            "run",
            "github:nix-community/home-manager/release-24.05",
            "--",
            "switch",
            "--flake", target,
            "-b", "hm-script-bak",
            "--show-trace",
        ]


class TestApplyHomeConfig:
    def test_success(self, settings, resolved):
        runner = _Recorder(ok=True)
        outcome = apply_home_config(settings, "alice", environ={"PATH": "/usr/bin"}, runner=runner)

        assert outcome.ok is True
        assert outcome.nix == NIX
        assert outcome.flake_target == settings.flake_target("alice")
        assert len(runner.calls) == 1

        argv, kwargs = runner.calls[0]
        assert argv == build_switch_command(NIX, settings, "alice")
        assert kwargs["capture"] is False
        assert kwargs["environ"] == {"PATH": "/usr/bin"}
        assert kwargs["env_overrides"] == {
            "NIX_CONFIG": "experimental-features = nix-command flakes",
        }

    def test_failure_is_returned_not_raised(self, settings, resolved, caplog):
        outcome = apply_home_config(settings, "alice", runner=_Recorder(ok=False))

        assert outcome.ok is False
        assert outcome.result.returncode == 1
        assert outcome.to_dict()["returncode"] == 1
        assert any(r.levelname == "WARNING" for r in caplog.records)

    def test_empty_username_is_fatal(self, settings, resolved):
        runner = _Recorder()
        with pytest.raises(BootstrapAbort, match="Username not set"):
            apply_home_config(settings, "", runner=runner)
        assert runner.calls == []
        resolved.assert_not_called()

    def test_unresolvable_nix_is_fatal(self, settings, tmp_path):
        runner = _Recorder()
        with pytest.raises(BootstrapAbort, match="not found by any means"):
            apply_home_config(settings, "alice", environ={"PATH": str(tmp_path)}, runner=runner)
        assert runner.calls == []

    def test_uses_profile_binary_when_path_lacks_nix(self, settings, tmp_path):
        fallback = settings.fallback_nix_executable
        fallback.parent.mkdir(parents=True)
        fallback.write_text("#!/bin/sh\n")
        fallback.chmod(0o755)
        runner = _Recorder()

        with patch(f"{_MOD}.probe_nix", return_value=NixProbe(found=True, path=str(fallback))):
            outcome = apply_home_config(
                settings, "alice", environ={"PATH": str(tmp_path)}, runner=runner,
            )

        assert outcome.nix == str(fallback)
        assert runner.calls[0][0][0] == str(fallback)
