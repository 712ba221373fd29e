"""
Tests for logging setup and level precedence.
"""

import logging

import pytest
from click.testing import CliRunner

from hmbootstrap.core.observability.logging_config import (
    _parse_level,
    resolve_level,
    setup_logging,
)
from hmbootstrap.main import cli


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestParseLevel:
    @pytest.mark.parametrize("name,expected", [
        ("DEBUG", logging.DEBUG),
        ("warning", logging.WARNING),
        (None, logging.WARNING),
        ("", logging.WARNING),
        ("LOUD", logging.WARNING),
    ])
    def test_names(self, name, expected):
        assert _parse_level(name) == expected


class TestResolveLevel:
    def test_flags_in_precedence_order(self):
        env = {"HMB_LOG_LEVEL": "ERROR"}
        assert resolve_level(debug=True, verbose=True, quiet=True, environ=env) == "DEBUG"
        assert resolve_level(verbose=True, quiet=True, environ=env) == "INFO"
        assert resolve_level(quiet=True, environ=env) == "ERROR"

    def test_env_var_then_default(self):
        assert resolve_level(environ={"HMB_LOG_LEVEL": "ERROR"}) == "ERROR"
        assert resolve_level(environ={}) == "WARNING"
        assert resolve_level(environ={"HMB_LOG_LEVEL": ""}) == "WARNING"


class TestSetupLogging:
    def test_single_console_handler(self):
        setup_logging("WARNING")
        setup_logging("WARNING")
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.level == logging.WARNING

    def test_file_handler_with_own_level(self, tmp_path):
        log_file = tmp_path / "hmb.log"
        setup_logging("WARNING", log_file=str(log_file), log_file_level="DEBUG")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 2

        logging.getLogger("hmbootstrap.test").debug("written to file only")
        for handler in root.handlers:
            handler.flush()
        assert "written to file only" in log_file.read_text()


class TestCliLevelPrecedence:
    def test_default_is_warning(self, monkeypatch):
        monkeypatch.delenv("HMB_LOG_LEVEL", raising=False)
        monkeypatch.delenv("HMB_LOG_FILE", raising=False)
        CliRunner().invoke(cli, ["probe", "--help"])
        # --help on a subcommand still runs the group callback
        assert logging.getLogger().level == logging.WARNING

    def test_env_var(self, monkeypatch):
        monkeypatch.delenv("HMB_LOG_FILE", raising=False)
        monkeypatch.setenv("HMB_LOG_LEVEL", "ERROR")
        CliRunner().invoke(cli, ["probe", "--help"])
        assert logging.getLogger().level == logging.ERROR

    def test_flag_beats_env_var(self, monkeypatch):
        monkeypatch.delenv("HMB_LOG_FILE", raising=False)
        monkeypatch.setenv("HMB_LOG_LEVEL", "ERROR")
        CliRunner().invoke(cli, ["--debug", "probe", "--help"])
        assert logging.getLogger().level == logging.DEBUG

    def test_verbose_flag_lowers_default_to_info(self, monkeypatch):
        monkeypatch.delenv("HMB_LOG_LEVEL", raising=False)
        monkeypatch.delenv("HMB_LOG_FILE", raising=False)
        CliRunner().invoke(cli, ["--verbose", "probe", "--help"])
        assert logging.getLogger().level == logging.INFO

    def test_quiet_flag_raises_to_error(self, monkeypatch):
        monkeypatch.delenv("HMB_LOG_LEVEL", raising=False)
        monkeypatch.delenv("HMB_LOG_FILE", raising=False)
        CliRunner().invoke(cli, ["--quiet", "probe", "--help"])
        assert logging.getLogger().level == logging.ERROR
