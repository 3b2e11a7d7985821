"""Tests for the command-line interface."""

import pytest
from typer.testing import CliRunner

from weblab_client import __version__
from weblab_client.cli import app as cli_app
from weblab_client.cli.app import app
from weblab_client.exceptions import WebLabError

runner = CliRunner()

CLEAN_ENV = {"WEBLAB_COOKIE": None, "WEBLAB_API_KEY": None, "WEBLAB_API_SECRET": None}


def invoke(*args):
    return runner.invoke(app, list(args), env=CLEAN_ENV)


class TestCli:
    def test_version(self):
        result = invoke("--version")
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_init_and_show_config(self, tmp_path):
        path = tmp_path / "config.ini"

        result = invoke("--config", str(path), "--api-key", "key", "--cookie", "sid=abc", "init")
        assert result.exit_code == 0, result.output
        assert path.is_file()

        result = invoke("--config", str(path), "show-config")
        assert result.exit_code == 0
        assert "<hidden>" in result.output
        assert "sid=abc" not in result.output

    def test_init_without_credentials(self, tmp_path):
        path = tmp_path / "config.ini"
        result = invoke("--config", str(path), "init")
        assert result.exit_code == 1
        assert not path.exists()

    def test_show_config_missing(self, tmp_path):
        result = invoke("--config", str(tmp_path / "none.ini"), "show-config")
        assert result.exit_code == 1

    def test_push_grade_needs_one_student(self, tmp_path):
        result = invoke(
            "--config", str(tmp_path / "none.ini"), "--api-key", "key",
            "push-grade", "--grade", "8",
        )
        assert result.exit_code == 1
        assert "exactly one" in result.output

    def test_scraping_without_cookie(self, tmp_path):
        result = invoke(
            "--config", str(tmp_path / "none.ini"), "--api-key", "key",
            "submissions", "12",
        )
        assert result.exit_code == 1
        assert "AuthenticationError" in result.output


class TestMain:
    def _fail_with(self, monkeypatch, error):
        def broken_app():
            raise error

        monkeypatch.setattr(cli_app, "app", broken_app)

    def test_unexpected_error_exits_with_one(self, monkeypatch):
        self._fail_with(monkeypatch, RuntimeError("boom"))
        with pytest.raises(SystemExit) as excinfo:
            cli_app.main()
        assert excinfo.value.code == 1

    def test_library_error_exits_with_one(self, monkeypatch):
        self._fail_with(monkeypatch, WebLabError("bad config"))
        with pytest.raises(SystemExit) as excinfo:
            cli_app.main()
        assert excinfo.value.code == 1

    def test_interrupt_exits_with_130(self, monkeypatch):
        self._fail_with(monkeypatch, KeyboardInterrupt())
        with pytest.raises(SystemExit) as excinfo:
            cli_app.main()
        assert excinfo.value.code == 130

    def test_module_entry_point_is_the_cli_main(self):
        from weblab_client import __main__ as module_main

        assert module_main.main is cli_app.main
