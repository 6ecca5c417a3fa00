"""CLI tests."""

import pytest
from typer.testing import CliRunner

from refertrack import cli
from refertrack.cli import app
from refertrack.settings import settings

runner = CliRunner()


@pytest.fixture
def db_option(tmp_path, monkeypatch):
    """Point the CLI at a temporary database for one test."""
    monkeypatch.setattr(settings, "database_url", settings.database_url)
    # Keep the global structlog setup; CliRunner swaps stdout per invocation
    monkeypatch.setattr(cli, "configure_logging", lambda **kwargs: None)
    return ["--database-url", f"sqlite:///{tmp_path / 'cli.db'}"]


def _register(db_option, email, *extra):
    return runner.invoke(
        app,
        [*db_option, "register", "--name", "Ana", "--email", email, "--password", "Valid123", *extra],
    )


class TestCli:
    """Tests for the refertrack command."""

    def test_init(self, db_option, tmp_path):
        result = runner.invoke(app, [*db_option, "init"])
        assert result.exit_code == 0
        assert "Database initialized" in result.output
        assert (tmp_path / "cli.db").exists()

    def test_register_and_show(self, db_option):
        result = _register(db_option, "ana@example.com")
        assert result.exit_code == 0, result.output
        assert "Registered user 1" in result.output

        result = runner.invoke(app, [*db_option, "show", "1"])
        assert result.exit_code == 0
        assert "ana@example.com" in result.output

    def test_register_with_referral(self, db_option):
        _register(db_option, "ana@example.com")
        show = runner.invoke(app, [*db_option, "show", "1"])
        code = next(line.split("│")[2].strip() for line in show.output.splitlines() if "Referral code" in line)

        result = _register(db_option, "bia@example.com", "--referral-code", code)
        assert result.exit_code == 0, result.output
        assert "Referrer 1 credited" in result.output

        result = runner.invoke(app, [*db_option, "show", "--code", code])
        assert result.exit_code == 0
        assert "│ 1" in result.output

    def test_register_invalid(self, db_option):
        result = runner.invoke(
            app,
            [*db_option, "register", "--name", "Ana", "--email", "not-an-email", "--password", "Valid123"],
        )
        assert result.exit_code == 1
        assert "Invalid email format" in result.output

    def test_show_unknown(self, db_option):
        runner.invoke(app, [*db_option, "init"])
        result = runner.invoke(app, [*db_option, "show", "99"])
        assert result.exit_code == 1
        assert "User not found" in result.output

    def test_show_requires_target(self, db_option):
        result = runner.invoke(app, [*db_option, "show"])
        assert result.exit_code == 1
