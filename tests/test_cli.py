"""
Tests for the tessera command line (tessera/cli/__main__.py).

Every invocation runs against a fresh in-memory keyspace, so state does not
carry over between commands.
"""

import pytest
from click.testing import CliRunner

from tessera.cli.__main__ import cli


@pytest.fixture
def runner(monkeypatch):
    for name in ("TESSERA_BACKEND", "TESSERA_EXPIRE", "TESSERA_STORE_FAMILY", "TESSERA_TICKET_FAMILY"):
        monkeypatch.delenv(name, raising=False)
    return CliRunner()


class TestCLI:

    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "issue" in result.output
        assert "exchange" in result.output

    def test_config(self, runner):
        result = runner.invoke(cli, ["config"])
        assert result.exit_code == 0
        assert "store_family" in result.output
        assert "session_ticket" in result.output

    def test_config_from_env_file(self, runner, tmp_path):
        env = tmp_path / ".env"
        env.write_text("TESSERA_STORE_FAMILY=attrs\n")
        result = runner.invoke(cli, ["--env-file", str(env), "config"])
        assert result.exit_code == 0
        assert "attrs" in result.output

    def test_invalid_config(self, runner, monkeypatch):
        monkeypatch.setenv("TESSERA_EXPIRE", "-1")
        result = runner.invoke(cli, ["config"])
        assert result.exit_code == 1
        assert "CONFIG_INVALID" in result.output

    def test_provision(self, runner):
        result = runner.invoke(cli, ["provision"])
        assert result.exit_code == 0
        assert "Ready: store=session_store ticket=session_ticket" in result.output

    def test_issue(self, runner):
        result = runner.invoke(cli, ["issue", "100"])
        assert result.exit_code == 0
        assert len(result.output.strip()) == 32

    def test_issue_rejects_zero_ttl(self, runner):
        result = runner.invoke(cli, ["issue", "100", "--ttl", "0"])
        assert result.exit_code == 2

    def test_whoami_unknown(self, runner):
        result = runner.invoke(cli, ["whoami", "nonexistent"])
        assert result.exit_code == 1
        assert "Unknown or expired ticket" in result.output

    def test_token_unknown_ticket(self, runner):
        result = runner.invoke(cli, ["token", "nonexistent"])
        assert result.exit_code == 1
        assert "SESSION_INVALID_TICKET: Wrong ticket" in result.output

    def test_exchange_unknown(self, runner):
        result = runner.invoke(cli, ["exchange", "abcdefgh"])
        assert result.exit_code == 1
        assert "SESSION_INVALID_TOKEN: Wrong token" in result.output
