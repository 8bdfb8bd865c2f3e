"""
Tests for CLI commands.
"""

import json

import pytest
from typer.testing import CliRunner

from keypool.cli.app import app


runner = CliRunner()

KEY_A = "AIzaSyAAAAAAAA11111111"
KEY_B = "AIzaSyBBBBBBBB22222222"


@pytest.fixture
def pool_file(tmp_path):
    return tmp_path / "cli-pool.json"


def invoke(pool_file, *args):
    return runner.invoke(app, ["--pool-file", str(pool_file), *args])


class TestGlobalFlags:
    """Tests for global CLI flags."""

    def test_version_flag(self):
        """Test --version flag shows version."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "keypool" in result.stdout

    def test_help_flag(self):
        """Test --help flag shows help."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "Rotating API Key Pool CLI" in result.stdout

    def test_pool_file_flag_exists(self):
        result = runner.invoke(app, ["--help"])
        assert "--pool-file" in result.stdout


class TestKeysCommands:
    """Tests for keys subcommands."""

    def test_keys_help(self):
        """Test keys help shows subcommands."""
        result = runner.invoke(app, ["keys", "--help"])
        assert result.exit_code == 0
        for name in ["add", "remove", "list", "status", "switch"]:
            assert name in result.stdout

    def test_add_writes_snapshot(self, pool_file):
        result = invoke(pool_file, "keys", "add", KEY_A)
        assert result.exit_code == 0
        assert "...11111111" in result.stdout
        assert KEY_A not in result.stdout

        data = json.loads(pool_file.read_text())
        assert data["keys"] == [KEY_A]

    def test_add_duplicate(self, pool_file):
        invoke(pool_file, "keys", "add", KEY_A)
        result = invoke(pool_file, "keys", "add", KEY_A)
        assert result.exit_code == 0
        assert "already" in result.stdout
        assert json.loads(pool_file.read_text())["keys"] == [KEY_A]

    def test_add_blank_fails(self, pool_file):
        result = invoke(pool_file, "keys", "add", "   ")
        assert result.exit_code == 1
        assert "Please provide an API key" in result.stdout
        assert not pool_file.exists()

    def test_add_without_argument_fails(self, pool_file):
        result = invoke(pool_file, "keys", "add")
        assert result.exit_code == 1

    @pytest.mark.usefixtures("restore_keypool_logger")
    def test_add_and_remove_bracketed_key_with_debug(self, pool_file):
        result = runner.invoke(
            app, ["--debug", "--pool-file", str(pool_file), "keys", "add", "abcdefgh[/]x"]
        )
        assert result.exit_code == 0
        assert json.loads(pool_file.read_text())["keys"] == ["abcdefgh[/]x"]

        result = runner.invoke(
            app, ["--debug", "--pool-file", str(pool_file), "keys", "remove", "0"]
        )
        assert result.exit_code == 0
        assert json.loads(pool_file.read_text())["keys"] == []

    def test_list(self, pool_file):
        invoke(pool_file, "keys", "add", KEY_A)
        invoke(pool_file, "keys", "add", KEY_B)

        result = invoke(pool_file, "keys", "list")
        assert result.exit_code == 0
        assert "AIzaSyAA...11111111" in result.stdout
        assert "AIzaSyBB...22222222" in result.stdout

    def test_list_empty(self, pool_file):
        result = invoke(pool_file, "keys", "list")
        assert result.exit_code == 0
        assert "No API keys configured" in result.stdout

    def test_status(self, pool_file):
        invoke(pool_file, "keys", "add", KEY_A)

        result = invoke(pool_file, "keys", "status")
        assert result.exit_code == 0
        assert "Keys configured: 1" in result.stdout
        assert "...11111111" in result.stdout
        assert KEY_A not in result.stdout

    def test_switch_moves_to_least_used(self, pool_file):
        invoke(pool_file, "keys", "add", KEY_A)
        invoke(pool_file, "keys", "add", KEY_B)
        data = json.loads(pool_file.read_text())
        data["usage"] = {KEY_A: 12}
        pool_file.write_text(json.dumps(data))

        result = invoke(pool_file, "keys", "switch")
        assert result.exit_code == 0
        assert "...22222222" in result.stdout
        assert json.loads(pool_file.read_text())["currentIndex"] == 1

    def test_switch_empty_pool_fails(self, pool_file):
        result = invoke(pool_file, "keys", "switch")
        assert result.exit_code == 1
        assert "No API keys configured" in result.stdout

    def test_remove(self, pool_file):
        invoke(pool_file, "keys", "add", KEY_A)
        invoke(pool_file, "keys", "add", KEY_B)

        result = invoke(pool_file, "keys", "remove", "0")
        assert result.exit_code == 0
        assert json.loads(pool_file.read_text())["keys"] == [KEY_B]

    def test_remove_out_of_range_fails(self, pool_file):
        invoke(pool_file, "keys", "add", KEY_A)

        result = invoke(pool_file, "keys", "remove", "3")
        assert result.exit_code == 1
        assert "No API key at position 3" in result.stdout

    def test_pool_path_from_environment(self, tmp_path, monkeypatch):
        env_pool = tmp_path / "env-pool.json"
        monkeypatch.setenv("KEYPOOL_POOL__PATH", str(env_pool))

        result = runner.invoke(app, ["keys", "add", KEY_A])
        assert result.exit_code == 0
        assert json.loads(env_pool.read_text())["keys"] == [KEY_A]


class TestConfigCommands:
    """Tests for config subcommands."""

    def test_config_help(self):
        result = runner.invoke(app, ["config", "--help"])
        assert result.exit_code == 0
        assert "show" in result.stdout
        assert "init" in result.stdout

    def test_config_show(self, pool_file):
        result = invoke(pool_file, "config", "show")
        assert result.exit_code == 0
        assert "Check Every: 10 requests" in result.stdout

    def test_config_init(self, tmp_path):
        target = tmp_path / "generated.yaml"
        result = runner.invoke(app, ["config", "init", "--output", str(target)])
        assert result.exit_code == 0
        assert target.exists()
        assert "check_interval: 10" in target.read_text()

    def test_config_init_existing_cancelled(self, tmp_path):
        target = tmp_path / "keypool.yaml"
        target.write_text("rotation:\n  check_interval: 4\n")

        result = runner.invoke(app, ["config", "init", "--output", str(target)], input="n\n")
        assert result.exit_code == 0
        assert "Cancelled" in result.stdout
        assert "check_interval: 4" in target.read_text()
