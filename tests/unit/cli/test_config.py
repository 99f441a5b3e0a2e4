"""Unit tests for the config commands."""

from pathlib import Path

from typer.testing import CliRunner

from tidyctl.cli.main import app
from tidyctl.core.config import TidyConfig, load_config
from tidyctl.core.paths import get_config_path

runner = CliRunner()


class TestConfigInit:
    """Tests for tidyctl config init."""

    def test_writes_defaults(self) -> None:
        """A default settings file is created at the XDG path."""
        result = runner.invoke(app, ["config", "init"])

        assert result.exit_code == 0
        assert load_config(get_config_path()) == TidyConfig()

    def test_refuses_overwrite(self, tmp_path: Path) -> None:
        """An existing file is kept without --force."""
        path = tmp_path / "config.toml"
        path.write_text("notify = false\n")

        result = runner.invoke(app, ["config", "init", "-c", str(path)])

        assert result.exit_code == 1
        assert path.read_text() == "notify = false\n"

    def test_force_overwrites(self, tmp_path: Path) -> None:
        """--force replaces the file with defaults."""
        path = tmp_path / "config.toml"
        path.write_text("notify = false\n")

        result = runner.invoke(app, ["config", "init", "-c", str(path), "--force"])

        assert result.exit_code == 0
        assert load_config(path).notify is True


class TestConfigShow:
    """Tests for tidyctl config show."""

    def test_shows_settings(self, tmp_path: Path) -> None:
        """Effective settings are printed."""
        path = tmp_path / "config.toml"
        path.write_text('failure_severity = "low"\n')

        result = runner.invoke(app, ["config", "show", "-c", str(path)])

        assert result.exit_code == 0
        assert "failure_severity" in result.stdout
        assert "low" in result.stdout

    def test_invalid_settings(self, tmp_path: Path) -> None:
        """Invalid settings exit with code 1."""
        path = tmp_path / "config.toml"
        path.write_text("hash_chunk_size = 1\n")

        result = runner.invoke(app, ["config", "show", "-c", str(path)])

        assert result.exit_code == 1
