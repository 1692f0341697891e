"""
Tests for CLI commands.

Uses typer's CliRunner to invoke the commands in-process.
"""

import json

import pytest
from typer.testing import CliRunner

from readprops.cli.main import app

runner = CliRunner()


@pytest.fixture
def project(tmp_path):
    (tmp_path / "base.properties").write_text("host=example.com\nport=8080\n")
    (tmp_path / "app.properties").write_text("url=http://${host}:${port}/\ntitle=My App\n")
    return tmp_path


class TestVersion:
    """Tests for --version flag."""

    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "readprops version" in result.output

    def test_version_short_flag(self):
        result = runner.invoke(app, ["-v"])
        assert result.exit_code == 0
        assert "readprops version" in result.output


class TestHelp:
    """Tests for help output."""

    def test_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "readprops" in result.output.lower()

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert result.exit_code == 0
        assert "read" in result.output.lower()

    def test_read_help(self):
        result = runner.invoke(app, ["read", "--help"])
        assert result.exit_code == 0

    def test_commandline_help(self):
        result = runner.invoke(app, ["commandline", "--help"])
        assert result.exit_code == 0


class TestRead:
    """Tests for the read command."""

    def test_properties_output(self, project):
        result = runner.invoke(
            app, ["read", str(project / "base.properties"), str(project / "app.properties")]
        )
        assert result.exit_code == 0, result.output
        assert "url=http://example.com:8080/" in result.output
        assert "title=My App" in result.output

    def test_json_output(self, project):
        result = runner.invoke(
            app,
            ["read", str(project / "base.properties"), str(project / "app.properties"), "--format", "json"],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["url"] == "http://example.com:8080/"

    def test_table_output(self, project):
        result = runner.invoke(app, ["read", str(project / "base.properties"), "--format", "table"])
        assert result.exit_code == 0, result.output
        assert "host" in result.output
        assert "example.com" in result.output

    def test_output_file(self, project):
        target = project / "out" / "resolved.properties"
        result = runner.invoke(
            app,
            ["read", str(project / "base.properties"), str(project / "app.properties"), "-o", str(target)],
        )
        assert result.exit_code == 0, result.output
        assert "url=http://example.com:8080/" in target.read_text()

    def test_output_file_reads_back(self, tmp_path):
        source = tmp_path / "menu.properties"
        source.write_bytes("dessert=crème brûlée\ncafé=${dessert}\n".encode("latin-1"))
        target = tmp_path / "out.properties"
        written = runner.invoke(app, ["read", str(source), "-o", str(target)])
        assert written.exit_code == 0, written.output
        assert target.read_bytes().isascii()

        result = runner.invoke(app, ["read", str(target), "--format", "json"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {"dessert": "crème brûlée", "café": "crème brûlée"}

    def test_define_seeds_properties(self, tmp_path):
        (tmp_path / "app.properties").write_text("greeting=hello ${name}\n")
        result = runner.invoke(app, ["read", str(tmp_path / "app.properties"), "-D", "name=world"])
        assert result.exit_code == 0, result.output
        assert "greeting=hello world" in result.output

    def test_bad_define(self, project):
        result = runner.invoke(app, ["read", str(project / "base.properties"), "-D", "novalue"])
        assert result.exit_code != 0

    def test_unknown_format(self, project):
        result = runner.invoke(app, ["read", str(project / "base.properties"), "--format", "xml"])
        assert result.exit_code != 0

    def test_missing_file_fails(self, tmp_path):
        result = runner.invoke(app, ["read", str(tmp_path / "missing.properties")])
        assert result.exit_code == 1
        assert "Properties could not be loaded" in result.output

    def test_missing_file_quiet(self, tmp_path):
        result = runner.invoke(app, ["read", str(tmp_path / "missing.properties"), "--quiet"])
        assert result.exit_code == 0, result.output

    def test_files_and_urls_conflict(self, project):
        result = runner.invoke(
            app, ["read", str(project / "base.properties"), "--url", "http://example.com/a.properties"]
        )
        assert result.exit_code == 1
        assert "not both" in result.output

    def test_circular_reference(self, tmp_path):
        (tmp_path / "loop.properties").write_text("a=${b}\nb=${a}\n")
        result = runner.invoke(app, ["read", str(tmp_path / "loop.properties")])
        assert result.exit_code == 1
        assert "Circular" in result.output

    def test_env_placeholder(self, tmp_path, monkeypatch):
        monkeypatch.setenv("READPROPS_CLI_USER", "alice")
        (tmp_path / "app.properties").write_text("owner=${env.READPROPS_CLI_USER}\n")
        result = runner.invoke(app, ["read", str(tmp_path / "app.properties")])
        assert result.exit_code == 0, result.output
        assert "owner=alice" in result.output

    def test_config_file(self, project):
        (project / "readprops.yaml").write_text(
            "files:\n  - base.properties\n  - app.properties\n"
        )
        result = runner.invoke(app, ["read", "--config", str(project / "readprops.yaml")])
        assert result.exit_code == 0, result.output
        assert "url=http://example.com:8080/" in result.output

    def test_classpath_url_from_config(self, project):
        (project / "readprops.yaml").write_text("urls:\n  - classpath:/base.properties\nclasspath:\n  - .\n")
        result = runner.invoke(app, ["read", "--config", str(project / "readprops.yaml")])
        assert result.exit_code == 0, result.output
        assert "host=example.com" in result.output

    def test_bad_config_file(self, tmp_path):
        (tmp_path / "readprops.yaml").write_text("quiet: 3\n")
        result = runner.invoke(app, ["read", "--config", str(tmp_path / "readprops.yaml")])
        assert result.exit_code == 1
        assert "quiet" in result.output


class TestCommandline:
    """Tests for the commandline command."""

    def test_bare_arguments(self, project):
        result = runner.invoke(
            app, ["commandline", str(project / "base.properties"), str(project / "app.properties")]
        )
        assert result.exit_code == 0, result.output
        assert "-Dhost=example.com" in result.output
        assert "-Durl=http://${host}:${port}/" in result.output
        assert "title" not in result.output

    def test_property_name(self, project):
        result = runner.invoke(
            app, ["commandline", str(project / "base.properties"), "--property-name", "argLine"]
        )
        assert result.exit_code == 0, result.output
        assert result.output.startswith("argLine= -Dhost=example.com")

    def test_missing_file_fails(self, tmp_path):
        result = runner.invoke(app, ["commandline", str(tmp_path / "missing.properties")])
        assert result.exit_code == 1
        assert "Error" in result.output
