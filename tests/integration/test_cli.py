"""Integration tests for codegen CLI commands.

These tests exercise the full CLI workflow against the sample project.
"""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from codegen import __version__
from codegen.cli import app

runner = CliRunner()


class TestCodegenGenerate:
    """Integration tests for `codegen generate`."""

    def test_generate_writes_outputs(self, sample_project: Path) -> None:
        """Test that generate renders every output of the sample project."""
        result = runner.invoke(app, ["generate"])

        assert result.exit_code == 0, f"Command failed: {result.output}"

        index = (sample_project / "build" / "index.html").read_text()
        assert "<title>Home | Example</title>" in index
        assert '<li><a href="/">Home</a></li>' in index
        assert '<li><a href="/about.html">About</a></li>' in index
        assert "<footer>Example</footer>" in index

        about = (sample_project / "build" / "about.html").read_text()
        assert "<title>About | Example</title>" in about
        assert "<p>Hello from about.</p>" in about
        assert "<li>" not in about

        assert "Generated 2 output(s)" in result.output

    def test_generate_explicit_project(self, sample_project: Path) -> None:
        """Test passing the descriptor path explicitly."""
        result = runner.invoke(app, ["generate", "--project", "codegen.yaml"])

        assert result.exit_code == 0, f"Command failed: {result.output}"
        assert (sample_project / "build" / "about.html").exists()

    def test_generate_is_idempotent(self, sample_project: Path) -> None:
        """Test that two runs produce byte-identical outputs."""
        runner.invoke(app, ["generate"])
        first = (sample_project / "build" / "index.html").read_bytes()
        runner.invoke(app, ["generate"])
        second = (sample_project / "build" / "index.html").read_bytes()

        assert first == second

    def test_generate_malformed_input(self, sample_project: Path) -> None:
        """Test that a malformed input stops the run before its output exists."""
        (sample_project / "data" / "index.json").write_text('{"title": ')

        result = runner.invoke(app, ["generate"])

        assert result.exit_code == 1
        assert "ERROR:" in result.output
        assert "data/index.json" in result.output
        assert not (sample_project / "build" / "index.html").exists()
        assert not (sample_project / "build" / "about.html").exists()

    def test_generate_keep_going(self, sample_project: Path) -> None:
        """Test that --keep-going renders the remaining outputs."""
        (sample_project / "data" / "index.json").write_text('{"title": ')

        result = runner.invoke(app, ["generate", "--keep-going"])

        assert result.exit_code == 1
        assert "1 output(s) failed" in result.output
        assert (sample_project / "build" / "about.html").exists()

    def test_generate_strict_undefined(self, sample_project: Path) -> None:
        """Test that --strict fails on a missing variable."""
        data = json.loads((sample_project / "data" / "about.json").read_text())
        del data["body"]
        (sample_project / "data" / "about.json").write_text(json.dumps(data))

        result = runner.invoke(app, ["generate", "--strict"])

        assert result.exit_code == 1
        assert "failed to execute template" in result.output
        assert (sample_project / "build" / "index.html").exists()

    def test_generate_duplicate_include_definition(self, sample_project: Path) -> None:
        """Test that a definition declared in two include files is rejected."""
        macros = sample_project / "templates" / "macros.j2"
        macros.write_text(macros.read_text() + "{% macro layout() %}x{% endmacro %}\n")

        result = runner.invoke(app, ["generate"])

        assert result.exit_code == 1
        assert "failed parsing include files" in result.output
        assert not (sample_project / "build").exists()

    def test_generate_missing_project(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test running outside a project directory."""
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(app, ["generate"])

        assert result.exit_code == 1
        assert "no project file found" in result.output

    def test_generate_ci_json_logs(self, sample_project: Path) -> None:
        """Test that --ci emits JSON log lines."""
        result = runner.invoke(app, ["--ci", "generate"])

        assert result.exit_code == 0, f"Command failed: {result.output}"
        records = [json.loads(line) for line in result.output.splitlines() if line.strip()]
        summary = records[-1]
        assert summary["msg"] == "Generated 2 output(s)"
        assert summary["outputs"] == ["build/index.html", "build/about.html"]


class TestCodegenCheck:
    """Integration tests for `codegen check`."""

    def test_check_valid_project(self, sample_project: Path) -> None:
        """Test that check succeeds without writing outputs."""
        result = runner.invoke(app, ["check"])

        assert result.exit_code == 0, f"Command failed: {result.output}"
        assert "2 output(s) checked" in result.output
        assert not (sample_project / "build").exists()

    def test_check_template_error(self, sample_project: Path) -> None:
        """Test that check reports template syntax errors."""
        (sample_project / "templates" / "about.j2").write_text("{% if %}")

        result = runner.invoke(app, ["check"])

        assert result.exit_code == 1
        assert "failed to parse template" in result.output


class TestCodegenPreview:
    """Integration tests for `codegen preview`."""

    def test_preview_second_output(self, sample_project: Path) -> None:
        """Test printing one output to stdout."""
        result = runner.invoke(app, ["preview", "-i", "1"])

        assert result.exit_code == 0, f"Command failed: {result.output}"
        assert "<p>Hello from about.</p>" in result.output
        assert not (sample_project / "build").exists()

    def test_preview_out_of_range(self, sample_project: Path) -> None:
        """Test that an invalid index is an error."""
        result = runner.invoke(app, ["preview", "--index", "5"])

        assert result.exit_code == 1
        assert "out of range" in result.output


class TestCodegenVersion:
    """Integration tests for `codegen --version`."""

    def test_version(self) -> None:
        """Test printing the version."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output
