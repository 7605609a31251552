#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Integration tests for the sitemark command line."""

import json
import logging
from pathlib import Path

import pytest

from sitemark.cli import (
    EXIT_COMPILATION_ERROR,
    EXIT_FILE_ERROR,
    EXIT_SUCCESS,
    EXIT_VALIDATION_ERROR,
    collect_sources,
    main,
)

COMPONENT_MODULE = '''
from sitemark.render import Element


def card(props, children):
    return Element(tag="section", attributes={"class": "card"}, children=children)
'''


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Run each command in an empty directory with the root logger restored afterwards."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("SITEMARK_CONFIG", raising=False)
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def content_dir(tmp_path):
    """Create a small content tree."""
    content = tmp_path / "content"
    (content / "posts").mkdir(parents=True)
    (content / "index.md").write_text("# Home\n", encoding="utf-8")
    (content / "posts" / "first.mdx").write_text("---\ntitle: First post\n---\n# First\n\nHello\n", encoding="utf-8")
    (content / "notes.txt").write_text("not a page", encoding="utf-8")
    return content


@pytest.mark.integration
@pytest.mark.cli
class TestBuildCommand:
    """Tests for ``sitemark build``."""

    def test_build_directory(self, tmp_path, content_dir, capsys):
        """Test that every page is written under the output directory."""
        out = tmp_path / "out"
        assert main(["build", str(content_dir), "--out", str(out)]) == EXIT_SUCCESS

        assert (out / "index.html").read_text(encoding="utf-8") == '<article><h1 id="home">Home</h1></article>\n'
        assert (out / "posts" / "first.html").is_file()
        assert not (out / "notes.html").exists()
        assert "Compiled 2 of 2 document(s)" in capsys.readouterr().err

    def test_default_output_directory(self, tmp_path, content_dir):
        """Test that output goes to _site by default."""
        assert main(["build", str(content_dir / "index.md")]) == EXIT_SUCCESS
        assert (tmp_path / "_site" / "index.html").is_file()

    def test_json_format(self, tmp_path, content_dir):
        """Test that JSON output carries metadata and the render tree."""
        out = tmp_path / "out"
        assert main(["build", str(content_dir), "--out", str(out), "--format", "json"]) == EXIT_SUCCESS

        data = json.loads((out / "posts" / "first.json").read_text(encoding="utf-8"))
        assert data["metadata"] == {"title": "First post", "description": None, "extra": {}}
        assert data["tree"]["type"] == "element"
        assert data["tree"]["tag"] == "article"

    def test_failing_document(self, tmp_path, capsys):
        """Test that a failing page sets the exit code without stopping the others."""
        content = tmp_path / "content"
        content.mkdir()
        (content / "good.md").write_text("fine", encoding="utf-8")
        (content / "bad.md").write_text("text\n\n<Missing />", encoding="utf-8")
        out = tmp_path / "out"

        assert main(["build", str(content), "--out", str(out)]) == EXIT_COMPILATION_ERROR

        assert (out / "good.html").is_file()
        assert not (out / "bad.html").exists()
        err = capsys.readouterr().err
        assert "Unknown component <Missing>" in err
        assert "Compiled 1 of 2 document(s)" in err

    def test_unknown_extension(self, content_dir, capsys):
        """Test that an unknown extension id is a configuration error."""
        assert main(["build", str(content_dir), "--extensions", "emphasis,footnotes"]) == EXIT_VALIDATION_ERROR
        assert "Unknown extension(s): 'footnotes'" in capsys.readouterr().err

    def test_empty_extension_list(self, tmp_path):
        """Test that an empty --extensions disables every extension."""
        page = tmp_path / "page.md"
        page.write_text("*a*", encoding="utf-8")
        out = tmp_path / "out"

        assert main(["build", str(page), "--out", str(out), "--extensions", ""]) == EXIT_SUCCESS
        assert (out / "page.html").read_text(encoding="utf-8") == "<article><p>*a*</p></article>\n"

    def test_component_binding(self, tmp_path, monkeypatch):
        """Test binding a component to a renderer on the command line."""
        (tmp_path / "cli_test_components.py").write_text(COMPONENT_MODULE, encoding="utf-8")
        monkeypatch.syspath_prepend(str(tmp_path))
        page = tmp_path / "page.mdx"
        page.write_text("<Card>\nInside\n</Card>", encoding="utf-8")
        out = tmp_path / "out"

        code = main(["build", str(page), "--out", str(out), "--component", "Card=cli_test_components:card"])

        assert code == EXIT_SUCCESS
        assert (out / "page.html").read_text(encoding="utf-8") == (
            '<article><section class="card"><p>Inside</p></section></article>\n'
        )

    def test_component_not_importable(self, content_dir, capsys):
        """Test that a bad component path is a configuration error."""
        code = main(["build", str(content_dir), "--component", "Card=no_such_module_xyz:card"])
        assert code == EXIT_VALIDATION_ERROR
        assert "Cannot import module" in capsys.readouterr().err

    def test_malformed_component_flag(self, content_dir):
        """Test that a binding without '=' is rejected by the parser."""
        with pytest.raises(SystemExit) as exc_info:
            main(["build", str(content_dir), "--component", "Card"])
        assert exc_info.value.code == 2

    def test_missing_source(self, tmp_path, capsys):
        """Test that a missing input path is a file error."""
        assert main(["build", str(tmp_path / "missing.md")]) == EXIT_FILE_ERROR
        assert "No such file or directory" in capsys.readouterr().err

    def test_no_sources_found(self, tmp_path, capsys):
        """Test that a directory without pages is a file error."""
        empty = tmp_path / "empty"
        empty.mkdir()
        assert main(["build", str(empty)]) == EXIT_FILE_ERROR
        assert "No .md or .mdx files found" in capsys.readouterr().err

    def test_discovered_config(self, tmp_path):
        """Test that a config file in the working directory is applied."""
        (tmp_path / ".sitemark.toml").write_text('extensions = ["heading-ids"]\n', encoding="utf-8")
        page = tmp_path / "page.md"
        page.write_text("# A *b*", encoding="utf-8")

        assert main(["build", str(page), "--out", "out"]) == EXIT_SUCCESS
        assert (tmp_path / "out" / "page.html").read_text(encoding="utf-8") == (
            '<article><h1 id="a-b">A *b*</h1></article>\n'
        )

    def test_cli_overrides_config(self, tmp_path):
        """Test that command-line flags win over the config file."""
        (tmp_path / ".sitemark.toml").write_text('format = "json"\nextensions = []\n', encoding="utf-8")
        page = tmp_path / "page.md"
        page.write_text("*a*", encoding="utf-8")

        assert main(["build", str(page), "--out", "out", "--format", "html", "--extensions", "emphasis"]) == 0
        assert (tmp_path / "out" / "page.html").read_text(encoding="utf-8") == "<article><p><em>a</em></p></article>\n"

    def test_no_config_flag(self, tmp_path):
        """Test that --no-config ignores a discovered config file."""
        (tmp_path / ".sitemark.toml").write_text('format = "json"\n', encoding="utf-8")
        page = tmp_path / "page.md"
        page.write_text("x", encoding="utf-8")

        assert main(["build", str(page), "--out", "out", "--no-config"]) == EXIT_SUCCESS
        assert (tmp_path / "out" / "page.html").is_file()

    def test_config_from_environment(self, tmp_path, monkeypatch):
        """Test that SITEMARK_CONFIG names the config file."""
        config = tmp_path / "settings.json"
        config.write_text('{"format": "json"}', encoding="utf-8")
        monkeypatch.setenv("SITEMARK_CONFIG", str(config))
        page = tmp_path / "page.md"
        page.write_text("x", encoding="utf-8")

        assert main(["build", str(page), "--out", "out"]) == EXIT_SUCCESS
        assert (tmp_path / "out" / "page.json").is_file()

    def test_invalid_config_file(self, tmp_path, content_dir, capsys):
        """Test that an unreadable config file is a configuration error."""
        config = tmp_path / "broken.toml"
        config.write_text("extensions = [", encoding="utf-8")

        assert main(["build", str(content_dir), "--config", str(config)]) == EXIT_VALIDATION_ERROR
        assert "Invalid TOML" in capsys.readouterr().err

    def test_invalid_format_in_config(self, tmp_path, content_dir):
        """Test that an unsupported format from the config file is rejected."""
        (tmp_path / ".sitemark.toml").write_text('format = "pdf"\n', encoding="utf-8")
        assert main(["build", str(content_dir)]) == EXIT_VALIDATION_ERROR

    def test_jobs_and_log_file(self, tmp_path, content_dir):
        """Test a threaded build that logs each written page to a file."""
        out = tmp_path / "out"
        log_file = tmp_path / "build.log"

        code = main(
            [
                "build",
                str(content_dir),
                "--out",
                str(out),
                "--jobs",
                "2",
                "--log-level",
                "INFO",
                "--log-file",
                str(log_file),
            ]
        )

        assert code == EXIT_SUCCESS
        assert (out / "posts" / "first.html").is_file()
        log_text = log_file.read_text(encoding="utf-8")
        assert " INFO " in log_text
        assert str(out / "index.html") in log_text

    def test_warnings_name_their_document(self, tmp_path, capsys):
        """Test that a parser warning is prefixed with the file being compiled."""
        page = tmp_path / "fence.md"
        page.write_text("```py\nprint(1)\n", encoding="utf-8")

        assert main(["build", str(page), "--out", str(tmp_path / "out")]) == EXIT_SUCCESS
        assert f"WARNING: {page}: Unterminated code fence at line 1" in capsys.readouterr().err

    def test_collect_sources(self, content_dir):
        """Test source discovery order and output-relative paths."""
        found = collect_sources([str(content_dir)])
        assert [relative for _, relative in found] == [Path("index"), Path("posts") / "first"]


@pytest.mark.integration
@pytest.mark.cli
class TestExtensionsCommand:
    """Tests for ``sitemark extensions``."""

    def test_list(self, capsys):
        """Test the plain listing."""
        assert main(["extensions"]) == 0
        out = capsys.readouterr().out
        assert "Available Extensions" in out
        assert "gfm-tables" in out
        assert "Total: 8 extensions" in out

    def test_details(self, capsys):
        """Test the detail view of one extension."""
        assert main(["extensions", "heading-ids"]) == 0
        out = capsys.readouterr().out
        assert "Description: Assign unique anchor ids to headings" in out
        assert "id_prefix (str) (default: '')" in out

    def test_unknown(self, capsys):
        """Test that an unknown extension name fails."""
        assert main(["extensions", "footnotes"]) == 1
        assert "Extension 'footnotes' not found" in capsys.readouterr().err

    def test_rich_details(self, capsys):
        """Test the rich detail view."""
        assert main(["extensions", "heading-ids", "--rich"]) == 0
        assert "heading-ids" in capsys.readouterr().out

    def test_rich_list(self, capsys):
        """Test the rich listing."""
        assert main(["extensions", "--rich"]) == 0
        assert "Available Extensions" in capsys.readouterr().out

    def test_version(self, capsys):
        """Test the version flag."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert "sitemark" in capsys.readouterr().out
