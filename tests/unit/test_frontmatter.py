#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for leading metadata extraction."""

import pytest

from sitemark.exceptions import CompilationError, MalformedMetadataError
from sitemark.parsers import extract_leading_metadata


@pytest.mark.unit
class TestYamlFrontMatter:
    """Tests for YAML front matter."""

    def test_fields_extracted(self):
        """Test that front matter fields are read."""
        meta = extract_leading_metadata("---\ntitle: Uses\ntags: [a, b]\n---\n# Uses")
        assert meta.fields == {"title": "Uses", "tags": ["a", "b"]}

    def test_lines_blanked_not_removed(self):
        """Test that the body keeps one line per source line."""
        text = "---\ntitle: Uses\n---\n# Uses"
        meta = extract_leading_metadata(text)
        assert meta.body.split("\n") == ["", "", "", "# Uses"]

    def test_empty_front_matter(self):
        """Test that an empty block gives no fields."""
        assert extract_leading_metadata("---\n---\ntext").fields == {}

    def test_unclosed_front_matter_is_body(self):
        """Test that '---' without a closing line is ordinary content."""
        meta = extract_leading_metadata("---\ntext")
        assert meta.fields == {}
        assert meta.body == "---\ntext"

    def test_invalid_yaml_raises(self):
        """Test that unparseable YAML is a structural error at line 1."""
        with pytest.raises(MalformedMetadataError) as exc_info:
            extract_leading_metadata("---\ntitle: [unclosed\n---\n")

        assert exc_info.value.line == 1
        assert isinstance(exc_info.value, CompilationError)
        assert exc_info.value.original_error is not None

    def test_non_mapping_raises(self):
        """Test that a YAML list is rejected."""
        with pytest.raises(MalformedMetadataError, match="expected a mapping"):
            extract_leading_metadata("---\n- a\n- b\n---\n")


@pytest.mark.unit
class TestMdxStatements:
    """Tests for MDX import/export statements."""

    def test_meta_export(self):
        """Test a multi-line meta export with a trailing comma."""
        meta = extract_leading_metadata("export const meta = {\n  title: 'Uses',\n  tags: ['a', 'b'],\n}\n\n# Body")
        assert meta.fields == {"title": "Uses", "tags": ["a", "b"]}
        assert meta.body.split("\n")[:4] == ["", "", "", ""]
        assert meta.body.endswith("# Body")

    def test_imports_and_exports_recorded(self):
        """Test that import and export lines are recorded and blanked."""
        meta = extract_leading_metadata("import Chart from './Chart'\nexport const year = 2024\n\n# Hi")
        assert meta.imports == ["import Chart from './Chart'"]
        assert meta.exports == ["export const year = 2024"]
        assert meta.body == "\n\n\n# Hi"

    def test_statements_after_content_are_body(self):
        """Test that only leading statements are extracted."""
        meta = extract_leading_metadata("# Hi\n\nimport x from 'y'")
        assert meta.imports == []

    def test_front_matter_takes_precedence(self):
        """Test that front matter wins over the meta export."""
        meta = extract_leading_metadata("---\ntitle: A\n---\nexport const meta = { title: 'B', draft: true }\n")
        assert meta.fields == {"title": "A", "draft": True}

    def test_unbalanced_meta_export_raises(self):
        """Test that an unbalanced meta export is a structural error."""
        with pytest.raises(MalformedMetadataError) as exc_info:
            extract_leading_metadata("\nexport const meta = { title: 'x'\n# Hi")
        assert exc_info.value.line == 2


@pytest.mark.unit
class TestMetaExportLiterals:
    """Tests for JavaScript literal forms in the meta export."""

    def test_escaped_quote_in_single_quoted_string(self):
        """Test a backslash-escaped apostrophe."""
        meta = extract_leading_metadata("export const meta = { title: 'Sankalp\\'s uses' }\n")
        assert meta.fields == {"title": "Sankalp's uses"}

    def test_template_strings(self):
        """Test backtick strings, including multi-line ones and placeholders."""
        text = "export const meta = {\n  title: `Uses`,\n  description: `line one\nline two ${year}`,\n}\n# Body"
        meta = extract_leading_metadata(text)

        assert meta.fields == {"title": "Uses", "description": "line one\nline two ${year}"}
        assert meta.body.split("\n") == ["", "", "", "", "", "# Body"]

    def test_comments_ignored(self):
        """Test line and block comments, including quotes and braces inside them."""
        text = "export const meta = {\n  // it's {the} title\n  title: 'Uses', /* draft's flag */\n  draft: false,\n}\n"
        meta = extract_leading_metadata(text)
        assert meta.fields == {"title": "Uses", "draft": False}

    def test_url_in_string_is_not_a_comment(self):
        """Test that '//' inside a string is kept."""
        meta = extract_leading_metadata("export const meta = { url: 'https://a.dev/x' }\n")
        assert meta.fields == {"url": "https://a.dev/x"}

    def test_escape_sequences(self):
        """Test unicode, hex and control escapes."""
        meta = extract_leading_metadata('export const meta = { title: "Caf\\u00e9 \\x41\\tB" }\n')
        assert meta.fields == {"title": "Café A\tB"}

    def test_compact_literal(self):
        """Test keys and values without spaces after colons or commas."""
        meta = extract_leading_metadata("export const meta = {title:'X',draft:true,order:2}\n")
        assert meta.fields == {"title": "X", "draft": True, "order": 2}
