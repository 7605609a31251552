#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Integration tests for the compile pipeline."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from sitemark import (
    CompilationError,
    Compiler,
    CompilerOptions,
    MalformedMetadataError,
    MalformedTableError,
    UnknownComponentError,
    UnknownExtensionError,
    compile_batch,
    compile_document,
    to_html,
)
from sitemark.ast import Document, Heading, Paragraph


@pytest.mark.integration
class TestCompileDocument:
    """Tests for compiling a full page with the default extensions."""

    def test_sample_page_metadata(self, sample_page):
        """Test that front matter supplies the page metadata."""
        result = compile_document(sample_page)

        assert result.metadata.title == "Uses"
        assert result.metadata.description == "Things I use"
        assert result.metadata.extra == {}

    def test_sample_page_html(self, sample_page):
        """Test the render output of every default extension."""
        html = to_html(compile_document(sample_page).tree)

        assert html.startswith("<article>")
        assert '<h1 id="tools-i-use">Tools I Use</h1>' in html
        assert "<em>vim</em>" in html
        assert "<strong>tmux</strong>" in html
        assert "<del>emacs</del>" in html
        assert '<a href="https://example.com">https://example.com</a>.' in html
        assert '<th align="left">Tool</th><th align="right">Kind</th>' in html
        assert '<td align="left">vim</td><td align="right">editor</td>' in html
        assert '<li class="task-list-item"><input type="checkbox" disabled checked> dotfiles</li>' in html
        assert '<li class="task-list-item"><input type="checkbox" disabled> backups</li>' in html
        assert '<pre class="language-python"><code class="language-python">' in html
        assert '<span class="token builtin">print</span>' in html
        assert (
            'nightly<sup><a href="#user-content-fn-1" id="user-content-fnref-1" data-footnote-ref'
            ' aria-describedby="footnote-label">1</a></sup>.'
        ) in html
        assert '<li id="user-content-fn-1"><p>Driven by <em>cron</em>. <a href="#user-content-fnref-1"' in html
        assert html.endswith("</li></ol></section></article>")
        assert "title: Uses" not in html

    def test_result_keeps_transformed_document(self, sample_page):
        """Test that the transformed syntax tree is returned alongside the render tree."""
        result = compile_document(sample_page)
        assert isinstance(result.document, Document)
        assert result.document.children[0].metadata["id"] == "tools-i-use"

    def test_title_from_first_heading(self):
        """Test that the first level-1 heading is the fallback title."""
        result = compile_document("## Sub\n\n# Hello *World*\n\n# Second")
        assert result.metadata.title == "Hello World"
        assert result.metadata.description is None

    def test_metadata_title_wins_over_heading(self):
        """Test that front matter takes priority over the heading."""
        result = compile_document("---\ntitle: Front\n---\n# Heading")
        assert result.metadata.title == "Front"

    def test_extract_metadata_disabled(self):
        """Test that front matter is ignored when metadata extraction is off."""
        options = CompilerOptions(extract_metadata=False)
        result = compile_document("---\ntitle: Front\ntags: [a]\n---\n# Heading", options)

        assert result.metadata.title == "Heading"
        assert result.metadata.extra == {}

    def test_title_from_heading_disabled(self):
        """Test that no title is derived when the fallback is off."""
        result = compile_document("# Heading", CompilerOptions(title_from_heading=False))
        assert result.metadata.title is None

    def test_non_string_description(self):
        """Test that scalar metadata values are converted to strings."""
        result = compile_document("---\ndescription: 42\n---\n")
        assert result.metadata.description == "42"

    def test_mdx_statements_in_extra(self):
        """Test that imports and exports are recorded and not rendered."""
        text = "import Chart from './Chart'\nexport const year = 2024\n\n# Hi"
        result = compile_document(text)

        assert result.metadata.extra == {
            "imports": ["import Chart from './Chart'"],
            "exports": ["export const year = 2024"],
        }
        assert to_html(result.tree) == '<article><h1 id="hi">Hi</h1></article>'

    def test_meta_export(self):
        """Test that a meta export supplies page metadata."""
        result = compile_document("export const meta = { title: 'From Meta', tags: ['a'] }\n\n# Heading")

        assert result.metadata.title == "From Meta"
        assert result.metadata.extra == {"tags": ["a"]}

    def test_component_rendering(self, card_bindings):
        """Test a bound component with block children."""
        options = CompilerOptions(components=card_bindings)
        result = compile_document('<Card title="Hi">\nHello **there**\n</Card>', options)

        assert to_html(result.tree) == (
            '<article><div class="card" data-title="Hi"><p>Hello <strong>there</strong></p></div></article>'
        )

    def test_no_extensions(self):
        """Test that an empty chain leaves markup characters as text."""
        result = compile_document("# T\n\n*a*", CompilerOptions(extensions=()))
        assert to_html(result.tree) == "<article><h1>T</h1><p>*a*</p></article>"


@pytest.mark.integration
class TestCompilationErrors:
    """Tests for structural errors surfaced by compile."""

    def test_unknown_component(self):
        """Test that an unbound component fails with its location."""
        with pytest.raises(UnknownComponentError) as exc_info:
            compile_document("intro\n\n<Chart />")

        assert exc_info.value.tag_name == "Chart"
        assert exc_info.value.line == 3

    def test_malformed_table(self):
        """Test that a table width mismatch fails the document."""
        with pytest.raises(MalformedTableError):
            compile_document("| a | b |\n|---|---|---|")

    def test_malformed_metadata(self):
        """Test that invalid front matter fails the document."""
        with pytest.raises(MalformedMetadataError):
            compile_document("---\ntitle: [unclosed\n---\n")


@pytest.mark.integration
class TestCompilerStages:
    """Tests for the individual compiler stages."""

    def test_parse_does_not_apply_extensions(self):
        """Test that parse returns the raw tree."""
        doc = Compiler().parse("# A")
        assert isinstance(doc.children[0], Heading)
        assert "id" not in doc.children[0].metadata

    def test_transform_applies_chain(self):
        """Test that transform runs the configured chain."""
        compiler = Compiler(CompilerOptions(extensions=("heading-ids",)))
        doc = compiler.transform(compiler.parse("# A"))
        assert doc.children[0].metadata["id"] == "a"

    def test_extensions_fresh_per_document(self):
        """Test that per-document extension state does not leak."""
        compiler = Compiler(CompilerOptions(extensions=("heading-ids",)))
        first = compiler.compile("# Intro")
        second = compiler.compile("# Intro")
        assert first.document.children[0].metadata["id"] == second.document.children[0].metadata["id"] == "intro"


@pytest.mark.integration
class TestDeterminism:
    """Tests that compilation is a pure function of its inputs."""

    def test_same_input_same_output(self, sample_page):
        """Test that two compilations produce identical results."""
        first = compile_document(sample_page)
        second = compile_document(sample_page)

        assert first.tree == second.tree
        assert first.metadata == second.metadata
        assert first.document == second.document

    @given(st.text(alphabet="ab *_~|#-`\n", max_size=60))
    def test_repeatable_outcome(self, text):
        """Test that arbitrary input compiles (or fails) the same way twice."""
        outcomes = []
        for _ in range(2):
            try:
                outcomes.append(to_html(compile_document(text).tree))
            except CompilationError as e:
                outcomes.append((type(e).__name__, str(e)))
        assert outcomes[0] == outcomes[1]


@pytest.mark.integration
class TestCompileBatch:
    """Tests for batch compilation."""

    def test_failures_isolated(self):
        """Test that one failing document does not affect the others."""
        batch = compile_batch({"a.md": "# A", "bad.md": "<Missing />", "c.md": "text"})

        assert not batch.ok
        assert list(batch.results) == ["a.md", "c.md"]
        assert list(batch.errors) == ["bad.md"]
        assert isinstance(batch.errors["bad.md"], UnknownComponentError)

    def test_all_succeed(self):
        """Test that a clean batch is ok."""
        batch = compile_batch({"a.md": "a", "b.md": "b"}, max_workers=2)
        assert batch.ok
        assert batch.errors == {}

    def test_matches_sequential(self, sample_page):
        """Test that concurrent compilation matches compiling one by one."""
        sources = {f"page{i}.md": sample_page.replace("Uses", f"Uses {i}") for i in range(8)}
        batch = compile_batch(sources, max_workers=4)

        for name, text in sources.items():
            assert to_html(batch.results[name].tree) == to_html(compile_document(text).tree)
            assert batch.results[name].metadata == compile_document(text).metadata

    def test_configuration_error_before_compiling(self):
        """Test that an unknown extension fails the whole batch up front."""
        with pytest.raises(UnknownExtensionError):
            compile_batch({"a.md": "a"}, CompilerOptions(extensions=("nope",)))

    def test_empty_batch(self):
        """Test that no sources give an empty ok result."""
        batch = compile_batch({})
        assert batch.ok
        assert batch.results == {}

    def test_paragraph_order_preserved(self):
        """Test that batch results keep document structure."""
        batch = compile_batch({"a.md": "one\n\ntwo"})
        doc = batch.results["a.md"].document
        assert [type(child) for child in doc.children] == [Paragraph, Paragraph]
