#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for the block parser."""

import logging

import pytest

from sitemark.ast import (
    BlockQuote,
    CodeBlock,
    ComponentInvocation,
    Document,
    Heading,
    LineBreak,
    List,
    Paragraph,
    Text,
    ThematicBreak,
    plain_text,
)
from sitemark.parsers import BlockParser, parse


@pytest.mark.unit
class TestHeadingsAndParagraphs:
    """Tests for headings, paragraphs and thematic breaks."""

    def test_heading_and_paragraph(self):
        """Test a heading followed by a paragraph."""
        doc = parse("# Hello\n\nThis is a paragraph.")

        assert isinstance(doc, Document)
        assert len(doc.children) == 2
        heading, paragraph = doc.children
        assert isinstance(heading, Heading)
        assert heading.level == 1
        assert heading.content == [Text(content="Hello")]
        assert isinstance(paragraph, Paragraph)
        assert plain_text(paragraph.content) == "This is a paragraph."

    def test_heading_levels(self):
        """Test that the number of hashes sets the level."""
        doc = parse("###### Six")
        assert doc.children[0].level == 6

    def test_closing_hashes_removed(self):
        """Test that a closing hash sequence is not part of the heading text."""
        doc = parse("## Title ##")
        assert plain_text(doc.children[0].content) == "Title"

    def test_hash_without_space_is_paragraph(self):
        """Test that '#Tag' is not a heading."""
        doc = parse("#NoSpace")
        assert isinstance(doc.children[0], Paragraph)

    def test_multiline_paragraph_has_soft_breaks(self):
        """Test that paragraph lines are joined by soft line breaks."""
        doc = parse("first\nsecond")
        content = doc.children[0].content
        assert content[0] == Text(content="first")
        assert isinstance(content[1], LineBreak) and content[1].soft
        assert content[2] == Text(content="second")

    def test_thematic_break(self):
        """Test that '***' between paragraphs is a thematic break."""
        doc = parse("a\n\n***\n\nb")
        assert [type(child) for child in doc.children] == [Paragraph, ThematicBreak, Paragraph]

    def test_heading_interrupts_paragraph(self):
        """Test that a heading line ends a paragraph."""
        doc = parse("text\n# Heading")
        assert [type(child) for child in doc.children] == [Paragraph, Heading]

    def test_empty_document(self):
        """Test that empty input produces an empty document."""
        assert parse("").children == []
        assert parse("\n\n  \n").children == []

    def test_crlf_line_endings(self):
        """Test that CRLF input parses like LF input."""
        assert parse("# A\r\n\r\nbody") == parse("# A\n\nbody")

    def test_lowercase_html_is_text(self):
        """Test that lower-case tags are not components."""
        doc = parse("<div>hi</div>")
        assert isinstance(doc.children[0], Paragraph)
        assert doc.children[0].content == [Text(content="<div>hi</div>")]


@pytest.mark.unit
class TestSourceLocations:
    """Tests for line and column information."""

    def test_block_lines(self):
        """Test that blocks record their starting line."""
        doc = parse("intro\n\n## Section\n\ntext")
        assert [child.source_location.line for child in doc.children] == [1, 3, 5]

    def test_columns_for_indented_blocks(self):
        """Test that leading spaces shift the column."""
        doc = parse("  indented")
        assert doc.children[0].source_location.column == 3

    def test_front_matter_keeps_line_numbers(self):
        """Test that removing front matter does not shift line numbers."""
        doc = parse("---\ntitle: X\n---\n# Heading")
        assert doc.children[0].source_location.line == 4

    def test_block_quote_child_column(self):
        """Test that block quote content is placed after the marker."""
        doc = parse("> quoted")
        quote = doc.children[0]
        assert quote.source_location.column == 1
        assert quote.children[0].source_location.column == 3

    def test_block_quote_without_space_after_marker(self):
        """Test that content directly after the marker starts one column earlier."""
        quote = parse(">quoted").children[0]
        assert quote.children[0].source_location.column == 2

    def test_indented_block_quote_child_column(self):
        """Test that indentation before the marker shifts quoted content."""
        quote = parse("  > quoted").children[0]
        assert quote.source_location.column == 3
        assert quote.children[0].source_location.column == 5


@pytest.mark.unit
class TestCodeFences:
    """Tests for fenced code blocks."""

    def test_backtick_fence(self):
        """Test a closed backtick fence with a language."""
        doc = parse("```js\nconst x = 1;\n```")
        block = doc.children[0]
        assert isinstance(block, CodeBlock)
        assert block.content == "const x = 1;"
        assert block.language == "js"
        assert block.tokens is None

    def test_tilde_fence_without_language(self):
        """Test a tilde fence with no info string."""
        block = parse("~~~\ncode\n~~~").children[0]
        assert block.language is None
        assert block.fence_char == "~"

    def test_content_is_verbatim(self):
        """Test that markup inside a fence is not parsed."""
        block = parse("```\n# not a heading\n*not emphasis*\n```").children[0]
        assert block.content == "# not a heading\n*not emphasis*"

    def test_longer_fence_contains_shorter(self):
        """Test that a shorter fence does not close a longer one."""
        block = parse("````md\n```\ninner\n```\n````").children[0]
        assert block.content == "```\ninner\n```"

    def test_info_string_kept(self):
        """Test that the full info string is kept in metadata."""
        block = parse("```js{1,3} title=app.js\nx\n```").children[0]
        assert block.language == "js{1,3}"
        assert block.metadata["info"] == "js{1,3} title=app.js"

    def test_unterminated_fence_takes_rest(self, caplog):
        """Test that an unterminated fence runs to the end of input and logs a warning."""
        with caplog.at_level(logging.WARNING):
            doc = parse("```js\nconst x = 1;\n\n# still code")

        assert len(doc.children) == 1
        assert doc.children[0].content == "const x = 1;\n\n# still code"
        assert "Unterminated code fence" in caplog.text

    def test_unterminated_fence_single_line(self):
        """Test that a fence with no closing line and no trailing newline still parses."""
        doc = parse("```js\nconst x = 1;")
        assert len(doc.children) == 1
        assert isinstance(doc.children[0], CodeBlock)
        assert doc.children[0].content == "const x = 1;"

    def test_block_after_fence(self):
        """Test that parsing continues after the closing fence."""
        doc = parse("```\na\n```\nafter")
        assert [type(child) for child in doc.children] == [CodeBlock, Paragraph]


@pytest.mark.unit
class TestBlockQuotesAndLists:
    """Tests for container blocks."""

    def test_block_quote(self):
        """Test a two-line block quote."""
        quote = parse("> quoted\n> more").children[0]
        assert isinstance(quote, BlockQuote)
        assert plain_text(quote.children[0].content) == "quoted more"

    def test_lazy_block_quote_continuation(self):
        """Test that an unmarked line continues a quoted paragraph."""
        quote = parse("> quoted\nlazy").children[0]
        assert len(quote.children) == 1
        assert plain_text(quote.children[0].content) == "quoted lazy"

    def test_bullet_list(self):
        """Test a tight bullet list."""
        lst = parse("- one\n- two\n- three").children[0]
        assert isinstance(lst, List)
        assert not lst.ordered
        assert lst.tight
        assert [plain_text(item.children[0].content) for item in lst.items] == ["one", "two", "three"]

    def test_ordered_list_start(self):
        """Test that an ordered list keeps its start number."""
        lst = parse("3. a\n4. b").children[0]
        assert lst.ordered
        assert lst.start == 3
        assert len(lst.items) == 2

    def test_loose_list(self):
        """Test that blank lines between items make the list loose."""
        lst = parse("- a\n\n- b").children[0]
        assert not lst.tight
        assert len(lst.items) == 2

    def test_marker_change_starts_new_list(self):
        """Test that a different bullet character starts a new list."""
        doc = parse("- a\n+ b")
        assert [type(child) for child in doc.children] == [List, List]

    def test_nested_list(self):
        """Test that an indented list nests inside the item."""
        lst = parse("- a\n  - b").children[0]
        item = lst.items[0]
        assert isinstance(item.children[0], Paragraph)
        assert isinstance(item.children[1], List)
        assert plain_text(item.children[1].items[0].children[0].content) == "b"

    def test_list_item_locations(self):
        """Test that each item records its own line."""
        lst = parse("- a\n- b").children[0]
        assert [item.source_location.line for item in lst.items] == [1, 2]


@pytest.mark.unit
class TestComponents:
    """Tests for component invocations."""

    def test_block_component_with_props(self):
        """Test a block component with a string prop and block children."""
        doc = parse('<Card title="Hi">\nHello **there**\n</Card>')
        component = doc.children[0]

        assert isinstance(component, ComponentInvocation)
        assert component.tag_name == "Card"
        assert component.props == {"title": "Hi"}
        assert not component.inline
        assert isinstance(component.children[0], Paragraph)
        assert component.children[0].source_location.line == 2

    def test_expression_props(self):
        """Test JSON expressions, source expressions and bare attributes."""
        component = parse("<Chart data={[1, 2]} label={user.name} dark />").children[0]
        assert component.props == {"data": [1, 2], "label": "user.name", "dark": True}
        assert component.children == []

    def test_nested_components_of_same_name(self):
        """Test that nested invocations of the same tag balance."""
        doc = parse("<Box>\n<Box>\ninner\n</Box>\n</Box>\nafter")
        outer = doc.children[0]

        assert isinstance(outer, ComponentInvocation)
        assert isinstance(outer.children[0], ComponentInvocation)
        assert plain_text(outer.children[0].children[0].content) == "inner"
        assert isinstance(doc.children[1], Paragraph)

    def test_single_line_component_has_inline_children(self):
        """Test that a one-line invocation gets inline children."""
        component = parse("<Note>Be *careful*</Note>").children[0]
        assert isinstance(component, ComponentInvocation)
        assert component.children == [Text(content="Be *careful*")]

    def test_unclosed_component_takes_rest(self, caplog):
        """Test that an unclosed component extends to the end of input."""
        with caplog.at_level(logging.WARNING):
            doc = parse("<Card>\nHello\n\nWorld")

        assert len(doc.children) == 1
        component = doc.children[0]
        assert isinstance(component, ComponentInvocation)
        assert len(component.children) == 2
        assert "Unclosed component <Card>" in caplog.text

    def test_component_followed_by_text_is_inline(self):
        """Test that text after a tag on the same line makes an inline component."""
        paragraph = parse("<Badge /> new").children[0]
        assert isinstance(paragraph, Paragraph)
        assert isinstance(paragraph.content[0], ComponentInvocation)
        assert paragraph.content[0].inline
        assert paragraph.content[1] == Text(content=" new")

    def test_component_location(self):
        """Test that a component records where its tag starts."""
        doc = parse("intro\n\n<Card />")
        assert doc.children[1].source_location.line == 3


@pytest.mark.unit
class TestBlockParserClass:
    """Tests for the BlockParser entry points."""

    def test_parse_blocks_with_offsets(self):
        """Test that parse_blocks applies the first line and column offset."""
        blocks = BlockParser().parse_blocks(["", "text"], first_line=10, column_offset=4)
        assert blocks[0].source_location.line == 11
        assert blocks[0].source_location.column == 5

    def test_document_metadata_only_when_present(self):
        """Test that document metadata keys are only set when found."""
        assert parse("# A").metadata == {}
        assert parse("---\ntitle: A\n---\n").metadata == {"fields": {"title": "A"}}
