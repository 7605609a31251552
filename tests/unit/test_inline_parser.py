#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for inline parsing and component tag reading."""

import pytest

from sitemark.ast import Code, ComponentInvocation, Image, LineBreak, Link, SourceLocation, Text
from sitemark.parsers import parse_inline
from sitemark.parsers.inline import find_closing_tag, parse_tag, read_expression


@pytest.mark.unit
class TestInlineParser:
    """Tests for inline node production."""

    def test_plain_text(self):
        """Test that plain text stays one node."""
        assert parse_inline("just text") == [Text(content="just text")]

    def test_emphasis_markers_left_as_text(self):
        """Test that delimiter characters are left for the extensions."""
        assert parse_inline("*a* ~~b~~ | c") == [Text(content="*a* ~~b~~ | c")]

    def test_backslash_escape(self):
        """Test that escaped punctuation becomes marked text."""
        nodes = parse_inline(r"\*not\*")
        assert nodes == [
            Text(content="*", metadata={"escaped": True}),
            Text(content="not"),
            Text(content="*", metadata={"escaped": True}),
        ]
        assert nodes[0].escaped

    def test_backslash_before_letter_is_literal(self):
        """Test that a backslash before a letter is kept."""
        assert parse_inline(r"a\b") == [Text(content=r"a\b")]

    def test_code_span(self):
        """Test a code span between text."""
        assert parse_inline("use `a | b` here") == [
            Text(content="use "),
            Code(content="a | b", source_location=SourceLocation(line=1, column=5)),
            Text(content=" here"),
        ]

    def test_double_backtick_code_span(self):
        """Test that a double-backtick span may contain a backtick."""
        nodes = parse_inline("`` a`b ``")
        assert len(nodes) == 1
        assert nodes[0].content == "a`b"

    def test_unmatched_backtick(self):
        """Test that an unmatched backtick is literal."""
        assert parse_inline("a ` b") == [Text(content="a ` b")]

    def test_link_with_title(self):
        """Test a link with a title."""
        link = parse_inline('[docs](/docs "Docs")')[0]
        assert isinstance(link, Link)
        assert link.url == "/docs"
        assert link.title == "Docs"
        assert link.content == [Text(content="docs")]

    def test_image(self):
        """Test that image alt text is kept verbatim."""
        image = parse_inline("![alt *x*](a.png)")[0]
        assert isinstance(image, Image)
        assert image.url == "a.png"
        assert image.alt_text == "alt *x*"

    def test_brackets_without_destination(self):
        """Test that brackets not followed by a destination are text."""
        assert parse_inline("[not a link]") == [Text(content="[not a link]")]

    def test_angle_autolink(self):
        """Test an angle-bracket URL autolink."""
        link = parse_inline("<https://x.dev>")[0]
        assert isinstance(link, Link)
        assert link.url == "https://x.dev"
        assert link.metadata == {"autolink": True}

    def test_email_autolink(self):
        """Test an angle-bracket email autolink."""
        link = parse_inline("<me@x.dev>")[0]
        assert link.url == "mailto:me@x.dev"
        assert link.content == [Text(content="me@x.dev")]

    def test_soft_and_hard_breaks(self):
        """Test that two trailing spaces or a backslash make a hard break."""
        soft = parse_inline("a\nb")
        assert isinstance(soft[1], LineBreak) and soft[1].soft

        hard = parse_inline("a  \nb")
        assert hard[0] == Text(content="a")
        assert isinstance(hard[1], LineBreak) and not hard[1].soft

        backslash = parse_inline("a\\\nb")
        assert isinstance(backslash[1], LineBreak) and not backslash[1].soft

    def test_inline_component(self):
        """Test an inline component with children."""
        nodes = parse_inline("Press <Kbd>Ctrl</Kbd> now")
        assert nodes[0] == Text(content="Press ")
        component = nodes[1]
        assert isinstance(component, ComponentInvocation)
        assert component.inline
        assert component.tag_name == "Kbd"
        assert component.children == [Text(content="Ctrl")]
        assert nodes[2] == Text(content=" now")

    def test_inline_component_location(self):
        """Test that inline components are located relative to the text start."""
        nodes = parse_inline("x <B>y</B>", SourceLocation(line=3, column=5))
        assert nodes[1].source_location == SourceLocation(line=3, column=7)

    def test_unclosed_inline_component_is_text(self):
        """Test that an unclosed inline component is kept as text."""
        assert parse_inline("a <B>b") == [Text(content="a <B>b")]


@pytest.mark.unit
class TestTagReading:
    """Tests for the component tag reader."""

    def test_parse_tag(self):
        """Test reading a tag with several attribute forms."""
        tag = parse_tag("<Card title='a' count={3} open>", 0)
        assert tag is not None
        assert tag.name == "Card"
        assert tag.props == {"title": "a", "count": 3, "open": True}
        assert not tag.self_closing
        assert tag.end == len("<Card title='a' count={3} open>")

    def test_parse_tag_dotted_name(self):
        """Test a namespaced component name."""
        tag = parse_tag("<UI.Button />", 0)
        assert tag.name == "UI.Button"
        assert tag.self_closing

    def test_parse_tag_rejects_lowercase_and_incomplete(self):
        """Test that non-component or unfinished tags are rejected."""
        assert parse_tag("<div>", 0) is None
        assert parse_tag('<Card title="a"', 0) is None
        assert parse_tag("<Card data={[1, 2]>", 0) is None

    def test_read_expression_ignores_braces_in_strings(self):
        """Test that braces inside quotes do not count."""
        assert read_expression('{"a}": 1} rest', 0) == ('"a}": 1', 9)

    def test_read_expression_ignores_comments(self):
        """Test that quotes and braces inside comments do not count."""
        text = "{a: 1, // it's }\n/* } */ b: 2} rest"
        assert read_expression(text, 0) == ("a: 1, // it's }\n/* } */ b: 2", len(text) - 5)
        assert read_expression("{a: 1 // open", 0) is None

    def test_find_closing_tag_counts_nesting(self):
        """Test that nested tags of the same name are balanced."""
        text = "<A><A>x</A></A>"
        assert find_closing_tag(text, "A", 3) == (11, 15)

    def test_find_closing_tag_missing(self):
        """Test that a missing closing tag returns None."""
        assert find_closing_tag("<A>text", "A", 3) is None
