#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for syntax tree traversal utilities."""

import pytest

from sitemark.ast import (
    Document,
    Emphasis,
    Heading,
    Paragraph,
    Strong,
    Text,
    clone_node,
    extract_nodes,
    find_first,
    iter_nodes,
    validate_tree,
)


def make_doc():
    """Build a small document with nested inline content."""
    return Document(
        children=[
            Heading(level=1, content=[Text(content="Title")]),
            Paragraph(content=[Text(content="a "), Strong(content=[Emphasis(content=[Text(content="b")])])]),
        ]
    )


@pytest.mark.unit
class TestTraversal:
    """Tests for iter_nodes, extract_nodes and find_first."""

    def test_pre_order(self):
        """Test that parents come before children and siblings keep source order."""
        names = [type(node).__name__ for node in iter_nodes(make_doc())]
        assert names == ["Document", "Heading", "Text", "Paragraph", "Text", "Strong", "Emphasis", "Text"]

    def test_extract_by_type(self):
        """Test collecting text nodes in document order."""
        texts = extract_nodes(make_doc(), Text)
        assert [node.content for node in texts] == ["Title", "a ", "b"]

    def test_extract_everything(self):
        """Test that no type collects every node."""
        assert len(extract_nodes(make_doc())) == 8

    def test_find_first(self):
        """Test finding the first matching node."""
        found = find_first(make_doc(), lambda node: isinstance(node, Text) and node.content == "b")
        assert found == Text(content="b")

    def test_find_first_no_match(self):
        """Test that no match returns None."""
        assert find_first(make_doc(), lambda node: isinstance(node, Heading) and node.level == 2) is None


@pytest.mark.unit
class TestCloneAndValidate:
    """Tests for clone_node and validate_tree."""

    def test_clone_is_equal_and_independent(self):
        """Test that a clone compares equal but shares no nodes."""
        doc = make_doc()
        copy = clone_node(doc)

        assert copy == doc
        original_ids = {id(node) for node in iter_nodes(doc)}
        assert not original_ids & {id(node) for node in iter_nodes(copy)}

        copy.children[0].content[0].content = "Changed"
        assert doc.children[0].content[0].content == "Title"

    def test_valid_tree(self):
        """Test that a freshly built tree passes."""
        validate_tree(make_doc())

    def test_shared_node_rejected(self):
        """Test that a node reachable from two parents is rejected."""
        shared = Text(content="x")
        doc = Document(children=[Paragraph(content=[shared]), Paragraph(content=[shared])])

        with pytest.raises(ValueError, match="Text node appears more than once"):
            validate_tree(doc)

    def test_non_node_child_rejected(self):
        """Test that a child slot holding a plain value is rejected."""
        doc = Document(children=[Paragraph(content=["loose string"])])

        with pytest.raises(TypeError, match="non-node child: str"):
            validate_tree(doc)
