#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/ast/__init__.py
"""Syntax tree for page documents.

The block parser produces these nodes, the extension chain rewrites them and
the emitter turns them into render nodes. The module consists of:

- nodes: syntax node classes and child-access helpers
- visitors: visitor base class used by the emitter
- transforms: traversal, cloning and well-formedness utilities

Examples
--------
    >>> from sitemark.ast import Document, Heading, Text
    >>> doc = Document(children=[Heading(level=1, content=[Text(content="Title")])])

"""

from __future__ import annotations

from sitemark.ast.nodes import (
    Alignment,
    BlockQuote,
    Code,
    CodeBlock,
    ComponentInvocation,
    Document,
    Emphasis,
    FootnoteDefinition,
    FootnoteReference,
    Heading,
    Image,
    LineBreak,
    Link,
    List,
    ListItem,
    Node,
    Paragraph,
    SourceLocation,
    Strikethrough,
    Strong,
    Table,
    TableCell,
    TableRow,
    Text,
    ThematicBreak,
    get_node_children,
    plain_text,
    replace_node_children,
)
from sitemark.ast.transforms import clone_node, extract_nodes, find_first, iter_nodes, validate_tree
from sitemark.ast.visitors import NodeVisitor

__all__ = [
    "Alignment",
    "BlockQuote",
    "Code",
    "CodeBlock",
    "ComponentInvocation",
    "Document",
    "Emphasis",
    "FootnoteDefinition",
    "FootnoteReference",
    "Heading",
    "Image",
    "LineBreak",
    "Link",
    "List",
    "ListItem",
    "Node",
    "NodeVisitor",
    "Paragraph",
    "SourceLocation",
    "Strikethrough",
    "Strong",
    "Table",
    "TableCell",
    "TableRow",
    "Text",
    "ThematicBreak",
    "clone_node",
    "extract_nodes",
    "find_first",
    "get_node_children",
    "iter_nodes",
    "plain_text",
    "replace_node_children",
    "validate_tree",
]
