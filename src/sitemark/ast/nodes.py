#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/ast/nodes.py
"""Syntax node classes for parsed page documents.

This module defines the node hierarchy produced by the block parser and
rewritten by the extension chain. Every node owns its children; a tree has a
single synthetic ``Document`` root and no node is shared between parents.

Node Hierarchy
--------------
All nodes inherit from the base Node class and support the visitor pattern.

Block-level nodes:
    - Document, Heading, Paragraph, CodeBlock, BlockQuote, ThematicBreak
    - List, ListItem, Table, TableRow, TableCell
    - ComponentInvocation (also used inline)
    - FootnoteDefinition

Inline nodes:
    - Text, Emphasis, Strong, Strikethrough, Code
    - Link, Image, LineBreak, FootnoteReference

"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Literal, Optional

if TYPE_CHECKING:
    from sitemark.highlight import Token

Alignment = Literal["left", "center", "right"]
TaskStatus = Literal["checked", "unchecked"]


@dataclass(frozen=True)
class SourceLocation:
    """Position of a node in the source document.

    Parameters
    ----------
    line : int
        1-based line number
    column : int, default = 1
        1-based column number

    """

    line: int
    column: int = 1

    def offset(self, lines: int = 0, columns: int = 0) -> SourceLocation:
        """Return a location shifted by the given number of lines and columns."""
        return SourceLocation(line=self.line + lines, column=self.column + columns)


class Node(ABC):
    """Base class for all syntax nodes.

    Parameters
    ----------
    metadata : dict, default = empty dict
        Arbitrary annotations attached by the parser or extensions
    source_location : SourceLocation or None, default = None
        Where this node came from in the source

    """

    metadata: dict[str, Any]
    source_location: Optional[SourceLocation]

    @abstractmethod
    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this node.

        Parameters
        ----------
        visitor : Any
            A visitor object with visit_* methods

        Returns
        -------
        Any
            Result from the visitor's processing

        """
        pass


# ============================================================================
# Block-level Nodes
# ============================================================================


@dataclass
class Document(Node):
    """Synthetic root node of a parsed document.

    Parameters
    ----------
    children : list of Node, default = empty list
        Block-level nodes in the document
    metadata : dict, default = empty dict
        Page metadata extracted from the leading metadata block
    source_location : SourceLocation or None, default = None
        Source location information

    """

    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_document``."""
        return visitor.visit_document(self)


@dataclass
class Heading(Node):
    """Heading node with a level from 1 to 6.

    Parameters
    ----------
    level : int
        Heading level
    content : list of Node, default = empty list
        Inline content of the heading

    """

    level: int
    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def __post_init__(self) -> None:
        """Validate the heading level."""
        if not 1 <= self.level <= 6:
            raise ValueError(f"Heading level must be 1-6, got {self.level}")

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_heading``."""
        return visitor.visit_heading(self)


@dataclass
class Paragraph(Node):
    """Paragraph node containing inline content."""

    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_paragraph``."""
        return visitor.visit_paragraph(self)


@dataclass
class CodeBlock(Node):
    """Fenced code block.

    The interior of a fence is verbatim: no inline parsing is applied to it.

    Parameters
    ----------
    content : str
        Code text without the fence lines
    language : str or None, default = None
        First word of the fence info string
    tokens : list of Token or None, default = None
        Highlighting tokens, set by the highlight pass. ``None`` means the
        block has not been highlighted.
    fence_char : str, default = "`"
        Character used for the fence
    fence_length : int, default = 3
        Length of the opening fence

    """

    content: str
    language: Optional[str] = None
    tokens: Optional[list[Token]] = None
    fence_char: str = "`"
    fence_length: int = 3
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_code_block``."""
        return visitor.visit_code_block(self)


@dataclass
class BlockQuote(Node):
    """Block quote node containing other block elements."""

    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_block_quote``."""
        return visitor.visit_block_quote(self)


@dataclass
class List(Node):
    """List node (ordered or unordered).

    Parameters
    ----------
    ordered : bool
        True for ordered lists, False for bullet lists
    items : list of ListItem, default = empty list
        List items
    start : int, default = 1
        Starting number for ordered lists
    tight : bool, default = True
        Whether the list is tight (no blank lines between or inside items)

    """

    ordered: bool
    items: list[ListItem] = field(default_factory=list)
    start: int = 1
    tight: bool = True
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_list``."""
        return visitor.visit_list(self)


@dataclass
class ListItem(Node):
    """List item node containing block content.

    Parameters
    ----------
    children : list of Node, default = empty list
        Block-level nodes in the item
    task_status : {'checked', 'unchecked'} or None, default = None
        Checkbox state for task list items

    """

    children: list[Node] = field(default_factory=list)
    task_status: Optional[TaskStatus] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_list_item``."""
        return visitor.visit_list_item(self)


@dataclass
class Table(Node):
    """Table node with a header row and column alignments.

    Parameters
    ----------
    header : TableRow or None, default = None
        Header row
    rows : list of TableRow, default = empty list
        Body rows
    alignments : list, default = empty list
        Column alignments ('left', 'center', 'right', or None)

    """

    header: Optional[TableRow] = None
    rows: list[TableRow] = field(default_factory=list)
    alignments: list[Optional[Alignment]] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_table``."""
        return visitor.visit_table(self)


@dataclass
class TableRow(Node):
    """Table row node containing cells."""

    cells: list[TableCell] = field(default_factory=list)
    is_header: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_table_row``."""
        return visitor.visit_table_row(self)


@dataclass
class TableCell(Node):
    """Table cell node with inline content and optional alignment."""

    content: list[Node] = field(default_factory=list)
    alignment: Optional[Alignment] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_table_cell``."""
        return visitor.visit_table_cell(self)


@dataclass
class ThematicBreak(Node):
    """Thematic break node (horizontal rule)."""

    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_thematic_break``."""
        return visitor.visit_thematic_break(self)


@dataclass
class ComponentInvocation(Node):
    """Embedded component supplied by the composition layer.

    The compiler never interprets a component's props; they are handed to the
    bound renderer as-is.

    Parameters
    ----------
    tag_name : str
        Component tag, e.g. ``"Card"`` or ``"Card.Title"``
    props : dict, default = empty dict
        Attribute values from the invocation
    children : list of Node, default = empty list
        Nested content (block nodes for block invocations, inline nodes for
        inline invocations)
    inline : bool, default = False
        Whether the invocation appeared inside a paragraph

    """

    tag_name: str
    props: dict[str, Any] = field(default_factory=dict)
    children: list[Node] = field(default_factory=list)
    inline: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_component``."""
        return visitor.visit_component(self)


@dataclass
class FootnoteDefinition(Node):
    """Footnote body, collected from a ``[^label]: text`` definition.

    Parameters
    ----------
    label : str
        Normalised (lower-case) footnote label
    number : int
        Display number, assigned in order of first reference
    children : list of Node, default = empty list
        Block content of the footnote
    reference_count : int, default = 1
        How many references point at this footnote

    """

    label: str
    number: int
    children: list[Node] = field(default_factory=list)
    reference_count: int = 1
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_footnote_definition``."""
        return visitor.visit_footnote_definition(self)


# ============================================================================
# Inline Nodes
# ============================================================================


@dataclass
class Text(Node):
    """Plain text node.

    Text produced from a backslash escape carries ``metadata["escaped"] = True``
    and is never reinterpreted as syntax by later passes.

    """

    content: str
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    @property
    def escaped(self) -> bool:
        """Return True if this text came from a backslash escape."""
        return bool(self.metadata.get("escaped"))

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_text``."""
        return visitor.visit_text(self)


@dataclass
class Emphasis(Node):
    """Emphasis (italic) node."""

    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_emphasis``."""
        return visitor.visit_emphasis(self)


@dataclass
class Strong(Node):
    """Strong (bold) node."""

    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_strong``."""
        return visitor.visit_strong(self)


@dataclass
class Strikethrough(Node):
    """Strikethrough node (GFM extension)."""

    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_strikethrough``."""
        return visitor.visit_strikethrough(self)


@dataclass
class Code(Node):
    """Inline code span."""

    content: str
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_code``."""
        return visitor.visit_code(self)


@dataclass
class Link(Node):
    """Hyperlink node.

    Parameters
    ----------
    url : str
        Link target
    content : list of Node, default = empty list
        Link text
    title : str or None, default = None
        Optional link title

    """

    url: str
    content: list[Node] = field(default_factory=list)
    title: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_link``."""
        return visitor.visit_link(self)


@dataclass
class Image(Node):
    """Image node."""

    url: str
    alt_text: str = ""
    title: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_image``."""
        return visitor.visit_image(self)


@dataclass
class LineBreak(Node):
    """Line break inside a paragraph.

    Parameters
    ----------
    soft : bool, default = False
        True for a plain newline in the source, False for a hard break
        (two trailing spaces or a trailing backslash)

    """

    soft: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_line_break``."""
        return visitor.visit_line_break(self)


@dataclass
class FootnoteReference(Node):
    """Reference to a footnote, written ``[^label]``.

    Parameters
    ----------
    label : str
        Normalised (lower-case) footnote label
    number : int
        Display number of the referenced footnote
    occurrence : int, default = 1
        1-based index of this reference among references to the same footnote

    """

    label: str
    number: int
    occurrence: int = 1
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Dispatch to ``visitor.visit_footnote_reference``."""
        return visitor.visit_footnote_reference(self)


# Nodes whose children live in an inline ``content`` list
INLINE_CONTAINERS = (Heading, Paragraph, Emphasis, Strong, Strikethrough, Link, TableCell)

# Nodes whose children live in a block ``children`` list
BLOCK_CONTAINERS = (Document, BlockQuote, ListItem, ComponentInvocation, FootnoteDefinition)


def get_node_children(node: Node) -> list[Node]:
    """Get all child nodes from a node.

    Parameters
    ----------
    node : Node
        The node to get children from

    Returns
    -------
    list of Node
        Child nodes in source order (empty list for leaf nodes)

    Examples
    --------
    >>> heading = Heading(level=1, content=[Text("Hello"), Strong(content=[Text("world")])])
    >>> len(get_node_children(heading))
    2

    """
    if isinstance(node, BLOCK_CONTAINERS):
        return list(node.children)

    if isinstance(node, INLINE_CONTAINERS):
        return list(node.content)

    if isinstance(node, List):
        return list(node.items)

    if isinstance(node, Table):
        children: list[Node] = []
        if node.header:
            children.append(node.header)
        children.extend(node.rows)
        return children

    if isinstance(node, TableRow):
        return list(node.cells)

    return []


def replace_node_children(node: Node, new_children: list[Node]) -> Node:
    """Create a copy of a node with replaced children.

    The original node is left untouched.

    Parameters
    ----------
    node : Node
        The node to copy
    new_children : list of Node
        Children for the copy

    Returns
    -------
    Node
        New node of the same type with the children replaced

    Raises
    ------
    ValueError
        If a Table receives children that are not TableRow instances

    Notes
    -----
    For Table nodes, the first row with ``is_header=True`` becomes the header
    and every other row becomes a body row.

    """
    if isinstance(node, BLOCK_CONTAINERS):
        return replace(node, children=new_children)

    if isinstance(node, INLINE_CONTAINERS):
        return replace(node, content=new_children)

    if isinstance(node, List):
        return replace(node, items=new_children)  # type: ignore[arg-type]

    if isinstance(node, Table):
        header_row: TableRow | None = None
        body_rows: list[TableRow] = []
        for child in new_children:
            if not isinstance(child, TableRow):
                raise ValueError(f"Table children must be TableRow instances, got {type(child).__name__}")
            if child.is_header and header_row is None:
                header_row = child
            else:
                body_rows.append(child)
        return replace(node, header=header_row, rows=body_rows)

    if isinstance(node, TableRow):
        return replace(node, cells=new_children)  # type: ignore[arg-type]

    return node


def plain_text(nodes: list[Node]) -> str:
    """Concatenate the visible text of a list of inline nodes.

    Parameters
    ----------
    nodes : list of Node
        Inline nodes

    Returns
    -------
    str
        Text content with markup removed

    """
    parts: list[str] = []
    for node in nodes:
        if isinstance(node, (Text, Code)):
            parts.append(node.content)
        elif isinstance(node, LineBreak):
            parts.append(" " if node.soft else "\n")
        elif isinstance(node, Image):
            parts.append(node.alt_text)
        else:
            parts.append(plain_text(get_node_children(node)))
    return "".join(parts)
