#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/render/emitter.py
"""Renderable-tree emitter.

This module converts a fully transformed syntax tree into render nodes using
a fixed mapping:

=====================  ==================================================
Syntax node            Render node
=====================  ==================================================
Document               ``article``
Paragraph              ``p`` (children inlined inside tight list items)
Heading                ``h1`` .. ``h6`` (``id`` from ``metadata["id"]``)
List                   ``ul`` / ``ol`` (``start`` when not 1)
ListItem               ``li``; task items get ``class="task-list-item"``
                       and a disabled checkbox ``input``
Table                  ``table`` > ``thead``/``tbody`` > ``tr`` > ``th``/``td``
CodeBlock              ``pre`` > ``code.language-x``; tokens become
                       ``span.token.<class>``, plain tokens stay text
BlockQuote             ``blockquote``
ThematicBreak          ``hr``
Text                   text
Emphasis / Strong      ``em`` / ``strong``
Strikethrough / Code   ``del`` / ``code``
Link / Image           ``a`` / ``img``
LineBreak              hard: ``br``; soft: text ``"\\n"``
ComponentInvocation    ``bindings[tag_name](props, children)``
FootnoteReference      ``sup`` > ``a[data-footnote-ref]`` numbered link
FootnoteDefinition     ``li`` with back-reference links, collected into a
                       trailing ``section.footnotes`` > ``ol``
=====================  ==================================================

Component renderers are opaque callables. Their props are passed through
unchanged and their result (one render node or a list of them) is placed in
the output as-is.

"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from sitemark.ast.nodes import (
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
    Strikethrough,
    Strong,
    Table,
    TableCell,
    TableRow,
    Text,
    ThematicBreak,
)
from sitemark.ast.visitors import NodeVisitor
from sitemark.exceptions import CompilationError, UnknownComponentError
from sitemark.highlight import PLAIN, normalize_language
from sitemark.render import nodes as rn

logger = logging.getLogger(__name__)

FOOTNOTE_LABEL_ID = "footnote-label"

ComponentRenderer = Callable[[Mapping[str, Any], list[rn.RenderNode]], Union[rn.RenderNode, Sequence[rn.RenderNode]]]


def _merge_text(nodes: list[rn.RenderNode]) -> list[rn.RenderNode]:
    """Merge adjacent text nodes."""
    merged: list[rn.RenderNode] = []
    for node in nodes:
        if isinstance(node, rn.Text) and merged and isinstance(merged[-1], rn.Text):
            merged[-1] = rn.Text(content=merged[-1].content + node.content)
        else:
            merged.append(node)
    return merged


class Emitter(NodeVisitor):
    """Convert a syntax tree into render nodes.

    Every ``visit_*`` method returns a list of render nodes, so that nodes
    which disappear (a paragraph inlined into a tight list item) or expand
    (a component renderer returning several nodes) fit the same interface.

    Parameters
    ----------
    bindings : mapping, optional
        Component tag name -> renderer callable

    Examples
    --------
        >>> emitter = Emitter({"Card": lambda props, children: Element("div", {"class": "card"}, children)})
        >>> article = emitter.emit(document)

    """

    def __init__(self, bindings: Optional[Mapping[str, ComponentRenderer]] = None):
        """Initialize the emitter with a component binding table."""
        self.bindings: Mapping[str, ComponentRenderer] = bindings or {}
        self._tight: list[bool] = []
        self._cell_tag = "td"

    def emit(self, tree: Node) -> rn.RenderNode:
        """Emit the render tree for a syntax tree.

        Parameters
        ----------
        tree : Node
            Root of the transformed syntax tree

        Returns
        -------
        RenderNode
            The render tree root (an ``article`` element for a Document)

        Raises
        ------
        UnknownComponentError
            If a component tag has no binding
        CompilationError
            If a component renderer fails or returns something that is not a
            render node

        """
        self._tight = []
        self._cell_tag = "td"
        result = tree.accept(self)
        if len(result) == 1:
            return result[0]
        return rn.Element(tag="div", children=result)

    def _children(self, nodes: Sequence[Node]) -> list[rn.RenderNode]:
        out: list[rn.RenderNode] = []
        for node in nodes:
            out.extend(node.accept(self))
        return _merge_text(out)

    def _element(self, tag: str, children: Sequence[Node] = (), **attributes: Any) -> list[rn.RenderNode]:
        attrs = {key: value for key, value in attributes.items() if value is not None}
        return [rn.Element(tag=tag, attributes=attrs, children=self._children(children))]

    # -- block nodes ---------------------------------------------------------

    def visit_document(self, node: Document) -> list[rn.RenderNode]:
        footnotes = [child for child in node.children if isinstance(child, FootnoteDefinition)]
        body = [child for child in node.children if not isinstance(child, FootnoteDefinition)]
        children = self._children(body)
        if footnotes:
            items = self._children(footnotes)
            heading = rn.Element(
                tag="h2", attributes={"id": FOOTNOTE_LABEL_ID, "class": "sr-only"}, children=[rn.Text("Footnotes")]
            )
            children.append(
                rn.Element(
                    tag="section",
                    attributes={"class": "footnotes", "data-footnotes": True},
                    children=[heading, rn.Element(tag="ol", children=items)],
                )
            )
        return [rn.Element(tag="article", children=children)]

    def visit_heading(self, node: Heading) -> list[rn.RenderNode]:
        return self._element(f"h{node.level}", node.content, id=node.metadata.get("id"))

    def visit_paragraph(self, node: Paragraph) -> list[rn.RenderNode]:
        if self._tight and self._tight[-1]:
            return self._children(node.content)
        return self._element("p", node.content)

    def visit_code_block(self, node: CodeBlock) -> list[rn.RenderNode]:
        language = normalize_language(node.language)
        code_children: list[rn.RenderNode]
        if node.tokens is None:
            code_children = [rn.Text(content=node.content)] if node.content else []
        else:
            code_children = [
                (
                    rn.Text(content=token.text)
                    if token.token_class == PLAIN
                    else rn.Element(
                        tag="span", attributes={"class": f"token {token.token_class}"}, children=[rn.Text(token.text)]
                    )
                )
                for token in node.tokens
                if token.text
            ]

        attrs = {"class": f"language-{language}"} if language else {}
        code = rn.Element(tag="code", attributes=attrs, children=code_children)
        return [rn.Element(tag="pre", attributes=dict(attrs), children=[code])]

    def visit_block_quote(self, node: BlockQuote) -> list[rn.RenderNode]:
        self._tight.append(False)
        try:
            return self._element("blockquote", node.children)
        finally:
            self._tight.pop()

    def visit_list(self, node: List) -> list[rn.RenderNode]:
        tag = "ol" if node.ordered else "ul"
        start = node.start if node.ordered and node.start != 1 else None
        self._tight.append(node.tight)
        try:
            return self._element(tag, node.items, start=start)
        finally:
            self._tight.pop()

    def visit_list_item(self, node: ListItem) -> list[rn.RenderNode]:
        children = self._children(node.children)
        if node.task_status is None:
            return [rn.Element(tag="li", children=children)]

        checkbox_attrs: dict[str, Any] = {"type": "checkbox", "disabled": True}
        if node.task_status == "checked":
            checkbox_attrs["checked"] = True
        checkbox = rn.Element(tag="input", attributes=checkbox_attrs)
        lead: list[rn.RenderNode] = [checkbox, rn.Text(" ")] if children else [checkbox]
        return [
            rn.Element(
                tag="li",
                attributes={"class": "task-list-item"},
                children=_merge_text(lead + children),
            )
        ]

    def visit_table(self, node: Table) -> list[rn.RenderNode]:
        sections: list[rn.RenderNode] = []
        if node.header is not None:
            sections.append(rn.Element(tag="thead", children=node.header.accept(self)))
        if node.rows:
            sections.append(rn.Element(tag="tbody", children=self._children(node.rows)))
        return [rn.Element(tag="table", children=sections)]

    def visit_table_row(self, node: TableRow) -> list[rn.RenderNode]:
        self._cell_tag = "th" if node.is_header else "td"
        return [rn.Element(tag="tr", children=self._children(node.cells))]

    def visit_table_cell(self, node: TableCell) -> list[rn.RenderNode]:
        return self._element(self._cell_tag, node.content, align=node.alignment)

    def visit_footnote_definition(self, node: FootnoteDefinition) -> list[rn.RenderNode]:
        prefix = node.metadata.get("id_prefix", "")
        backrefs: list[rn.RenderNode] = []
        for occurrence in range(1, node.reference_count + 1):
            suffix = "" if occurrence == 1 else f"-{occurrence}"
            arrow: list[rn.RenderNode] = [rn.Text("↩")]
            if occurrence > 1:
                arrow.append(rn.Element(tag="sup", children=[rn.Text(str(occurrence))]))
            backrefs.append(rn.Text(" "))
            backrefs.append(
                rn.Element(
                    tag="a",
                    attributes={
                        "href": f"#{prefix}fnref-{node.number}{suffix}",
                        "class": "data-footnote-backref",
                        "data-footnote-backref": True,
                        "aria-label": f"Back to reference {node.number}{suffix}",
                    },
                    children=arrow,
                )
            )

        content = self._children(node.children)
        last = content[-1] if content else None
        # Back-references go inside a trailing paragraph
        if isinstance(last, rn.Element) and last.tag == "p":
            paragraph = _merge_text(last.children + backrefs)
            content[-1] = rn.Element(tag="p", attributes=dict(last.attributes), children=paragraph)
        elif content:
            content.extend(backrefs)
        else:
            content = backrefs[1:]
        return [rn.Element(tag="li", attributes={"id": f"{prefix}fn-{node.number}"}, children=content)]

    def visit_thematic_break(self, node: ThematicBreak) -> list[rn.RenderNode]:
        return [rn.Element(tag="hr")]

    def visit_component(self, node: ComponentInvocation) -> list[rn.RenderNode]:
        renderer = self.bindings.get(node.tag_name)
        if renderer is None:
            raise UnknownComponentError(node.tag_name, node.source_location)

        # Component children are laid out by the component, not as list content
        self._tight.append(False)
        try:
            children = self._children(node.children)
        finally:
            self._tight.pop()

        try:
            result = renderer(node.props, children)
        except Exception as e:
            raise CompilationError(
                f"Component <{node.tag_name}> failed to render: {e}", node.source_location, original_error=e
            ) from e

        produced = list(result) if isinstance(result, (list, tuple)) else [result]
        for item in produced:
            if not isinstance(item, (rn.Element, rn.Text)):
                raise CompilationError(
                    f"Component <{node.tag_name}> returned {type(item).__name__}, expected a render node",
                    node.source_location,
                )
        return produced

    # -- inline nodes --------------------------------------------------------

    def visit_text(self, node: Text) -> list[rn.RenderNode]:
        return [rn.Text(content=node.content)]

    def visit_emphasis(self, node: Emphasis) -> list[rn.RenderNode]:
        return self._element("em", node.content)

    def visit_strong(self, node: Strong) -> list[rn.RenderNode]:
        return self._element("strong", node.content)

    def visit_strikethrough(self, node: Strikethrough) -> list[rn.RenderNode]:
        return self._element("del", node.content)

    def visit_code(self, node: Code) -> list[rn.RenderNode]:
        return [rn.Element(tag="code", children=[rn.Text(content=node.content)])]

    def visit_link(self, node: Link) -> list[rn.RenderNode]:
        return self._element("a", node.content, href=node.url, title=node.title)

    def visit_image(self, node: Image) -> list[rn.RenderNode]:
        return self._element("img", src=node.url, alt=node.alt_text, title=node.title)

    def visit_line_break(self, node: LineBreak) -> list[rn.RenderNode]:
        if node.soft:
            return [rn.Text(content="\n")]
        return [rn.Element(tag="br")]

    def visit_footnote_reference(self, node: FootnoteReference) -> list[rn.RenderNode]:
        prefix = node.metadata.get("id_prefix", "")
        suffix = "" if node.occurrence == 1 else f"-{node.occurrence}"
        link = rn.Element(
            tag="a",
            attributes={
                "href": f"#{prefix}fn-{node.number}",
                "id": f"{prefix}fnref-{node.number}{suffix}",
                "data-footnote-ref": True,
                "aria-describedby": FOOTNOTE_LABEL_ID,
            },
            children=[rn.Text(str(node.number))],
        )
        return [rn.Element(tag="sup", children=[link])]


def emit(tree: Node, bindings: Optional[Mapping[str, ComponentRenderer]] = None) -> rn.RenderNode:
    """Emit the render tree for a syntax tree.

    Parameters
    ----------
    tree : Node
        Root of the transformed syntax tree
    bindings : mapping, optional
        Component tag name -> renderer callable

    Returns
    -------
    RenderNode
        Render tree root

    Raises
    ------
    UnknownComponentError
        If a component tag has no binding

    """
    return Emitter(bindings).emit(tree)


__all__ = [
    "ComponentRenderer",
    "Emitter",
    "emit",
]
