#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/render/serialize.py
"""Serialization of render trees.

- :func:`to_html` produces an HTML fragment string
- :func:`to_dict` produces a JSON-ready nested dict

Examples
--------
    >>> to_html(Element("p", {}, [Text("a < b")]))
    '<p>a &lt; b</p>'

"""

from __future__ import annotations

from html import escape
from typing import Any

from sitemark.render.nodes import Element, RenderNode, Text

# Elements that never have content or an end tag
VOID_ELEMENTS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr"}
)


def _render_attributes(attributes: dict[str, Any]) -> str:
    parts: list[str] = []
    for name, value in attributes.items():
        if value is None or value is False:
            continue
        if value is True:
            parts.append(f" {name}")
        else:
            parts.append(f' {name}="{escape(str(value), quote=True)}"')
    return "".join(parts)


def to_html(node: RenderNode) -> str:
    """Serialize a render tree to an HTML string.

    Parameters
    ----------
    node : RenderNode
        Render tree root

    Returns
    -------
    str
        HTML fragment. Text and attribute values are escaped; void elements
        (``br``, ``hr``, ``img``, ``input``, ...) have no end tag.

    """
    if isinstance(node, Text):
        return escape(node.content, quote=False)

    attrs = _render_attributes(node.attributes)
    if node.tag in VOID_ELEMENTS:
        return f"<{node.tag}{attrs}>"
    inner = "".join(to_html(child) for child in node.children)
    return f"<{node.tag}{attrs}>{inner}</{node.tag}>"


def to_dict(node: RenderNode) -> dict[str, Any]:
    """Convert a render tree to a JSON-ready dict.

    Parameters
    ----------
    node : RenderNode
        Render tree root

    Returns
    -------
    dict
        ``{"type": "text", "content": ...}`` for text and
        ``{"type": "element", "tag": ..., "attributes": ..., "children": [...]}``
        for elements

    """
    if isinstance(node, Text):
        return {"type": "text", "content": node.content}
    return {
        "type": "element",
        "tag": node.tag,
        "attributes": dict(node.attributes),
        "children": [to_dict(child) for child in node.children],
    }


def from_dict(data: dict[str, Any]) -> RenderNode:
    """Rebuild a render tree from :func:`to_dict` output.

    Raises
    ------
    ValueError
        If a node has an unknown ``type``

    """
    node_type = data.get("type")
    if node_type == "text":
        return Text(content=data["content"])
    if node_type == "element":
        return Element(
            tag=data["tag"],
            attributes=dict(data.get("attributes", {})),
            children=[from_dict(child) for child in data.get("children", [])],
        )
    raise ValueError(f"Unknown render node type: {node_type!r}")


__all__ = [
    "VOID_ELEMENTS",
    "from_dict",
    "to_dict",
    "to_html",
]
