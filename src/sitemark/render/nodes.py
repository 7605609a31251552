#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/render/nodes.py
"""Render node model.

The emitter produces a tree of two generic node kinds, independent of the
document syntax: :class:`Element` (a tag with attributes and children) and
:class:`Text`. Component renderers receive and return these nodes.

"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union


@dataclass
class Element:
    """Markup element.

    Parameters
    ----------
    tag : str
        Element tag name (``"p"``, ``"h2"``, or a component's own tag)
    attributes : dict, default = empty dict
        Attribute values; ``None`` values are omitted on serialization and
        ``True`` renders a bare attribute
    children : list of RenderNode, default = empty list
        Child nodes in order

    """

    tag: str
    attributes: dict[str, Any] = field(default_factory=dict)
    children: list[RenderNode] = field(default_factory=list)


@dataclass
class Text:
    """Literal text; escaped when serialized to HTML."""

    content: str


RenderNode = Union[Element, Text]

__all__ = ["Element", "RenderNode", "Text"]
