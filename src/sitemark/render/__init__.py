#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/render/__init__.py
"""Render tree model, emitter and serializers."""

from sitemark.render.emitter import ComponentRenderer, Emitter, emit
from sitemark.render.nodes import Element, RenderNode, Text
from sitemark.render.serialize import from_dict, to_dict, to_html

__all__ = [
    "ComponentRenderer",
    "Element",
    "Emitter",
    "RenderNode",
    "Text",
    "emit",
    "from_dict",
    "to_dict",
    "to_html",
]
