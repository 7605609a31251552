#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/extensions/chain.py
"""Apply an ordered list of extensions to a syntax tree.

Traversal is depth-first, pre-order. At every node each extension runs in
configured order:

1. an extension that does not match leaves the node as it is
2. a single-node result replaces the node, and later extensions see the
   replacement
3. a list result is spliced into the parent in place of the node; every
   spliced node continues through the remaining extensions on its own

After all extensions have run at a node, traversal descends into the children
of the resulting node(s), leaving out extensions whose
:meth:`~sitemark.extensions.base.Extension.descends_into` refused the parent.
Nodes are never mutated: changed subtrees are rebuilt with
:func:`replace_node_children`.

"""

from __future__ import annotations

import logging
from typing import Sequence

from sitemark.ast.nodes import Document, Node, get_node_children, replace_node_children
from sitemark.ast.transforms import validate_tree
from sitemark.extensions.base import Extension

logger = logging.getLogger(__name__)


class _Chain:
    """Single run of an extension list over one tree."""

    def __init__(self, extensions: Sequence[Extension]):
        self.extensions = list(extensions)

    def rewrite(self, node: Node, start: int = 0, skipped: frozenset[int] = frozenset()) -> list[Node]:
        for index in range(start, len(self.extensions)):
            if index in skipped:
                continue
            extension = self.extensions[index]
            if not extension.match(node):
                continue

            result = extension.transform(node)
            if isinstance(result, Node):
                node = result
                continue

            logger.debug(f"{type(extension).__name__} expanded {type(node).__name__} into {len(result)} node(s)")
            expanded: list[Node] = []
            for produced in result:
                expanded.extend(self.rewrite(produced, index + 1, skipped))
            return expanded

        children = get_node_children(node)
        if not children:
            return [node]

        inner_skipped = skipped | {
            index
            for index, extension in enumerate(self.extensions)
            if index not in skipped and not extension.descends_into(node)
        }
        new_children: list[Node] = []
        for child in children:
            new_children.extend(self.rewrite(child, 0, inner_skipped))
        return [replace_node_children(node, new_children)]


def apply_chain(tree: Node, extensions: Sequence[Extension]) -> Node:
    """Run extensions over a tree in configured order.

    Parameters
    ----------
    tree : Node
        Root of the parsed tree (normally a Document)
    extensions : sequence of Extension
        Extensions in chain order

    Returns
    -------
    Node
        Root of the rewritten tree. The input tree is left unchanged.

    Raises
    ------
    ValueError
        If an extension replaces the root with several nodes, or leaves a
        node shared between two parents
    TypeError
        If an extension places a non-node object in the tree

    Examples
    --------
        >>> from sitemark.extensions import resolve_extensions
        >>> tree = apply_chain(parse("~~gone~~"), resolve_extensions(["gfm-strikethrough"]))

    """
    if not extensions:
        return tree

    result = _Chain(extensions).rewrite(tree)
    if len(result) != 1:
        raise ValueError(f"The root {type(tree).__name__} was replaced by {len(result)} nodes")

    root = result[0]
    if isinstance(tree, Document) and not isinstance(root, Document):
        raise ValueError(f"The root Document was replaced by {type(root).__name__}")

    validate_tree(root)
    return root


__all__ = ["apply_chain"]
