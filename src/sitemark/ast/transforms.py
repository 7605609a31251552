#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/ast/transforms.py
"""Tree utilities: collection, cloning and well-formedness checks.

Examples
--------
Extract all headings from a document:

    >>> from sitemark.ast import transforms
    >>> headings = transforms.extract_nodes(doc, Heading)

Check that an extension left a proper tree behind:

    >>> transforms.validate_tree(doc)

"""

from __future__ import annotations

import copy
from typing import Callable, Type

from sitemark.ast.nodes import Node, get_node_children


def iter_nodes(root: Node):
    """Yield every node of a tree in depth-first pre-order.

    Parameters
    ----------
    root : Node
        Root of the tree

    Yields
    ------
    Node
        Each node, parents before children, siblings in source order

    """
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(get_node_children(node)))


def extract_nodes(root: Node, node_type: Type[Node] | None = None) -> list[Node]:
    """Collect nodes of a given type in document order.

    Parameters
    ----------
    root : Node
        Tree to search
    node_type : type or None, default = None
        Node class to collect; None collects every node

    Returns
    -------
    list of Node
        Matching nodes in pre-order

    """
    if node_type is None:
        return list(iter_nodes(root))
    return [node for node in iter_nodes(root) if isinstance(node, node_type)]


def find_first(root: Node, predicate: Callable[[Node], bool]) -> Node | None:
    """Return the first node in pre-order satisfying ``predicate``."""
    for node in iter_nodes(root):
        if predicate(node):
            return node
    return None


def clone_node(node: Node) -> Node:
    """Create a deep copy of a node and its subtree.

    Parameters
    ----------
    node : Node
        Node to clone

    Returns
    -------
    Node
        Independent copy sharing no node objects with the original

    """
    return copy.deepcopy(node)


def validate_tree(root: Node) -> None:
    """Check the single-owner invariant of a syntax tree.

    Parameters
    ----------
    root : Node
        Root of the tree to check

    Raises
    ------
    ValueError
        If a node object appears more than once (aliased into two parents,
        or a cycle)
    TypeError
        If a child slot holds something that is not a Node

    """
    seen: set[int] = set()
    stack: list[Node] = [root]
    while stack:
        node = stack.pop()
        if not isinstance(node, Node):
            raise TypeError(f"Tree contains a non-node child: {type(node).__name__}")
        if id(node) in seen:
            raise ValueError(f"{type(node).__name__} node appears more than once in the tree")
        seen.add(id(node))
        stack.extend(get_node_children(node))
