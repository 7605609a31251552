#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/extensions/base.py
"""Base class for syntax extensions.

An extension is a named tree-rewriting pass. The extension chain offers every
node of the parsed tree to each configured extension in order; an extension
that matches a node returns its replacement.

Examples
--------
An extension that upper-cases level-1 headings:

    >>> from dataclasses import replace
    >>> from sitemark.ast import Heading, Text, plain_text
    >>> class ShoutExtension(Extension):
    ...     def match(self, node):
    ...         return isinstance(node, Heading) and node.level == 1
    ...     def transform(self, node):
    ...         return replace(node, content=[Text(content=plain_text(node.content).upper())])

"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Union

from sitemark.ast.nodes import Node

ExtensionResult = Union[Node, list[Node]]


class Extension(ABC):
    """Tree-rewriting pass applied by the extension chain.

    Subclasses implement :meth:`match` and :meth:`transform`. ``transform``
    must not mutate the node it receives: it returns a new node, or a list of
    nodes that replace the original among its siblings.

    A fresh instance is created for every compiled document, so an extension
    may keep per-document state (the heading id extension remembers the slugs
    it has handed out).

    """

    @abstractmethod
    def match(self, node: Node) -> bool:
        """Return True if this extension rewrites ``node``."""
        ...

    @abstractmethod
    def transform(self, node: Node) -> ExtensionResult:
        """Rewrite a matched node.

        Parameters
        ----------
        node : Node
            Node for which :meth:`match` returned True

        Returns
        -------
        Node or list of Node
            Replacement node, or replacement siblings

        """
        ...

    def descends_into(self, node: Node) -> bool:
        """Return False to keep this extension out of ``node``'s subtree.

        The chain still offers ``node`` itself to the extension. Only its
        descendants, including ones produced later in the chain, are skipped.
        """
        return True
