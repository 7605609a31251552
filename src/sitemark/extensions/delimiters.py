#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/extensions/delimiters.py
"""Delimiter-run resolution for emphasis-like inline syntax.

The inline parser leaves ``*``, ``_`` and ``~`` in plain text. This module
splits an inline child list into text, delimiter runs and opaque nodes, pairs
openers with closers using the CommonMark flanking rules, and wraps the
content between each pair in a new node.

Only unescaped :class:`Text` is scanned. Every other node (including escaped
text, code spans and nodes produced by earlier extensions) is opaque, so a
delimiter can never pair across it from the inside.

"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from typing import Callable, Optional, Union

from sitemark.ast.nodes import LineBreak, Node, SourceLocation, Text


@dataclass
class Delimiter:
    """A run of one delimiter character.

    Parameters
    ----------
    char : str
        The delimiter character
    count : int
        Characters of the run not yet used by a pair
    original_count : int
        Length of the run as written
    can_open : bool
        Whether the run may open a span
    can_close : bool
        Whether the run may close a span
    source_location : SourceLocation or None
        Location of the text the run came from

    """

    char: str
    count: int
    original_count: int
    can_open: bool
    can_close: bool
    source_location: Optional[SourceLocation] = None


Item = Union[Node, Delimiter]

# Decides how many characters a closer/opener pair uses; 0 means "cannot pair"
PairRule = Callable[[Delimiter, Delimiter], int]
# Builds the wrapper node for a pair from its character, width and content
Wrapper = Callable[[str, int, list[Node]], Node]


def _is_whitespace(ch: str) -> bool:
    return ch.isspace()


def _is_punctuation(ch: str) -> bool:
    return unicodedata.category(ch).startswith(("P", "S"))


def _neighbor_char(item: Optional[Item], from_end: bool) -> str:
    """Character seen across an item boundary, for flanking checks."""
    if item is None or isinstance(item, LineBreak):
        return " "
    if isinstance(item, Text) and not item.escaped:
        if not item.content:
            return " "
        return item.content[-1] if from_end else item.content[0]
    if isinstance(item, Delimiter):
        return item.char
    if isinstance(item, Text):
        # Escaped characters are punctuation by construction
        return item.content[-1] if from_end else item.content[0]
    # Any other node acts like a letter
    return "a"


def has_delimiters(nodes: list[Node], chars: str) -> bool:
    """Return True if any unescaped text in ``nodes`` contains one of ``chars``."""
    return any(
        isinstance(node, Text) and not node.escaped and any(ch in node.content for ch in chars) for node in nodes
    )


def tokenize(nodes: list[Node], chars: str) -> list[Item]:
    """Split unescaped text into plain text and delimiter runs.

    Parameters
    ----------
    nodes : list of Node
        Inline child list
    chars : str
        Delimiter characters to recognise

    Returns
    -------
    list
        Text nodes, delimiter runs and untouched nodes in source order

    """
    items: list[Item] = []
    for node in nodes:
        if not (isinstance(node, Text) and not node.escaped):
            items.append(node)
            continue

        text = node.content
        start = 0
        i = 0
        while i < len(text):
            if text[i] not in chars:
                i += 1
                continue
            if i > start:
                items.append(Text(content=text[start:i], source_location=node.source_location))
            run_end = i
            while run_end < len(text) and text[run_end] == text[i]:
                run_end += 1
            items.append(
                Delimiter(
                    char=text[i],
                    count=run_end - i,
                    original_count=run_end - i,
                    can_open=False,
                    can_close=False,
                    source_location=node.source_location,
                )
            )
            start = i = run_end
        if start < len(text):
            items.append(Text(content=text[start:], source_location=node.source_location))

    for index, item in enumerate(items):
        if isinstance(item, Delimiter):
            before = _neighbor_char(items[index - 1] if index > 0 else None, from_end=True)
            after = _neighbor_char(items[index + 1] if index + 1 < len(items) else None, from_end=False)
            _set_flanking(item, before, after)
    return items


def _set_flanking(delim: Delimiter, before: str, after: str) -> None:
    left_flanking = not _is_whitespace(after) and (
        not _is_punctuation(after) or _is_whitespace(before) or _is_punctuation(before)
    )
    right_flanking = not _is_whitespace(before) and (
        not _is_punctuation(before) or _is_whitespace(after) or _is_punctuation(after)
    )

    if delim.char == "_":
        # No intraword emphasis with underscores
        delim.can_open = left_flanking and (not right_flanking or _is_punctuation(before))
        delim.can_close = right_flanking and (not left_flanking or _is_punctuation(after))
    else:
        delim.can_open = left_flanking
        delim.can_close = right_flanking


def finalize(items: list[Item]) -> list[Node]:
    """Turn leftover delimiter runs back into text and merge adjacent text.

    Parameters
    ----------
    items : list
        Items produced by :func:`tokenize`, possibly partially paired

    Returns
    -------
    list of Node
        Inline nodes

    """
    nodes: list[Node] = []
    for item in items:
        if isinstance(item, Delimiter):
            if item.count == 0:
                continue
            item = Text(content=item.char * item.count, source_location=item.source_location)

        last = nodes[-1] if nodes else None
        if (
            isinstance(item, Text)
            and not item.escaped
            and isinstance(last, Text)
            and not last.escaped
            and not item.metadata
            and not last.metadata
        ):
            nodes[-1] = Text(content=last.content + item.content, source_location=last.source_location)
        else:
            nodes.append(item)
    return nodes


def resolve_delimiters(nodes: list[Node], chars: str, pair_rule: PairRule, wrap: Wrapper) -> list[Node]:
    """Pair delimiter runs in an inline child list and wrap their content.

    Parameters
    ----------
    nodes : list of Node
        Inline child list
    chars : str
        Delimiter characters handled in this pass
    pair_rule : callable
        ``pair_rule(opener, closer)`` returns how many characters the pair
        consumes, or 0 if the two runs cannot pair
    wrap : callable
        ``wrap(char, width, content)`` builds the wrapper node

    Returns
    -------
    list of Node
        New inline child list

    """
    items = tokenize(nodes, chars)

    i = 0
    while i < len(items):
        closer = items[i]
        if not (isinstance(closer, Delimiter) and closer.can_close and closer.count > 0):
            i += 1
            continue

        opener_index = -1
        width = 0
        for j in range(i - 1, -1, -1):
            opener = items[j]
            if isinstance(opener, Delimiter) and opener.char == closer.char and opener.can_open and opener.count > 0:
                width = pair_rule(opener, closer)
                if width:
                    opener_index = j
                    break

        if opener_index < 0:
            i += 1
            continue

        opener = items[opener_index]
        assert isinstance(opener, Delimiter)
        content = finalize(items[opener_index + 1 : i])
        wrapped = wrap(closer.char, width, content)
        wrapped.source_location = opener.source_location

        opener.count -= width
        closer.count -= width
        items[opener_index + 1 : i] = [wrapped]
        # The closer now sits right after the wrapper; revisit it if characters remain
        i = opener_index + 2

    return finalize(items)


__all__ = [
    "Delimiter",
    "finalize",
    "has_delimiters",
    "resolve_delimiters",
    "tokenize",
]
