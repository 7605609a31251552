#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/extensions/builtin.py
"""Built-in syntax extensions.

This module provides the extensions shipped with sitemark:

- TablesExtension: GFM pipe tables
- EmphasisExtension: ``*``/``_`` emphasis and strong emphasis
- StrikethroughExtension: GFM ``~~`` strikethrough
- AutolinkExtension: bare ``http(s)://`` and ``www.`` links
- TaskListExtension: GFM ``[ ]`` / ``[x]`` task list items
- FootnotesExtension: GFM ``[^label]`` footnotes
- HeadingIdsExtension: anchor ids for headings
- HighlightExtension: syntax highlighting annotation for code blocks

Extensions only rewrite nodes they match, and always return new nodes.

"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Optional

from sitemark.ast.nodes import (
    Alignment,
    BlockQuote,
    CodeBlock,
    ComponentInvocation,
    Document,
    Emphasis,
    FootnoteDefinition,
    FootnoteReference,
    Heading,
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
    get_node_children,
    plain_text,
    replace_node_children,
)
from sitemark.exceptions import MalformedTableError
from sitemark.extensions.base import Extension, ExtensionResult
from sitemark.extensions.delimiters import Delimiter, has_delimiters, resolve_delimiters
from sitemark.highlight import highlight
from sitemark.utils.text import slugify

logger = logging.getLogger(__name__)

DELIMITER_CELL_RE = re.compile(r"^[ \t]*(:?)-+(:?)[ \t]*$")
DELIMITER_ROW_RE = re.compile(r"^[ \t|:\-]+$")
BARE_URL_RE = re.compile(r"(?<![\w/.@:-])(?:https?://|www\.)[^\s<>]+")
TASK_MARKER_RE = re.compile(r"^\[([ xX])\](?:[ \t]+|$)")
FOOTNOTE_REFERENCE_RE = re.compile(r"\[\^([^\]\s]+)\]")
FOOTNOTE_DEFINITION_RE = re.compile(r"^\[\^([^\]\s]+)\]:[ \t]*")
URL_TRAILING_PUNCTUATION = "?!.,:;*_~'\""


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


def _split_lines(content: list[Node]) -> list[list[Node]]:
    """Split inline content at line breaks."""
    lines: list[list[Node]] = [[]]
    for node in content:
        if isinstance(node, LineBreak):
            lines.append([])
        else:
            lines[-1].append(node)
    return lines


def _is_plain(node: Node) -> bool:
    return isinstance(node, Text) and not node.escaped


def _has_pipe(line: list[Node]) -> bool:
    return any(_is_plain(node) and "|" in node.content for node in line)  # type: ignore[attr-defined]


def _parse_delimiter_row(line: list[Node]) -> Optional[list[Optional[Alignment]]]:
    """Return column alignments if ``line`` is a table delimiter row."""
    if not line or not all(_is_plain(node) for node in line):
        return None

    text = "".join(node.content for node in line).strip()  # type: ignore[attr-defined]
    if "-" not in text or not DELIMITER_ROW_RE.match(text):
        return None
    if "|" not in text:
        return None

    if text.startswith("|"):
        text = text[1:]
    if text.endswith("|"):
        text = text[:-1]

    alignments: list[Optional[Alignment]] = []
    for cell in text.split("|"):
        match = DELIMITER_CELL_RE.match(cell)
        if not match:
            return None
        left, right = bool(match.group(1)), bool(match.group(2))
        if left and right:
            alignments.append("center")
        elif right:
            alignments.append("right")
        elif left:
            alignments.append("left")
        else:
            alignments.append(None)
    return alignments


def _strip_cell(nodes: list[Node]) -> list[Node]:
    """Trim whitespace at the edges of a cell's content."""
    cell = list(nodes)
    if cell and _is_plain(cell[0]):
        cell[0] = replace(cell[0], content=cell[0].content.lstrip())  # type: ignore[attr-defined]
    if cell and _is_plain(cell[-1]):
        cell[-1] = replace(cell[-1], content=cell[-1].content.rstrip())  # type: ignore[attr-defined]
    return [node for node in cell if not (isinstance(node, Text) and not node.content)]


def _split_cells(line: list[Node]) -> list[list[Node]]:
    """Split a table line into cell contents at unescaped top-level pipes."""
    cells: list[list[Node]] = [[]]
    for node in line:
        if _is_plain(node) and "|" in node.content:  # type: ignore[attr-defined]
            for index, part in enumerate(node.content.split("|")):  # type: ignore[attr-defined]
                if index:
                    cells.append([])
                if part:
                    cells[-1].append(Text(content=part, source_location=node.source_location))
        else:
            cells[-1].append(node)

    leading = bool(line) and _is_plain(line[0]) and line[0].content.lstrip().startswith("|")  # type: ignore[attr-defined]
    trailing = bool(line) and _is_plain(line[-1]) and line[-1].content.rstrip().endswith("|")  # type: ignore[attr-defined]
    if leading:
        cells.pop(0)
    if trailing and cells:
        cells.pop()
    return [_strip_cell(cell) for cell in cells]


class TablesExtension(Extension):
    """Turn pipe-table paragraphs into Table nodes.

    A paragraph is a table when its first line contains an unescaped pipe
    and its second line is a delimiter row such as ``|---|:---:|``.

    Only unescaped text directly inside the paragraph is split into cells. A
    pipe inside a node created earlier in the chain (for example an Emphasis
    built by the emphasis extension) stays within its cell.

    Raises
    ------
    MalformedTableError
        From :meth:`transform`, when the header and delimiter rows have a
        different number of cells

    Examples
    --------
    Input::

        | a | b |
        |---|---|
        | 1 | 2 |

    becomes a Table with header cells ``a``, ``b`` and one body row ``1``, ``2``.

    """

    def match(self, node: Node) -> bool:
        if not isinstance(node, Paragraph):
            return False
        lines = _split_lines(node.content)
        return len(lines) >= 2 and _has_pipe(lines[0]) and _parse_delimiter_row(lines[1]) is not None

    def transform(self, node: Node) -> ExtensionResult:
        assert isinstance(node, Paragraph)
        lines = _split_lines(node.content)
        alignments = _parse_delimiter_row(lines[1]) or []
        header_cells = _split_cells(lines[0])

        if len(header_cells) != len(alignments):
            raise MalformedTableError(
                node.source_location,
                detail=f"header row has {len(header_cells)} cell(s) but the delimiter row has {len(alignments)}",
            )

        width = len(alignments)
        location = node.source_location

        def build_row(cells: list[list[Node]], line_offset: int, is_header: bool) -> TableRow:
            row_location = location.offset(lines=line_offset) if location else None
            cells = cells[:width] + [[] for _ in range(width - len(cells))]
            return TableRow(
                cells=[
                    TableCell(content=content, alignment=alignments[index], source_location=row_location)
                    for index, content in enumerate(cells)
                ],
                is_header=is_header,
                source_location=row_location,
            )

        header = build_row(header_cells, 0, is_header=True)
        rows = [build_row(_split_cells(line), offset, is_header=False) for offset, line in enumerate(lines[2:], 2)]
        logger.debug(f"Built table with {width} column(s) and {len(rows)} body row(s)")
        return Table(header=header, rows=rows, alignments=alignments, source_location=location)


# ---------------------------------------------------------------------------
# Emphasis and strikethrough
# ---------------------------------------------------------------------------


def _emphasis_width(opener: Delimiter, closer: Delimiter) -> int:
    # "Rule of 3" for runs that can both open and close
    if (opener.can_close or closer.can_open) and (opener.original_count + closer.original_count) % 3 == 0:
        if not (opener.original_count % 3 == 0 and closer.original_count % 3 == 0):
            return 0
    return 2 if opener.count >= 2 and closer.count >= 2 else 1


def _wrap_emphasis(char: str, width: int, content: list[Node]) -> Node:
    return Strong(content=content) if width == 2 else Emphasis(content=content)


def _strikethrough_width(opener: Delimiter, closer: Delimiter) -> int:
    if opener.count == closer.count and opener.count in (1, 2):
        return opener.count
    return 0


def _wrap_strikethrough(char: str, width: int, content: list[Node]) -> Node:
    return Strikethrough(content=content)


class EmphasisExtension(Extension):
    """Resolve ``*`` and ``_`` delimiter runs into Emphasis and Strong.

    Matches any node whose direct children contain unescaped text with a
    ``*`` or ``_``, and rewrites that whole child list at once. Underscores
    do not open or close emphasis inside a word (``snake_case_name``).
    """

    chars = "*_"

    def match(self, node: Node) -> bool:
        return has_delimiters(get_node_children(node), self.chars)

    def transform(self, node: Node) -> ExtensionResult:
        content = resolve_delimiters(get_node_children(node), self.chars, _emphasis_width, _wrap_emphasis)
        return replace_node_children(node, content)


class StrikethroughExtension(EmphasisExtension):
    """Resolve ``~~text~~`` (or ``~text~``) into Strikethrough nodes."""

    chars = "~"

    def transform(self, node: Node) -> ExtensionResult:
        content = resolve_delimiters(get_node_children(node), self.chars, _strikethrough_width, _wrap_strikethrough)
        return replace_node_children(node, content)


# ---------------------------------------------------------------------------
# Autolinks
# ---------------------------------------------------------------------------


def _trim_url(url: str) -> str:
    """Drop trailing punctuation that belongs to the sentence, not the URL."""
    while url:
        if url[-1] in URL_TRAILING_PUNCTUATION:
            url = url[:-1]
        elif url[-1] == ")" and url.count(")") > url.count("("):
            url = url[:-1]
        else:
            break
    return url


class AutolinkExtension(Extension):
    """Link bare ``http://``, ``https://`` and ``www.`` URLs in text.

    Nothing inside a Link is linked again, at any depth. ``www.`` links get an
    ``http://`` target. Produced links carry ``metadata["autolink"] = True``.
    """

    def match(self, node: Node) -> bool:
        if isinstance(node, Link):
            return False
        return any(
            _is_plain(child) and BARE_URL_RE.search(child.content)  # type: ignore[attr-defined]
            for child in get_node_children(node)
        )

    def transform(self, node: Node) -> ExtensionResult:
        content: list[Node] = []
        for child in get_node_children(node):
            if _is_plain(child):
                content.extend(self._link_text(child))  # type: ignore[arg-type]
            else:
                content.append(child)
        return replace_node_children(node, content)

    def descends_into(self, node: Node) -> bool:
        return not isinstance(node, Link)

    def _link_text(self, text: Text) -> list[Node]:
        nodes: list[Node] = []
        position = 0
        for match in BARE_URL_RE.finditer(text.content):
            url = _trim_url(match.group(0))
            prefix = "www." if url.startswith("www.") else url.split("//", 1)[0] + "//"
            if len(url) <= len(prefix):
                continue

            if match.start() > position:
                nodes.append(Text(content=text.content[position : match.start()], source_location=text.source_location))
            href = f"http://{url}" if url.startswith("www.") else url
            nodes.append(
                Link(
                    url=href,
                    content=[Text(content=url)],
                    metadata={"autolink": True},
                    source_location=text.source_location,
                )
            )
            position = match.start() + len(url)

        if position < len(text.content):
            nodes.append(Text(content=text.content[position:], source_location=text.source_location))
        return nodes


# ---------------------------------------------------------------------------
# Task lists
# ---------------------------------------------------------------------------


class TaskListExtension(Extension):
    """Mark list items starting with ``[ ]`` or ``[x]`` as tasks.

    The marker is removed from the item's first paragraph and recorded as
    ``task_status`` (``"unchecked"`` or ``"checked"``).
    """

    def match(self, node: Node) -> bool:
        if not isinstance(node, ListItem) or node.task_status is not None or not node.children:
            return False
        first = node.children[0]
        if not isinstance(first, Paragraph) or not first.content:
            return False
        lead = first.content[0]
        return _is_plain(lead) and TASK_MARKER_RE.match(lead.content) is not None  # type: ignore[attr-defined]

    def transform(self, node: Node) -> ExtensionResult:
        assert isinstance(node, ListItem)
        paragraph = node.children[0]
        assert isinstance(paragraph, Paragraph)
        lead = paragraph.content[0]
        assert isinstance(lead, Text)

        match = TASK_MARKER_RE.match(lead.content)
        assert match is not None
        rest = lead.content[match.end() :]
        content = ([replace(lead, content=rest)] if rest else []) + paragraph.content[1:]
        if content and isinstance(content[0], LineBreak):
            content = content[1:]

        status = "unchecked" if match.group(1) == " " else "checked"
        return replace(
            node,
            children=[replace(paragraph, content=content)] + node.children[1:],
            task_status=status,
        )


# ---------------------------------------------------------------------------
# Footnotes
# ---------------------------------------------------------------------------


def _definition_match(node: Node) -> Optional[re.Match[str]]:
    if not _is_plain(node):
        return None
    return FOOTNOTE_DEFINITION_RE.match(node.content)  # type: ignore[attr-defined]


def _split_definitions(paragraph: Paragraph) -> Optional[list[tuple[str, Paragraph]]]:
    """Split a definition paragraph into one paragraph per ``[^label]:`` line.

    Returns None if the paragraph does not start with a definition. Lines
    that do not start a new definition continue the previous one.
    """
    content = paragraph.content
    if not content or _definition_match(content[0]) is None:
        return None

    definitions: list[tuple[str, Paragraph]] = []
    at_line_start = True
    for node in content:
        match = _definition_match(node) if at_line_start else None
        if match:
            previous = definitions[-1][1].content if definitions else []
            if previous and isinstance(previous[-1], LineBreak):
                previous.pop()
            rest = node.content[match.end() :]  # type: ignore[attr-defined]
            body = Paragraph(
                content=[replace(node, content=rest)] if rest else [],
                source_location=node.source_location or paragraph.source_location,
            )
            definitions.append((match.group(1).lower(), body))
        else:
            definitions[-1][1].content.append(node)
        at_line_start = isinstance(node, LineBreak)
    return definitions


class FootnotesExtension(Extension):
    """Turn ``[^label]`` references and ``[^label]: text`` definitions into footnotes.

    The extension matches the Document root, so it sees every definition
    before any reference wherever it sits in the chain. A definition is a
    paragraph line starting with ``[^label]:``, in any block container; it is
    removed from where it stands. Labels are case-insensitive and the first
    definition of a label wins.

    References to defined labels become FootnoteReference nodes, numbered in
    order of first reference (references inside footnotes count too). Every
    referenced footnote is appended to the end of the Document as a
    FootnoteDefinition. Unreferenced definitions are dropped, references to
    unknown labels stay text, and nothing inside a Link is rewritten.

    Parameters
    ----------
    id_prefix : str, default = "user-content-"
        Prefix of the ``fn-N`` and ``fnref-N`` anchor ids

    Examples
    --------
    ``Fact[^a].`` followed by ``[^a]: Source.`` gives a reference numbered 1
    and one FootnoteDefinition at the end of the document.

    """

    def __init__(self, id_prefix: str = "user-content-"):
        """Initialize with empty numbering state."""
        self.id_prefix = id_prefix
        self._numbers: dict[str, int] = {}
        self._counts: dict[str, int] = {}

    def match(self, node: Node) -> bool:
        return isinstance(node, Document)

    def transform(self, node: Node) -> ExtensionResult:
        assert isinstance(node, Document)
        definitions: dict[str, list[Node]] = {}
        body = self._collect(node.children, definitions)
        if not definitions:
            return node

        self._numbers = {}
        self._counts = {}
        body = self._link_all(body, definitions)

        order: list[str] = []
        linked: dict[str, list[Node]] = {}
        while len(order) < len(self._numbers):
            label = list(self._numbers)[len(order)]
            order.append(label)
            linked[label] = self._link_all(definitions[label], definitions)

        footnotes: list[Node] = [
            FootnoteDefinition(
                label=label,
                number=self._numbers[label],
                children=linked[label],
                reference_count=self._counts[label],
                metadata={"id_prefix": self.id_prefix},
            )
            for label in order
        ]
        logger.debug(f"Collected {len(definitions)} footnote definition(s), {len(footnotes)} referenced")
        return replace(node, children=body + footnotes)

    def _collect(self, children: list[Node], definitions: dict[str, list[Node]]) -> list[Node]:
        kept: list[Node] = []
        for child in children:
            if isinstance(child, Paragraph):
                split = _split_definitions(child)
                if split is not None:
                    for label, paragraph in split:
                        definitions.setdefault(label, [paragraph] if paragraph.content else [])
                    continue
            elif isinstance(child, (BlockQuote, List, ListItem, ComponentInvocation)):
                child = replace_node_children(child, self._collect(get_node_children(child), definitions))
            kept.append(child)
        return kept

    def _link_all(self, nodes: list[Node], definitions: dict[str, list[Node]]) -> list[Node]:
        linked: list[Node] = []
        for node in nodes:
            if _is_plain(node):
                linked.extend(self._link_text(node, definitions))  # type: ignore[arg-type]
            elif isinstance(node, Link) or not get_node_children(node):
                linked.append(node)
            else:
                linked.append(replace_node_children(node, self._link_all(get_node_children(node), definitions)))
        return linked

    def _link_text(self, text: Text, definitions: dict[str, list[Node]]) -> list[Node]:
        nodes: list[Node] = []
        position = 0
        for match in FOOTNOTE_REFERENCE_RE.finditer(text.content):
            label = match.group(1).lower()
            if label not in definitions:
                continue
            if match.start() > position:
                nodes.append(Text(content=text.content[position : match.start()], source_location=text.source_location))
            nodes.append(self._reference(label, text))
            position = match.end()

        if not nodes:
            return [text]
        if position < len(text.content):
            nodes.append(Text(content=text.content[position:], source_location=text.source_location))
        return nodes

    def _reference(self, label: str, text: Text) -> FootnoteReference:
        number = self._numbers.setdefault(label, len(self._numbers) + 1)
        self._counts[label] = self._counts.get(label, 0) + 1
        return FootnoteReference(
            label=label,
            number=number,
            occurrence=self._counts[label],
            metadata={"id_prefix": self.id_prefix},
            source_location=text.source_location,
        )


# ---------------------------------------------------------------------------
# Heading ids
# ---------------------------------------------------------------------------


class HeadingIdsExtension(Extension):
    """Assign unique anchor ids to headings.

    The id is a slug of the heading's visible text, stored in
    ``metadata["id"]``. Repeated slugs get ``-1``, ``-2``, ... suffixes in
    document order. Headings that already carry an id keep it.

    Parameters
    ----------
    id_prefix : str, default = ""
        Prefix added to every generated id

    Examples
    --------
    ``# Tools I Use`` gets ``metadata["id"] == "tools-i-use"``.

    """

    def __init__(self, id_prefix: str = ""):
        """Initialize with an empty set of used slugs."""
        self.id_prefix = id_prefix
        self._seen: set[str] = set()

    def match(self, node: Node) -> bool:
        return isinstance(node, Heading) and "id" not in node.metadata

    def transform(self, node: Node) -> ExtensionResult:
        assert isinstance(node, Heading)
        slug = slugify(plain_text(node.content), seen_slugs=self._seen)
        return replace(node, metadata={**node.metadata, "id": f"{self.id_prefix}{slug}"})


# ---------------------------------------------------------------------------
# Highlighting
# ---------------------------------------------------------------------------


class HighlightExtension(Extension):
    """Attach highlighting tokens to code blocks.

    Parameters
    ----------
    default_language : str, default = ""
        Language assumed for fences without an info string; empty means
        such blocks get a single plain token

    """

    def __init__(self, default_language: str = ""):
        """Initialize with the fallback language."""
        self.default_language = default_language

    def match(self, node: Node) -> bool:
        return isinstance(node, CodeBlock) and node.tokens is None

    def transform(self, node: Node) -> ExtensionResult:
        assert isinstance(node, CodeBlock)
        return highlight(node, default_language=self.default_language or None)


__all__ = [
    "AutolinkExtension",
    "EmphasisExtension",
    "FootnotesExtension",
    "HeadingIdsExtension",
    "HighlightExtension",
    "StrikethroughExtension",
    "TablesExtension",
    "TaskListExtension",
]
