#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/parsers/block.py
"""Block-level document parser.

This module converts page source text into a syntax tree. It splits the text
into block units (headings, fenced code, block quotes, lists, thematic breaks,
component invocations and paragraphs) and hands the text of each prose block
to the inline parser. Code fence interiors are kept verbatim.

Malformed constructs degrade instead of failing:

- an unterminated code fence takes the rest of the input as its content
- an unclosed block component takes the rest of the input as its children

Table rows, emphasis and similar syntax are not recognised here; they are
produced by extensions so that the output of this parser is the same for
every extension configuration.

"""

from __future__ import annotations

import logging
import re
import textwrap
from typing import Optional

from sitemark.ast.nodes import (
    BlockQuote,
    CodeBlock,
    ComponentInvocation,
    Document,
    Heading,
    List,
    ListItem,
    Node,
    Paragraph,
    SourceLocation,
    ThematicBreak,
)
from sitemark.parsers.frontmatter import extract_leading_metadata
from sitemark.parsers.inline import find_closing_tag, parse_inline, parse_tag

logger = logging.getLogger(__name__)

FENCE_OPEN_RE = re.compile(r"^( {0,3})(`{3,}|~{3,})(.*)$")
HEADING_RE = re.compile(r"^ {0,3}(#{1,6})(?=[ \t]|$)(.*)$")
HEADING_CLOSE_RE = re.compile(r"(?:^|[ \t]+)#+[ \t]*$")
THEMATIC_BREAK_RE = re.compile(r"^ {0,3}(?:(?:\*[ \t]*){3,}|(?:-[ \t]*){3,}|(?:_[ \t]*){3,})$")
BLOCK_QUOTE_RE = re.compile(r"^ {0,3}> ?")
LIST_MARKER_RE = re.compile(r"^( {0,3})([-+*]|\d{1,9}[.)])([ \t]+|$)")
COMPONENT_START_RE = re.compile(r"^ {0,3}<[A-Z]")


def _is_blank(line: str) -> bool:
    return not line.strip()


def _indent_width(line: str) -> int:
    return len(line) - len(line.lstrip(" "))


class BlockParser:
    """Parse page source text into a ``Document`` tree.

    Examples
    --------
    Basic parsing:

        >>> doc = BlockParser().parse("# Hello\\n\\nThis is a paragraph.")
        >>> type(doc.children[0]).__name__
        'Heading'

    Fence tolerance:

        >>> doc = BlockParser().parse("```js\\nconst x = 1;")
        >>> doc.children[0].content
        'const x = 1;'

    """

    def parse(self, text: str) -> Document:
        """Parse document text into a syntax tree.

        Parameters
        ----------
        text : str
            Document source. ``\\r\\n`` and ``\\r`` line endings are
            normalised to ``\\n``.

        Returns
        -------
        Document
            Root node whose children are the top-level blocks

        Raises
        ------
        MalformedMetadataError
            If leading front matter or a ``meta`` export does not parse

        """
        text = text.replace("\r\n", "\n").replace("\r", "\n")
        leading = extract_leading_metadata(text)
        children = self.parse_blocks(leading.body.split("\n"), first_line=1)

        metadata: dict = {}
        if leading.fields:
            metadata["fields"] = leading.fields
        if leading.imports:
            metadata["imports"] = leading.imports
        if leading.exports:
            metadata["exports"] = leading.exports
        return Document(children=children, metadata=metadata, source_location=SourceLocation(line=1, column=1))

    def parse_blocks(self, lines: list[str], first_line: int, column_offset: int = 0) -> list[Node]:
        """Parse a sequence of lines into block nodes.

        Parameters
        ----------
        lines : list of str
            Source lines without line terminators
        first_line : int
            1-based line number of ``lines[0]`` in the original document
        column_offset : int, default = 0
            Columns removed from the start of every line (container prefixes)

        Returns
        -------
        list of Node
            Block nodes in source order

        """
        blocks: list[Node] = []
        i = 0
        while i < len(lines):
            line = lines[i]
            if _is_blank(line):
                i += 1
                continue

            location = SourceLocation(line=first_line + i, column=column_offset + _indent_width(line) + 1)
            result = (
                self._parse_fence(lines, i, location)
                or self._parse_heading(lines, i, location)
                or self._parse_thematic_break(lines, i, location)
                or self._parse_block_quote(lines, i, first_line, column_offset, location)
                or self._parse_list(lines, i, first_line, column_offset, location)
                or self._parse_component(lines, i, first_line, column_offset, location)
                or self._parse_paragraph(lines, i, location)
            )
            node, i = result
            blocks.append(node)
        return blocks

    def _starts_block(self, line: str) -> bool:
        """Return True if ``line`` begins a block that interrupts a paragraph."""
        return bool(
            FENCE_OPEN_RE.match(line)
            or HEADING_RE.match(line)
            or THEMATIC_BREAK_RE.match(line)
            or BLOCK_QUOTE_RE.match(line)
            or (LIST_MARKER_RE.match(line) and line.strip() not in ("-", "+", "*"))
            or COMPONENT_START_RE.match(line)
        )

    def _parse_fence(self, lines: list[str], i: int, location: SourceLocation) -> Optional[tuple[Node, int]]:
        match = FENCE_OPEN_RE.match(lines[i])
        if not match:
            return None
        indent, fence, info = len(match.group(1)), match.group(2), match.group(3).strip()
        fence_char = fence[0]
        if fence_char == "`" and "`" in info:
            return None

        close_re = re.compile(r"^ {0,3}" + re.escape(fence_char) + "{" + str(len(fence)) + r",}[ \t]*$")
        content_lines: list[str] = []
        j = i + 1
        closed = False
        while j < len(lines):
            if close_re.match(lines[j]):
                closed = True
                break
            line = lines[j]
            strip = min(indent, _indent_width(line))
            content_lines.append(line[strip:])
            j += 1

        if not closed:
            logger.warning(
                f"Unterminated code fence at line {location.line}; treating the rest of the document as its content"
            )

        language = info.split()[0] if info else None
        node = CodeBlock(
            content="\n".join(content_lines),
            language=language,
            fence_char=fence_char,
            fence_length=len(fence),
            metadata={"info": info} if info else {},
            source_location=location,
        )
        return node, j + 1 if closed else j

    def _parse_heading(self, lines: list[str], i: int, location: SourceLocation) -> Optional[tuple[Node, int]]:
        match = HEADING_RE.match(lines[i])
        if not match:
            return None
        text = HEADING_CLOSE_RE.sub("", match.group(2).strip()).strip()
        content_location = location.offset(columns=len(match.group(1)) + 1)
        heading = Heading(
            level=len(match.group(1)),
            content=parse_inline(text, content_location),
            source_location=location,
        )
        return heading, i + 1

    def _parse_thematic_break(self, lines: list[str], i: int, location: SourceLocation) -> Optional[tuple[Node, int]]:
        if not THEMATIC_BREAK_RE.match(lines[i]):
            return None
        return ThematicBreak(source_location=location), i + 1

    def _parse_block_quote(
        self, lines: list[str], i: int, first_line: int, column_offset: int, location: SourceLocation
    ) -> Optional[tuple[Node, int]]:
        opening = BLOCK_QUOTE_RE.match(lines[i])
        if not opening:
            return None

        inner: list[str] = []
        j = i
        while j < len(lines):
            line = lines[j]
            match = BLOCK_QUOTE_RE.match(line)
            if match:
                inner.append(line[match.end() :])
            elif inner and not _is_blank(inner[-1]) and not _is_blank(line) and not self._starts_block(line):
                # Lazy continuation of a quoted paragraph
                inner.append(line)
            else:
                break
            j += 1

        children = self.parse_blocks(inner, first_line + i, column_offset + opening.end())
        return BlockQuote(children=children, source_location=location), j

    def _parse_list(
        self, lines: list[str], i: int, first_line: int, column_offset: int, location: SourceLocation
    ) -> Optional[tuple[Node, int]]:
        first = LIST_MARKER_RE.match(lines[i])
        if not first:
            return None

        marker = first.group(2)
        ordered = marker[-1] in ".)"
        kind = marker[-1]
        start = int(marker[:-1]) if ordered else 1

        items: list[ListItem] = []
        loose = False
        j = i
        while j < len(lines):
            match = LIST_MARKER_RE.match(lines[j])
            if not match or match.group(2)[-1] != kind or THEMATIC_BREAK_RE.match(lines[j]):
                break

            spacing = match.group(3)
            content_indent = len(match.group(1)) + len(match.group(2)) + (len(spacing) if 0 < len(spacing) <= 4 else 1)
            item_start = j
            item_lines = [lines[j][content_indent:] if len(spacing) <= 4 else lines[j][match.end(2) :].lstrip()]
            j += 1
            while j < len(lines):
                line = lines[j]
                if _is_blank(line):
                    item_lines.append("")
                elif _indent_width(line) >= content_indent:
                    item_lines.append(line[content_indent:])
                elif item_lines[-1].strip() and not self._starts_block(line):
                    # Lazy paragraph continuation
                    item_lines.append(line.lstrip())
                else:
                    break
                j += 1

            trailing_blanks = 0
            while item_lines and not item_lines[-1].strip():
                item_lines.pop()
                trailing_blanks += 1

            children = self.parse_blocks(item_lines, first_line + item_start, column_offset + content_indent)
            if len(children) > 1 and any(not line.strip() for line in item_lines):
                loose = True
            items.append(
                ListItem(
                    children=children,
                    source_location=SourceLocation(
                        line=first_line + item_start, column=column_offset + len(match.group(1)) + 1
                    ),
                )
            )

            if trailing_blanks and j < len(lines):
                follow = LIST_MARKER_RE.match(lines[j])
                if follow and follow.group(2)[-1] == kind:
                    loose = True

        node = List(ordered=ordered, items=items, start=start, tight=not loose, source_location=location)
        return node, j

    def _parse_component(
        self, lines: list[str], i: int, first_line: int, column_offset: int, location: SourceLocation
    ) -> Optional[tuple[Node, int]]:
        if not COMPONENT_START_RE.match(lines[i]):
            return None

        rest = "\n".join(lines[i:])
        tag = parse_tag(rest, _indent_width(lines[i]))
        if tag is None:
            return None

        if tag.self_closing:
            return self._finish_component(rest, tag.end, lines, i, location, tag.name, tag.props, [])

        closing = find_closing_tag(rest, tag.name, tag.end)
        if closing is None:
            logger.warning(
                f"Unclosed component <{tag.name}> at line {location.line}; "
                f"treating the rest of the document as its children"
            )
            body = rest[tag.end :]
            end = len(rest)
        else:
            body = rest[tag.end : closing[0]]
            end = closing[1]

        body_line = first_line + i + rest.count("\n", 0, tag.end)
        if "\n" not in body:
            # Single-line invocation: children are inline content
            children = parse_inline(body.strip(), SourceLocation(line=body_line, column=column_offset + tag.end + 1))
        else:
            body_lines = textwrap.dedent(body).split("\n")
            dedent = min((_indent_width(ln) for ln in body.split("\n") if ln.strip()), default=0)
            children = self.parse_blocks(body_lines, body_line, column_offset + dedent)

        return self._finish_component(rest, end, lines, i, location, tag.name, tag.props, children)

    def _finish_component(
        self,
        rest: str,
        end: int,
        lines: list[str],
        i: int,
        location: SourceLocation,
        name: str,
        props: dict,
        children: list[Node],
    ) -> Optional[tuple[Node, int]]:
        """Build a block component if nothing but whitespace follows its end on the line."""
        line_end = rest.find("\n", end)
        trailing = rest[end:] if line_end == -1 else rest[end:line_end]
        if trailing.strip():
            # Text after the tag on the same line: the line is a paragraph with an inline component
            return None

        consumed = rest.count("\n", 0, end) + 1
        node = ComponentInvocation(tag_name=name, props=props, children=children, source_location=location)
        return node, i + consumed

    def _parse_paragraph(self, lines: list[str], i: int, location: SourceLocation) -> tuple[Node, int]:
        para_lines = [lines[i].lstrip()]
        j = i + 1
        while j < len(lines) and not _is_blank(lines[j]) and not self._starts_block(lines[j]):
            para_lines.append(lines[j].lstrip())
            j += 1

        text = "\n".join(para_lines).rstrip()
        return Paragraph(content=parse_inline(text, location), source_location=location), j


def parse(text: str) -> Document:
    """Parse document text into a syntax tree.

    Parameters
    ----------
    text : str
        Document source

    Returns
    -------
    Document
        Parsed tree

    """
    return BlockParser().parse(text)
