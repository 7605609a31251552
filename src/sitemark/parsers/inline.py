#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/parsers/inline.py
"""Inline content parsing.

This module turns the text of a paragraph, heading or component body into
inline nodes. It recognises backslash escapes, code spans, links, images,
angle-bracket autolinks, inline component invocations and line breaks.

Emphasis, strong, strikethrough, bare URLs and table cells are deliberately
left as plain ``Text``: the extension chain resolves them later, so the same
parsed tree can be compiled with different extension lists.

The component tag reader (:func:`parse_tag`, :func:`find_closing_tag`) is
shared with the block parser.

"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any

from sitemark.ast.nodes import Code, ComponentInvocation, Image, LineBreak, Link, Node, SourceLocation, Text

logger = logging.getLogger(__name__)

# ASCII punctuation that a backslash may escape (CommonMark)
ESCAPABLE = set("!\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~")

COMPONENT_NAME_RE = re.compile(r"[A-Z][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*")
ATTRIBUTE_NAME_RE = re.compile(r"[A-Za-z_:][A-Za-z0-9_:.-]*")
ANGLE_AUTOLINK_RE = re.compile(r"<([A-Za-z][A-Za-z0-9+.-]{1,31}:[^\s<>]*)>")
EMAIL_AUTOLINK_RE = re.compile(r"<([A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+@[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?(?:\.[A-Za-z0-9-]+)+)>")


@dataclass
class ParsedTag:
    """Opening component tag read from source text.

    Parameters
    ----------
    name : str
        Component tag name
    props : dict
        Attribute values
    start : int
        Index of the ``<``
    end : int
        Index just past the closing ``>`` of the tag
    self_closing : bool
        Whether the tag ended with ``/>``

    """

    name: str
    props: dict[str, Any] = field(default_factory=dict)
    start: int = 0
    end: int = 0
    self_closing: bool = False


def read_expression(text: str, pos: int) -> tuple[str, int] | None:
    """Read a brace-delimited expression starting at ``text[pos] == '{'``.

    Returns the expression body and the index after the closing brace, or
    None if the braces never balance. Braces inside string literals and
    ``//`` or ``/* */`` comments are not counted.
    """
    depth = 0
    quote: str | None = None
    i = pos
    while i < len(text):
        ch = text[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif text.startswith("//", i):
            end = text.find("\n", i)
            if end == -1:
                return None
            i = end
            continue
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            if end == -1:
                return None
            i = end + 2
            continue
        elif ch in "\"'`":
            quote = ch
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[pos + 1 : i], i + 1
        i += 1
    return None


def _decode_expression(expression: str) -> Any:
    """Decode a prop expression as a JSON literal, or keep its source text."""
    stripped = expression.strip()
    try:
        return json.loads(stripped)
    except ValueError:
        return stripped


def parse_tag(text: str, pos: int) -> ParsedTag | None:
    """Read a component opening tag at ``pos``.

    Parameters
    ----------
    text : str
        Source text
    pos : int
        Index of the ``<`` character

    Returns
    -------
    ParsedTag or None
        The parsed tag, or None if the text at ``pos`` is not a complete
        component tag (lower-case tags are not components)

    Notes
    -----
    Supported attribute forms are ``name="text"``, ``name='text'``,
    ``name={expression}`` and a bare ``name`` (True). Expressions that are
    valid JSON are decoded; anything else is kept as its source string.

    """
    if not text.startswith("<", pos):
        return None
    name_match = COMPONENT_NAME_RE.match(text, pos + 1)
    if not name_match:
        return None

    tag = ParsedTag(name=name_match.group(0), start=pos)
    i = name_match.end()
    if i < len(text) and not (text[i].isspace() or text[i] in "/>"):
        return None

    while i < len(text):
        while i < len(text) and text[i].isspace():
            i += 1
        if i >= len(text):
            return None
        if text.startswith("/>", i):
            tag.self_closing = True
            tag.end = i + 2
            return tag
        if text[i] == ">":
            tag.end = i + 1
            return tag

        attr_match = ATTRIBUTE_NAME_RE.match(text, i)
        if not attr_match:
            return None
        attr_name = attr_match.group(0)
        i = attr_match.end()

        j = i
        while j < len(text) and text[j].isspace():
            j += 1
        if j < len(text) and text[j] == "=":
            j += 1
            while j < len(text) and text[j].isspace():
                j += 1
            if j >= len(text):
                return None
            if text[j] in "\"'":
                close = text.find(text[j], j + 1)
                if close == -1:
                    return None
                tag.props[attr_name] = text[j + 1 : close]
                i = close + 1
            elif text[j] == "{":
                expression = read_expression(text, j)
                if expression is None:
                    return None
                tag.props[attr_name] = _decode_expression(expression[0])
                i = expression[1]
            else:
                return None
        else:
            tag.props[attr_name] = True

    return None


def find_closing_tag(text: str, name: str, start: int) -> tuple[int, int] | None:
    """Find the closing tag matching an opening ``<name>`` tag.

    Nested invocations of the same component are counted, so the returned
    closing tag is the one that balances the opening tag.

    Parameters
    ----------
    text : str
        Source text
    name : str
        Component tag name
    start : int
        Index just past the opening tag

    Returns
    -------
    tuple of (int, int) or None
        Start and end indices of the closing tag, or None if it is missing

    """
    pattern = re.compile(r"<(/?)" + re.escape(name) + r"(?=[\s/>])")
    depth = 1
    pos = start
    while True:
        match = pattern.search(text, pos)
        if not match:
            return None
        if match.group(1):
            end = text.find(">", match.end())
            if end == -1:
                return None
            depth -= 1
            if depth == 0:
                return match.start(), end + 1
            pos = end + 1
        else:
            nested = parse_tag(text, match.start())
            if nested is None:
                pos = match.end()
                continue
            if not nested.self_closing:
                depth += 1
            pos = nested.end


class InlineParser:
    """Parse inline text into inline nodes.

    Parameters
    ----------
    location : SourceLocation or None, default = None
        Location of the first character of the text, used to place component
        invocations for diagnostics

    Examples
    --------
        >>> nodes = InlineParser().parse("see [docs](/docs) and `code`")

    """

    def __init__(self, location: SourceLocation | None = None):
        """Initialize the parser with the location of the text."""
        self.location = location or SourceLocation(line=1, column=1)
        self._text = ""
        self._nodes: list[Node] = []
        self._buffer: list[str] = []

    def parse(self, text: str) -> list[Node]:
        """Parse ``text`` into a list of inline nodes.

        Parameters
        ----------
        text : str
            Inline source text; newlines mark line breaks

        Returns
        -------
        list of Node
            Inline nodes in source order; adjacent plain text is merged

        """
        self._text = text
        self._nodes = []
        self._buffer = []

        i = 0
        while i < len(text):
            ch = text[i]
            if ch == "\\":
                i = self._parse_escape(i)
            elif ch == "`":
                i = self._parse_code_span(i)
            elif ch == "!" and text.startswith("[", i + 1):
                i = self._parse_link(i, image=True)
            elif ch == "[":
                i = self._parse_link(i, image=False)
            elif ch == "<":
                i = self._parse_angle(i)
            elif ch == "\n":
                i = self._parse_newline(i)
            else:
                self._buffer.append(ch)
                i += 1

        self._flush()
        return self._nodes

    def _flush(self) -> None:
        if self._buffer:
            content = "".join(self._buffer)
            self._buffer = []
            last = self._nodes[-1] if self._nodes else None
            if isinstance(last, Text) and not last.escaped:
                last.content += content
            else:
                self._nodes.append(Text(content=content))

    def _emit(self, node: Node) -> None:
        self._flush()
        self._nodes.append(node)

    def _location_at(self, pos: int) -> SourceLocation:
        line_offset = self._text.count("\n", 0, pos)
        if line_offset == 0:
            return self.location.offset(columns=pos)
        line_start = self._text.rfind("\n", 0, pos) + 1
        return SourceLocation(line=self.location.line + line_offset, column=pos - line_start + 1)

    def _parse_escape(self, i: int) -> int:
        text = self._text
        if i + 1 < len(text) and text[i + 1] in ESCAPABLE:
            self._emit(Text(content=text[i + 1], metadata={"escaped": True}))
            return i + 2
        if i + 1 < len(text) and text[i + 1] == "\n":
            self._emit(LineBreak(soft=False))
            return self._skip_indent(i + 2)
        self._buffer.append("\\")
        return i + 1

    def _parse_code_span(self, i: int) -> int:
        text = self._text
        run_end = i
        while run_end < len(text) and text[run_end] == "`":
            run_end += 1
        run = text[i:run_end]

        search = run_end
        while True:
            close = text.find(run, search)
            if close == -1:
                # No closing run: the backticks are literal
                self._buffer.append(run)
                return run_end
            close_end = close + len(run)
            if close_end < len(text) and text[close_end] == "`":
                # Longer run of backticks; keep looking
                search = close_end
                while search < len(text) and text[search] == "`":
                    search += 1
                continue
            break

        content = text[run_end:close].replace("\n", " ")
        if len(content) >= 2 and content[0] == " " and content[-1] == " " and content.strip():
            content = content[1:-1]
        self._emit(Code(content=content, source_location=self._location_at(i)))
        return close_end

    def _find_bracket_close(self, i: int) -> int:
        depth = 0
        j = i
        text = self._text
        while j < len(text):
            ch = text[j]
            if ch == "\\":
                j += 2
                continue
            if ch == "`":
                # Brackets inside code spans do not count
                run_end = j
                while run_end < len(text) and text[run_end] == "`":
                    run_end += 1
                close = text.find(text[j:run_end], run_end)
                j = run_end if close == -1 else close + (run_end - j)
                continue
            if ch == "[":
                depth += 1
            elif ch == "]":
                depth -= 1
                if depth == 0:
                    return j
            j += 1
        return -1

    def _parse_destination(self, i: int) -> tuple[str, str | None, int] | None:
        """Parse ``(url "title")`` starting at ``text[i] == '('``."""
        text = self._text
        j = i + 1
        while j < len(text) and text[j] in " \t\n":
            j += 1

        if j < len(text) and text[j] == "<":
            close = text.find(">", j + 1)
            if close == -1 or "\n" in text[j:close]:
                return None
            url = text[j + 1 : close]
            j = close + 1
        else:
            depth = 0
            start = j
            while j < len(text):
                ch = text[j]
                if ch == "\\" and j + 1 < len(text):
                    j += 2
                    continue
                if ch.isspace():
                    break
                if ch == "(":
                    depth += 1
                elif ch == ")":
                    if depth == 0:
                        break
                    depth -= 1
                j += 1
            url = re.sub(r"\\(.)", r"\1", text[start:j])

        while j < len(text) and text[j] in " \t\n":
            j += 1

        title: str | None = None
        if j < len(text) and text[j] in "\"'(":
            closer = ")" if text[j] == "(" else text[j]
            close = text.find(closer, j + 1)
            if close == -1:
                return None
            title = text[j + 1 : close]
            j = close + 1
            while j < len(text) and text[j] in " \t\n":
                j += 1

        if j < len(text) and text[j] == ")":
            return url, title, j + 1
        return None

    def _parse_link(self, i: int, image: bool) -> int:
        text = self._text
        open_index = i + 1 if image else i
        close = self._find_bracket_close(open_index)
        if close == -1 or not text.startswith("(", close + 1):
            self._buffer.append(text[i : open_index + 1])
            return open_index + 1

        destination = self._parse_destination(close + 1)
        if destination is None:
            self._buffer.append(text[i : open_index + 1])
            return open_index + 1

        url, title, end = destination
        label = text[open_index + 1 : close]
        location = self._location_at(i)
        if image:
            alt = re.sub(r"\\(.)", r"\1", label)
            self._emit(Image(url=url, alt_text=alt, title=title, source_location=location))
        else:
            content = InlineParser(self._location_at(open_index + 1)).parse(label)
            self._emit(Link(url=url, content=content, title=title, source_location=location))
        return end

    def _parse_angle(self, i: int) -> int:
        text = self._text
        for pattern, prefix in ((ANGLE_AUTOLINK_RE, ""), (EMAIL_AUTOLINK_RE, "mailto:")):
            match = pattern.match(text, i)
            if match:
                target = match.group(1)
                self._emit(
                    Link(
                        url=prefix + target,
                        content=[Text(content=target)],
                        metadata={"autolink": True},
                        source_location=self._location_at(i),
                    )
                )
                return match.end()

        tag = parse_tag(text, i)
        if tag is None:
            self._buffer.append("<")
            return i + 1

        location = self._location_at(i)
        if tag.self_closing:
            self._emit(ComponentInvocation(tag_name=tag.name, props=tag.props, inline=True, source_location=location))
            return tag.end

        closing = find_closing_tag(text, tag.name, tag.end)
        if closing is None:
            logger.debug(f"Unclosed inline component <{tag.name}> at line {location.line}; keeping it as text")
            self._buffer.append("<")
            return i + 1

        children = InlineParser(self._location_at(tag.end)).parse(text[tag.end : closing[0]])
        self._emit(
            ComponentInvocation(
                tag_name=tag.name, props=tag.props, children=children, inline=True, source_location=location
            )
        )
        return closing[1]

    def _parse_newline(self, i: int) -> int:
        trailing = 0
        while self._buffer and self._buffer[-1] == " ":
            self._buffer.pop()
            trailing += 1
        self._emit(LineBreak(soft=trailing < 2))
        return self._skip_indent(i + 1)

    def _skip_indent(self, i: int) -> int:
        while i < len(self._text) and self._text[i] in " \t":
            i += 1
        return i


def parse_inline(text: str, location: SourceLocation | None = None) -> list[Node]:
    """Parse inline text into nodes.

    Parameters
    ----------
    text : str
        Inline source text
    location : SourceLocation or None, default = None
        Location of the first character

    Returns
    -------
    list of Node
        Inline nodes

    """
    return InlineParser(location).parse(text)
