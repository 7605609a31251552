#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/parsers/frontmatter.py
"""Leading metadata extraction.

A page may start with metadata in one of two forms:

- YAML front matter between ``---`` lines at the very top of the file
- an MDX ``export const meta = { ... }`` block, optionally preceded by
  ``import`` statements and followed by other ``export`` statements

The extracted block is removed from the body by blanking its lines, so that
line numbers reported by later stages still match the original file.

"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any

import yaml

from sitemark.ast.nodes import SourceLocation
from sitemark.exceptions import MalformedMetadataError
from sitemark.parsers.inline import read_expression

logger = logging.getLogger(__name__)

META_EXPORT_RE = re.compile(r"^export\s+const\s+meta\s*=\s*")
IMPORT_RE = re.compile(r"^import\s")
EXPORT_RE = re.compile(r"^export\s")
TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")
JS_ESCAPE_RE = re.compile(r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\n|.)", re.DOTALL)
JS_SIMPLE_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0", "\n": ""}
KEY_COLON_RE = re.compile(r":(?=\S)")


@dataclass
class LeadingMetadata:
    """Metadata found at the top of a document.

    Parameters
    ----------
    body : str
        Document text with the metadata lines blanked out
    fields : dict
        Key/value pairs from front matter or the ``meta`` export
    imports : list of str
        MDX import statements, in order
    exports : list of str
        Other MDX export statements, in order

    """

    body: str
    fields: dict[str, Any] = field(default_factory=dict)
    imports: list[str] = field(default_factory=list)
    exports: list[str] = field(default_factory=list)


def _unescape_js(body: str) -> str:
    """Decode the escape sequences of a JavaScript string literal body."""

    def decode(match: re.Match[str]) -> str:
        escape = match.group(1)
        if len(escape) > 1 and escape[0] in "ux":
            return chr(int(escape[1:].strip("{}"), 16))
        return JS_SIMPLE_ESCAPES.get(escape, escape)

    return JS_ESCAPE_RE.sub(decode, body)


def _js_literal_to_yaml(source: str) -> str:
    """Rewrite a JavaScript object literal as a YAML flow mapping.

    Comments are dropped and every string literal (single, double or
    backtick quoted) becomes a YAML double-quoted scalar. Template
    placeholders such as ``${name}`` are kept as literal text. Trailing
    commas are removed and a space is put after each key colon, since YAML
    flow syntax needs both.

    Parameters
    ----------
    source : str
        Object literal including its outer braces

    Returns
    -------
    str
        Text for :func:`yaml.safe_load`

    """
    parts: list[str] = []
    code: list[str] = []

    def flush_code() -> None:
        text = TRAILING_COMMA_RE.sub(r"\1", "".join(code))
        parts.append(KEY_COLON_RE.sub(": ", text))
        code.clear()

    i = 0
    while i < len(source):
        ch = source[i]
        if source.startswith("//", i):
            end = source.find("\n", i)
            i = len(source) if end == -1 else end
        elif source.startswith("/*", i):
            end = source.find("*/", i + 2)
            code.append(" ")
            i = len(source) if end == -1 else end + 2
        elif ch in "\"'`":
            j = i + 1
            while j < len(source) and source[j] != ch:
                j += 2 if source[j] == "\\" else 1
            flush_code()
            parts.append(json.dumps(_unescape_js(source[i + 1 : j]), ensure_ascii=False))
            i = j + 1
        else:
            code.append(ch)
            i += 1
    flush_code()
    return "".join(parts)


def _load_mapping(source: str, location: SourceLocation) -> dict[str, Any]:
    try:
        data = yaml.safe_load(source)
    except yaml.YAMLError as e:
        raise MalformedMetadataError(location, detail=str(e).splitlines()[0], original_error=e) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MalformedMetadataError(location, detail=f"expected a mapping, got {type(data).__name__}")
    return data


def _split_yaml_front_matter(lines: list[str], result: LeadingMetadata) -> int:
    """Consume YAML front matter; return the index of the first body line."""
    if not lines or lines[0].rstrip() != "---":
        return 0

    for end in range(1, len(lines)):
        if lines[end].rstrip() in ("---", "..."):
            break
    else:
        # No closing delimiter: the opening line is an ordinary thematic break
        return 0

    result.fields.update(_load_mapping("\n".join(lines[1:end]), SourceLocation(line=1)))
    for i in range(end + 1):
        lines[i] = ""
    return end + 1


def _split_esm_block(lines: list[str], start: int, result: LeadingMetadata) -> None:
    """Consume leading MDX import/export statements."""
    i = start
    while i < len(lines):
        line = lines[i]
        if not line.strip():
            i += 1
            continue

        meta_match = META_EXPORT_RE.match(line)
        if meta_match:
            remainder = "\n".join(lines[i:])
            brace = meta_match.end()
            expression = read_expression(remainder, brace) if remainder[brace : brace + 1] == "{" else None
            location = SourceLocation(line=i + 1)
            if expression is None:
                raise MalformedMetadataError(location, detail="unbalanced braces in meta export")
            literal = _js_literal_to_yaml("{" + expression[0] + "}")
            # Front matter takes precedence over the meta export
            for key, value in _load_mapping(literal, location).items():
                result.fields.setdefault(key, value)
            consumed = remainder[: expression[1]].count("\n") + 1
            for j in range(i, i + consumed):
                lines[j] = ""
            i += consumed
            continue

        if IMPORT_RE.match(line):
            result.imports.append(line.strip())
            lines[i] = ""
            i += 1
            continue

        if EXPORT_RE.match(line):
            result.exports.append(line.strip())
            lines[i] = ""
            i += 1
            continue

        break


def extract_leading_metadata(text: str) -> LeadingMetadata:
    """Extract front matter and MDX metadata from the top of a document.

    Parameters
    ----------
    text : str
        Document text with normalised line endings

    Returns
    -------
    LeadingMetadata
        The body text (metadata lines blanked) and the extracted values

    Raises
    ------
    MalformedMetadataError
        If a metadata block does not parse or is not a mapping

    Examples
    --------
        >>> meta = extract_leading_metadata("---\\ntitle: Uses\\n---\\n# Uses")
        >>> meta.fields["title"]
        'Uses'

    """
    lines = text.split("\n")
    result = LeadingMetadata(body="")
    start = _split_yaml_front_matter(lines, result)
    _split_esm_block(lines, start, result)
    result.body = "\n".join(lines)

    if result.fields:
        logger.debug(f"Extracted metadata fields: {', '.join(sorted(map(str, result.fields)))}")
    return result
