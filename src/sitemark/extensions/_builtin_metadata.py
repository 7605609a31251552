#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/extensions/_builtin_metadata.py
"""Metadata definitions for built-in extensions.

These objects are registered when :mod:`sitemark.extensions` is imported and
are also advertised through the ``sitemark.extensions`` entry point group in
pyproject.toml.

"""

from __future__ import annotations

from sitemark.extensions.builtin import (
    AutolinkExtension,
    EmphasisExtension,
    FootnotesExtension,
    HeadingIdsExtension,
    HighlightExtension,
    StrikethroughExtension,
    TablesExtension,
    TaskListExtension,
)
from sitemark.extensions.metadata import ExtensionMetadata, ParameterSpec

GFM_TABLES_METADATA = ExtensionMetadata(
    name="gfm-tables",
    description="Turn pipe-table paragraphs into tables (must run before emphasis to split every cell)",
    extension_class=TablesExtension,
    tags=["gfm", "block"],
    author="sitemark",
)

EMPHASIS_METADATA = ExtensionMetadata(
    name="emphasis",
    description="Resolve * and _ delimiter runs into emphasis and strong emphasis",
    extension_class=EmphasisExtension,
    tags=["commonmark", "inline"],
    author="sitemark",
)

GFM_STRIKETHROUGH_METADATA = ExtensionMetadata(
    name="gfm-strikethrough",
    description="Resolve ~~text~~ into strikethrough",
    extension_class=StrikethroughExtension,
    tags=["gfm", "inline"],
    author="sitemark",
)

AUTOLINK_METADATA = ExtensionMetadata(
    name="autolink",
    description="Link bare http(s):// and www. URLs",
    extension_class=AutolinkExtension,
    tags=["gfm", "inline", "links"],
    author="sitemark",
)

GFM_TASKLIST_METADATA = ExtensionMetadata(
    name="gfm-tasklist",
    description="Turn list items starting with [ ] or [x] into task items",
    extension_class=TaskListExtension,
    tags=["gfm", "block"],
    author="sitemark",
)

GFM_FOOTNOTES_METADATA = ExtensionMetadata(
    name="gfm-footnotes",
    description="Turn [^label] references and [^label]: definitions into numbered footnotes",
    extension_class=FootnotesExtension,
    parameters={
        "id_prefix": ParameterSpec(
            type=str, default="user-content-", help="Prefix of the footnote and back-reference anchor ids"
        ),
    },
    tags=["gfm", "inline"],
    author="sitemark",
)

HEADING_IDS_METADATA = ExtensionMetadata(
    name="heading-ids",
    description="Assign unique anchor ids to headings",
    extension_class=HeadingIdsExtension,
    parameters={
        "id_prefix": ParameterSpec(type=str, default="", help="Prefix added to every generated id"),
    },
    tags=["headings", "annotation"],
    author="sitemark",
)

HIGHLIGHT_METADATA = ExtensionMetadata(
    name="highlight",
    description="Attach syntax highlighting tokens to fenced code blocks",
    extension_class=HighlightExtension,
    parameters={
        "default_language": ParameterSpec(
            type=str, default="", help="Language assumed for code fences without an info string"
        ),
    },
    tags=["code", "annotation"],
    author="sitemark",
)

BUILTIN_EXTENSIONS = [
    GFM_TABLES_METADATA,
    EMPHASIS_METADATA,
    GFM_STRIKETHROUGH_METADATA,
    AUTOLINK_METADATA,
    GFM_TASKLIST_METADATA,
    GFM_FOOTNOTES_METADATA,
    HEADING_IDS_METADATA,
    HIGHLIGHT_METADATA,
]
