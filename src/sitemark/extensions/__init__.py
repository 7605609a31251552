#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/extensions/__init__.py
"""Syntax extension system.

Extensions are named tree-rewriting passes applied to the parsed tree in an
explicitly configured order. This package provides:

- the Extension base class and its metadata
- the extension registry with entry point plugin discovery
- the chain runner
- the built-in extensions

Examples
--------
Compile with an explicit extension order:

    >>> from sitemark.extensions import apply_chain, resolve_extensions
    >>> from sitemark.parsers import parse
    >>> tree = apply_chain(parse(text), resolve_extensions(["gfm-tables", "emphasis"]))

Register a custom extension:

    >>> from sitemark.extensions import Extension, ExtensionMetadata, extension_registry
    >>>
    >>> class ShoutExtension(Extension):
    ...     ...
    >>>
    >>> extension_registry.register(
    ...     ExtensionMetadata(name="shout", description="Upper-case headings", extension_class=ShoutExtension)
    ... )

"""

from __future__ import annotations

from ._builtin_metadata import (
    AUTOLINK_METADATA,
    BUILTIN_EXTENSIONS,
    EMPHASIS_METADATA,
    GFM_FOOTNOTES_METADATA,
    GFM_STRIKETHROUGH_METADATA,
    GFM_TABLES_METADATA,
    GFM_TASKLIST_METADATA,
    HEADING_IDS_METADATA,
    HIGHLIGHT_METADATA,
)
from .base import Extension, ExtensionResult
from .builtin import (
    AutolinkExtension,
    EmphasisExtension,
    FootnotesExtension,
    HeadingIdsExtension,
    HighlightExtension,
    StrikethroughExtension,
    TablesExtension,
    TaskListExtension,
)
from .chain import apply_chain
from .metadata import ExtensionMetadata, ParameterSpec
from .registry import ENTRY_POINT_GROUP, ExtensionRegistry, extension_registry, resolve_extensions


def register_builtin_extensions() -> None:
    """Register (or re-register) the built-in extensions."""
    for metadata in BUILTIN_EXTENSIONS:
        extension_registry.register(metadata)


register_builtin_extensions()

__all__ = [
    # Base
    "Extension",
    "ExtensionResult",
    "ExtensionMetadata",
    "ParameterSpec",
    # Registry
    "ENTRY_POINT_GROUP",
    "ExtensionRegistry",
    "extension_registry",
    "register_builtin_extensions",
    "resolve_extensions",
    # Chain
    "apply_chain",
    # Built-in extensions
    "AutolinkExtension",
    "EmphasisExtension",
    "FootnotesExtension",
    "HeadingIdsExtension",
    "HighlightExtension",
    "StrikethroughExtension",
    "TablesExtension",
    "TaskListExtension",
    # Built-in metadata
    "AUTOLINK_METADATA",
    "BUILTIN_EXTENSIONS",
    "EMPHASIS_METADATA",
    "GFM_FOOTNOTES_METADATA",
    "GFM_STRIKETHROUGH_METADATA",
    "GFM_TABLES_METADATA",
    "GFM_TASKLIST_METADATA",
    "HEADING_IDS_METADATA",
    "HIGHLIGHT_METADATA",
]
