"""sitemark - compile Markdown and MDX pages into render trees.

sitemark is the content layer of a static site: it parses Markdown/MDX page
sources into a syntax tree, applies an ordered chain of syntax extensions
(GFM tables, emphasis, strikethrough, autolinks, task lists, heading ids,
syntax highlighting) and emits a tree of generic render nodes, with
component invocations delegated to caller-supplied renderers.

Key Features
------------
- Lenient block parser with source locations on every node
- Explicitly ordered, pluggable extension chain (entry point discovery)
- Pygments-based highlighting that preserves the original code text
- Page metadata from YAML front matter, MDX ``meta`` exports or the first h1
- Concurrent batch compilation with per-document error isolation
- Content-addressed compilation cache

Examples
--------
Compile one page:

    >>> from sitemark import compile_document, to_html
    >>> result = compile_document("# Uses\\n\\nThings I *use*.")
    >>> result.metadata.title
    'Uses'
    >>> to_html(result.tree)
    '<article><h1 id="uses">Uses</h1><p>Things I <em>use</em>.</p></article>'

Bind a component:

    >>> from sitemark import CompilerOptions, Element
    >>> options = CompilerOptions(components={"Card": lambda props, children: Element("div", {"class": "card"}, children)})
    >>> compile_document("<Card>\\nHello\\n</Card>", options)

"""

#  Copyright (c) 2025 Tom Villani, Ph.D.

# Check Python version before any imports
import sys

if sys.version_info < (3, 10):
    raise ImportError(
        "sitemark requires Python 3.10 or later. "
        f"You are using Python {sys.version_info.major}.{sys.version_info.minor}."
    )

__version__ = "1.0.0"

from sitemark.cache import CompilationCache
from sitemark.compiler import (
    BatchResult,
    CompileResult,
    Compiler,
    PageMetadata,
    compile_batch,
    compile_document,
    extract_page_metadata,
)
from sitemark.exceptions import (
    CompilationError,
    ConfigurationError,
    MalformedMetadataError,
    MalformedTableError,
    SitemarkError,
    UnknownComponentError,
    UnknownExtensionError,
)
from sitemark.extensions import Extension, ExtensionMetadata, ParameterSpec, extension_registry
from sitemark.options import CompilerOptions
from sitemark.parsers import parse
from sitemark.render import ComponentRenderer, Element, RenderNode, Text, to_dict, to_html

__all__ = [
    "__version__",
    # Compilation
    "BatchResult",
    "CompilationCache",
    "CompileResult",
    "Compiler",
    "CompilerOptions",
    "PageMetadata",
    "compile_batch",
    "compile_document",
    "extract_page_metadata",
    "parse",
    # Extensions
    "Extension",
    "ExtensionMetadata",
    "ParameterSpec",
    "extension_registry",
    # Render tree
    "ComponentRenderer",
    "Element",
    "RenderNode",
    "Text",
    "to_dict",
    "to_html",
    # Exceptions
    "CompilationError",
    "ConfigurationError",
    "MalformedMetadataError",
    "MalformedTableError",
    "SitemarkError",
    "UnknownComponentError",
    "UnknownExtensionError",
]
