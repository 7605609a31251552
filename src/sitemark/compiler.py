#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/compiler.py
"""Document compilation pipeline.

Compilation is linear: text -> syntax tree -> extension chain -> render tree.
Each stage only uses the output of the previous one, and nothing in the
pipeline touches shared mutable state, so independent documents can be
compiled concurrently.

Errors fall into three groups:

- configuration errors (:class:`UnknownExtensionError`) are raised when a
  :class:`Compiler` is created, before any document is parsed
- structural errors (:class:`CompilationError` subclasses) fail one document;
  :func:`compile_batch` records them and keeps compiling the rest
- degradable conditions (unterminated fences, unknown highlight languages)
  are logged and never raise

Examples
--------
    >>> result = compile_document("# Uses\\n\\nThings I use.", CompilerOptions())
    >>> result.metadata.title
    'Uses'
    >>> to_html(result.tree)
    '<article><h1 id="uses">Uses</h1><p>Things I use.</p></article>'

"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from sitemark.ast.nodes import Document, Heading, Node, plain_text
from sitemark.ast.transforms import find_first
from sitemark.cache import CompilationCache
from sitemark.exceptions import CompilationError
from sitemark.extensions import apply_chain, extension_registry
from sitemark.extensions.base import Extension
from sitemark.logging_utils import document_context
from sitemark.options import CompilerOptions
from sitemark.parsers.block import BlockParser
from sitemark.render.emitter import emit
from sitemark.render.nodes import RenderNode
from sitemark.utils.decorators import debug_timer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageMetadata:
    """Page metadata handed to the composition layer.

    Parameters
    ----------
    title : str or None
        Page title
    description : str or None
        Page description
    extra : dict
        Every other metadata field, plus ``imports``/``exports`` for MDX
        statements found at the top of the document

    """

    title: Optional[str] = None
    description: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class CompileResult:
    """Output of compiling one document.

    Parameters
    ----------
    tree : RenderNode
        Render tree root (an ``article`` element)
    metadata : PageMetadata
        Extracted page metadata
    document : Document
        Transformed syntax tree the render tree was emitted from

    """

    tree: RenderNode
    metadata: PageMetadata
    document: Document


@dataclass
class BatchResult:
    """Outcome of compiling several documents.

    Parameters
    ----------
    results : dict
        Name -> CompileResult for documents that compiled
    errors : dict
        Name -> CompilationError for documents that failed

    """

    results: dict[str, CompileResult] = field(default_factory=dict)
    errors: dict[str, CompilationError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """True if every document compiled."""
        return not self.errors


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def extract_page_metadata(document: Document, options: CompilerOptions) -> PageMetadata:
    """Build page metadata for a transformed document.

    Parameters
    ----------
    document : Document
        Transformed syntax tree
    options : CompilerOptions
        Controls which metadata sources are used

    Returns
    -------
    PageMetadata
        Title, description and remaining fields

    Notes
    -----
    Sources in priority order: YAML front matter, the MDX ``meta`` export,
    and (for the title only) the plain text of the first level-1 heading.

    """
    fields: dict[str, Any] = dict(document.metadata.get("fields", {})) if options.extract_metadata else {}
    title = _optional_str(fields.pop("title", None))
    description = _optional_str(fields.pop("description", None))

    if title is None and options.title_from_heading:
        heading = find_first(document, lambda node: isinstance(node, Heading) and node.level == 1)
        if isinstance(heading, Heading):
            title = plain_text(heading.content).strip() or None

    extra = fields
    for key in ("imports", "exports"):
        if document.metadata.get(key):
            extra[key] = list(document.metadata[key])

    return PageMetadata(title=title, description=description, extra=extra)


class Compiler:
    """Compile documents with a fixed configuration.

    The extension list is resolved when the compiler is created, so an
    unknown extension id fails here and not in the middle of a build.

    Parameters
    ----------
    options : CompilerOptions, optional
        Configuration; defaults to the built-in extension list with no
        component bindings
    cache : CompilationCache, optional
        Read-through cache for compile results

    Raises
    ------
    UnknownExtensionError
        If ``options.extensions`` names an unregistered extension
    ConfigurationError
        If extension parameters are invalid

    Examples
    --------
        >>> compiler = Compiler(CompilerOptions(extensions=("gfm-tables",)))
        >>> result = compiler.compile("| a | b |\\n|---|---|\\n| 1 | 2 |")

    """

    def __init__(self, options: Optional[CompilerOptions] = None, cache: Optional[CompilationCache] = None):
        """Resolve the extension configuration."""
        self.options = options or CompilerOptions()
        self.cache = cache
        self._resolved = extension_registry.resolve(self.options.extensions, self.options.extension_options)
        self._parser = BlockParser()
        logger.debug(f"Compiler configured with extensions: {', '.join(self.options.extensions) or '(none)'}")

    def create_extensions(self) -> list[Extension]:
        """Create fresh extension instances in chain order."""
        return [metadata.extension_class(**params) for metadata, params in self._resolved]

    def parse(self, text: str) -> Document:
        """Parse document text without applying extensions."""
        with debug_timer(logger, "Parsing"):
            return self._parser.parse(text)

    def transform(self, tree: Node) -> Node:
        """Apply the configured extension chain to a parsed tree."""
        with debug_timer(logger, "Extension chain"):
            return apply_chain(tree, self.create_extensions())

    def compile(self, text: str) -> CompileResult:
        """Compile one document.

        Parameters
        ----------
        text : str
            Document source

        Returns
        -------
        CompileResult
            Render tree, page metadata and transformed syntax tree

        Raises
        ------
        CompilationError
            For structural errors in this document (unknown component,
            malformed table, malformed metadata)

        """
        if self.cache is not None:
            return self.cache.get_or_compile(text, self.options, self._compile)
        return self._compile(text)

    def _compile(self, text: str) -> CompileResult:
        document = self.transform(self.parse(text))
        assert isinstance(document, Document)
        with debug_timer(logger, "Emitting"):
            tree = emit(document, self.options.components)
        return CompileResult(tree=tree, metadata=extract_page_metadata(document, self.options), document=document)


def compile_document(text: str, options: Optional[CompilerOptions] = None) -> CompileResult:
    """Compile a single document.

    Parameters
    ----------
    text : str
        Document source
    options : CompilerOptions, optional
        Configuration

    Returns
    -------
    CompileResult
        Compilation output

    Raises
    ------
    UnknownExtensionError
        If the configuration names an unregistered extension
    CompilationError
        For structural errors in the document

    """
    return Compiler(options).compile(text)


def _compile_named(compiler: Compiler, name: str, text: str) -> CompileResult:
    with document_context(name):
        return compiler.compile(text)


def compile_batch(
    sources: Mapping[str, str],
    options: Optional[CompilerOptions] = None,
    max_workers: Optional[int] = None,
    cache: Optional[CompilationCache] = None,
) -> BatchResult:
    """Compile many documents concurrently, isolating failures.

    Parameters
    ----------
    sources : mapping
        Document name -> source text
    options : CompilerOptions, optional
        Configuration shared by every document
    max_workers : int, optional
        Thread pool size; ``None`` uses the executor default
    cache : CompilationCache, optional
        Cache shared by every document

    Returns
    -------
    BatchResult
        Results and errors keyed by document name, in input order

    Raises
    ------
    UnknownExtensionError
        Before any document is compiled, if the configuration is invalid

    """
    compiler = Compiler(options, cache=cache)
    outcomes: dict[str, CompileResult | CompilationError] = {}

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = {name: pool.submit(_compile_named, compiler, name, text) for name, text in sources.items()}
        for name, future in futures.items():
            try:
                outcomes[name] = future.result()
            except CompilationError as e:
                logger.warning(f"Failed to compile {name}: {e}")
                outcomes[name] = e

    batch = BatchResult()
    for name, outcome in outcomes.items():
        if isinstance(outcome, CompilationError):
            batch.errors[name] = outcome
        else:
            batch.results[name] = outcome

    logger.debug(f"Compiled {len(batch.results)} of {len(sources)} document(s)")
    return batch


__all__ = [
    "BatchResult",
    "CompileResult",
    "Compiler",
    "PageMetadata",
    "compile_batch",
    "compile_document",
    "extract_page_metadata",
]
