#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/cache.py
"""Content-addressed compilation cache.

A compiled document depends only on its text, the extension configuration
and the component binding table. The cache key is a SHA-256 digest of the
first two plus the identity of the binding table; there is no time-based
expiry and no eviction.

Examples
--------
    >>> cache = CompilationCache()
    >>> compiler = Compiler(options, cache=cache)
    >>> compiler.compile(text) is compiler.compile(text)
    True
    >>> cache.hits, cache.misses
    (1, 1)

"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from typing import TYPE_CHECKING, Any, Callable, Hashable

if TYPE_CHECKING:
    from sitemark.compiler import CompileResult
    from sitemark.options import CompilerOptions

logger = logging.getLogger(__name__)


def content_digest(text: str, options: CompilerOptions) -> str:
    """Hash document text together with its extension configuration.

    Parameters
    ----------
    text : str
        Document source
    options : CompilerOptions
        Compiler configuration; only the extension list and extension
        parameters take part

    Returns
    -------
    str
        Hex SHA-256 digest

    """
    config = json.dumps(
        {
            "extensions": list(options.extensions),
            "extension_options": {name: dict(params) for name, params in options.extension_options.items()},
            "extract_metadata": options.extract_metadata,
            "title_from_heading": options.title_from_heading,
        },
        sort_keys=True,
        default=repr,
    )
    digest = hashlib.sha256()
    digest.update(config.encode("utf-8"))
    digest.update(b"\0")
    digest.update(text.encode("utf-8"))
    return digest.hexdigest()


class CompilationCache:
    """Thread-safe read-through cache of compile results.

    Attributes
    ----------
    hits : int
        Lookups answered from the cache
    misses : int
        Lookups that compiled the document

    Notes
    -----
    Cached results are shared between callers and must not be modified.
    Binding tables used in keys are kept alive by the cache, so their
    identities cannot be reused by other objects.

    """

    def __init__(self) -> None:
        """Initialize an empty cache."""
        self._entries: dict[Hashable, CompileResult] = {}
        self._bindings: dict[int, Any] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def key_for(self, text: str, options: CompilerOptions) -> tuple[str, int]:
        """Build the cache key for a document."""
        with self._lock:
            self._bindings.setdefault(id(options.components), options.components)
        return content_digest(text, options), id(options.components)

    def get_or_compile(
        self, text: str, options: CompilerOptions, compile_fn: Callable[[str], CompileResult]
    ) -> CompileResult:
        """Return the cached result for a document, compiling it on a miss.

        Parameters
        ----------
        text : str
            Document source
        options : CompilerOptions
            Configuration the document is compiled with
        compile_fn : callable
            Compiles ``text`` on a miss

        Returns
        -------
        CompileResult
            Cached or freshly compiled result

        Notes
        -----
        Compilation runs outside the lock. Errors are not cached.

        """
        key = self.key_for(text, options)
        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                self.hits += 1
                return cached
            self.misses += 1

        logger.debug(f"Cache miss for document {key[0][:12]}")
        result = compile_fn(text)
        with self._lock:
            return self._entries.setdefault(key, result)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        """Drop every entry and reset the counters."""
        with self._lock:
            self._entries.clear()
            self._bindings.clear()
            self.hits = 0
            self.misses = 0


__all__ = ["CompilationCache", "content_digest"]
