#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Custom exceptions for the sitemark compiler.

This module defines the exception classes raised while configuring and
running the document compilation pipeline. Each exception carries enough
location information for a build tool to print a precise diagnostic.

Exception Hierarchy
-------------------
- SitemarkError (base exception)

  - ConfigurationError (invalid compiler configuration, raised before parsing)
    - UnknownExtensionError (extension id not present in the registry)

  - CompilationError (structural error in a single document)
    - UnknownComponentError (component tag missing from the binding table)
    - MalformedTableError (table syntax that cannot be built)
    - MalformedMetadataError (leading metadata block that cannot be read)

Degradable conditions (unterminated code fences, unknown highlighting
languages, unclosed components) never raise; they are resolved by documented
fallbacks and logged.

"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from sitemark.ast.nodes import SourceLocation


class SitemarkError(Exception):
    """Base exception class for all sitemark-specific errors.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        The original exception that caused this error, if applicable

    Attributes
    ----------
    message : str
        The error message
    original_error : Exception or None
        The wrapped original exception, if any

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        """Initialize the error with a message and optional original exception."""
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ConfigurationError(SitemarkError):
    """Exception raised for an invalid compiler configuration.

    Configuration errors are detected when a compiler is built, before any
    document text is parsed, and are not recoverable by retrying a document.

    """

    pass


class UnknownExtensionError(ConfigurationError):
    """Exception raised when the configured extension list names unregistered ids.

    Parameters
    ----------
    extension_ids : iterable of str
        Every unknown id found in the configuration
    available : iterable of str, optional
        Registered ids, listed in the message to help the operator

    Attributes
    ----------
    extension_ids : list of str
        The unknown extension ids, in configuration order

    """

    def __init__(self, extension_ids: Iterable[str], available: Iterable[str] | None = None):
        """Initialize the error with the offending ids."""
        self.extension_ids = list(extension_ids)
        message = f"Unknown extension(s): {', '.join(repr(e) for e in self.extension_ids)}"
        if available is not None:
            message += f". Available: {', '.join(sorted(available))}"
        super().__init__(message)


class CompilationError(SitemarkError):
    """Base exception for structural errors in a single document.

    A compilation error fails only the document that raised it; a build may
    continue with other documents.

    Parameters
    ----------
    message : str
        Description of the problem
    location : SourceLocation, optional
        Where in the source the problem was found
    original_error : Exception, optional
        The original exception that caused this error

    Attributes
    ----------
    location : SourceLocation or None
        Source location of the problem
    line : int or None
        1-based line number, if known
    column : int or None
        1-based column number, if known

    """

    def __init__(
        self,
        message: str,
        location: SourceLocation | None = None,
        original_error: Exception | None = None,
    ):
        """Initialize the compilation error with an optional source location."""
        if location is not None and location.line is not None:
            message = f"{message} (line {location.line}, column {location.column or 1})"
        super().__init__(message, original_error=original_error)
        self.location = location

    @property
    def line(self) -> int | None:
        """Return the 1-based line of the error, if known."""
        return self.location.line if self.location is not None else None

    @property
    def column(self) -> int | None:
        """Return the 1-based column of the error, if known."""
        return self.location.column if self.location is not None else None


class UnknownComponentError(CompilationError):
    """Exception raised when a component invocation has no renderer binding.

    Parameters
    ----------
    tag_name : str
        The component tag that could not be resolved
    location : SourceLocation, optional
        Where the invocation appears in the source

    """

    def __init__(self, tag_name: str, location: SourceLocation | None = None):
        """Initialize the error with the unresolved tag name."""
        super().__init__(f"Unknown component <{tag_name}>", location=location)
        self.tag_name = tag_name


class MalformedTableError(CompilationError):
    """Exception raised when table syntax cannot be turned into a table.

    Parameters
    ----------
    location : SourceLocation, optional
        Location of the table block
    detail : str, optional
        Description of what is wrong with the table

    """

    def __init__(self, location: SourceLocation | None = None, detail: str = ""):
        """Initialize the error with an optional detail message."""
        message = "Malformed table"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, location=location)
        self.detail = detail


class MalformedMetadataError(CompilationError):
    """Exception raised when a leading metadata block cannot be read.

    Parameters
    ----------
    location : SourceLocation, optional
        Location of the metadata block
    detail : str, optional
        Description of the problem
    original_error : Exception, optional
        Parser error raised while reading the block

    """

    def __init__(
        self,
        location: SourceLocation | None = None,
        detail: str = "",
        original_error: Exception | None = None,
    ):
        """Initialize the error with an optional detail message."""
        message = "Malformed metadata block"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, location=location, original_error=original_error)
        self.detail = detail


__all__ = [
    "SitemarkError",
    "ConfigurationError",
    "UnknownExtensionError",
    "CompilationError",
    "UnknownComponentError",
    "MalformedTableError",
    "MalformedMetadataError",
]
