#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/logging_utils.py
"""Logging setup for build runs.

Records emitted while a document is being compiled are tagged with that
document's name, so that warnings such as an unterminated code fence can be
traced to a file even when many documents compile on a thread pool.

Examples
--------
    >>> configure_logging("INFO", log_file="build.log")
    >>> with document_context("posts/first.mdx"):
    ...     logging.getLogger("sitemark").warning("Unterminated code fence")

logs ``WARNING: posts/first.mdx: Unterminated code fence`` to stderr and a
timestamped copy to ``build.log``.

"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

CONSOLE_FORMAT = "%(levelname)s: %(document)s%(message)s"
TRACE_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(document)s%(message)s"
FILE_FORMAT = "[%(asctime)s] %(levelname)-8s %(document)s%(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_current_document: ContextVar[Optional[str]] = ContextVar("sitemark_document", default=None)


@contextmanager
def document_context(name: str) -> Iterator[None]:
    """Tag log records emitted inside the block with a document name.

    The name is held in a context variable, so each worker thread of a batch
    sees only the document it is compiling.
    """
    token = _current_document.set(name)
    try:
        yield
    finally:
        _current_document.reset(token)


def current_document() -> Optional[str]:
    """Return the name set by the innermost :func:`document_context`, if any."""
    return _current_document.get()


class DocumentContextFilter(logging.Filter):
    """Add a ``document`` attribute (``"name: "`` or ``""``) to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        name = _current_document.get()
        record.document = f"{name}: " if name else ""
        return True


def configure_logging(
    log_level: int | str,
    log_file: Optional[str] = None,
    trace_mode: bool = False,
) -> logging.Logger:
    """Configure the root logger for a build run.

    Parameters
    ----------
    log_level : int | str
        Numeric logging level or level name (e.g., "WARNING").
    log_file : str, optional
        Path of a file that also receives log output. File records always
        carry a timestamp.
    trace_mode : bool, default False
        Include timestamps and logger names in console records.

    Returns
    -------
    logging.Logger
        The configured root logger.

    """
    resolved_level = log_level if isinstance(log_level, int) else getattr(logging, str(log_level).upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(resolved_level)
    root_logger.handlers.clear()
    document_filter = DocumentContextFilter()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(resolved_level)
    if trace_mode:
        console_handler.setFormatter(logging.Formatter(TRACE_FORMAT, datefmt=DATE_FORMAT))
    else:
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    console_handler.addFilter(document_filter)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        except OSError as exc:
            root_logger.warning("Could not open log file %s: %s", log_file, exc)
        else:
            file_handler.setLevel(resolved_level)
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
            file_handler.addFilter(document_filter)
            root_logger.addHandler(file_handler)
            root_logger.debug("Logging to file: %s", log_file)

    return root_logger


__all__ = ["DocumentContextFilter", "configure_logging", "current_document", "document_context"]
