#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/utils/decorators.py
"""Timing helpers for DEBUG-level diagnostics."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Generator


@contextmanager
def debug_timer(logger: logging.Logger, operation: str) -> Generator[None, None, None]:
    """Time a block of code and log the elapsed time at DEBUG level.

    Parameters
    ----------
    logger : logging.Logger
        Logger that receives the timing message
    operation : str
        Description of the timed stage (e.g., "Parsing")

    Yields
    ------
    None
        Control flow to the timed block

    Examples
    --------
        >>> logger = logging.getLogger(__name__)
        >>> with debug_timer(logger, "Extension chain"):
        ...     tree = apply_chain(tree, extensions)
        ... # Logs: "Extension chain completed in 0.01s" at DEBUG level

    Notes
    -----
    Nothing is measured when the logger is not enabled for DEBUG.

    """
    if logger.isEnabledFor(logging.DEBUG):
        start_time = time.perf_counter()
        yield
        elapsed = time.perf_counter() - start_time
        logger.debug(f"{operation} completed in {elapsed:.2f}s")
    else:
        yield
