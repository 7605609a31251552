#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/constants.py
"""Constants and default values for sitemark.

Constants are organized by category:
1. Type Definitions
2. Compilation Defaults
3. Build Command Defaults
"""

from __future__ import annotations

from typing import Literal

# =============================================================================
# Type Definitions
# =============================================================================

OutputFormat = Literal["html", "json"]

# =============================================================================
# Compilation Defaults
# =============================================================================

# GFM features first, then the highlighting annotation pass
DEFAULT_EXTENSIONS: tuple[str, ...] = (
    "gfm-tables",
    "emphasis",
    "gfm-strikethrough",
    "autolink",
    "gfm-tasklist",
    "gfm-footnotes",
    "heading-ids",
    "highlight",
)

DEFAULT_EXTRACT_METADATA = True
DEFAULT_TITLE_FROM_HEADING = True

# =============================================================================
# Build Command Defaults
# =============================================================================

SOURCE_SUFFIXES: tuple[str, ...] = (".md", ".mdx")
DEFAULT_OUTPUT_FORMAT: OutputFormat = "html"
DEFAULT_OUTPUT_DIR = "_site"
DEFAULT_LOG_LEVEL = "WARNING"

CONFIG_FILENAMES: tuple[str, ...] = (
    ".sitemark.toml",
    ".sitemark.yaml",
    ".sitemark.yml",
    ".sitemark.json",
)
PYPROJECT_TOOL_SECTION = "sitemark"
