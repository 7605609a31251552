#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/parsers/__init__.py
"""Parsers that turn page source text into a syntax tree."""

from sitemark.parsers.block import BlockParser, parse
from sitemark.parsers.frontmatter import LeadingMetadata, extract_leading_metadata
from sitemark.parsers.inline import InlineParser, parse_inline

__all__ = [
    "BlockParser",
    "InlineParser",
    "LeadingMetadata",
    "extract_leading_metadata",
    "parse",
    "parse_inline",
]
