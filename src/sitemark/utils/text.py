#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/utils/text.py
"""Slug generation for heading anchors.

Examples
--------
    >>> from sitemark.utils.text import slugify
    >>> slugify("Tools I Use")
    'tools-i-use'

"""

from __future__ import annotations

import re
import unicodedata
from typing import Set


def slugify(text: str, *, seen_slugs: Set[str] | None = None, max_length: int = 100) -> str:
    """Create a GitHub-style anchor slug from heading text.

    Accents are stripped, the text is lower-cased, whitespace becomes ``-``
    and every character other than letters, digits, ``-`` and ``_`` is
    removed.

    Parameters
    ----------
    text : str
        Heading text
    seen_slugs : Set[str] or None, default = None
        Slugs already used in the page. When given, a repeated slug gets a
        ``-1``, ``-2``, ... suffix and the returned slug is added to the set.
    max_length : int, default = 100
        Maximum length before any suffix is appended

    Returns
    -------
    str
        The slug; ``"section"`` if nothing usable remains

    Examples
    --------
        >>> slugify("API Reference (v2.0)")
        'api-reference-v20'
        >>> seen = set()
        >>> slugify("Intro", seen_slugs=seen), slugify("Intro", seen_slugs=seen)
        ('intro', 'intro-1')

    """
    normalized = unicodedata.normalize("NFD", text)
    normalized = "".join(char for char in normalized if unicodedata.category(char) != "Mn")

    slug = normalized.strip().lower()
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"[^a-z0-9_\-]", "", slug)
    slug = slug.strip("-") or "section"

    if len(slug) > max_length:
        slug = slug[:max_length].rstrip("-")

    if seen_slugs is None:
        return slug

    unique = slug
    counter = 0
    while unique in seen_slugs:
        counter += 1
        unique = f"{slug}-{counter}"
    seen_slugs.add(unique)
    return unique


__all__ = ["slugify"]
