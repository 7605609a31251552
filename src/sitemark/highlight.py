#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/highlight.py
"""Syntax highlighting for code blocks.

Code is tokenized with Pygments and each token is given a Prism-compatible
class name (``keyword``, ``string``, ``comment``, ...). Tokens are attached
to the CodeBlock as data; no markup is produced here.

Highlighting never fails a build. An unknown or missing language, or a lexer
that does not reproduce its input exactly, yields a single ``plain`` token
covering the whole content.

Examples
--------
    >>> [(t.text, t.token_class) for t in tokenize("x = 1", "python")]
    [('x ', 'plain'), ('=', 'operator'), (' ', 'plain'), ('1', 'number')]

"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Optional

from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name
from pygments.token import Token as PygmentsToken
from pygments.token import _TokenType
from pygments.util import ClassNotFound

from sitemark.ast.nodes import CodeBlock

logger = logging.getLogger(__name__)

PLAIN = "plain"

# Pygments token type -> Prism class; subtypes inherit their parent's class
TOKEN_CLASS_MAP: dict[_TokenType, str] = {
    PygmentsToken.Comment: "comment",
    PygmentsToken.Literal.String: "string",
    PygmentsToken.Literal.Number: "number",
    PygmentsToken.Keyword: "keyword",
    PygmentsToken.Name.Builtin: "builtin",
    PygmentsToken.Name.Function: "function",
    PygmentsToken.Name.Class: "class-name",
    PygmentsToken.Name.Tag: "tag",
    PygmentsToken.Name.Attribute: "attr-name",
    PygmentsToken.Operator: "operator",
    PygmentsToken.Punctuation: "punctuation",
}

LANGUAGE_RE = re.compile(r"^[\w#+.-]+")


@dataclass(frozen=True)
class Token:
    """A classified span of code.

    Parameters
    ----------
    text : str
        The exact source characters of the span
    token_class : str
        Prism-compatible class (``keyword``, ``string``, ..., ``plain``)

    """

    text: str
    token_class: str = PLAIN


def token_class_for(ttype: _TokenType) -> str:
    """Map a Pygments token type to a class name."""
    while ttype:
        if ttype in TOKEN_CLASS_MAP:
            return TOKEN_CLASS_MAP[ttype]
        ttype = ttype.parent
    return PLAIN


def normalize_language(language: Optional[str]) -> Optional[str]:
    """Reduce a fence info word to a lexer alias (``js{1,3}`` -> ``js``)."""
    if not language:
        return None
    match = LANGUAGE_RE.match(language.strip().lower())
    return match.group(0) if match else None


@lru_cache(maxsize=64)
def _lexer_for(language: str) -> Optional[Lexer]:
    try:
        return get_lexer_by_name(language, stripnl=False, ensurenl=False)
    except ClassNotFound:
        logger.debug(f"No lexer for language '{language}', using plain text")
        return None


def tokenize(content: str, language: Optional[str]) -> list[Token]:
    """Split code into classified tokens.

    Parameters
    ----------
    content : str
        Code block content
    language : str or None
        Declared language (fence info word)

    Returns
    -------
    list of Token
        Tokens in source order. Their texts always concatenate to
        ``content``. Adjacent tokens with the same class are merged.

    """
    alias = normalize_language(language)
    lexer = _lexer_for(alias) if alias else None
    if lexer is None:
        return [Token(text=content, token_class=PLAIN)]

    tokens: list[Token] = []
    for _, ttype, value in lexer.get_tokens_unprocessed(content):
        if not value:
            continue
        token_class = token_class_for(ttype)
        if tokens and tokens[-1].token_class == token_class:
            tokens[-1] = Token(text=tokens[-1].text + value, token_class=token_class)
        else:
            tokens.append(Token(text=value, token_class=token_class))

    if "".join(token.text for token in tokens) != content:
        logger.warning(f"Lexer for '{alias}' did not reproduce its input; falling back to plain text")
        return [Token(text=content, token_class=PLAIN)]

    return tokens


def highlight(node: CodeBlock, default_language: Optional[str] = None) -> CodeBlock:
    """Return a copy of a code block with highlighting tokens attached.

    Parameters
    ----------
    node : CodeBlock
        Code block to annotate
    default_language : str or None, default = None
        Language used when the block declares none

    Returns
    -------
    CodeBlock
        New node whose ``tokens`` holds the token sequence

    """
    return replace(node, tokens=tokenize(node.content, node.language or default_language))


__all__ = [
    "PLAIN",
    "TOKEN_CLASS_MAP",
    "Token",
    "highlight",
    "normalize_language",
    "token_class_for",
    "tokenize",
]
