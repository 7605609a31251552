#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for code block tokenization."""

import pytest
from hypothesis import given
from hypothesis import strategies as st
from pygments.token import Token as PygmentsToken

from sitemark.ast import CodeBlock
from sitemark.highlight import PLAIN, Token, highlight, normalize_language, token_class_for, tokenize


@pytest.mark.unit
class TestLanguageNames:
    """Tests for fence language normalization."""

    @pytest.mark.parametrize(
        "language,expected",
        [
            ("python", "python"),
            ("JS", "js"),
            ("js{1,3}", "js"),
            ("c++", "c++"),
            ("  ts ", "ts"),
            ("", None),
            (None, None),
            ("{1,3}", None),
        ],
    )
    def test_normalize_language(self, language, expected):
        """Test reducing info words to lexer aliases."""
        assert normalize_language(language) == expected


@pytest.mark.unit
class TestTokenClasses:
    """Tests for mapping Pygments token types to class names."""

    def test_direct_mapping(self):
        """Test a type listed in the map."""
        assert token_class_for(PygmentsToken.Keyword) == "keyword"

    def test_subtype_inherits_class(self):
        """Test that subtypes use their parent's class."""
        assert token_class_for(PygmentsToken.Keyword.Constant) == "keyword"
        assert token_class_for(PygmentsToken.Literal.String.Double) == "string"
        assert token_class_for(PygmentsToken.Name.Builtin.Pseudo) == "builtin"

    def test_unmapped_is_plain(self):
        """Test that names and whitespace are plain."""
        assert token_class_for(PygmentsToken.Name) == PLAIN
        assert token_class_for(PygmentsToken.Text.Whitespace) == PLAIN


@pytest.mark.unit
class TestTokenize:
    """Tests for tokenization."""

    def test_python_assignment(self):
        """Test that adjacent plain tokens are merged."""
        tokens = tokenize("x = 1", "python")
        assert [(token.text, token.token_class) for token in tokens] == [
            ("x ", "plain"),
            ("=", "operator"),
            (" ", "plain"),
            ("1", "number"),
        ]

    def test_python_keyword_and_string(self):
        """Test that keywords and strings are classified."""
        tokens = tokenize('def f(): return "a"', "python")
        classes = {token.text: token.token_class for token in tokens}
        assert classes["def"] == "keyword"
        assert classes['"a"'] == "string"

    def test_unknown_language_is_plain(self):
        """Test that an unknown language yields one plain token."""
        assert tokenize("whatever", "no-such-language") == [Token(text="whatever", token_class=PLAIN)]

    def test_missing_language_is_plain(self):
        """Test that no language yields one plain token."""
        assert tokenize("a = 1", None) == [Token(text="a = 1")]

    def test_empty_content(self):
        """Test that empty code has no tokens."""
        assert tokenize("", "python") == []

    def test_highlight_attaches_tokens(self):
        """Test that highlight returns a new annotated block."""
        block = CodeBlock(content="x = 1", language="python")
        annotated = highlight(block)

        assert block.tokens is None
        assert annotated is not block
        assert "".join(token.text for token in annotated.tokens) == "x = 1"

    def test_highlight_default_language(self):
        """Test that the default language applies only when none is declared."""
        annotated = highlight(CodeBlock(content="x = 1"), default_language="python")
        assert len(annotated.tokens) > 1

        declared = highlight(CodeBlock(content="x = 1", language="text"), default_language="python")
        assert [token.token_class for token in declared.tokens] == [PLAIN]

    @given(
        content=st.text(max_size=200),
        language=st.sampled_from(["python", "js", "html", "bash", "json", "css", "nope", None]),
    )
    def test_tokens_reproduce_content(self, content, language):
        """Test that token texts always concatenate to the input."""
        tokens = tokenize(content, language)

        assert "".join(token.text for token in tokens) == content
        for previous, current in zip(tokens, tokens[1:]):
            assert previous.token_class != current.token_class
