"""Tests for the APIDL lexer."""

import pytest

from apidl.core.errors import LexError
from apidl.core.lexer import Lexer, TokenType, tokenize


def _types(text: str) -> list[TokenType]:
    return [t.type for t in tokenize(text)]


def _values(text: str) -> list[str]:
    return [t.value for t in tokenize(text) if t.type != TokenType.EOF]


class TestTokenTypes:
    """Tests for recognizing each token category."""

    def test_simple_struct(self):
        assert _types("struct Foo { a: u32 }") == [
            TokenType.STRUCT,
            TokenType.IDENTIFIER,
            TokenType.LBRACE,
            TokenType.IDENTIFIER,
            TokenType.COLON,
            TokenType.IDENTIFIER,
            TokenType.RBRACE,
            TokenType.EOF,
        ]

    def test_keywords(self):
        assert _types("struct enum union type const callback") == [
            TokenType.STRUCT,
            TokenType.ENUM,
            TokenType.UNION,
            TokenType.TYPE,
            TokenType.CONST,
            TokenType.CALLBACK,
            TokenType.EOF,
        ]

    def test_keyword_prefix_is_identifier(self):
        tokens = tokenize("structure")
        assert tokens[0].type == TokenType.IDENTIFIER
        assert tokens[0].value == "structure"

    @pytest.mark.parametrize("text", ["[static]", "[ static ]", "[\tstatic]"])
    def test_static_qualifier_is_one_token(self, text):
        tokens = tokenize(text + " f()")
        assert tokens[0].type == TokenType.STATIC
        assert tokens[1].type == TokenType.IDENTIFIER

    def test_array_bracket_is_not_static(self):
        assert _types("[u8]") == [
            TokenType.LBRACKET,
            TokenType.IDENTIFIER,
            TokenType.RBRACKET,
            TokenType.EOF,
        ]

    def test_staticky_word_is_not_qualifier(self):
        assert _types("[statics]")[0] == TokenType.LBRACKET

    def test_pointer_qualifiers(self):
        assert _types("*const u8 *mut Image *T") == [
            TokenType.PTR_CONST,
            TokenType.IDENTIFIER,
            TokenType.PTR_MUT,
            TokenType.IDENTIFIER,
            TokenType.STAR,
            TokenType.IDENTIFIER,
            TokenType.EOF,
        ]

    def test_pointer_needs_whole_word(self):
        """``*constant`` is a bare pointer to a type named constant."""
        assert _types("*constant") == [TokenType.STAR, TokenType.IDENTIFIER, TokenType.EOF]

    def test_punctuation(self):
        assert _types("( ) : ; , = -> ? { }") == [
            TokenType.LPAREN,
            TokenType.RPAREN,
            TokenType.COLON,
            TokenType.SEMICOLON,
            TokenType.COMMA,
            TokenType.EQUALS,
            TokenType.ARROW,
            TokenType.QUESTION,
            TokenType.LBRACE,
            TokenType.RBRACE,
            TokenType.EOF,
        ]

    def test_reference_marker(self):
        assert _types("&Image") == [TokenType.AMPERSAND, TokenType.IDENTIFIER, TokenType.EOF]

    def test_attribute_open(self):
        assert _types("#[Handle]") == [
            TokenType.ATTR_OPEN,
            TokenType.IDENTIFIER,
            TokenType.RBRACKET,
            TokenType.EOF,
        ]

    def test_empty_input(self):
        assert _types("") == [TokenType.EOF]
        assert _types("  \n\t\r\n") == [TokenType.EOF]

    def test_byte_order_mark_is_skipped(self):
        assert _types("\ufeffstruct A {}")[0] == TokenType.STRUCT


class TestLiterals:
    """Tests for number and string literals."""

    def test_numbers(self):
        assert _values("42 0x1F -3 1.5 1_000") == ["42", "0x1F", "-3", "1.5", "1_000"]
        assert all(t == TokenType.NUMBER for t in _types("42 0x1F -3 1.5")[:-1])

    def test_string_keeps_quotes(self):
        tokens = tokenize('"hello world"')
        assert tokens[0].type == TokenType.STRING
        assert tokens[0].value == '"hello world"'

    def test_string_with_escaped_quote(self):
        tokens = tokenize(r'"a\"b" x')
        assert tokens[0].value == r'"a\"b"'
        assert tokens[1].value == "x"


class TestComments:
    """Tests for doc and plain comments."""

    def test_doc_and_plain_comments(self):
        tokens = tokenize("/// hello\n// plain\nstruct")
        assert tokens[0].type == TokenType.DOC_COMMENT
        assert tokens[0].value == "hello"
        assert tokens[1].type == TokenType.COMMENT
        assert tokens[1].value == "plain"
        assert tokens[2].type == TokenType.STRUCT

    def test_four_slashes_is_plain_comment(self):
        tokens = tokenize("//// banner")
        assert tokens[0].type == TokenType.COMMENT
        assert tokens[0].value == "// banner"

    def test_doc_comment_keeps_inner_whitespace(self):
        """Only the single space after the marker is removed."""
        tokens = tokenize("///   indented  ")
        assert tokens[0].value == "  indented  "

    def test_doc_comment_without_space(self):
        assert tokenize("///tight")[0].value == "tight"

    def test_empty_doc_comment(self):
        tokens = tokenize("///\nstruct")
        assert tokens[0].type == TokenType.DOC_COMMENT
        assert tokens[0].value == ""

    def test_crlf_line_endings(self):
        tokens = tokenize("/// text\r\nstruct")
        assert tokens[0].value == "text"
        assert tokens[1].line == 2


class TestSpans:
    """Tests for source positions on tokens."""

    def test_offsets_line_and_column(self):
        tokens = tokenize("struct Foo")
        name = tokens[1]
        assert (name.span.start, name.span.end) == (7, 10)
        assert (name.line, name.column) == (1, 8)
        assert name.span.end_column == 11

    def test_multiline_positions(self):
        tokens = tokenize("a\n  b")
        assert (tokens[1].line, tokens[1].column) == (2, 3)

    def test_offsets_are_utf8_bytes(self):
        tokens = tokenize("/// é\nstruct")
        assert tokens[0].value == "é"
        assert tokens[1].span.start == len("/// é\n".encode())
        assert (tokens[1].line, tokens[1].column) == (2, 1)

    def test_eof_position(self):
        tokens = tokenize("a\nb")
        assert tokens[-1].type == TokenType.EOF
        assert tokens[-1].span.start == 3
        assert tokens[-1].line == 2


class TestLexerIteration:
    """Tests for lazy, restartable scanning."""

    def test_restartable(self):
        lexer = Lexer("struct A { f() -> u32? }")
        first = list(lexer)
        second = list(lexer)
        assert first == second
        assert first[-1].type == TokenType.EOF

    def test_lazy_until_error(self):
        tokens = iter(Lexer("struct $"))
        assert next(tokens).type == TokenType.STRUCT
        with pytest.raises(LexError):
            next(tokens)

    def test_interleaved_iterations_are_independent(self):
        lexer = Lexer("struct A { x: u32 }")
        expected = [t.value for t in lexer.tokenize()]
        first = iter(lexer)
        head = [next(first).value for _ in range(3)]
        second = iter(lexer)
        assert [next(second).value for _ in range(2)] == expected[:2]
        rest = [t.value for t in first]
        assert head + rest == expected
        assert [t.value for t in second] == expected[2:]

    def test_tokenize_method_matches_function(self):
        text = "enum E { A = 1 }"
        assert Lexer(text).tokenize() == tokenize(text)


class TestLexErrors:
    """Tests for invalid character sequences."""

    def test_unexpected_character(self):
        with pytest.raises(LexError, match=r"Unexpected character '\$' at 1:1") as exc_info:
            tokenize("$")
        assert exc_info.value.span.line == 1
        assert exc_info.value.span.column == 1

    def test_unexpected_character_position(self):
        with pytest.raises(LexError, match=r"'@' at 2:3") as exc_info:
            tokenize("struct A {\n  @\n}")
        assert exc_info.value.span.line == 2

    def test_lone_slash(self):
        with pytest.raises(LexError, match=r"Unexpected character '/'"):
            tokenize("a / b")

    def test_lone_hash(self):
        with pytest.raises(LexError, match=r"Unexpected character '#'"):
            tokenize("# not an attribute")

    @pytest.mark.parametrize("text", ['"abc', '"abc\n"', '"abc\\'])
    def test_unterminated_string(self, text):
        with pytest.raises(LexError, match="Unterminated string literal"):
            tokenize(text)

    @pytest.mark.parametrize("digit", ["\u00b2", "\u0663", "\uff11"])
    def test_non_ascii_digits_are_rejected(self, digit):
        """Only ASCII 0-9 start or continue a number."""
        with pytest.raises(LexError, match=f"Unexpected character '{digit}'"):
            tokenize(f"enum E {{ A = {digit} }}")

    def test_non_ascii_digit_after_number(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("struct S { a: [u8; 4\u00b2] }")
        assert exc_info.value.span.column == 21

    def test_malformed_hex(self):
        with pytest.raises(LexError, match="Malformed hexadecimal literal"):
            tokenize("0xZZ")

    def test_error_carries_context(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("struct A {\n  a: u32 %\n}", file="image.api")
        context = exc_info.value.context
        assert context is not None
        assert context.file == "image.api"
        assert (context.line, context.column) == (2, 10)
        assert "^^^" in str(exc_info.value)
