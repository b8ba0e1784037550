"""
Lexer/Tokenizer for APIDL schemas.

Converts raw schema text into a stream of tokens with source span tracking.
Whitespace and newlines carry no tokens; line numbers on the spans are what
the builder uses to decide whether a doc comment touches a declaration.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

from .errors import make_lex_error
from .ir import SourceSpan

logger = logging.getLogger(__name__)


class TokenType(Enum):
    """Token types in the APIDL grammar."""

    # Literals
    IDENTIFIER = "identifier"
    STRING = "string"
    NUMBER = "number"

    # Keywords
    STRUCT = "struct"
    ENUM = "enum"
    UNION = "union"
    TYPE = "type"
    CONST = "const"
    CALLBACK = "callback"

    # Punctuation
    LBRACE = "{"
    RBRACE = "}"
    LPAREN = "("
    RPAREN = ")"
    LBRACKET = "["
    RBRACKET = "]"
    COLON = ":"
    SEMICOLON = ";"
    COMMA = ","
    EQUALS = "="
    ARROW = "->"
    QUESTION = "?"

    # Type modifiers
    PTR_CONST = "*const"
    PTR_MUT = "*mut"
    STAR = "*"
    AMPERSAND = "&"

    # Qualifiers and attributes
    ATTR_OPEN = "#["
    STATIC = "[static]"

    # Comments
    DOC_COMMENT = "///"
    COMMENT = "//"

    # Special
    EOF = "end of input"


KEYWORDS = {
    "struct": TokenType.STRUCT,
    "enum": TokenType.ENUM,
    "union": TokenType.UNION,
    "type": TokenType.TYPE,
    "const": TokenType.CONST,
    "callback": TokenType.CALLBACK,
}

SINGLE_CHAR_TOKENS = {
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "]": TokenType.RBRACKET,
    ":": TokenType.COLON,
    ";": TokenType.SEMICOLON,
    ",": TokenType.COMMA,
    "=": TokenType.EQUALS,
    "?": TokenType.QUESTION,
    "&": TokenType.AMPERSAND,
}

DIGITS = "0123456789"
HEX_DIGITS = "0123456789abcdefABCDEF"


def is_digit(ch: str | None) -> bool:
    """Check for an ASCII decimal digit."""
    return ch is not None and len(ch) == 1 and ch in DIGITS


@dataclass
class Token:
    """
    A single token in the schema.

    Attributes:
        type: Type of token
        value: Source text of the token (comment text for comment tokens)
        span: Source range covered by the token
    """

    type: TokenType
    value: str
    span: SourceSpan

    @property
    def line(self) -> int:
        return self.span.line

    @property
    def column(self) -> int:
        return self.span.column

    def describe(self) -> str:
        """Human-readable description used in syntax errors."""
        if self.type == TokenType.EOF:
            return "end of input"
        if self.type in (TokenType.IDENTIFIER, TokenType.NUMBER, TokenType.STRING):
            return f"{self.type.value} '{self.value}'"
        return f"'{self.value}'"

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.span})"


class Scanner:
    """
    Cursor for a single pass over the source text.

    Each call to ``Lexer.__iter__`` creates its own Scanner.
    """

    def __init__(self, text: str, file: str = "<schema>"):
        self.text = text
        self.file = file
        self.pos = 0
        self.offset = 0  # UTF-8 byte offset of self.pos
        self.line = 1
        self.column = 1

    def current_char(self) -> str | None:
        """Get current character or None if at end."""
        if self.pos >= len(self.text):
            return None
        return self.text[self.pos]

    def peek_char(self, offset: int = 1) -> str | None:
        """Peek ahead at character."""
        pos = self.pos + offset
        if pos >= len(self.text):
            return None
        return self.text[pos]

    def advance(self) -> None:
        """Move to next character, updating line/column/offset."""
        if self.pos < len(self.text):
            ch = self.text[self.pos]
            if ch == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.offset += len(ch.encode("utf-8"))
            self.pos += 1

    def skip_whitespace(self) -> None:
        """Skip whitespace including newlines."""
        while self.current_char() in (" ", "\t", "\r", "\n", "\ufeff"):
            self.advance()

    def _mark(self) -> tuple[int, int, int, int]:
        return self.pos, self.offset, self.line, self.column

    def _span_from(self, mark: tuple[int, int, int, int]) -> SourceSpan:
        _, offset, line, column = mark
        return SourceSpan(
            start=offset,
            end=self.offset,
            line=line,
            column=column,
            end_line=self.line,
            end_column=self.column,
        )

    def _token(self, token_type: TokenType, mark: tuple[int, int, int, int]) -> Token:
        return Token(token_type, self.text[mark[0] : self.pos], self._span_from(mark))

    def _error(self, message: str, mark: tuple[int, int, int, int]):
        return make_lex_error(message, self.file, self._span_from(mark), self.text)

    def _word_at(self, pos: int) -> str:
        """Return the identifier-like word starting at ``pos``."""
        end = pos
        while end < len(self.text) and (self.text[end].isalnum() or self.text[end] == "_"):
            end += 1
        return self.text[pos:end]

    def read_comment(self, mark: tuple[int, int, int, int]) -> Token:
        """Read a ``//`` or ``///`` comment up to the end of the line."""
        is_doc = self.peek_char(2) == "/" and self.peek_char(3) != "/"
        marker_len = 3 if is_doc else 2
        for _ in range(marker_len):
            self.advance()

        chars = []
        while self.current_char() not in (None, "\n"):
            chars.append(self.current_char())
            self.advance()

        text = "".join(chars).rstrip("\r")
        if text.startswith(" "):
            text = text[1:]
        token_type = TokenType.DOC_COMMENT if is_doc else TokenType.COMMENT
        return Token(token_type, text, self._span_from(mark))

    def read_string(self, mark: tuple[int, int, int, int]) -> Token:
        """Read a double-quoted string; the token value keeps the quotes."""
        self.advance()  # opening quote

        while True:
            current = self.current_char()
            if current is None or current == "\n":
                raise self._error("Unterminated string literal", mark)
            if current == "\\":
                self.advance()
                if self.current_char() is None:
                    raise self._error("Unterminated string literal", mark)
            elif current == '"':
                break
            self.advance()

        self.advance()  # closing quote
        return self._token(TokenType.STRING, mark)

    def read_number(self, mark: tuple[int, int, int, int]) -> Token:
        """Read a decimal, decimal-point or ``0x`` hexadecimal number."""
        if self.current_char() == "-":
            self.advance()

        if self.current_char() == "0" and self.peek_char() in ("x", "X"):
            self.advance()
            self.advance()
            current = self.current_char()
            if current is None or current not in HEX_DIGITS:
                raise self._error("Malformed hexadecimal literal", mark)
            while current is not None and (current in HEX_DIGITS or current == "_"):
                self.advance()
                current = self.current_char()
            return self._token(TokenType.NUMBER, mark)

        current = self.current_char()
        while current is not None and (is_digit(current) or current == "_"):
            self.advance()
            current = self.current_char()

        if current == "." and is_digit(self.peek_char()):
            self.advance()
            current = self.current_char()
            while is_digit(current):
                self.advance()
                current = self.current_char()

        return self._token(TokenType.NUMBER, mark)

    def read_identifier(self, mark: tuple[int, int, int, int]) -> Token:
        """Read an identifier or keyword."""
        current = self.current_char()
        while current and (current.isalnum() or current == "_"):
            self.advance()
            current = self.current_char()
        value = self.text[mark[0] : self.pos]
        return Token(KEYWORDS.get(value, TokenType.IDENTIFIER), value, self._span_from(mark))

    def read_pointer(self, mark: tuple[int, int, int, int]) -> Token:
        """Read ``*const``, ``*mut`` or a bare ``*``."""
        self.advance()  # '*'
        word = self._word_at(self.pos)
        if word in ("const", "mut"):
            for _ in word:
                self.advance()
            return self._token(
                TokenType.PTR_CONST if word == "const" else TokenType.PTR_MUT, mark
            )
        return self._token(TokenType.STAR, mark)

    def read_bracket(self, mark: tuple[int, int, int, int]) -> Token:
        """Read ``[static]`` as one qualifier token, otherwise a plain ``[``."""
        pos = self.pos + 1
        while pos < len(self.text) and self.text[pos] in " \t":
            pos += 1
        if self._word_at(pos) == "static":
            end = pos + len("static")
            while end < len(self.text) and self.text[end] in " \t":
                end += 1
            if end < len(self.text) and self.text[end] == "]":
                while self.pos <= end:
                    self.advance()
                return self._token(TokenType.STATIC, mark)

        self.advance()
        return self._token(TokenType.LBRACKET, mark)

    def scan(self) -> Iterator[Token]:
        """
        Scan the source text from the current position.

        Yields:
            Tokens in source order, ending with EOF

        Raises:
            LexError: If a character sequence matches no token
        """
        while True:
            self.skip_whitespace()
            ch = self.current_char()
            mark = self._mark()

            if ch is None:
                break

            if ch == "/":
                if self.peek_char() != "/":
                    raise self._error(
                        f"Unexpected character '/' at {self.line}:{self.column}"
                        " (comments start with '//')",
                        mark,
                    )
                yield self.read_comment(mark)

            elif ch == '"':
                yield self.read_string(mark)

            elif is_digit(ch) or (ch == "-" and is_digit(self.peek_char())):
                yield self.read_number(mark)

            elif ch.isalpha() or ch == "_":
                yield self.read_identifier(mark)

            elif ch == "*":
                yield self.read_pointer(mark)

            elif ch == "[":
                yield self.read_bracket(mark)

            elif ch == "#":
                if self.peek_char() != "[":
                    raise self._error(
                        f"Unexpected character '#' at {self.line}:{self.column}"
                        " (attribute lists start with '#[')",
                        mark,
                    )
                self.advance()
                self.advance()
                yield self._token(TokenType.ATTR_OPEN, mark)

            elif ch == "-" and self.peek_char() == ">":
                self.advance()
                self.advance()
                yield self._token(TokenType.ARROW, mark)

            elif ch in SINGLE_CHAR_TOKENS:
                self.advance()
                yield self._token(SINGLE_CHAR_TOKENS[ch], mark)

            else:
                raise self._error(
                    f"Unexpected character {ch!r} at {self.line}:{self.column}", mark
                )

        yield Token(TokenType.EOF, "", self._span_from(self._mark()))


class Lexer:
    """
    Lexer for APIDL schemas.

    Iterating a Lexer scans lazily from the start of the text. Every
    iteration is independent: starting a new one neither rewinds nor
    disturbs an iteration already in progress.
    """

    def __init__(self, text: str, file: str = "<schema>"):
        """
        Initialize lexer.

        Args:
            text: Source text to tokenize
            file: Source name (for error reporting)
        """
        self.text = text
        self.file = file

    def __iter__(self) -> Iterator[Token]:
        return Scanner(self.text, self.file).scan()

    def tokenize(self) -> list[Token]:
        """
        Tokenize the entire source text.

        Returns:
            List of tokens ending with EOF

        Raises:
            LexError: If a character sequence matches no token
        """
        tokens = list(self)
        logger.debug("Lexed %d tokens from %s", len(tokens), self.file)
        return tokens


def tokenize(text: str, file: str = "<schema>") -> list[Token]:
    """
    Convenience function to tokenize schema text.

    Args:
        text: Source text
        file: Source name

    Returns:
        List of tokens
    """
    return Lexer(text, file).tokenize()
