"""
Base parser class for APIDL schemas.

Provides common token manipulation and utility methods used by all parser mixins.

The grammar is ordered choice: at each decision point the alternatives are
tried in a fixed order by looking at the current token (and, for members,
one token of lookahead). Once a production has consumed its leading token
it is committed; a later mismatch raises ``ParseError`` immediately and no
other alternative is tried. Parsing stops at the first error.
"""

from typing import Protocol, runtime_checkable

from .. import parse_tree as pt
from ..errors import ParseError, make_parse_error
from ..lexer import Token, TokenType

COMMENT_TYPES = (TokenType.COMMENT, TokenType.DOC_COMMENT)

# Keywords that can be used as member, parameter, entry and attribute names
KEYWORD_AS_IDENTIFIER_TYPES = (
    TokenType.STRUCT,
    TokenType.ENUM,
    TokenType.UNION,
    TokenType.TYPE,
    TokenType.CONST,
    TokenType.CALLBACK,
)


@runtime_checkable
class ParserProtocol(Protocol):
    """
    Protocol defining the interface available to parser mixins.

    This allows mypy to understand that mixins will have access to
    BaseParser methods when combined in the final Parser class.
    """

    tokens: list[Token]
    file: str
    pos: int

    def current_token(self) -> Token: ...
    def peek_token(self, offset: int = 1) -> Token: ...
    def advance(self) -> Token: ...
    def expect(self, token_type: TokenType, expected: str | None = None) -> Token: ...
    def expect_name(self, expected: str = "name") -> Token: ...
    def match(self, *token_types: TokenType) -> bool: ...
    def take_comments(self) -> list[pt.CommentNode]: ...
    def error(self, expected: str) -> ParseError: ...

    # Methods from other mixins that may be called cross-mixin
    def parse_type(self) -> pt.TypeNode: ...
    def parse_param_list(self) -> list[pt.ParamNode]: ...
    def parse_attribute_lists(self) -> list[pt.AttrListNode]: ...


class BaseParser:
    """
    Base parser class with token manipulation utilities.

    Comment tokens are only meaningful in item positions (top level and
    inside declaration bodies), where ``take_comments`` collects them.
    Everywhere else ``advance`` steps over them and records them in
    ``stray_comments`` so the builder can report doc comments that went
    nowhere.
    """

    def __init__(self, tokens: list[Token], file: str = "<schema>"):
        """
        Initialize parser.

        Args:
            tokens: List of tokens from lexer, ending with EOF
            file: Source name (for error reporting)
        """
        self.tokens = tokens
        self.file = file
        self.pos = 0
        self.stray_comments: list[Token] = []

    def _next_index(self, pos: int) -> int:
        """Index of the first non-comment token at or after ``pos``."""
        while pos < len(self.tokens) - 1 and self.tokens[pos].type in COMMENT_TYPES:
            pos += 1
        return min(pos, len(self.tokens) - 1)

    def current_token(self) -> Token:
        """Get current token, looking past comments without consuming them."""
        return self.tokens[self._next_index(self.pos)]

    def peek_token(self, offset: int = 1) -> Token:
        """Peek ahead past the current token, ignoring comments."""
        index = self._next_index(self.pos)
        for _ in range(offset):
            if index >= len(self.tokens) - 1:
                break
            index = self._next_index(index + 1)
        return self.tokens[index]

    def advance(self) -> Token:
        """Consume and return current token, recording skipped comments."""
        index = self._next_index(self.pos)
        token = self.tokens[index]
        self.stray_comments.extend(self.tokens[self.pos : index])
        self.pos = index + 1 if token.type != TokenType.EOF else index
        return token

    def error(self, expected: str) -> ParseError:
        """Build a ParseError for the current token."""
        token = self.current_token()
        return make_parse_error(expected, token.describe(), self.file, token.span)

    def expect(self, token_type: TokenType, expected: str | None = None) -> Token:
        """
        Expect a specific token type and consume it.

        Raises:
            ParseError: If token doesn't match
        """
        if self.current_token().type != token_type:
            raise self.error(expected or f"'{token_type.value}'")
        return self.advance()

    def expect_name(self, expected: str = "name") -> Token:
        """
        Expect an identifier, accepting keywords as names.

        Used for member, parameter, enum entry and attribute names, where a
        keyword such as ``type`` is an ordinary name.
        """
        if self.match(TokenType.IDENTIFIER, *KEYWORD_AS_IDENTIFIER_TYPES):
            return self.advance()
        raise self.error(expected)

    def match(self, *token_types: TokenType) -> bool:
        """Check if current token matches any of the given types."""
        return self.current_token().type in token_types

    def take_comments(self) -> list[pt.CommentNode]:
        """Consume comment tokens at the current position as item nodes."""
        comments = []
        while self.pos < len(self.tokens) and self.tokens[self.pos].type in COMMENT_TYPES:
            token = self.tokens[self.pos]
            previous = self.tokens[self.pos - 1] if self.pos > 0 else None
            trailing = previous is not None and previous.span.end_line == token.line
            comments.append(pt.CommentNode(token, trailing=trailing))
            self.pos += 1
        return comments

    def skip_separator(self) -> None:
        """Consume an optional member separator."""
        if self.match(TokenType.COMMA):
            self.advance()

    def _is_keyword_as_identifier(self) -> bool:
        """Check if current token is a keyword that can be used as identifier."""
        return self.current_token().type in KEYWORD_AS_IDENTIFIER_TYPES

    def last_token(self) -> Token:
        """Return the most recently consumed token."""
        return self.tokens[max(self.pos - 1, 0)]
