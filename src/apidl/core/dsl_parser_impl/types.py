"""
Type reference parsing for APIDL schemas.

Grammar (ordered choice, first matching alternative wins):

    TypeRef  := BaseType '?'?
    BaseType := ('*const' | '*mut' | '*') BaseType
              | '&' BaseType
              | '[' TypeRef (';' NUMBER)? ']'
              | IDENTIFIER

A pointer qualifier or ``&`` binds to the base type right after it, an
array wraps whatever it encloses, and ``?`` applies last, to everything
before it.
"""

from typing import TYPE_CHECKING, Any

from .. import parse_tree as pt
from ..lexer import TokenType, is_digit

POINTER_TOKENS = (TokenType.PTR_CONST, TokenType.PTR_MUT, TokenType.STAR)


class TypeParserMixin:
    """
    Mixin providing type reference parsing.

    Note: This mixin expects to be combined with BaseParser via multiple inheritance.
    """

    if TYPE_CHECKING:
        expect: Any
        advance: Any
        match: Any
        current_token: Any
        error: Any

    def parse_type(self) -> pt.TypeNode:
        """
        Parse a full type reference including the nullability marker.

        Examples:
            u32
            Image?
            *const u8
            &Image
            [f32; 16]
            [*mut Image]?
        """
        base = self.parse_base_type()
        if self.match(TokenType.QUESTION):
            return pt.OptionalTypeNode(inner=base, marker=self.advance())
        return base

    def parse_base_type(self) -> pt.TypeNode:
        """Parse a type reference without a trailing ``?``."""
        if self.match(*POINTER_TOKENS):
            qualifier = self.advance()
            return pt.PointerTypeNode(qualifier=qualifier, inner=self.parse_base_type())

        if self.match(TokenType.AMPERSAND):
            marker = self.advance()
            return pt.ReferenceTypeNode(marker=marker, inner=self.parse_base_type())

        if self.match(TokenType.LBRACKET):
            open_token = self.advance()
            inner = self.parse_type()
            size = None
            if self.match(TokenType.SEMICOLON):
                self.advance()
                token = self.current_token()
                is_integer = is_digit(token.value[:1]) and "." not in token.value
                if token.type != TokenType.NUMBER or not is_integer:
                    raise self.error("array size")
                size = self.advance()
            close = self.expect(TokenType.RBRACKET, "']' to close array type")
            return pt.ArrayTypeNode(open=open_token, inner=inner, size=size, close=close)

        if self.match(TokenType.IDENTIFIER):
            return pt.NameTypeNode(token=self.advance())

        raise self.error("type")
