"""
Single-line declaration parsing for APIDL schemas.

DSL Syntax:

    type MetadataId: u64
    const MAX_IMAGES = 0x100
    callback LogCallback(level: u32, message: String) -> bool
"""

from typing import TYPE_CHECKING, Any

from .. import parse_tree as pt
from ..lexer import TokenType

CONST_VALUE_TOKENS = (TokenType.NUMBER, TokenType.STRING)


class DeclParserMixin:
    """Parser mixin for type aliases, constants and callbacks."""

    if TYPE_CHECKING:
        expect: Any
        advance: Any
        match: Any
        error: Any
        last_token: Any
        parse_type: Any
        parse_param_list: Any

    def parse_alias(self, attrs: list[pt.AttrListNode]) -> pt.AliasNode:
        """
        Grammar:
            'type' IDENTIFIER ':' TypeRef
        """
        keyword = self.expect(TokenType.TYPE)
        name = self.expect(TokenType.IDENTIFIER, "type alias name")
        self.expect(TokenType.COLON, "':' after type alias name")
        target = self.parse_type()
        return pt.AliasNode(
            attrs=attrs, keyword=keyword, name=name, end=self.last_token(), target=target
        )

    def parse_const(self, attrs: list[pt.AttrListNode]) -> pt.ConstNode:
        """
        Grammar:
            'const' IDENTIFIER '=' (NUMBER | STRING)
        """
        keyword = self.expect(TokenType.CONST)
        name = self.expect(TokenType.IDENTIFIER, "constant name")
        self.expect(TokenType.EQUALS, "'=' after constant name")
        if not self.match(*CONST_VALUE_TOKENS):
            raise self.error("number or string constant value")
        value = self.advance()
        return pt.ConstNode(attrs=attrs, keyword=keyword, name=name, end=value, value=value)

    def parse_callback(self, attrs: list[pt.AttrListNode]) -> pt.CallbackNode:
        """
        Grammar:
            'callback' IDENTIFIER '(' ParamList ')' ('->' TypeRef)?
        """
        keyword = self.expect(TokenType.CALLBACK)
        name = self.expect(TokenType.IDENTIFIER, "callback name")
        self.expect(TokenType.LPAREN, "'(' after callback name")
        params = self.parse_param_list()
        self.expect(TokenType.RPAREN, "',' or ')' in parameter list")

        return_type = None
        if self.match(TokenType.ARROW):
            self.advance()
            return_type = self.parse_type()

        return pt.CallbackNode(
            attrs=attrs,
            keyword=keyword,
            name=name,
            end=self.last_token(),
            params=params,
            return_type=return_type,
        )
