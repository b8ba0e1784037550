"""
Attribute list parsing for APIDL schemas.

DSL Syntax:

    #[attributes(Handle, Drop)]
    #[derive(Debug, Clone), traits(Display)]
    struct Image { ... }
"""

from typing import TYPE_CHECKING, Any

from .. import parse_tree as pt
from ..lexer import TokenType

ARG_TOKENS = (TokenType.IDENTIFIER, TokenType.NUMBER, TokenType.STRING)


class AttributeParserMixin:
    """Parser mixin for ``#[...]`` attribute lists."""

    if TYPE_CHECKING:
        expect: Any
        expect_name: Any
        advance: Any
        match: Any
        error: Any
        _is_keyword_as_identifier: Any

    def parse_attribute_lists(self) -> list[pt.AttrListNode]:
        """Parse zero or more consecutive attribute lists."""
        lists = []
        while self.match(TokenType.ATTR_OPEN):
            lists.append(self.parse_attribute_list())
        return lists

    def parse_attribute_list(self) -> pt.AttrListNode:
        """
        Parse one attribute list.

        Grammar:
            '#[' Item (',' Item)* ']'
            Item := NAME ('(' (Arg (',' Arg)*)? ')')?
        """
        open_token = self.expect(TokenType.ATTR_OPEN)
        items = [self.parse_attribute_item()]

        while self.match(TokenType.COMMA):
            self.advance()
            items.append(self.parse_attribute_item())

        close = self.expect(TokenType.RBRACKET, "',' or ']' in attribute list")
        return pt.AttrListNode(open=open_token, items=items, close=close)

    def parse_attribute_item(self) -> pt.AttrItemNode:
        name = self.expect_name("attribute name")
        if not self.match(TokenType.LPAREN):
            return pt.AttrItemNode(name=name, end=name)

        self.advance()
        args = []
        if not self.match(TokenType.RPAREN):
            args.append(self._parse_attribute_arg())
            while self.match(TokenType.COMMA):
                self.advance()
                args.append(self._parse_attribute_arg())

        end = self.expect(TokenType.RPAREN, "',' or ')' in attribute arguments")
        return pt.AttrItemNode(name=name, args=args, end=end)

    def _parse_attribute_arg(self):
        if self.match(*ARG_TOKENS) or self._is_keyword_as_identifier():
            return self.advance()
        raise self.error("attribute argument")
