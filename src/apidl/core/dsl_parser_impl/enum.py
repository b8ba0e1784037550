"""
Enum parser mixin for APIDL schemas.

DSL Syntax:

    #[flags(ImageFormats)]
    enum ImageFormat {
        /// Red, green, blue
        Rgb,
        Rgba = 4,
        Gray,
    }
"""

from typing import TYPE_CHECKING, Any

from .. import parse_tree as pt
from ..lexer import TokenType


class EnumParserMixin:
    """Parser mixin for enum blocks."""

    if TYPE_CHECKING:
        expect: Any
        expect_name: Any
        advance: Any
        match: Any
        current_token: Any
        error: Any
        take_comments: Any
        skip_separator: Any

    def parse_enum(self, attrs: list[pt.AttrListNode]) -> pt.EnumNode:
        """
        Parse an enum declaration after its attribute lists.

        Grammar:
            'enum' IDENTIFIER '{' (Comment | Entry ','?)* '}'
            Entry := NAME ('=' NUMBER)?
        """
        keyword = self.expect(TokenType.ENUM)
        name = self.expect(TokenType.IDENTIFIER, "enum name")
        self.expect(TokenType.LBRACE, "'{' after enum name")

        members: list[pt.MemberItem] = []
        while True:
            members.extend(self.take_comments())
            if self.match(TokenType.RBRACE, TokenType.EOF):
                break

            entry_name = self.expect_name("enum entry name")
            value = None
            if self.match(TokenType.EQUALS):
                self.advance()
                if not self.match(TokenType.NUMBER) or "." in self.current_token().value:
                    raise self.error("integer enum value")
                value = self.advance()

            members.append(pt.EnumEntryNode(name=entry_name, value=value))
            self.skip_separator()

        end = self.expect(TokenType.RBRACE, "'}' to close enum body")
        return pt.EnumNode(attrs=attrs, keyword=keyword, name=name, end=end, members=members)
