"""
Struct and union parsing for APIDL schemas.

DSL Syntax:

    #[attributes(Handle, Drop)]
    struct Image {
        /// Create an image from a file
        [static] create_from_file(filename: String) -> Image?,
        destroy(),
    }

    union Value { i: i64, f: f64 }

A member is a method when its name is followed by ``(`` and a field when it
is followed by ``:``. Qualifiers in square brackets commit the member to
being a method.
"""

from typing import TYPE_CHECKING, Any

from .. import parse_tree as pt
from ..lexer import Token, TokenType

DEFAULT_VALUE_TOKENS = (TokenType.NUMBER, TokenType.STRING, TokenType.IDENTIFIER)


class StructParserMixin:
    """Parser mixin for struct and union declarations and their members."""

    if TYPE_CHECKING:
        expect: Any
        expect_name: Any
        advance: Any
        match: Any
        peek_token: Any
        last_token: Any
        current_token: Any
        take_comments: Any
        skip_separator: Any
        error: Any
        parse_type: Any

    def parse_struct(self, attrs: list[pt.AttrListNode]) -> pt.StructNode:
        """
        Parse a struct declaration after its attribute lists.

        Grammar:
            'struct' IDENTIFIER '{' (Comment | Member ','?)* '}'
        """
        keyword = self.expect(TokenType.STRUCT)
        name = self.expect(TokenType.IDENTIFIER, "struct name")
        self.expect(TokenType.LBRACE, "'{' after struct name")

        members: list[pt.MemberItem] = []
        while True:
            members.extend(self.take_comments())
            if self.match(TokenType.RBRACE, TokenType.EOF):
                break
            members.append(self.parse_member())
            self.skip_separator()

        end = self.expect(TokenType.RBRACE, "'}' to close struct body")
        return pt.StructNode(attrs=attrs, keyword=keyword, name=name, end=end, members=members)

    def parse_union(self, attrs: list[pt.AttrListNode]) -> pt.UnionNode:
        """
        Parse a union declaration; unions hold fields only.

        Grammar:
            'union' IDENTIFIER '{' (Comment | Field ','?)* '}'
        """
        keyword = self.expect(TokenType.UNION)
        name = self.expect(TokenType.IDENTIFIER, "union name")
        self.expect(TokenType.LBRACE, "'{' after union name")

        members: list[pt.MemberItem] = []
        while True:
            members.extend(self.take_comments())
            if self.match(TokenType.RBRACE, TokenType.EOF):
                break
            field_name = self.expect_name("field name")
            members.append(self.parse_field(field_name))
            self.skip_separator()

        end = self.expect(TokenType.RBRACE, "'}' to close union body")
        return pt.UnionNode(attrs=attrs, keyword=keyword, name=name, end=end, members=members)

    def parse_member(self) -> pt.FieldNode | pt.MethodNode:
        """Parse one struct member, deciding field or method by lookahead."""
        qualifiers = self.parse_qualifiers()
        name = self.expect_name("member name")

        if self.match(TokenType.LPAREN):
            return self.parse_method(qualifiers, name)

        if qualifiers:
            raise self.error("'(' after qualified method name")

        if self.match(TokenType.COLON):
            return self.parse_field(name)

        raise self.error("'(' or ':' after member name")

    def parse_qualifiers(self) -> list[Token]:
        """
        Parse leading ``[static]`` and ``[word]`` qualifiers.

        Returns the STATIC tokens and the word tokens of shorthand qualifiers.
        """
        qualifiers = []
        while self.match(TokenType.STATIC, TokenType.LBRACKET):
            if self.match(TokenType.STATIC):
                qualifiers.append(self.advance())
                continue
            self.advance()
            qualifiers.append(self.expect_name("qualifier name"))
            self.expect(TokenType.RBRACKET, "']' to close qualifier")
        return qualifiers

    def parse_field(self, name: Token) -> pt.FieldNode:
        self.expect(TokenType.COLON, "':' after field name")
        return pt.FieldNode(name=name, type=self.parse_type())

    def parse_method(self, qualifiers: list[Token], name: Token) -> pt.MethodNode:
        """
        Parse the rest of a method after its name.

        Grammar:
            '(' ParamList ')' ('->' TypeRef)?
        """
        self.expect(TokenType.LPAREN)
        params = self.parse_param_list()
        end = self.expect(TokenType.RPAREN, "',' or ')' in parameter list")

        return_type = None
        if self.match(TokenType.ARROW):
            self.advance()
            return_type = self.parse_type()
            end = self.last_token()

        return pt.MethodNode(
            qualifiers=qualifiers,
            name=name,
            params=params,
            return_type=return_type,
            end=end,
        )

    def parse_param_list(self) -> list[pt.ParamNode]:
        """
        Parse parameters up to (not including) the closing parenthesis.

        Grammar:
            (Param (',' Param)* ','?)?
            Param := NAME ':' TypeRef ('=' Literal)?
        """
        params: list[pt.ParamNode] = []
        while not self.match(TokenType.RPAREN, TokenType.EOF):
            name = self.expect_name("parameter name")
            self.expect(TokenType.COLON, "':' after parameter name")
            type_node = self.parse_type()

            default = None
            if self.match(TokenType.EQUALS):
                self.advance()
                if not self.match(*DEFAULT_VALUE_TOKENS):
                    raise self.error("default value")
                default = self.advance()

            params.append(pt.ParamNode(name=name, type=type_node, default=default))

            if not self.match(TokenType.COMMA):
                break
            self.advance()

        return params
