"""
APIDL Schema Parser Package.

This package provides a modular recursive-descent parser for APIDL schemas.
The parser is built using mixins to separate parsing logic by construct type.
It produces a concrete parse tree (see ``parse_tree.py``); turning that
tree into IR is the builder's job.

The main exports are:
- Parser: The complete parser class
- parse_tokens: Parse a token list into a parse tree
- parse_schema: Tokenize and parse schema text

Usage:
    from apidl.core.dsl_parser_impl import parse_schema

    tree = parse_schema(text, "image.api")
"""

import logging

from .. import parse_tree as pt
from ..lexer import Token, TokenType, tokenize
from .attributes import AttributeParserMixin
from .base import BaseParser
from .decls import DeclParserMixin
from .enum import EnumParserMixin
from .struct import StructParserMixin
from .types import TypeParserMixin

logger = logging.getLogger(__name__)


class Parser(
    BaseParser,
    TypeParserMixin,
    AttributeParserMixin,
    StructParserMixin,
    EnumParserMixin,
    DeclParserMixin,
):
    """
    Complete APIDL schema parser.

    This class composes all parser mixins:

    - TypeParserMixin: Type references and their modifiers
    - AttributeParserMixin: ``#[...]`` attribute lists
    - StructParserMixin: Structs, unions, fields, methods and parameters
    - EnumParserMixin: Enums and their entries
    - DeclParserMixin: Type aliases, constants and callbacks
    """

    def parse(self) -> pt.SchemaNode:
        """
        Parse the entire token stream.

        Grammar:
            Document := (Comment | Declaration)*
            Declaration := AttributeList* (Struct | Enum | Union | Alias | Const | Callback)

        Returns:
            SchemaNode with all top-level items

        Raises:
            ParseError: On the first grammar mismatch
        """
        schema = pt.SchemaNode()

        while True:
            schema.items.extend(self.take_comments())
            if self.match(TokenType.EOF):
                break
            schema.items.append(self.parse_declaration())

        schema.stray_comments = list(self.stray_comments)
        return schema

    def parse_declaration(self) -> pt.DeclNode:
        """Parse one top-level declaration, dispatching on its keyword."""
        attrs = self.parse_attribute_lists()

        if self.match(TokenType.STRUCT):
            return self.parse_struct(attrs)
        if self.match(TokenType.ENUM):
            return self.parse_enum(attrs)
        if self.match(TokenType.UNION):
            return self.parse_union(attrs)
        if self.match(TokenType.TYPE):
            return self.parse_alias(attrs)
        if self.match(TokenType.CONST):
            return self.parse_const(attrs)
        if self.match(TokenType.CALLBACK):
            return self.parse_callback(attrs)

        raise self.error("declaration ('struct', 'enum', 'union', 'type', 'const' or 'callback')")


def parse_tokens(tokens: list[Token], file: str = "<schema>") -> pt.SchemaNode:
    """
    Parse a token list into a parse tree.

    Args:
        tokens: Tokens from the lexer, ending with EOF
        file: Source name

    Returns:
        Root of the parse tree

    Raises:
        ParseError: On the first grammar mismatch
    """
    schema = Parser(tokens, file).parse()
    logger.debug("Parsed %d top-level items from %s", len(schema.items), file)
    return schema


def parse_schema(text: str, file: str = "<schema>") -> pt.SchemaNode:
    """
    Tokenize and parse schema text.

    Raises:
        LexError: If the text contains an invalid character sequence
        ParseError: On the first grammar mismatch
    """
    return parse_tokens(tokenize(text, file), file)


__all__ = [
    "Parser",
    "parse_tokens",
    "parse_schema",
    "BaseParser",
    "TypeParserMixin",
    "AttributeParserMixin",
    "StructParserMixin",
    "EnumParserMixin",
    "DeclParserMixin",
]
