"""
Concrete parse tree for APIDL schemas.

The parser produces these nodes; the builder turns them into IR. Nodes keep
the tokens they were built from so that the builder can compute spans and
decide comment attachment from token line numbers. Comment lines appear as
ordinary items in document and body item lists.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .ir import SourceSpan
from .lexer import Token, TokenType


@dataclass
class CommentNode:
    """
    A single ``//`` or ``///`` comment in item position.

    ``trailing`` is set when the comment follows another token on the same
    line; trailing comments never document the next item.
    """

    token: Token
    trailing: bool = False

    @property
    def is_doc(self) -> bool:
        return self.token.type == TokenType.DOC_COMMENT


# =============================================================================
# Attributes
# =============================================================================


@dataclass
class AttrItemNode:
    """``name`` or ``name(arg, ...)`` inside an attribute list."""

    name: Token
    args: list[Token] | None = None  # None when written without parentheses
    end: Token | None = None


@dataclass
class AttrListNode:
    """``#[item, item, ...]``."""

    open: Token
    items: list[AttrItemNode]
    close: Token


# =============================================================================
# Type references
# =============================================================================


@dataclass
class NameTypeNode:
    token: Token


@dataclass
class PointerTypeNode:
    qualifier: Token  # PTR_CONST, PTR_MUT or STAR
    inner: TypeNode


@dataclass
class ReferenceTypeNode:
    marker: Token  # AMPERSAND
    inner: TypeNode


@dataclass
class ArrayTypeNode:
    open: Token
    inner: TypeNode
    size: Token | None
    close: Token


@dataclass
class OptionalTypeNode:
    inner: TypeNode
    marker: Token


TypeNode = (
    NameTypeNode | PointerTypeNode | ReferenceTypeNode | ArrayTypeNode | OptionalTypeNode
)


def type_node_span(node: TypeNode) -> SourceSpan:
    """Span covering a whole type expression."""
    if isinstance(node, NameTypeNode):
        return node.token.span
    if isinstance(node, PointerTypeNode):
        return node.qualifier.span.merge(type_node_span(node.inner))
    if isinstance(node, ReferenceTypeNode):
        return node.marker.span.merge(type_node_span(node.inner))
    if isinstance(node, ArrayTypeNode):
        return node.open.span.merge(node.close.span)
    return type_node_span(node.inner).merge(node.marker.span)


# =============================================================================
# Members
# =============================================================================


@dataclass
class ParamNode:
    name: Token
    type: TypeNode
    default: Token | None = None


@dataclass
class FieldNode:
    name: Token
    type: TypeNode


@dataclass
class MethodNode:
    """
    A method member.

    Attributes:
        qualifiers: ``[static]`` tokens and ``[word]`` shorthand qualifier names
        name: Method name token
        params: Declared parameters (never the implicit receiver)
        return_type: Type after ``->``, if any
        end: Last token of the method
    """

    qualifiers: list[Token]
    name: Token
    params: list[ParamNode]
    return_type: TypeNode | None
    end: Token


@dataclass
class EnumEntryNode:
    name: Token
    value: Token | None = None


MemberItem = CommentNode | FieldNode | MethodNode | EnumEntryNode


# =============================================================================
# Declarations
# =============================================================================


@dataclass
class DeclNode:
    """
    Fields shared by every top-level declaration.

    Attributes:
        attrs: Attribute lists written before the keyword
        keyword: The declaration keyword token
        name: Declaration name token
        end: Last token of the declaration
    """

    attrs: list[AttrListNode]
    keyword: Token
    name: Token
    end: Token

    @property
    def first_token(self) -> Token:
        return self.attrs[0].open if self.attrs else self.keyword

    @property
    def span(self) -> SourceSpan:
        return self.first_token.span.merge(self.end.span)


@dataclass
class StructNode(DeclNode):
    members: list[MemberItem] = field(default_factory=list)


@dataclass
class UnionNode(DeclNode):
    members: list[MemberItem] = field(default_factory=list)


@dataclass
class EnumNode(DeclNode):
    members: list[MemberItem] = field(default_factory=list)


@dataclass
class AliasNode(DeclNode):
    target: TypeNode | None = None


@dataclass
class ConstNode(DeclNode):
    value: Token | None = None


@dataclass
class CallbackNode(DeclNode):
    params: list[ParamNode] = field(default_factory=list)
    return_type: TypeNode | None = None


@dataclass
class SchemaNode:
    """
    Root of the parse tree.

    Attributes:
        items: Top-level comments and declarations in source order
        stray_comments: Comment tokens found outside item positions
    """

    items: list[CommentNode | DeclNode] = field(default_factory=list)
    stray_comments: list[Token] = field(default_factory=list)
