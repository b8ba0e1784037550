"""
APIDL Intermediate Representation (IR) types.

This package contains the typed AST produced by the builder and read by
code generators. Types are organized into submodules and re-exported here.
"""

from .decls import (
    TYPE_DECLARATION_KINDS,
    Attribute,
    CallbackDecl,
    ConstDecl,
    Declaration,
    EnumDecl,
    EnumEntry,
    EnumKind,
    FieldDecl,
    Method,
    Param,
    StructDecl,
    TypeAliasDecl,
    UnionDecl,
)
from .document import Comment, Document
from .location import SourceSpan
from .types import (
    PRIMITIVE_NAMES,
    ArrayType,
    NamedType,
    OptionalType,
    PointerType,
    PrimitiveKind,
    PrimitiveType,
    ReferenceType,
    TypeRef,
    format_type,
    innermost_type,
    is_primitive,
    named_refs,
    walk_type,
)

__all__ = [
    # Location
    "SourceSpan",
    # Types
    "PrimitiveKind",
    "PRIMITIVE_NAMES",
    "is_primitive",
    "NamedType",
    "PrimitiveType",
    "PointerType",
    "ReferenceType",
    "ArrayType",
    "OptionalType",
    "TypeRef",
    "walk_type",
    "innermost_type",
    "named_refs",
    "format_type",
    # Declarations
    "Attribute",
    "FieldDecl",
    "Param",
    "Method",
    "StructDecl",
    "EnumKind",
    "EnumEntry",
    "EnumDecl",
    "UnionDecl",
    "TypeAliasDecl",
    "ConstDecl",
    "CallbackDecl",
    "Declaration",
    "TYPE_DECLARATION_KINDS",
    # Document
    "Comment",
    "Document",
]
