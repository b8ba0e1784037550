"""
Type reference definitions for APIDL IR.

A type reference is a small recursive tree. Leaves are either a primitive
keyword or a name that the validator resolves later; inner nodes are the
four modifiers. Each node owns its inner node, so a tree never shares or
cycles.

Modifier precedence, innermost to outermost:

    *const T       pointer binds to the type that follows it
    &T             a reference binds the same way
    [*const T]     array wraps whatever it encloses
    *const T?      optional wraps everything built so far

    *const Image?  ->  Optional(Pointer(const, Named(Image)))
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from .location import SourceSpan


class PrimitiveKind(str, Enum):
    """Built-in scalar types."""

    VOID = "void"
    I8 = "i8"
    U8 = "u8"
    I16 = "i16"
    U16 = "u16"
    I32 = "i32"
    U32 = "u32"
    I64 = "i64"
    U64 = "u64"
    BOOL = "bool"
    F32 = "f32"
    F64 = "f64"
    STRING = "String"


PRIMITIVE_NAMES: frozenset[str] = frozenset(kind.value for kind in PrimitiveKind)


def is_primitive(name: str) -> bool:
    """Check if name is a primitive type keyword."""
    return name in PRIMITIVE_NAMES


class NamedType(BaseModel):
    """Reference to a declared type by name, e.g. ``ImageInfo``."""

    kind: Literal["named"] = "named"
    name: str
    span: SourceSpan | None = Field(default=None, exclude=True)

    model_config = ConfigDict(frozen=True)


class PrimitiveType(BaseModel):
    """Built-in type, e.g. ``u32`` or ``String``."""

    kind: Literal["primitive"] = "primitive"
    primitive: PrimitiveKind
    span: SourceSpan | None = Field(default=None, exclude=True)

    model_config = ConfigDict(frozen=True)


class PointerType(BaseModel):
    """
    Pointer to another type.

    Examples:
        - *const u8: PointerType(mutable=False, inner=PrimitiveType(U8))
        - *mut Image: PointerType(mutable=True, inner=NamedType("Image"))
    """

    kind: Literal["pointer"] = "pointer"
    mutable: bool
    inner: TypeRef
    span: SourceSpan | None = Field(default=None, exclude=True)

    model_config = ConfigDict(frozen=True)


class ReferenceType(BaseModel):
    """
    Borrowed, read-only reference to another type, written ``&T``.

    Unlike a pointer it is never null and never mutable.
    """

    kind: Literal["reference"] = "reference"
    inner: TypeRef
    span: SourceSpan | None = Field(default=None, exclude=True)

    model_config = ConfigDict(frozen=True)


class ArrayType(BaseModel):
    """
    Array of another type.

    Examples:
        - [u8]: ArrayType(inner=PrimitiveType(U8))
        - [f32; 16]: ArrayType(inner=PrimitiveType(F32), size=16)
    """

    kind: Literal["array"] = "array"
    inner: TypeRef
    size: int | None = None
    span: SourceSpan | None = Field(default=None, exclude=True)

    model_config = ConfigDict(frozen=True)


class OptionalType(BaseModel):
    """Nullable wrapper produced by a trailing ``?``."""

    kind: Literal["optional"] = "optional"
    inner: TypeRef
    span: SourceSpan | None = Field(default=None, exclude=True)

    model_config = ConfigDict(frozen=True)


TypeRef = Annotated[
    NamedType | PrimitiveType | PointerType | ReferenceType | ArrayType | OptionalType,
    Field(discriminator="kind"),
]

PointerType.model_rebuild()
ReferenceType.model_rebuild()
ArrayType.model_rebuild()
OptionalType.model_rebuild()


def walk_type(ref: TypeRef) -> Iterator[TypeRef]:
    """Yield ``ref`` and every nested type reference, outermost first."""
    node: TypeRef | None = ref
    while node is not None:
        yield node
        node = getattr(node, "inner", None)


def innermost_type(ref: TypeRef) -> NamedType | PrimitiveType:
    """Return the leaf of a type reference."""
    *_, leaf = walk_type(ref)
    return leaf  # type: ignore[return-value]


def named_refs(ref: TypeRef) -> list[NamedType]:
    """Return the named leaves of a type reference."""
    return [node for node in walk_type(ref) if isinstance(node, NamedType)]


def format_type(ref: TypeRef) -> str:
    """Render a type reference in canonical schema syntax."""
    if isinstance(ref, NamedType):
        return ref.name
    if isinstance(ref, PrimitiveType):
        return ref.primitive.value
    if isinstance(ref, PointerType):
        qualifier = "*mut" if ref.mutable else "*const"
        return f"{qualifier} {format_type(ref.inner)}"
    if isinstance(ref, ReferenceType):
        return f"&{format_type(ref.inner)}"
    if isinstance(ref, ArrayType):
        if ref.size is not None:
            return f"[{format_type(ref.inner)}; {ref.size}]"
        return f"[{format_type(ref.inner)}]"
    return f"{format_type(ref.inner)}?"
