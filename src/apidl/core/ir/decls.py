"""
Declaration types for APIDL IR.

Top-level declarations (structs, enums, unions, type aliases, constants and
callbacks) and their members. Every model is frozen; the builder assembles
member lists before constructing the owning declaration.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from .location import SourceSpan
from .types import TypeRef


class Attribute(BaseModel):
    """
    Declaration-level metadata tag.

    Examples:
        - #[attributes(Handle)]: Attribute(name="Handle")
        - #[derive(Debug, Clone)]: Attribute(name="derive", args=["Debug", "Clone"])
        - [manual] on a method: Attribute(name="manual")
    """

    name: str
    args: list[str] = Field(default_factory=list)
    span: SourceSpan | None = Field(default=None, exclude=True)

    model_config = ConfigDict(frozen=True)


class FieldDecl(BaseModel):
    """A data member of a struct or union."""

    name: str
    type: TypeRef
    doc: str | None = None
    span: SourceSpan | None = Field(default=None, exclude=True)

    model_config = ConfigDict(frozen=True)


class Param(BaseModel):
    """
    A method or callback parameter.

    Attributes:
        name: Parameter name
        type: Parameter type
        default: Default value exactly as written in the source, if any
    """

    name: str
    type: TypeRef
    default: str | None = None
    span: SourceSpan | None = Field(default=None, exclude=True)

    model_config = ConfigDict(frozen=True)


class Method(BaseModel):
    """
    A function declared inside a struct.

    Non-static methods receive the owning struct as an implicit first
    argument; ``params`` never contains it.
    """

    name: str
    is_static: bool = False
    params: list[Param] = Field(default_factory=list)
    return_type: TypeRef | None = None
    doc: str | None = None
    attributes: list[Attribute] = Field(default_factory=list)
    span: SourceSpan | None = Field(default=None, exclude=True)

    model_config = ConfigDict(frozen=True)

    @property
    def has_receiver(self) -> bool:
        """True if the method takes the owning struct implicitly."""
        return not self.is_static

    def has_attribute(self, name: str) -> bool:
        return any(attr.name == name for attr in self.attributes)


class _DeclBase(BaseModel):
    name: str
    doc: str | None = None
    attributes: list[Attribute] = Field(default_factory=list)
    span: SourceSpan | None = Field(default=None, exclude=True)
    name_span: SourceSpan | None = Field(default=None, exclude=True)

    model_config = ConfigDict(frozen=True)

    @property
    def doc_lines(self) -> list[str]:
        """Documentation comment split back into its source lines."""
        return self.doc.split("\n") if self.doc is not None else []

    def has_attribute(self, name: str) -> bool:
        """Check if an attribute with this name is attached."""
        return any(attr.name == name for attr in self.attributes)

    def get_attribute(self, name: str) -> Attribute | None:
        return next((attr for attr in self.attributes if attr.name == name), None)


class StructDecl(_DeclBase):
    """
    A struct with data fields and methods.

    Field and method order is the declaration order in the source.
    """

    kind: Literal["struct"] = "struct"
    fields: list[FieldDecl] = Field(default_factory=list)
    methods: list[Method] = Field(default_factory=list)

    @property
    def static_methods(self) -> list[Method]:
        return [m for m in self.methods if m.is_static]

    @property
    def instance_methods(self) -> list[Method]:
        return [m for m in self.methods if not m.is_static]


class EnumKind(str, Enum):
    """How an enum's values are laid out."""

    REGULAR = "regular"  # single increasing run, no overlap
    BITFLAGS = "bitflags"  # overlapping or mostly power-of-two values


class EnumEntry(BaseModel):
    """
    A single enum value.

    Attributes:
        name: Entry identifier
        value: Resolved numeric value
        explicit: True if the value was written in the source
    """

    name: str
    value: int
    explicit: bool = False
    doc: str | None = None
    span: SourceSpan | None = Field(default=None, exclude=True)

    model_config = ConfigDict(frozen=True)


class EnumDecl(_DeclBase):
    """
    An enumeration.

    ``flags_name`` is the companion flags type named by ``#[flags(Name)]``.
    """

    kind: Literal["enum"] = "enum"
    entries: list[EnumEntry] = Field(default_factory=list)
    enum_kind: EnumKind = EnumKind.REGULAR
    flags_name: str | None = None


class UnionDecl(_DeclBase):
    """A union of fields sharing storage."""

    kind: Literal["union"] = "union"
    fields: list[FieldDecl] = Field(default_factory=list)


class TypeAliasDecl(_DeclBase):
    """``type Name: Target``."""

    kind: Literal["alias"] = "alias"
    target: TypeRef


class ConstDecl(_DeclBase):
    """``const NAME = value``; value is kept exactly as written."""

    kind: Literal["const"] = "const"
    value: str


class CallbackDecl(_DeclBase):
    """A named function type: ``callback Name(params) -> Ret``."""

    kind: Literal["callback"] = "callback"
    params: list[Param] = Field(default_factory=list)
    return_type: TypeRef | None = None


Declaration = Annotated[
    StructDecl | EnumDecl | UnionDecl | TypeAliasDecl | ConstDecl | CallbackDecl,
    Field(discriminator="kind"),
]

# Declarations that introduce a name usable in type positions
TYPE_DECLARATION_KINDS = frozenset({"struct", "enum", "union", "alias", "callback"})
