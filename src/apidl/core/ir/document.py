"""
Document-level IR types for APIDL.

A Document is the output of building one schema source: its declarations in
source order plus the comments that did not attach to any declaration.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .decls import (
    CallbackDecl,
    ConstDecl,
    Declaration,
    EnumDecl,
    StructDecl,
    TypeAliasDecl,
    UnionDecl,
)
from .location import SourceSpan


class Comment(BaseModel):
    """
    A free-floating top-level comment line.

    Attributes:
        text: Comment text after the marker, one leading space removed
        is_doc: True for ``///`` lines that did not attach to a declaration
    """

    text: str
    is_doc: bool = False
    span: SourceSpan | None = Field(default=None, exclude=True)

    model_config = ConfigDict(frozen=True)


class Document(BaseModel):
    """
    Complete result of building a schema source.

    Attributes:
        declarations: Top-level declarations in source order
        comments: Top-level comments that belong to no declaration
    """

    declarations: list[Declaration] = Field(default_factory=list)
    comments: list[Comment] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def names(self) -> list[str]:
        """Top-level declaration names in source order."""
        return [decl.name for decl in self.declarations]

    @property
    def structs(self) -> list[StructDecl]:
        return [d for d in self.declarations if isinstance(d, StructDecl)]

    @property
    def enums(self) -> list[EnumDecl]:
        return [d for d in self.declarations if isinstance(d, EnumDecl)]

    @property
    def unions(self) -> list[UnionDecl]:
        return [d for d in self.declarations if isinstance(d, UnionDecl)]

    @property
    def aliases(self) -> list[TypeAliasDecl]:
        return [d for d in self.declarations if isinstance(d, TypeAliasDecl)]

    @property
    def consts(self) -> list[ConstDecl]:
        return [d for d in self.declarations if isinstance(d, ConstDecl)]

    @property
    def callbacks(self) -> list[CallbackDecl]:
        return [d for d in self.declarations if isinstance(d, CallbackDecl)]

    def get(self, name: str) -> Declaration | None:
        """Return the first declaration with this name, if any."""
        return next((d for d in self.declarations if d.name == name), None)

    def structurally_equal(self, other: Document) -> bool:
        """Compare two documents ignoring source spans."""
        return self.model_dump() == other.model_dump()
