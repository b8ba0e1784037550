"""
Symbol table for APIDL documents.

Built from the complete Document before any reference is checked, so a
field may name a type declared further down the file.
"""

from dataclasses import dataclass, field

from . import ir


@dataclass
class SymbolTable:
    """
    Names declared at the top level of one Document.

    Only the first declaration of a duplicated name is recorded; the
    duplicate itself is reported by the name checks.
    """

    types: dict[str, ir.Declaration] = field(default_factory=dict)
    consts: dict[str, ir.ConstDecl] = field(default_factory=dict)
    # Companion flags types introduced by #[flags(Name)], mapped to their enum
    flags: dict[str, ir.EnumDecl] = field(default_factory=dict)

    def add_declaration(self, decl: ir.Declaration) -> None:
        if decl.name in self.types or decl.name in self.consts:
            return
        if decl.kind in ir.TYPE_DECLARATION_KINDS:
            self.types[decl.name] = decl
        elif isinstance(decl, ir.ConstDecl):
            self.consts[decl.name] = decl

    def add_flags(self, name: str, enum: ir.EnumDecl) -> None:
        self.flags.setdefault(name, enum)

    def is_type(self, name: str) -> bool:
        """Check if ``name`` can be used in a type position."""
        return ir.is_primitive(name) or name in self.types or name in self.flags

    def is_const(self, name: str) -> bool:
        return name in self.consts

    def type_names(self) -> list[str]:
        return list(self.types) + list(self.flags)


def build_symbol_table(document: ir.Document) -> SymbolTable:
    """Collect every top-level name of a Document."""
    symbols = SymbolTable()
    for decl in document.declarations:
        symbols.add_declaration(decl)
        if isinstance(decl, ir.EnumDecl) and decl.flags_name:
            symbols.add_flags(decl.flags_name, decl)
    return symbols
