"""
Canonical schema text for APIDL documents.

``emit_document`` writes a Document back as schema source: free comments
first, then every declaration in order with its doc comment and attribute
lists. Members are indented four spaces and end with a comma. Parsing the
output gives a Document structurally equal to the input.
"""

import re

from . import ir

INDENT = "    "

_BARE_ARG = re.compile(
    r"^(?:[A-Za-z_][A-Za-z0-9_]*"
    r"|-?0[xX][0-9A-Fa-f][0-9A-Fa-f_]*"
    r"|-?[0-9][0-9_]*(?:\.[0-9]+)?)$"
)


def _format_arg(arg: str) -> str:
    """Write an attribute argument bare when it lexes as one token, else quoted."""
    if _BARE_ARG.match(arg):
        return arg
    return f'"{arg}"'


def _doc_lines(doc: str | None, indent: str = "") -> list[str]:
    if doc is None:
        return []
    return [f"{indent}/// {line}" if line else f"{indent}///" for line in doc.split("\n")]


def _emit_attributes(attributes: list[ir.Attribute]) -> list[str]:
    """
    Write attribute lists.

    Runs of argument-less attributes share one ``#[attributes(...)]`` list;
    attributes with arguments get a list each, keeping the original order.
    """
    lines = []
    plain: list[str] = []

    def flush() -> None:
        if plain:
            lines.append(f"#[attributes({', '.join(_format_arg(n) for n in plain)})]")
            plain.clear()

    for attr in attributes:
        if attr.args:
            flush()
            args = ", ".join(_format_arg(a) for a in attr.args)
            lines.append(f"#[{attr.name}({args})]")
        else:
            plain.append(attr.name)
    flush()
    return lines


def _emit_params(params: list[ir.Param]) -> str:
    parts = []
    for param in params:
        text = f"{param.name}: {ir.format_type(param.type)}"
        if param.default is not None:
            text += f" = {param.default}"
        parts.append(text)
    return ", ".join(parts)


def _emit_signature(name: str, params: list[ir.Param], return_type: ir.TypeRef | None) -> str:
    text = f"{name}({_emit_params(params)})"
    if return_type is not None:
        text += f" -> {ir.format_type(return_type)}"
    return text


def _emit_field(field_decl: ir.FieldDecl) -> list[str]:
    return _doc_lines(field_decl.doc, INDENT) + [
        f"{INDENT}{field_decl.name}: {ir.format_type(field_decl.type)},"
    ]


def _emit_method(method: ir.Method) -> list[str]:
    qualifiers = ["[static]"] if method.is_static else []
    qualifiers += [f"[{attr.name}]" for attr in method.attributes]
    prefix = " ".join(qualifiers) + " " if qualifiers else ""
    signature = _emit_signature(method.name, method.params, method.return_type)
    return _doc_lines(method.doc, INDENT) + [f"{INDENT}{prefix}{signature},"]


def _format_enum_value(enum: ir.EnumDecl, value: int) -> str:
    if enum.enum_kind == ir.EnumKind.BITFLAGS and value >= 0:
        return f"0x{value:X}"
    return str(value)


def _emit_body(decl: ir.Declaration) -> list[str]:
    if isinstance(decl, ir.StructDecl):
        members: list[tuple[int, list[str]]] = [
            (f.span.start if f.span else 0, _emit_field(f)) for f in decl.fields
        ] + [(m.span.start if m.span else 0, _emit_method(m)) for m in decl.methods]
        # Interleave in source order when spans are known; fields first otherwise
        members.sort(key=lambda item: item[0])
        return [line for _, block in members for line in block]

    if isinstance(decl, ir.UnionDecl):
        return [line for f in decl.fields for line in _emit_field(f)]

    lines = []
    for entry in decl.entries:
        lines.extend(_doc_lines(entry.doc, INDENT))
        if entry.explicit:
            lines.append(f"{INDENT}{entry.name} = {_format_enum_value(decl, entry.value)},")
        else:
            lines.append(f"{INDENT}{entry.name},")
    return lines


def emit_declaration(decl: ir.Declaration) -> str:
    """Write one declaration, including its doc comment and attributes."""
    lines = _doc_lines(decl.doc) + _emit_attributes(decl.attributes)

    if isinstance(decl, ir.StructDecl | ir.UnionDecl | ir.EnumDecl):
        lines.append(f"{decl.kind} {decl.name} {{")
        lines.extend(_emit_body(decl))
        lines.append("}")
    elif isinstance(decl, ir.TypeAliasDecl):
        lines.append(f"type {decl.name}: {ir.format_type(decl.target)}")
    elif isinstance(decl, ir.ConstDecl):
        lines.append(f"const {decl.name} = {decl.value}")
    elif isinstance(decl, ir.CallbackDecl):
        lines.append(f"callback {_emit_signature(decl.name, decl.params, decl.return_type)}")

    return "\n".join(lines)


def emit_document(document: ir.Document) -> str:
    """
    Write a Document as canonical schema text.

    Args:
        document: Document to write

    Returns:
        Schema source ending with a newline
    """
    blocks = []
    if document.comments:
        lines = []
        for comment in document.comments:
            marker = "///" if comment.is_doc else "//"
            lines.append(f"{marker} {comment.text}" if comment.text else marker)
        blocks.append("\n".join(lines))
    blocks.extend(emit_declaration(decl) for decl in document.declarations)
    return "\n\n".join(blocks) + "\n" if blocks else ""
