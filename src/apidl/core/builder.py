"""
IR builder for APIDL schemas.

Turns the parse tree into a Document. The builder decides which comments
are documentation for which declaration, expands attribute lists into
Attribute records, resolves enum values and classifies enums. It never
raises for a tree the parser accepted; oddities become warnings.

Doc comment attachment:
    A run of ``///`` lines documents the declaration or member that
    follows it only when the lines are consecutive and the last one sits
    on the line directly above the declaration's first token (its first
    attribute list, if any). A blank line, a plain ``//`` comment or any
    other token in between breaks the run.
"""

import logging

from . import ir
from . import parse_tree as pt
from .diagnostics import DiagnosticReport
from .lexer import Token, TokenType

logger = logging.getLogger(__name__)

# Attribute list item that expands into one Attribute per argument
ATTRIBUTE_WRAPPER = "attributes"

POINTER_MUTABILITY = {
    TokenType.PTR_CONST: False,
    TokenType.PTR_MUT: True,
    TokenType.STAR: True,
}


def parse_int_literal(text: str) -> int:
    """Convert a decimal or ``0x`` hex literal token to an int."""
    text = text.replace("_", "")
    body = text.lstrip("-")
    if body[:2].lower() == "0x":
        return int(text, 16)
    return int(text, 10)


def unquote(token: Token) -> str:
    """Value of a literal token with string quotes removed."""
    if token.type == TokenType.STRING:
        return token.value[1:-1]
    return token.value


def classify_enum(values: list[int]) -> ir.EnumKind:
    """
    Decide whether enum values describe a plain enumeration or bit flags.

    A single increasing run without repeats is regular. Otherwise the enum
    is treated as bit flags when values repeat or more than half of them
    are powers of two.
    """
    if not values:
        return ir.EnumKind.REGULAR

    sequential = values == list(range(values[0], values[0] + len(values)))
    overlapping = len(set(values)) != len(values)
    if sequential and not overlapping:
        return ir.EnumKind.REGULAR

    powers_of_two = sum(1 for v in values if v > 0 and v & (v - 1) == 0)
    if overlapping or powers_of_two / len(values) > 0.5:
        return ir.EnumKind.BITFLAGS
    return ir.EnumKind.REGULAR


def _first_line(node: pt.DeclNode | pt.MemberItem) -> int:
    if isinstance(node, pt.DeclNode):
        return node.first_token.line
    if isinstance(node, pt.MethodNode):
        return (node.qualifiers[0] if node.qualifiers else node.name).line
    return node.name.line


def split_doc_run(
    pending: list[pt.CommentNode], line: int
) -> tuple[list[pt.CommentNode], list[pt.CommentNode]]:
    """
    Split pending comments into (unattached, attached) for a node at ``line``.

    The attached part is the longest trailing run of doc comments on
    consecutive lines ending directly above ``line``.
    """
    start = len(pending)
    expected_line = line - 1
    while start > 0:
        comment = pending[start - 1]
        if not comment.is_doc or comment.trailing or comment.token.line != expected_line:
            break
        start -= 1
        expected_line -= 1
    return pending[:start], pending[start:]


class DocumentBuilder:
    """
    Builds a Document from a parse tree.

    Diagnostics are appended to ``report`` as they are found.
    """

    def __init__(self, report: DiagnosticReport):
        self.report = report

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def _doc_text(self, comments: list[pt.CommentNode]) -> str | None:
        if not comments:
            return None
        return "\n".join(c.token.value for c in comments)

    def _warn_dangling(self, comments: list[pt.CommentNode] | list[Token]) -> None:
        for comment in comments:
            token = comment.token if isinstance(comment, pt.CommentNode) else comment
            if token.type != TokenType.DOC_COMMENT:
                continue
            self.report.add_warning(
                "dangling-doc-comment",
                "Doc comment is not attached to any declaration",
                token.span,
                hint="Place '///' lines directly above the item they document",
            )

    def _attach_docs(self, items: list, on_unattached) -> list[tuple[object, str | None]]:
        """
        Pair each non-comment item with its doc text.

        Comments that do not attach are passed to ``on_unattached`` in
        source order.
        """
        result: list[tuple[object, str | None]] = []
        pending: list[pt.CommentNode] = []

        for item in items:
            if isinstance(item, pt.CommentNode):
                pending.append(item)
                continue
            unattached, attached = split_doc_run(pending, _first_line(item))
            on_unattached(unattached)
            result.append((item, self._doc_text(attached)))
            pending = []

        on_unattached(pending)
        return result

    # ------------------------------------------------------------------
    # Attributes
    # ------------------------------------------------------------------

    def build_attributes(self, lists: list[pt.AttrListNode]) -> list[ir.Attribute]:
        """
        Expand attribute lists into Attribute records.

        ``attributes(A, B)`` yields ``A`` and ``B``; any other ``name(args)``
        item yields a single record carrying its arguments.
        """
        attributes: list[ir.Attribute] = []

        for attr_list in lists:
            for item in attr_list.items:
                span = item.name.span.merge(item.end.span) if item.end else item.name.span
                if item.args is not None and not item.args:
                    self.report.add_warning(
                        "empty-attribute-args",
                        f"Attribute '{item.name.value}' has an empty argument list",
                        span,
                        hint=f"Write '{item.name.value}' without parentheses",
                    )

                if item.name.value == ATTRIBUTE_WRAPPER and item.args is not None:
                    attributes.extend(
                        ir.Attribute(name=unquote(arg), span=arg.span) for arg in item.args
                    )
                    continue

                attributes.append(
                    ir.Attribute(
                        name=item.name.value,
                        args=[unquote(arg) for arg in item.args or []],
                        span=span,
                    )
                )

        return attributes

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------

    def build_type(self, node: pt.TypeNode) -> ir.TypeRef:
        """Convert a type expression node to a TypeRef."""
        span = pt.type_node_span(node)

        if isinstance(node, pt.NameTypeNode):
            name = node.token.value
            if ir.is_primitive(name):
                return ir.PrimitiveType(primitive=ir.PrimitiveKind(name), span=span)
            return ir.NamedType(name=name, span=span)

        if isinstance(node, pt.PointerTypeNode):
            return ir.PointerType(
                mutable=POINTER_MUTABILITY[node.qualifier.type],
                inner=self.build_type(node.inner),
                span=span,
            )

        if isinstance(node, pt.ReferenceTypeNode):
            return ir.ReferenceType(inner=self.build_type(node.inner), span=span)

        if isinstance(node, pt.ArrayTypeNode):
            size = parse_int_literal(node.size.value) if node.size else None
            return ir.ArrayType(inner=self.build_type(node.inner), size=size, span=span)

        return ir.OptionalType(inner=self.build_type(node.inner), span=span)

    def _build_optional_type(self, node: pt.TypeNode | None) -> ir.TypeRef | None:
        return self.build_type(node) if node is not None else None

    # ------------------------------------------------------------------
    # Members
    # ------------------------------------------------------------------

    def build_param(self, node: pt.ParamNode) -> ir.Param:
        span = node.name.span.merge(pt.type_node_span(node.type))
        if node.default is not None:
            span = span.merge(node.default.span)
        return ir.Param(
            name=node.name.value,
            type=self.build_type(node.type),
            default=node.default.value if node.default else None,
            span=span,
        )

    def build_field(self, node: pt.FieldNode, doc: str | None) -> ir.FieldDecl:
        return ir.FieldDecl(
            name=node.name.value,
            type=self.build_type(node.type),
            doc=doc,
            span=node.name.span.merge(pt.type_node_span(node.type)),
        )

    def build_method(self, node: pt.MethodNode, doc: str | None) -> ir.Method:
        """Convert a method node; ``[static]`` sets the flag, other qualifiers are attributes."""
        is_static = False
        attributes = []
        for qualifier in node.qualifiers:
            if qualifier.type == TokenType.STATIC:
                is_static = True
            else:
                attributes.append(ir.Attribute(name=qualifier.value, span=qualifier.span))

        first = node.qualifiers[0] if node.qualifiers else node.name
        return ir.Method(
            name=node.name.value,
            is_static=is_static,
            params=[self.build_param(p) for p in node.params],
            return_type=self._build_optional_type(node.return_type),
            doc=doc,
            attributes=attributes,
            span=first.span.merge(node.end.span),
        )

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def _common(self, node: pt.DeclNode, doc: str | None) -> dict:
        return {
            "name": node.name.value,
            "doc": doc,
            "attributes": self.build_attributes(node.attrs),
            "span": node.span,
            "name_span": node.name.span,
        }

    def build_struct(self, node: pt.StructNode, doc: str | None) -> ir.StructDecl:
        fields = []
        methods = []
        for member, member_doc in self._attach_docs(node.members, self._warn_dangling):
            if isinstance(member, pt.FieldNode):
                fields.append(self.build_field(member, member_doc))
            elif isinstance(member, pt.MethodNode):
                methods.append(self.build_method(member, member_doc))
        return ir.StructDecl(fields=fields, methods=methods, **self._common(node, doc))

    def build_union(self, node: pt.UnionNode, doc: str | None) -> ir.UnionDecl:
        fields = [
            self.build_field(member, member_doc)
            for member, member_doc in self._attach_docs(node.members, self._warn_dangling)
            if isinstance(member, pt.FieldNode)
        ]
        return ir.UnionDecl(fields=fields, **self._common(node, doc))

    def build_enum(self, node: pt.EnumNode, doc: str | None) -> ir.EnumDecl:
        """Resolve entry values; an entry without a value follows the previous one."""
        common = self._common(node, doc)
        entries = []
        next_value = 0

        for member, member_doc in self._attach_docs(node.members, self._warn_dangling):
            if not isinstance(member, pt.EnumEntryNode):
                continue
            explicit = member.value is not None
            value = parse_int_literal(member.value.value) if member.value else next_value
            span = member.name.span.merge(member.value.span) if member.value else member.name.span
            entries.append(
                ir.EnumEntry(
                    name=member.name.value,
                    value=value,
                    explicit=explicit,
                    doc=member_doc,
                    span=span,
                )
            )
            next_value = value + 1

        flags = next((a for a in common["attributes"] if a.name == "flags"), None)
        return ir.EnumDecl(
            entries=entries,
            enum_kind=classify_enum([e.value for e in entries]),
            flags_name=flags.args[0] if flags and flags.args else None,
            **common,
        )

    def build_alias(self, node: pt.AliasNode, doc: str | None) -> ir.TypeAliasDecl:
        return ir.TypeAliasDecl(target=self.build_type(node.target), **self._common(node, doc))

    def build_const(self, node: pt.ConstNode, doc: str | None) -> ir.ConstDecl:
        return ir.ConstDecl(value=node.value.value, **self._common(node, doc))

    def build_callback(self, node: pt.CallbackNode, doc: str | None) -> ir.CallbackDecl:
        return ir.CallbackDecl(
            params=[self.build_param(p) for p in node.params],
            return_type=self._build_optional_type(node.return_type),
            **self._common(node, doc),
        )

    def build_declaration(self, node: pt.DeclNode, doc: str | None) -> ir.Declaration:
        if isinstance(node, pt.StructNode):
            return self.build_struct(node, doc)
        if isinstance(node, pt.EnumNode):
            return self.build_enum(node, doc)
        if isinstance(node, pt.UnionNode):
            return self.build_union(node, doc)
        if isinstance(node, pt.AliasNode):
            return self.build_alias(node, doc)
        if isinstance(node, pt.ConstNode):
            return self.build_const(node, doc)
        if isinstance(node, pt.CallbackNode):
            return self.build_callback(node, doc)
        raise TypeError(f"Unknown declaration node: {type(node).__name__}")

    # ------------------------------------------------------------------
    # Document
    # ------------------------------------------------------------------

    def build(self, tree: pt.SchemaNode) -> ir.Document:
        """Build the Document for a whole parse tree."""
        free_comments: list[ir.Comment] = []

        def keep_free(comments: list[pt.CommentNode]) -> None:
            free_comments.extend(
                ir.Comment(text=c.token.value, is_doc=c.is_doc, span=c.token.span)
                for c in comments
            )

        declarations = [
            self.build_declaration(node, doc)
            for node, doc in self._attach_docs(tree.items, keep_free)
        ]
        self._warn_dangling(tree.stray_comments)

        return ir.Document(declarations=declarations, comments=free_comments)


def build_document(
    tree: pt.SchemaNode,
    file: str = "<schema>",
    report: DiagnosticReport | None = None,
) -> tuple[ir.Document, DiagnosticReport]:
    """
    Build a Document from a parse tree.

    Args:
        tree: Parse tree from the parser
        file: Source name used in the returned report
        report: Report to append to; a new one is created when omitted

    Returns:
        Tuple of (document, report)
    """
    report = report if report is not None else DiagnosticReport(file=file)
    document = DocumentBuilder(report).build(tree)
    logger.debug(
        "Built %d declarations (%d free comments) from %s",
        len(document.declarations),
        len(document.comments),
        file,
    )
    return document, report
