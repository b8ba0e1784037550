"""
Semantic validation for APIDL documents.

Every check runs over the whole Document and collects all violations; no
check stops at the first problem and none depends on another having
passed. The Document itself is never modified.
"""

import difflib
import logging
from collections.abc import Iterator
from dataclasses import dataclass

from . import ir
from .config import SchemaConfig, default_config
from .diagnostics import Diagnostic, DiagnosticReport
from .symbols import SymbolTable, build_symbol_table

logger = logging.getLogger(__name__)

Diagnostics = tuple[list[Diagnostic], list[Diagnostic]]


@dataclass
class ValidationResult:
    """A validated Document together with everything found while checking it."""

    document: ir.Document
    diagnostics: DiagnosticReport

    def has_errors(self) -> bool:
        return self.diagnostics.has_errors()


# =============================================================================
# Helpers
# =============================================================================


def _duplicates(
    items: list[tuple[str, ir.SourceSpan | None]],
) -> Iterator[tuple[str, ir.SourceSpan | None, ir.SourceSpan | None]]:
    """Yield (name, later_span, first_span) for every repeated name."""
    first: dict[str, ir.SourceSpan | None] = {}
    for name, span in items:
        if name in first:
            yield name, span, first[name]
        else:
            first[name] = span


def _related(span: ir.SourceSpan | None) -> list[ir.SourceSpan]:
    return [span] if span is not None else []


def _signature_owners(
    document: ir.Document,
) -> Iterator[tuple[str, list[ir.Param], ir.TypeRef | None]]:
    """Yield (description, params, return type) for every method and callback."""
    for decl in document.declarations:
        if isinstance(decl, ir.StructDecl):
            for method in decl.methods:
                yield f"method '{decl.name}.{method.name}'", method.params, method.return_type
        elif isinstance(decl, ir.CallbackDecl):
            yield f"callback '{decl.name}'", decl.params, decl.return_type


def iter_type_uses(document: ir.Document) -> Iterator[tuple[ir.TypeRef, str, bool]]:
    """
    Yield every type position in the Document.

    Yields:
        Tuples of (type reference, description of the position, is_return)
    """
    for decl in document.declarations:
        if isinstance(decl, ir.StructDecl | ir.UnionDecl):
            for field_decl in decl.fields:
                yield field_decl.type, f"field '{decl.name}.{field_decl.name}'", False
        elif isinstance(decl, ir.TypeAliasDecl):
            yield decl.target, f"type alias '{decl.name}'", False

    for owner, params, return_type in _signature_owners(document):
        for param in params:
            yield param.type, f"parameter '{param.name}' of {owner}", False
        if return_type is not None:
            yield return_type, f"return type of {owner}", True


def _bare_voids(ref: ir.TypeRef, behind_pointer: bool = False) -> Iterator[ir.PrimitiveType]:
    """Yield ``void`` leaves that are not the direct target of a pointer."""
    if isinstance(ref, ir.PrimitiveType):
        if ref.primitive == ir.PrimitiveKind.VOID and not behind_pointer:
            yield ref
        return
    if isinstance(ref, ir.NamedType):
        return
    yield from _bare_voids(ref.inner, isinstance(ref, ir.PointerType))


# =============================================================================
# Checks
# =============================================================================


def validate_names(document: ir.Document) -> Diagnostics:
    """
    Check name uniqueness at every level.

    Top-level names (including companion flags types) share one namespace.
    Struct fields and methods share one namespace per struct. Union fields,
    enum entries and parameters are unique within their owner.
    """
    errors: list[Diagnostic] = []
    warnings: list[Diagnostic] = []

    top_level: list[tuple[str, ir.SourceSpan | None]] = []
    for decl in document.declarations:
        top_level.append((decl.name, decl.name_span or decl.span))
        if isinstance(decl, ir.EnumDecl) and decl.flags_name:
            flags = decl.get_attribute("flags")
            top_level.append((decl.flags_name, flags.span if flags else decl.span))

    for name, span, first in _duplicates(top_level):
        errors.append(
            Diagnostic.error(
                "duplicate-name",
                f"Duplicate declaration '{name}'",
                span,
                _related(first),
            )
        )

    for decl in document.declarations:
        if isinstance(decl, ir.StructDecl):
            members = [(f.name, f.span) for f in decl.fields] + [
                (m.name, m.span) for m in decl.methods
            ]
            members.sort(key=lambda item: item[1].start if item[1] else 0)
            for name, span, first in _duplicates(members):
                errors.append(
                    Diagnostic.error(
                        "duplicate-member",
                        f"Duplicate member '{name}' in struct '{decl.name}'",
                        span,
                        _related(first),
                    )
                )

        elif isinstance(decl, ir.UnionDecl):
            for name, span, first in _duplicates([(f.name, f.span) for f in decl.fields]):
                errors.append(
                    Diagnostic.error(
                        "duplicate-member",
                        f"Duplicate field '{name}' in union '{decl.name}'",
                        span,
                        _related(first),
                    )
                )

        elif isinstance(decl, ir.EnumDecl):
            for name, span, first in _duplicates([(e.name, e.span) for e in decl.entries]):
                errors.append(
                    Diagnostic.error(
                        "duplicate-enum-entry",
                        f"Duplicate entry '{name}' in enum '{decl.name}'",
                        span,
                        _related(first),
                    )
                )

    for owner, params, _ in _signature_owners(document):
        for name, span, first in _duplicates([(p.name, p.span) for p in params]):
            errors.append(
                Diagnostic.error(
                    "duplicate-param",
                    f"Duplicate parameter '{name}' in {owner}",
                    span,
                    _related(first),
                )
            )

    return errors, warnings


def validate_types(document: ir.Document, symbols: SymbolTable) -> Diagnostics:
    """
    Resolve every named type reference and check where ``void`` appears.

    ``void`` is only meaningful as the target of a pointer. A bare
    ``-> void`` return type is legal but redundant.
    """
    errors: list[Diagnostic] = []
    warnings: list[Diagnostic] = []
    candidates = sorted(ir.PRIMITIVE_NAMES) + symbols.type_names()

    for ref, where, is_return in iter_type_uses(document):
        for named in ir.named_refs(ref):
            if symbols.is_type(named.name):
                continue
            if symbols.is_const(named.name):
                hint = f"'{named.name}' is a constant, not a type"
            else:
                matches = difflib.get_close_matches(named.name, candidates, n=1)
                hint = f"Did you mean '{matches[0]}'?" if matches else None
            errors.append(
                Diagnostic.error(
                    "unresolved-type",
                    f"Unknown type '{named.name}' in {where}",
                    named.span,
                    hint=hint,
                )
            )

        is_void = isinstance(ref, ir.PrimitiveType) and ref.primitive == ir.PrimitiveKind.VOID
        if is_return and is_void:
            warnings.append(
                Diagnostic.warning(
                    "void-return",
                    f"Explicit 'void' {where}",
                    ref.span,
                    hint="Omit '-> void' instead",
                )
            )
            continue

        for void in _bare_voids(ref):
            errors.append(
                Diagnostic.error(
                    "invalid-void",
                    f"'void' cannot be used directly in {where}",
                    void.span,
                    hint="Use '*const void' or '*mut void' for untyped data",
                )
            )

    return errors, warnings


def _check_attributes(
    attributes: list[ir.Attribute],
    target: str,
    owner: str,
    config: SchemaConfig,
) -> Diagnostics:
    errors: list[Diagnostic] = []
    warnings: list[Diagnostic] = []

    for attr in attributes:
        rule = config.rule_for(attr.name)
        if rule is None:
            known = sorted(name for name, r in config.attributes.items() if target in r.targets)
            errors.append(
                Diagnostic.error(
                    "unknown-attribute",
                    f"Unknown attribute '{attr.name}' on {owner}",
                    attr.span,
                    hint=f"Known attributes for a {target}: {', '.join(known)}" if known else None,
                )
            )
            continue

        if target not in rule.targets:
            errors.append(
                Diagnostic.error(
                    "misplaced-attribute",
                    f"Attribute '{attr.name}' is not allowed on {owner}",
                    attr.span,
                    hint=f"'{attr.name}' applies to: {', '.join(sorted(rule.targets))}",
                )
            )
            continue

        if not rule.accepts_arity(len(attr.args)):
            errors.append(
                Diagnostic.error(
                    "attribute-arity",
                    f"Attribute '{attr.name}' on {owner} takes {rule.describe_arity()}, "
                    f"got {len(attr.args)}",
                    attr.span,
                )
            )

    for name, span, first in _duplicates([(a.name, a.span) for a in attributes]):
        warnings.append(
            Diagnostic.warning(
                "duplicate-attribute",
                f"Attribute '{name}' is repeated on {owner}",
                span,
                _related(first),
            )
        )

    return errors, warnings


def validate_attributes(document: ir.Document, config: SchemaConfig) -> Diagnostics:
    """Check attributes against the registry, including struct-shape rules."""
    errors: list[Diagnostic] = []
    warnings: list[Diagnostic] = []

    for decl in document.declarations:
        owner = f"{decl.kind} '{decl.name}'"
        e, w = _check_attributes(decl.attributes, decl.kind, owner, config)
        errors.extend(e)
        warnings.extend(w)

        if not isinstance(decl, ir.StructDecl):
            continue

        for attr in decl.attributes:
            rule = config.rule_for(attr.name)
            if rule is None or "struct" not in rule.targets:
                continue
            if rule.requires_methods and not decl.methods:
                errors.append(
                    Diagnostic.error(
                        "attribute-requires-methods",
                        f"Attribute '{attr.name}' requires struct '{decl.name}' "
                        "to declare at least one method",
                        attr.span,
                    )
                )
            if rule.warn_with_fields and decl.fields:
                warnings.append(
                    Diagnostic.warning(
                        "attribute-with-fields",
                        f"Struct '{decl.name}' is marked '{attr.name}' but declares fields",
                        attr.span,
                        related=[f.span for f in decl.fields if f.span is not None],
                        hint="Handle types are opaque; their fields are not exposed",
                    )
                )

        for method in decl.methods:
            e, w = _check_attributes(
                method.attributes, "method", f"method '{decl.name}.{method.name}'", config
            )
            errors.extend(e)
            warnings.extend(w)

    return errors, warnings


def validate_methods(document: ir.Document, config: SchemaConfig) -> Diagnostics:
    """
    Check receiver rules.

    A non-static method receives its struct implicitly and must not declare
    it; a static method has no receiver at all.
    """
    errors: list[Diagnostic] = []
    warnings: list[Diagnostic] = []
    receiver = config.receiver_name

    for struct in document.structs:
        for method in struct.methods:
            for param in method.params:
                if param.name != receiver:
                    continue
                if method.is_static:
                    message = (
                        f"Static method '{struct.name}.{method.name}' takes no receiver; "
                        f"remove parameter '{receiver}'"
                    )
                else:
                    message = (
                        f"Receiver of method '{struct.name}.{method.name}' is implicit; "
                        f"remove parameter '{receiver}'"
                    )
                errors.append(
                    Diagnostic.error(
                        "explicit-receiver", message, param.span, _related(method.span)
                    )
                )

    return errors, warnings


def validate_enums(document: ir.Document) -> Diagnostics:
    """Warn about repeated values in enums that do not declare a flags type."""
    errors: list[Diagnostic] = []
    warnings: list[Diagnostic] = []

    for enum in document.enums:
        if enum.has_attribute("flags"):
            continue
        seen: dict[int, ir.EnumEntry] = {}
        for entry in enum.entries:
            first = seen.setdefault(entry.value, entry)
            if first is entry:
                continue
            warnings.append(
                Diagnostic.warning(
                    "duplicate-enum-value",
                    f"Entries '{first.name}' and '{entry.name}' of enum '{enum.name}' "
                    f"share the value {entry.value}",
                    entry.span,
                    _related(first.span),
                )
            )

    return errors, warnings


# =============================================================================
# Entry point
# =============================================================================


def validate_document(
    document: ir.Document,
    config: SchemaConfig | None = None,
    report: DiagnosticReport | None = None,
) -> ValidationResult:
    """
    Run all semantic checks over a Document.

    Args:
        document: Document from the builder
        config: Attribute registry and receiver settings (defaults if omitted)
        report: Report to append to; a new one is created when omitted

    Returns:
        ValidationResult holding the unchanged Document and all diagnostics
    """
    config = config or default_config()
    report = report if report is not None else DiagnosticReport()
    symbols = build_symbol_table(document)

    checks = [
        validate_names(document),
        validate_types(document, symbols),
        validate_attributes(document, config),
        validate_methods(document, config),
        validate_enums(document),
    ]
    for errors, warnings in checks:
        report.extend(errors)
        report.extend(warnings)

    logger.debug(
        "Validated %d declarations: %d errors, %d warnings",
        len(document.declarations),
        report.error_count,
        report.warning_count,
    )
    return ValidationResult(document=document, diagnostics=report)
