"""
Schema compilation pipeline.

Runs Lex -> Parse -> Build -> Validate over one source text. A lex or
syntax error stops the pipeline and leaves only its diagnostic; build and
validation always complete and always produce a Document.
"""

import logging
from dataclasses import dataclass

from . import ir
from .builder import build_document
from .config import SchemaConfig
from .diagnostics import DiagnosticReport
from .dsl_parser_impl import parse_tokens
from .errors import LexError, ParseError
from .lexer import tokenize
from .validator import validate_document

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_NAME = "<schema>"


@dataclass
class CompileResult:
    """
    Outcome of compiling one schema.

    Attributes:
        document: Built Document, or None when lexing or parsing failed
        diagnostics: Every diagnostic produced, in order
    """

    document: ir.Document | None
    diagnostics: DiagnosticReport

    @property
    def ok(self) -> bool:
        """True when a Document was produced and no diagnostic is an error."""
        return self.document is not None and not self.diagnostics.has_errors()


def compile_schema(
    text: str,
    file: str | None = None,
    config: SchemaConfig | None = None,
) -> CompileResult:
    """
    Compile schema text into a validated Document.

    Code generators should refuse to run unless ``result.ok`` is true.

    Args:
        text: Schema source
        file: Source name used in diagnostics
        config: Validator settings (built-in attribute registry if omitted)

    Returns:
        CompileResult with the Document (if any) and all diagnostics
    """
    file = file or DEFAULT_SOURCE_NAME
    report = DiagnosticReport(file=file)

    try:
        tokens = tokenize(text, file)
    except LexError as e:
        report.add_error("lex-error", e.message, e.span)
        logger.debug("Lexing %s failed: %s", file, e.message)
        return CompileResult(document=None, diagnostics=report)

    try:
        tree = parse_tokens(tokens, file)
    except ParseError as e:
        report.add_error("syntax-error", e.message, e.span)
        logger.debug("Parsing %s failed: %s", file, e.message)
        return CompileResult(document=None, diagnostics=report)

    document, _ = build_document(tree, file, report)
    validate_document(document, config, report)

    logger.debug(
        "Compiled %s: %d declarations, %d errors, %d warnings",
        file,
        len(document.declarations),
        report.error_count,
        report.warning_count,
    )
    return CompileResult(document=document, diagnostics=report)
