"""
APIDL - interface description language front end.

Parses API schemas (structs, enums, methods, doc comments and attributes)
into a validated, typed Document for binding generators to consume.

Usage:
    import apidl

    result = apidl.compile_schema(text, "image.api")
    if result.ok:
        generate_bindings(result.document)
"""

from __future__ import annotations

from ._version import get_version

# Re-export commonly used types for convenience
from .core import ir
from .core.config import SchemaConfig, default_config, load_config
from .core.diagnostics import Diagnostic, DiagnosticReport, Severity
from .core.emitter import emit_document
from .core.errors import ApidlError, LexError, ParseError
from .core.pipeline import CompileResult, compile_schema

__version__ = get_version()

__all__ = [
    "__version__",
    "ir",
    "compile_schema",
    "CompileResult",
    "emit_document",
    "Diagnostic",
    "DiagnosticReport",
    "Severity",
    "SchemaConfig",
    "default_config",
    "load_config",
    "ApidlError",
    "LexError",
    "ParseError",
]
