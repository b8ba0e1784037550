"""Core APIDL functionality: lexer, parser, IR builder, validator, diagnostics, emitter."""

from . import ir
from .builder import build_document
from .config import AttributeRule, ConfigError, SchemaConfig, default_config, load_config
from .diagnostics import Diagnostic, DiagnosticReport, Severity
from .dsl_parser_impl import parse_schema, parse_tokens
from .emitter import emit_declaration, emit_document
from .errors import ApidlError, ErrorContext, LexError, ParseError
from .lexer import Lexer, Token, TokenType, tokenize
from .pipeline import CompileResult, compile_schema
from .validator import ValidationResult, validate_document

__all__ = [
    "ir",
    "ApidlError",
    "LexError",
    "ParseError",
    "ErrorContext",
    "Lexer",
    "Token",
    "TokenType",
    "tokenize",
    "parse_tokens",
    "parse_schema",
    "build_document",
    "validate_document",
    "ValidationResult",
    "emit_document",
    "emit_declaration",
    "Diagnostic",
    "DiagnosticReport",
    "Severity",
    "AttributeRule",
    "ConfigError",
    "SchemaConfig",
    "default_config",
    "load_config",
    "CompileResult",
    "compile_schema",
]
