"""
Error types for APIDL lexing and parsing.

Lexing and parsing stop at the first problem and raise. Semantic problems
never raise; they are collected as diagnostics (see ``diagnostics.py``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .ir import SourceSpan


class ApidlError(Exception):
    """Base exception for all APIDL errors."""

    def __init__(self, message: str, context: ErrorContext | None = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class LexError(ApidlError):
    """
    Raised when source text contains a character sequence no token matches.

    Examples:
    - Stray characters such as ``$`` or ``@``
    - Unterminated string literals
    - A lone ``#`` not followed by ``[``
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        span: SourceSpan | None = None,
    ):
        self.span = span
        super().__init__(message, context)


class ParseError(ApidlError):
    """
    Raised when the token stream does not match the grammar.

    Carries what the grammar expected, what it found, and where.
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        expected: str | None = None,
        found: str | None = None,
        span: SourceSpan | None = None,
    ):
        self.expected = expected
        self.found = found
        self.span = span
        super().__init__(message, context)


@dataclass
class ErrorContext:
    """
    Context information for an error, including source location.

    Attributes:
        file: Name of the source being compiled
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        snippet: Optional source lines around the error
    """

    file: str
    line: int
    column: int
    snippet: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "image.api:10:5"
        """
        location = f"{self.file}:{self.line}:{self.column}"
        if self.snippet:
            return f"{location}\n{self._format_snippet()}"
        return location

    def _format_snippet(self) -> str:
        """Format code snippet with line numbers and error marker."""
        if not self.snippet:
            return ""
        return format_snippet(self.snippet, self.line, self.column)


def format_snippet(snippet: str, line: int, column: int) -> str:
    """
    Render snippet lines with a gutter and a ``^^^`` marker.

    The snippet is assumed to start two lines before ``line``.
    """
    formatted = []
    start_line = max(1, line - 2)

    for i, text in enumerate(snippet.split("\n")):
        line_num = start_line + i
        prefix = f"{line_num:4d} | "
        formatted.append(prefix + text)

        if line_num == line:
            marker_pos = len(prefix) + column - 1
            formatted.append(" " * marker_pos + "^^^")

    return "\n".join(formatted)


def extract_snippet(source: str, line: int) -> str:
    """Return the source lines from ``line - 2`` to ``line + 2``."""
    lines = source.split("\n")
    start = max(0, line - 3)
    return "\n".join(lines[start : line + 2])


def make_lex_error(
    message: str,
    file: str,
    span: SourceSpan,
    source: str | None = None,
) -> LexError:
    """
    Helper to create a LexError with context.

    Args:
        message: Error description
        file: Source name
        span: Location of the offending character
        source: Full source text, used to attach a snippet

    Returns:
        LexError with context attached
    """
    snippet = extract_snippet(source, span.line) if source else None
    context = ErrorContext(file=file, line=span.line, column=span.column, snippet=snippet)
    return LexError(message, context, span=span)


def make_parse_error(
    expected: str,
    found: str,
    file: str,
    span: SourceSpan,
) -> ParseError:
    """
    Helper to create a ParseError from an expected/found pair.

    Args:
        expected: Human-readable description of what the grammar wanted
        found: Human-readable description of the offending token
        file: Source name
        span: Location of the offending token

    Returns:
        ParseError with context attached
    """
    context = ErrorContext(file=file, line=span.line, column=span.column)
    return ParseError(
        f"Expected {expected}, found {found}",
        context,
        expected=expected,
        found=found,
        span=span,
    )
