"""
Diagnostics for APIDL schemas.

Every pipeline stage reports problems as positioned Diagnostic records,
collected in order in a DiagnosticReport. The report renders each record as
a stable one-line string anchored to its span; deciding exit codes or
console styling is up to the host.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .errors import extract_snippet, format_snippet
from .ir import SourceSpan


class Severity(str, Enum):
    """Severity levels for diagnostics."""

    ERROR = "error"  # the Document must not be used for code generation
    WARNING = "warning"  # unusual but legal


class Diagnostic(BaseModel):
    """
    A single positioned problem report.

    Attributes:
        severity: Error or warning
        code: Stable kebab-case identifier, e.g. ``duplicate-name``
        message: Human-readable description
        span: Primary location
        related: Further locations involved (e.g. the first declaration of a duplicate)
        hint: Optional suggestion for fixing the problem
    """

    severity: Severity
    code: str
    message: str
    span: SourceSpan | None = None
    related: list[SourceSpan] = Field(default_factory=list)
    hint: str | None = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def error(
        cls,
        code: str,
        message: str,
        span: SourceSpan | None = None,
        related: list[SourceSpan] | None = None,
        hint: str | None = None,
    ) -> Diagnostic:
        return cls(
            severity=Severity.ERROR,
            code=code,
            message=message,
            span=span,
            related=related or [],
            hint=hint,
        )

    @classmethod
    def warning(
        cls,
        code: str,
        message: str,
        span: SourceSpan | None = None,
        related: list[SourceSpan] | None = None,
        hint: str | None = None,
    ) -> Diagnostic:
        return cls(
            severity=Severity.WARNING,
            code=code,
            message=message,
            span=span,
            related=related or [],
            hint=hint,
        )

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    @property
    def spans(self) -> list[SourceSpan]:
        """Primary span followed by related spans."""
        primary = [self.span] if self.span is not None else []
        return primary + list(self.related)

    def render(self, file: str = "<schema>", source: str | None = None) -> str:
        """
        Format the diagnostic as ``file:line:col: severity[code]: message``.

        With ``source`` given, the offending lines are appended with a marker
        under the primary span.
        """
        location = f"{file}:{self.span.line}:{self.span.column}" if self.span else file
        text = f"{location}: {self.severity.value}[{self.code}]: {self.message}"
        for related in self.related:
            text += f"\n  note: see also {file}:{related.line}:{related.column}"
        if self.hint:
            text += f"\n  hint: {self.hint}"
        if source is not None and self.span is not None:
            snippet = extract_snippet(source, self.span.line)
            text += "\n" + format_snippet(snippet, self.span.line, self.span.column)
        return text

    def __str__(self) -> str:
        return self.render()


@dataclass
class DiagnosticReport:
    """
    Ordered collection of diagnostics from one compilation.

    Diagnostics keep the order in which stages produced them.
    """

    file: str = "<schema>"
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def __iter__(self):
        return iter(self.diagnostics)

    def __len__(self) -> int:
        return len(self.diagnostics)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.WARNING]

    @property
    def error_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.severity == Severity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.severity == Severity.WARNING)

    def has_errors(self) -> bool:
        """True if any diagnostic has error severity."""
        return self.error_count > 0

    def add(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)

    def add_error(
        self,
        code: str,
        message: str,
        span: SourceSpan | None = None,
        related: list[SourceSpan] | None = None,
        hint: str | None = None,
    ) -> None:
        self.diagnostics.append(Diagnostic.error(code, message, span, related, hint))

    def add_warning(
        self,
        code: str,
        message: str,
        span: SourceSpan | None = None,
        related: list[SourceSpan] | None = None,
        hint: str | None = None,
    ) -> None:
        self.diagnostics.append(Diagnostic.warning(code, message, span, related, hint))

    def extend(self, other: DiagnosticReport | list[Diagnostic]) -> None:
        self.diagnostics.extend(other)

    def with_code(self, code: str) -> list[Diagnostic]:
        """Diagnostics carrying a given code, in order."""
        return [d for d in self.diagnostics if d.code == code]

    def render(self, source: str | None = None) -> list[str]:
        """Render every diagnostic, one string per record, in order."""
        return [d.render(self.file, source) for d in self.diagnostics]

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "has_errors": self.has_errors(),
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "diagnostics": [d.model_dump(mode="json") for d in self.diagnostics],
        }
