"""Source span tracking for tokens, IR nodes and diagnostics.

Records where a construct came from so that diagnostics can point at it
and editors can navigate to it.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class SourceSpan(BaseModel):
    """Source range covered by a token or declaration.

    Attributes:
        start: UTF-8 byte offset of the first character
        end: UTF-8 byte offset one past the last character
        line: 1-indexed line of the first character
        column: 1-indexed column of the first character
        end_line: 1-indexed line of the last character
        end_column: 1-indexed column one past the last character
    """

    start: int
    end: int
    line: int
    column: int
    end_line: int
    end_column: int

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"

    def merge(self, other: SourceSpan) -> SourceSpan:
        """Return the smallest span covering both spans."""
        first, last = (self, other) if self.start <= other.start else (other, self)
        end = last if last.end >= first.end else first
        return SourceSpan(
            start=first.start,
            end=end.end,
            line=first.line,
            column=first.column,
            end_line=end.end_line,
            end_column=end.end_column,
        )
