"""Diagnostics: structured reports of evaluation outcomes."""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict

from checkrules.models import SourceRange


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"


class Diagnostic(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    severity: Severity
    summary: str
    detail: str = ""
    subject: SourceRange | None = None
    expression: Any = None  # checkrules.expressions.Expression
    eval_context: Any = None  # checkrules.scope.ExprContext snapshot

    @classmethod
    def error(cls, summary: str, detail: str = "", **kwargs: Any) -> Diagnostic:
        return cls(severity=Severity.ERROR, summary=summary, detail=detail, **kwargs)

    @classmethod
    def warning(cls, summary: str, detail: str = "", **kwargs: Any) -> Diagnostic:
        return cls(severity=Severity.WARNING, summary=summary, detail=detail, **kwargs)

    def describe(self) -> str:
        text = f"{self.summary}: {self.detail}" if self.detail else self.summary
        if self.subject is not None:
            return f"{self.subject}: {text}"
        return text


class DiagnosticsError(Exception):
    """Error-severity diagnostics presented as a single exception."""

    def __init__(self, diagnostics: list[Diagnostic]) -> None:
        self.diagnostics = diagnostics
        message = diagnostics[0].describe() if diagnostics else "no errors"
        if len(diagnostics) > 1:
            message += f", and {len(diagnostics) - 1} other diagnostic(s)"
        super().__init__(message)


class Diagnostics(list[Diagnostic]):
    """Ordered, append-only collection of diagnostics."""

    def extend(self, other: Iterable[Diagnostic] | None) -> None:  # type: ignore[override]
        if other:
            super().extend(other)

    def errors(self) -> list[Diagnostic]:
        return [d for d in self if d.severity is Severity.ERROR]

    def warnings(self) -> list[Diagnostic]:
        return [d for d in self if d.severity is Severity.WARNING]

    def has_errors(self) -> bool:
        return any(d.severity is Severity.ERROR for d in self)

    def max_severity(self) -> Severity | None:
        if not self:
            return None
        return Severity.ERROR if self.has_errors() else Severity.WARNING

    def err(self) -> DiagnosticsError | None:
        """Return the errors as an exception, or None when there are none."""
        errors = self.errors()
        if not errors:
            return None
        return DiagnosticsError(errors)
