"""Programmatically built condition expressions."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from checkrules.diagnostics import Diagnostic, Diagnostics
from checkrules.models import SourceRange
from checkrules.scope import ExprContext
from checkrules.values import Value


class Expression(Protocol):
    range: SourceRange

    def variables(self) -> list[str]: ...

    def value(self, ctx: ExprContext | None) -> tuple[Value, Diagnostics]: ...


def _lookup(ctx: ExprContext | None, traversal: str, diags: Diagnostics) -> Value | None:
    value = ctx.get(traversal) if ctx is not None else None
    if value is None:
        diags.append(
            Diagnostic.error("Unknown variable", f'There is no variable named "{traversal}".')
        )
    return value


@dataclass(frozen=True)
class Literal:
    constant: object
    range: SourceRange = field(default_factory=SourceRange)

    def variables(self) -> list[str]:
        return []

    def value(self, ctx: ExprContext | None) -> tuple[Value, Diagnostics]:
        return Value.of(self.constant), Diagnostics()


@dataclass(frozen=True)
class Ref:
    traversal: str
    range: SourceRange = field(default_factory=SourceRange)

    def variables(self) -> list[str]:
        return [self.traversal]

    def value(self, ctx: ExprContext | None) -> tuple[Value, Diagnostics]:
        diags = Diagnostics()
        value = _lookup(ctx, self.traversal, diags)
        if value is None:
            return Value.unknown(), diags
        return value, diags


class Predicate:
    """Apply a Python function to resolved traversals.

    Any unknown argument makes the result unknown without calling ``fn``.
    Null arguments are passed as None.
    """

    def __init__(
        self,
        fn: Callable[..., object],
        *traversals: str,
        name: str | None = None,
        range: SourceRange | None = None,
    ) -> None:
        self.fn = fn
        self.traversals = traversals
        self.name = name or getattr(fn, "__name__", "predicate")
        self.range = range or SourceRange()

    def __repr__(self) -> str:
        return f"Predicate({self.name!r}, {', '.join(self.traversals)})"

    def variables(self) -> list[str]:
        return list(self.traversals)

    def value(self, ctx: ExprContext | None) -> tuple[Value, Diagnostics]:
        diags = Diagnostics()
        args: list[Value] = []
        for traversal in self.traversals:
            value = _lookup(ctx, traversal, diags)
            args.append(value if value is not None else Value.unknown())
        if diags.has_errors() or not all(a.is_known() for a in args):
            return Value.unknown(), diags

        try:
            return Value.of(self.fn(*(a.raw for a in args))), diags
        except Exception as e:
            diags.append(
                Diagnostic.error(
                    "Error in function call",
                    f'Call to function "{self.name}" failed: {e}.',
                    subject=self.range,
                )
            )
            return Value.unknown(), diags
