"""Scope construction: resolve references to values for one evaluation."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol

from checkrules.diagnostics import Diagnostic, Diagnostics
from checkrules.models import RepetitionData
from checkrules.references import Reference
from checkrules.values import Value


@dataclass(frozen=True)
class ExprContext:
    """Values visible to one expression, keyed by traversal."""

    variables: dict[str, Value] = field(default_factory=dict)

    def get(self, traversal: str) -> Value | None:
        return self.variables.get(traversal)

    def __contains__(self, traversal: object) -> bool:
        return traversal in self.variables


class ScopeBuilder(Protocol):
    def eval_context(self, references: list[Reference]) -> tuple[ExprContext, Diagnostics]: ...


class EvalContext(Protocol):
    def evaluation_scope(
        self, self_ref: str | None, key_data: RepetitionData | None
    ) -> ScopeBuilder: ...


class StaticEvalContext:
    """EvalContext backed by fixed mappings.

    ``values`` maps reference subjects (``var.region``, ``aws_instance.web``)
    to values; ``instances`` maps self-reference identities to the attributes
    ``self`` resolves to. Pass ``Value.unknown()`` for anything still pending.
    """

    def __init__(
        self,
        values: Mapping[str, object] | None = None,
        *,
        instances: Mapping[str, object] | None = None,
    ) -> None:
        self._values = {k: Value.of(v) for k, v in (values or {}).items()}
        self._instances = {k: Value.of(v) for k, v in (instances or {}).items()}

    def with_values(self, updates: Mapping[str, object]) -> StaticEvalContext:
        """Return a copy with some values replaced, e.g. once they become known."""
        merged: dict[str, object] = dict(self._values)
        merged.update(updates)
        return StaticEvalContext(merged, instances=self._instances)

    def value(self, subject: str) -> Value | None:
        return self._values.get(subject)

    def instance(self, self_ref: str) -> Value | None:
        return self._instances.get(self_ref)

    def evaluation_scope(
        self, self_ref: str | None, key_data: RepetitionData | None
    ) -> StaticScope:
        return StaticScope(self, self_ref, key_data or RepetitionData.none())


class StaticScope:
    def __init__(
        self, ctx: StaticEvalContext, self_ref: str | None, key_data: RepetitionData
    ) -> None:
        self._ctx = ctx
        self._self_ref = self_ref
        self._key_data = key_data

    def eval_context(self, references: list[Reference]) -> tuple[ExprContext, Diagnostics]:
        diags = Diagnostics()
        variables: dict[str, Value] = {}
        for ref in references:
            base, more = self._resolve_subject(ref.subject)
            diags.extend(more)
            value, more = _get_attrs(base, ref.remaining)
            diags.extend(more)
            variables[ref.traversal] = value
        return ExprContext(variables), diags

    def _resolve_subject(self, subject: str) -> tuple[Value, Diagnostics]:
        diags = Diagnostics()
        key_data = self._key_data

        if subject == "self":
            instance = self._ctx.instance(self._self_ref) if self._self_ref is not None else None
            if instance is None:
                diags.append(
                    Diagnostic.error(
                        'Invalid "self" reference',
                        'The "self" object is not available in this context. '
                        "It can only be used in conditions attached to a resource.",
                    )
                )
                return Value.unknown(), diags
            return instance, diags

        if subject == "count.index":
            if not key_data.has_count:
                diags.append(
                    Diagnostic.error(
                        'Reference to "count" in non-counted context',
                        'The "count" object can only be used in blocks where '
                        'the "count" argument is set.',
                    )
                )
                return Value.unknown("number"), diags
            return Value.of(key_data.count_index), diags

        if subject in ("each.key", "each.value"):
            if not key_data.has_for_each:
                diags.append(
                    Diagnostic.error(
                        'Reference to "each" in context without for_each',
                        'The "each" object can only be used in blocks where '
                        'the "for_each" argument is set.',
                    )
                )
                return Value.unknown(), diags
            if subject == "each.key":
                return Value.of(key_data.each_key), diags
            return Value.of(key_data.each_value), diags

        value = self._ctx.value(subject)
        if value is None:
            diags.append(
                Diagnostic.error(
                    "Reference to undeclared value",
                    f'There is no value named "{subject}" declared in this context.',
                )
            )
            return Value.unknown(), diags
        return value, diags


def _get_attrs(value: Value, names: tuple[str, ...]) -> tuple[Value, Diagnostics]:
    diags = Diagnostics()
    for name in names:
        if not value.is_known():
            return Value.unknown(), diags
        if value.is_null():
            diags.append(
                Diagnostic.error(
                    "Attempt to get attribute from null value",
                    f'Cannot access attribute "{name}" of a null value.',
                )
            )
            return Value.unknown(), diags
        raw = value.raw
        if isinstance(raw, dict) and name in raw:
            value = Value.of(raw[name])
        elif isinstance(raw, tuple) and name.isdigit() and int(name) < len(raw):
            value = Value.of(raw[int(name)])
        else:
            diags.append(
                Diagnostic.error(
                    "Unsupported attribute",
                    f'This {value.type_name} value does not have an attribute named "{name}".',
                )
            )
            return Value.unknown(), diags
    return value, diags
