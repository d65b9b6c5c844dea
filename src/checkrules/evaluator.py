"""Evaluate check rules against a partially-known evaluation context.

Rules whose condition is not yet known are skipped silently, on the
assumption that the caller will evaluate them again once more values are
known. Every other outcome is reported as diagnostics; nothing here raises
for a failing rule.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from checkrules.config import CheckRulesConfig
from checkrules.diagnostics import Diagnostic, Diagnostics
from checkrules.models import CheckRule, CheckRuleKind, RepetitionData
from checkrules.references import references_in_expr
from checkrules.scope import EvalContext, ExprContext
from checkrules.values import ConversionError

logger = logging.getLogger(__name__)

INVALID_CONDITION_SUMMARY = "Invalid condition result"


class ConditionResult(StrEnum):
    UNKNOWN = "unknown"  # retry in a later pass
    TRUE = "true"
    FALSE = "false"
    INVALID = "invalid"  # null or not convertible to bool


class TraceSink(Protocol):
    def __call__(self, message: str) -> None: ...


def _discard(message: str) -> None:
    return None


def default_trace_sink(config: CheckRulesConfig) -> TraceSink:
    return logger.debug if config.trace_enabled else _discard


def _condition_diagnostic(
    rule: CheckRule, summary: str, detail: str, snapshot: ExprContext | None
) -> Diagnostic:
    return Diagnostic.error(
        summary,
        detail,
        subject=rule.subject,
        expression=rule.condition,
        eval_context=snapshot,
    )


def evaluate_check_rule(
    kind: CheckRuleKind,
    rule: CheckRule,
    ctx: EvalContext,
    self_ref: str | None = None,
    key_data: RepetitionData | None = None,
    *,
    trace: TraceSink | None = None,
    config: CheckRulesConfig | None = None,
) -> tuple[ConditionResult, Diagnostics]:
    """Evaluate a single rule and classify its condition.

    Diagnostics from reference analysis, scope construction and expression
    evaluation are always returned, whatever the verdict. At most one more
    diagnostic is added for the verdict itself.
    """
    config = config or CheckRulesConfig()
    trace = trace or default_trace_sink(config)
    diags = Diagnostics()

    rule_diags = Diagnostics()
    refs, more = references_in_expr(rule.condition)
    rule_diags.extend(more)
    scope = ctx.evaluation_scope(self_ref, key_data)
    expr_ctx, more = scope.eval_context(refs)
    rule_diags.extend(more)
    result, more = rule.condition.value(expr_ctx)
    rule_diags.extend(more)
    diags.extend(rule_diags)

    if err := rule_diags.err():
        trace(f"evaluate_check_rules: {kind.failure_summary()}: {err}")

    snapshot = expr_ctx if config.snapshot_context else None

    if not result.is_known():
        return ConditionResult.UNKNOWN, diags
    if result.is_null():
        diags.append(
            _condition_diagnostic(
                rule,
                INVALID_CONDITION_SUMMARY,
                "Condition expression must return either true or false, not null.",
                snapshot,
            )
        )
        return ConditionResult.INVALID, diags
    try:
        passed = result.to_bool()
    except ConversionError as e:
        diags.append(
            _condition_diagnostic(
                rule,
                INVALID_CONDITION_SUMMARY,
                f"Invalid validation condition result value: {e}.",
                snapshot,
            )
        )
        return ConditionResult.INVALID, diags

    if passed:
        return ConditionResult.TRUE, diags
    diags.append(_condition_diagnostic(rule, kind.failure_summary(), rule.error_message, snapshot))
    return ConditionResult.FALSE, diags


def evaluate_check_rules(
    kind: CheckRuleKind,
    rules: Sequence[CheckRule],
    ctx: EvalContext,
    self_ref: str | None = None,
    key_data: RepetitionData | None = None,
    *,
    trace: TraceSink | None = None,
    config: CheckRulesConfig | None = None,
) -> Diagnostics:
    """Evaluate every rule, in order, and collect all diagnostics.

    A failing rule never stops the rules after it. If any rule fails the
    result contains errors; otherwise it is empty or holds only warnings.
    """
    if not rules:
        return Diagnostics()

    config = config or CheckRulesConfig()
    trace = trace or default_trace_sink(config)
    diags = Diagnostics()
    for rule in rules:
        _, rule_diags = evaluate_check_rule(
            kind, rule, ctx, self_ref, key_data, trace=trace, config=config
        )
        diags.extend(rule_diags)
    return diags


@dataclass(frozen=True)
class EvaluationRequest:
    """Inputs for one evaluation pass over a rule set."""

    kind: CheckRuleKind
    rules: Sequence[CheckRule]
    context: EvalContext
    self_ref: str | None = None
    key_data: RepetitionData | None = None

    def evaluate(
        self,
        *,
        trace: TraceSink | None = None,
        config: CheckRulesConfig | None = None,
    ) -> Diagnostics:
        return evaluate_check_rules(
            self.kind,
            self.rules,
            self.context,
            self.self_ref,
            self.key_data,
            trace=trace,
            config=config,
        )
