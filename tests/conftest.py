"""Shared fixtures and collaborator fakes for checkrules tests."""

from __future__ import annotations

import pytest

from checkrules.diagnostics import Diagnostics
from checkrules.expressions import Literal, Predicate
from checkrules.models import CheckRule, RepetitionData, SourcePos, SourceRange
from checkrules.scope import StaticEvalContext
from checkrules.values import Value


class RecordingTrace:
    """Trace sink that keeps every message."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def __call__(self, message: str) -> None:
        self.messages.append(message)


class CountingEvalContext:
    """Wraps a StaticEvalContext and counts scope requests."""

    def __init__(self, inner: StaticEvalContext) -> None:
        self.inner = inner
        self.calls: list[tuple[str | None, RepetitionData | None]] = []

    def evaluation_scope(self, self_ref, key_data):
        self.calls.append((self_ref, key_data))
        return self.inner.evaluation_scope(self_ref, key_data)


class ExplodingEvalContext:
    """EvalContext that must never be consulted."""

    def evaluation_scope(self, self_ref, key_data):
        raise AssertionError("evaluation_scope should not be called")


def _range(line: int) -> SourceRange:
    return SourceRange(
        filename="main.tf",
        start=SourcePos(line=line, column=17, byte=line * 40),
        end=SourcePos(line=line, column=31, byte=line * 40 + 14),
    )


def make_rule(condition, message: str = "condition failed", line: int = 1) -> CheckRule:
    """Build a CheckRule, giving literal/predicate conditions a source range."""
    if isinstance(condition, bool) or condition is None:
        condition = Literal(condition, range=_range(line))
    return CheckRule(condition=condition, error_message=message)


@pytest.fixture
def trace() -> RecordingTrace:
    return RecordingTrace()


@pytest.fixture
def web_context() -> StaticEvalContext:
    """Context with a counted web instance and a few module values."""
    return StaticEvalContext(
        {
            "var.port": 8080,
            "var.region": "eu-west-1",
            "local.replicas": 3,
            "aws_instance.web": {"id": "i-0abc", "private_ip": "10.0.0.4"},
        },
        instances={
            "aws_instance.web[0]": {"id": "i-0abc", "tags": {"env": "prod"}, "size": 8},
        },
    )


@pytest.fixture
def positive_port_rule() -> CheckRule:
    return CheckRule(
        condition=Predicate(lambda port: port > 0, "var.port", name="positive"),
        error_message="value must be positive",
    )


class RangelessExpression:
    """Constant expression without a source range of its own."""

    def __init__(self, constant: object) -> None:
        self.constant = constant

    def variables(self) -> list[str]:
        return []

    def value(self, ctx):
        return Value.of(self.constant), Diagnostics()
