"""Pydantic models and enums for check rules."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CheckRuleKind(StrEnum):
    INVALID = "invalid"  # sentinel, never produced by a well-formed configuration
    RESOURCE_PRECONDITION = "resource_precondition"
    RESOURCE_POSTCONDITION = "resource_postcondition"
    OUTPUT_PRECONDITION = "output_precondition"

    def failure_summary(self) -> str:
        return failure_summary(self)


_FAILURE_SUMMARIES: dict[CheckRuleKind, str] = {
    CheckRuleKind.RESOURCE_PRECONDITION: "Resource precondition failed",
    CheckRuleKind.RESOURCE_POSTCONDITION: "Resource postcondition failed",
    CheckRuleKind.OUTPUT_PRECONDITION: "Module output value precondition failed",
}

_INVALID_KIND_SUMMARY = "Failed condition for invalid check type"


def failure_summary(kind: CheckRuleKind | str) -> str:
    """Summary used for a failed condition of the given kind. Never raises."""
    try:
        kind = CheckRuleKind(kind)
    except ValueError:
        return _INVALID_KIND_SUMMARY
    return _FAILURE_SUMMARIES.get(kind, _INVALID_KIND_SUMMARY)


class SourcePos(BaseModel):
    model_config = ConfigDict(frozen=True)

    line: int = 1
    column: int = 1
    byte: int = 0


class SourceRange(BaseModel):
    """Textual range of an expression in a configuration file."""

    model_config = ConfigDict(frozen=True)

    filename: str = ""
    start: SourcePos = Field(default_factory=SourcePos)
    end: SourcePos = Field(default_factory=SourcePos)

    def __str__(self) -> str:
        return (
            f"{self.filename}:{self.start.line},{self.start.column}"
            f"-{self.end.line},{self.end.column}"
        )


class CheckRule(BaseModel):
    """A condition expression plus the message shown when it is false."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    condition: Any  # checkrules.expressions.Expression
    error_message: str
    decl_range: SourceRange | None = None

    @field_validator("condition")
    @classmethod
    def check_condition(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("condition is required")
        missing = [name for name in ("variables", "value") if not callable(getattr(value, name, None))]
        if missing:
            raise ValueError(f"condition must be an expression, missing: {', '.join(missing)}")
        return value

    @property
    def subject(self) -> SourceRange | None:
        """Range reported in diagnostics: the condition's own, else the block's."""
        return getattr(self.condition, "range", None) or self.decl_range


@dataclass(frozen=True)
class RepetitionData:
    """Per-instance values for count.index and each.key / each.value."""

    count_index: int | None = None
    each_key: str | None = None
    each_value: object = None

    @classmethod
    def none(cls) -> RepetitionData:
        return cls()

    @property
    def has_count(self) -> bool:
        return self.count_index is not None

    @property
    def has_for_each(self) -> bool:
        return self.each_key is not None
