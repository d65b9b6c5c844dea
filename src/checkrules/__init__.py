"""checkrules: precondition and postcondition evaluation for staged plan/apply pipelines."""

from importlib.metadata import PackageNotFoundError, version

from checkrules.config import CheckRulesConfig, load_check_rules_config
from checkrules.diagnostics import Diagnostic, Diagnostics, DiagnosticsError, Severity
from checkrules.evaluator import (
    INVALID_CONDITION_SUMMARY,
    ConditionResult,
    EvaluationRequest,
    evaluate_check_rule,
    evaluate_check_rules,
)
from checkrules.models import CheckRule, CheckRuleKind, RepetitionData, SourcePos, SourceRange
from checkrules.values import ConversionError, Value, ValueState

try:
    __version__ = version("checkrules")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

__all__ = [
    "INVALID_CONDITION_SUMMARY",
    "CheckRule",
    "CheckRuleKind",
    "CheckRulesConfig",
    "ConditionResult",
    "ConversionError",
    "Diagnostic",
    "Diagnostics",
    "DiagnosticsError",
    "EvaluationRequest",
    "RepetitionData",
    "Severity",
    "SourcePos",
    "SourceRange",
    "Value",
    "ValueState",
    "evaluate_check_rule",
    "evaluate_check_rules",
    "load_check_rules_config",
]
