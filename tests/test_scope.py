"""Tests for scope.py — StaticEvalContext reference resolution."""

from __future__ import annotations

import pytest

from checkrules.models import RepetitionData
from checkrules.references import parse_ref
from checkrules.scope import ExprContext, StaticEvalContext
from checkrules.values import Value


def _resolve(ctx, *traversals, self_ref=None, key_data=None):
    refs = [parse_ref(t)[0] for t in traversals]
    return ctx.evaluation_scope(self_ref, key_data).eval_context(refs)


@pytest.mark.unit
def test_resolves_declared_value(web_context):
    expr_ctx, diags = _resolve(web_context, "var.port")
    assert diags == []
    assert expr_ctx.get("var.port") == Value.of(8080)


@pytest.mark.unit
def test_resolves_nested_attribute(web_context):
    expr_ctx, diags = _resolve(web_context, "aws_instance.web.private_ip")
    assert diags == []
    assert expr_ctx.get("aws_instance.web.private_ip").raw == "10.0.0.4"


@pytest.mark.unit
def test_only_requested_references_are_visible(web_context):
    expr_ctx, _ = _resolve(web_context, "var.port")
    assert "var.port" in expr_ctx
    assert "var.region" not in expr_ctx


@pytest.mark.unit
def test_undeclared_value_is_error_and_unknown(web_context):
    expr_ctx, diags = _resolve(web_context, "var.missing")
    assert len(diags) == 1
    assert diags[0].summary == "Reference to undeclared value"
    assert '"var.missing"' in diags[0].detail
    assert expr_ctx.get("var.missing").is_known() is False


@pytest.mark.unit
def test_pending_value_resolves_unknown_without_error():
    ctx = StaticEvalContext({"aws_instance.db": Value.unknown()})
    expr_ctx, diags = _resolve(ctx, "aws_instance.db.endpoint")
    assert diags == []
    assert expr_ctx.get("aws_instance.db.endpoint").is_known() is False


@pytest.mark.unit
def test_unsupported_attribute(web_context):
    expr_ctx, diags = _resolve(web_context, "aws_instance.web.arn")
    assert diags[0].summary == "Unsupported attribute"
    assert '"arn"' in diags[0].detail
    assert expr_ctx.get("aws_instance.web.arn").is_known() is False


@pytest.mark.unit
def test_attribute_of_null_value():
    ctx = StaticEvalContext({"var.settings": None})
    _, diags = _resolve(ctx, "var.settings.mode")
    assert diags[0].summary == "Attempt to get attribute from null value"


@pytest.mark.unit
def test_list_index_attribute():
    ctx = StaticEvalContext({"var.zones": ["a", "b"]})
    expr_ctx, diags = _resolve(ctx, "var.zones.1")
    assert diags == []
    assert expr_ctx.get("var.zones.1").raw == "b"


@pytest.mark.unit
def test_self_resolves_to_instance(web_context):
    expr_ctx, diags = _resolve(web_context, "self.tags.env", self_ref="aws_instance.web[0]")
    assert diags == []
    assert expr_ctx.get("self.tags.env").raw == "prod"


@pytest.mark.unit
def test_self_without_identity(web_context):
    _, diags = _resolve(web_context, "self.id")
    assert diags[0].summary == 'Invalid "self" reference'


@pytest.mark.unit
def test_count_index(web_context):
    expr_ctx, diags = _resolve(web_context, "count.index", key_data=RepetitionData(count_index=2))
    assert diags == []
    assert expr_ctx.get("count.index").raw == 2


@pytest.mark.unit
def test_count_index_outside_count(web_context):
    expr_ctx, diags = _resolve(web_context, "count.index")
    assert diags[0].summary == 'Reference to "count" in non-counted context'
    assert expr_ctx.get("count.index").is_known() is False


@pytest.mark.unit
def test_each_key_and_value(web_context):
    data = RepetitionData(each_key="blue", each_value={"weight": 10})
    expr_ctx, diags = _resolve(web_context, "each.key", "each.value.weight", key_data=data)
    assert diags == []
    assert expr_ctx.get("each.key").raw == "blue"
    assert expr_ctx.get("each.value.weight").raw == 10


@pytest.mark.unit
def test_each_outside_for_each(web_context):
    _, diags = _resolve(web_context, "each.value")
    assert diags[0].summary == 'Reference to "each" in context without for_each'


@pytest.mark.unit
def test_with_values_returns_new_context():
    ctx = StaticEvalContext({"var.port": Value.unknown()})
    resolved = ctx.with_values({"var.port": 443})
    assert _resolve(ctx, "var.port")[0].get("var.port").is_known() is False
    assert _resolve(resolved, "var.port")[0].get("var.port").raw == 443


@pytest.mark.unit
def test_expr_context_equality():
    assert ExprContext({"a": Value.of(1)}) == ExprContext({"a": Value.of(1)})


@pytest.mark.unit
def test_unsupported_nested_value_rejected_when_context_is_built():
    with pytest.raises(TypeError, match="unsupported value type: set"):
        StaticEvalContext({"aws_instance.web": {"tags": {"a", "b"}}})


@pytest.mark.unit
def test_unsupported_nested_instance_attribute_rejected():
    with pytest.raises(TypeError, match="unsupported value type"):
        StaticEvalContext(instances={"aws_instance.web[0]": {"ports": [80, object()]}})


@pytest.mark.unit
def test_with_values_rejects_unsupported_nested_value(web_context):
    with pytest.raises(TypeError):
        web_context.with_values({"var.extra": [{"a": frozenset()}]})


@pytest.mark.unit
def test_nested_collections_resolve(web_context):
    ctx = web_context.with_values({"var.rules": [{"ports": [80, 443]}]})
    expr_ctx, diags = _resolve(ctx, "var.rules.0.ports.1")
    assert diags == []
    assert expr_ctx.get("var.rules.0.ports.1").raw == 443


@pytest.mark.unit
def test_value_and_instance_accessors(web_context):
    assert web_context.value("var.port") == Value.of(8080)
    assert web_context.value("var.missing") is None
    assert web_context.instance("aws_instance.web[0]").type_name == "map"
    assert web_context.instance("aws_instance.web[1]") is None


@pytest.mark.unit
def test_unknown_self_identity_is_invalid(web_context):
    _, diags = _resolve(web_context, "self.id", self_ref="aws_instance.web[7]")
    assert diags[0].summary == 'Invalid "self" reference'
