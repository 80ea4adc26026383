from __future__ import annotations

import pytest

from fitsnitch_db import (
    ComparisonOp,
    Condition,
    ConditionChain,
    ExpressionBuilder,
    LogicalOperator,
    ValidationError,
    render_condition,
)


def test_condition_constructors() -> None:
    assert Condition.eq("a", 1) == Condition("a", ComparisonOp.EQUALS, 1)
    assert Condition.lt("a", 1) == Condition("a", ComparisonOp.LESS_THAN, 1)
    assert Condition.lte("a", 1) == Condition("a", ComparisonOp.LESS_THAN_OR_EQUAL, 1)
    assert Condition.gt("a", 1) == Condition("a", ComparisonOp.MORE_THAN, 1)
    assert Condition.gte("a", 1) == Condition("a", ComparisonOp.MORE_THAN_OR_EQUAL, 1)
    assert Condition.between("a", 1, 2) == Condition("a", ComparisonOp.BETWEEN, 1, 2)
    assert Condition.begins_with("a", "x") == Condition("a", ComparisonOp.BEGINS_WITH, "x")
    assert Condition.contains("a", "x") == Condition("a", ComparisonOp.CONTAINS, "x")


def test_condition_accepts_operator_strings() -> None:
    assert Condition("a", "between", 1, 2).operator is ComparisonOp.BETWEEN  # type: ignore[arg-type]
    assert Condition("a", ">=", 1).operator is ComparisonOp.MORE_THAN_OR_EQUAL  # type: ignore[arg-type]

    with pytest.raises(ValidationError, match="unsupported comparison operator"):
        Condition("a", "LIKE", 1)  # type: ignore[arg-type]


def test_condition_operand_rules() -> None:
    with pytest.raises(ValidationError, match="BETWEEN requires two values"):
        Condition("a", ComparisonOp.BETWEEN, 1)
    with pytest.raises(ValidationError, match="takes a single value"):
        Condition("a", ComparisonOp.EQUALS, 1, 2)
    with pytest.raises(ValidationError, match="no value provided for 'a'"):
        Condition("a", ComparisonOp.EQUALS, None)
    with pytest.raises(ValidationError, match="attribute cannot be empty"):
        Condition("", ComparisonOp.EQUALS, 1)


def test_render_condition_binds_every_operand() -> None:
    builder = ExpressionBuilder()
    assert render_condition(builder, "age", "<", 30) == "#n0 < :v0"
    assert render_condition(builder, "name", ComparisonOp.BEGINS_WITH, "Al") == "begins_with(#n1, :v1)"
    assert render_condition(builder, "tags", ComparisonOp.CONTAINS, "x") == "contains(#n2, :v2)"
    assert render_condition(builder, "age", ComparisonOp.BETWEEN, 1, 9) == "#n0 BETWEEN :v3 AND :v4"

    expr = builder.build("ignored")
    assert expr.names == {"#n0": "age", "#n1": "name", "#n2": "tags"}
    assert expr.values == {":v0": 30, ":v1": "Al", ":v2": "x", ":v3": 1, ":v4": 9}


def test_render_condition_never_inlines_literals() -> None:
    builder = ExpressionBuilder()
    text = render_condition(builder, "name", "=", "x) OR attribute_exists(#n0")
    assert text == "#n0 = :v0"
    assert builder.build(text).values == {":v0": "x) OR attribute_exists(#n0"}


def test_render_condition_between_requires_both_operands() -> None:
    with pytest.raises(ValidationError, match="BETWEEN requires two values"):
        render_condition(ExpressionBuilder(), "created", ComparisonOp.BETWEEN, 1)

    with pytest.raises(ValidationError, match="no value provided"):
        render_condition(ExpressionBuilder(), "created", ComparisonOp.BETWEEN, None, 2)


@pytest.mark.parametrize("op", [ComparisonOp.BEGINS_WITH, ComparisonOp.CONTAINS, ComparisonOp.EQUALS, "<="])
def test_render_condition_rejects_second_operand_for_single_value_ops(op: ComparisonOp | str) -> None:
    builder = ExpressionBuilder()
    with pytest.raises(ValidationError, match="takes a single value"):
        render_condition(builder, "name", op, "a", "b")
    assert builder.build("").values == {}


def test_render_condition_zero_and_false_are_valid_operands() -> None:
    builder = ExpressionBuilder()
    assert render_condition(builder, "count", "=", 0) == "#n0 = :v0"
    assert render_condition(builder, "active", "=", False) == "#n1 = :v1"


def test_chain_renders_alternating_conditions_and_operators() -> None:
    chain = ConditionChain.of(
        Condition.contains("searchStrings", "al"),
        LogicalOperator.AND,
        Condition.gte("age", 18),
        LogicalOperator.OR,
        Condition.between("created", "2024", "2025"),
    )
    expr = chain.render()

    assert expr.text == "contains(#n0, :v0) AND #n1 >= :v1 OR #n2 BETWEEN :v2 AND :v3"
    assert expr.names == {"#n0": "searchStrings", "#n1": "age", "#n2": "created"}
    assert expr.values == {":v0": "al", ":v1": 18, ":v2": "2024", ":v3": "2025"}
    assert len(chain.conditions) == 3
    assert chain.operators == (LogicalOperator.AND, LogicalOperator.OR)


def test_chain_single_condition() -> None:
    expr = ConditionChain.of(Condition.eq("userId", "u1")).render()
    assert expr.text == "#n0 = :v0"


def test_chain_all_of_and_any_of() -> None:
    a = Condition.eq("a", 1)
    b = Condition.eq("b", 2)
    assert ConditionChain.all_of(a, b).links == (a, LogicalOperator.AND, b)
    assert ConditionChain.any_of(a, b).links == (a, LogicalOperator.OR, b)
    assert ConditionChain.of(a, "or", b).links == (a, LogicalOperator.OR, b)


def test_chain_shape_is_validated() -> None:
    a = Condition.eq("a", 1)
    b = Condition.eq("b", 2)

    with pytest.raises(ValidationError, match="cannot be empty"):
        ConditionChain.of()
    with pytest.raises(ValidationError, match="start and end with a condition"):
        ConditionChain.of(a, LogicalOperator.AND)
    with pytest.raises(ValidationError, match="expected a condition"):
        ConditionChain.of(LogicalOperator.AND, a, LogicalOperator.OR)
    with pytest.raises(ValidationError, match="expected a logical operator"):
        ConditionChain.of(a, b, a)
    with pytest.raises(ValidationError, match="expected a condition"):
        ConditionChain.of(a, LogicalOperator.AND, LogicalOperator.OR, LogicalOperator.AND, b)
    with pytest.raises(ValidationError, match="unsupported logical operator"):
        ConditionChain.of(a, "XOR", b)


def test_chain_shares_builder_with_key_condition() -> None:
    builder = ExpressionBuilder()
    key_text = render_condition(builder, "userId", "=", "u1")
    filter_text = ConditionChain.of(Condition.eq("userId", "u2")).render_text(builder)
    assert key_text == "#n0 = :v0"
    assert filter_text == "#n0 = :v1"
