from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from .errors import ValidationError


class ComparisonOp(StrEnum):
    EQUALS = "="
    LESS_THAN = "<"
    LESS_THAN_OR_EQUAL = "<="
    MORE_THAN = ">"
    MORE_THAN_OR_EQUAL = ">="
    BETWEEN = "BETWEEN"
    BEGINS_WITH = "BEGINS_WITH"
    CONTAINS = "CONTAINS"


class LogicalOperator(StrEnum):
    AND = "AND"
    OR = "OR"


def coerce_comparison_op(op: ComparisonOp | str) -> ComparisonOp:
    if isinstance(op, ComparisonOp):
        return op
    try:
        return ComparisonOp(str(op).strip().upper())
    except ValueError as err:
        raise ValidationError(f"unsupported comparison operator: {op!r}") from err


def coerce_logical_operator(op: LogicalOperator | str) -> LogicalOperator:
    if isinstance(op, LogicalOperator):
        return op
    try:
        return LogicalOperator(str(op).strip().upper())
    except ValueError as err:
        raise ValidationError(f"unsupported logical operator: {op!r}") from err


@dataclass(frozen=True)
class Expression:
    text: str = ""
    names: Mapping[str, str] = field(default_factory=dict)
    values: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.text


class ExpressionBuilder:
    """Allocates placeholder tokens for one request.

    Attribute names map to ``#n<i>`` (one token per distinct attribute) and
    literal operands to ``:v<i>`` (one token per operand). Share a single
    builder across the key condition and filter of a request so tokens
    never collide.
    """

    def __init__(self) -> None:
        self._names: dict[str, str] = {}
        self._name_refs: dict[str, str] = {}
        self._values: dict[str, Any] = {}

    def name(self, attribute: str) -> str:
        if not attribute:
            raise ValidationError("attribute name cannot be empty")
        ref = self._name_refs.get(attribute)
        if ref is None:
            ref = f"#n{len(self._name_refs)}"
            self._name_refs[attribute] = ref
            self._names[ref] = attribute
        return ref

    def value(self, value: Any) -> str:
        ref = f":v{len(self._values)}"
        self._values[ref] = value
        return ref

    def build(self, text: str) -> Expression:
        return Expression(text=text, names=dict(self._names), values=dict(self._values))


def render_condition(
    builder: ExpressionBuilder,
    attribute: str,
    op: ComparisonOp | str,
    value1: Any = None,
    value2: Any = None,
) -> str:
    op = coerce_comparison_op(op)
    if value1 is None:
        raise ValidationError(f"no value provided for '{attribute}'")

    if op is ComparisonOp.BETWEEN:
        if value2 is None:
            raise ValidationError("BETWEEN requires two values, but only one was provided")
    elif value2 is not None:
        raise ValidationError(f"{op.value} takes a single value")

    name = builder.name(attribute)

    if op is ComparisonOp.BEGINS_WITH:
        return f"begins_with({name}, {builder.value(value1)})"
    if op is ComparisonOp.CONTAINS:
        return f"contains({name}, {builder.value(value1)})"
    if op is ComparisonOp.BETWEEN:
        low = builder.value(value1)
        high = builder.value(value2)
        return f"{name} BETWEEN {low} AND {high}"
    return f"{name} {op.value} {builder.value(value1)}"


@dataclass(frozen=True)
class Condition:
    attribute: str
    operator: ComparisonOp
    operand1: Any
    operand2: Any = None

    def __post_init__(self) -> None:
        if not self.attribute:
            raise ValidationError("condition attribute cannot be empty")
        object.__setattr__(self, "operator", coerce_comparison_op(self.operator))
        if self.operand1 is None:
            raise ValidationError(f"no value provided for '{self.attribute}'")
        if self.operator is ComparisonOp.BETWEEN:
            if self.operand2 is None:
                raise ValidationError("BETWEEN requires two values, but only one was provided")
        elif self.operand2 is not None:
            raise ValidationError(f"{self.operator.value} takes a single value")

    def render(self, builder: ExpressionBuilder) -> str:
        return render_condition(builder, self.attribute, self.operator, self.operand1, self.operand2)

    @staticmethod
    def eq(attribute: str, value: Any) -> Condition:
        return Condition(attribute, ComparisonOp.EQUALS, value)

    @staticmethod
    def lt(attribute: str, value: Any) -> Condition:
        return Condition(attribute, ComparisonOp.LESS_THAN, value)

    @staticmethod
    def lte(attribute: str, value: Any) -> Condition:
        return Condition(attribute, ComparisonOp.LESS_THAN_OR_EQUAL, value)

    @staticmethod
    def gt(attribute: str, value: Any) -> Condition:
        return Condition(attribute, ComparisonOp.MORE_THAN, value)

    @staticmethod
    def gte(attribute: str, value: Any) -> Condition:
        return Condition(attribute, ComparisonOp.MORE_THAN_OR_EQUAL, value)

    @staticmethod
    def between(attribute: str, low: Any, high: Any) -> Condition:
        return Condition(attribute, ComparisonOp.BETWEEN, low, high)

    @staticmethod
    def begins_with(attribute: str, prefix: Any) -> Condition:
        return Condition(attribute, ComparisonOp.BEGINS_WITH, prefix)

    @staticmethod
    def contains(attribute: str, value: Any) -> Condition:
        return Condition(attribute, ComparisonOp.CONTAINS, value)


type ChainLink = Condition | LogicalOperator


@dataclass(frozen=True)
class ConditionChain:
    """Conditions joined left to right by AND/OR, e.g. ``c1 AND c2 OR c3``.

    The links alternate condition, operator, condition, ... and always start
    and end on a condition. Precedence is the store's: AND binds tighter
    than OR.
    """

    links: tuple[ChainLink, ...]

    def __post_init__(self) -> None:
        links = tuple(self.links)
        if not links:
            raise ValidationError("condition chain cannot be empty")
        if len(links) % 2 == 0:
            raise ValidationError("condition chain must start and end with a condition")

        normalized: list[ChainLink] = []
        for i, link in enumerate(links):
            if i % 2 == 0:
                if not isinstance(link, Condition):
                    raise ValidationError(f"chain link {i}: expected a condition")
                normalized.append(link)
            else:
                if isinstance(link, Condition):
                    raise ValidationError(f"chain link {i}: expected a logical operator")
                normalized.append(coerce_logical_operator(link))
        object.__setattr__(self, "links", tuple(normalized))

    @property
    def conditions(self) -> tuple[Condition, ...]:
        return tuple(link for link in self.links if isinstance(link, Condition))

    @property
    def operators(self) -> tuple[LogicalOperator, ...]:
        return tuple(link for link in self.links if isinstance(link, LogicalOperator))

    def render(self, builder: ExpressionBuilder | None = None) -> Expression:
        builder = builder or ExpressionBuilder()
        return builder.build(self.render_text(builder))

    def render_text(self, builder: ExpressionBuilder) -> str:
        parts: list[str] = []
        for link in self.links:
            if isinstance(link, Condition):
                parts.append(link.render(builder))
            else:
                parts.append(link.value)
        return " ".join(parts)

    @staticmethod
    def of(*links: ChainLink) -> ConditionChain:
        return ConditionChain(links=tuple(links))

    @staticmethod
    def all_of(*conditions: Condition) -> ConditionChain:
        return ConditionChain(links=_join(conditions, LogicalOperator.AND))

    @staticmethod
    def any_of(*conditions: Condition) -> ConditionChain:
        return ConditionChain(links=_join(conditions, LogicalOperator.OR))


def _join(conditions: tuple[Condition, ...], op: LogicalOperator) -> tuple[ChainLink, ...]:
    out: list[ChainLink] = []
    for i, cond in enumerate(conditions):
        if i > 0:
            out.append(op)
        out.append(cond)
    return tuple(out)
