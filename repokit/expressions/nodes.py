"""
Expression trees for filters and projections.

Nodes are immutable. Python operators on nodes build new nodes, so a predicate can be
written against the implicit entity parameter:

    x = Parameter()
    adults = (x.age >= 18) & ~(x.name == None)

or captured from a plain callable:

    adults = as_expression(lambda hero: hero.age >= 18)
"""

import inspect
from dataclasses import dataclass
from enum import Enum
from functools import reduce
from typing import Any, Callable, Mapping, Optional, Tuple, Union


class NodeType(str, Enum):
    """Node kinds for unary and binary expressions."""
    NOT = "Not"
    NEGATE = "Negate"

    AND_ALSO = "AndAlso"
    OR_ELSE = "OrElse"
    EQUAL = "Equal"
    NOT_EQUAL = "NotEqual"
    GREATER_THAN = "GreaterThan"
    GREATER_THAN_OR_EQUAL = "GreaterThanOrEqual"
    LESS_THAN = "LessThan"
    LESS_THAN_OR_EQUAL = "LessThanOrEqual"

    ADD = "Add"
    SUBTRACT = "Subtract"
    MULTIPLY = "Multiply"
    DIVIDE = "Divide"
    MODULO = "Modulo"


class Expression:
    """Base node. Comparison, logical and arithmetic operators return new nodes."""

    __slots__ = ()

    def __eq__(self, other: Any) -> "Binary":  # type: ignore[override]
        return Binary(NodeType.EQUAL, self, _coerce(other))

    def __ne__(self, other: Any) -> "Binary":  # type: ignore[override]
        return Binary(NodeType.NOT_EQUAL, self, _coerce(other))

    def __gt__(self, other: Any) -> "Binary":
        return Binary(NodeType.GREATER_THAN, self, _coerce(other))

    def __ge__(self, other: Any) -> "Binary":
        return Binary(NodeType.GREATER_THAN_OR_EQUAL, self, _coerce(other))

    def __lt__(self, other: Any) -> "Binary":
        return Binary(NodeType.LESS_THAN, self, _coerce(other))

    def __le__(self, other: Any) -> "Binary":
        return Binary(NodeType.LESS_THAN_OR_EQUAL, self, _coerce(other))

    def __and__(self, other: Any) -> "Binary":
        return Binary(NodeType.AND_ALSO, self, _coerce(other))

    def __rand__(self, other: Any) -> "Binary":
        return Binary(NodeType.AND_ALSO, _coerce(other), self)

    def __or__(self, other: Any) -> "Binary":
        return Binary(NodeType.OR_ELSE, self, _coerce(other))

    def __ror__(self, other: Any) -> "Binary":
        return Binary(NodeType.OR_ELSE, _coerce(other), self)

    def __invert__(self) -> "Unary":
        return Unary(NodeType.NOT, self)

    def __neg__(self) -> "Unary":
        return Unary(NodeType.NEGATE, self)

    def __add__(self, other: Any) -> "Binary":
        return Binary(NodeType.ADD, self, _coerce(other))

    def __radd__(self, other: Any) -> "Binary":
        return Binary(NodeType.ADD, _coerce(other), self)

    def __sub__(self, other: Any) -> "Binary":
        return Binary(NodeType.SUBTRACT, self, _coerce(other))

    def __rsub__(self, other: Any) -> "Binary":
        return Binary(NodeType.SUBTRACT, _coerce(other), self)

    def __mul__(self, other: Any) -> "Binary":
        return Binary(NodeType.MULTIPLY, self, _coerce(other))

    def __rmul__(self, other: Any) -> "Binary":
        return Binary(NodeType.MULTIPLY, _coerce(other), self)

    def __truediv__(self, other: Any) -> "Binary":
        return Binary(NodeType.DIVIDE, self, _coerce(other))

    def __rtruediv__(self, other: Any) -> "Binary":
        return Binary(NodeType.DIVIDE, _coerce(other), self)

    def __mod__(self, other: Any) -> "Binary":
        return Binary(NodeType.MODULO, self, _coerce(other))

    def __rmod__(self, other: Any) -> "Binary":
        return Binary(NodeType.MODULO, _coerce(other), self)

    def __bool__(self) -> bool:
        raise TypeError(
            "Boolean value of an expression is not defined; "
            "combine conditions with '&', '|' and '~' instead of 'and', 'or' and 'not'"
        )

    __hash__ = object.__hash__


class Parameter(Expression):
    """The implicit "current entity"; attribute access yields a Member node."""

    __slots__ = ("_label",)

    def __init__(self, label: str = "x"):
        object.__setattr__(self, "_label", label)

    def __getattr__(self, name: str) -> "Member":
        if name.startswith("_"):
            raise AttributeError(name)
        return Member(self, name)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Expression nodes are immutable")

    def __repr__(self) -> str:
        return f"Parameter({self._label!r})"


@dataclass(frozen=True, eq=False)
class Member(Expression):
    """Field access on an entity."""
    expression: Expression
    name: str


@dataclass(frozen=True, eq=False)
class Constant(Expression):
    """Literal value; None is the null literal."""
    value: Any


@dataclass(frozen=True, eq=False)
class Unary(Expression):
    node_type: NodeType
    operand: Expression


@dataclass(frozen=True, eq=False)
class Binary(Expression):
    node_type: NodeType
    left: Expression
    right: Expression


@dataclass(frozen=True, eq=False)
class Lambda(Expression):
    """entity => body"""
    body: Expression
    parameter: Parameter

    @classmethod
    def from_callable(cls, fn: Callable[[Any], Any]) -> "Lambda":
        """Capture a callable by invoking it with a Parameter named after its first argument."""
        try:
            names = list(inspect.signature(fn).parameters)
        except (TypeError, ValueError):
            names = []
        parameter = Parameter(names[0] if names else "x")
        return cls(_body(fn(parameter)), parameter)


@dataclass(frozen=True, eq=False)
class Record(Expression):
    """Projection onto named members; rows become dicts, or instances of ``into``."""
    fields: Tuple[Tuple[str, Expression], ...]
    into: Optional[type] = None


def _coerce(value: Any) -> Expression:
    if isinstance(value, Expression):
        return value
    return Constant(value)


def _body(value: Any) -> Expression:
    if isinstance(value, Expression):
        return value
    if isinstance(value, (tuple, list)):
        return record(*value)
    if isinstance(value, Mapping):
        return record(**value)
    return Constant(value)


def as_expression(value: Union[Expression, Callable[[Any], Any], None]) -> Optional[Expression]:
    """Normalise a node or a callable into an expression tree."""
    if value is None or isinstance(value, Expression):
        return value
    if callable(value):
        return Lambda.from_callable(value)
    raise TypeError(f"Cannot build an expression from {type(value).__name__}")


# --- Builders ---

def field(name: str, parameter: Optional[Parameter] = None) -> Member:
    return Member(parameter if parameter is not None else Parameter(), name)


def constant(value: Any) -> Constant:
    return Constant(value)


def field_equals(name: str, value: Any) -> Binary:
    return Binary(NodeType.EQUAL, field(name), _coerce(value))


def field_not_equals(name: str, value: Any) -> Binary:
    return Binary(NodeType.NOT_EQUAL, field(name), _coerce(value))


def field_greater_than(name: str, value: Any) -> Binary:
    return Binary(NodeType.GREATER_THAN, field(name), _coerce(value))


def field_greater_than_or_equal(name: str, value: Any) -> Binary:
    return Binary(NodeType.GREATER_THAN_OR_EQUAL, field(name), _coerce(value))


def field_less_than(name: str, value: Any) -> Binary:
    return Binary(NodeType.LESS_THAN, field(name), _coerce(value))


def field_less_than_or_equal(name: str, value: Any) -> Binary:
    return Binary(NodeType.LESS_THAN_OR_EQUAL, field(name), _coerce(value))


def not_(operand: Expression) -> Unary:
    return Unary(NodeType.NOT, _coerce(operand))


def and_(*conditions: Expression) -> Expression:
    """Left-fold conditions with AND_ALSO."""
    if not conditions:
        raise ValueError("and_() requires at least one condition")
    return reduce(lambda left, right: Binary(NodeType.AND_ALSO, left, _coerce(right)), conditions[1:], _coerce(conditions[0]))


def or_(*conditions: Expression) -> Expression:
    """Left-fold conditions with OR_ELSE."""
    if not conditions:
        raise ValueError("or_() requires at least one condition")
    return reduce(lambda left, right: Binary(NodeType.OR_ELSE, left, _coerce(right)), conditions[1:], _coerce(conditions[0]))


def record(*members: Member, into: Optional[type] = None, **aliased: Expression) -> Record:
    """Build a projection; positional members keep their own name, keyword members are aliased."""
    fields = []
    for member in members:
        if not isinstance(member, Member):
            raise TypeError(f"Positional projection items must be members, got {type(member).__name__}")
        fields.append((member.name, member))
    for alias, expression in aliased.items():
        fields.append((alias, _coerce(expression)))
    return Record(tuple(fields), into)
