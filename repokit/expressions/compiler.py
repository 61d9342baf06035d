"""
Compile expression trees into SQLAlchemy clauses against a mapped model.
"""

import operator
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple, Type

import sqlalchemy as sa
from sqlalchemy.sql.elements import ClauseElement

from repokit.exceptions import QueryError, UnsupportedOperatorError
from .nodes import Binary, Constant, Expression, Lambda, Member, NodeType, Parameter, Record, Unary, as_expression

_BINARY_OPERATORS = {
    NodeType.AND_ALSO: sa.and_,
    NodeType.OR_ELSE: sa.or_,
    NodeType.EQUAL: operator.eq,
    NodeType.NOT_EQUAL: operator.ne,
    NodeType.GREATER_THAN: operator.gt,
    NodeType.GREATER_THAN_OR_EQUAL: operator.ge,
    NodeType.LESS_THAN: operator.lt,
    NodeType.LESS_THAN_OR_EQUAL: operator.le,
    NodeType.ADD: operator.add,
    NodeType.SUBTRACT: operator.sub,
    NodeType.MULTIPLY: operator.mul,
    NodeType.DIVIDE: operator.truediv,
    NodeType.MODULO: operator.mod,
}


def _is_sql(value: Any) -> bool:
    return isinstance(value, ClauseElement) or hasattr(value, "__clause_element__")


def resolve_attribute(model: Type[Any], name: str) -> Any:
    """Mapped attribute of ``model`` by name, matched case-insensitively."""
    keys = {key.lower(): key for key in sa.inspect(model).attrs.keys()}
    key = name if name in keys.values() else keys.get(name.lower())
    if key is None:
        raise QueryError(f"{model.__name__} has no attribute '{name}'", entity_name=model.__name__, member=name)
    return getattr(model, key)


def resolve_relationship(model: Type[Any], name: str) -> Any:
    """Mapped relationship of ``model`` by name, matched case-insensitively."""
    keys = {key.lower(): key for key in sa.inspect(model).relationships.keys()}
    key = keys.get(name.lower())
    if key is None:
        raise QueryError(f"{model.__name__} has no relation '{name}'", entity_name=model.__name__, include=name)
    return getattr(model, key)


@dataclass(frozen=True)
class CompiledProjection:
    columns: Tuple[Tuple[str, Any], ...]
    scalar: bool
    into: Optional[type] = None

    def shape(self, row: Any) -> Any:
        """Turn one result row into the projected result."""
        values = dict(row._mapping)
        if self.into is not None:
            return self.into(**values)
        return values


class ClauseCompiler:
    """Visitor producing SQLAlchemy elements from expression nodes."""

    def __init__(self, model: Type[Any]):
        self.model = model

    def predicate(self, expression: Any) -> Any:
        """Compile a filter into a WHERE criterion."""
        result = self.visit(as_expression(expression))
        if _is_sql(result):
            return result
        return sa.true() if result else sa.false()

    def projection(self, expression: Any) -> CompiledProjection:
        """Compile a selector into the columns to select and the shape of each result."""
        node = as_expression(expression)
        if isinstance(node, Lambda):
            node = node.body
        if isinstance(node, Member):
            return CompiledProjection(((node.name, self.visit(node)),), scalar=True)
        if isinstance(node, Record):
            columns: List[Tuple[str, Any]] = []
            for alias, member in node.fields:
                column = self.visit(member)
                if not _is_sql(column):
                    column = sa.literal(column)
                columns.append((alias, column.label(alias)))
            return CompiledProjection(tuple(columns), scalar=False, into=node.into)
        raise QueryError(
            f"Unsupported projection for {self.model.__name__}: {type(node).__name__}",
            entity_name=self.model.__name__,
        )

    def visit(self, node: Any) -> Any:
        method = getattr(self, f"visit_{type(node).__name__}", None)
        if method is None or not isinstance(node, Expression):
            raise UnsupportedOperatorError(type(node).__name__, kind="Expression")
        return method(node)

    def visit_Lambda(self, node: Lambda) -> Any:
        return self.visit(node.body)

    def visit_Member(self, node: Member) -> Any:
        return resolve_attribute(self.model, node.name)

    def visit_Constant(self, node: Constant) -> Any:
        return node.value

    def visit_Parameter(self, node: Parameter) -> Any:
        raise QueryError(f"A bare {self.model.__name__} parameter cannot be used as a value", entity_name=self.model.__name__)

    def visit_Unary(self, node: Unary) -> Any:
        operand = self.visit(node.operand)
        if node.node_type is NodeType.NOT:
            return sa.not_(operand) if _is_sql(operand) else not operand
        if node.node_type is NodeType.NEGATE:
            return -operand
        raise UnsupportedOperatorError(node.node_type, kind="Unary operator")

    def visit_Binary(self, node: Binary) -> Any:
        compile_operator = _BINARY_OPERATORS.get(node.node_type)
        if compile_operator is None:
            raise UnsupportedOperatorError(node.node_type, kind="Binary operator")
        left = self.visit(node.left)
        right = self.visit(node.right)
        if not _is_sql(left) and not _is_sql(right):
            left = sa.literal(left)
        return compile_operator(left, right)
