"""
Readable rendering of filter and projection expressions, for tracing only.
"""

from typing import Any, Callable, List, Optional, Union

from repokit.exceptions import UnsupportedOperatorError
from .nodes import Binary, Constant, Expression, Lambda, Member, NodeType, Parameter, Record, Unary, as_expression

_BINARY_TOKENS = {
    NodeType.AND_ALSO: "&&",
    NodeType.OR_ELSE: "||",
    NodeType.EQUAL: "==",
    NodeType.NOT_EQUAL: "!=",
    NodeType.GREATER_THAN: ">",
    NodeType.GREATER_THAN_OR_EQUAL: ">=",
    NodeType.LESS_THAN: "<",
    NodeType.LESS_THAN_OR_EQUAL: "<=",
}


class ExpressionDescriber:
    """Visitor that appends a textual form of each node it visits."""

    def __init__(self):
        self._parts: List[str] = []

    def describe(self, expression: Expression) -> str:
        """Visit the expression and return the text built so far."""
        self.visit(expression)
        return str(self)

    def __str__(self) -> str:
        return "".join(self._parts)

    def visit(self, node: Any) -> None:
        method = getattr(self, f"visit_{type(node).__name__}", None)
        if method is None or not isinstance(node, Expression):
            raise UnsupportedOperatorError(type(node).__name__, kind="Expression")
        method(node)

    def visit_Unary(self, node: Unary) -> None:
        if node.node_type is not NodeType.NOT:
            raise UnsupportedOperatorError(node.node_type, kind="Unary operator")
        self._parts.append("!")
        self.visit(node.operand)

    def visit_Binary(self, node: Binary) -> None:
        token = _BINARY_TOKENS.get(node.node_type)
        if token is None:
            raise UnsupportedOperatorError(node.node_type, kind="Binary operator")
        self._parts.append("(")
        self.visit(node.left)
        self._parts.append(f" {token} ")
        self.visit(node.right)
        self._parts.append(") ")

    def visit_Constant(self, node: Constant) -> None:
        if node.value is None:
            self._parts.append("null")
        elif isinstance(node.value, str):
            self._parts.append(f'"{node.value}"')
        else:
            self._parts.append(str(node.value))

    def visit_Member(self, node: Member) -> None:
        self._parts.append(node.name)

    def visit_Parameter(self, node: Parameter) -> None:
        # the bound entity is implied
        pass

    def visit_Lambda(self, node: Lambda) -> None:
        self.visit(node.body)

    def visit_Record(self, node: Record) -> None:
        self._parts.append("{")
        for index, (alias, expression) in enumerate(node.fields):
            if index:
                self._parts.append(", ")
            if not (isinstance(expression, Member) and expression.name == alias):
                self._parts.append(f"{alias} = ")
            self.visit(expression)
        self._parts.append("}")


def describe(expression: Union[Expression, Callable[[Any], Any], None]) -> str:
    """Readable form of an expression; ``"<none>"`` when there is none."""
    node: Optional[Expression] = as_expression(expression)
    if node is None:
        return "<none>"
    return ExpressionDescriber().describe(node)
