"""
Filter and projection expressions: tree nodes, builders and the readable describer.
"""

from .describer import ExpressionDescriber, describe
from .nodes import (
    Binary,
    Constant,
    Expression,
    Lambda,
    Member,
    NodeType,
    Parameter,
    Record,
    Unary,
    and_,
    as_expression,
    constant,
    field,
    field_equals,
    field_greater_than,
    field_greater_than_or_equal,
    field_less_than,
    field_less_than_or_equal,
    field_not_equals,
    not_,
    or_,
    record,
)

__all__ = [
    "Expression",
    "NodeType",
    "Parameter",
    "Member",
    "Constant",
    "Unary",
    "Binary",
    "Lambda",
    "Record",
    "as_expression",
    "field",
    "constant",
    "field_equals",
    "field_not_equals",
    "field_greater_than",
    "field_greater_than_or_equal",
    "field_less_than",
    "field_less_than_or_equal",
    "not_",
    "and_",
    "or_",
    "record",
    "describe",
    "ExpressionDescriber",
]
