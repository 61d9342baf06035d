"""Expression describer test cases."""
import pytest

from repokit.exceptions import UnsupportedOperatorError
from repokit.expressions import (
    Expression,
    ExpressionDescriber,
    NodeType,
    Parameter,
    and_,
    describe,
    field_equals,
    field_greater_than,
    field_not_equals,
    not_,
    record,
)


class TestDescribe:
    """Rendering of supported nodes."""

    def test_none_is_placeholder(self):
        """Test none is placeholder."""
        assert describe(None) == "<none>"

    def test_comparison_drops_parameter(self):
        """Test comparison drops parameter."""
        assert describe(lambda e: e.Age > 18) == "(Age > 18) "

    def test_not_prefixes_operand(self):
        """Test not prefixes operand."""
        assert describe(lambda e: ~(e.Name == "x")) == '!(Name == "x") '

    def test_nested_binary_keeps_trailing_spaces(self):
        """Test nested binary keeps trailing spaces."""
        x = Parameter()
        expression = (x.age > 18) & (x.name != None)  # noqa: E711

        assert describe(expression) == "((age > 18)  && (name != null) ) "

    def test_builders_render_like_operators(self):
        """Test builders render like operators."""
        built = and_(field_greater_than("age", 18), field_not_equals("name", None))

        assert describe(built) == "((age > 18)  && (name != null) ) "

    def test_or_and_ordering_operators(self):
        """Test or and ordering operators."""
        x = Parameter()

        assert describe((x.age <= 10) | (x.age >= 65)) == "((age <= 10)  || (age >= 65) ) "
        assert describe(x.age < 3) == "(age < 3) "

    def test_constant_rendering(self):
        """Test constant rendering."""
        x = Parameter()

        assert describe(x.active == True) == "(active == True) "  # noqa: E712
        assert describe(x.score == 1.5) == "(score == 1.5) "
        assert describe(field_equals("name", "Deadpond")) == '(name == "Deadpond") '

    def test_not_builder(self):
        """Test not builder."""
        assert describe(not_(field_equals("id", "h1"))) == '!(id == "h1") '

    def test_projection_record(self):
        """Test projection record."""
        x = Parameter()

        assert describe(record(x.name, years=x.age)) == "{name, years = age}"
        assert describe(lambda h: (h.name, h.age)) == "{name, age}"

    def test_member_projection(self):
        """Test member projection."""
        assert describe(lambda h: h.name) == "name"

    def test_describer_accumulates_text(self):
        """Test describer accumulates text."""
        describer = ExpressionDescriber()
        describer.visit(field_equals("id", 7))

        assert str(describer) == "(id == 7) "


class TestUnsupportedNodes:
    """Node kinds outside the describable set are rejected."""

    def test_arithmetic_binary_rejected(self):
        """Test arithmetic binary rejected."""
        with pytest.raises(UnsupportedOperatorError) as exc_info:
            describe(lambda e: e.age + 1 > 18)

        assert exc_info.value.node_type is NodeType.ADD
        assert exc_info.value.message == "Binary operator 'Add' is not supported."

    def test_negate_rejected(self):
        """Test negate rejected."""
        x = Parameter()

        with pytest.raises(UnsupportedOperatorError) as exc_info:
            describe(-x.age)

        assert exc_info.value.node_type is NodeType.NEGATE

    def test_unknown_node_class_rejected(self):
        """Test unknown node class rejected."""
        class Custom(Expression):
            __slots__ = ()

        with pytest.raises(UnsupportedOperatorError, match="Custom"):
            describe(Custom())

    def test_non_expression_value_rejected(self):
        """Test non expression value rejected."""
        with pytest.raises(TypeError):
            describe(42)
