"""Expression tree and builder test cases."""
import pytest

from repokit.expressions import (
    Binary,
    Constant,
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
    or_,
    record,
)


class TestOperators:
    """Python operators build nodes."""

    def test_comparison_builds_binary(self):
        """Test comparison builds binary."""
        x = Parameter()
        node = x.age >= 18

        assert isinstance(node, Binary)
        assert node.node_type is NodeType.GREATER_THAN_OR_EQUAL
        assert isinstance(node.left, Member) and node.left.name == "age"
        assert isinstance(node.right, Constant) and node.right.value == 18

    def test_reflected_comparison_swaps_sides(self):
        """Test reflected comparison swaps sides."""
        x = Parameter()
        node = 18 < x.age

        assert node.node_type is NodeType.GREATER_THAN
        assert node.left.name == "age"

    def test_logical_operators(self):
        """Test logical operators."""
        x = Parameter()

        assert (x.a & x.b).node_type is NodeType.AND_ALSO
        assert (x.a | x.b).node_type is NodeType.OR_ELSE
        assert isinstance(~x.a, Unary) and (~x.a).node_type is NodeType.NOT

    def test_boolean_context_is_rejected(self):
        """Test boolean context is rejected."""
        x = Parameter()

        with pytest.raises(TypeError):
            bool(x.age > 18)

        with pytest.raises(TypeError):
            as_expression(lambda h: h.age > 18 and h.name == "x")

    def test_nodes_are_immutable(self):
        """Test nodes are immutable."""
        x = Parameter()
        node = x.age > 1

        with pytest.raises(AttributeError):
            x.label = "y"
        with pytest.raises(AttributeError):
            node.left = constant(1)

    def test_private_names_are_not_members(self):
        """Test private names are not members."""
        with pytest.raises(AttributeError):
            Parameter()._hidden


class TestBuilders:
    def test_field_uses_given_parameter(self):
        """Test field uses given parameter."""
        x = Parameter("hero")

        assert field("name", x).expression is x

    def test_and_folds_left(self):
        """Test and folds left."""
        a, b, c = field("a") == 1, field("b") == 2, field("c") == 3
        node = and_(a, b, c)

        assert node.right is c
        assert node.left.left is a and node.left.right is b

    def test_single_condition_is_returned(self):
        """Test single condition is returned."""
        condition = field("a") == 1

        assert or_(condition) is condition

    def test_empty_fold_rejected(self):
        """Test empty fold rejected."""
        with pytest.raises(ValueError):
            and_()
        with pytest.raises(ValueError):
            or_()

    def test_record_keeps_member_names_and_aliases(self):
        """Test record keeps member names and aliases."""
        x = Parameter()
        node = record(x.name, years=x.age)

        assert [alias for alias, _ in node.fields] == ["name", "years"]
        assert node.into is None

    def test_record_positional_items_must_be_members(self):
        """Test record positional items must be members."""
        with pytest.raises(TypeError):
            record(constant(1))


class TestCallableCapture:
    def test_parameter_named_after_argument(self):
        """Test parameter named after argument."""
        node = Lambda.from_callable(lambda hero: hero.age > 1)

        assert repr(node.parameter) == "Parameter('hero')"
        assert node.body.left.expression is node.parameter

    def test_tuple_result_becomes_record(self):
        """Test tuple result becomes record."""
        node = as_expression(lambda h: (h.name, h.age))

        assert isinstance(node.body, Record)
        assert [alias for alias, _ in node.body.fields] == ["name", "age"]

    def test_dict_result_becomes_aliased_record(self):
        """Test dict result becomes aliased record."""
        node = as_expression(lambda h: {"years": h.age})

        assert node.body.fields[0][0] == "years"

    def test_plain_value_becomes_constant(self):
        """Test plain value becomes constant."""
        node = as_expression(lambda h: True)

        assert isinstance(node.body, Constant) and node.body.value is True

    def test_nodes_pass_through(self):
        """Test nodes pass through."""
        node = field("a") == 1

        assert as_expression(node) is node
        assert as_expression(None) is None
