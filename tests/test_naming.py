"""Tests for the accessor naming convention."""

import pytest

from dynabeans.naming import AccessorKind, classify_accessor, property_name_for


class TestClassifyGetters:
    """Tests for getter classification."""

    def test_get_prefix(self):
        """Test a plain get-prefixed getter."""
        accessor = classify_accessor("getFirstName", 0)
        assert accessor is not None
        assert accessor.kind is AccessorKind.GETTER
        assert accessor.property_name == "firstName"
        assert accessor.prefix == "get"
        assert accessor.is_getter is True
        assert accessor.is_setter is False

    def test_is_prefix_boolean(self):
        """Test that is-prefixed getters need a boolean return type."""
        accessor = classify_accessor("isActive", 0, returns_boolean=True)
        assert accessor is not None
        assert accessor.kind is AccessorKind.GETTER
        assert accessor.property_name == "active"
        assert accessor.prefix == "is"

    def test_is_prefix_not_boolean(self):
        assert classify_accessor("isActive", 0, returns_boolean=False) is None

    def test_getter_with_parameters(self):
        """Test that a get-prefixed method with arguments is not a getter."""
        assert classify_accessor("getName", 1) is None
        assert classify_accessor("getName", 2) is None

    def test_get_prefix_ignores_boolean_flag(self):
        accessor = classify_accessor("getValid", 0, returns_boolean=True)
        assert accessor.property_name == "valid"
        assert accessor.prefix == "get"


class TestClassifySetters:
    """Tests for setter classification."""

    def test_set_prefix(self):
        accessor = classify_accessor("setFirstName", 1)
        assert accessor is not None
        assert accessor.kind is AccessorKind.SETTER
        assert accessor.property_name == "firstName"
        assert accessor.is_setter is True

    def test_setter_arity(self):
        """Test that setters take exactly one argument."""
        assert classify_accessor("setName", 0) is None
        assert classify_accessor("setName", 2) is None

    def test_getter_and_setter_share_property(self):
        getter = classify_accessor("getAge", 0)
        setter = classify_accessor("setAge", 1)
        assert getter.property_name == setter.property_name == "age"


class TestUnmappedNames:
    """Tests for names that are never accessors."""

    @pytest.mark.parametrize("name", ["get", "set", "is", "foo", "isX"])
    def test_short_names(self, name):
        assert classify_accessor(name, 0, returns_boolean=True) is None
        assert classify_accessor(name, 1) is None

    def test_no_prefix(self):
        assert classify_accessor("compute", 0) is None
        assert classify_accessor("update", 1) is None

    def test_four_character_names(self):
        """Test the shortest accessor names."""
        assert classify_accessor("getX", 0).property_name == "x"
        assert classify_accessor("setX", 1).property_name == "x"


class TestSnakeCase:
    """Tests for snake_case accessor names."""

    def test_snake_case_getter(self):
        accessor = classify_accessor("get_first_name", 0)
        assert accessor.property_name == "first_name"

    def test_snake_case_setter(self):
        accessor = classify_accessor("set_first_name", 1)
        assert accessor.property_name == "first_name"

    def test_snake_case_is(self):
        accessor = classify_accessor("is_active", 0, returns_boolean=True)
        assert accessor.property_name == "active"

    def test_prefix_only(self):
        """Test that a bare prefix with an underscore has no property."""
        assert classify_accessor("get_", 0) is None
        assert classify_accessor("set_", 1) is None


class TestPropertyNameFor:
    """Tests for property name derivation."""

    def test_lower_cases_first_character(self):
        assert property_name_for("getFirstName", 3) == "firstName"
        assert property_name_for("getURL", 3) == "uRL"

    def test_strips_one_underscore(self):
        assert property_name_for("get_name", 3) == "name"
        assert property_name_for("get__name", 3) == "_name"

    def test_empty_rest(self):
        assert property_name_for("get", 3) is None
