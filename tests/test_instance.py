"""Tests for dynabean instances."""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from typing import Optional

import pytest

from dynabeans import (
    ArgumentCountError,
    DefinitionRegistry,
    DynaBean,
    PropertyStore,
    TypeMismatchError,
    UnsupportedOperationError,
    access_properties,
    is_dynabean,
)
from dynabeans.instance import InstanceDispatcher, create_instance, dispatcher_of


class Person(DynaBean):
    """Someone with a name and an age."""

    @abstractmethod
    def getName(self) -> str: ...

    @abstractmethod
    def setName(self, name: str) -> None: ...

    @abstractmethod
    def getAge(self) -> int: ...

    @abstractmethod
    def setAge(self, age: int) -> None: ...

    @abstractmethod
    def isActive(self) -> bool: ...

    @abstractmethod
    def setActive(self, active: bool) -> None: ...

    @abstractmethod
    def getNickname(self) -> Optional[str]: ...

    @abstractmethod
    def compute(self, x: int) -> int: ...

    def greet(self) -> str:
        """Say hello."""
        return "Hello, " + self.getName()

    def introduce(self, other: Person, punctuation: str = ".") -> str:
        return f"{self.greet()}, meet {other.getName()}{punctuation}"


class Pet(DynaBean):
    @abstractmethod
    def getName(self) -> str: ...

    @abstractmethod
    def setName(self, name: str) -> None: ...


class Account(DynaBean):
    @abstractmethod
    def get_owner(self) -> str: ...

    @abstractmethod
    def set_owner(self, owner: str) -> None: ...

    @abstractmethod
    def is_open(self) -> bool: ...

    @abstractmethod
    def set_open(self, value: bool) -> None: ...


class Point(ABC):
    """A contract that does not derive from DynaBean."""

    @abstractmethod
    def getX(self) -> float: ...

    @abstractmethod
    def setX(self, x: float) -> None: ...


class Concrete(DynaBean):
    def clone(self):
        return self


@pytest.fixture
def registry():
    return DefinitionRegistry()


@pytest.fixture
def person(registry):
    return registry.new_instance(Person)


class TestCreation:
    """Tests for creating instances."""

    def test_implements_contract(self, person):
        assert isinstance(person, Person)
        assert isinstance(person, DynaBean)
        assert is_dynabean(person)

    def test_synthesized_class(self, person):
        assert type(person).__name__ == "PersonDynaBean"
        assert type(person).__doc__ == Person.__doc__

    def test_synthesized_class_is_shared(self, registry):
        assert type(registry.new_instance(Person)) is type(registry.new_instance(Person))

    def test_forwarders_keep_docs(self, person):
        assert person.greet.__doc__ == "Say hello."
        assert person.greet.__name__ == "greet"

    def test_plain_abc_contract(self, registry):
        point = registry.new_instance(Point)
        assert isinstance(point, Point)
        assert isinstance(point, DynaBean)
        point.setX(1.5)
        assert point.getX() == 1.5

    def test_create_instance_with_store(self, registry):
        definition = registry.definition_for(Person)
        bean = create_instance(definition, PropertyStore({"name": "Ann"}))
        assert bean.getName() == "Ann"

    def test_not_dynabeans(self):
        assert not is_dynabean(object())
        assert not is_dynabean("Person")
        assert not is_dynabean(Concrete())
        assert dispatcher_of(Concrete()) is None

    def test_dispatcher(self, person, registry):
        dispatcher = dispatcher_of(person)
        assert isinstance(dispatcher, InstanceDispatcher)
        assert dispatcher.definition is registry.definition_for(Person)
        assert dispatcher.store is access_properties(person)


class TestAccessors:
    """Tests for getter and setter calls."""

    def test_resting_defaults(self, person):
        """Test values returned before any property is set."""
        assert person.getName() is None
        assert person.getAge() == 0
        assert person.isActive() is False
        assert person.getNickname() is None

    def test_set_and_get(self, person):
        person.setName("Ann")
        person.setAge(42)
        person.setActive(True)
        assert person.getName() == "Ann"
        assert person.getAge() == 42
        assert person.isActive() is True

    def test_setter_returns_none(self, person):
        assert person.setName("Ann") is None

    def test_setter_keyword_argument(self, person):
        person.setName(name="Ann")
        assert person.getName() == "Ann"

    def test_set_none_unsets(self, person):
        """Test that assigning None removes the property."""
        person.setName("Ann")
        person.setName(None)
        assert person.getName() is None
        assert "name" not in access_properties(person)

    def test_set_none_on_primitive(self, person):
        person.setAge(3)
        with pytest.raises(TypeMismatchError):
            person.setAge(None)
        assert person.getAge() == 3

    def test_set_wrong_type(self, person):
        """Test that a failed set leaves the previous value in place."""
        person.setAge(3)
        with pytest.raises(TypeMismatchError) as exc_info:
            person.setAge(3.5)
        assert "3.5 is not an instance of type: <class 'int'>" in str(exc_info.value)
        assert person.getAge() == 3

    def test_bool_is_not_an_int(self, person):
        with pytest.raises(TypeMismatchError):
            person.setAge(True)

    def test_getter_rejects_arguments(self, person):
        with pytest.raises(ArgumentCountError):
            person.getName(1)

    def test_setter_needs_one_argument(self, person):
        with pytest.raises(ArgumentCountError):
            person.setName()
        with pytest.raises(ArgumentCountError):
            person.setName("Ann", "Bob")

    def test_getter_checks_stored_value(self, person):
        """Test that a value placed directly in the store is type-checked on read."""
        access_properties(person)["age"] = "old"
        with pytest.raises(TypeMismatchError):
            person.getAge()

    def test_store_writes_are_visible(self, person):
        access_properties(person)["name"] = "Ann"
        assert person.getName() == "Ann"

    def test_snake_case_accessors(self, registry):
        account = registry.new_instance(Account)
        assert account.is_open() is False
        account.set_owner("Ann")
        account.set_open(True)
        assert account.get_owner() == "Ann"
        assert account.is_open() is True
        assert dict(access_properties(account)) == {"owner": "Ann", "open": True}

    def test_float_accepts_int(self, registry):
        point = registry.new_instance(Point)
        point.setX(2)
        assert point.getX() == 2


class TestDefaultMethods:
    """Tests for pass-through methods."""

    def test_default_method_sees_instance(self, person):
        person.setName("Ann")
        assert person.greet() == "Hello, Ann"

    def test_default_method_arguments(self, person, registry):
        other = registry.new_instance(Person, name="Bob")
        person.setName("Ann")
        assert person.introduce(other) == "Hello, Ann, meet Bob."
        assert person.introduce(other, punctuation="!") == "Hello, Ann, meet Bob!"

    def test_default_method_errors_propagate(self, person):
        with pytest.raises(TypeError):
            person.greet()

    def test_unmapped_abstract_method(self, person):
        """Test that a method with no behaviour is unsupported."""
        with pytest.raises(UnsupportedOperationError) as exc_info:
            person.compute(1)
        assert exc_info.value.method_name == "compute"
        assert str(exc_info.value) == "Unimplemented dynabean method: Person.compute"

    def test_unsupported_is_not_implemented(self, person):
        with pytest.raises(NotImplementedError):
            person.compute(1)


class TestIdentity:
    """Tests for equality, hashing and repr."""

    def test_equal_regardless_of_assignment_order(self, registry):
        first = registry.new_instance(Person)
        first.setName("Ann")
        first.setAge(3)
        second = registry.new_instance(Person)
        second.setAge(3)
        second.setName("Ann")
        assert first == second
        assert hash(first) == hash(second)
        assert len({first, second}) == 1

    def test_different_values(self, registry):
        first = registry.new_instance(Person, age=3)
        second = registry.new_instance(Person, age=4)
        assert first != second

    def test_equal_to_itself(self, person):
        assert person == person

    def test_empty_instances_are_equal(self, registry):
        assert registry.new_instance(Person) == registry.new_instance(Person)

    def test_not_equal_to_other_objects(self, person):
        assert person != "Person"
        assert person != access_properties(person)
        assert person is not None

    def test_different_contracts(self, registry):
        """Test that equal stores do not make different contracts equal."""
        person = registry.new_instance(Person, name="Rex")
        pet = registry.new_instance(Pet, name="Rex")
        assert person != pet

    def test_different_registries(self):
        first = DefinitionRegistry().new_instance(Person)
        second = DefinitionRegistry().new_instance(Person)
        assert first != second

    def test_hash_follows_value(self, person):
        before = hash(person)
        person.setName("Ann")
        assert hash(person) != before

    def test_hash_with_list_value(self, registry):
        first = registry.new_instance(Person)
        second = registry.new_instance(Person)
        access_properties(first)["tags"] = ["a", "b"]
        access_properties(second)["tags"] = ["a", "b"]
        assert hash(first) == hash(second)

    def test_hash_with_unhashable_value(self, registry):
        """Test that hashing never fails on mutable property values."""
        first = registry.new_instance(Person, name="Ann")
        second = registry.new_instance(Person, name="Ann")
        access_properties(first)["data"] = bytearray(b"x")
        access_properties(second)["data"] = bytearray(b"x")
        assert first == second
        assert hash(first) == hash(second)

    def test_repr(self, person):
        person.setName("Ann")
        assert repr(person) == "DynaBean(type=Person)"


class TestClone:
    """Tests for cloning instances."""

    def test_clone_is_equal_and_distinct(self, registry):
        original = registry.new_instance(Person, name="Ann", age=3)
        copied = original.clone()
        assert copied == original
        assert copied is not original
        assert type(copied) is type(original)
        assert access_properties(copied) is not access_properties(original)

    def test_clone_is_independent(self, registry):
        original = registry.new_instance(Person, name="Ann")
        copied = original.clone()
        copied.setName("Bob")
        assert original.getName() == "Ann"
        assert copied != original

    def test_copy_module(self, registry):
        original = registry.new_instance(Person, name="Ann")
        access_properties(original)["tags"] = ["a"]
        for copied in (copy.copy(original), copy.deepcopy(original)):
            assert copied == original
            assert copied is not original
            assert access_properties(copied)["tags"] is not access_properties(original)["tags"]

    def test_clone_contract_without_dynabean_base(self, registry):
        point = registry.new_instance(Point)
        point.setX(1.0)
        assert point.clone().getX() == 1.0
