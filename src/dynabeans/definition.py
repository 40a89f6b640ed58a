"""Interface definitions: how each method of a contract behaves.

A contract's methods are classified once into getters, setters and
pass-through (default) methods. The result is an immutable
``InterfaceDefinition`` shared by every instance of the contract.
"""

from __future__ import annotations

import functools
import inspect
import logging
import typing
from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping, MutableMapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable

from dynabeans.errors import (
    ArgumentCountError,
    ContractIntrospectionError,
    TypeMismatchError,
)
from dynabeans.naming import classify_accessor
from dynabeans.types import ANY_TYPE, ValueType, resolve_value_type

logger = logging.getLogger(__name__)

_NOT_INSTANCE_METHODS = (staticmethod, classmethod, property, type)

_METHOD_DESCRIPTORS = (functools.partialmethod, functools.singledispatchmethod)


class MethodBehavior(ABC):
    """What happens when a contract method is called on an instance."""

    method_name: str

    @property
    @abstractmethod
    def kind(self) -> str:
        """Short name of the behaviour: getter, setter or pass-through."""

    @abstractmethod
    def invoke(
        self,
        instance: Any,
        store: MutableMapping[str, Any],
        args: tuple[Any, ...] = (),
        kwargs: Mapping[str, Any] | None = None,
    ) -> Any:
        """Run the behaviour for a call on ``instance`` backed by ``store``."""


@dataclass(frozen=True)
class GetterMethod(MethodBehavior):
    """Reads a property, falling back to the type's resting default."""

    method_name: str
    property_name: str
    value_type: ValueType = ANY_TYPE
    default_value: Any = field(init=False, default=None)

    def __post_init__(self) -> None:
        object.__setattr__(self, "default_value", self.value_type.resting_default)

    @property
    def kind(self) -> str:
        return "getter"

    def invoke(self, instance, store, args=(), kwargs=None):
        _check_arguments(0, args, kwargs)
        value = store.get(self.property_name)
        if value is None:
            return self.default_value
        if self.value_type.accepts(value):
            return value
        raise TypeMismatchError(value, self.value_type.annotation)


@dataclass(frozen=True)
class SetterMethod(MethodBehavior):
    """Writes a property after checking the value against its declared type."""

    method_name: str
    property_name: str
    value_type: ValueType = ANY_TYPE

    @property
    def kind(self) -> str:
        return "setter"

    def invoke(self, instance, store, args=(), kwargs=None):
        (value,) = _check_arguments(1, args, kwargs)
        if value is None:
            if not self.value_type.permits_absence:
                raise TypeMismatchError(value, self.value_type.annotation)
        elif not self.value_type.accepts(value):
            raise TypeMismatchError(value, self.value_type.annotation)
        if value is None:
            store.pop(self.property_name, None)
        else:
            store[self.property_name] = value
        return None


@dataclass(frozen=True)
class PassThroughMethod(MethodBehavior):
    """Runs logic supplied by the contract, with the live instance as self."""

    method_name: str
    function: Callable[..., Any]

    @property
    def kind(self) -> str:
        return "pass-through"

    def invoke(self, instance, store, args=(), kwargs=None):
        return self.function(instance, *args, **(kwargs or {}))


def _check_arguments(
    expected: int, args: tuple[Any, ...], kwargs: Mapping[str, Any] | None
) -> tuple[Any, ...]:
    """Return all call arguments, checking that there are ``expected`` of them."""
    values = tuple(args) + tuple((kwargs or {}).values())
    if len(values) != expected:
        raise ArgumentCountError(expected, values)
    return values


class InterfaceDefinition:
    """Immutable classification of a contract's methods.

    Methods are keyed by name, in declaration order (own methods first, then
    the ones merged in from parent contracts). Methods that are neither
    accessors nor default methods have no entry.
    """

    def __init__(self, contract: type, methods: Mapping[str, MethodBehavior]) -> None:
        self._contract = contract
        self._methods = MappingProxyType(dict(methods))

    @property
    def contract(self) -> type:
        """The contract class this definition describes."""
        return self._contract

    @property
    def contract_name(self) -> str:
        return self._contract.__name__

    @property
    def methods(self) -> Mapping[str, MethodBehavior]:
        """Read-only mapping from method name to behaviour."""
        return self._methods

    def lookup(self, method_name: str) -> MethodBehavior | None:
        """Get the behaviour of a method, or None if it is unmapped."""
        return self._methods.get(method_name)

    def property_names(self) -> list[str]:
        """Return the sorted names of all properties that have a getter."""
        return sorted(
            {b.property_name for b in self._methods.values() if isinstance(b, GetterMethod)}
        )

    def __contains__(self, method_name: object) -> bool:
        return method_name in self._methods

    def __iter__(self) -> Iterator[str]:
        return iter(self._methods)

    def __len__(self) -> int:
        return len(self._methods)

    def __repr__(self) -> str:
        return f"InterfaceDefinition({self.contract_name}, methods={list(self._methods)})"


class DefinitionBuilder:
    """Builds an InterfaceDefinition for one contract class.

    The contract's own methods are classified on construction. Parent
    definitions can then be merged in; a method the contract declares itself
    always wins over the parent's. ``finalize`` hands out the definition and
    closes the builder.
    """

    def __init__(self, contract: type) -> None:
        if not isinstance(contract, type):
            raise TypeError(f"Contract must be a class, got: {contract!r}")
        self._contract = contract
        self._methods: dict[str, MethodBehavior] | None = {}
        self._definition: InterfaceDefinition | None = None

        hints = _type_hints_by_method(contract)
        for name, member in declared_methods(contract):
            behavior = define_method(contract, name, member, hints.get(name, {}))
            if behavior is not None:
                self._methods[name] = behavior
                logger.debug(
                    "%s.%s classified as %s", contract.__name__, name, behavior.kind
                )

    def merge(self, parent: InterfaceDefinition) -> DefinitionBuilder:
        """Copy in the parent's behaviours for methods not declared here."""
        if self._methods is None:
            raise RuntimeError(
                f"Definition of {self._contract.__name__} is already finalized"
            )
        for name, behavior in parent.methods.items():
            if name not in self._methods:
                self._methods[name] = behavior
        logger.debug("Merged %s into %s", parent.contract_name, self._contract.__name__)
        return self

    def finalize(self) -> InterfaceDefinition:
        """Return the immutable definition. Calling again returns the same one."""
        if self._definition is None:
            methods = self._methods or {}
            self._methods = None
            self._definition = InterfaceDefinition(self._contract, methods)
        return self._definition


def build_definition(contract: type, *parents: InterfaceDefinition) -> InterfaceDefinition:
    """Classify a contract and merge the given parent definitions, in order."""
    builder = DefinitionBuilder(contract)
    for parent in parents:
        builder.merge(parent)
    return builder.finalize()


def declared_methods(contract: type) -> list[tuple[str, Any]]:
    """Return the instance methods a class declares itself, in order."""
    methods = []
    for name, member in vars(contract).items():
        if name.startswith("__") and name.endswith("__"):
            continue
        if isinstance(member, _NOT_INSTANCE_METHODS):
            continue
        if callable(member) or isinstance(member, _METHOD_DESCRIPTORS):
            methods.append((name, member))
    return methods


def is_abstract(member: Any) -> bool:
    return bool(getattr(member, "__isabstractmethod__", False))


def define_method(
    contract: type, name: str, member: Any, hints: Mapping[str, Any]
) -> MethodBehavior | None:
    """Classify one declared method.

    Args:
        contract: The class declaring the method.
        name: The method name.
        member: The raw class attribute.
        hints: Evaluated annotations of the method.

    Returns:
        The behaviour, or None if the method is unmapped.
    """
    if not is_abstract(member):
        try:
            function = capture_default_method(contract, name, member)
        except ContractIntrospectionError as e:
            logger.debug("Leaving %s.%s unmapped: %s", contract.__name__, name, e)
            return None
        return PassThroughMethod(method_name=name, function=function)

    parameters = _parameters(member)
    if parameters is None:
        return None
    return_type = resolve_value_type(hints.get("return", Any))
    accessor = classify_accessor(name, len(parameters), return_type.is_boolean)
    if accessor is None:
        return None
    if accessor.is_getter:
        return GetterMethod(
            method_name=name,
            property_name=accessor.property_name,
            value_type=return_type,
        )
    parameter_type = resolve_value_type(hints.get(parameters[0].name, Any))
    return SetterMethod(
        method_name=name,
        property_name=accessor.property_name,
        value_type=parameter_type,
    )


def capture_default_method(contract: type, name: str, member: Any) -> Callable[..., Any]:
    """Return a callable running a default method body with a given self.

    Raises:
        ContractIntrospectionError: If the member cannot be bound to an instance.
    """
    if inspect.isfunction(member):
        return member
    binder = getattr(type(member), "__get__", None)
    if binder is None:
        raise ContractIntrospectionError(
            f"Cannot bind {contract.__name__}.{name}: {member!r} is not a method"
        )

    def call_bound(instance: Any, *args: Any, **kwargs: Any) -> Any:
        return binder(member, instance, type(instance))(*args, **kwargs)

    functools.update_wrapper(call_bound, member, updated=())
    return call_bound


def _parameters(member: Any) -> list[inspect.Parameter] | None:
    """Parameters after ``self``, or None if the shape cannot be an accessor."""
    try:
        signature = inspect.signature(member)
    except (TypeError, ValueError):
        return None
    parameters = list(signature.parameters.values())[1:]
    for parameter in parameters:
        if parameter.kind in (parameter.VAR_POSITIONAL, parameter.VAR_KEYWORD):
            return None
    return parameters


def _type_hints_by_method(contract: type) -> dict[str, dict[str, Any]]:
    """Evaluate the annotations of every declared method of a contract.

    Forward references are resolved against the contract's module and the
    contract itself. An annotation that cannot be evaluated is left as a
    string, which later resolves to ``Any``; the method's other annotations
    are still evaluated.
    """
    localns = {contract.__name__: contract}
    hints: dict[str, dict[str, Any]] = {}
    for name, member in declared_methods(contract):
        if not inspect.isfunction(member):
            continue
        try:
            hints[name] = typing.get_type_hints(member, localns=localns)
        except (NameError, TypeError):
            hints[name] = _evaluate_annotations(
                f"{contract.__name__}.{name}", member, localns
            )
    return hints


def _evaluate_annotations(
    qualname: str, function: Callable[..., Any], localns: Mapping[str, Any]
) -> dict[str, Any]:
    """Evaluate a function's annotations one at a time."""
    globalns = getattr(function, "__globals__", {})
    try:
        annotations = dict(getattr(function, "__annotations__", {}))
    except NameError as e:
        # Lazily evaluated annotations fail as a whole
        logger.debug("Annotations of %s left unresolved: %s", qualname, e)
        return {}
    hints: dict[str, Any] = {}
    for key, annotation in annotations.items():
        if isinstance(annotation, str):
            try:
                # Same evaluation typing.get_type_hints applies to strings
                annotation = eval(annotation, globalns, dict(localns))
            except (NameError, AttributeError, SyntaxError, TypeError) as e:
                logger.debug("Annotation %r of %s left unresolved: %s", key, qualname, e)
        hints[key] = annotation
    return hints
