"""Dynabean instances: call dispatch, identity and deep copy."""

from __future__ import annotations

import copy
from collections import deque
from collections.abc import Mapping, MutableSequence
from typing import Any

from dynabeans.bean import DynaBean
from dynabeans.definition import InterfaceDefinition
from dynabeans.errors import CopyFailureError, UnsupportedOperationError
from dynabeans.proxy import DISPATCHER_ATTRIBUTE, proxy_class_for
from dynabeans.store import PropertyStore


class InstanceDispatcher:
    """Routes every call made on one dynabean instance.

    A dispatcher binds a shared InterfaceDefinition to a property store it
    owns exclusively. Calls with a registered behaviour run it against the
    store; otherwise the identity operations (clone, equality, hashing,
    repr, copying) are served here, and anything else is unsupported.
    """

    def __init__(
        self, definition: InterfaceDefinition, store: PropertyStore | None = None
    ) -> None:
        self._definition = definition
        self._store = store if store is not None else PropertyStore()

    @property
    def definition(self) -> InterfaceDefinition:
        return self._definition

    @property
    def store(self) -> PropertyStore:
        return self._store

    def invoke(
        self,
        instance: Any,
        method_name: str,
        args: tuple[Any, ...] = (),
        kwargs: Mapping[str, Any] | None = None,
    ) -> Any:
        """Execute a call made on ``instance``.

        Args:
            instance: The synthesized object the call was made on.
            method_name: Name of the called method.
            args: Positional arguments.
            kwargs: Keyword arguments.

        Returns:
            Whatever the matching behaviour returns.

        Raises:
            UnsupportedOperationError: If nothing handles the method.
        """
        behavior = self._definition.lookup(method_name)
        if behavior is not None:
            return behavior.invoke(instance, self._store, args, kwargs)

        if method_name in ("clone", "__copy__", "__deepcopy__"):
            return self.clone()
        if method_name == "__eq__":
            return self.equals(args[0] if args else None)
        if method_name == "__hash__":
            return self.hash_code()
        if method_name == "__repr__":
            return self.describe()
        raise UnsupportedOperationError(method_name, self._definition.contract_name)

    def clone(self) -> Any:
        """Create a new instance of the same contract with a deep-copied store."""
        copied = PropertyStore()
        for name, value in self._store.items():
            copied[name] = copy_property_value(value)
        return create_instance(self._definition, copied)

    def equals(self, other: Any) -> bool:
        other_dispatcher = dispatcher_of(other)
        if other_dispatcher is None:
            return False
        if other_dispatcher is self:
            return True
        return (
            self._definition is other_dispatcher._definition
            and self._store == other_dispatcher._store
        )

    def hash_code(self) -> int:
        return 961 + 31 * hash(self._definition) + self._store.structural_hash()

    def describe(self) -> str:
        return f"DynaBean(type={self._definition.contract_name})"


def create_instance(
    definition: InterfaceDefinition, store: PropertyStore | None = None
) -> Any:
    """Create an instance of a definition's contract backed by ``store``.

    The instance takes ownership of the store; pass a fresh one per instance.
    """
    proxy_class = proxy_class_for(definition)
    instance = object.__new__(proxy_class)
    object.__setattr__(instance, DISPATCHER_ATTRIBUTE, InstanceDispatcher(definition, store))
    return instance


def dispatcher_of(obj: Any) -> InstanceDispatcher | None:
    """Return the dispatcher behind a dynabean, or None for anything else."""
    if not isinstance(obj, DynaBean):
        return None
    try:
        dispatcher = object.__getattribute__(obj, DISPATCHER_ATTRIBUTE)
    except AttributeError:
        return None
    if isinstance(dispatcher, InstanceDispatcher):
        return dispatcher
    return None


def is_dynabean(obj: Any) -> bool:
    """Check if an object is a dispatcher-backed dynabean instance."""
    return dispatcher_of(obj) is not None


def access_properties(bean: Any) -> PropertyStore:
    """Return the property store backing a dynabean instance.

    Raises:
        ValueError: If ``bean`` is not a dynabean instance.
    """
    dispatcher = dispatcher_of(bean)
    if dispatcher is None:
        raise ValueError(f"Not a dynabean instance: {bean!r}")
    return dispatcher.store


def copy_property_value(value: Any) -> Any:
    """Deep-copy a property value for a cloned instance.

    Lists and other mutable sequences, tuples, sets and dicts are rebuilt
    with copied elements, keeping their type where that type can be built
    from a list of elements. Nested dynabeans are cloned, and other values
    providing ``__copy__`` or a ``copy()`` method are copied through it.
    Anything else is shared. Reference cycles between dynabeans are not
    detected.

    Raises:
        CopyFailureError: If a value's own copy operation fails.
    """
    if isinstance(value, type):
        return value
    if isinstance(value, (list, MutableSequence)):
        return _rebuild_sequence(value, [copy_property_value(v) for v in value])
    if isinstance(value, tuple):
        items = [copy_property_value(v) for v in value]
        if hasattr(value, "_make"):
            return value._make(items)
        return tuple(items)
    if isinstance(value, frozenset):
        return frozenset(copy_property_value(v) for v in value)
    if isinstance(value, set):
        return {copy_property_value(v) for v in value}
    if isinstance(value, dict):
        copied = dict(value) if type(value) is dict else copy.copy(value)
        for key in copied:
            copied[key] = copy_property_value(copied[key])
        return copied

    dispatcher = dispatcher_of(value)
    if dispatcher is not None:
        return dispatcher.clone()

    if hasattr(type(value), "__copy__") or callable(getattr(value, "copy", None)):
        try:
            if hasattr(type(value), "__copy__"):
                return copy.copy(value)
            return value.copy()
        except Exception as e:
            raise CopyFailureError(value, e) from e
    return value


def _rebuild_sequence(value: Any, items: list[Any]) -> Any:
    """Build a sequence of the same type as ``value`` holding ``items``."""
    if type(value) is list:
        return items
    if isinstance(value, deque):
        return type(value)(items, value.maxlen)
    try:
        return type(value)(items)
    except TypeError:
        return items
