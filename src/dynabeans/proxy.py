"""Synthesis of the runtime classes that back dynabean instances.

For each interface definition one subclass of the contract is generated.
Every instance method the contract hierarchy declares is replaced with a
forwarder into the instance's dispatcher, together with the identity
methods (``__eq__``, ``__hash__``, ``__repr__``, ``clone``, copying).
"""

from __future__ import annotations

import logging
import weakref
from typing import Any, Callable

from dynabeans.bean import DynaBean, contract_hierarchy
from dynabeans.definition import InterfaceDefinition, declared_methods

logger = logging.getLogger(__name__)

DISPATCHER_ATTRIBUTE = "_dynabean_dispatcher"

# Identity operations routed to the dispatcher, by Python method name
IDENTITY_METHODS = ("clone", "__eq__", "__hash__", "__repr__", "__copy__", "__deepcopy__")

_proxy_classes: weakref.WeakKeyDictionary[InterfaceDefinition, type] = (
    weakref.WeakKeyDictionary()
)


def proxy_class_for(definition: InterfaceDefinition) -> type:
    """Get the synthesized class for a definition, creating it on first use."""
    proxy_class = _proxy_classes.get(definition)
    if proxy_class is None:
        proxy_class = _synthesize(definition)
        _proxy_classes[definition] = proxy_class
    return proxy_class


def forwarded_method_names(definition: InterfaceDefinition) -> list[str]:
    """Names of all methods a synthesized class routes to the dispatcher."""
    names: dict[str, None] = dict.fromkeys(definition.methods)
    for cls in contract_hierarchy(definition.contract):
        for name, _member in declared_methods(cls):
            names.setdefault(name, None)
    return list(names)


def _synthesize(definition: InterfaceDefinition) -> type:
    contract = definition.contract
    namespace: dict[str, Any] = {
        "__slots__": (DISPATCHER_ATTRIBUTE,),
        "__module__": contract.__module__,
        "__qualname__": f"{contract.__qualname__}DynaBean",
        "__doc__": contract.__doc__,
    }
    forwarded = forwarded_method_names(definition)
    for name in forwarded:
        namespace[name] = _forwarder(name, contract)
    for name in IDENTITY_METHODS:
        namespace[name] = _forwarder(name, contract)

    bases: tuple[type, ...] = (contract,)
    if not issubclass(contract, DynaBean):
        bases = (contract, DynaBean)
    proxy_class = type(contract)(f"{contract.__name__}DynaBean", bases, namespace)
    # Abstract members that are not methods (abstract properties) are not
    # forwarded; they must not block instantiation.
    proxy_class.__abstractmethods__ = frozenset()
    logger.debug(
        "Synthesized %s with %d forwarded methods",
        proxy_class.__qualname__,
        len(forwarded),
    )
    return proxy_class


def _forwarder(name: str, contract: type) -> Callable[..., Any]:
    def forward(self: Any, *args: Any, **kwargs: Any) -> Any:
        dispatcher = object.__getattribute__(self, DISPATCHER_ATTRIBUTE)
        return dispatcher.invoke(self, name, args, kwargs)

    original = getattr(contract, name, None)
    forward.__name__ = name
    forward.__qualname__ = f"{contract.__qualname__}DynaBean.{name}"
    forward.__doc__ = getattr(original, "__doc__", None)
    return forward

