"""Registry of interface definitions, one per contract class."""

from __future__ import annotations

import logging
from typing import Any

from dynabeans.bean import is_contract_class
from dynabeans.definition import DefinitionBuilder, InterfaceDefinition, SetterMethod
from dynabeans.instance import create_instance
from dynabeans.store import PropertyStore

logger = logging.getLogger(__name__)


class DefinitionRegistry:
    """Builds and caches interface definitions for contract classes."""

    def __init__(self) -> None:
        self._definitions: dict[type, InterfaceDefinition] = {}

    def definition_for(self, contract: type) -> InterfaceDefinition:
        """Get the definition of a contract, building it on first use.

        The contract's own methods are classified first; the definitions of
        its contract bases are then merged in, left to right, so a method
        redeclared lower in the hierarchy overrides the inherited one.

        Args:
            contract: The contract class.

        Returns:
            The shared, immutable definition.

        Raises:
            TypeError: If ``contract`` is not a class.
        """
        definition = self._definitions.get(contract)
        if definition is not None:
            return definition
        if not isinstance(contract, type):
            raise TypeError(f"Contract must be a class, got: {contract!r}")

        builder = DefinitionBuilder(contract)
        for base in contract.__bases__:
            if is_contract_class(base):
                builder.merge(self.definition_for(base))
        definition = builder.finalize()
        self._definitions[contract] = definition
        logger.debug("Built %r", definition)
        return definition

    def new_instance(self, contract: type, **properties: Any) -> Any:
        """Create a new instance of a contract.

        Args:
            contract: The contract class.
            **properties: Initial property values, each applied through the
                property's setter (and so type-checked).

        Returns:
            The new dynabean instance.

        Raises:
            TypeError: If a property has no setter.
            TypeMismatchError: If a value does not fit its property's type.
        """
        definition = self.definition_for(contract)
        setters = {
            b.property_name: b
            for b in definition.methods.values()
            if isinstance(b, SetterMethod)
        }
        store = PropertyStore()
        instance = create_instance(definition, store)
        for name, value in properties.items():
            setter = setters.get(name)
            if setter is None:
                raise TypeError(
                    f"{definition.contract_name} has no setter for property {name!r}"
                )
            setter.invoke(instance, store, (value,))
        return instance

    def clear(self) -> None:
        """Forget all cached definitions."""
        self._definitions.clear()

    def __contains__(self, contract: object) -> bool:
        return contract in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)


default_registry = DefinitionRegistry()


def definition_for(contract: type) -> InterfaceDefinition:
    """Get a contract's definition from the default registry."""
    return default_registry.definition_for(contract)


def new_instance(
    contract: type, registry: DefinitionRegistry | None = None, **properties: Any
) -> Any:
    """Create a new dynabean instance of ``contract``.

    Args:
        contract: The contract class.
        registry: Registry to take the definition from. Defaults to the
            module-level registry.
        **properties: Initial property values.
    """
    if registry is None:
        registry = default_registry
    return registry.new_instance(contract, **properties)


def property_names(target: InterfaceDefinition | type) -> list[str]:
    """Sorted names of the readable properties of a definition or contract."""
    if isinstance(target, InterfaceDefinition):
        return target.property_names()
    return definition_for(target).property_names()
