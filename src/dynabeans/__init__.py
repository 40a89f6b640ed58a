"""Dynabeans - runtime-synthesized objects backed by a property store."""

from dynabeans.bean import DynaBean
from dynabeans.definition import (
    DefinitionBuilder,
    GetterMethod,
    InterfaceDefinition,
    MethodBehavior,
    PassThroughMethod,
    SetterMethod,
    build_definition,
)
from dynabeans.errors import (
    ArgumentCountError,
    ContractIntrospectionError,
    CopyFailureError,
    DynaBeanError,
    TypeMismatchError,
    UnsupportedOperationError,
)
from dynabeans.instance import (
    InstanceDispatcher,
    access_properties,
    create_instance,
    is_dynabean,
)
from dynabeans.parsing import ContractParser
from dynabeans.registry import (
    DefinitionRegistry,
    definition_for,
    new_instance,
    property_names,
)
from dynabeans.store import PropertyStore
from dynabeans.types import PrimitiveType, ValueType

__all__ = [
    # Main API
    "DynaBean",
    "new_instance",
    "is_dynabean",
    "access_properties",
    "property_names",
    "definition_for",
    "ContractParser",
    # Definitions
    "DefinitionRegistry",
    "DefinitionBuilder",
    "InterfaceDefinition",
    "build_definition",
    "MethodBehavior",
    "GetterMethod",
    "SetterMethod",
    "PassThroughMethod",
    # Instances
    "InstanceDispatcher",
    "PropertyStore",
    "create_instance",
    # Types
    "PrimitiveType",
    "ValueType",
    # Errors
    "DynaBeanError",
    "ArgumentCountError",
    "TypeMismatchError",
    "UnsupportedOperationError",
    "CopyFailureError",
    "ContractIntrospectionError",
]

__version__ = "0.1.0"
