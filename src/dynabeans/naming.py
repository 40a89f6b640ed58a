"""Accessor naming convention.

A method is a getter when it takes no arguments and is named ``getXxx`` (or
``isXxx`` when it returns a bool), and a setter when it takes exactly one
argument and is named ``setXxx``. The property name is the rest of the method
name with its first character lower-cased. snake_case names work the same
way: the underscore after the prefix is dropped, so ``get_first_name`` maps
to ``first_name``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

GET_PREFIX = "get"
IS_PREFIX = "is"
SET_PREFIX = "set"

# Shortest name that can carry a prefix plus a property name
MIN_ACCESSOR_LENGTH = 4


class AccessorKind(Enum):
    """The two kinds of property accessor."""

    GETTER = "getter"
    SETTER = "setter"


@dataclass(frozen=True)
class Accessor:
    """Result of classifying a method name as an accessor."""

    kind: AccessorKind
    property_name: str
    prefix: str

    @property
    def is_getter(self) -> bool:
        return self.kind is AccessorKind.GETTER

    @property
    def is_setter(self) -> bool:
        return self.kind is AccessorKind.SETTER


def classify_accessor(
    name: str, parameter_count: int, returns_boolean: bool = False
) -> Accessor | None:
    """Classify a method by name and shape.

    Args:
        name: The method name.
        parameter_count: Number of parameters, not counting ``self``.
        returns_boolean: Whether the declared return type is bool-shaped.

    Returns:
        The Accessor, or None if the method is not a getter or a setter.
    """
    if len(name) < MIN_ACCESSOR_LENGTH:
        return None
    prefix = name[:3]
    get_prefix = prefix == GET_PREFIX
    is_prefix = prefix.startswith(IS_PREFIX) and returns_boolean
    getter = parameter_count == 0 and (get_prefix or is_prefix)
    setter = parameter_count == 1 and prefix == SET_PREFIX
    if not (getter or setter):
        return None

    prefix_length = len(IS_PREFIX) if is_prefix else len(GET_PREFIX)
    property_name = property_name_for(name, prefix_length)
    if property_name is None:
        return None
    if getter:
        used = IS_PREFIX if is_prefix else GET_PREFIX
        return Accessor(AccessorKind.GETTER, property_name, used)
    return Accessor(AccessorKind.SETTER, property_name, SET_PREFIX)


def property_name_for(name: str, prefix_length: int) -> str | None:
    """Derive the property name from an accessor name.

    >>> property_name_for("getFirstName", 3)
    'firstName'
    >>> property_name_for("is_active", 2)
    'active'
    """
    rest = name[prefix_length:]
    if rest.startswith("_"):
        rest = rest[1:]
    if not rest:
        return None
    return rest[0].lower() + rest[1:]
