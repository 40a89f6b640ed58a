"""Declared value types for dynabean properties.

Accessor annotations are resolved once, when a contract is classified, into
a ``ValueType`` that knows which runtime values it accepts and what a getter
returns while its property is unset.
"""

from __future__ import annotations

import types
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any


class PrimitiveType(Enum):
    """Primitive-shaped Python types: never absent, with a zero value."""

    BOOLEAN = "bool"
    INTEGER = "int"
    FLOAT = "float"
    COMPLEX = "complex"

    @property
    def py_type(self) -> type:
        """Return the Python class this primitive corresponds to."""
        return _PY_TYPES[self]

    @property
    def box(self) -> tuple[type, ...]:
        """Return the runtime classes accepted as values of this primitive.

        The numeric tower applies: an int is a valid float and an int or a
        float is a valid complex. bool is only ever a BOOLEAN.
        """
        boxes = {
            PrimitiveType.BOOLEAN: (bool,),
            PrimitiveType.INTEGER: (int,),
            PrimitiveType.FLOAT: (float, int),
            PrimitiveType.COMPLEX: (complex, float, int),
        }
        return boxes[self]

    @property
    def default_value(self) -> Any:
        """Return the resting default of this primitive."""
        defaults = {
            PrimitiveType.BOOLEAN: False,
            PrimitiveType.INTEGER: 0,
            PrimitiveType.FLOAT: 0.0,
            PrimitiveType.COMPLEX: 0j,
        }
        return defaults[self]


_PY_TYPES: dict[PrimitiveType, type] = {
    PrimitiveType.BOOLEAN: bool,
    PrimitiveType.INTEGER: int,
    PrimitiveType.FLOAT: float,
    PrimitiveType.COMPLEX: complex,
}

# Mapping from Python classes to PrimitiveType enum values
PRIMITIVE_TYPES: dict[type, PrimitiveType] = {pt.py_type: pt for pt in PrimitiveType}

# Mapping from type name strings to PrimitiveType enum values
PRIMITIVE_TYPE_NAMES: dict[str, PrimitiveType] = {pt.value: pt for pt in PrimitiveType}

_NONE_TYPE = type(None)

_UNION_ORIGINS: tuple[Any, ...] = (typing.Union, types.UnionType)


def primitive_for(cls: Any) -> PrimitiveType | None:
    """Look up the primitive metadata for a class, if it is primitive-shaped."""
    if isinstance(cls, type):
        return PRIMITIVE_TYPES.get(cls)
    return None


def wrap(cls: type) -> tuple[type, ...]:
    """Return the broadened form of a class: its box if primitive, else itself."""
    primitive = primitive_for(cls)
    if primitive is not None:
        return primitive.box
    return (cls,)


def type_name(annotation: Any) -> str:
    """Return a short human readable name for an annotation."""
    if annotation is Any:
        return "Any"
    if annotation is _NONE_TYPE or annotation is None:
        return "None"
    if isinstance(annotation, type) and not typing.get_args(annotation):
        return annotation.__qualname__
    return repr(annotation).replace("typing.", "")


@dataclass(frozen=True)
class ValueType:
    """The declared type of a property, resolved from an annotation.

    Attributes:
        annotation: The annotation as written on the accessor.
        boxes: Runtime classes a value may be an instance of.
        literals: Values accepted by equality (``Literal[...]`` members).
        primitive: Primitive metadata when the type is primitive-shaped.
        optional: True if ``None`` was part of the annotation.
    """

    annotation: Any
    boxes: tuple[type, ...] = (object,)
    literals: tuple[Any, ...] = ()
    primitive: PrimitiveType | None = None
    optional: bool = False

    @property
    def permits_absence(self) -> bool:
        """Whether ``None`` may be assigned (unsetting the property)."""
        return self.primitive is None or self.optional

    @property
    def resting_default(self) -> Any:
        """Value returned by a getter while the property is unset."""
        if self.primitive is not None and not self.optional:
            return self.primitive.default_value
        return None

    @property
    def is_boolean(self) -> bool:
        """Whether the type is bool-shaped (eligible for the ``is`` prefix)."""
        return self.boxes == (bool,) and not self.literals

    @property
    def name(self) -> str:
        return type_name(self.annotation)

    def accepts(self, value: Any) -> bool:
        """Check whether a non-None value is a member of this type."""
        for literal in self.literals:
            if type(literal) is type(value) and literal == value:
                return True
        if object in self.boxes:
            return True
        if isinstance(value, bool) and bool not in self.boxes:
            # bool subclasses int, but is not a number for our purposes
            return False
        return isinstance(value, self.boxes)


ANY_TYPE = ValueType(annotation=Any)


def resolve_value_type(annotation: Any) -> ValueType:
    """Resolve an annotation into a ValueType.

    Args:
        annotation: A class, a typing construct, or ``Any``. Annotations are
            expected to be already evaluated (see ``typing.get_type_hints``);
            unresolved strings are treated as ``Any``.

    Returns:
        The resolved ValueType.
    """
    boxes, literals, optional = _collect(annotation)
    if not boxes and not literals:
        # Only None was declared
        boxes = (_NONE_TYPE,)
    primitive = None
    members = [b for b in boxes if b is not _NONE_TYPE]
    if len(members) == 1 and not literals:
        primitive = primitive_for(members[0])
        if primitive is not None:
            boxes = primitive.box
    else:
        boxes = tuple(dict.fromkeys(box for b in members for box in wrap(b)))
        if not boxes and not literals:
            boxes = (_NONE_TYPE,)
    return ValueType(
        annotation=annotation,
        boxes=boxes,
        literals=literals,
        primitive=primitive,
        optional=optional,
    )


def _collect(annotation: Any) -> tuple[tuple[type, ...], tuple[Any, ...], bool]:
    """Flatten an annotation into (classes, literal values, includes None)."""
    if annotation is Any or isinstance(annotation, (str, typing.TypeVar, typing.ForwardRef)):
        return (object,), (), False
    if annotation is None or annotation is _NONE_TYPE:
        return (), (), True
    supertype = getattr(annotation, "__supertype__", None)
    if supertype is not None:
        # typing.NewType
        return _collect(supertype)

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)
    if origin is typing.Annotated:
        return _collect(args[0])
    if origin in _UNION_ORIGINS:
        classes: list[type] = []
        literals: list[Any] = []
        optional = False
        for arg in args:
            arg_classes, arg_literals, arg_optional = _collect(arg)
            classes.extend(arg_classes)
            literals.extend(arg_literals)
            optional = optional or arg_optional
        return tuple(dict.fromkeys(classes)), tuple(literals), optional
    if origin is typing.Literal:
        return (), tuple(a for a in args if a is not None), None in args
    if isinstance(origin, type):
        # Parameterised generic: list[T], Sequence[T], ...
        return (origin,), (), False
    if isinstance(annotation, type):
        return (annotation,), (), False
    return (object,), (), False
