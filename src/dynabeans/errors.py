"""Exceptions raised by dynabean definitions and instances."""

from __future__ import annotations

from typing import Any


class DynaBeanError(Exception):
    """Base class for all dynabean errors."""


class ArgumentCountError(DynaBeanError, TypeError):
    """An accessor was called with the wrong number of arguments."""

    def __init__(self, expected: int, arguments: tuple[Any, ...]) -> None:
        self.expected = expected
        self.arguments = arguments
        super().__init__(
            f"Expected {expected} argument(s), got: {list(arguments)!r}"
        )


class TypeMismatchError(DynaBeanError, TypeError):
    """A stored or supplied value does not fit the declared property type."""

    def __init__(self, value: Any, expected: Any) -> None:
        self.value = value
        self.expected = expected
        super().__init__(f"{value!r} is not an instance of type: {expected!r}")


class UnsupportedOperationError(DynaBeanError, NotImplementedError):
    """A method with no behaviour was called on a dynabean."""

    def __init__(self, method_name: str, contract_name: str | None = None) -> None:
        self.method_name = method_name
        self.contract_name = contract_name
        where = f"{contract_name}.{method_name}" if contract_name else method_name
        super().__init__(f"Unimplemented dynabean method: {where}")


class CopyFailureError(DynaBeanError, RuntimeError):
    """Copying a property value failed while cloning a dynabean."""

    def __init__(self, value: Any, cause: BaseException) -> None:
        self.value = value
        super().__init__(f"Failed to clone value. {cause}")


class ContractIntrospectionError(DynaBeanError):
    """The body of a default method could not be captured."""
