"""The DynaBean marker type shared by every contract and instance."""

from __future__ import annotations

import abc
import typing
from abc import ABC, abstractmethod
from typing import Any


class DynaBean(ABC):
    """Base class for contracts whose instances are synthesized at runtime.

    Methods marked with ``@abstractmethod`` are mapped to properties by name
    (``getX``/``isX``/``setX``); other methods are default methods that run
    as written, with ``self`` being the live instance.
    """

    __slots__ = ()

    @abstractmethod
    def clone(self) -> Any:
        """Return a deep copy of this instance."""


# Bases that never contribute methods to a contract
_NON_CONTRACT_BASES: frozenset[Any] = frozenset(
    {object, DynaBean, abc.ABC, typing.Generic, typing.Protocol}
)


def is_contract_class(cls: Any) -> bool:
    """Check if a class takes part in a contract's method hierarchy."""
    return isinstance(cls, type) and cls not in _NON_CONTRACT_BASES


def contract_hierarchy(contract: type) -> list[type]:
    """Return the contract and its contract ancestors, most derived first."""
    return [cls for cls in contract.__mro__ if is_contract_class(cls)]
