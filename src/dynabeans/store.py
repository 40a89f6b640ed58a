"""Backing property store of a dynabean instance."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping, Sequence
from collections.abc import Set as AbstractSet
from typing import Any


class PropertyStore(MutableMapping[str, Any]):
    """Ordered mapping from property name to value.

    ``None`` means unset: assigning ``None`` removes the property, so the
    store never holds explicit ``None`` entries, and ``get`` of an absent
    property returns ``None``.
    """

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = {}
        if values:
            for name, value in values.items():
                self[name] = value

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __setitem__(self, name: str, value: Any) -> None:
        if value is None:
            self._values.pop(name, None)
        else:
            self._values[name] = value

    def __delitem__(self, name: str) -> None:
        del self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PropertyStore):
            return self._values == other._values
        if isinstance(other, Mapping):
            return self._values == dict(other)
        return NotImplemented

    # Mutable, like dict
    __hash__ = None  # type: ignore[assignment]

    def structural_hash(self) -> int:
        """Content hash of the store, independent of insertion order."""
        return structural_hash(self._values)

    def __repr__(self) -> str:
        return f"PropertyStore({self._values!r})"


def structural_hash(value: Any) -> int:
    """Hash a value by content, including sequences, sets and mappings.

    Equal values hash equal. A value that is neither a container nor
    hashable hashes by its type, so hashing never fails.
    """
    if isinstance(value, (str, bytes)):
        return hash(value)
    if isinstance(value, Mapping):
        total = 0
        for key, item in value.items():
            total += structural_hash(key) ^ structural_hash(item)
        return hash(total)
    if isinstance(value, Sequence):
        return hash(tuple(structural_hash(v) for v in value))
    if isinstance(value, AbstractSet):
        return hash(frozenset(structural_hash(v) for v in value))
    try:
        return hash(value)
    except TypeError:
        # Unhashable (mutable, or __eq__ without __hash__)
        return hash(type(value))
