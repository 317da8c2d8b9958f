"""Lazy, non-owning views over a ``Values`` container.

A view stores the container, a key predicate and a requested type; it never
copies entries. The predicate and type test run once per traversal step, and
every ``iter()`` starts an independent traversal. Mutating the container
invalidates its views (not detected here).
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Iterator, List, NamedTuple

from . import dispatch
from .generic import Value
from .traits import type_id_of

if TYPE_CHECKING:
    from .values import Values

KeyPredicate = Callable[[int], bool]


class KeyValuePair(NamedTuple):
    """``(key, value)`` produced while traversing a ``Filtered`` view."""
    key: int
    value: Any


class ConstKeyValuePair(NamedTuple):
    key: int
    value: Any

    @classmethod
    def from_pair(cls, pair: KeyValuePair) -> "ConstKeyValuePair":
        return cls(pair.key, pair.value)


def _type_name(value_type) -> str:
    return "Value" if value_type is Value else type_id_of(value_type)


def _accept_all(key: int) -> bool:
    return True


class Filtered:
    """View over entries whose key passes ``predicate`` and whose type matches.

    With ``value_type=Value`` every type matches and pairs carry the erased
    wrapper; otherwise pairs carry the stored element (arrays read-only).
    Elements are shared with the container, not copied, so non-array
    objects must not be mutated through a view.
    """

    def __init__(self, values: "Values", predicate: KeyPredicate = None, value_type=Value):
        self._values = values
        self._predicate = predicate or _accept_all
        self._value_type = value_type

    @property
    def value_type(self):
        return self._value_type

    def _traverse(self):
        value_type = self._value_type
        predicate = self._predicate
        for key, wrapper in self._values.erased_items():
            if predicate(key) and dispatch.matches(wrapper, value_type):
                yield key, dispatch.handle_ref(key, wrapper, value_type)

    def __iter__(self) -> Iterator[KeyValuePair]:
        return (KeyValuePair(k, v) for k, v in self._traverse())

    def iter_const(self) -> Iterator[ConstKeyValuePair]:
        return (ConstKeyValuePair(k, v) for k, v in self._traverse())

    def size(self) -> int:
        """Number of matching entries; walks the whole view every call."""
        return sum(1 for _ in self.iter_const())

    def __len__(self) -> int:
        return self.size()

    def keys(self) -> List[int]:
        return [pair.key for pair in self.iter_const()]

    def __repr__(self) -> str:
        return f"Filtered<{_type_name(self._value_type)}>"


class ConstFiltered:
    """Read-only counterpart of ``Filtered``.

    Built from a ``Filtered`` view by taking over its read-only traversal;
    the predicate is not evaluated until the view is walked.
    """

    def __init__(self, view: Filtered):
        if not isinstance(view, Filtered):
            raise TypeError(f"ConstFiltered wraps a Filtered view, got {type(view).__name__}")
        self._begin = view.iter_const
        self._value_type = view.value_type

    @property
    def value_type(self):
        return self._value_type

    def __iter__(self) -> Iterator[ConstKeyValuePair]:
        return self._begin()

    def size(self) -> int:
        return sum(1 for _ in self)

    def __len__(self) -> int:
        return self.size()

    def keys(self) -> List[int]:
        return [pair.key for pair in self]

    def __repr__(self) -> str:
        return f"ConstFiltered<{_type_name(self._value_type)}>"
