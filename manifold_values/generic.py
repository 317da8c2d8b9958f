"""Type-erased storage cell for one manifold element."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional
import numpy as np

from .traits import ValueTraits, traits_for


class Value(ABC):
    """Uniform handle over a stored manifold element.

    Also used as the "any type" request in ``Values.at``/``Values.filter``.
    """

    __slots__ = ()

    @property
    @abstractmethod
    def type_id(self) -> str:
        ...

    @property
    @abstractmethod
    def value(self) -> Any:
        """The stored element itself (read-only for arrays); never a copy."""

    @abstractmethod
    def clone(self) -> "Value":
        ...

    @abstractmethod
    def equals(self, other: "Value", tol: float = 1e-9) -> bool:
        ...

    @abstractmethod
    def dim(self) -> int:
        ...

    @abstractmethod
    def retract(self, delta) -> "Value":
        ...

    @abstractmethod
    def local_coordinates(self, other: "Value") -> np.ndarray:
        ...

    def same_type(self, other: "Value") -> bool:
        return self.type_id == other.type_id


class GenericValue(Value):
    """Owns exactly one element together with its type token and traits.

    The element is never mutated after construction; stored arrays are
    flagged read-only. ``copy_value`` is how typed retrieval hands out data.
    """

    __slots__ = ("_value", "_value_type", "_traits")

    def __init__(self, value: Any, value_type, traits: Optional[ValueTraits] = None):
        if isinstance(value, np.ndarray):
            value.flags.writeable = False
        self._value = value
        self._value_type = value_type
        self._traits = traits or traits_for(value_type)

    @property
    def type_id(self) -> str:
        return self._traits.type_id

    @property
    def value_type(self):
        return self._value_type

    @property
    def traits(self) -> ValueTraits:
        return self._traits

    @property
    def value(self) -> Any:
        return self._value

    def copy_value(self) -> Any:
        return self._traits.copy(self._value)

    def clone(self) -> "GenericValue":
        return GenericValue(self.copy_value(), self._value_type, self._traits)

    def equals(self, other: Value, tol: float = 1e-9) -> bool:
        if not isinstance(other, GenericValue) or not self.same_type(other):
            return False
        return bool(self._traits.equals(self._value, other.value, tol))

    def dim(self) -> int:
        return self._traits.dim(self._value)

    def retract(self, delta) -> "GenericValue":
        if self._traits.retract is None:
            raise TypeError(f"{self.type_id} does not support retract")
        return GenericValue(self._traits.retract(self._value, delta), self._value_type, self._traits)

    def local_coordinates(self, other: Value) -> np.ndarray:
        if self._traits.local_coordinates is None:
            raise TypeError(f"{self.type_id} does not support local coordinates")
        if not self.same_type(other):
            raise TypeError(f"Cannot compute local coordinates from {self.type_id} to {other.type_id}")
        return np.asarray(self._traits.local_coordinates(self._value, other.value))

    def describe(self) -> str:
        return self._traits.describe(self._value)

    def __repr__(self) -> str:
        return f"GenericValue<{self.type_id}>({self.describe()})"
