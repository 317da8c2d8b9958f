"""Values: an ordered, heterogeneous map from integer keys to manifold elements.

Each entry is a type-erased ``Value`` wrapper owned by the container. Typed
access goes through the dispatcher (``manifold_values.dispatch``), which
stores fixed-shape arrays as their dynamic family and reconciles fixed-shape
requests against what was stored.

Design intent:
Mutations are atomic. Values are wrapped and validated before the map is
touched, so a failing ``insert``/``update`` leaves the container as it was.
Iteration is in ascending key order; any mutation invalidates live views.
"""
from __future__ import annotations

import bisect
import logging
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Union

import numpy as np

from . import dispatch
from .config import ValuesConfig
from .errors import Result, ValuesError, ValuesKeyAlreadyExists, ValuesKeyDoesNotExist
from .filtered import ConstFiltered, Filtered, KeyPredicate, KeyValuePair
from .generic import Value
from .keys import KeyFormatter, check_key, format_int, format_key

logger = logging.getLogger("manifold_values.values")

ViewLike = Union[Filtered, ConstFiltered]


class Values:
    """Heterogeneous container of manifold elements keyed by integers.

    ``Values(other)`` copies another container; ``Values(view)`` snapshots
    the entries matched by a ``Filtered``/``ConstFiltered`` view.
    """

    def __init__(self, source: Optional[Union["Values", ViewLike]] = None,
                 config: Optional[ValuesConfig] = None):
        self.config = config or (source.config if isinstance(source, Values) else ValuesConfig())
        self._values: Dict[int, Value] = {}
        self._keys: List[int] = []
        if source is None:
            return
        if isinstance(source, Values):
            for key, wrapper in source.erased_items():
                self._store(key, wrapper.clone())
        elif isinstance(source, (Filtered, ConstFiltered)):
            self._copy_view(source)
        else:
            raise TypeError(f"Cannot build Values from {type(source).__name__}")

    @classmethod
    def from_view(cls, view: ViewLike, config: Optional[ValuesConfig] = None) -> "Values":
        return cls(view, config=config)

    def _copy_view(self, view: ViewLike) -> None:
        value_type = view.value_type
        copied = 0
        for key, value in view:
            if value_type is Value:
                self.insert(key, value)
            else:
                self.insert(key, value, value_type)
            copied += 1
        logger.debug("Copied %d entries from %r", copied, view)

    # --- internal map maintenance ----------------------------------------

    def _store(self, key: int, wrapper: Value) -> None:
        if key not in self._values:
            bisect.insort(self._keys, key)
        self._values[key] = wrapper

    def _find(self, operation: str, key) -> Value:
        key = check_key(key)
        wrapper = self._values.get(key)
        if wrapper is None:
            raise ValuesKeyDoesNotExist(operation, key)
        return wrapper

    def _wrap(self, value: Any, value_type) -> Value:
        return dispatch.wrap(value, value_type, dtype=self.config.dtype)

    # --- typed access -----------------------------------------------------

    def at(self, key: int, value_type=Value) -> Any:
        """Copy of the value at ``key`` as ``value_type``.

        Raises ``ValuesKeyDoesNotExist`` if the key is absent,
        ``ValuesIncorrectType`` if the stored type cannot answer the request,
        and ``NoMatchFoundForFixed`` if a fixed-shape request finds a dynamic
        array of other dimensions. ``value_type=Value`` returns the wrapper.
        """
        key = check_key(key)
        return dispatch.handle(key, self._find("at", key), value_type)

    def exists(self, key: int, value_type=Value) -> Optional[Any]:
        """Stored element at ``key`` (no copy) or ``None`` if the key is absent.

        Unlike ``at``, an absent key is not an error; a present key holding an
        incompatible type still raises ``ValuesIncorrectType``.

        The returned object is shared with the container and must not be
        mutated. Arrays are flagged read-only; other objects (plain classes,
        dataclasses) are not protected. Use ``at`` for a private copy.
        """
        key = check_key(key)
        wrapper = self._values.get(key)
        if wrapper is None:
            return None
        return dispatch.handle_ref(key, wrapper, value_type)

    def contains(self, key: int) -> bool:
        return check_key(key) in self._values

    def __contains__(self, key) -> bool:
        try:
            return self.contains(key)
        except (TypeError, ValueError):
            return False

    def __getitem__(self, key: int) -> Value:
        return self._find("at", key)

    # --- mutation ---------------------------------------------------------

    def insert(self, key: int, value: Any, value_type=None) -> None:
        """Add a new entry; raises ``ValuesKeyAlreadyExists`` if ``key`` is taken."""
        key = check_key(key)
        if key in self._values:
            raise ValuesKeyAlreadyExists(key)
        wrapper = self._wrap(value, value_type)
        self._store(key, wrapper)
        logger.debug("insert %s <%s>", key, wrapper.type_id)

    def update(self, key: int, value: Any, value_type=None) -> None:
        """Replace the entry at ``key``; the new type need not match the old one."""
        key = check_key(key)
        if key not in self._values:
            raise ValuesKeyDoesNotExist("update", key)
        wrapper = self._wrap(value, value_type)
        previous = self._values[key]
        self._values[key] = wrapper
        logger.debug("update %s <%s> -> <%s>", key, previous.type_id, wrapper.type_id)

    def insert_or_assign(self, key: int, value: Any, value_type=None) -> None:
        key = check_key(key)
        wrapper = self._wrap(value, value_type)
        self._store(key, wrapper)

    def erase(self, key: int) -> None:
        key = check_key(key)
        if key not in self._values:
            raise ValuesKeyDoesNotExist("erase", key)
        del self._values[key]
        idx = bisect.bisect_left(self._keys, key)
        del self._keys[idx]
        logger.debug("erase %s", key)

    def __delitem__(self, key: int) -> None:
        self.erase(key)

    def clear(self) -> None:
        self._values.clear()
        self._keys.clear()

    def swap(self, other: "Values") -> None:
        """Exchange entries and configuration with ``other``."""
        self._values, other._values = other._values, self._values
        self._keys, other._keys = other._keys, self._keys
        self.config, other.config = other.config, self.config

    def insert_values(self, other: "Values") -> None:
        """Insert every entry of ``other``; nothing is added if any key clashes."""
        for key in other.keys():
            if key in self._values:
                raise ValuesKeyAlreadyExists(key)
        for key, wrapper in other.erased_items():
            self._store(key, wrapper.clone())
        logger.debug("insert_values added %d entries", other.size())

    def update_values(self, other: "Values") -> None:
        """Replace entries with those of ``other``; nothing changes if any key is missing."""
        for key in other.keys():
            if key not in self._values:
                raise ValuesKeyDoesNotExist("update", key)
        for key, wrapper in other.erased_items():
            self._values[key] = wrapper.clone()

    # --- Result-returning variants ---------------------------------------

    def try_at(self, key: int, value_type=Value) -> Result:
        return _attempt(lambda: self.at(key, value_type))

    def try_exists(self, key: int, value_type=Value) -> Result:
        return _attempt(lambda: self.exists(key, value_type))

    def try_insert(self, key: int, value: Any, value_type=None) -> Result:
        return _attempt(lambda: self.insert(key, value, value_type))

    def try_update(self, key: int, value: Any, value_type=None) -> Result:
        return _attempt(lambda: self.update(key, value, value_type))

    def try_erase(self, key: int) -> Result:
        return _attempt(lambda: self.erase(key))

    # --- size and iteration ----------------------------------------------

    def size(self) -> int:
        return len(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def empty(self) -> bool:
        return not self._values

    def keys(self) -> List[int]:
        return list(self._keys)

    def erased_items(self) -> Iterator:
        """``(key, wrapper)`` in key order, without building pair objects."""
        values = self._values
        for key in self._keys:
            yield key, values[key]

    def __iter__(self) -> Iterator[KeyValuePair]:
        for key, wrapper in self.erased_items():
            yield KeyValuePair(key, wrapper)

    def items(self) -> List[KeyValuePair]:
        return list(self)

    def values_list(self) -> List[Value]:
        return [self._values[key] for key in self._keys]

    # --- views ------------------------------------------------------------

    def filter(self, predicate: Optional[KeyPredicate] = None, value_type=Value) -> Filtered:
        return Filtered(self, predicate, value_type)

    def filter_const(self, predicate: Optional[KeyPredicate] = None, value_type=Value) -> ConstFiltered:
        return ConstFiltered(Filtered(self, predicate, value_type))

    def count(self, value_type) -> int:
        return self.filter(None, value_type).size()

    def extract(self, value_type, predicate: Optional[KeyPredicate] = None) -> Dict[int, Any]:
        """Typed copies of every entry matching ``value_type`` (and ``predicate``)."""
        return {key: dispatch.handle(key, self._values[key], value_type)
                for key in self.filter(predicate, value_type).keys()}

    # --- comparison and printing -----------------------------------------

    def equals(self, other: "Values", tol: Optional[float] = None) -> bool:
        tol = self.config.tolerance if tol is None else tol
        if self._keys != other._keys:
            return False
        for key, wrapper in self.erased_items():
            if not wrapper.equals(other._values[key], tol):
                return False
        return True

    def __eq__(self, other) -> bool:
        if not isinstance(other, Values):
            return NotImplemented
        return self.equals(other)

    __hash__ = None

    def _key_formatter(self) -> KeyFormatter:
        return format_key if self.config.key_format == "symbol" else format_int

    def describe(self, prefix: str = "", key_formatter: Optional[KeyFormatter] = None) -> str:
        fmt = key_formatter or self._key_formatter()
        lines = [f"{prefix}Values with {self.size()} values:"]
        for key, wrapper in self.erased_items():
            lines.append(f"Value {fmt(key)}: ({wrapper.type_id}) {wrapper.describe()}")
        return "\n".join(lines)

    def print(self, prefix: str = "", key_formatter: Optional[KeyFormatter] = None) -> None:
        print(self.describe(prefix, key_formatter))

    def __str__(self) -> str:
        return self.describe()

    def __repr__(self) -> str:
        return f"Values(size={self.size()})"

    # --- copies -----------------------------------------------------------

    def copy(self) -> "Values":
        return Values(self)

    def __copy__(self) -> "Values":
        return self.copy()

    # --- manifold delegation ---------------------------------------------

    def dim(self) -> int:
        return sum(wrapper.dim() for wrapper in self._values.values())

    def zero_vectors(self) -> Dict[int, np.ndarray]:
        return {key: np.zeros(wrapper.dim()) for key, wrapper in self.erased_items()}

    def retract(self, delta: Mapping[int, Any]) -> "Values":
        """New container with each value moved along ``delta[key]``.

        Keys missing from ``delta`` are copied unchanged; keys in ``delta``
        that are not in the container raise ``ValuesKeyDoesNotExist``.
        """
        for key in delta:
            self._find("retract", key)
        result = Values(config=self.config)
        for key, wrapper in self.erased_items():
            if key in delta:
                result._store(key, wrapper.retract(delta[key]))
            else:
                result._store(key, wrapper.clone())
        return result

    def local_coordinates(self, other: "Values") -> Dict[int, np.ndarray]:
        """Tangent vectors taking each of our values to ``other``'s."""
        result: Dict[int, np.ndarray] = {}
        for key, wrapper in self.erased_items():
            result[key] = wrapper.local_coordinates(other._find("local_coordinates", key))
        return result


def _attempt(fn: Callable[[], Any]) -> Result:
    try:
        return Result.success(fn())
    except ValuesError as e:
        return Result.failure(e)
