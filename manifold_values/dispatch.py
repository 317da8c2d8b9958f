"""Insert-normalization and retrieval-reconciliation policies.

Both policies depend only on the inserted/requested type, never on container
state:

* ``wrap`` decides how a value is stored. Numeric arrays of any fixed or
  partially fixed shape are stored as their fully dynamic family
  (``VectorX`` when the column count is 1, ``MatrixX`` otherwise). Anything
  else is stored unchanged under its own class.
* ``handle`` decides how a stored wrapper answers a request for a type. An
  exact type-id match wins. A fixed-shape request falls back to the dynamic
  family and then checks the runtime dimensions; every other type fails
  straight away.
"""
from __future__ import annotations

from typing import Any
import numpy as np

from .errors import NoMatchFoundForFixed, ValuesIncorrectType
from .generic import GenericValue, Value
from .shapes import MatrixType, MatrixX, VectorX, infer_type, shape_of
from .traits import traits_for, type_id_of


def wrap(value: Any, value_type=None, dtype: str = "float64") -> Value:
    """Wrap ``value`` for storage; always returns a wrapper the caller does not share."""
    if isinstance(value, Value):
        return value.clone()
    if value_type is None:
        value_type = infer_type(value) if isinstance(value, np.ndarray) else type(value)
    if value_type is Value:
        raise TypeError("Value is not a storable type; pass the concrete type or omit it")
    if value_type is np.ndarray:
        value_type = infer_type(np.asarray(value))
    if isinstance(value_type, MatrixType):
        arr = value_type.to_dynamic(value, dtype)
        return GenericValue(arr, value_type.family)
    if type(value) is not value_type:
        raise TypeError(
            f"Cannot store {type_id_of(type(value))} as {type_id_of(value_type)}"
        )
    traits = traits_for(value_type)
    return GenericValue(traits.copy(value), value_type, traits)


def _array_request(wrapper: Value, value_type):
    """A plain ``np.ndarray`` request means whichever array family is stored."""
    if value_type is np.ndarray:
        if wrapper.type_id == VectorX.name:
            return VectorX
        if wrapper.type_id == MatrixX.name:
            return MatrixX
    return value_type


def _check(key: int, wrapper: Value, value_type) -> None:
    """Raise unless ``wrapper`` can answer a request for ``value_type``."""
    value_type = _array_request(wrapper, value_type)
    requested = type_id_of(value_type)
    if wrapper.type_id == requested:
        return
    if isinstance(value_type, MatrixType) and not value_type.is_dynamic:
        if wrapper.type_id != value_type.family.name:
            raise ValuesIncorrectType(key, wrapper.type_id, requested)
        rows, cols = shape_of(np.asarray(wrapper.value))
        if not value_type.accepts((rows, cols)):
            raise NoMatchFoundForFixed(value_type.rows, value_type.cols, rows, cols, key=key)
        return
    raise ValuesIncorrectType(key, wrapper.type_id, requested)


def handle(key: int, wrapper: Value, value_type) -> Any:
    """Typed copy of the wrapped value, or the wrapper itself for ``Value``."""
    if value_type is Value:
        return wrapper
    _check(key, wrapper, value_type)
    return wrapper.copy_value()


def handle_ref(key: int, wrapper: Value, value_type) -> Any:
    """Like ``handle`` but returns the stored element without copying."""
    if value_type is Value:
        return wrapper
    _check(key, wrapper, value_type)
    return wrapper.value


def matches(wrapper: Value, value_type) -> bool:
    """Non-raising form of the retrieval rule, used by filtered views."""
    if value_type is Value:
        return True
    value_type = _array_request(wrapper, value_type)
    if wrapper.type_id == type_id_of(value_type):
        return True
    if isinstance(value_type, MatrixType) and not value_type.is_dynamic:
        return wrapper.type_id == value_type.family.name and \
            value_type.accepts(shape_of(np.asarray(wrapper.value)))
    return False
