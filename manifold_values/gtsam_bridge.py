"""Conversion between ``Values`` and ``gtsam.Values``.

gtsam is optional; only these two functions need it.
"""
from typing import Callable, Iterable, Optional
import logging

try:
    import gtsam
except Exception:
    gtsam = None

from .errors import ValuesKeyAlreadyExists
from .generic import Value
from .shapes import MatrixType
from .values import Values

logger = logging.getLogger("manifold_values.gtsam")


def _require_gtsam():
    if gtsam is None:
        raise RuntimeError("GTSAM not available; cannot convert Values")


def accessor_name(value_type) -> str:
    """Name of the typed ``gtsam.Values`` getter for ``value_type``."""
    if isinstance(value_type, MatrixType):
        return "atVector" if value_type.is_vector else "atMatrix"
    if value_type is float:
        return "atDouble"
    return "at" + getattr(value_type, "__name__", str(value_type))


def to_gtsam(values: Values) -> "gtsam.Values":
    """Copy every entry into a fresh ``gtsam.Values``."""
    _require_gtsam()
    out = gtsam.Values()
    for key, wrapper in values.erased_items():
        out.insert(key, wrapper.copy_value())
    logger.debug("Converted %d entries to gtsam.Values", values.size())
    return out


def from_gtsam(gvalues: "gtsam.Values",
               value_type,
               keys: Optional[Iterable[int]] = None,
               predicate: Optional[Callable[[int], bool]] = None,
               into: Optional[Values] = None) -> Values:
    """Read entries of ``value_type`` out of a ``gtsam.Values``.

    gtsam's Python wrapper has no type-erased getter, so every key read must
    hold ``value_type``; pass ``keys`` or ``predicate`` for mixed containers.
    When ``into`` is given, nothing is added if any selected key is already
    present (``ValuesKeyAlreadyExists``).
    """
    _require_gtsam()
    if value_type is Value:
        raise TypeError("from_gtsam needs a concrete value type")
    getter_name = accessor_name(value_type)
    getter = getattr(gvalues, getter_name, None)
    if getter is None:
        raise TypeError(f"gtsam.Values has no accessor {getter_name}")
    out = into if into is not None else Values()
    wanted = [int(k) for k in (gvalues.keys() if keys is None else keys)]
    if predicate is not None:
        wanted = [k for k in wanted if predicate(k)]
    for key in wanted:
        if out.contains(key):
            raise ValuesKeyAlreadyExists(key)
    staged = Values(config=out.config)
    for key in wanted:
        staged.insert(key, getter(key), value_type)
    out.insert_values(staged)
    logger.debug("Read %d entries from gtsam.Values", len(wanted))
    return out
