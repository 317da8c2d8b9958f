"""Value capability registry: what the container needs from each stored type.

Every stored type gets a ``ValueTraits`` record carrying a stable type
identifier plus the few operations the container delegates (copy, tolerance
equality, tangent dimension, retract/local coordinates, printing). The
manifold math itself belongs to the value types; nothing here validates it.

Types without an explicit registration are handled by duck-typing the GTSAM
Python method names (``equals``, ``retract``, ``localCoordinates``, ``dim``),
so ``gtsam.Pose3`` and friends work without importing gtsam here.
"""
from __future__ import annotations

import copy as _copy
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
import numpy as np

from .shapes import MatrixType, MatrixX, VectorX

logger = logging.getLogger("manifold_values.traits")


@dataclass(frozen=True)
class ValueTraits:
    type_id: str
    copy: Callable[[Any], Any]
    equals: Callable[[Any, Any, float], bool]
    dim: Callable[[Any], int]
    retract: Optional[Callable[[Any, np.ndarray], Any]] = None
    local_coordinates: Optional[Callable[[Any, Any], np.ndarray]] = None
    describe: Callable[[Any], str] = repr


_REGISTRY: Dict[Any, ValueTraits] = {}


def type_id_of(value_type) -> str:
    """Stable, comparable identifier for a class or a ``MatrixType`` descriptor."""
    if isinstance(value_type, MatrixType):
        return value_type.name
    traits = _REGISTRY.get(value_type)
    if traits is not None:
        return traits.type_id
    return _qualified_name(value_type)


def _qualified_name(cls) -> str:
    module = getattr(cls, "__module__", None) or ""
    name = getattr(cls, "__qualname__", None) or getattr(cls, "__name__", repr(cls))
    if module in ("builtins", ""):
        return name
    return f"{module}.{name}"


def register_traits(value_type, traits: ValueTraits) -> None:
    if value_type in _REGISTRY:
        logger.warning("Replacing registered traits for %s", type_id_of(value_type))
    _REGISTRY[value_type] = traits


def traits_for(value_type) -> ValueTraits:
    traits = _REGISTRY.get(value_type)
    if traits is None:
        if isinstance(value_type, MatrixType):
            # only the dynamic families are ever stored
            return _REGISTRY[value_type.family]
        traits = _duck_traits(value_type)
        _REGISTRY[value_type] = traits
    return traits


# --- numeric arrays -------------------------------------------------------

def _array_copy(a: np.ndarray) -> np.ndarray:
    return np.array(a, copy=True)


def _array_equals(a: np.ndarray, b: np.ndarray, tol: float) -> bool:
    a = np.asarray(a)
    b = np.asarray(b)
    if a.shape != b.shape:
        return False
    return bool(np.all(np.abs(a - b) <= tol))


def _vector_retract(a: np.ndarray, delta) -> np.ndarray:
    return a + np.asarray(delta, dtype=a.dtype).reshape(a.shape)


def _matrix_retract(a: np.ndarray, delta) -> np.ndarray:
    # tangent vectors of matrices are column-major, as in GTSAM
    return a + np.asarray(delta, dtype=a.dtype).reshape(a.shape, order="F")


def _matrix_local(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return (np.asarray(b) - a).reshape(-1, order="F")


def _describe_array(a: np.ndarray) -> str:
    return np.array2string(np.asarray(a), precision=6, separator=", ")


register_traits(VectorX, ValueTraits(
    type_id=VectorX.name,
    copy=_array_copy,
    equals=_array_equals,
    dim=lambda a: int(np.asarray(a).size),
    retract=_vector_retract,
    local_coordinates=lambda a, b: np.asarray(b) - a,
    describe=_describe_array,
))

register_traits(MatrixX, ValueTraits(
    type_id=MatrixX.name,
    copy=_array_copy,
    equals=_array_equals,
    dim=lambda a: int(np.asarray(a).size),
    retract=_matrix_retract,
    local_coordinates=_matrix_local,
    describe=_describe_array,
))

def _scalar_traits(cls) -> ValueTraits:
    # retract keeps the scalar's own type so the stored type id does not change
    return ValueTraits(
        type_id=_qualified_name(cls),
        copy=lambda x: x,
        equals=lambda a, b, tol: bool(abs(a - b) <= tol),
        dim=lambda x: 1,
        retract=lambda x, d: cls(x + np.asarray(d).reshape(-1)[0]),
        local_coordinates=lambda a, b: np.array([b - a], dtype=float),
        describe=repr,
    )


register_traits(float, _scalar_traits(float))
for _cls in (np.float16, np.float32, np.float64, np.longdouble):
    if _cls not in _REGISTRY:
        register_traits(_cls, _scalar_traits(_cls))


# --- everything else ------------------------------------------------------

def _is_gtsam_class(cls) -> bool:
    return (getattr(cls, "__module__", "") or "").split(".")[0] == "gtsam"


def _duck_equals(a, b, tol: float) -> bool:
    if hasattr(a, "equals"):
        return bool(a.equals(b, tol))
    return bool(a == b)


def _duck_dim(a) -> int:
    if hasattr(a, "dim"):
        return int(a.dim())
    raise TypeError(f"{type(a).__name__} does not expose dim()")


def _duck_retract(a, delta):
    if not hasattr(a, "retract"):
        raise TypeError(f"{type(a).__name__} does not expose retract()")
    return a.retract(np.asarray(delta, dtype=float))


def _duck_local(a, b) -> np.ndarray:
    for name in ("localCoordinates", "local_coordinates"):
        fn = getattr(a, name, None)
        if fn is not None:
            return np.asarray(fn(b), dtype=float)
    raise TypeError(f"{type(a).__name__} does not expose localCoordinates()")


def _duck_traits(cls) -> ValueTraits:
    if _is_gtsam_class(cls):
        # wrapped geometry types have value semantics: methods return new objects
        copier = lambda x: x
    else:
        copier = _copy.deepcopy
    return ValueTraits(
        type_id=_qualified_name(cls),
        copy=copier,
        equals=_duck_equals,
        dim=_duck_dim,
        retract=_duck_retract,
        local_coordinates=_duck_local,
        describe=repr,
    )
