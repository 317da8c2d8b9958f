"""manifold_values: heterogeneous key -> manifold-element container.

This package provides:
- A type-erased value wrapper and a registry of per-type capabilities
- Insert/retrieve policies that store fixed-size arrays as dynamic ones
- The Values container with typed insert/update/at/exists
- Lazy filtered views and snapshot construction from a view
- Symbol keys, configuration and optional GTSAM interop

Design intent:
Keep the storage engine small and independent of any optimizer; the
optimizers consume it (see gtsam_bridge) but nothing here depends on them.
"""
from .errors import (
    ErrorKind,
    NoMatchFoundForFixed,
    Result,
    ValuesError,
    ValuesIncorrectType,
    ValuesKeyAlreadyExists,
    ValuesKeyDoesNotExist,
)
from .shapes import (
    DYNAMIC, Matrix, MatrixType, MatrixX, Vector, VectorX,
    Vector1, Vector2, Vector3, Vector4, Vector5, Vector6, Vector7, Vector8, Vector9,
    Matrix2, Matrix3, Matrix4, Matrix5, Matrix6,
)
from .generic import GenericValue, Value
from .traits import ValueTraits, register_traits, type_id_of
from .filtered import ConstFiltered, ConstKeyValuePair, Filtered, KeyValuePair
from .values import Values
from .config import ValuesConfig, configure_logging, load_config
from .keys import chr_filter, format_key, normalize_key, symbol, symbol_chr, symbol_index

__all__ = [
    "errors", "shapes", "traits", "generic", "dispatch", "filtered", "values",
    "config", "keys", "gtsam_bridge",
    "Values", "Value", "GenericValue", "Filtered", "ConstFiltered",
    "KeyValuePair", "ConstKeyValuePair", "ValueTraits", "register_traits", "type_id_of",
    "ErrorKind", "Result", "ValuesError", "ValuesKeyDoesNotExist", "ValuesKeyAlreadyExists",
    "ValuesIncorrectType", "NoMatchFoundForFixed",
    "DYNAMIC", "MatrixType", "Matrix", "Vector", "VectorX", "MatrixX",
    "Vector1", "Vector2", "Vector3", "Vector4", "Vector5", "Vector6", "Vector7", "Vector8",
    "Vector9", "Matrix2", "Matrix3", "Matrix4", "Matrix5", "Matrix6",
    "ValuesConfig", "configure_logging", "load_config",
    "symbol", "symbol_chr", "symbol_index", "format_key", "normalize_key", "chr_filter",
]
__version__ = "0.1.0"
