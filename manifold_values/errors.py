"""Error kinds raised by the Values container and its type dispatcher."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(Enum):
    KEY_NOT_FOUND = "key_not_found"
    KEY_ALREADY_EXISTS = "key_already_exists"
    TYPE_MISMATCH = "type_mismatch"
    SHAPE_MISMATCH = "shape_mismatch"


class ValuesError(Exception):
    """Base class for every error surfaced by a Values container."""

    kind: ErrorKind


class ValuesKeyDoesNotExist(ValuesError, KeyError):
    kind = ErrorKind.KEY_NOT_FOUND

    def __init__(self, operation: str, key: int):
        self.operation = operation
        self.key = key
        super().__init__(f"Attempting to {operation} the key {key}, which does not exist in the Values.")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class ValuesKeyAlreadyExists(ValuesError, KeyError):
    kind = ErrorKind.KEY_ALREADY_EXISTS

    def __init__(self, key: int):
        self.key = key
        super().__init__(f"Attempting to add a key-value pair with key {key}, key already exists.")

    def __str__(self) -> str:
        return self.args[0]


class ValuesIncorrectType(ValuesError, TypeError):
    """Stored type disagrees with the requested one.

    ``stored_type`` and ``requested_type`` are the stable type descriptors
    (see ``manifold_values.traits.type_id_of``), not Python classes.
    """

    kind = ErrorKind.TYPE_MISMATCH

    def __init__(self, key: int, stored_type: str, requested_type: str):
        self.key = key
        self.stored_type = stored_type
        self.requested_type = requested_type
        super().__init__(
            f"Attempting to retrieve value with key {key}, type stored in Values is "
            f"{stored_type} but requested type was {requested_type}"
        )


class NoMatchFoundForFixed(ValuesError, ValueError):
    """A dynamic array was found but its dimensions differ from the fixed request."""

    kind = ErrorKind.SHAPE_MISMATCH

    def __init__(self, rows: int, cols: int, actual_rows: int, actual_cols: int,
                 key: Optional[int] = None):
        self.rows = rows
        self.cols = cols
        self.actual_rows = actual_rows
        self.actual_cols = actual_cols
        self.key = key
        where = f" for key {key}" if key is not None else ""
        super().__init__(
            f"Attempting to retrieve fixed-size {_dim(rows)}x{_dim(cols)} value{where}, "
            f"but found dynamic value of size {actual_rows}x{actual_cols}"
        )

    @property
    def requested_shape(self):
        return self.rows, self.cols

    @property
    def stored_shape(self):
        return self.actual_rows, self.actual_cols


def _dim(n: int) -> str:
    return "X" if n < 0 else str(n)


@dataclass(frozen=True)
class Result(Generic[T]):
    """Explicit success/error outcome of a container operation.

    Exactly one of ``value`` (with ``error is None``) or ``error`` is meaningful.
    A successful ``exists`` on an absent key is ``Result(ok=True, value=None)``.
    """

    ok: bool
    value: Optional[T] = None
    error: Optional[ValuesError] = None

    @classmethod
    def success(cls, value: Any = None) -> "Result":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: ValuesError) -> "Result":
        return cls(ok=False, error=error)

    @property
    def kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error is not None else None

    def unwrap(self) -> T:
        if not self.ok:
            raise self.error
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value if self.ok else default

    def __bool__(self) -> bool:
        return self.ok
