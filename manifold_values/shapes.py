"""Shape descriptors for numeric-array manifold elements.

numpy arrays carry no compile-time shape, so fixed vs dynamic is expressed by
``MatrixType`` descriptors passed alongside the array. Only the two fully
dynamic families (``VectorX`` and ``MatrixX``) are ever stored; fixed
descriptors exist at the insert/retrieve boundary.

Descriptors compare and hash by ``(rows, cols)``, so
``Vector(3) == Matrix(3, 1)``.
"""
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple
import numpy as np

from .errors import NoMatchFoundForFixed

DYNAMIC = -1


@dataclass(frozen=True)
class MatrixType:
    rows: int
    cols: int

    def __post_init__(self):
        for n in (self.rows, self.cols):
            if not isinstance(n, int) or isinstance(n, bool) or n < DYNAMIC or n == 0:
                raise ValueError(f"Invalid matrix dimension {n!r}; use a positive int or DYNAMIC")

    @property
    def is_vector(self) -> bool:
        return self.cols == 1

    @property
    def family(self) -> "MatrixType":
        """Fully dynamic representation of this element family."""
        return VectorX if self.is_vector else MatrixX

    @property
    def is_dynamic(self) -> bool:
        return self == self.family

    @property
    def is_fixed(self) -> bool:
        return self.rows != DYNAMIC and self.cols != DYNAMIC

    @property
    def name(self) -> str:
        if self.is_vector:
            return "VectorX" if self.rows == DYNAMIC else f"Vector{self.rows}"
        if self.rows == DYNAMIC and self.cols == DYNAMIC:
            return "MatrixX"
        return f"Matrix{_dim(self.rows)}x{_dim(self.cols)}"

    def accepts(self, shape: Tuple[int, int]) -> bool:
        rows, cols = shape
        return (self.rows == DYNAMIC or self.rows == rows) and \
               (self.cols == DYNAMIC or self.cols == cols)

    def to_dynamic(self, value, dtype="float64") -> np.ndarray:
        """Copy ``value`` into its canonical dynamic-family array.

        Vectors become 1-D arrays (a column ``(n, 1)`` array is flattened),
        matrices 2-D arrays. Raises ``NoMatchFoundForFixed`` when the array
        disagrees with a fixed dimension of this descriptor.
        """
        arr = np.array(value, dtype=dtype)
        if self.is_vector:
            if arr.ndim == 2 and arr.shape[1] == 1:
                arr = arr.reshape(-1)
            if arr.ndim != 1:
                raise ValueError(f"{self.name} expects a 1-D array or a column, got shape {arr.shape}")
        elif arr.ndim != 2:
            raise ValueError(f"{self.name} expects a 2-D array, got shape {arr.shape}")
        shape = shape_of(arr)
        if not self.accepts(shape):
            raise NoMatchFoundForFixed(self.rows, self.cols, shape[0], shape[1])
        return arr

    def __repr__(self) -> str:
        return self.name


def _dim(n: int) -> str:
    return "X" if n == DYNAMIC else str(n)


def shape_of(arr: np.ndarray) -> Tuple[int, int]:
    """Runtime ``(rows, cols)``; a 1-D array is a column."""
    if arr.ndim == 1:
        return int(arr.shape[0]), 1
    return int(arr.shape[0]), int(arr.shape[1])


def infer_type(arr: np.ndarray) -> MatrixType:
    if arr.ndim == 1:
        return VectorX
    if arr.ndim == 2:
        return MatrixX
    raise ValueError(f"Only 1-D and 2-D arrays can be stored, got shape {arr.shape}")


VectorX = MatrixType(DYNAMIC, 1)
MatrixX = MatrixType(DYNAMIC, DYNAMIC)


@lru_cache(maxsize=None)
def Matrix(rows: int, cols: int) -> MatrixType:
    return MatrixType(rows, cols)


def Vector(rows: int) -> MatrixType:
    return Matrix(rows, 1)


Vector1, Vector2, Vector3, Vector4, Vector5, Vector6, Vector7, Vector8, Vector9 = (
    Vector(n) for n in range(1, 10)
)
Matrix2, Matrix3, Matrix4, Matrix5, Matrix6 = (Matrix(n, n) for n in range(2, 7))
