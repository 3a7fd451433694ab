"""Vector algebra on host numpy arrays."""

import numpy as np

from .base import AbstractAlgebra


class NumpyAlgebra(AbstractAlgebra):
    """
    In-place vector algebra on 1-D numpy arrays.

    Attributes:
        size: Vector length
        dtype: Floating point type of every allocated vector
    """

    def __init__(self, size: int, dtype=np.float64):
        super().__init__(size)
        self.dtype = np.dtype(dtype)

    def new(self, name: str) -> np.ndarray:
        return np.zeros(self.size, dtype=self.dtype)

    def dot(self, a: np.ndarray, b: np.ndarray) -> float:
        return float(np.dot(a, b))

    def mul_add(
        self, dest: np.ndarray, a: np.ndarray, b: np.ndarray, s: float
    ) -> None:
        # Right-hand side is materialised before the write, so aliasing is safe
        dest[...] = a + s * b

    def scale(self, dest: np.ndarray, a: np.ndarray, s: float) -> None:
        np.multiply(a, s, out=dest, casting="unsafe")

    def to_array(self, a: np.ndarray) -> np.ndarray:
        return np.array(a, copy=True)

    def assign(self, dest: np.ndarray, values) -> None:
        dest[...] = values
