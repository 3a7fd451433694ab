"""Shared behaviour of the concrete algebra backends."""

from abc import ABC, abstractmethod

import numpy as np

from ..custom_types import Vector


class AbstractAlgebra(ABC):
    """
    Base class for vector algebra backends.

    Subclasses provide allocation, `dot`, `mul_add`, `scale` and conversion
    to and from host arrays. The convergence metric `norm` is derived from
    `dot` as the mean squared magnitude.

    Implements: AlgebraProtocol
    """

    def __init__(self, size: int):
        if int(size) < 1:
            raise ValueError(f"size must be a positive integer, got {size}")
        self.size = int(size)

    @abstractmethod
    def new(self, name: str) -> Vector: ...

    @abstractmethod
    def dot(self, a: Vector, b: Vector) -> float: ...

    @abstractmethod
    def mul_add(self, dest: Vector, a: Vector, b: Vector, s: float) -> None: ...

    @abstractmethod
    def scale(self, dest: Vector, a: Vector, s: float) -> None: ...

    @abstractmethod
    def to_array(self, a: Vector) -> np.ndarray:
        """Copy a vector into a host numpy array."""
        ...

    @abstractmethod
    def assign(self, dest: Vector, values) -> None:
        """Overwrite the contents of dest with an array-like of length size."""
        ...

    def norm(self, a: Vector) -> float:
        return self.dot(a, a) / self.size

    def copy(self, dest: Vector, src: Vector) -> None:
        """dest = src"""
        self.scale(dest, src, 1.0)

    def from_array(self, name: str, values) -> Vector:
        """
        Allocate a named vector holding a copy of `values`.

        Args:
            name: Logical buffer name
            values: Array-like of length `size`

        Returns:
            New vector
        """
        values = np.asarray(values)
        if values.shape != (self.size,):
            raise ValueError(
                f"Expected values of shape ({self.size},), got {values.shape}"
            )
        vec = self.new(name)
        self.assign(vec, values)
        return vec
