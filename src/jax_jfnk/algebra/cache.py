"""Named buffer cache shared across repeated Krylov solves."""

from typing import Dict, Iterator

from ..custom_types import Vector
from .protocol import AlgebraProtocol


class BufferCache:
    """
    Mapping from logical buffer name to vector.

    A name is allocated through the wrapped backend on first request and the
    same vector is returned for every later request. The cache lives for one
    solver run and is owned by it.
    """

    def __init__(self, algebra: AlgebraProtocol):
        self.algebra = algebra
        self._buffers: Dict[str, Vector] = {}

    def get(self, name: str) -> Vector:
        """Return the buffer called `name`, allocating it if needed."""
        if name not in self._buffers:
            self._buffers[name] = self.algebra.new(name)
        return self._buffers[name]

    def __contains__(self, name: str) -> bool:
        return name in self._buffers

    def __len__(self) -> int:
        return len(self._buffers)

    def __iter__(self) -> Iterator[str]:
        return iter(self._buffers)


class CachedAlgebra:
    """
    Algebra view whose `new` is served from a `BufferCache`.

    All other operations delegate to the backend the cache wraps.

    Implements: AlgebraProtocol
    """

    def __init__(self, cache: BufferCache):
        self.cache = cache
        self.backend = cache.algebra
        self.size = self.backend.size

    def new(self, name: str) -> Vector:
        return self.cache.get(name)

    def dot(self, a: Vector, b: Vector) -> float:
        return self.backend.dot(a, b)

    def norm(self, a: Vector) -> float:
        return self.backend.norm(a)

    def mul_add(self, dest: Vector, a: Vector, b: Vector, s: float) -> None:
        self.backend.mul_add(dest, a, b, s)

    def scale(self, dest: Vector, a: Vector, s: float) -> None:
        self.backend.scale(dest, a, s)
