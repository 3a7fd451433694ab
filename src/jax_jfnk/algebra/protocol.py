"""Protocol for the vector algebra backends consumed by the solvers."""

from typing import Protocol, runtime_checkable

from ..custom_types import Vector


@runtime_checkable
class AlgebraProtocol(Protocol):
    """
    Protocol for vector algebra backends.

    Defines the small set of in-place operations the Newton driver and the
    Krylov solvers are written against. Vectors are opaque to the solvers:
    they are only ever created through `new` and modified through
    `mul_add` and `scale`.

    Attributes:
        size: Length of every vector created by the backend
    """

    size: int

    def new(self, name: str) -> Vector:
        """
        Allocate a zero-filled vector.

        Args:
            name: Logical name of the buffer (used for caching and debugging)

        Returns:
            A fresh vector of length `size`
        """
        ...

    def dot(self, a: Vector, b: Vector) -> float:
        """Inner product of a and b."""
        ...

    def norm(self, a: Vector) -> float:
        """Convergence metric of a. Mean squared magnitude by default."""
        ...

    def mul_add(self, dest: Vector, a: Vector, b: Vector, s: float) -> None:
        """
        Compute dest = a + s * b in place.

        `dest` may alias `a` or `b`.
        """
        ...

    def scale(self, dest: Vector, a: Vector, s: float) -> None:
        """
        Compute dest = s * a in place.

        `dest` may alias `a`.
        """
        ...
