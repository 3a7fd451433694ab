"""Protocol for nonlinear root finders."""

from typing import Optional, Protocol, runtime_checkable

from ..algebra import AlgebraProtocol
from ..custom_types import ErrorCallback, ResidualFn, Vector


@runtime_checkable
class RootFinderProtocol(Protocol):
    """
    Protocol for in-place root-finding algorithms.

    Defines the interface for finding roots of nonlinear equations
    f(x) = 0 where both f and x live in a vector algebra backend.
    """

    def __call__(
        self,
        residual_fn: ResidualFn,
        x: Vector,
        algebra: AlgebraProtocol,
        dx: Optional[Vector] = None,
        error_callback: Optional[ErrorCallback] = None,
    ) -> Vector:
        """
        Find the root of residual_fn(x) = 0.

        Args:
            residual_fn: Function (out, x) -> None writing f(x) into out
            x: Initial guess, updated in place
            algebra: Vector backend owning x
            dx: Optional initial search direction
            error_callback: Optional (err, iteration) -> bool, stops the
                iteration when it returns True

        Returns:
            The final iterate (the same vector object as x)
        """
        ...
