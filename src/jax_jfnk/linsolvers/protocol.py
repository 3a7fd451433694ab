"""Protocol for Krylov solvers used by the Newton driver."""

from typing import Protocol, runtime_checkable

from ..algebra import AlgebraProtocol
from ..custom_types import LinearOperator, Vector


@runtime_checkable
class KrylovSolverProtocol(Protocol):
    """
    Protocol for in-place Krylov solvers.

    Defines the interface for solving linear systems of the form A*x = b
    where A is only available through its action on a vector. Any class
    implementing a __call__() method with this signature can be used as the
    inner solver of the JFNK driver.
    """

    def __call__(
        self,
        A: LinearOperator,
        b: Vector,
        x: Vector,
        algebra: AlgebraProtocol,
    ) -> None:
        """
        Solve the linear system A*x = b, overwriting x.

        Args:
            A: Linear operator with signature (result, v) -> None, writing
                A*v into result
            b: Right-hand side vector
            x: Initial guess, overwritten with the solution
            algebra: Vector backend. Work buffers must be requested through
                `algebra.new(name)` with names that do not change between
                calls.
        """
        ...
