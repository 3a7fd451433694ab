"""Adapter handing the Newton correction equation to a Krylov solver."""

from ..algebra import BufferCache, CachedAlgebra
from ..custom_types import LinearOperator, Vector
from ..linsolvers import KrylovSolverProtocol


class KrylovStep:
    """
    Solves (dF/dx) dx = F(x) for the Newton direction.

    Passes the operator, right-hand side and warm-start guess straight
    through to the Krylov solver. The only thing added is the buffer
    cache: the solver allocates through a `CachedAlgebra`, so each named
    work buffer is created once per run rather than once per Newton
    iteration.

    Attributes:
        linsolver: Krylov solver
        operator: Jacobian-vector product at the current iterate
        cache: Buffer cache owned by the current solver run
    """

    def __init__(
        self,
        linsolver: KrylovSolverProtocol,
        operator: LinearOperator,
        cache: BufferCache,
    ):
        self.linsolver = linsolver
        self.operator = operator
        self.cache = cache
        self.algebra = CachedAlgebra(cache)

    def __call__(self, dx: Vector, rhs: Vector) -> None:
        """
        Refine dx in place.

        Args:
            dx: Previous direction on entry, new direction on exit
            rhs: Residual F(x) at the current iterate
        """
        self.linsolver(self.operator, rhs, dx, self.algebra)
