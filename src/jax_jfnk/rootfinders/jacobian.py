"""Jacobian-free directional derivative by central differences."""

from dataclasses import dataclass

from ..algebra import AlgebraProtocol
from ..custom_types import ResidualFn, Vector


@dataclass(frozen=True)
class Workspace:
    """
    Buffers reused by every Newton iteration of one solver run.

    Attributes:
        f_of_x: Residual at the current iterate
        x_plus_dx: Forward trial point (also the line search trial point)
        x_minus_dx: Backward trial point
        f_of_x_plus_dx: Residual at x_plus_dx
        f_of_x_minus_dx: Residual at x_minus_dx
    """

    f_of_x: Vector
    x_plus_dx: Vector
    x_minus_dx: Vector
    f_of_x_plus_dx: Vector
    f_of_x_minus_dx: Vector

    @classmethod
    def allocate(cls, algebra: AlgebraProtocol) -> "Workspace":
        return cls(
            f_of_x=algebra.new("f_of_x"),
            x_plus_dx=algebra.new("x_plus_dx"),
            x_minus_dx=algebra.new("x_minus_dx"),
            f_of_x_plus_dx=algebra.new("f_of_x_plus_dx"),
            f_of_x_minus_dx=algebra.new("f_of_x_minus_dx"),
        )


class FiniteDifferenceJVP:
    """
    Matrix-free Jacobian-vector product of a residual function.

    $$ J(x) v \\approx \\frac{f(x + e v) - f(x - e v)}{2 e} $$

    The product is second-order accurate in e. The perturbation e is fixed
    for the lifetime of the operator. `x` is held by reference, so the
    operator always differentiates at the driver's current iterate.

    Attributes:
        residual_fn: Residual with signature (out, x) -> None
        x: Point at which the Jacobian is taken
        algebra: Vector backend
        workspace: Buffers for the trial points and their residuals
        epsilon: Finite-difference perturbation size
    """

    def __init__(
        self,
        residual_fn: ResidualFn,
        x: Vector,
        algebra: AlgebraProtocol,
        workspace: Workspace,
        epsilon: float = 1e-6,
    ):
        self.residual_fn = residual_fn
        self.x = x
        self.algebra = algebra
        self.workspace = workspace
        self.epsilon = epsilon

    def __call__(self, result: Vector, v: Vector) -> None:
        """Write the approximate J(x) v into result."""
        ws = self.workspace
        alg = self.algebra
        alg.mul_add(ws.x_plus_dx, self.x, v, self.epsilon)
        alg.mul_add(ws.x_minus_dx, self.x, v, -self.epsilon)
        self.residual_fn(ws.f_of_x_plus_dx, ws.x_plus_dx)
        self.residual_fn(ws.f_of_x_minus_dx, ws.x_minus_dx)
        alg.mul_add(result, ws.f_of_x_plus_dx, ws.f_of_x_minus_dx, -1.0)
        alg.scale(result, result, 1.0 / (2.0 * self.epsilon))
