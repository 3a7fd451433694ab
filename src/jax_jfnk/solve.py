"""Functional entry points for the JFNK solver."""

from typing import List, Optional, Tuple

from .algebra import AlgebraProtocol
from .custom_types import ErrorCallback, ResidualFn, Vector
from .rootfinders import JFNK


def jfnk(
    f: ResidualFn,
    x: Vector,
    algebra: AlgebraProtocol,
    *,
    dx: Optional[Vector] = None,
    error_callback: Optional[ErrorCallback] = None,
    **options,
) -> Vector:
    """
    Solve f(x) = 0 with the Jacobian-Free Newton-Krylov method.

    Args:
        f: Residual with signature (out, x) -> None
        x: Initial guess, updated in place
        algebra: Vector backend owning x
        dx: Optional initial direction (defaults to a copy of x)
        error_callback: Optional (err, iteration) -> bool early-stop hook
        **options: JFNKConfig fields: epsilon, maxiter, alpha, jfnk_epsilon,
            line_search, line_search_maxiter, linsolver, norm, check_finite

    Returns:
        The final iterate x

    Example usage:
    ```python
    import numpy as np
    from jax_jfnk import jfnk, NumpyAlgebra

    def f(out, x):
        out[:] = x**2 - 2.0

    algebra = NumpyAlgebra(4)
    x = algebra.from_array("x", np.ones(4))
    jfnk(f, x, algebra, line_search="linear", line_search_maxiter=20)
    ```
    """
    solver = JFNK(**options)
    return solver(f, x, algebra, dx=dx, error_callback=error_callback)


def jfnk_with_history(
    f: ResidualFn,
    x: Vector,
    algebra: AlgebraProtocol,
    *,
    dx: Optional[Vector] = None,
    error_callback: Optional[ErrorCallback] = None,
    **options,
) -> Tuple[Vector, List[Tuple[int, float]]]:
    """
    Solve f(x) = 0 and record the residual norm of every iteration.

    Takes the same arguments as `jfnk`. A user `error_callback` is still
    called and can still stop the solve.

    Returns:
        x: The final iterate
        history: List of (iteration, residual norm) pairs, one per
            iteration started
    """
    history = []

    def record(err: float, iteration: int) -> bool:
        history.append((iteration, err))
        if error_callback is not None:
            return bool(error_callback(err, iteration))
        return False

    x = jfnk(f, x, algebra, dx=dx, error_callback=record, **options)
    return x, history
