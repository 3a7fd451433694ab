"""Jacobian-Free Newton-Krylov method with damped line search."""

import logging
import math
from typing import Optional

from flax import nnx

from ..algebra import AlgebraProtocol, BufferCache
from ..custom_types import ErrorCallback, ResidualFn, Vector
from ..exceptions import NonFiniteResidualError
from .config import JFNKConfig
from .jacobian import FiniteDifferenceJVP, Workspace
from .krylov import KrylovStep

logger = logging.getLogger(__name__)


class JFNK(nnx.Module):
    """
    Jacobian-Free Newton-Krylov root-finding algorithm.

    Iterative update: $x \\leftarrow x - \\alpha J^{-1}(x) f(x)$

    The correction $J^{-1} f$ is found with a Krylov solver whose operator
    is the central-difference Jacobian-vector product of f, so the Jacobian
    is never formed. The step scale alpha comes from a line search along
    the correction.

    Implements: RootFinderProtocol

    Attributes:
        config: Solver parameters (see JFNKConfig)

    Example usage:
    ```python
    import numpy as np
    from jax_jfnk import JFNK, NumpyAlgebra

    # a x b = c, solve for b
    a = np.array([1.0, 0.0, 0.0])
    c = np.array([0.0, 0.0, 1.0])

    def residual(out, x):
        out[:] = np.cross(a, x) - c

    algebra = NumpyAlgebra(3)
    x = algebra.from_array("x", [-1.0, -1.0, -1.0])
    JFNK(line_search="bisect")(residual, x, algebra)
    ```
    """

    def __init__(self, config: Optional[JFNKConfig] = None, **options):
        if config is not None and options:
            raise ValueError("Provide either config OR keyword options, not both.")
        self.config = config if config is not None else JFNKConfig(**options)

    def __call__(
        self,
        residual_fn: ResidualFn,
        x: Vector,
        algebra: AlgebraProtocol,
        dx: Optional[Vector] = None,
        error_callback: Optional[ErrorCallback] = None,
    ) -> Vector:
        """
        Find the root of residual_fn(x) = 0, updating x in place.

        Args:
            residual_fn: Residual with signature (out, x) -> None. Also
                called at trial points that are not Newton iterates.
            x: Initial guess, overwritten with the final iterate
            algebra: Vector backend owning x
            dx: Initial direction, used as the warm start of the first
                Krylov solve and updated in place. Defaults to a copy of x.
            error_callback: Called as error_callback(err, iteration) before
                the convergence test of every iteration. Returning True
                stops the solve. Defaults to `config.error_callback`.

        Returns:
            x. Reaching maxiter is not an error: the last iterate is
            returned and a warning is logged.
        """
        cfg = self.config
        norm = cfg.norm if cfg.norm is not None else algebra.norm
        line_search = cfg.line_search_method
        max_alpha = cfg.alpha
        if error_callback is None:
            error_callback = cfg.error_callback

        ws = Workspace.allocate(algebra)
        if dx is None:
            dx = algebra.new("dx")
            algebra.scale(dx, x, 1.0)

        cache = BufferCache(algebra)
        jvp = FiniteDifferenceJVP(
            residual_fn, x, algebra, ws, epsilon=cfg.jfnk_epsilon
        )
        krylov_step = KrylovStep(cfg.linsolver, jvp, cache)

        def residual_at_alpha(alpha: float) -> float:
            algebra.mul_add(ws.x_plus_dx, x, dx, -alpha)
            residual_fn(ws.f_of_x_plus_dx, ws.x_plus_dx)
            return float(norm(ws.f_of_x_plus_dx))

        err = math.nan
        for iteration in range(1, cfg.maxiter + 1):
            residual_fn(ws.f_of_x, x)
            err = float(norm(ws.f_of_x))

            if cfg.check_finite and not math.isfinite(err):
                raise NonFiniteResidualError(iteration, err)

            if error_callback is not None and error_callback(err, iteration):
                logger.info(
                    "JFNK stopped by error callback at iteration %d "
                    "(residual norm %.2e)", iteration, err
                )
                return x

            if err < cfg.epsilon:
                logger.info(
                    "JFNK converged at iteration %d (residual norm %.2e)",
                    iteration, err
                )
                return x

            # Solve (dF/dx) dx = f(x) using the Jacobian-free product
            krylov_step(dx, ws.f_of_x)

            # Trace along dx for the best step scale
            alpha, line_residual = line_search(residual_at_alpha, max_alpha)
            logger.debug(
                "iteration %d: err=%.3e alpha=%.6g line search residual=%s",
                iteration, err, alpha, line_residual
            )

            algebra.mul_add(x, x, dx, -alpha)

        logger.warning(
            "JFNK did not converge within %d iterations. "
            "Last residual norm: %.2e", cfg.maxiter, err
        )
        return x
