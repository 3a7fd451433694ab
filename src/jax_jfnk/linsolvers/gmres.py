"""Restarted GMRES written against the vector algebra protocol."""

import math

from flax import nnx
import numpy as np

from ..algebra import AlgebraProtocol
from ..custom_types import LinearOperator, Vector


class GMRES(nnx.Module):
    """
    Generalised Minimal Residual (GMRES) with restarts.

    Builds an orthonormal Krylov basis with modified Gram-Schmidt and
    minimises the residual over it. Only `new`, `dot`, `mul_add` and `scale`
    are used on vectors, so it runs on any algebra backend. The small
    Hessenberg least-squares problem is solved on the host with
    `numpy.linalg.lstsq`, which also copes with singular operators.

    Suitable for general non-symmetric systems.

    Implements: KrylovSolverProtocol

    Attributes:
        tol: Convergence tolerance for the residual norm relative to |b|
        restart: Number of basis vectors built before restarting
        maxiter: Maximum number of operator applications in the Arnoldi
            process, summed over restarts
        breakdown_tol: A new basis vector whose norm falls below this
            fraction of its pre-orthogonalisation norm ends the solve
    """

    def __init__(
        self,
        tol: float = 1e-10,
        restart: int = 20,
        maxiter: int = 100,
        breakdown_tol: float = 1e-12,
    ):
        if restart < 1:
            raise ValueError(f"restart must be at least 1, got {restart}")
        if maxiter < 1:
            raise ValueError(f"maxiter must be at least 1, got {maxiter}")
        self.tol = tol
        self.restart = restart
        self.maxiter = maxiter
        self.breakdown_tol = breakdown_tol

    def __call__(
        self,
        A: LinearOperator,
        b: Vector,
        x: Vector,
        algebra: AlgebraProtocol,
    ) -> None:
        """
        Solve A*x = b using GMRES, overwriting x.

        Args:
            A: Linear operator with signature (result, v) -> None
            b: Right-hand side vector
            x: Initial guess vector, overwritten with the solution
            algebra: Vector backend used for all work buffers
        """
        r = algebra.new("gmres_r")
        w = algebra.new("gmres_w")

        b_norm = math.sqrt(max(algebra.dot(b, b), 0.0))
        if b_norm == 0.0:
            algebra.scale(x, x, 0.0)
            return
        target = self.tol * b_norm

        iterations = 0
        while iterations < self.maxiter:
            # r = b - A x
            A(r, x)
            algebra.mul_add(r, b, r, -1.0)
            beta = math.sqrt(max(algebra.dot(r, r), 0.0))
            if beta <= target or not math.isfinite(beta):
                return

            v0 = algebra.new("gmres_v0")
            algebra.scale(v0, r, 1.0 / beta)
            basis = [v0]

            H = np.zeros((self.restart + 1, self.restart))
            g = np.zeros(self.restart + 1)
            g[0] = beta

            k = 0
            y = np.zeros(0)
            residual = beta
            breakdown = False
            for j in range(self.restart):
                if iterations >= self.maxiter:
                    break

                A(w, basis[j])
                iterations += 1
                w_norm = math.sqrt(max(algebra.dot(w, w), 0.0))

                # Modified Gram-Schmidt
                for i in range(j + 1):
                    H[i, j] = algebra.dot(w, basis[i])
                    algebra.mul_add(w, w, basis[i], -H[i, j])
                h = math.sqrt(max(algebra.dot(w, w), 0.0))
                if not math.isfinite(h):
                    breakdown = True
                    break
                H[j + 1, j] = h

                k = j + 1
                y, residual = self._least_squares(H[: k + 1, :k], g[: k + 1])

                breakdown = h <= self.breakdown_tol * w_norm
                if residual <= target or breakdown:
                    break

                v = algebra.new(f"gmres_v{j + 1}")
                algebra.scale(v, w, 1.0 / h)
                basis.append(v)

            if k == 0:
                return

            # x = x + V y
            for i in range(k):
                algebra.mul_add(x, x, basis[i], float(y[i]))

            if residual <= target or breakdown:
                return

    @staticmethod
    def _least_squares(H: np.ndarray, g: np.ndarray):
        """Minimise |H y - g| and return (y, residual norm)."""
        y, *_ = np.linalg.lstsq(H, g, rcond=None)
        return y, float(np.linalg.norm(H @ y - g))
