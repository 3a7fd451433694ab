"""Configuration of the JFNK driver."""

from dataclasses import dataclass, field
from typing import Optional, Union

from ..custom_types import ErrorCallback, NormFn
from ..linsolvers import GMRES, KrylovSolverProtocol
from .linesearch import AbstractLineSearch, make_line_search


@dataclass(frozen=True)
class JFNKConfig:
    """
    Immutable solver parameters, validated once at construction.

    Attributes:
        epsilon: Convergence tolerance on the residual norm
        maxiter: Maximum number of Newton iterations
        alpha: Maximum (and, without line search, the actual) step scale
        jfnk_epsilon: Perturbation size of the finite-difference
            Jacobian-vector product
        line_search: Line search policy, 'none', 'linear' or 'bisect'
        line_search_maxiter: Iteration budget of the line search
        linsolver: Krylov solver for the correction equation
        norm: Optional residual metric replacing the backend's `norm`
        check_finite: Raise NonFiniteResidualError on NaN/Inf residual norms
        error_callback: Default early-stop hook (err, iteration) -> bool,
            used when none is passed to the solve call
    """

    epsilon: float = 1e-10
    maxiter: int = 100
    alpha: float = 1.0
    jfnk_epsilon: float = 1e-6
    line_search: Union[str, AbstractLineSearch] = "bisect"
    line_search_maxiter: int = 100
    linsolver: KrylovSolverProtocol = field(default_factory=GMRES)
    norm: Optional[NormFn] = None
    check_finite: bool = False
    error_callback: Optional[ErrorCallback] = None
    line_search_method: AbstractLineSearch = field(init=False, repr=False)

    def __post_init__(self):
        if not self.epsilon > 0:
            raise ValueError(f"epsilon must be positive, got {self.epsilon}")
        if self.maxiter < 1:
            raise ValueError(f"maxiter must be at least 1, got {self.maxiter}")
        if not self.alpha > 0:
            raise ValueError(f"alpha must be positive, got {self.alpha}")
        if not self.jfnk_epsilon > 0:
            raise ValueError(
                f"jfnk_epsilon must be positive, got {self.jfnk_epsilon}"
            )
        if not callable(self.linsolver):
            raise TypeError("linsolver must be callable as (A, b, x, algebra)")
        if self.error_callback is not None and not callable(self.error_callback):
            raise TypeError("error_callback must be callable as (err, iteration)")

        if isinstance(self.line_search, AbstractLineSearch):
            method = self.line_search
        else:
            method = make_line_search(
                self.line_search, self.line_search_maxiter
            )
        object.__setattr__(self, "line_search_method", method)
