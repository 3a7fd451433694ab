"""
Line search policies for damping the Newton step.

Each policy picks a step scale alpha in [0, max_alpha] along the Newton
direction, trying to minimise residual_at_alpha(alpha) = |f(x - alpha*dx)|.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Tuple

from ..custom_types import ResidualAtAlpha
from ..exceptions import LineSearchConfigError


@dataclass(frozen=True)
class AbstractLineSearch(ABC):
    """
    Base class for line searches.

    Attributes:
        maxiter: Iteration budget of the search
    """

    maxiter: int = 100

    def __post_init__(self):
        if self.maxiter < 1:
            raise ValueError(
                f"Line search maxiter must be at least 1, got {self.maxiter}"
            )

    @abstractmethod
    def __call__(
        self, residual_at_alpha: ResidualAtAlpha, max_alpha: float
    ) -> Tuple[float, Optional[float]]:
        """
        Choose a step scale.

        Args:
            residual_at_alpha: Residual norm at x - alpha*dx
            max_alpha: Upper end of the search interval

        Returns:
            (alpha, residual at alpha). The residual is None when the
            policy does not evaluate it.
        """
        ...


@dataclass(frozen=True)
class NoLineSearch(AbstractLineSearch):
    """Take the full step without evaluating the residual."""

    def __call__(self, residual_at_alpha, max_alpha):
        return max_alpha, None


@dataclass(frozen=True)
class LinearLineSearch(AbstractLineSearch):
    """
    Uniform grid search.

    Evaluates maxiter + 1 equally spaced points in [0, max_alpha], both ends
    included, and keeps the first point with the smallest residual.
    """

    def __call__(self, residual_at_alpha, max_alpha):
        best_alpha = 0.0
        best_residual = float("inf")
        for i in range(self.maxiter + 1):
            alpha = max_alpha * i / self.maxiter
            residual = residual_at_alpha(alpha)
            if residual < best_residual:
                best_alpha, best_residual = alpha, residual
        return best_alpha, best_residual


@dataclass(frozen=True)
class BisectLineSearch(AbstractLineSearch):
    """
    Bracket bisection.

    Starts from the bracket [0, max_alpha] and repeatedly evaluates the
    midpoint, replacing one endpoint per iteration:

    - midpoint worse than both ends: stop.
    - midpoint better than both ends: replace the worse end
      (the right end on a tie).
    - midpoint better than the left end: replace the left end.
    - otherwise: replace the right end.

    Returns the end with the smaller residual, the right end on a tie.
    Assumes the residual is roughly unimodal along the search direction.
    """

    def __call__(self, residual_at_alpha, max_alpha):
        alpha_l = 0.0
        alpha_r = max_alpha
        residual_l = residual_at_alpha(alpha_l)
        residual_r = residual_at_alpha(alpha_r)
        for _ in range(self.maxiter):
            alpha_mid = 0.5 * (alpha_l + alpha_r)
            residual_mid = residual_at_alpha(alpha_mid)
            if residual_mid > residual_l and residual_mid > residual_r:
                break
            if residual_mid < residual_l and residual_mid < residual_r:
                if residual_l <= residual_r:
                    alpha_r, residual_r = alpha_mid, residual_mid
                else:
                    alpha_l, residual_l = alpha_mid, residual_mid
            elif residual_mid < residual_l:
                alpha_l, residual_l = alpha_mid, residual_mid
            else:
                alpha_r, residual_r = alpha_mid, residual_mid
        if residual_l < residual_r:
            return alpha_l, residual_l
        return alpha_r, residual_r


LINE_SEARCHES = {
    "none": NoLineSearch,
    "linear": LinearLineSearch,
    "bisect": BisectLineSearch,
}


def make_line_search(name: str, maxiter: int = 100) -> AbstractLineSearch:
    """
    Build the line search registered under `name`.

    Args:
        name: One of 'none', 'linear', 'bisect'
        maxiter: Iteration budget of the search

    Returns:
        Line search instance

    Raises:
        LineSearchConfigError: If `name` is not a known policy
    """
    try:
        cls = LINE_SEARCHES[name]
    except (KeyError, TypeError):
        raise LineSearchConfigError(name, tuple(LINE_SEARCHES)) from None
    return cls(maxiter=maxiter)
