"""
JAX Jacobian-Free Newton-Krylov

A Jacobian-free Newton-Krylov solver for nonlinear systems f(x) = 0, with
damped line search and buffer reuse across Krylov solves.

Main components:
- algebra: In-place vector backends (numpy, JAX) and the Krylov buffer cache
- linsolvers: Krylov solvers for the Newton correction equation
- rootfinders: The JFNK driver, line searches and its configuration
"""

# Solver interfaces
from .solve import jfnk, jfnk_with_history

# Newton driver
from .rootfinders import (
    JFNK,
    JFNKConfig,
    RootFinderProtocol,
    NoLineSearch,
    LinearLineSearch,
    BisectLineSearch,
    make_line_search,
)

# Krylov solvers
from .linsolvers import KrylovSolverProtocol, GMRES

# Vector backends
from .algebra import (
    AlgebraProtocol,
    NumpyAlgebra,
    JaxAlgebra,
    BufferCache,
    CachedAlgebra,
)

# Errors
from .exceptions import JFNKError, LineSearchConfigError, NonFiniteResidualError

__all__ = [
    # Solver interfaces
    "jfnk",
    "jfnk_with_history",

    # Newton driver
    "JFNK",
    "JFNKConfig",
    "RootFinderProtocol",
    "NoLineSearch",
    "LinearLineSearch",
    "BisectLineSearch",
    "make_line_search",

    # Krylov solvers
    "KrylovSolverProtocol",
    "GMRES",

    # Vector backends
    "AlgebraProtocol",
    "NumpyAlgebra",
    "JaxAlgebra",
    "BufferCache",
    "CachedAlgebra",

    # Errors
    "JFNKError",
    "LineSearchConfigError",
    "NonFiniteResidualError",
]
