"""Krylov solvers used for the Newton correction equation."""

from .protocol import KrylovSolverProtocol
from .gmres import GMRES


__all__ = [
    # Protocol
    "KrylovSolverProtocol",

    # Krylov methods
    "GMRES",
]
