"""Root-finding algorithms built on Jacobian-free Krylov solves."""

from .protocol import RootFinderProtocol
from .config import JFNKConfig
from .jacobian import FiniteDifferenceJVP, Workspace
from .krylov import KrylovStep
from .linesearch import (
    AbstractLineSearch,
    NoLineSearch,
    LinearLineSearch,
    BisectLineSearch,
    make_line_search,
)
from .jfnk import JFNK


__all__ = [
    "RootFinderProtocol",
    "JFNKConfig",
    "JFNK",

    # Building blocks
    "FiniteDifferenceJVP",
    "Workspace",
    "KrylovStep",

    # Line searches
    "AbstractLineSearch",
    "NoLineSearch",
    "LinearLineSearch",
    "BisectLineSearch",
    "make_line_search",
]
