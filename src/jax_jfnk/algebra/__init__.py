"""Vector algebra backends used by the Newton and Krylov solvers."""

from .protocol import AlgebraProtocol
from .base import AbstractAlgebra
from .numpy_backend import NumpyAlgebra
from .jax_backend import JaxAlgebra, Buffer
from .cache import BufferCache, CachedAlgebra


__all__ = [
    # Protocol
    "AlgebraProtocol",
    "AbstractAlgebra",

    # Backends
    "NumpyAlgebra",
    "JaxAlgebra",
    "Buffer",

    # Krylov buffer reuse
    "BufferCache",
    "CachedAlgebra",
]
