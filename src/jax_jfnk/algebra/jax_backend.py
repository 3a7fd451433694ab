"""Vector algebra on JAX arrays held in mutable flax buffers."""

from flax import nnx
import jax
from jax import Array
import jax.numpy as jnp
import numpy as np

from .base import AbstractAlgebra


class Buffer(nnx.Variable):
    """Mutable named container for a 1-D JAX array."""

    pass


@jax.jit
def _mul_add(a: Array, b: Array, s: Array) -> Array:
    return a + s * b


@jax.jit
def _scale(a: Array, s: Array) -> Array:
    return s * a


@jax.jit
def _dot(a: Array, b: Array) -> Array:
    return jnp.vdot(a, b)


class JaxAlgebra(AbstractAlgebra):
    """
    In-place vector algebra on JAX arrays.

    JAX arrays are immutable, so each vector is a `Buffer` whose array
    (`buffer[...]`) is replaced by the result of a JIT-compiled kernel.
    The kernels are compiled once per dtype/size on first use.

    Residual functions used with this backend read `x[...]` and assign
    `out[...] = ...`.

    Attributes:
        size: Vector length
        dtype: JAX dtype of every allocated vector
    """

    def __init__(self, size: int, dtype=jnp.float32):
        super().__init__(size)
        self.dtype = jnp.dtype(dtype)

    def new(self, name: str) -> Buffer:
        return Buffer(jnp.zeros((self.size,), dtype=self.dtype))

    def dot(self, a: Buffer, b: Buffer) -> float:
        return float(_dot(a[...], b[...]))

    def mul_add(self, dest: Buffer, a: Buffer, b: Buffer, s: float) -> None:
        dest[...] = _mul_add(a[...], b[...], self._scalar(s))

    def scale(self, dest: Buffer, a: Buffer, s: float) -> None:
        dest[...] = _scale(a[...], self._scalar(s))

    def to_array(self, a: Buffer) -> np.ndarray:
        return np.asarray(a[...]).copy()

    def assign(self, dest: Buffer, values) -> None:
        dest[...] = jnp.asarray(values, dtype=self.dtype)

    def _scalar(self, s: float) -> Array:
        # Traced as an argument so new step sizes never trigger a recompile
        return jnp.asarray(s, dtype=self.dtype)
