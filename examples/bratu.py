"""
Solve the 1D Bratu problem with the JAX backend.

    -u''(x) = lam * exp(u(x)),  u(0) = u(1) = 0

discretised with second-order central differences on the interior points.
The lower solution branch exists for lam < 3.51.
"""

import argparse

import jax.numpy as jnp

from jax_jfnk import JFNK, JaxAlgebra, GMRES


def make_residual(n: int, lam: float):
    """Residual of the discrete Bratu problem with n interior points."""
    h = 1.0 / (n + 1)

    def residual(out, u):
        u_pad = jnp.pad(u[...], 1)
        laplacian = (u_pad[2:] - 2.0 * u_pad[1:-1] + u_pad[:-2]) / h**2
        out[...] = -laplacian - lam * jnp.exp(u[...])

    return residual


def main():
    parser = argparse.ArgumentParser(description='Solve the 1D Bratu problem with JFNK')
    parser.add_argument('--n', type=int, default=63, help='Number of interior grid points (default: 63)')
    parser.add_argument('--lam', type=float, default=1.0, help='Bratu parameter (default: 1.0)')
    parser.add_argument('--line_search', type=str, default='bisect', help="Line search: 'none', 'linear' or 'bisect' (default: bisect)")
    args = parser.parse_args()

    algebra = JaxAlgebra(args.n)
    u = algebra.new("u")

    solver = JFNK(
        epsilon=1e-8,
        jfnk_epsilon=1e-3,
        line_search=args.line_search,
        line_search_maxiter=20,
        linsolver=GMRES(tol=1e-4, restart=args.n, maxiter=4 * args.n),
    )
    solver(
        make_residual(args.n, args.lam), u, algebra,
        error_callback=lambda err, it: print(f"iter {it}: err {err:.3e}"),
    )

    print(f"max u = {float(jnp.max(u[...])):.6f}")


if __name__ == "__main__":
    main()
