"""
Solve a x b = c for b with the JFNK solver.

The cross product with a fixed vector is singular, so the Newton
correction is found in the least-squares sense by GMRES and the solver
converges to one of the infinitely many solutions.
"""

import argparse
import logging

import numpy as np

from jax_jfnk import jfnk, NumpyAlgebra


def main():
    parser = argparse.ArgumentParser(description='Solve cross((1,0,0), x) = (0,0,1) with JFNK')
    parser.add_argument('--line_search', type=str, default='bisect', help="Line search: 'none', 'linear' or 'bisect' (default: bisect)")
    parser.add_argument('--alpha', type=float, default=1.0, help='Maximum step scale (default: 1.0)')
    parser.add_argument('--maxiter', type=int, default=100, help='Maximum Newton iterations (default: 100)')
    parser.add_argument('--verbose', action='store_true', help='Log every Newton iteration')
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    a = np.array([1.0, 0.0, 0.0])
    c = np.array([0.0, 0.0, 1.0])

    def residual(out, x):
        out[:] = np.cross(a, x) - c

    def error_callback(err, iteration):
        print(f"err {err:.6e} iter {iteration}")

    algebra = NumpyAlgebra(3)
    x = algebra.from_array("x", [-1.0, -1.0, -1.0])

    jfnk(
        residual, x, algebra,
        error_callback=error_callback,
        line_search=args.line_search,
        alpha=args.alpha,
        maxiter=args.maxiter,
    )

    print(f"x = {x}")
    print(f"a x b = {np.cross(a, x)}")


if __name__ == "__main__":
    main()
