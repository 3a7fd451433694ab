"""Unit tests for the Jacobian-free Newton-Krylov driver."""

from collections import Counter

import pytest
import numpy as np
import jax.numpy as jnp

from jax_jfnk.algebra import NumpyAlgebra, JaxAlgebra, BufferCache
from jax_jfnk.exceptions import LineSearchConfigError, NonFiniteResidualError
from jax_jfnk.linsolvers import GMRES
from jax_jfnk.rootfinders import (
    JFNK,
    JFNKConfig,
    RootFinderProtocol,
    FiniteDifferenceJVP,
    KrylovStep,
    Workspace,
    BisectLineSearch,
    NoLineSearch,
)


A_VEC = np.array([1.0, 0.0, 0.0])
C_VEC = np.array([0.0, 0.0, 1.0])


def cross_residual(out, x):
    """a x b = c, solved for b."""
    out[:] = np.cross(A_VEC, x) - C_VEC


class CountingAlgebra(NumpyAlgebra):
    """Numpy backend counting allocations per buffer name."""

    def __init__(self, size):
        super().__init__(size)
        self.allocations = Counter()

    def new(self, name):
        self.allocations[name] += 1
        return super().new(name)


@pytest.fixture
def cross_product_system():
    """
    Non-linear solve of cross((1,0,0), x) = (0,0,1).

    The Jacobian is singular (rank 2) but the system is consistent; any x
    with x[1] = 1 and x[2] = 0 is a solution.

    Initial condition: x = (-1, -1, -1)
    """
    algebra = NumpyAlgebra(3)
    x = algebra.from_array("x", [-1.0, -1.0, -1.0])
    return cross_residual, x, algebra


@pytest.fixture
def quadratic_system():
    """
    Non-linear system: x_i^2 - 2 = 0 with a nonlinear coupling-free Jacobian.

    Initial condition: x = 1
    Expected solution: x = sqrt(2)
    """
    def residual(out, x):
        out[:] = x**2 - 2.0

    algebra = NumpyAlgebra(4)
    x = algebra.from_array("x", np.ones(4))
    return residual, x, algebra, np.full(4, np.sqrt(2.0))


class TestConfig:

    def test_defaults(self):
        cfg = JFNKConfig()
        assert cfg.epsilon == 1e-10
        assert cfg.maxiter == 100
        assert cfg.alpha == 1.0
        assert cfg.jfnk_epsilon == 1e-6
        assert cfg.line_search == "bisect"
        assert cfg.line_search_maxiter == 100
        assert isinstance(cfg.line_search_method, BisectLineSearch)
        assert cfg.line_search_method.maxiter == 100
        assert isinstance(cfg.linsolver, GMRES)
        assert cfg.norm is None
        assert cfg.check_finite is False
        assert cfg.error_callback is None

    def test_unknown_line_search_fails_at_construction(self):
        with pytest.raises(LineSearchConfigError):
            JFNKConfig(line_search="backtrack")
        with pytest.raises(LineSearchConfigError):
            JFNK(line_search="backtrack")

    def test_line_search_instance(self):
        cfg = JFNKConfig(line_search=NoLineSearch())
        assert isinstance(cfg.line_search_method, NoLineSearch)

    @pytest.mark.parametrize("options", [
        {"epsilon": 0.0},
        {"maxiter": 0},
        {"alpha": -1.0},
        {"jfnk_epsilon": 0.0},
        {"line_search_maxiter": 0},
    ])
    def test_invalid_values(self, options):
        with pytest.raises(ValueError):
            JFNKConfig(**options)

    def test_error_callback_must_be_callable(self):
        with pytest.raises(TypeError):
            JFNKConfig(error_callback=1.0)

    def test_frozen(self):
        cfg = JFNKConfig()
        with pytest.raises(AttributeError):
            cfg.epsilon = 1.0

    def test_config_or_options(self):
        with pytest.raises(ValueError):
            JFNK(JFNKConfig(), maxiter=3)
        assert JFNK(maxiter=3).config.maxiter == 3


class TestFiniteDifferenceJVP:

    def test_matches_analytic_jacobian(self):
        def residual(out, x):
            out[:] = np.array([x[0] ** 2 * x[1], np.sin(x[1]) + x[2], x[0] * x[2]])

        algebra = NumpyAlgebra(3)
        x = algebra.from_array("x", [0.5, -1.0, 2.0])
        v = algebra.from_array("v", [1.0, 2.0, -1.0])
        J = np.array([
            [2 * 0.5 * -1.0, 0.5 ** 2, 0.0],
            [0.0, np.cos(-1.0), 1.0],
            [2.0, 0.0, 0.5],
        ])
        result = algebra.new("result")
        jvp = FiniteDifferenceJVP(
            residual, x, algebra, Workspace.allocate(algebra), epsilon=1e-5
        )
        jvp(result, v)
        assert np.allclose(result, J @ v, atol=1e-8)

    def test_two_residual_calls_per_product(self):
        calls = []

        def residual(out, x):
            calls.append(x.copy())
            out[:] = 3.0 * x

        algebra = NumpyAlgebra(2)
        x = algebra.from_array("x", [1.0, 2.0])
        v = algebra.from_array("v", [1.0, 0.0])
        result = algebra.new("result")
        FiniteDifferenceJVP(
            residual, x, algebra, Workspace.allocate(algebra), epsilon=0.5
        )(result, v)
        assert len(calls) == 2
        assert np.allclose(calls[0], [1.5, 2.0])
        assert np.allclose(calls[1], [0.5, 2.0])
        assert np.allclose(result, [3.0, 0.0])
        # The base point is read, never written
        assert np.array_equal(x, [1.0, 2.0])


class TestKrylovStep:

    def test_pass_through(self):
        seen = {}

        def linsolver(A, b, x, algebra):
            seen.update(A=A, b=b, x=x, algebra=algebra)
            algebra.scale(x, b, 2.0)

        algebra = NumpyAlgebra(2)
        cache = BufferCache(algebra)
        operator = lambda result, v: None
        step = KrylovStep(linsolver, operator, cache)
        dx = algebra.new("dx")
        rhs = algebra.from_array("rhs", [1.0, -1.0])
        step(dx, rhs)
        assert seen["A"] is operator
        assert seen["b"] is rhs
        assert seen["x"] is dx
        assert seen["algebra"].cache is cache
        assert np.array_equal(dx, [2.0, -2.0])


class TestJFNK:

    def test_implements_protocol(self):
        assert isinstance(JFNK(), RootFinderProtocol)

    @pytest.mark.parametrize("line_search", ["none", "linear", "bisect"])
    def test_cross_product(self, cross_product_system, line_search):
        residual, x, algebra = cross_product_system
        errors = []

        def callback(err, iteration):
            errors.append(err)
            return False

        soln = JFNK(line_search=line_search)(
            residual, x, algebra, error_callback=callback
        )
        assert soln is x
        f = algebra.new("f")
        residual(f, soln)
        assert algebra.norm(f) < 1e-10
        assert np.allclose(np.cross(A_VEC, soln), C_VEC, atol=1e-4)
        assert len(errors) < 100
        assert errors[-1] < 1e-10
        assert errors[-1] <= errors[0]
        # The later half of the sequence improves on the earlier half
        assert len(errors) >= 2
        half = len(errors) // 2
        assert min(errors[half:]) < min(errors[:half])
        # and the tail is non-increasing
        tail = errors[-3:]
        assert all(b <= a for a, b in zip(tail, tail[1:]))

    def test_quadratic(self, quadratic_system):
        residual, x, algebra, expected = quadratic_system
        soln = JFNK(epsilon=1e-20)(residual, x, algebra)
        assert np.allclose(soln, expected, atol=1e-8)

    def test_early_stop_returns_initial_x(self, cross_product_system):
        residual, x, algebra = cross_product_system
        calls = []

        def stop(err, iteration):
            calls.append((err, iteration))
            return True

        soln = JFNK()(residual, x, algebra, error_callback=stop)
        assert soln is x
        assert np.array_equal(x, [-1.0, -1.0, -1.0])
        assert calls == [(pytest.approx(5.0 / 3.0), 1)]

    def test_config_error_callback(self, cross_product_system):
        residual, x, algebra = cross_product_system
        calls = []
        solver = JFNK(error_callback=lambda err, it: calls.append(it) or True)
        solver(residual, x, algebra)
        assert calls == [1]
        assert np.array_equal(x, [-1.0, -1.0, -1.0])

    def test_call_error_callback_overrides_config(self, cross_product_system):
        residual, x, algebra = cross_product_system
        from_config = []
        from_call = []
        solver = JFNK(error_callback=lambda err, it: from_config.append(it))
        solver(
            residual, x, algebra,
            error_callback=lambda err, it: from_call.append(it),
        )
        assert from_config == []
        assert from_call[0] == 1
        assert len(from_call) >= 2

    def test_callback_runs_before_convergence_test(self):
        def residual(out, x):
            out[:] = x

        algebra = NumpyAlgebra(2)
        x = algebra.new("x")
        calls = []
        JFNK()(residual, x, algebra, error_callback=lambda e, i: calls.append(i))
        assert calls == [1]

    def test_iteration_cap(self):
        def constant(out, x):
            out[:] = 1.0

        algebra = NumpyAlgebra(3)
        x = algebra.from_array("x", [0.5, 0.5, 0.5])
        iterations = []
        soln = JFNK(maxiter=7)(
            constant, x, algebra,
            error_callback=lambda err, it: iterations.append(it),
        )
        assert soln is x
        assert iterations == list(range(1, 8))

    def test_iteration_cap_warns(self, caplog):
        def constant(out, x):
            out[:] = 1.0

        algebra = NumpyAlgebra(2)
        x = algebra.new("x")
        with caplog.at_level("WARNING", logger="jax_jfnk.rootfinders.jfnk"):
            JFNK(maxiter=2, line_search="none")(constant, x, algebra)
        assert "did not converge within 2 iterations" in caplog.text

    def test_no_line_search_takes_full_step(self):
        calls = Counter()

        def residual(out, x):
            calls["f"] += 1
            out[:] = 2.0 * x - 1.0

        def linsolver(A, b, x, algebra):
            calls["krylov"] += 1
            algebra.scale(x, b, 0.5)

        algebra = NumpyAlgebra(2)
        x = algebra.new("x")
        JFNK(line_search="none", alpha=0.5, maxiter=1, linsolver=linsolver)(
            residual, x, algebra
        )
        # Only the residual at the iterate: no evaluations from the line search
        assert calls == Counter(f=1, krylov=1)
        # x = 0 - 0.5 * (0.5 * f(0))
        assert np.allclose(x, [0.25, 0.25])

    def test_user_direction_is_warm_start(self, cross_product_system):
        residual, x, algebra = cross_product_system
        dx = algebra.from_array("dx", [0.0, 0.0, 0.0])
        starts = []
        gmres = GMRES()

        def linsolver(A, b, x0, alg):
            starts.append(np.array(x0))
            gmres(A, b, x0, alg)

        JFNK(linsolver=linsolver)(residual, x, algebra, dx=dx)
        assert np.array_equal(starts[0], [0.0, 0.0, 0.0])
        assert not np.array_equal(dx, [0.0, 0.0, 0.0])

    def test_default_direction_does_not_alias_x(self, cross_product_system):
        residual, x, algebra = cross_product_system
        seen = []

        def linsolver(A, b, x0, alg):
            seen.append(x0)

        JFNK(maxiter=1, line_search="none", linsolver=linsolver)(residual, x, algebra)
        assert seen[0] is not x
        assert np.array_equal(seen[0], [-1.0, -1.0, -1.0])

    def test_buffer_cache_allocates_each_name_once(self):
        algebra = CountingAlgebra(3)
        x = algebra.from_array("x", [-1.0, -1.0, -1.0])
        iterations = []
        JFNK(line_search="none", alpha=0.5)(
            cross_residual, x, algebra,
            error_callback=lambda err, it: iterations.append(it),
        )
        assert len(iterations) > 3
        assert any(name.startswith("gmres_") for name in algebra.allocations)
        assert max(algebra.allocations.values()) == 1

    def test_custom_norm(self, cross_product_system):
        residual, x, algebra = cross_product_system
        errors = []
        JFNK(norm=lambda v: float(np.max(np.abs(v))))(
            residual, x, algebra,
            error_callback=lambda err, it: errors.append(err),
        )
        assert errors[0] == 2.0

    def test_check_finite(self):
        def residual(out, x):
            out[:] = np.nan

        algebra = NumpyAlgebra(2)
        x = algebra.new("x")
        with pytest.raises(NonFiniteResidualError) as excinfo:
            JFNK(check_finite=True)(residual, x, algebra)
        assert excinfo.value.iteration == 1

    def test_nan_runs_to_iteration_cap_by_default(self):
        def residual(out, x):
            out[:] = np.nan

        algebra = NumpyAlgebra(2)
        x = algebra.new("x")
        iterations = []
        JFNK(maxiter=3, line_search="none")(
            residual, x, algebra,
            error_callback=lambda err, it: iterations.append(it),
        )
        assert iterations == [1, 2, 3]

    def test_reusable_solver(self, quadratic_system):
        residual, _, algebra, expected = quadratic_system
        solver = JFNK(line_search="linear", line_search_maxiter=10)
        for start in (1.0, 3.0):
            x = algebra.from_array("x", np.full(4, start))
            solver(residual, x, algebra)
            assert np.allclose(x, expected, atol=1e-5)

    def test_jax_backend(self):
        a = jnp.array([1.0, 0.0, 0.0])
        c = jnp.array([0.0, 0.0, 1.0])

        def residual(out, x):
            out[...] = jnp.cross(a, x[...]) - c

        algebra = JaxAlgebra(3, dtype=jnp.float32)
        x = algebra.from_array("x", [-1.0, -1.0, -1.0])
        JFNK(
            epsilon=1e-8,
            jfnk_epsilon=1e-2,
            linsolver=GMRES(tol=1e-5),
        )(residual, x, algebra)
        assert jnp.allclose(jnp.cross(a, x[...]), c, atol=1e-3)
