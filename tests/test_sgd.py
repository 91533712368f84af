"""
Tests for the stochastic driver loop.

Covers:
- Visitation order with and without shuffling
- Iteration cap and the unbounded (0) setting
- Tolerance-based termination and the pass objective
- Invalid objectives, shape and type errors
- Moment state persistence across optimize calls
- NaN / Inf handling and verbose output
"""

import numpy as np
import pytest

from conftest import (CountdownFunction, EmptyFunction, NaNAfterFirstPassFunction,
                      PlainTargetFunction, RecordingFunction)
from stochastic_adam import (AdamUpdate, AdaMaxUpdate, DimensionMismatchError,
                             InvalidObjectiveError, StochasticGradientDescent)
from stochastic_adam.functions import QuadraticFunction


def make_driver(function, policy=None, **kwargs):
    return StochasticGradientDescent(function, policy or AdamUpdate(), **kwargs)


# ============================================================================
# VISITATION ORDER
# ============================================================================

class TestVisitationOrder:

    def test_linear_order_without_shuffle(self, five_targets):
        function = RecordingFunction(five_targets)
        driver = make_driver(function, shuffle=False, max_iterations=15, tolerance=-1.)
        driver.optimize(np.zeros(1))
        assert function.gradient_calls == [0, 1, 2, 3, 4] * 3

    def test_partial_pass_keeps_linear_order(self, five_targets):
        function = RecordingFunction(five_targets)
        driver = make_driver(function, shuffle=False, max_iterations=7, tolerance=-1.)
        driver.optimize(np.zeros(1))
        assert function.gradient_calls == [0, 1, 2, 3, 4, 0, 1]

    def test_shuffled_passes_are_permutations(self, rng):
        n = 8
        function = RecordingFunction(QuadraticFunction(np.arange(n, dtype=float)))
        driver = make_driver(function, shuffle=True, rng=rng, max_iterations=4 * n, tolerance=-1.)
        driver.optimize(np.zeros(1))

        calls = np.array(function.gradient_calls).reshape(4, n)
        for visited in calls:
            assert sorted(visited) == list(range(n))
        # Orders are regenerated every pass
        assert any(not np.array_equal(calls[0], other) for other in calls[1:])

    def test_same_seed_same_order(self):
        orders = []
        for _ in range(2):
            function = RecordingFunction(QuadraticFunction(np.arange(6, dtype=float)))
            driver = make_driver(function, rng=np.random.default_rng(7),
                                 max_iterations=30, tolerance=-1.)
            driver.optimize(np.zeros(1))
            orders.append(function.gradient_calls)
        assert orders[0] == orders[1]

    def test_evaluates_the_visited_sub_function(self, five_targets, rng):
        function = RecordingFunction(five_targets)
        driver = make_driver(function, rng=rng, max_iterations=10, tolerance=-1.)
        driver.optimize(np.zeros(1))
        # Start / final full evaluations go through evaluate_all
        assert function.evaluate_calls == function.gradient_calls


# ============================================================================
# TERMINATION
# ============================================================================

class TestTermination:

    def test_iteration_cap(self, five_targets):
        driver = make_driver(five_targets, max_iterations=12, tolerance=-1.)
        driver.optimize(np.zeros(1))
        assert driver.iteration == 12
        assert not driver.converged and not driver.diverged

    def test_cap_is_not_an_error(self, quadratic):
        driver = make_driver(quadratic, step_size=1e-4, max_iterations=3)
        x = np.array([10.])
        value = driver.optimize(x)
        assert not driver.converged
        assert value == pytest.approx(x[0] ** 2)

    def test_unbounded_runs_until_tolerance(self):
        function = CountdownFunction(steps=500)
        driver = make_driver(function, max_iterations=0, tolerance=1e-3)
        driver.optimize(np.zeros(1))
        assert driver.converged
        assert driver.iteration >= 500
        assert function.calls == driver.iteration

    def test_tolerance_stops_early(self, quadratic):
        driver = make_driver(quadratic, step_size=0.1, max_iterations=5000,
                             tolerance=1e-10, shuffle=False)
        x = np.array([10.])
        value = driver.optimize(x)
        assert driver.converged
        assert driver.iteration < 5000
        assert abs(x[0]) < 0.01
        assert value == pytest.approx(x[0] ** 2)

    def test_adamax_converges(self, quadratic):
        driver = make_driver(quadratic, AdaMaxUpdate(), step_size=0.1,
                             max_iterations=20000, tolerance=1e-10)
        x = np.array([10.])
        driver.optimize(x)
        assert abs(x[0]) < 0.01

    def test_objective_history(self, five_targets):
        driver = make_driver(five_targets, shuffle=False, max_iterations=20, tolerance=-1.)
        x = np.zeros(1)
        start = five_targets.evaluate_all(x)
        driver.optimize(x)
        # start objective + one entry per completed pass boundary
        assert driver.objective_result[0] == pytest.approx(start)
        assert len(driver.objective_result) == 1 + 20 // 5

    def test_returns_full_objective_at_final_point(self, five_targets, rng):
        driver = make_driver(five_targets, rng=rng, step_size=0.05, max_iterations=200)
        x = np.zeros(1)
        value = driver.optimize(x)
        assert value == pytest.approx(five_targets.evaluate_all(x))

    def test_history_snapshots(self, five_targets):
        driver = make_driver(five_targets, shuffle=False, max_iterations=10,
                             tolerance=-1., record_history=True)
        driver.optimize(np.zeros(1))
        assert len(driver.iterate_result) == len(driver.objective_result) == 3
        assert len(driver.m_result) == len(driver.v_result) == 3
        np.testing.assert_array_equal(driver.m_result[0], np.zeros(1))

    def test_last_pass_on_cap_is_recorded(self, five_targets):
        driver = make_driver(five_targets, shuffle=False, max_iterations=10,
                             tolerance=-1., record_history=True)
        x = np.zeros(1)
        driver.optimize(x)
        np.testing.assert_array_equal(driver.iterate_result[-1], x)
        np.testing.assert_array_equal(driver.m_result[-1], driver.update_policy.m)

    def test_tolerance_checked_on_last_pass(self):
        # Pass objectives 2, 1, 0, 0: only the pass ending on the cap is flat
        driver = make_driver(CountdownFunction(steps=2), max_iterations=3, tolerance=0.5)
        driver.optimize(np.zeros(1))
        assert driver.converged
        assert driver.objective_result == [2., 1., 0., 0.]

    def test_divergence_on_last_pass(self, capsys):
        function = NaNAfterFirstPassFunction([0., 1.])
        driver = make_driver(function, max_iterations=2, tolerance=-1., shuffle=False)
        driver.optimize(np.array([3.]))
        assert driver.diverged
        assert "Divergence" in capsys.readouterr().out

    def test_divergence_stops_loop(self, capsys):
        function = NaNAfterFirstPassFunction([0., 1.])
        driver = make_driver(function, max_iterations=100, tolerance=-1., shuffle=False)
        value = driver.optimize(np.array([3.]))
        assert driver.diverged and not driver.converged
        assert driver.iteration == 2
        assert np.isnan(value)
        assert "Divergence" in capsys.readouterr().out

    def test_verbose_progress(self, quadratic, capsys):
        driver = make_driver(quadratic, max_iterations=3, verbose=True)
        driver.optimize(np.array([1.]))
        out = capsys.readouterr().out
        assert "Pass 0" in out
        assert "Max iterations" in out
        assert "Last iteration 3" in out

    def test_verbose_progress_is_throttled(self, quadratic, capsys):
        driver = make_driver(quadratic, max_iterations=200, tolerance=-1., verbose=True)
        driver.optimize(np.array([1.]))
        out = capsys.readouterr().out
        passes = [line for line in out.splitlines() if line.startswith("Pass ")]
        assert passes == [f"Pass {k} - objective {v:.6e}"
                          for k, v in zip(range(0, 201, 50), driver.objective_result[::50])]
        assert out.isascii()

    def test_quiet_by_default(self, quadratic, capsys):
        make_driver(quadratic, max_iterations=3).optimize(np.array([1.]))
        assert capsys.readouterr().out == ""


# ============================================================================
# ERRORS
# ============================================================================

class TestErrors:

    def test_zero_sub_functions(self):
        function = EmptyFunction()
        driver = make_driver(function)
        with pytest.raises(InvalidObjectiveError):
            driver.optimize(np.zeros(2))
        assert function.gradient_calls == []
        assert function.evaluate_calls == []

    def test_dimension_mismatch(self):
        function = QuadraticFunction(np.zeros((3, 2)))
        driver = make_driver(function)
        x = np.ones(3)
        with pytest.raises(DimensionMismatchError):
            driver.optimize(x)
        np.testing.assert_array_equal(x, np.ones(3))

    def test_dimension_mismatch_without_objective_checks(self):
        # The objective itself would only fail with a numpy broadcast error
        function = PlainTargetFunction([0., 1.])
        x = np.ones(3)
        with pytest.raises(DimensionMismatchError):
            make_driver(function).optimize(x)
        np.testing.assert_array_equal(x, np.ones(3))

    def test_declared_shape_checked_before_evaluation(self):
        # (3,) against a (1,) target broadcasts silently inside the objective
        function = PlainTargetFunction([[5.]], declare_shape=True)
        x = np.ones(3)
        with pytest.raises(DimensionMismatchError) as error:
            make_driver(function).optimize(x)
        assert error.value.expected == (1,)
        assert error.value.got == (3,)
        np.testing.assert_array_equal(x, np.ones(3))

    def test_integer_iterate_rejected(self, quadratic):
        with pytest.raises(TypeError):
            make_driver(quadratic).optimize(np.array([10]))

    def test_list_iterate_rejected(self, quadratic):
        with pytest.raises(TypeError):
            make_driver(quadratic).optimize([10.])

    def test_invalid_parameters(self, quadratic):
        with pytest.raises(ValueError):
            make_driver(quadratic, step_size=0.)
        with pytest.raises(ValueError):
            make_driver(quadratic, max_iterations=-1)

    @pytest.mark.parametrize("name,value", [("step_size", 0.), ("step_size", -0.1),
                                            ("max_iterations", -1), ("max_iterations", 2.5),
                                            ("max_iterations", True)])
    def test_attribute_validation(self, quadratic, name, value):
        driver = make_driver(quadratic)
        with pytest.raises(ValueError):
            setattr(driver, name, value)

    def test_default_parameters(self, quadratic):
        driver = make_driver(quadratic)
        assert driver.step_size == 0.001
        assert driver.max_iterations == 100000
        assert driver.tolerance == 1e-5
        assert driver.shuffle is True


# ============================================================================
# MOMENT STATE ACROSS CALLS
# ============================================================================

class TestStatePersistence:

    def test_moments_carry_over(self, quadratic):
        policy = AdamUpdate()
        driver = make_driver(quadratic, policy, max_iterations=10, tolerance=-1.)
        x = np.array([5.])
        driver.optimize(x)
        m_after_first = policy.m.copy()
        driver.optimize(x)
        assert policy.iteration == 20
        assert driver.iteration == 10
        assert not np.array_equal(policy.m, np.zeros(1))
        assert m_after_first[0] != 0.

    def test_reset_restarts_moments(self, quadratic):
        policy = AdamUpdate()
        driver = make_driver(quadratic, policy, max_iterations=10, tolerance=-1.)
        driver.optimize(np.array([5.]))
        driver.reset()
        assert policy.shape is None
        driver.optimize(np.array([5.]))
        assert policy.iteration == 10

    def test_shape_change_reinitializes(self):
        policy = AdamUpdate()
        driver = make_driver(QuadraticFunction([0.]), policy, max_iterations=4, tolerance=-1.)
        driver.optimize(np.array([5.]))
        driver.function = QuadraticFunction(np.zeros((2, 3)))
        driver.optimize(np.ones(3))
        assert policy.shape == (3,)
        assert policy.iteration == 4

    def test_matrix_iterate(self, rng):
        targets = rng.normal(size=(4, 2, 3))
        function = QuadraticFunction(targets)
        driver = make_driver(function, step_size=0.01, rng=rng,
                             max_iterations=20000, tolerance=1e-12)
        x = np.zeros((2, 3))
        driver.optimize(x)
        np.testing.assert_allclose(x, function.minimizer(), atol=0.05)
