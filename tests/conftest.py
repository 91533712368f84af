"""
Shared fixtures and small instrumented objectives for the test suite.
"""

import numpy as np
import pytest

from stochastic_adam.functions import QuadraticFunction


# ============================================================================
# INSTRUMENTED OBJECTIVES
# ============================================================================

class RecordingFunction:
    """Wraps an objective and records every gradient/evaluate index."""

    def __init__(self, function):
        self.function = function
        self.gradient_calls = []
        self.evaluate_calls = []

    def num_functions(self):
        return self.function.num_functions()

    def evaluate(self, coordinates, i):
        self.evaluate_calls.append(i)
        return self.function.evaluate(coordinates, i)

    def gradient(self, coordinates, i, gradient):
        self.gradient_calls.append(i)
        self.function.gradient(coordinates, i, gradient)

    def evaluate_all(self, coordinates):
        return self.function.evaluate_all(coordinates)


class EmptyFunction(RecordingFunction):
    """Objective without sub-functions."""

    def __init__(self):
        super().__init__(function=None)

    def num_functions(self):
        return 0

    def evaluate(self, coordinates, i):
        self.evaluate_calls.append(i)
        return 0.

    def gradient(self, coordinates, i, gradient):
        self.gradient_calls.append(i)


class CountdownFunction:
    """
    Single sub-function whose value drops by one per gradient call until
    `steps` calls have been made, then stays at zero. Gradients are zero.
    """

    def __init__(self, steps):
        self.steps = steps
        self.calls = 0

    def num_functions(self):
        return 1

    def evaluate(self, coordinates, i):
        return float(max(0, self.steps - self.calls))

    def gradient(self, coordinates, i, gradient):
        self.calls += 1
        gradient[...] = 0.


class NaNAfterFirstPassFunction(QuadraticFunction):
    """Quadratic that reports NaN once it has been differentiated."""

    def __init__(self, targets):
        super().__init__(targets)
        self.differentiated = False

    def evaluate(self, coordinates, i):
        return np.nan if self.differentiated else super().evaluate(coordinates, i)

    def evaluate_all(self, coordinates):
        return np.nan if self.differentiated else super().evaluate_all(coordinates)

    def gradient(self, coordinates, i, gradient):
        self.differentiated = True
        super().gradient(coordinates, i, gradient)


class PlainTargetFunction:
    """
    f_i(x) = sum((x - target_i)^2) with no coordinate checks of its own.
    `shape` is only declared when `declare_shape` is set.
    """

    def __init__(self, targets, declare_shape=False):
        self.targets = np.atleast_2d(np.asarray(targets, dtype=float))
        if declare_shape:
            self.shape = self.targets.shape[1:]

    def num_functions(self):
        return len(self.targets)

    def evaluate(self, coordinates, i):
        return float(np.sum((coordinates - self.targets[i]) ** 2))

    def gradient(self, coordinates, i, gradient):
        gradient[...] = 2. * (coordinates - self.targets[i])


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def quadratic():
    """f(x) = (x - 0)^2 with a single sub-function."""
    return QuadraticFunction([0.])


@pytest.fixture
def five_targets():
    return QuadraticFunction(np.arange(5, dtype=float))
