"""
Update policies turn a raw gradient into the step subtracted from the iterate.

The driver only depends on the `UpdatePolicy` protocol; `MomentUpdatePolicy`
holds the bookkeeping shared by the Adam-type rules (moment buffers, iteration
counter, shape checks) so that each rule only writes its own moment update.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional, Protocol, Tuple, runtime_checkable
import numpy as np
from .config import check_beta, check_epsilon
from .exceptions import DimensionMismatchError

DTYPE = np.float64


@runtime_checkable
class UpdatePolicy(Protocol):
    """Contract between the stochastic driver and an update rule."""

    @property
    def shape(self) -> Optional[Tuple[int, ...]]:
        ...

    def initialize(self, shape: Tuple[int, ...]) -> None:
        ...

    def update(self, iterate: np.ndarray, step_size: float, gradient: np.ndarray) -> None:
        ...

    def reset(self) -> None:
        ...


class MomentUpdatePolicy(ABC):
    """
    Base for rules that keep a first moment `m` and a second statistic `v`.

    Parameters
    ----------
    beta1 : float
        Exponential decay rate for the first moment (0 <= beta1 < 1).
    beta2 : float
        Exponential decay rate for the second statistic (0 <= beta2 < 1).
    epsilon : float
        Small constant in the denominator for numerical stability.

    Attributes
    ----------
    m, v : np.ndarray or None
        Moment accumulators; None until `initialize` is called.
    iteration : int
        Number of `update` calls since the last `initialize`.
    """
    def __init__(self, beta1: float = 0.9, beta2: float = 0.999, epsilon: float = 1e-8):
        self.beta1 = check_beta('beta1', beta1)
        self.beta2 = check_beta('beta2', beta2)
        self.epsilon = check_epsilon(epsilon)
        self.reset()

    @property
    def shape(self) -> Optional[Tuple[int, ...]]:
        return None if self.m is None else self.m.shape

    def initialize(self, shape: Tuple[int, ...]) -> None:
        """Allocate zero moments of `shape`. Destroys any accumulated state."""
        if np.isscalar(shape):
            shape = (shape,)
        shape = tuple(int(s) for s in shape)
        self.m = np.zeros(shape, dtype=DTYPE)
        self.v = np.zeros(shape, dtype=DTYPE)
        self.iteration = 0

    def reset(self) -> None:
        """Drop the moment state; the next run re-initializes it."""
        self.m = None
        self.v = None
        self.iteration = 0

    def update(self, iterate: np.ndarray, step_size: float, gradient: np.ndarray) -> None:
        """
        Take one step: mutates `iterate` in place together with m, v and iteration.

        Parameters
        ----------
        iterate : np.ndarray
            Current parameters, same shape as the moment state.
        step_size : float
            Base step size (alpha).
        gradient : np.ndarray
            Gradient at `iterate`, same shape as the moment state.
        """
        if self.m is None:
            raise RuntimeError(f"{type(self).__name__}.initialize() must be called before update()")
        if iterate.shape != self.m.shape:
            raise DimensionMismatchError(self.m.shape, iterate.shape, what='iterate')
        if np.shape(gradient) != self.m.shape:
            raise DimensionMismatchError(self.m.shape, np.shape(gradient), what='gradient')

        # Bias corrections below rely on iteration >= 1
        self.iteration += 1
        self._step(iterate, step_size, np.asarray(gradient, dtype=DTYPE))

    @abstractmethod
    def _step(self, iterate: np.ndarray, step_size: float, gradient: np.ndarray) -> None:
        """Rule-specific moment update and parameter step."""

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(beta1={self.beta1}, beta2={self.beta2}, "
                f"epsilon={self.epsilon}, iteration={self.iteration})")
