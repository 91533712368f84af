from __future__ import annotations
from typing import Any, Optional, Type
import numpy as np
from .tools.adam_update import AdamUpdate
from .tools.adamax_update import AdaMaxUpdate
from .tools.config import OptimizerConfig, check_beta, check_epsilon
from .tools.sgd import StochasticGradientDescent
from .tools.update_policy import MomentUpdatePolicy


class AdamType:
    """
    Adam-type optimizer for decomposable objectives.

    Computes individual adaptive step sizes for every parameter from
    estimates of the first and second moments of the gradients (Adam) or of
    the first moment and the infinity norm (AdaMax). The defaults are not
    necessarily good for a given problem; tune them to the task.

    One iteration processes one sub-function, so `max_iterations` counts
    sub-functions and not passes over the data.

    Parameters
    ----------
    function : DecomposableFunction
        Objective to minimize.
    step_size : float
        Step size for each iteration.
    beta1 : float
        Exponential decay rate for the first moment estimates.
    beta2 : float
        Exponential decay rate for the second moment / infinity norm estimates.
    epsilon : float
        Small constant in the denominator for numerical stability.
    max_iterations : int
        Maximum number of iterations allowed (0 means no limit).
    tolerance : float
        Maximum absolute tolerance to terminate the algorithm.
    shuffle : bool
        If True, the sub-function order is shuffled each pass; otherwise
        each sub-function is visited in linear order.
    rng : np.random.Generator, optional
        Random source for the shuffling (seed it for reproducible runs).
    verbose : bool
        If True, prints progress.
    record_history : bool
        If True, keeps per-pass snapshots of the iterate and moments.

    Notes
    -----
    - Uses StochasticGradientDescent for the loop and an update policy for
      the step (AdamUpdate or AdaMaxUpdate).
    - Moment state carries over between `optimize` calls on the same
      instance as long as the iterate shape does not change. Call `reset()`
      to start again from zero moments.
    """
    update_policy_type: Type[MomentUpdatePolicy] = AdamUpdate

    def __init__(self,
                 function: Any,
                 step_size: float = 0.001,
                 beta1: float = 0.9,
                 beta2: float = 0.999,
                 epsilon: float = 1e-8,
                 max_iterations: int = 100000,
                 tolerance: float = 1e-5,
                 shuffle: bool = True,
                 rng: Optional[np.random.Generator] = None,
                 verbose: bool = False,
                 record_history: bool = False):

        self.update_policy = self.update_policy_type(beta1=beta1, beta2=beta2, epsilon=epsilon)

        # The stochastic driver holding the Adam-type policy
        self.optimizer = StochasticGradientDescent(
            function=function,
            update_policy=self.update_policy,
            step_size=step_size,
            max_iterations=max_iterations,
            tolerance=tolerance,
            shuffle=shuffle,
            rng=rng,
            verbose=verbose,
            record_history=record_history
        )

    @classmethod
    def from_config(cls, function: Any, config: OptimizerConfig, **kwargs) -> AdamType:
        """Build from an OptimizerConfig; kwargs go to the constructor (rng, verbose, ...)."""
        return cls(function, **config.to_dict(), **kwargs)

    def optimize(self, iterate: np.ndarray) -> float:
        """
        Optimize the function. `iterate` is the starting point and is
        modified to hold the final point.

        Returns
        -------
        float
            Objective value at the final point.
        """
        return self.optimizer.optimize(iterate)

    def reset(self) -> None:
        """Forget the accumulated moments."""
        self.optimizer.reset()

    @property
    def config(self) -> OptimizerConfig:
        """Snapshot of the current public parameters."""
        return OptimizerConfig(step_size=self.step_size, beta1=self.beta1, beta2=self.beta2,
                               epsilon=self.epsilon, max_iterations=self.max_iterations,
                               tolerance=self.tolerance, shuffle=self.shuffle)

    # ------------- accessors -------------------------------------------
    @property
    def function(self) -> Any:
        return self.optimizer.function

    @function.setter
    def function(self, function: Any) -> None:
        self.optimizer.function = function

    @property
    def step_size(self) -> float:
        return self.optimizer.step_size

    @step_size.setter
    def step_size(self, step_size: float) -> None:
        self.optimizer.step_size = step_size

    @property
    def beta1(self) -> float:
        """Smoothing parameter of the first moment."""
        return self.update_policy.beta1

    @beta1.setter
    def beta1(self, beta1: float) -> None:
        self.update_policy.beta1 = check_beta('beta1', beta1)

    @property
    def beta2(self) -> float:
        """Decay of the second moment (Adam) or of the infinity norm (AdaMax)."""
        return self.update_policy.beta2

    @beta2.setter
    def beta2(self, beta2: float) -> None:
        self.update_policy.beta2 = check_beta('beta2', beta2)

    @property
    def epsilon(self) -> float:
        return self.update_policy.epsilon

    @epsilon.setter
    def epsilon(self, epsilon: float) -> None:
        self.update_policy.epsilon = check_epsilon(epsilon)

    @property
    def max_iterations(self) -> int:
        """Maximum number of iterations (0 means no limit)."""
        return self.optimizer.max_iterations

    @max_iterations.setter
    def max_iterations(self, max_iterations: int) -> None:
        self.optimizer.max_iterations = max_iterations

    @property
    def tolerance(self) -> float:
        return self.optimizer.tolerance

    @tolerance.setter
    def tolerance(self, tolerance: float) -> None:
        self.optimizer.tolerance = tolerance

    @property
    def shuffle(self) -> bool:
        return self.optimizer.shuffle

    @shuffle.setter
    def shuffle(self, shuffle: bool) -> None:
        self.optimizer.shuffle = shuffle

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(step_size={self.step_size}, beta1={self.beta1}, "
                f"beta2={self.beta2}, epsilon={self.epsilon}, "
                f"max_iterations={self.max_iterations}, tolerance={self.tolerance}, "
                f"shuffle={self.shuffle})")


class Adam(AdamType):
    """Adam: bias-corrected first and second moment estimates."""
    update_policy_type = AdamUpdate


class AdaMax(AdamType):
    """AdaMax: Adam variant based on the infinity norm."""
    update_policy_type = AdaMaxUpdate
