from __future__ import annotations
from dataclasses import dataclass, asdict, fields
from typing import Any, Dict


def check_step_size(step_size: float) -> float:
    step_size = float(step_size)
    if not step_size > 0.:
        raise ValueError(f"step_size must be > 0, got {step_size}")
    return step_size


def check_beta(name: str, beta: float) -> float:
    beta = float(beta)
    if not 0. <= beta < 1.:
        raise ValueError(f"{name} must be in [0, 1), got {beta}")
    return beta


def check_epsilon(epsilon: float) -> float:
    epsilon = float(epsilon)
    if epsilon < 0.:
        raise ValueError(f"epsilon must be >= 0, got {epsilon}")
    return epsilon


def check_max_iterations(max_iterations: int) -> int:
    if isinstance(max_iterations, bool) or int(max_iterations) != max_iterations:
        raise ValueError(f"max_iterations must be an integer, got {max_iterations!r}")
    if max_iterations < 0:
        raise ValueError(f"max_iterations must be >= 0 (0 means no limit), got {max_iterations}")
    return int(max_iterations)


@dataclass
class OptimizerConfig:
    """
    Public parameters of the Adam-type optimizers.

    Parameters
    ----------
    step_size : float
        Step size for each iteration (alpha).
    beta1 : float
        Exponential decay rate for the first moment estimates.
    beta2 : float
        Exponential decay rate for the second moment (Adam) or the weighted
        infinity norm (AdaMax) estimates.
    epsilon : float
        Small constant in the denominator for numerical stability.
    max_iterations : int
        Maximum number of processed sub-functions; 0 means no limit.
    tolerance : float
        Absolute change of the pass objective below which the run stops.
        A negative value disables the check.
    shuffle : bool
        Visit the sub-functions in a random order each pass.

    Example
    -------
    >>> config = OptimizerConfig.from_dict({'step_size': 0.1, 'shuffle': False})
    >>> config.to_dict()['beta1']
    0.9
    """

    step_size: float = 0.001
    beta1: float = 0.9
    beta2: float = 0.999
    epsilon: float = 1e-8
    max_iterations: int = 100000
    tolerance: float = 1e-5
    shuffle: bool = True

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Check every field; raises ValueError on the first bad one."""
        self.step_size = check_step_size(self.step_size)
        self.beta1 = check_beta('beta1', self.beta1)
        self.beta2 = check_beta('beta2', self.beta2)
        self.epsilon = check_epsilon(self.epsilon)
        self.max_iterations = check_max_iterations(self.max_iterations)
        self.tolerance = float(self.tolerance)
        self.shuffle = bool(self.shuffle)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> OptimizerConfig:
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config) - known)
        if unknown:
            raise ValueError(f"Unknown optimizer options: {', '.join(unknown)}")
        return cls(**config)
