import numpy as np
from .base import DTYPE, check_coordinates, check_index


class QuadraticFunction:
    """
    Sum of squared distances to a set of targets:

        f(x) = sum_i ||x - target_i||^2

    Parameters
    ----------
    targets : array-like
        One target per sub-function, stacked along the first axis. A 1-D
        array gives scalar targets and coordinates of shape (1,); use shape
        (n, d) for d-dimensional coordinates.
    initial_point : array-like, optional
        Returned by `get_initial_point`. Default: 10 everywhere.
    """
    def __init__(self, targets, initial_point=None):
        targets = np.asarray(targets, dtype=DTYPE)
        if targets.ndim == 1:
            targets = targets[:, None]
        self.targets = targets
        self.shape = targets.shape[1:]
        self.initial_point = (np.full(self.shape, 10., dtype=DTYPE) if initial_point is None
                              else np.asarray(initial_point, dtype=DTYPE).reshape(self.shape))

    def num_functions(self) -> int:
        return len(self.targets)

    def evaluate(self, coordinates: np.ndarray, i: int) -> float:
        check_coordinates(coordinates, self.shape)
        check_index(i, len(self.targets))
        return float(np.sum((coordinates - self.targets[i]) ** 2))

    def gradient(self, coordinates: np.ndarray, i: int, gradient: np.ndarray) -> None:
        check_coordinates(coordinates, self.shape)
        check_index(i, len(self.targets))
        gradient[...] = 2. * (coordinates - self.targets[i])

    def evaluate_all(self, coordinates: np.ndarray) -> float:
        check_coordinates(coordinates, self.shape)
        return float(np.sum((coordinates[None, ...] - self.targets) ** 2))

    def minimizer(self) -> np.ndarray:
        """Closed-form minimizer: the mean of the targets."""
        return self.targets.mean(axis=0)

    def get_initial_point(self) -> np.ndarray:
        return self.initial_point.copy()
