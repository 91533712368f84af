import numpy as np
from scipy.optimize import rosen
from .base import DTYPE, check_coordinates, check_index


class GeneralizedRosenbrockFunction:
    """
    Generalized Rosenbrock function split into n - 1 sub-functions:

        f_i(x) = 100 (x_{i+1} - x_i^2)^2 + (1 - x_i)^2,   i = 0 .. n-2

    Minimum 0 at x = (1, ..., 1).

    Parameters
    ----------
    n : int
        Dimension of the coordinates (n >= 2).
    """
    def __init__(self, n: int):
        if n < 2:
            raise ValueError(f"Rosenbrock needs at least 2 dimensions, got {n}")
        self.n = n
        self.shape = (n,)

    def num_functions(self) -> int:
        return self.n - 1

    def evaluate(self, coordinates: np.ndarray, i: int) -> float:
        check_coordinates(coordinates, self.shape)
        check_index(i, self.n - 1)
        return float(100. * (coordinates[i + 1] - coordinates[i] ** 2) ** 2
                     + (1. - coordinates[i]) ** 2)

    def gradient(self, coordinates: np.ndarray, i: int, gradient: np.ndarray) -> None:
        check_coordinates(coordinates, self.shape)
        check_index(i, self.n - 1)
        gradient[...] = 0.
        gradient[i] = (400. * (coordinates[i] ** 3 - coordinates[i + 1] * coordinates[i])
                       + 2. * (coordinates[i] - 1.))
        gradient[i + 1] = 200. * (coordinates[i + 1] - coordinates[i] ** 2)

    def evaluate_all(self, coordinates: np.ndarray) -> float:
        check_coordinates(coordinates, self.shape)
        return float(rosen(coordinates))

    def get_initial_point(self) -> np.ndarray:
        point = np.ones(self.n, dtype=DTYPE)
        point[::2] = -1.2
        return point
