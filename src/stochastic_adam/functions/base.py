from typing import Protocol, Tuple, runtime_checkable
import numpy as np
from ..tools.exceptions import DimensionMismatchError

DTYPE = np.float64


@runtime_checkable
class DecomposableFunction(Protocol):
    """
    Objective expressible as a sum of `num_functions()` sub-functions.

    For a data-dependent objective (e.g. a per-sample loss), num_functions()
    is the number of samples and `i` selects the sample.
    """

    def num_functions(self) -> int:
        ...

    def evaluate(self, coordinates: np.ndarray, i: int) -> float:
        ...

    def gradient(self, coordinates: np.ndarray, i: int, gradient: np.ndarray) -> None:
        ...


def check_coordinates(coordinates: np.ndarray, shape: Tuple[int, ...]) -> None:
    """Raise DimensionMismatchError unless `coordinates` has `shape`."""
    if np.shape(coordinates) != tuple(shape):
        raise DimensionMismatchError(shape, np.shape(coordinates))


def check_index(i: int, n: int) -> None:
    if not 0 <= i < n:
        raise IndexError(f"sub-function index {i} out of range [0, {n})")
