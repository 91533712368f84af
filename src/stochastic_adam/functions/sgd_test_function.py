import numpy as np
from .base import DTYPE, check_coordinates, check_index


class SGDTestFunction:
    """
    Three-term separable test objective:

        f_0(x) = -exp(-|x_0|)
        f_1(x) = x_1^2
        f_2(x) = x_2^4 + 3 x_2^2

    Minimum value -1 at the origin.
    """
    shape = (3,)

    def num_functions(self) -> int:
        return 3

    def evaluate(self, coordinates: np.ndarray, i: int) -> float:
        check_coordinates(coordinates, self.shape)
        check_index(i, 3)
        if i == 0:
            return float(-np.exp(-np.abs(coordinates[0])))
        if i == 1:
            return float(coordinates[1] ** 2)
        return float(coordinates[2] ** 4 + 3. * coordinates[2] ** 2)

    def gradient(self, coordinates: np.ndarray, i: int, gradient: np.ndarray) -> None:
        check_coordinates(coordinates, self.shape)
        check_index(i, 3)
        gradient[...] = 0.
        if i == 0:
            gradient[0] = np.sign(coordinates[0]) * np.exp(-np.abs(coordinates[0]))
        elif i == 1:
            gradient[1] = 2. * coordinates[1]
        else:
            gradient[2] = 4. * coordinates[2] ** 3 + 6. * coordinates[2]

    def get_initial_point(self) -> np.ndarray:
        return np.array([6., -45.6, 6.2], dtype=DTYPE)
