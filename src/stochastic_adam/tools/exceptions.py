"""
Error types raised by the optimizers and the bundled objectives.
"""
from typing import Optional, Tuple


class InvalidObjectiveError(ValueError):
    """The objective cannot be optimized (e.g. it has no sub-functions)."""


class DimensionMismatchError(ValueError):
    """
    Shape of the iterate (or of a gradient) does not match what the
    objective or the update policy expects.

    Parameters
    ----------
    expected : tuple or None
        Shape that was expected; None when the objective does not declare one.
    got : tuple
        Shape that was received.
    what : str, optional
        Name of the offending array, used in the message.
    """
    def __init__(self, expected: Optional[Tuple[int, ...]], got: Tuple[int, ...],
                 what: str = 'coordinates'):
        self.expected = None if expected is None else tuple(expected)
        self.got = tuple(got)
        if self.expected is None:
            message = f"{what} have shape {self.got}, incompatible with the objective"
        else:
            message = f"{what} have shape {self.got}, expected {self.expected}"
        super().__init__(message)
