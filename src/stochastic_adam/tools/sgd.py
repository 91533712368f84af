from __future__ import annotations
from contextlib import contextmanager, nullcontext
from typing import Any, List, Optional
import numpy as np
from .config import check_max_iterations, check_step_size
from .exceptions import DimensionMismatchError, InvalidObjectiveError
from .update_policy import DTYPE, UpdatePolicy

# Verbose progress is printed about once every PRINT_EVERY iterations
PRINT_EVERY = 50


class StochasticGradientDescent:
    """
    Stochastic driver for decomposable objectives f(x) = sum_i f_i(x).

    Shared loop for every update policy:
      - visitation order over the sub-functions (identity or a fresh random
        permutation per pass)
      - gradient of one sub-function per iteration, delegated to the policy
      - running pass objective and tolerance/iteration controls

    One iteration processes one sub-function; a pass processes all `n` of
    them. The pass objective is the sum of f_i evaluated right after the
    update made with f_i, so no extra full evaluation is needed per pass.
    The first pass is compared against the full objective at the start point.

    Parameters
    ----------
    function : DecomposableFunction
        Objective exposing num_functions(), evaluate(x, i) and
        gradient(x, i, out). An optional evaluate_all(x) is used for the
        full objective and an optional `shape` attribute is checked against
        the iterate before any evaluation.
    update_policy : UpdatePolicy
        Rule converting a gradient into a step (AdamUpdate, AdaMaxUpdate).
    step_size : float
        Step size handed to the policy on every update.
    max_iterations : int
        Cap on processed sub-functions; 0 means no limit.
    tolerance : float
        Stop when |previous pass objective - pass objective| < tolerance.
    shuffle : bool
        If True, each pass visits the sub-functions in a new random order.
    rng : np.random.Generator, optional
        Source for the shuffling. Default: np.random.default_rng()
    verbose : bool
        If True, prints the pass objective every PRINT_EVERY iterations
        (at least once per pass) and the stop reason.
    record_history : bool
        If True, keeps copies of the iterate and moments at every pass.

    Attributes (after optimize)
    ---------------------------
    iteration : int
        Updates performed during the last call.
    converged, diverged : bool
        Stop reason of the last call; both False after hitting the cap.
    objective_result : list[float]
        Start objective followed by every completed pass objective.
    iterate_result, m_result, v_result : list[np.ndarray]
        Per-pass snapshots (only with record_history).

    Notes
    -----
    Moment state is kept by the policy between calls. It is reused when the
    next iterate has the same shape; call `reset()` to start from zero moments.
    """
    def __init__(self,
                 function: Any,
                 update_policy: UpdatePolicy,
                 step_size: float = 0.001,
                 max_iterations: int = 100000,
                 tolerance: float = 1e-5,
                 shuffle: bool = True,
                 rng: Optional[np.random.Generator] = None,
                 verbose: bool = False,
                 record_history: bool = False):

        self.function = function
        self.update_policy = update_policy
        self.step_size = step_size
        self.max_iterations = max_iterations
        self.tolerance = tolerance
        self.shuffle = shuffle
        self.rng = np.random.default_rng() if rng is None else rng
        self.verbose = verbose
        self.record_history = record_history
        self.__reset_results__()

    def __reset_results__(self):
        """Reset the per-call results and histories."""
        self.iteration = 0
        self.converged = False
        self.diverged = False
        self.objective_result: List[float] = []
        self.iterate_result: List[np.ndarray] = []
        self.m_result: List[np.ndarray] = []
        self.v_result: List[np.ndarray] = []

    def reset(self) -> None:
        """Drop the moment state held by the update policy."""
        self.update_policy.reset()

    # ------------- validated parameters --------------------------------
    @property
    def step_size(self) -> float:
        return self._step_size

    @step_size.setter
    def step_size(self, step_size: float) -> None:
        self._step_size = check_step_size(step_size)

    @property
    def max_iterations(self) -> int:
        """Maximum number of iterations (0 means no limit)."""
        return self._max_iterations

    @max_iterations.setter
    def max_iterations(self, max_iterations: int) -> None:
        self._max_iterations = check_max_iterations(max_iterations)

    @property
    def tolerance(self) -> float:
        return self._tolerance

    @tolerance.setter
    def tolerance(self, tolerance: float) -> None:
        self._tolerance = float(tolerance)

    @property
    def shuffle(self) -> bool:
        return self._shuffle

    @shuffle.setter
    def shuffle(self, shuffle: bool) -> None:
        self._shuffle = bool(shuffle)

    # ---------------------------------------------------------------
    def _num_functions(self) -> int:
        n = int(self.function.num_functions())
        if n <= 0:
            raise InvalidObjectiveError(
                f"Objective must have at least one sub-function, got {n}")
        return n

    def _check_shape(self, iterate: np.ndarray) -> None:
        expected = getattr(self.function, 'shape', None)
        if expected is not None and tuple(expected) != iterate.shape:
            raise DimensionMismatchError(expected, iterate.shape, what='iterate')

    @contextmanager
    def _shape_errors(self, iterate: np.ndarray):
        """Re-raise numpy shape errors from the objective as DimensionMismatchError."""
        try:
            yield
        except DimensionMismatchError:
            raise
        except ValueError as exc:
            message = str(exc)
            if not any(word in message for word in ('broadcast', 'shape', 'dimension')):
                raise
            raise DimensionMismatchError(getattr(self.function, 'shape', None),
                                         iterate.shape, what='iterate') from exc

    def _visitation_order(self, n: int) -> np.ndarray:
        if self.shuffle:
            return self.rng.permutation(n)
        return np.arange(n)

    def evaluate_all(self, iterate: np.ndarray) -> float:
        """Full objective: sum of every sub-function at `iterate`."""
        evaluate_all = getattr(self.function, 'evaluate_all', None)
        if evaluate_all is not None:
            return float(evaluate_all(iterate))
        n = self.function.num_functions()
        return float(sum(self.function.evaluate(iterate, i) for i in range(n)))

    def _record(self, iterate: np.ndarray, objective: float) -> None:
        self.objective_result.append(objective)
        if self.record_history:
            self.iterate_result.append(iterate.copy())
            self.m_result.append(np.copy(self.update_policy.m))
            self.v_result.append(np.copy(self.update_policy.v))

    def _end_of_pass(self, iterate: np.ndarray, objective: float,
                     last_objective: float, passes: int, n: int) -> bool:
        """Pass boundary bookkeeping. Returns True when the loop must stop."""
        if not np.isfinite(objective):
            print(f"Divergence (NaN / Inf) at pass {passes}. Abort; try a smaller step size.")
            self.diverged = True
            return True

        self._record(iterate, objective)
        if self.verbose and passes % max(1, PRINT_EVERY // n) == 0:
            print(f"Pass {passes} - objective {objective:.6e}")

        if abs(last_objective - objective) < self.tolerance:
            if self.verbose:
                print(f"Minimized within tolerance {self.tolerance}. Stop.")
            self.converged = True
            return True
        return False

    # ---------------------------------------------------------------
    def optimize(self, iterate: np.ndarray) -> float:
        """
        Minimize the objective starting from `iterate`.

        Algorithm sketch
        ----------------
        1) Check the iterate against the objective shape and initialize the
           policy for it (state is kept if the shape matches).
        2) At the start of every pass, compare the pass objective with the
           previous one and stop on tolerance or on NaN / Inf; otherwise draw
           the visitation order for the pass.
        3) For the next sub-function: gradient, policy step, add its value
           at the new iterate to the running pass objective.
        4) Repeat until `max_iterations` updates (never if 0). A pass that
           completes on the last allowed update is still recorded and checked.

        Parameters
        ----------
        iterate : np.ndarray
            Starting point, floating dtype. Modified in place to hold the
            final point.

        Returns
        -------
        float
            Full objective evaluated at the final iterate.
        """
        if not isinstance(iterate, np.ndarray) or not np.issubdtype(iterate.dtype, np.floating):
            raise TypeError("iterate must be a floating point numpy array, it is updated in place; "
                            f"got {getattr(iterate, 'dtype', type(iterate).__name__)}")

        self.__reset_results__()
        n = self._num_functions()
        self._check_shape(iterate)

        if self.update_policy.shape != iterate.shape:
            self.update_policy.initialize(iterate.shape)

        gradient = np.zeros(iterate.shape, dtype=DTYPE)
        with self._shape_errors(iterate):
            overall_objective = self.evaluate_all(iterate)
        last_objective = np.inf
        order = None
        current = 0
        passes = 0

        while self.max_iterations == 0 or self.iteration < self.max_iterations:
            # Start of a pass
            if current % n == 0:
                if self._end_of_pass(iterate, overall_objective, last_objective, passes, n):
                    break
                last_objective = overall_objective
                overall_objective = 0.
                current = 0
                passes += 1
                order = self._visitation_order(n)

            index = int(order[current])
            gradient.fill(0.)
            with self._shape_errors(iterate) if self.iteration == 0 else nullcontext():
                self.function.gradient(iterate, index, gradient)
                self.update_policy.update(iterate, self.step_size, gradient)
                overall_objective += float(self.function.evaluate(iterate, index))

            self.iteration += 1
            current += 1
        else:
            # Cap reached; a pass completed by the last update is still checked
            stopped = current == n and self._end_of_pass(
                iterate, overall_objective, last_objective, passes, n)
            if self.verbose and not stopped:
                print(f"Max iterations ({self.max_iterations}). Stop.")

        final_objective = self.evaluate_all(iterate)
        if self.verbose:
            print(f"Last iteration {self.iteration}: objective {final_objective:.6e}")
        return final_objective
