"""
Logistic regression negative log-likelihood as a decomposable objective,
one sub-function per training sample.
"""
from typing import Optional
import numpy as np
from scipy.special import expit, log_expit
from .base import DTYPE, check_coordinates, check_index


class LogisticRegressionFunction:
    """
    Parameters
    ----------
    predictors : np.ndarray
        Samples, shape (n_samples, n_features).
    responses : np.ndarray
        Labels in {0, 1}, shape (n_samples,).
    lambda_ : float, optional
        L2 penalty on the non-intercept weights. The penalty
        lambda_ / 2 * ||w||^2 is split evenly across the samples so that the
        sub-functions sum to the full regularized objective. Default: 0.

    Notes
    -----
    The parameters are a vector of size n_features + 1; entry 0 is the
    intercept.
    """
    def __init__(self, predictors: np.ndarray, responses: np.ndarray, lambda_: float = 0.):
        self.predictors = np.asarray(predictors, dtype=DTYPE)
        self.responses = np.asarray(responses, dtype=DTYPE).ravel()
        if self.predictors.ndim != 2:
            raise ValueError(f"predictors must be 2-D, got shape {self.predictors.shape}")
        if len(self.responses) != len(self.predictors):
            raise ValueError(f"{len(self.predictors)} samples but {len(self.responses)} responses")
        if not np.all((self.responses == 0.) | (self.responses == 1.)):
            raise ValueError("responses must be 0 or 1")
        self.lambda_ = float(lambda_)
        self.shape = (self.predictors.shape[1] + 1,)

    def num_functions(self) -> int:
        return len(self.predictors)

    def _margin(self, parameters: np.ndarray, i: int) -> float:
        return parameters[0] + self.predictors[i] @ parameters[1:]

    def _regularization(self, parameters: np.ndarray) -> float:
        weights = parameters[1:]
        return self.lambda_ / (2. * self.num_functions()) * float(weights @ weights)

    def evaluate(self, parameters: np.ndarray, i: int) -> float:
        check_coordinates(parameters, self.shape)
        check_index(i, self.num_functions())
        z = self._margin(parameters, i)
        log_likelihood = log_expit(z) if self.responses[i] == 1. else log_expit(-z)
        return float(self._regularization(parameters) - log_likelihood)

    def gradient(self, parameters: np.ndarray, i: int, gradient: np.ndarray) -> None:
        check_coordinates(parameters, self.shape)
        check_index(i, self.num_functions())
        error = expit(self._margin(parameters, i)) - self.responses[i]
        gradient[0] = error
        gradient[1:] = error * self.predictors[i] \
            + self.lambda_ / self.num_functions() * parameters[1:]

    def evaluate_all(self, parameters: np.ndarray) -> float:
        check_coordinates(parameters, self.shape)
        z = parameters[0] + self.predictors @ parameters[1:]
        log_likelihood = np.where(self.responses == 1., log_expit(z), log_expit(-z))
        weights = parameters[1:]
        return float(self.lambda_ / 2. * (weights @ weights) - np.sum(log_likelihood))

    def get_initial_point(self) -> np.ndarray:
        return np.zeros(self.shape, dtype=DTYPE)

    # ------------- prediction -------------------------------------------
    def classify(self, parameters: np.ndarray, predictors: Optional[np.ndarray] = None,
                 decision_boundary: float = 0.5) -> np.ndarray:
        """Predicted labels (0/1) for `predictors` (default: training set)."""
        X = self.predictors if predictors is None else np.asarray(predictors, dtype=DTYPE)
        probabilities = expit(parameters[0] + X @ parameters[1:])
        return (probabilities >= decision_boundary).astype(int)

    def compute_accuracy(self, parameters: np.ndarray, predictors: Optional[np.ndarray] = None,
                         responses: Optional[np.ndarray] = None) -> float:
        """Fraction of correctly classified samples."""
        labels = self.responses if responses is None else np.asarray(responses).ravel()
        return float(np.mean(self.classify(parameters, predictors) == labels))
