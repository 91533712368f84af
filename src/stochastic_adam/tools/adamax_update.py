import numpy as np
from .update_policy import MomentUpdatePolicy


class AdaMaxUpdate(MomentUpdatePolicy):
    """
    AdaMax update rule: Adam with the second moment replaced by an
    exponentially weighted infinity norm (section 7 of Kingma & Ba).

        m = beta1 * m + (1 - beta1) * g
        v = max(beta2 * v, |g|)
        x -= step_size / (1 - beta1**t) * m / (v + epsilon)

    `v` is not an expectation, so it needs no bias correction.
    """

    def _step(self, iterate: np.ndarray, step_size: float, gradient: np.ndarray) -> None:
        self.m *= self.beta1
        self.m += (1. - self.beta1) * gradient

        # Infinity norm tracking
        self.v *= self.beta2
        np.maximum(self.v, np.abs(gradient), out=self.v)

        bias_correction1 = 1. - self.beta1 ** self.iteration
        iterate -= (step_size / bias_correction1) * self.m / (self.v + self.epsilon)
