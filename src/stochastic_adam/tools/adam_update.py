import numpy as np
from .update_policy import MomentUpdatePolicy


class AdamUpdate(MomentUpdatePolicy):
    """
    Adam update rule (Kingma & Ba, 2014).

    With g the gradient and t the 1-based iteration:

        m = beta1 * m + (1 - beta1) * g
        v = beta2 * v + (1 - beta2) * g**2
        x -= step_size * sqrt(1 - beta2**t) / (1 - beta1**t) * m / (sqrt(v) + epsilon)

    Folding both bias corrections into the scalar step size is equivalent to
    using m_hat / sqrt(v_hat) up to where epsilon enters the denominator.
    """

    def _step(self, iterate: np.ndarray, step_size: float, gradient: np.ndarray) -> None:
        # Adam moment updates
        self.m *= self.beta1
        self.m += (1. - self.beta1) * gradient
        self.v *= self.beta2
        self.v += (1. - self.beta2) * (gradient * gradient)

        # Bias corrections
        bias_correction1 = 1. - self.beta1 ** self.iteration
        bias_correction2 = 1. - self.beta2 ** self.iteration

        iterate -= (step_size * np.sqrt(bias_correction2) / bias_correction1) \
            * self.m / (np.sqrt(self.v) + self.epsilon)
