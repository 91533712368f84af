from .adam_update import AdamUpdate
from .adamax_update import AdaMaxUpdate
from .config import OptimizerConfig
from .exceptions import DimensionMismatchError, InvalidObjectiveError
from .sgd import StochasticGradientDescent
from .update_policy import DTYPE, MomentUpdatePolicy, UpdatePolicy

__all__ = ['AdamUpdate', 'AdaMaxUpdate', 'OptimizerConfig', 'DimensionMismatchError',
           'InvalidObjectiveError', 'StochasticGradientDescent', 'DTYPE',
           'MomentUpdatePolicy', 'UpdatePolicy']
