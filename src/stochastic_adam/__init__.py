from .adam import Adam, AdaMax, AdamType
from .tools import (AdamUpdate, AdaMaxUpdate, DimensionMismatchError, InvalidObjectiveError,
                    MomentUpdatePolicy, OptimizerConfig, StochasticGradientDescent, UpdatePolicy)

__all__ = ['Adam', 'AdaMax', 'AdamType', 'AdamUpdate', 'AdaMaxUpdate', 'DimensionMismatchError',
           'InvalidObjectiveError', 'MomentUpdatePolicy', 'OptimizerConfig',
           'StochasticGradientDescent', 'UpdatePolicy']
