from .base import DecomposableFunction, check_coordinates
from .quadratic import QuadraticFunction
from .sgd_test_function import SGDTestFunction
from .rosenbrock import GeneralizedRosenbrockFunction
from .logistic_regression import LogisticRegressionFunction

__all__ = ['DecomposableFunction', 'check_coordinates', 'QuadraticFunction',
           'SGDTestFunction', 'GeneralizedRosenbrockFunction', 'LogisticRegressionFunction']
