from .plotting import OptimizationPlotter

__all__ = ['OptimizationPlotter']
