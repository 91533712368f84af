import matplotlib.pyplot as plt
import numpy as np
from typing import Any, List, Optional, Sequence


class OptimizationPlotter:
    """
    Visualize the evolution of the objective, the iterate and the moments
    recorded by the stochastic driver (one sample per pass).

    Parameters
    ----------
    objective_history : Sequence[float]
        Pass objectives (`objective_result`).
    iterate_history : Sequence[np.ndarray], optional
        Iterate snapshots (`iterate_result`), any shape; flattened.
    m_history, v_history : Sequence[np.ndarray], optional
        Moment snapshots (`m_result`, `v_result`).
    max_components : int, optional
        Number of flattened components drawn per panel. Default: 10
    """

    def __init__(self, objective_history: Sequence[float],
                 iterate_history: Optional[Sequence[np.ndarray]] = None,
                 m_history: Optional[Sequence[np.ndarray]] = None,
                 v_history: Optional[Sequence[np.ndarray]] = None,
                 max_components: int = 10):
        self.objective_history = np.asarray(objective_history, dtype=float)
        self.iterate_history = self.__stack__(iterate_history)
        self.m_history = self.__stack__(m_history)
        self.v_history = self.__stack__(v_history)
        self.max_components = max_components
        self.passes = np.arange(len(self.objective_history))

    @classmethod
    def from_optimizer(cls, optimizer: Any, **kwargs) -> 'OptimizationPlotter':
        """Build from a StochasticGradientDescent or an Adam/AdaMax facade after `optimize`."""
        driver = getattr(optimizer, 'optimizer', optimizer)
        return cls(driver.objective_result, driver.iterate_result or None,
                   driver.m_result or None, driver.v_result or None, **kwargs)

    @staticmethod
    def __stack__(history: Optional[Sequence[np.ndarray]]) -> Optional[np.ndarray]:
        if history is None or len(history) == 0:
            return None
        return np.stack([np.ravel(h) for h in history])

    def __require__(self, history: Optional[np.ndarray], name: str) -> np.ndarray:
        if history is None:
            raise ValueError(f"No {name} history recorded; run the optimizer with record_history=True")
        return history

    def __plot_series__(self, ax, history: np.ndarray, symbol: str, title: str):
        passes = np.arange(len(history))
        for k in range(min(history.shape[1], self.max_components)):
            ax.plot(passes, history[:, k], label=f'{symbol}[{k}]', linewidth=2)
        ax.set_xlabel('Pass', fontsize=11)
        ax.set_ylabel(symbol, fontsize=11)
        ax.set_title(title, fontsize=12, fontweight='bold')
        ax.legend(fontsize=9)
        ax.grid(True, alpha=0.3)

    def __plot_objective_on__(self, ax):
        ax.plot(self.passes, self.objective_history, linewidth=2)
        if np.all(self.objective_history > 0):
            ax.set_yscale('log')
        ax.set_xlabel('Pass', fontsize=11)
        ax.set_ylabel('Objective', fontsize=11)
        ax.set_title('Objective per pass', fontsize=12, fontweight='bold')
        ax.grid(True, alpha=0.3)

    def __plot_objective__(self, figsize=(10, 6)):
        fig, ax = plt.subplots(figsize=figsize)
        self.__plot_objective_on__(ax)
        plt.tight_layout()
        return fig, ax

    def __plot_iterate__(self, figsize=(10, 6)):
        history = self.__require__(self.iterate_history, 'iterate')
        fig, ax = plt.subplots(figsize=figsize)
        self.__plot_series__(ax, history, 'θ', 'Evolution of the iterate')
        plt.tight_layout()
        return fig, ax

    def __plot_moments__(self, figsize=(12, 5)):
        m = self.__require__(self.m_history, 'moment')
        v = self.__require__(self.v_history, 'moment')
        fig, (ax1, ax2) = plt.subplots(1, 2, figsize=figsize)
        self.__plot_series__(ax1, m, 'm', 'First moment m')
        self.__plot_series__(ax2, v, 'v', 'Second moment / infinity norm v')
        plt.tight_layout()
        return fig, (ax1, ax2)

    def __plot_all__(self, figsize=(15, 10)):
        iterate = self.__require__(self.iterate_history, 'iterate')
        m = self.__require__(self.m_history, 'moment')
        v = self.__require__(self.v_history, 'moment')
        fig, axes = plt.subplots(2, 2, figsize=figsize)
        self.__plot_objective_on__(axes[0, 0])
        self.__plot_series__(axes[0, 1], iterate, 'θ', 'Evolution of the iterate')
        self.__plot_series__(axes[1, 0], m, 'm', 'First moment m')
        self.__plot_series__(axes[1, 1], v, 'v', 'Second moment / infinity norm v')
        plt.tight_layout()
        return fig, axes

    # Public method to plot the results
    def plot(self, which: str = 'all', figsize=None):
        """
        Main plotting entry point.

        Parameters
        ----------
        which : str
            'objective', 'iterate', 'moments' or 'all' (default: 'all')
        figsize : tuple, optional
            Figure size. If None, a default per option is used.
        """
        figsize_map = {
            'objective': (10, 6),
            'iterate': (10, 6),
            'moments': (12, 5),
            'all': (15, 10)
        }
        if which not in figsize_map:
            raise ValueError(f"Invalid option '{which}'. Use 'objective', 'iterate', 'moments' or 'all'")
        figsize = figsize or figsize_map[which]

        if which == 'objective':
            return self.__plot_objective__(figsize)
        elif which == 'iterate':
            return self.__plot_iterate__(figsize)
        elif which == 'moments':
            return self.__plot_moments__(figsize)
        return self.__plot_all__(figsize)
