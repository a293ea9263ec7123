# timedisc/postprocess/visualization.py
"""
Lightweight plotting helpers for transient results.
"""

from __future__ import annotations

from typing import Iterable, Sequence, Tuple

import numpy as np
import matplotlib.pyplot as plt

__all__ = ["plot_time_history", "plot_profiles"]


def _c64(x):
    return np.ascontiguousarray(np.asarray(x, dtype=np.float64))


def plot_time_history(
    t: Iterable[float],
    states: np.ndarray,
    *,
    components: Sequence[int] | None = None,
    ax: plt.Axes | None = None,
    title: str | None = "State history",
) -> Tuple[plt.Figure, plt.Axes]:
    """
    Plot selected state components over time.

    Parameters
    ----------
    t : iterable of float
        Time axis, shape (n_steps + 1,).
    states : ndarray
        State history, shape (n_steps + 1, n).
    components : sequence of int, optional
        Component indices to draw; defaults to first, middle and last.
    ax : matplotlib Axes, optional
        If provided, plot into this axes; otherwise create a new figure.
    title : str, optional

    Returns
    -------
    fig, ax : matplotlib Figure and Axes
    """
    t = _c64(t)
    X = np.atleast_2d(_c64(states))
    if X.shape[0] != t.size:
        X = X.T
    n = X.shape[1]
    if components is None:
        components = sorted({0, n // 2, n - 1})

    if ax is None:
        fig, ax = plt.subplots(figsize=(7.0, 4.0))
    else:
        fig = ax.figure

    for i in components:
        ax.plot(t, X[:, i], lw=1.6, label=f"x[{i}]")
    ax.set_xlabel("t")
    ax.set_ylabel("x")
    if title:
        ax.set_title(title)
    ax.grid(True, alpha=0.3)
    ax.legend(loc="best", frameon=False)
    fig.tight_layout()
    return fig, ax


def plot_profiles(
    z: Iterable[float],
    t: Iterable[float],
    states: np.ndarray,
    *,
    n_curves: int = 6,
    ax: plt.Axes | None = None,
    title: str | None = "Profiles",
) -> Tuple[plt.Figure, plt.Axes]:
    """Plot spatial profiles x(z) at n_curves evenly spaced stored times."""
    z = _c64(z)
    t = _c64(t)
    X = np.atleast_2d(_c64(states))
    idx = np.unique(np.linspace(0, t.size - 1, max(2, int(n_curves))).round().astype(int))

    if ax is None:
        fig, ax = plt.subplots(figsize=(7.0, 4.0))
    else:
        fig = ax.figure

    for k in idx:
        ax.plot(z, X[k], lw=1.4, label=f"t={t[k]:.3g}")
    ax.set_xlabel("z")
    ax.set_ylabel("x")
    if title:
        ax.set_title(title)
    ax.grid(True, alpha=0.3)
    ax.legend(loc="best", frameon=False, fontsize=8)
    fig.tight_layout()
    return fig, ax
