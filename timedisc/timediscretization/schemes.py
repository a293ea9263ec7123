# -*- coding: utf-8 -*-
"""
Time-discretization schemes for  M·dx/dt + K·x = b.

Each scheme approximates the time derivative at the current step as

    x_dot ≈ α · x_new - weighted_old_x

and says where the spatial operator is evaluated (x_curr, t). The driver
advances the history between nonlinear solves:

    td.set_initial_state(t0, x0)
    td.next_timestep(t1, t1 - t0)   # then solve for x1
    td.push_state(t1, x1)

Available:
  - BackwardEuler                    (implicit, first order)
  - ForwardEuler                     (explicit, operator at the old state)
  - BackwardDifferentiationFormula   (implicit, order 1..6, self-starting)
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from enum import Enum
from typing import Deque

import numpy as np

from timedisc.errors import AssemblyOrderError

__all__ = [
    "TimeDiscretizationKind",
    "TimeDiscretization",
    "BackwardEuler",
    "ForwardEuler",
    "BackwardDifferentiationFormula",
    "BDF_COEFFS",
    "create_time_discretization",
]


def _readonly(x: np.ndarray) -> np.ndarray:
    v = x.view()
    v.flags.writeable = False
    return v


class TimeDiscretizationKind(Enum):
    GENERAL = "general"
    FORWARD_EULER = "forward_euler"


# (a0, [c1, c2, ...]) so that  Δt·x_dot = a0·x_{n+1} - Σ c_i·x_{n+1-i}
BDF_COEFFS: dict[int, tuple[float, tuple[float, ...]]] = {
    1: (1.0, (1.0,)),
    2: (3.0 / 2.0, (2.0, -1.0 / 2.0)),
    3: (11.0 / 6.0, (3.0, -3.0 / 2.0, 1.0 / 3.0)),
    4: (25.0 / 12.0, (4.0, -3.0, 4.0 / 3.0, -1.0 / 4.0)),
    5: (137.0 / 60.0, (5.0, -5.0, 10.0 / 3.0, -5.0 / 4.0, 1.0 / 5.0)),
    6: (147.0 / 60.0, (6.0, -15.0 / 2.0, 20.0 / 3.0, -15.0 / 4.0, 6.0 / 5.0, -1.0 / 6.0)),
}


class TimeDiscretization(ABC):
    """Base class holding the time-step state shared by all schemes."""

    kind = TimeDiscretizationKind.GENERAL

    def __init__(self) -> None:
        self._t_old: float | None = None
        self._t: float | None = None
        self._delta_t: float | None = None
        self._x_old: np.ndarray | None = None

    # ---- time-step state machine ------------------------------------------

    def set_initial_state(self, t0: float, x0: np.ndarray) -> None:
        self._t_old = float(t0)
        self._t = float(t0)
        self._delta_t = None
        self._x_old = np.array(x0, dtype=np.float64, copy=True)

    def next_timestep(self, t: float, delta_t: float) -> None:
        """Set the target time t = t_old + delta_t of the next solve."""
        if self._x_old is None:
            raise AssemblyOrderError("set_initial_state() must be called before next_timestep()")
        if not delta_t > 0.0:
            raise ValueError(f"delta_t must be positive, got {delta_t}")
        self._t = float(t)
        self._delta_t = float(delta_t)

    def push_state(self, t: float, x: np.ndarray) -> None:
        """Record the converged state x at time t as the new history."""
        self._t_old = float(t)
        self._x_old = np.array(x, dtype=np.float64, copy=True)
        self._delta_t = None

    # ---- contract consumed by translators and adapters --------------------

    def current_time(self) -> float:
        self._require_step()
        return self._t

    def current_x_weight(self) -> float:
        self._require_step()
        return 1.0 / self._delta_t

    def current_x(self, x_new: np.ndarray) -> np.ndarray:
        return x_new

    @abstractmethod
    def weighted_old_x(self) -> np.ndarray:
        raise NotImplementedError

    def dx_dx(self) -> float:
        return 1.0

    def is_linear_time_disc(self) -> bool:
        return True

    def adjust_matrix(self, jac: np.ndarray) -> np.ndarray:
        return jac

    @property
    def delta_t(self) -> float | None:
        return self._delta_t

    def _require_step(self) -> None:
        if self._delta_t is None:
            raise AssemblyOrderError(
                f"{type(self).__name__}: next_timestep() must be called before querying the scheme"
            )


class BackwardEuler(TimeDiscretization):
    """x_dot = (x_new - x_old) / Δt, operator at (t_new, x_new)."""

    def weighted_old_x(self) -> np.ndarray:
        self._require_step()
        return self._x_old / self._delta_t


class ForwardEuler(TimeDiscretization):
    """
    x_dot = (x_new - x_old) / Δt, operator at (t_old, x_old).

    The stiffness term can be moved to the right-hand side entirely, hence
    the dedicated translator and the extra x_old() accessor.
    """

    kind = TimeDiscretizationKind.FORWARD_EULER

    def current_time(self) -> float:
        self._require_step()
        return self._t_old

    def current_x(self, x_new: np.ndarray) -> np.ndarray:
        self._require_step()
        return _readonly(self._x_old)

    def weighted_old_x(self) -> np.ndarray:
        self._require_step()
        return self._x_old / self._delta_t

    def x_old(self) -> np.ndarray:
        if self._x_old is None:
            raise AssemblyOrderError("set_initial_state() must be called before x_old()")
        return _readonly(self._x_old)

    def dx_dx(self) -> float:
        return 0.0


class BackwardDifferentiationFormula(TimeDiscretization):
    """
    BDF of the given order (1..6).

    Starts at first order and raises the effective order by one per pushed
    state until `order` is reached. Equally spaced history uses the BDF_COEFFS
    table; otherwise the weights are the derivative at the new time of the
    polynomial interpolating the new state and the stored ones.
    """

    def __init__(self, order: int = 2) -> None:
        super().__init__()
        order = int(order)
        if order not in BDF_COEFFS:
            raise ValueError(f"BDF order must be in 1..6, got {order}")
        self.order = order
        # newest first: (t_i, x_i)
        self._history: Deque[tuple[float, np.ndarray]] = deque(maxlen=order)
        self._alpha: float | None = None
        self._old_weights: np.ndarray | None = None

    def set_initial_state(self, t0: float, x0: np.ndarray) -> None:
        super().set_initial_state(t0, x0)
        self._history.clear()
        self._history.appendleft((self._t_old, self._x_old))

    def push_state(self, t: float, x: np.ndarray) -> None:
        super().push_state(t, x)
        self._history.appendleft((self._t_old, self._x_old))

    def next_timestep(self, t: float, delta_t: float) -> None:
        super().next_timestep(t, delta_t)
        nodes = np.array([self._t_old + self._delta_t] + [ti for ti, _ in self._history])
        gaps = -np.diff(nodes)
        if np.any(gaps <= 0.0):
            raise ValueError(f"BDF history times must increase, got {nodes[::-1]}")
        if np.allclose(gaps, self._delta_t, rtol=1e-9, atol=0.0):
            a0, cs = BDF_COEFFS[self.effective_order]
            self._alpha = a0 / self._delta_t
            self._old_weights = np.asarray(cs) / self._delta_t
        else:
            w = _interpolant_derivative_weights(nodes)
            self._alpha = float(w[0])
            self._old_weights = -w[1:]

    @property
    def effective_order(self) -> int:
        return max(1, len(self._history))

    def current_x_weight(self) -> float:
        self._require_step()
        return self._alpha

    def weighted_old_x(self) -> np.ndarray:
        self._require_step()
        y = np.zeros_like(self._history[0][1])
        for c, (_, x) in zip(self._old_weights, self._history):
            y += c * x
        return y


def _interpolant_derivative_weights(nodes: np.ndarray) -> np.ndarray:
    """w such that p'(nodes[0]) = Σ w_j p(nodes[j]) for every polynomial p of degree < len(nodes)."""
    tau = np.asarray(nodes, dtype=np.float64)
    w = np.empty(tau.size)
    w[0] = np.sum(1.0 / (tau[0] - tau[1:]))
    for j in range(1, tau.size):
        num = np.prod(tau[0] - np.delete(tau, [0, j]))
        den = np.prod(tau[j] - np.delete(tau, j))
        w[j] = num / den
    return w


_SCHEMES = {
    "backward_euler": BackwardEuler,
    "forward_euler": ForwardEuler,
    "bdf": BackwardDifferentiationFormula,
}


def create_time_discretization(name: str, **params) -> TimeDiscretization:
    """Build a scheme by name ('backward_euler', 'forward_euler', 'bdf')."""
    key = name.strip().lower().replace("-", "_").replace(" ", "_")
    try:
        cls = _SCHEMES[key]
    except KeyError:
        raise ValueError(
            f"Unknown time discretization: {name!r} (try: {', '.join(_SCHEMES)})"
        ) from None
    return cls(**params)
