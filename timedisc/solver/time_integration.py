# -*- coding: utf-8 -*-
"""
Time loop: advances a time-discretized system from t0 to t_end.

Per step:
    td.next_timestep(t_new, dt)
    x_new = nonlinear_solve(system, x_old)
    td.push_state(t_new, x_new)

The history inside the scheme is only touched between nonlinear solves.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

import numpy as np

from timedisc.solver import newton, picard
from timedisc.solver.result import SolveResult
from timedisc.timediscretization.ode_system import (
    TimeDiscretizedODESystemNewton,
    TimeDiscretizedODESystemPicard,
)
from timedisc.utils import diagnostics as diag

_SOLVERS: Dict[str, Callable[..., SolveResult]] = {
    "newton": newton.solve,
    "picard": picard.solve,
}


@dataclass
class TimeLoopResult:
    times: np.ndarray                 # (n_steps + 1,)
    states: np.ndarray                # (n_steps + 1, n)
    iterations: List[int] = field(default_factory=list)

    @property
    def final(self) -> np.ndarray:
        return self.states[-1]


def solver_for(system) -> Callable[..., SolveResult]:
    """Pick the driver matching the system's contract."""
    if isinstance(system, TimeDiscretizedODESystemNewton):
        return _SOLVERS["newton"]
    if isinstance(system, TimeDiscretizedODESystemPicard):
        return _SOLVERS["picard"]
    raise TypeError(f"No nonlinear solver for {type(system).__name__}")


def step(system, x_old: np.ndarray, t_new: float, dt: float,
         options: Dict[str, Any] | None = None) -> SolveResult:
    """One time step from the scheme's current history to t_new."""
    system.time_discretization.next_timestep(t_new, dt)
    return solver_for(system)(system, x_old, options)


def run_time_loop(
    system,
    x0: np.ndarray,
    t0: float,
    t_end: float,
    dt: float,
    options: Dict[str, Any] | None = None,
) -> TimeLoopResult:
    """Integrate with a constant step (the last step is shortened to hit t_end)."""
    if not dt > 0.0:
        raise ValueError(f"dt must be positive, got {dt}")
    if t_end < t0:
        raise ValueError(f"t_end ({t_end}) is before t0 ({t0})")

    opts = dict(options or {})
    debug = bool(opts.get("debug", False))
    td = system.time_discretization
    scheme = type(td).__name__

    x = np.array(x0, dtype=np.float64, copy=True)
    td.set_initial_state(t0, x)

    times = [float(t0)]
    states = [x.copy()]
    iterations: List[int] = []

    t = float(t0)
    n_step = 0
    eps = 1e-12 * max(1.0, abs(t_end))
    while t < t_end - eps:
        t_new = min(t + dt, t_end)
        if t_end - t_new <= eps:
            t_new = float(t_end)
        delta = t_new - t
        n_step += 1

        res = step(system, x, t_new, delta, opts)
        if not res.converged:
            raise RuntimeError(
                f"Nonlinear solver did not converge after {res.iters} iterations "
                f"at time {t_new:.6g} (step {n_step})."
            )

        x = res.x
        td.push_state(t_new, x)
        t = t_new

        times.append(t)
        states.append(x.copy())
        iterations.append(int(res.iters))

        if debug:
            diag.log_time_step(step=n_step, t=t, dt=delta, iters=res.iters,
                               x=x, scheme=scheme)

    return TimeLoopResult(times=np.asarray(times), states=np.vstack(states),
                          iterations=iterations)
