# timedisc/solver/picard.py
# Fixed-point (Picard) driver for a TimeDiscretizedODESystemPicard.
# Each iteration freezes the coefficients at the current iterate and solves
# the linear system A(x_k)·x_{k+1} = rhs(x_k).

from __future__ import annotations

from typing import Any, Dict

import numpy as np

from timedisc.solver.linear import solve_linear
from timedisc.solver.result import SolveResult, inf_norm
from timedisc.utils import diagnostics as diag


def solve(system, x0: np.ndarray, options: Dict[str, Any] | None = None) -> SolveResult:
    """Picard iteration for one time step.

    Parameters
    ----------
    system : object with the Picard contract:
        - assemble_matrices_picard(x)
        - get_a() -> np.ndarray, get_rhs() -> np.ndarray
        - is_linear() -> bool
    x0 : initial guess
    options : dict
        Keys (all optional):
          - max_iters (int, default 100)
          - tol_dx_rel (float, default 1e-10): ||Δx||_inf <= tol·max(1, ||x||_inf)
          - relaxation (float, default 1.0): x ← x + ω (x_lin - x)
          - print_every (int, default 1)
          - debug (bool, default False)

    The returned ``residual`` is the last increment x_{k+1} - x_k.
    """
    opts = dict(
        max_iters=100,
        tol_dx_rel=1e-10,
        relaxation=1.0,
        print_every=1,
        debug=False,
    )
    if options:
        opts.update(options)

    omega = float(opts["relaxation"])
    if not 0.0 < omega <= 1.0:
        raise ValueError(f"relaxation must be in (0, 1], got {omega}")

    x = np.array(x0, dtype=np.float64, copy=True)
    dx = np.zeros_like(x)
    linear = system.is_linear()

    if opts["debug"]:
        diag.log_solver_start(
            solver="Picard", res_inf=float("nan"),
            x_min=float(x.min()), x_max=float(x.max()), damping=omega,
        )

    converged = False
    it = 0
    for it in range(1, int(opts["max_iters"]) + 1):
        system.assemble_matrices_picard(x)
        x_lin = solve_linear(system.get_a(), system.get_rhs())

        if linear:
            dx = x_lin - x
            x = x_lin
            converged = True
            break

        dx = omega * (x_lin - x)
        x = x + dx
        dx_inf = inf_norm(dx)

        if opts["debug"] and (it % int(opts["print_every"]) == 0):
            diag.log_solver_iter(
                solver="Picard", it=it, res_inf=dx_inf, damping=omega, max_dx=dx_inf,
            )

        if dx_inf <= float(opts["tol_dx_rel"]) * max(1.0, inf_norm(x)):
            converged = True
            break

    if opts["debug"]:
        diag.log_convergence_summary(
            solver="Picard", converged=converged, iters=it, res_inf=inf_norm(dx),
        )

    return SolveResult(x=x, residual=dx, iters=it, converged=converged)
