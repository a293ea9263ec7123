# timedisc/solver/newton.py
# Damped Newton–Raphson driver for a TimeDiscretizedODESystemNewton.
# Owns iteration, line search and convergence testing; the system only
# supplies residual and Jacobian.

from __future__ import annotations

from typing import Any, Dict

import numpy as np

from timedisc.solver.linear import solve_linear
from timedisc.solver.result import SolveResult, inf_norm
from timedisc.utils import diagnostics as diag


def _residual(system, x: np.ndarray) -> np.ndarray:
    system.assemble_residual_newton(x)
    return system.get_residual(x)


def solve(system, x0: np.ndarray, options: Dict[str, Any] | None = None) -> SolveResult:
    """Newton solve of r(x) = 0 for one time step.

    Parameters
    ----------
    system : object with the Newton contract:
        - assemble_residual_newton(x), get_residual(x) -> np.ndarray
        - assemble_jacobian(x), get_jacobian() -> np.ndarray
        - is_linear() -> bool
    x0 : initial guess (usually the previous time step's state)
    options : dict
        Keys (all optional):
          - max_iters (int, default 50)
          - tol_res_inf (float, default 1e-10)
          - tol_res_rel (float, default 1e-10; relative to the initial residual)
          - tol_dx_inf (float, default 0.0; 0 disables the increment test)
          - damping_init (float, default 1.0)
          - min_damping (float, default 1e-8)
          - print_every (int, default 1)
          - debug (bool, default False)
    """
    opts = dict(
        max_iters=50,
        tol_res_inf=1e-10,
        tol_res_rel=1e-10,
        tol_dx_inf=0.0,
        damping_init=1.0,
        min_damping=1e-8,
        print_every=1,
        debug=False,
    )
    if options:
        opts.update(options)

    x = np.array(x0, dtype=np.float64, copy=True)
    resid = _residual(system, x)
    res_inf = inf_norm(resid)
    linear = system.is_linear()
    damping = float(opts["damping_init"])

    if opts["debug"]:
        diag.log_solver_start(
            solver="Newton", res_inf=res_inf,
            x_min=float(x.min()), x_max=float(x.max()), damping=damping,
        )

    tol = max(float(opts["tol_res_inf"]), float(opts["tol_res_rel"]) * res_inf)
    if res_inf < float(opts["tol_res_inf"]):
        return SolveResult(x=x, residual=resid, iters=0, converged=True)

    converged = False
    it = 0
    for it in range(1, int(opts["max_iters"]) + 1):
        system.assemble_jacobian(x)
        delta = solve_linear(system.get_jacobian(), -resid)

        if linear:
            # one full step solves a linear system exactly
            x = x + delta
            resid = _residual(system, x)
            res_inf = inf_norm(resid)
            converged = True
            break

        # Backtracking line-search on ||r||_inf
        accepted = False
        local_damp = damping
        while local_damp >= float(opts["min_damping"]):
            x_trial = x + local_damp * delta
            resid_t = _residual(system, x_trial)
            res_inf_t = inf_norm(resid_t)
            if res_inf_t < res_inf:
                x, resid, res_inf = x_trial, resid_t, res_inf_t
                accepted = True
                damping = min(1.0, local_damp * 1.25)
                break
            local_damp *= 0.5

        if not accepted:
            if opts["debug"]:
                diag.log_solver_backtrack_fail(
                    solver="Newton", it=it, res_inf=res_inf,
                    min_damping=float(opts["min_damping"]),
                )
            # the stored matrices must match the returned state
            resid = _residual(system, x)
            break

        max_dx = inf_norm(local_damp * delta)
        if opts["debug"] and (it % int(opts["print_every"]) == 0):
            diag.log_solver_iter(
                solver="Newton", it=it, res_inf=res_inf,
                damping=damping, max_dx=max_dx,
            )

        if res_inf < tol:
            converged = True
            break
        if float(opts["tol_dx_inf"]) > 0.0 and max_dx < float(opts["tol_dx_inf"]):
            converged = True
            break

    if opts["debug"]:
        diag.log_convergence_summary(
            solver="Newton", converged=converged, iters=it, res_inf=res_inf,
        )

    return SolveResult(x=x, residual=resid, iters=it, converged=converged)
