"""
timedisc/utils/diagnostics.py

Targeted, low-noise diagnostics to understand why a solve fails.
Called from the solver drivers and the time loop when debug=True.
"""

from __future__ import annotations

import numpy as np


def _fmt_range(x: np.ndarray, name: str) -> str:
    if x.size == 0:
        return f"{name}: (empty)"
    return f"{name}∈[{np.min(x):+.3e},{np.max(x):+.3e}]"


def log_solver_start(
    *,
    solver: str,
    res_inf: float,
    x_min: float,
    x_max: float,
    damping: float,
    prefix: str = "[sol]",
) -> None:
    print(
        f"{prefix} {solver} start | ||res||_inf={res_inf:.3e} | "
        f"x∈[{x_min:+.3e},{x_max:+.3e}] | damping={damping:.2e}"
    )


def log_solver_iter(
    *,
    solver: str,
    it: int,
    res_inf: float,
    damping: float,
    max_dx: float,
    prefix: str = "[sol]",
) -> None:
    print(
        f"{prefix} {solver} iter {it:02d} | ||res||_inf={res_inf:.3e} | "
        f"damping={damping:.2e} | max|Δx|={max_dx:.3e}"
    )


def log_solver_backtrack_fail(
    *,
    solver: str,
    it: int,
    res_inf: float,
    min_damping: float,
    prefix: str = "[sol]",
) -> None:
    print(
        f"{prefix} {solver} iter {it:02d} | line-search failed | "
        f"||res||_inf={res_inf:.3e} | damping_min={min_damping:.1e}"
    )


def log_convergence_summary(
    *,
    solver: str,
    converged: bool,
    iters: int,
    res_inf: float,
    prefix: str = "[sol]",
) -> None:
    print(
        f"{prefix} {solver} done | converged={converged} | iters={iters} | "
        f"||res||_inf={res_inf:.3e}"
    )


def log_time_step(
    *,
    step: int,
    t: float,
    dt: float,
    iters: int,
    x: np.ndarray,
    scheme: str,
    prefix: str = "[step]",
) -> None:
    """One line per accepted time step."""
    print(
        f"{prefix} {step:04d} | {scheme} | t={t:.4e} dt={dt:.3e} | "
        f"iters={iters} | {_fmt_range(x, 'x')}"
    )
