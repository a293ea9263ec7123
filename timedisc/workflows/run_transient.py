# -*- coding: utf-8 -*-
"""
Single-run workflow wiring config → equation → scheme → system → time loop → results.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import numpy as np

from timedisc.io.config import RunConfig, build_problem, build_scheme, load_config
from timedisc.io.results import save_fields_npz, write_metrics
from timedisc.solver.time_integration import TimeLoopResult, run_time_loop
from timedisc.timediscretization.ode_system import create_time_discretized_ode_system
from timedisc.utils import logger as log


def run(cfg: RunConfig, debug: bool = False) -> TimeLoopResult:
    ode, x0 = build_problem(cfg)
    td = build_scheme(cfg)
    solver = cfg.solver
    system = create_time_discretized_ode_system(ode, td, tag=solver.kind)
    ts = cfg.time
    log.info(
        f"[run] {type(ode).__name__} n={ode.matrix_size()} | {type(td).__name__} | "
        f"{solver.kind.value} | t∈[{ts.t0:g},{ts.t_end:g}] dt={ts.dt:g}"
    )
    opts = dict(solver.options)
    opts["debug"] = bool(opts.get("debug", False) or debug)
    return run_time_loop(system, x0, ts.t0, ts.t_end, ts.dt, opts)


def summarize(result: TimeLoopResult) -> Dict[str, Any]:
    its = np.asarray(result.iterations, dtype=int)
    return {
        "steps": int(its.size),
        "t_final": float(result.times[-1]),
        "iters_total": int(its.sum()) if its.size else 0,
        "iters_max": int(its.max()) if its.size else 0,
        "x_final_min": float(result.final.min()),
        "x_final_max": float(result.final.max()),
    }


def run_from_config(cfg_path: Path, debug: bool = False) -> Path:
    cfg = load_config(cfg_path)
    result = run(cfg, debug=debug)
    out_dir = cfg.output_dir

    save_fields_npz(out_dir, t=result.times, x=result.states)
    write_metrics(out_dir, summarize(result))
    log.info(f"[run] saved results at {out_dir}")
    return out_dir
