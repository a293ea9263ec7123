# timedisc/main.py
"""
timedisc main entrypoint.

Default subcommand: rod
Usage examples:
    python -m timedisc.main
    python -m timedisc.main rod --scheme bdf --order 2 --solver newton --beta 0.5
    python -m timedisc.main run examples/heat_rod.yaml
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import argparse
import sys
import numpy as np

from .ode.problems import HeatRod1D
from .timediscretization.schemes import create_time_discretization
from .timediscretization.ode_system import create_time_discretized_ode_system
from .solver.time_integration import run_time_loop
from .postprocess.visualization import plot_profiles
from .workflows.run_transient import run_from_config
from .utils import logger as log

__all__ = ["main"]


# ------------------------------ rod subcommand ------------------------------


@dataclass(slots=True)
class _RodArgs:
    L: float
    N: int
    k0: float
    beta: float
    h: float
    T_inf: float
    q: float
    T0: float
    scheme: str
    order: int
    solver: str
    dt: float
    t_end: float
    debug: bool
    csv_out: str
    png_out: str
    no_plot: bool


def _add_rod_subparser(
    subparsers: argparse._SubParsersAction,
) -> argparse.ArgumentParser:
    p = subparsers.add_parser(
        "rod", help="1-D transient heat rod (convective ends, optional k(T))"
    )
    p.add_argument("--L", type=float, default=1.0, help="Rod length")
    p.add_argument("--N", type=int, default=41, help="Number of nodes (>=2)")
    p.add_argument("--k0", type=float, default=1.0, help="Conductivity at T_ref")
    p.add_argument(
        "--beta", type=float, default=0.0,
        help="Relative conductivity slope; non-zero makes the problem nonlinear"
    )
    p.add_argument("--h", type=float, default=10.0, help="Film coefficient at both ends")
    p.add_argument("--T-inf", dest="T_inf", type=float, default=1.0, help="Ambient temperature")
    p.add_argument("--q", type=float, default=0.0, help="Volumetric heat source")
    p.add_argument("--T0", type=float, default=0.0, help="Uniform initial temperature")
    p.add_argument(
        "--scheme", choices=["backward_euler", "forward_euler", "bdf"],
        default="backward_euler", help="Time discretization"
    )
    p.add_argument("--order", type=int, default=2, help="BDF order (1..6)")
    p.add_argument(
        "--solver", choices=["newton", "picard"], default="newton",
        help="Nonlinear solver"
    )
    p.add_argument("--dt", type=float, default=1e-3, help="Time step")
    p.add_argument("--t-end", dest="t_end", type=float, default=0.1, help="End time")
    p.add_argument("--debug", action="store_true", help="Verbose solver prints")
    p.add_argument("--csv", default="rod_history.csv", help="CSV output path")
    p.add_argument("--png", default="rod_profiles.png", help="PNG plot output path")
    p.add_argument("--no-plot", action="store_true", help="Skip writing the plot")
    p.set_defaults(cmd="rod")
    return p


def _add_run_subparser(
    subparsers: argparse._SubParsersAction,
) -> argparse.ArgumentParser:
    p = subparsers.add_parser("run", help="Run a transient case from a YAML config")
    p.add_argument("config", type=Path, help="Path to the YAML run config")
    p.add_argument("--debug", action="store_true", help="Verbose prints")
    p.set_defaults(cmd="run")
    return p


def _rod_args(ns: argparse.Namespace) -> _RodArgs:
    return _RodArgs(
        L=ns.L, N=ns.N, k0=ns.k0, beta=ns.beta, h=ns.h, T_inf=ns.T_inf, q=ns.q,
        T0=ns.T0, scheme=str(ns.scheme), order=int(ns.order), solver=str(ns.solver),
        dt=ns.dt, t_end=ns.t_end, debug=bool(ns.debug), csv_out=str(ns.csv),
        png_out=str(ns.png), no_plot=bool(ns.no_plot),
    )


def _run_rod(args: _RodArgs) -> None:
    log.set_verbose(args.debug)
    rod = HeatRod1D(
        L=args.L, N=args.N, k0=args.k0, beta=args.beta,
        h_left=args.h, h_right=args.h, T_inf_left=args.T_inf, T_inf_right=args.T_inf,
        q=args.q,
    )
    params = {"order": args.order} if args.scheme == "bdf" else {}
    td = create_time_discretization(args.scheme, **params)
    system = create_time_discretized_ode_system(rod, td, tag=args.solver)
    log.debug(f"system={type(system).__name__} linear={system.is_linear()}")

    x0 = np.full(rod.N, args.T0)
    res = run_time_loop(system, x0, 0.0, args.t_end, args.dt, {"debug": args.debug})

    # CSV: one row per stored time, columns t, x[0..N-1]
    arr = np.column_stack([res.times, res.states])
    header = "t," + ",".join(f"x{i}" for i in range(rod.N))
    np.savetxt(args.csv_out, arr, delimiter=",", header=header, comments="")
    log.info(
        f"[ok] wrote {args.csv_out}  (steps={len(res.iterations)}, "
        f"iters={sum(res.iterations)}, x∈[{res.final.min():.4g},{res.final.max():.4g}])"
    )

    if not args.no_plot:
        fig, _ax = plot_profiles(rod.z, res.times, res.states,
                                 title=f"Heat rod — {args.scheme}/{args.solver}")
        fig.savefig(args.png_out, dpi=180)
        log.info(f"[ok] wrote {args.png_out}")


# --------------------------------- main() ------------------------------------


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="timedisc — time-discretized ODE demos")
    sub = parser.add_subparsers(dest="cmd")

    rod_parser = _add_rod_subparser(sub)
    _add_run_subparser(sub)

    argv = sys.argv[1:] if argv is None else list(argv)

    # If no subcommand given, default to 'rod' with defaults
    if not argv:
        _run_rod(_rod_args(rod_parser.parse_args([])))
        return

    ns = parser.parse_args(argv)
    if ns.cmd == "rod":
        _run_rod(_rod_args(ns))
        return
    if ns.cmd == "run":
        log.set_verbose(ns.debug)
        run_from_config(ns.config, debug=ns.debug)
        return

    parser.error("Unknown command (try: rod, run)")


if __name__ == "__main__":
    main()
