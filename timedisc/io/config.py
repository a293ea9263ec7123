# timedisc/io/config.py
# -*- coding: utf-8 -*-
"""
YAML → run configuration helpers.

Schema (minimal, example):

problem:
  name: heat_rod            # heat_rod | quadratic_decay | linear
  params: { L: 1.0, N: 41, k0: 1.0, beta: 0.5, h_left: 10.0, T_inf_left: 1.0 }
  x0: 0.0                   # scalar (broadcast) or list

time:
  t0: 0.0
  t_end: 1.0
  dt: 0.01

scheme:
  name: bdf                 # backward_euler | forward_euler | bdf
  order: 2                  # bdf only

solver:
  kind: newton              # newton | picard
  max_iters: 50
  tol: 1.0e-10
  debug: false

output:
  dir: runs/heat_rod        # optional
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np
import yaml

from timedisc.ode.equation import FirstOrderImplicitODE, NonlinearSolverTag
from timedisc.ode.problems import HeatRod1D, LinearODE, QuadraticDecayODE
from timedisc.timediscretization.schemes import (
    TimeDiscretization,
    create_time_discretization,
)


@dataclass
class TimeSpec:
    t0: float
    t_end: float
    dt: float


@dataclass
class SchemeSpec:
    name: str
    order: Optional[int] = None


@dataclass
class SolverSpec:
    kind: NonlinearSolverTag
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass
class RunConfig:
    raw: dict
    path: Path

    @property
    def time(self) -> TimeSpec:
        t = self.raw["time"]
        return TimeSpec(t0=float(t.get("t0", 0.0)), t_end=float(t["t_end"]),
                        dt=float(t["dt"]))

    @property
    def scheme(self) -> SchemeSpec:
        s = self.raw["scheme"]
        order = s.get("order")
        return SchemeSpec(name=str(s["name"]),
                          order=int(order) if order is not None else None)

    @property
    def solver(self) -> SolverSpec:
        s = dict(self.raw["solver"])
        kind = NonlinearSolverTag(str(s.pop("kind", "newton")).lower())
        opts: Dict[str, Any] = {}
        if "max_iters" in s:
            opts["max_iters"] = int(s.pop("max_iters"))
        if "tol" in s:
            tol = float(s.pop("tol"))
            opts["tol_res_inf" if kind is NonlinearSolverTag.NEWTON else "tol_dx_rel"] = tol
        if "relaxation" in s:
            opts["relaxation"] = float(s.pop("relaxation"))
        opts["debug"] = bool(s.pop("debug", False))
        if s:
            raise ValueError(f"Unknown solver keys: {sorted(s)}")
        return SolverSpec(kind=kind, options=opts)

    @property
    def output_dir(self) -> Path:
        out = (self.raw.get("output") or {}).get("dir")
        return Path(out) if out else Path("runs") / self.path.stem


def load_config(path: Path) -> RunConfig:
    data = yaml.safe_load(Path(path).read_text())
    if not isinstance(data, dict):
        raise ValueError("Top-level YAML must be a mapping")
    _validate_minimum(data)
    return RunConfig(raw=data, path=Path(path))


def build_problem(cfg: RunConfig) -> tuple[FirstOrderImplicitODE, np.ndarray]:
    """Return (equation, initial state)."""
    p = cfg.raw["problem"]
    name = str(p["name"]).lower()
    params = dict(p.get("params") or {})

    if name == "heat_rod":
        ode: FirstOrderImplicitODE = HeatRod1D(**params)
    elif name == "quadratic_decay":
        ode = QuadraticDecayODE(n=int(params.get("n", 1)))
    elif name == "linear":
        for key in ("M", "K", "b"):
            if key not in params:
                raise ValueError(f"problem.params.{key} is required for 'linear'")
        ode = LinearODE(params["M"], params["K"], params["b"])
    else:
        raise ValueError(f"Unknown problem: {name}")

    n = ode.matrix_size()
    x0 = np.asarray(p.get("x0", 0.0), dtype=np.float64)
    if x0.ndim == 0:
        x0 = np.full(n, float(x0))
    if x0.shape != (n,):
        raise ValueError(f"problem.x0 has {x0.size} entries, expected {n}")
    return ode, x0


def build_scheme(cfg: RunConfig) -> TimeDiscretization:
    s = cfg.scheme
    params = {"order": s.order} if s.order is not None else {}
    return create_time_discretization(s.name, **params)


def _validate_minimum(cfg: dict) -> None:
    for key in ("problem", "time", "scheme", "solver"):
        if key not in cfg:
            raise ValueError(f"Missing top-level key: {key}")
    for key in ("t_end", "dt"):
        if key not in (cfg["time"] or {}):
            raise ValueError(f"Missing time.{key}")
