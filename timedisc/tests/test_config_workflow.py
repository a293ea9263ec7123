# -*- coding: utf-8 -*-
"""
YAML config → problem/scheme builders and the single-run workflow.
"""
import json
from pathlib import Path

import numpy as np
import pytest

from timedisc.io.config import build_problem, build_scheme, load_config
from timedisc.io.results import load_fields_npz
from timedisc.ode.equation import NonlinearSolverTag
from timedisc.ode.problems import HeatRod1D, LinearODE
from timedisc.timediscretization.schemes import BackwardDifferentiationFormula
from timedisc.workflows.run_transient import run_from_config

LINEAR_YAML = """
problem:
  name: linear
  params: {{ M: [[1.0]], K: [[2.0]], b: [0.0] }}
  x0: [1.0]
time:
  t0: 0.0
  t_end: 0.5
  dt: 0.1
scheme:
  name: backward_euler
solver:
  kind: {kind}
  tol: 1.0e-12
output:
  dir: {out}
"""


def _write(tmp_path: Path, text: str, name: str = "case.yaml") -> Path:
    p = tmp_path / name
    p.write_text(text)
    return p


def test_load_and_build_heat_rod(tmp_path):
    cfg = load_config(_write(tmp_path, """
problem:
  name: heat_rod
  params: { N: 5, beta: 0.2 }
  x0: 0.5
time: { t_end: 1.0, dt: 0.1 }
scheme: { name: bdf, order: 3 }
solver: { kind: picard, max_iters: 20, tol: 1.0e-9, relaxation: 0.8 }
"""))
    ode, x0 = build_problem(cfg)
    assert isinstance(ode, HeatRod1D) and ode.N == 5
    np.testing.assert_allclose(x0, np.full(5, 0.5))

    td = build_scheme(cfg)
    assert isinstance(td, BackwardDifferentiationFormula) and td.order == 3

    s = cfg.solver
    assert s.kind is NonlinearSolverTag.PICARD
    assert s.options == {"max_iters": 20, "tol_dx_rel": 1e-9, "relaxation": 0.8, "debug": False}
    assert cfg.time.t0 == 0.0
    assert cfg.output_dir == Path("runs") / "case"


def test_missing_sections_are_rejected(tmp_path):
    with pytest.raises(ValueError):
        load_config(_write(tmp_path, "problem: {name: linear}\n"))
    with pytest.raises(ValueError):
        load_config(_write(tmp_path, "- just\n- a list\n"))
    with pytest.raises(ValueError):
        load_config(_write(tmp_path, """
problem: { name: linear }
time: { dt: 0.1 }
scheme: { name: bdf }
solver: { kind: newton }
"""))


def test_unknown_problem_and_bad_x0(tmp_path):
    cfg = load_config(_write(tmp_path, """
problem: { name: wave }
time: { t_end: 1.0, dt: 0.1 }
scheme: { name: backward_euler }
solver: { kind: newton }
"""))
    with pytest.raises(ValueError):
        build_problem(cfg)

    cfg = load_config(_write(tmp_path, """
problem: { name: heat_rod, params: { N: 4 }, x0: [1.0, 2.0] }
time: { t_end: 1.0, dt: 0.1 }
scheme: { name: backward_euler }
solver: { kind: newton }
"""))
    with pytest.raises(ValueError):
        build_problem(cfg)


@pytest.mark.parametrize("kind", ["newton", "picard"])
def test_run_from_config_writes_results(tmp_path, kind):
    out = tmp_path / f"out_{kind}"
    cfg_path = _write(tmp_path, LINEAR_YAML.format(kind=kind, out=out.as_posix()))
    ode, _ = build_problem(load_config(cfg_path))
    assert isinstance(ode, LinearODE)

    run_dir = run_from_config(cfg_path)
    assert run_dir == out

    metrics = json.loads((out / "metrics.json").read_text())
    assert metrics["steps"] == 5
    assert metrics["iters_total"] == 5

    fields = load_fields_npz(out)
    np.testing.assert_allclose(fields["t"], [0.0, 0.1, 0.2, 0.3, 0.4, 0.5])
    np.testing.assert_allclose(fields["x"][-1], [1.2 ** -5], rtol=1e-10)
