# -*- coding: utf-8 -*-
"""
End-to-end: schemes + systems + drivers reproduce known solutions.
"""
from __future__ import annotations

import numpy as np
import pytest

from timedisc.ode.problems import HeatRod1D, LinearODE, QuadraticDecayODE
from timedisc.solver import newton, picard
from timedisc.solver.time_integration import run_time_loop, step
from timedisc.timediscretization.ode_system import create_time_discretized_ode_system
from timedisc.timediscretization.schemes import (
    BackwardDifferentiationFormula,
    BackwardEuler,
    ForwardEuler,
)

LAM = 2.0


def _decay():
    return LinearODE([[1.0]], [[LAM]], [0.0])


@pytest.mark.parametrize("tag", ["newton", "picard"])
def test_backward_euler_decay(tag):
    dt, n_steps = 0.05, 20
    system = create_time_discretized_ode_system(_decay(), BackwardEuler(), tag=tag)
    res = run_time_loop(system, np.array([1.0]), 0.0, dt * n_steps, dt)
    assert res.states.shape == (n_steps + 1, 1)
    np.testing.assert_allclose(res.times[-1], 1.0)
    np.testing.assert_allclose(res.final, [(1.0 + LAM * dt) ** -n_steps], rtol=1e-10)
    assert all(i == 1 for i in res.iterations)


@pytest.mark.parametrize("tag", ["newton", "picard"])
def test_forward_euler_decay(tag):
    dt, n_steps = 0.05, 20
    system = create_time_discretized_ode_system(_decay(), ForwardEuler(), tag=tag)
    res = run_time_loop(system, np.array([1.0]), 0.0, dt * n_steps, dt)
    np.testing.assert_allclose(res.final, [(1.0 - LAM * dt) ** n_steps], rtol=1e-10)


def test_bdf2_is_second_order():
    def err(dt):
        system = create_time_discretized_ode_system(
            _decay(), BackwardDifferentiationFormula(order=2))
        res = run_time_loop(system, np.array([1.0]), 0.0, 1.0, dt)
        return abs(res.final[0] - np.exp(-LAM))

    e1, e2 = err(0.02), err(0.01)
    assert 3.0 < e1 / e2 < 5.0


def test_last_step_is_shortened():
    system = create_time_discretized_ode_system(_decay(), BackwardEuler())
    res = run_time_loop(system, np.array([1.0]), 0.0, 0.25, 0.1)
    np.testing.assert_allclose(res.times, [0.0, 0.1, 0.2, 0.25])
    expected = 1.0 / ((1 + LAM * 0.1) ** 2 * (1 + LAM * 0.05))
    np.testing.assert_allclose(res.final, [expected], rtol=1e-12)


def test_quadratic_decay_newton_and_picard_agree():
    x0 = np.array([1.0, 2.0, 0.5])
    results = {}
    for tag in ("newton", "picard"):
        system = create_time_discretized_ode_system(QuadraticDecayODE(n=3), BackwardEuler(), tag=tag)
        assert not system.is_linear()
        results[tag] = run_time_loop(system, x0, 0.0, 1.0, 1e-3,
                                     {"tol_res_inf": 1e-13, "tol_dx_rel": 1e-13})
    np.testing.assert_allclose(results["newton"].final, results["picard"].final,
                               rtol=1e-8)
    exact = QuadraticDecayODE.exact(1.0, 0.0, x0)
    np.testing.assert_allclose(results["newton"].final, exact, rtol=5e-3)
    assert max(results["newton"].iterations) <= 4


def test_nonlinear_heat_rod_relaxes_to_ambient():
    rod = HeatRod1D(N=11, beta=0.5, h_left=10.0, h_right=10.0,
                    T_inf_left=1.0, T_inf_right=1.0)
    for tag in ("newton", "picard"):
        system = create_time_discretized_ode_system(rod, BackwardEuler(), tag=tag)
        res = run_time_loop(system, np.zeros(rod.N), 0.0, 5.0, 0.05)
        np.testing.assert_allclose(res.final, np.ones(rod.N), atol=1e-3)
        assert np.all(np.diff(res.states[:, rod.N // 2]) >= -1e-9)


def test_heat_rod_steady_source_profile():
    """Uniform source, both ends held near 0 by strong convection: parabola."""
    rod = HeatRod1D(N=21, q=8.0, h_left=1e7, h_right=1e7)
    system = create_time_discretized_ode_system(rod, BackwardEuler())
    res = run_time_loop(system, np.zeros(rod.N), 0.0, 20.0, 0.5)
    z = rod.z
    exact = 0.5 * rod.q / rod.k0 * z * (rod.L - z)
    np.testing.assert_allclose(res.final, exact, atol=1e-5)


def test_nonconvergence_raises():
    system = create_time_discretized_ode_system(QuadraticDecayODE(), BackwardEuler())
    with pytest.raises(RuntimeError):
        run_time_loop(system, np.array([1.0]), 0.0, 1.0, 0.5,
                      {"max_iters": 1, "tol_res_inf": 1e-14})


def test_single_step_drivers():
    td = BackwardEuler()
    system = create_time_discretized_ode_system(QuadraticDecayODE(), td)
    td.set_initial_state(0.0, np.array([1.0]))
    out = step(system, np.array([1.0]), 0.1, 0.1)
    assert out.converged
    # BE: x + 0.1 x² = 1  →  x = (-1 + sqrt(1.4)) / 0.2
    np.testing.assert_allclose(out.x, [(-1.0 + np.sqrt(1.4)) / 0.2], rtol=1e-10)

    direct = newton.solve(system, np.array([1.0]))
    np.testing.assert_allclose(direct.x, out.x, rtol=1e-12)

    psys = create_time_discretized_ode_system(QuadraticDecayODE(), td, tag="picard")
    pout = picard.solve(psys, np.array([1.0]), {"tol_dx_rel": 1e-14})
    np.testing.assert_allclose(pout.x, out.x, rtol=1e-10)


def test_invalid_loop_arguments():
    system = create_time_discretized_ode_system(_decay(), BackwardEuler())
    with pytest.raises(ValueError):
        run_time_loop(system, np.array([1.0]), 0.0, 1.0, 0.0)
    with pytest.raises(ValueError):
        run_time_loop(system, np.array([1.0]), 1.0, 0.0, 0.1)
    with pytest.raises(ValueError):
        picard.solve(create_time_discretized_ode_system(_decay(), BackwardEuler(), tag="picard"),
                     np.array([1.0]), {"relaxation": 1.5})


@pytest.mark.parametrize("order", [2, 3])
def test_bdf_stays_exact_when_last_step_is_shortened(order):
    # x' = 1 from x(0) = 0; dt does not divide t_end
    ramp = LinearODE([[1.0]], [[0.0]], [1.0])
    system = create_time_discretized_ode_system(ramp, BackwardDifferentiationFormula(order=order))
    res = run_time_loop(system, np.array([0.0]), 0.0, 1.0, 0.3)
    np.testing.assert_allclose(res.times, [0.0, 0.3, 0.6, 0.9, 1.0])
    np.testing.assert_allclose(res.states[:, 0], res.times, atol=1e-12)


def test_accumulated_steps_land_on_t_end():
    system = create_time_discretized_ode_system(_decay(), BackwardEuler())
    res = run_time_loop(system, np.array([1.0]), 0.0, 1.0, 0.1)
    assert len(res.times) == 11
    assert res.times[-1] == 1.0
