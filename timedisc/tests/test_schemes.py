# -*- coding: utf-8 -*-
"""
Scheme state machine: weights, history, evaluation point.
"""
import math

import numpy as np
import pytest

from timedisc.errors import AssemblyOrderError
from timedisc.timediscretization.schemes import (
    BDF_COEFFS,
    BackwardDifferentiationFormula,
    BackwardEuler,
    ForwardEuler,
    TimeDiscretizationKind,
    create_time_discretization,
)


def test_backward_euler_weights():
    td = BackwardEuler()
    td.set_initial_state(1.0, np.array([2.0, 4.0]))
    td.next_timestep(1.5, 0.5)
    assert td.kind is TimeDiscretizationKind.GENERAL
    assert math.isclose(td.current_time(), 1.5)
    assert math.isclose(td.current_x_weight(), 2.0)
    np.testing.assert_allclose(td.weighted_old_x(), [4.0, 8.0])
    x_new = np.array([7.0, 8.0])
    assert td.current_x(x_new) is x_new
    assert td.dx_dx() == 1.0
    assert td.is_linear_time_disc()


def test_forward_euler_evaluates_at_old_state():
    td = ForwardEuler()
    x0 = np.array([1.0, -1.0])
    td.set_initial_state(0.0, x0)
    td.next_timestep(0.25, 0.25)
    assert td.kind is TimeDiscretizationKind.FORWARD_EULER
    assert td.current_time() == 0.0
    np.testing.assert_array_equal(td.current_x(np.array([9.0, 9.0])), x0)
    np.testing.assert_array_equal(td.x_old(), x0)
    np.testing.assert_allclose(td.weighted_old_x(), x0 / 0.25)
    assert td.dx_dx() == 0.0

    td.push_state(0.25, np.array([2.0, 3.0]))
    td.next_timestep(0.5, 0.25)
    assert td.current_time() == 0.25
    np.testing.assert_array_equal(td.x_old(), [2.0, 3.0])


def test_history_is_copied():
    td = BackwardEuler()
    x0 = np.array([1.0])
    td.set_initial_state(0.0, x0)
    x0[0] = 100.0
    td.next_timestep(1.0, 1.0)
    np.testing.assert_allclose(td.weighted_old_x(), [1.0])


def test_bdf_ramps_up_order():
    td = BackwardDifferentiationFormula(order=2)
    x0, x1, x2 = np.array([1.0]), np.array([2.0]), np.array([5.0])
    dt = 0.1

    td.set_initial_state(0.0, x0)
    td.next_timestep(dt, dt)
    assert td.effective_order == 1
    assert math.isclose(td.current_x_weight(), 1.0 / dt)
    np.testing.assert_allclose(td.weighted_old_x(), x0 / dt)

    td.push_state(dt, x1)
    td.next_timestep(2 * dt, dt)
    assert td.effective_order == 2
    assert math.isclose(td.current_x_weight(), 1.5 / dt)
    np.testing.assert_allclose(td.weighted_old_x(), (2.0 * x1 - 0.5 * x0) / dt)

    # history length is capped at the order
    td.push_state(2 * dt, x2)
    td.next_timestep(3 * dt, dt)
    assert td.effective_order == 2
    np.testing.assert_allclose(td.weighted_old_x(), (2.0 * x2 - 0.5 * x1) / dt)


@pytest.mark.parametrize("order", sorted(BDF_COEFFS))
def test_bdf_coefficients_are_consistent(order):
    # exact for constants: a0 - Σ c_i = 0 ; exact for linear functions: Σ i·c_i = 1
    a0, cs = BDF_COEFFS[order]
    assert math.isclose(a0 - sum(cs), 0.0, abs_tol=1e-12)
    assert math.isclose(sum(i * c for i, c in enumerate(cs, start=1)), 1.0, rel_tol=1e-12)


def test_bdf_rejects_bad_order():
    with pytest.raises(ValueError):
        BackwardDifferentiationFormula(order=0)
    with pytest.raises(ValueError):
        BackwardDifferentiationFormula(order=7)


def test_queries_before_timestep_raise():
    td = BackwardEuler()
    with pytest.raises(AssemblyOrderError):
        td.current_x_weight()
    with pytest.raises(AssemblyOrderError):
        td.next_timestep(1.0, 1.0)
    td.set_initial_state(0.0, np.zeros(1))
    with pytest.raises(AssemblyOrderError):
        td.weighted_old_x()
    with pytest.raises(ValueError):
        td.next_timestep(0.0, 0.0)


def test_create_by_name():
    assert isinstance(create_time_discretization("backward_euler"), BackwardEuler)
    assert isinstance(create_time_discretization("Forward-Euler"), ForwardEuler)
    bdf = create_time_discretization("bdf", order=3)
    assert isinstance(bdf, BackwardDifferentiationFormula) and bdf.order == 3
    with pytest.raises(ValueError):
        create_time_discretization("leapfrog")


def test_bdf2_variable_step_is_exact_for_quadratics():
    td = BackwardDifferentiationFormula(order=2)
    td.set_initial_state(0.0, np.array([0.0]))
    td.push_state(0.3, np.array([0.09]))
    td.next_timestep(0.4, 0.1)
    x_new = np.array([0.16])
    # d/dt t² at t = 0.4
    x_dot = td.current_x_weight() * x_new - td.weighted_old_x()
    np.testing.assert_allclose(x_dot, [0.8], rtol=1e-12)


def test_push_state_invalidates_the_step():
    td = BackwardDifferentiationFormula(order=2)
    td.set_initial_state(0.0, np.array([1.0]))
    td.next_timestep(0.1, 0.1)
    td.push_state(0.1, np.array([2.0]))
    with pytest.raises(AssemblyOrderError):
        td.current_x_weight()
    with pytest.raises(AssemblyOrderError):
        td.weighted_old_x()


def test_forward_euler_history_is_read_only():
    td = ForwardEuler()
    td.set_initial_state(0.0, np.array([1.0, 2.0]))
    td.next_timestep(0.1, 0.1)
    for view in (td.x_old(), td.current_x(np.zeros(2))):
        with pytest.raises(ValueError):
            view[0] = 5.0
    np.testing.assert_array_equal(td.x_old(), [1.0, 2.0])
