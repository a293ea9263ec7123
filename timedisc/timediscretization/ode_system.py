# -*- coding: utf-8 -*-
"""
Time-discretized ODE systems: the objects a nonlinear solver iterates on.

Newton form (residual + Jacobian):
    sys.assemble_residual_newton(x);  r = sys.get_residual(x)
    sys.assemble_jacobian(x);         J = sys.get_jacobian()
    solve J·Δx = -r

Picard form (linear re-solve):
    sys.assemble_matrices_picard(x)
    solve sys.get_a()·x = sys.get_rhs()

Each system owns its (M, K, b[, Jac]) buffers, allocated once from the
equation size. Getters never re-assemble; calling one before its assembly
step raises AssemblyOrderError.
"""
from __future__ import annotations

import numpy as np

from timedisc.errors import (
    AssemblyOrderError,
    DimensionMismatchError,
    UnsupportedCombinationError,
)
from timedisc.ode.equation import (
    EquationMatrices,
    FirstOrderImplicitODE,
    FirstOrderImplicitODENewton,
    NonlinearSolverTag,
    check_vector_size,
)
from timedisc.timediscretization.matrix_translator import (
    MatrixTranslator,
    create_matrix_translator,
)
from timedisc.timediscretization.schemes import TimeDiscretization

__all__ = [
    "TimeDiscretizedODESystemNewton",
    "TimeDiscretizedODESystemPicard",
    "create_time_discretized_ode_system",
]


class _TimeDiscretizedODESystemBase:
    """Shared wiring: equation, scheme, translator and the owned matrices."""

    def __init__(self, ode: FirstOrderImplicitODE, time_disc: TimeDiscretization,
                 mat_trans: MatrixTranslator | None = None) -> None:
        if mat_trans is None:
            mat_trans = create_matrix_translator(time_disc)
        elif mat_trans.time_discretization is not time_disc:
            raise UnsupportedCombinationError(
                "Matrix translator is bound to a different time discretization instance"
            )
        self._ode = ode
        self._time_disc = time_disc
        self._mat_trans = mat_trans
        self._n = int(ode.matrix_size())
        self._matrices = EquationMatrices.zeros(self._n)
        self._matrices_assembled = False

    @property
    def time_discretization(self) -> TimeDiscretization:
        return self._time_disc

    @property
    def matrix_translator(self) -> MatrixTranslator:
        return self._mat_trans

    @property
    def ode(self) -> FirstOrderImplicitODE:
        return self._ode

    @property
    def size(self) -> int:
        return self._n

    def get_matrices(self) -> EquationMatrices:
        """(M, K, b) from the last assembly; read-only by convention."""
        self._require_matrices()
        return self._matrices

    def is_linear(self) -> bool:
        return bool(self._time_disc.is_linear_time_disc() and self._ode.is_linear())

    def _resolve(self, x_new: np.ndarray) -> tuple[float, np.ndarray]:
        if self._ode.matrix_size() != self._n:
            raise DimensionMismatchError(
                f"Equation size changed from {self._n} to {self._ode.matrix_size()} "
                "after the system was built"
            )
        x_new = check_vector_size(x_new, self._n, "x_new")
        t = self._time_disc.current_time()
        x_curr = check_vector_size(self._time_disc.current_x(x_new), self._n, "x_curr")
        return t, x_curr

    def _assemble_matrices(self, x_new: np.ndarray) -> None:
        t, x_curr = self._resolve(x_new)
        m = self._matrices
        self._matrices_assembled = False
        m.clear()
        self._ode.assemble(t, x_curr, m.M, m.K, m.b)
        self._matrices_assembled = True

    def _require_matrices(self) -> None:
        if not self._matrices_assembled:
            raise AssemblyOrderError(
                f"{type(self).__name__}: matrices requested before assembly"
            )


class TimeDiscretizedODESystemNewton(_TimeDiscretizedODESystemBase):
    """Newton-Raphson view: residual r(x) and Jacobian dr/dx."""

    def __init__(self, ode: FirstOrderImplicitODENewton, time_disc: TimeDiscretization,
                 mat_trans: MatrixTranslator | None = None) -> None:
        if not isinstance(ode, FirstOrderImplicitODENewton):
            raise UnsupportedCombinationError(
                f"{type(ode).__name__} provides no Jacobian; use the Picard system instead"
            )
        super().__init__(ode, time_disc, mat_trans)
        self._jac = np.zeros((self._n, self._n), dtype=np.float64)
        self._jacobian_assembled = False

    def assemble_residual_newton(self, x_new: np.ndarray) -> None:
        self._assemble_matrices(x_new)

    def assemble_jacobian(self, x_new: np.ndarray) -> None:
        t, x_curr = self._resolve(x_new)
        td = self._time_disc
        dxdot_dx = td.current_x_weight()

        self._jacobian_assembled = False
        self._jac.fill(0.0)
        self._ode.assemble_jacobian(t, x_curr, dxdot_dx, td.dx_dx(), self._jac)
        adjusted = td.adjust_matrix(self._jac)
        if adjusted is not self._jac:
            self._jac[...] = adjusted
        self._jacobian_assembled = True

    def get_residual(self, x_new: np.ndarray) -> np.ndarray:
        self._require_matrices()
        m = self._matrices
        return self._mat_trans.get_residual(m.M, m.K, m.b, x_new)

    def get_jacobian(self) -> np.ndarray:
        if not self._jacobian_assembled:
            raise AssemblyOrderError(
                "TimeDiscretizedODESystemNewton: Jacobian requested before assemble_jacobian()"
            )
        # copy so callers (e.g. in-place factorizations) cannot corrupt the buffer
        return self._mat_trans.get_jacobian(self._jac.copy())


class TimeDiscretizedODESystemPicard(_TimeDiscretizedODESystemBase):
    """Picard view: linear system A(x)·x = rhs(x)."""

    def assemble_matrices_picard(self, x_new: np.ndarray) -> None:
        self._assemble_matrices(x_new)

    def get_a(self) -> np.ndarray:
        self._require_matrices()
        m = self._matrices
        return self._mat_trans.get_a(m.M, m.K)

    def get_rhs(self) -> np.ndarray:
        self._require_matrices()
        m = self._matrices
        return self._mat_trans.get_rhs(m.M, m.K, m.b)


def create_time_discretized_ode_system(
    ode: FirstOrderImplicitODE,
    time_disc: TimeDiscretization,
    tag: NonlinearSolverTag | str | None = None,
    mat_trans: MatrixTranslator | None = None,
) -> TimeDiscretizedODESystemNewton | TimeDiscretizedODESystemPicard:
    """Build the Newton or Picard system; defaults to the equation's own tag."""
    if tag is None:
        tag = ode.nonlinear_solver_tag
    tag = NonlinearSolverTag(tag)
    if tag is NonlinearSolverTag.NEWTON:
        return TimeDiscretizedODESystemNewton(ode, time_disc, mat_trans)
    return TimeDiscretizedODESystemPicard(ode, time_disc, mat_trans)
