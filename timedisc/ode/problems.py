# -*- coding: utf-8 -*-
"""
Reference ODE systems used by the CLI, workflows and tests.

  - LinearODE:          constant M, K, b (any size)
  - QuadraticDecayODE:  dx/dt = -x²  per component (nonlinear, analytic solution)
  - HeatRod1D:          1-D transient conduction, linear finite elements,
                        lumped capacity, convective ends, uniform source,
                        k(T) = k0 (1 + beta (T - T_ref))

Strong form of HeatRod1D:
  ρ c_p ∂T/∂t = ∂/∂z (k(T) ∂T/∂z) + q
  -k ∂T/∂n = h (T - T_inf)   at z = 0 and z = L
"""
from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from timedisc.errors import DimensionMismatchError
from timedisc.ode.equation import FirstOrderImplicitODENewton

__all__ = ["LinearODE", "QuadraticDecayODE", "HeatRod1D"]


def _c64(x) -> np.ndarray:
    return np.ascontiguousarray(np.asarray(x, dtype=np.float64))


class LinearODE(FirstOrderImplicitODENewton):
    """M·dx/dt + K·x = b with constant coefficients."""

    def __init__(self, M, K, b) -> None:
        self.M = np.atleast_2d(_c64(M))
        self.K = np.atleast_2d(_c64(K))
        self.b = np.atleast_1d(_c64(b))
        n = self.b.shape[0]
        if self.M.shape != (n, n) or self.K.shape != (n, n):
            raise DimensionMismatchError(
                f"M {self.M.shape}, K {self.K.shape} and b {self.b.shape} do not match"
            )

    def assemble(self, t, x, M, K, b) -> None:
        M[...] = self.M
        K[...] = self.K
        b[...] = self.b

    def assemble_jacobian(self, t, x, dxdot_dx, dx_dx, jac) -> None:
        jac[...] = self.M * dxdot_dx + self.K * dx_dx

    def matrix_size(self) -> int:
        return int(self.b.shape[0])

    def is_linear(self) -> bool:
        return True


class QuadraticDecayODE(FirstOrderImplicitODENewton):
    """dx/dt = -x² written as  I·x_dot + diag(x)·x = 0.

    Exact solution: x(t) = 1 / (t - t0 + 1/x0).
    """

    def __init__(self, n: int = 1) -> None:
        self.n = int(n)

    def assemble(self, t, x, M, K, b) -> None:
        np.fill_diagonal(M, 1.0)
        np.fill_diagonal(K, x)

    def assemble_jacobian(self, t, x, dxdot_dx, dx_dx, jac) -> None:
        np.fill_diagonal(jac, dxdot_dx + 2.0 * np.asarray(x) * dx_dx)

    def matrix_size(self) -> int:
        return self.n

    def is_linear(self) -> bool:
        return False

    @staticmethod
    def exact(t: float, t0: float, x0: np.ndarray) -> np.ndarray:
        return 1.0 / (t - t0 + 1.0 / np.asarray(x0, dtype=np.float64))


@dataclass
class HeatRod1D(FirstOrderImplicitODENewton):
    """Transient conduction in a rod of length L on N equally spaced nodes."""

    L: float = 1.0
    N: int = 21
    rho_cp: float = 1.0          # volumetric heat capacity [J/(m^3 K)]
    k0: float = 1.0              # conductivity at T_ref [W/(m K)]
    beta: float = 0.0            # relative conductivity slope [1/K]
    T_ref: float = 0.0
    h_left: float = 0.0          # film coefficients [W/(m^2 K)]
    h_right: float = 0.0
    T_inf_left: float = 0.0
    T_inf_right: float = 0.0
    q: float = 0.0               # volumetric source [W/m^3]
    z: np.ndarray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.N < 2:
            raise ValueError(f"HeatRod1D needs at least 2 nodes, got {self.N}")
        if self.L <= 0.0:
            raise ValueError("HeatRod1D length must be positive")
        self.z = np.linspace(0.0, self.L, self.N)

    @property
    def dz(self) -> float:
        return self.L / (self.N - 1)

    def conductivity(self, T: np.ndarray) -> np.ndarray:
        return self.k0 * (1.0 + self.beta * (np.asarray(T) - self.T_ref))

    def _face_conductance(self, x: np.ndarray) -> np.ndarray:
        """k(T_mid)/dz per element, shape (N-1,)."""
        T_mid = 0.5 * (x[:-1] + x[1:])
        return self.conductivity(T_mid) / self.dz

    def assemble(self, t, x, M, K, b) -> None:
        dz = self.dz
        x = np.asarray(x, dtype=np.float64)

        # lumped capacity: half an element per end node, a full one inside
        m = np.full(self.N, self.rho_cp * dz)
        m[0] *= 0.5
        m[-1] *= 0.5
        np.fill_diagonal(M, m)

        g = self._face_conductance(x)
        i = np.arange(self.N - 1)
        K[i, i] += g
        K[i + 1, i + 1] += g
        K[i, i + 1] -= g
        K[i + 1, i] -= g

        b[:] += self.q * m / self.rho_cp

        K[0, 0] += self.h_left
        K[-1, -1] += self.h_right
        b[0] += self.h_left * self.T_inf_left
        b[-1] += self.h_right * self.T_inf_right

    def assemble_jacobian(self, t, x, dxdot_dx, dx_dx, jac) -> None:
        x = np.asarray(x, dtype=np.float64)
        n = self.N
        M = np.zeros((n, n))
        K = np.zeros((n, n))
        b = np.zeros(n)
        self.assemble(t, x, M, K, b)

        # d(g_e)/dT_i = d(g_e)/dT_j = 0.5 k0 beta / dz; flux_e = g_e (T_i - T_j)
        dg = 0.5 * self.k0 * self.beta / self.dz
        dT = x[:-1] - x[1:]
        dK = np.zeros((n, n))
        i = np.arange(n - 1)
        dK[i, i] += dg * dT
        dK[i, i + 1] += dg * dT
        dK[i + 1, i] -= dg * dT
        dK[i + 1, i + 1] -= dg * dT

        jac[...] = M * dxdot_dx + (K + dK) * dx_dx

    def matrix_size(self) -> int:
        return int(self.N)

    def is_linear(self) -> bool:
        return self.beta == 0.0

