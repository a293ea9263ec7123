# timedisc/ode/equation.py
"""
First-order implicit ODE contract:

    M(t, x) · dx/dt + K(t, x) · x = b(t, x)

The spatial discretization lives elsewhere; an equation only knows how to
fill (M, K, b) and, for Newton, its analytic Jacobian

    J = M · dxdot_dx + dK/dx terms · dx_dx

into caller-owned buffers. Buffers are zeroed by the caller before each call,
so implementations may either overwrite or accumulate.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

import numpy as np

from timedisc.errors import DimensionMismatchError

__all__ = [
    "NonlinearSolverTag",
    "FirstOrderImplicitODE",
    "FirstOrderImplicitODENewton",
    "EquationMatrices",
    "check_vector_size",
]


class NonlinearSolverTag(Enum):
    NEWTON = "newton"
    PICARD = "picard"


class FirstOrderImplicitODE(ABC):
    """Equation usable with Picard iteration (M, K, b only)."""

    nonlinear_solver_tag = NonlinearSolverTag.PICARD

    @abstractmethod
    def assemble(self, t: float, x: np.ndarray,
                 M: np.ndarray, K: np.ndarray, b: np.ndarray) -> None:
        """Fill M, K, b in place for state x at time t."""
        raise NotImplementedError

    @abstractmethod
    def matrix_size(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def is_linear(self) -> bool:
        raise NotImplementedError


class FirstOrderImplicitODENewton(FirstOrderImplicitODE):
    """Equation that additionally provides an analytic Jacobian."""

    nonlinear_solver_tag = NonlinearSolverTag.NEWTON

    @abstractmethod
    def assemble_jacobian(self, t: float, x: np.ndarray, dxdot_dx: float,
                          dx_dx: float, jac: np.ndarray) -> None:
        """Fill jac = d(M·x_dot + K·x - b)/dx_new in place.

        dxdot_dx is the scheme's current-step weight α; dx_dx is the
        derivative of the evaluation point w.r.t. the new state (0 for
        forward Euler, 1 for implicit schemes).
        """
        raise NotImplementedError


@dataclass(slots=True)
class EquationMatrices:
    """Owned (M, K, b) buffers, sized once and refilled in place."""

    M: np.ndarray
    K: np.ndarray
    b: np.ndarray

    @classmethod
    def zeros(cls, n: int) -> "EquationMatrices":
        n = int(n)
        if n <= 0:
            raise DimensionMismatchError(f"Matrix size must be positive, got {n}")
        return cls(
            M=np.zeros((n, n), dtype=np.float64),
            K=np.zeros((n, n), dtype=np.float64),
            b=np.zeros((n,), dtype=np.float64),
        )

    @property
    def size(self) -> int:
        return int(self.b.shape[0])

    def clear(self) -> None:
        self.M.fill(0.0)
        self.K.fill(0.0)
        self.b.fill(0.0)


def check_vector_size(x: np.ndarray, n: int, name: str = "x") -> np.ndarray:
    """Return x as a float64 vector of length n or raise DimensionMismatchError."""
    a = np.asarray(x, dtype=np.float64)
    if a.ndim != 1 or a.shape[0] != n:
        raise DimensionMismatchError(
            f"{name} has shape {a.shape}, expected ({n},)"
        )
    return a
