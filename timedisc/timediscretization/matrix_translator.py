# -*- coding: utf-8 -*-
"""
Matrix translators: (M, K, b) + scheme state → solver-facing quantities.

General (implicit) translator:
    A        = M·α + K
    rhs      = b + M·weighted_old_x
Forward-Euler translator (operator evaluated at x_old):
    A        = M·α
    rhs      = b + M·weighted_old_x - K·x_old
Both:
    residual = M·(α·x_new - weighted_old_x) + K·x_curr - b
    jacobian = jac  (pass-through)

Translators hold no state besides a read-only reference to their scheme.
"""
from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np

from timedisc.errors import DimensionMismatchError, UnsupportedCombinationError
from timedisc.timediscretization.schemes import (
    ForwardEuler,
    TimeDiscretization,
    TimeDiscretizationKind,
)

__all__ = [
    "MatrixTranslator",
    "MatrixTranslatorGeneral",
    "MatrixTranslatorForwardEuler",
    "create_matrix_translator",
]


def _f64(a) -> np.ndarray | None:
    return None if a is None else np.asarray(a, dtype=np.float64)


def _check_system(M, K, b=None, x=None):
    """Validate (n,n), (n,n), (n,), (n,) shapes; return float64 views."""
    M, K, b, x = _f64(M), _f64(K), _f64(b), _f64(x)
    if M.ndim != 2 or M.shape[0] != M.shape[1]:
        raise DimensionMismatchError(f"M must be square, got shape {M.shape}")
    n = M.shape[0]
    if K.shape != (n, n):
        raise DimensionMismatchError(f"K has shape {K.shape}, expected {(n, n)}")
    if b is not None and b.shape != (n,):
        raise DimensionMismatchError(f"b has shape {b.shape}, expected ({n},)")
    if x is not None and x.shape != (n,):
        raise DimensionMismatchError(f"x has shape {x.shape}, expected ({n},)")
    return M, K, b, x


class MatrixTranslator(ABC):
    """Common interface; concrete classes are bound to one scheme instance."""

    def __init__(self, time_disc: TimeDiscretization) -> None:
        self._time_disc = time_disc

    @property
    def time_discretization(self) -> TimeDiscretization:
        return self._time_disc

    @abstractmethod
    def get_a(self, M: np.ndarray, K: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    @abstractmethod
    def get_rhs(self, M: np.ndarray, K: np.ndarray, b: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def get_residual(self, M: np.ndarray, K: np.ndarray, b: np.ndarray,
                     x_new: np.ndarray) -> np.ndarray:
        M, K, b, x_new = _check_system(M, K, b, x_new)
        td = self._time_disc
        alpha = td.current_x_weight()
        x_curr = td.current_x(x_new)
        x_dot = alpha * x_new - td.weighted_old_x()
        return M @ x_dot + K @ x_curr - b

    def get_jacobian(self, jac: np.ndarray) -> np.ndarray:
        return jac


class MatrixTranslatorGeneral(MatrixTranslator):

    def get_a(self, M: np.ndarray, K: np.ndarray) -> np.ndarray:
        M, K, _, _ = _check_system(M, K)
        return M * self._time_disc.current_x_weight() + K

    def get_rhs(self, M: np.ndarray, K: np.ndarray, b: np.ndarray) -> np.ndarray:
        M, K, b, _ = _check_system(M, K, b)
        return b + M @ self._time_disc.weighted_old_x()


class MatrixTranslatorForwardEuler(MatrixTranslator):
    """Explicit variant: the stiffness term goes to the right-hand side."""

    def __init__(self, time_disc: ForwardEuler) -> None:
        if not callable(getattr(time_disc, "x_old", None)):
            raise UnsupportedCombinationError(
                f"{type(time_disc).__name__} does not expose x_old(); "
                "the forward-Euler translator needs the undiscounted old state"
            )
        super().__init__(time_disc)

    def get_a(self, M: np.ndarray, K: np.ndarray) -> np.ndarray:
        M, K, _, _ = _check_system(M, K)
        return M * self._time_disc.current_x_weight()

    def get_rhs(self, M: np.ndarray, K: np.ndarray, b: np.ndarray) -> np.ndarray:
        M, K, b, _ = _check_system(M, K, b)
        td = self._time_disc
        return b + M @ td.weighted_old_x() - K @ td.x_old()


_TRANSLATORS: dict[TimeDiscretizationKind, type[MatrixTranslator]] = {
    TimeDiscretizationKind.GENERAL: MatrixTranslatorGeneral,
    TimeDiscretizationKind.FORWARD_EULER: MatrixTranslatorForwardEuler,
}


def create_matrix_translator(time_disc: TimeDiscretization) -> MatrixTranslator:
    """Pick the translator for the scheme's kind; done once per binding."""
    kind = getattr(time_disc, "kind", None)
    cls = _TRANSLATORS.get(kind)
    if cls is None:
        raise UnsupportedCombinationError(
            f"No matrix translator for time discretization kind {kind!r} "
            f"({type(time_disc).__name__})"
        )
    return cls(time_disc)
