# timedisc/errors.py
"""
Error taxonomy for the time-discretization layer.

  - DimensionMismatchError: M, K, b, x (or the equation size) disagree.
  - UnsupportedCombinationError: equation/scheme/translator cannot be bound.
  - AssemblyOrderError: a getter was called before its assembly step.

All subclass builtins, so ``except ValueError`` etc. still works upstream.
"""
from __future__ import annotations

__all__ = [
    "DimensionMismatchError",
    "UnsupportedCombinationError",
    "AssemblyOrderError",
]


class DimensionMismatchError(ValueError):
    pass


class UnsupportedCombinationError(TypeError):
    pass


class AssemblyOrderError(RuntimeError):
    pass
