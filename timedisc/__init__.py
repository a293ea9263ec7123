# timedisc/__init__.py
from __future__ import annotations
from .errors import AssemblyOrderError, DimensionMismatchError, UnsupportedCombinationError
from .ode.equation import (
    EquationMatrices,
    FirstOrderImplicitODE,
    FirstOrderImplicitODENewton,
    NonlinearSolverTag,
)
from .timediscretization.schemes import (
    BackwardDifferentiationFormula,
    BackwardEuler,
    ForwardEuler,
    TimeDiscretization,
    TimeDiscretizationKind,
    create_time_discretization,
)
from .timediscretization.matrix_translator import (
    MatrixTranslator,
    MatrixTranslatorForwardEuler,
    MatrixTranslatorGeneral,
    create_matrix_translator,
)
from .timediscretization.ode_system import (
    TimeDiscretizedODESystemNewton,
    TimeDiscretizedODESystemPicard,
    create_time_discretized_ode_system,
)

__all__ = [
    "AssemblyOrderError", "DimensionMismatchError", "UnsupportedCombinationError",
    "EquationMatrices", "FirstOrderImplicitODE", "FirstOrderImplicitODENewton",
    "NonlinearSolverTag",
    "BackwardDifferentiationFormula", "BackwardEuler", "ForwardEuler",
    "TimeDiscretization", "TimeDiscretizationKind", "create_time_discretization",
    "MatrixTranslator", "MatrixTranslatorForwardEuler", "MatrixTranslatorGeneral",
    "create_matrix_translator",
    "TimeDiscretizedODESystemNewton", "TimeDiscretizedODESystemPicard",
    "create_time_discretized_ode_system",
]
