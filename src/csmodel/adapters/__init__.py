"""A module with the adapters between a :class:`csmodel.Model` and the external solvers,
reached via CasADi's ``qpsol`` and ``nlpsol`` interfaces. Adapters are explicitly passed
to :meth:`csmodel.Model.solve`, and come in four families

- :class:`csmodel.adapters.LinearSolverAdapter`: linear programmes (``clp``)
- :class:`csmodel.adapters.QuadraticSolverAdapter`: quadratic programmes (``qpoases``)
- :class:`csmodel.adapters.IntegerSolverAdapter`: mixed-integer programmes (``cbc``)
- :class:`csmodel.adapters.NonlinearSolverAdapter`: nonlinear programmes (``ipopt``)

all deriving from :class:`csmodel.adapters.SolverAdapter`.
"""

__all__ = [
    "IntegerSolverAdapter",
    "LinearSolverAdapter",
    "NonlinearSolverAdapter",
    "QuadraticSolverAdapter",
    "SolverAdapter",
    "SolverInput",
    "SolverOutput",
]

from .base import SolverAdapter, SolverInput, SolverOutput
from .families import (
    IntegerSolverAdapter,
    LinearSolverAdapter,
    NonlinearSolverAdapter,
    QuadraticSolverAdapter,
)
