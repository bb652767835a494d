r"""**C**\ a\ **s**\ ADi-**MODEL**\  (**csmodel**, for short) is a library that provides
classes and utilities to declaratively build linear, quadratic, (mixed-)integer and
nonlinear optimization models, and to solve them with external solvers (e.g., Clp, Cbc,
Gurobi, qpOASES, Ipopt) reached via CasADi.

A model is built by adding variables, constraints and an objective to a
:class:`csmodel.Model`, using the expression builders :func:`linear`, :func:`add`,
:func:`scale`, :func:`quadratic_term`, :func:`constant` and :func:`nonlinear_term`.
It is then solved by passing one of the adapters of :mod:`csmodel.adapters` to
:meth:`csmodel.Model.solve`.
"""

__version__ = "0.1.0"

__all__ = [
    "Domain",
    "Expression",
    "Model",
    "Solution",
    "SolutionStatus",
    "SolveState",
    "Variable",
    "adapters",
    "add",
    "as_expression",
    "constant",
    "errors",
    "linear",
    "nonlinear_term",
    "quadratic_term",
    "scale",
    "sum_of",
]

from . import adapters, errors
from .core.expressions import (
    Domain,
    Expression,
    Variable,
    add,
    as_expression,
    constant,
    linear,
    nonlinear_term,
    quadratic_term,
    scale,
    sum_of,
)
from .core.orchestrator import SolveState
from .core.solutions import Solution, SolutionStatus
from .models.model import Model
