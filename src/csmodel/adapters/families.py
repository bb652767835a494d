"""Contains the four families of solver adapters, one per class of problem, i.e.,
linear, quadratic, (mixed-)integer and nonlinear programmes. Each family knows which
constructs its solvers can express, and rejects models with any other construct before
calling the solver."""

import math
from typing import ClassVar, Literal, Union

from .base import SolverAdapter


class _ConicSolverAdapter(SolverAdapter):
    """Base class of the families solved via :func:`casadi.qpsol`."""

    interface: ClassVar[Literal["conic", "nlp"]] = "conic"


class LinearSolverAdapter(_ConicSolverAdapter):
    """Adapter for linear programmes (LPs) with continuous variables only, solved by
    default with ``clp``. Other LP-capable plugins, e.g., ``"highs"``, can be selected
    via the ``plugin`` argument."""

    default_plugin: ClassVar[str] = "clp"

    @property
    def supports_discrete(self) -> bool:
        return False

    @property
    def max_degree(self) -> int:
        return 1


class QuadraticSolverAdapter(_ConicSolverAdapter):
    """Adapter for quadratic programmes (QPs), i.e., quadratic objective and linear
    constraints in continuous variables, solved by default with ``qpoases``. Other
    plugins are, e.g., ``"osqp"``, ``"qrqp"``, ``"proxqp"`` and ``"highs"``."""

    default_plugin: ClassVar[str] = "qpoases"

    @property
    def supports_discrete(self) -> bool:
        return False

    @property
    def max_degree(self) -> int:
        return 2


class IntegerSolverAdapter(_ConicSolverAdapter):
    """Adapter for (mixed-)integer linear programmes (MILPs), solved by default with
    ``cbc``. If the plugin supports it, i.e., ``"gurobi"`` or ``"cplex"``, then
    (mixed-)integer quadratic programmes (MIQPs) are accepted as well."""

    default_plugin: ClassVar[str] = "cbc"
    quadratic_plugins: ClassVar[tuple[str, ...]] = ("gurobi", "cplex")
    """Plugins that can also handle quadratic objectives."""

    @property
    def supports_discrete(self) -> bool:
        return True

    @property
    def max_degree(self) -> int:
        return 2 if self.plugin in self.quadratic_plugins else 1


class NonlinearSolverAdapter(SolverAdapter):
    """Adapter for nonlinear programmes (NLPs), solved via :func:`casadi.nlpsol` by
    default with ``ipopt``. Objective and constraints can be of any degree. Discrete
    variables are supported only by mixed-integer nonlinear plugins, i.e., ``"bonmin"``
    and ``"knitro"``.

    Notes
    -----
    Local solvers such as ``ipopt`` start from the initial guess given by the variables'
    bounds closest to zero, and may return a local optimum for nonconvex problems.
    """

    interface: ClassVar[Literal["conic", "nlp"]] = "nlp"
    default_plugin: ClassVar[str] = "ipopt"
    discrete_plugins: ClassVar[tuple[str, ...]] = ("bonmin", "knitro")
    """Plugins that can also handle discrete variables."""

    @property
    def supports_discrete(self) -> bool:
        return self.plugin in self.discrete_plugins

    @property
    def max_degree(self) -> float:
        return math.inf

    @property
    def max_constraint_degree(self) -> Union[int, float]:
        return math.inf
