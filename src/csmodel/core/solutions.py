"""Contains classes and methods to store the solution of a model after a call to
:meth:`csmodel.Model.solve`, and to classify the outcome of an unsuccessful solver
run."""

from collections.abc import Mapping
from copy import deepcopy
from enum import Enum
from types import MappingProxyType
from typing import Any, Optional

from .expressions import ExpressionLike, Variable, as_expression


class SolutionStatus(Enum):
    """Status of a solver's run."""

    OPTIMAL = "optimal"
    INFEASIBLE = "infeasible"
    UNBOUNDED = "unbounded"
    ERROR = "error"


def _is_infeas(status: str, plugin: str) -> Optional[bool]:
    """Internal utility to compute whether the solver status indicates infeasibility."""
    # NLPs
    if plugin == "ipopt":
        return status == "Infeasible_Problem_Detected"
    if plugin in ("qrsqp", "sqpmethod"):
        return status == "Search_Direction_Becomes_Too_Small"
    # QPs
    if plugin == "osqp":
        return "primal infeasible" in status
    if plugin == "proxqp":
        return status == "PROXQP_PRIMAL_INFEASIBLE"
    if plugin == "qpoases":
        return "infeasib" in status
    if plugin == "qrqp":
        return status == "Failed to calculate search direction"
    # LPs
    if plugin == "clp":
        return status == "primal infeasible"
    if plugin == "highs":
        return status == "Infeasible"
    # MIPs
    if plugin == "bonmin":
        return status == "INFEASIBLE"
    if plugin == "cbc":
        return "not feasible" in status or "infeasible" in status
    if plugin == "gurobi":
        return status == "INFEASIBLE" or status == "INF_OR_UNBD"
    if plugin == "knitro":
        return "INFEAS" in status
    return None


def _is_unbounded(status: str, plugin: str) -> Optional[bool]:
    """Internal utility to compute whether the solver status indicates unboundedness."""
    if plugin == "ipopt":
        return status == "Diverging_Iterates"
    if plugin == "osqp":
        return "dual infeasible" in status
    if plugin == "proxqp":
        return status == "PROXQP_DUAL_INFEASIBLE"
    if plugin == "qpoases":
        return "unbounded" in status.lower()
    if plugin == "clp":
        return status == "dual infeasible"
    if plugin == "highs":
        return status == "Unbounded"
    if plugin in ("cbc", "gurobi", "bonmin"):
        return "unbounded" in status.lower()
    return None


def classify_status(status: str, plugin: str) -> SolutionStatus:
    """Classifies the return status of an unsuccessful solver run.

    For different solvers, infeasibility and unboundedness are reported in different
    ways. The solvers are grouped based on the type of problem they solve.

    * NLPs

      - **ipopt**: ``"Infeasible_Problem_Detected"`` and ``"Diverging_Iterates"``
      - **qrsqp**, **sqpmethod**: ``"Search_Direction_Becomes_Too_Small"`` (dubious)

    * QPs

      - **osqp**: ``"primal infeasible"`` and ``"dual infeasible"``
      - **proxqp**: ``"PROXQP_PRIMAL_INFEASIBLE"`` and ``"PROXQP_DUAL_INFEASIBLE"``
      - **qpoases**: ``"infeasib"`` or ``"unbounded"`` in status
      - **qrqp**: ``"Failed to calculate search direction"``

    * LPs

      - **clp**: ``"primal infeasible"`` and ``"dual infeasible"``
      - **highs**: ``"Infeasible"`` and ``"Unbounded"``

    * Mixed-Integer Problems (MIPs)

      - **bonmin**: ``"INFEASIBLE"``
      - **cbc**: ``"not feasible"`` in status
      - **gurobi**: ``"INFEASIBLE"``, ``"INF_OR_UNBD"`` and ``"UNBOUNDED"``
      - **knitro**: ``"INFEAS"`` in status

    For unknown plugins, the status is searched for the substrings ``"infeas"`` and
    ``"unbound"``.

    Parameters
    ----------
    status : str
        The raw return status of the solver.
    plugin : str
        Name of the solver plugin.

    Returns
    -------
    SolutionStatus
        Either :attr:`SolutionStatus.INFEASIBLE`, :attr:`SolutionStatus.UNBOUNDED` or
        :attr:`SolutionStatus.ERROR`.
    """
    infeas = _is_infeas(status, plugin)
    unbounded = _is_unbounded(status, plugin)
    lowered = status.lower()
    if infeas is None:
        infeas = "infeas" in lowered
    if unbounded is None:
        unbounded = "unbound" in lowered
    if infeas:
        return SolutionStatus.INFEASIBLE
    if unbounded:
        return SolutionStatus.UNBOUNDED
    return SolutionStatus.ERROR


class Solution:
    """Class containing information on the solution of a successful solver's run for an
    instance of :class:`csmodel.Model`. Its fields never change after creation.

    Parameters
    ----------
    status : SolutionStatus
        Status of the solution.
    objective_value : float
        Value of the objective expression at the solution, constant offset included.
    values : mapping of (Variable, float)
        Optimal value of each variable of the model.
    stats : dict
        Stats of the solver run that generated this solution.
    plugin : str
        Name of the solver plugin that generated this solution.
    """

    __slots__ = ("_status", "_objective_value", "_values", "_stats", "_plugin")

    def __init__(
        self,
        status: SolutionStatus,
        objective_value: float,
        values: Mapping[Variable, float],
        stats: dict[str, Any],
        plugin: str,
    ) -> None:
        self._status = status
        self._objective_value = objective_value
        self._values = MappingProxyType(dict(values))
        self._stats = MappingProxyType(deepcopy(stats))
        self._plugin = plugin

    @property
    def status(self) -> SolutionStatus:
        """Gets the status of this solution."""
        return self._status

    @property
    def objective_value(self) -> float:
        """Optimal value of the objective function, constant offset included."""
        return self._objective_value

    @property
    def values(self) -> Mapping[Variable, float]:
        """Optimal values of the variables."""
        return self._values

    @property
    def vals(self) -> dict[str, float]:
        """Optimal values of the variables, indexed by name."""
        return {v.name: val for v, val in self._values.items()}

    @property
    def stats(self) -> Mapping[str, Any]:
        """Read-only view of the statistics of the solver for this solution's run."""
        return self._stats

    @property
    def plugin(self) -> str:
        """The solver plugin used to generate this solution."""
        return self._plugin

    @property
    def return_status(self) -> str:
        """Gets the raw status of the solver at this solution."""
        return self._stats.get("return_status", "")

    @property
    def success(self) -> bool:
        """Gets whether the solver's run was successful."""
        return self._status is SolutionStatus.OPTIMAL

    def value(self, expr: ExpressionLike) -> float:
        """Computes the value of the given expression at this solution.

        Raises
        ------
        KeyError
            Raises if the expression contains variables that are not part of this
            solution.
        """
        return as_expression(expr).evaluate(self._values)

    def __getitem__(self, variable: Variable) -> float:
        return self._values[variable]

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(f={self._objective_value},"
            f"status={self._status.value},plugin={self._plugin})"
        )
