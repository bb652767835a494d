import logging
import warnings
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, ClassVar, Literal, NamedTuple, Optional, Union

import casadi as cs
import numpy as np
import numpy.typing as npt
from joblib import Memory

from ..core.expressions import Expression, Variable
from ..core.solutions import Solution, SolutionStatus, classify_status
from ..errors import SolverFailureError, UnsupportedModelError

if TYPE_CHECKING:
    from ..models.model import Model
    from ..models.objective import Objective

logger = logging.getLogger(__name__)

_BASE_OPTS: dict[str, Any] = {"print_time": False, "error_on_fail": False}
_PLUGIN_OPTS: dict[str, dict[str, Any]] = {
    "ipopt": {"ipopt": {"print_level": 0, "sb": "yes"}},
    "qpoases": {"printLevel": "none"},
}
_RESERVED_OPTS = ("discrete", "equality")


def _merge_opts(
    defaults: dict[str, Any], opts: Optional[dict[str, Any]]
) -> dict[str, Any]:
    """Internal utility to merge user options on top of the defaults (nested dicts are
    merged one level deep)."""
    out = {k: (v.copy() if isinstance(v, dict) else v) for k, v in defaults.items()}
    if opts is None:
        return out
    for k, v in opts.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k].update(v)
        else:
            out[k] = v.copy() if isinstance(v, dict) else v
    return out


def _solve_and_get_stats(
    interface: Literal["conic", "nlp"],
    plugin: str,
    problem: str,
    opts: dict[str, Any],
    kwargs: dict[str, npt.ArrayLike],
) -> tuple[dict[str, npt.NDArray[np.floating]], dict[str, Any]]:
    """Internal utility to simultaneously build and run the solver, and get its stats.
    All inputs are plain data, i.e., the problem is a serialized
    :class:`casadi.Function`, so that the call can be cached by :class:`joblib.Memory`
    and a cache hit returns the stats as well."""
    func = cs.Function.deserialize(problem)
    x = cs.SX.sym("x", func.size1_in(0))
    f, g = func(x)
    build = cs.qpsol if interface == "conic" else cs.nlpsol
    solver = build(f"solver_{plugin}", plugin, {"x": x, "f": f, "g": g}, opts)
    sol = solver(**kwargs)
    return {k: cs.DM(v).full() for k, v in sol.items()}, solver.stats()


class SolverInput(NamedTuple):
    r"""The model translated into the canonical CasADi form, i.e.,

    .. math::
        \min_x f(x) \quad \text{s.t.} \quad lbg \le g(x) \le ubg, \;
        lbx \le x \le ubx.
    """

    problem: dict[str, cs.SX]
    """The CasADi problem dict with keys ``"x"``, ``"f"``, ``"g"``."""

    lbx: npt.NDArray[np.floating]
    """Lower bounds of the variables."""

    ubx: npt.NDArray[np.floating]
    """Upper bounds of the variables."""

    lbg: npt.NDArray[np.floating]
    """Lower bounds of the constraints."""

    ubg: npt.NDArray[np.floating]
    """Upper bounds of the constraints."""

    x0: npt.NDArray[np.floating]
    """Initial guess of the variables."""

    discrete: list[bool]
    """Flags indicating which variables are discrete."""

    equality: list[bool]
    """Flags indicating which constraints are equalities."""

    variables: tuple[Variable, ...]
    """The variables of the model, in the same order as ``x``."""

    objective: "Objective"
    """The objective of the model, in its original direction."""


class SolverOutput(NamedTuple):
    """The raw result of a run of the external solver."""

    solution: dict[str, Any]
    """The solution dict returned by the CasADi solver (empty if the call raised)."""

    stats: dict[str, Any]
    """The solver stats."""

    message: Optional[str] = None
    """The message of the exception raised by the solver, if any."""


def to_casadi(
    expr: Expression, symbols: Mapping[Variable, cs.SX], with_constant: bool = True
) -> cs.SX:
    """Converts an expression to a CasADi symbolic expression.

    Parameters
    ----------
    expr : Expression
        The expression to convert.
    symbols : mapping of (Variable, casadi.SX)
        The CasADi symbol of each variable.
    with_constant : bool, optional
        Whether to include the constant offset, by default ``True``.

    Returns
    -------
    casadi.SX
        The scalar symbolic expression.
    """
    out = cs.SX(expr.constant if with_constant else 0.0)
    for v, a in expr.linear.items():
        out += a * symbols[v]
    for (v1, v2), q in expr.quadratic.items():
        out += q * symbols[v1] * symbols[v2]
    for term in expr.nonlinear:
        out += term.coefficient * term.func(*(symbols[v] for v in term.variables))
    return out


class SolverAdapter(ABC):
    """Base class of the adapters between a :class:`csmodel.Model` and an external
    solver reached via CasADi. An adapter translates the model into the solver's input
    (:meth:`translate_model`), calls the solver (:meth:`invoke`) and converts its output
    back into a :class:`csmodel.Solution` (:meth:`extract_solution`).

    Parameters
    ----------
    plugin : str, optional
        Name of the CasADi solver plugin. By default, :attr:`default_plugin`.
    opts : dict, optional
        Options passed verbatim to the CasADi interface of the solver, e.g., time limits
        or tolerances. They are merged on top of some defaults that silence the solver.
        Must not contain the ``"discrete"`` and ``"equality"`` keys, which are set
        automatically.
    cache : joblib.Memory, optional
        Optional cache to avoid solving the same exact problem more than once. By
        default, no caching occurs.
    integrality_tol : float, optional
        Tolerance above which a warning is raised if the solver returns a fractional
        value for a discrete variable, by default ``1e-6``.

    Raises
    ------
    ValueError
        Raises if ``opts`` contains reserved keys.
    """

    interface: ClassVar[Literal["conic", "nlp"]]
    """The CasADi interface used to build the solver, i.e., ``qpsol`` or ``nlpsol``."""

    default_plugin: ClassVar[str]
    """The default solver plugin of this family."""

    def __init__(
        self,
        plugin: Optional[str] = None,
        opts: Optional[dict[str, Any]] = None,
        cache: Memory = None,
        integrality_tol: float = 1e-6,
    ) -> None:
        self.plugin = self.default_plugin if plugin is None else plugin
        if opts is not None and any(k in opts for k in _RESERVED_OPTS):
            raise ValueError("'discrete' and 'equality' options are reserved.")
        defaults = _merge_opts(_BASE_OPTS, _PLUGIN_OPTS.get(self.plugin))
        self.opts = _merge_opts(defaults, opts)
        self.integrality_tol = integrality_tol
        self._cache = cache if cache is not None else Memory(None)
        self._solve = self._cache.cache(_solve_and_get_stats)

    @property
    @abstractmethod
    def supports_discrete(self) -> bool:
        """Gets whether the solver accepts integer and binary variables."""

    @property
    @abstractmethod
    def max_degree(self) -> Union[int, float]:
        """Gets the highest objective degree the solver accepts."""

    @property
    def max_constraint_degree(self) -> Union[int, float]:
        """Gets the highest constraint degree the solver accepts."""
        return 1

    def check_model(self, model: "Model") -> None:
        """Checks that the model can be expressed for this adapter's solver.

        Raises
        ------
        UnsupportedModelError
            Raises if the model has no variables or no objective, has discrete variables
            and the solver does not support them, or has an objective or constraints of
            a degree that the solver cannot handle.
        """
        name = type(self).__name__
        if model.nx == 0:
            raise UnsupportedModelError(f"Model '{model.name}' has no variables.")
        if model.objective is None:
            raise UnsupportedModelError(f"Model '{model.name}' has no objective.")
        if not self.supports_discrete and model.is_discrete:
            var = next(v for v in model.variables.values() if v.discrete)
            raise UnsupportedModelError(
                f"{name} ('{self.plugin}') does not support {var.domain.value} "
                f"variables, but variable '{var.name}' is {var.domain.value}"
                f"{self._describe(model, 'x', var.index)}."
            )
        f_degree = model.objective.expression.degree
        if f_degree > self.max_degree:
            raise UnsupportedModelError(
                f"{name} ('{self.plugin}') supports objectives up to degree "
                f"{self.max_degree}, got degree {f_degree}"
                f"{self._describe(model, 'f')}."
            )
        if model.constraint_degree > self.max_constraint_degree:
            for i, con in enumerate(model.constraints):
                if con.degree > self.max_constraint_degree:
                    raise UnsupportedModelError(
                        f"{name} ('{self.plugin}') supports constraints up to degree "
                        f"{self.max_constraint_degree}, but constraint '{con.name}' "
                        f"has degree {con.degree}{self._describe(model, 'c', i)}."
                    )

    def translate_model(self, model: "Model") -> SolverInput:
        """Translates the model into the canonical CasADi form.

        Parameters
        ----------
        model : Model
            The model to translate.

        Returns
        -------
        SolverInput
            The translated model.

        Raises
        ------
        UnsupportedModelError
            Raises if the model contains constructs the solver cannot express (see
            :meth:`check_model`). The solver is never called in this case.
        """
        self.check_model(model)
        objective = model.objective
        variables = tuple(model.variables.values())
        nx = len(variables)

        x = cs.SX.sym("x", nx)
        symbols = {v: x[v.index] for v in variables}
        f = objective.sense * to_casadi(
            objective.expression, symbols, with_constant=False
        )

        g = []
        lbg = np.empty(model.nc)
        ubg = np.empty(model.nc)
        for i, con in enumerate(model.constraints):
            g.append(to_casadi(con.expression, symbols, with_constant=False))
            lbg[i], ubg[i] = con.bounds
        g = cs.vertcat(*g) if g else cs.SX(0, 1)

        lbx = np.fromiter((v.lb for v in variables), float, nx)
        ubx = np.fromiter((v.ub for v in variables), float, nx)
        return SolverInput(
            problem={"x": x, "f": f, "g": g},
            lbx=lbx,
            ubx=ubx,
            lbg=lbg,
            ubg=ubg,
            x0=np.clip(np.zeros(nx), lbx, ubx),
            discrete=[v.discrete for v in variables],
            equality=[con.op == "==" for con in model.constraints],
            variables=variables,
            objective=objective,
        )

    def invoke(self, solver_input: SolverInput) -> SolverOutput:
        """Calls the external solver on the translated model. Errors raised by CasADi
        or by the solver are captured in the output, so that they can be reported by
        :meth:`extract_solution`.

        Parameters
        ----------
        solver_input : SolverInput
            The translated model.

        Returns
        -------
        SolverOutput
            The raw output of the solver.
        """
        opts = self.opts.copy()
        opts["discrete"] = solver_input.discrete
        if solver_input.equality:
            opts["equality"] = solver_input.equality
        p = solver_input.problem
        kwargs = {
            "x0": solver_input.x0,
            "lbx": solver_input.lbx,
            "ubx": solver_input.ubx,
            "lbg": solver_input.lbg,
            "ubg": solver_input.ubg,
        }
        try:
            problem = cs.Function("problem", [p["x"]], [p["f"], p["g"]]).serialize()
            sol, stats = self._solve(self.interface, self.plugin, problem, opts, kwargs)
        except RuntimeError as ex:
            logger.debug("Solver '%s' raised: %s", self.plugin, ex)
            stats = {"success": False, "return_status": "EXCEPTION"}
            return SolverOutput({}, stats, str(ex))
        return SolverOutput(sol, stats)

    def extract_solution(
        self, output: SolverOutput, solver_input: SolverInput
    ) -> Solution:
        """Converts the raw output of the solver into a solution.

        Parameters
        ----------
        output : SolverOutput
            The raw output of the solver.
        solver_input : SolverInput
            The translated model the output refers to.

        Returns
        -------
        Solution
            The solution, with optimal status.

        Raises
        ------
        SolverFailureError
            Raises if the solver reported a failure, e.g., infeasibility,
            unboundedness, numerical issues, or raised an exception.
        """
        stats = output.stats
        if not stats.get("success", False):
            status = str(stats.get("return_status", "unknown"))
            kind = classify_status(status, self.plugin)
            raise SolverFailureError(status, kind, self.plugin, output.message, stats)

        x_opt = np.asarray(cs.DM(output.solution["x"]).full(), dtype=float).reshape(-1)
        values: dict[Variable, float] = {}
        for v in solver_input.variables:
            val = float(x_opt[v.index])
            if v.discrete:
                rounded = float(round(val))
                if abs(val - rounded) > self.integrality_tol:
                    warnings.warn(
                        f"Discrete variable '{v.name}' has fractional value {val}.",
                        RuntimeWarning,
                        stacklevel=2,
                    )
                val = rounded
            values[v] = val

        f = solver_input.objective.expression.evaluate(values)
        return Solution(SolutionStatus.OPTIMAL, f, values, stats, self.plugin)

    @staticmethod
    def _describe(
        model: "Model", group: Literal["x", "c", "f"], index: int = 0
    ) -> str:
        """Internal utility to point at where a quantity was defined, if known."""
        debug = model.debug
        if debug is None:
            return ""
        if group == "f":
            entry = debug.f_describe()
        else:
            entry = getattr(debug, f"{group}_describe")(index)
        return "" if entry is None else f" (defined at {entry.filename}:{entry.lineno})"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(plugin={self.plugin})"
