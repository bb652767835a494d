"""Collection of the errors raised while building and solving a
:class:`csmodel.Model`. All of them derive from :class:`ModelingError`, so that a caller
can catch any modelling-related failure in a single ``except`` clause."""

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .core.solutions import SolutionStatus


class ModelingError(Exception):
    """Base class of all errors raised by :mod:`csmodel`."""


class InvalidBoundsError(ModelingError, ValueError):
    """Raised when a variable is declared with a lower bound larger than its upper
    bound, or with bounds incompatible with its domain."""


class UnsupportedOperatorError(ModelingError, ValueError):
    """Raised when a constraint is declared with an unknown relational operator."""


class NoObjectiveError(ModelingError, RuntimeError):
    """Raised when solving a model whose objective has not been set."""


class NoSolutionError(ModelingError, RuntimeError):
    """Raised when querying the solution of a model that has not been solved yet, or
    that has been modified since its last solve."""


class UnsupportedModelError(ModelingError, ValueError):
    """Raised by a solver adapter when the model contains a construct that the target
    solver cannot express. This is always detected before calling the solver."""


class SolverFailureError(ModelingError, RuntimeError):
    """Raised when the external solver ran but did not succeed.

    Parameters
    ----------
    status : str
        The raw return status reported by the solver.
    kind : SolutionStatus
        The classification of the failure, i.e., infeasible, unbounded or error.
    plugin : str
        Name of the solver plugin that failed.
    message : str, optional
        Additional message, e.g., the text of the exception raised by the solver.
    stats : dict, optional
        The raw statistics of the solver's run, if any.
    """

    def __init__(
        self,
        status: str,
        kind: "SolutionStatus",
        plugin: str,
        message: Optional[str] = None,
        stats: Optional[dict[str, Any]] = None,
    ) -> None:
        self.status = status
        self.kind = kind
        self.plugin = plugin
        self.message = message
        self.stats = {} if stats is None else stats
        msg = f"Solver '{plugin}' failed ({kind.value}) with status '{status}'."
        if message:
            msg += f" {message}"
        super().__init__(msg)
