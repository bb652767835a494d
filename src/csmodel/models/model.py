import logging
import threading
from collections.abc import Iterator
from itertools import count
from typing import TYPE_CHECKING, Any, ClassVar, Optional

from ..core.debug import ModelDebug
from ..core.expressions import Variable
from ..core.orchestrator import SolveOrchestrator, SolveState
from ..core.solutions import Solution
from ..errors import NoObjectiveError, NoSolutionError
from .constraints import Constraint
from .objective import HasObjective, Objective

if TYPE_CHECKING:
    from ..adapters.base import SolverAdapter

logger = logging.getLogger(__name__)


class Model(HasObjective):
    """The generic optimization model, i.e., a container of variables, constraints and
    an objective that can be solved by any of the solver adapters in
    :mod:`csmodel.adapters`. After a successful :meth:`solve`, the model holds the
    corresponding :class:`csmodel.Solution`, which is discarded as soon as the model is
    modified again.

    Parameters
    ----------
    name : str, optional
        Name of the model. If ``None``, it is automatically assigned.
    debug : bool, optional
        If ``True``, the model logs in the :meth:`debug` property information regarding
        where variables, constraints and objective were defined. By default, ``False``.

    Notes
    -----
    A model must have a single writer. Solving the same model from two threads at once
    is rejected with a :class:`RuntimeError`, while modifying it during a solve is not
    supported.
    """

    __ids: ClassVar[Iterator[int]] = count(0)

    def __init__(self, name: Optional[str] = None, debug: bool = False) -> None:
        super().__init__()
        id = next(self.__ids)
        self.id = id
        self.name = f"{self.__class__.__name__}{id}" if name is None else name
        self._debug = ModelDebug() if debug else None
        self._solution: Optional[Solution] = None
        self._state = SolveState.BUILT
        self._solve_lock = threading.Lock()

    @property
    def debug(self) -> Optional[ModelDebug]:
        """Gets debug information on the model."""
        return self._debug

    @property
    def state(self) -> SolveState:
        """Gets the state of the model's last solve, or :attr:`SolveState.BUILT` if the
        model was never solved or was modified since."""
        return self._state

    @property
    def has_solution(self) -> bool:
        """Gets whether the model holds a valid solution."""
        return self._solution is not None

    @property
    def solution(self) -> Solution:
        """Gets the solution of the last successful solve.

        Raises
        ------
        NoSolutionError
            Raises if the model was never solved successfully, or if it was modified
            after its last solve.
        """
        if self._solution is None:
            raise NoSolutionError(f"Model '{self.name}' has no valid solution.")
        return self._solution

    def add_variable(self, *args: Any, **kwargs: Any) -> Variable:
        out = super().add_variable(*args, **kwargs)
        if self._debug is not None:
            self._debug.register("x", out.name)
        return out

    def add_constraint(self, *args: Any, **kwargs: Any) -> Constraint:
        out = super().add_constraint(*args, **kwargs)
        if self._debug is not None:
            self._debug.register("c", out.name)
        return out

    def set_objective(self, *args: Any, **kwargs: Any) -> Objective:
        out = super().set_objective(*args, **kwargs)
        if self._debug is not None:
            self._debug.register("f", out.direction)
        return out

    def solve(self, adapter: "SolverAdapter") -> Solution:
        """Solves the model with the given solver adapter.

        Parameters
        ----------
        adapter : SolverAdapter
            The adapter to the external solver, e.g., an instance of
            :class:`csmodel.adapters.LinearSolverAdapter`.

        Returns
        -------
        Solution
            The solution of the model, which is also stored in :meth:`solution`.

        Raises
        ------
        NoObjectiveError
            Raises if the objective has not been set.
        UnsupportedModelError
            Raises if the model contains constructs the adapter cannot express.
        SolverFailureError
            Raises if the external solver fails, e.g., due to infeasibility.
        RuntimeError
            Raises if another solve of this model is already in progress.
        """
        if self._objective is None:
            raise NoObjectiveError(f"Model '{self.name}' objective not set.")
        if not self._solve_lock.acquire(blocking=False):
            raise RuntimeError(f"Model '{self.name}' is already being solved.")
        try:
            orchestrator = SolveOrchestrator(self, adapter)
            try:
                return orchestrator.run()
            finally:
                self._state = orchestrator.state
        finally:
            self._solve_lock.release()

    def _store_solution(self, solution: Solution) -> None:
        """Internal utility for the orchestrator to store a new solution."""
        self._solution = solution

    def _discard_solution(self) -> None:
        """Internal utility to drop a solution made stale by a modification."""
        if self._solution is not None:
            logger.debug("Model '%s' modified: discarding its solution.", self.name)
        self._solution = None
        self._state = SolveState.BUILT

    def __str__(self) -> str:
        """Returns the model name and a short description."""
        direction = "not set" if self._objective is None else self._objective.direction
        msg = "solved" if self._solution is not None else "not solved"
        return (
            f"{type(self).__name__} {{\n"
            f"  name: {self.name}\n"
            f"  #variables: {self.nx} (discrete={self.n_discrete})\n"
            f"  #constraints: {self.nc}\n"
            f"  objective: {direction}\n"
            f"  {msg}.\n}}"
        )

    def __repr__(self) -> str:
        """Returns the string representation of the model instance."""
        return f"{type(self).__name__}: {self.name}"
