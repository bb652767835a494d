"""Contains the orchestrator driving a single solve of a :class:`csmodel.Model`
through a solver adapter. The orchestrator is a small state machine

.. code-block:: text

    BUILT -> TRANSLATING -> SOLVING -> SOLVED
                  |             |
                  +-> FAILED <--+

where ``SOLVED`` and ``FAILED`` are terminal. A failure is never retried: the error is
propagated to the caller, who may pick a different adapter and solve again."""

import logging
from enum import Enum
from typing import TYPE_CHECKING, Optional

from .solutions import Solution

if TYPE_CHECKING:
    from ..adapters.base import SolverAdapter
    from ..models.model import Model

logger = logging.getLogger(__name__)


class SolveState(Enum):
    """States of a solve."""

    BUILT = "built"
    TRANSLATING = "translating"
    SOLVING = "solving"
    SOLVED = "solved"
    FAILED = "failed"


class SolveOrchestrator:
    """Orchestrates one solve of the given model with the given adapter.

    Parameters
    ----------
    model : Model
        The model to be solved.
    adapter : SolverAdapter
        The adapter to the external solver.
    """

    def __init__(self, model: "Model", adapter: "SolverAdapter") -> None:
        self._model = model
        self._adapter = adapter
        self._state = SolveState.BUILT
        self._error: Optional[Exception] = None

    @property
    def state(self) -> SolveState:
        """Gets the current state of the orchestrator."""
        return self._state

    @property
    def error(self) -> Optional[Exception]:
        """Gets the error that made the solve fail, if any."""
        return self._error

    def run(self) -> Solution:
        """Translates the model, solves it with the external solver and extracts the
        solution, which is then stored in the model. If the solve fails, the model's
        solution is left untouched.

        Returns
        -------
        Solution
            The solution of the model.

        Raises
        ------
        UnsupportedModelError
            Raises if the model cannot be translated for the adapter's solver.
        SolverFailureError
            Raises if the external solver fails.
        RuntimeError
            Raises if the orchestrator has already been run.
        """
        if self._state is not SolveState.BUILT:
            raise RuntimeError(f"Solve already run (state: {self._state.value}).")

        self._transition(SolveState.TRANSLATING)
        try:
            solver_input = self._adapter.translate_model(self._model)
        except Exception as ex:
            self._fail(ex)
            raise

        self._transition(SolveState.SOLVING)
        try:
            output = self._adapter.invoke(solver_input)
            solution = self._adapter.extract_solution(output, solver_input)
        except Exception as ex:
            self._fail(ex)
            raise

        self._model._store_solution(solution)
        self._transition(SolveState.SOLVED)
        return solution

    def _transition(self, state: SolveState) -> None:
        logger.debug(
            "Model '%s': %s -> %s.", self._model.name, self._state.value, state.value
        )
        self._state = state

    def _fail(self, error: Exception) -> None:
        logger.warning(
            "Model '%s' failed while %s: %s", self._model.name, self._state.value, error
        )
        self._error = error
        self._state = SolveState.FAILED
