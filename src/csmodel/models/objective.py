import logging
from typing import Literal, NamedTuple, Optional, Union

from ..core.cache import invalidate_cache
from ..core.expressions import Expression, ExpressionLike, as_expression
from .constraints import HasConstraints

logger = logging.getLogger(__name__)


class Objective(NamedTuple):
    """The objective of a model, i.e., an expression and the direction in which to
    optimize it."""

    expression: Expression
    """Expression to be optimized."""

    direction: Literal["minimize", "maximize"]
    """Direction of the optimization."""

    @property
    def sense(self) -> float:
        """Gets ``1.0`` for minimization and ``-1.0`` for maximization, i.e., the factor
        that turns the objective into a minimization one."""
        return 1.0 if self.direction == "minimize" else -1.0


class HasObjective(HasConstraints):
    """Class for creating an optimization model with variables, constraints and an
    objective. It builds on top of :class:`HasConstraints`, which handles variables and
    constraints. At most one objective is held at any time."""

    def __init__(self) -> None:
        super().__init__()
        self._objective: Optional[Objective] = None

    @property
    def objective(self) -> Optional[Objective]:
        """Gets the objective of the model, which is ``None`` if not previously set via
        the :meth:`set_objective` method."""
        return self._objective

    @property
    def degree(self) -> Union[int, float]:
        """Gets the highest degree among the objective and the constraints."""
        f_degree = 0 if self._objective is None else self._objective.expression.degree
        return max(f_degree, self.constraint_degree)

    @invalidate_cache()
    def set_objective(
        self,
        expression: ExpressionLike,
        direction: Literal["minimize", "maximize"] = "minimize",
    ) -> Objective:
        """Sets the objective of the model, replacing any previous one.

        Parameters
        ----------
        expression : Expression, Variable or number
            The expression to be optimized.
        direction : {"minimize", "maximize"}, optional
            Direction of the optimization, by default ``"minimize"``.

        Returns
        -------
        Objective
            The new objective.

        Raises
        ------
        ValueError
            Raises if the direction is not recognized, or if the expression contains
            variables of another model.
        """
        if direction not in ("minimize", "maximize"):
            raise ValueError(f"Unrecognized direction '{direction}'.")
        expr = as_expression(expression)
        self._check_ownership(expr)
        self._objective = Objective(expr, direction)
        logger.debug("Set objective: %s %r.", direction, expr)
        return self._objective

    def minimize(self, expression: ExpressionLike) -> Objective:
        """Sets the objective function to be minimized."""
        return self.set_objective(expression, "minimize")

    def maximize(self, expression: ExpressionLike) -> Objective:
        """Sets the objective function to be maximized."""
        return self.set_objective(expression, "maximize")
