import logging
import math
from functools import cached_property
from types import MappingProxyType
from typing import Literal, NamedTuple, Optional, Union

from ..core.cache import invalidate_cache
from ..core.expressions import Expression, ExpressionLike, as_expression
from ..errors import UnsupportedOperatorError
from .variables import HasVariables

logger = logging.getLogger(__name__)

_OPERATORS = MappingProxyType(
    {"<=": "<=", "≤": "<=", ">=": ">=", "≥": ">=", "==": "==", "=": "=="}
)


class Constraint(NamedTuple):
    r"""A constraint of the form :math:`expression \; op \; rhs`."""

    name: str
    """Name of the constraint."""

    expression: Expression
    """Left-hand side of the constraint."""

    op: Literal["<=", ">=", "=="]
    """Relational operator."""

    rhs: float
    """Right-hand side constant."""

    @property
    def degree(self) -> Union[int, float]:
        """Gets the degree of the constraint's expression."""
        return self.expression.degree

    @property
    def bounds(self) -> tuple[float, float]:
        """Gets the lower and upper bounds on the constraint's expression once its
        constant offset is moved to the right-hand side, i.e., the constraint reads
        ``lb <= expression - constant <= ub``."""
        rhs = self.rhs - self.expression.constant
        if self.op == "<=":
            return -math.inf, rhs
        if self.op == ">=":
            return rhs, math.inf
        return rhs, rhs


class HasConstraints(HasVariables):
    """Class for the creation and storage of constraints for an optimization model. It
    builds on top of :class:`HasVariables`, which handles the variables.

    Constraints are kept in insertion order and are never deduplicated, i.e., the same
    constraint can be added more than once and will be passed to the solver as many
    times."""

    def __init__(self) -> None:
        super().__init__()
        self._cons: list[Constraint] = []
        self._cons_names: set[str] = set()

    @property
    def constraints(self) -> tuple[Constraint, ...]:
        """Gets the constraints of the model, in insertion order."""
        return tuple(self._cons)

    @property
    def nc(self) -> int:
        """Number of constraints in the model."""
        return len(self._cons)

    @cached_property
    def constraint_degree(self) -> Union[int, float]:
        """Gets the highest degree among the constraints, or ``0`` if there are none."""
        return max((c.degree for c in self._cons), default=0)

    @invalidate_cache(constraint_degree)
    def add_constraint(
        self,
        expression: ExpressionLike,
        op: Literal["<=", ">=", "=="],
        rhs: float = 0.0,
        name: Optional[str] = None,
    ) -> Constraint:
        """Adds a constraint to the model, e.g., ``expression <= rhs``.

        Parameters
        ----------
        expression : Expression, Variable or number
            Left-hand side of the constraint.
        op : {"<=", ">=", "=="}
            Operator relating the two sides. The unicode ``"≤"``, ``"≥"`` and ``"="``
            are accepted as well.
        rhs : float, optional
            Right-hand side constant, by default ``0``.
        name : str, optional
            Name of the new constraint. Must not be already in use. If ``None``, a name
            of the form ``"c<i>"`` is automatically assigned.

        Returns
        -------
        Constraint
            The new constraint.

        Raises
        ------
        UnsupportedOperatorError
            Raises if the operator is not recognized.
        ValueError
            Raises if there is already another constraint with the same name, or if the
            expression contains variables of another model.
        """
        op_ = _OPERATORS.get(op) if isinstance(op, str) else None
        if op_ is None:
            raise UnsupportedOperatorError(f"Unrecognized operator {op}.")
        expr = as_expression(expression)
        self._check_ownership(expr)

        if name is None:
            i = len(self._cons)
            while f"c{i}" in self._cons_names:
                i += 1
            name = f"c{i}"
        elif name in self._cons_names:
            raise ValueError(f"Constraint name '{name}' already exists.")

        con = Constraint(name, expr, op_, float(rhs))
        self._cons.append(con)
        self._cons_names.add(name)
        logger.debug("Added constraint '%s': %r %s %s.", name, expr, op_, con.rhs)
        return con
