import logging
import math
from collections.abc import Mapping
from functools import cached_property
from types import MappingProxyType
from typing import Optional, Union

import numpy as np
from numpy.typing import NDArray

from ..core.cache import invalidate_cache
from ..core.expressions import Domain, Expression, Variable
from ..errors import InvalidBoundsError

logger = logging.getLogger(__name__)


class HasVariables:
    """Class for the creation and storage of decision variables in an optimization
    model. Variables are scalars, stored in insertion order, and each one is identified
    by a unique name."""

    def __init__(self) -> None:
        self._vars: dict[str, Variable] = {}

    @property
    def variables(self) -> Mapping[str, Variable]:
        """Gets a read-only view of the decision variables of the model, in insertion
        order."""
        return MappingProxyType(self._vars)

    @property
    def nx(self) -> int:
        """Number of variables in the model."""
        return len(self._vars)

    @cached_property
    def discrete(self) -> NDArray[np.bool_]:
        """Gets the boolean array indicating which variables are discrete."""
        return np.fromiter((v.discrete for v in self._vars.values()), bool, self.nx)

    @property
    def n_discrete(self) -> int:
        """Number of discrete, i.e., integer or binary, variables in the model."""
        return int(self.discrete.sum())

    @property
    def is_discrete(self) -> bool:
        """Gets whether the model contains any discrete variable."""
        return bool(self.discrete.any())

    @invalidate_cache(discrete)
    def add_variable(
        self,
        name: Optional[str] = None,
        domain: Union[Domain, str] = Domain.CONTINUOUS,
        lb: float = 0.0,
        ub: Optional[float] = None,
    ) -> Variable:
        """Adds a scalar variable to the model.

        Parameters
        ----------
        name : str, optional
            Name of the new variable. Must not be already in use. If ``None``, a name
            of the form ``"x<i>"`` is automatically assigned.
        domain : Domain or {"continuous", "integer", "binary"}, optional
            Domain of the variable, by default continuous.
        lb : float, optional
            Lower bound of the variable, by default ``0``.
        ub : float, optional
            Upper bound of the variable. By default, ``+inf``, or ``1`` for binary
            variables.

        Returns
        -------
        Variable
            The new variable.

        Raises
        ------
        InvalidBoundsError
            Raises if the lower bound is larger than the upper bound, if any bound is
            NaN, or if a binary variable has bounds outside ``[0, 1]``.
        ValueError
            Raises if there is already another variable with the same name, or if the
            domain is not recognized.
        """
        domain = Domain(domain)
        if ub is None:
            ub = 1.0 if domain is Domain.BINARY else math.inf
        lb = float(lb)
        ub = float(ub)
        if math.isnan(lb) or math.isnan(ub) or lb > ub:
            raise InvalidBoundsError(f"Improper variable bounds [{lb}, {ub}].")
        if domain is Domain.BINARY and (lb < 0.0 or ub > 1.0):
            raise InvalidBoundsError(
                f"Binary variable bounds [{lb}, {ub}] must lie within [0, 1]."
            )

        if name is None:
            i = len(self._vars)
            while f"x{i}" in self._vars:
                i += 1
            name = f"x{i}"
        elif name in self._vars:
            raise ValueError(f"Variable name '{name}' already exists.")

        var = Variable(name, len(self._vars), domain, lb, ub, self)
        self._vars[name] = var
        logger.debug("Added %s variable '%s' in [%s, %s].", domain.value, name, lb, ub)
        return var

    def _check_ownership(self, expr: Expression) -> None:
        """Internal utility to check that all variables in the expression belong to this
        model."""
        for v in expr.variables:
            if v.owner is not self:
                raise ValueError(f"Variable '{v.name}' does not belong to this model.")
