r"""Contains the symbolic building blocks of a :class:`csmodel.Model`, i.e., decision
variables and the expressions built out of them.

Expressions are immutable values made of

- a linear part :math:`\sum_i a_i x_i`
- a quadratic part :math:`\sum_{i \le j} q_{ij} x_i x_j`
- an optional nonlinear part :math:`\sum_k c_k \phi_k(x)`
- a constant offset :math:`c_0`.

They are built only via the functions of this module (:func:`linear`, :func:`add`,
:func:`scale`, :func:`quadratic_term`, :func:`constant`, :func:`nonlinear_term`), which
always return a new expression and never mutate their inputs. Note that coefficients are
accumulated with floating-point addition, so combining expressions is associative only
up to rounding errors.
"""

import math
from collections.abc import Iterable, Mapping, Sequence
from enum import Enum
from numbers import Real
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, NamedTuple, Optional, Union

if TYPE_CHECKING:
    from ..models.variables import HasVariables


class Domain(Enum):
    """Domain of a decision variable."""

    CONTINUOUS = "continuous"
    INTEGER = "integer"
    BINARY = "binary"

    @property
    def is_discrete(self) -> bool:
        """Gets whether the domain is discrete, i.e., integer or binary."""
        return self is not Domain.CONTINUOUS


class Variable:
    """A scalar decision variable. Variables are created only by
    :meth:`csmodel.Model.add_variable`, are owned by the model that created them, and
    their identity never changes (equality and hashing are by identity).

    Parameters
    ----------
    name : str
        Name of the variable, unique within its model.
    index : int
        Position of the variable in its model, i.e., in the solver's vector of primal
        variables.
    domain : Domain
        Domain of the variable.
    lb, ub : float
        Lower and upper bounds.
    owner : HasVariables
        The model owning this variable.
    """

    __slots__ = ("_name", "_index", "_domain", "_lb", "_ub", "_owner")

    def __init__(
        self,
        name: str,
        index: int,
        domain: Domain,
        lb: float,
        ub: float,
        owner: "HasVariables",
    ) -> None:
        self._name = name
        self._index = index
        self._domain = domain
        self._lb = lb
        self._ub = ub
        self._owner = owner

    @property
    def name(self) -> str:
        """Name of the variable."""
        return self._name

    @property
    def index(self) -> int:
        """Index of the variable in its model."""
        return self._index

    @property
    def domain(self) -> Domain:
        """Domain of the variable."""
        return self._domain

    @property
    def lb(self) -> float:
        """Lower bound of the variable."""
        return self._lb

    @property
    def ub(self) -> float:
        """Upper bound of the variable."""
        return self._ub

    @property
    def owner(self) -> "HasVariables":
        """The model owning this variable."""
        return self._owner

    @property
    def discrete(self) -> bool:
        """Gets whether the variable is integer or binary."""
        return self._domain.is_discrete

    def _sort_key(self) -> tuple[int, int]:
        return id(self._owner), self._index

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}({self._name}, {self._domain.value}, "
            f"[{self._lb}, {self._ub}])"
        )


class NonlinearTerm(NamedTuple):
    """A nonlinear term of an expression, i.e., ``coefficient * func(*variables)``. The
    function must accept both CasADi symbols and floats, e.g., by using only the
    arithmetic operators and the math functions of :mod:`casadi`."""

    func: Callable[..., Any]
    """The nonlinear function."""

    variables: tuple[Variable, ...]
    """The variables the function is applied to, in order."""

    coefficient: float
    """Multiplicative coefficient of the term."""


QuadKey = tuple[Variable, Variable]
ExpressionLike = Union["Expression", Variable, int, float]


def _quad_key(a: Variable, b: Variable) -> QuadKey:
    """Internal utility to order a pair of variables canonically."""
    return (a, b) if a._sort_key() <= b._sort_key() else (b, a)


class Expression:
    """An immutable expression in the decision variables. Do not instantiate this
    directly, but use the builder functions of :mod:`csmodel.core.expressions`.

    Parameters
    ----------
    linear : mapping of (Variable, float), optional
        Linear coefficients.
    quadratic : mapping of ((Variable, Variable), float), optional
        Quadratic coefficients. Keys must be canonically ordered.
    nonlinear : sequence of NonlinearTerm, optional
        Nonlinear terms.
    constant : float, optional
        Constant offset, by default ``0.0``.
    """

    __slots__ = ("_linear", "_quadratic", "_nonlinear", "_constant")

    def __init__(
        self,
        linear: Optional[Mapping[Variable, float]] = None,
        quadratic: Optional[Mapping[QuadKey, float]] = None,
        nonlinear: Sequence[NonlinearTerm] = (),
        constant: float = 0.0,
    ) -> None:
        self._linear = MappingProxyType(dict(linear) if linear else {})
        self._quadratic = MappingProxyType(dict(quadratic) if quadratic else {})
        self._nonlinear = tuple(nonlinear)
        self._constant = float(constant)

    @property
    def linear(self) -> Mapping[Variable, float]:
        """Read-only view of the linear coefficients."""
        return self._linear

    @property
    def quadratic(self) -> Mapping[QuadKey, float]:
        """Read-only view of the quadratic coefficients."""
        return self._quadratic

    @property
    def nonlinear(self) -> tuple[NonlinearTerm, ...]:
        """The nonlinear terms."""
        return self._nonlinear

    @property
    def constant(self) -> float:
        """The constant offset."""
        return self._constant

    @property
    def variables(self) -> tuple[Variable, ...]:
        """Gets the variables appearing in the expression, in order of appearance (first
        linear, then quadratic, and lastly nonlinear terms), without repetitions."""
        seen: dict[Variable, None] = dict.fromkeys(self._linear)
        for a, b in self._quadratic:
            seen.setdefault(a)
            seen.setdefault(b)
        for term in self._nonlinear:
            for v in term.variables:
                seen.setdefault(v)
        return tuple(seen)

    @property
    def degree(self) -> Union[int, float]:
        """Gets the polynomial degree of the expression: ``0`` for constants, ``1`` for
        linear, ``2`` for quadratic, and :data:`math.inf` if any nonlinear term is
        present."""
        if self._nonlinear:
            return math.inf
        if self._quadratic:
            return 2
        return 1 if self._linear else 0

    def evaluate(self, values: Mapping[Variable, float]) -> float:
        """Evaluates the expression numerically.

        Parameters
        ----------
        values : mapping of (Variable, float)
            Value of each variable in the expression.

        Returns
        -------
        float
            The value of the expression.

        Raises
        ------
        KeyError
            Raises if a variable of the expression has no value.
        """
        out = self._constant
        for v, a in self._linear.items():
            out += a * values[v]
        for (v1, v2), q in self._quadratic.items():
            out += q * values[v1] * values[v2]
        for term in self._nonlinear:
            out += term.coefficient * float(
                term.func(*(values[v] for v in term.variables))
            )
        return float(out)

    def __repr__(self) -> str:
        parts = [f"{a:g}*{v.name}" for v, a in self._linear.items()]
        parts.extend(
            f"{q:g}*{v1.name}*{v2.name}" for (v1, v2), q in self._quadratic.items()
        )
        parts.extend(
            f"{t.coefficient:g}*{getattr(t.func, '__name__', 'f')}"
            f"({', '.join(v.name for v in t.variables)})"
            for t in self._nonlinear
        )
        if self._constant or not parts:
            parts.append(f"{self._constant:g}")
        return f"{self.__class__.__name__}({' + '.join(parts)})"


def as_expression(value: ExpressionLike) -> Expression:
    """Coerces a variable or a number to an expression.

    Raises
    ------
    TypeError
        Raises if the value cannot be coerced.
    """
    if isinstance(value, Expression):
        return value
    if isinstance(value, Variable):
        return Expression(linear={value: 1.0})
    if isinstance(value, Real) and not isinstance(value, bool):
        return Expression(constant=value)
    raise TypeError(
        f"Cannot convert an instance of {value.__class__.__name__} to an expression."
    )


def constant(value: float) -> Expression:
    """Creates a constant expression."""
    return Expression(constant=value)


def linear(variable: Variable, coefficient: float = 1.0) -> Expression:
    """Creates the linear expression ``coefficient * variable``."""
    if not isinstance(variable, Variable):
        raise TypeError("Expected a variable.")
    return Expression(linear={variable: float(coefficient)})


def quadratic_term(a: Variable, b: Variable, coefficient: float = 1.0) -> Expression:
    """Creates the quadratic expression ``coefficient * a * b``. If ``a`` and ``b`` are
    the same variable, the term is a square."""
    if not isinstance(a, Variable) or not isinstance(b, Variable):
        raise TypeError("Expected two variables.")
    return Expression(quadratic={_quad_key(a, b): float(coefficient)})


def nonlinear_term(
    func: Callable[..., Any], variables: Iterable[Variable], coefficient: float = 1.0
) -> Expression:
    """Creates the nonlinear expression ``coefficient * func(*variables)``.

    Parameters
    ----------
    func : callable
        The nonlinear function. It must accept both CasADi symbols (to be translated for
        the solver) and floats (to be evaluated at the solution).
    variables : iterable of Variable
        The variables the function depends on, in the order they are passed to it.
    coefficient : float, optional
        Multiplicative coefficient, by default ``1.0``.
    """
    variables = tuple(variables)
    if not variables or not all(isinstance(v, Variable) for v in variables):
        raise TypeError("Expected one or more variables.")
    if not callable(func):
        raise TypeError("Expected a callable.")
    return Expression(nonlinear=(NonlinearTerm(func, variables, float(coefficient)),))


def add(a: ExpressionLike, b: ExpressionLike) -> Expression:
    """Sums two expressions (or variables, or numbers) into a new one. Coefficients of
    shared variables and shared variable-pairs are summed."""
    a = as_expression(a)
    b = as_expression(b)
    lin = dict(a._linear)
    for v, c in b._linear.items():
        lin[v] = lin.get(v, 0.0) + c
    quad = dict(a._quadratic)
    for k, c in b._quadratic.items():
        quad[k] = quad.get(k, 0.0) + c
    return Expression(
        lin, quad, a._nonlinear + b._nonlinear, a._constant + b._constant
    )


def scale(expr: ExpressionLike, k: float) -> Expression:
    """Multiplies an expression (or variable) by the scalar ``k``."""
    expr = as_expression(expr)
    k = float(k)
    return Expression(
        {v: k * c for v, c in expr._linear.items()},
        {p: k * c for p, c in expr._quadratic.items()},
        tuple(t._replace(coefficient=k * t.coefficient) for t in expr._nonlinear),
        k * expr._constant,
    )


def sum_of(terms: Iterable[ExpressionLike]) -> Expression:
    """Sums many expressions (or variables, or numbers) into a new one."""
    out = Expression()
    for term in terms:
        out = add(out, term)
    return out
