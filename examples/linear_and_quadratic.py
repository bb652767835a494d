r"""
Linear and quadratic programming
================================

This example shows how to formulate and solve two tiny problems with
:class:`csmodel.Model`: a linear programme (LP)

.. math::
   \min_{x, y \geq 0} \quad x + y \quad \textrm{s.t.} \quad x + y \leq 1,

and a quadratic programme (QP) sharing the same feasible set

.. math::
   \min_{x, y \geq 0} \quad (x - 0.5)^2 + y \quad \textrm{s.t.} \quad x + y \leq 1.
"""

# %%
# The linear programme
# --------------------
# Variables are created through the model and are non-negative and continuous by
# default. Expressions are combined with :func:`csmodel.add`, which never modifies its
# inputs.

import logging

from csmodel import Model, add, linear, quadratic_term, sum_of
from csmodel.adapters import LinearSolverAdapter, QuadraticSolverAdapter

logging.basicConfig(level=logging.DEBUG)

lp = Model("lp")
x = lp.add_variable("x")
y = lp.add_variable("y")
lp.add_constraint(add(x, y), "<=", 1)
lp.minimize(add(x, y))

# %%
# The solver is chosen explicitly by passing an adapter to :meth:`csmodel.Model.solve`.
# With debug logging enabled, the transitions of the solve are printed as well.

sol = lp.solve(LinearSolverAdapter())
print(sol.status, sol.objective_value, sol.vals)

# %%
# The quadratic programme
# -----------------------
# The squared term is expanded into quadratic, linear and constant parts. The objective
# value reported by the solution includes the constant offset, so here it is ``0``,
# while the solver itself only sees :math:`x^2 - x + y` and returns ``-0.25``.

qp = Model("qp")
x = qp.add_variable("x")
y = qp.add_variable("y")
qp.add_constraint(add(x, y), "<=", 1)
qp.minimize(sum_of([quadratic_term(x, x), linear(x, -1.0), 0.25, y]))

sol = qp.solve(QuadraticSolverAdapter())
print(sol.objective_value, sol.objective_value - qp.objective.expression.constant)
print(sol.vals)

# %%
# Modifying a model discards its solution, which must then be recomputed.

qp.add_constraint(x, "<=", 0.25)
print(qp.has_solution)
print(qp.solve(QuadraticSolverAdapter(plugin="osqp")).vals)
