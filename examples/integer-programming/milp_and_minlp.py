r"""
A mixed integer linear programming example
==========================================

In this example, we show how to formulate and solve a simple integer linear programming
(ILP) problem via :mod:`csmodel`. The problem is

.. math::
   \begin{aligned}
   \max_{x, y \in \mathbb{Z}} \quad & x + y \\
   \textrm{s.t.} \quad & 50 x + 24 y \leq 2400 \\
                       & 30 x + 33 y \leq 2100 \\
                       & x, y \geq 0.
   \end{aligned}
"""

# %%
# Creating the problem
# --------------------
# We need to specify that the variables are discrete. This is done by passing the
# corresponding ``domain`` argument when creating each variable. The rest of the
# problem formulation is standard.

from csmodel import Model, add, linear, nonlinear_term
from csmodel.adapters import (
    IntegerSolverAdapter,
    LinearSolverAdapter,
    NonlinearSolverAdapter,
)
from csmodel.errors import UnsupportedModelError

model = Model("ilp")
x = model.add_variable("x", "integer")
y = model.add_variable("y", "integer")
model.add_constraint(add(linear(x, 50), linear(y, 24)), "<=", 2400)
model.add_constraint(add(linear(x, 30), linear(y, 33)), "<=", 2100)
model.maximize(add(x, y))

# %%
# Solving the problem
# -------------------
# However, pay attention: an adapter for purely continuous problems rejects the model
# before calling any solver.

try:
    model.solve(LinearSolverAdapter())
except UnsupportedModelError as ex:
    print(ex)

# %%
# Instead, we can use the ``cbc`` solver, which is an open-source mixed integer linear
# programming solver. The optimal value is ``66``, attained by several points, e.g.,
# :math:`(x^\star, y^\star) = (31, 35)`.

sol = model.solve(IntegerSolverAdapter())
print(sol.objective_value, sol.vals)

# %%
# A mixed integer nonlinear programming (MINLP) example
# -----------------------------------------------------
# We are not limited to MILP. Unfortunately, that is only what ``cbc`` can handle. In
# case of more general mixed integer problems, we can use the ``bonmin`` solver through
# the nonlinear adapter. For example, let's add a nonlinear penalty to the objective.

import casadi as cs  # noqa: E402

model.maximize(
    add(add(x, y), nonlinear_term(lambda a, b: cs.sqrt(1 + (a - b) ** 2), [x, y], -1))
)
sol = model.solve(NonlinearSolverAdapter(plugin="bonmin"))
print(sol.objective_value, sol.vals)
