r"""
A simple nonlinear problem: Rosenbrock function
===============================================

This example illustrates the basic usage of :class:`csmodel.Model` in solving a simple
nonlinear optimization problem, taken from
`this CasADi blog post <https://web.casadi.org/blog/opti/>`_

Consider the constrained Rosenbrock function

.. math::

    \min_{x, y}{ (1 - x)^2 + 100 (y - x^2)^2 } \text{ s.t. } x^2 + y^2 \leq 1.
"""

# %%
# Creating the problem
# --------------------
# We first create an instance of :class:`csmodel.Model` and its two variables. Since
# variables are non-negative by default, we explicitly drop their lower bounds.

import casadi as cs
import matplotlib.pyplot as plt
import numpy as np

from csmodel import Model, add, nonlinear_term, quadratic_term
from csmodel.adapters import NonlinearSolverAdapter

model = Model("rosenbrock", debug=True)
x = model.add_variable("x", lb=-np.inf)
y = model.add_variable("y", lb=-np.inf)

# %%
# Expressions are built with plain function calls. Nonlinear terms wrap any callable
# that works on both CasADi symbols and floats, so that the same function is used to
# build the solver's problem and to evaluate the solution.


def rosenbrock(a, b):
    return (1 - a) ** 2 + 100 * (b - a**2) ** 2


model.minimize(nonlinear_term(rosenbrock, [x, y]))
model.add_constraint(add(quadratic_term(x, x), quadratic_term(y, y)), "<=", 1)
print(model)

# %%
# Solving the problem
# -------------------
# Only nonlinear adapters accept nonlinear objectives. Here, we use the default
# ``ipopt`` solver, and tweak some of its options.

adapter = NonlinearSolverAdapter(opts={"ipopt": {"max_iter": 500, "tol": 1e-8}})
sol = model.solve(adapter)
print(sol, sol.vals)

# %%
# Had we picked a linear or quadratic adapter instead, the model would have been
# rejected before calling any solver, and thanks to ``debug=True`` the error would
# point at the line that defined the offending objective.

from csmodel.adapters import QuadraticSolverAdapter  # noqa: E402
from csmodel.errors import UnsupportedModelError  # noqa: E402

try:
    model.solve(QuadraticSolverAdapter())
except UnsupportedModelError as ex:
    print(ex)

# %%
# Visualizing the solution
# ------------------------
# Lastly, we plot the contour of the objective and the feasible disk.

_, ax = plt.subplots(constrained_layout=True)

X, Y = np.meshgrid(np.linspace(0, 1.5, 100), np.linspace(-0.5, 1.5, 100))
ax.contour(X, Y, rosenbrock(X, Y), levels=100, cmap="viridis")
theta = np.linspace(0, 2 * np.pi, 100)
ax.plot(np.cos(theta), np.sin(theta), "k-")
ax.plot(sol[x], sol[y], "r*", markersize=20)

ax.set_xlabel("x")
ax.set_ylabel("y")
ax.set_aspect("equal")
ax.set_xlim(0, 1.5)
ax.set_ylim(-0.5, 1.5)
plt.show()

# %%
# The expression, as any other, can also be converted to a CasADi expression, e.g., to
# compute its gradient at the solution.

from csmodel.adapters.base import to_casadi  # noqa: E402

X = cs.SX.sym("X", 2)
f = to_casadi(model.objective.expression, {x: X[0], y: X[1]})
grad = cs.Function("grad", [X], [cs.gradient(f, X)])
print(grad([sol[x], sol[y]]))
