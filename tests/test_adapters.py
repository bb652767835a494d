import math
import unittest
import warnings
from tempfile import TemporaryDirectory
from unittest.mock import patch

import casadi as cs
import numpy as np
from joblib import Memory
from parameterized import parameterized

from csmodel import (
    Model,
    SolutionStatus,
    SolveState,
    add,
    linear,
    nonlinear_term,
    quadratic_term,
    sum_of,
)
from csmodel.adapters import (
    IntegerSolverAdapter,
    LinearSolverAdapter,
    NonlinearSolverAdapter,
    QuadraticSolverAdapter,
    SolverOutput,
)
from csmodel.adapters.base import to_casadi
from csmodel.errors import SolverFailureError, UnsupportedModelError

ALL_ADAPTERS = [
    (LinearSolverAdapter,),
    (QuadraticSolverAdapter,),
    (IntegerSolverAdapter,),
    (NonlinearSolverAdapter,),
]


def build_lp(domain: str = "continuous") -> Model:
    model = Model()
    x = model.add_variable("x", domain)
    y = model.add_variable("y", domain, lb=-1.0, ub=5.0)
    model.add_constraint(add(linear(x, 2.0), y), "<=", 4.0)
    model.add_constraint(add(x, 1.0), ">=", 2.0)
    model.add_constraint(add(x, linear(y, -1.0)), "==", 0.0)
    model.maximize(add(x, y))
    return model


class TestTranslation(unittest.TestCase):
    def test_translate_model__builds_canonical_form(self):
        model = build_lp()
        inp = LinearSolverAdapter().translate_model(model)
        np.testing.assert_array_equal(inp.lbx, [0.0, -1.0])
        np.testing.assert_array_equal(inp.ubx, [np.inf, 5.0])
        np.testing.assert_array_equal(inp.lbg, [-np.inf, 1.0, 0.0])
        np.testing.assert_array_equal(inp.ubg, [4.0, np.inf, 0.0])
        np.testing.assert_array_equal(inp.x0, [0.0, 0.0])
        self.assertEqual(inp.discrete, [False, False])
        self.assertEqual(inp.equality, [False, False, True])
        self.assertEqual(inp.variables, tuple(model.variables.values()))

        x = inp.problem["x"]
        self.assertEqual(x.shape, (2, 1))
        F = cs.Function("F", [x], [inp.problem["f"], inp.problem["g"]])
        f, g = F([3.0, 2.0])
        self.assertAlmostEqual(float(f), -5.0)  # maximization is negated
        np.testing.assert_allclose(np.asarray(g).ravel(), [8.0, 3.0, 1.0])

    def test_translate_model__clips_initial_guess_into_bounds(self):
        model = Model()
        model.add_variable(lb=2.0, ub=3.0)
        model.add_variable(lb=-5.0, ub=-1.0)
        model.minimize(0.0)
        inp = NonlinearSolverAdapter().translate_model(model)
        np.testing.assert_array_equal(inp.x0, [2.0, -1.0])

    def test_to_casadi__matches_evaluate(self):
        model = Model()
        x = model.add_variable("x")
        y = model.add_variable("y")
        e = sum_of(
            [
                linear(x, 2.0),
                quadratic_term(x, y, -3.0),
                nonlinear_term(cs.sin, [y], 0.5),
                4.0,
            ]
        )
        X = cs.SX.sym("X", 2)
        expr = to_casadi(e, {x: X[0], y: X[1]})
        val = float(cs.evalf(cs.substitute(expr, X, cs.DM([1.2, -0.7]))))
        self.assertAlmostEqual(val, e.evaluate({x: 1.2, y: -0.7}))
        no_const = to_casadi(e, {x: X[0], y: X[1]}, with_constant=False)
        val = float(cs.evalf(cs.substitute(no_const, X, cs.DM([1.2, -0.7]))))
        self.assertAlmostEqual(val, e.evaluate({x: 1.2, y: -0.7}) - 4.0)


class TestCapabilities(unittest.TestCase):
    @parameterized.expand(
        [
            (LinearSolverAdapter, "clp", False, 1, 1),
            (QuadraticSolverAdapter, "qpoases", False, 2, 1),
            (IntegerSolverAdapter, "cbc", True, 1, 1),
            (NonlinearSolverAdapter, "ipopt", False, math.inf, math.inf),
        ]
    )
    def test_defaults(self, cls, plugin, discrete, degree, con_degree):
        adapter = cls()
        self.assertEqual(adapter.plugin, plugin)
        self.assertEqual(adapter.supports_discrete, discrete)
        self.assertEqual(adapter.max_degree, degree)
        self.assertEqual(adapter.max_constraint_degree, con_degree)

    def test_plugin_dependent_capabilities(self):
        self.assertEqual(IntegerSolverAdapter("gurobi").max_degree, 2)
        self.assertTrue(NonlinearSolverAdapter("bonmin").supports_discrete)

    @parameterized.expand([("discrete",), ("equality",)])
    def test_init__raises__with_reserved_opts(self, key):
        with self.assertRaises(ValueError):
            LinearSolverAdapter(opts={key: []})

    def test_init__merges_opts_on_top_of_defaults(self):
        adapter = NonlinearSolverAdapter(
            opts={"ipopt": {"max_iter": 10}, "print_time": True}
        )
        self.assertEqual(adapter.opts["ipopt"]["max_iter"], 10)
        self.assertEqual(adapter.opts["ipopt"]["print_level"], 0)
        self.assertTrue(adapter.opts["print_time"])
        self.assertFalse(adapter.opts["error_on_fail"])
        self.assertNotIn("max_iter", NonlinearSolverAdapter().opts["ipopt"])


class TestUnsupportedModels(unittest.TestCase):
    @patch("casadi.nlpsol")
    @patch("casadi.qpsol")
    def test_integer_variable__is_rejected_by_linear_adapter(self, qpsol, nlpsol):
        model = build_lp("integer")
        with self.assertRaises(UnsupportedModelError):
            model.solve(LinearSolverAdapter())
        qpsol.assert_not_called()
        nlpsol.assert_not_called()
        self.assertFalse(model.has_solution)

    @parameterized.expand(
        [
            ("binary", LinearSolverAdapter, "binary"),
            ("integer_qp", QuadraticSolverAdapter, "integer"),
            ("integer_nlp", NonlinearSolverAdapter, "integer"),
        ]
    )
    @patch("casadi.nlpsol")
    @patch("casadi.qpsol")
    def test_discrete_variable__is_rejected(self, _, cls, domain, qpsol, nlpsol):
        model = Model()
        x = model.add_variable("x", domain)
        model.minimize(x)
        with self.assertRaises(UnsupportedModelError):
            cls().translate_model(model)
        qpsol.assert_not_called()
        nlpsol.assert_not_called()

    @parameterized.expand(
        [
            ("quadratic_lp", LinearSolverAdapter, lambda x: quadratic_term(x, x)),
            (
                "nonlinear_qp",
                QuadraticSolverAdapter,
                lambda x: nonlinear_term(cs.exp, [x]),
            ),
            ("quadratic_milp", IntegerSolverAdapter, lambda x: quadratic_term(x, x)),
        ]
    )
    @patch("casadi.qpsol")
    def test_objective_degree__is_rejected(self, _, cls, builder, qpsol):
        model = Model()
        x = model.add_variable("x")
        model.minimize(builder(x))
        with self.assertRaises(UnsupportedModelError):
            model.solve(cls())
        qpsol.assert_not_called()

    @parameterized.expand([(LinearSolverAdapter,), (QuadraticSolverAdapter,)])
    @patch("casadi.qpsol")
    def test_constraint_degree__is_rejected(self, cls, qpsol):
        model = Model(debug=True)
        x = model.add_variable("x")
        model.minimize(x)
        model.add_constraint(x, "<=", 1, name="lin")
        model.add_constraint(quadratic_term(x, x), "<=", 1, name="quad")
        msg = "'quad'.*test_adapters.py"
        with self.assertRaisesRegex(UnsupportedModelError, msg):
            cls().translate_model(model)
        qpsol.assert_not_called()

    @parameterized.expand(ALL_ADAPTERS)
    def test_empty_model__is_rejected(self, cls):
        model = Model()
        model.minimize(1.0)
        with self.assertRaises(UnsupportedModelError):
            cls().translate_model(model)

    def test_nonlinear_adapter__accepts_any_degree(self):
        model = Model()
        x = model.add_variable("x")
        model.add_constraint(nonlinear_term(cs.exp, [x]), "<=", 2.0)
        model.minimize(quadratic_term(x, x))
        inp = NonlinearSolverAdapter().translate_model(model)
        self.assertEqual(inp.problem["g"].shape, (1, 1))


class TestInvokeAndExtract(unittest.TestCase):
    @patch("casadi.qpsol")
    def test_invoke__passes_bounds_and_opts_to_casadi(self, qpsol):
        solver = qpsol.return_value
        solver.return_value = {"x": cs.DM([1.0, 1.0])}
        solver.stats.return_value = {"success": True, "return_status": "optimal"}
        adapter = LinearSolverAdapter(opts={"verbose": False})
        inp = adapter.translate_model(build_lp())
        out = adapter.invoke(inp)

        name, plugin, problem, opts = qpsol.call_args.args
        self.assertEqual(plugin, "clp")
        self.assertEqual(set(problem), {"x", "f", "g"})
        self.assertEqual(problem["x"].shape, inp.problem["x"].shape)
        self.assertEqual(problem["g"].shape, (3, 1))
        self.assertEqual(opts["discrete"], [False, False])
        self.assertEqual(opts["equality"], [False, False, True])
        self.assertFalse(opts["verbose"])
        kwargs = solver.call_args.kwargs
        np.testing.assert_array_equal(kwargs["lbg"], inp.lbg)
        np.testing.assert_array_equal(kwargs["ubx"], inp.ubx)
        self.assertTrue(out.stats["success"])
        self.assertIsNone(out.message)

    @patch("casadi.qpsol", wraps=cs.qpsol)
    def test_invoke__reuses_cached_solution_and_stats(self, qpsol):
        with TemporaryDirectory() as tmpdir:
            cache = Memory(tmpdir, verbose=0)
            model = build_lp()
            sol1 = model.solve(LinearSolverAdapter(cache=cache))
            sol2 = model.solve(LinearSolverAdapter(cache=cache))

        self.assertEqual(qpsol.call_count, 1)
        self.assertEqual(sol1.status, SolutionStatus.OPTIMAL)
        self.assertEqual(sol2.status, SolutionStatus.OPTIMAL)
        self.assertEqual(sol1.vals, sol2.vals)
        self.assertEqual(sol1.objective_value, sol2.objective_value)
        self.assertEqual(sol1.return_status, sol2.return_status)
        self.assertIs(model.state, SolveState.SOLVED)

    @patch("casadi.qpsol", wraps=cs.qpsol)
    def test_invoke__solves_again__when_bounds_change(self, qpsol):
        with TemporaryDirectory() as tmpdir:
            cache = Memory(tmpdir, verbose=0)
            adapter = LinearSolverAdapter(cache=cache)
            inp = adapter.translate_model(build_lp())
            out1 = adapter.invoke(inp)
            out2 = adapter.invoke(inp._replace(ubx=np.array([np.inf, 1.2])))

        self.assertEqual(qpsol.call_count, 2)
        self.assertTrue(out1.stats["success"])
        self.assertTrue(out2.stats["success"])
        np.testing.assert_allclose(out1.solution["x"].ravel(), [4 / 3, 4 / 3])
        np.testing.assert_allclose(out2.solution["x"].ravel(), [1.2, 1.2])

    def test_invoke__captures_solver_exceptions(self):
        adapter = LinearSolverAdapter(plugin="not_a_real_plugin")
        out = adapter.invoke(adapter.translate_model(build_lp()))
        self.assertFalse(out.stats["success"])
        self.assertEqual(out.solution, {})
        self.assertTrue(out.message)
        with self.assertRaises(SolverFailureError) as cm:
            adapter.extract_solution(out, adapter.translate_model(build_lp()))
        self.assertEqual(cm.exception.kind, SolutionStatus.ERROR)
        self.assertEqual(cm.exception.status, "EXCEPTION")
        self.assertEqual(cm.exception.plugin, "not_a_real_plugin")

    @parameterized.expand(
        [
            ("primal infeasible", SolutionStatus.INFEASIBLE),
            ("dual infeasible", SolutionStatus.UNBOUNDED),
            ("stopped on iterations", SolutionStatus.ERROR),
        ]
    )
    def test_extract_solution__raises__with_failure_status(self, status, kind):
        adapter = LinearSolverAdapter()
        inp = adapter.translate_model(build_lp())
        stats = {"success": False, "return_status": status}
        with self.assertRaises(SolverFailureError) as cm:
            adapter.extract_solution(SolverOutput({}, stats), inp)
        self.assertEqual(cm.exception.kind, kind)
        self.assertEqual(cm.exception.status, status)
        self.assertIs(cm.exception.stats, stats)
        self.assertIn(status, str(cm.exception))

    def test_extract_solution__rounds_discrete_variables(self):
        adapter = IntegerSolverAdapter()
        inp = adapter.translate_model(build_lp("integer"))
        stats = {"success": True, "return_status": "optimal"}
        out = SolverOutput({"x": cs.DM([1.0000000001, -1e-12])}, stats)
        sol = adapter.extract_solution(out, inp)
        x, y = inp.variables
        self.assertEqual(sol[x], 1.0)
        self.assertEqual(sol[y], 0.0)
        self.assertEqual(sol.objective_value, 1.0)

    def test_extract_solution__warns_with_fractional_discrete_values(self):
        adapter = IntegerSolverAdapter()
        inp = adapter.translate_model(build_lp("integer"))
        stats = {"success": True, "return_status": "optimal"}
        out = SolverOutput({"x": cs.DM([1.4, 2.0])}, stats)
        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always")
            sol = adapter.extract_solution(out, inp)
        self.assertTrue(any(issubclass(i.category, RuntimeWarning) for i in w))
        self.assertEqual(sol.vals, {"x": 1.0, "y": 2.0})


if __name__ == "__main__":
    unittest.main()
