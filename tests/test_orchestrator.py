import unittest
from unittest.mock import Mock

from parameterized import parameterized

from csmodel import Model, SolutionStatus, SolveState, add
from csmodel.adapters import LinearSolverAdapter
from csmodel.core.orchestrator import SolveOrchestrator
from csmodel.errors import SolverFailureError, UnsupportedModelError


def build() -> Model:
    model = Model()
    x = model.add_variable("x", ub=2.0)
    y = model.add_variable("y", ub=3.0)
    model.add_constraint(add(x, y), "<=", 4.0)
    model.maximize(add(x, y))
    return model


class TestSolveOrchestrator(unittest.TestCase):
    def test_run__goes_through_all_states(self):
        model = build()
        adapter = LinearSolverAdapter()
        orchestrator = SolveOrchestrator(model, adapter)
        states = []
        translate, invoke = adapter.translate_model, adapter.invoke

        def spy_translate(m):
            states.append(orchestrator.state)
            return translate(m)

        def spy_invoke(i):
            states.append(orchestrator.state)
            return invoke(i)

        adapter.translate_model = spy_translate
        adapter.invoke = spy_invoke
        self.assertIs(orchestrator.state, SolveState.BUILT)
        sol = orchestrator.run()

        self.assertEqual(states, [SolveState.TRANSLATING, SolveState.SOLVING])
        self.assertIs(orchestrator.state, SolveState.SOLVED)
        self.assertIsNone(orchestrator.error)
        self.assertIs(model.solution, sol)
        self.assertEqual(sol.status, SolutionStatus.OPTIMAL)
        self.assertAlmostEqual(sol.objective_value, 4.0)

    def test_run__raises__when_run_twice(self):
        orchestrator = SolveOrchestrator(build(), LinearSolverAdapter())
        orchestrator.run()
        with self.assertRaises(RuntimeError):
            orchestrator.run()

    @parameterized.expand(
        [
            ("translate_model", UnsupportedModelError("unsupported")),
            ("invoke", RuntimeError("crash")),
            (
                "extract_solution",
                SolverFailureError(
                    "primal infeasible", SolutionStatus.INFEASIBLE, "clp"
                ),
            ),
        ]
    )
    def test_run__fails__and_keeps_previous_solution(self, method, error):
        model = build()
        previous = model.solve(LinearSolverAdapter())
        adapter = Mock()
        getattr(adapter, method).side_effect = error
        orchestrator = SolveOrchestrator(model, adapter)

        with self.assertLogs("csmodel.core.orchestrator", "WARNING"):
            with self.assertRaises(type(error)) as cm:
                orchestrator.run()

        self.assertIs(cm.exception, error)
        self.assertIs(orchestrator.state, SolveState.FAILED)
        self.assertIs(orchestrator.error, error)
        self.assertIs(model.solution, previous)
        with self.assertRaises(RuntimeError):
            orchestrator.run()

    def test_run__does_not_invoke_solver__when_translation_fails(self):
        adapter = Mock()
        adapter.translate_model.side_effect = UnsupportedModelError("unsupported")
        orchestrator = SolveOrchestrator(build(), adapter)
        with self.assertLogs("csmodel.core.orchestrator", "WARNING"):
            with self.assertRaises(UnsupportedModelError):
                orchestrator.run()
        adapter.invoke.assert_not_called()
        adapter.extract_solution.assert_not_called()

    def test_model_solve__reports_failed_state(self):
        model = build()
        adapter = Mock()
        adapter.invoke.side_effect = RuntimeError("crash")
        with self.assertLogs("csmodel.core.orchestrator", "WARNING"):
            with self.assertRaises(RuntimeError):
                model.solve(adapter)
        self.assertIs(model.state, SolveState.FAILED)
        self.assertFalse(model.has_solution)
        model.solve(LinearSolverAdapter())
        self.assertIs(model.state, SolveState.SOLVED)


if __name__ == "__main__":
    unittest.main()
