import unittest

import numpy as np

from ldp.core.errors import (
    InvalidDescentInput,
    NoFeasibleDescentError,
    SearchTimeoutError,
)
from ldp.edl.kinematics import (
    free_fall_height,
    is_before_burnout,
    lunar_module_params,
    powered_height,
    powered_speed,
)
from ldp.edl.solver import (
    SearchConfig,
    burn_time_grid,
    default_search_config,
    evaluate_candidates,
    fall_time_bound,
    solve_descent,
)


class TestLunarDescent(unittest.TestCase):
    """Lunar module dropped from 2300 m at rest."""

    @classmethod
    def setUpClass(cls):
        cls.params = lunar_module_params(0.0, 2300.0)
        cls.search = SearchConfig()
        cls.solution = solve_descent(cls.params, cls.search)

    def test_solution_meets_altitude_and_speed_tests(self):
        p, sol = self.params, self.solution
        h_ff = free_fall_height(p, sol.fall_time_s)
        h_pow = powered_height(p, sol.fall_time_s, sol.burn_time_s)
        v_td = powered_speed(p, sol.fall_time_s, sol.burn_time_s)

        self.assertLess(h_ff, p.h0_m)
        self.assertLessEqual(abs(h_ff + h_pow - p.h0_m), self.search.height_tol_m)
        self.assertGreaterEqual(v_td, 0.0)
        self.assertLessEqual(v_td, 3.0)

    def test_recorded_values_match_kinematics(self):
        p, sol = self.params, self.solution
        self.assertAlmostEqual(sol.touchdown_speed_mps,
                               powered_speed(p, sol.fall_time_s, sol.burn_time_s), places=9)
        self.assertAlmostEqual(sol.free_fall_height_m + sol.powered_height_m - p.h0_m,
                               sol.height_residual_m, places=9)

    def test_times_inside_search_space(self):
        sol = self.solution
        self.assertGreaterEqual(sol.fall_time_s, self.search.fall_start_s)
        self.assertLess(sol.fall_time_s, fall_time_bound(self.params))
        self.assertGreaterEqual(sol.burn_time_s, self.search.burn_min_s)
        self.assertLess(sol.burn_time_s, self.params.burnout_time_s)

    def test_idempotent(self):
        again = solve_descent(self.params, self.search)
        self.assertEqual(again, self.solution)

    def test_first_accepted_in_scan_order(self):
        s, sol = self.search, self.solution
        burn = burn_time_grid(self.params, s)

        # earliest burn wins within the accepted fall row
        ev = evaluate_candidates(self.params, s, np.array([sol.fall_time_s]), burn)
        first_col = int(np.argmax(ev["accept"][0]))
        self.assertEqual(burn[first_col], sol.burn_time_s)

        # no earlier fall row accepts anything
        k_sol = int(round((sol.fall_time_s - s.fall_start_s) / s.fall_step_s))
        earlier = s.fall_start_s + s.fall_step_s * np.arange(k_sol - 200, k_sol, dtype=float)
        ev = evaluate_candidates(self.params, s, earlier, burn)
        self.assertFalse(ev["accept"].any())

        # every earlier row was scanned in full, then the winning row up to first_col
        self.assertEqual(sol.n_evaluated, k_sol * burn.size + first_col + 1)

    def test_block_size_does_not_change_answer(self):
        search = SearchConfig(block_rows=7)
        self.assertEqual(solve_descent(self.params, search).burn_time_s, self.solution.burn_time_s)


class TestSearchFailures(unittest.TestCase):
    def test_height_below_first_free_fall_step(self):
        # free_fall_height(1.0 s) = 0.81 m > 0.5 m
        params = lunar_module_params(0.0, 0.5)
        with self.assertRaises(NoFeasibleDescentError) as ctx:
            solve_descent(params)
        self.assertIn("overshoots", ctx.exception.reason)

    def test_unreachable_speed_band(self):
        params = lunar_module_params(0.0, 2300.0)
        search = SearchConfig(fall_step_s=0.01, speed_min_mps=500.0, speed_max_mps=600.0)
        with self.assertRaises(NoFeasibleDescentError) as ctx:
            solve_descent(params, search)
        self.assertGreater(ctx.exception.n_evaluated, 0)

    def test_evaluation_budget(self):
        params = lunar_module_params(0.0, 2300.0)
        with self.assertRaises(NoFeasibleDescentError) as ctx:
            solve_descent(params, SearchConfig(max_evaluations=1000))
        self.assertEqual(ctx.exception.reason, "evaluation budget exhausted")
        self.assertLessEqual(ctx.exception.n_evaluated, 1000)

    def test_timeout(self):
        params = lunar_module_params(0.0, 2300.0)
        with self.assertRaises(SearchTimeoutError):
            solve_descent(params, SearchConfig(block_rows=1, timeout_s=1e-9))

    def test_timeout_is_convergence_failure(self):
        self.assertTrue(issubclass(SearchTimeoutError, NoFeasibleDescentError))

    def test_empty_burn_grid(self):
        params = lunar_module_params(0.0, 2300.0)
        with self.assertRaises(NoFeasibleDescentError):
            solve_descent(params, SearchConfig(burn_min_s=10.0, burn_max_s=12.0))


class TestBurnGrid(unittest.TestCase):
    def setUp(self):
        self.params = lunar_module_params(0.0, 2300.0)

    def test_burnout_excluded(self):
        grid = burn_time_grid(self.params, SearchConfig())
        self.assertEqual(grid.size, 190)
        self.assertAlmostEqual(grid[0], 0.5)
        self.assertLess(grid[-1], self.params.burnout_time_s)

    def test_clipped_when_max_past_burnout(self):
        with self.assertLogs("ldp.edl.solver", level="INFO"):
            grid = burn_time_grid(self.params, SearchConfig(burn_max_s=20.0))
        self.assertLess(grid.max(), self.params.burnout_time_s)
        self.assertTrue(np.all(is_before_burnout(self.params, grid)))

    def test_grid_built_by_index(self):
        grid = burn_time_grid(self.params, SearchConfig(burn_min_s=0.0, burn_max_s=1.0, burn_step_s=0.1))
        self.assertEqual(grid.size, 11)
        np.testing.assert_allclose(grid, np.arange(11) * 0.1)


class TestSearchConfig(unittest.TestCase):
    def test_defaults(self):
        s = default_search_config()
        self.assertEqual((s.fall_start_s, s.fall_step_s), (1.0, 0.001))
        self.assertEqual((s.burn_min_s, s.burn_max_s, s.burn_step_s), (0.5, 10.0, 0.05))
        self.assertEqual((s.height_tol_m, s.speed_min_mps, s.speed_max_mps), (0.5, 0.0, 3.0))

    def test_rejects_bad_settings(self):
        for kwargs in ({"fall_step_s": 0.0}, {"burn_step_s": -0.05},
                       {"height_tol_m": 0.0}, {"burn_min_s": 5.0, "burn_max_s": 1.0},
                       {"speed_min_mps": 3.0, "speed_max_mps": 0.0},
                       {"block_rows": 0}, {"timeout_s": 0.0}):
            with self.assertRaises(InvalidDescentInput, msg=str(kwargs)):
                SearchConfig(**kwargs)

    def test_rejects_non_numbers(self):
        for kwargs in ({"fall_step_s": "0.001"}, {"height_tol_m": True},
                       {"timeout_s": "30"}, {"burn_max_s": float("inf")}):
            with self.assertRaises(InvalidDescentInput, msg=str(kwargs)):
                SearchConfig(**kwargs)

    def test_fall_time_bound_hits_surface(self):
        params = lunar_module_params(-4.0, 1200.0)
        self.assertAlmostEqual(free_fall_height(params, fall_time_bound(params)), 1200.0, places=6)


class TestOtherInitialStates(unittest.TestCase):
    def test_descending_start(self):
        params = lunar_module_params(5.0, 2300.0)
        sol = solve_descent(params)
        self.assertLessEqual(abs(sol.height_residual_m), 0.5)
        self.assertTrue(0.0 <= sol.touchdown_speed_mps <= 3.0)


if __name__ == "__main__":
    unittest.main()
