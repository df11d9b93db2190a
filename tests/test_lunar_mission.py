import contextlib
import io
import json
import tempfile
import unittest
from pathlib import Path

from ldp.cli import (
    EXIT_INVALID_INPUT,
    EXIT_NO_SOLUTION,
    EXIT_OK,
    EXIT_OUTPUT_ERROR,
    main,
)
from ldp.core.errors import InvalidDescentInput, NoFeasibleDescentError
from ldp.edl.solver import SearchConfig
from ldp.missions.lunar import (
    LunarLandingConfig,
    load_landing_config,
    run_lunar_landing,
    save_landing_config,
)
from ldp.missions.lunar.plots import CHARTS


class TestLandingConfig(unittest.TestCase):
    def test_defaults_build_lunar_module(self):
        p = LunarLandingConfig().physical_parameters()
        self.assertEqual(p.total_mass_kg, 2300.0)
        self.assertEqual(p.g_mps2, 1.62)
        self.assertEqual(p.h0_m, 2300.0)

    def test_body_and_gravity_override(self):
        self.assertAlmostEqual(LunarLandingConfig(body="earth").physical_parameters().g_mps2, 9.80665)
        self.assertEqual(LunarLandingConfig(g_mps2=2.0).physical_parameters().g_mps2, 2.0)
        with self.assertRaises(InvalidDescentInput):
            LunarLandingConfig(body="Pluto").physical_parameters()
        with self.assertRaises(InvalidDescentInput):
            LunarLandingConfig.from_dict({"body": {"name": 3}}).physical_parameters()

    def test_dict_round_trip(self):
        cfg = LunarLandingConfig(v0_mps=-3.0, h0_m=1500.0, plot_dir=Path("out"),
                                 search=SearchConfig(fall_step_s=0.002, timeout_s=30.0))
        again = LunarLandingConfig.from_dict(json.loads(json.dumps(cfg.to_dict())))
        self.assertEqual(again, cfg)

    def test_partial_sections_fall_back_to_defaults(self):
        cfg = LunarLandingConfig.from_dict({"initial": {"h0_m": 1000.0},
                                            "search": {"height_tol_m": 1.0}})
        self.assertEqual(cfg.h0_m, 1000.0)
        self.assertEqual(cfg.v0_mps, 0.0)
        self.assertEqual(cfg.search.height_tol_m, 1.0)
        self.assertEqual(cfg.search.fall_step_s, 0.001)

    def test_unknown_keys_rejected(self):
        for bad in ({"extra": {}}, {"vehicle": {"isp_s": 300.0}}, {"search": {"step": 1}}):
            with self.assertRaises(InvalidDescentInput, msg=str(bad)):
                LunarLandingConfig.from_dict(bad)

    def test_quoted_numbers_rejected(self):
        cfg = LunarLandingConfig.from_dict({"initial": {"h0_m": "2300"}})
        with self.assertRaises(InvalidDescentInput):
            cfg.physical_parameters()
        with self.assertRaises(InvalidDescentInput):
            run_lunar_landing(cfg)
        with self.assertRaises(InvalidDescentInput):
            LunarLandingConfig.from_dict({"search": {"fall_step_s": "0.001"}})

    def test_file_round_trip(self):
        with tempfile.TemporaryDirectory() as d:
            path = save_landing_config(LunarLandingConfig(h0_m=999.0), Path(d) / "cfg.json")
            self.assertEqual(load_landing_config(path).h0_m, 999.0)

    def test_bad_json(self):
        with tempfile.TemporaryDirectory() as d:
            path = Path(d) / "cfg.json"
            path.write_text("{not json", encoding="utf-8")
            with self.assertRaises(InvalidDescentInput):
                load_landing_config(path)


class TestRunLunarLanding(unittest.TestCase):
    def test_solve_sample_and_plot(self):
        with tempfile.TemporaryDirectory() as d:
            res = run_lunar_landing(LunarLandingConfig(plot_dir=Path(d) / "charts",
                                                       sample_step_s=0.05))
            self.assertEqual(set(res.plot_paths), set(CHARTS))
            for path in res.plot_paths.values():
                self.assertTrue(path.exists())
                self.assertGreater(path.stat().st_size, 0)

        summary = res.summary
        self.assertTrue(0.0 <= summary["touchdown_speed_mps"] <= 3.0)
        self.assertLessEqual(abs(summary["height_residual_m"]), 0.5)
        self.assertAlmostEqual(res.samples.df["t_s"].iloc[-1], summary["total_time_s"])

    def test_no_plots_without_dir(self):
        res = run_lunar_landing(LunarLandingConfig(search=SearchConfig(fall_step_s=0.005)))
        self.assertEqual(res.plot_paths, {})

    def test_failure_propagates(self):
        with self.assertRaises(NoFeasibleDescentError):
            run_lunar_landing(LunarLandingConfig(h0_m=0.5))


class TestCli(unittest.TestCase):
    def _run(self, argv, stdin=None):
        out, err = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            code = main(argv, stdin=stdin)
        return code, out.getvalue(), err.getvalue()

    def test_positional_state(self):
        code, out, _ = self._run(["0", "2300"])
        self.assertEqual(code, EXIT_OK)
        self.assertTrue(0.0 <= float(out.splitlines()[0]) <= 3.0)
        self.assertIn("Burn:", out)

    def test_state_from_stdin(self):
        code, out, _ = self._run([], stdin=io.StringIO("0 2300\n"))
        self.assertEqual(code, EXIT_OK)
        self.assertIn("Free fall:", out)

    def test_no_solution_exit_code(self):
        code, _, err = self._run(["0", "0.5"])
        self.assertEqual(code, EXIT_NO_SOLUTION)
        self.assertIn("no feasible descent", err)

    def test_invalid_input_exit_code(self):
        for argv in (["0", "-100"], ["0"]):
            code, _, err = self._run(argv)
            self.assertEqual(code, EXIT_INVALID_INPUT, msg=str(argv))
            self.assertIn("[INPUT]", err)

    def test_missing_config_file(self):
        code, _, err = self._run(["--config", "/nonexistent/landing.json"])
        self.assertEqual(code, EXIT_INVALID_INPUT)
        self.assertIn("[INPUT]", err)

    def test_quoted_number_in_config_file(self):
        with tempfile.TemporaryDirectory() as d:
            path = Path(d) / "cfg.json"
            path.write_text(json.dumps({"initial": {"h0_m": "2300"}}), encoding="utf-8")
            code, _, err = self._run(["--config", str(path)])
        self.assertEqual(code, EXIT_INVALID_INPUT)
        self.assertIn("h0_m", err)

    def test_unwritable_plot_dir(self):
        with tempfile.TemporaryDirectory() as d:
            blocker = Path(d) / "not_a_dir"
            blocker.write_text("", encoding="utf-8")
            code, out, err = self._run(["0", "2300", "--plot", str(blocker / "charts")])
        self.assertEqual(code, EXIT_OUTPUT_ERROR)
        self.assertIn("[OUTPUT]", err)
        self.assertEqual(out, "")

    def test_config_file(self):
        with tempfile.TemporaryDirectory() as d:
            path = save_landing_config(
                LunarLandingConfig(h0_m=2300.0, search=SearchConfig(fall_step_s=0.005)),
                Path(d) / "cfg.json",
            )
            code, out, _ = self._run(["--config", str(path)])
        self.assertEqual(code, EXIT_OK)


if __name__ == "__main__":
    unittest.main()
