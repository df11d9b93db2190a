"""
Lunar Landing Mission
=====================

Baseline lunar-module descent built on top of the LDP EDL kernels.

Provides:
- LunarLandingConfig  : high-level knobs (initial state, vehicle, search,
                        output) with JSON load/save.
- run_lunar_landing   : solve -> sample -> (optionally) plot.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Dict, Any, Optional

import json
import logging

from ldp.core.bodies import get_body
from ldp.core.errors import InvalidDescentInput
from ldp.edl.kinematics import PhysicalParameters
from ldp.edl.solver import SearchConfig, DescentSolution, solve_descent
from ldp.edl.sampling import DescentSamples, sample_descent

logger = logging.getLogger(__name__)


@dataclass
class LunarLandingConfig:
    """
    v0_mps, h0_m      : initial vertical speed (positive down) and altitude
    body              : name of a known body, sets g unless g_mps2 is given
    dry_mass_kg ...   : vehicle constants (lunar-module defaults)
    search            : grid resolution / tolerances / guards
    sample_step_s     : step for the output sample series
    plot_dir          : if set, PNG charts are written there
    """
    v0_mps: float = 0.0
    h0_m: float = 2300.0
    body: str = "Moon"
    g_mps2: Optional[float] = None
    dry_mass_kg: float = 2150.0
    fuel_mass_kg: float = 150.0
    jet_speed_mps: float = 3660.0
    flow_rate_kgps: float = 15.0
    search: SearchConfig = field(default_factory=SearchConfig)
    sample_step_s: float = 0.01
    plot_dir: Optional[Path] = None

    def __post_init__(self):
        if isinstance(self.plot_dir, str):
            self.plot_dir = Path(self.plot_dir)

    def physical_parameters(self) -> PhysicalParameters:
        g = self.g_mps2 if self.g_mps2 is not None else get_body(self.body).surface_gravity
        return PhysicalParameters(
            dry_mass_kg=self.dry_mass_kg,
            fuel_mass_kg=self.fuel_mass_kg,
            jet_speed_mps=self.jet_speed_mps,
            flow_rate_kgps=self.flow_rate_kgps,
            g_mps2=g,
            v0_mps=self.v0_mps,
            h0_m=self.h0_m,
        )

    # --------------------------------------------------------
    # JSON (sectioned) form
    # --------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        return {
            "initial": {"v0_mps": self.v0_mps, "h0_m": self.h0_m},
            "body": {"name": self.body, "g_mps2": self.g_mps2},
            "vehicle": {
                "dry_mass_kg": self.dry_mass_kg,
                "fuel_mass_kg": self.fuel_mass_kg,
                "jet_speed_mps": self.jet_speed_mps,
                "flow_rate_kgps": self.flow_rate_kgps,
            },
            "search": asdict(self.search),
            "output": {
                "sample_step_s": self.sample_step_s,
                "plot_dir": str(self.plot_dir) if self.plot_dir is not None else None,
            },
        }

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any]) -> "LunarLandingConfig":
        if not isinstance(cfg, dict):
            raise InvalidDescentInput("landing config must be a JSON object")
        _check_keys("config", cfg, {"initial", "body", "vehicle", "search", "output"})

        initial = _section(cfg, "initial", {"v0_mps", "h0_m"})
        body = _section(cfg, "body", {"name", "g_mps2"})
        vehicle = _section(cfg, "vehicle", {"dry_mass_kg", "fuel_mass_kg",
                                            "jet_speed_mps", "flow_rate_kgps"})
        search = _section(cfg, "search", {f.name for f in fields(SearchConfig)})
        output = _section(cfg, "output", {"sample_step_s", "plot_dir"})

        kwargs: Dict[str, Any] = {}
        kwargs.update(initial)
        kwargs.update(vehicle)
        if "name" in body:
            kwargs["body"] = body["name"]
        if "g_mps2" in body:
            kwargs["g_mps2"] = body["g_mps2"]
        kwargs.update(output)
        try:
            kwargs["search"] = SearchConfig(**search)
        except TypeError as e:
            raise InvalidDescentInput(f"search: {e}") from e
        return cls(**kwargs)


def _check_keys(where: str, d: Dict[str, Any], allowed: set) -> None:
    unknown = sorted(set(d) - allowed)
    if unknown:
        raise InvalidDescentInput(f"unknown key(s) in {where}: {', '.join(unknown)}")


def _section(cfg: Dict[str, Any], name: str, allowed: set) -> Dict[str, Any]:
    sec = cfg.get(name) or {}
    if not isinstance(sec, dict):
        raise InvalidDescentInput(f"config section {name!r} must be an object")
    _check_keys(name, sec, allowed)
    return dict(sec)


def load_landing_config(path: str | Path) -> LunarLandingConfig:
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            cfg = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidDescentInput(f"{path}: invalid JSON ({e})") from e
    logger.debug("loaded landing config from %s", path)
    return LunarLandingConfig.from_dict(cfg)


def save_landing_config(cfg: LunarLandingConfig, path: str | Path) -> Path:
    path = Path(path)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(cfg.to_dict(), f, indent=2)
    return path


# ============================================================
# Orchestration
# ============================================================

@dataclass
class LunarLandingResult:
    params: PhysicalParameters
    solution: DescentSolution
    samples: DescentSamples
    plot_paths: Dict[str, Path] = field(default_factory=dict)

    @property
    def summary(self) -> Dict[str, Any]:
        return {
            "fall_time_s": self.solution.fall_time_s,
            "burn_time_s": self.solution.burn_time_s,
            "total_time_s": self.solution.total_time_s,
            "touchdown_speed_mps": self.solution.touchdown_speed_mps,
            "height_residual_m": self.solution.height_residual_m,
            "ignition_altitude_m": self.solution.ignition_altitude_m,
            "n_evaluated": self.solution.n_evaluated,
            "samples": self.samples.to_dict(),
            "plots": {k: str(v) for k, v in self.plot_paths.items()},
        }


def run_lunar_landing(cfg: LunarLandingConfig) -> LunarLandingResult:
    """
    Solve the descent, sample it, and write charts if cfg.plot_dir is set.

    Errors from the kernels (InvalidDescentInput, NoFeasibleDescentError)
    propagate unchanged.
    """
    params = cfg.physical_parameters()
    solution = solve_descent(params, cfg.search)
    samples = sample_descent(params, solution, step_s=cfg.sample_step_s)

    plot_paths: Dict[str, Path] = {}
    if cfg.plot_dir is not None:
        from ldp.missions.lunar.plots import plot_descent

        plot_paths = plot_descent(samples, cfg.plot_dir)
        logger.info("wrote %d charts to %s", len(plot_paths), cfg.plot_dir)

    return LunarLandingResult(
        params=params,
        solution=solution,
        samples=samples,
        plot_paths=plot_paths,
    )


__all__ = [
    "LunarLandingConfig",
    "LunarLandingResult",
    "load_landing_config",
    "save_landing_config",
    "run_lunar_landing",
]
