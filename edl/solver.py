# ldp/edl/solver.py
"""
Two-Parameter Descent Solver
============================

Finds the free-fall time (engine off) and the burn time (engine on) that
bring the lander from (v0, h0) to the surface:

    free_fall_height(tf) + powered_height(tf, tb)  ~= h0      (|err| <= tol)
    speed_min <= powered_speed(tf, tb) <= speed_max            (touchdown band)

powered_height / powered_speed are transcendental in tb (log of the mass
ratio), so the pair is found by exhaustive grid search:

- outer axis: tf = fall_start + k*fall_step, while the unpowered fall
  still has not covered h0;
- inner axis: tb = burn_min + j*burn_step, up to burn_max and strictly
  below propellant burnout.

The first accepted cell in row-major (tf, then tb) order wins and the
search stops there. This prefers the shortest free fall before ignition;
it is NOT a minimum-fuel optimum.

The grid is evaluated in numpy row blocks instead of a Python double
loop; the pick order is the same.

High-level API:
    solve_descent(params, search=None) -> DescentSolution
"""

from __future__ import annotations

from dataclasses import dataclass, asdict, fields
from typing import Dict, Any, Optional, Tuple

import logging
import math
import numbers
import time

import numpy as np

from ldp.core.errors import InvalidDescentInput, NoFeasibleDescentError, SearchTimeoutError
from ldp.edl.kinematics import (
    PhysicalParameters,
    free_fall_height,
    is_before_burnout,
    powered_height,
    powered_speed,
)

logger = logging.getLogger(__name__)


# ============================================================
# Dataclasses – search settings
# ============================================================

@dataclass(frozen=True)
class SearchConfig:
    """
    Grid resolution, acceptance tolerances and convergence guards.

    fall_start_s    : first free-fall candidate [s]
    fall_step_s     : free-fall increment [s]
    burn_min_s      : first burn candidate [s]
    burn_max_s      : last burn candidate, inclusive [s]
    burn_step_s     : burn increment [s]
    height_tol_m    : allowed |descended - h0| [m]
    speed_min_mps   : touchdown band, lower bound [m/s]
    speed_max_mps   : touchdown band, upper bound [m/s]
    block_rows      : free-fall rows evaluated per numpy block
    max_evaluations : candidate budget before giving up
    timeout_s       : optional wall-clock bound [s], checked between blocks
    """
    fall_start_s: float = 1.0
    fall_step_s: float = 0.001
    burn_min_s: float = 0.5
    burn_max_s: float = 10.0
    burn_step_s: float = 0.05
    height_tol_m: float = 0.5
    speed_min_mps: float = 0.0
    speed_max_mps: float = 3.0
    block_rows: int = 1024
    max_evaluations: int = 50_000_000
    timeout_s: Optional[float] = None

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "timeout_s" and value is None:
                continue
            _require(_is_number(value), f"{f.name} must be a finite number, got {value!r}")
        for name in ("fall_step_s", "burn_step_s", "height_tol_m"):
            _require(getattr(self, name) > 0, f"{name} must be positive")
        for name in ("fall_start_s", "burn_min_s"):
            _require(getattr(self, name) >= 0, f"{name} must be >= 0")
        _require(self.burn_min_s <= self.burn_max_s, "burn_min_s must not exceed burn_max_s")
        _require(self.speed_min_mps <= self.speed_max_mps,
                 "speed_min_mps must not exceed speed_max_mps")
        _require(int(self.block_rows) >= 1, "block_rows must be >= 1")
        _require(int(self.max_evaluations) >= 1, "max_evaluations must be >= 1")
        if self.timeout_s is not None:
            _require(self.timeout_s > 0, "timeout_s must be positive when set")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise InvalidDescentInput(f"SearchConfig: {msg}")


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(value)


# ============================================================
# Dataclasses – result
# ============================================================

@dataclass(frozen=True)
class DescentSolution:
    """
    Accepted descent profile. Values are the ones the acceptance test saw.

    fall_time_s         : engine-off duration [s]
    burn_time_s         : engine-on duration [s]
    touchdown_speed_mps : powered_speed at the end of the burn [m/s]
    free_fall_height_m  : altitude descended before ignition [m]
    powered_height_m    : altitude descended during the burn [m]
    height_residual_m   : total descended - h0 [m]
    n_evaluated         : candidates evaluated up to acceptance
    """
    fall_time_s: float
    burn_time_s: float
    touchdown_speed_mps: float
    free_fall_height_m: float
    powered_height_m: float
    height_residual_m: float
    n_evaluated: int

    @property
    def total_time_s(self) -> float:
        return self.fall_time_s + self.burn_time_s

    @property
    def ignition_altitude_m(self) -> float:
        return self.powered_height_m - self.height_residual_m

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["total_time_s"] = self.total_time_s
        return d


# ============================================================
# Grid helpers
# ============================================================

def _grid_count(start: float, stop: float, step: float) -> int:
    """Number of points start + k*step <= stop (tolerant to FP round-off)."""
    if stop < start:
        return 0
    return int(math.floor((stop - start) / step + 1e-9)) + 1


def fall_time_bound(params: PhysicalParameters) -> float:
    """
    Time for an unpowered fall to cover h0: positive root of
    v0*t + g*t^2/2 = h0.
    """
    g = params.g_mps2
    v0 = params.v0_mps
    return (-v0 + math.sqrt(v0 * v0 + 2.0 * g * params.h0_m)) / g


def burn_time_grid(params: PhysicalParameters, search: SearchConfig) -> np.ndarray:
    """
    Inner-loop burn candidates: burn_min + j*burn_step <= burn_max, with
    everything at or past propellant burnout (f*t >= fuel) dropped.
    """
    n = _grid_count(search.burn_min_s, search.burn_max_s, search.burn_step_s)
    grid = search.burn_min_s + search.burn_step_s * np.arange(n, dtype=float)
    keep = is_before_burnout(params, grid)
    if not np.all(keep):
        logger.info(
            "burn grid clipped at propellant burnout %.3f s (%d of %d candidates kept)",
            params.burnout_time_s, int(keep.sum()), n,
        )
    return grid[keep]


def evaluate_candidates(
    params: PhysicalParameters,
    search: SearchConfig,
    fall_times: np.ndarray,
    burn_times: np.ndarray,
) -> Dict[str, np.ndarray]:
    """
    Evaluate the (fall x burn) block once per cell.

    Returns a dict of 2-D arrays shaped (len(fall_times), len(burn_times)):
        "v_mps"      : touchdown speed
        "h_ff_m"     : free-fall height (broadcast along burn axis)
        "h_pow_m"    : powered-phase height
        "residual_m" : h_ff + h_pow - h0
        "accept"     : bool mask of the acceptance test
    """
    tf = np.asarray(fall_times, dtype=float).reshape(-1, 1)
    tb = np.asarray(burn_times, dtype=float).reshape(1, -1)

    h_ff = np.asarray(free_fall_height(params, tf), dtype=float)
    h_pow = np.asarray(powered_height(params, tf, tb), dtype=float)
    v_end = np.asarray(powered_speed(params, tf, tb), dtype=float)

    residual = h_ff + h_pow - params.h0_m
    accept = (
        (np.abs(residual) <= search.height_tol_m)
        & (v_end >= search.speed_min_mps)
        & (v_end <= search.speed_max_mps)
    )
    return {
        "v_mps": v_end,
        "h_ff_m": np.broadcast_to(h_ff, v_end.shape),
        "h_pow_m": h_pow,
        "residual_m": residual,
        "accept": accept,
    }


def _fall_block(
    params: PhysicalParameters,
    search: SearchConfig,
    k0: int,
    n_rows: int,
) -> Tuple[np.ndarray, bool]:
    """
    Fall-time rows k0 .. k0+n_rows-1, cut at the first row whose free-fall
    height exceeds h0. Returns (rows, exhausted).
    """
    k = k0 + np.arange(n_rows, dtype=float)
    tf = search.fall_start_s + search.fall_step_s * k
    over = np.asarray(free_fall_height(params, tf)) > params.h0_m
    if np.any(over):
        first_over = int(np.argmax(over))
        return tf[:first_over], True
    return tf, False


# ============================================================
# Main interface
# ============================================================

def solve_descent(
    params: PhysicalParameters,
    search: Optional[SearchConfig] = None,
) -> DescentSolution:
    """
    Grid-search the (fall_time, burn_time) pair for a soft touchdown.

    Scan order is fall time ascending, then burn time ascending; the first
    cell passing both tests is returned immediately.

    Raises
    ------
    NoFeasibleDescentError
        No cell passes, the free fall overshoots h0 at the very first
        candidate, the burn grid is empty, or max_evaluations is used up.
    SearchTimeoutError
        search.timeout_s elapsed first.
    """
    search = search or SearchConfig()

    if free_fall_height(params, search.fall_start_s) > params.h0_m:
        raise NoFeasibleDescentError(
            f"free fall alone overshoots h0={params.h0_m:g} m "
            f"at the first candidate fall time {search.fall_start_s:g} s"
        )

    burn_times = burn_time_grid(params, search)
    if burn_times.size == 0:
        raise NoFeasibleDescentError(
            f"no burn candidates in [{search.burn_min_s:g}, {search.burn_max_s:g}] s "
            f"before propellant burnout at {params.burnout_time_s:g} s"
        )

    n_cols = int(burn_times.size)
    block_rows = int(search.block_rows)
    logger.debug(
        "descent search: h0=%.3f m v0=%.3f m/s, fall bound %.3f s, %d burn candidates",
        params.h0_m, params.v0_mps, fall_time_bound(params), n_cols,
    )

    t_start = time.perf_counter()
    n_evaluated = 0
    k0 = 0
    exhausted = False

    while not exhausted:
        if search.timeout_s is not None and time.perf_counter() - t_start > search.timeout_s:
            raise SearchTimeoutError(
                f"timeout after {search.timeout_s:g} s", n_evaluated=n_evaluated
            )

        rows_left = (int(search.max_evaluations) - n_evaluated) // n_cols
        if rows_left <= 0:
            raise NoFeasibleDescentError("evaluation budget exhausted", n_evaluated=n_evaluated)

        fall_times, exhausted = _fall_block(params, search, k0, min(block_rows, rows_left))
        if fall_times.size == 0:
            break

        ev = evaluate_candidates(params, search, fall_times, burn_times)
        accept = ev["accept"]
        if np.any(accept):
            row = int(np.argmax(accept.any(axis=1)))
            col = int(np.argmax(accept[row]))
            n_evaluated += row * n_cols + col + 1
            sol = DescentSolution(
                fall_time_s=float(fall_times[row]),
                burn_time_s=float(burn_times[col]),
                touchdown_speed_mps=float(ev["v_mps"][row, col]),
                free_fall_height_m=float(ev["h_ff_m"][row, col]),
                powered_height_m=float(ev["h_pow_m"][row, col]),
                height_residual_m=float(ev["residual_m"][row, col]),
                n_evaluated=n_evaluated,
            )
            logger.info(
                "accepted fall=%.3f s burn=%.2f s (v_td=%.3f m/s, residual=%.3f m) "
                "after %d candidates",
                sol.fall_time_s, sol.burn_time_s, sol.touchdown_speed_mps,
                sol.height_residual_m, n_evaluated,
            )
            return sol

        n_evaluated += int(fall_times.size) * n_cols
        k0 += int(fall_times.size)
        logger.debug("block up to fall=%.3f s rejected (%d evaluated)", fall_times[-1], n_evaluated)

    raise NoFeasibleDescentError(
        "fall-time axis exhausted without an accepted candidate", n_evaluated=n_evaluated
    )


# ============================================================
# Preset
# ============================================================

def default_search_config() -> SearchConfig:
    """1 ms fall steps, 50 ms burn steps, 0.5 m height tolerance, 0-3 m/s touchdown."""
    return SearchConfig()


__all__ = [
    "SearchConfig",
    "DescentSolution",
    "fall_time_bound",
    "burn_time_grid",
    "evaluate_candidates",
    "solve_descent",
    "default_search_config",
]
