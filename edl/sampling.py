# ldp/edl/sampling.py
"""
Descent sample series for display.

Evaluates the kinematics on a fixed time step across both phases of a
solved descent. The free-fall phase runs on the absolute clock; the
powered phase runs on the burn clock and is shifted by the fall time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Any, List, Optional, Tuple

import math
import numbers
import numpy as np
import pandas as pd

from ldp.core.errors import InvalidDescentInput
from ldp.edl.kinematics import (
    PhysicalParameters,
    free_fall_speed,
    free_fall_height,
    mass_at,
    powered_speed,
    powered_height,
    powered_acceleration,
)
from ldp.edl.solver import DescentSolution


PHASE_FREE_FALL = "free_fall"
PHASE_POWERED = "powered"

QUANTITIES = {
    "speed": "v_mps",
    "height": "descended_m",
    "altitude": "altitude_m",
    "acceleration": "a_mps2",
    "mass": "m_kg",
}


@dataclass
class DescentSamples:
    """
    df columns:
        t_s         : time since start of descent [s]
        phase       : "free_fall" or "powered"
        v_mps       : vertical speed, positive down [m/s]
        descended_m : altitude descended since start [m]
        altitude_m  : h0 - descended_m [m]
        a_mps2      : net downward acceleration [m/s^2]
        m_kg        : vehicle mass [kg]
    """
    df: pd.DataFrame
    fall_time_s: float
    burn_time_s: float
    step_s: float

    def series(self, quantity: str, phase: Optional[str] = None) -> List[Tuple[float, float]]:
        """Ordered (time, value) pairs for one of QUANTITIES."""
        try:
            col = QUANTITIES[quantity]
        except KeyError:
            raise InvalidDescentInput(
                f"unknown quantity {quantity!r}; expected one of {sorted(QUANTITIES)}"
            ) from None
        df = self.df if phase is None else self.df[self.df["phase"] == phase]
        return list(zip(df["t_s"].astype(float).tolist(), df[col].astype(float).tolist()))

    def split(self, quantity: str) -> Dict[str, List[Tuple[float, float]]]:
        """Same as series(), split at the fall/burn boundary."""
        return {
            PHASE_FREE_FALL: self.series(quantity, PHASE_FREE_FALL),
            PHASE_POWERED: self.series(quantity, PHASE_POWERED),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Summary without full timeseries."""
        return {
            "n_samples": int(len(self.df)),
            "n_free_fall": int((self.df["phase"] == PHASE_FREE_FALL).sum()),
            "n_powered": int((self.df["phase"] == PHASE_POWERED).sum()),
            "step_s": self.step_s,
            "columns": list(self.df.columns),
        }


def _ticks(start: float, stop: float, step: float) -> np.ndarray:
    if stop < start:
        return np.zeros(0)
    n = int(math.floor((stop - start) / step + 1e-9)) + 1
    return start + step * np.arange(n, dtype=float)


def _is_number(value: Any) -> bool:
    return (not isinstance(value, bool) and isinstance(value, numbers.Real)
            and math.isfinite(value))


def sample_descent(
    params: PhysicalParameters,
    solution: DescentSolution,
    start_s: float = 0.0,
    end_s: Optional[float] = None,
    step_s: float = 0.01,
) -> DescentSamples:
    """
    Sample speed, altitude and acceleration over [start_s, end_s] (absolute
    time, default end = fall + burn) with a fixed step.

    Free fall is sampled at start_s + k*step up to min(end, fall_time).
    The burn is sampled at burn-clock times tau0 + k*step up to
    min(end - fall_time, burn_time), tau0 = max(0, start_s - fall_time),
    and placed at fall_time + tau.
    """
    if not (_is_number(step_s) and step_s > 0):
        raise InvalidDescentInput(f"step_s must be positive, got {step_s!r}")
    if not (_is_number(start_s) and start_s >= 0):
        raise InvalidDescentInput(f"start_s must be >= 0, got {start_s!r}")
    tf = solution.fall_time_s
    tb = solution.burn_time_s
    if end_s is None:
        end_s = tf + tb
    if end_s < start_s:
        raise InvalidDescentInput(f"end_s ({end_s}) is before start_s ({start_s})")

    # Free fall
    t_ff = _ticks(start_s, min(end_s, tf), step_s)
    v_ff = np.asarray(free_fall_speed(params, t_ff), dtype=float)
    h_ff = np.asarray(free_fall_height(params, t_ff), dtype=float)
    a_ff = np.full_like(t_ff, params.g_mps2)

    # Powered
    tau = _ticks(max(0.0, start_s - tf), min(end_s - tf, tb), step_s)
    h_ign = float(free_fall_height(params, tf))
    v_pw = np.asarray(powered_speed(params, tf, tau), dtype=float)
    h_pw = h_ign + np.asarray(powered_height(params, tf, tau), dtype=float)
    a_pw = np.asarray(powered_acceleration(params, tau), dtype=float)
    m_pw = np.asarray(mass_at(params, tau), dtype=float)

    descended = np.concatenate([h_ff, h_pw])
    df = pd.DataFrame(
        {
            "t_s": np.concatenate([t_ff, tf + tau]),
            "phase": [PHASE_FREE_FALL] * t_ff.size + [PHASE_POWERED] * tau.size,
            "v_mps": np.concatenate([v_ff, v_pw]),
            "descended_m": descended,
            "altitude_m": params.h0_m - descended,
            "a_mps2": np.concatenate([a_ff, a_pw]),
            "m_kg": np.concatenate([np.full_like(t_ff, params.total_mass_kg), m_pw]),
        }
    )
    return DescentSamples(df=df, fall_time_s=tf, burn_time_s=tb, step_s=step_s)


__all__ = [
    "PHASE_FREE_FALL",
    "PHASE_POWERED",
    "DescentSamples",
    "sample_descent",
]
