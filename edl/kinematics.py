# ldp/edl/kinematics.py
"""
Closed-Form Powered-Descent Kinematics
======================================

Point-mass vertical descent in two phases:

1. Free fall (engine off): constant acceleration g.
2. Powered braking (engine on): constant propellant flow, so the vehicle
   mass drops linearly, M(t) = M0 - f*t, and the rocket equation gives
   the speed lost to thrust: u * ln(M0 / (M0 - f*t)).

Sign convention: speed is positive *downward*, heights are altitude
*descended* since the start of the phase (positive going down).

The powered-phase clock starts at zero at ignition, independently of how
long the free fall lasted.

All functions take a PhysicalParameters first and accept either floats or
numpy arrays (broadcast together). Scalars in -> float out.

Nothing here clamps or returns NaN: a burn time with f*t >= M0 raises
MassDepletionError *before* the logarithm is evaluated.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict, fields, replace
from typing import Dict, Any, Union

import math
import numbers
import numpy as np

from ldp.core.bodies import Body, MOON
from ldp.core.errors import InvalidDescentInput, MassDepletionError


ArrayLike = Union[float, np.ndarray]


# ============================================================
# Dataclasses – parameters
# ============================================================

@dataclass(frozen=True)
class PhysicalParameters:
    """
    Immutable physical constants + initial state for one descent run.

    dry_mass_kg    : vehicle + crew mass without propellant [kg]
    fuel_mass_kg   : propellant mass at ignition [kg]
    jet_speed_mps  : effective exhaust velocity [m/s]
    flow_rate_kgps : propellant mass flow while burning [kg/s]
    g_mps2         : local gravitational acceleration [m/s^2]
    v0_mps         : initial vertical speed [m/s] (positive downward)
    h0_m           : initial altitude above the surface [m]
    """
    dry_mass_kg: float
    fuel_mass_kg: float
    jet_speed_mps: float
    flow_rate_kgps: float
    g_mps2: float
    v0_mps: float
    h0_m: float

    def __post_init__(self):
        for name in ("dry_mass_kg", "fuel_mass_kg", "jet_speed_mps",
                     "flow_rate_kgps", "g_mps2", "h0_m"):
            _validate_positive(self, name, getattr(self, name))
        _validate_finite(self, "v0_mps", self.v0_mps)
        # ints and numpy scalars are stored as plain floats
        for f in fields(self):
            object.__setattr__(self, f.name, float(getattr(self, f.name)))

    @property
    def total_mass_kg(self) -> float:
        return self.dry_mass_kg + self.fuel_mass_kg

    @property
    def burnout_time_s(self) -> float:
        """Burn time at which the propellant is gone."""
        return self.fuel_mass_kg / self.flow_rate_kgps

    @property
    def mass_limit_time_s(self) -> float:
        """Burn time at which the (formal) mass reaches zero."""
        return self.total_mass_kg / self.flow_rate_kgps

    def with_initial_state(self, v0_mps: float, h0_m: float) -> "PhysicalParameters":
        return replace(self, v0_mps=v0_mps, h0_m=h0_m)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _validate_finite(obj: Any, field_name: str, value: Any) -> None:
    # bool is an Integral, and numeric strings are not numbers
    if isinstance(value, bool) or not isinstance(value, numbers.Real) or not math.isfinite(value):
        raise InvalidDescentInput(
            f"{obj.__class__.__name__}.{field_name} must be a finite number, got {value!r}"
        )


def _validate_positive(obj: Any, field_name: str, value: Any) -> None:
    _validate_finite(obj, field_name, value)
    if value <= 0:
        raise InvalidDescentInput(
            f"{obj.__class__.__name__}.{field_name} must be positive, got {value}"
        )


# ============================================================
# Domain helpers
# ============================================================

def _out(x: np.ndarray) -> ArrayLike:
    if np.ndim(x) == 0:
        return float(x)
    return x


def _as_time(t: ArrayLike, name: str) -> np.ndarray:
    arr = np.asarray(t, dtype=float)
    if not np.all(np.isfinite(arr)):
        raise InvalidDescentInput(f"{name} must be finite")
    if np.any(arr < 0.0):
        raise InvalidDescentInput(f"{name} must be >= 0, got min {float(arr.min()):.6g}")
    return arr


def is_valid_burn_time(p: PhysicalParameters, t: ArrayLike) -> ArrayLike:
    """
    Mask of burn times the powered-phase functions accept:
    finite, non-negative and f*t < M0.
    """
    arr = np.asarray(t, dtype=float)
    with np.errstate(invalid="ignore"):
        ok = np.isfinite(arr) & (arr >= 0.0) & (p.flow_rate_kgps * arr < p.total_mass_kg)
    if np.ndim(ok) == 0:
        return bool(ok)
    return ok


def is_before_burnout(p: PhysicalParameters, t: ArrayLike) -> ArrayLike:
    """
    Mask of burn times that end with propellant still on board:
    is_valid_burn_time and f*t < fuel.
    """
    arr = np.asarray(t, dtype=float)
    with np.errstate(invalid="ignore"):
        ok = is_valid_burn_time(p, arr) & (p.flow_rate_kgps * arr < p.fuel_mass_kg)
    if np.ndim(ok) == 0:
        return bool(ok)
    return ok


def check_burn_time(p: PhysicalParameters, t: ArrayLike) -> np.ndarray:
    """Return t as an array, raising if any entry breaks the mass precondition."""
    arr = _as_time(t, "burn_time")
    bad = p.flow_rate_kgps * arr >= p.total_mass_kg
    if np.any(bad):
        raise MassDepletionError(float(arr[bad].min()), p.mass_limit_time_s)
    return arr


# ============================================================
# Free fall
# ============================================================

def free_fall_speed(p: PhysicalParameters, t: ArrayLike) -> ArrayLike:
    """Speed after t seconds of unpowered fall: v0 + g*t."""
    t = _as_time(t, "fall_time")
    return _out(p.v0_mps + p.g_mps2 * t)


def free_fall_height(p: PhysicalParameters, t: ArrayLike) -> ArrayLike:
    """Altitude descended during t seconds of unpowered fall: v0*t + g*t^2/2."""
    t = _as_time(t, "fall_time")
    return _out(p.v0_mps * t + 0.5 * p.g_mps2 * t * t)


# ============================================================
# Powered phase
# ============================================================

def mass_at(p: PhysicalParameters, burn_time: ArrayLike) -> ArrayLike:
    """Vehicle mass after burn_time seconds of burn [kg]."""
    t = check_burn_time(p, burn_time)
    return _out(p.total_mass_kg - p.flow_rate_kgps * t)


def powered_speed(p: PhysicalParameters, fall_time: ArrayLike, burn_time: ArrayLike) -> ArrayLike:
    """
    Speed after burn_time seconds of burn that started once the vehicle had
    fallen freely for fall_time seconds:

        v = v_ff(fall_time) + g*t - u * ln(M0 / (M0 - f*t))
    """
    t = check_burn_time(p, burn_time)
    v_ign = np.asarray(free_fall_speed(p, fall_time), dtype=float)

    M0 = p.total_mass_kg
    dv_jet = p.jet_speed_mps * np.log(M0 / (M0 - p.flow_rate_kgps * t))
    return _out(v_ign + p.g_mps2 * t - dv_jet)


def powered_height(p: PhysicalParameters, fall_time: ArrayLike, burn_time: ArrayLike) -> ArrayLike:
    """
    Altitude descended during the burn: the integral of powered_speed over
    [0, burn_time].

    With m(t) = M0 - f*t:

        h = V*t + g*t^2/2 - u * ( t*ln(M0) + (m*ln(m) - M0*ln(M0) + f*t) / f )

    where V is the free-fall speed at ignition.
    """
    t = check_burn_time(p, burn_time)
    v_ign = np.asarray(free_fall_speed(p, fall_time), dtype=float)

    M0 = p.total_mass_kg
    f = p.flow_rate_kgps
    m = M0 - f * t
    ln_M0 = math.log(M0)

    jet_term = t * ln_M0 + (m * np.log(m) - M0 * ln_M0 + f * t) / f
    return _out(v_ign * t + 0.5 * p.g_mps2 * t * t - p.jet_speed_mps * jet_term)


def powered_acceleration(p: PhysicalParameters, burn_time: ArrayLike) -> ArrayLike:
    """
    Net downward acceleration while the engine burns:

        a = g - u*f / (M0 - f*t)

    Negative values mean the vehicle is braking.
    """
    t = check_burn_time(p, burn_time)
    m = p.total_mass_kg - p.flow_rate_kgps * t
    return _out(p.g_mps2 - p.jet_speed_mps * p.flow_rate_kgps / m)


# ============================================================
# Lunar module preset
# ============================================================

def lunar_module_params(
    v0_mps: float = 0.0,
    h0_m: float = 2300.0,
    body: Body = MOON,
) -> PhysicalParameters:
    """
    Small crewed lander: 2150 kg dry, 150 kg propellant, 3660 m/s exhaust,
    15 kg/s flow (10 s of burn).
    """
    return PhysicalParameters(
        dry_mass_kg=2150.0,
        fuel_mass_kg=150.0,
        jet_speed_mps=3660.0,
        flow_rate_kgps=15.0,
        g_mps2=body.surface_gravity,
        v0_mps=v0_mps,
        h0_m=h0_m,
    )


__all__ = [
    "PhysicalParameters",
    "is_valid_burn_time",
    "is_before_burnout",
    "check_burn_time",
    "free_fall_speed",
    "free_fall_height",
    "mass_at",
    "powered_speed",
    "powered_height",
    "powered_acceleration",
    # Presets
    "lunar_module_params",
]
