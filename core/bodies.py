# ldp/core/bodies.py

from dataclasses import dataclass

from ldp.core.errors import InvalidDescentInput

@dataclass(frozen=True)
class Body:
    name: str
    mu: float          # gravitational parameter [m^3/s^2]
    radius_m: float    # mean radius [m]
    g_surface_mps2: float | None = None  # nominal surface gravity, overrides mu/r^2

    @property
    def surface_gravity(self) -> float:
        if self.g_surface_mps2 is not None:
            return self.g_surface_mps2
        return self.mu / (self.radius_m * self.radius_m)


# Lunar g is pinned to the 1.62 m/s^2 used by the lander presets
MOON = Body(
    name="Moon",
    mu=4.9048695e12,
    radius_m=1737.4e3,
    g_surface_mps2=1.62,
)

MARS = Body(
    name="Mars",
    mu=4.282837e13,
    radius_m=3389.5e3,
)

EARTH = Body(
    name="Earth",
    mu=3.986004418e14,
    radius_m=6371e3,
    g_surface_mps2=9.80665,
)

BODIES = {b.name.lower(): b for b in (MOON, MARS, EARTH)}


def get_body(name: str) -> Body:
    """Look up a known body by (case-insensitive) name."""
    try:
        return BODIES[name.strip().lower()]
    except (KeyError, AttributeError):
        known = ", ".join(sorted(BODIES))
        raise InvalidDescentInput(f"unknown body {name!r} (known: {known})") from None


__all__ = ["Body", "MOON", "MARS", "EARTH", "BODIES", "get_body"]
