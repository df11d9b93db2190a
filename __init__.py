"""
Lander Descent Planner (LDP)
============================

Top-level package for the LDP powered-descent framework.

Subpackages:
- ldp.core            : bodies and the shared exception hierarchy
- ldp.edl             : closed-form descent kinematics, (fall, burn)
                        grid solver, sample series
- ldp.missions.lunar  : lunar-module orchestration, JSON configs, charts
- ldp.cli             : command line front end (also `python -m ldp`)
"""

__all__ = [
    "core",
    "edl",
    "missions",
]

__version__ = "0.1.0"
