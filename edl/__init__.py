"""
Entry–Descent–Landing (EDL) Kernels
===================================

Closed-form 1D powered-descent kinematics, the (fall, burn) grid solver
and the sample series built from a solved descent.
"""

from .kinematics import (
    PhysicalParameters,
    is_valid_burn_time,
    is_before_burnout,
    check_burn_time,
    free_fall_speed,
    free_fall_height,
    mass_at,
    powered_speed,
    powered_height,
    powered_acceleration,
    lunar_module_params,
)
from .solver import (
    SearchConfig,
    DescentSolution,
    fall_time_bound,
    burn_time_grid,
    evaluate_candidates,
    solve_descent,
    default_search_config,
)
from .sampling import (
    PHASE_FREE_FALL,
    PHASE_POWERED,
    DescentSamples,
    sample_descent,
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
    "lunar_module_params",
    "SearchConfig",
    "DescentSolution",
    "fall_time_bound",
    "burn_time_grid",
    "evaluate_candidates",
    "solve_descent",
    "default_search_config",
    "PHASE_FREE_FALL",
    "PHASE_POWERED",
    "DescentSamples",
    "sample_descent",
]
