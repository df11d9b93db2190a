# ldp/core/errors.py
"""
Exception hierarchy shared by the LDP kernels.

Everything raised on purpose by ldp derives from DescentError, so mission
code and the CLI can catch one type. The concrete classes also derive from
the matching builtin (ValueError / RuntimeError) for callers that only know
about those.
"""

from __future__ import annotations


class DescentError(Exception):
    """Base class for all LDP errors."""


class InvalidDescentInput(DescentError, ValueError):
    """Rejected input: bad altitude, non-physical constants, bad settings."""


class MassDepletionError(DescentError, ValueError):
    """
    Burn time would deplete the vehicle mass (flow * t >= total mass).

    The rocket-equation logarithm and the thrust/mass division are
    undefined there, so the kinematics refuse to evaluate.
    """

    def __init__(self, burn_time_s: float, limit_s: float):
        self.burn_time_s = burn_time_s
        self.limit_s = limit_s
        super().__init__(
            f"burn time {burn_time_s:.6g} s reaches the mass-depletion limit "
            f"({limit_s:.6g} s)"
        )


class NoFeasibleDescentError(DescentError, RuntimeError):
    """
    The bounded grid search found no (fall, burn) pair meeting both the
    altitude and the touchdown speed tests.
    """

    def __init__(self, reason: str, n_evaluated: int = 0):
        self.reason = reason
        self.n_evaluated = n_evaluated
        super().__init__(
            f"no feasible descent profile: {reason} "
            f"({n_evaluated} candidates evaluated)"
        )


class SearchTimeoutError(NoFeasibleDescentError):
    """Wall-clock bound hit before the search accepted a candidate."""


__all__ = [
    "DescentError",
    "InvalidDescentInput",
    "MassDepletionError",
    "NoFeasibleDescentError",
    "SearchTimeoutError",
]
