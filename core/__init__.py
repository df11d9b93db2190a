"""
Core Definitions
================

Celestial bodies and the exception hierarchy shared by all LDP kernels.
"""

from .errors import (
    DescentError,
    InvalidDescentInput,
    MassDepletionError,
    NoFeasibleDescentError,
    SearchTimeoutError,
)
from .bodies import Body, MOON, MARS, EARTH, get_body

__all__ = [
    "DescentError",
    "InvalidDescentInput",
    "MassDepletionError",
    "NoFeasibleDescentError",
    "SearchTimeoutError",
    "Body",
    "MOON",
    "MARS",
    "EARTH",
    "get_body",
]
