#!/usr/bin/env python
"""
LDP command line – solve a lander descent.

Usage:
    ldp 0 2300                      # initial speed [m/s, down +], altitude [m]
    echo "0 2300" | ldp             # same, read from stdin
    ldp 0 2300 --plot out/          # also write the three PNG charts
    ldp --config landing.json -v    # everything from a JSON config

Exit codes: 0 solved, 2 rejected input (including an unreadable config),
3 no feasible descent, 4 charts could not be written.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ldp.core.errors import InvalidDescentInput, NoFeasibleDescentError
from ldp.missions.lunar import (
    LunarLandingConfig,
    load_landing_config,
    run_lunar_landing,
)

EXIT_OK = 0
EXIT_INVALID_INPUT = 2
EXIT_NO_SOLUTION = 3
EXIT_OUTPUT_ERROR = 4


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ldp",
        description="Solve free-fall and burn times for a soft vertical landing.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ldp 0 2300
  ldp -5 4000 --plot results/
  ldp --config landing.json
        """,
    )
    parser.add_argument("v0", nargs="?", type=float, default=None,
                        help="initial vertical speed [m/s], positive downward")
    parser.add_argument("h0", nargs="?", type=float, default=None,
                        help="initial altitude [m]")
    parser.add_argument("--config", type=str, default=None,
                        help="JSON landing config (positional v0/h0 override it)")
    parser.add_argument("--plot", type=str, default=None,
                        help="directory for speed/height/acceleration PNG charts")
    parser.add_argument("--step", type=float, default=None,
                        help="sample step for the output series [s] (default: 0.01)")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="-v for INFO, -vv for DEBUG logging")
    return parser.parse_args(argv)


def _read_initial_state(stream) -> tuple[float, float]:
    tokens = stream.read().split()
    if len(tokens) < 2:
        raise InvalidDescentInput("expected '<v0> <h0>' on stdin")
    try:
        return float(tokens[0]), float(tokens[1])
    except ValueError as e:
        raise InvalidDescentInput(f"bad initial state on stdin: {e}") from e


def build_config(args: argparse.Namespace, stdin=None) -> LunarLandingConfig:
    if args.config:
        try:
            cfg = load_landing_config(args.config)
        except OSError as e:
            raise InvalidDescentInput(f"cannot read config {args.config}: {e}") from e
    else:
        cfg = LunarLandingConfig()

    if args.v0 is not None and args.h0 is not None:
        cfg.v0_mps, cfg.h0_m = args.v0, args.h0
    elif args.v0 is not None:
        raise InvalidDescentInput("give both v0 and h0, or neither")
    elif not args.config:
        cfg.v0_mps, cfg.h0_m = _read_initial_state(stdin or sys.stdin)

    if args.plot:
        cfg.plot_dir = Path(args.plot)
    if args.step is not None:
        cfg.sample_step_s = args.step
    return cfg


def main(argv: Optional[List[str]] = None, stdin=None) -> int:
    args = parse_args(argv)
    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        cfg = build_config(args, stdin=stdin)
        res = run_lunar_landing(cfg)
    except InvalidDescentInput as e:
        print(f"[INPUT] {e}", file=sys.stderr)
        return EXIT_INVALID_INPUT
    except NoFeasibleDescentError as e:
        print(f"[NO SOLUTION] {e}", file=sys.stderr)
        return EXIT_NO_SOLUTION
    except OSError as e:
        print(f"[OUTPUT] {e}", file=sys.stderr)
        return EXIT_OUTPUT_ERROR

    sol = res.solution
    print(f"{sol.touchdown_speed_mps}")
    print(f"Free fall:        {sol.fall_time_s:.3f} s")
    print(f"Burn:             {sol.burn_time_s:.2f} s")
    print(f"Ignition alt:     {sol.ignition_altitude_m:.1f} m")
    print(f"Height residual:  {sol.height_residual_m:+.3f} m")
    for stem, path in res.plot_paths.items():
        print(f"[PLOT] {stem}: {path}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
