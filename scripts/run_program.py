"""
Utility script to resolve a race program instantly, without animation.

Usage:
    python scripts/run_program.py --mode rounds --seed 7
    python scripts/run_program.py --mode sessions --programs 2

"rounds" builds the round-indexed races and runs them through run_all_races();
"sessions" generates program sessions and completes each one with instantly
computed results.
"""

from __future__ import annotations

import argparse
import os
import random
import sys

import numpy as np

# Ensure repo root is on sys.path when script is executed from anywhere
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.append(REPO_ROOT)

from derby_dashboard.engine import resolve_race  # noqa: E402
from derby_dashboard.horse_registry import HorseRegistry  # noqa: E402
from derby_dashboard.program import RaceProgram  # noqa: E402


def _print_results(title: str, results) -> None:
    print(f"\n{title}")
    for result in results:
        print(f"{result.position}. {result.horse_name} (ID {result.horse_id}) - {result.finish_time:.2f}s")


def run_rounds(program: RaceProgram) -> None:
    program.initialize_races()
    program.run_all_races()
    for race in program.races:
        _print_results(f"--- Round {race.round} ({race.distance}m) ---", race.results)


def run_sessions(program: RaceProgram, programs: int) -> None:
    for _ in range(programs):
        program.generate_program()
    for session in program.sessions:
        program.set_current_session(session.id)
        program.complete_session(resolve_race(session.horses, session.distance, program.rng))
        _print_results(f"--- {session.name} ---", session.results)


def main() -> None:
    parser = argparse.ArgumentParser(description="Resolve a race program instantly.")
    parser.add_argument("--mode", choices=("rounds", "sessions"), default="rounds", help="Which race surface to run.")
    parser.add_argument("--programs", type=int, default=1, help="Programs to generate in sessions mode.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for roster and outcome randomness.")
    parser.add_argument("--verbose", action="store_true", help="Print engine diagnostics.")
    args = parser.parse_args()

    registry = HorseRegistry(rng=np.random.default_rng(args.seed))
    program = RaceProgram(registry=registry, rng=random.Random(args.seed), verbose=args.verbose)

    if args.mode == "rounds":
        run_rounds(program)
    else:
        run_sessions(program, args.programs)


if __name__ == "__main__":
    main()
