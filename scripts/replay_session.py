"""
Generate telemetry dumps or position-trace plots for animated race programs.

The program is played back headless on a ManualFrameClock, so a full program
replays in well under a second regardless of its wall-clock length.

Examples:
    # Save the per-frame JSON for a generated program
    python scripts/replay_session.py --dump replays/program.json

    # Plot position against elapsed time for every session (requires matplotlib)
    python scripts/replay_session.py --plot replays/program.png --seed 3
"""
from __future__ import annotations

import argparse
import json
import random
import sys
from pathlib import Path
from typing import Any, Dict, Sequence

import numpy as np

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.append(str(REPO_ROOT))

from derby_dashboard.engine import TRACK_LENGTH, AnimationFrame, ManualFrameClock, TelemetryCollector  # noqa: E402
from derby_dashboard.horse_registry import HorseRegistry  # noqa: E402
from derby_dashboard.program import RaceProgram  # noqa: E402


def record_program(seed: int | None, frame_interval_ms: float, programs: int = 1) -> tuple[RaceProgram, TelemetryCollector]:
    telemetry = TelemetryCollector()
    clock = ManualFrameClock(frame_interval_ms=frame_interval_ms)
    program = RaceProgram(
        registry=HorseRegistry(rng=np.random.default_rng(seed)),
        clock=clock,
        rng=random.Random(seed),
        telemetry=telemetry,
    )
    for _ in range(programs):
        program.generate_program()
    program.start_all_races()
    clock.run_until_idle()
    if program.active_race_session_id is not None:
        raise RuntimeError("Playback did not finish; raise the frame budget.")
    return program, telemetry


def dump_frames(program: RaceProgram, frames: Sequence[AnimationFrame], output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "sessions": [session.to_dict() for session in program.sessions],
        "frames": [frame.to_dict() for frame in frames],
    }
    with output_path.open("w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2)
    print(f"[replay] wrote {len(frames)} frames to {output_path}")


def _traces(frames: Sequence[AnimationFrame]) -> Dict[int, Dict[str, Any]]:
    traces: Dict[int, Dict[str, Any]] = {}
    for frame in frames:
        for horse in frame.horses:
            trace = traces.setdefault(horse.horse_id, {"t": [], "pos": [], "name": horse.name})
            trace["t"].append(frame.elapsed)
            trace["pos"].append(horse.position)
    return traces


def plot_program(program: RaceProgram, telemetry: TelemetryCollector, output_path: Path) -> None:
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    session_ids = telemetry.session_ids()
    if not session_ids:
        raise RuntimeError("No telemetry frames to render.")

    cols = 2
    rows = (len(session_ids) + cols - 1) // cols
    fig, axes = plt.subplots(rows, cols, figsize=(12, 4 * rows), squeeze=False)
    for ax, session_id in zip(axes.flat, session_ids):
        session = program.get_session(session_id)
        for trace in _traces(telemetry.frames_for_session(session_id)).values():
            ax.plot(trace["t"], trace["pos"], linewidth=1.0, label=trace["name"])
        ax.axhline(TRACK_LENGTH, color="black", linewidth=0.8, linestyle="--")
        ax.set_title(session.name if session else f"Session {session_id}")
        ax.set_xlabel("Elapsed (s)")
        ax.set_ylabel("Track position")
        ax.legend(loc="lower right", fontsize=6)
    for ax in list(axes.flat)[len(session_ids):]:
        ax.set_visible(False)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(str(output_path))
    plt.close(fig)
    print(f"[replay] saved position traces to {output_path}")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Export or plot animated race program telemetry.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for rosters, speed factors and outcomes.")
    parser.add_argument("--programs", type=int, default=1, help="Programs to generate before playback.")
    parser.add_argument("--frame-ms", type=float, default=1000.0 / 60.0, help="Simulated frame interval (default: 60 fps).")
    parser.add_argument("--dump", type=Path, help="Optional JSON file to dump frames.")
    parser.add_argument("--plot", type=Path, help="Optional PNG path for position traces (requires matplotlib).")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    program, telemetry = record_program(args.seed, args.frame_ms, args.programs)

    if args.dump:
        dump_frames(program, telemetry.export(), args.dump)

    if args.plot:
        plot_program(program, telemetry, args.plot)
    elif not args.dump:
        dump_frames(program, telemetry.export(), Path("replays") / "program_telemetry.json")


if __name__ == "__main__":
    main()
