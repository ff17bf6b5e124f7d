"""
Generates a race program and plays every session back live in the terminal.

Usage:
    python run_race_program.py [--programs 2] [--fps 30] [--quiet]
"""
import argparse
import asyncio

from derby_dashboard.config import frame_rate
from derby_dashboard.engine import TRACK_LENGTH, AsyncioFrameClock
from derby_dashboard.program import ProgramEvent, RaceProgram

BOARD_REFRESH_MS = 1000.0
BAR_WIDTH = 20


def render_track_board(session, positions, finished, track_length=TRACK_LENGTH) -> str:
    lane_order = {horse.id: idx + 1 for idx, horse in enumerate(session.horses)}
    lines = []
    for horse in sorted(session.horses, key=lambda h: positions.get(h.id, 0.0), reverse=True):
        progress = min(max(positions.get(horse.id, 0.0) / track_length, 0.0), 1.0)
        filled = int(progress * BAR_WIDTH)
        bar = "#" * filled + "." * (BAR_WIDTH - filled)
        flag = " FIN" if horse.id in finished else ""
        lines.append(f"{lane_order[horse.id]:>2} {horse.name[:18]:<18} [{bar}] {progress * 100:5.1f}%{flag}")
    return "\n".join(lines) if lines else "No runners found."


def render_results(session) -> str:
    lines = [f"--- {session.name} Final Standings ---"]
    for result in session.results:
        lines.append(f"{result.position:>2}. {result.horse_name:<18} {result.finish_time:6.2f}s")
    return "\n".join(lines)


async def run_race_program(programs: int = 1, fps: int = 60, quiet: bool = False):
    clock = AsyncioFrameClock(frame_rate=fps)
    program = RaceProgram(clock=clock)
    for _ in range(programs):
        program.generate_program()

    last_board = {"timestamp": None}

    def on_event(event, payload):
        if event is ProgramEvent.FRAME and not quiet:
            previous = last_board["timestamp"]
            if previous is not None and payload.timestamp - previous < BOARD_REFRESH_MS:
                return
            last_board["timestamp"] = payload.timestamp
            session = program.get_session(payload.session_id)
            print(f"\n{session.name}  t={payload.elapsed:.1f}s")
            positions = {horse.horse_id: horse.position for horse in payload.horses}
            finished = {horse.horse_id for horse in payload.horses if horse.is_finished}
            print(render_track_board(session, positions, finished))
        elif event is ProgramEvent.SESSION_STARTED:
            last_board["timestamp"] = None
        elif event is ProgramEvent.SESSION_COMPLETED:
            print("\n" + render_results(payload))

    program.subscribe(on_event)
    program.start_all_races()
    await clock.wait_idle()
    completed = sum(1 for session in program.sessions if session.is_completed)
    print(f"\n{completed}/{len(program.sessions)} sessions completed.")
    return program


def main():
    parser = argparse.ArgumentParser(description="Play a generated race program live in the terminal.")
    parser.add_argument("--programs", type=int, default=1, help="How many programs to generate before playback.")
    parser.add_argument("--fps", type=int, default=None, help="Frame rate (default: DERBY_FRAME_RATE or config).")
    parser.add_argument("--quiet", action="store_true", help="Only print final standings.")
    args = parser.parse_args()

    try:
        asyncio.run(run_race_program(args.programs, fps=args.fps or frame_rate(), quiet=args.quiet))
    except KeyboardInterrupt:
        print("Race program stopped by user.")


if __name__ == "__main__":
    main()
