from __future__ import annotations

import random
from typing import Callable, Dict, List, Optional, Sequence, Set

from derby_dashboard.config import get_config

from .clock import FrameClock
from .data_models import Horse, RaceResult, Session
from .outcome import rank_results
from .telemetry import AnimationFrame, HorseFrame, TelemetryCollector

TRACK_LENGTH = float(get_config("animation.track_length", 100.0))
BASE_SPEED = float(get_config("animation.base_speed", 10.0))

SPEED_JITTER_MIN = float(get_config("animation.speed_jitter_min", 0.85))
SPEED_JITTER_SPAN = float(get_config("animation.speed_jitter_span", 0.3))
CONDITION_FLOOR = float(get_config("animation.condition_floor", 0.8))
CONDITION_SPAN = float(get_config("animation.condition_span", 0.4))

CompletionHook = Callable[[Session, List[RaceResult]], None]


def speed_factor_for(horse: Horse, rng: Optional[random.Random] = None) -> float:
    """Stylized multiplier, roughly 0.68 to 1.38, biased upward by condition."""
    source = rng or random
    jitter = SPEED_JITTER_MIN + source.random() * SPEED_JITTER_SPAN
    condition = CONDITION_FLOOR + (horse.condition_score / 100) * CONDITION_SPAN
    return jitter * condition


class RaceAnimator:
    """
    Advances the active session's horses from 0 to TRACK_LENGTH over wall-clock time.

    The animator never owns lifecycle flags. It reads the session handed back
    by `active_session` on every frame, freezes while that session is paused,
    and hands ranked results to `on_complete` once every horse has crossed the
    line. The completion hook is expected to chain the next session by
    calling begin() again.
    """

    def __init__(
        self,
        clock: FrameClock,
        active_session: Callable[[], Optional[Session]],
        on_complete: CompletionHook,
        rng: Optional[random.Random] = None,
        telemetry: Optional[TelemetryCollector] = None,
        on_frame: Optional[Callable[[AnimationFrame], None]] = None,
        track_length: float = TRACK_LENGTH,
        base_speed: float = BASE_SPEED,
        verbose: bool = False,
    ) -> None:
        self.clock = clock
        self.rng = rng or random.Random()
        self.telemetry = telemetry
        self.track_length = track_length
        self.base_speed = base_speed
        self.verbose = verbose
        self._active_session = active_session
        self._on_complete = on_complete
        self._on_frame = on_frame

        self.horse_positions: Dict[int, float] = {}
        self.horse_speed_factors: Dict[int, float] = {}
        self.finished_horses: Set[int] = set()
        self.horse_finish_times: Dict[int, float] = {}
        self.start_time: Optional[float] = None
        self.accumulated_pause_duration = 0.0
        self.last_pause_start: Optional[float] = None
        self.last_timestamp: Optional[float] = None
        self.tick_index = 0

        self._session_id: Optional[int] = None
        self._frame_handle: Optional[int] = None

    @property
    def session_id(self) -> Optional[int]:
        return self._session_id

    @property
    def is_scheduled(self) -> bool:
        return self._frame_handle is not None

    def initialize_animation(self, horses: Sequence[Horse]) -> None:
        self.horse_positions.clear()
        self.horse_speed_factors.clear()
        self.finished_horses.clear()
        self.horse_finish_times.clear()
        for horse in horses:
            self.horse_positions[horse.id] = 0.0
            self.horse_speed_factors[horse.id] = speed_factor_for(horse, self.rng)
        self.start_time = None
        self.accumulated_pause_duration = 0.0
        self.last_pause_start = None
        self.last_timestamp = None
        self.tick_index = 0

    def begin(self, session: Session) -> None:
        self.stop()
        self._session_id = session.id
        self.initialize_animation(session.horses)
        if self.verbose:
            print(f"[RaceAnimator] {session.name}: {len(session.horses)} horses at the gate.")
        self._schedule()

    def ensure_scheduled(self) -> None:
        if self._session_id is not None and self._frame_handle is None:
            self._schedule()

    def stop(self) -> None:
        """
        Cancels the pending frame. Positions stay as last computed; the halted
        span is booked like a pause so a later resume does not jump ahead.
        """
        if self._frame_handle is not None:
            self.clock.cancel_frame(self._frame_handle)
            self._frame_handle = None
            if self.start_time is not None and self.last_pause_start is None:
                self.last_pause_start = self.last_timestamp

    def reset(self) -> None:
        self.stop()
        self._session_id = None
        self.initialize_animation(())

    def on_frame(self, timestamp: float) -> None:
        """
        Advances one frame. The next frame is scheduled (or the session is
        finished) before the frame is published, so a failing listener cannot
        stall playback.
        """
        self._frame_handle = None
        session = self._active_session()
        if session is None or session.id != self._session_id:
            return

        if self.start_time is None:
            self.start_time = timestamp
        self.last_timestamp = timestamp

        if session.is_paused:
            if self.last_pause_start is None:
                self.last_pause_start = timestamp
            frame = self._capture_frame(session, timestamp, self._elapsed(self.last_pause_start), paused=True)
            self._schedule()
            self._publish(frame)
            return

        if self.last_pause_start is not None:
            self.accumulated_pause_duration += timestamp - self.last_pause_start
            self.last_pause_start = None

        elapsed = self._elapsed(timestamp)
        for horse in session.horses:
            if horse.id in self.finished_horses:
                continue
            position = min(self.base_speed * self.horse_speed_factors[horse.id] * elapsed, self.track_length)
            self.horse_positions[horse.id] = position
            if position >= self.track_length:
                self.finished_horses.add(horse.id)
                self.horse_finish_times[horse.id] = round(elapsed, 2)

        frame = self._capture_frame(session, timestamp, elapsed, paused=False)

        if len(self.finished_horses) == len(session.horses):
            results = rank_results(session.horses, self.horse_finish_times)
            self._session_id = None
            if self.verbose:
                winner = results[0].horse_name if results else "nobody"
                print(f"[RaceAnimator] {session.name} finished after {elapsed:.2f}s, won by {winner}.")
            self._on_complete(session, results)
        else:
            self._schedule()
        self._publish(frame)

    def _elapsed(self, timestamp: float) -> float:
        return (timestamp - self.start_time - self.accumulated_pause_duration) / 1000.0

    def _schedule(self) -> None:
        self._frame_handle = self.clock.request_frame(self.on_frame)

    def _capture_frame(self, session: Session, timestamp: float, elapsed: float, paused: bool) -> Optional[AnimationFrame]:
        tick = self.tick_index
        self.tick_index += 1
        if self.telemetry is None and self._on_frame is None:
            return None
        return AnimationFrame(
            tick=tick,
            session_id=session.id,
            timestamp=timestamp,
            elapsed=max(0.0, elapsed),
            paused=paused,
            horses=[
                HorseFrame(
                    horse_id=horse.id,
                    name=horse.name,
                    position=self.horse_positions.get(horse.id, 0.0),
                    speed_factor=self.horse_speed_factors.get(horse.id, 0.0),
                    is_finished=horse.id in self.finished_horses,
                    finish_time=self.horse_finish_times.get(horse.id),
                )
                for horse in session.horses
            ],
        )

    def _publish(self, frame: Optional[AnimationFrame]) -> None:
        if frame is None:
            return
        if self.telemetry is not None:
            self.telemetry.record_frame(frame)
        if self._on_frame is not None:
            self._on_frame(frame)
