from __future__ import annotations

import random
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Set

from derby_dashboard.config import VERBOSE_DEFAULT
from derby_dashboard.engine import lifecycle
from derby_dashboard.engine.clock import FrameClock, ManualFrameClock
from derby_dashboard.engine.data_models import (
    InsufficientHorsesError,
    InvalidResultsError,
    Race,
    RaceNotFoundError,
    RaceResult,
    Session,
)
from derby_dashboard.engine.factory import (
    HORSES_PER_SESSION,
    RACE_DISTANCES,
    create_session,
    initialize_races,
    select_random_horses,
)
from derby_dashboard.engine.outcome import resolve_race
from derby_dashboard.engine.race_loop import RaceAnimator
from derby_dashboard.engine.telemetry import AnimationFrame, TelemetryCollector
from derby_dashboard.horse_registry import HorseRegistry


class ProgramEvent(Enum):
    PROGRAM_GENERATED = "program_generated"
    SESSION_SELECTED = "session_selected"
    SESSION_STARTED = "session_started"
    SESSION_PAUSED = "session_paused"
    SESSION_RESUMED = "session_resumed"
    SESSION_COMPLETED = "session_completed"
    PLAYBACK_STOPPED = "playback_stopped"
    PLAYBACK_FINISHED = "playback_finished"
    FRAME = "frame"
    RACES_CHANGED = "races_changed"


ProgramListener = Callable[[ProgramEvent, Any], None]


class RaceProgram:
    """
    Owns every session of the dashboard and the single animated playback.

    Two ways to run races live side by side:
      * sessions, addressed by id, animated frame by frame through
        start_all_races()/toggle_session_race() and chained automatically;
      * round-indexed races, resolved instantly through run_race()/run_all_races().

    Round operations raise RaceNotFoundError/InvalidTransitionError. The
    animated session operations quietly do nothing when there is no session
    they could apply to.
    """

    def __init__(
        self,
        registry: Optional[HorseRegistry] = None,
        clock: Optional[FrameClock] = None,
        rng: Optional[random.Random] = None,
        telemetry: Optional[TelemetryCollector] = None,
        distances: Sequence[int] = RACE_DISTANCES,
        horses_per_session: int = HORSES_PER_SESSION,
        verbose: Optional[bool] = None,
    ):
        self.registry = registry or HorseRegistry()
        self.clock = clock or ManualFrameClock()
        self.rng = rng or random.Random()
        self.distances = tuple(distances)
        self.horses_per_session = horses_per_session
        self.verbose = VERBOSE_DEFAULT if verbose is None else verbose

        self.sessions: List[Session] = []
        self.races: List[Race] = []
        self.current_round = 1
        self.current_session_id: Optional[int] = None
        self.active_race_session_id: Optional[int] = None

        self._next_session_id = 1
        self._listeners: List[ProgramListener] = []
        self.animator = RaceAnimator(
            self.clock,
            active_session=lambda: self.active_race_session,
            on_complete=self._on_animation_complete,
            rng=self.rng,
            telemetry=telemetry,
            on_frame=self._on_frame,
            verbose=self.verbose,
        )

    def __repr__(self):
        return (
            f"<RaceProgram | Sessions: {len(self.sessions)} | Current: {self.current_session_id} "
            f"| Active: {self.active_race_session_id}>"
        )

    # --- Observers ---

    def subscribe(self, listener: ProgramListener) -> Callable[[], None]:
        """Registers a listener called as listener(event, payload); returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: ProgramEvent, payload: Any = None) -> None:
        for listener in list(self._listeners):
            listener(event, payload)

    # --- Queries ---

    def get_session(self, session_id: Optional[int]) -> Optional[Session]:
        if session_id is None:
            return None
        return next((s for s in self.sessions if s.id == session_id), None)

    @property
    def current_session(self) -> Optional[Session]:
        return self.get_session(self.current_session_id)

    @property
    def active_race_session(self) -> Optional[Session]:
        return self.get_session(self.active_race_session_id)

    @property
    def horse_positions(self) -> Dict[int, float]:
        return self.animator.horse_positions

    @property
    def finished_horses(self) -> Set[int]:
        return self.animator.finished_horses

    def get_race(self, round_number: int) -> Optional[Race]:
        if 1 <= round_number <= len(self.races):
            return self.races[round_number - 1]
        return None

    def get_race_results(self, round_number: int) -> List[RaceResult]:
        race = self.get_race(round_number)
        return race.results if race else []

    # --- Program generation ---

    def generate_program(self) -> List[Session]:
        """
        Appends one freshly drawn session per configured distance.
        The pool is checked up front so a failed call adds nothing.
        """
        pool = self.registry.horses
        if len(pool) < self.horses_per_session:
            raise InsufficientHorsesError(
                f"Need {self.horses_per_session} horses per session, but only {len(pool)} are registered."
            )

        new_sessions = [
            create_session(self._allocate_session_id(), distance, select_random_horses(pool, self.horses_per_session, self.rng))
            for distance in self.distances
        ]
        self.sessions.extend(new_sessions)

        if self.current_session_id is None and new_sessions:
            self.current_session_id = new_sessions[0].id

        if self.verbose:
            ids = ", ".join(str(s.id) for s in new_sessions)
            print(f"[RaceProgram] Generated {len(new_sessions)} sessions (ids {ids}).")
        self._notify(ProgramEvent.PROGRAM_GENERATED, new_sessions)
        return new_sessions

    def set_current_session(self, session_id: int) -> None:
        self.current_session_id = session_id
        self._notify(ProgramEvent.SESSION_SELECTED, self.current_session)

    def _allocate_session_id(self) -> int:
        if self.sessions:
            self._next_session_id = max(self._next_session_id, max(s.id for s in self.sessions) + 1)
        session_id = self._next_session_id
        self._next_session_id += 1
        return session_id

    # --- Animated playback (sessions) ---

    def start_all_races(self) -> None:
        """Starts chained playback from the first incomplete session. No-op while one is already active."""
        if self.active_race_session is not None:
            return
        session = self._next_pending_session()
        if session is None:
            return
        self._activate(session)

    def toggle_session_race(self) -> None:
        """
        Single start/pause control: with nothing animating it starts program
        playback, otherwise it starts, pauses or resumes the active session.
        """
        session = self.active_race_session
        if session is None:
            self.start_all_races()
            return
        if session.is_completed:
            return
        if not session.is_running:
            self.start_session()
        elif session.is_paused:
            self.resume_session()
        else:
            self.pause_session()

    def start_session(self) -> None:
        session = self.active_race_session
        if session is None or not lifecycle.can_start(session):
            return
        lifecycle.start(session)
        self.animator.ensure_scheduled()
        self._notify(ProgramEvent.SESSION_STARTED, session)

    def pause_session(self) -> None:
        session = self.active_race_session
        if session is None or not lifecycle.can_pause(session):
            return
        lifecycle.pause(session)
        if self.verbose:
            print(f"[RaceProgram] {session.name} paused.")
        self._notify(ProgramEvent.SESSION_PAUSED, session)

    def resume_session(self) -> None:
        session = self.active_race_session
        if session is None or not lifecycle.can_resume(session):
            return
        lifecycle.resume(session)
        self.animator.ensure_scheduled()
        if self.verbose:
            print(f"[RaceProgram] {session.name} resumed.")
        self._notify(ProgramEvent.SESSION_RESUMED, session)

    def stop_race_animation(self) -> None:
        """Cancels the pending frame and leaves the active session paused where it stands."""
        session = self.active_race_session
        if session is None:
            return
        self.animator.stop()
        if lifecycle.can_pause(session):
            lifecycle.pause(session)
        self._notify(ProgramEvent.PLAYBACK_STOPPED, session)

    def complete_session(self, results: Sequence[RaceResult]) -> None:
        """
        Instant completion of the browsing selection, without animation or chaining.
        If that session happens to be animating, playback stops with it.
        Completed sessions keep their results.
        """
        session = self.current_session
        if session is None or session.is_completed:
            return
        if session.id == self.active_race_session_id:
            self.animator.reset()
            self.active_race_session_id = None
        lifecycle.complete(session, results)
        self._notify(ProgramEvent.SESSION_COMPLETED, session)

    def complete_active_race_session(self, results: Sequence[RaceResult]) -> None:
        """
        Finalizes the animated session, then chains to the next incomplete one.
        Results must cover the whole roster.
        """
        session = self.active_race_session
        if session is None:
            return
        if len(results) != len(session.horses):
            raise InvalidResultsError(
                f"{session.label} needs {len(session.horses)} results, got {len(results)}"
            )
        self.animator.stop()
        lifecycle.complete(session, results)
        if self.verbose:
            print(f"[RaceProgram] {session.name} completed.")
        self._notify(ProgramEvent.SESSION_COMPLETED, session)

        next_session = self._next_pending_session(exclude_id=session.id)
        if next_session is not None:
            self._activate(next_session)
            return

        self.active_race_session_id = None
        if self.verbose:
            print("[RaceProgram] No sessions left to run; playback finished.")
        self._notify(ProgramEvent.PLAYBACK_FINISHED, session)

    def _activate(self, session: Session) -> None:
        self.active_race_session_id = session.id
        lifecycle.start(session)
        self.animator.begin(session)
        self._notify(ProgramEvent.SESSION_STARTED, session)

    def _next_pending_session(self, exclude_id: Optional[int] = None) -> Optional[Session]:
        return next((s for s in self.sessions if not s.is_completed and s.id != exclude_id), None)

    def _on_animation_complete(self, session: Session, results: List[RaceResult]) -> None:
        if session.id == self.active_race_session_id:
            self.complete_active_race_session(results)

    def _on_frame(self, frame: AnimationFrame) -> None:
        self._notify(ProgramEvent.FRAME, frame)

    # --- Instant resolution (round-indexed races) ---

    def initialize_races(self) -> List[Race]:
        self.races = initialize_races(self.registry.horses, self.distances, self.horses_per_session, self.rng)
        self.current_round = 1
        self._notify(ProgramEvent.RACES_CHANGED, self.races)
        return self.races

    def reset_races(self) -> None:
        self.races = []
        self.current_round = 1
        self._notify(ProgramEvent.RACES_CHANGED, self.races)

    def _require_race(self, round_number: int) -> Race:
        race = self.get_race(round_number)
        if race is None:
            raise RaceNotFoundError(f"Race round {round_number} not found")
        return race

    def run_race(self, round_number: int) -> List[RaceResult]:
        """Resolves a round instantly. A completed round hands back its stored results untouched."""
        race = self._require_race(round_number)
        if race.is_completed:
            return race.results

        lifecycle.complete(race, resolve_race(race.horses, race.distance, self.rng))
        self.current_round = self._next_pending_round(default=race.round)
        if self.verbose and race.results:
            print(f"[RaceProgram] Round {race.round} ({race.distance}m) won by {race.results[0].horse_name}.")
        self._notify(ProgramEvent.RACES_CHANGED, race)
        return race.results

    def run_all_races(self) -> None:
        for race in self.races:
            if not race.is_completed:
                self.run_race(race.round)

    def start_race(self, round_number: int) -> None:
        lifecycle.start(self._require_race(round_number))

    def pause_race(self, round_number: int) -> None:
        lifecycle.pause(self._require_race(round_number))

    def resume_race(self, round_number: int) -> None:
        lifecycle.resume(self._require_race(round_number))

    def _next_pending_round(self, default: int) -> int:
        race = next((r for r in self.races if not r.is_completed), None)
        return race.round if race else default
