"""
Race engine package for the derby dashboard.

The package is split into data models, the outcome formula, the session
lifecycle, roster factories and the frame-driven animator. The program
orchestrator composes these pieces for the dashboard.
"""

from .clock import AsyncioFrameClock, FrameClock, ManualFrameClock  # noqa: F401
from .data_models import (  # noqa: F401
    Horse,
    InsufficientHorsesError,
    InvalidResultsError,
    InvalidTransitionError,
    Race,
    RaceNotFoundError,
    RaceProgramError,
    RaceResult,
    Session,
    SessionStatus,
)
from .outcome import calculate_finish_time, rank_results, resolve_race  # noqa: F401
from .factory import create_race, create_session, initialize_races, select_random_horses  # noqa: F401
from .telemetry import AnimationFrame, HorseFrame, TelemetryCollector  # noqa: F401
from .race_loop import BASE_SPEED, TRACK_LENGTH, RaceAnimator  # noqa: F401

__all__ = [
    "AsyncioFrameClock",
    "FrameClock",
    "ManualFrameClock",
    "Horse",
    "InsufficientHorsesError",
    "InvalidResultsError",
    "InvalidTransitionError",
    "Race",
    "RaceNotFoundError",
    "RaceProgramError",
    "RaceResult",
    "Session",
    "SessionStatus",
    "calculate_finish_time",
    "rank_results",
    "resolve_race",
    "create_race",
    "create_session",
    "initialize_races",
    "select_random_horses",
    "AnimationFrame",
    "HorseFrame",
    "TelemetryCollector",
    "BASE_SPEED",
    "TRACK_LENGTH",
    "RaceAnimator",
]
