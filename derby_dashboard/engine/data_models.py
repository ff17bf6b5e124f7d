from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List


class RaceProgramError(Exception):
    """Base class for errors raised by the race program engine."""


class RaceNotFoundError(RaceProgramError, LookupError):
    """A round number or session id has no backing record."""


class InvalidTransitionError(RaceProgramError):
    """A lifecycle guard was violated (e.g. pausing a race that is not running)."""


class InsufficientHorsesError(RaceProgramError, ValueError):
    """The horse pool cannot supply a full roster."""


class InvalidResultsError(RaceProgramError, ValueError):
    """A results list does not cover the session's roster."""


class SessionStatus(Enum):
    """Lifecycle states derived from the running/paused/completed flags."""

    PENDING = "pending"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"

    @classmethod
    def from_str(cls, value: str) -> "SessionStatus":
        try:
            return cls(value.lower())
        except ValueError as exc:
            raise ValueError(f"Unknown session status: {value}") from exc


@dataclass(frozen=True)
class Horse:
    id: int
    name: str
    color: str
    condition_score: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "conditionScore": self.condition_score,
        }


@dataclass(frozen=True)
class RaceResult:
    horse_id: int
    horse_name: str
    finish_time: float
    position: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "horseId": self.horse_id,
            "horseName": self.horse_name,
            "finishTime": self.finish_time,
            "position": self.position,
        }


@dataclass
class Race:
    """Round-indexed race record kept for bulk, non-animated resolution."""

    round: int
    distance: int
    horses: List[Horse] = field(default_factory=list)
    results: List[RaceResult] = field(default_factory=list)
    is_completed: bool = False
    is_running: bool = False
    is_paused: bool = False

    @property
    def label(self) -> str:
        return f"Race round {self.round}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "round": self.round,
            "distance": self.distance,
            "horses": [horse.to_dict() for horse in self.horses],
            "results": [result.to_dict() for result in self.results],
            "isCompleted": self.is_completed,
            "isRunning": self.is_running,
            "isPaused": self.is_paused,
        }


@dataclass
class Session:
    """One race event of a generated program; mutated in place by the lifecycle."""

    id: int
    name: str
    distance: int
    horses: List[Horse] = field(default_factory=list)
    results: List[RaceResult] = field(default_factory=list)
    is_completed: bool = False
    is_running: bool = False
    is_paused: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def label(self) -> str:
        return f"Session {self.id}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "distance": self.distance,
            "horses": [horse.to_dict() for horse in self.horses],
            "results": [result.to_dict() for result in self.results],
            "isCompleted": self.is_completed,
            "isRunning": self.is_running,
            "isPaused": self.is_paused,
            "createdAt": self.created_at.isoformat(),
        }
