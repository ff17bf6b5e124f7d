"""
Start/pause/resume/complete transitions shared by sessions and round races.

Every transition raises InvalidTransitionError when its guard fails. The
animated playback path checks the can_* predicates first and skips the call
instead, so only the round-indexed API surfaces these errors to callers.
"""
from __future__ import annotations

from typing import Sequence, Union

from .data_models import InvalidTransitionError, Race, RaceResult, Session, SessionStatus

LifecycleEntry = Union[Session, Race]


def status_of(entry: LifecycleEntry) -> SessionStatus:
    if entry.is_completed:
        return SessionStatus.COMPLETED
    if not entry.is_running:
        return SessionStatus.PENDING
    if entry.is_paused:
        return SessionStatus.PAUSED
    return SessionStatus.RUNNING


def can_start(entry: LifecycleEntry) -> bool:
    return not entry.is_completed


def can_pause(entry: LifecycleEntry) -> bool:
    return entry.is_running and not entry.is_completed


def can_resume(entry: LifecycleEntry) -> bool:
    return entry.is_running


def start(entry: LifecycleEntry) -> None:
    if entry.is_completed:
        raise InvalidTransitionError(f"{entry.label} has already been completed")
    entry.is_running = True
    entry.is_paused = False


def pause(entry: LifecycleEntry) -> None:
    if not entry.is_running:
        raise InvalidTransitionError(f"{entry.label} is not running")
    if entry.is_completed:
        raise InvalidTransitionError(f"{entry.label} has already been completed")
    entry.is_paused = True


def resume(entry: LifecycleEntry) -> None:
    if not entry.is_running:
        raise InvalidTransitionError(f"{entry.label} is not running")
    entry.is_paused = False


def complete(entry: LifecycleEntry, results: Sequence[RaceResult]) -> None:
    """Stores results once; a completed entry keeps the results it already has."""
    if entry.is_completed:
        raise InvalidTransitionError(f"{entry.label} has already been completed")
    entry.results = list(results)
    entry.is_completed = True
    entry.is_running = False
    entry.is_paused = False


def toggle(entry: LifecycleEntry) -> SessionStatus:
    """Start a pending entry, resume a paused one, pause a running one. Completed entries are left alone."""
    status = status_of(entry)
    if status is SessionStatus.PENDING:
        start(entry)
    elif status is SessionStatus.PAUSED:
        resume(entry)
    elif status is SessionStatus.RUNNING:
        pause(entry)
    return status_of(entry)
