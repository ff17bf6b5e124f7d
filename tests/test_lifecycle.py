import pytest

from derby_dashboard.engine import InvalidTransitionError, Race, RaceResult, SessionStatus
from derby_dashboard.engine import lifecycle
from derby_dashboard.engine.factory import create_session


def _race(**flags) -> Race:
    return Race(round=1, distance=1200, **flags)


def test_status_is_derived_from_flags():
    assert lifecycle.status_of(_race()) is SessionStatus.PENDING
    assert lifecycle.status_of(_race(is_running=True)) is SessionStatus.RUNNING
    assert lifecycle.status_of(_race(is_running=True, is_paused=True)) is SessionStatus.PAUSED
    assert lifecycle.status_of(_race(is_completed=True)) is SessionStatus.COMPLETED


def test_session_status_from_str():
    assert SessionStatus.from_str("Paused") is SessionStatus.PAUSED
    with pytest.raises(ValueError):
        SessionStatus.from_str("finished")


def test_start_sets_running_and_clears_stale_pause():
    race = _race(is_paused=True)

    lifecycle.start(race)

    assert race.is_running is True
    assert race.is_paused is False


def test_start_rejects_completed_entry():
    with pytest.raises(InvalidTransitionError, match="Race round 1 has already been completed"):
        lifecycle.start(_race(is_completed=True))


def test_pause_requires_running():
    with pytest.raises(InvalidTransitionError, match="Race round 1 is not running"):
        lifecycle.pause(_race())


def test_pause_rejects_completed_entry_even_if_flagged_running():
    with pytest.raises(InvalidTransitionError, match="has already been completed"):
        lifecycle.pause(_race(is_completed=True, is_running=True))


def test_resume_requires_running():
    with pytest.raises(InvalidTransitionError, match="is not running"):
        lifecycle.resume(_race(is_paused=True))


def test_pause_then_resume():
    race = _race(is_running=True)

    lifecycle.pause(race)
    assert race.is_paused is True

    lifecycle.resume(race)
    assert race.is_paused is False
    assert race.is_running is True


def test_complete_stores_results_and_clears_flags():
    session = create_session(4, 1400, [])
    session.is_running = True
    session.is_paused = True
    results = [RaceResult(horse_id=1, horse_name="Test", finish_time=10.5, position=1)]

    lifecycle.complete(session, results)

    assert session.results == results
    assert session.is_completed is True
    assert session.is_running is False
    assert session.is_paused is False


def test_complete_is_terminal_and_keeps_first_results():
    session = create_session(4, 1400, [])
    results = [RaceResult(horse_id=1, horse_name="Test", finish_time=10.5, position=1)]
    lifecycle.complete(session, results)

    with pytest.raises(InvalidTransitionError, match="Session 4 has already been completed"):
        lifecycle.complete(session, [])

    assert session.results == results
    assert session.is_completed is True


def test_toggle_cycles_start_pause_resume():
    session = create_session(1, 1200, [])

    assert lifecycle.toggle(session) is SessionStatus.RUNNING
    assert lifecycle.toggle(session) is SessionStatus.PAUSED
    assert lifecycle.toggle(session) is SessionStatus.RUNNING


def test_toggle_leaves_completed_entry_alone():
    race = _race(is_completed=True)

    assert lifecycle.toggle(race) is SessionStatus.COMPLETED
    assert race.is_running is False


def test_session_errors_use_session_label():
    session = create_session(9, 1200, [])

    with pytest.raises(InvalidTransitionError, match="Session 9 is not running"):
        lifecycle.pause(session)
