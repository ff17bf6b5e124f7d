from __future__ import annotations

import random
from typing import List, Optional, Sequence

from derby_dashboard.config import get_config

from .data_models import Horse, InsufficientHorsesError, Race, Session

RACE_DISTANCES = tuple(get_config("program.race_distances", [1200, 1400, 1600, 1800, 2000, 2200]))
HORSES_PER_SESSION = int(get_config("program.horses_per_session", 10))


def select_random_horses(pool: Sequence[Horse], count: int, rng: Optional[random.Random] = None) -> List[Horse]:
    """
    Uniform sample without replacement.

    Raises InsufficientHorsesError instead of handing back a short roster.
    """
    if count > len(pool):
        raise InsufficientHorsesError(f"Need {count} horses for a roster, but only {len(pool)} are registered.")
    source = rng or random
    return source.sample(list(pool), count)


def session_name(session_id: int, distance: int) -> str:
    return f"Race {session_id} - {distance}m"


def create_session(session_id: int, distance: int, horses: Sequence[Horse]) -> Session:
    return Session(
        id=session_id,
        name=session_name(session_id, distance),
        distance=distance,
        horses=list(horses),
    )


def create_race(round_number: int, distance: int, horses: Sequence[Horse]) -> Race:
    return Race(round=round_number, distance=distance, horses=list(horses))


def initialize_races(
    pool: Sequence[Horse],
    distances: Sequence[int] = RACE_DISTANCES,
    count: int = HORSES_PER_SESSION,
    rng: Optional[random.Random] = None,
) -> List[Race]:
    """Builds the legacy round-indexed races: round i + 1 runs the i-th distance."""
    if count > len(pool):
        raise InsufficientHorsesError(f"Need {count} horses for a roster, but only {len(pool)} are registered.")
    return [
        create_race(index + 1, distance, select_random_horses(pool, count, rng))
        for index, distance in enumerate(distances)
    ]
