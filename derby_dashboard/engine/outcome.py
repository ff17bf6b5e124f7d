from __future__ import annotations

import random
from typing import Dict, List, Optional, Sequence

from derby_dashboard.config import get_config

from .data_models import Horse, RaceResult

RANDOM_FACTOR_MIN = float(get_config("outcome.random_factor_min", 0.9))
RANDOM_FACTOR_MAX = float(get_config("outcome.random_factor_max", 1.1))


def calculate_finish_time(horse: Horse, distance: float, rng: Optional[random.Random] = None) -> float:
    """
    Returns the instant-resolve finish time in seconds (2 decimals).

    A lower condition score gives a larger, slower multiplier:
    condition 100 -> 1.0, condition 1 -> 1.99.
    """
    source = rng or random
    base_time = distance / 100
    random_factor = RANDOM_FACTOR_MIN + source.random() * (RANDOM_FACTOR_MAX - RANDOM_FACTOR_MIN)
    condition_factor = 2 - (horse.condition_score / 100)
    return round(base_time * condition_factor * random_factor, 2)


def rank_results(horses: Sequence[Horse], finish_time_by_horse_id: Dict[int, float]) -> List[RaceResult]:
    """Orders horses by finish time; equal times keep roster order (sorted() is stable)."""
    ordered = sorted(horses, key=lambda horse: finish_time_by_horse_id[horse.id])
    return [
        RaceResult(
            horse_id=horse.id,
            horse_name=horse.name,
            finish_time=finish_time_by_horse_id[horse.id],
            position=position,
        )
        for position, horse in enumerate(ordered, start=1)
    ]


def resolve_race(horses: Sequence[Horse], distance: float, rng: Optional[random.Random] = None) -> List[RaceResult]:
    finish_times = {horse.id: calculate_finish_time(horse, distance, rng) for horse in horses}
    return rank_results(horses, finish_times)
