from __future__ import annotations

from typing import Dict, List, Optional, Set

import numpy as np

from derby_dashboard.config import get_config
from derby_dashboard.engine.data_models import Horse

DEFAULT_HORSE_NAMES = [
    'Thunder', 'Lightning', 'Storm', 'Blaze', 'Shadow',
    'Spirit', 'Comet', 'Star', 'Midnight', 'Phoenix',
    'Apollo', 'Zeus', 'Atlas', 'Titan', 'Hercules',
    'Maverick', 'Rebel', 'Champion', 'Victory', 'Legend',
]

DEFAULT_HORSE_COLORS = [
    '#8B4513', '#000000', '#D2691E', '#808080', '#FFD700',
    '#C19A6B', '#CD853F', '#B8860B', '#A52A2A', '#FFFFFF',
    '#4A2511', '#2F1B0C', '#654321', '#8B7355', '#964B00',
    '#E97451', '#BC8F8F', '#F4A460', '#DEB887', '#D2B48C',
]

HORSE_NAMES = list(get_config('horses.names', DEFAULT_HORSE_NAMES))
HORSE_COLORS = list(get_config('horses.colors', DEFAULT_HORSE_COLORS))
INITIAL_HORSE_COUNT = int(get_config('horses.initial_count', 20))
MAX_GENERATED_ID = int(get_config('horses.max_generated_id', 1_000_000))

MIN_CONDITION_SCORE = 1
MAX_CONDITION_SCORE = 100


class HorseRegistry:
    """
    Owns the pool of horses a program draws its rosters from.

    Ids are never reused: the initial pool takes 1..N, and every id handed
    out by generate_unique_id() is remembered even if no horse claims it.
    """

    def __init__(self, initial_count: int = INITIAL_HORSE_COUNT, rng: Optional[np.random.Generator] = None):
        self._rng = rng if rng is not None else np.random.default_rng()
        self._horses: List[Horse] = []
        self._by_id: Dict[int, Horse] = {}
        self._issued_ids: Set[int] = set()
        self._generate_initial_pool(initial_count)

    def __repr__(self):
        return f"<HorseRegistry | Horses: {len(self._horses)}>"

    @property
    def horses(self) -> List[Horse]:
        return list(self._horses)

    def __len__(self) -> int:
        return len(self._horses)

    def get_horse(self, horse_id: int) -> Optional[Horse]:
        return self._by_id.get(horse_id)

    def generate_unique_id(self) -> int:
        """Random id in [0, MAX_GENERATED_ID) that no horse or earlier call has used."""
        if len(self._issued_ids) >= MAX_GENERATED_ID:
            raise RuntimeError("Horse id space exhausted.")
        while True:
            candidate = int(self._rng.integers(0, MAX_GENERATED_ID))
            if candidate not in self._issued_ids:
                self._issued_ids.add(candidate)
                return candidate

    def add_horse(self, name: str, color: str) -> Horse:
        """Registers a horse with the given name and color and a freshly rolled condition score."""
        horse = Horse(
            id=self.generate_unique_id(),
            name=name,
            color=color,
            condition_score=self._roll_condition_score(),
        )
        self._register(horse)
        return horse

    def _generate_initial_pool(self, count: int) -> None:
        used_names: Set[str] = set()
        for i in range(count):
            name = HORSE_NAMES[i % len(HORSE_NAMES)]
            if name in used_names:
                name = f"{name} {i // len(HORSE_NAMES) + 1}"
            used_names.add(name)

            horse_id = i + 1
            self._issued_ids.add(horse_id)
            self._register(
                Horse(
                    id=horse_id,
                    name=name,
                    color=self._roll_color(),
                    condition_score=self._roll_condition_score(),
                )
            )

    def _register(self, horse: Horse) -> None:
        self._horses.append(horse)
        self._by_id[horse.id] = horse

    def _roll_color(self) -> str:
        return HORSE_COLORS[int(self._rng.integers(0, len(HORSE_COLORS)))]

    def _roll_condition_score(self) -> int:
        return int(self._rng.integers(MIN_CONDITION_SCORE, MAX_CONDITION_SCORE + 1))
