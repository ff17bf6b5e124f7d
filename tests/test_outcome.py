import random
from statistics import mean

import pytest

from derby_dashboard.engine import Horse, calculate_finish_time, rank_results, resolve_race


class FixedRandom:
    """Stands in for random.Random with a constant draw."""

    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


def _horse(horse_id: int, condition: int) -> Horse:
    return Horse(id=horse_id, name=f"Horse {horse_id}", color="#000000", condition_score=condition)


def test_finish_time_formula_with_midpoint_draw():
    # random factor 0.9 + 0.5 * 0.2 = 1.0; condition factor 2 - 0.5 = 1.5
    assert calculate_finish_time(_horse(1, 50), 1600, rng=FixedRandom(0.5)) == pytest.approx(24.0)


def test_finish_time_formula_with_lowest_draw():
    assert calculate_finish_time(_horse(1, 100), 2000, rng=FixedRandom(0.0)) == pytest.approx(18.0)


def test_finish_time_is_rounded_to_two_decimals():
    value = calculate_finish_time(_horse(1, 37), 1400, rng=random.Random(3))

    assert value == round(value, 2)


def test_finish_time_stays_within_random_bounds():
    rng = random.Random(5)
    horse = _horse(1, 100)

    times = [calculate_finish_time(horse, 1200, rng=rng) for _ in range(500)]

    assert min(times) >= 10.8
    assert max(times) <= 13.2


def test_lower_condition_is_slower_for_the_same_draw():
    fast = calculate_finish_time(_horse(1, 90), 1800, rng=FixedRandom(0.3))
    slow = calculate_finish_time(_horse(2, 10), 1800, rng=FixedRandom(0.3))

    assert fast < slow


def test_high_condition_horse_is_stochastically_faster():
    rng = random.Random(2024)
    strong = _horse(1, 100)
    weak = _horse(2, 1)

    strong_times = [calculate_finish_time(strong, 1200, rng=rng) for _ in range(200)]
    weak_times = [calculate_finish_time(weak, 1200, rng=rng) for _ in range(200)]

    assert mean(strong_times) < mean(weak_times)


def test_rank_results_orders_by_finish_time_and_assigns_positions():
    horses = [_horse(1, 50), _horse(2, 50), _horse(3, 50)]
    times = {1: 14.2, 2: 12.9, 3: 13.5}

    results = rank_results(horses, times)

    assert [r.horse_id for r in results] == [2, 3, 1]
    assert [r.position for r in results] == [1, 2, 3]
    assert [r.finish_time for r in results] == [12.9, 13.5, 14.2]
    assert results[0].horse_name == "Horse 2"


def test_rank_results_keeps_roster_order_for_ties():
    horses = [_horse(7, 50), _horse(3, 50), _horse(9, 50)]
    times = {7: 13.0, 3: 12.0, 9: 13.0}

    results = rank_results(horses, times)

    assert [r.horse_id for r in results] == [3, 7, 9]
    assert [r.position for r in results] == [1, 2, 3]


def test_resolve_race_returns_a_full_permutation_of_positions():
    horses = [_horse(i, i * 9) for i in range(1, 11)]

    results = resolve_race(horses, 2200, rng=random.Random(9))

    assert sorted(r.position for r in results) == list(range(1, 11))
    assert {r.horse_id for r in results} == {h.id for h in horses}
    finish_times = [r.finish_time for r in results]
    assert finish_times == sorted(finish_times)
