import math

import pytest

from crowdscene.exceptions import ConfigurationError
from crowdscene.services.scoring import CUTOFF_FACTOR, DecayScorer, decayed_sum

from .conftest import HOUR_MS, TAU_MS


def test_decayed_sum_empty_is_zero():
    assert decayed_sum([], 1_000_000, TAU_MS) == 0


def test_decayed_sum_weights():
    t0 = 10 * HOUR_MS
    assert decayed_sum([t0], t0, TAU_MS) == pytest.approx(1.0)
    assert decayed_sum([t0], t0 + 2 * HOUR_MS, TAU_MS) == pytest.approx(math.exp(-1))
    assert decayed_sum([t0, t0], t0, TAU_MS) == pytest.approx(2.0)


def test_decayed_sum_ignores_events_outside_window():
    t0 = 100 * HOUR_MS
    # Exactly 8 * TAU old: outside the (as_of - 8*TAU, as_of] window
    assert decayed_sum([t0], t0 + CUTOFF_FACTOR * TAU_MS, TAU_MS) == 0
    # Stamped after as_of
    assert decayed_sum([t0 + 1], t0, TAU_MS) == 0


async def test_score_without_checkins_is_zero(scorer):
    assert await scorer.score("venue-without-checkins") == 0


async def test_decay_scenario(store, scorer, clock):
    t0 = clock()
    await store.append_checkin("user-1", "venue-v")

    assert await scorer.score("venue-v", t0) == pytest.approx(1.0)
    assert await scorer.score("venue-v", t0 + 2 * HOUR_MS) == pytest.approx(0.368, abs=0.001)
    assert await scorer.score("venue-v", t0 + 16 * HOUR_MS) == 0


async def test_score_defaults_to_now(store, scorer, clock):
    await store.append_checkin("user-1", "venue-v")
    clock.advance(2 * HOUR_MS)
    assert await scorer.score("venue-v") == pytest.approx(math.exp(-1))


async def test_score_non_increasing_then_jumps(store, scorer, clock):
    await store.append_checkin("user-1", "venue-v")

    previous = await scorer.score("venue-v")
    for _ in range(10):
        clock.advance(30 * 60 * 1000)
        current = await scorer.score("venue-v")
        assert current <= previous
        previous = current

    await store.append_checkin("user-2", "venue-v")
    assert await scorer.score("venue-v") > previous


async def test_scores_are_per_venue(store, scorer):
    await store.append_checkin("user-1", "venue-a")
    await store.append_checkin("user-1", "venue-a")
    await store.append_checkin("user-1", "venue-b")

    assert await scorer.score("venue-a") == pytest.approx(2.0)
    assert await scorer.score("venue-b") == pytest.approx(1.0)


def test_scorer_rejects_non_positive_tau(store):
    with pytest.raises(ConfigurationError):
        DecayScorer(store, 0)
    with pytest.raises(ConfigurationError):
        DecayScorer(store, -5)
