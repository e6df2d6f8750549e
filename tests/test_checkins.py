import asyncio

import pytest

from crowdscene.exceptions import AdmissionError
from crowdscene.services import CheckinService, LiveBroadcaster, RateGate


@pytest.fixture
def broadcaster():
    return LiveBroadcaster()


@pytest.fixture
def service(store, scorer, rate_clock, broadcaster):
    return CheckinService(store, scorer, RateGate.from_limits(clock=rate_clock), broadcaster)


async def test_check_in_records_scores_and_publishes(service, store, broadcaster):
    subscription = broadcaster.subscribe()

    result = await service.check_in("user-1", "venue-a")

    assert result.crowd == pytest.approx(1.0)
    assert result.venue_id == "venue-a"
    assert await store.checkins_since("venue-a", 0) != []
    message = await asyncio.wait_for(subscription.get(), timeout=1)
    assert message == {"event": "crowd:update", "data": {"venueId": "venue-a", "crowd": result.crowd}}


async def test_crowd_grows_with_each_checkin(service):
    first = await service.check_in("user-1", "venue-a")
    second = await service.check_in("user-2", "venue-a")
    assert second.crowd == pytest.approx(2.0)
    assert second.crowd > first.crowd
    assert second.id != first.id


async def test_rejected_checkin_is_not_stored_or_broadcast(service, store, broadcaster, rate_clock):
    for _ in range(3):
        await service.check_in("user-1", "venue-a")
    subscription = broadcaster.subscribe()

    with pytest.raises(AdmissionError):
        await service.check_in("user-1", "venue-a")

    assert len(await store.checkins_since("venue-a", 0)) == 3
    assert subscription.queue.empty()

    rate_clock.advance(1800)
    result = await service.check_in("user-1", "venue-a")
    assert result.crowd == pytest.approx(4.0)


async def test_concurrent_checkins_broadcast_in_acceptance_order(service, broadcaster):
    subscription = broadcaster.subscribe()

    results = await asyncio.gather(*(service.check_in(f"user-{i}", "venue-a") for i in range(5)))

    crowds = [(await subscription.get())["data"]["crowd"] for _ in range(5)]
    assert crowds == sorted(crowds)
    assert sorted(r.crowd for r in results) == pytest.approx([1.0, 2.0, 3.0, 4.0, 5.0])


async def test_venue_locks_are_released_after_checkins(service):
    await asyncio.gather(*(service.check_in("user-1", f"place-{i}") for i in range(20)))
    await asyncio.gather(*(service.check_in(f"user-{i}", "venue-a") for i in range(3)))

    assert service._venue_locks == {}


async def test_venue_lock_is_released_when_checkin_fails(service, store, monkeypatch):
    async def broken_append(user_id, venue_id):
        raise RuntimeError("disk full")

    monkeypatch.setattr(store, "append_checkin", broken_append)
    with pytest.raises(RuntimeError):
        await service.check_in("user-1", "venue-a")

    assert service._venue_locks == {}
