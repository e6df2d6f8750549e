import threading

import pytest

from crowdscene.exceptions import AdmissionError
from crowdscene.services.rate_gate import RateGate, SlidingWindowCounter


def test_counter_admits_up_to_limit(rate_clock):
    counter = SlidingWindowCounter(limit=3, window_sec=1800, clock=rate_clock)

    assert [counter.hit("u1:v1")[0] for _ in range(3)] == [True, True, True]
    admitted, retry_after = counter.hit("u1:v1")
    assert admitted is False
    assert retry_after == pytest.approx(1800)
    assert counter.remaining("u1:v1") == 0


def test_counter_window_slides(rate_clock):
    counter = SlidingWindowCounter(limit=2, window_sec=60, clock=rate_clock)
    counter.hit("ip")
    rate_clock.advance(30)
    counter.hit("ip")

    admitted, retry_after = counter.hit("ip")
    assert not admitted
    assert retry_after == pytest.approx(30)

    # The first hit leaves the window, the second is still inside it
    rate_clock.advance(30)
    assert counter.hit("ip")[0]
    assert not counter.hit("ip")[0]


def test_rejected_attempts_do_not_extend_the_window(rate_clock):
    counter = SlidingWindowCounter(limit=1, window_sec=10, clock=rate_clock)
    counter.hit("k")
    for _ in range(5):
        rate_clock.advance(1)
        assert not counter.hit("k")[0]
    rate_clock.advance(5)
    assert counter.hit("k")[0]


def test_counter_keys_are_independent(rate_clock):
    counter = SlidingWindowCounter(limit=1, window_sec=60, clock=rate_clock)
    assert counter.hit("a")[0]
    assert counter.hit("b")[0]
    assert not counter.hit("a")[0]


def test_idle_keys_are_swept_lazily(rate_clock):
    counter = SlidingWindowCounter(limit=1, window_sec=10, clock=rate_clock, sweep_threshold=2)
    for key in ("a", "b", "c"):
        counter.hit(key)
    assert len(counter) == 3

    rate_clock.advance(10)
    counter.hit("d")
    assert len(counter) == 1


def test_counter_is_atomic_under_threads():
    counter = SlidingWindowCounter(limit=10, window_sec=60)
    results = []
    barrier = threading.Barrier(50)

    def worker():
        barrier.wait()
        results.append(counter.hit("same-key")[0])

    threads = [threading.Thread(target=worker) for _ in range(50)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 10


def test_fourth_checkin_within_window_is_rejected(rate_clock):
    gate = RateGate.from_limits(clock=rate_clock)
    for _ in range(3):
        gate.admit_checkin("user-1", "venue-a")

    with pytest.raises(AdmissionError) as exc_info:
        gate.admit_checkin("user-1", "venue-a")
    assert "check-ins" in exc_info.value.detail
    assert exc_info.value.retry_after == pytest.approx(1800)

    # Other venues and other users are unaffected
    gate.admit_checkin("user-1", "venue-b")
    gate.admit_checkin("user-2", "venue-a")

    rate_clock.advance(1800)
    gate.admit_checkin("user-1", "venue-a")


def test_request_limit_per_ip(rate_clock):
    gate = RateGate.from_limits(clock=rate_clock)
    for _ in range(100):
        gate.admit_request("10.0.0.1")

    with pytest.raises(AdmissionError) as exc_info:
        gate.admit_request("10.0.0.1")
    assert exc_info.value.detail == "Too many requests"

    gate.admit_request("10.0.0.2")
    rate_clock.advance(60)
    gate.admit_request("10.0.0.1")
