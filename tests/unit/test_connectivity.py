import threading
import time

import pytest

from podcast_client.client.connectivity import ConnectivityMonitor
from podcast_client.events import ApiConnected, ApiDisconnected, ClientEvent, EventChannel

SERVER = "http://api.test"
HEALTH = SERVER + "/actuator/health"


@pytest.fixture
def recorded():
    channel = EventChannel()
    events = []
    channel.subscribe(ClientEvent, events.append)
    return channel, events


def _outcomes(make_response):
    return {
        "up": make_response(200, {"status": "UP"}),
        "down": make_response(200, {"status": "DOWN"}),
        "5xx": make_response(503, {"status": "UP"}),
        "garbage": make_response(200, text="<html>not json</html>"),
        "refused": ConnectionRefusedError("refused"),
    }


def test_events_fire_once_per_run(session, make_response, recorded):
    channel, events = recorded
    outcomes = _outcomes(make_response)
    sequence = ["down", "refused", "up", "up", "up", "refused", "garbage", "5xx", "up", "down", "down"]
    session.queue("GET", HEALTH, *(outcomes[name] for name in sequence), outcomes["down"])
    monitor = ConnectivityMonitor(SERVER, channel, session=session)

    results = [monitor.probe() for _ in sequence]

    assert results == [name == "up" for name in sequence]
    # initial state is disconnected, so the leading failures are silent
    assert [type(e) for e in events] == [ApiConnected, ApiDisconnected, ApiConnected, ApiDisconnected]
    assert all(e.status.server_url == SERVER for e in events)


def test_status_is_case_insensitive(session, make_response, recorded):
    channel, events = recorded
    session.queue("GET", HEALTH, make_response(200, {"status": "up"}))
    assert ConnectivityMonitor(SERVER, channel, session=session).probe() is True
    assert isinstance(events[0], ApiConnected)


def test_non_object_body_is_unhealthy(session, make_response, recorded):
    channel, events = recorded
    session.queue("GET", HEALTH, make_response(200, ["UP"]))
    assert ConnectivityMonitor(SERVER, channel, session=session).probe() is False
    assert events == []


def test_trailing_slash_is_stripped(session, recorded):
    channel, _ = recorded
    monitor = ConnectivityMonitor(SERVER + "/", channel, session=session)
    assert monitor.health_url == HEALTH


def test_start_checks_immediately_and_repeats(session, make_response, recorded):
    channel, events = recorded
    session.queue("GET", HEALTH, make_response(200, {"status": "UP"}))
    monitor = ConnectivityMonitor(SERVER, channel, session=session)

    monitor.start(0.01)
    try:
        deadline = time.monotonic() + 5
        while session.count("GET", HEALTH) < 3 and time.monotonic() < deadline:
            time.sleep(0.01)
    finally:
        monitor.stop(timeout=5)

    assert session.count("GET", HEALTH) >= 3
    assert not monitor.running
    assert [type(e) for e in events] == [ApiConnected]


def test_stop_interrupts_the_delay(session, make_response, recorded):
    channel, _ = recorded
    session.queue("GET", HEALTH, make_response(200, {"status": "UP"}))
    monitor = ConnectivityMonitor(SERVER, channel, session=session)
    monitor.start(60)
    deadline = time.monotonic() + 5
    while session.count("GET", HEALTH) < 1 and time.monotonic() < deadline:
        time.sleep(0.01)

    started = time.monotonic()
    monitor.stop(timeout=5)
    assert time.monotonic() - started < 5
    assert session.count("GET", HEALTH) == 1


class SlowHealthSession:
    """Holds each health request open and records how many overlap."""

    def __init__(self, make_response, delay=0.3):
        self.response = make_response(200, {"status": "UP"})
        self.delay = delay
        self.calls = 0
        self.in_flight = 0
        self.peak = 0
        self._lock = threading.Lock()

    def get(self, url, **kwargs):
        with self._lock:
            self.calls += 1
            self.in_flight += 1
            self.peak = max(self.peak, self.in_flight)
        try:
            time.sleep(self.delay)
            return self.response
        finally:
            with self._lock:
                self.in_flight -= 1


def test_restart_after_timed_out_stop_never_overlaps_requests(make_response, recorded):
    channel, _ = recorded
    slow = SlowHealthSession(make_response)
    monitor = ConnectivityMonitor(SERVER, channel, session=slow)

    monitor.start(0.01)
    deadline = time.monotonic() + 5
    while slow.in_flight == 0 and time.monotonic() < deadline:
        time.sleep(0.005)
    monitor.stop(timeout=0.01)
    monitor.start(0.01)
    try:
        deadline = time.monotonic() + 5
        while slow.calls < 3 and time.monotonic() < deadline:
            time.sleep(0.01)
    finally:
        monitor.stop(timeout=5)

    assert slow.calls >= 3
    assert slow.peak == 1
    assert not monitor.running
