import threading
import time

import pytest

from podcast_client.client.api import ApiClient
from podcast_client.client.config import ClientConfig
from podcast_client.client.submitter import ProductionState
from podcast_client.events import (
    ApiConnected,
    CancelRequested,
    ClientEvent,
    ProductionCompleted,
    ProductionReset,
)

SERVER = "http://api.test"
HEALTH = SERVER + "/actuator/health"


def _wait_for(predicate, timeout=5):
    deadline = time.monotonic() + timeout
    while not predicate() and time.monotonic() < deadline:
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def client(session, tmp_path):
    api = ApiClient(
        SERVER + "/",
        session=session,
        monitor_interval=0.05,
        poll_interval=0.02,
        timeout=5,
        archive_dir=tmp_path / "archives",
    )
    events = []
    api.channel.subscribe(ClientEvent, events.append)
    api.events = events
    yield api
    api.close()


def _route_job(session, make_response, job, statuses):
    session.queue(
        "POST",
        f"{SERVER}/podcasts/{job}",
        make_response(202, headers={"Location": f"/podcasts/{job}/status"}),
    )
    session.queue("GET", f"{SERVER}/podcasts/{job}/status", *statuses)


def test_monitor_and_publish_end_to_end(client, session, make_response, media_files, tmp_path):
    session.queue("GET", HEALTH, make_response(200, {"status": "UP"}))
    _route_job(
        session,
        make_response,
        "job-1",
        [make_response(200, {}), make_response(200, {"media-url": f"{SERVER}/media/job-1.mp3"})],
    )
    session.queue("GET", f"{SERVER}/media/job-1.mp3", make_response(200, content=b"ID3" + b"\x00" * 100))

    client.start()
    assert _wait_for(lambda: any(isinstance(e, ApiConnected) for e in client.events))

    future = client.publish("Title", "Description", *media_files, job_id="job-1")
    outcome = future.result(timeout=10)

    assert future.job_id == "job-1"
    assert outcome.state is ProductionState.COMPLETED
    completed = [e for e in client.events if isinstance(e, ProductionCompleted)]
    assert [e.media_uri for e in completed] == [f"{SERVER}/media/job-1.mp3"]
    assert list((tmp_path / "archives").iterdir()) == []

    target = client.download_media(outcome.media_uri, tmp_path / "out" / "episode.mp3")
    assert target.read_bytes().startswith(b"ID3")
    assert not (tmp_path / "out" / "episode.mp3.part").exists()


def test_cancel_request_event_reaches_the_registry(client, session, make_response, media_files):
    _route_job(session, make_response, "job-2", [make_response(200, {})])

    future = client.publish("Title", "Description", *media_files, job_id="job-2")
    assert _wait_for(lambda: client.registry.is_active("job-2"))

    client.channel.publish(CancelRequested(job_id="job-2"))
    outcome = future.result(timeout=5)

    assert outcome.state is ProductionState.CANCELLED
    assert any(isinstance(e, ProductionReset) and e.job_id == "job-2" for e in client.events)


def test_publish_generates_job_ids(client, media_files):
    # no route is queued for the generated id, so the upload fails
    future = client.publish("Title", "Description", *media_files)
    outcome = future.result(timeout=5)

    assert outcome.job_id == future.job_id
    assert len(outcome.job_id) == 36
    assert outcome.state is ProductionState.FAILED


def test_close_cancels_outstanding_polls(session, make_response, media_files, tmp_path):
    api = ApiClient(SERVER, session=session, poll_interval=30, archive_dir=tmp_path / "archives")
    _route_job(session, make_response, "job-3", [make_response(200, {})])
    future = api.publish("Title", "Description", *media_files, job_id="job-3")
    assert _wait_for(lambda: api.registry.is_active("job-3"))

    api.close()

    assert future.result(timeout=1).state is ProductionState.CANCELLED
    assert session.closed


def test_from_config(session):
    config = ClientConfig(server_url="http://api.test", monitor_interval=7, poll_interval=3, max_workers=1)
    with ApiClient.from_config(config, session=session) as api:
        assert api.monitor_interval == 7
        assert api.submitter.poll_interval == 3
        assert api.monitor.health_url == HEALTH


def test_blank_server_url_is_rejected():
    with pytest.raises(ValueError):
        ApiClient(" ")


def test_default_poll_interval_is_ten_seconds(session):
    with ApiClient(SERVER, session=session) as api:
        assert api.submitter.poll_interval == 10


def test_close_during_upload_does_not_hang(session, make_response, media_files, tmp_path):
    api = ApiClient(SERVER, session=session, archive_dir=tmp_path / "archives")
    _route_job(session, make_response, "job-4", [make_response(200, {})])
    uploading = threading.Event()
    release = threading.Event()
    post = session.post

    def held_post(url, **kwargs):
        uploading.set()
        release.wait(5)
        return post(url, **kwargs)

    session.post = held_post
    future = api.publish("Title", "Description", *media_files, job_id="job-4")
    assert uploading.wait(5)

    closer = threading.Thread(target=api.close)
    closer.start()
    assert _wait_for(lambda: api.registry.closed)
    release.set()
    closer.join(timeout=5)

    assert not closer.is_alive()
    assert future.result(timeout=1).state is ProductionState.CANCELLED
    assert session.count("GET", f"{SERVER}/podcasts/job-4/status") == 0
    assert not api.registry.is_active("job-4")
    assert session.closed
