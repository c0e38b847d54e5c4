import threading
import time

import pytest

from travelbot.services.dispatcher import ReplyDispatcher


def wait_until(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


def test_runs_submitted_job():
    dispatcher = ReplyDispatcher(max_workers=2, max_pending=2)
    done = threading.Event()
    seen = []

    def job(chat_id, text):
        seen.append((chat_id, text))
        done.set()

    assert dispatcher.submit(job, 1, "hola")
    assert done.wait(2)
    dispatcher.shutdown(wait=True)
    assert seen == [(1, "hola")]


def test_rejects_beyond_capacity():
    dispatcher = ReplyDispatcher(max_workers=1, max_pending=1)
    gate = threading.Event()
    started = threading.Event()

    def blocking_job():
        started.set()
        gate.wait(5)

    assert dispatcher.submit(blocking_job)
    assert started.wait(2)
    assert dispatcher.submit(blocking_job)
    assert not dispatcher.submit(blocking_job)

    gate.set()
    dispatcher.shutdown(wait=True)


def test_capacity_is_released_after_jobs_finish():
    dispatcher = ReplyDispatcher(max_workers=1, max_pending=0)
    gate = threading.Event()

    assert dispatcher.submit(gate.wait, 5)
    assert not dispatcher.submit(lambda: None)
    gate.set()

    assert wait_until(lambda: dispatcher.submit(lambda: None))
    dispatcher.shutdown(wait=True)


def test_crashing_job_frees_its_slot(caplog):
    dispatcher = ReplyDispatcher(max_workers=1, max_pending=0)

    def boom():
        raise ValueError("boom")

    assert dispatcher.submit(boom)
    assert wait_until(lambda: dispatcher.submit(lambda: None))
    dispatcher.shutdown(wait=True)
    assert "Reply job crashed" in caplog.text


def test_submit_after_shutdown_is_refused():
    dispatcher = ReplyDispatcher(max_workers=1, max_pending=0)
    dispatcher.shutdown(wait=True)
    assert not dispatcher.submit(lambda: None)
    # The refused submit must not leak its slot.
    assert dispatcher._slots.acquire(blocking=False)


@pytest.mark.parametrize("workers, pending", [(0, 1), (1, -1)])
def test_invalid_limits(workers, pending):
    with pytest.raises(ValueError):
        ReplyDispatcher(max_workers=workers, max_pending=pending)


def test_shutdown_without_wait_drops_queued_jobs():
    dispatcher = ReplyDispatcher(max_workers=1, max_pending=2)
    gate = threading.Event()
    started = threading.Event()
    ran = []

    def blocking_job():
        started.set()
        gate.wait(5)
        ran.append("running")

    assert dispatcher.submit(blocking_job)
    assert started.wait(2)
    assert dispatcher.submit(ran.append, "queued")
    assert dispatcher.submit(ran.append, "queued")

    dispatcher.shutdown(wait=False)
    gate.set()
    dispatcher.shutdown(wait=True)
    assert ran == ["running"]
