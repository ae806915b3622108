from __future__ import annotations

import threading

from checkout.services.timer import RedirectTimer, thread_scheduler


def test_fires_once_after_delay(scheduler) -> None:
    calls = []
    timer = RedirectTimer(3, lambda: calls.append("go"), scheduler=scheduler)
    timer.start()
    timer.start()  # second start is ignored
    assert timer.pending

    scheduler.advance(3)
    scheduler.advance(3)
    assert calls == ["go"]
    assert not timer.pending


def test_cancel_before_fire(scheduler) -> None:
    calls = []
    timer = RedirectTimer(3, lambda: calls.append("go"), scheduler=scheduler)
    timer.start()
    timer.cancel()
    scheduler.advance(5)
    assert calls == []
    assert not timer.pending


def test_late_callback_after_cancel_is_ignored() -> None:
    captured = []
    calls = []

    def sched(delay, fn):
        captured.append(fn)
        return threading.Timer(delay, fn)  # never started

    timer = RedirectTimer(1, lambda: calls.append("go"), scheduler=sched)
    timer.start()
    timer.cancel()
    captured[0]()
    assert calls == []


def test_thread_scheduler_runs_callback() -> None:
    done = threading.Event()
    t = thread_scheduler(0.01, done.set)
    assert t.daemon
    assert done.wait(2)
