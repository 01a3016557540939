from __future__ import annotations

import threading

from fcf_chatbot.scheduler import ImmediateScheduler, TimerScheduler, scheduler_for


def test_scheduler_for_picks_by_delay():
    assert isinstance(scheduler_for(0), ImmediateScheduler)
    assert isinstance(scheduler_for(300), TimerScheduler)


def test_immediate_runs_inline():
    calls = []
    handle = ImmediateScheduler().call_later(5.0, lambda: calls.append("ran"))
    assert calls == ["ran"]
    handle.cancel()


def test_timer_fires_after_delay():
    done = threading.Event()
    TimerScheduler().call_later(0.01, done.set)
    assert done.wait(timeout=2)


def test_cancelled_timer_does_not_fire():
    fired = threading.Event()
    handle = TimerScheduler().call_later(0.2, fired.set)
    handle.cancel()
    assert not fired.wait(timeout=0.4)
