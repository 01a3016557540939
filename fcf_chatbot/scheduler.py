# fcf_chatbot/scheduler.py
"""
Cancellable delayed callbacks for the "typing" pause before a bot reply.

TimerScheduler runs each callback on a daemon ``threading.Timer``.
ImmediateScheduler runs it inline, which is what a zero delay means.
"""

from __future__ import annotations

import threading
from typing import Callable, Protocol


class ScheduledHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledHandle: ...


class _DoneHandle:
    def cancel(self) -> None:
        return None


class TimerScheduler:
    def call_later(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


class ImmediateScheduler:
    def call_later(self, delay: float, callback: Callable[[], None]) -> _DoneHandle:
        callback()
        return _DoneHandle()


def scheduler_for(delay_ms: int) -> Scheduler:
    return TimerScheduler() if delay_ms > 0 else ImmediateScheduler()
