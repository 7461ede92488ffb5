"""Debounce and throttle helpers built on the scheduler port."""

from typing import Callable, Optional

from ..ports.scheduler import Scheduler, TimerHandle


class Debouncer:
    """Runs the callback once, delay seconds after the last trigger."""

    def __init__(self, scheduler: Scheduler, delay: float, callback: Callable[[], None]):
        self._scheduler = scheduler
        self._delay = delay
        self._callback = callback
        self._handle: Optional[TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        self.cancel()
        self._handle = self._scheduler.call_later(self._delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self._callback()


class Throttle:
    """Runs the callback at most once per interval.

    The first trigger fires immediately; triggers inside the window collapse
    into one trailing call at its end so the final state is never missed.
    """

    def __init__(self, scheduler: Scheduler, interval: float, callback: Callable[[], None]):
        self._scheduler = scheduler
        self._interval = interval
        self._callback = callback
        self._window: Optional[TimerHandle] = None
        self._trailing = False

    @property
    def pending(self) -> bool:
        return self._window is not None

    def trigger(self) -> None:
        if self._window is not None:
            self._trailing = True
            return
        self._callback()
        self._window = self._scheduler.call_later(self._interval, self._close_window)

    def cancel(self) -> None:
        if self._window is not None:
            self._window.cancel()
            self._window = None
        self._trailing = False

    def _close_window(self) -> None:
        self._window = None
        if self._trailing:
            self._trailing = False
            self.trigger()
