"""Protocol for the cooperative timer source."""

from typing import Callable, Protocol


class TimerHandle(Protocol):
    """A scheduled callback that can still be cancelled."""

    def cancel(self) -> None:
        ...

    def cancelled(self) -> bool:
        ...


class Scheduler(Protocol):
    """Single-threaded timer source every delayed reaction goes through."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run callback after delay seconds on the same thread."""
        ...

    def time(self) -> float:
        """Monotonic time in seconds."""
        ...
