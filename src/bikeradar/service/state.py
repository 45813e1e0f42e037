from __future__ import annotations

from enum import Enum
import logging
import threading
from typing import Callable, Generic, Optional, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")

# A dispatcher runs a notification on the consumer's context (UI loop, event loop, ...).
Dispatcher = Callable[[Callable[[], None]], None]


def call_now(fn: Callable[[], None]) -> None:
    fn()


class FetchStatus(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class Observable(Generic[T]):
    """
    Latest-value holder with subscribers.

    `publish` replaces the value and schedules one notification per subscriber through the
    dispatcher, so observers run on the consumer's context rather than on the fetching thread.
    """

    def __init__(self, initial: T, *, dispatcher: Optional[Dispatcher] = None) -> None:
        self._value = initial
        self._dispatcher = dispatcher or call_now
        self._subscribers: list[Callable[[T], None]] = []
        self._lock = threading.Lock()

    @property
    def value(self) -> T:
        return self._value

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, value: T) -> None:
        with self._lock:
            self._value = value
            subscribers = list(self._subscribers)
        for callback in subscribers:
            self._dispatcher(lambda cb=callback: cb(value))
