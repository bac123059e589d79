"""In-flight request coalescing for provider calls.

Responsibilities:
- Guarantee at most one provider call per cache key at any instant.
- Deliver the same settled outcome (value or exception) to every caller that
  joined the in-flight call.
- Release the key exactly once when the call settles so later calls retry.

Per-key lifecycle is `absent -> pending -> absent`; there is no resolved
resting state. Registration is an atomic insert-if-absent under a lock, so
two near-simultaneous misses for the same key cannot both start a call.
"""

from __future__ import annotations

from concurrent.futures import Future
from threading import Lock
from typing import Callable, Generic, TypeVar


T = TypeVar("T")


class RequestCoalescer(Generic[T]):
    """Process-local table of in-flight operations keyed by cache key."""

    def __init__(self) -> None:
        """Initialize an empty in-flight table."""

        self._in_flight: dict[str, Future] = {}
        self._lock = Lock()
        self.started = 0
        self.joined = 0

    def acquire_or_join(
        self,
        key: str,
        start: Callable[[], T],
        timeout: float | None = None,
    ) -> T:
        """Run `start` for `key`, or wait for the call already in flight.

        Args:
            key: Cache key identifying the operation.
            start: Zero-argument callable performing the provider call and cache write.
            timeout: Optional wait limit for joining callers. An expired wait raises
                `concurrent.futures.TimeoutError` for that caller only.

        Returns:
            The shared result of the single in-flight call.

        Raises:
            Exception: The identical exception raised by `start`, for every caller.
        """

        with self._lock:
            future = self._in_flight.get(key)
            is_owner = future is None
            if is_owner:
                future = Future()
                future.set_running_or_notify_cancel()
                self._in_flight[key] = future
                self.started += 1
            else:
                self.joined += 1

        if not is_owner:
            return future.result(timeout=timeout)

        try:
            result = start()
        except BaseException as exc:
            self._release(key, future)
            future.set_exception(exc)
            raise
        self._release(key, future)
        future.set_result(result)
        return result

    def is_in_flight(self, key: str) -> bool:
        """Return whether a call is currently pending for `key`."""

        with self._lock:
            return key in self._in_flight

    def in_flight_count(self) -> int:
        """Return the number of pending keys."""

        with self._lock:
            return len(self._in_flight)

    def _release(self, key: str, future: Future) -> None:
        """Remove the pending registration owned by `future`."""

        with self._lock:
            if self._in_flight.get(key) is future:
                del self._in_flight[key]
