"""Detached execution of cache side effects.

Responsibilities:
- Run cache writes and touches without blocking the translation result path.
- Funnel every failure to an error observer as `CacheWriteFailure`.
- Let callers wait for pending side effects (tests, CLI shutdown).
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, wait
from threading import Lock
from typing import Any, Callable

from .errors import CacheWriteFailure
from .telemetry.logger import EventLogger


CacheErrorObserver = Callable[[CacheWriteFailure], None]


class DetachedTaskRunner:
    """Thread-pool runner for fire-and-forget cache operations."""

    def __init__(
        self,
        max_workers: int = 2,
        on_error: CacheErrorObserver | None = None,
        logger: EventLogger | None = None,
        on_failure_counted: Callable[[], None] | None = None,
    ) -> None:
        """Initialize the worker pool and failure reporting hooks."""

        if max_workers <= 0:
            raise ValueError("`max_workers` must be a positive integer.")
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="cachedtranslate-cache",
        )
        self._on_error = on_error
        self._logger = logger or EventLogger()
        self._on_failure_counted = on_failure_counted
        self._pending: set[Future] = set()
        self._lock = Lock()

    def submit(
        self,
        operation: str,
        key: str | None,
        fn: Callable[..., Any],
        *args: Any,
    ) -> Future | None:
        """Start `fn(*args)` in the background and return its future.

        When the pool no longer accepts work the failure is reported like any
        other cache failure and `None` is returned.
        """

        try:
            future = self._executor.submit(self._run, operation, key, fn, *args)
        except RuntimeError as exc:
            failure = CacheWriteFailure(
                f"Cache `{operation}` could not be scheduled for key `{key}`: {exc}",
                operation=operation,
                key=key,
            )
            failure.__cause__ = exc
            self.report(failure)
            return None
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        return future

    def flush(self, timeout: float | None = None) -> None:
        """Block until every task submitted so far has finished."""

        with self._lock:
            pending = list(self._pending)
        if pending:
            wait(pending, timeout=timeout)

    def close(self) -> None:
        """Finish pending tasks and stop the worker pool."""

        self.flush()
        self._executor.shutdown(wait=True)

    def report(self, failure: CacheWriteFailure) -> None:
        """Log, count, and forward one cache failure to the error observer."""

        cause = failure.__cause__
        error_type = type(cause).__name__ if cause is not None else type(failure).__name__
        self._logger.cache_write_failure(failure.operation, failure.key, error_type)
        if self._on_failure_counted is not None:
            self._on_failure_counted()
        if self._on_error is None:
            return
        try:
            self._on_error(failure)
        except Exception as exc:
            self._logger.observer_failure("on_cache_error", type(exc).__name__)

    def _run(self, operation: str, key: str | None, fn: Callable[..., Any], *args: Any) -> None:
        """Execute one task and convert failures into reported `CacheWriteFailure`s."""

        try:
            fn(*args)
        except CacheWriteFailure as failure:
            self.report(failure)
        except Exception as exc:
            failure = CacheWriteFailure(
                f"Cache `{operation}` failed for key `{key}`: {exc}",
                operation=operation,
                key=key,
            )
            failure.__cause__ = exc
            self.report(failure)

    def _forget(self, future: Future) -> None:
        """Drop a finished future from the pending set."""

        with self._lock:
            self._pending.discard(future)
