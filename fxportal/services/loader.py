"""Resilient resource loader.

Wraps an async fetch operation with retries, supersession and derived
loading/error state. Used for the currency list and the payment history.

Design:
    - Every trigger (initial load, parameter change, refresh signal, manual
      reload) is posted to one FIFO mailbox and handled by a single reducer,
      so state transitions happen strictly in the order events were produced.
    - Each trigger starts a new generation. Fetch attempts and retry timers
      are tagged with the generation that issued them; anything that
      settles for an older generation is dropped without touching state.
      Superseded fetches are not aborted, only ignored.
    - A failed attempt is retried after ``retry_delay_ms`` until
      ``retry_count`` retries are used up. Only then does the loader report
      ``error`` and push one error notification. ``data`` keeps its last
      value on failure.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Deque, Generic, Optional, Set, TypeVar

from fxportal.core.logging import log_event
from fxportal.services.clock import Cancellable, Clock, require_positive_ms
from fxportal.services.notifications import NotificationCenter

T = TypeVar("T")

DEFAULT_RETRY_COUNT = 2
DEFAULT_RETRY_DELAY_MS = 1000

logger = logging.getLogger("fxportal.loader")


class LoadPhase(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class LoadState(Generic[T]):
    data: T
    loading: bool
    error: bool


# Mailbox events ---------------------------------------------
@dataclass(frozen=True)
class _Trigger:
    params: Any
    reason: str


@dataclass(frozen=True)
class _Settled:
    generation: int
    attempt: int
    value: Any = None
    failure: Optional[BaseException] = None


@dataclass(frozen=True)
class _RetryDue:
    generation: int
    attempt: int


class ResourceLoader(Generic[T]):
    """Load ``T`` through ``fetch(params)`` with retry and supersession.

    ``fetch`` raises on failure. The loader never raises to its caller; the
    outcome is observable through ``data``, ``loading`` and ``error``.
    """

    def __init__(
        self,
        name: str,
        fetch: Callable[[Any], Awaitable[T]],
        initial: T,
        *,
        clock: Clock,
        notifications: NotificationCenter,
        failure_message: str,
        retry_count: int = DEFAULT_RETRY_COUNT,
        retry_delay_ms: int = DEFAULT_RETRY_DELAY_MS,
    ):
        if retry_count < 0:
            raise ValueError("retry_count must not be negative")
        self.name = name
        self._fetch = fetch
        self._clock = clock
        self._notifications = notifications
        self._failure_message = failure_message
        self.retry_count = retry_count
        self.retry_delay_ms = require_positive_ms("retry_delay_ms", retry_delay_ms)

        self._data: T = initial
        self._phase = LoadPhase.IDLE
        self._params: Any = None
        self._generation = 0
        self._retry_timer: Optional[Cancellable] = None
        self._tasks: Set[asyncio.Task] = set()
        self._mailbox: Deque[object] = deque()
        self._draining = False
        self._closed = False

    # Derived state ----------------------------------------------
    @property
    def data(self) -> T:
        return self._data

    @property
    def phase(self) -> LoadPhase:
        return self._phase

    @property
    def loading(self) -> bool:
        return self._phase is LoadPhase.LOADING

    @property
    def error(self) -> bool:
        return self._phase is LoadPhase.FAILED

    @property
    def params(self) -> Any:
        return self._params

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def state(self) -> LoadState[T]:
        return LoadState(data=self._data, loading=self.loading, error=self.error)

    @property
    def max_attempts(self) -> int:
        return self.retry_count + 1

    # Triggers ---------------------------------------------------
    def load(self, params: Any = None, *, reason: str = "load") -> None:
        """Start a new fetch cycle for ``params``, superseding any in flight."""
        self._post(_Trigger(params=params, reason=reason))

    def reload(self) -> None:
        """Restart the fetch cycle with the current parameters."""
        self._post(_Trigger(params=self._params, reason="reload"))

    async def close(self) -> None:
        self._closed = True
        self._mailbox.clear()
        self._cancel_retry()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

    # Mailbox ----------------------------------------------------
    def _post(self, event: object) -> None:
        if self._closed:
            return
        self._mailbox.append(event)
        if self._draining:
            return
        self._draining = True
        try:
            while self._mailbox:
                self._reduce(self._mailbox.popleft())
        finally:
            self._draining = False

    def _reduce(self, event: object) -> None:
        if isinstance(event, _Trigger):
            self._on_trigger(event)
        elif isinstance(event, _Settled):
            self._on_settled(event)
        elif isinstance(event, _RetryDue):
            self._on_retry_due(event)
        else:  # pragma: no cover
            raise TypeError(f"unknown loader event {event!r}")

    # Reducer ----------------------------------------------------
    def _on_trigger(self, event: _Trigger) -> None:
        self._cancel_retry()
        self._generation += 1
        self._params = event.params
        self._phase = LoadPhase.LOADING
        log_event(
            logger,
            "loader.fetch",
            "fetch cycle started",
            level=logging.DEBUG,
            loader=self.name,
            generation=self._generation,
            reason=event.reason,
            params=event.params,
        )
        self._start_attempt(self._generation, 1)

    def _on_settled(self, event: _Settled) -> None:
        if event.generation != self._generation:
            log_event(
                logger,
                "loader.discard",
                "discarded superseded response",
                level=logging.DEBUG,
                loader=self.name,
                generation=event.generation,
                current=self._generation,
            )
            return
        if event.failure is None:
            self._data = event.value
            self._phase = LoadPhase.SUCCESS
            return
        if event.attempt < self.max_attempts:
            log_event(
                logger,
                "loader.retry",
                "fetch attempt failed; retry scheduled",
                level=logging.WARNING,
                loader=self.name,
                generation=event.generation,
                attempt=event.attempt,
                delay_ms=self.retry_delay_ms,
                failure=repr(event.failure),
            )
            due = _RetryDue(generation=event.generation, attempt=event.attempt + 1)
            self._retry_timer = self._clock.after(
                self.retry_delay_ms, lambda: self._post(due)
            )
            return
        self._phase = LoadPhase.FAILED
        log_event(
            logger,
            "loader.exhausted",
            "fetch failed after all attempts",
            level=logging.ERROR,
            loader=self.name,
            generation=event.generation,
            attempts=event.attempt,
            failure=repr(event.failure),
        )
        self._notifications.show_error(self._failure_message)

    def _on_retry_due(self, event: _RetryDue) -> None:
        self._retry_timer = None
        if event.generation != self._generation:
            return
        self._start_attempt(event.generation, event.attempt)

    # Effects ----------------------------------------------------
    def _start_attempt(self, generation: int, attempt: int) -> None:
        params = self._params
        task = asyncio.get_running_loop().create_task(
            self._attempt(generation, attempt, params)
        )
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            # fetch failures are handled in _attempt; this is a reducer fault
            logger.error("loader %s task failed", self.name, exc_info=exc)

    async def _attempt(self, generation: int, attempt: int, params: Any) -> None:
        try:
            value = await self._fetch(params)
        except Exception as exc:  # every failure counts against the retry budget
            self._post(_Settled(generation=generation, attempt=attempt, failure=exc))
            return
        self._post(_Settled(generation=generation, attempt=attempt, value=value))

    def _cancel_retry(self) -> None:
        if self._retry_timer is not None:
            self._retry_timer.cancel()
            self._retry_timer = None
