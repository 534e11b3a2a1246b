"""
Debounce primitive.

A Debouncer exposes a *settled* value that follows its input only after the
input has stayed unchanged for `delay_ms`. Every change cancels the pending
timer and starts a new one. Timers go through a scheduler with asyncio's
`call_later` signature, so tests can drive time by hand.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any, Generic, Protocol, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_DELAY_MS = 500


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...


class Debouncer(Generic[T]):
    """
    Delay propagation of a rapidly changing value.

    Args:
        value:     Initial value; it is the settled value straight away.
        delay_ms:  Quiet period before a change settles (>= 0).
        on_settle: Called with the new settled value whenever it changes.
        scheduler: Object with call_later(); defaults to the running loop.
    """

    def __init__(
        self,
        value: T,
        delay_ms: int = DEFAULT_DELAY_MS,
        *,
        on_settle: Callable[[T], None] | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        if delay_ms < 0:
            raise ValueError("delay_ms must be >= 0")
        self._value = value
        self._pending_value = value
        self._delay_ms = delay_ms
        self._on_settle = on_settle
        self._scheduler = scheduler
        self._handle: TimerHandle | None = None
        self._closed = False

    @property
    def value(self) -> T:
        """The settled value."""
        return self._value

    @property
    def delay_ms(self) -> int:
        return self._delay_ms

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def update(self, value: T, delay_ms: int | None = None) -> None:
        """
        Feed a new input value (and optionally a new delay).

        A change to either restarts the timer; an identical update is a no-op.
        """
        if self._closed:
            return
        if delay_ms is not None and delay_ms < 0:
            raise ValueError("delay_ms must be >= 0")

        delay_changed = delay_ms is not None and delay_ms != self._delay_ms
        if not delay_changed and value == self._pending_value:
            return

        if delay_ms is not None:
            self._delay_ms = delay_ms
        self._pending_value = value
        self._cancel()
        # delay 0 still settles on the next loop turn, never inline
        self._handle = self._get_scheduler().call_later(
            self._delay_ms / 1000,
            self._settle,
        )

    def close(self) -> None:
        """Cancel any outstanding timer. Safe to call more than once."""
        self._closed = True
        self._cancel()

    def _get_scheduler(self) -> Scheduler:
        if self._scheduler is None:
            self._scheduler = asyncio.get_running_loop()
        return self._scheduler

    def _cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _settle(self) -> None:
        self._handle = None
        if self._closed:
            return
        previous, self._value = self._value, self._pending_value
        if self._on_settle is not None and previous != self._value:
            self._on_settle(self._value)
