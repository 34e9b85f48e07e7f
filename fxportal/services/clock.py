"""Timer capability shared by the resource loader and the notification center.

``Clock.after`` schedules a callback and returns a handle whose ``cancel()``
removes it without side effects. ``LoopClock`` schedules on the running
asyncio loop; tests substitute a manually advanced clock.
"""
from __future__ import annotations

import asyncio
from typing import Callable, Protocol


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Clock(Protocol):
    def after(self, delay_ms: int, callback: Callable[[], None]) -> Cancellable: ...


def require_positive_ms(name: str, value: int) -> int:
    if value <= 0:
        raise ValueError(f"{name} must be positive milliseconds")
    return value


class LoopClock:
    def after(self, delay_ms: int, callback: Callable[[], None]) -> Cancellable:
        require_positive_ms("delay", delay_ms)
        loop = asyncio.get_running_loop()
        return loop.call_later(delay_ms / 1000.0, callback)
