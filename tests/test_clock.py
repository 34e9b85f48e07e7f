import asyncio

import pytest

from fxportal.services.clock import LoopClock, require_positive_ms


@pytest.mark.asyncio
async def test_loop_clock_fires_and_cancels():
    clock = LoopClock()
    fired = []
    clock.after(5, lambda: fired.append("kept"))
    handle = clock.after(5, lambda: fired.append("cancelled"))
    handle.cancel()
    await asyncio.sleep(0.05)
    assert fired == ["kept"]


def test_require_positive_ms():
    assert require_positive_ms("delay", 1) == 1
    with pytest.raises(ValueError):
        require_positive_ms("delay", 0)
