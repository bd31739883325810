import asyncio
import time

import pytest

from app.main import ClientDisconnected, run_unless_disconnected
from app.services.search_service import SearchService

from tests.conftest import FakeTavily


class DisconnectingRequest:
    """Reports the client as gone after a short delay."""

    def __init__(self, delay: float = 0.1):
        self.delay = delay

    async def is_disconnected(self) -> bool:
        await asyncio.sleep(self.delay)
        return True


class ConnectedRequest:
    async def is_disconnected(self) -> bool:
        return False


class SlowTavily(FakeTavily):
    """Blocks the calling thread like the real TavilyClient does."""

    def __init__(self, seconds: float):
        super().__init__(payload={"results": [{"url": "u", "content": "c"}]})
        self.seconds = seconds

    def search(self, **kwargs):
        time.sleep(self.seconds)
        return super().search(**kwargs)


def test_disconnect_cancels_upstream_work():
    cancelled = []

    async def slow_upstream():
        try:
            await asyncio.sleep(5)
        except asyncio.CancelledError:
            cancelled.append(True)
            raise
        return "too late"

    async def scenario():
        with pytest.raises(ClientDisconnected):
            await run_unless_disconnected(DisconnectingRequest(0.1), slow_upstream())
        await asyncio.sleep(0.05)

    started = time.monotonic()
    asyncio.run(scenario())

    assert cancelled == [True]
    assert time.monotonic() - started < 2


def test_connected_client_gets_result():
    async def quick_upstream():
        await asyncio.sleep(0.01)
        return "answer"

    assert asyncio.run(run_unless_disconnected(ConnectedRequest(), quick_upstream())) == "answer"


def test_work_errors_propagate():
    async def broken_upstream():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        asyncio.run(run_unless_disconnected(ConnectedRequest(), broken_upstream()))


def test_blocking_searches_run_concurrently(settings):
    service = SearchService(settings, client=SlowTavily(0.5))

    async def scenario():
        return await asyncio.gather(*(service.search(f"latest {i}") for i in range(3)))

    started = time.monotonic()
    outcomes = asyncio.run(scenario())
    elapsed = time.monotonic() - started

    assert all(o.ok for o in outcomes)
    assert elapsed < 1.2
