"""
Shared fixtures: synthetic candles, an in-memory market, an in-memory store, a
fake Realtime Database endpoint and an oracle client, the HTTP ones served by
httpx.MockTransport.
"""
import json
from typing import Callable, List

import httpx
import pytest

from adapters.firebase_rtdb import FirebaseTransport
from adapters.memory_kv import MemoryTransport
from models.schemas import Candle
from services.oracle import SignalOracleClient
from services.store import SignalStore

HOUR_MS = 3_600_000
START_TS = 1_700_000_000_000


def make_candles(closes: List[float], start_ts: int = START_TS, interval_ms: int = HOUR_MS,
                 spread: float = 1.0) -> List[Candle]:
    out = []
    for i, c in enumerate(closes):
        out.append(Candle(
            ts=start_ts + i * interval_ms,
            open=c,
            high=c + spread,
            low=c - spread,
            close=c,
            volume=100.0 + (i % 7) * 10.0,
        ))
    return out


def wave(n: int, base: float = 100.0) -> List[float]:
    pattern = [0.0, 2.0, 1.0, 5.0, 3.0, 4.0, 2.0, 6.0]
    return [base + pattern[i % len(pattern)] + i * 0.05 for i in range(n)]


class FakeMarket:
    def __init__(self, candles=None, price=100.0):
        self.candles = candles or []
        self.price = price
        self.candle_calls = 0
        self.price_calls = 0

    async def get_candles(self, symbol=None, interval="1h", limit=300):
        self.candle_calls += 1
        return list(self.candles)[-limit:]

    async def get_spot_price(self, symbol=None):
        self.price_calls += 1
        if isinstance(self.price, Exception):
            raise self.price
        return self.price

    async def aclose(self):
        pass


class FakeRealtimeDb:
    """Realtime Database REST endpoint backed by a MemoryTransport tree; records every request."""

    def __init__(self, auth: str = "secret"):
        self.auth = auth
        self.tree = MemoryTransport()
        self.requests = []

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append((request.method, request.url.path, dict(request.url.params)))
        if self.auth and request.url.params.get("auth") != self.auth:
            return httpx.Response(401, json={"error": "Permission denied"})
        if not request.url.path.endswith(".json"):
            return httpx.Response(404, json={"error": "Not found"})
        path = request.url.path[:-len(".json")]
        if request.method == "POST":
            return httpx.Response(200, json={"name": await self.tree.push(path, json.loads(request.content))})
        if request.method == "PUT":
            value = json.loads(request.content)
            await self.tree.set(path, value)
            return httpx.Response(200, json=value)
        if request.method == "DELETE":
            await self.tree.remove(path)
            return httpx.Response(200, json=None)
        return httpx.Response(200, json=await self.tree.get(path))

    def transport(self, db_url: str = "https://rtdb.test") -> FirebaseTransport:
        client = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        return FirebaseTransport(db_url, self.auth, client=client)


@pytest.fixture
def candles_factory() -> Callable[..., List[Candle]]:
    return make_candles


@pytest.fixture
def wave_closes() -> Callable[[int], List[float]]:
    return wave


@pytest.fixture
def fake_market():
    return FakeMarket(candles=make_candles(wave(250)), price=100.0)


@pytest.fixture
def transport():
    return MemoryTransport()


@pytest.fixture
def store(transport):
    return SignalStore(transport, symbol="BTCUSDT")


@pytest.fixture
def oracle_factory():
    """Build a SignalOracleClient answering with `answer` (dict) or `status`; records request bodies."""
    def _make(answer=None, status: int = 200, url: str = "https://oracle.test/signal"):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(json.loads(request.content))
            if status != 200:
                return httpx.Response(status, text="unavailable")
            return httpx.Response(200, json=answer)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        oracle = SignalOracleClient(url=url, client=client)
        oracle.calls = calls
        return oracle
    return _make


@pytest.fixture
def market_factory():
    return FakeMarket


@pytest.fixture
def rtdb():
    return FakeRealtimeDb()
