"""MarketDataService against a mocked KuCoin REST API."""
import asyncio

import httpx
import pytest

from adapters.kucoin_common import KuCoinBaseAdapter
from services.market_data import MarketDataService
from utils.errors import DataUnavailableError


def _service(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return MarketDataService(KuCoinBaseAdapter("https://kucoin.test", client=client), "BTC-USDT")


def test_candles_sorted_oldest_first_and_trimmed():
    seen = {}

    def handler(request):
        seen.update(dict(request.url.params))
        rows = [
            [str(1_700_007_200), "3", "3.5", "4", "2", "30", "90"],
            [str(1_700_003_600), "2", "2.5", "3", "1", "20", "40"],
            [str(1_700_000_000), "1", "1.5", "2", "0.5", "10", "10"],
        ]
        return httpx.Response(200, json={"code": "200000", "data": rows})

    candles = asyncio.run(_service(handler).get_candles(interval="1h", limit=2))
    assert seen == {"type": "1hour", "symbol": "BTC-USDT"}
    assert [c.ts for c in candles] == [1_700_003_600_000, 1_700_007_200_000]
    last = candles[-1]
    assert (last.open, last.close, last.high, last.low, last.volume) == (3.0, 3.5, 4.0, 2.0, 30.0)


def test_duplicate_timestamps_are_collapsed():
    def handler(request):
        row = [str(1_700_000_000), "1", "1.5", "2", "0.5", "10", "10"]
        return httpx.Response(200, json={"code": "200000", "data": [row, row]})

    assert len(asyncio.run(_service(handler).get_candles())) == 1


def test_error_code_raises():
    def handler(request):
        return httpx.Response(200, json={"code": "400100", "msg": "bad symbol"})

    with pytest.raises(DataUnavailableError):
        asyncio.run(_service(handler).get_candles())


def test_http_failure_raises():
    def handler(request):
        return httpx.Response(503)

    with pytest.raises(DataUnavailableError):
        asyncio.run(_service(handler).get_spot_price())


def test_empty_candles_raise():
    def handler(request):
        return httpx.Response(200, json={"code": "200000", "data": []})

    with pytest.raises(DataUnavailableError):
        asyncio.run(_service(handler).get_candles())


def test_spot_price_from_level1():
    def handler(request):
        assert request.url.path == "/api/v1/market/orderbook/level1"
        return httpx.Response(200, json={"code": "200000", "data": {"price": "67123.4"}})

    assert asyncio.run(_service(handler).get_spot_price()) == 67123.4


def test_unknown_timeframe():
    with pytest.raises(ValueError):
        MarketDataService.kucoin_interval("7h")
    assert MarketDataService.interval_ms("5m") == 300_000
