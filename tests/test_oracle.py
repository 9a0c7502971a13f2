"""SignalOracleClient request shape and failure mapping."""
import asyncio

import httpx
import pytest

from services.oracle import SignalOracleClient
from utils.errors import OracleUnavailableError


def test_posts_features_and_threshold(oracle_factory):
    oracle = oracle_factory({"signal": "CALL", "probability": 0.81, "tp_pct": 0.015, "threshold": 0.7})
    d = asyncio.run(oracle.decide({"rsi14": 55.0}, 0.7))
    assert oracle.calls == [{"features": {"rsi14": 55.0}, "threshold": 0.7}]
    assert d.signal == "CALL"
    assert d.tradeable
    assert d.probability == 0.81
    assert d.tp_pct == 0.015
    assert d.sl_pct is None
    assert d.raw["tp_pct"] == 0.015


def test_no_trade(oracle_factory):
    d = asyncio.run(oracle_factory({"signal": "NO-TRADE"}).decide({}, 0.7))
    assert not d.tradeable
    assert d.raw == {"signal": "NO-TRADE"}


def test_non_success_status(oracle_factory):
    with pytest.raises(OracleUnavailableError):
        asyncio.run(oracle_factory(status=502).decide({}, 0.7))


def test_unknown_side_is_rejected(oracle_factory):
    with pytest.raises(OracleUnavailableError):
        asyncio.run(oracle_factory({"signal": "MAYBE"}).decide({}, 0.7))


def test_non_json_body():
    def handler(request):
        return httpx.Response(200, text="<html>")

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    with pytest.raises(OracleUnavailableError):
        asyncio.run(SignalOracleClient("https://oracle.test/signal", client=client).decide({}, 0.7))


def test_network_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    with pytest.raises(OracleUnavailableError):
        asyncio.run(SignalOracleClient("https://oracle.test/signal", client=client).decide({}, 0.7))
