"""SignalStore over the memory, SQL and Firebase transports, plus push-id ordering."""
import asyncio

import pytest

from adapters.memory_kv import MemoryTransport
from adapters.sql_kv import SqlTransport, flatten, unflatten
from models.db import make_engine
from models.schemas import Signal
from services.store import SignalStore
from utils.errors import PersistenceError
from utils.push_id import generate_push_id


def _signal(**kw):
    base = dict(
        symbol="BTCUSDT", timeframe="1h", side="CALL", probability=0.8, threshold=0.7,
        entry_price=100.0, tp_price=101.0, sl_price=98.0, tp_pct=0.01, sl_pct=0.02,
        leverage=20, status="OPEN", time_open="2026-01-01T00:00:00+00:00", last_price=100.0,
        features={"rsi14": 55.5, "ema9_gt_ema20": 1.0}, source="https://oracle.test/signal",
    )
    base.update(kw)
    return Signal(**base)


@pytest.fixture(params=["memory", "sql", "firebase"])
def any_store(request, tmp_path):
    if request.param == "memory":
        transport = MemoryTransport()
    elif request.param == "firebase":
        transport = request.getfixturevalue("rtdb").transport()
    else:
        transport = SqlTransport(make_engine(f"sqlite:///{tmp_path / 'signals.db'}"))
    yield SignalStore(transport, symbol="BTCUSDT")
    asyncio.run(transport.aclose())


def test_append_then_read_back(any_store):
    async def go():
        sid = await any_store.append(_signal())
        return sid, await any_store.get_open(sid), await any_store.list_open()
    sid, back, listed = asyncio.run(go())
    assert back == _signal()
    assert list(listed) == [sid]


def test_move_to_closed(any_store):
    async def go():
        sid = await any_store.append(_signal())
        await any_store.set_last_price(sid, 101.5)
        opened = await any_store.get_open(sid)
        await any_store.write_closed(sid, opened.model_copy(update={"status": "CLOSED", "reason": "TP"}))
        await any_store.remove_open(sid)
        return sid, opened, await any_store.list_open_raw(), await any_store.get_closed(sid)
    sid, opened, open_raw, closed = asyncio.run(go())
    assert opened.last_price == 101.5
    assert open_raw == {}
    assert closed.status == "CLOSED"
    assert closed.reason == "TP"
    assert closed.features == {"rsi14": 55.5, "ema9_gt_ema20": 1.0}


def test_concurrent_appends_get_unique_ids(any_store):
    async def go():
        return await asyncio.gather(*[any_store.append(_signal(probability=i / 100)) for i in range(40)])
    ids = asyncio.run(go())
    assert len(set(ids)) == 40
    assert len(asyncio.run(any_store.list_open())) == 40


def test_namespace_paths(store):
    assert store.path("open") == "signals/BTCUSDT/open"
    assert store.path("closed", "abc", "last_price") == "signals/BTCUSDT/closed/abc/last_price"


def test_memory_remove_prunes_empty_parents(transport):
    async def go():
        await transport.set("signals/X/open/a", {"v": 1})
        await transport.remove("signals/X/open/a")
        return transport.root
    assert asyncio.run(go()) == {}


def test_malformed_record_is_skipped_in_listing(store, transport):
    async def go():
        await transport.set("signals/BTCUSDT/open/bad", {"side": "CALL"})
        good = await store.append(_signal())
        return good, await store.list_open()
    good, listed = asyncio.run(go())
    assert list(listed) == [good]
    with pytest.raises(PersistenceError):
        asyncio.run(store.get_open("bad"))


def test_transport_failure_becomes_persistence_error(store, transport):
    async def boom(*args):
        raise RuntimeError("disk full")
    transport.push = boom
    with pytest.raises(PersistenceError):
        asyncio.run(store.append(_signal()))


def test_push_ids_sort_in_creation_order():
    ids = [generate_push_id(1_700_000_000_000) for _ in range(5)]
    ids.append(generate_push_id(1_700_000_000_001))
    assert len(set(ids)) == 6
    assert ids == sorted(ids)
    assert all(len(i) == 20 for i in ids)


def test_flatten_roundtrip_shape():
    rows = flatten("a", {"b": 1, "c": {"d": "x"}, "e": None})
    assert sorted(rows) == [("a/b", 1), ("a/c/d", "x")]
    assert unflatten("a", rows) == {"b": 1, "c": {"d": "x"}}
    assert unflatten("a/b", [("a/b", 1)]) == 1
    assert unflatten("a", []) is None
