#Description: Signal store over a key-value transport, namespaced as signals/{symbol}/{open|closed}.

from typing import Any, Dict, Protocol

from pydantic import ValidationError

from models.schemas import Signal
from utils.config import settings
from utils.errors import PersistenceError, SignalsError
from utils.logging import logger

OPEN = "open"
CLOSED = "closed"

class KeyValueTransport(Protocol):
    async def push(self, path: str, value: Any) -> str: ...
    async def set(self, path: str, value: Any) -> None: ...
    async def get(self, path: str) -> Any: ...
    async def remove(self, path: str) -> None: ...
    async def aclose(self) -> None: ...


class SignalStore:
    def __init__(self, transport: KeyValueTransport, symbol: str | None = None):
        self.transport = transport
        self.symbol = symbol or settings.SYMBOL

    def path(self, bucket: str, signal_id: str | None = None, field: str | None = None) -> str:
        parts = ["signals", self.symbol, bucket]
        if signal_id:
            parts.append(signal_id)
        if field:
            parts.append(field)
        return "/".join(parts)

    async def _call(self, op: str, *args):
        try:
            return await getattr(self.transport, op)(*args)
        except SignalsError:
            raise
        except Exception as e:
            raise PersistenceError(f"Store {op} {args[0]} failed: {e}") from e

    async def append(self, signal: Signal) -> str:
        """Write a new open signal under a generated id and return the id."""
        return await self._call("push", self.path(OPEN), signal.to_record())

    async def get_open(self, signal_id: str) -> Signal | None:
        return _parse(await self._call("get", self.path(OPEN, signal_id)), signal_id)

    async def get_closed(self, signal_id: str) -> Signal | None:
        return _parse(await self._call("get", self.path(CLOSED, signal_id)), signal_id)

    async def has_closed(self, signal_id: str) -> bool:
        return await self._call("get", self.path(CLOSED, signal_id)) is not None

    async def list_open_raw(self) -> Dict[str, Any]:
        return await self._call("get", self.path(OPEN)) or {}

    async def list_closed_raw(self) -> Dict[str, Any]:
        return await self._call("get", self.path(CLOSED)) or {}

    async def list_open(self) -> Dict[str, Signal]:
        return _parse_all(await self.list_open_raw())

    async def list_closed(self) -> Dict[str, Signal]:
        return _parse_all(await self.list_closed_raw())

    async def set_last_price(self, signal_id: str, price: float) -> None:
        await self._call("set", self.path(OPEN, signal_id, "last_price"), price)

    async def write_closed(self, signal_id: str, signal: Signal) -> None:
        await self._call("set", self.path(CLOSED, signal_id), signal.to_record())

    async def remove_open(self, signal_id: str) -> None:
        await self._call("remove", self.path(OPEN, signal_id))

    async def aclose(self):
        await self.transport.aclose()


def _parse(raw: Any, signal_id: str) -> Signal | None:
    if raw is None:
        return None
    try:
        return Signal(**raw)
    except (TypeError, ValidationError) as e:
        raise PersistenceError(f"Stored signal {signal_id} is malformed: {e}") from e


def _parse_all(raw: Dict[str, Any]) -> Dict[str, Signal]:
    out = {}
    for sid, rec in raw.items():
        try:
            out[sid] = Signal(**rec)
        except (TypeError, ValidationError) as e:
            logger.warning(f"Skipping malformed signal {sid}: {e}")
    return out
