#Description: Monitoring service closing open signals on TP/SL and repairing half-finished closes.
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import ValidationError

from models.schemas import Signal
from services.market_data import MarketDataService
from services.store import SignalStore
from utils.logging import logger


@dataclass
class TickReport:
    price: float
    evaluated: List[str] = field(default_factory=list)
    closed: List[str] = field(default_factory=list)
    repaired: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


def close_reason(side: str, price: float, tp_price: float, sl_price: float) -> Optional[str]:
    if side == "CALL":
        if price >= tp_price:
            return "TP"
        if price <= sl_price:
            return "SL"
    elif side == "PUT":
        if price <= tp_price:
            return "TP"
        if price >= sl_price:
            return "SL"
    return None


class MonitorService:
    def __init__(self, store: SignalStore, market: MarketDataService):
        self.store = store
        self.market = market

    async def tick(self) -> TickReport:
        """
        One supervisor pass. Every open signal is checked against the same spot
        price; a failure on one signal is logged and the pass moves on.
        """
        price = await self.market.get_spot_price()
        report = TickReport(price=price)

        open_raw = await self.store.list_open_raw()
        if not open_raw:
            return report

        for sid in sorted(open_raw):
            try:
                if await self.store.has_closed(sid):
                    # closed twin already written on an earlier pass; finish the move
                    await self.store.remove_open(sid)
                    report.repaired.append(sid)
                    logger.warning(f"[repair] {sid} was still open after close; removed")
                    continue

                try:
                    s = Signal(**open_raw[sid])
                except (TypeError, ValidationError) as e:
                    report.failed.append(sid)
                    logger.warning(f"Skipping malformed open signal {sid}: {e}")
                    continue

                report.evaluated.append(sid)
                await self.store.set_last_price(sid, price)
                s.last_price = price

                reason = close_reason(s.side, price, s.tp_price, s.sl_price)
                if reason:
                    await self._close(sid, s, price, reason)
                    report.closed.append(sid)
            except Exception as e:
                report.failed.append(sid)
                logger.exception(f"Close check failed for {sid}: {e}")
        return report

    async def close_signal(self, signal_id: str, price: float, reason: str) -> bool:
        """Close one open signal; safe to repeat on a signal that is already closed."""
        if await self.store.get_closed(signal_id) is not None:
            await self.store.remove_open(signal_id)
            return False
        s = await self.store.get_open(signal_id)
        if s is None:
            return False
        await self._close(signal_id, s, price, reason)
        return True

    async def _close(self, sid: str, s: Signal, price: float, reason: str) -> None:
        closed = Signal.model_validate({
            **s.model_dump(),
            "status": "CLOSED",
            "reason": reason,
            "exit_price": price,
            "last_price": price,
            "time_close": datetime.now(timezone.utc).isoformat(),
        })
        await self.store.write_closed(sid, closed)
        await self.store.remove_open(sid)
        logger.info(f"[close] {sid} -> {reason} @ {price}")
