#Description: Signal service: features -> oracle -> open signal in the store (one transition per call).
from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Dict

from models.schemas import OracleDecision, Signal
from services.features import FeatureBuilder
from services.market_data import MarketDataService
from services.oracle import SignalOracleClient
from services.store import SignalStore
from utils.config import settings
from utils.logging import logger


def iso_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def target_prices(side: str, entry: float, tp_pct: float, sl_pct: float, decimals: int = 2) -> tuple[float, float]:
    """CALL: tp above entry, sl below. PUT: tp below, sl above."""
    if side == "CALL":
        tp, sl = entry * (1 + tp_pct), entry * (1 - sl_pct)
    elif side == "PUT":
        tp, sl = entry * (1 - tp_pct), entry * (1 + sl_pct)
    else:
        raise ValueError(f"Unknown side '{side}'")
    return round(tp, decimals), round(sl, decimals)


class SignalService:
    def __init__(
        self,
        features: FeatureBuilder,
        oracle: SignalOracleClient,
        store: SignalStore,
        market: MarketDataService,
    ):
        self.features = features
        self.oracle = oracle
        self.store = store
        self.market = market
        self.params: Dict[str, Any] = {
            "symbol": settings.SYMBOL,
            "timeframe": settings.TIMEFRAME,
            "threshold": settings.THRESHOLD,
            "tp_pct": settings.TP_PCT,
            "sl_pct": settings.SL_PCT,
            "price_decimals": settings.PRICE_DECIMALS,
            "dedup_seconds": settings.ASK_DEDUP_SECONDS,
        }
        self._last_open_at: float | None = None

    def update_params(self, updates: Dict[str, Any]) -> None:
        self.params.update(updates or {})

    def _throttle_remaining(self) -> float:
        window = float(self.params.get("dedup_seconds") or 0)
        if window <= 0 or self._last_open_at is None:
            return 0.0
        return max(0.0, window - (time.monotonic() - self._last_open_at))

    async def ask(self, leverage: int | None = None) -> Dict[str, Any]:
        """
        Build features, ask the oracle and, when it calls a trade, open a new signal.

        Not idempotent: every tradeable answer opens another signal.
        """
        p = self.params
        leverage = int(leverage if leverage is not None else settings.DEFAULT_LEVERAGE)

        wait = self._throttle_remaining()
        if wait > 0:
            logger.info(f"ask throttled for {p['symbol']}, retry in {wait:.0f}s")
            return {"noTrade": True, "throttled": True, "retryAfter": round(wait, 1)}

        snap = await self.features.build()
        decision = await self.oracle.decide(snap.features, p["threshold"])

        if not decision.tradeable:
            return {"noTrade": True, "oracleResponse": decision.raw}

        entry = snap.last_price
        if not entry or entry <= 0:
            entry = await self.market.get_spot_price()

        signal = self.build_signal(decision, entry, leverage, snap.features)
        signal_id = await self.store.append(signal)
        self._last_open_at = time.monotonic()
        logger.info(f"New signal opened: {signal_id} ({signal.side}) entry={signal.entry_price} "
                    f"tp={signal.tp_price} sl={signal.sl_price} p={signal.probability}")
        return {"id": signal_id, "signal": signal.model_dump(), "oracleResponse": decision.raw}

    def build_signal(self, decision: OracleDecision, entry: float, leverage: int, features) -> Signal:
        p = self.params
        tp_pct = float(decision.tp_pct if decision.tp_pct is not None else p["tp_pct"])
        sl_pct = float(decision.sl_pct if decision.sl_pct is not None else p["sl_pct"])
        tp, sl = target_prices(decision.signal, entry, tp_pct, sl_pct, p["price_decimals"])
        return Signal(
            symbol=p["symbol"],
            timeframe=p["timeframe"],
            side=decision.signal,
            probability=float(decision.probability or 0.0),
            threshold=float(decision.threshold if decision.threshold is not None else p["threshold"]),
            entry_price=entry,
            tp_price=tp,
            sl_price=sl,
            tp_pct=tp_pct,
            sl_pct=sl_pct,
            leverage=leverage,
            status="OPEN",
            time_open=iso_now(),
            last_price=entry,
            features=dict(features),
            source=self.oracle.url,
        )
