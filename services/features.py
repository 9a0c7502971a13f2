#Description: Feature builder turning the latest candles into one flat, finite feature vector.
from __future__ import annotations

import time
from typing import Callable, Dict, List, Sequence

from models.schemas import Candle, FeatureSnapshot
from services import indicators as ind
from services.market_data import MarketDataService
from utils.config import settings
from utils.errors import DataUnavailableError, InsufficientDataError

DEFAULT_VALUE = 0.0

class FeatureBuilder:
    def __init__(
        self,
        market: MarketDataService,
        symbol: str | None = None,
        timeframe: str | None = None,
        candle_limit: int | None = None,
        closed_only: bool | None = None,
        now_ms: Callable[[], int] | None = None,
    ):
        self.market = market
        self.symbol = symbol or settings.KU_SYMBOL
        self.timeframe = timeframe or settings.TIMEFRAME
        self.candle_limit = candle_limit or settings.CANDLE_LIMIT
        self.closed_only = settings.CLOSED_CANDLES_ONLY if closed_only is None else closed_only
        self.now_ms = now_ms or (lambda: int(time.time() * 1000))
        self.params = {
            "rsi_period": settings.RSI_PERIOD,
            "ema_periods": list(settings.EMA_PERIODS),
            "bb_period": settings.BB_PERIOD,
            "bb_mult": settings.BB_MULT,
            "stoch_k": settings.STOCH_K,
            "stoch_d": settings.STOCH_D,
        }

    def update_params(self, updates: Dict) -> None:
        self.params.update(updates or {})

    @property
    def required_candles(self) -> int:
        p = self.params
        return max(p["rsi_period"], p["bb_period"], *p["ema_periods"]) + 1

    async def build(self, symbol: str | None = None, timeframe: str | None = None) -> FeatureSnapshot:
        symbol = symbol or self.symbol
        timeframe = timeframe or self.timeframe
        candles = await self.market.get_candles(symbol, timeframe, self.candle_limit)
        if not candles:
            raise DataUnavailableError(f"No candles for {symbol} {timeframe}")
        last_price = candles[-1].close
        closed = self._closed_candles(candles, timeframe)
        return self.compute(closed, last_price)

    def _closed_candles(self, candles: List[Candle], timeframe: str) -> List[Candle]:
        if not self.closed_only:
            return candles
        cutoff = self.now_ms() - MarketDataService.interval_ms(timeframe)
        # a candle is closed once open time + interval has passed
        return [c for c in candles if c.ts <= cutoff]

    def compute(self, candles: Sequence[Candle], last_price: float | None = None) -> FeatureSnapshot:
        """Features for the last candle of `candles`; every value is finite."""
        required = self.required_candles
        if len(candles) < required:
            raise InsufficientDataError(len(candles), required)

        p = self.params
        close = [c.close for c in candles]
        high = [c.high for c in candles]
        low = [c.low for c in candles]
        volume = [c.volume for c in candles]
        i = len(candles) - 1

        emas = {n: ind.ema(close, n).iloc[i] for n in p["ema_periods"]}
        rsi_v = ind.rsi(close, p["rsi_period"]).iloc[i]
        ret1 = ind.percent_change(close, 1).iloc[i]
        ret5 = ind.percent_change(close, 5).iloc[i]
        bb = ind.bollinger_bands(close, p["bb_period"], p["bb_mult"])
        st = ind.stochastic(high, low, close, p["stoch_k"], p["stoch_d"])
        mc = ind.macd(close)
        vol_z = ind.zscore(volume, 20).iloc[i]

        # the cross flags always compare EMA 9 and EMA 20, whatever EMA_PERIODS lists
        ema_fast = emas[9] if 9 in emas else ind.ema(close, 9).iloc[i]
        ema_mid = emas[20] if 20 in emas else ind.ema(close, 20).iloc[i]
        hl_spread = (high[i] - low[i]) / close[i] if close[i] else ind.UNDEFINED

        raw: Dict[str, tuple[float, int]] = {
            f"rsi{p['rsi_period']}": (rsi_v, 6),
            "ret1": (ret1, 6),
            "ret5": (ret5, 6),
            "bb_low": (bb.low.iloc[i], 2),
            "bb_mid": (bb.mid.iloc[i], 2),
            "bb_high": (bb.high.iloc[i], 2),
            "bb_width": (bb.width.iloc[i], 6),
            "stoch_k": (st.k.iloc[i], 4),
            "stoch_d": (st.d.iloc[i], 4),
            "hl_spread": (hl_spread, 6),
            "macd": (mc.line.iloc[i], 6),
            "macd_signal": (mc.signal.iloc[i], 6),
            "macd_hist": (mc.hist.iloc[i], 6),
            "vol_z": (vol_z, 6),
        }
        for n, v in emas.items():
            raw[f"ema{n}"] = (v, 2)
            raw[f"ma{n}"] = (v, 2)  # alias kept for older model builds

        features = {name: _finite(v, nd) for name, (v, nd) in raw.items()}
        features["price_gt_ema20"] = 1.0 if _defined(ema_mid) and close[i] > ema_mid else 0.0
        features["ema9_gt_ema20"] = 1.0 if _defined(ema_fast) and _defined(ema_mid) and ema_fast > ema_mid else 0.0
        features["datetime"] = float(candles[i].ts // 1000)
        features["timestamp"] = float(self.now_ms() // 1000)

        return FeatureSnapshot(
            features=features,
            last_price=float(last_price if last_price is not None else close[i]),
            candle_ts=candles[i].ts,
        )


def _defined(v) -> bool:
    return not ind.is_undefined(v)


def _finite(v, ndigits: int) -> float:
    if ind.is_undefined(v):
        return DEFAULT_VALUE
    return round(float(v), ndigits)
