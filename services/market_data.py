#Description: Market data service using KuCoin public candles and level1 spot price.

from typing import List

from adapters.kucoin_common import KuCoinBaseAdapter
from models.schemas import Candle
from utils.config import settings
from utils.errors import DataUnavailableError
from utils.logging import logger

# KuCoin candle "type" names
KUCOIN_INTERVALS = {
    "1m": "1min", "3m": "3min", "5m": "5min", "15m": "15min", "30m": "30min",
    "1h": "1hour", "2h": "2hour", "4h": "4hour", "6h": "6hour", "8h": "8hour", "12h": "12hour",
    "1d": "1day", "1w": "1week",
}

INTERVAL_MS = {
    "1min": 60_000, "3min": 180_000, "5min": 300_000, "15min": 900_000, "30min": 1_800_000,
    "1hour": 3_600_000, "2hour": 7_200_000, "4hour": 14_400_000, "6hour": 21_600_000,
    "8hour": 28_800_000, "12hour": 43_200_000, "1day": 86_400_000, "1week": 604_800_000,
}

class MarketDataService:
    def __init__(self, adapter: KuCoinBaseAdapter | None = None, ku_symbol: str | None = None):
        self.adapter = adapter or KuCoinBaseAdapter()
        self.ku_symbol = ku_symbol or settings.KU_SYMBOL

    @staticmethod
    def kucoin_interval(timeframe: str) -> str:
        if timeframe in INTERVAL_MS:
            return timeframe
        tf = timeframe.strip().lower()
        if tf not in KUCOIN_INTERVALS:
            raise ValueError(f"Unsupported timeframe '{timeframe}'")
        return KUCOIN_INTERVALS[tf]

    @classmethod
    def interval_ms(cls, timeframe: str) -> int:
        return INTERVAL_MS[cls.kucoin_interval(timeframe)]

    async def get_candles(self, symbol: str | None = None, interval: str = "1h", limit: int = 300) -> List[Candle]:
        """Ordered candles, oldest first, at most `limit` of the most recent ones."""
        symbol = symbol or self.ku_symbol
        data = await self.adapter.get(
            "/api/v1/market/candles",
            params={"type": self.kucoin_interval(interval), "symbol": symbol},
        )
        if not isinstance(data, list) or not data:
            raise DataUnavailableError(f"KuCoin returned no candles for {symbol} {interval}")

        # Row layout: [time(s), open, close, high, low, volume, turnover], newest first
        by_ts: dict[int, Candle] = {}
        for row in data:
            try:
                ts = int(row[0]) * 1000
                by_ts[ts] = Candle(
                    ts=ts,
                    open=float(row[1]),
                    close=float(row[2]),
                    high=float(row[3]),
                    low=float(row[4]),
                    volume=float(row[5]),
                )
            except (IndexError, TypeError, ValueError):
                logger.warning(f"Skipping malformed KuCoin candle row: {row}")
        if not by_ts:
            raise DataUnavailableError(f"KuCoin: no valid candle rows for {symbol}")

        candles = [by_ts[ts] for ts in sorted(by_ts)]
        return candles[-limit:]

    async def get_spot_price(self, symbol: str | None = None) -> float:
        symbol = symbol or self.ku_symbol
        data = await self.adapter.get("/api/v1/market/orderbook/level1", params={"symbol": symbol})
        try:
            return float(data["price"])
        except (KeyError, TypeError, ValueError) as e:
            raise DataUnavailableError(f"KuCoin level1 for {symbol} has no price") from e

    async def aclose(self):
        await self.adapter.aclose()
