#Description: Operation surface consumed by the HTTP layer: health, features-now and ask.

from datetime import datetime, timezone
from typing import Any, Dict

from services.features import FeatureBuilder
from services.market_data import MarketDataService
from services.signals import SignalService
from utils.errors import SignalsError, error_payload
from utils.logging import logger

class SignalsApi:
    """Every call returns a JSON-ready dict; failures come back as {"error", "type"}."""

    def __init__(self, market: MarketDataService, features: FeatureBuilder, signals: SignalService):
        self.market = market
        self.features = features
        self.signals = signals

    async def health(self) -> Dict[str, Any]:
        try:
            price = await self.market.get_spot_price()
        except SignalsError as e:
            logger.warning(f"health: price unavailable: {e}")
            return {"status": "error", **error_payload(e)}
        except Exception as e:
            logger.exception(f"health failed: {e}")
            return {"status": "error", **error_payload(e)}
        return {
            "status": "ok",
            "symbol": self.signals.params["symbol"],
            "timeframe": self.signals.params["timeframe"],
            "price": price,
            "threshold": self.signals.params["threshold"],
            "tp_pct": self.signals.params["tp_pct"],
            "sl_pct": self.signals.params["sl_pct"],
            "ts": datetime.now(timezone.utc).isoformat(),
        }

    async def features_now(self) -> Dict[str, Any]:
        try:
            snap = await self.features.build()
        except SignalsError as e:
            logger.warning(f"features-now failed: {e}")
            return error_payload(e)
        except Exception as e:
            logger.exception(f"features-now failed: {e}")
            return error_payload(e)
        return {"symbol": self.signals.params["symbol"], "price": snap.last_price, "features": snap.features}

    async def ask(self, leverage: int | None = None) -> Dict[str, Any]:
        try:
            return await self.signals.ask(leverage)
        except SignalsError as e:
            logger.error(f"ask failed: {e}")
            return error_payload(e)
        except Exception as e:
            # config mistakes (e.g. an unsupported TIMEFRAME) land here
            logger.exception(f"ask failed: {e}")
            return error_payload(e)
